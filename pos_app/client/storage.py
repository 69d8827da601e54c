import json
import logging
import os
import pathlib
import threading
from typing import Any

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD_KEY = "low_stock_threshold"


class KeyValueStore:
    """Durable client-local storage, the terminal's equivalent of browser localStorage."""

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    def __init__(self):
        self._data: dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        return json.loads(self._data[key]) if key in self._data else default

    def set(self, key: str, value: Any) -> None:
        # Round-trip through JSON so values behave like the file-backed store
        self._data[key] = json.dumps(value)


class JsonFileStore(KeyValueStore):
    """All keys live in one JSON document, rewritten atomically on every set."""

    def __init__(self, path: str | os.PathLike):
        self.path = pathlib.Path(path)
        self._lock = threading.Lock()

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError:
            logger.error("Client store %s is corrupt, starting empty", self.path)
            return {}

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(data), encoding="utf-8")
            os.replace(tmp, self.path)


def get_low_stock_threshold(store: KeyValueStore, default: int = 10) -> int:
    return int(store.get(LOW_STOCK_THRESHOLD_KEY, default))


def set_low_stock_threshold(store: KeyValueStore, value: int) -> None:
    if value < 0:
        raise ValueError("Threshold must be zero or positive")
    store.set(LOW_STOCK_THRESHOLD_KEY, value)
