import threading
import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any

from pos_app.client.storage import KeyValueStore

QUEUE_KEY = "offline_actions"

CHECKOUT = "checkout"
PRODUCT = "product"
CATEGORY = "category"
ACTION_TYPES = (CHECKOUT, PRODUCT, CATEGORY)


@dataclass
class OfflineAction:
    type: str
    data: dict[str, Any]
    client_timestamp: int  # unix seconds when the operator made the change
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @classmethod
    def from_dict(cls, raw: dict) -> "OfflineAction":
        return cls(
            type=raw["type"],
            data=raw["data"],
            client_timestamp=int(raw["client_timestamp"]),
            id=raw.get("id") or uuid.uuid4().hex,
        )


class OfflineQueue:
    """FIFO of mutating actions waiting for connectivity.

    Every change is written straight to the backing store so queued actions
    survive a restart of the terminal.
    """

    def __init__(self, store: KeyValueStore, key: str = QUEUE_KEY):
        self.store = store
        self.key = key
        self._lock = threading.Lock()

    def load(self) -> list[OfflineAction]:
        return [OfflineAction.from_dict(raw) for raw in self.store.get(self.key, [])]

    def _save(self, actions: list[OfflineAction]) -> None:
        self.store.set(self.key, [asdict(a) for a in actions])

    def append(self, type: str, data: dict, client_timestamp: int | None = None) -> OfflineAction:
        if type not in ACTION_TYPES:
            raise ValueError(f"Unknown offline action type: {type}")
        action = OfflineAction(
            type=type,
            data=data,
            client_timestamp=client_timestamp if client_timestamp is not None else int(time.time()),
        )
        with self._lock:
            actions = self.load()
            actions.append(action)
            self._save(actions)
        return action

    def remove(self, action_id: str) -> None:
        with self._lock:
            self._save([a for a in self.load() if a.id != action_id])

    def clear(self) -> None:
        with self._lock:
            self._save([])

    def __len__(self) -> int:
        return len(self.store.get(self.key, []))
