import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class ConnectivityObserver:
    """Reports transitions between reachable and unreachable API.

    Subscribers get ``on_online`` / ``on_offline`` calls on every state change,
    never for a repeated state.
    """

    def __init__(self, initially_online: bool = True):
        self.is_online = initially_online
        self._subscribers: list[tuple[Callback, Callback]] = []

    def subscribe(self, on_online: Callback, on_offline: Callback) -> None:
        self._subscribers.append((on_online, on_offline))

    def set_online(self, online: bool) -> None:
        if online == self.is_online:
            return
        self.is_online = online
        logger.info("Connectivity changed: %s", "online" if online else "offline")
        for on_online, on_offline in list(self._subscribers):
            if self.is_online != online:
                # A subscriber flipped the state; the nested call notified everyone
                break
            if online:
                on_online()
            else:
                on_offline()


class HealthCheckObserver(ConnectivityObserver):
    """Probes the API health endpoint on a background thread."""

    def __init__(self, probe: Callable[[], bool], interval: float = 5.0, initially_online: bool = True):
        super().__init__(initially_online)
        self.probe = probe
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def poll_once(self) -> bool:
        online = self.probe()
        self.set_online(online)
        return online

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                self.poll_once()
            except Exception:
                logger.exception("Connectivity probe failed")
            self._stop.wait(self.interval)

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="connectivity-probe", daemon=True)
        self._thread.start()
        logger.info("Connectivity probe started (interval=%ss)", self.interval)

    def stop(self) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=self.interval + 1)
            self._thread = None
