"""Terminal-side coordinator for working through connectivity loss.

While the API is unreachable, checkouts and catalog saves are queued locally
with the time the operator made them. Once the connectivity observer reports
the API back, the queue is replayed in order, one action at a time. The
queued time is sent as ``updated_at`` so the server's last-writer-wins check
decides whether an offline edit still applies.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from pos_app.client.api_client import ApiError, ConnectivityError, PosApiClient
from pos_app.client.connectivity import ConnectivityObserver, HealthCheckObserver
from pos_app.client.offline_queue import CATEGORY, CHECKOUT, PRODUCT, OfflineAction, OfflineQueue
from pos_app.client.storage import JsonFileStore, get_low_stock_threshold
from pos_app.exceptions import ConflictError

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]


def _log_notification(message: str, level: str) -> None:
    if level == "error":
        logger.error(message)
    else:
        logger.info(message)


@dataclass
class SyncResult:
    synced: int = 0
    conflicts: int = 0
    retained: int = 0


class SyncCoordinator:
    def __init__(
        self,
        api: PosApiClient,
        queue: OfflineQueue,
        observer: ConnectivityObserver,
        notify: Notifier | None = None,
        on_sync_complete: Callable[[], None] | None = None,
    ):
        self.api = api
        self.queue = queue
        self.observer = observer
        self.notify = notify or _log_notification
        self.on_sync_complete = on_sync_complete
        self._replay_lock = threading.Lock()
        observer.subscribe(self._handle_online, self._handle_offline)

    @property
    def is_online(self) -> bool:
        return self.observer.is_online

    def start(self) -> SyncResult | None:
        """Replay anything left over from a previous run if the API is reachable."""
        if self.is_online:
            return self.sync()
        return None

    # --- Operator actions ---

    def checkout(self, items: list[dict], total: float) -> dict | None:
        return self._submit(CHECKOUT, {"items": items, "total": total})

    def save_product(self, product: dict, overwrite: bool = False) -> dict | None:
        """Save a product; ``overwrite`` re-sends after the operator accepted a conflict."""
        if overwrite:
            product = {**product, "updated_at": int(time.time())}
        return self._submit(PRODUCT, product)

    def save_category(self, category: dict, overwrite: bool = False) -> dict | None:
        if overwrite:
            category = {**category, "updated_at": int(time.time())}
        return self._submit(CATEGORY, category)

    def _submit(self, action_type: str, data: dict) -> dict | None:
        """Send now when online, otherwise queue. Returns None when queued.

        A conflict on a direct save is raised to the caller so the operator can
        choose to overwrite or cancel.
        """
        if not self.is_online:
            self._enqueue(action_type, data)
            return None
        try:
            return self._send(action_type, data)
        except ConnectivityError as e:
            logger.warning("API unreachable during %s, queueing: %s", action_type, e)
            self.observer.set_online(False)
            self._enqueue(action_type, data)
            return None

    def _enqueue(self, action_type: str, data: dict) -> OfflineAction:
        action = self.queue.append(action_type, data)
        self.notify(f"Offline: {action_type} change saved locally.", "success")
        return action

    def _send(self, action_type: str, data: dict, client_timestamp: int | None = None) -> dict:
        if action_type == CHECKOUT:
            return self.api.checkout(data["items"], data["total"])

        payload = dict(data)
        if client_timestamp is not None:
            payload["updated_at"] = client_timestamp
        if action_type == PRODUCT:
            return self.api.save_product(payload)
        if action_type == CATEGORY:
            return self.api.save_category(payload)
        raise ValueError(f"Unknown offline action type: {action_type}")

    # --- Replay ---

    def sync(self) -> SyncResult | None:
        """Drain the queue in insertion order.

        Returns None when another replay is already running.
        """
        if not self._replay_lock.acquire(blocking=False):
            logger.info("Replay already in progress")
            return None
        try:
            return self._replay()
        finally:
            self._replay_lock.release()

    def _replay(self) -> SyncResult:
        actions = self.queue.load()
        result = SyncResult()
        if not actions:
            return result

        self.notify(f"Syncing {len(actions)} offline actions...", "success")

        for index, action in enumerate(actions):
            try:
                self._send(action.type, action.data, action.client_timestamp)
            except ConflictError as e:
                logger.warning(
                    "Conflict replaying %s action from %s, discarding client change; server has %s",
                    action.type, action.client_timestamp, e.current,
                )
                self.queue.remove(action.id)
                result.conflicts += 1
                continue
            except ConnectivityError as e:
                # Everything from here on stays queued, in order, for the next cycle
                logger.warning("Lost connectivity during replay: %s", e)
                result.retained += len(actions) - index
                self.observer.set_online(False)
                break
            except ApiError as e:
                logger.error("Replay of %s action failed (HTTP %s): %s", action.type, e.status_code, e)
                result.retained += 1
                continue

            self.queue.remove(action.id)
            result.synced += 1

        if result.retained == 0:
            self.notify("All offline actions synced!", "success")
            if self.on_sync_complete:
                self.on_sync_complete()
        else:
            self.notify(f"Failed to sync {result.retained} actions. Will retry later.", "error")
        return result

    # --- Connectivity callbacks ---

    def _handle_online(self) -> None:
        self.sync()

    def _handle_offline(self) -> None:
        logger.info("Working offline; %d actions queued", len(self.queue))

    # --- Reads ---

    def dashboard_stats(self, default_threshold: int = 10) -> dict:
        """Stats using the threshold the operator picked on this terminal."""
        threshold = get_low_stock_threshold(self.queue.store, default_threshold)
        return self.api.fetch_stats(threshold)


def create_coordinator(settings, notify: Notifier | None = None) -> SyncCoordinator:
    """Wire a coordinator for a terminal from settings: HTTP client, file store, health probe."""
    api = PosApiClient.from_settings(settings)
    queue = OfflineQueue(JsonFileStore(settings.OFFLINE_STORE_PATH))
    observer = HealthCheckObserver(api.health, interval=settings.CONNECTIVITY_POLL_INTERVAL)
    return SyncCoordinator(api, queue, observer, notify=notify)
