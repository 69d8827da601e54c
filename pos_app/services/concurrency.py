"""Optimistic-concurrency helpers shared by the catalog services.

Categories and products carry an integer ``updated_at`` (unix seconds). A
writer sends the token it last saw, or the time it made an offline edit; the
write only lands when that token is not older than the stored one.
"""

import time


def now_ts() -> int:
    return int(time.time())


def resolve_write_ts(client_ts: int | None, current_ts: int | None = None) -> int:
    """Timestamp a write will be stored with.

    A caller-supplied token is used as-is. A server-assigned one is bumped past
    the stored value when the clock has not moved since the last write.
    """
    if client_ts is not None:
        return client_ts
    ts = now_ts()
    if current_ts is not None and ts <= current_ts:
        ts = current_ts + 1
    return ts


def is_stale(client_ts: int, current_ts: int) -> bool:
    return client_ts < current_ts
