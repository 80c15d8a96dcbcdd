from __future__ import annotations

import time
from contextlib import contextmanager

import redis

from arcade.errors import GameBusyError


@contextmanager
def game_lock(*, r: redis.Redis, game_id: int, ttl_ms: int = 5_000):
    """Best-effort per-game lock around read-modify-write of a game document.

    Single Redis, single holder: the key expires on its own if a holder dies.
    """

    key = f"arcade:lock:game:{game_id}"
    acquired = r.set(key, "1", nx=True, px=ttl_ms)
    if not acquired:
        raise GameBusyError()
    try:
        yield
    finally:
        r.delete(key)
        # small yield to avoid tight contention in tests
        time.sleep(0)
