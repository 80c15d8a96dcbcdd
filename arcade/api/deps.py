from __future__ import annotations

from collections.abc import Generator

import redis

from arcade.infra.redis_client import create_redis
from arcade.settings import Settings, init_settings


def get_settings_dep() -> Settings:
    return init_settings()


def get_redis() -> Generator[redis.Redis, None, None]:
    client = create_redis(init_settings().redis_url)
    try:
        yield client
    finally:
        client.close()
