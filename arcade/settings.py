from __future__ import annotations

import os
from dataclasses import dataclass


def get_redis_url() -> str:
    return os.environ.get("REDIS_URL", "redis://localhost:6379/0")


def get_api_url() -> str:
    return os.environ.get("ARCADE_API_URL", "http://localhost:8000/api").rstrip("/")


def get_log_level() -> str:
    return os.environ.get("ARCADE_LOG_LEVEL", "INFO").upper()


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


@dataclass(frozen=True, slots=True)
class Settings:
    redis_url: str
    api_url: str
    log_level: str
    level_advance_delay_s: float
    score_timeout_s: float
    lock_ttl_ms: int

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            redis_url=get_redis_url(),
            api_url=get_api_url(),
            log_level=get_log_level(),
            level_advance_delay_s=_float_env("ARCADE_LEVEL_ADVANCE_DELAY_S", 1.0),
            score_timeout_s=_float_env("ARCADE_SCORE_TIMEOUT_S", 5.0),
            lock_ttl_ms=int(_float_env("ARCADE_LOCK_TTL_MS", 5_000)),
        )


_SETTINGS: Settings | None = None


def init_settings() -> Settings:
    """Read the environment once and cache the result.

    Safe to call multiple times; subsequent calls return the already loaded instance.
    """

    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS


def reset_settings_for_tests() -> None:
    global _SETTINGS
    _SETTINGS = None


def get_settings() -> Settings:
    if _SETTINGS is None:
        raise RuntimeError("Settings not initialized. Call init_settings() at startup.")
    return _SETTINGS
