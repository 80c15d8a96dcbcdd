from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path

import pytest


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs (PyCharm/CLI).

    In CI, we *don't* auto-load `.env` by default so a developer's local Redis URL
    or log level never leaks into the hermetic test run.
    Opt-in with: ARCADE_LOAD_DOTENV_FOR_TESTS=1
    """

    if os.environ.get("CI") and os.environ.get("ARCADE_LOAD_DOTENV_FOR_TESTS") != "1":
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    from arcade.settings import reset_settings_for_tests

    reset_settings_for_tests()
    yield
    reset_settings_for_tests()


@pytest.fixture()
def client_and_redis():
    """FastAPI TestClient wired to a fakeredis instance; startup seeds the catalog into it."""

    import fakeredis
    from fastapi.testclient import TestClient

    from arcade.api.deps import get_redis
    from arcade.main import app

    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()
