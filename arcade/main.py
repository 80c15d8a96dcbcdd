from __future__ import annotations

import logging

import redis
from fastapi import FastAPI

from arcade.api.deps import get_redis
from arcade.api.errors import install_error_handlers
from arcade.api.routes import router
from arcade.game_store import seed_catalog
from arcade.settings import get_log_level, init_settings

__version__ = "0.1.0"

# Configure logging
logging.basicConfig(level=get_log_level())
logger = logging.getLogger(__name__)

app = FastAPI(title="retro-arcade", version=__version__)
app.include_router(router)
install_error_handlers(app)


@app.on_event("startup")
async def _startup() -> None:
    init_settings()

    # Seed through the same provider the routes use, so dependency overrides apply.
    provider = app.dependency_overrides.get(get_redis, get_redis)
    connections = provider()
    try:
        seed_catalog(r=next(connections))
    except redis.RedisError:
        # The API still serves; routes report their own Redis errors.
        logger.warning("Could not seed the game catalog", exc_info=True)
    finally:
        connections.close()


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "retro-arcade", "version": __version__}
