from __future__ import annotations

import logging

import httpx
import redis

from arcade import game_store
from arcade.score_bridge import PlayerProfile

logger = logging.getLogger(__name__)


class HttpScoreService:
    """Score service backed by the arcade REST API."""

    def __init__(self, base_url: str, *, timeout_s: float = 5.0, client: httpx.AsyncClient | None = None) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout_s)

    async def get_high_score(self, game_id: int, user_id: str) -> int:
        resp = await self._client.get(f"/games/{game_id}/scores/{user_id}")
        resp.raise_for_status()
        return int(resp.json().get("highScore", 0))

    async def submit_score(self, user_id: str, game_id: int, score: int, profile: PlayerProfile) -> None:
        resp = await self._client.post(
            f"/games/{game_id}/scores",
            json={
                "userId": user_id,
                "score": score,
                "username": profile.username,
                "avatar": profile.avatar,
            },
        )
        resp.raise_for_status()
        logger.debug("Submitted score %d for user=%s game=%s", score, user_id, game_id)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class StoreScoreService:
    """Score service that talks to Redis directly (same process as the API)."""

    def __init__(self, r: redis.Redis, *, lock_ttl_ms: int = 5_000) -> None:
        self.r = r
        self.lock_ttl_ms = lock_ttl_ms

    async def get_high_score(self, game_id: int, user_id: str) -> int:
        return game_store.get_high_score(r=self.r, game_id=game_id, user_id=user_id)

    async def submit_score(self, user_id: str, game_id: int, score: int, profile: PlayerProfile) -> None:
        game_store.submit_score(
            r=self.r,
            game_id=game_id,
            user_id=user_id,
            score=score,
            username=profile.username,
            avatar=profile.avatar,
            lock_ttl_ms=self.lock_ttl_ms,
        )
