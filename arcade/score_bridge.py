from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlayerProfile:
    """Display hints stored next to a leaderboard entry."""

    username: str | None = None
    avatar: str | None = None


class ScoreService(Protocol):
    async def get_high_score(self, game_id: int, user_id: str) -> int: ...

    async def submit_score(self, user_id: str, game_id: int, score: int, profile: PlayerProfile) -> None: ...


class ScoreBridge:
    """Connects one session to the score service.

    - `load()` fetches the stored high score once; failures fall back to 0.
    - `on_game_over()` submits at most once per round and only for a new best.
    - `high_score` rises only after a submission succeeds.

    Score I/O never raises into gameplay: errors are logged and dropped.
    """

    def __init__(
        self,
        service: ScoreService,
        *,
        game_id: int,
        user_id: str | None,
        profile: PlayerProfile | None = None,
    ) -> None:
        self.service = service
        self.game_id = game_id
        self.user_id = user_id
        self.profile = profile or PlayerProfile()
        self.high_score = 0
        self.loaded = False
        self._submitted = False
        self._tasks: set[asyncio.Task[None]] = set()

    async def load(self) -> int:
        if self.loaded:
            return self.high_score
        self.loaded = True
        if self.user_id is None:
            return self.high_score
        try:
            self.high_score = int(await self.service.get_high_score(self.game_id, self.user_id))
        except Exception:
            logger.warning(
                "Could not load high score (game=%s user=%s); defaulting to 0",
                self.game_id,
                self.user_id,
                exc_info=True,
            )
            self.high_score = 0
        return self.high_score

    def on_game_over(self, score: int) -> asyncio.Task[None] | None:
        """Fire the round's score submission if `score` beats the known best.

        Must be called from a running event loop. Returns the submission task, if any.
        """

        if self.user_id is None or self._submitted or score <= self.high_score:
            return None
        self._submitted = True
        task = asyncio.create_task(self._submit(score))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _submit(self, score: int) -> None:
        if self.user_id is None:
            return
        try:
            await self.service.submit_score(self.user_id, self.game_id, score, self.profile)
        except Exception:
            logger.error(
                "Score submission failed (game=%s user=%s score=%d)",
                self.game_id,
                self.user_id,
                score,
                exc_info=True,
            )
            return
        if score > self.high_score:
            self.high_score = score
        logger.info("New high score %d for user=%s game=%s", score, self.user_id, self.game_id)

    def new_round(self) -> None:
        self._submitted = False

    async def aclose(self) -> None:
        """Wait for every outstanding submission, including earlier rounds."""

        tasks, self._tasks = self._tasks, set()
        if tasks:
            await asyncio.gather(*tasks)
