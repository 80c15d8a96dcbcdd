from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from arcade.core.simulation import Simulation
from arcade.scheduler import TickScheduler
from arcade.score_bridge import PlayerProfile, ScoreBridge, ScoreService
from arcade.score_client import HttpScoreService
from arcade.session import GameSession
from arcade.settings import Settings, init_settings

logger = logging.getLogger(__name__)

Driver = Callable[[GameSession], Awaitable[None]]


async def play_session(
    simulation: Simulation,
    *,
    user_id: str | None = None,
    profile: PlayerProfile | None = None,
    service: ScoreService | None = None,
    settings: Settings | None = None,
    driver: Driver | None = None,
    timeout_s: float | None = None,
) -> GameSession:
    """Play one real-time round of `simulation` and return the finished session.

    Wires settings -> score service -> bridge -> session -> scheduler:
      - without `service`, scores go to the REST API at `settings.api_url`
        with `settings.score_timeout_s` per request;
      - level advances wait `settings.level_advance_delay_s`;
      - `driver`, if given, runs next to the tick loop and feeds input;
      - `timeout_s` stops the round early; an unfinished round submits nothing.

    Pending score submissions are awaited before returning.
    """

    settings = settings or init_settings()
    owned: HttpScoreService | None = None
    if service is None:
        owned = HttpScoreService(settings.api_url, timeout_s=settings.score_timeout_s)
        service = owned

    bridge = ScoreBridge(service, game_id=simulation.game_id, user_id=user_id, profile=profile)
    await bridge.load()
    session = GameSession(simulation, bridge)
    session.start()
    logger.info("Playing %s (user=%s, best=%d)", simulation.name, user_id, bridge.high_score)

    scheduler = TickScheduler(session, level_advance_delay_s=settings.level_advance_delay_s)
    driving: asyncio.Task[None] | None = None
    try:
        scheduler.start()
        if driver is not None:
            driving = asyncio.create_task(driver(session), name=f"driver:{simulation.name}")
        try:
            await asyncio.wait_for(scheduler.wait(), timeout=timeout_s)
        except TimeoutError:
            logger.info("Stopping %s after %.1fs at score %d", simulation.name, timeout_s, session.score)
    finally:
        if driving is not None:
            driving.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await driving
        await scheduler.stop()
        await bridge.aclose()
        if owned is not None:
            await owned.aclose()

    return session
