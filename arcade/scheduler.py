from __future__ import annotations

import asyncio
import contextlib
import logging

from arcade.core.simulation import Effects
from arcade.session import GameSession

logger = logging.getLogger(__name__)


class TickScheduler:
    """Drives a session at the simulation's current tick interval.

    Contract:
      - `start()` spawns one loop task; `stop()` cancels it and any pending level advance.
      - the interval is re-read every iteration so speed-ups apply on the next tick.
      - paused sessions keep the loop alive; `step()` just returns None.
      - a level clear schedules `advance_level()` after `level_advance_delay_s`;
        a session paused at that moment holds the advance until it resumes.
      - game over hands the score to the bridge and ends the loop.
    """

    def __init__(self, session: GameSession, *, level_advance_delay_s: float = 1.0) -> None:
        self.session = session
        self.level_advance_delay_s = level_advance_delay_s
        self._task: asyncio.Task[None] | None = None
        self._advance_handle: asyncio.TimerHandle | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def advance_pending(self) -> bool:
        return self._advance_handle is not None

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=f"ticks:{self.session.simulation.name}")

    async def stop(self) -> None:
        self._cancel_advance()
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def wait(self) -> None:
        """Wait for the loop to end on its own (game over)."""

        if self._task is not None:
            await self._task

    async def __aenter__(self) -> "TickScheduler":
        self.start()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.stop()

    async def _run(self) -> None:
        try:
            while True:
                await asyncio.sleep(self.session.tick_interval_ms / 1000)
                effects = self.session.step()
                if effects is None:
                    continue
                if self._handle(effects):
                    return
        except asyncio.CancelledError:
            raise
        except Exception:
            # Fail fast rather than keep ticking on a broken world.
            logger.exception("Tick loop crashed for %s", self.session.simulation.name)
            raise
        finally:
            self._cancel_advance()

    def _handle(self, effects: Effects) -> bool:
        if effects.events:
            logger.debug("tick %d: %s", effects.tick, [e.type for e in effects.events])
        if effects.game_over:
            logger.info(
                "%s over (%s) with score %d",
                self.session.simulation.name,
                effects.reason,
                self.session.score,
            )
            self.session.report_game_over()
            return True
        if effects.level_cleared and self._advance_handle is None:
            loop = asyncio.get_running_loop()
            self._advance_handle = loop.call_later(self.level_advance_delay_s, self._advance)
        return False

    def _advance(self) -> None:
        self._advance_handle = None
        self.session.advance_level()

    def _cancel_advance(self) -> None:
        handle, self._advance_handle = self._advance_handle, None
        if handle is not None:
            handle.cancel()
