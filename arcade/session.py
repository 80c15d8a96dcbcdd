from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace

from statemachine.exceptions import TransitionNotAllowed

from arcade.core.simulation import Direction, Effects, Simulation, TickInput
from arcade.fsm import SessionFSM, SessionPhase
from arcade.score_bridge import ScoreBridge

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Buffered:
    direction: Direction | None = None
    fire: bool = False
    rotate: bool = False
    soft_drop: bool = False
    hard_drop: bool = False
    column: int | None = None


class GameSession:
    """One player's run of one game: simulation + lifecycle + input buffer + score bridge.

    Input is last-writer-wins between ticks. The held direction survives ticks
    (unless the game treats it as one-shot); every other action is consumed by
    the tick that reads it.
    """

    def __init__(self, simulation: Simulation, bridge: ScoreBridge | None = None, *, user_id: str | None = None):
        self.simulation = simulation
        self.bridge = bridge
        self.user_id = user_id if user_id is not None else (bridge.user_id if bridge else None)
        self.fsm = SessionFSM()
        self._input = _Buffered()
        # Set when a level advance came due while paused; applied on resume.
        self.advance_due = False

    # ---- read side ----

    @property
    def phase(self) -> SessionPhase:
        return self.fsm.phase

    @property
    def score(self) -> int:
        return self.simulation.score

    @property
    def level(self) -> int:
        return self.simulation.level

    @property
    def high_score(self) -> int:
        return self.bridge.high_score if self.bridge else 0

    @property
    def tick_interval_ms(self) -> int:
        return self.simulation.tick_interval_ms

    # ---- input ----

    def press(
        self,
        *,
        direction: Direction | str | None = None,
        fire: bool = False,
        rotate: bool = False,
        soft_drop: bool = False,
        hard_drop: bool = False,
        column: int | None = None,
    ) -> None:
        changes: dict[str, object] = {}
        if direction is not None:
            try:
                changes["direction"] = Direction(str(direction).upper())
            except ValueError as e:
                raise ValueError(f"Unknown direction: {direction!r}") from e
        if column is not None:
            if column < 0:
                raise ValueError("column must be >= 0")
            changes["column"] = column
        for name, flag in (("fire", fire), ("rotate", rotate), ("soft_drop", soft_drop), ("hard_drop", hard_drop)):
            if flag:
                changes[name] = True
        self._input = replace(self._input, **changes)

    def release_direction(self) -> None:
        self._input = replace(self._input, direction=None)

    def _consume_input(self) -> TickInput:
        buf = self._input
        keep = None if self.simulation.direction_is_one_shot else buf.direction
        self._input = _Buffered(direction=keep)
        return TickInput(
            direction=buf.direction,
            fire=buf.fire,
            rotate=buf.rotate,
            soft_drop=buf.soft_drop,
            hard_drop=buf.hard_drop,
            column=buf.column,
        )

    # ---- lifecycle ----

    def _send(self, event: str) -> None:
        try:
            self.fsm.send(event)
        except TransitionNotAllowed as e:
            raise ValueError(f"Cannot {event} while {self.phase.value}") from e

    def start(self) -> None:
        self._send("start")

    def toggle_pause(self) -> SessionPhase:
        if self.phase == SessionPhase.playing:
            self._send("pause")
        elif self.phase == SessionPhase.paused:
            self._send("resume")
            if self.advance_due:
                self.advance_level()
        else:
            raise ValueError(f"Cannot pause while {self.phase.value}")
        return self.phase

    def reset(self) -> None:
        self._send("reset")
        self.simulation.reset()
        self._input = _Buffered()
        self.advance_due = False
        if self.bridge is not None:
            self.bridge.new_round()

    def step(self) -> Effects | None:
        if self.phase != SessionPhase.playing:
            return None
        effects = self.simulation.tick(self._consume_input())
        if effects.game_over:
            self._send("finish")
        return effects

    def advance_level(self) -> None:
        """Apply a pending level advance; while paused it is held until resume."""

        if self.phase == SessionPhase.paused:
            self.advance_due = True
            return
        self.advance_due = False
        self.simulation.advance_level()

    def report_game_over(self) -> asyncio.Task[None] | None:
        if self.bridge is None:
            return None
        return self.bridge.on_game_over(self.simulation.score)
