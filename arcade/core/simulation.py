from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from arcade.core.events import EventType, SimEvent

logger = logging.getLogger(__name__)


class Direction(StrEnum):
    up = "UP"
    down = "DOWN"
    left = "LEFT"
    right = "RIGHT"

    @property
    def delta(self) -> tuple[int, int]:
        return _DELTAS[self]

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]


_DELTAS: dict[Direction, tuple[int, int]] = {
    Direction.up: (0, -1),
    Direction.down: (0, 1),
    Direction.left: (-1, 0),
    Direction.right: (1, 0),
}

_OPPOSITES: dict[Direction, Direction] = {
    Direction.up: Direction.down,
    Direction.down: Direction.up,
    Direction.left: Direction.right,
    Direction.right: Direction.left,
}


@dataclass(frozen=True, slots=True)
class TickInput:
    """Input snapshot read by exactly one tick.

    `direction` is the held movement intent (None = nothing held); the remaining
    fields are one-shot actions that only apply to the tick that reads them.
    """

    direction: Direction | None = None
    fire: bool = False
    rotate: bool = False
    soft_drop: bool = False
    hard_drop: bool = False
    column: int | None = None


@dataclass(slots=True)
class Effects:
    """What a single tick changed, for the scheduler and the session."""

    tick: int = 0
    score_delta: int = 0
    events: list[SimEvent] = field(default_factory=list)
    level_cleared: bool = False
    game_over: bool = False
    reason: str | None = None

    def emit(self, type: EventType, **payload: Any) -> None:
        self.events.append(SimEvent.at(type=type, tick=self.tick, **payload))


class InvariantViolation(RuntimeError):
    """Raised by a simulation step when its world state left the legal envelope."""


class Simulation(ABC):
    """One game's world state plus its update pipeline.

    Subclasses own their world state exclusively and implement the four hooks
    below. The base class enforces the shared contract:

    - `tick()` is a no-op once terminal or while a level advance is pending
    - score only ever increases
    - an invariant violation ends the round instead of continuing on bad state
    """

    game_id: int = 0
    name: str = ""
    initial_interval_ms: int = 100
    # When True a held direction acts once, like the other one-shot inputs.
    direction_is_one_shot: bool = False

    def __init__(self, *, seed: int | None = None) -> None:
        self.seed = seed if seed is not None else random.SystemRandom().randint(1, 2**31 - 1)
        self.rng = random.Random(self.seed)
        self.score = 0
        self.level = 1
        self.tick_count = 0
        self.elapsed_ms = 0
        self.tick_interval_ms = self.initial_interval_ms
        self.terminal = False
        self.terminal_reason: str | None = None
        self.awaiting_advance = False
        self.reset()

    def reset(self) -> None:
        self.score = 0
        self.level = 1
        self.tick_count = 0
        self.elapsed_ms = 0
        self.tick_interval_ms = self.initial_interval_ms
        self.terminal = False
        self.terminal_reason = None
        self.awaiting_advance = False
        self._reset_world()

    def is_terminal(self) -> bool:
        return self.terminal

    def tick(self, inp: TickInput | None = None) -> Effects:
        if self.terminal or self.awaiting_advance:
            return Effects(tick=self.tick_count)

        self.tick_count += 1
        self.elapsed_ms += self.tick_interval_ms
        effects = Effects(tick=self.tick_count)

        try:
            self._step(inp or TickInput(), effects)
            self._check_invariants()
        except InvariantViolation as e:
            logger.error("%s: invariant violated on tick %d: %s", self.name, self.tick_count, e)
            if not self.terminal:
                self._finish(effects, reason="invariant_violation")

        if effects.level_cleared and not self.terminal:
            self.awaiting_advance = True
        return effects

    def advance_level(self) -> None:
        """Apply a level advance announced earlier by `Effects.level_cleared`."""

        if self.terminal or not self.awaiting_advance:
            return
        self.awaiting_advance = False
        self.level += 1
        self._on_level_advanced()
        logger.info("%s: advanced to level %d (interval=%dms)", self.name, self.level, self.tick_interval_ms)

    # ---- helpers for subclasses ----

    def _award(self, effects: Effects, points: int, **payload: Any) -> None:
        if points <= 0:
            return
        self.score += points
        effects.score_delta += points
        effects.emit("SCORED", points=points, score=self.score, **payload)

    def _finish(self, effects: Effects, *, reason: str) -> None:
        self.terminal = True
        self.terminal_reason = reason
        effects.game_over = True
        effects.reason = reason
        effects.emit("GAME_OVER", reason=reason, score=self.score, level=self.level)
        logger.info("%s: game over (%s) score=%d level=%d", self.name, reason, self.score, self.level)

    def _clear_level(self, effects: Effects) -> None:
        effects.level_cleared = True
        effects.emit("LEVEL_CLEARED", level=self.level)

    # ---- per-game hooks ----

    @abstractmethod
    def _reset_world(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def _step(self, inp: TickInput, effects: Effects) -> None:
        raise NotImplementedError

    @abstractmethod
    def _check_invariants(self) -> None:
        raise NotImplementedError

    def _on_level_advanced(self) -> None:
        # Games without a level-clear condition never get here.
        raise NotImplementedError(f"{self.name} has no level advance")
