from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

EventType = Literal[
    "SCORED",
    "LINES_CLEARED",
    "LEVEL_UP",
    "LEVEL_CLEARED",
    "POWER_UP",
    "GHOST_EATEN",
    "BUBBLE_SPLIT",
    "DISC_DROPPED",
    "GAME_OVER",
]


@dataclass(frozen=True, slots=True)
class SimEvent:
    type: EventType
    tick: int
    payload: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def at(*, type: EventType, tick: int, **payload: Any) -> "SimEvent":
        return SimEvent(type=type, tick=tick, payload=payload)
