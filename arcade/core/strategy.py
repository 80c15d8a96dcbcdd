from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TypeVar

S = TypeVar("S")
M = TypeVar("M")

Strategy = Callable[[S], M | None]


def first_match(
    strategies: Sequence[Strategy[S, M]],
    state: S,
    *,
    accept: Callable[[M], bool] | None = None,
) -> M | None:
    """Evaluate strategies in order and return the first acceptable answer.

    A strategy answers None when it has nothing to offer. `accept` filters out
    answers that are not legal in `state`; a rejected answer falls through to the
    next strategy exactly like None does.
    """

    for strategy in strategies:
        move = strategy(state)
        if move is None:
            continue
        if accept is not None and not accept(move):
            continue
        return move
    return None
