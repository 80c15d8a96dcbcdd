from __future__ import annotations

import pytest

from arcade.core.geometry import Box, bounce_axis, overlaps, touches, wrap_column
from arcade.core.simulation import Direction, Effects, InvariantViolation, Simulation, TickInput
from arcade.core.strategy import first_match
from arcade.games.registry import SIMULATIONS, create_simulation, game_names


class _Counter(Simulation):
    name = "counter"

    def _reset_world(self) -> None:
        self.value = 0
        self.break_on: int | None = None

    def _step(self, inp: TickInput, effects: Effects) -> None:
        self.value += 1
        self._award(effects, 5)

    def _check_invariants(self) -> None:
        if self.break_on is not None and self.value >= self.break_on:
            raise InvariantViolation("value too large")


def test_overlaps_is_strict_and_touches_is_inclusive() -> None:
    a = Box.at(0, 0, 1, 1)
    b = Box.at(1, 0, 1, 1)
    assert not overlaps(a, b)
    assert touches(a, b)
    assert overlaps(a, Box.at(0.5, 0.5, 1, 1))
    assert not touches(a, Box.at(1.01, 0, 1, 1))


def test_bounce_axis_prefers_horizontal_on_ties() -> None:
    mover = Box(left=0, top=0, right=1, bottom=1)
    corner = Box(left=0.5, top=0.5, right=1.5, bottom=1.5)
    assert bounce_axis(mover, corner) == "x"

    from_below = Box(left=0, top=0.8, right=1, bottom=1.8)
    above = Box(left=0, top=1.5, right=1, bottom=2.5)
    assert bounce_axis(from_below, above) == "y"


def test_wrap_column_teleports_one_step() -> None:
    assert wrap_column(-1, 21) == 20
    assert wrap_column(21, 21) == 0
    assert wrap_column(7, 21) == 7


def test_direction_opposites() -> None:
    for d in Direction:
        assert d.opposite.opposite == d
        dx, dy = d.delta
        ox, oy = d.opposite.delta
        assert (dx + ox, dy + oy) == (0, 0)


def test_first_match_skips_none_and_rejected_answers() -> None:
    strategies = [lambda s: None, lambda s: s * 10, lambda s: s + 1]
    assert first_match(strategies, 3) == 30
    assert first_match(strategies, 3, accept=lambda m: m < 10) == 4
    assert first_match(strategies, 3, accept=lambda m: False) is None


def test_tick_is_a_noop_once_terminal() -> None:
    sim = _Counter(seed=1)
    sim.tick()
    sim.break_on = 2
    eff = sim.tick()

    assert eff.game_over
    assert eff.reason == "invariant_violation"
    assert sim.is_terminal()

    before = (sim.tick_count, sim.score, sim.value)
    eff = sim.tick(TickInput(direction=Direction.up))
    assert (sim.tick_count, sim.score, sim.value) == before
    assert not eff.events

    sim.reset()
    assert not sim.is_terminal()
    assert sim.score == 0


def test_score_accumulates_through_award() -> None:
    sim = _Counter(seed=1)
    deltas = [sim.tick().score_delta for _ in range(4)]
    assert deltas == [5, 5, 5, 5]
    assert sim.score == 20
    assert sim.elapsed_ms == 4 * sim.tick_interval_ms


def test_registry_covers_catalog_ids() -> None:
    assert sorted(SIMULATIONS) == [1, 2, 3, 4, 5, 6]
    assert set(game_names()) == {"snake", "tetris", "pacman", "super_pang", "connect_four", "arkanoid"}
    sim = create_simulation("tetris", seed=4)
    assert sim.game_id == 2
    assert sim.seed == 4
    assert create_simulation(6, seed=1).name == "arkanoid"


def test_registry_rejects_unknown_games() -> None:
    with pytest.raises(ValueError):
        create_simulation("pong")
    with pytest.raises(ValueError):
        create_simulation(99)


@pytest.mark.parametrize("game_id", [1, 2, 3, 4, 5, 6])
def test_same_seed_same_run(game_id: int) -> None:
    def run() -> tuple[int, int, bool]:
        sim = create_simulation(game_id, seed=11)
        directions = list(Direction)
        for i in range(150):
            sim.tick(TickInput(direction=directions[i % 4], fire=i % 3 == 0, column=i % 7))
            if sim.awaiting_advance:
                sim.advance_level()
        return sim.score, sim.tick_count, sim.terminal

    assert run() == run()
