from __future__ import annotations

import random

import pytest

from arcade.core.simulation import Direction, TickInput
from arcade.games.arkanoid import (
    BALL_SPEED,
    PADDLE_WIDTH,
    PADDLE_Y,
    WIDTH,
    ArkanoidSimulation,
    Ball,
    Brick,
    brick_points,
    build_bricks,
    paddle_reflection,
)


def test_centre_hit_goes_straight_up() -> None:
    dx, dy = paddle_reflection(10.5, 8)
    assert dx == pytest.approx(0.0)
    assert dy == pytest.approx(-BALL_SPEED)


@pytest.mark.parametrize("ball_x, expected_dx", [(8.0, -0.24), (13.0, 0.24), (2.0, -0.24), (20.0, 0.24)])
def test_edge_hits_deflect_and_keep_speed(ball_x: float, expected_dx: float) -> None:
    dx, dy = paddle_reflection(ball_x, 8)
    assert dx == pytest.approx(expected_dx)
    assert dy == pytest.approx(-0.18)
    assert (dx**2 + dy**2) ** 0.5 == pytest.approx(BALL_SPEED)


def test_serve_speed() -> None:
    ball = ArkanoidSimulation(seed=3).world.ball
    assert (ball.dx**2 + ball.dy**2) ** 0.5 == pytest.approx(BALL_SPEED)
    assert ball.dy < 0


def test_ball_bounces_off_the_paddle() -> None:
    sim = ArkanoidSimulation(seed=1)
    sim.world.paddle.x = 8
    sim.world.ball = Ball(x=10.5, y=21.5, dx=0.0, dy=0.3)

    eff = sim.tick(TickInput())

    assert not eff.game_over
    assert sim.world.ball.dy == pytest.approx(-0.3)
    assert sim.world.ball.y == pytest.approx(PADDLE_Y - 0.4)


def test_brick_hit_from_below_flips_dy_and_scores() -> None:
    sim = ArkanoidSimulation(seed=1)
    sim.world.bricks = [Brick(x=10, y=10, points=50)]
    sim.world.ball = Ball(x=10.5, y=11.6, dx=0.0, dy=-0.3)

    eff = sim.tick(TickInput())

    assert eff.score_delta == 50
    assert sim.world.ball.dy == pytest.approx(0.3)
    assert not sim.world.bricks
    assert eff.level_cleared


def test_only_one_brick_breaks_per_tick() -> None:
    sim = ArkanoidSimulation(seed=1)
    sim.world.bricks = [Brick(x=10, y=10, points=50), Brick(x=11, y=10, points=50)]
    sim.world.ball = Ball(x=11.0, y=11.6, dx=0.0, dy=-0.3)

    eff = sim.tick(TickInput())

    assert eff.score_delta == 50
    assert len(sim.world.bricks) == 1
    assert not eff.level_cleared


def test_missing_the_ball_ends_the_game() -> None:
    sim = ArkanoidSimulation(seed=1)
    sim.world.paddle.x = 15
    sim.world.ball = Ball(x=5.0, y=23.5, dx=0.0, dy=0.3)

    eff = sim.tick(TickInput())

    assert eff.game_over
    assert eff.reason == "ball_lost"


def test_side_walls_reflect() -> None:
    sim = ArkanoidSimulation(seed=1)
    sim.world.ball = Ball(x=0.5, y=15.0, dx=-0.3, dy=0.0)
    sim.tick(TickInput())
    assert sim.world.ball.dx > 0
    assert sim.world.ball.x == pytest.approx(0.4)


def test_paddle_moves_one_cell_and_stops_at_walls() -> None:
    sim = ArkanoidSimulation(seed=1)
    sim.world.paddle.x = 0
    sim.tick(TickInput(direction=Direction.left))
    assert sim.world.paddle.x == 0
    sim.tick(TickInput(direction=Direction.right))
    assert sim.world.paddle.x == 1


def test_brick_points_by_row() -> None:
    assert [brick_points(r) for r in range(6)] == [50, 40, 30, 20, 10, 50]


def test_patterns_per_level() -> None:
    rng = random.Random(0)
    names = [build_bricks(level, rng)[0] for level in range(1, 8)]
    assert names == ["classic", "zigzag", "pyramid", "frame", "random", "random", "random"]
    _, classic = build_bricks(1, rng)
    assert len(classic) == 95


@pytest.mark.parametrize("level", range(1, 10))
def test_bricks_fit_inside_the_walls(level: int) -> None:
    _, bricks = build_bricks(level, random.Random(level))
    assert bricks
    for b in bricks:
        assert 1 <= b.x
        assert b.x + b.width <= WIDTH - 1
        assert b.points in (10, 20, 30, 40, 50)


def test_advance_speeds_up_and_changes_the_pattern() -> None:
    sim = ArkanoidSimulation(seed=1)
    sim.world.bricks = [Brick(x=10, y=10, points=50)]
    sim.world.ball = Ball(x=10.5, y=11.6, dx=0.0, dy=-0.3)
    sim.tick(TickInput())

    sim.advance_level()

    assert sim.level == 2
    assert sim.tick_interval_ms == 24
    assert sim.world.pattern == "zigzag"
    assert sim.world.bricks


def test_ball_and_paddle_stay_in_the_field() -> None:
    rng = random.Random(21)
    sim = ArkanoidSimulation(seed=21)
    for _ in range(5000):
        if sim.is_terminal():
            sim.reset()
        if sim.awaiting_advance:
            sim.advance_level()
        before = sim.score
        sim.tick(TickInput(direction=rng.choice([None, Direction.left, Direction.right])))
        assert sim.terminal_reason != "invariant_violation"
        assert sim.score >= before
        assert 0 <= sim.world.paddle.x <= WIDTH - PADDLE_WIDTH
