from __future__ import annotations

import asyncio

import pytest

from arcade.core.simulation import Direction
from arcade.fsm import SessionPhase
from arcade.games.connect_four import RED, YELLOW, ConnectFourSimulation, empty_board
from arcade.games.snake import SnakeSimulation, SnakeWorld
from arcade.scheduler import TickScheduler
from arcade.score_bridge import PlayerProfile, ScoreBridge
from arcade.session import GameSession


class _RecordingService:
    def __init__(self) -> None:
        self.submitted: list[tuple[str, int, int]] = []

    async def get_high_score(self, game_id: int, user_id: str) -> int:
        return 0

    async def submit_score(self, user_id: str, game_id: int, score: int, profile: PlayerProfile) -> None:
        self.submitted.append((user_id, game_id, score))


def _winning_connect_four() -> ConnectFourSimulation:
    sim = ConnectFourSimulation(seed=1)
    board = empty_board()
    for c in range(3):
        board[5][c] = RED
    board[4][0] = YELLOW
    board[4][1] = YELLOW
    sim.world.board = board
    sim.tick_interval_ms = 1
    return sim


async def _until(predicate, *, timeout: float = 2.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


@pytest.mark.asyncio
async def test_game_over_ends_the_loop_and_submits_the_score() -> None:
    sim = SnakeSimulation(seed=1)
    sim.world = SnakeWorld(body=[(5, 5), (6, 5), (6, 6), (5, 6), (4, 6)], direction=Direction.left, food=(20, 20))
    sim.score = 30
    sim.tick_interval_ms = 1

    svc = _RecordingService()
    bridge = ScoreBridge(svc, game_id=sim.game_id, user_id="u1")
    await bridge.load()
    session = GameSession(sim, bridge)
    session.start()
    session.press(direction="down")

    scheduler = TickScheduler(session)
    scheduler.start()
    await asyncio.wait_for(scheduler.wait(), timeout=2)
    await bridge.aclose()

    assert not scheduler.running
    assert session.phase == SessionPhase.game_over
    assert svc.submitted == [("u1", 1, 30)]
    assert session.high_score == 30


@pytest.mark.asyncio
async def test_level_clear_advances_after_the_delay() -> None:
    sim = _winning_connect_four()
    session = GameSession(sim)
    session.start()
    session.press(column=3)

    async with TickScheduler(session, level_advance_delay_s=0.05) as scheduler:
        await _until(lambda: sim.awaiting_advance)
        assert scheduler.advance_pending
        assert sim.level == 1

        await _until(lambda: sim.level == 2)
        assert not scheduler.advance_pending
        assert sim.world.board == empty_board()
        assert scheduler.running


@pytest.mark.asyncio
async def test_advance_coming_due_while_paused_waits_for_resume() -> None:
    sim = _winning_connect_four()
    session = GameSession(sim)
    session.start()
    session.press(column=3)

    async with TickScheduler(session, level_advance_delay_s=0.05) as scheduler:
        await _until(lambda: scheduler.advance_pending)
        session.toggle_pause()
        await _until(lambda: not scheduler.advance_pending)
        await asyncio.sleep(0.1)

        assert session.advance_due
        assert sim.level == 1
        assert sim.awaiting_advance
        assert sim.world.board[5][:4] == [RED] * 4

        assert session.toggle_pause() == SessionPhase.playing
        assert sim.level == 2
        assert not session.advance_due
        assert sim.world.board == empty_board()


@pytest.mark.asyncio
async def test_paused_session_keeps_the_loop_alive_without_ticking() -> None:
    sim = SnakeSimulation(seed=1)
    sim.tick_interval_ms = 1
    session = GameSession(sim)
    session.start()
    session.toggle_pause()

    scheduler = TickScheduler(session)
    scheduler.start()
    await asyncio.sleep(0.05)

    assert scheduler.running
    assert sim.tick_count == 0

    session.toggle_pause()
    await _until(lambda: sim.tick_count > 0)
    await scheduler.stop()
    assert not scheduler.running


@pytest.mark.asyncio
async def test_stop_cancels_a_pending_advance() -> None:
    sim = _winning_connect_four()
    session = GameSession(sim)
    session.start()
    session.press(column=3)

    scheduler = TickScheduler(session, level_advance_delay_s=10)
    scheduler.start()
    await _until(lambda: scheduler.advance_pending)
    await scheduler.stop()

    assert not scheduler.advance_pending
    await asyncio.sleep(0.02)
    assert sim.level == 1
    assert sim.awaiting_advance


@pytest.mark.asyncio
async def test_start_twice_keeps_one_loop() -> None:
    sim = SnakeSimulation(seed=1)
    session = GameSession(sim)
    session.start()
    scheduler = TickScheduler(session)
    scheduler.start()
    first = scheduler._task
    scheduler.start()
    assert scheduler._task is first
    await scheduler.stop()
