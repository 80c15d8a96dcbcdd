from __future__ import annotations

import pytest

from arcade.core.simulation import Direction, Effects, Simulation, TickInput
from arcade.fsm import SessionFSM, SessionPhase
from arcade.games.connect_four import RED, ConnectFourSimulation
from arcade.games.registry import create_simulation
from arcade.session import GameSession


class _Recorder(Simulation):
    name = "recorder"

    def _reset_world(self) -> None:
        self.inputs: list[TickInput] = []
        self.end_at: int | None = None

    def _step(self, inp: TickInput, effects: Effects) -> None:
        self.inputs.append(inp)
        if self.end_at is not None and len(self.inputs) >= self.end_at:
            self._finish(effects, reason="done")

    def _check_invariants(self) -> None:
        pass


class _OneShotRecorder(_Recorder):
    direction_is_one_shot = True


def test_fsm_walks_the_happy_path() -> None:
    fsm = SessionFSM()
    assert fsm.phase == SessionPhase.instructions
    fsm.send("start")
    assert fsm.phase == SessionPhase.playing
    fsm.send("pause")
    assert fsm.phase == SessionPhase.paused
    fsm.send("resume")
    fsm.send("finish")
    assert fsm.phase == SessionPhase.game_over
    fsm.send("reset")
    assert fsm.phase == SessionPhase.playing


def test_fsm_can_start_from_a_given_phase() -> None:
    assert SessionFSM(SessionPhase.paused).phase == SessionPhase.paused


def test_illegal_transitions_raise_value_error() -> None:
    session = GameSession(_Recorder(seed=1))
    with pytest.raises(ValueError, match="Cannot pause while instructions"):
        session.toggle_pause()
    with pytest.raises(ValueError):
        session.reset()

    session.start()
    with pytest.raises(ValueError, match="Cannot start while playing"):
        session.start()


def test_step_only_ticks_while_playing() -> None:
    sim = _Recorder(seed=1)
    session = GameSession(sim)
    assert session.step() is None

    session.start()
    assert session.step() is not None
    assert session.toggle_pause() == SessionPhase.paused
    assert session.step() is None
    assert session.toggle_pause() == SessionPhase.playing
    session.step()

    assert len(sim.inputs) == 2


def test_held_direction_survives_ticks_and_actions_do_not() -> None:
    sim = _Recorder(seed=1)
    session = GameSession(sim)
    session.start()

    session.press(direction="left", fire=True, column=4)
    session.step()
    session.step()
    session.release_direction()
    session.step()

    first, second, third = sim.inputs
    assert first == TickInput(direction=Direction.left, fire=True, column=4)
    assert second == TickInput(direction=Direction.left)
    assert third == TickInput()


def test_last_press_wins_between_ticks() -> None:
    sim = _Recorder(seed=1)
    session = GameSession(sim)
    session.start()

    session.press(direction=Direction.up)
    session.press(direction="Down", rotate=True)
    session.step()

    assert sim.inputs[0] == TickInput(direction=Direction.down, rotate=True)


def test_one_shot_direction_is_consumed() -> None:
    sim = _OneShotRecorder(seed=1)
    session = GameSession(sim)
    session.start()

    session.press(direction=Direction.left)
    session.step()
    session.step()

    assert [i.direction for i in sim.inputs] == [Direction.left, None]


def test_bad_input_is_rejected() -> None:
    session = GameSession(_Recorder(seed=1))
    with pytest.raises(ValueError, match="Unknown direction"):
        session.press(direction="sideways")
    with pytest.raises(ValueError):
        session.press(column=-1)


def test_game_over_then_reset_starts_a_fresh_round() -> None:
    sim = _Recorder(seed=1)
    session = GameSession(sim)
    session.start()
    sim.end_at = 2

    session.step()
    effects = session.step()

    assert effects is not None and effects.game_over
    assert session.phase == SessionPhase.game_over
    assert session.step() is None

    session.press(direction=Direction.right)
    session.reset()

    assert session.phase == SessionPhase.playing
    assert not sim.is_terminal()
    assert sim.inputs == []
    session.step()
    assert sim.inputs == [TickInput()]


def test_level_advance_is_held_while_paused() -> None:
    sim = ConnectFourSimulation(seed=1)
    for c in range(3):
        sim.world.board[5][c] = RED
    session = GameSession(sim)
    session.start()
    session.press(column=3)
    assert session.step().level_cleared

    session.toggle_pause()
    session.advance_level()
    assert sim.level == 1
    assert session.advance_due

    session.toggle_pause()
    assert sim.level == 2
    assert not session.advance_due


def test_reset_drops_a_held_advance() -> None:
    sim = ConnectFourSimulation(seed=1)
    for c in range(3):
        sim.world.board[5][c] = RED
    session = GameSession(sim)
    session.start()
    session.press(column=3)
    session.step()
    session.toggle_pause()
    session.advance_level()

    session.reset()
    session.advance_level()

    assert not session.advance_due
    assert sim.level == 1
    assert not sim.awaiting_advance


def test_session_exposes_simulation_numbers() -> None:
    session = GameSession(create_simulation("snake", seed=2), user_id="u1")
    assert session.score == 0
    assert session.level == 1
    assert session.high_score == 0
    assert session.tick_interval_ms == 150
    assert session.user_id == "u1"
    assert session.report_game_over() is None
