from __future__ import annotations

from enum import StrEnum

from statemachine import State, StateMachine


class SessionPhase(StrEnum):
    instructions = "instructions"
    playing = "playing"
    paused = "paused"
    game_over = "game_over"


class SessionFSM(StateMachine):
    """Lifecycle of one play session around a simulation.

    instructions -> playing <-> paused, playing -> game_over -> (reset) -> playing.
    The FSM only guards transitions; the session owns the simulation.
    """

    instructions = State(SessionPhase.instructions.value, value=SessionPhase.instructions.value, initial=True)
    playing = State(SessionPhase.playing.value, value=SessionPhase.playing.value)
    paused = State(SessionPhase.paused.value, value=SessionPhase.paused.value)
    game_over = State(SessionPhase.game_over.value, value=SessionPhase.game_over.value)

    start = instructions.to(playing)
    pause = playing.to(paused)
    resume = paused.to(playing)
    finish = playing.to(game_over)
    reset = game_over.to(playing) | paused.to(playing) | playing.to(playing)

    def __init__(self, phase: SessionPhase = SessionPhase.instructions):
        super().__init__(start_value=phase.value)

    @property
    def phase(self) -> SessionPhase:
        return SessionPhase(str(self.current_state.value))
