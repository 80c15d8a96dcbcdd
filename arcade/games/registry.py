from __future__ import annotations

from arcade.core.simulation import Simulation
from arcade.games.arkanoid import ArkanoidSimulation
from arcade.games.connect_four import ConnectFourSimulation
from arcade.games.pacman import PacmanSimulation
from arcade.games.pang import PangSimulation
from arcade.games.snake import SnakeSimulation
from arcade.games.tetris import TetrisSimulation

SIMULATIONS: dict[int, type[Simulation]] = {
    cls.game_id: cls
    for cls in (
        SnakeSimulation,
        TetrisSimulation,
        PacmanSimulation,
        PangSimulation,
        ConnectFourSimulation,
        ArkanoidSimulation,
    )
}

_BY_NAME = {cls.name: cls for cls in SIMULATIONS.values()}


def create_simulation(game: int | str, *, seed: int | None = None) -> Simulation:
    """Build a fresh simulation by catalog id or by short name (e.g. 5 or "connect_four")."""

    cls = SIMULATIONS.get(game) if isinstance(game, int) else _BY_NAME.get(game)
    if cls is None:
        raise ValueError(f"Unknown game: {game!r}")
    return cls(seed=seed)


def game_names() -> list[str]:
    return [cls.name for cls in SIMULATIONS.values()]
