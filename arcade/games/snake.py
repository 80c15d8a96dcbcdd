from __future__ import annotations

import logging
from dataclasses import dataclass

from arcade.core.simulation import Direction, Effects, InvariantViolation, Simulation, TickInput

logger = logging.getLogger(__name__)

GRID_SIZE = 25
START_CELL = (10, 10)
INITIAL_INTERVAL_MS = 150
MIN_INTERVAL_MS = 50
SPEEDUP_EVERY_POINTS = 50
SPEEDUP_MS = 10
FOOD_POINTS = 10

Cell = tuple[int, int]


@dataclass(slots=True)
class SnakeWorld:
    """Body is ordered head first."""

    body: list[Cell]
    direction: Direction
    food: Cell | None
    grid_size: int = GRID_SIZE

    @property
    def head(self) -> Cell:
        return self.body[0]

    def free_cells(self) -> list[Cell]:
        occupied = set(self.body)
        return [
            (x, y)
            for y in range(self.grid_size)
            for x in range(self.grid_size)
            if (x, y) not in occupied
        ]


def _next_cell(cell: Cell, direction: Direction, grid_size: int) -> Cell:
    dx, dy = direction.delta
    return ((cell[0] + dx) % grid_size, (cell[1] + dy) % grid_size)


def can_turn(world: SnakeWorld, direction: Direction) -> bool:
    """A turn is legal unless it would put the head onto the second segment."""

    if len(world.body) < 2:
        return True
    return _next_cell(world.head, direction, world.grid_size) != world.body[1]


class SnakeSimulation(Simulation):
    game_id = 1
    name = "snake"
    initial_interval_ms = INITIAL_INTERVAL_MS

    world: SnakeWorld

    def _reset_world(self) -> None:
        self.world = SnakeWorld(body=[START_CELL], direction=Direction.right, food=None)
        self.world.food = self._place_food()

    def _place_food(self) -> Cell | None:
        free = self.world.free_cells()
        if not free:
            return None
        return self.rng.choice(free)

    def _step(self, inp: TickInput, effects: Effects) -> None:
        w = self.world
        if inp.direction is not None and can_turn(w, inp.direction):
            w.direction = inp.direction

        new_head = _next_cell(w.head, w.direction, w.grid_size)
        eating = new_head == w.food

        # The tail cell is vacated this tick unless the snake grows.
        blocking = w.body if eating else w.body[:-1]
        if new_head in blocking:
            self._finish(effects, reason="self_collision")
            return

        w.body.insert(0, new_head)
        if not eating:
            w.body.pop()
            return

        self._award(effects, FOOD_POINTS, cell=new_head)
        if self.score % SPEEDUP_EVERY_POINTS == 0:
            self.tick_interval_ms = max(self.tick_interval_ms - SPEEDUP_MS, MIN_INTERVAL_MS)
            logger.debug("snake: interval now %dms", self.tick_interval_ms)

        w.food = self._place_food()
        if w.food is None:
            self._finish(effects, reason="board_full")

    def _check_invariants(self) -> None:
        n = self.world.grid_size
        for x, y in self.world.body:
            if not (0 <= x < n and 0 <= y < n):
                raise InvariantViolation(f"segment ({x},{y}) outside {n}x{n} grid")
        if len(set(self.world.body)) != len(self.world.body):
            raise InvariantViolation("snake body overlaps itself")
