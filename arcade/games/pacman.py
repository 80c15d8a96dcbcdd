from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass, field

from arcade.core.geometry import Box, distance, touches, wrap_column
from arcade.core.simulation import Direction, Effects, InvariantViolation, Simulation, TickInput
from arcade.core.strategy import first_match
from arcade.games.pacman_mazes import LAYOUTS, TUNNEL_ROW, Maze, layout_index_for_level

logger = logging.getLogger(__name__)

INITIAL_INTERVAL_MS = 200
MIN_INTERVAL_MS = 50
INTERVAL_STEP_MS = 10

PACMAN_START = (10, 16)
GHOST_SPAWNS = ((9, 8), (10, 8), (11, 8), (10, 9))
SPAWN_OFFSETS = (1, -1, 2, -2, 3, -3)
POWER_PELLETS = ((1, 1), (19, 1), (1, 19), (19, 19))

DOT_POINTS = 10
PELLET_POINTS = 50
GHOST_POINTS = 200
FRIGHTENED_MS = 5000

BASE_GHOST_SPEED = 0.6
GHOST_SPEED_STEP = 0.03
SCARED_GHOST_SPEED = 0.4
SCARED_SHUFFLE_CHANCE = 0.2
WANDER_CHANCE = 0.5
INTERCEPT_LOOKAHEAD = 4
SHY_RADIUS = 8
COLLISION_INSET = 0.1

Cell = tuple[int, int]


@dataclass(slots=True)
class Pacman:
    x: int
    y: int
    direction: Direction | None = None
    next_direction: Direction | None = None


@dataclass(slots=True)
class Ghost:
    id: int
    x: int
    y: int
    spawn: Cell
    direction: Direction | None = None
    scared: bool = False

    @property
    def speed(self) -> float:
        if self.scared:
            return SCARED_GHOST_SPEED
        return BASE_GHOST_SPEED + self.id * GHOST_SPEED_STEP


@dataclass(slots=True)
class PacmanWorld:
    maze: Maze
    layout_index: int
    pacman: Pacman
    ghosts: list[Ghost]
    dots: set[Cell] = field(default_factory=set)
    pellets: set[Cell] = field(default_factory=set)
    frightened_until_ms: int = 0

    @property
    def cols(self) -> int:
        return len(self.maze[0])

    @property
    def rows(self) -> int:
        return len(self.maze)

    def is_open(self, x: int, y: int) -> bool:
        if y == TUNNEL_ROW and (x < 0 or x >= self.cols):
            return True
        if not (0 <= x < self.cols and 0 <= y < self.rows):
            return False
        return self.maze[y][x] == 0

    def can_enter(self, x: int, y: int, direction: Direction) -> bool:
        dx, dy = direction.delta
        return self.is_open(x + dx, y + dy)

    def step_from(self, x: int, y: int, direction: Direction) -> Cell:
        dx, dy = direction.delta
        nx, ny = x + dx, y + dy
        if ny == TUNNEL_ROW:
            nx = wrap_column(nx, self.cols)
        return nx, ny


def reachable_cells(maze: Maze, start: Cell) -> set[Cell]:
    cols, rows = len(maze[0]), len(maze)
    seen = {start}
    queue = deque([start])
    while queue:
        x, y = queue.popleft()
        for d in Direction:
            dx, dy = d.delta
            nx, ny = x + dx, y + dy
            if ny == TUNNEL_ROW:
                nx = wrap_column(nx, cols)
            if not (0 <= nx < cols and 0 <= ny < rows) or maze[ny][nx] != 0:
                continue
            if (nx, ny) not in seen:
                seen.add((nx, ny))
                queue.append((nx, ny))
    return seen


def ghost_spawn_cell(maze: Maze, preferred: Cell) -> Cell:
    """Nearest open cell to `preferred`, searching outward along the row then the column."""

    x, y = preferred
    if maze[y][x] == 0:
        return preferred
    for off in SPAWN_OFFSETS:
        for cx, cy in ((x + off, y), (x, y + off)):
            if 0 <= cy < len(maze) and 0 <= cx < len(maze[0]) and maze[cy][cx] == 0:
                return cx, cy
    raise ValueError(f"No open spawn cell near {preferred}")


# ---- ghost steering ----


@dataclass(frozen=True, slots=True)
class GhostView:
    """Everything a ghost's steering needs for one decision; random draws are taken up front."""

    ghost: Ghost
    pacman: Cell
    pacman_heading: Direction | None
    blinky: Cell
    legal: frozenset[Direction]
    roll: float
    shuffled: tuple[Direction, ...]

    @property
    def candidates(self) -> list[Direction]:
        reverse = self.ghost.direction.opposite if self.ghost.direction else None
        return [d for d in Direction if d != reverse]


def _ranked(view: GhostView, target: Cell, *, flee: bool = False) -> list[Direction]:
    g = view.ghost

    def dist(d: Direction) -> float:
        dx, dy = d.delta
        return distance(g.x + dx, g.y + dy, target[0], target[1])

    return sorted(view.candidates, key=dist, reverse=flee)


def _first_legal(view: GhostView, ordered: list[Direction]) -> Direction | None:
    for d in ordered:
        if d in view.legal:
            return d
    return None


def _shuffled_candidates(view: GhostView) -> list[Direction]:
    allowed = set(view.candidates)
    return [d for d in view.shuffled if d in allowed]


def frightened(view: GhostView) -> Direction | None:
    if not view.ghost.scared:
        return None
    if view.roll < SCARED_SHUFFLE_CHANCE:
        return _first_legal(view, _shuffled_candidates(view))
    return _first_legal(view, _ranked(view, view.pacman, flee=True))


def personality(view: GhostView) -> Direction | None:
    g, (px, py) = view.ghost, view.pacman
    if g.id == 0:
        return _first_legal(view, _ranked(view, view.pacman))
    if g.id == 1:
        dx, dy = view.pacman_heading.delta if view.pacman_heading else (0, 0)
        target = (px + dx * INTERCEPT_LOOKAHEAD, py + dy * INTERCEPT_LOOKAHEAD)
        return _first_legal(view, _ranked(view, target))
    if g.id == 2:
        if view.roll < WANDER_CHANCE:
            return _first_legal(view, _shuffled_candidates(view))
        bx, by = view.blinky
        return _first_legal(view, _ranked(view, (2 * px - bx, 2 * py - by)))
    if distance(g.x, g.y, px, py) < SHY_RADIUS:
        return _first_legal(view, _ranked(view, view.pacman, flee=True))
    return _first_legal(view, _ranked(view, view.pacman))


def reverse(view: GhostView) -> Direction | None:
    d = view.ghost.direction
    if d is None or d.opposite not in view.legal:
        return None
    return d.opposite


GHOST_STRATEGIES = (frightened, personality, reverse)


def choose_ghost_direction(view: GhostView) -> Direction | None:
    """The reverse heading only wins when nothing else is legal."""

    return first_match(GHOST_STRATEGIES, view)


def ghost_view(world: PacmanWorld, ghost: Ghost, rng: random.Random) -> GhostView:
    blinky = world.ghosts[0] if world.ghosts else ghost
    shuffled = list(Direction)
    rng.shuffle(shuffled)
    return GhostView(
        ghost=ghost,
        pacman=(world.pacman.x, world.pacman.y),
        pacman_heading=world.pacman.direction,
        blinky=(blinky.x, blinky.y),
        legal=frozenset(d for d in Direction if world.can_enter(ghost.x, ghost.y, d)),
        roll=rng.random(),
        shuffled=tuple(shuffled),
    )


def _cell_box(x: int, y: int) -> Box:
    return Box.at(x, y, 1, 1).inset(COLLISION_INSET)


class PacmanSimulation(Simulation):
    game_id = 3
    name = "pacman"
    initial_interval_ms = INITIAL_INTERVAL_MS

    world: PacmanWorld

    def _reset_world(self) -> None:
        self._load_layout(0)

    def _load_layout(self, index: int) -> None:
        maze = LAYOUTS[index]
        ghosts = []
        for gid, preferred in enumerate(GHOST_SPAWNS):
            x, y = ghost_spawn_cell(maze, preferred)
            ghosts.append(Ghost(id=gid, x=x, y=y, spawn=(x, y)))

        open_cells = reachable_cells(maze, PACMAN_START)
        pellets = {p for p in POWER_PELLETS if p in open_cells}
        self.world = PacmanWorld(
            maze=maze,
            layout_index=index,
            pacman=Pacman(x=PACMAN_START[0], y=PACMAN_START[1]),
            ghosts=ghosts,
            dots=open_cells - pellets,
            pellets=pellets,
        )

    def _on_level_advanced(self) -> None:
        index = layout_index_for_level(self.level, previous=self.world.layout_index, rng=self.rng)
        self._load_layout(index)
        self.tick_interval_ms = max(INITIAL_INTERVAL_MS - self.level * INTERVAL_STEP_MS, MIN_INTERVAL_MS)

    def _step(self, inp: TickInput, effects: Effects) -> None:
        w = self.world

        if w.frightened_until_ms and self.elapsed_ms >= w.frightened_until_ms:
            w.frightened_until_ms = 0
            for g in w.ghosts:
                g.scared = False

        self._move_pacman(inp)
        self._eat(effects)
        self._resolve_collisions(effects)
        if self.terminal:
            return
        if not w.dots and not w.pellets:
            self._clear_level(effects)
            return

        for g in w.ghosts:
            if self.rng.random() >= g.speed:
                continue
            d = choose_ghost_direction(ghost_view(w, g, self.rng))
            if d is None:
                continue
            g.direction = d
            g.x, g.y = w.step_from(g.x, g.y, d)

        self._resolve_collisions(effects)

    def _move_pacman(self, inp: TickInput) -> None:
        w, p = self.world, self.world.pacman
        if inp.direction is not None:
            p.next_direction = inp.direction
        if p.next_direction is not None and w.can_enter(p.x, p.y, p.next_direction):
            p.direction = p.next_direction
        if p.direction is not None and w.can_enter(p.x, p.y, p.direction):
            p.x, p.y = w.step_from(p.x, p.y, p.direction)

    def _eat(self, effects: Effects) -> None:
        w = self.world
        cell = (w.pacman.x, w.pacman.y)
        if cell in w.dots:
            w.dots.discard(cell)
            self._award(effects, DOT_POINTS, item="dot")
        elif cell in w.pellets:
            w.pellets.discard(cell)
            self._award(effects, PELLET_POINTS, item="pellet")
            w.frightened_until_ms = self.elapsed_ms + FRIGHTENED_MS
            for g in w.ghosts:
                g.scared = True
            effects.emit("POWER_UP", until_ms=w.frightened_until_ms)

    def _resolve_collisions(self, effects: Effects) -> None:
        w = self.world
        pac_box = _cell_box(w.pacman.x, w.pacman.y)
        for g in w.ghosts:
            if not touches(pac_box, _cell_box(g.x, g.y)):
                continue
            if g.scared:
                self._award(effects, GHOST_POINTS, item="ghost", ghost=g.id)
                effects.emit("GHOST_EATEN", ghost=g.id)
                g.x, g.y = g.spawn
                g.direction = None
                g.scared = False
                continue
            self._finish(effects, reason="caught_by_ghost")
            return

    def _check_invariants(self) -> None:
        w = self.world
        movers = [("pacman", w.pacman.x, w.pacman.y)] + [(f"ghost {g.id}", g.x, g.y) for g in w.ghosts]
        for label, x, y in movers:
            if not (0 <= x < w.cols and 0 <= y < w.rows):
                raise InvariantViolation(f"{label} at ({x},{y}) outside maze")
            if w.maze[y][x] != 0:
                raise InvariantViolation(f"{label} inside a wall at ({x},{y})")
