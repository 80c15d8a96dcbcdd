from __future__ import annotations

import logging
from dataclasses import dataclass

from arcade.core.simulation import Direction, Effects, InvariantViolation, Simulation, TickInput

logger = logging.getLogger(__name__)

COLS = 10
ROWS = 20
INITIAL_INTERVAL_MS = 800
MIN_INTERVAL_MS = 100
INTERVAL_STEP_MS = 50
LINES_PER_LEVEL = 10
LINE_POINTS = (0, 100, 300, 500, 800)

Shape = tuple[tuple[int, ...], ...]

TETROMINOES: dict[str, Shape] = {
    "I": ((1, 1, 1, 1),),
    "J": ((1, 0, 0), (1, 1, 1)),
    "L": ((0, 0, 1), (1, 1, 1)),
    "O": ((1, 1), (1, 1)),
    "S": ((0, 1, 1), (1, 1, 0)),
    "T": ((0, 1, 0), (1, 1, 1)),
    "Z": ((1, 1, 0), (0, 1, 1)),
}
KINDS = tuple(TETROMINOES)


def rotate_clockwise(shape: Shape) -> Shape:
    return tuple(tuple(row) for row in zip(*shape[::-1]))


@dataclass(frozen=True, slots=True)
class Piece:
    kind: str
    shape: Shape
    x: int
    y: int

    @property
    def width(self) -> int:
        return len(self.shape[0])

    @property
    def height(self) -> int:
        return len(self.shape)

    def cells(self) -> list[tuple[int, int]]:
        return [
            (self.x + cx, self.y + cy)
            for cy, row in enumerate(self.shape)
            for cx, filled in enumerate(row)
            if filled
        ]

    def moved(self, dx: int, dy: int) -> "Piece":
        return Piece(kind=self.kind, shape=self.shape, x=self.x + dx, y=self.y + dy)

    def rotated(self) -> "Piece":
        return Piece(kind=self.kind, shape=rotate_clockwise(self.shape), x=self.x, y=self.y)


def spawn_piece(kind: str, *, cols: int = COLS) -> Piece:
    shape = TETROMINOES[kind]
    return Piece(kind=kind, shape=shape, x=cols // 2 - len(shape[0]) // 2, y=0)


@dataclass(slots=True)
class TetrisWorld:
    """`board[row][col]` holds "" for an empty cell or the kind of the locked piece."""

    board: list[list[str]]
    piece: Piece
    next_kind: str
    lines: int = 0

    @property
    def cols(self) -> int:
        return len(self.board[0])

    @property
    def rows(self) -> int:
        return len(self.board)

    def fits(self, piece: Piece) -> bool:
        for x, y in piece.cells():
            if x < 0 or x >= self.cols or y < 0 or y >= self.rows:
                return False
            if self.board[y][x]:
                return False
        return True


def empty_board(*, rows: int = ROWS, cols: int = COLS) -> list[list[str]]:
    return [["" for _ in range(cols)] for _ in range(rows)]


def clear_full_rows(board: list[list[str]]) -> int:
    """Remove full rows in place, shifting everything above down. Returns rows removed."""

    cols = len(board[0])
    kept = [row for row in board if not all(row)]
    cleared = len(board) - len(kept)
    board[:] = [["" for _ in range(cols)] for _ in range(cleared)] + kept
    return cleared


class TetrisSimulation(Simulation):
    game_id = 2
    name = "tetris"
    initial_interval_ms = INITIAL_INTERVAL_MS
    direction_is_one_shot = True

    world: TetrisWorld

    def _reset_world(self) -> None:
        self.world = TetrisWorld(
            board=empty_board(),
            piece=spawn_piece(self.rng.choice(KINDS)),
            next_kind=self.rng.choice(KINDS),
        )

    def _try(self, candidate: Piece) -> bool:
        if not self.world.fits(candidate):
            return False
        self.world.piece = candidate
        return True

    def _step(self, inp: TickInput, effects: Effects) -> None:
        w = self.world

        if inp.direction == Direction.left:
            self._try(w.piece.moved(-1, 0))
        elif inp.direction == Direction.right:
            self._try(w.piece.moved(1, 0))

        if inp.rotate or inp.direction == Direction.up:
            self._try(w.piece.rotated())

        if inp.hard_drop:
            while self._try(w.piece.moved(0, 1)):
                pass
            self._lock(effects)
            return

        if inp.soft_drop or inp.direction == Direction.down:
            if not self._try(w.piece.moved(0, 1)):
                self._lock(effects)
                return

        # gravity
        if not self._try(w.piece.moved(0, 1)):
            self._lock(effects)

    def _lock(self, effects: Effects) -> None:
        w = self.world
        for x, y in w.piece.cells():
            w.board[y][x] = w.piece.kind

        cleared = clear_full_rows(w.board)
        if cleared:
            w.lines += cleared
            self._award(effects, LINE_POINTS[cleared] * self.level, lines=cleared)
            effects.emit("LINES_CLEARED", count=cleared, total=w.lines)
            if w.lines >= self.level * LINES_PER_LEVEL:
                self.level += 1
                self.tick_interval_ms = max(
                    INITIAL_INTERVAL_MS - self.level * INTERVAL_STEP_MS, MIN_INTERVAL_MS
                )
                effects.emit("LEVEL_UP", level=self.level)
                logger.info("tetris: level %d (interval=%dms)", self.level, self.tick_interval_ms)

        nxt = spawn_piece(w.next_kind, cols=w.cols)
        w.next_kind = self.rng.choice(KINDS)
        if not w.fits(nxt):
            self._finish(effects, reason="spawn_blocked")
            return
        w.piece = nxt

    def _check_invariants(self) -> None:
        w = self.world
        if any(len(row) != w.cols for row in w.board):
            raise InvariantViolation("ragged board")
        if self.terminal:
            return
        for x, y in w.piece.cells():
            if not (0 <= x < w.cols and 0 <= y < w.rows):
                raise InvariantViolation(f"piece cell ({x},{y}) outside board")
