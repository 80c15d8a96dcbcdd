from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from arcade.core.simulation import Effects, InvariantViolation, Simulation, TickInput
from arcade.core.strategy import first_match

logger = logging.getLogger(__name__)

ROWS = 6
COLS = 7
WIN_LENGTH = 4

EMPTY = 0
RED = 1  # player
YELLOW = 2  # cpu

INITIAL_INTERVAL_MS = 800
MIN_INTERVAL_MS = 100
INTERVAL_STEP_MS = 100
WIN_POINTS = 100

FORK_MIN_LEVEL = 3

COLUMN_PREFERENCES: tuple[tuple[int, ...], ...] = (
    (3, 2, 4, 1, 5, 0, 6),
    (3, 4, 2, 5, 1, 6, 0),
    (3, 2, 4, 1, 5, 0, 6),
    (3, 4, 2, 1, 5, 0, 6),
)

Board = list[list[int]]


def empty_board() -> Board:
    return [[EMPTY] * COLS for _ in range(ROWS)]


def is_valid_move(board: Board, col: int) -> bool:
    return 0 <= col < len(board[0]) and board[0][col] == EMPTY


def legal_columns(board: Board) -> list[int]:
    return [c for c in range(len(board[0])) if is_valid_move(board, c)]


def drop(board: Board, col: int, colour: int) -> int:
    """Place a disc in `col` (in place); returns the row it landed on."""

    for row in range(len(board) - 1, -1, -1):
        if board[row][col] == EMPTY:
            board[row][col] = colour
            return row
    raise ValueError(f"Column {col} is full")


def dropped(board: Board, col: int, colour: int) -> Board:
    copy = [row[:] for row in board]
    drop(copy, col, colour)
    return copy


def check_win(board: Board, colour: int) -> bool:
    rows, cols = len(board), len(board[0])
    for r in range(rows):
        for c in range(cols):
            for dr, dc in ((0, 1), (1, 0), (1, 1), (-1, 1)):
                end_r = r + dr * (WIN_LENGTH - 1)
                end_c = c + dc * (WIN_LENGTH - 1)
                if not (0 <= end_r < rows and 0 <= end_c < cols):
                    continue
                if all(board[r + dr * i][c + dc * i] == colour for i in range(WIN_LENGTH)):
                    return True
    return False


def is_full(board: Board) -> bool:
    return not legal_columns(board)


def winning_columns(board: Board, colour: int) -> list[int]:
    return [c for c in legal_columns(board) if check_win(dropped(board, c, colour), colour)]


def find_winning_move(board: Board, colour: int) -> int | None:
    wins = winning_columns(board, colour)
    return wins[0] if wins else None


def fork_threshold(level: int) -> int:
    return 2 if level > 5 else 1


def find_fork(board: Board, colour: int, *, level: int) -> int | None:
    """Column whose drop leaves `colour` the most immediate wins, if that clears the level's threshold."""

    if level < FORK_MIN_LEVEL:
        return None
    threshold = fork_threshold(level)
    best: tuple[int, int] | None = None
    for col in legal_columns(board):
        threats = len(winning_columns(dropped(board, col, colour), colour))
        if threats < threshold:
            continue
        if best is None or threats > best[0]:
            best = (threats, col)
    return None if best is None else best[1]


@dataclass(frozen=True, slots=True)
class CpuView:
    board: Board
    level: int
    rng: random.Random


def _win(view: CpuView) -> int | None:
    return find_winning_move(view.board, YELLOW)


def _block(view: CpuView) -> int | None:
    return find_winning_move(view.board, RED)


def _fork(view: CpuView) -> int | None:
    return find_fork(view.board, YELLOW, level=view.level)


def _block_fork(view: CpuView) -> int | None:
    return find_fork(view.board, RED, level=view.level)


def _preferred(view: CpuView) -> int | None:
    order = COLUMN_PREFERENCES[min(view.level - 1, len(COLUMN_PREFERENCES) - 1)]
    for col in order:
        if is_valid_move(view.board, col):
            return col
    return None


def _random(view: CpuView) -> int | None:
    cols = legal_columns(view.board)
    return view.rng.choice(cols) if cols else None


CPU_STRATEGIES = (_win, _block, _fork, _block_fork, _preferred, _random)


def choose_cpu_column(board: Board, *, level: int, rng: random.Random) -> int | None:
    view = CpuView(board=board, level=level, rng=rng)
    return first_match(CPU_STRATEGIES, view, accept=lambda col: is_valid_move(board, col))


@dataclass(slots=True)
class ConnectFourWorld:
    board: Board
    turn: int = RED


class ConnectFourSimulation(Simulation):
    game_id = 5
    name = "connect_four"
    initial_interval_ms = INITIAL_INTERVAL_MS

    world: ConnectFourWorld

    def _reset_world(self) -> None:
        self.world = ConnectFourWorld(board=empty_board())

    def _on_level_advanced(self) -> None:
        self.world = ConnectFourWorld(board=empty_board())
        self.tick_interval_ms = max(MIN_INTERVAL_MS, INITIAL_INTERVAL_MS - self.level * INTERVAL_STEP_MS)

    def _step(self, inp: TickInput, effects: Effects) -> None:
        w = self.world
        if w.turn == RED:
            if inp.column is None or not is_valid_move(w.board, inp.column):
                return
            row = drop(w.board, inp.column, RED)
            effects.emit("DISC_DROPPED", colour="red", row=row, column=inp.column)
            if check_win(w.board, RED):
                self._award(effects, WIN_POINTS * self.level, winner="red")
                self._clear_level(effects)
                return
            if is_full(w.board):
                self._finish(effects, reason="draw")
                return
            w.turn = YELLOW
            return

        col = choose_cpu_column(w.board, level=self.level, rng=self.rng)
        if col is None:
            self._finish(effects, reason="draw")
            return
        row = drop(w.board, col, YELLOW)
        effects.emit("DISC_DROPPED", colour="yellow", row=row, column=col)
        logger.debug("connect_four: cpu dropped in column %d", col)
        if check_win(w.board, YELLOW):
            self._finish(effects, reason="cpu_won")
            return
        if is_full(w.board):
            self._finish(effects, reason="draw")
            return
        w.turn = RED

    def _check_invariants(self) -> None:
        board = self.world.board
        if len(board) != ROWS or any(len(row) != COLS for row in board):
            raise InvariantViolation("board has wrong shape")
        for c in range(COLS):
            seen_empty_below = False
            for r in range(ROWS - 1, -1, -1):
                if board[r][c] == EMPTY:
                    seen_empty_below = True
                elif seen_empty_below:
                    raise InvariantViolation(f"floating disc at row {r}, column {c}")
