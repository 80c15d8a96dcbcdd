from __future__ import annotations

import random

Maze = tuple[tuple[int, ...], ...]

TUNNEL_ROW = 10

_CLASSIC = (
    "111111111111111111111",
    "100000000010000000001",
    "101101111010111101101",
    "101101111010111101101",
    "100000000000000000001",
    "101101011111110101101",
    "100001000010000100001",
    "111101111010111101111",
    "111101000000000101111",
    "111101011111110101111",
    "000000011111110000000",
    "111101011111110101111",
    "111101000000000101111",
    "111101011111110101111",
    "100000000010000000001",
    "101101111010111101101",
    "100100000000000001001",
    "110101011111110101011",
    "100001000010000100001",
    "101111111010111111101",
    "100000000000000000001",
    "111111111111111111111",
)

# Each variant opens extra passages in the classic maze; walls are never added.
_OPENINGS: tuple[tuple[tuple[int, int], ...], ...] = (
    ((10, 1), (10, 2), (10, 3), (10, 14), (10, 15)),
    ((3, 16), (17, 16), (5, 18), (15, 18)),
    ((2, 5), (3, 5), (17, 5), (18, 5), (5, 6), (15, 6)),
    ((10, 18), (10, 19), (5, 19), (15, 19), (2, 3), (18, 3)),
)


def _parse(rows: tuple[str, ...]) -> Maze:
    return tuple(tuple(int(c) for c in row) for row in rows)


def _open(base: Maze, cells: tuple[tuple[int, int], ...]) -> Maze:
    grid = [list(row) for row in base]
    for x, y in cells:
        grid[y][x] = 0
    return tuple(tuple(row) for row in grid)


CLASSIC = _parse(_CLASSIC)
LAYOUTS: tuple[Maze, ...] = (CLASSIC, *(_open(CLASSIC, cells) for cells in _OPENINGS))


def layout_index_for_level(level: int, *, previous: int | None, rng: random.Random) -> int:
    """Levels 1-5 walk the layouts in order; later levels pick any layout but the last one."""

    if level <= len(LAYOUTS):
        return level - 1
    choices = [i for i in range(len(LAYOUTS)) if i != previous]
    return rng.choice(choices)
