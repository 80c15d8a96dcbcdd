from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field

from arcade.core.geometry import Box, bounce_axis, clamp, overlaps
from arcade.core.simulation import Direction, Effects, InvariantViolation, Simulation, TickInput

logger = logging.getLogger(__name__)

WIDTH = 21
HEIGHT = 24
INITIAL_INTERVAL_MS = 30
MIN_INTERVAL_MS = 15
INTERVAL_STEP_MS = 3

PADDLE_WIDTH = 5
PADDLE_HEIGHT = 0.5
PADDLE_Y = HEIGHT - 2
PADDLE_STEP = 1

BALL_RADIUS = 0.4
BALL_SPEED = 0.3
BALL_START = (WIDTH / 2, HEIGHT - 3)
MAX_DEFLECTION = 0.8

BRICK_TOP = 2


@dataclass(slots=True)
class Brick:
    x: int
    y: int
    width: int = 1
    points: int = 0

    @property
    def box(self) -> Box:
        return Box.at(self.x, self.y, self.width, 1)


@dataclass(slots=True)
class Ball:
    x: float
    y: float
    dx: float
    dy: float

    @property
    def box(self) -> Box:
        return Box(
            left=self.x - BALL_RADIUS,
            top=self.y - BALL_RADIUS,
            right=self.x + BALL_RADIUS,
            bottom=self.y + BALL_RADIUS,
        )


@dataclass(slots=True)
class Paddle:
    x: int

    @property
    def box(self) -> Box:
        return Box.at(self.x, PADDLE_Y, PADDLE_WIDTH, PADDLE_HEIGHT)


@dataclass(slots=True)
class ArkanoidWorld:
    paddle: Paddle
    ball: Ball
    bricks: list[Brick] = field(default_factory=list)
    pattern: str = "classic"


def brick_points(row: int) -> int:
    return (5 - row % 5) * 10


# ---- brick patterns; each yields (x, row, width) with row counted from the first brick row ----


def _classic(width: int, rng: random.Random) -> list[tuple[int, int, int]]:
    return [(col + 1, row, 1) for row in range(5) for col in range(width - 2)]


def _zigzag(width: int, rng: random.Random) -> list[tuple[int, int, int]]:
    out = []
    for row in range(6):
        start = 1 if row % 2 == 0 else 2
        out.extend((col, row, 1) for col in range(start, width - 2, 2))
    return out


def _pyramid(width: int, rng: random.Random) -> list[tuple[int, int, int]]:
    center = width // 2
    out = []
    for row in range(5):
        cols = row + 1
        start = center - cols // 2
        out.extend((col, row, 1) for col in range(start, start + cols) if 1 <= col < width - 1)
    return out


def _frame(width: int, rng: random.Random) -> list[tuple[int, int, int]]:
    rows = 6
    return [
        (col, row, 1)
        for row in range(rows)
        for col in range(1, width - 1)
        if row in (0, rows - 1) or col in (1, width - 2)
    ]


def _random(width: int, rng: random.Random) -> list[tuple[int, int, int]]:
    rows = 3 + rng.randrange(4)
    density = 0.4 + rng.random() * 0.3
    out = []
    for row in range(rows):
        col = 1
        while col < width - 1:
            if rng.random() < density:
                w = 2 if rng.random() < 0.3 else 1
                if col + w <= width - 1:
                    out.append((col, row, w))
                    col += w
                    continue
            col += 1
    return out


PATTERNS = (
    ("classic", _classic),
    ("zigzag", _zigzag),
    ("pyramid", _pyramid),
    ("frame", _frame),
    ("random", _random),
)


def build_bricks(level: int, rng: random.Random) -> tuple[str, list[Brick]]:
    name, pattern = PATTERNS[min(level - 1, len(PATTERNS) - 1)]
    bricks = [
        Brick(x=x, y=row + BRICK_TOP, width=w, points=brick_points(row))
        for x, row, w in pattern(WIDTH, rng)
    ]
    return name, bricks


def paddle_reflection(ball_x: float, paddle_x: float, *, speed: float = BALL_SPEED) -> tuple[float, float]:
    """New (dx, dy) for a ball meeting the paddle at `ball_x`; centre hits go straight up."""

    hit = (ball_x - paddle_x) / PADDLE_WIDTH
    factor = clamp((hit - 0.5) * 2, -1.0, 1.0)
    dx = factor * speed * MAX_DEFLECTION
    dy = -math.sqrt(speed**2 - dx**2)
    return dx, dy


def _serve(rng: random.Random) -> Ball:
    sign = rng.choice((-1, 1))
    # 3-4-5 split keeps the serve at exactly BALL_SPEED
    return Ball(x=BALL_START[0], y=BALL_START[1], dx=sign * BALL_SPEED * 0.6, dy=-BALL_SPEED * 0.8)


class ArkanoidSimulation(Simulation):
    game_id = 6
    name = "arkanoid"
    initial_interval_ms = INITIAL_INTERVAL_MS

    world: ArkanoidWorld

    def _reset_world(self) -> None:
        self._layout()

    def _layout(self) -> None:
        pattern, bricks = build_bricks(self.level, self.rng)
        self.world = ArkanoidWorld(
            paddle=Paddle(x=WIDTH // 2 - PADDLE_WIDTH // 2),
            ball=_serve(self.rng),
            bricks=bricks,
            pattern=pattern,
        )

    def _on_level_advanced(self) -> None:
        self._layout()
        self.tick_interval_ms = max(INITIAL_INTERVAL_MS - self.level * INTERVAL_STEP_MS, MIN_INTERVAL_MS)

    def _step(self, inp: TickInput, effects: Effects) -> None:
        w = self.world
        if inp.direction == Direction.left:
            w.paddle.x = max(w.paddle.x - PADDLE_STEP, 0)
        elif inp.direction == Direction.right:
            w.paddle.x = min(w.paddle.x + PADDLE_STEP, WIDTH - PADDLE_WIDTH)

        ball = w.ball
        x, y = ball.x + ball.dx, ball.y + ball.dy

        if x - BALL_RADIUS <= 0:
            ball.dx = abs(ball.dx)
            x = BALL_RADIUS
        if x + BALL_RADIUS >= WIDTH:
            ball.dx = -abs(ball.dx)
            x = WIDTH - BALL_RADIUS
        if y - BALL_RADIUS <= 0:
            ball.dy = abs(ball.dy)
            y = BALL_RADIUS

        if y + BALL_RADIUS >= HEIGHT:
            self._finish(effects, reason="ball_lost")
            return

        ball.x, ball.y = x, y

        paddle_box = w.paddle.box
        if ball.dy > 0 and (
            y + BALL_RADIUS >= paddle_box.top
            and y - BALL_RADIUS <= paddle_box.bottom
            and x + BALL_RADIUS >= paddle_box.left
            and x - BALL_RADIUS <= paddle_box.right
        ):
            ball.dx, ball.dy = paddle_reflection(x, w.paddle.x)
            ball.y = paddle_box.top - BALL_RADIUS

        self._hit_brick(effects)

    def _hit_brick(self, effects: Effects) -> None:
        w = self.world
        ball_box = w.ball.box
        for i, brick in enumerate(w.bricks):
            if not overlaps(ball_box, brick.box):
                continue
            if bounce_axis(ball_box, brick.box) == "x":
                w.ball.dx = -w.ball.dx
            else:
                w.ball.dy = -w.ball.dy
            del w.bricks[i]
            self._award(effects, brick.points, row=brick.y - BRICK_TOP)
            break

        if not w.bricks:
            self._clear_level(effects)

    def _check_invariants(self) -> None:
        w = self.world
        if not (0 <= w.paddle.x <= WIDTH - PADDLE_WIDTH):
            raise InvariantViolation(f"paddle x={w.paddle.x} outside field")
        b = w.ball
        if not (BALL_RADIUS <= b.x <= WIDTH - BALL_RADIUS and BALL_RADIUS <= b.y <= HEIGHT - BALL_RADIUS):
            raise InvariantViolation(f"ball at ({b.x:.2f},{b.y:.2f}) outside field")
