from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from arcade.core.geometry import Box, clamp, distance, overlaps
from arcade.core.simulation import Direction, Effects, InvariantViolation, Simulation, TickInput

logger = logging.getLogger(__name__)

WIDTH = 21.0
HEIGHT = 21.0
TUNNEL_ROW = 10

INITIAL_INTERVAL_MS = 100
MIN_INTERVAL_MS = 30
INTERVAL_STEP_MS = 20

PLAYER_WIDTH = 1.6
PLAYER_HEIGHT = 0.8
PLAYER_SPEED = 0.32
PLAYER_Y = HEIGHT - 1.0
PLAYER_HIT_INSET = 0.2

BULLET_WIDTH = 0.2
BULLET_HEIGHT = 0.4
BULLET_SPEED = 0.4

BUBBLE_BASE_SPEED = 0.05
BUBBLE_SPAWN_ROW = 1
SPAWN_EVERY_MS = 2000
SPLIT_OFFSET = 0.5

SPLIT_POINTS = {3: 50, 2: 75, 1: 100}


@dataclass(slots=True)
class Bubble:
    x: float
    y: float
    size: int
    dx: float
    dy: float

    @property
    def box(self) -> Box:
        return Box.at(self.x, self.y, self.size, self.size)


@dataclass(slots=True)
class Bullet:
    x: float
    y: float

    @property
    def box(self) -> Box:
        return Box.at(self.x, self.y, BULLET_WIDTH, BULLET_HEIGHT)


@dataclass(slots=True)
class Player:
    x: float

    @property
    def box(self) -> Box:
        return Box.at(self.x, PLAYER_Y, PLAYER_WIDTH, PLAYER_HEIGHT)


@dataclass(slots=True)
class PangWorld:
    player: Player
    bubbles: list[Bubble] = field(default_factory=list)
    bullets: list[Bullet] = field(default_factory=list)
    next_spawn_ms: int = SPAWN_EVERY_MS


def _damping(rng: random.Random) -> float:
    return 0.9 + rng.random() * 0.2


def bubble_speed_factor(size: int, level: int) -> float:
    return BUBBLE_BASE_SPEED * (1 + (3 - size) * 0.2) * (1 + level * 0.1)


def move_bubble(b: Bubble, *, level: int, rng: random.Random) -> None:
    factor = bubble_speed_factor(b.size, level)
    x = b.x + b.dx * factor
    y = b.y + b.dy * factor
    max_x = WIDTH - b.size
    max_y = HEIGHT - b.size

    if x <= 0 or x >= max_x:
        if int(b.y) == TUNNEL_ROW:
            x = max_x if x <= 0 else 0.0
        else:
            b.dx = -b.dx * _damping(rng)
            x = clamp(x, 0.0, max_x)

    if y <= 0 or y >= max_y:
        b.dy = -b.dy * _damping(rng)
        y = clamp(y, 0.0, max_y)

    b.x, b.y = x, y


def split_bubble(b: Bubble, rng: random.Random) -> list[Bubble]:
    """Children of a popped bubble: two smaller ones heading apart, or none for the smallest size."""

    if b.size <= 1:
        return []
    size = b.size - 1
    children = []
    for sign in (-1, 1):
        children.append(
            Bubble(
                x=clamp(b.x + sign * SPLIT_OFFSET, 0.0, WIDTH - size),
                y=clamp(b.y, 0.0, HEIGHT - size),
                size=size,
                dx=sign * (0.5 + rng.random()),
                dy=0.5 + rng.random() * 0.5,
            )
        )
    return children


def closest_hit(bullet: Bullet, bubbles: list[Bubble], *, skip: set[int]) -> int | None:
    """Index of the bubble this bullet pops: nearest centre wins, lowest index on ties."""

    bx, by = bullet.box.center
    best: tuple[float, int] | None = None
    for i, b in enumerate(bubbles):
        if i in skip or not overlaps(bullet.box, b.box):
            continue
        cx, cy = b.box.center
        key = (distance(bx, by, cx, cy), i)
        if best is None or key < best:
            best = key
    return None if best is None else best[1]


class PangSimulation(Simulation):
    game_id = 4
    name = "super_pang"
    initial_interval_ms = INITIAL_INTERVAL_MS

    world: PangWorld

    def _reset_world(self) -> None:
        self.world = PangWorld(player=Player(x=WIDTH / 2 - PLAYER_WIDTH / 2))
        self._populate()

    def _populate(self) -> None:
        self.world.bubbles = [
            self._random_bubble(y=BUBBLE_SPAWN_ROW + self.rng.randrange(3)) for _ in range(3 + self.level)
        ]
        self.world.next_spawn_ms = self.elapsed_ms + SPAWN_EVERY_MS

    def _random_bubble(self, *, y: float) -> Bubble:
        size = self.rng.choice((1, 2, 3))
        return Bubble(
            x=float(min(self.rng.randrange(int(WIDTH)), WIDTH - size)),
            y=float(y),
            size=size,
            dx=self.rng.choice((-1, 1)) * (0.5 + self.rng.random()),
            dy=0.5 + self.rng.random() * 0.5,
        )

    def _on_level_advanced(self) -> None:
        self.world = PangWorld(player=Player(x=WIDTH / 2 - PLAYER_WIDTH / 2))
        self._populate()
        self.tick_interval_ms = max(INITIAL_INTERVAL_MS - self.level * INTERVAL_STEP_MS, MIN_INTERVAL_MS)

    def _step(self, inp: TickInput, effects: Effects) -> None:
        w = self.world

        if inp.direction == Direction.left:
            w.player.x = max(w.player.x - PLAYER_SPEED, 0.0)
        elif inp.direction == Direction.right:
            w.player.x = min(w.player.x + PLAYER_SPEED, WIDTH - PLAYER_WIDTH)

        if inp.fire:
            w.bullets.append(Bullet(x=w.player.x + PLAYER_WIDTH / 2 - BULLET_WIDTH / 2, y=PLAYER_Y - BULLET_HEIGHT))

        for bullet in w.bullets:
            bullet.y -= BULLET_SPEED
        w.bullets = [b for b in w.bullets if b.y > 0]

        for bubble in w.bubbles:
            move_bubble(bubble, level=self.level, rng=self.rng)

        self._pop_bubbles(effects)

        if self.elapsed_ms >= w.next_spawn_ms:
            w.next_spawn_ms = self.elapsed_ms + SPAWN_EVERY_MS
            if len(w.bubbles) < 10 + self.level * 2:
                w.bubbles.append(self._random_bubble(y=BUBBLE_SPAWN_ROW))

        hit_box = w.player.box.inset(PLAYER_HIT_INSET, 0.0)
        for b in w.bubbles:
            shrink = b.size * 0.1
            if overlaps(hit_box, b.box.inset(shrink, shrink + 0.2)):
                self._finish(effects, reason="hit_by_bubble")
                return

        if not w.bubbles:
            self._clear_level(effects)

    def _pop_bubbles(self, effects: Effects) -> None:
        w = self.world
        popped: set[int] = set()
        children: list[Bubble] = []
        spent: list[Bullet] = []

        for bullet in w.bullets:
            idx = closest_hit(bullet, w.bubbles, skip=popped)
            if idx is None:
                continue
            popped.add(idx)
            spent.append(bullet)
            bubble = w.bubbles[idx]
            kids = split_bubble(bubble, self.rng)
            children.extend(kids)
            self._award(effects, SPLIT_POINTS[bubble.size], size=bubble.size)
            if kids:
                effects.emit("BUBBLE_SPLIT", size=bubble.size)

        if not popped:
            return
        w.bullets = [b for b in w.bullets if not any(b is s for s in spent)]
        w.bubbles = [b for i, b in enumerate(w.bubbles) if i not in popped] + children

    def _check_invariants(self) -> None:
        w = self.world
        if not (0 <= w.player.x <= WIDTH - PLAYER_WIDTH):
            raise InvariantViolation(f"player x={w.player.x} outside field")
        for b in w.bubbles:
            if not (0 <= b.x <= WIDTH - b.size and 0 <= b.y <= HEIGHT - b.size):
                raise InvariantViolation(f"bubble at ({b.x:.2f},{b.y:.2f}) size {b.size} outside field")
        for bullet in w.bullets:
            if not (0 < bullet.y <= HEIGHT and 0 <= bullet.x <= WIDTH):
                raise InvariantViolation(f"bullet at ({bullet.x:.2f},{bullet.y:.2f}) outside field")
