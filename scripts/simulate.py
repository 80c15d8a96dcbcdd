"""Run a game headless with a random-input bot and print what happened.

Usage:
    uv run python scripts/simulate.py tetris --ticks 2000 --seed 7
    uv run python scripts/simulate.py connect_four --seed 3
    uv run python scripts/simulate.py snake --realtime --seconds 20 --user-id u1 --username ada

By default ticks run back to back (no sleeping); level advances are applied
immediately. Same game + seed + ticks always gives the same result.

With --realtime the game runs on the tick scheduler at its own speed and a new
best score is submitted to the API at ARCADE_API_URL.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
from collections import Counter

from arcade.core.simulation import Direction
from arcade.games.registry import create_simulation, game_names
from arcade.play import play_session
from arcade.score_bridge import PlayerProfile
from arcade.session import GameSession

logger = logging.getLogger("simulate")


def _bot_press(session: GameSession, rng: random.Random) -> None:
    roll = rng.random()
    if roll < 0.15:
        session.press(direction=rng.choice(list(Direction)))
    elif roll < 0.2:
        session.release_direction()
    if rng.random() < 0.2:
        session.press(fire=True)
    if rng.random() < 0.1:
        session.press(rotate=True)
    session.press(column=rng.randrange(7))


def _summary(session: GameSession) -> dict[str, object]:
    sim = session.simulation
    return {
        "game": sim.name,
        "seed": sim.seed,
        "ticks": sim.tick_count,
        "score": sim.score,
        "level": sim.level,
        "phase": session.phase.value,
        "reason": sim.terminal_reason,
    }


def run(game: str, *, ticks: int, seed: int) -> dict[str, object]:
    sim = create_simulation(game, seed=seed)
    session = GameSession(sim)
    session.start()
    bot = random.Random(seed)
    events: Counter[str] = Counter()

    for _ in range(ticks):
        _bot_press(session, bot)
        effects = session.step()
        if effects is None:
            break
        events.update(e.type for e in effects.events)
        if effects.level_cleared:
            session.advance_level()
        if effects.game_over:
            break

    return {**_summary(session), "events": dict(events)}


async def run_realtime(
    game: str,
    *,
    seed: int,
    seconds: float,
    user_id: str | None,
    username: str | None,
) -> dict[str, object]:
    bot = random.Random(seed)

    async def drive(session: GameSession) -> None:
        while True:
            _bot_press(session, bot)
            await asyncio.sleep(session.tick_interval_ms / 1000)

    session = await play_session(
        create_simulation(game, seed=seed),
        user_id=user_id,
        profile=PlayerProfile(username=username),
        driver=drive,
        timeout_s=seconds,
    )
    return {**_summary(session), "best": session.high_score}


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("game", choices=game_names())
    parser.add_argument("--ticks", type=int, default=1000)
    parser.add_argument("--seed", type=int, default=1)
    parser.add_argument("--realtime", action="store_true", help="run on the tick scheduler and submit scores")
    parser.add_argument("--seconds", type=float, default=60.0, help="real-time round limit")
    parser.add_argument("--user-id", default=None, help="player id for score load/submit")
    parser.add_argument("--username", default=None)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    if args.realtime:
        result = asyncio.run(
            run_realtime(
                args.game,
                seed=args.seed,
                seconds=args.seconds,
                user_id=args.user_id,
                username=args.username,
            )
        )
    else:
        result = run(args.game, ticks=args.ticks, seed=args.seed)
    for key, value in result.items():
        print(f"{key:>7}: {value}")


if __name__ == "__main__":
    main()
