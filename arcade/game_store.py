from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Literal

import redis

from arcade.api.models import GameDetail, GameMessage, GameRecord, HighScoreEntry
from arcade.catalog import CATALOG, CatalogEntry
from arcade.errors import GameNotFoundError, ValidationError
from arcade.lock import game_lock
from arcade.streams import MessageBoard, delete_message, list_messages, post_message

logger = logging.getLogger(__name__)

GAMES_SET_KEY = "arcade:games"
GAME_KEY_PREFIX = "arcade:game:"  # + {id}
BEST_KEY_PREFIX = "arcade:best:"  # + {id}; hash user -> best score

LEADERBOARD_SIZE = 10

Interaction = Literal["likes", "dislikes"]
_OPPOSITE: dict[str, Interaction] = {"likes": "dislikes", "dislikes": "likes"}


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _game_key(game_id: int) -> str:
    return f"{GAME_KEY_PREFIX}{game_id}"


def _best_key(game_id: int) -> str:
    return f"{BEST_KEY_PREFIX}{game_id}"


def save_game(*, r: redis.Redis, game: GameRecord) -> None:
    r.set(_game_key(game.id), game.model_dump_json())
    r.sadd(GAMES_SET_KEY, str(game.id))


def get_game(*, r: redis.Redis, game_id: int) -> GameRecord | None:
    raw = r.get(_game_key(game_id))
    if not raw:
        return None
    return GameRecord.model_validate_json(raw)


def require_game(*, r: redis.Redis, game_id: int) -> GameRecord:
    game = get_game(r=r, game_id=game_id)
    if game is None:
        raise GameNotFoundError()
    return game


def list_games(*, r: redis.Redis) -> list[GameRecord]:
    ids = sorted(int(i) for i in r.smembers(GAMES_SET_KEY))
    games: list[GameRecord] = []
    for gid in ids:
        game = get_game(r=r, game_id=gid)
        if game is not None:
            games.append(game)
    return games


def seed_catalog(*, r: redis.Redis, entries: tuple[CatalogEntry, ...] = CATALOG) -> list[str]:
    """Insert catalog games missing by name. Existing documents are left untouched.

    Returns the names that were inserted.
    """

    existing = {g.name for g in list_games(r=r)}
    inserted: list[str] = []
    for entry in entries:
        if entry.name in existing:
            continue
        save_game(r=r, game=GameRecord(id=entry.id, name=entry.name, description=entry.description))
        inserted.append(entry.name)

    if inserted:
        logger.info("Seeded %d new games: %s", len(inserted), ", ".join(inserted))
    else:
        logger.info("There are no new games to insert")
    return inserted


def get_game_detail(*, r: redis.Redis, game_id: int) -> GameDetail:
    game = require_game(r=r, game_id=game_id)
    messages = list_messages(r=r, board=MessageBoard(game_id=game_id))
    return GameDetail(**game.model_dump(), messages=messages)


def toggle_interaction(
    *,
    r: redis.Redis,
    game_id: int,
    user_id: str,
    interaction: Interaction,
    lock_ttl_ms: int = 5_000,
) -> GameRecord:
    """Toggle a like or dislike; setting one always clears the other."""

    if interaction not in _OPPOSITE:
        raise ValidationError(f"Unknown interaction: {interaction}")

    with game_lock(r=r, game_id=game_id, ttl_ms=lock_ttl_ms):
        game = require_game(r=r, game_id=game_id)
        chosen: list[str] = getattr(game, interaction)
        opposite: list[str] = getattr(game, _OPPOSITE[interaction])

        if user_id in opposite:
            opposite.remove(user_id)
        if user_id in chosen:
            chosen.remove(user_id)
        else:
            chosen.append(user_id)

        save_game(r=r, game=game)
        return game


def submit_score(
    *,
    r: redis.Redis,
    game_id: int,
    user_id: str,
    score: int,
    username: str | None = None,
    avatar: str | None = None,
    lock_ttl_ms: int = 5_000,
) -> GameRecord:
    """Record a score: each user keeps only their best; the board holds the top 10."""

    if score < 0:
        raise ValidationError("Score must be non-negative")

    with game_lock(r=r, game_id=game_id, ttl_ms=lock_ttl_ms):
        game = require_game(r=r, game_id=game_id)

        best = r.hget(_best_key(game_id), user_id)
        best_score = score if best is None else max(score, int(best))
        if best_score == score:
            r.hset(_best_key(game_id), user_id, str(score))

        by_user = {e.user: e for e in game.highscores}
        current = by_user.get(user_id)
        # A user returning to the board comes back with their recorded best.
        if current is None or best_score > current.score:
            by_user[user_id] = HighScoreEntry(
                user=user_id,
                score=best_score,
                username=username or (current.username if current else None),
                avatar=avatar or (current.avatar if current else None),
            )

        game.highscores = sorted(by_user.values(), key=lambda e: e.score, reverse=True)[:LEADERBOARD_SIZE]
        save_game(r=r, game=game)
        return game


def get_high_score(*, r: redis.Redis, game_id: int, user_id: str) -> int:
    game = require_game(r=r, game_id=game_id)
    best = r.hget(_best_key(game_id), user_id)
    if best is not None:
        return int(best)
    for entry in game.highscores:
        if entry.user == user_id:
            return entry.score
    return 0


def add_message(*, r: redis.Redis, game_id: int, user_id: str, text: str) -> GameMessage:
    require_game(r=r, game_id=game_id)
    if not text.strip():
        raise ValidationError("Message text is required")
    return post_message(r=r, board=MessageBoard(game_id=game_id), user=user_id, text=text.strip(), at=_now())


def remove_message(*, r: redis.Redis, game_id: int, user_id: str, timestamp: datetime) -> GameMessage:
    require_game(r=r, game_id=game_id)
    return delete_message(r=r, board=MessageBoard(game_id=game_id), user=user_id, timestamp=timestamp)
