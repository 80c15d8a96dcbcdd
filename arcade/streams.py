from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import cast

import redis

from arcade.api.models import GameMessage
from arcade.errors import MessageNotFoundError

# Two timestamps closer than this refer to the same message.
MATCH_WINDOW_S = 1.0


@dataclass(frozen=True, slots=True)
class MessageBoard:
    game_id: int

    @property
    def key(self) -> str:
        return f"arcade:messages:{self.game_id}"


def _aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=UTC)


def _to_message(entry_id: str, fields: dict[str, str]) -> GameMessage:
    return GameMessage(
        id=entry_id,
        user=fields.get("user", ""),
        text=fields.get("text", ""),
        timestamp=datetime.fromisoformat(fields["timestamp"]),
    )


def post_message(*, r: redis.Redis, board: MessageBoard, user: str, text: str, at: datetime) -> GameMessage:
    """Append a message to the game's board stream."""

    fields = {"user": user, "text": text, "timestamp": _aware(at).isoformat()}
    entry_id = cast(str, r.xadd(board.key, fields))
    return _to_message(entry_id, fields)


def list_messages(*, r: redis.Redis, board: MessageBoard) -> list[GameMessage]:
    return [_to_message(entry_id, fields) for entry_id, fields in r.xrange(board.key)]


def delete_message(*, r: redis.Redis, board: MessageBoard, user: str, timestamp: datetime) -> GameMessage:
    """Remove the first message by `user` posted within a second of `timestamp`."""

    target = _aware(timestamp)
    for msg in list_messages(r=r, board=board):
        if msg.user != user:
            continue
        if abs((_aware(msg.timestamp) - target).total_seconds()) < MATCH_WINDOW_S:
            r.xdel(board.key, msg.id)
            return msg
    raise MessageNotFoundError()
