from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    # Wire format is camelCase; Python code uses snake_case names.
    model_config = ConfigDict(populate_by_name=True)


class HighScoreEntry(_CamelModel):
    user: str
    score: int = Field(..., ge=0)
    username: str | None = None
    avatar: str | None = None


class GameMessage(_CamelModel):
    id: str
    user: str
    text: str
    timestamp: datetime


class GameRecord(_CamelModel):
    """Persisted catalog entry for one game (one JSON document in Redis)."""

    id: int
    name: str
    description: str = ""
    likes: list[str] = Field(default_factory=list)
    dislikes: list[str] = Field(default_factory=list)
    highscores: list[HighScoreEntry] = Field(default_factory=list)


class GameDetail(GameRecord):
    messages: list[GameMessage] = Field(default_factory=list)


class GameListResponse(BaseModel):
    games: list[GameRecord]


class InteractionRequest(_CamelModel):
    user_id: str = Field(..., alias="userId", min_length=1, max_length=128)


class ScoreSubmitRequest(_CamelModel):
    user_id: str = Field(..., alias="userId", min_length=1, max_length=128)
    score: int = Field(..., ge=0)
    username: str | None = Field(default=None, max_length=64)
    avatar: str | None = Field(default=None, max_length=512)


class HighScoreResponse(_CamelModel):
    high_score: int = Field(..., alias="highScore")


class MessageCreateRequest(_CamelModel):
    user_id: str = Field(..., alias="userId", min_length=1, max_length=128)
    text: str = Field(..., min_length=1, max_length=1000)


class MessageDeleteRequest(_CamelModel):
    user_id: str = Field(..., alias="userId", min_length=1, max_length=128)
    timestamp: datetime


class ErrorResponse(_CamelModel):
    success: bool = False
    status_code: int = Field(..., alias="statusCode")
    error_code: str = Field(..., alias="errorCode")
    message: str
    errors: dict[str, object] | None = None
