from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Domain error carrying the HTTP status and a stable machine-readable code."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    default_message: str = "Something went wrong on our end. Please try again later."

    def __init__(self, message: str | None = None, *, errors: dict[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    error_code = "VALIDATION_ERROR"
    default_message = "There was a problem with your input"


class NotFoundError(AppError):
    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Resource not found"


class GameNotFoundError(NotFoundError):
    error_code = "GAME_NOT_FOUND"
    default_message = "Game not found"


class MessageNotFoundError(NotFoundError):
    error_code = "MESSAGE_NOT_FOUND"
    default_message = "Message not found"


class ConflictError(AppError):
    status_code = 409
    error_code = "CONFLICT"
    default_message = "Conflict"


class GameBusyError(ConflictError):
    error_code = "GAME_BUSY"
    default_message = "Game is busy, try again"
