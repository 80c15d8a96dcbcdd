from __future__ import annotations

import redis
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from arcade.api.deps import get_redis, get_settings_dep
from arcade.api.models import (
    GameDetail,
    GameListResponse,
    GameMessage,
    GameRecord,
    HighScoreResponse,
    InteractionRequest,
    MessageCreateRequest,
    MessageDeleteRequest,
    ScoreSubmitRequest,
)
from arcade.game_store import (
    add_message,
    get_game_detail,
    get_high_score,
    list_games,
    remove_message,
    submit_score,
    toggle_interaction,
)
from arcade.settings import Settings
from arcade.websocket_hub import hub

router = APIRouter()


@router.websocket("/ws/games/{game_id}")
async def game_updates_ws(websocket: WebSocket, game_id: int) -> None:
    await hub.connect(game_id, websocket)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(game_id, websocket)
    except Exception:
        await hub.disconnect(game_id, websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/api/games", response_model=GameListResponse)
async def list_games_route(r: redis.Redis = Depends(get_redis)) -> GameListResponse:
    return GameListResponse(games=list_games(r=r))


@router.get("/api/games/{game_id}", response_model=GameDetail)
async def get_game_route(game_id: int, r: redis.Redis = Depends(get_redis)) -> GameDetail:
    return get_game_detail(r=r, game_id=game_id)


@router.post("/api/games/{game_id}/like", response_model=GameRecord)
async def like_game_route(
    game_id: int,
    payload: InteractionRequest,
    r: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings_dep),
) -> GameRecord:
    game = toggle_interaction(
        r=r, game_id=game_id, user_id=payload.user_id, interaction="likes", lock_ttl_ms=settings.lock_ttl_ms
    )
    await hub.notify(game_id, "game_updated")
    return game


@router.post("/api/games/{game_id}/dislike", response_model=GameRecord)
async def dislike_game_route(
    game_id: int,
    payload: InteractionRequest,
    r: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings_dep),
) -> GameRecord:
    game = toggle_interaction(
        r=r, game_id=game_id, user_id=payload.user_id, interaction="dislikes", lock_ttl_ms=settings.lock_ttl_ms
    )
    await hub.notify(game_id, "game_updated")
    return game


@router.post("/api/games/{game_id}/scores", response_model=GameRecord)
async def submit_score_route(
    game_id: int,
    payload: ScoreSubmitRequest,
    r: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings_dep),
) -> GameRecord:
    game = submit_score(
        r=r,
        game_id=game_id,
        user_id=payload.user_id,
        score=payload.score,
        username=payload.username,
        avatar=payload.avatar,
        lock_ttl_ms=settings.lock_ttl_ms,
    )
    await hub.notify(game_id, "scores_updated")
    return game


@router.get("/api/games/{game_id}/scores/{user_id}", response_model=HighScoreResponse)
async def get_high_score_route(game_id: int, user_id: str, r: redis.Redis = Depends(get_redis)) -> HighScoreResponse:
    return HighScoreResponse(high_score=get_high_score(r=r, game_id=game_id, user_id=user_id))


@router.post("/api/games/{game_id}/messages", response_model=GameMessage)
async def post_message_route(
    game_id: int,
    payload: MessageCreateRequest,
    r: redis.Redis = Depends(get_redis),
) -> GameMessage:
    msg = add_message(r=r, game_id=game_id, user_id=payload.user_id, text=payload.text)
    await hub.notify(game_id, "messages_updated")
    return msg


@router.delete("/api/games/{game_id}/messages", response_model=GameDetail)
async def delete_message_route(
    game_id: int,
    payload: MessageDeleteRequest,
    r: redis.Redis = Depends(get_redis),
) -> GameDetail:
    remove_message(r=r, game_id=game_id, user_id=payload.user_id, timestamp=payload.timestamp)
    await hub.notify(game_id, "messages_updated")
    return get_game_detail(r=r, game_id=game_id)

