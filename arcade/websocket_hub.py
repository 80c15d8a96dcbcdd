from __future__ import annotations

import asyncio
import logging
from collections import defaultdict

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class GameWebSocketHub:
    """In-process WebSocket fan-out keyed by catalog game id.

    Subscribers get a small `{type, game_id}` notice whenever a game's likes,
    scores or messages change, and re-fetch over REST.
    """

    def __init__(self) -> None:
        self._by_game: dict[int, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def connect(self, game_id: int, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._by_game[game_id].add(websocket)

    async def disconnect(self, game_id: int, websocket: WebSocket) -> None:
        async with self._lock:
            conns = self._by_game.get(game_id)
            if not conns:
                return
            conns.discard(websocket)
            if not conns:
                self._by_game.pop(game_id, None)

    async def broadcast(self, game_id: int, payload: dict[str, object]) -> None:
        async with self._lock:
            conns = list(self._by_game.get(game_id, set()))

        if not conns:
            return

        dead: list[WebSocket] = []
        for ws in conns:
            try:
                await ws.send_json(payload)
            except Exception:
                logger.debug("Dropping dead websocket for game %s", game_id, exc_info=True)
                dead.append(ws)

        if dead:
            async with self._lock:
                for ws in dead:
                    self._by_game.get(game_id, set()).discard(ws)

    async def notify(self, game_id: int, event: str) -> None:
        await self.broadcast(game_id, {"type": event, "game_id": game_id})


hub = GameWebSocketHub()
