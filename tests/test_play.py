from __future__ import annotations

import pytest

from arcade import play
from arcade.core.simulation import Direction
from arcade.fsm import SessionPhase
from arcade.games.snake import SnakeSimulation, SnakeWorld
from arcade.play import play_session
from arcade.score_bridge import PlayerProfile
from arcade.session import GameSession
from arcade.settings import Settings


class _RecordingService:
    def __init__(self, base_url: str = "", *, timeout_s: float = 0.0) -> None:
        self.base_url = base_url
        self.timeout_s = timeout_s
        self.loads = 0
        self.submitted: list[tuple[str, int, int, PlayerProfile]] = []
        self.closed = False

    async def get_high_score(self, game_id: int, user_id: str) -> int:
        self.loads += 1
        return 10

    async def submit_score(self, user_id: str, game_id: int, score: int, profile: PlayerProfile) -> None:
        self.submitted.append((user_id, game_id, score, profile))

    async def aclose(self) -> None:
        self.closed = True


def _doomed_snake() -> SnakeSimulation:
    sim = SnakeSimulation(seed=1)
    sim.world = SnakeWorld(body=[(5, 5), (6, 5), (6, 6), (5, 6), (4, 6)], direction=Direction.left, food=(20, 20))
    sim.score = 30
    sim.tick_interval_ms = 1
    return sim


async def _turn_into_the_body(session: GameSession) -> None:
    session.press(direction="down")


def _settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "redis_url": "redis://localhost:6379/15",
        "api_url": "http://arcade.test/api",
        "log_level": "INFO",
        "level_advance_delay_s": 0.01,
        "score_timeout_s": 1.0,
        "lock_ttl_ms": 1_000,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.mark.asyncio
async def test_round_plays_to_game_over_and_submits_the_new_best() -> None:
    svc = _RecordingService()
    profile = PlayerProfile(username="ada")

    session = await play_session(
        _doomed_snake(),
        user_id="u1",
        profile=profile,
        service=svc,
        settings=_settings(),
        driver=_turn_into_the_body,
        timeout_s=2,
    )

    assert session.phase == SessionPhase.game_over
    assert svc.loads == 1
    assert svc.submitted == [("u1", 1, 30, profile)]
    assert session.high_score == 30
    # a caller-supplied service stays open
    assert not svc.closed


@pytest.mark.asyncio
async def test_timeout_stops_an_unfinished_round_without_submitting() -> None:
    sim = SnakeSimulation(seed=1)
    sim.tick_interval_ms = 10_000
    svc = _RecordingService()

    session = await play_session(sim, user_id="u1", service=svc, settings=_settings(), timeout_s=0.05)

    assert session.phase == SessionPhase.playing
    assert sim.tick_count == 0
    assert svc.submitted == []


@pytest.mark.asyncio
async def test_default_service_uses_the_configured_api(monkeypatch: pytest.MonkeyPatch) -> None:
    built: list[_RecordingService] = []

    def _build(base_url: str, *, timeout_s: float) -> _RecordingService:
        svc = _RecordingService(base_url, timeout_s=timeout_s)
        built.append(svc)
        return svc

    monkeypatch.setattr(play, "HttpScoreService", _build)
    monkeypatch.setenv("ARCADE_API_URL", "http://scores.test/api/")
    monkeypatch.setenv("ARCADE_SCORE_TIMEOUT_S", "2.5")
    monkeypatch.setenv("ARCADE_LEVEL_ADVANCE_DELAY_S", "0.01")

    session = await play_session(_doomed_snake(), user_id="u7", driver=_turn_into_the_body, timeout_s=2)

    (svc,) = built
    assert (svc.base_url, svc.timeout_s) == ("http://scores.test/api", 2.5)
    assert svc.submitted[0][:3] == ("u7", 1, 30)
    assert svc.closed
    assert session.phase == SessionPhase.game_over
