"""Tests for RiotApiClient request handling and endpoints."""

from __future__ import annotations

import asyncio
from types import TracebackType

import aiohttp
import pytest
from pytest import MonkeyPatch

from lp_recap.api_client.riot_client import RiotApiClient
from lp_recap.api_client.validation import ValidationError
from lp_recap.config import Settings
from lp_recap.exceptions import NotFound, RateLimited, Unauthorized, UpstreamError
from lp_recap.schemas.records import GameKind


class _StubLimiter:
    def __init__(self) -> None:
        self.acquires = 0
        self.drains = 0

    async def acquire(self, tokens: int = 1) -> float:
        self.acquires += tokens
        return 0.0

    async def drain(self) -> None:
        self.drains += 1


class _FakeResponse:
    def __init__(
        self,
        status: int,
        json_body: object | None = None,
        text_body: str = "",
        headers: dict | None = None,
    ) -> None:
        self.status = status
        self._json_body = json_body
        self._text_body = text_body
        self.headers = headers or {}

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        return False

    async def text(self) -> str:
        return self._text_body

    async def json(self) -> object | None:
        if isinstance(self._json_body, Exception):
            raise self._json_body
        return self._json_body


class _FakeSession:
    def __init__(self, responses: list[_FakeResponse | Exception]) -> None:
        self._responses = list(responses)
        self.calls: list[tuple[str, dict | None, dict | None]] = []

    def get(self, url: str, params: dict | None = None, headers: dict | None = None):
        self.calls.append((url, params, headers))
        if not self._responses:
            raise AssertionError("No more fake responses queued")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def limiter() -> _StubLimiter:
    return _StubLimiter()


@pytest.fixture
def sleeps(monkeypatch: MonkeyPatch) -> list[float]:
    recorded: list[float] = []

    async def _fake_sleep(delay: float) -> None:
        recorded.append(delay)

    monkeypatch.setattr(asyncio, "sleep", _fake_sleep)
    return recorded


def _client(
    settings: Settings,
    limiter: _StubLimiter,
    session: _FakeSession,
    monkeypatch: MonkeyPatch,
    **kwargs,
) -> RiotApiClient:
    client = RiotApiClient(
        api_key="league-key", rate_limiter=limiter, settings=settings, **kwargs
    )

    async def _fake_get_session() -> _FakeSession:
        return session

    monkeypatch.setattr(client, "_get_session", _fake_get_session)
    return client


class TestRequestRetries:
    """429 handling."""

    @pytest.mark.asyncio
    async def test_retries_after_429_then_succeeds(
        self,
        settings: Settings,
        limiter: _StubLimiter,
        sleeps: list[float],
        monkeypatch: MonkeyPatch,
    ) -> None:
        session = _FakeSession(
            [
                _FakeResponse(429, headers={"Retry-After": "2"}),
                _FakeResponse(200, json_body=["NA1_1", "NA1_2"]),
            ]
        )
        client = _client(settings, limiter, session, monkeypatch)

        ids = await client.get_match_ids("puuid", GameKind.LEAGUE)

        assert ids == ["NA1_1", "NA1_2"]
        assert sleeps == [2]
        assert limiter.acquires == 2
        assert limiter.drains == 1

    @pytest.mark.asyncio
    async def test_missing_retry_after_uses_default(
        self,
        settings: Settings,
        limiter: _StubLimiter,
        sleeps: list[float],
        monkeypatch: MonkeyPatch,
    ) -> None:
        session = _FakeSession([_FakeResponse(429), _FakeResponse(200, json_body=[])])
        client = _client(settings, limiter, session, monkeypatch)

        await client.get_match_ids("puuid", GameKind.LEAGUE)

        assert sleeps == [10]

    @pytest.mark.asyncio
    async def test_gives_up_after_retry_budget(
        self,
        limiter: _StubLimiter,
        sleeps: list[float],
        monkeypatch: MonkeyPatch,
    ) -> None:
        settings = Settings(_env_file=None, max_rate_limit_retries=2)
        session = _FakeSession(
            [_FakeResponse(429, headers={"Retry-After": "0"}) for _ in range(3)]
        )
        client = _client(settings, limiter, session, monkeypatch)

        with pytest.raises(RateLimited) as exc_info:
            await client.get_match("NA1_1")

        assert exc_info.value.status_code == 429
        assert len(session.calls) == 3
        assert len(sleeps) == 2


class TestErrorMapping:
    """HTTP and transport failures map onto application errors."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "error"),
        [(404, NotFound), (401, Unauthorized), (403, Unauthorized), (500, UpstreamError)],
    )
    async def test_status_codes(
        self,
        settings: Settings,
        limiter: _StubLimiter,
        monkeypatch: MonkeyPatch,
        status: int,
        error: type[Exception],
    ) -> None:
        session = _FakeSession([_FakeResponse(status, text_body="nope")])
        client = _client(settings, limiter, session, monkeypatch)

        with pytest.raises(error) as exc_info:
            await client.get_match("NA1_1")

        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    async def test_transport_error(
        self, settings: Settings, limiter: _StubLimiter, monkeypatch: MonkeyPatch
    ) -> None:
        session = _FakeSession([aiohttp.ClientConnectionError("reset")])
        client = _client(settings, limiter, session, monkeypatch)

        with pytest.raises(UpstreamError) as exc_info:
            await client.get_match("NA1_1")

        assert exc_info.value.status_code == 0

    @pytest.mark.asyncio
    async def test_timeout(
        self, settings: Settings, limiter: _StubLimiter, monkeypatch: MonkeyPatch
    ) -> None:
        session = _FakeSession([asyncio.TimeoutError()])
        client = _client(settings, limiter, session, monkeypatch)

        with pytest.raises(UpstreamError):
            await client.get_match("NA1_1")

    @pytest.mark.asyncio
    async def test_invalid_json(
        self, settings: Settings, limiter: _StubLimiter, monkeypatch: MonkeyPatch
    ) -> None:
        session = _FakeSession([_FakeResponse(200, json_body=ValueError("not json"))])
        client = _client(settings, limiter, session, monkeypatch)

        with pytest.raises(UpstreamError, match="Invalid JSON"):
            await client.get_match("NA1_1")

    @pytest.mark.asyncio
    async def test_schema_mismatch(
        self, settings: Settings, limiter: _StubLimiter, monkeypatch: MonkeyPatch
    ) -> None:
        session = _FakeSession([_FakeResponse(200, json_body={"metadata": {}})])
        client = _client(settings, limiter, session, monkeypatch)

        with pytest.raises(ValidationError) as exc_info:
            await client.get_match("NA1_1")

        assert "match-v5/match" in str(exc_info.value)
        assert exc_info.value.url.endswith("/lol/match/v5/matches/NA1_1")
        assert isinstance(exc_info.value, UpstreamError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"ids": []}, ["NA1_1", 2]])
    async def test_match_ids_must_be_a_list_of_strings(
        self,
        settings: Settings,
        limiter: _StubLimiter,
        monkeypatch: MonkeyPatch,
        body: object,
    ) -> None:
        session = _FakeSession([_FakeResponse(200, json_body=body)])
        client = _client(settings, limiter, session, monkeypatch)

        with pytest.raises(ValidationError, match="Expected a list of ids"):
            await client.get_match_ids("puuid", GameKind.LEAGUE)

    @pytest.mark.asyncio
    async def test_league_entries_must_be_a_list(
        self, settings: Settings, limiter: _StubLimiter, monkeypatch: MonkeyPatch
    ) -> None:
        session = _FakeSession([_FakeResponse(200, json_body={"queueType": "RANKED_TFT"})])
        client = _client(settings, limiter, session, monkeypatch)

        with pytest.raises(ValidationError, match="Expected a list for"):
            await client.get_league_entries("puuid", GameKind.TFT)


class TestEndpoints:
    """Routing, keys and query parameters."""

    @pytest.mark.asyncio
    async def test_account_by_riot_id(
        self, settings: Settings, limiter: _StubLimiter, monkeypatch: MonkeyPatch
    ) -> None:
        session = _FakeSession(
            [_FakeResponse(200, json_body={"puuid": "p", "gameName": "A B", "tagLine": "NA1"})]
        )
        client = _client(settings, limiter, session, monkeypatch)

        account = await client.get_account_by_riot_id("A B", "NA1")

        assert account.riot_id == "A B#NA1"
        url, _, headers = session.calls[0]
        assert url == (
            "https://americas.api.riotgames.com/riot/account/v1/accounts/by-riot-id/A%20B/NA1"
        )
        assert headers == {"X-Riot-Token": "league-key"}

    @pytest.mark.asyncio
    async def test_tft_requests_use_tft_key(
        self, settings: Settings, limiter: _StubLimiter, monkeypatch: MonkeyPatch
    ) -> None:
        session = _FakeSession([_FakeResponse(200, json_body=["NA1_9"])])
        client = _client(settings, limiter, session, monkeypatch, tft_api_key="tft-key")

        await client.get_match_ids("puuid", GameKind.TFT, count=5, queue=1100, start_time=10)

        url, params, headers = session.calls[0]
        assert url.endswith("/tft/match/v1/matches/by-puuid/puuid/ids")
        assert params == {"count": 5, "startTime": 10}
        assert headers == {"X-Riot-Token": "tft-key"}

    @pytest.mark.asyncio
    async def test_tft_key_defaults_to_league_key(
        self, settings: Settings, limiter: _StubLimiter, monkeypatch: MonkeyPatch
    ) -> None:
        session = _FakeSession([_FakeResponse(200, json_body=[])])
        client = _client(settings, limiter, session, monkeypatch)

        await client.get_league_entries("puuid", GameKind.TFT)

        url, _, headers = session.calls[0]
        assert url == "https://na1.api.riotgames.com/tft/league/v1/by-puuid/puuid"
        assert headers == {"X-Riot-Token": "league-key"}

    @pytest.mark.asyncio
    async def test_league_match_ids_filter_queue_and_cap_count(
        self, settings: Settings, limiter: _StubLimiter, monkeypatch: MonkeyPatch
    ) -> None:
        session = _FakeSession([_FakeResponse(200, json_body=[])])
        client = _client(settings, limiter, session, monkeypatch)

        await client.get_match_ids(
            "puuid", GameKind.LEAGUE, count=500, queue=420, start_time=1, end_time=2
        )

        _, params, _ = session.calls[0]
        assert params == {"count": 100, "startTime": 1, "endTime": 2, "queue": 420}

    @pytest.mark.asyncio
    async def test_ranked_entry_picks_ladder_queue(
        self, settings: Settings, limiter: _StubLimiter, monkeypatch: MonkeyPatch
    ) -> None:
        entries = [
            {"queueType": "RANKED_FLEX_SR", "tier": "SILVER", "rank": "I", "leaguePoints": 3},
            {"queueType": "RANKED_SOLO_5x5", "tier": "GOLD", "rank": "II", "leaguePoints": 50},
        ]
        session = _FakeSession([_FakeResponse(200, json_body=entries)])
        client = _client(settings, limiter, session, monkeypatch)

        entry = await client.get_ranked_entry("puuid", GameKind.LEAGUE)

        assert entry is not None
        assert (entry.tier, entry.rank, entry.league_points) == ("GOLD", "II", 50)
        assert session.calls[0][0].endswith("/lol/league/v4/entries/by-puuid/puuid")

    @pytest.mark.asyncio
    async def test_ranked_entry_ignores_unladdered_tft_queues(
        self, settings: Settings, limiter: _StubLimiter, monkeypatch: MonkeyPatch
    ) -> None:
        entries = [{"queueType": "RANKED_TFT_TURBO", "ratedTier": "ORANGE"}]
        session = _FakeSession([_FakeResponse(200, json_body=entries)])
        client = _client(settings, limiter, session, monkeypatch)

        assert await client.get_ranked_entry("puuid", GameKind.TFT) is None

    @pytest.mark.asyncio
    async def test_get_tft_match(
        self,
        settings: Settings,
        limiter: _StubLimiter,
        monkeypatch: MonkeyPatch,
        tft_match_payload: dict,
    ) -> None:
        session = _FakeSession([_FakeResponse(200, json_body=tft_match_payload)])
        client = _client(settings, limiter, session, monkeypatch)

        match = await client.get_tft_match("NA1_2001")

        assert match.metadata.match_id == "NA1_2001"
        assert session.calls[0][0] == (
            "https://americas.api.riotgames.com/tft/match/v1/matches/NA1_2001"
        )
