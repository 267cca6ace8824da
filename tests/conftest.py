"""Pytest fixtures for lp-recap tests."""

import os
from collections.abc import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from lp_recap.config import Settings
from lp_recap.database.models import Base
from lp_recap.schemas.records import GameKind, MatchRecord, ParticipantSummary, RankSnapshot

# Set environment variables for testing
os.environ.setdefault("RIOT_API_KEY", "test-api-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

PLAYER_PUUID = "test-puuid-12345"


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        riot_api_key="test-api-key",
        database_url="sqlite+aiosqlite:///:memory:",
    )


@pytest_asyncio.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine shared by every session of a test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def make_match() -> Callable[..., MatchRecord]:
    """Factory for match records with the test player among the participants."""

    def _make(
        match_id: str,
        game_creation: int,
        game_kind: GameKind = GameKind.LEAGUE,
        win: bool = True,
        placement: int | None = None,
        remake: bool = False,
        puuid: str = PLAYER_PUUID,
    ) -> MatchRecord:
        if game_kind is GameKind.TFT:
            player = ParticipantSummary(puuid=puuid, placement=placement or 1)
            other = ParticipantSummary(puuid="someone-else", placement=8)
            queue_id = 1100
        else:
            player = ParticipantSummary(
                puuid=puuid,
                champion_name="Ahri",
                kills=10,
                deaths=2,
                assists=8,
                win=win,
                remake=remake,
            )
            other = ParticipantSummary(puuid="someone-else", champion_name="Zed", win=not win)
            queue_id = 420
        return MatchRecord(
            match_id=match_id,
            game_kind=game_kind,
            game_creation=game_creation,
            queue_id=queue_id,
            participants=(player, other),
        )

    return _make


@pytest.fixture
def make_snapshot() -> Callable[..., RankSnapshot]:
    def _make(
        timestamp: int,
        tier: str = "GOLD",
        division: str | None = "II",
        league_points: int = 50,
        game_kind: GameKind = GameKind.LEAGUE,
        player_id: str = PLAYER_PUUID,
    ) -> RankSnapshot:
        return RankSnapshot(
            player_id=player_id,
            game_kind=game_kind,
            timestamp=timestamp,
            tier=tier,
            division=division,
            league_points=league_points,
            wins=10,
            losses=8,
        )

    return _make


@pytest.fixture
def league_match_payload() -> dict:
    """Trimmed match-v5 response body."""
    return {
        "metadata": {"dataVersion": "2", "matchId": "NA1_1001", "participants": []},
        "info": {
            "gameCreation": 1705320000123,
            "gameDuration": 1800,
            "queueId": 420,
            "participants": [
                {
                    "puuid": PLAYER_PUUID,
                    "championName": "Ahri",
                    "kills": 7,
                    "deaths": 0,
                    "assists": 9,
                    "win": True,
                    "gameEndedInEarlySurrender": False,
                    "goldEarned": 12000,
                },
                {
                    "puuid": "someone-else",
                    "championName": "Zed",
                    "kills": 3,
                    "deaths": 5,
                    "assists": 1,
                    "win": False,
                    "gameEndedInEarlySurrender": False,
                },
            ],
        },
    }


@pytest.fixture
def tft_match_payload() -> dict:
    """Trimmed tft-match-v1 response body."""
    return {
        "metadata": {"data_version": "5", "match_id": "NA1_2001", "participants": []},
        "info": {
            "game_datetime": 1705320000999,
            "queue_id": 1100,
            "participants": [
                {"puuid": PLAYER_PUUID, "placement": 3, "level": 8},
                {"puuid": "someone-else", "placement": 6, "level": 7},
            ],
        },
    }
