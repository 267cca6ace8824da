"""Tests for the SQLAlchemy rank snapshot store."""

from collections.abc import Callable

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lp_recap.database.snapshot_store import SqlRankSnapshotStore
from lp_recap.schemas.records import GameKind, RankSnapshot

PLAYER_PUUID = "test-puuid-12345"


class TestSqlRankSnapshotStore:
    """Tests for SqlRankSnapshotStore."""

    @pytest.mark.asyncio
    async def test_query_range_is_inclusive_and_ascending(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        make_snapshot: Callable[..., RankSnapshot],
    ) -> None:
        store = SqlRankSnapshotStore(session_factory)
        await store.add(
            [
                make_snapshot(300, league_points=30),
                make_snapshot(100, league_points=10),
                make_snapshot(50, league_points=0),
                make_snapshot(400, league_points=40),
            ]
        )

        result = await store.query_range(PLAYER_PUUID, GameKind.LEAGUE, 100, 300)

        assert [s.timestamp for s in result] == [100, 300]
        assert [s.league_points for s in result] == [10, 30]

    @pytest.mark.asyncio
    async def test_query_range_filters_player_and_game_kind(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        make_snapshot: Callable[..., RankSnapshot],
    ) -> None:
        store = SqlRankSnapshotStore(session_factory)
        await store.add(
            [
                make_snapshot(100),
                make_snapshot(100, game_kind=GameKind.TFT),
                make_snapshot(100, player_id="other-puuid"),
            ]
        )

        result = await store.query_range(PLAYER_PUUID, GameKind.TFT, 0, 1000)

        assert len(result) == 1
        assert result[0].game_kind is GameKind.TFT
        assert result[0].player_id == PLAYER_PUUID

    @pytest.mark.asyncio
    async def test_apex_snapshot_keeps_null_division(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        make_snapshot: Callable[..., RankSnapshot],
    ) -> None:
        store = SqlRankSnapshotStore(session_factory)
        await store.add([make_snapshot(100, "MASTER", None, 120)])

        [snapshot] = await store.query_range(PLAYER_PUUID, GameKind.LEAGUE, 0, 1000)

        assert snapshot.division is None
        assert snapshot.to_rank().to_points() == 2920

    @pytest.mark.asyncio
    async def test_add_ignores_duplicate_timestamps(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        make_snapshot: Callable[..., RankSnapshot],
    ) -> None:
        store = SqlRankSnapshotStore(session_factory)
        await store.add([make_snapshot(100, league_points=10)])
        await store.add([make_snapshot(100, league_points=99)])

        result = await store.query_range(PLAYER_PUUID, GameKind.LEAGUE, 0, 1000)

        assert [s.league_points for s in result] == [10]

    @pytest.mark.asyncio
    async def test_add_nothing(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        store = SqlRankSnapshotStore(session_factory)
        assert await store.add([]) == 0
