"""Wiring of the stores, the Riot client and the services from settings."""

from __future__ import annotations

from dataclasses import dataclass
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from lp_recap.api_client.match_source import RiotMatchSource
from lp_recap.api_client.riot_client import RiotApiClient
from lp_recap.config import Settings
from lp_recap.database.engine import create_engine, create_session_factory, init_db
from lp_recap.database.match_store import SqlMatchStore
from lp_recap.database.snapshot_store import SqlRankSnapshotStore
from lp_recap.logging_config import get_logger
from lp_recap.schemas.records import GameKind
from lp_recap.services.match_cache_service import MatchCacheService
from lp_recap.services.rank_history_service import RankHistoryService
from lp_recap.services.recap_service import RecapService
from lp_recap.services.snapshot_service import SnapshotService
from lp_recap.services.tracking_service import TrackingService

logger = get_logger(__name__)


@dataclass
class AppContext:
    """Shared handles created once at process start."""

    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    api_client: RiotApiClient
    match_cache: MatchCacheService
    rank_history: RankHistoryService
    tracking: TrackingService
    snapshots: SnapshotService
    recap: RecapService

    @classmethod
    def from_settings(cls, settings: Settings) -> AppContext:
        engine = create_engine(settings)
        session_factory = create_session_factory(engine)
        api_client = RiotApiClient(settings=settings)

        match_cache = MatchCacheService(
            SqlMatchStore(session_factory),
            [RiotMatchSource(api_client, game_kind) for game_kind in GameKind],
            max_concurrent_fetches=settings.max_concurrent_fetches,
        )
        snapshot_store = SqlRankSnapshotStore(session_factory)
        rank_history = RankHistoryService(snapshot_store)
        tracking = TrackingService(session_factory)
        timezone = ZoneInfo(settings.working_timezone)

        return cls(
            settings=settings,
            engine=engine,
            session_factory=session_factory,
            api_client=api_client,
            match_cache=match_cache,
            rank_history=rank_history,
            tracking=tracking,
            snapshots=SnapshotService(api_client, tracking, snapshot_store, timezone),
            recap=RecapService(
                api_client,
                match_cache,
                rank_history,
                timezone=timezone,
                recap_match_count=settings.recap_match_count,
                winrate_match_count=settings.winrate_match_count,
            ),
        )

    async def init_db(self) -> None:
        logger.info("Initializing database")
        await init_db(self.engine)

    async def close(self) -> None:
        """Release the HTTP session and the connection pool."""
        await self.snapshots.stop()
        await self.api_client.close()
        await self.engine.dispose()
        logger.info("Database connection closed")
