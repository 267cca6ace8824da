"""SQLAlchemy-backed rank snapshot store."""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lp_recap.database.engine import session_scope
from lp_recap.database.models import RankSnapshotRow
from lp_recap.exceptions import StoreUnavailable
from lp_recap.logging_config import get_logger
from lp_recap.ports import RankSnapshotStore
from lp_recap.schemas.records import GameKind, RankSnapshot

logger = get_logger(__name__)


class SqlRankSnapshotStore(RankSnapshotStore):
    """Rank snapshots stored in the ``rank_snapshots`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def query_range(
        self,
        player_id: str,
        game_kind: GameKind,
        start: int,
        end: int,
    ) -> list[RankSnapshot]:
        try:
            async with session_scope(self._session_factory) as session:
                result = await session.execute(
                    select(RankSnapshotRow)
                    .where(
                        RankSnapshotRow.player_id == player_id,
                        RankSnapshotRow.game_kind == game_kind.value,
                        RankSnapshotRow.timestamp >= start,
                        RankSnapshotRow.timestamp <= end,
                    )
                    .order_by(RankSnapshotRow.timestamp.asc())
                )
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(
                "Snapshot query failed",
                player_id=player_id,
                game_kind=game_kind.value,
                error=str(e),
            )
            raise StoreUnavailable("query_range", str(e)) from e

        return [
            RankSnapshot(
                player_id=row.player_id,
                game_kind=GameKind(row.game_kind),
                timestamp=row.timestamp,
                tier=row.tier,
                division=row.division,
                league_points=row.league_points,
                wins=row.wins,
                losses=row.losses,
            )
            for row in rows
        ]

    async def add(self, snapshots: Iterable[RankSnapshot]) -> int:
        values = [
            {
                "player_id": s.player_id,
                "game_kind": s.game_kind.value,
                "timestamp": s.timestamp,
                "tier": s.tier,
                "division": s.division,
                "league_points": s.league_points,
                "wins": s.wins,
                "losses": s.losses,
            }
            for s in snapshots
        ]
        if not values:
            return 0

        try:
            async with session_scope(self._session_factory) as session:
                dialect = session.get_bind().dialect.name
                insert = pg_insert if dialect == "postgresql" else sqlite_insert
                # A second snapshot for the same player and second is a duplicate
                stmt = insert(RankSnapshotRow).values(values).on_conflict_do_nothing(
                    index_elements=["player_id", "game_kind", "timestamp"]
                )
                result = await session.execute(stmt)
                written = result.rowcount if result.rowcount is not None else len(values)
        except SQLAlchemyError as e:
            logger.error("Snapshot write failed", snapshots=len(values), error=str(e))
            raise StoreUnavailable("add", str(e)) from e

        logger.debug("Snapshots written", requested=len(values), written=written)
        return max(written, 0)
