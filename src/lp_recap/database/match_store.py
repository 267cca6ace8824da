"""SQLAlchemy-backed match cache."""

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lp_recap.database.engine import session_scope
from lp_recap.database.models import CachedMatch
from lp_recap.exceptions import StoreUnavailable
from lp_recap.logging_config import get_logger
from lp_recap.ports import MatchKey, MatchStore
from lp_recap.schemas.records import GameKind, MatchRecord, ParticipantSummary

logger = get_logger(__name__)


def _to_row_values(record: MatchRecord) -> dict[str, Any]:
    return {
        "match_id": record.match_id,
        "sort_key": record.game_kind.sort_key,
        "game_kind": record.game_kind.value,
        "game_creation": record.game_creation,
        "queue_id": record.queue_id,
        "payload": [p.model_dump() for p in record.participants],
        "cached_at": datetime.now(UTC),
    }


def _to_record(row: CachedMatch) -> MatchRecord:
    return MatchRecord(
        match_id=row.match_id,
        game_kind=GameKind(row.game_kind),
        game_creation=row.game_creation,
        queue_id=row.queue_id,
        participants=tuple(ParticipantSummary.model_validate(p) for p in row.payload),
    )


class SqlMatchStore(MatchStore):
    """Match cache stored in the ``match_cache`` table.

    Writes use ``INSERT ... ON CONFLICT DO NOTHING`` so concurrent writers
    racing on the same match never overwrite an existing row.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize the store.

        Args:
            session_factory: Factory producing database sessions
        """
        self._session_factory = session_factory

    async def batch_get(self, keys: set[MatchKey]) -> dict[str, MatchRecord]:
        if not keys:
            return {}

        match_ids = {match_id for match_id, _ in keys}
        sort_keys = {sort_key for _, sort_key in keys}

        try:
            async with session_scope(self._session_factory) as session:
                result = await session.execute(
                    select(CachedMatch).where(
                        CachedMatch.match_id.in_(match_ids),
                        CachedMatch.sort_key.in_(sort_keys),
                    )
                )
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Match cache lookup failed", keys=len(keys), error=str(e))
            raise StoreUnavailable("batch_get", str(e)) from e

        found: dict[str, MatchRecord] = {}
        for row in rows:
            # The IN filters are a superset of the requested composite keys
            if (row.match_id, row.sort_key) in keys:
                found[row.match_id] = _to_record(row)

        logger.debug("Match cache lookup", requested=len(keys), found=len(found))
        return found

    async def batch_put(self, records: Sequence[MatchRecord]) -> None:
        if not records:
            return

        values = [_to_row_values(record) for record in records]

        try:
            async with session_scope(self._session_factory) as session:
                dialect = session.get_bind().dialect.name
                insert = pg_insert if dialect == "postgresql" else sqlite_insert
                stmt = insert(CachedMatch).values(values)
                stmt = stmt.on_conflict_do_nothing(index_elements=["match_id", "sort_key"])
                await session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Match cache write failed", records=len(records), error=str(e))
            raise StoreUnavailable("batch_put", str(e)) from e

        logger.debug("Match cache write", records=len(records))
