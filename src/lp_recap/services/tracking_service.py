"""Management of the players whose rank is snapshotted periodically."""

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lp_recap.database.engine import session_scope
from lp_recap.database.models import TrackedPlayer
from lp_recap.exceptions import StoreUnavailable
from lp_recap.logging_config import get_logger
from lp_recap.schemas.records import GameKind, TrackingEntry

logger = get_logger(__name__)


def _to_entry(row: TrackedPlayer) -> TrackingEntry:
    return TrackingEntry(
        player_id=row.player_id,
        game_kind=GameKind(row.game_kind),
        riot_id=row.riot_id,
        created_at=row.created_at,
    )


class TrackingService:
    """Service for adding, removing and listing tracked players."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize the tracking service.

        Args:
            session_factory: Factory producing database sessions
        """
        self._session_factory = session_factory

    async def track(self, player_id: str, game_kind: GameKind, riot_id: str) -> TrackingEntry:
        """Start tracking a player. Tracking an already tracked player is a no-op.

        Args:
            player_id: Player PUUID
            game_kind: Ladder to snapshot
            riot_id: Display name (GameName#TagLine)

        Returns:
            The tracking entry, new or existing

        Raises:
            StoreUnavailable: If the database fails
        """
        try:
            async with session_scope(self._session_factory) as session:
                existing = await self._get(session, player_id, game_kind)
                if existing is not None:
                    logger.debug(
                        "Player already tracked",
                        riot_id=existing.riot_id,
                        game_kind=game_kind.value,
                    )
                    return _to_entry(existing)

                row = TrackedPlayer(player_id=player_id, game_kind=game_kind.value, riot_id=riot_id)
                session.add(row)
                await session.flush()
                entry = _to_entry(row)
        except IntegrityError as e:
            # Lost a race with a concurrent track of the same player
            return await self._tracked_after_conflict(player_id, game_kind, e)
        except SQLAlchemyError as e:
            raise StoreUnavailable("track", str(e)) from e

        logger.info("Started tracking player", riot_id=riot_id, game_kind=game_kind.value)
        return entry

    async def _tracked_after_conflict(
        self, player_id: str, game_kind: GameKind, conflict: IntegrityError
    ) -> TrackingEntry:
        try:
            async with session_scope(self._session_factory) as session:
                existing = await self._get(session, player_id, game_kind)
                entry = _to_entry(existing) if existing is not None else None
        except SQLAlchemyError as e:
            raise StoreUnavailable("track", str(e)) from e

        if entry is None:
            raise StoreUnavailable("track", str(conflict)) from conflict
        logger.debug(
            "Player tracked concurrently", riot_id=entry.riot_id, game_kind=game_kind.value
        )
        return entry

    async def untrack(self, player_id: str, game_kind: GameKind) -> bool:
        """Stop tracking a player.

        Returns:
            True if the player was tracked

        Raises:
            StoreUnavailable: If the database fails
        """
        try:
            async with session_scope(self._session_factory) as session:
                result = await session.execute(
                    delete(TrackedPlayer).where(
                        TrackedPlayer.player_id == player_id,
                        TrackedPlayer.game_kind == game_kind.value,
                    )
                )
                removed = bool(result.rowcount)
        except SQLAlchemyError as e:
            raise StoreUnavailable("untrack", str(e)) from e

        if removed:
            logger.info("Stopped tracking player", player_id=player_id, game_kind=game_kind.value)
        return removed

    async def list_tracked(self, game_kind: GameKind) -> list[TrackingEntry]:
        """Tracked players for one game kind, oldest first.

        Raises:
            StoreUnavailable: If the database fails
        """
        try:
            async with session_scope(self._session_factory) as session:
                result = await session.execute(
                    select(TrackedPlayer)
                    .where(TrackedPlayer.game_kind == game_kind.value)
                    .order_by(TrackedPlayer.created_at.asc(), TrackedPlayer.id.asc())
                )
                return [_to_entry(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StoreUnavailable("list_tracked", str(e)) from e

    async def is_tracked(self, player_id: str, game_kind: GameKind) -> bool:
        try:
            async with session_scope(self._session_factory) as session:
                return await self._get(session, player_id, game_kind) is not None
        except SQLAlchemyError as e:
            raise StoreUnavailable("is_tracked", str(e)) from e

    async def _get(
        self,
        session: AsyncSession,
        player_id: str,
        game_kind: GameKind,
    ) -> TrackedPlayer | None:
        result = await session.execute(
            select(TrackedPlayer).where(
                TrackedPlayer.player_id == player_id,
                TrackedPlayer.game_kind == game_kind.value,
            )
        )
        return result.scalar_one_or_none()
