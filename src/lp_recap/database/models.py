"""SQLAlchemy ORM models for the match cache, rank snapshots and tracking."""

import json
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


def _utcnow() -> datetime:
    return datetime.now(UTC)


class JSONType(TypeDecorator[Any]):
    """Cross-database JSON type using Text for SQLite and JSON for PostgreSQL."""

    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect: Any) -> Any:
        """Use JSON type for PostgreSQL, Text for others (SQLite)."""
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSON())
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value: Any, dialect: Any) -> Any:
        """Convert Python object to JSON string for SQLite."""
        if value is None:
            return None
        if dialect.name != "postgresql":
            return json.dumps(value)
        return value

    def process_result_value(self, value: Any, dialect: Any) -> Any:
        """Convert JSON string back to Python object for SQLite."""
        if value is None:
            return None
        if dialect.name != "postgresql":
            return json.loads(value)
        return value


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class CachedMatch(Base):
    """A match record memoized from the Riot API.

    Keyed by ``(match_id, sort_key)``; the sort key is the game kind
    discriminator so League and TFT ids can share one table.
    """

    __tablename__ = "match_cache"

    match_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    sort_key: Mapped[str] = mapped_column(String(10), primary_key=True)
    game_kind: Mapped[str] = mapped_column(String(10), nullable=False)
    game_creation: Mapped[int] = mapped_column(BigInteger, nullable=False)  # epoch seconds
    queue_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    payload: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, nullable=False)
    cached_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<CachedMatch(match_id={self.match_id}, kind={self.game_kind})>"


class RankSnapshotRow(Base):
    """One observation of a player's ranked standing."""

    __tablename__ = "rank_snapshots"
    __table_args__ = (
        UniqueConstraint("player_id", "game_kind", "timestamp", name="uq_rank_snapshot"),
        Index("ix_rank_snapshot_player_kind_time", "player_id", "game_kind", "timestamp"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    player_id: Mapped[str] = mapped_column(String(78), nullable=False)
    game_kind: Mapped[str] = mapped_column(String(10), nullable=False)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)  # epoch seconds
    tier: Mapped[str] = mapped_column(String(20), nullable=False)
    division: Mapped[str | None] = mapped_column(String(4), nullable=True)
    league_points: Mapped[int] = mapped_column(Integer, nullable=False)
    wins: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    losses: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<RankSnapshotRow(player_id={self.player_id}, kind={self.game_kind}, "
            f"ts={self.timestamp}, rank={self.tier} {self.division} {self.league_points})>"
        )


class TrackedPlayer(Base):
    """Players whose rank is snapshotted periodically, per game kind."""

    __tablename__ = "tracked_players"
    __table_args__ = (
        UniqueConstraint("player_id", "game_kind", name="uq_tracked_player"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    player_id: Mapped[str] = mapped_column(String(78), nullable=False, index=True)
    game_kind: Mapped[str] = mapped_column(String(10), nullable=False)
    riot_id: Mapped[str] = mapped_column(String(120), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<TrackedPlayer(riot_id={self.riot_id}, kind={self.game_kind})>"
