"""Database package."""

from lp_recap.database.engine import (
    create_engine,
    create_session_factory,
    init_db,
    session_scope,
)
from lp_recap.database.match_store import SqlMatchStore
from lp_recap.database.models import Base, CachedMatch, RankSnapshotRow, TrackedPlayer
from lp_recap.database.snapshot_store import SqlRankSnapshotStore

__all__ = [
    "Base",
    "CachedMatch",
    "RankSnapshotRow",
    "SqlMatchStore",
    "SqlRankSnapshotStore",
    "TrackedPlayer",
    "create_engine",
    "create_session_factory",
    "init_db",
    "session_scope",
]
