"""Capability interfaces the engines depend on.

The cache engine and the rank engine only ever talk to these abstractions;
concrete implementations (SQLAlchemy stores, the Riot API source) are wired
in at startup.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence

from lp_recap.schemas.records import GameKind, MatchRecord, RankSnapshot

MatchKey = tuple[str, str]
"""``(match_id, sort_key)`` composite key of a cached match."""


class MatchStore(ABC):
    """Durable key/value store used as a memoization layer for matches."""

    @abstractmethod
    async def batch_get(self, keys: set[MatchKey]) -> dict[str, MatchRecord]:
        """Look up many matches at once.

        Args:
            keys: Composite keys to look up

        Returns:
            Mapping of match id to record for every key that was found

        Raises:
            StoreUnavailable: If the store cannot be reached
        """

    @abstractmethod
    async def batch_put(self, records: Sequence[MatchRecord]) -> None:
        """Persist many matches at once. Existing keys are left untouched.

        Raises:
            StoreUnavailable: If the write fails
        """


class MatchSource(ABC):
    """Source of truth for match records (the Riot API)."""

    game_kind: GameKind

    @abstractmethod
    async def fetch(self, match_id: str) -> MatchRecord:
        """Fetch one match.

        Raises:
            NotFound: The match does not exist upstream
            RateLimited: Upstream kept rate limiting the request
            Unauthorized: The API key was rejected
            UpstreamError: Any other upstream failure
        """


class RankSnapshotStore(ABC):
    """Append-only store of rank snapshots."""

    @abstractmethod
    async def query_range(
        self,
        player_id: str,
        game_kind: GameKind,
        start: int,
        end: int,
    ) -> list[RankSnapshot]:
        """Snapshots with ``start <= timestamp <= end``, oldest first.

        Raises:
            StoreUnavailable: If the store cannot be reached
        """

    @abstractmethod
    async def add(self, snapshots: Iterable[RankSnapshot]) -> int:
        """Append snapshots, returning how many were written.

        Raises:
            StoreUnavailable: If the write fails
        """
