"""Cache-aside retrieval of match records.

The store is a memoization layer over the Riot API: matches never change
once played, so a record that is in the store is served from there and
anything missing is fetched upstream, written back and merged in.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from lp_recap.exceptions import LpRecapError, StoreUnavailable
from lp_recap.logging_config import get_logger
from lp_recap.ports import MatchSource, MatchStore
from lp_recap.schemas.records import GameKind, MatchRecord

logger = get_logger(__name__)


@dataclass
class MatchLookup:
    """Result of one cache-aside lookup, with where every id came from.

    Attributes:
        records: Matches ordered newest first
        hit_ids: Ids served from the store
        fetched_ids: Ids fetched upstream
        failed: Ids whose fetch failed, mapped to the failure kind
        persisted: Whether fetched records were written back (True if
            nothing needed writing)
    """

    records: list[MatchRecord] = field(default_factory=list)
    hit_ids: list[str] = field(default_factory=list)
    fetched_ids: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    persisted: bool = True

    @property
    def failure_count(self) -> int:
        return len(self.failed)


def sort_newest_first(records: Iterable[MatchRecord]) -> list[MatchRecord]:
    """Order by creation time descending, ties by match id descending."""
    return sorted(records, key=lambda r: (r.game_creation, r.match_id), reverse=True)


class MatchCacheService:
    """Serves batches of matches from the store, backfilling from the source."""

    def __init__(
        self,
        store: MatchStore,
        sources: MatchSource | Iterable[MatchSource],
        max_concurrent_fetches: int | None = None,
    ) -> None:
        """Initialize the cache engine.

        Args:
            store: Durable match store
            sources: One upstream source per game kind
            max_concurrent_fetches: Upper bound on in-flight fetches, None for
                unbounded
        """
        if isinstance(sources, MatchSource):
            sources = [sources]
        self._store = store
        self._sources = {source.game_kind: source for source in sources}
        if max_concurrent_fetches is not None and max_concurrent_fetches < 1:
            raise ValueError("max_concurrent_fetches must be positive")
        self._max_concurrent_fetches = max_concurrent_fetches

    async def get_matches(self, ids: Sequence[str], game_kind: GameKind) -> list[MatchRecord]:
        """Get matches by id, newest first.

        Failed upstream fetches are left out of the result.

        Args:
            ids: Match ids; duplicates are collapsed
            game_kind: Namespace the ids belong to

        Returns:
            At most one record per distinct id, newest first

        Raises:
            StoreUnavailable: If the store lookup fails
        """
        lookup = await self.lookup_matches(ids, game_kind)
        return lookup.records

    async def lookup_matches(self, ids: Sequence[str], game_kind: GameKind) -> MatchLookup:
        """Same as :meth:`get_matches` but reports hits, fetches and failures.

        Raises:
            StoreUnavailable: If the store lookup fails
        """
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return MatchLookup()

        sort_key = game_kind.sort_key
        found = await self._store.batch_get({(match_id, sort_key) for match_id in unique_ids})

        hits = {
            match_id: found[match_id]
            for match_id in unique_ids
            if match_id in found and found[match_id].game_kind is game_kind
        }
        missing = [match_id for match_id in unique_ids if match_id not in hits]

        fetched: dict[str, MatchRecord] = {}
        failed: dict[str, str] = {}
        if missing:
            fetched, failed = await self._fetch_missing(missing, game_kind)

        persisted = True
        if fetched:
            persisted = await self._persist(list(fetched.values()))

        lookup = MatchLookup(
            records=sort_newest_first([*hits.values(), *fetched.values()]),
            hit_ids=list(hits),
            fetched_ids=list(fetched),
            failed=failed,
            persisted=persisted,
        )

        logger.info(
            "Match lookup complete",
            game_kind=game_kind.value,
            requested=len(unique_ids),
            hits=len(lookup.hit_ids),
            fetched=len(lookup.fetched_ids),
            failed=lookup.failure_count,
        )
        if failed:
            logger.warning(
                "Dropped matches that could not be fetched",
                game_kind=game_kind.value,
                failures=dict(Counter(failed.values())),
                match_ids=list(failed),
            )

        return lookup

    async def _fetch_missing(
        self,
        missing: list[str],
        game_kind: GameKind,
    ) -> tuple[dict[str, MatchRecord], dict[str, str]]:
        source = self._sources.get(game_kind)
        if source is None:
            raise LpRecapError(f"No match source configured for {game_kind.value}")

        semaphore = (
            asyncio.Semaphore(self._max_concurrent_fetches)
            if self._max_concurrent_fetches is not None
            else None
        )

        async def fetch_one(match_id: str) -> MatchRecord:
            if semaphore is None:
                return await source.fetch(match_id)
            async with semaphore:
                return await source.fetch(match_id)

        results = await asyncio.gather(
            *(fetch_one(match_id) for match_id in missing),
            return_exceptions=True,
        )

        fetched: dict[str, MatchRecord] = {}
        failed: dict[str, str] = {}
        for match_id, result in zip(missing, results, strict=True):
            if isinstance(result, MatchRecord):
                fetched[match_id] = result
            elif isinstance(result, Exception):
                logger.warning(
                    "Failed to fetch match",
                    match_id=match_id,
                    game_kind=game_kind.value,
                    error_type=type(result).__name__,
                    error=str(result),
                )
                failed[match_id] = type(result).__name__
            else:
                # CancelledError and friends must not be swallowed
                raise result

        return fetched, failed

    async def _persist(self, records: list[MatchRecord]) -> bool:
        try:
            await self._store.batch_put(records)
        except StoreUnavailable as e:
            logger.error(
                "Failed to persist fetched matches",
                count=len(records),
                error=str(e),
            )
            return False
        return True
