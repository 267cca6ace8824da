"""Periodic rank snapshot ingestion for tracked players."""

import asyncio
import time
from collections.abc import Callable
from contextlib import suppress
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from lp_recap.api_client.riot_client import RiotApiClient
from lp_recap.exceptions import InvalidRank, RiotApiError
from lp_recap.logging_config import get_logger
from lp_recap.ports import RankSnapshotStore
from lp_recap.schemas.records import GameKind, RankSnapshot, TrackingEntry
from lp_recap.services.tracking_service import TrackingService
from lp_recap.services.windows import next_snapshot_time

logger = get_logger(__name__)


class SnapshotService:
    """Background service that records the ranked standing of tracked players.

    Runs at the start (00:00:00) and end (23:59:59) of every local day, so
    each day window is bounded by a snapshot on both sides.
    """

    def __init__(
        self,
        api_client: RiotApiClient,
        tracking_service: TrackingService,
        snapshot_store: RankSnapshotStore,
        timezone: ZoneInfo,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the snapshot service.

        Args:
            api_client: Riot API client
            tracking_service: Source of the players to snapshot
            snapshot_store: Where snapshots are appended
            timezone: Zone whose calendar days the runs follow
            clock: Returns the current time (defaults to UTC now)
        """
        self._api_client = api_client
        self._tracking_service = tracking_service
        self._snapshot_store = snapshot_store
        self._timezone = timezone
        self._clock = clock or (lambda: datetime.now(UTC))
        self._running = False
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the periodic ingestion loop."""
        if self._running:
            logger.warning("Snapshot service already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._snapshot_loop())
        logger.info("Snapshot service started", timezone=str(self._timezone))

    async def stop(self) -> None:
        """Stop the periodic ingestion loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.info("Snapshot service stopped")

    async def _snapshot_loop(self) -> None:
        last_run: datetime | None = None
        while self._running:
            now = self._clock()
            # A sleep that wakes early must not repeat the same boundary
            after = max(now, last_run) if last_run is not None else now
            run_at = next_snapshot_time(after, self._timezone)
            delay = max((run_at - now).total_seconds(), 0.0)
            logger.debug("Waiting for next snapshot run", run_at=run_at.isoformat(), seconds=delay)
            await asyncio.sleep(delay)

            last_run = run_at
            timestamp = int(run_at.timestamp())
            for game_kind in GameKind:
                try:
                    await self.record_snapshots(game_kind, timestamp=timestamp)
                except Exception as e:
                    logger.error(
                        "Error in snapshot loop",
                        game_kind=game_kind.value,
                        error=str(e),
                        exc_info=True,
                    )

    async def record_snapshots(self, game_kind: GameKind, timestamp: int | None = None) -> int:
        """Snapshot every tracked player of ``game_kind`` once.

        All snapshots of one run share the same timestamp. Unranked players
        and players whose lookup fails are skipped.

        Args:
            game_kind: Ladder to snapshot
            timestamp: Snapshot time in epoch seconds (defaults to now)

        Returns:
            Number of snapshots written

        Raises:
            StoreUnavailable: If the tracking list or the snapshot write fails
        """
        timestamp = int(time.time()) if timestamp is None else timestamp
        players = await self._tracking_service.list_tracked(game_kind)

        if not players:
            logger.debug("No tracked players to snapshot", game_kind=game_kind.value)
            return 0

        logger.info(
            "Recording rank snapshots",
            game_kind=game_kind.value,
            player_count=len(players),
            timestamp=timestamp,
        )

        results = await asyncio.gather(
            *(self._snapshot_player(player, timestamp) for player in players)
        )
        snapshots = [snapshot for snapshot in results if snapshot is not None]

        written = await self._snapshot_store.add(snapshots) if snapshots else 0
        logger.info(
            "Rank snapshots recorded",
            game_kind=game_kind.value,
            written=written,
            skipped=len(players) - len(snapshots),
        )
        return written

    async def _snapshot_player(
        self,
        player: TrackingEntry,
        timestamp: int,
    ) -> RankSnapshot | None:
        try:
            entry = await self._api_client.get_ranked_entry(player.player_id, player.game_kind)
        except RiotApiError as e:
            logger.warning(
                "Failed to get ranked entry",
                riot_id=player.riot_id,
                game_kind=player.game_kind.value,
                error=str(e),
            )
            return None

        if entry is None or entry.tier is None:
            logger.debug(
                "Player is unranked, skipping",
                riot_id=player.riot_id,
                game_kind=player.game_kind.value,
            )
            return None

        try:
            rank = entry.to_rank()
        except InvalidRank as e:
            logger.warning("Malformed ranked entry", riot_id=player.riot_id, error=str(e))
            return None

        return RankSnapshot(
            player_id=player.player_id,
            game_kind=player.game_kind,
            timestamp=timestamp,
            tier=rank.tier.value,
            division=rank.division.value if rank.division is not None else None,
            league_points=rank.league_points,
            wins=entry.wins,
            losses=entry.losses,
        )
