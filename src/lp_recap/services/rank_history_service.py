"""Reduces stored rank snapshots to a gain/loss summary over a time window."""

from __future__ import annotations

from dataclasses import dataclass

from lp_recap.logging_config import get_logger
from lp_recap.ports import RankSnapshotStore
from lp_recap.schemas.records import GameKind
from lp_recap.services.rank_utils import Rank

logger = get_logger(__name__)


@dataclass(frozen=True)
class RecapSummary:
    """Rank movement over a window.

    Attributes:
        start_rank: Rank at the first snapshot in the window
        end_rank: Rank at the second snapshot, or the live rank
        delta: Scale points gained (negative when lost)
        window_closed: True when ``end_rank`` is a stored snapshot
    """

    start_rank: Rank
    end_rank: Rank
    delta: int
    window_closed: bool


@dataclass(frozen=True)
class NoSnapshots:
    """No snapshot exists for the player in the window."""

    player_id: str
    game_kind: GameKind


class RankHistoryService:
    """Rank time-series engine."""

    def __init__(self, store: RankSnapshotStore) -> None:
        self._store = store

    async def summarize(
        self,
        player_id: str,
        game_kind: GameKind,
        window_start: int,
        window_end: int,
        live_rank: Rank | None = None,
    ) -> RecapSummary | NoSnapshots:
        """Summarize rank movement between ``window_start`` and ``window_end``.

        The first snapshot in the window is the starting point. A second
        snapshot closes the window; with only one, ``live_rank`` stands in as
        the end point. Without a live rank the end equals the start.

        Args:
            player_id: Player PUUID
            game_kind: Ladder to summarize
            window_start: Inclusive window start (epoch seconds)
            window_end: Inclusive window end (epoch seconds)
            live_rank: Current standing, used only when one snapshot exists

        Returns:
            The summary, or :class:`NoSnapshots` if nothing was recorded

        Raises:
            StoreUnavailable: If the snapshot store fails
            InvalidRank: If a stored snapshot holds a malformed rank
            ValueError: If the window is inverted
        """
        if window_start > window_end:
            raise ValueError("window_start must not be after window_end")

        snapshots = await self._store.query_range(player_id, game_kind, window_start, window_end)
        if not snapshots:
            logger.debug(
                "No snapshots in window",
                player_id=player_id,
                game_kind=game_kind.value,
                window_start=window_start,
                window_end=window_end,
            )
            return NoSnapshots(player_id=player_id, game_kind=game_kind)

        start_rank = snapshots[0].to_rank()
        if len(snapshots) >= 2:
            end_rank = snapshots[1].to_rank()
            window_closed = True
        else:
            end_rank = live_rank if live_rank is not None else start_rank
            window_closed = False

        summary = RecapSummary(
            start_rank=start_rank,
            end_rank=end_rank,
            delta=start_rank.difference(end_rank),
            window_closed=window_closed,
        )

        logger.debug(
            "Summarized rank window",
            player_id=player_id,
            game_kind=game_kind.value,
            snapshots=len(snapshots),
            delta=summary.delta,
            window_closed=window_closed,
        )
        return summary
