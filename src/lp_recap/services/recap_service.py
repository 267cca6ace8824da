"""Daily recap and win-rate reports.

Combines the two engines: the match cache supplies the games played, the
rank history supplies the LP movement, and the Riot API supplies the live
ranked standing used when the day's window is still open.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from lp_recap.api_client.riot_client import RiotApiClient
from lp_recap.exceptions import InvalidRank
from lp_recap.logging_config import get_logger
from lp_recap.schemas.records import GameKind, MatchRecord, ParticipantSummary, RiotId
from lp_recap.schemas.riot_api import AccountDto, LeagueEntryDto
from lp_recap.services.match_cache_service import MatchCacheService
from lp_recap.services.rank_history_service import NoSnapshots, RankHistoryService, RecapSummary
from lp_recap.services.rank_utils import Rank
from lp_recap.services.windows import day_window, recap_day

logger = get_logger(__name__)

RANKED_SOLO_QUEUE_ID = 420


@dataclass(frozen=True)
class PlayerGame:
    """One match seen from the perspective of the player the report is about."""

    match: MatchRecord
    participant: ParticipantSummary


def _tally(games: list[PlayerGame]) -> tuple[int, int, int]:
    wins = losses = remakes = 0
    for game in games:
        if game.participant.remake:
            remakes += 1
        elif game.participant.won:
            wins += 1
        else:
            losses += 1
    return wins, losses, remakes


def _winrate(wins: int, losses: int) -> float | None:
    total = wins + losses
    if total == 0:
        return None
    return wins / total * 100


@dataclass
class RecapReport:
    """Everything needed to render a daily recap."""

    riot_id: str
    game_kind: GameKind
    day: date
    generated_at: datetime
    live_rank: Rank | None
    rank_summary: RecapSummary | NoSnapshots
    games: list[PlayerGame] = field(default_factory=list)
    failed_matches: int = 0
    yesterday: bool = False

    @property
    def wins(self) -> int:
        return _tally(self.games)[0]

    @property
    def losses(self) -> int:
        return _tally(self.games)[1]

    @property
    def remakes(self) -> int:
        return _tally(self.games)[2]

    @property
    def winrate(self) -> float | None:
        """Win percentage over games that were not remade, None if there were none."""
        return _winrate(self.wins, self.losses)


@dataclass
class WinrateReport:
    """Recent games and season totals for one player."""

    riot_id: str
    game_kind: GameKind
    entry: LeagueEntryDto | None
    games: list[PlayerGame] = field(default_factory=list)
    failed_matches: int = 0

    @property
    def wins(self) -> int:
        return _tally(self.games)[0]

    @property
    def losses(self) -> int:
        return _tally(self.games)[1]

    @property
    def winrate(self) -> float | None:
        return _winrate(self.wins, self.losses)

    @property
    def season_winrate(self) -> float | None:
        if self.entry is None:
            return None
        return _winrate(self.entry.wins, self.entry.losses)


class RecapService:
    """Builds recap and win-rate reports for a Riot ID."""

    def __init__(
        self,
        api_client: RiotApiClient,
        match_cache: MatchCacheService,
        rank_history: RankHistoryService,
        timezone: ZoneInfo,
        recap_match_count: int = 25,
        winrate_match_count: int = 10,
    ) -> None:
        """Initialize the recap service.

        Args:
            api_client: Riot API client
            match_cache: Cache-aside match engine
            rank_history: Rank time-series engine
            timezone: Timezone whose calendar days recaps cover
            recap_match_count: Maximum matches in a daily recap
            winrate_match_count: Matches in a win-rate report
        """
        self._api_client = api_client
        self._match_cache = match_cache
        self._rank_history = rank_history
        self._timezone = timezone
        self._recap_match_count = recap_match_count
        self._winrate_match_count = winrate_match_count

    async def resolve_account(self, riot_id: RiotId | str) -> AccountDto:
        """Look up the account behind a Riot ID.

        Raises:
            ValueError: If the Riot ID is malformed
            NotFound: If no such account exists
        """
        if isinstance(riot_id, str):
            riot_id = RiotId.parse(riot_id)
        return await self._api_client.get_account_by_riot_id(riot_id.game_name, riot_id.tag_line)

    async def recap(
        self,
        riot_id: RiotId | str,
        game_kind: GameKind,
        yesterday: bool = False,
        now: datetime | None = None,
    ) -> RecapReport:
        """Recap one calendar day of ranked play.

        Args:
            riot_id: Player's Riot ID
            game_kind: Ladder to recap
            yesterday: Recap the previous day instead of today
            now: Current time (defaults to the wall clock)

        Returns:
            The recap report

        Raises:
            ValueError: If the Riot ID is malformed
            RiotApiError: If a required upstream call fails
            StoreUnavailable: If the match cache or snapshot store is down
        """
        now = now or datetime.now(UTC)
        account = await self.resolve_account(riot_id)
        day = recap_day(now, self._timezone, yesterday)
        window_start, window_end = day_window(day, self._timezone)

        # TFT match ids cannot be filtered by queue, so normals are included
        queue = RANKED_SOLO_QUEUE_ID if game_kind is GameKind.LEAGUE else None
        match_ids, entry = await asyncio.gather(
            self._api_client.get_match_ids(
                account.puuid,
                game_kind,
                count=self._recap_match_count,
                queue=queue,
                start_time=window_start,
                end_time=window_end,
            ),
            self._api_client.get_ranked_entry(account.puuid, game_kind),
        )

        live_rank = self._live_rank(entry, account)
        lookup = await self._match_cache.lookup_matches(match_ids, game_kind)
        rank_summary = await self._rank_history.summarize(
            account.puuid, game_kind, window_start, window_end, live_rank
        )

        report = RecapReport(
            riot_id=account.riot_id,
            game_kind=game_kind,
            day=day,
            generated_at=now.astimezone(self._timezone),
            live_rank=live_rank,
            rank_summary=rank_summary,
            games=self._player_games(lookup.records, account.puuid),
            failed_matches=lookup.failure_count,
            yesterday=yesterday,
        )

        logger.info(
            "Built recap",
            riot_id=report.riot_id,
            game_kind=game_kind.value,
            day=day.isoformat(),
            games=len(report.games),
            tracked=not isinstance(rank_summary, NoSnapshots),
        )
        return report

    async def winrate(self, riot_id: RiotId | str, game_kind: GameKind) -> WinrateReport:
        """Win rate over the most recent ranked games plus season totals.

        Raises:
            ValueError: If the Riot ID is malformed
            RiotApiError: If a required upstream call fails
            StoreUnavailable: If the match cache is down
        """
        account = await self.resolve_account(riot_id)
        queue = RANKED_SOLO_QUEUE_ID if game_kind is GameKind.LEAGUE else None
        match_ids, entry = await asyncio.gather(
            self._api_client.get_match_ids(
                account.puuid,
                game_kind,
                count=self._winrate_match_count,
                queue=queue,
            ),
            self._api_client.get_ranked_entry(account.puuid, game_kind),
        )

        lookup = await self._match_cache.lookup_matches(match_ids, game_kind)
        report = WinrateReport(
            riot_id=account.riot_id,
            game_kind=game_kind,
            entry=entry,
            games=self._player_games(lookup.records, account.puuid),
            failed_matches=lookup.failure_count,
        )

        logger.info(
            "Built win-rate report",
            riot_id=report.riot_id,
            game_kind=game_kind.value,
            games=len(report.games),
        )
        return report

    def _live_rank(self, entry: LeagueEntryDto | None, account: AccountDto) -> Rank | None:
        if entry is None:
            return None
        try:
            return entry.to_rank()
        except InvalidRank as e:
            logger.warning("Ignoring malformed live rank", riot_id=account.riot_id, error=str(e))
            return None

    @staticmethod
    def _player_games(records: list[MatchRecord], puuid: str) -> list[PlayerGame]:
        games = []
        for record in records:
            participant = record.get_participant(puuid)
            if participant is None:
                logger.warning(
                    "Player not found in match participants",
                    match_id=record.match_id,
                )
                continue
            games.append(PlayerGame(match=record, participant=participant))
        return games
