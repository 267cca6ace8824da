"""Schemas package."""

from lp_recap.schemas.records import (
    GameKind,
    MatchRecord,
    ParticipantSummary,
    RankSnapshot,
    RiotId,
    TrackingEntry,
)
from lp_recap.schemas.riot_api import (
    AccountDto,
    LeagueEntryDto,
    LeagueMatchDto,
    TftMatchDto,
)

__all__ = [
    "AccountDto",
    "GameKind",
    "LeagueEntryDto",
    "LeagueMatchDto",
    "MatchRecord",
    "ParticipantSummary",
    "RankSnapshot",
    "RiotId",
    "TftMatchDto",
    "TrackingEntry",
]
