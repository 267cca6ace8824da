"""Pydantic schemas for Riot API responses.

Only the fields the recap and win-rate reports use are modelled; everything
else in the payload is ignored. Each match DTO knows how to turn itself into
a :class:`MatchRecord`.
"""

from pydantic import BaseModel, Field

from lp_recap.schemas.records import GameKind, MatchRecord, ParticipantSummary
from lp_recap.services.rank_utils import Rank


class AccountDto(BaseModel):
    """Riot Account information from account-v1 API."""

    puuid: str = Field(..., description="Player Universal Unique Identifier")
    game_name: str = Field(..., alias="gameName", description="Game name part of Riot ID")
    tag_line: str = Field(..., alias="tagLine", description="Tag line part of Riot ID")

    model_config = {"populate_by_name": True}

    @property
    def riot_id(self) -> str:
        """Get the full Riot ID (GameName#TagLine)."""
        return f"{self.game_name}#{self.tag_line}"


class LeagueEntryDto(BaseModel):
    """Ranked entry from league-v4 / tft-league-v1.

    TFT queues without a ladder (Hyper Roll, Double Up) come back without
    tier, rank or league points.
    """

    league_id: str | None = Field(None, alias="leagueId")
    puuid: str | None = None
    queue_type: str = Field(..., alias="queueType")
    tier: str | None = None
    rank: str | None = None  # I, II, III, IV (reported as I for Master+)
    league_points: int = Field(0, alias="leaguePoints")
    wins: int = 0
    losses: int = 0
    hot_streak: bool = Field(False, alias="hotStreak")

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @property
    def is_ranked(self) -> bool:
        return self.tier is not None

    def to_rank(self) -> Rank | None:
        """Parse into a rank, or None for unranked entries.

        Raises:
            InvalidRank: If the tier or division is malformed
        """
        if self.tier is None:
            return None
        return Rank.parse(self.tier, self.rank, self.league_points)


# League of Legends match-v5


class LeagueParticipantDto(BaseModel):
    """Participant data from match-v5 API."""

    puuid: str
    champion_name: str = Field("", alias="championName")
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    win: bool = False
    game_ended_in_early_surrender: bool = Field(False, alias="gameEndedInEarlySurrender")

    model_config = {"populate_by_name": True, "extra": "ignore"}

    def to_summary(self) -> ParticipantSummary:
        return ParticipantSummary(
            puuid=self.puuid,
            champion_name=self.champion_name or None,
            kills=self.kills,
            deaths=self.deaths,
            assists=self.assists,
            win=self.win,
            remake=self.game_ended_in_early_surrender,
        )


class LeagueMatchInfoDto(BaseModel):
    """Match info data from match-v5 API."""

    game_creation: int = Field(..., alias="gameCreation")  # epoch milliseconds
    queue_id: int = Field(0, alias="queueId")
    participants: list[LeagueParticipantDto]

    model_config = {"populate_by_name": True, "extra": "ignore"}


class LeagueMatchMetadataDto(BaseModel):
    """Match metadata from match-v5 API."""

    match_id: str = Field(..., alias="matchId")

    model_config = {"populate_by_name": True, "extra": "ignore"}


class LeagueMatchDto(BaseModel):
    """Complete match data from match-v5 API."""

    metadata: LeagueMatchMetadataDto
    info: LeagueMatchInfoDto

    model_config = {"extra": "ignore"}

    def to_record(self) -> MatchRecord:
        return MatchRecord(
            match_id=self.metadata.match_id,
            game_kind=GameKind.LEAGUE,
            game_creation=self.info.game_creation // 1000,
            queue_id=self.info.queue_id,
            participants=tuple(p.to_summary() for p in self.info.participants),
        )


# Teamfight Tactics tft-match-v1 (snake_case payload)


class TftParticipantDto(BaseModel):
    """Participant data from tft-match-v1 API."""

    puuid: str
    placement: int
    level: int = 0

    model_config = {"populate_by_name": True, "extra": "ignore"}

    def to_summary(self) -> ParticipantSummary:
        return ParticipantSummary(puuid=self.puuid, placement=self.placement)


class TftMatchInfoDto(BaseModel):
    """Match info data from tft-match-v1 API."""

    game_datetime: int  # epoch milliseconds
    queue_id: int = 0
    participants: list[TftParticipantDto]

    model_config = {"populate_by_name": True, "extra": "ignore"}


class TftMatchMetadataDto(BaseModel):
    """Match metadata from tft-match-v1 API."""

    match_id: str

    model_config = {"populate_by_name": True, "extra": "ignore"}


class TftMatchDto(BaseModel):
    """Complete match data from tft-match-v1 API."""

    metadata: TftMatchMetadataDto
    info: TftMatchInfoDto

    model_config = {"extra": "ignore"}

    def to_record(self) -> MatchRecord:
        return MatchRecord(
            match_id=self.metadata.match_id,
            game_kind=GameKind.TFT,
            game_creation=self.info.game_datetime // 1000,
            queue_id=self.info.queue_id,
            participants=tuple(p.to_summary() for p in self.info.participants),
        )
