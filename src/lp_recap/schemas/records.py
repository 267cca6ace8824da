"""Domain records shared by the stores, the Riot adapters and the engines.

These are the only shapes the cache engine and the rank engine see. Upstream
payloads are converted into them at the adapter boundary.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lp_recap.services.rank_utils import Rank


class GameKind(str, Enum):
    """The two ranked ladders the bot knows about."""

    LEAGUE = "league"
    TFT = "tft"

    @property
    def sort_key(self) -> str:
        """Discriminator stored next to a match id in the match cache."""
        return _SORT_KEYS[self]

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def ranked_queue_type(self) -> str:
        """Queue type string of the ladder in league entry responses."""
        return _RANKED_QUEUE_TYPES[self]


_SORT_KEYS = {GameKind.LEAGUE: "#", GameKind.TFT: "#TFT"}
_DISPLAY_NAMES = {GameKind.LEAGUE: "League", GameKind.TFT: "TFT"}
_RANKED_QUEUE_TYPES = {GameKind.LEAGUE: "RANKED_SOLO_5x5", GameKind.TFT: "RANKED_TFT"}


class ParticipantSummary(BaseModel):
    """The slice of a participant the reports need."""

    model_config = ConfigDict(frozen=True)

    puuid: str
    champion_name: str | None = None
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    win: bool | None = Field(None, description="League outcome")
    placement: int | None = Field(None, description="TFT placement (1-8)")
    remake: bool = Field(False, description="Game ended in early surrender")

    @property
    def won(self) -> bool:
        """Whether the game counts as a win (top four in TFT)."""
        if self.placement is not None:
            return self.placement <= 4
        return bool(self.win)

    @property
    def kda(self) -> float:
        """Calculate KDA ratio."""
        if self.deaths == 0:
            return float(self.kills + self.assists)
        return (self.kills + self.assists) / self.deaths


class MatchRecord(BaseModel):
    """An immutable match, keyed by ``(match_id, game_kind)``."""

    model_config = ConfigDict(frozen=True)

    match_id: str
    game_kind: GameKind
    game_creation: int = Field(..., description="Creation time in epoch seconds")
    queue_id: int | None = None
    participants: tuple[ParticipantSummary, ...] = ()

    def get_participant(self, puuid: str) -> ParticipantSummary | None:
        """Get participant data by PUUID."""
        for participant in self.participants:
            if participant.puuid == puuid:
                return participant
        return None


class RankSnapshot(BaseModel):
    """A point-in-time observation of a player's ranked standing.

    Tier and division are kept as the raw upstream strings; they are only
    validated when the snapshot is converted into a :class:`Rank`.
    """

    model_config = ConfigDict(frozen=True)

    player_id: str
    game_kind: GameKind
    timestamp: int = Field(..., description="Epoch seconds")
    tier: str
    division: str | None = None
    league_points: int
    wins: int = 0
    losses: int = 0

    def to_rank(self) -> Rank:
        """Parse the snapshot into a rank.

        Raises:
            InvalidRank: If the stored tier or division is malformed
        """
        return Rank.parse(self.tier, self.division, self.league_points)


class RiotId(BaseModel):
    """A Riot ID (``GameName#TagLine``) validated before any lookup."""

    model_config = ConfigDict(frozen=True)

    game_name: str = Field(..., min_length=3, max_length=16)
    tag_line: str = Field(..., min_length=2, max_length=5)

    @classmethod
    def parse(cls, value: str) -> "RiotId":
        """Parse ``GameName#TagLine``.

        Raises:
            ValueError: If the value is not a well-formed Riot ID
        """
        game_name, sep, tag_line = value.strip().rpartition("#")
        if not sep or not game_name.strip() or not tag_line.strip():
            raise ValueError(f"Riot ID must look like Name#TAG, got {value!r}")
        try:
            return cls(game_name=game_name.strip(), tag_line=tag_line.strip())
        except ValidationError as e:
            raise ValueError(f"Invalid Riot ID {value!r}") from e

    def __str__(self) -> str:
        return f"{self.game_name}#{self.tag_line}"


class TrackingEntry(BaseModel):
    """A player whose rank is snapshotted periodically for one game kind."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    game_kind: GameKind
    riot_id: str
    created_at: datetime
