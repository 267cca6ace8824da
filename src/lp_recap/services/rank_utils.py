"""Rank scale: converts ladder standings to a single comparable number.

Every tier spans 400 points. The seven divisioned tiers are split into four
divisions of 100 points each (IV lowest, I highest) and the league points of
the division are added on top. The three apex tiers have no divisions; their
league points are open-ended and simply added to the tier base.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from lp_recap.exceptions import InvalidRank


class Tier(str, Enum):
    """Ranked ladder tiers, lowest first."""

    IRON = "IRON"
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"
    EMERALD = "EMERALD"
    DIAMOND = "DIAMOND"
    MASTER = "MASTER"
    GRANDMASTER = "GRANDMASTER"
    CHALLENGER = "CHALLENGER"

    @property
    def is_apex(self) -> bool:
        """Whether the tier has no divisions."""
        return self in APEX_TIERS


class Division(str, Enum):
    """Divisions within a tier (I = highest, IV = lowest)."""

    I = "I"  # noqa: E741
    II = "II"
    III = "III"
    IV = "IV"


APEX_TIERS = frozenset({Tier.MASTER, Tier.GRANDMASTER, Tier.CHALLENGER})

TIER_WIDTH = 400
DIVISION_WIDTH = 100

TIER_BASE_POINTS: dict[Tier, int] = {
    tier: index * TIER_WIDTH for index, tier in enumerate(Tier)
}

DIVISION_POINTS: dict[Division, int] = {
    Division.IV: 0,
    Division.III: DIVISION_WIDTH,
    Division.II: 2 * DIVISION_WIDTH,
    Division.I: 3 * DIVISION_WIDTH,
}


def parse_tier(value: str) -> Tier:
    """Parse a tier name (case-insensitive).

    Raises:
        InvalidRank: If the tier is unknown
    """
    try:
        return Tier(value.strip().upper())
    except (AttributeError, ValueError) as e:
        raise InvalidRank(value, None, "unknown tier") from e


def parse_division(tier: Tier, value: str | None) -> Division | None:
    """Parse a division for the given tier.

    Apex tiers accept a missing division (the Riot API reports them as "I");
    the division is validated but dropped. Divisioned tiers require one.

    Raises:
        InvalidRank: If the division is missing where required or is not a known
            division string
    """
    if value is not None and not isinstance(value, str):
        raise InvalidRank(tier.value, repr(value), "division must be a string")
    if value is None or not value.strip():
        if tier.is_apex:
            return None
        raise InvalidRank(tier.value, value, "division is required below Master")

    try:
        division = Division(value.strip().upper())
    except ValueError as e:
        raise InvalidRank(tier.value, value, "unknown division") from e

    return None if tier.is_apex else division


@dataclass(frozen=True)
class Rank:
    """A point on the ranked ladder."""

    tier: Tier
    division: Division | None
    league_points: int

    def __post_init__(self) -> None:
        if self.tier.is_apex:
            # Apex tiers never carry a division
            object.__setattr__(self, "division", None)
        elif self.division is None:
            raise InvalidRank(self.tier.value, None, "division is required below Master")

    @classmethod
    def parse(cls, tier: str, division: str | None, league_points: int) -> Rank:
        """Build a rank from the raw strings the Riot API returns.

        Args:
            tier: Tier name, e.g. "GOLD"
            division: Division, e.g. "II" (ignored for apex tiers)
            league_points: League points within the division

        Returns:
            The parsed rank

        Raises:
            InvalidRank: If tier or division are not part of the ladder
        """
        parsed_tier = parse_tier(tier)
        return cls(parsed_tier, parse_division(parsed_tier, division), league_points)

    def to_points(self) -> int:
        """Position of this rank on the normalized scale."""
        points = TIER_BASE_POINTS[self.tier] + self.league_points
        if self.division is not None:
            points += DIVISION_POINTS[self.division]
        return points

    def difference(self, other: Rank) -> int:
        """Signed number of scale points from this rank to ``other``."""
        return other.to_points() - self.to_points()

    def format(self) -> str:
        """Human-readable form, e.g. "Gold II - 50 LP" or "Master - 100 LP"."""
        tier_formatted = self.tier.value.capitalize()
        if self.division is None:
            return f"{tier_formatted} - {self.league_points} LP"
        return f"{tier_formatted} {self.division.value} - {self.league_points} LP"

    def __str__(self) -> str:
        return self.format()


def to_points(tier: str, division: str | None, league_points: int) -> int:
    """Convert rank components into the normalized scale.

    Examples:
        >>> to_points("GOLD", "II", 50)
        1450
        >>> to_points("MASTER", None, 100)
        2900
    """
    return Rank.parse(tier, division, league_points).to_points()


def difference(start: Rank, end: Rank) -> int:
    """Points gained (positive) or lost (negative) going from ``start`` to ``end``."""
    return start.difference(end)


def format_rank(tier: str, division: str | None, league_points: int) -> str:
    """Format rank components as a human-readable string.

    Examples:
        >>> format_rank("GOLD", "II", 50)
        'Gold II - 50 LP'
        >>> format_rank("MASTER", "I", 100)
        'Master - 100 LP'
    """
    return Rank.parse(tier, division, league_points).format()
