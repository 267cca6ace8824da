"""Tests for the rank scale."""

import itertools

import pytest

from lp_recap.exceptions import InvalidRank
from lp_recap.services.rank_utils import (
    Division,
    Rank,
    Tier,
    difference,
    format_rank,
    to_points,
)

DIVISIONS_LOW_TO_HIGH = ["IV", "III", "II", "I"]
DIVISIONED_TIERS = [tier for tier in Tier if not tier.is_apex]


def test_to_points_bronze() -> None:
    assert to_points("BRONZE", "IV", 0) == 400
    assert to_points("BRONZE", "II", 50) == 650
    assert to_points("BRONZE", "I", 100) == 800


def test_to_points_gold() -> None:
    assert to_points("GOLD", "IV", 0) == 1200
    assert to_points("GOLD", "II", 50) == 1450
    assert to_points("GOLD", "I", 75) == 1575


def test_to_points_diamond() -> None:
    assert to_points("DIAMOND", "III", 33) == 2533


def test_apex_tier_bases_are_spaced_like_every_other_tier() -> None:
    assert to_points("MASTER", None, 0) == 2800
    assert to_points("GRANDMASTER", None, 0) == 3200
    assert to_points("CHALLENGER", None, 0) == 3600


def test_apex_league_points_are_unbounded() -> None:
    assert to_points("MASTER", None, 500) == 3300
    assert to_points("CHALLENGER", None, 1500) == 5100


def test_apex_division_is_validated_then_ignored() -> None:
    assert to_points("MASTER", "I", 100) == to_points("MASTER", None, 100)
    assert Rank.parse("GRANDMASTER", "I", 10).division is None

    with pytest.raises(InvalidRank):
        to_points("MASTER", "V", 100)


def test_case_insensitive() -> None:
    assert to_points("gold", "ii", 50) == 1450
    assert to_points("Gold", "II", 50) == 1450
    assert to_points(" GOLD ", "ii", 50) == 1450


def test_league_points_are_not_clamped() -> None:
    # Promotion overflow and negative values from bad data still compute
    assert to_points("GOLD", "IV", 120) == 1320
    assert to_points("GOLD", "IV", -5) == 1195


def test_strictly_monotonic_by_division_step() -> None:
    ladder = [
        to_points(tier.value, division, 0)
        for tier in DIVISIONED_TIERS
        for division in DIVISIONS_LOW_TO_HIGH
    ]
    ladder += [to_points(tier.value, None, 0) for tier in Tier if tier.is_apex]

    for lower, higher in itertools.pairwise(ladder):
        assert higher > lower


def test_one_tier_up_always_increases() -> None:
    tiers = list(Tier)
    for lower, higher in itertools.pairwise(tiers):
        low_division = None if lower.is_apex else "IV"
        high_division = None if higher.is_apex else "IV"
        assert to_points(higher.value, high_division, 0) > to_points(
            lower.value, low_division, 0
        )


def test_same_division_lp_difference() -> None:
    assert to_points("GOLD", "I", 64) - to_points("GOLD", "I", 60) == 4
    start = Rank.parse("GOLD", "I", 64)
    end = Rank.parse("GOLD", "I", 60)
    assert difference(start, end) == -4


def test_difference_across_tier_boundary() -> None:
    start = Rank.parse("GOLD", "I", 77)
    end = Rank.parse("PLATINUM", "IV", 4)
    assert difference(start, end) == 27


def test_difference_is_antisymmetric() -> None:
    ranks = [
        Rank.parse("IRON", "IV", 0),
        Rank.parse("SILVER", "II", 99),
        Rank.parse("EMERALD", "I", 12),
        Rank.parse("MASTER", None, 250),
        Rank.parse("CHALLENGER", None, 1200),
    ]
    for a, b in itertools.product(ranks, repeat=2):
        assert difference(a, b) == -difference(b, a)


def test_equal_ranks_have_zero_difference() -> None:
    rank = Rank.parse("DIAMOND", "III", 40)
    assert difference(rank, Rank.parse("diamond", "iii", 40)) == 0


@pytest.mark.parametrize(
    ("tier", "division"),
    [
        ("GOLDEN", "II"),
        ("", "II"),
        ("GOLD", "V"),
        ("GOLD", "2"),
        ("GOLD", None),
        ("GOLD", ""),
    ],
)
def test_invalid_rank(tier: str, division: str | None) -> None:
    with pytest.raises(InvalidRank):
        to_points(tier, division, 0)


@pytest.mark.parametrize("division", [2, 2.0, ["II"]])
def test_non_string_division_is_invalid_rank(division: object) -> None:
    with pytest.raises(InvalidRank):
        to_points("GOLD", division, 0)  # type: ignore[arg-type]

    with pytest.raises(InvalidRank):
        to_points("MASTER", division, 0)  # type: ignore[arg-type]


def test_invalid_rank_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        Rank.parse("WOOD", "IV", 0)


def test_rank_requires_division_below_master() -> None:
    with pytest.raises(InvalidRank):
        Rank(Tier.GOLD, None, 10)

    assert Rank(Tier.MASTER, Division.II, 10).division is None


def test_format_rank() -> None:
    assert format_rank("GOLD", "II", 50) == "Gold II - 50 LP"
    assert format_rank("MASTER", "I", 100) == "Master - 100 LP"
    assert format_rank("grandmaster", None, 0) == "Grandmaster - 0 LP"
    assert str(Rank.parse("IRON", "IV", 3)) == "Iron IV - 3 LP"
