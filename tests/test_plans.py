"""
Tests for plan tier definitions and tier parsing.
"""

import pytest

from artwalls.errors import InvalidTier, ValidationError
from artwalls.plans import (
    PAID_TIERS,
    PLANS,
    PlanTier,
    get_plan,
    normalize_tier,
    parse_tier,
    take_home_percents,
)


class TestPlanTable:
    def test_constants(self):
        assert take_home_percents() == {"free": 60, "starter": 80, "growth": 83, "pro": 85}
        assert [p.monthly_price for p in PLANS.values()] == [0, 9, 19, 39]
        assert [p.platform_bps for p in PLANS.values()] == [2500, 500, 200, 0]

    def test_paid_tiers(self):
        assert PAID_TIERS == {PlanTier.STARTER, PlanTier.GROWTH, PlanTier.PRO}
        assert not get_plan("free").is_paid

    def test_take_home_plus_platform_plus_venue_is_whole(self):
        for plan in PLANS.values():
            assert plan.take_home_percent + plan.platform_bps / 100 + 15 == 100


class TestParseTier:
    @pytest.mark.parametrize("value", ["free", "Starter", " growth ", "PRO", PlanTier.PRO])
    def test_valid(self, value):
        assert isinstance(parse_tier(value), PlanTier)

    @pytest.mark.parametrize("value", ["premium", "", "tier1", None])
    def test_strict_rejects_aliases(self, value):
        with pytest.raises(InvalidTier):
            parse_tier(value)

    def test_invalid_tier_is_validation_error(self):
        with pytest.raises(ValidationError):
            parse_tier("enterprise")


class TestNormalizeTier:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Premium", PlanTier.PRO),
            ("professional", PlanTier.PRO),
            ("tier1", PlanTier.FREE),
            ("free-tier", PlanTier.FREE),
            ("Basic", PlanTier.STARTER),
            ("scale", PlanTier.GROWTH),
            ("83%", PlanTier.GROWTH),
            ("60 %", PlanTier.FREE),
            ("500bps", PlanTier.STARTER),
            ("2500 bps", PlanTier.FREE),
            (85, PlanTier.PRO),
            (0.8, PlanTier.STARTER),
            (200, PlanTier.GROWTH),
            (0, PlanTier.FREE),
            ({"plan": "growth"}, PlanTier.GROWTH),
            ({"tier": {"id": "pro"}}, PlanTier.PRO),
            (PlanTier.FREE, PlanTier.FREE),
        ],
    )
    def test_aliases(self, raw, expected):
        assert normalize_tier(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "gold", True, -5, float("nan"), {}, ["pro"]])
    def test_unrecognized_falls_back(self, raw):
        assert normalize_tier(raw) == PlanTier.STARTER
        assert normalize_tier(raw, fallback=PlanTier.FREE) == PlanTier.FREE
