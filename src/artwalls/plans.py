"""
Subscription plans.

Single source of truth for tier definitions. The earnings engine, the plan
bridge and the CLI all read these constants.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum

from artwalls.errors import InvalidTier


class PlanTier(Enum):
    """Artist subscription tiers, cheapest first."""

    FREE = "free"
    STARTER = "starter"
    GROWTH = "growth"
    PRO = "pro"


@dataclass(frozen=True)
class PlanDefinition:
    tier: PlanTier
    name: str
    take_home_percent: int
    monthly_price: int
    artwork_ceiling: float  # math.inf for unbounded
    protection_included: bool
    platform_bps: int

    @property
    def is_paid(self) -> bool:
        return self.monthly_price > 0


PLANS: dict[PlanTier, PlanDefinition] = {
    PlanTier.FREE: PlanDefinition(PlanTier.FREE, "Free", 60, 0, 1, False, 2500),
    PlanTier.STARTER: PlanDefinition(PlanTier.STARTER, "Starter", 80, 9, 10, False, 500),
    PlanTier.GROWTH: PlanDefinition(PlanTier.GROWTH, "Growth", 83, 19, 30, False, 200),
    PlanTier.PRO: PlanDefinition(PlanTier.PRO, "Pro", 85, 39, math.inf, True, 0),
}

PAID_TIERS = frozenset(tier for tier, plan in PLANS.items() if plan.is_paid)

# Historical names for tiers found in stored rows and URLs
TIER_ALIASES = {
    "free": PlanTier.FREE,
    "freetier": PlanTier.FREE,
    "tier1": PlanTier.FREE,
    "starter": PlanTier.STARTER,
    "basictier": PlanTier.STARTER,
    "basic": PlanTier.STARTER,
    "tier2": PlanTier.STARTER,
    "growth": PlanTier.GROWTH,
    "tier3": PlanTier.GROWTH,
    "scale": PlanTier.GROWTH,
    "pro": PlanTier.PRO,
    "professional": PlanTier.PRO,
    "premium": PlanTier.PRO,
    "tier4": PlanTier.PRO,
}


def parse_tier(value: "PlanTier | str") -> PlanTier:
    """
    Strictly resolve a tier id.

    Raises InvalidTier for anything that is not an exact tier value. Use
    normalize_tier() for lenient parsing of legacy data.
    """
    if isinstance(value, PlanTier):
        return value
    try:
        return PlanTier(str(value).strip().lower())
    except ValueError:
        raise InvalidTier(f"Unknown plan: {value!r}") from None


def get_plan(tier: "PlanTier | str") -> PlanDefinition:
    return PLANS[parse_tier(tier)]


def all_plans() -> list[PlanDefinition]:
    """All plans, cheapest first (for UI iteration)."""
    return list(PLANS.values())


def take_home_percents() -> dict[str, int]:
    return {tier.value: plan.take_home_percent for tier, plan in PLANS.items()}


def _nearest_by_take_home(fraction: float) -> PlanTier:
    return min(PLANS, key=lambda t: abs(PLANS[t].take_home_percent / 100 - fraction))


def _nearest_by_platform_bps(bps: int) -> PlanTier:
    return min(PLANS, key=lambda t: abs(PLANS[t].platform_bps - bps))


def _from_number(number: float) -> PlanTier:
    if number >= 100:
        return _nearest_by_platform_bps(abs(round(number)))
    if number > 1:
        return _nearest_by_take_home(number / 100)
    return _nearest_by_take_home(number)


def normalize_tier(raw, fallback: PlanTier = PlanTier.STARTER) -> PlanTier:
    """
    Leniently map legacy tier representations to a PlanTier.

    Accepts tier names and aliases ("Premium", "tier1"), take-home percents
    ("83%", 83, 0.85), platform basis points ("500bps", 2500) and dicts with a
    tier/plan/id/name key. Anything unrecognized returns `fallback`.
    """
    if isinstance(raw, PlanTier):
        return raw

    if isinstance(raw, dict):
        candidate = raw.get("tier") or raw.get("plan") or raw.get("id") or raw.get("name")
        return normalize_tier(candidate, fallback) if candidate else fallback

    if isinstance(raw, bool):
        return fallback

    if isinstance(raw, (int, float)):
        if math.isfinite(raw) and raw >= 0:
            return _from_number(raw)
        return fallback

    if isinstance(raw, str):
        lower = raw.strip().lower()
        if not lower:
            return fallback
        key = re.sub(r"[^a-z0-9]+", "", lower)
        if key in TIER_ALIASES:
            return TIER_ALIASES[key]

        digits = re.sub(r"[^0-9.]+", "", lower)
        try:
            number = float(digits)
        except ValueError:
            return fallback
        if "%" in lower:
            return _nearest_by_take_home(number / 100)
        if lower.endswith("bps"):
            return _nearest_by_platform_bps(abs(round(number)))
        return _from_number(number)

    return fallback
