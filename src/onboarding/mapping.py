"""
Row mapping for the persistence boundary.

The artists table carries several historical column names for the same
concept (display_name/name, city/city_primary, mediums/art_types,
instagram_url/instagram_handle). Reads take the first non-empty alias;
writes fill every alias. Nothing outside this module sees raw rows.
"""

from datetime import datetime
from typing import Any

from artwalls.completeness import ArtistProfile
from artwalls.plans import PlanTier, normalize_tier

from .state import OnboardingState, clamp_step

# Normalized field -> storage columns, preferred column first
ARTIST_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "display_name": ("display_name", "name"),
    "city": ("city", "city_primary"),
    "secondary_city": ("city_secondary",),
    "bio": ("bio",),
    "mediums": ("mediums", "art_types"),
    "style_tags": ("style_tags",),
    "instagram_url": ("instagram_url", "instagram_handle"),
    "website_url": ("website_url", "portfolio_url"),
    "accepts_commissions": ("accepts_commissions",),
    "price_range": ("price_range",),
    "availability_notes": ("availability_notes",),
    "framing_notes": ("framing_notes",),
    "profile_photo": ("profile_photo_url",),
    "phone": ("phone",),
    "payouts_enabled": ("stripe_payouts_enabled",),
    "subscription_tier": ("subscription_tier",),
    "onboarding_completed": ("onboarding_completed",),
    "onboarding_step": ("onboarding_step",),
    "profile_completion_percent": ("profile_completion_percent",),
    "updated_at": ("updated_at",),
}

ARTIST_SELECT_COLUMNS = ",".join(
    ["id"] + sorted({col for cols in ARTIST_COLUMN_ALIASES.values() for col in cols})
)

_LIST_FIELDS = {"mediums", "style_tags"}
_BOOL_FIELDS = {"accepts_commissions", "payouts_enabled", "onboarding_completed"}


def _first_present(row: dict[str, Any], columns: tuple[str, ...]) -> Any:
    for column in columns:
        value = row.get(column)
        if value not in (None, "", []):
            return value
    return None


def parse_timestamp(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return None


def format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


# =============================================================================
# Artist profile rows
# =============================================================================


def artist_row_to_profile(row: dict[str, Any]) -> ArtistProfile:
    """Normalize a raw artists row."""
    values: dict[str, Any] = {}
    for name in ArtistProfile.__dataclass_fields__:
        columns = ARTIST_COLUMN_ALIASES.get(name)
        if not columns:
            continue
        value = _first_present(row, columns)
        if value is None:
            continue
        if name in _LIST_FIELDS:
            value = [str(v) for v in value] if isinstance(value, list) else []
        elif name in _BOOL_FIELDS:
            value = bool(value)
        elif name == "onboarding_step":
            value = clamp_step(value)
        values[name] = value
    return ArtistProfile(**values)


def profile_fields_to_row(fields: dict[str, Any]) -> dict[str, Any]:
    """Expand normalized fields to every storage column that carries them."""
    row: dict[str, Any] = {}
    for name, value in fields.items():
        columns = ARTIST_COLUMN_ALIASES.get(name)
        if columns is None:
            raise KeyError(f"Unknown profile field: {name}")
        if isinstance(value, datetime):
            value = value.isoformat()
        for column in columns:
            row[column] = value
    return row


# =============================================================================
# Onboarding state rows
# =============================================================================


def state_row_to_state(row: dict[str, Any]) -> OnboardingState:
    """Normalize a raw artist_onboarding row."""
    steps = row.get("steps_completed") or []
    plan = row.get("selected_plan")
    selected = normalize_tier(plan, fallback=None) if plan else None
    active = row.get("active_plan")
    if active:
        active_plan = normalize_tier(active, fallback=None)
    else:
        # Rows written before active_plan existed only carry the flag
        active_plan = selected if row.get("plan_activated") else None
    return OnboardingState(
        actor_id=str(row["user_id"]),
        current_step=clamp_step(row.get("current_step") or 1),
        steps_visited={int(s) for s in steps} if isinstance(steps, list) else set(),
        completed=bool(row.get("completed")),
        completed_at=parse_timestamp(row.get("completed_at")),
        selected_plan=selected,
        skipped_plan_selection=bool(row.get("skipped_plan_selection")),
        active_plan=active_plan,
        plan_activated_at=parse_timestamp(row.get("plan_activated_at")),
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
    )


def state_to_row(state: OnboardingState) -> dict[str, Any]:
    plan: PlanTier | None = state.selected_plan
    active: PlanTier | None = state.active_plan
    return {
        "user_id": state.actor_id,
        "current_step": int(state.current_step),
        "steps_completed": sorted(int(s) for s in state.steps_visited),
        "completed": state.completed,
        "completed_at": format_timestamp(state.completed_at),
        "selected_plan": plan.value if plan is not None else None,
        "skipped_plan_selection": state.skipped_plan_selection,
        "active_plan": active.value if active is not None else None,
        "plan_activated": state.plan_activated,
        "plan_activated_at": format_timestamp(state.plan_activated_at),
        "created_at": format_timestamp(state.created_at),
        "updated_at": format_timestamp(state.updated_at),
    }
