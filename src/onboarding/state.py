"""
Onboarding State Management.

Tracks an artist's progress through the six onboarding steps. State is
persisted to the artist_onboarding table so the wizard can resume after an
interruption. Requirement gates are derived, never stored.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any

from artwalls.completeness import ArtistProfile
from artwalls.plans import PlanTier

MIN_PUBLISHED_ARTWORKS = 3
MAX_MEDIUMS = 4
MAX_STYLE_TAGS = 5


class OnboardingStep(IntEnum):
    """Wizard steps, in order."""
    BASICS = 1       # Display name, city, bio
    STYLE = 2        # Medium + style tags
    ARTWORKS = 3     # Seed at least three artworks
    PRICING = 4      # Price range, commissions, availability
    PAYOUTS = 5      # Stripe Connect payout setup
    PLAN = 6         # Plan selection + finish

    @property
    def label(self) -> str:
        return self.name.title()


FIRST_STEP = OnboardingStep.BASICS
LAST_STEP = OnboardingStep.PLAN
TOTAL_STEPS = len(OnboardingStep)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class OnboardingProfile:
    """Draft fields edited during onboarding, merged into the artist profile on save."""

    display_name: str = ""
    city: str = ""
    bio: str = ""
    mediums: list[str] = field(default_factory=list)
    style_tags: list[str] = field(default_factory=list)
    instagram_url: str = ""
    website_url: str = ""
    accepts_commissions: bool = False
    price_range: str = ""
    availability_notes: str = ""
    framing_notes: str = ""

    @classmethod
    def from_artist(cls, artist: ArtistProfile) -> "OnboardingProfile":
        return cls(
            display_name=artist.display_name,
            city=artist.city,
            bio=artist.bio,
            mediums=list(artist.mediums),
            style_tags=list(artist.style_tags),
            instagram_url=artist.instagram_url,
            website_url=artist.website_url,
            accepts_commissions=artist.accepts_commissions,
            price_range=artist.price_range,
            availability_notes=artist.availability_notes,
            framing_notes=artist.framing_notes,
        )

    def merged(self, updates: dict[str, Any]) -> "OnboardingProfile":
        """Copy of this draft with `updates` applied (unknown keys ignored)."""
        known = {k: v for k, v in updates.items() if k in self.__dataclass_fields__}
        data = {name: getattr(self, name) for name in self.__dataclass_fields__}
        data.update(known)
        data["mediums"] = list(data["mediums"])
        data["style_tags"] = list(data["style_tags"])
        return OnboardingProfile(**data)


@dataclass(frozen=True)
class RequirementGates:
    """Preconditions for completing onboarding."""

    basics: bool = False
    style: bool = False
    artworks: bool = False

    @property
    def satisfied(self) -> bool:
        return self.basics and self.style and self.artworks

    @property
    def missing(self) -> list[str]:
        return [name for name in ("basics", "style", "artworks") if not getattr(self, name)]


def _filled(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def basics_met(profile: OnboardingProfile) -> bool:
    return _filled(profile.display_name) and _filled(profile.city) and _filled(profile.bio)


def style_met(profile: OnboardingProfile) -> bool:
    return len(profile.mediums) > 0 and len(profile.style_tags) > 0


def artworks_met(published_count: int) -> bool:
    return published_count >= MIN_PUBLISHED_ARTWORKS


def evaluate_gates(profile: OnboardingProfile, published_count: int) -> RequirementGates:
    """Derive all three gates from a profile draft and a live artwork count."""
    return RequirementGates(
        basics=basics_met(profile),
        style=style_met(profile),
        artworks=artworks_met(published_count),
    )


@dataclass
class OnboardingState:
    """
    Persisted onboarding progress for one artist.

    current_step records the furthest step reached. completed is terminal:
    the row is never deleted. selected_plan is the artist's latest choice;
    active_plan is the plan actually billed and only changes on provider
    confirmation (or when the free plan is chosen with nothing billed).
    """

    actor_id: str
    current_step: int = FIRST_STEP
    steps_visited: set[int] = field(default_factory=set)
    completed: bool = False
    completed_at: datetime | None = None
    selected_plan: PlanTier | None = None
    skipped_plan_selection: bool = False
    active_plan: PlanTier | None = None
    plan_activated_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self):
        now = utcnow()
        if self.created_at is None:
            self.created_at = now
        if self.updated_at is None:
            self.updated_at = now
        self.steps_visited = set(self.steps_visited)

    @property
    def plan_activated(self) -> bool:
        return self.active_plan is not None

    @property
    def missing_steps(self) -> list[int]:
        """Steps before the current one that were never saved (gap detection)."""
        return [s for s in range(FIRST_STEP, self.current_step) if s not in self.steps_visited]


def clamp_step(step: int) -> int:
    return max(int(FIRST_STEP), min(int(step), int(LAST_STEP)))


def next_step_after(step: int) -> int:
    """Step the wizard moves to once `step` is saved."""
    return clamp_step(step + 1)


def progress_percent(step: int) -> int:
    return round(clamp_step(step) / TOTAL_STEPS * 100)
