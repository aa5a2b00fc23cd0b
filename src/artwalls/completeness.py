"""
Profile Completeness Evaluator.

Helps artists understand what's needed for a complete, sales-ready profile.
Eight tracked fields, each worth 1/8 of the score.
"""

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

MIN_BIO_LENGTH = 50
TRACKED_FIELDS = ("name", "photo", "bio", "artTypes", "location", "phone", "portfolio", "social")

ProfileLevel = Literal["beginner", "intermediate", "advanced", "complete"]


@dataclass
class ArtistProfile:
    """
    Normalized artist profile record.

    Storage aliases (display_name/name, city/city_primary, ...) are resolved by
    onboarding.mapping before a row becomes an ArtistProfile.
    """

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
    profile_photo: str = ""
    phone: str = ""
    secondary_city: str = ""
    payouts_enabled: bool = False
    subscription_tier: str | None = None
    onboarding_completed: bool = False
    onboarding_step: int = 1


@dataclass(frozen=True)
class ProfileCompleteness:
    percentage: int
    completed_fields: frozenset[str]
    missing_fields: frozenset[str]
    next_step_hint: str
    recommendations: tuple[str, ...] = ()

    @property
    def is_complete(self) -> bool:
        return self.percentage == 100


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _get(profile: Any, name: str, default: Any = None) -> Any:
    if profile is None:
        return default
    if isinstance(profile, Mapping):
        return profile.get(name, default)
    return getattr(profile, name, default)


def evaluate_completeness(profile: "ArtistProfile | Mapping[str, Any] | None") -> ProfileCompleteness:
    """
    Score a profile. Works on partial or empty input and never raises.

    Accepts an ArtistProfile, any object with the same attribute names, a
    mapping with those keys, or None.
    """
    completed: list[str] = []
    missing: list[str] = []
    recommendations: list[str] = []

    def check(name: str, ok: bool, tip: str) -> None:
        if ok:
            completed.append(name)
        else:
            missing.append(name)
            recommendations.append(tip)

    check("name", bool(_text(_get(profile, "display_name"))), "Add your full name to your profile")
    check(
        "photo",
        bool(_text(_get(profile, "profile_photo"))),
        "Upload a professional profile photo to increase recognition",
    )

    bio = _text(_get(profile, "bio"))
    if len(bio) >= MIN_BIO_LENGTH:
        completed.append("bio")
    elif bio:
        missing.append("bio")
        recommendations.append(f"Expand your bio to at least {MIN_BIO_LENGTH} characters to tell your story")
    else:
        missing.append("bio")
        recommendations.append("Write a compelling bio about your artistic vision and style")

    mediums = _get(profile, "mediums") or []
    check(
        "artTypes",
        isinstance(mediums, (list, tuple, set, frozenset)) and len(mediums) > 0,
        "Select your art types so venues can find you more easily",
    )
    check(
        "location",
        bool(_text(_get(profile, "city"))),
        "Set your primary city so venues can find local artists",
    )
    check("phone", bool(_text(_get(profile, "phone"))), "Add a phone number for venue communications")
    check(
        "portfolio",
        bool(_text(_get(profile, "website_url"))),
        "Link to your portfolio or personal website",
    )
    check(
        "social",
        bool(_text(_get(profile, "instagram_url"))),
        "Add your Instagram handle to showcase more work",
    )

    percentage = round(len(completed) / len(TRACKED_FIELDS) * 100)

    if "photo" in missing:
        next_step = "Upload a profile photo"
    elif "bio" in missing:
        next_step = "Write your bio"
    elif "artTypes" in missing:
        next_step = "Select your art types"
    elif "location" in missing:
        next_step = "Set your location"
    else:
        next_step = "Add portfolio or social media"

    return ProfileCompleteness(
        percentage=percentage,
        completed_fields=frozenset(completed),
        missing_fields=frozenset(missing),
        next_step_hint=next_step,
        recommendations=tuple(recommendations),
    )


def profile_level(percentage: int) -> ProfileLevel:
    if percentage >= 100:
        return "complete"
    if percentage >= 75:
        return "advanced"
    if percentage >= 50:
        return "intermediate"
    return "beginner"


SALES_IMPACT_MESSAGES = {
    "beginner": "Get started by adding your profile details to help venues discover you",
    "intermediate": "You're on the right track! Complete more fields to boost visibility",
    "advanced": "Almost there! A complete profile significantly increases sales opportunities",
    "complete": "Your profile is complete and optimized for sales!",
}


def sales_impact_message(level: str) -> str:
    return SALES_IMPACT_MESSAGES.get(level, SALES_IMPACT_MESSAGES["beginner"])
