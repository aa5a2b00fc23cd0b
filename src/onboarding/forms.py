"""
Onboarding Forms.

Validates what the wizard submits before anything is written:
- profile draft updates (step saves)
- artwork drafts (artwork seeding step)

Pydantic errors are converted to artwalls ValidationError so callers only
deal with one error taxonomy.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from artwalls.errors import ValidationError

from .state import MAX_MEDIUMS, MAX_STYLE_TAGS


def _first_error(exc: PydanticValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(part) for part in err.get("loc", ()))
    msg = err.get("msg", "Invalid value")
    return f"{loc}: {msg}" if loc else msg


def _clean_tags(values: list[str]) -> list[str]:
    seen: list[str] = []
    for value in values:
        tag = value.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


# =============================================================================
# Profile draft updates
# =============================================================================


class ProfileDraftUpdate(BaseModel):
    """Partial update to the onboarding profile draft. Unset fields are untouched."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    display_name: str | None = Field(default=None, max_length=120)
    city: str | None = Field(default=None, max_length=120)
    bio: str | None = Field(default=None, max_length=2000)
    mediums: list[str] | None = None
    style_tags: list[str] | None = None
    instagram_url: str | None = Field(default=None, max_length=300)
    website_url: str | None = Field(default=None, max_length=300)
    accepts_commissions: bool | None = None
    price_range: str | None = Field(default=None, max_length=120)
    availability_notes: str | None = Field(default=None, max_length=1000)
    framing_notes: str | None = Field(default=None, max_length=1000)

    @field_validator("mediums")
    @classmethod
    def validate_mediums(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        tags = _clean_tags(v)
        if len(tags) > MAX_MEDIUMS:
            raise ValueError(f"Choose up to {MAX_MEDIUMS} mediums")
        return tags

    @field_validator("style_tags")
    @classmethod
    def validate_style_tags(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        tags = _clean_tags(v)
        if len(tags) > MAX_STYLE_TAGS:
            raise ValueError(f"Choose up to {MAX_STYLE_TAGS} style tags")
        return tags

    def to_updates(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


def parse_profile_updates(data: dict[str, Any] | None) -> dict[str, Any]:
    """Validate raw draft updates; raises ValidationError."""
    if not data:
        return {}
    try:
        return ProfileDraftUpdate.model_validate(data).to_updates()
    except PydanticValidationError as e:
        raise ValidationError(_first_error(e)) from None


# =============================================================================
# Artwork drafts
# =============================================================================


class ArtworkDraft(BaseModel):
    """One artwork added during onboarding."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=200)
    price: Decimal = Field(gt=0)
    width: float | None = Field(default=None, gt=0)
    height: float | None = Field(default=None, gt=0)
    unit: Literal["in", "cm"] = "in"
    image_url: str = Field(min_length=1)

    @model_validator(mode="after")
    def validate_price_and_dimensions(self) -> "ArtworkDraft":
        if self.price_cents < 1:
            raise ValueError("price must be at least $0.01")
        # Dimensions are only kept as a pair
        if (self.width is None) != (self.height is None):
            self.width = None
            self.height = None
        return self

    @property
    def price_cents(self) -> int:
        return int((self.price * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))

    def to_row(self, actor_id: str) -> dict[str, Any]:
        has_size = self.width is not None and self.height is not None
        return {
            "artist_id": actor_id,
            "title": self.title,
            "price_cents": self.price_cents,
            "currency": "usd",
            "image_url": self.image_url,
            "dimensions_width": self.width if has_size else None,
            "dimensions_height": self.height if has_size else None,
            "dimensions_unit": self.unit,
            "status": "available",
            "is_publishable": True,
        }


def parse_artwork_draft(data: "ArtworkDraft | dict[str, Any]") -> ArtworkDraft:
    """Validate an artwork draft; raises ValidationError."""
    if isinstance(data, ArtworkDraft):
        return data
    try:
        return ArtworkDraft.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(_first_error(e)) from None
