"""
Tests for onboarding form validation.
"""

from decimal import Decimal

import pytest

from artwalls.errors import ValidationError
from onboarding.forms import ArtworkDraft, parse_artwork_draft, parse_profile_updates


class TestProfileUpdates:
    def test_empty(self):
        assert parse_profile_updates(None) == {}
        assert parse_profile_updates({}) == {}

    def test_only_set_fields_returned(self):
        updates = parse_profile_updates({"display_name": "  Jane  ", "city": "Portland"})
        assert updates == {"display_name": "Jane", "city": "Portland"}

    def test_tags_deduplicated_and_trimmed(self):
        updates = parse_profile_updates({"mediums": ["Oil", " Oil", "", "Watercolor"]})
        assert updates["mediums"] == ["Oil", "Watercolor"]

    def test_too_many_mediums(self):
        with pytest.raises(ValidationError, match="mediums"):
            parse_profile_updates({"mediums": ["a", "b", "c", "d", "e"]})

    def test_too_many_style_tags(self):
        with pytest.raises(ValidationError, match="style"):
            parse_profile_updates({"style_tags": ["a", "b", "c", "d", "e", "f"]})

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            parse_profile_updates({"favorite_color": "teal"})

    def test_none_values_dropped(self):
        assert parse_profile_updates({"bio": None, "city": "Bend"}) == {"city": "Bend"}


class TestArtworkDraft:
    def test_valid_draft(self, artwork_draft):
        draft = parse_artwork_draft(artwork_draft)

        assert draft.price == Decimal("240.00")
        assert draft.price_cents == 24000

    def test_to_row(self, artwork_draft):
        row = parse_artwork_draft(artwork_draft).to_row("artist-1")

        assert row["artist_id"] == "artist-1"
        assert row["price_cents"] == 24000
        assert row["currency"] == "usd"
        assert row["is_publishable"] is True
        assert row["dimensions_width"] == 24
        assert row["dimensions_unit"] == "in"

    def test_half_dimensions_dropped(self, artwork_draft):
        draft = parse_artwork_draft({**artwork_draft, "height": None})
        row = draft.to_row("artist-1")
        assert row["dimensions_width"] is None
        assert row["dimensions_height"] is None

    @pytest.mark.parametrize(
        "change",
        [
            {"price": 0},
            {"price": "-5"},
            {"price": "0.004"},
            {"title": ""},
            {"title": "   "},
            {"image_url": ""},
            {"unit": "ft"},
        ],
    )
    def test_invalid(self, artwork_draft, change):
        with pytest.raises(ValidationError):
            parse_artwork_draft({**artwork_draft, **change})

    def test_passthrough_instance(self, artwork_draft):
        draft = ArtworkDraft(**artwork_draft)
        assert parse_artwork_draft(draft) is draft

    def test_smallest_price_is_one_cent(self, artwork_draft):
        assert parse_artwork_draft({**artwork_draft, "price": "0.005"}).price_cents == 1
        assert parse_artwork_draft({**artwork_draft, "price": "0.01"}).price_cents == 1
