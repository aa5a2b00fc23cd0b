"""
Tests for the Supabase-backed onboarding stores.

Runs against the in-memory FakeDB from conftest.
"""

import asyncio

import httpx
import pytest
from postgrest.exceptions import APIError

from artwalls.errors import NotFound, StaleStateError, TransportError, ValidationError
from artwalls.plans import PlanTier
from onboarding.state import OnboardingState
from onboarding.store import (
    SupabaseArtworkStore,
    SupabaseOnboardingStore,
    SupabaseProfileStore,
    merge_state,
    translate_errors,
)


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


class TestMergeState:
    def test_union_of_steps(self):
        existing = OnboardingState(actor_id="a", current_step=3, steps_visited={1, 2})
        merged = merge_state(existing, {"current_step": 4, "steps_visited": {3}})

        assert merged.current_step == 4
        assert merged.steps_visited == {1, 2, 3}

    def test_step_regression_rejected(self):
        existing = OnboardingState(actor_id="a", current_step=5)
        with pytest.raises(StaleStateError):
            merge_state(existing, {"current_step": 3})

    def test_same_step_allowed(self):
        existing = OnboardingState(actor_id="a", current_step=5)
        assert merge_state(existing, {"current_step": 5}).current_step == 5

    def test_completion_is_terminal(self):
        existing = OnboardingState(actor_id="a", current_step=6, completed=True)
        merged = merge_state(existing, {"completed": False})
        assert merged.completed is True

    def test_created_at_preserved(self):
        existing = OnboardingState(actor_id="a")
        merged = merge_state(existing, {"selected_plan": PlanTier.PRO})

        assert merged.created_at == existing.created_at
        assert merged.updated_at >= existing.updated_at

    def test_unknown_field(self):
        with pytest.raises(ValidationError):
            merge_state(OnboardingState(actor_id="a"), {"actor_id": "b"})


class TestTranslateErrors:
    def test_not_found(self):
        with pytest.raises(NotFound):
            with translate_errors("read"):
                raise APIError({"code": "PGRST116", "message": "no rows"})

    def test_constraint_violation(self):
        with pytest.raises(ValidationError):
            with translate_errors("write"):
                raise APIError({"code": "23514", "message": "check constraint"})

    def test_other_api_error_is_transport(self):
        with pytest.raises(TransportError) as exc_info:
            with translate_errors("write"):
                raise APIError({"code": "PGRST301", "message": "jwt expired"})
        assert exc_info.value.retryable

    def test_network_error(self):
        with pytest.raises(TransportError):
            with translate_errors("write"):
                raise httpx.ConnectError("connection refused")


class TestOnboardingStore:
    def test_load_creates_default_row(self, fake_db):
        store = SupabaseOnboardingStore(fake_db)

        state = _run(store.load("artist-1"))

        assert state.current_step == 1
        assert not state.completed
        assert fake_db.tables["artist_onboarding"][0]["user_id"] == "artist-1"

    def test_load_existing(self, fake_db):
        fake_db.tables["artist_onboarding"] = [
            {"user_id": "artist-1", "current_step": 4, "steps_completed": [1, 2, 3]}
        ]
        state = _run(SupabaseOnboardingStore(fake_db).load("artist-1"))

        assert state.current_step == 4
        assert state.steps_visited == {1, 2, 3}

    def test_upsert_keeps_one_row(self, fake_db):
        store = SupabaseOnboardingStore(fake_db)

        async def scenario():
            await store.upsert("artist-1", {"current_step": 2, "steps_visited": {1}})
            return await store.upsert("artist-1", {"current_step": 3, "steps_visited": {2}})

        state = _run(scenario())

        assert len(fake_db.tables["artist_onboarding"]) == 1
        assert fake_db.tables["artist_onboarding"][0]["current_step"] == 3
        assert state.steps_visited == {1, 2}

    def test_upsert_rejects_regression_without_writing(self, fake_db):
        fake_db.tables["artist_onboarding"] = [{"user_id": "artist-1", "current_step": 5}]

        with pytest.raises(StaleStateError):
            _run(SupabaseOnboardingStore(fake_db).upsert("artist-1", {"current_step": 2}))

        assert ("artist_onboarding", "upsert") not in fake_db.calls

    def test_write_failure_is_transport_error(self, fake_db):
        fake_db.failures[("artist_onboarding", "upsert")] = httpx.ReadTimeout("timed out")

        with pytest.raises(TransportError):
            _run(SupabaseOnboardingStore(fake_db).upsert("artist-1", {"current_step": 2}))


class TestProfileStore:
    def test_read_and_write(self, fake_db):
        store = SupabaseProfileStore(fake_db)

        async def scenario():
            await store.write_profile_fields("artist-1", {"display_name": "Jane", "city": "Portland"})
            return await store.read_profile("artist-1")

        profile = _run(scenario())

        assert profile.display_name == "Jane"
        assert profile.city == "Portland"
        assert fake_db.tables["artists"][0]["name"] == "Jane"
        assert fake_db.tables["artists"][0]["city_primary"] == "Portland"

    def test_unknown_actor(self, fake_db):
        store = SupabaseProfileStore(fake_db)

        with pytest.raises(NotFound):
            _run(store.read_profile("nobody"))
        with pytest.raises(NotFound):
            _run(store.write_profile_fields("nobody", {"bio": "hi"}))

    def test_unknown_field(self, fake_db):
        with pytest.raises(ValidationError):
            _run(SupabaseProfileStore(fake_db).write_profile_fields("artist-1", {"email": "x"}))

    def test_empty_write_is_noop(self, fake_db):
        _run(SupabaseProfileStore(fake_db).write_profile_fields("artist-1", {}))
        assert fake_db.calls == []


class TestArtworkStore:
    def test_count_published(self, fake_db):
        fake_db.tables["artworks"] = [
            {"id": "w1", "artist_id": "artist-1", "is_publishable": True},
            {"id": "w2", "artist_id": "artist-1", "is_publishable": False},
            {"id": "w3", "artist_id": "artist-2", "is_publishable": True},
            {"id": "w4", "artist_id": "artist-1", "is_publishable": True},
        ]

        assert _run(SupabaseArtworkStore(fake_db).count_published("artist-1")) == 2

    def test_create_draft(self, fake_db, artwork_draft):
        store = SupabaseArtworkStore(fake_db)

        async def scenario():
            artwork_id = await store.create_draft_artwork("artist-1", artwork_draft)
            return artwork_id, await store.count_published("artist-1")

        artwork_id, count = _run(scenario())

        assert artwork_id == "artworks-1"
        assert count == 1
        assert fake_db.tables["artworks"][0]["price_cents"] == 24000

    def test_create_draft_invalid(self, fake_db, artwork_draft):
        with pytest.raises(ValidationError):
            _run(SupabaseArtworkStore(fake_db).create_draft_artwork("artist-1", {**artwork_draft, "price": 0}))
        assert "artworks" not in fake_db.tables
