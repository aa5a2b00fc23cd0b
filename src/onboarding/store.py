"""
Onboarding persistence.

Collaborator protocols the orchestrator depends on, plus their Supabase
implementations:
- OnboardingStateStore: one artist_onboarding row per artist
- ProfileStore: the permanent artists row
- ArtworkStore: artworks created during onboarding

Storage failures are translated to the artwalls error taxonomy here so the
orchestrator never sees PostgREST or HTTP exceptions.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Protocol

import httpx
from postgrest.exceptions import APIError

from artwalls.completeness import ArtistProfile
from artwalls.db.adapter import DatabaseAdapter
from artwalls.errors import ArtwallsError, NotFound, StaleStateError, TransportError, ValidationError

from .forms import ArtworkDraft, parse_artwork_draft
from .mapping import (
    ARTIST_SELECT_COLUMNS,
    artist_row_to_profile,
    profile_fields_to_row,
    state_row_to_state,
    state_to_row,
)
from .state import OnboardingState, clamp_step, utcnow

logger = logging.getLogger(__name__)


# =============================================================================
# Protocols
# =============================================================================


class OnboardingStateStore(Protocol):
    async def load(self, actor_id: str) -> OnboardingState:
        """Load state, creating the default row on first touch."""
        ...

    async def upsert(self, actor_id: str, partial: dict[str, Any]) -> OnboardingState:
        """Merge `partial` onto the stored state and persist it."""
        ...


class ProfileStore(Protocol):
    async def read_profile(self, actor_id: str) -> ArtistProfile:
        ...

    async def write_profile_fields(self, actor_id: str, fields: dict[str, Any]) -> None:
        ...


class ArtworkStore(Protocol):
    async def count_published(self, actor_id: str) -> int:
        ...

    async def create_draft_artwork(self, actor_id: str, draft: ArtworkDraft) -> str:
        ...


# =============================================================================
# Error translation
# =============================================================================


@contextmanager
def translate_errors(action: str) -> Iterator[None]:
    """Map PostgREST / HTTP failures to artwalls errors."""
    try:
        yield
    except ArtwallsError:
        raise
    except APIError as e:
        code = str(e.code or "")
        if code == "PGRST116":
            raise NotFound() from e
        if code.startswith(("22", "23")):
            # Postgres data exception / integrity constraint violation
            logger.warning(f"Constraint violation while trying to {action}: {e.message}")
            raise ValidationError(e.message or "") from e
        logger.error(f"Database error while trying to {action}: {e.message}")
        raise TransportError() from e
    except httpx.HTTPError as e:
        logger.error(f"Network error while trying to {action}: {e}")
        raise TransportError() from e


# =============================================================================
# State merging
# =============================================================================


_STATE_FIELDS = set(OnboardingState.__dataclass_fields__) - {"actor_id", "created_at", "updated_at"}


def merge_state(existing: OnboardingState, partial: dict[str, Any]) -> OnboardingState:
    """
    Apply a partial update to a stored state.

    steps_visited is unioned, completion is terminal, and an update that would
    move current_step backwards raises StaleStateError (another window already
    saved further progress).
    """
    unknown = set(partial) - _STATE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown onboarding fields: {sorted(unknown)}")

    data = {name: getattr(existing, name) for name in OnboardingState.__dataclass_fields__}
    data.update(partial)

    if "current_step" in partial:
        step = clamp_step(partial["current_step"])
        if step < existing.current_step:
            raise StaleStateError()
        data["current_step"] = step

    data["steps_visited"] = set(existing.steps_visited) | set(partial.get("steps_visited", ()))
    if existing.completed:
        data["completed"] = True
        data["completed_at"] = existing.completed_at
    data["created_at"] = existing.created_at
    data["updated_at"] = utcnow()
    return OnboardingState(**data)


# =============================================================================
# Supabase implementations
# =============================================================================


class SupabaseOnboardingStore:
    """artist_onboarding table, keyed by user_id."""

    def __init__(self, db: DatabaseAdapter, table: str = "artist_onboarding"):
        self._db = db
        self._table = table

    async def _fetch(self, actor_id: str) -> OnboardingState | None:
        with translate_errors("load onboarding state"):
            result = self._db.table(self._table).select("*").eq("user_id", actor_id).limit(1).execute()
        if result.data:
            return state_row_to_state(result.data[0])
        return None

    async def _write(self, state: OnboardingState) -> None:
        with translate_errors("save onboarding state"):
            self._db.table(self._table).upsert(state_to_row(state), on_conflict="user_id").execute()

    async def load(self, actor_id: str) -> OnboardingState:
        state = await self._fetch(actor_id)
        if state is not None:
            return state

        state = OnboardingState(actor_id=actor_id)
        await self._write(state)
        logger.info(f"Created onboarding state for {actor_id}")
        return state

    async def upsert(self, actor_id: str, partial: dict[str, Any]) -> OnboardingState:
        existing = await self._fetch(actor_id) or OnboardingState(actor_id=actor_id)
        merged = merge_state(existing, partial)
        await self._write(merged)
        return merged


class SupabaseProfileStore:
    """Permanent artist profile (artists table, keyed by id)."""

    def __init__(self, db: DatabaseAdapter, table: str = "artists"):
        self._db = db
        self._table = table

    async def read_profile(self, actor_id: str) -> ArtistProfile:
        with translate_errors("read artist profile"):
            result = (
                self._db.table(self._table)
                .select(ARTIST_SELECT_COLUMNS)
                .eq("id", actor_id)
                .limit(1)
                .execute()
            )
        if not result.data:
            raise NotFound(f"No artist profile for {actor_id}")
        return artist_row_to_profile(result.data[0])

    async def write_profile_fields(self, actor_id: str, fields: dict[str, Any]) -> None:
        try:
            row = profile_fields_to_row(fields)
        except KeyError as e:
            raise ValidationError(str(e.args[0])) from None
        if not row:
            return

        with translate_errors("update artist profile"):
            result = self._db.table(self._table).update(row).eq("id", actor_id).execute()
        if not result.data:
            raise NotFound(f"No artist profile for {actor_id}")


class SupabaseArtworkStore:
    """Artworks table (artist_id foreign key)."""

    def __init__(self, db: DatabaseAdapter, table: str = "artworks"):
        self._db = db
        self._table = table

    async def count_published(self, actor_id: str) -> int:
        with translate_errors("count artworks"):
            result = (
                self._db.table(self._table)
                .select("id", count="exact", head=True)
                .eq("artist_id", actor_id)
                .eq("is_publishable", True)
                .execute()
            )
        return int(result.count or 0)

    async def create_draft_artwork(self, actor_id: str, draft: "ArtworkDraft | dict[str, Any]") -> str:
        draft = parse_artwork_draft(draft)
        with translate_errors("create artwork"):
            result = self._db.table(self._table).insert(draft.to_row(actor_id)).execute()
        if not result.data:
            raise TransportError("Artwork was not saved. Please try again.")
        artwork_id = str(result.data[0]["id"])
        logger.info(f"Artwork {artwork_id} created for {actor_id}")
        return artwork_id
