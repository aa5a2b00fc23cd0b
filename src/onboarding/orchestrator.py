"""
Onboarding Orchestrator.

Stateful controller for one artist's pass through the six-step wizard:

1. Basics   2. Style   3. Artworks   4. Pricing   5. Payouts   6. Plan

Every transition follows the same order: validate, write the artist profile,
write onboarding state (always the last write), update the in-memory copy,
then emit the lifecycle event. A failed write leaves the in-memory state as
it was; the next load() re-derives requirement gates from storage.

Mutating operations for the same artist never interleave: a second call
while one is in flight raises OperationInProgress.
"""

import dataclasses
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, AsyncIterator

from artwalls.analytics import AnalyticsSink, NullAnalyticsSink
from artwalls.completeness import ArtistProfile, evaluate_completeness
from artwalls.errors import ArtwallsError, OperationInProgress, PreconditionFailed, ValidationError
from artwalls.plans import PAID_TIERS, PlanTier, parse_tier

from .forms import ArtworkDraft, parse_artwork_draft, parse_profile_updates
from .plan_bridge import PlanBridge
from .state import (
    LAST_STEP,
    OnboardingProfile,
    OnboardingState,
    OnboardingStep,
    RequirementGates,
    artworks_met,
    basics_met,
    evaluate_gates,
    next_step_after,
    progress_percent,
    style_met,
    utcnow,
)
from .store import ArtworkStore, OnboardingStateStore, ProfileStore

logger = logging.getLogger(__name__)

# Artists with a mutating operation in flight (process-wide, so two wizard
# instances for the same artist are serialized too).
_in_flight: set[str] = set()


class PlanAction(Enum):
    FREE = "free"
    UPGRADE = "upgrade"
    SKIP = "skip"


@dataclass(frozen=True)
class OnboardingSnapshot:
    """Read-only view of onboarding progress for progress indicators."""

    actor_id: str
    step: int
    gates: RequirementGates
    selected_plan: PlanTier | None
    active_plan: PlanTier | None
    plan_active: bool
    skipped_plan_selection: bool
    completed: bool
    completed_at: datetime | None
    artwork_count: int
    profile: OnboardingProfile
    profile_percentage: int

    @property
    def requirements_satisfied(self) -> bool:
        return self.gates.satisfied

    @property
    def progress_percent(self) -> int:
        return progress_percent(self.step)


@dataclass(frozen=True)
class StepOutcome:
    """Result of a wizard transition."""

    state: OnboardingSnapshot
    exit_wizard: bool = False
    redirect_url: str | None = None


class OnboardingOrchestrator:
    """
    Drives one artist's onboarding.

    Collaborators are injected; nothing here knows about Supabase or Stripe.
    Call load() first to resume from storage (mutating operations load
    lazily if it was skipped).
    """

    def __init__(
        self,
        actor_id: str,
        *,
        state_store: OnboardingStateStore,
        profile_store: ProfileStore,
        artwork_store: ArtworkStore,
        analytics: AnalyticsSink | None = None,
        plan_bridge: PlanBridge | None = None,
    ):
        if not actor_id:
            raise ValidationError("actor_id is required")
        self.actor_id = actor_id
        self._states = state_store
        self._profiles = profile_store
        self._artworks = artwork_store
        self._analytics = analytics or NullAnalyticsSink()
        self._bridge = plan_bridge

        self._state: OnboardingState | None = None
        self._artist = ArtistProfile()
        self._profile = OnboardingProfile()
        self._artwork_count = 0
        self._count_pushes = 0
        self._gates = RequirementGates()

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    @property
    def loaded(self) -> bool:
        return self._state is not None

    @property
    def gates(self) -> RequirementGates:
        return self._gates

    @property
    def current_state(self) -> OnboardingSnapshot:
        state = self._state or OnboardingState(actor_id=self.actor_id)
        return OnboardingSnapshot(
            actor_id=self.actor_id,
            step=state.current_step,
            gates=self._gates,
            selected_plan=state.selected_plan,
            active_plan=state.active_plan,
            plan_active=state.plan_activated,
            skipped_plan_selection=state.skipped_plan_selection,
            completed=state.completed,
            completed_at=state.completed_at,
            artwork_count=self._artwork_count,
            profile=dataclasses.replace(
                self._profile,
                mediums=list(self._profile.mediums),
                style_tags=list(self._profile.style_tags),
            ),
            profile_percentage=evaluate_completeness(self._artist).percentage,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @asynccontextmanager
    async def _exclusive(self, operation: str) -> AsyncIterator[None]:
        if self.actor_id in _in_flight:
            logger.info(f"Rejected {operation} for {self.actor_id}: another operation is in flight")
            raise OperationInProgress()
        _in_flight.add(self.actor_id)
        try:
            yield
        finally:
            _in_flight.discard(self.actor_id)

    def _emit(self, event_name: str, properties: dict[str, Any]) -> None:
        try:
            self._analytics.emit(event_name, self.actor_id, properties)
        except Exception as e:
            logger.warning(f"Analytics emit failed for {event_name}: {e}")

    async def _ensure_loaded(self) -> OnboardingState:
        if self._state is None:
            await self._load()
        return self._state

    async def _load(self) -> None:
        pushes = self._count_pushes
        state = await self._states.load(self.actor_id)
        artist = await self._profiles.read_profile(self.actor_id)
        count = await self._artworks.count_published(self.actor_id)

        # A count pushed while we were reading is newer than the stored one
        if self._count_pushes != pushes:
            count = self._artwork_count

        profile = OnboardingProfile.from_artist(artist)
        self._state = state
        self._artist = artist
        self._profile = profile
        self._artwork_count = count
        self._gates = evaluate_gates(profile, count)

    @staticmethod
    def _check_step(step: int) -> OnboardingStep:
        if isinstance(step, bool) or not isinstance(step, int):
            raise ValidationError(f"Unknown onboarding step: {step!r}")
        try:
            return OnboardingStep(step)
        except ValueError:
            raise ValidationError(f"Unknown onboarding step: {step!r}") from None

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def load(self) -> OnboardingSnapshot:
        """
        Resume from storage.

        Restores the persisted step and recomputes every gate from the fresh
        profile and artwork count; nothing cached from a previous session is
        trusted.
        """
        async with self._exclusive("load"):
            await self._load()
        logger.info(f"Loaded onboarding for {self.actor_id} at step {self._state.current_step}")
        return self.current_state

    async def advance(self, step: int, updates: dict[str, Any] | None = None) -> StepOutcome:
        """
        Save `step` and move the wizard forward.

        `updates` are profile draft fields edited on this step. Saving Basics
        or Style requires that step's gate to hold on the merged draft.
        """
        saved_step = self._check_step(step)
        changes = parse_profile_updates(updates)

        async with self._exclusive("advance"):
            state = await self._ensure_loaded()
            draft = self._profile.merged(changes)

            if saved_step == OnboardingStep.BASICS and not basics_met(draft):
                raise ValidationError("Add your display name, city and bio to continue")
            if saved_step == OnboardingStep.STYLE and not style_met(draft):
                raise ValidationError("Choose at least one medium and one style tag to continue")

            next_step = max(state.current_step, next_step_after(saved_step))
            artist = dataclasses.replace(self._artist, **changes, onboarding_step=next_step)

            await self._profiles.write_profile_fields(self.actor_id, {
                **changes,
                "onboarding_step": next_step,
                "profile_completion_percent": evaluate_completeness(artist).percentage,
                "updated_at": utcnow(),
            })
            new_state = await self._states.upsert(self.actor_id, {
                "current_step": next_step,
                "steps_visited": {int(saved_step)},
            })

            self._state = new_state
            self._artist = artist
            self._profile = draft
            self._gates = evaluate_gates(draft, self._artwork_count)

        logger.info(f"{self.actor_id} completed onboarding step {int(saved_step)}, now at {next_step}")
        self._emit("step_completed", {
            "step": int(saved_step),
            "stepName": saved_step.label,
            "action": "completed",
            "nextStep": next_step,
        })
        return StepOutcome(state=self.current_state)

    async def skip(self) -> StepOutcome:
        """Leave the wizard early; the current step is persisted so a resume lands here."""
        async with self._exclusive("skip"):
            state = await self._ensure_loaded()
            new_state = await self._states.upsert(self.actor_id, {"current_step": state.current_step})
            self._state = new_state

        step = OnboardingStep(new_state.current_step)
        logger.info(f"{self.actor_id} left onboarding at step {int(step)}")
        self._emit("step_skipped", {"step": int(step), "stepName": step.label, "action": "skipped"})
        return StepOutcome(state=self.current_state, exit_wizard=True)

    async def select_plan(self, tier: "PlanTier | str", action: "PlanAction | str") -> StepOutcome:
        """
        Record a plan choice on the final step.

        The choice is persisted before anything else. For a paid upgrade the
        bridge returns a checkout redirect; onboarding is not completed here
        because checkout may leave the application entirely.
        The billed plan (active_plan) is left alone until the provider
        confirms the new one.
        """
        plan_tier = parse_tier(tier)
        try:
            plan_action = PlanAction(action)
        except ValueError:
            raise ValidationError(f"Unknown plan action: {action!r}") from None
        if plan_action == PlanAction.FREE and plan_tier != PlanTier.FREE:
            raise ValidationError(f"{plan_tier.value} is a paid plan")

        needs_checkout = plan_action == PlanAction.UPGRADE and plan_tier in PAID_TIERS
        if needs_checkout and self._bridge is None:
            raise ArtwallsError("Upgrades are not available right now.")

        async with self._exclusive("select_plan"):
            state = await self._ensure_loaded()
            partial = {
                "selected_plan": plan_tier,
                "skipped_plan_selection": plan_action == PlanAction.SKIP,
                "current_step": max(state.current_step, int(LAST_STEP)),
            }
            # Free needs no billing, but never replaces a plan that is billed
            if plan_tier == PlanTier.FREE and state.active_plan is None:
                partial["active_plan"] = PlanTier.FREE
                partial["plan_activated_at"] = utcnow()
            new_state = await self._states.upsert(self.actor_id, partial)
            self._state = new_state

            if needs_checkout:
                self._emit("upgrade_clicked", {"plan": plan_tier.value})
                session = await self._bridge.request_upgrade(plan_tier)
                return StepOutcome(state=self.current_state, redirect_url=session.redirect_url)

        if plan_action == PlanAction.SKIP:
            self._emit("plan_selection_skipped", {"plan": plan_tier.value})
        else:
            self._emit("plan_selected", {"plan": plan_tier.value})
        return StepOutcome(state=self.current_state)

    async def complete(self) -> OnboardingSnapshot:
        """
        Finish onboarding.

        Requires all three gates. Calling it again after success is a no-op
        that returns the completed state.
        """
        async with self._exclusive("complete"):
            state = await self._ensure_loaded()
            if state.completed:
                return self.current_state
            if not self._gates.satisfied:
                missing = self._gates.missing
                raise PreconditionFailed(
                    f"Finish these first: {', '.join(missing)}",
                    missing_gates=missing,
                )

            now = utcnow()
            final_step = max(state.current_step, int(LAST_STEP))
            await self._profiles.write_profile_fields(self.actor_id, {
                "onboarding_completed": True,
                "onboarding_step": final_step,
                "updated_at": now,
            })
            new_state = await self._states.upsert(self.actor_id, {
                "completed": True,
                "completed_at": now,
                "current_step": final_step,
                "steps_visited": {int(LAST_STEP)},
            })
            self._state = new_state
            self._artist = dataclasses.replace(
                self._artist, onboarding_completed=True, onboarding_step=final_step
            )

        logger.info(f"{self.actor_id} finished onboarding")
        self._emit("onboarding_finished", {
            "stepsCompleted": len(new_state.steps_visited),
            "skippedPlanSelection": new_state.skipped_plan_selection or new_state.selected_plan is None,
            "plan": new_state.selected_plan.value if new_state.selected_plan else None,
        })
        return self.current_state

    def record_artwork_count_observed(self, count: int) -> RequirementGates:
        """Push a fresh published-artwork count (after the step mounts or an artwork is added)."""
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValidationError("Artwork count must be a non-negative whole number")
        self._artwork_count = count
        self._count_pushes += 1
        self._gates = dataclasses.replace(self._gates, artworks=artworks_met(count))
        return self._gates

    async def add_artwork(self, draft: "ArtworkDraft | dict[str, Any]") -> str:
        """
        Save an artwork from the seeding step.

        The artworks gate does not move until the caller pushes the new count
        through record_artwork_count_observed().
        """
        artwork = parse_artwork_draft(draft)
        artwork_id = await self._artworks.create_draft_artwork(self.actor_id, artwork)
        self._emit("onboarding_artwork_added", {"artworkId": artwork_id, "title": artwork.title})
        return artwork_id

    async def confirm_plan_activated(self, tier: "PlanTier | str") -> OnboardingSnapshot:
        """Apply the payments provider's confirmation that a plan is billed and active."""
        plan_tier = parse_tier(tier)

        async with self._exclusive("confirm_plan_activated"):
            await self._ensure_loaded()
            now = utcnow()
            await self._profiles.write_profile_fields(self.actor_id, {
                "subscription_tier": plan_tier.value,
                "updated_at": now,
            })
            new_state = await self._states.upsert(self.actor_id, {
                "selected_plan": plan_tier,
                "active_plan": plan_tier,
                "plan_activated_at": now,
            })
            self._state = new_state
            self._artist = dataclasses.replace(self._artist, subscription_tier=plan_tier.value)

        logger.info(f"Plan {plan_tier.value} activated for {self.actor_id}")
        self._emit("plan_activated", {"plan": plan_tier.value})
        return self.current_state
