"""
Artwalls Artist Onboarding.

Six-step wizard that turns a new artist account into a sellable profile:

1. Basics - display name, city, bio
2. Style - mediums and style tags
3. Artworks - seed at least three publishable artworks
4. Pricing - price range, commissions, availability
5. Payouts - payout account setup
6. Plan - pick a plan and finish

Progress is persisted after every step so the wizard can resume.
"""

from .forms import ArtworkDraft, ProfileDraftUpdate
from .orchestrator import OnboardingOrchestrator, OnboardingSnapshot, PlanAction, StepOutcome
from .plan_bridge import PlanBridge
from .state import OnboardingState, OnboardingStep, RequirementGates

__all__ = [
    "ArtworkDraft",
    "OnboardingOrchestrator",
    "OnboardingSnapshot",
    "OnboardingState",
    "OnboardingStep",
    "PlanAction",
    "PlanBridge",
    "ProfileDraftUpdate",
    "RequirementGates",
    "StepOutcome",
]
