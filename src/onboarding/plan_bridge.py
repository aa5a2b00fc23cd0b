"""
Plan Selection / Upgrade Bridge.

Turns a paid plan choice into a hosted checkout redirect. The bridge never
touches onboarding state: a redirect proves nothing about billing, so plan
activation only happens when the payments provider confirms it
(OnboardingOrchestrator.confirm_plan_activated).
"""

import asyncio
import logging

from artwalls.errors import CheckoutTimeout, InvalidTier
from artwalls.payments.checkout import CheckoutSessions, UpgradeSession
from artwalls.plans import PAID_TIERS, PlanTier, parse_tier

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class PlanBridge:
    """Delegates upgrade requests to a checkout-session collaborator."""

    def __init__(self, actor_id: str, checkout: CheckoutSessions, timeout: float | None = None):
        self.actor_id = actor_id
        self._checkout = checkout
        if timeout is None:
            from artwalls.config import settings

            timeout = settings.checkout_timeout_seconds or DEFAULT_TIMEOUT_SECONDS
        self.timeout = timeout

    async def request_upgrade(self, tier: "PlanTier | str") -> UpgradeSession:
        """
        Start checkout for a paid tier.

        Raises:
            InvalidTier: unknown or free tier (before any network call)
            Unauthenticated: the caller's session is not valid
            CheckoutTimeout: the provider did not answer within `timeout`
            TransportError: any other provider/network failure
        """
        plan_tier = parse_tier(tier)
        if plan_tier not in PAID_TIERS:
            raise InvalidTier(f"{plan_tier.value} does not require checkout")

        try:
            session = await asyncio.wait_for(
                self._checkout.create_upgrade_session(self.actor_id, plan_tier),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Checkout for {self.actor_id} ({plan_tier.value}) timed out after {self.timeout}s")
            raise CheckoutTimeout() from None

        logger.info(f"Upgrade checkout started for {self.actor_id} ({plan_tier.value})")
        return session
