"""
Subscription checkout sessions.

Creates hosted Stripe Checkout sessions for paid plan upgrades. Plan
activation is confirmed later by the provider (webhook), never by the
redirect itself.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

import stripe

from artwalls.db.request_context import get_access_token, get_current_user_id
from artwalls.errors import InvalidTier, TransportError, Unauthenticated
from artwalls.plans import PAID_TIERS, PlanTier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpgradeSession:
    redirect_url: str
    session_id: str | None = None


class CheckoutSessions(Protocol):
    async def create_upgrade_session(self, actor_id: str, tier: PlanTier) -> UpgradeSession:
        """
        Start a hosted checkout for `tier`.

        Raises Unauthenticated, InvalidTier or TransportError.
        """
        ...


class StripeCheckoutSessions:
    """Stripe Checkout (subscription mode) for artist plan upgrades."""

    def __init__(
        self,
        api_key: str | None = None,
        price_ids: dict[str, str | None] | None = None,
        base_url: str | None = None,
    ):
        from artwalls.config import settings

        self.api_key = api_key or settings.stripe_secret_key
        self.price_ids = price_ids if price_ids is not None else {
            tier.value: settings.stripe_price_id(tier.value) for tier in PAID_TIERS
        }
        self.base_url = (base_url or settings.public_base_url).rstrip("/")

    def _session_params(self, actor_id: str, tier: PlanTier, price_id: str) -> dict:
        return {
            "mode": "subscription",
            "line_items": [{"price": price_id, "quantity": 1}],
            "client_reference_id": actor_id,
            "metadata": {"artistId": actor_id, "tier": tier.value},
            "subscription_data": {"metadata": {"artistId": actor_id, "tier": tier.value}},
            "success_url": f"{self.base_url}/#/artist-onboarding?checkout=success&session_id={{CHECKOUT_SESSION_ID}}",
            "cancel_url": f"{self.base_url}/#/artist-onboarding?checkout=cancelled",
        }

    async def create_upgrade_session(self, actor_id: str, tier: PlanTier) -> UpgradeSession:
        if not get_access_token():
            raise Unauthenticated()
        current_user = get_current_user_id()
        if current_user and current_user != actor_id:
            raise Unauthenticated()

        if tier not in PAID_TIERS:
            raise InvalidTier(f"{tier.value} is not a paid plan")
        price_id = self.price_ids.get(tier.value)
        if not price_id:
            logger.error(f"No Stripe price configured for tier {tier.value}")
            raise InvalidTier(f"Checkout is not available for {tier.value}")

        params = self._session_params(actor_id, tier, price_id)

        try:
            session = await asyncio.to_thread(
                stripe.checkout.Session.create, api_key=self.api_key, **params
            )
        except stripe.AuthenticationError as e:
            logger.error(f"Stripe rejected our API credentials: {e}")
            raise TransportError("Checkout is temporarily unavailable.") from e
        except stripe.APIConnectionError as e:
            logger.warning(f"Stripe connection failed for {actor_id}: {e}")
            raise TransportError() from e
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout session failed for {actor_id}: {e}")
            raise TransportError("Unable to start checkout.") from e

        logger.info(f"Checkout session {session.id} created for {actor_id} ({tier.value})")
        return UpgradeSession(redirect_url=session.url, session_id=session.id)
