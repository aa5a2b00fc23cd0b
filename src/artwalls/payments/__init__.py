"""
Artwalls - Payments provider integration.
"""

from artwalls.payments.checkout import CheckoutSessions, StripeCheckoutSessions, UpgradeSession

__all__ = [
    "CheckoutSessions",
    "StripeCheckoutSessions",
    "UpgradeSession",
]
