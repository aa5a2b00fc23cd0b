"""
Earnings Calculation Engine.

Pure arithmetic over list price, plan tier, venue commission and subscription
cost. Used live by the pricing page / CLI and retrospectively by analytics.

Economics model:
- Buyer support fee: 4.5% of list price, paid by the buyer on top
- Venue commission: 15% of list price
- Artist take-home: plan dependent (60/80/83/85%)
- Platform + processing: whatever remains of the list price

Per-sale amounts are computed in integer cents so that
artist + venue + platform == list price exactly.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from artwalls.errors import ValidationError
from artwalls.plans import PLANS, PlanTier, get_plan

# Changing these is a versioned economics change, never a call-site decision.
VENUE_COMMISSION_PERCENT = Decimal("15")
BUYER_FEE_PERCENT = Decimal("4.5")
PROTECTION_FEE_PER_ARTWORK = Decimal("3")

CENT = Decimal("0.01")


def _to_decimal(value, field: str) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{field} must be a number") from None
    if not number.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    return number


def _check_percent(take_home_percent) -> Decimal:
    percent = _to_decimal(take_home_percent, "take_home_percent")
    if percent < 0 or percent > 100:
        raise ValidationError("take_home_percent must be between 0 and 100")
    return percent


def _percent_of_cents(cents: int, percent: Decimal) -> int:
    return int((Decimal(cents) * percent / 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_cents(amount) -> int:
    """Convert a currency amount to integer minor units (half-up)."""
    return int((_to_decimal(amount, "amount") * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def format_cents(cents: int) -> str:
    """Format cents as a USD string, e.g. 3000 -> '$30.00'."""
    return f"${from_cents(cents):,.2f}"


# =============================================================================
# Per-sale split
# =============================================================================


@dataclass(frozen=True)
class SaleSplit:
    """How one sale's list price is divided. The buyer fee sits outside the split."""

    list_price_cents: int
    take_home_percent: Decimal
    artist_cents: int
    venue_cents: int
    platform_remainder_cents: int
    buyer_fee_cents: int

    @property
    def buyer_total_cents(self) -> int:
        return self.list_price_cents + self.buyer_fee_cents

    @property
    def list_price(self) -> Decimal:
        return from_cents(self.list_price_cents)

    @property
    def artist_amount(self) -> Decimal:
        return from_cents(self.artist_cents)

    @property
    def venue_amount(self) -> Decimal:
        return from_cents(self.venue_cents)

    @property
    def platform_remainder(self) -> Decimal:
        return from_cents(self.platform_remainder_cents)

    @property
    def buyer_fee(self) -> Decimal:
        return from_cents(self.buyer_fee_cents)

    @property
    def buyer_total(self) -> Decimal:
        return from_cents(self.buyer_total_cents)


def calculate_artist_take_home(list_price, take_home_percent) -> SaleSplit:
    """
    Split a sale's list price between artist, venue and platform.

    Args:
        list_price: Artwork list price in dollars (>= 0)
        take_home_percent: Artist share of the list price, 0..100

    Raises:
        ValidationError: negative price or percent outside 0..100
    """
    price = _to_decimal(list_price, "list_price")
    if price < 0:
        raise ValidationError("list_price cannot be negative")
    percent = _check_percent(take_home_percent)

    list_cents = to_cents(price)
    artist_cents = _percent_of_cents(list_cents, percent)
    venue_cents = _percent_of_cents(list_cents, VENUE_COMMISSION_PERCENT)

    return SaleSplit(
        list_price_cents=list_cents,
        take_home_percent=percent,
        artist_cents=artist_cents,
        venue_cents=venue_cents,
        platform_remainder_cents=list_cents - artist_cents - venue_cents,
        buyer_fee_cents=_percent_of_cents(list_cents, BUYER_FEE_PERCENT),
    )


def calculate_pricing_breakdown(list_price, tier: "PlanTier | str") -> SaleSplit:
    """Sale split using the take-home percent of a plan tier."""
    return calculate_artist_take_home(list_price, get_plan(tier).take_home_percent)


def application_fee_cents(split: SaleSplit) -> int:
    """Amount withheld from the artist's transfer: venue share + platform remainder."""
    return max(0, split.platform_remainder_cents + split.venue_cents)


def platform_fee_bps(split: SaleSplit) -> int:
    if not split.list_price_cents:
        return 0
    return max(0, round(split.platform_remainder_cents / split.list_price_cents * 10000))


def venue_fee_bps(split: SaleSplit) -> int:
    if not split.list_price_cents:
        return 0
    return max(0, round(split.venue_cents / split.list_price_cents * 10000))


# =============================================================================
# Monthly projection
# =============================================================================


@dataclass(frozen=True)
class MonthlyProjection:
    tier: PlanTier
    requested_artworks: int
    allowed_artworks: int
    is_capped: bool
    gross: Decimal
    subscription_price: Decimal
    protection_cost: Decimal
    net: Decimal


def calculate_monthly_net(
    tier: "PlanTier | str",
    sale_value,
    artworks_per_month: int,
    protection_included: bool = True,
    take_home_percent=None,
) -> MonthlyProjection:
    """
    Project an artist's monthly net earnings on a plan.

    Artwork count is clamped to the plan's ceiling (is_capped reports whether
    that happened). protection_included=False charges the per-artwork
    protection add-on, except on plans that include protection. Net never
    goes below zero.

    Raises:
        InvalidTier: unknown tier
        ValidationError: negative sale value / artwork count, bad percent
    """
    plan = get_plan(tier)
    value = _to_decimal(sale_value, "sale_value")
    if value < 0:
        raise ValidationError("sale_value cannot be negative")
    if isinstance(artworks_per_month, bool) or not isinstance(artworks_per_month, int):
        raise ValidationError("artworks_per_month must be a whole number")
    if artworks_per_month < 0:
        raise ValidationError("artworks_per_month cannot be negative")
    percent = _check_percent(
        plan.take_home_percent if take_home_percent is None else take_home_percent
    )

    allowed = int(min(artworks_per_month, plan.artwork_ceiling))
    covered = protection_included or plan.protection_included
    protection_cost = Decimal(allowed) * (Decimal(0) if covered else PROTECTION_FEE_PER_ARTWORK)
    gross = Decimal(allowed) * value * percent / 100
    subscription = Decimal(plan.monthly_price)
    net = max(Decimal(0), gross - subscription - protection_cost)

    return MonthlyProjection(
        tier=plan.tier,
        requested_artworks=artworks_per_month,
        allowed_artworks=allowed,
        is_capped=artworks_per_month > allowed,
        gross=gross.quantize(CENT, rounding=ROUND_HALF_UP),
        subscription_price=subscription.quantize(CENT),
        protection_cost=protection_cost.quantize(CENT),
        net=net.quantize(CENT, rounding=ROUND_HALF_UP),
    )


def recommend_plan(sale_value, artworks_per_month: int, protection_included: bool = True) -> PlanTier:
    """Tier with the highest projected net; ties go to the cheaper plan."""
    best_tier = PlanTier.FREE
    best_net = None
    for tier in PLANS:
        net = calculate_monthly_net(tier, sale_value, artworks_per_month, protection_included).net
        if best_net is None or net > best_net:
            best_tier, best_net = tier, net
    return best_tier


def estimate_venue_monthly_earnings(avg_price, sales_per_month: int) -> Decimal:
    """Venue commission earned per month at an average price and sale rate."""
    price = _to_decimal(avg_price, "avg_price")
    if price < 0 or sales_per_month < 0:
        raise ValidationError("price and sales cannot be negative")
    return (price * VENUE_COMMISSION_PERCENT / 100 * sales_per_month).quantize(CENT)
