"""
Discount summaries and broker tier planning.

Turns a broker/volume PriceCalculation into the customer-facing savings
summary, and answers "what would the next tier save me" questions.
"""

from dataclasses import dataclass
from decimal import Decimal

from ..types import BrokerProfile, BrokerTier, PriceCalculation
from .calculator import BROKER_TIERS, HUNDRED, ZERO


DISCOUNT_DISPLAY_NAMES = {
    "volume": "Volume Discount",
    "tier": "Broker Tier Discount",
    "category": "Category Discount",
    "broker_volume": "Broker Volume Bonus",
    "annual_volume": "Annual Volume Bonus",
    "rush_surcharge": "Rush Order Surcharge",
}


@dataclass(frozen=True)
class SummaryLine:
    type: str
    name: str
    amount: Decimal
    percentage: Decimal
    description: str


@dataclass(frozen=True)
class NextTierSavings:
    tier_name: str
    additional_savings: Decimal
    volume_needed: Decimal


@dataclass(frozen=True)
class DiscountSummary:
    total_discount_percentage: Decimal
    total_savings: Decimal
    breakdown: tuple[SummaryLine, ...]
    next_tier_savings: NextTierSavings | None = None


@dataclass(frozen=True)
class TierRecommendation:
    current_tier: BrokerTier
    recommended_tier: BrokerTier
    volume_gap: Decimal
    potential_savings: Decimal


@dataclass(frozen=True)
class YearlyProjection:
    annual_volume: Decimal
    current_annual_cost: Decimal
    projected_annual_cost: Decimal
    annual_savings: Decimal


def get_discount_display_name(discount_type: str) -> str:
    return DISCOUNT_DISPLAY_NAMES.get(discount_type, discount_type)


def get_next_tier(current_tier: BrokerTier) -> BrokerTier | None:
    names = [tier.name for tier in BROKER_TIERS]
    if current_tier.name not in names:
        return None
    index = names.index(current_tier.name)
    if index + 1 >= len(BROKER_TIERS):
        return None
    return BROKER_TIERS[index + 1]


def calculate_next_tier_savings(profile: BrokerProfile, original_price: Decimal) -> NextTierSavings | None:
    next_tier = get_next_tier(profile.broker_tier)
    if next_tier is None:
        return None

    current_discount = original_price * (profile.broker_tier.base_discount_percentage / HUNDRED)
    next_discount = original_price * (next_tier.base_discount_percentage / HUNDRED)
    return NextTierSavings(
        tier_name=next_tier.display_name,
        additional_savings=next_discount - current_discount,
        volume_needed=next_tier.minimum_annual_volume - profile.current_year_volume,
    )


def calculate_discount_summary(
    calculation: PriceCalculation,
    broker_profile: BrokerProfile | None = None,
) -> DiscountSummary:
    """
    Savings summary for display.

    The percentage is taken against the pre-discount price
    (final + savings - rush surcharge), i.e. the order total.
    """
    original_price = calculation.final_price + calculation.savings - calculation.rush_surcharge
    if original_price > 0:
        percentage = calculation.savings / original_price * HUNDRED
    else:
        percentage = ZERO

    breakdown = tuple(
        SummaryLine(
            type=line.type,
            name=get_discount_display_name(line.type),
            amount=line.amount,
            percentage=line.percentage,
            description=line.description,
        )
        for line in calculation.discount_breakdown
    )

    next_tier_savings = None
    if broker_profile is not None:
        next_tier_savings = calculate_next_tier_savings(broker_profile, original_price)

    return DiscountSummary(
        total_discount_percentage=percentage,
        total_savings=calculation.savings,
        breakdown=breakdown,
        next_tier_savings=next_tier_savings,
    )


def _tier_for_volume(volume) -> BrokerTier | None:
    for tier in reversed(BROKER_TIERS):
        if volume >= tier.minimum_annual_volume:
            return tier
    return None


def get_broker_tier_recommendation(current_volume, projected_volume) -> TierRecommendation | None:
    """Recommend a tier for projected volume; None when it would not change."""
    current_tier = _tier_for_volume(current_volume)
    recommended_tier = _tier_for_volume(projected_volume)

    if current_tier is None or recommended_tier is None or current_tier.id == recommended_tier.id:
        return None

    difference = recommended_tier.base_discount_percentage - current_tier.base_discount_percentage
    return TierRecommendation(
        current_tier=current_tier,
        recommended_tier=recommended_tier,
        volume_gap=recommended_tier.minimum_annual_volume - current_volume,
        potential_savings=projected_volume * (difference / HUNDRED),
    )


def calculate_yearly_projection(monthly_volume, current_price, projected_price) -> YearlyProjection:
    annual_volume = monthly_volume * 12
    current_cost = annual_volume * current_price
    projected_cost = annual_volume * projected_price
    return YearlyProjection(
        annual_volume=annual_volume,
        current_annual_cost=current_cost,
        projected_annual_cost=projected_cost,
        annual_savings=current_cost - projected_cost,
    )
