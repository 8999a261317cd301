# brokers/services/preview.py
"""
Price preview matrix: the same product priced at several quantities, plus
what a non-broker would save on a sample broker account.
"""

from dataclasses import dataclass, replace
from decimal import Decimal

from ..types import BrokerProfile, BrokerTier, CategoryDiscount, PriceCalculation, PricingContext
from .calculator import HUNDRED, ZERO, PricingCalculator
from .discounts import DiscountSummary, calculate_discount_summary


SAMPLE_QUANTITY = 100
SAMPLE_CATEGORY_DISCOUNT = Decimal("8")


@dataclass(frozen=True)
class PreviewRow:
    quantity: int
    unit_price: Decimal
    total_base_price: Decimal
    calculation: PriceCalculation
    summary: DiscountSummary
    unit_final_price: Decimal
    savings_per_unit: Decimal


@dataclass(frozen=True)
class BrokerPotential:
    tier: str
    sample_quantity: int
    standard_price: Decimal
    broker_price: Decimal
    potential_savings: Decimal
    savings_percentage: Decimal


def build_price_matrix(
    calculator: PricingCalculator,
    base_price: Decimal,
    quantities,
    category_id: str = "",
    product_id: str = "",
    broker_profile: BrokerProfile | None = None,
    rush_order: bool = False,
) -> list[PreviewRow]:
    rows = []
    for quantity in quantities:
        context = PricingContext(
            base_price=base_price,
            quantity=quantity,
            category_id=category_id,
            product_id=product_id,
            is_broker=broker_profile is not None,
            broker_profile=broker_profile,
            rush_order=rush_order,
        )
        calculation = calculator.calculate_price(context)
        rows.append(PreviewRow(
            quantity=quantity,
            unit_price=context.base_price,
            total_base_price=calculation.total_base_price,
            calculation=calculation,
            summary=calculate_discount_summary(calculation, broker_profile),
            unit_final_price=calculation.final_price / quantity,
            savings_per_unit=calculation.savings / quantity,
        ))
    return rows


def simulate_tier(broker_profile: BrokerProfile, tier: BrokerTier | None) -> BrokerProfile:
    """Same profile on a different tier; unchanged when tier is None."""
    if tier is None:
        return broker_profile
    return replace(broker_profile, broker_tier=tier)


def calculate_broker_potential(
    calculator: PricingCalculator,
    base_price: Decimal,
    sample_tier: BrokerTier,
    category_id: str = "",
    product_id: str = "",
) -> BrokerPotential:
    """Standard vs broker price for a sample order of 100 at `sample_tier`."""
    sample_profile = BrokerProfile(
        broker_tier=sample_tier,
        category_discounts=(
            CategoryDiscount(
                category_id=category_id,
                category_name="Sample Category",
                discount_percentage=SAMPLE_CATEGORY_DISCOUNT,
                minimum_quantity=1,
            ),
        ),
    )
    broker_context = PricingContext(
        base_price=base_price,
        quantity=SAMPLE_QUANTITY,
        category_id=category_id,
        product_id=product_id,
        is_broker=True,
        broker_profile=sample_profile,
    )
    standard_context = replace(broker_context, is_broker=False, broker_profile=None)

    broker_price = calculator.calculate_price(broker_context).final_price
    standard_price = calculator.calculate_price(standard_context).final_price
    savings = standard_price - broker_price

    return BrokerPotential(
        tier=sample_tier.display_name,
        sample_quantity=SAMPLE_QUANTITY,
        standard_price=standard_price,
        broker_price=broker_price,
        potential_savings=savings,
        savings_percentage=(savings / standard_price * HUNDRED) if standard_price else ZERO,
    )
