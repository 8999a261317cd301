"""
Value objects for the broker/volume pricing engine.

This discount model is independent of the documentation engine in
`pricing`: tier, category, multiplier and annual bonuses stack against
base_price × quantity, and rush orders add a surcharge afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from pricing.utils import to_decimal


def _coerce(instance, *names):
    for name in names:
        object.__setattr__(instance, name, to_decimal(getattr(instance, name), name))


@dataclass(frozen=True)
class BrokerTier:
    id: str
    name: str
    display_name: str
    minimum_annual_volume: Decimal
    base_discount_percentage: Decimal
    payment_terms_days: int
    rush_order_discount: Decimal
    free_shipping_threshold: Decimal
    benefits: tuple[str, ...] = ()

    def __post_init__(self):
        _coerce(
            self,
            "minimum_annual_volume",
            "base_discount_percentage",
            "rush_order_discount",
            "free_shipping_threshold",
        )


@dataclass(frozen=True)
class VolumeTier:
    tier_name: str = "Standard"
    minimum_volume: Decimal = Decimal("0")
    discount_multiplier: Decimal = Decimal("1.0")

    def __post_init__(self):
        _coerce(self, "minimum_volume", "discount_multiplier")


@dataclass(frozen=True)
class CategoryDiscount:
    category_id: str
    discount_percentage: Decimal
    category_name: str = ""
    minimum_quantity: int = 1

    def __post_init__(self):
        _coerce(self, "discount_percentage")


@dataclass(frozen=True)
class BrokerProfile:
    broker_tier: BrokerTier
    volume_tier: VolumeTier = field(default_factory=VolumeTier)
    category_discounts: tuple[CategoryDiscount, ...] = ()
    annual_volume_committed: Decimal = Decimal("0")
    current_year_volume: Decimal = Decimal("0")
    id: str = ""

    def __post_init__(self):
        _coerce(self, "annual_volume_committed", "current_year_volume")
        object.__setattr__(self, "category_discounts", tuple(self.category_discounts))


@dataclass(frozen=True)
class PricingContext:
    """`base_price` is the unit price; the order total is base_price × quantity."""

    base_price: Decimal
    quantity: int
    category_id: str = ""
    product_id: str = ""
    is_broker: bool = False
    broker_profile: BrokerProfile | None = None
    rush_order: bool = False

    def __post_init__(self):
        _coerce(self, "base_price")


@dataclass(frozen=True)
class VolumeBreakpoint:
    min_quantity: int
    max_quantity: int | None
    discount_percentage: Decimal
    multiplier: Decimal


@dataclass(frozen=True)
class DiscountLine:
    """One entry of the discount breakdown. `type` is volume, tier, category,
    broker_volume, annual_volume or rush_surcharge."""

    type: str
    amount: Decimal
    percentage: Decimal
    description: str


@dataclass(frozen=True)
class PriceCalculation:
    base_price: Decimal
    total_base_price: Decimal
    volume_discount: Decimal
    tier_discount: Decimal
    category_discount: Decimal
    broker_discount: Decimal
    rush_surcharge: Decimal
    total_discount: Decimal
    final_price: Decimal
    savings: Decimal
    discount_breakdown: tuple[DiscountLine, ...]
