"""
Value objects for the documentation pricing engine.

Catalog records (paper stock, sizes, turnarounds) are owned by the catalog
and arrive here by value. Everything is immutable; numbers are coerced to
Decimal on construction so the pipeline arithmetic is exact.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping

from .services.addons import AddOnConfiguration, AddOnCost
from .utils import to_decimal


SIDES_CHOICES = ("single", "double")


def _coerce(instance, *names):
    for name in names:
        object.__setattr__(instance, name, to_decimal(getattr(instance, name), name))


@dataclass(frozen=True)
class PaperStock:
    id: str
    name: str
    price_per_sq_inch: Decimal
    second_side_markup_percent: Decimal = Decimal("0")
    default_coating_id: str | None = None

    def __post_init__(self):
        _coerce(self, "price_per_sq_inch", "second_side_markup_percent")


@dataclass(frozen=True)
class PrintSize:
    """Finished size in inches."""

    id: str
    name: str
    width: Decimal
    height: Decimal
    is_custom: bool = False

    def __post_init__(self):
        _coerce(self, "width", "height")

    @classmethod
    def custom(cls, width, height, name: str = "Custom") -> PrintSize:
        return cls(id="custom", name=name, width=width, height=height, is_custom=True)

    @property
    def area(self) -> Decimal:
        return self.width * self.height


@dataclass(frozen=True)
class TurnaroundTime:
    id: str
    name: str
    price_markup_percent: Decimal = Decimal("0")
    business_days: int = 0

    def __post_init__(self):
        _coerce(self, "price_markup_percent")


@dataclass(frozen=True)
class BrokerDiscount:
    category_id: str
    discount_percentage: Decimal

    def __post_init__(self):
        _coerce(self, "discount_percentage")


@dataclass(frozen=True)
class ProductConfiguration:
    """Everything needed to price one product line."""

    paper_stock: PaperStock
    print_size: PrintSize
    quantity: int
    sides: str
    turnaround_time: TurnaroundTime
    add_ons: AddOnConfiguration = field(default_factory=AddOnConfiguration)
    is_broker: bool = False
    broker_discounts: tuple[BrokerDiscount, ...] = ()
    category_id: str = ""

    def __post_init__(self):
        if isinstance(self.add_ons, Mapping):
            object.__setattr__(self, "add_ons", AddOnConfiguration.from_dict(self.add_ons))
        elif self.add_ons is None:
            object.__setattr__(self, "add_ons", AddOnConfiguration())
        object.__setattr__(self, "broker_discounts", tuple(self.broker_discounts or ()))


@dataclass(frozen=True)
class PriceBreakdown:
    """Summary amounts for display; savings/markups are None when not applied."""

    base_printing: Decimal
    turnaround_markup: Decimal
    addons: Decimal
    total: Decimal
    broker_savings: Decimal | None = None
    tagline_savings: Decimal | None = None
    exact_size_markup: Decimal | None = None


@dataclass(frozen=True)
class DocumentationPriceCalculation:
    """
    Fully itemized result of `calculate_price`.

    Invariants:
        calculated_product_subtotal_before_shipping_tax
            == price_after_turnaround + total_addon_cost
        price_after_turnaround
            == price_after_base_percentage_modifiers * (1 + turnaround_markup_percentage / 100)
    """

    # Step 1: base paper/print price
    effective_quantity: int
    effective_area: Decimal
    paper_stock_base_price_per_sq_inch: Decimal
    sides_factor: Decimal
    base_paper_print_price: Decimal

    # Step 2: broker or tagline discount
    broker_discount_applied: bool
    broker_discount_percentage: Decimal
    our_tagline_discount_applied: bool
    tagline_discount_percentage: Decimal
    adjusted_base_price: Decimal

    # Step 3: exact size
    exact_size_applied: bool
    exact_size_markup_percentage: Decimal
    price_after_base_percentage_modifiers: Decimal

    # Step 4: turnaround
    turnaround_markup_percentage: Decimal
    price_after_turnaround: Decimal

    # Step 5: discrete add-ons
    discrete_addon_costs: tuple[AddOnCost, ...]
    total_addon_cost: Decimal

    calculated_product_subtotal_before_shipping_tax: Decimal
    breakdown: PriceBreakdown
