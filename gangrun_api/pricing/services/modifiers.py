"""
Base percentage modifiers, applied in this order:

1. Broker category discount, or else the Our Tagline discount (never both).
2. Exact size markup on the discounted price.
3. Turnaround markup, always applied (may be 0%).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Union

from ..types import BrokerDiscount, ProductConfiguration


TAGLINE_DISCOUNT_PERCENTAGE = Decimal("5.0")
EXACT_SIZE_MARKUP_PERCENTAGE = Decimal("12.5")

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class NoDiscount:
    percentage: Decimal = Decimal("0")

    def apply(self, base_price: Decimal) -> Decimal:
        return base_price


@dataclass(frozen=True)
class BrokerCategoryDiscount:
    category_id: str
    percentage: Decimal

    def apply(self, base_price: Decimal) -> Decimal:
        return base_price * (1 - self.percentage / HUNDRED)


@dataclass(frozen=True)
class TaglineDiscount:
    percentage: Decimal = TAGLINE_DISCOUNT_PERCENTAGE

    def apply(self, base_price: Decimal) -> Decimal:
        return base_price - base_price * (self.percentage / HUNDRED)


DiscountDecision = Union[NoDiscount, BrokerCategoryDiscount, TaglineDiscount]


def find_broker_discount(
    broker_discounts: Iterable[BrokerDiscount],
    category_id: str,
) -> BrokerDiscount | None:
    """First broker discount entry for the category, if any."""
    for entry in broker_discounts:
        if entry.category_id == category_id:
            return entry
    return None


def resolve_discount(config: ProductConfiguration) -> DiscountDecision:
    """
    Pick the single discount for this configuration.

    A broker with a discount for the order's category always gets it and
    never the tagline discount. A broker without a matching entry is
    treated like any other customer.
    """
    if config.is_broker:
        entry = find_broker_discount(config.broker_discounts, config.category_id)
        if entry is not None:
            return BrokerCategoryDiscount(
                category_id=entry.category_id,
                percentage=entry.discount_percentage,
            )

    if config.add_ons.is_selected("our_tagline"):
        return TaglineDiscount()

    return NoDiscount()


def apply_exact_size(adjusted_base_price: Decimal, selected: bool) -> tuple[Decimal, Decimal | None]:
    """Return (price after modifiers, markup amount or None when not selected)."""
    if not selected:
        return adjusted_base_price, None
    markup = adjusted_base_price * (EXACT_SIZE_MARKUP_PERCENTAGE / HUNDRED)
    return adjusted_base_price + markup, markup


def apply_turnaround(price: Decimal, markup_percent: Decimal) -> Decimal:
    return price * (1 + markup_percent / HUNDRED)
