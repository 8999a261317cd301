# brokers/services/calculator.py

import logging
from decimal import Decimal

from pricing.exceptions import ConfigurationError
from pricing.utils import is_positive_int

from ..types import (
    BrokerProfile,
    BrokerTier,
    CategoryDiscount,
    DiscountLine,
    PriceCalculation,
    PricingContext,
    VolumeBreakpoint,
    VolumeTier,
)


logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")
ZERO = Decimal("0")

RUSH_SURCHARGE_PERCENTAGE = Decimal("15")

VOLUME_BREAKPOINTS = (
    VolumeBreakpoint(1, 24, Decimal("0"), Decimal("1.0")),
    VolumeBreakpoint(25, 49, Decimal("2"), Decimal("1.1")),
    VolumeBreakpoint(50, 99, Decimal("5"), Decimal("1.2")),
    VolumeBreakpoint(100, 249, Decimal("8"), Decimal("1.3")),
    VolumeBreakpoint(250, 499, Decimal("12"), Decimal("1.4")),
    VolumeBreakpoint(500, 999, Decimal("15"), Decimal("1.5")),
    VolumeBreakpoint(1000, 2499, Decimal("18"), Decimal("1.6")),
    VolumeBreakpoint(2500, 4999, Decimal("22"), Decimal("1.8")),
    VolumeBreakpoint(5000, None, Decimal("25"), Decimal("2.0")),
)

BROKER_TIERS = (
    BrokerTier(
        id="bronze",
        name="bronze",
        display_name="Bronze",
        minimum_annual_volume=10000,
        base_discount_percentage=5,
        payment_terms_days=30,
        rush_order_discount=0,
        free_shipping_threshold=500,
        benefits=(
            "5% base discount on all orders",
            "Standard customer support",
            "30-day payment terms",
            "Free shipping on orders over $500",
        ),
    ),
    BrokerTier(
        id="silver",
        name="silver",
        display_name="Silver",
        minimum_annual_volume=50000,
        base_discount_percentage=10,
        payment_terms_days=30,
        rush_order_discount=5,
        free_shipping_threshold=300,
        benefits=(
            "10% base discount on all orders",
            "Priority customer support",
            "30-day payment terms",
            "5% discount on rush orders",
            "Free shipping on orders over $300",
        ),
    ),
    BrokerTier(
        id="gold",
        name="gold",
        display_name="Gold",
        minimum_annual_volume=150000,
        base_discount_percentage=15,
        payment_terms_days=45,
        rush_order_discount=10,
        free_shipping_threshold=200,
        benefits=(
            "15% base discount on all orders",
            "Dedicated account manager",
            "45-day payment terms",
            "10% discount on rush orders",
            "Free shipping on orders over $200",
            "Volume-based additional discounts",
        ),
    ),
    BrokerTier(
        id="platinum",
        name="platinum",
        display_name="Platinum",
        minimum_annual_volume=500000,
        base_discount_percentage=20,
        payment_terms_days=60,
        rush_order_discount=15,
        free_shipping_threshold=100,
        benefits=(
            "20% base discount on all orders",
            "White-glove service and support",
            "60-day payment terms",
            "15% discount on rush orders",
            "Free shipping on orders over $100",
            "Custom pricing negotiations",
            "Priority production scheduling",
        ),
    ),
)

# (minimum order quantity, factor applied to the broker's volume multiplier)
QUANTITY_MULTIPLIER_STEPS = (
    (5000, Decimal("1.5")),
    (2500, Decimal("1.4")),
    (1000, Decimal("1.3")),
    (500, Decimal("1.2")),
    (100, Decimal("1.1")),
)

# (annual commitment progress %, bonus discount %)
ANNUAL_VOLUME_BONUS_STEPS = (
    (Decimal("100"), Decimal("3")),
    (Decimal("75"), Decimal("2")),
    (Decimal("50"), Decimal("1")),
)


def get_tier(name: str) -> BrokerTier | None:
    for tier in BROKER_TIERS:
        if tier.name == name:
            return tier
    return None


class PricingCalculator:
    """
    Broker/volume pricing.

    Every discount is computed against total_base_price = base_price × quantity
    and subtracted from it; the rush surcharge is added afterwards:

        final = total_base - (volume + tier + category + broker bonuses) + rush
    """

    def calculate_price(self, context: PricingContext) -> PriceCalculation:
        if not is_positive_int(context.quantity):
            raise ConfigurationError(
                f"Quantity must be a positive whole number, got {context.quantity!r}"
            )
        if context.base_price < 0:
            raise ConfigurationError(
                f"Base price cannot be negative, got {context.base_price}"
            )

        total_base_price = context.base_price * context.quantity
        breakdown = []

        # Volume discount (available to all customers)
        volume = self.calculate_volume_discount(context.quantity, total_base_price)
        volume_discount = volume.amount if volume else ZERO
        if volume:
            breakdown.append(volume)

        tier_discount = category_discount = broker_discount = ZERO
        if context.is_broker and context.broker_profile:
            tier_discount, category_discount, broker_discount, lines = (
                self.calculate_broker_discounts(context, total_base_price)
            )
            breakdown.extend(lines)

        rush_surcharge = ZERO
        if context.rush_order:
            rush = self.calculate_rush_surcharge(context, total_base_price)
            rush_surcharge = rush.amount
            if rush.amount > 0:
                breakdown.append(rush)

        total_discount = volume_discount + broker_discount + category_discount + tier_discount
        final_price = total_base_price - total_discount + rush_surcharge

        logger.debug(
            "Broker pricing for %s × %s (category=%s, broker=%s): final=%s",
            context.quantity,
            context.base_price,
            context.category_id,
            context.is_broker,
            final_price,
        )

        return PriceCalculation(
            base_price=context.base_price,
            total_base_price=total_base_price,
            volume_discount=volume_discount,
            tier_discount=tier_discount,
            category_discount=category_discount,
            broker_discount=broker_discount,
            rush_surcharge=rush_surcharge,
            total_discount=total_discount,
            final_price=final_price,
            savings=total_discount,
            discount_breakdown=tuple(breakdown),
        )

    def get_volume_breakpoint(self, quantity: int) -> VolumeBreakpoint | None:
        for breakpoint in VOLUME_BREAKPOINTS:
            if quantity >= breakpoint.min_quantity and (
                breakpoint.max_quantity is None or quantity <= breakpoint.max_quantity
            ):
                return breakpoint
        return None

    def calculate_volume_discount(self, quantity: int, total_base_price: Decimal) -> DiscountLine | None:
        """Volume discount line, or None below the first discounted bracket."""
        breakpoint = self.get_volume_breakpoint(quantity)
        if breakpoint is None or breakpoint.discount_percentage == 0:
            return None

        percentage = breakpoint.discount_percentage
        return DiscountLine(
            type="volume",
            amount=total_base_price * (percentage / HUNDRED),
            percentage=percentage,
            description=f"Volume discount for {quantity} units ({percentage}% off)",
        )

    def calculate_broker_discounts(self, context: PricingContext, total_base_price: Decimal):
        """
        Returns (tier_discount, category_discount, broker_discount, lines).

        Order matters: the tier discount comes first, the category discount
        only applies from its minimum quantity, and the volume multiplier
        bonus scales the sum of both rather than the base price.
        """
        profile = context.broker_profile
        tier = profile.broker_tier
        lines = []

        tier_discount = total_base_price * (tier.base_discount_percentage / HUNDRED)
        lines.append(DiscountLine(
            type="tier",
            amount=tier_discount,
            percentage=tier.base_discount_percentage,
            description=f"{tier.display_name} Tier Discount",
        ))

        category_discount = ZERO
        entry = self._find_category_discount(profile.category_discounts, context.category_id)
        if entry and context.quantity >= (entry.minimum_quantity or 1):
            category_discount = total_base_price * (entry.discount_percentage / HUNDRED)
            lines.append(DiscountLine(
                type="category",
                amount=category_discount,
                percentage=entry.discount_percentage,
                description=f"{entry.category_name} Category Discount".strip(),
            ))

        broker_discount = ZERO
        multiplier = self.get_broker_volume_multiplier(context.quantity, profile.volume_tier)
        if multiplier > 1:
            bonus = (tier_discount + category_discount) * (multiplier - 1)
            broker_discount = bonus
            lines.append(DiscountLine(
                type="broker_volume",
                amount=bonus,
                percentage=(bonus / total_base_price * HUNDRED) if total_base_price else ZERO,
                description=f"Volume Multiplier Bonus ({multiplier:.1f}x)",
            ))

        annual_bonus = self.get_annual_volume_bonus(profile)
        if annual_bonus > 0:
            amount = total_base_price * (annual_bonus / HUNDRED)
            broker_discount += amount
            lines.append(DiscountLine(
                type="annual_volume",
                amount=amount,
                percentage=annual_bonus,
                description=f"Annual Volume Bonus ({annual_bonus}%)",
            ))

        return tier_discount, category_discount, broker_discount, lines

    def calculate_rush_surcharge(self, context: PricingContext, total_base_price: Decimal) -> DiscountLine:
        """15% of the order total, reduced by the broker tier's rush discount."""
        percentage = RUSH_SURCHARGE_PERCENTAGE
        if context.is_broker and context.broker_profile:
            percentage = max(ZERO, percentage - context.broker_profile.broker_tier.rush_order_discount)

        if percentage > 0:
            description = f"Rush Order Surcharge ({percentage}%)"
        else:
            description = "Rush Order - No Surcharge (Broker Benefit)"

        return DiscountLine(
            type="rush_surcharge",
            amount=total_base_price * (percentage / HUNDRED),
            percentage=percentage,
            description=description,
        )

    def get_broker_volume_multiplier(self, quantity: int, volume_tier: VolumeTier) -> Decimal:
        for minimum, factor in QUANTITY_MULTIPLIER_STEPS:
            if quantity >= minimum:
                return volume_tier.discount_multiplier * factor
        return volume_tier.discount_multiplier

    def get_annual_volume_bonus(self, profile: BrokerProfile) -> Decimal:
        if profile.annual_volume_committed <= 0:
            return ZERO
        progress = profile.current_year_volume / profile.annual_volume_committed * HUNDRED
        for threshold, bonus in ANNUAL_VOLUME_BONUS_STEPS:
            if progress >= threshold:
                return bonus
        return ZERO

    def get_volume_breakpoints(self) -> tuple[VolumeBreakpoint, ...]:
        return VOLUME_BREAKPOINTS

    def get_broker_tiers(self) -> tuple[BrokerTier, ...]:
        return BROKER_TIERS

    def estimate_tier_by_volume(self, annual_volume) -> BrokerTier:
        """Highest tier whose minimum annual volume is met; bronze otherwise."""
        for tier in reversed(BROKER_TIERS):
            if annual_volume >= tier.minimum_annual_volume:
                return tier
        return BROKER_TIERS[0]

    def calculate_potential_savings(
        self,
        base_price: Decimal,
        quantity: int,
        target_tier: BrokerTier,
        category_discounts: list[CategoryDiscount] | None = None,
    ) -> Decimal:
        """Savings a customer would see at `target_tier` (tier + volume + average category discount)."""
        total_price = base_price * quantity
        tier_discount = total_price * (target_tier.base_discount_percentage / HUNDRED)

        volume = self.calculate_volume_discount(quantity, total_price)
        volume_discount = volume.amount if volume else ZERO

        category_discounts = category_discounts or []
        if category_discounts:
            average = sum(cd.discount_percentage for cd in category_discounts) / len(category_discounts)
        else:
            average = ZERO
        category_discount = total_price * (average / HUNDRED)

        return tier_discount + volume_discount + category_discount

    @staticmethod
    def _find_category_discount(category_discounts, category_id) -> CategoryDiscount | None:
        for entry in category_discounts:
            if entry.category_id == category_id:
                return entry
        return None
