"""
Documentation pricing engine.

    1. Base_Paper_Print_Price = Quantity × Area × PricePerSqInch × SidesFactor
    2. Adjusted_Base_Price = broker category discount, else tagline discount
    3. Price_After_Base_Percentage_Modifiers = + exact size markup
    4. Price_After_Turnaround = × (1 + turnaround markup %)
    5. Subtotal = Price_After_Turnaround + discrete add-on costs

`calculate_price` is a pure function: no I/O, no shared state, and the
input configuration is never modified.
"""

import logging
from decimal import Decimal

from ..exceptions import ConfigurationError
from ..types import (
    SIDES_CHOICES,
    DocumentationPriceCalculation,
    PaperStock,
    PriceBreakdown,
    PrintSize,
    ProductConfiguration,
)
from ..utils import is_positive_int
from .addons import resolve_addon_costs
from .modifiers import (
    EXACT_SIZE_MARKUP_PERCENTAGE,
    TAGLINE_DISCOUNT_PERCENTAGE,
    BrokerCategoryDiscount,
    TaglineDiscount,
    apply_exact_size,
    apply_turnaround,
    resolve_discount,
)


logger = logging.getLogger(__name__)


def calculate_sides_factor(sides: str, paper_stock: PaperStock) -> Decimal:
    """Single sided is 1.0; double sided adds the paper stock's second side markup."""
    if sides == "single":
        return Decimal("1.0")
    return 1 + paper_stock.second_side_markup_percent / 100


def calculate_base_price(
    quantity: int,
    print_size: PrintSize,
    paper_stock: PaperStock,
    sides: str,
) -> Decimal:
    return (
        quantity
        * print_size.area
        * paper_stock.price_per_sq_inch
        * calculate_sides_factor(sides, paper_stock)
    )


def validate_configuration(config: ProductConfiguration) -> None:
    """Reject configurations that would price to nonsense. Raises ConfigurationError."""
    if not is_positive_int(config.quantity):
        raise ConfigurationError(
            f"Quantity must be a positive whole number, got {config.quantity!r}"
        )

    if config.sides not in SIDES_CHOICES:
        raise ConfigurationError(
            f"Sides must be 'single' or 'double', got {config.sides!r}"
        )

    size = config.print_size
    if size.width <= 0 or size.height <= 0:
        raise ConfigurationError(
            f"Print size '{size.name}' must have positive dimensions, "
            f"got {size.width} × {size.height}"
        )

    config.add_ons.validate()


def calculate_price(config: ProductConfiguration) -> DocumentationPriceCalculation:
    """Price a product configuration. Raises ConfigurationError before any arithmetic."""
    validate_configuration(config)

    # Step 1
    sides_factor = calculate_sides_factor(config.sides, config.paper_stock)
    base_price = calculate_base_price(
        config.quantity, config.print_size, config.paper_stock, config.sides
    )

    # Step 2
    discount = resolve_discount(config)
    adjusted_base_price = discount.apply(base_price)
    broker_applied = isinstance(discount, BrokerCategoryDiscount)
    tagline_applied = isinstance(discount, TaglineDiscount)
    savings = base_price - adjusted_base_price

    # Step 3
    price_after_modifiers, exact_size_markup = apply_exact_size(
        adjusted_base_price, config.add_ons.is_selected("exact_size")
    )

    # Step 4
    turnaround_percent = config.turnaround_time.price_markup_percent
    price_after_turnaround = apply_turnaround(price_after_modifiers, turnaround_percent)

    # Step 5
    addon_costs, total_addon_cost = resolve_addon_costs(config.add_ons, config.quantity)
    subtotal = price_after_turnaround + total_addon_cost

    logger.debug(
        "Priced %s × %s (category=%s): subtotal=%s",
        config.quantity,
        config.print_size.name,
        config.category_id,
        subtotal,
    )

    return DocumentationPriceCalculation(
        effective_quantity=config.quantity,
        effective_area=config.print_size.area,
        paper_stock_base_price_per_sq_inch=config.paper_stock.price_per_sq_inch,
        sides_factor=sides_factor,
        base_paper_print_price=base_price,
        broker_discount_applied=broker_applied,
        broker_discount_percentage=discount.percentage if broker_applied else Decimal("0"),
        our_tagline_discount_applied=tagline_applied,
        tagline_discount_percentage=TAGLINE_DISCOUNT_PERCENTAGE,
        adjusted_base_price=adjusted_base_price,
        exact_size_applied=exact_size_markup is not None,
        exact_size_markup_percentage=EXACT_SIZE_MARKUP_PERCENTAGE,
        price_after_base_percentage_modifiers=price_after_modifiers,
        turnaround_markup_percentage=turnaround_percent,
        price_after_turnaround=price_after_turnaround,
        discrete_addon_costs=tuple(addon_costs),
        total_addon_cost=total_addon_cost,
        calculated_product_subtotal_before_shipping_tax=subtotal,
        breakdown=PriceBreakdown(
            base_printing=adjusted_base_price,
            turnaround_markup=price_after_turnaround - price_after_modifiers,
            addons=total_addon_cost,
            total=subtotal,
            broker_savings=savings if broker_applied else None,
            tagline_savings=savings if tagline_applied else None,
            exact_size_markup=exact_size_markup,
        ),
    )
