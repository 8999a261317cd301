"""
Properties that must hold for any configuration the engine prices.
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from pricing.services.engine import calculate_price
from pricing.types import BrokerDiscount


ADD_ONS = {
    "digital_proof": {"selected": True, "price": "5.00"},
    "banding": {"selected": True, "price_per_bundle": "0.75", "items_per_bundle": 100},
    "hole_drilling": {"selected": True, "setup_fee": "20", "hole_type": "binder_punch"},
}


@pytest.mark.parametrize("quantity", [1, 99, 101, 500, 2500])
def test_subtotal_is_turnaround_price_plus_addons(business_card_config, rush_turnaround, quantity):
    config = replace(business_card_config, quantity=quantity, turnaround_time=rush_turnaround, add_ons=ADD_ONS)
    result = calculate_price(config)

    assert result.calculated_product_subtotal_before_shipping_tax == (
        result.price_after_turnaround + result.total_addon_cost
    )
    assert result.total_addon_cost == sum(line.cost for line in result.discrete_addon_costs)
    assert result.price_after_turnaround == result.price_after_base_percentage_modifiers * (
        1 + result.turnaround_markup_percentage / 100
    )


@pytest.mark.parametrize("quantity,bundles", [(100, 1), (101, 2), (200, 2), (201, 3)])
def test_bundles_round_up(business_card_config, quantity, bundles):
    config = replace(business_card_config, quantity=quantity, add_ons={"banding": ADD_ONS["banding"]})
    (line,) = calculate_price(config).discrete_addon_costs
    assert line.cost == bundles * Decimal("0.75")


def test_sides_factor(business_card_config):
    single = calculate_price(replace(business_card_config, sides="single"))
    double = calculate_price(business_card_config)
    assert double.base_paper_print_price == single.base_paper_print_price * Decimal("1.3")


@pytest.mark.parametrize("percentage", ["5", "12.5", "40"])
def test_tagline_never_stacks_with_broker_discount(business_card_config, percentage):
    broker = replace(
        business_card_config,
        is_broker=True,
        broker_discounts=[BrokerDiscount(category_id="business-cards", discount_percentage=percentage)],
    )
    tagged = replace(broker, add_ons={"our_tagline": True})
    assert calculate_price(tagged).adjusted_base_price == calculate_price(broker).adjusted_base_price


def test_repeat_calls_identical(business_card_config):
    config = replace(business_card_config, add_ons={**ADD_ONS, "exact_size": True})
    assert calculate_price(config) == calculate_price(config)
