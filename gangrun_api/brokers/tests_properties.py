"""
Broker/volume calculator identities across quantities and order types.
"""

from decimal import Decimal

import pytest

from brokers.services.calculator import PricingCalculator
from brokers.types import PricingContext


@pytest.mark.parametrize("quantity", [1, 24, 25, 100, 999, 1000, 5000])
@pytest.mark.parametrize("rush_order", [False, True])
def test_final_price_identity(silver_broker, quantity, rush_order):
    context = PricingContext(
        base_price=Decimal("0.35"),
        quantity=quantity,
        category_id="business-cards",
        is_broker=True,
        broker_profile=silver_broker,
        rush_order=rush_order,
    )
    result = PricingCalculator().calculate_price(context)

    assert result.total_base_price == Decimal("0.35") * quantity
    assert result.total_discount == (
        result.volume_discount + result.tier_discount + result.category_discount + result.broker_discount
    )
    assert result.final_price == result.total_base_price - result.total_discount + result.rush_surcharge
    assert result.savings == result.total_discount


@pytest.mark.parametrize("quantity", [10, 100, 1000])
def test_broker_never_pays_more_than_retail(silver_broker, quantity):
    calculator = PricingCalculator()
    retail = calculator.calculate_price(PricingContext(base_price=Decimal("1"), quantity=quantity))
    broker = calculator.calculate_price(PricingContext(
        base_price=Decimal("1"),
        quantity=quantity,
        category_id="business-cards",
        is_broker=True,
        broker_profile=silver_broker,
    ))
    assert broker.final_price < retail.final_price
