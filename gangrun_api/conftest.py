# conftest.py - Shared pytest fixtures for all apps

import pytest
from decimal import Decimal

from brokers.services.calculator import get_tier
from brokers.types import BrokerProfile, CategoryDiscount, VolumeTier
from pricing.types import PaperStock, PrintSize, ProductConfiguration, TurnaroundTime


# =============================================================================
# Catalog Fixtures
# =============================================================================

@pytest.fixture
def paper_stock():
    """16pt gloss card with a 30% second side markup."""
    return PaperStock(
        id="16pt-gloss",
        name="16pt Glossy Cardstock",
        price_per_sq_inch=Decimal("0.008"),
        second_side_markup_percent=Decimal("30"),
    )


@pytest.fixture
def business_card_size():
    """3.5" × 2" business card."""
    return PrintSize(id="bc", name="Business Card", width=Decimal("3.5"), height=Decimal("2"))


@pytest.fixture
def standard_turnaround():
    return TurnaroundTime(id="standard", name="Standard", price_markup_percent=Decimal("0"), business_days=5)


@pytest.fixture
def rush_turnaround():
    return TurnaroundTime(id="rush", name="Rush", price_markup_percent=Decimal("25"), business_days=2)


@pytest.fixture
def business_card_config(paper_stock, business_card_size, standard_turnaround):
    """500 double sided business cards, no add-ons, retail customer."""
    return ProductConfiguration(
        paper_stock=paper_stock,
        print_size=business_card_size,
        quantity=500,
        sides="double",
        turnaround_time=standard_turnaround,
        category_id="business-cards",
    )


# =============================================================================
# Broker Fixtures
# =============================================================================

@pytest.fixture
def silver_broker():
    """Silver broker with a 10% business card discount and no volume bonuses."""
    return BrokerProfile(
        id="broker-1",
        broker_tier=get_tier("silver"),
        volume_tier=VolumeTier(),
        category_discounts=[
            CategoryDiscount(
                category_id="business-cards",
                category_name="Business Cards",
                discount_percentage=Decimal("10"),
                minimum_quantity=100,
            ),
        ],
    )


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def api_client():
    """Return a DRF API client."""
    from rest_framework.test import APIClient
    return APIClient()
