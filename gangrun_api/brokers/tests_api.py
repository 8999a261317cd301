"""
Tests for brokers API: broker price calculation, price preview, tiers.
"""

from decimal import Decimal

import pytest
from django.test import override_settings
from rest_framework import status


@pytest.fixture
def broker_profile_payload():
    """Silver broker with 10% off business cards from 100 units."""
    return {
        "id": "broker-1",
        "tier": "silver",
        "category_discounts": [
            {
                "category_id": "business-cards",
                "category_name": "Business Cards",
                "discount_percentage": "10",
                "minimum_quantity": 100,
            },
        ],
    }


# =============================================================================
# Calculate Tests
# =============================================================================


def test_calculate_retail_price(api_client):
    """Without a broker profile only the volume discount applies."""
    response = api_client.post(
        "/api/brokers/calculate/",
        {"base_price": "0.10", "quantity": 100, "category_id": "business-cards"},
        format="json",
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.data["is_broker"] is False
    assert response.data["broker_tier"] is None
    assert Decimal(response.data["pricing"]["final_price"]) == Decimal("9.20")
    assert response.data["discount_summary"]["next_tier_savings"] is None
    assert len(response.data["volume_breakpoints"]) == 9


def test_calculate_broker_price(api_client, broker_profile_payload):
    """Tier, category and multiplier bonus stack on top of the volume discount."""
    response = api_client.post(
        "/api/brokers/calculate/",
        {
            "base_price": "0.10",
            "quantity": 100,
            "category_id": "business-cards",
            "broker_profile": broker_profile_payload,
        },
        format="json",
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.data["is_broker"] is True
    assert response.data["broker_tier"] == "Silver"

    pricing = response.data["pricing"]
    assert Decimal(pricing["total_discount"]) == Decimal("3.00")
    assert Decimal(pricing["final_price"]) == Decimal("7.00")
    assert [line["type"] for line in pricing["discount_breakdown"]] == [
        "volume", "tier", "category", "broker_volume",
    ]

    summary = response.data["discount_summary"]
    assert Decimal(summary["total_discount_percentage"]) == Decimal("30")
    assert summary["next_tier_savings"]["tier_name"] == "Gold"


def test_calculate_rush_order(api_client, broker_profile_payload):
    """Silver brokers pay a 10% rush surcharge instead of 15%."""
    response = api_client.post(
        "/api/brokers/calculate/",
        {
            "base_price": "1",
            "quantity": 10,
            "category_id": "flyers",
            "rush_order": True,
            "broker_profile": broker_profile_payload,
        },
        format="json",
    )
    assert response.status_code == status.HTTP_200_OK
    assert Decimal(response.data["pricing"]["rush_surcharge"]) == Decimal("1.00")


def test_calculate_unknown_tier_returns_400(api_client, broker_profile_payload):
    broker_profile_payload["tier"] = "diamond"
    response = api_client.post(
        "/api/brokers/calculate/",
        {
            "base_price": "1",
            "quantity": 10,
            "category_id": "flyers",
            "broker_profile": broker_profile_payload,
        },
        format="json",
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "broker_profile" in response.data


def test_calculate_requires_positive_quantity(api_client):
    response = api_client.post(
        "/api/brokers/calculate/",
        {"base_price": "1", "quantity": 0, "category_id": "flyers"},
        format="json",
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "quantity" in response.data


# =============================================================================
# Preview Tests
# =============================================================================


def test_preview_default_quantities(api_client):
    """Non-brokers get the default matrix and a sample broker comparison."""
    response = api_client.post(
        "/api/brokers/preview/",
        {"base_price": "0.10", "category_id": "business-cards"},
        format="json",
    )
    assert response.status_code == status.HTTP_200_OK
    assert [row["quantity"] for row in response.data["matrix"]] == [1, 25, 50, 100, 250, 500, 1000]

    potential = response.data["broker_potential"]
    assert potential["tier"] == "Silver"
    assert potential["sample_quantity"] == 100
    assert Decimal(potential["broker_price"]) == Decimal("7.22")


@override_settings(PRICING_PREVIEW_QUANTITIES=[10, 20], PRICING_SAMPLE_BROKER_TIER="gold")
def test_preview_settings(api_client):
    response = api_client.post(
        "/api/brokers/preview/",
        {"base_price": "1", "category_id": "flyers"},
        format="json",
    )
    assert [row["quantity"] for row in response.data["matrix"]] == [10, 20]
    assert response.data["broker_potential"]["tier"] == "Gold"


@override_settings(PRICING_SAMPLE_BROKER_TIER="diamond")
def test_preview_unknown_sample_tier_falls_back_to_silver(api_client):
    response = api_client.post(
        "/api/brokers/preview/",
        {"base_price": "1", "category_id": "flyers", "quantities": [100]},
        format="json",
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.data["broker_potential"]["tier"] == "Silver"


def test_preview_simulated_tier(api_client, broker_profile_payload):
    """simulate_broker_tier re-prices the broker on another tier."""
    response = api_client.post(
        "/api/brokers/preview/",
        {
            "base_price": "0.10",
            "category_id": "business-cards",
            "quantities": [100],
            "simulate_broker_tier": "gold",
            "broker_profile": broker_profile_payload,
        },
        format="json",
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.data["broker_tier"] == "Gold"
    assert response.data["simulate_broker_tier"] == "gold"
    assert response.data["broker_potential"] is None

    row = response.data["matrix"][0]
    assert Decimal(row["calculation"]["tier_discount"]) == Decimal("1.50")
    assert Decimal(row["unit_final_price"]) == Decimal(row["calculation"]["final_price"]) / 100


def test_preview_rejects_zero_quantity(api_client):
    response = api_client.post(
        "/api/brokers/preview/",
        {"base_price": "1", "category_id": "flyers", "quantities": [0, 10]},
        format="json",
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Tiers Tests
# =============================================================================


def test_tiers(api_client):
    response = api_client.get("/api/brokers/tiers/")
    assert response.status_code == status.HTTP_200_OK

    tiers = response.data["tiers"]
    assert [tier["name"] for tier in tiers] == ["bronze", "silver", "gold", "platinum"]
    assert tiers[0]["minimum_annual_volume_display"] == "10.0K"
    assert tiers[3]["base_discount_display"] == "20%"
    assert tiers[2]["payment_terms_days"] == 45
    assert "Dedicated account manager" in tiers[2]["benefits"]
    assert response.data["volume_breakpoints"][-1]["max_quantity"] is None
