# brokers/views.py

import logging

from django.conf import settings
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from pricing.exceptions import ConfigurationError
from pricing.views import configuration_error_response

from .serializers import (
    BrokerPotentialSerializer,
    BrokerPriceCalculationSerializer,
    BrokerTierSerializer,
    DiscountSummarySerializer,
    PreviewRowSerializer,
    PriceCalculationSerializer,
    PricePreviewSerializer,
    VolumeBreakpointSerializer,
    build_broker_profile,
)
from .services.calculator import BROKER_TIERS, PricingCalculator, get_tier
from .services.discounts import calculate_discount_summary
from .services.preview import build_price_matrix, calculate_broker_potential, simulate_tier
from .types import PricingContext


logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_QUANTITIES = [1, 25, 50, 100, 250, 500, 1000]
DEFAULT_SAMPLE_BROKER_TIER = BROKER_TIERS[1]


def get_sample_broker_tier():
    """Tier named by PRICING_SAMPLE_BROKER_TIER, or silver if the name is unknown."""
    name = getattr(settings, "PRICING_SAMPLE_BROKER_TIER", DEFAULT_SAMPLE_BROKER_TIER.name)
    tier = get_tier(name)
    if tier is None:
        logger.warning(
            "Unknown PRICING_SAMPLE_BROKER_TIER %r, using %s",
            name,
            DEFAULT_SAMPLE_BROKER_TIER.name,
        )
        return DEFAULT_SAMPLE_BROKER_TIER
    return tier


class BrokerCalculatePriceView(APIView):
    """
    Broker/volume price for a unit price and quantity.
    Endpoint: POST /api/brokers/calculate/
    """

    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = BrokerPriceCalculationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        profile = build_broker_profile(data.get("broker_profile"))
        context = PricingContext(
            base_price=data["base_price"],
            quantity=data["quantity"],
            category_id=data["category_id"],
            product_id=data["product_id"],
            is_broker=profile is not None,
            broker_profile=profile,
            rush_order=data["rush_order"],
        )

        calculator = PricingCalculator()
        try:
            calculation = calculator.calculate_price(context)
        except ConfigurationError as exc:
            logger.warning("Rejected broker price calculation: %s", exc)
            return configuration_error_response(exc)

        summary = calculate_discount_summary(calculation, profile)

        return Response({
            "pricing": PriceCalculationSerializer(calculation).data,
            "discount_summary": DiscountSummarySerializer(summary).data,
            "volume_breakpoints": VolumeBreakpointSerializer(
                calculator.get_volume_breakpoints(), many=True
            ).data,
            "is_broker": profile is not None,
            "broker_tier": profile.broker_tier.display_name if profile else None,
        })


class PricePreviewView(APIView):
    """
    Price matrix across quantities.
    Endpoint: POST /api/brokers/preview/

    `simulate_broker_tier` re-prices the given broker profile on another
    tier. Non-broker requests also get `broker_potential`: what a sample
    broker account would save on 100 units.
    """

    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = PricePreviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        quantities = data.get("quantities") or getattr(
            settings, "PRICING_PREVIEW_QUANTITIES", DEFAULT_PREVIEW_QUANTITIES
        )
        profile = build_broker_profile(data.get("broker_profile"))
        simulated = data.get("simulate_broker_tier")
        if profile is not None and simulated:
            profile = simulate_tier(profile, get_tier(simulated))

        calculator = PricingCalculator()
        try:
            rows = build_price_matrix(
                calculator,
                data["base_price"],
                quantities,
                category_id=data["category_id"],
                product_id=data["product_id"],
                broker_profile=profile,
                rush_order=data["rush_order"],
            )
            potential = None
            if profile is None:
                potential = calculate_broker_potential(
                    calculator,
                    data["base_price"],
                    get_sample_broker_tier(),
                    category_id=data["category_id"],
                    product_id=data["product_id"],
                )
        except ConfigurationError as exc:
            logger.warning("Rejected price preview: %s", exc)
            return configuration_error_response(exc)

        return Response({
            "base_price": format(data["base_price"], "f"),
            "category_id": data["category_id"],
            "is_broker": profile is not None,
            "broker_tier": profile.broker_tier.display_name if profile else None,
            "simulate_broker_tier": simulated,
            "matrix": PreviewRowSerializer(rows, many=True).data,
            "broker_potential": BrokerPotentialSerializer(potential).data if potential else None,
        })


class BrokerTiersView(APIView):
    """
    Broker tiers with their benefits, and the volume discount table.
    Endpoint: GET /api/brokers/tiers/
    """

    permission_classes = [permissions.AllowAny]

    def get(self, request):
        calculator = PricingCalculator()
        return Response({
            "tiers": BrokerTierSerializer(calculator.get_broker_tiers(), many=True).data,
            "volume_breakpoints": VolumeBreakpointSerializer(
                calculator.get_volume_breakpoints(), many=True
            ).data,
        })
