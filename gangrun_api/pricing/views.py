# pricing/views.py

import logging

from django.conf import settings
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import ConfigurationError
from .serializers import (
    DocumentationPriceCalculationSerializer,
    ProductConfigurationSerializer,
)
from .services.addon_rules import is_addon_visible, validate_addon_rules
from .services.addons import ADDON_TYPES
from .services.engine import calculate_price


logger = logging.getLogger(__name__)


def configuration_error_response(exc: ConfigurationError) -> Response:
    payload = {"error": str(exc)}
    if exc.addon:
        payload["addon"] = exc.addon
    if exc.field:
        payload["field"] = exc.field
    return Response(payload, status=status.HTTP_400_BAD_REQUEST)


class CalculatePriceView(APIView):
    """
    Price a configured product.
    Endpoint: POST /api/pricing/calculate/

    Returns the itemized calculation: base price, discount/markup steps,
    add-on lines with their calculation text, and the subtotal before
    shipping and tax. Add-ons hidden for this customer are listed in
    `hidden_addons`.
    """

    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = ProductConfigurationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            config = serializer.to_configuration()
            if getattr(settings, "PRICING_ENFORCE_ADDON_RULES", True):
                validate_addon_rules(config)
            result = calculate_price(config)
        except ConfigurationError as exc:
            logger.warning("Rejected price calculation: %s", exc)
            return configuration_error_response(exc)

        is_eddm_eligible = serializer.validated_data["is_eddm_eligible"]
        hidden = [
            key for key in ADDON_TYPES
            if not is_addon_visible(key, config, is_eddm_eligible=is_eddm_eligible)
        ]

        return Response({
            **DocumentationPriceCalculationSerializer(result).data,
            "hidden_addons": hidden,
        })
