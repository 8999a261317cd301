# brokers/serializers.py

from decimal import Decimal

from rest_framework import serializers

from common.formatting import format_percentage, format_volume
from pricing.serializers import DecimalStringField

from .services.calculator import BROKER_TIERS, get_tier
from .types import BrokerProfile, CategoryDiscount, VolumeTier


TIER_CHOICES = [tier.name for tier in BROKER_TIERS]


# =============================================================================
# Input
# =============================================================================


class CategoryDiscountSerializer(serializers.Serializer):
    category_id = serializers.CharField()
    category_name = serializers.CharField(required=False, default="", allow_blank=True)
    discount_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal("0"), max_value=Decimal("100")
    )
    minimum_quantity = serializers.IntegerField(min_value=0, default=1)


class VolumeTierSerializer(serializers.Serializer):
    tier_name = serializers.CharField(required=False, default="Standard")
    minimum_volume = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0"), default=Decimal("0")
    )
    discount_multiplier = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal("0"), default=Decimal("1.0")
    )


class BrokerProfileSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, default="")
    tier = serializers.ChoiceField(choices=TIER_CHOICES)
    volume_tier = VolumeTierSerializer(required=False)
    category_discounts = CategoryDiscountSerializer(many=True, required=False)
    annual_volume_committed = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0"), default=Decimal("0")
    )
    current_year_volume = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0"), default=Decimal("0")
    )


def build_broker_profile(data) -> BrokerProfile | None:
    """BrokerProfile from validated BrokerProfileSerializer data."""
    if not data:
        return None
    return BrokerProfile(
        id=data["id"],
        broker_tier=get_tier(data["tier"]),
        volume_tier=VolumeTier(**data["volume_tier"]) if data.get("volume_tier") else VolumeTier(),
        category_discounts=[
            CategoryDiscount(**entry) for entry in data.get("category_discounts", [])
        ],
        annual_volume_committed=data["annual_volume_committed"],
        current_year_volume=data["current_year_volume"],
    )


class BrokerPriceCalculationSerializer(serializers.Serializer):
    """
    Input for POST /api/brokers/calculate/.
    The customer is priced as a broker when `broker_profile` is present.
    """

    base_price = serializers.DecimalField(max_digits=12, decimal_places=4, min_value=Decimal("0"))
    quantity = serializers.IntegerField(min_value=1)
    category_id = serializers.CharField()
    product_id = serializers.CharField(required=False, default="", allow_blank=True)
    rush_order = serializers.BooleanField(default=False)
    broker_profile = BrokerProfileSerializer(required=False, allow_null=True)


class PricePreviewSerializer(serializers.Serializer):
    """Input for POST /api/brokers/preview/."""

    base_price = serializers.DecimalField(max_digits=12, decimal_places=4, min_value=Decimal("0"))
    category_id = serializers.CharField()
    product_id = serializers.CharField(required=False, default="", allow_blank=True)
    quantities = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        required=False,
        allow_empty=False,
    )
    rush_order = serializers.BooleanField(default=False)
    simulate_broker_tier = serializers.ChoiceField(
        choices=TIER_CHOICES, required=False, allow_null=True
    )
    broker_profile = BrokerProfileSerializer(required=False, allow_null=True)


# =============================================================================
# Output
# =============================================================================


class DiscountLineSerializer(serializers.Serializer):
    type = serializers.CharField(read_only=True)
    amount = DecimalStringField()
    percentage = DecimalStringField()
    description = serializers.CharField(read_only=True)


class PriceCalculationSerializer(serializers.Serializer):
    base_price = DecimalStringField()
    total_base_price = DecimalStringField()
    volume_discount = DecimalStringField()
    tier_discount = DecimalStringField()
    category_discount = DecimalStringField()
    broker_discount = DecimalStringField()
    rush_surcharge = DecimalStringField()
    total_discount = DecimalStringField()
    final_price = DecimalStringField()
    savings = DecimalStringField()
    discount_breakdown = DiscountLineSerializer(many=True, read_only=True)


class SummaryLineSerializer(DiscountLineSerializer):
    name = serializers.CharField(read_only=True)


class NextTierSavingsSerializer(serializers.Serializer):
    tier_name = serializers.CharField(read_only=True)
    additional_savings = DecimalStringField()
    volume_needed = DecimalStringField()


class DiscountSummarySerializer(serializers.Serializer):
    total_discount_percentage = DecimalStringField()
    total_savings = DecimalStringField()
    breakdown = SummaryLineSerializer(many=True, read_only=True)
    next_tier_savings = NextTierSavingsSerializer(read_only=True)


class VolumeBreakpointSerializer(serializers.Serializer):
    min_quantity = serializers.IntegerField(read_only=True)
    max_quantity = serializers.IntegerField(read_only=True)
    discount_percentage = DecimalStringField()
    multiplier = DecimalStringField()


class BrokerTierSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    display_name = serializers.CharField(read_only=True)
    minimum_annual_volume = DecimalStringField()
    minimum_annual_volume_display = serializers.SerializerMethodField()
    base_discount_percentage = DecimalStringField()
    base_discount_display = serializers.SerializerMethodField()
    payment_terms_days = serializers.IntegerField(read_only=True)
    rush_order_discount = DecimalStringField()
    free_shipping_threshold = DecimalStringField()
    benefits = serializers.ListField(child=serializers.CharField(), read_only=True)

    def get_minimum_annual_volume_display(self, obj):
        return format_volume(obj.minimum_annual_volume)

    def get_base_discount_display(self, obj):
        return format_percentage(obj.base_discount_percentage, decimals=0)


class PreviewRowSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(read_only=True)
    unit_price = DecimalStringField()
    total_base_price = DecimalStringField()
    calculation = PriceCalculationSerializer(read_only=True)
    summary = DiscountSummarySerializer(read_only=True)
    unit_final_price = DecimalStringField()
    savings_per_unit = DecimalStringField()


class BrokerPotentialSerializer(serializers.Serializer):
    tier = serializers.CharField(read_only=True)
    sample_quantity = serializers.IntegerField(read_only=True)
    standard_price = DecimalStringField()
    broker_price = DecimalStringField()
    potential_savings = DecimalStringField()
    savings_percentage = DecimalStringField()
