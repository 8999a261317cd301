# pricing/serializers.py

from decimal import Decimal

from rest_framework import serializers

from .services.addons import DESIGN_SERVICE_TYPES, FOLDING_RATES, AddOnConfiguration
from .types import (
    SIDES_CHOICES,
    BrokerDiscount,
    PaperStock,
    PrintSize,
    ProductConfiguration,
    TurnaroundTime,
)


def _money(default=None, **kwargs):
    """Non-negative money/rate field; `default` is the documented list price."""
    if default is not None:
        kwargs["default"] = Decimal(default)
    else:
        kwargs.setdefault("required", False)
    return serializers.DecimalField(
        max_digits=12,
        decimal_places=4,
        min_value=Decimal("0"),
        **kwargs,
    )


class DecimalStringField(serializers.Field):
    """Renders Decimals without rounding, e.g. "51.1875"."""

    def __init__(self, **kwargs):
        kwargs["read_only"] = True
        super().__init__(**kwargs)

    def to_representation(self, value):
        return format(value, "f")


# =============================================================================
# Input: catalog records
# =============================================================================


class PaperStockSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    price_per_sq_inch = serializers.DecimalField(
        max_digits=12, decimal_places=6, min_value=Decimal("0")
    )
    second_side_markup_percent = serializers.DecimalField(
        max_digits=6, decimal_places=2, min_value=Decimal("0"), default=Decimal("0")
    )
    default_coating_id = serializers.CharField(required=False, allow_null=True)


class PrintSizeSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, default="custom")
    name = serializers.CharField(required=False, default="Custom")
    width = serializers.DecimalField(max_digits=8, decimal_places=3)
    height = serializers.DecimalField(max_digits=8, decimal_places=3)
    is_custom = serializers.BooleanField(default=False)


class TurnaroundTimeSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    price_markup_percent = serializers.DecimalField(
        max_digits=6, decimal_places=2, min_value=Decimal("0"), default=Decimal("0")
    )
    business_days = serializers.IntegerField(min_value=0, default=0)


class BrokerDiscountSerializer(serializers.Serializer):
    category_id = serializers.CharField()
    discount_percentage = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal("0"),
        max_value=Decimal("100"),
    )


# =============================================================================
# Input: add-ons
# =============================================================================


class AddOnSerializer(serializers.Serializer):
    selected = serializers.BooleanField(default=False)


class DigitalProofSerializer(AddOnSerializer):
    price = _money("5.00")


class PerforationSerializer(AddOnSerializer):
    setup_fee = _money("20.00")
    price_per_piece = _money("0.01")
    orientation = serializers.ChoiceField(choices=["vertical", "horizontal"], required=False)
    position = serializers.CharField(required=False, allow_blank=True)


class ScoreOnlySerializer(AddOnSerializer):
    setup_fee = _money("17.00")
    price_per_score_per_piece = _money("0.01")
    number_of_scores = serializers.IntegerField(required=False)
    positions = serializers.CharField(required=False, allow_blank=True)


class FoldingSerializer(AddOnSerializer):
    fold_type = serializers.CharField(required=False, allow_blank=True)
    paper_type = serializers.ChoiceField(choices=list(FOLDING_RATES), required=False)


class DesignSerializer(AddOnSerializer):
    service_type = serializers.ChoiceField(choices=list(DESIGN_SERVICE_TYPES), required=False)
    sides = serializers.ChoiceField(choices=["one", "two"], required=False)


class BandingSerializer(AddOnSerializer):
    price_per_bundle = _money("0.75")
    items_per_bundle = serializers.IntegerField(default=100)
    band_type = serializers.ChoiceField(choices=["paper", "rubber"], required=False)


class ShrinkWrappingSerializer(AddOnSerializer):
    price_per_bundle = _money("0.30")
    items_per_bundle = serializers.IntegerField(default=100)


class QrCodeSerializer(AddOnSerializer):
    price = _money("5.00")
    content = serializers.CharField(required=False, allow_blank=True)


class PostalDeliverySerializer(AddOnSerializer):
    price_per_box = _money("30.00")
    number_of_boxes = serializers.IntegerField(required=False)


class EddmProcessSerializer(AddOnSerializer):
    setup_fee = _money("50.00")
    price_per_piece = _money("0.239")
    route_selection = serializers.ChoiceField(
        choices=["us_select", "customer_provides"], required=False
    )


class HoleDrillingSerializer(AddOnSerializer):
    setup_fee = _money("20.00")
    hole_type = serializers.ChoiceField(choices=["custom", "binder_punch"], required=False)
    number_of_holes = serializers.IntegerField(required=False)
    binder_type = serializers.ChoiceField(choices=["2-hole", "3-hole"], required=False)
    hole_size = serializers.CharField(required=False, allow_blank=True)
    position = serializers.CharField(required=False, allow_blank=True)


class AddOnConfigurationSerializer(serializers.Serializer):
    """
    Add-on selections keyed by add-on. Fee fields fall back to list prices;
    counts and choices are checked by the engine once an add-on is selected.
    """

    our_tagline = AddOnSerializer(required=False)
    exact_size = AddOnSerializer(required=False)
    digital_proof = DigitalProofSerializer(required=False)
    perforation = PerforationSerializer(required=False)
    score_only = ScoreOnlySerializer(required=False)
    folding = FoldingSerializer(required=False)
    design = DesignSerializer(required=False)
    banding = BandingSerializer(required=False)
    shrink_wrapping = ShrinkWrappingSerializer(required=False)
    qr_code = QrCodeSerializer(required=False)
    postal_delivery = PostalDeliverySerializer(required=False)
    eddm_process = EddmProcessSerializer(required=False)
    hole_drilling = HoleDrillingSerializer(required=False)


class ProductConfigurationSerializer(serializers.Serializer):
    """
    Input for POST /api/pricing/calculate/.

    {
        "paper_stock": {"id": "ps1", "name": "16pt Glossy",
                        "price_per_sq_inch": "0.008", "second_side_markup_percent": "30"},
        "print_size": {"id": "bc", "name": "Business Card", "width": "3.5", "height": "2"},
        "quantity": 500,
        "sides": "double",
        "turnaround_time": {"id": "standard", "name": "Standard", "price_markup_percent": "0"},
        "add_ons": {"digital_proof": {"selected": true}},
        "is_broker": false,
        "broker_discounts": [],
        "category_id": "business-cards"
    }
    """

    paper_stock = PaperStockSerializer()
    print_size = PrintSizeSerializer()
    quantity = serializers.IntegerField(min_value=1)
    sides = serializers.ChoiceField(choices=list(SIDES_CHOICES))
    turnaround_time = TurnaroundTimeSerializer()
    add_ons = AddOnConfigurationSerializer(required=False)
    is_broker = serializers.BooleanField(default=False)
    broker_discounts = BrokerDiscountSerializer(many=True, required=False)
    category_id = serializers.CharField(required=False, default="", allow_blank=True)
    is_eddm_eligible = serializers.BooleanField(default=True)

    def to_configuration(self) -> ProductConfiguration:
        data = self.validated_data
        return ProductConfiguration(
            paper_stock=PaperStock(**data["paper_stock"]),
            print_size=PrintSize(**data["print_size"]),
            quantity=data["quantity"],
            sides=data["sides"],
            turnaround_time=TurnaroundTime(**data["turnaround_time"]),
            add_ons=AddOnConfiguration.from_dict(data.get("add_ons")),
            is_broker=data["is_broker"],
            broker_discounts=[
                BrokerDiscount(**entry) for entry in data.get("broker_discounts", [])
            ],
            category_id=data["category_id"],
        )


# =============================================================================
# Output
# =============================================================================


class AddOnCostSerializer(serializers.Serializer):
    key = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    cost = DecimalStringField()
    calculation_details = serializers.CharField(read_only=True)


class PriceBreakdownSerializer(serializers.Serializer):
    base_printing = DecimalStringField()
    broker_savings = DecimalStringField()
    tagline_savings = DecimalStringField()
    exact_size_markup = DecimalStringField()
    turnaround_markup = DecimalStringField()
    addons = DecimalStringField()
    total = DecimalStringField()


class DocumentationPriceCalculationSerializer(serializers.Serializer):
    effective_quantity = serializers.IntegerField(read_only=True)
    effective_area = DecimalStringField()
    paper_stock_base_price_per_sq_inch = DecimalStringField()
    sides_factor = DecimalStringField()
    base_paper_print_price = DecimalStringField()

    broker_discount_applied = serializers.BooleanField(read_only=True)
    broker_discount_percentage = DecimalStringField()
    our_tagline_discount_applied = serializers.BooleanField(read_only=True)
    tagline_discount_percentage = DecimalStringField()
    adjusted_base_price = DecimalStringField()

    exact_size_applied = serializers.BooleanField(read_only=True)
    exact_size_markup_percentage = DecimalStringField()
    price_after_base_percentage_modifiers = DecimalStringField()

    turnaround_markup_percentage = DecimalStringField()
    price_after_turnaround = DecimalStringField()

    discrete_addon_costs = AddOnCostSerializer(many=True, read_only=True)
    total_addon_cost = DecimalStringField()

    calculated_product_subtotal_before_shipping_tax = DecimalStringField()
    breakdown = PriceBreakdownSerializer(read_only=True)
