# pricing/tests_api.py

from decimal import Decimal

from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APISimpleTestCase


class CalculatePriceAPITests(APISimpleTestCase):
    """API tests for POST /api/pricing/calculate/."""

    def setUp(self):
        self.url = reverse("pricing:calculate-price")
        self.payload = {
            "paper_stock": {
                "id": "16pt-gloss",
                "name": "16pt Glossy Cardstock",
                "price_per_sq_inch": "0.008",
                "second_side_markup_percent": "30",
            },
            "print_size": {"id": "bc", "name": "Business Card", "width": "3.5", "height": "2"},
            "quantity": 500,
            "sides": "double",
            "turnaround_time": {"id": "standard", "name": "Standard", "price_markup_percent": "0"},
            "category_id": "business-cards",
        }

    def test_url(self):
        self.assertEqual(self.url, "/api/pricing/calculate/")

    def test_baseline_calculation(self):
        response = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data["base_paper_print_price"]), Decimal("36.40"))
        self.assertEqual(
            Decimal(response.data["calculated_product_subtotal_before_shipping_tax"]),
            Decimal("36.40"),
        )
        self.assertEqual(response.data["discrete_addon_costs"], [])
        self.assertIsNone(response.data["breakdown"]["broker_savings"])

    def test_rush_with_exact_size(self):
        self.payload["turnaround_time"] = {"id": "rush", "name": "Rush", "price_markup_percent": "25"}
        self.payload["add_ons"] = {"exact_size": {"selected": True}}
        response = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["exact_size_applied"])
        self.assertEqual(Decimal(response.data["price_after_turnaround"]), Decimal("51.1875"))

    def test_addons_use_list_prices_when_fees_omitted(self):
        self.payload["quantity"] = 1000
        self.payload["add_ons"] = {
            "digital_proof": {"selected": True},
            "perforation": {"selected": True},
        }
        response = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data["total_addon_cost"]), Decimal("35.00"))

        lines = response.data["discrete_addon_costs"]
        self.assertEqual([line["key"] for line in lines], ["digital_proof", "perforation"])
        self.assertEqual(lines[1]["calculation_details"], "$20.00 setup + $0.01 × 1000 pieces")

    def test_broker_hides_tagline(self):
        self.payload["is_broker"] = True
        self.payload["broker_discounts"] = [
            {"category_id": "business-cards", "discount_percentage": "10"},
        ]
        self.payload["add_ons"] = {"our_tagline": {"selected": True}}
        response = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["broker_discount_applied"])
        self.assertFalse(response.data["our_tagline_discount_applied"])
        self.assertEqual(Decimal(response.data["adjusted_base_price"]), Decimal("32.76"))
        self.assertIn("our_tagline", response.data["hidden_addons"])

    def test_eddm_hidden_for_ineligible_product(self):
        self.payload["is_eddm_eligible"] = False
        response = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(
            sorted(response.data["hidden_addons"]),
            ["eddm_process", "postal_delivery"],
        )

    def test_missing_addon_parameter_returns_400(self):
        self.payload["add_ons"] = {"hole_drilling": {"selected": True, "hole_type": "custom"}}
        response = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["addon"], "hole_drilling")
        self.assertEqual(response.data["field"], "number_of_holes")
        self.assertIn("error", response.data)

    def test_zero_dimension_returns_400(self):
        self.payload["print_size"]["width"] = "0"
        response = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("error", response.data)

    def test_invalid_quantity_rejected(self):
        self.payload["quantity"] = 0
        response = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("quantity", response.data)

    def test_unknown_addon_key_ignored(self):
        self.payload["add_ons"] = {"glitter": {"selected": True}}
        response = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data["total_addon_cost"]), Decimal("0"))

    def test_eddm_without_banding_rejected(self):
        self.payload["add_ons"] = {"eddm_process": {"selected": True}}
        response = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["addon"], "eddm_process")

    @override_settings(PRICING_ENFORCE_ADDON_RULES=False)
    def test_addon_rules_can_be_disabled(self):
        self.payload["quantity"] = 1000
        self.payload["add_ons"] = {"eddm_process": {"selected": True}}
        response = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data["total_addon_cost"]), Decimal("289"))

    def test_get_not_allowed(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
