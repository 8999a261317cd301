# pricing/tests.py

from dataclasses import replace
from decimal import Decimal

from django.test import SimpleTestCase

from pricing.exceptions import ConfigurationError, PricingError
from pricing.services.addons import AddOnConfiguration, DigitalProof, Perforation
from pricing.services.engine import calculate_base_price, calculate_price, calculate_sides_factor
from pricing.services.modifiers import (
    BrokerCategoryDiscount,
    NoDiscount,
    TaglineDiscount,
    apply_exact_size,
    apply_turnaround,
    resolve_discount,
)
from pricing.types import (
    BrokerDiscount,
    PaperStock,
    PrintSize,
    ProductConfiguration,
    TurnaroundTime,
)


def _business_cards(**overrides):
    """500 double sided 3.5" × 2" cards on 0.008/sq-in stock with 30% second side markup."""
    config = ProductConfiguration(
        paper_stock=PaperStock(
            id="16pt-gloss",
            name="16pt Glossy Cardstock",
            price_per_sq_inch=Decimal("0.008"),
            second_side_markup_percent=Decimal("30"),
        ),
        print_size=PrintSize(id="bc", name="Business Card", width=Decimal("3.5"), height=Decimal("2")),
        quantity=500,
        sides="double",
        turnaround_time=TurnaroundTime(id="standard", name="Standard", price_markup_percent=Decimal("0")),
        category_id="business-cards",
    )
    return replace(config, **overrides)


RUSH = TurnaroundTime(id="rush", name="Rush", price_markup_percent=Decimal("25"), business_days=2)


# =============================================================================
# Base Price Tests
# =============================================================================


class BasePriceTests(SimpleTestCase):
    """Step 1: quantity × area × rate × sides factor."""

    def setUp(self):
        self.config = _business_cards()

    def test_business_card_baseline(self):
        result = calculate_price(self.config)
        self.assertEqual(result.effective_quantity, 500)
        self.assertEqual(result.effective_area, Decimal("7.0"))
        self.assertEqual(result.sides_factor, Decimal("1.3"))
        self.assertEqual(result.base_paper_print_price, Decimal("36.40"))
        self.assertEqual(result.calculated_product_subtotal_before_shipping_tax, Decimal("36.40"))

    def test_double_sided_is_markup_times_single_sided(self):
        single = calculate_price(replace(self.config, sides="single"))
        double = calculate_price(self.config)
        self.assertEqual(single.sides_factor, Decimal("1.0"))
        self.assertEqual(single.base_paper_print_price, Decimal("28.00"))
        self.assertEqual(double.base_paper_print_price, single.base_paper_print_price * Decimal("1.3"))

    def test_sides_factor_without_second_side_markup(self):
        stock = replace(self.config.paper_stock, second_side_markup_percent=Decimal("0"))
        self.assertEqual(calculate_sides_factor("double", stock), Decimal("1"))

    def test_calculate_base_price(self):
        price = calculate_base_price(
            1000,
            PrintSize.custom(4, 6),
            self.config.paper_stock,
            "single",
        )
        self.assertEqual(price, Decimal("192.000"))

    def test_numbers_are_coerced_to_decimal(self):
        stock = PaperStock(id="x", name="X", price_per_sq_inch=0.008, second_side_markup_percent="30")
        self.assertIsInstance(stock.price_per_sq_inch, Decimal)
        self.assertEqual(stock.price_per_sq_inch, Decimal("0.008"))
        self.assertEqual(stock.second_side_markup_percent, Decimal("30"))

    def test_custom_print_size(self):
        size = PrintSize.custom(Decimal("4.25"), Decimal("11"))
        self.assertTrue(size.is_custom)
        self.assertEqual(size.id, "custom")
        self.assertEqual(size.area, Decimal("46.75"))


# =============================================================================
# Modifier Pipeline Tests
# =============================================================================


class ModifierPipelineTests(SimpleTestCase):
    """Steps 2-4: discount, exact size, turnaround."""

    def setUp(self):
        self.config = _business_cards()

    def test_exact_size_markup(self):
        result = calculate_price(_business_cards(add_ons={"exact_size": {"selected": True}}))
        self.assertTrue(result.exact_size_applied)
        self.assertEqual(result.exact_size_markup_percentage, Decimal("12.5"))
        self.assertEqual(result.price_after_base_percentage_modifiers, Decimal("40.95"))
        self.assertEqual(result.breakdown.exact_size_markup, Decimal("4.55"))

    def test_rush_turnaround_markup(self):
        result = calculate_price(_business_cards(
            turnaround_time=RUSH,
            add_ons={"exact_size": {"selected": True}},
        ))
        self.assertEqual(result.turnaround_markup_percentage, Decimal("25"))
        self.assertEqual(result.price_after_turnaround, Decimal("51.1875"))
        self.assertEqual(result.breakdown.turnaround_markup, Decimal("10.2375"))

    def test_zero_turnaround_markup_leaves_price_unchanged(self):
        result = calculate_price(self.config)
        self.assertEqual(result.price_after_turnaround, result.price_after_base_percentage_modifiers)

    def test_tagline_discount(self):
        result = calculate_price(_business_cards(add_ons={"our_tagline": {"selected": True}}))
        self.assertTrue(result.our_tagline_discount_applied)
        self.assertFalse(result.broker_discount_applied)
        self.assertEqual(result.tagline_discount_percentage, Decimal("5.0"))
        self.assertEqual(result.adjusted_base_price, Decimal("34.58"))
        self.assertEqual(result.breakdown.tagline_savings, Decimal("1.82"))
        self.assertIsNone(result.breakdown.broker_savings)

    def test_broker_category_discount(self):
        result = calculate_price(_business_cards(
            is_broker=True,
            broker_discounts=[BrokerDiscount(category_id="business-cards", discount_percentage=10)],
        ))
        self.assertTrue(result.broker_discount_applied)
        self.assertEqual(result.broker_discount_percentage, Decimal("10"))
        self.assertEqual(result.adjusted_base_price, Decimal("32.76"))
        self.assertEqual(result.breakdown.broker_savings, Decimal("3.64"))
        self.assertIsNone(result.breakdown.tagline_savings)

    def test_broker_discount_suppresses_tagline(self):
        broker = _business_cards(
            is_broker=True,
            broker_discounts=[BrokerDiscount(category_id="business-cards", discount_percentage=10)],
        )
        with_tagline = replace(broker, add_ons={"our_tagline": {"selected": True}})

        plain = calculate_price(broker)
        tagged = calculate_price(with_tagline)
        self.assertEqual(tagged.adjusted_base_price, plain.adjusted_base_price)
        self.assertTrue(tagged.broker_discount_applied)
        self.assertFalse(tagged.our_tagline_discount_applied)

    def test_broker_without_matching_category_gets_tagline(self):
        result = calculate_price(_business_cards(
            is_broker=True,
            broker_discounts=[BrokerDiscount(category_id="flyers", discount_percentage=15)],
            add_ons={"our_tagline": {"selected": True}},
        ))
        self.assertFalse(result.broker_discount_applied)
        self.assertEqual(result.broker_discount_percentage, Decimal("0"))
        self.assertTrue(result.our_tagline_discount_applied)
        self.assertEqual(result.adjusted_base_price, Decimal("34.58"))

    def test_broker_discounts_ignored_for_non_broker(self):
        result = calculate_price(_business_cards(
            is_broker=False,
            broker_discounts=[BrokerDiscount(category_id="business-cards", discount_percentage=10)],
        ))
        self.assertFalse(result.broker_discount_applied)
        self.assertEqual(result.adjusted_base_price, Decimal("36.40"))

    def test_exact_size_applies_to_discounted_price(self):
        result = calculate_price(_business_cards(add_ons={
            "our_tagline": {"selected": True},
            "exact_size": {"selected": True},
        }))
        self.assertEqual(
            result.price_after_base_percentage_modifiers,
            Decimal("34.58") * Decimal("1.125"),
        )

    def test_resolve_discount_variants(self):
        self.assertIsInstance(resolve_discount(self.config), NoDiscount)
        self.assertIsInstance(
            resolve_discount(replace(self.config, add_ons={"our_tagline": True})),
            TaglineDiscount,
        )
        decision = resolve_discount(replace(
            self.config,
            is_broker=True,
            broker_discounts=[BrokerDiscount(category_id="business-cards", discount_percentage=12)],
        ))
        self.assertEqual(decision, BrokerCategoryDiscount(category_id="business-cards", percentage=Decimal("12")))

    def test_apply_exact_size_not_selected(self):
        self.assertEqual(apply_exact_size(Decimal("10"), False), (Decimal("10"), None))

    def test_apply_turnaround(self):
        self.assertEqual(apply_turnaround(Decimal("40"), Decimal("50")), Decimal("60"))


# =============================================================================
# Orchestrator Tests
# =============================================================================


class CalculatePriceTests(SimpleTestCase):
    """End to end pricing and its invariants."""

    def setUp(self):
        self.add_ons = {
            "digital_proof": {"selected": True, "price": "5.00"},
            "perforation": {"selected": True, "setup_fee": "20.00", "price_per_piece": "0.01"},
        }
        self.config = _business_cards(quantity=1000, turnaround_time=RUSH, add_ons=self.add_ons)

    def test_addons_added_after_turnaround(self):
        result = calculate_price(self.config)
        self.assertEqual(result.total_addon_cost, Decimal("35.00"))
        self.assertEqual(
            [line.key for line in result.discrete_addon_costs],
            ["digital_proof", "perforation"],
        )
        self.assertEqual(
            result.calculated_product_subtotal_before_shipping_tax,
            result.price_after_turnaround + Decimal("35.00"),
        )
        self.assertEqual(result.breakdown.addons, Decimal("35.00"))
        self.assertEqual(result.breakdown.total, result.calculated_product_subtotal_before_shipping_tax)

    def test_addons_not_discounted(self):
        broker = replace(
            self.config,
            is_broker=True,
            broker_discounts=[BrokerDiscount(category_id="business-cards", discount_percentage=20)],
        )
        self.assertEqual(calculate_price(broker).total_addon_cost, Decimal("35.00"))

    def test_removing_addons_reduces_subtotal_by_addon_total(self):
        with_addons = calculate_price(self.config)
        without = calculate_price(replace(self.config, add_ons=None))
        self.assertEqual(without.price_after_turnaround, with_addons.price_after_turnaround)
        self.assertEqual(
            with_addons.calculated_product_subtotal_before_shipping_tax
            - without.calculated_product_subtotal_before_shipping_tax,
            with_addons.total_addon_cost,
        )
        self.assertEqual(without.discrete_addon_costs, ())
        self.assertEqual(without.total_addon_cost, Decimal("0"))

    def test_idempotent(self):
        self.assertEqual(calculate_price(self.config), calculate_price(self.config))

    def test_input_not_modified(self):
        before = replace(self.config)
        calculate_price(self.config)
        self.assertEqual(self.config, before)

    def test_base_printing_in_breakdown_is_adjusted_price(self):
        result = calculate_price(_business_cards(add_ons={"our_tagline": True}))
        self.assertEqual(result.breakdown.base_printing, result.adjusted_base_price)

    def test_accepts_addon_configuration_instance(self):
        add_ons = AddOnConfiguration(
            digital_proof=DigitalProof(selected=True, price=5),
            perforation=Perforation(selected=True, setup_fee=20, price_per_piece="0.01"),
        )
        result = calculate_price(replace(self.config, add_ons=add_ons))
        self.assertEqual(result.total_addon_cost, Decimal("35.00"))


# =============================================================================
# Validation Tests
# =============================================================================


class ValidationTests(SimpleTestCase):
    """Malformed configurations fail before any arithmetic."""

    def test_zero_quantity(self):
        with self.assertRaises(ConfigurationError):
            calculate_price(_business_cards(quantity=0))

    def test_negative_quantity(self):
        with self.assertRaises(ConfigurationError):
            calculate_price(_business_cards(quantity=-5))

    def test_fractional_quantity(self):
        with self.assertRaises(ConfigurationError):
            calculate_price(_business_cards(quantity=2.5))

    def test_bool_quantity(self):
        with self.assertRaises(ConfigurationError):
            calculate_price(_business_cards(quantity=True))

    def test_unknown_sides(self):
        with self.assertRaisesMessage(ConfigurationError, "Sides must be"):
            calculate_price(_business_cards(sides="triple"))

    def test_zero_area(self):
        size = PrintSize(id="bad", name="Bad", width=0, height=2)
        with self.assertRaises(ConfigurationError):
            calculate_price(_business_cards(print_size=size))

    def test_negative_dimension(self):
        size = PrintSize.custom(-3, 2)
        with self.assertRaises(ConfigurationError):
            calculate_price(_business_cards(print_size=size))

    def test_non_finite_dimension(self):
        for width in (float("nan"), float("inf"), "Infinity"):
            with self.subTest(width=width):
                with self.assertRaisesMessage(ConfigurationError, "must be a finite number"):
                    calculate_price(_business_cards(print_size=PrintSize.custom(width, 2)))

    def test_infinite_addon_fee(self):
        config = _business_cards(add_ons={"digital_proof": {"selected": True, "price": "Infinity"}})
        with self.assertRaises(ConfigurationError):
            calculate_price(config)

    def test_missing_addon_parameter_names_addon_and_field(self):
        config = _business_cards(add_ons={
            "hole_drilling": {"selected": True, "setup_fee": 20, "hole_type": "custom"},
        })
        with self.assertRaises(ConfigurationError) as ctx:
            calculate_price(config)
        self.assertEqual(ctx.exception.addon, "hole_drilling")
        self.assertEqual(ctx.exception.field, "number_of_holes")

    def test_non_numeric_rate(self):
        with self.assertRaises(ConfigurationError):
            PaperStock(id="x", name="X", price_per_sq_inch="cheap")

    def test_configuration_error_is_value_error(self):
        self.assertTrue(issubclass(ConfigurationError, PricingError))
        self.assertTrue(issubclass(ConfigurationError, ValueError))
