# brokers/tests.py

from decimal import Decimal

from django.test import SimpleTestCase

from brokers.services.calculator import BROKER_TIERS, PricingCalculator, get_tier
from brokers.services.discounts import (
    calculate_discount_summary,
    calculate_yearly_projection,
    get_broker_tier_recommendation,
    get_discount_display_name,
    get_next_tier,
)
from brokers.services.preview import build_price_matrix, calculate_broker_potential, simulate_tier
from brokers.types import BrokerProfile, CategoryDiscount, PricingContext, VolumeTier
from pricing.exceptions import ConfigurationError


def _silver_broker(**kwargs):
    """Silver broker with 10% off business cards from 100 units."""
    defaults = {
        "broker_tier": get_tier("silver"),
        "category_discounts": [
            CategoryDiscount(
                category_id="business-cards",
                category_name="Business Cards",
                discount_percentage=10,
                minimum_quantity=100,
            ),
        ],
    }
    defaults.update(kwargs)
    return BrokerProfile(**defaults)


def _context(base_price="0.10", quantity=100, profile=None, **kwargs):
    return PricingContext(
        base_price=Decimal(base_price),
        quantity=quantity,
        category_id="business-cards",
        is_broker=profile is not None,
        broker_profile=profile,
        **kwargs,
    )


# =============================================================================
# Calculator Tests
# =============================================================================


class PricingCalculatorTests(SimpleTestCase):
    """Unit tests for the broker/volume calculator."""

    def setUp(self):
        self.calculator = PricingCalculator()

    def test_retail_below_first_bracket(self):
        result = self.calculator.calculate_price(_context("2", 10))
        self.assertEqual(result.total_base_price, Decimal("20"))
        self.assertEqual(result.volume_discount, Decimal("0"))
        self.assertEqual(result.final_price, Decimal("20"))
        self.assertEqual(result.discount_breakdown, ())

    def test_retail_volume_discount(self):
        result = self.calculator.calculate_price(_context("0.10", 100))
        self.assertEqual(result.volume_discount, Decimal("0.80"))
        self.assertEqual(result.final_price, Decimal("9.20"))
        self.assertEqual(result.savings, result.total_discount)
        self.assertEqual(
            result.discount_breakdown[0].description,
            "Volume discount for 100 units (8% off)",
        )

    def test_broker_discounts_stack(self):
        result = self.calculator.calculate_price(_context("0.10", 100, _silver_broker()))
        self.assertEqual(result.total_base_price, Decimal("10.00"))
        self.assertEqual(result.volume_discount, Decimal("0.80"))
        self.assertEqual(result.tier_discount, Decimal("1.00"))
        self.assertEqual(result.category_discount, Decimal("1.00"))
        # (tier + category) × (1.1 - 1)
        self.assertEqual(result.broker_discount, Decimal("0.20"))
        self.assertEqual(result.total_discount, Decimal("3.00"))
        self.assertEqual(result.final_price, Decimal("7.00"))
        self.assertEqual(
            [line.type for line in result.discount_breakdown],
            ["volume", "tier", "category", "broker_volume"],
        )
        self.assertEqual(result.discount_breakdown[1].description, "Silver Tier Discount")
        self.assertEqual(result.discount_breakdown[2].description, "Business Cards Category Discount")
        self.assertEqual(result.discount_breakdown[3].description, "Volume Multiplier Bonus (1.1x)")

    def test_category_discount_needs_minimum_quantity(self):
        result = self.calculator.calculate_price(_context("0.10", 50, _silver_broker()))
        self.assertEqual(result.category_discount, Decimal("0"))
        self.assertNotIn("category", [line.type for line in result.discount_breakdown])

    def test_category_discount_only_for_matching_category(self):
        context = PricingContext(
            base_price=Decimal("0.10"),
            quantity=500,
            category_id="flyers",
            is_broker=True,
            broker_profile=_silver_broker(),
        )
        self.assertEqual(self.calculator.calculate_price(context).category_discount, Decimal("0"))

    def test_profile_ignored_when_not_broker(self):
        context = PricingContext(
            base_price=Decimal("0.10"),
            quantity=100,
            category_id="business-cards",
            is_broker=False,
            broker_profile=_silver_broker(),
        )
        result = self.calculator.calculate_price(context)
        self.assertEqual(result.tier_discount, Decimal("0"))
        self.assertEqual(result.final_price, Decimal("9.20"))

    def test_annual_volume_bonus(self):
        profile = _silver_broker(
            annual_volume_committed=Decimal("100000"),
            current_year_volume=Decimal("80000"),
        )
        result = self.calculator.calculate_price(_context("1", 10, profile))
        annual = [line for line in result.discount_breakdown if line.type == "annual_volume"]
        self.assertEqual(len(annual), 1)
        self.assertEqual(annual[0].amount, Decimal("0.20"))
        self.assertEqual(annual[0].description, "Annual Volume Bonus (2%)")

    def test_annual_volume_bonus_steps(self):
        def bonus(current):
            profile = _silver_broker(annual_volume_committed=100, current_year_volume=current)
            return self.calculator.get_annual_volume_bonus(profile)

        self.assertEqual(bonus(49), Decimal("0"))
        self.assertEqual(bonus(50), Decimal("1"))
        self.assertEqual(bonus(75), Decimal("2"))
        self.assertEqual(bonus(120), Decimal("3"))

    def test_annual_volume_bonus_without_commitment(self):
        profile = _silver_broker(current_year_volume=50000)
        self.assertEqual(self.calculator.get_annual_volume_bonus(profile), Decimal("0"))

    def test_volume_multiplier(self):
        tier = VolumeTier(tier_name="Preferred", discount_multiplier=Decimal("1.2"))
        self.assertEqual(self.calculator.get_broker_volume_multiplier(99, tier), Decimal("1.2"))
        self.assertEqual(self.calculator.get_broker_volume_multiplier(1000, tier), Decimal("1.56"))
        self.assertEqual(self.calculator.get_broker_volume_multiplier(5000, VolumeTier()), Decimal("1.5"))

    def test_rush_surcharge_retail(self):
        result = self.calculator.calculate_price(_context("1", 10, rush_order=True))
        self.assertEqual(result.rush_surcharge, Decimal("1.50"))
        self.assertEqual(result.final_price, Decimal("11.50"))
        self.assertEqual(result.discount_breakdown[-1].description, "Rush Order Surcharge (15%)")

    def test_rush_surcharge_reduced_for_broker_tier(self):
        result = self.calculator.calculate_price(_context("1", 10, _silver_broker(), rush_order=True))
        self.assertEqual(result.rush_surcharge, Decimal("1.00"))
        self.assertEqual(result.discount_breakdown[-1].description, "Rush Order Surcharge (10%)")

    def test_platinum_rush_has_no_surcharge(self):
        profile = _silver_broker(broker_tier=get_tier("platinum"))
        context = _context("1", 10, profile, rush_order=True)
        line = self.calculator.calculate_rush_surcharge(context, Decimal("10"))
        self.assertEqual(line.description, "Rush Order - No Surcharge (Broker Benefit)")

        result = self.calculator.calculate_price(context)
        self.assertEqual(result.rush_surcharge, Decimal("0"))
        self.assertNotIn("rush_surcharge", [line.type for line in result.discount_breakdown])

    def test_volume_breakpoints(self):
        self.assertIsNone(self.calculator.calculate_volume_discount(24, Decimal("100")))
        self.assertEqual(self.calculator.get_volume_breakpoint(25).discount_percentage, Decimal("2"))
        self.assertEqual(self.calculator.get_volume_breakpoint(4999).discount_percentage, Decimal("22"))
        last = self.calculator.get_volume_breakpoint(100000)
        self.assertEqual(last.discount_percentage, Decimal("25"))
        self.assertIsNone(last.max_quantity)
        self.assertEqual(len(self.calculator.get_volume_breakpoints()), 9)

    def test_invalid_quantity(self):
        with self.assertRaises(ConfigurationError):
            self.calculator.calculate_price(_context("1", 0))

    def test_negative_base_price(self):
        with self.assertRaises(ConfigurationError):
            self.calculator.calculate_price(_context("-1", 10))

    def test_non_finite_base_price(self):
        for base_price in ("NaN", "Infinity"):
            with self.subTest(base_price=base_price):
                with self.assertRaisesMessage(ConfigurationError, "must be a finite number"):
                    self.calculator.calculate_price(_context(base_price, 10))
        with self.assertRaises(ConfigurationError):
            PricingContext(base_price="NaN", quantity=10)

    def test_estimate_tier_by_volume(self):
        self.assertEqual(self.calculator.estimate_tier_by_volume(5000).name, "bronze")
        self.assertEqual(self.calculator.estimate_tier_by_volume(60000).name, "silver")
        self.assertEqual(self.calculator.estimate_tier_by_volume(600000).name, "platinum")

    def test_potential_savings(self):
        savings = self.calculator.calculate_potential_savings(
            Decimal("1"),
            100,
            get_tier("gold"),
            [
                CategoryDiscount(category_id="a", discount_percentage=10),
                CategoryDiscount(category_id="b", discount_percentage=20),
            ],
        )
        # 15% tier + 8% volume + 15% average category on $100
        self.assertEqual(savings, Decimal("38"))

    def test_tiers(self):
        self.assertEqual([tier.name for tier in BROKER_TIERS], ["bronze", "silver", "gold", "platinum"])
        self.assertIsNone(get_tier("diamond"))


# =============================================================================
# Discount Summary Tests
# =============================================================================


class DiscountSummaryTests(SimpleTestCase):

    def setUp(self):
        self.calculator = PricingCalculator()
        self.profile = _silver_broker()
        self.calculation = self.calculator.calculate_price(_context("0.10", 100, self.profile))

    def test_summary(self):
        summary = calculate_discount_summary(self.calculation, self.profile)
        self.assertEqual(summary.total_savings, Decimal("3.00"))
        self.assertEqual(summary.total_discount_percentage, Decimal("30"))
        self.assertEqual(
            [line.name for line in summary.breakdown],
            ["Volume Discount", "Broker Tier Discount", "Category Discount", "Broker Volume Bonus"],
        )

    def test_next_tier_savings(self):
        summary = calculate_discount_summary(self.calculation, self.profile)
        self.assertEqual(summary.next_tier_savings.tier_name, "Gold")
        self.assertEqual(summary.next_tier_savings.additional_savings, Decimal("0.50"))
        self.assertEqual(summary.next_tier_savings.volume_needed, Decimal("150000"))

    def test_summary_without_profile(self):
        summary = calculate_discount_summary(self.calculator.calculate_price(_context("0.10", 100)))
        self.assertIsNone(summary.next_tier_savings)

    def test_rush_surcharge_excluded_from_pre_discount_price(self):
        calculation = self.calculator.calculate_price(_context("1", 100, rush_order=True))
        summary = calculate_discount_summary(calculation)
        self.assertEqual(summary.total_discount_percentage, Decimal("8"))

    def test_next_tier(self):
        self.assertEqual(get_next_tier(get_tier("bronze")).name, "silver")
        self.assertIsNone(get_next_tier(get_tier("platinum")))

    def test_display_names(self):
        self.assertEqual(get_discount_display_name("annual_volume"), "Annual Volume Bonus")
        self.assertEqual(get_discount_display_name("mystery"), "mystery")

    def test_tier_recommendation(self):
        recommendation = get_broker_tier_recommendation(Decimal("20000"), Decimal("200000"))
        self.assertEqual(recommendation.current_tier.name, "bronze")
        self.assertEqual(recommendation.recommended_tier.name, "gold")
        self.assertEqual(recommendation.volume_gap, Decimal("130000"))
        self.assertEqual(recommendation.potential_savings, Decimal("20000"))

    def test_no_recommendation_for_same_tier(self):
        self.assertIsNone(get_broker_tier_recommendation(Decimal("60000"), Decimal("90000")))
        self.assertIsNone(get_broker_tier_recommendation(Decimal("5000"), Decimal("200000")))

    def test_yearly_projection(self):
        projection = calculate_yearly_projection(100, Decimal("10"), Decimal("9"))
        self.assertEqual(projection.annual_volume, 1200)
        self.assertEqual(projection.current_annual_cost, Decimal("12000"))
        self.assertEqual(projection.annual_savings, Decimal("1200"))


# =============================================================================
# Preview Tests
# =============================================================================


class PricePreviewTests(SimpleTestCase):

    def setUp(self):
        self.calculator = PricingCalculator()

    def test_matrix(self):
        rows = build_price_matrix(
            self.calculator, Decimal("0.10"), [1, 100], category_id="business-cards"
        )
        self.assertEqual([row.quantity for row in rows], [1, 100])
        self.assertEqual(rows[0].unit_final_price, Decimal("0.10"))
        self.assertEqual(rows[1].calculation.final_price, Decimal("9.20"))
        self.assertEqual(rows[1].unit_final_price, Decimal("0.092"))
        self.assertEqual(rows[1].savings_per_unit, Decimal("0.008"))
        self.assertIsNone(rows[1].summary.next_tier_savings)

    def test_matrix_for_broker(self):
        rows = build_price_matrix(
            self.calculator,
            Decimal("0.10"),
            [100],
            category_id="business-cards",
            broker_profile=_silver_broker(),
        )
        self.assertEqual(rows[0].calculation.final_price, Decimal("7.00"))
        self.assertEqual(rows[0].summary.next_tier_savings.tier_name, "Gold")

    def test_broker_potential(self):
        potential = calculate_broker_potential(
            self.calculator, Decimal("0.10"), get_tier("silver"), category_id="business-cards"
        )
        self.assertEqual(potential.tier, "Silver")
        self.assertEqual(potential.sample_quantity, 100)
        self.assertEqual(potential.standard_price, Decimal("9.20"))
        # volume 0.80 + tier 1.00 + sample category 0.80 + multiplier bonus 0.18
        self.assertEqual(potential.broker_price, Decimal("7.22"))
        self.assertEqual(potential.potential_savings, Decimal("1.98"))

    def test_broker_potential_free_product(self):
        potential = calculate_broker_potential(self.calculator, Decimal("0"), get_tier("gold"))
        self.assertEqual(potential.savings_percentage, Decimal("0"))

    def test_simulate_tier(self):
        profile = _silver_broker()
        self.assertEqual(simulate_tier(profile, get_tier("gold")).broker_tier.name, "gold")
        self.assertEqual(simulate_tier(profile, get_tier("gold")).category_discounts, profile.category_discounts)
        self.assertIs(simulate_tier(profile, None), profile)
