# pricing/tests_addons.py

from decimal import Decimal

from django.test import SimpleTestCase

from pricing.exceptions import ConfigurationError
from pricing.services.addon_rules import (
    addon_rule_violations,
    is_addon_visible,
    required_addons,
    validate_addon_rules,
)
from pricing.services.addons import (
    AddOnConfiguration,
    Banding,
    Design,
    DigitalProof,
    EddmProcess,
    Folding,
    HoleDrilling,
    Perforation,
    PostalDelivery,
    QrCode,
    ScoreOnly,
    ShrinkWrapping,
    resolve_addon_costs,
)
from pricing.types import (
    BrokerDiscount,
    PaperStock,
    PrintSize,
    ProductConfiguration,
    TurnaroundTime,
)


# =============================================================================
# Formula Tests
# =============================================================================


class AddOnFormulaTests(SimpleTestCase):
    """Each add-on's cost and invoice text."""

    def test_digital_proof_flat_fee(self):
        line = DigitalProof(selected=True, price="5.00").calculate(250)
        self.assertEqual(line.cost, Decimal("5.00"))
        self.assertEqual(line.name, "Digital Proof")
        self.assertEqual(line.calculation_details, "$5.00 flat fee")

    def test_perforation(self):
        line = Perforation(selected=True, setup_fee=20, price_per_piece="0.01").calculate(1000)
        self.assertEqual(line.cost, Decimal("30.00"))
        self.assertEqual(line.calculation_details, "$20.00 setup + $0.01 × 1000 pieces")

    def test_score_only(self):
        line = ScoreOnly(
            selected=True, setup_fee=17, price_per_score_per_piece="0.01", number_of_scores=2
        ).calculate(500)
        self.assertEqual(line.cost, Decimal("27.00"))
        self.assertEqual(line.calculation_details, "$17.00 setup + $0.01 × 2 scores × 500 pieces")

    def test_folding_text_paper(self):
        line = Folding(selected=True, paper_type="text_paper", fold_type="tri_fold").calculate(1000)
        self.assertEqual(line.cost, Decimal("10.17"))
        self.assertEqual(line.calculation_details, "$0.17 setup + $0.01 × 1000 pieces")

    def test_folding_card_stock_includes_score(self):
        line = Folding(selected=True, paper_type="card_stock").calculate(1000)
        self.assertEqual(line.cost, Decimal("20.34"))
        self.assertEqual(
            line.calculation_details,
            "$0.34 setup + $0.02 × 1000 pieces (includes mandatory basic score)",
        )

    def test_design_custom(self):
        line = Design(selected=True, service_type="standard_custom", sides="two").calculate(100)
        self.assertEqual(line.cost, Decimal("135.00"))
        self.assertEqual(line.calculation_details, "Standard Custom Design (two sides)")

        line = Design(selected=True, service_type="rush_custom", sides="one").calculate(100)
        self.assertEqual(line.cost, Decimal("160.00"))
        self.assertEqual(line.calculation_details, "Rush Custom Design (one side)")

    def test_design_changes(self):
        minor = Design(selected=True, service_type="minor_changes").calculate(100)
        major = Design(selected=True, service_type="major_changes").calculate(100)
        self.assertEqual(minor.cost, Decimal("22.50"))
        self.assertEqual(minor.calculation_details, "Design Changes - Minor")
        self.assertEqual(major.cost, Decimal("45.00"))

    def test_design_upload_artwork_is_free(self):
        self.assertIsNone(Design(selected=True, service_type="upload_artwork").calculate(100))

    def test_banding_rounds_bundles_up(self):
        line = Banding(selected=True, price_per_bundle="0.75", items_per_bundle=100).calculate(101)
        self.assertEqual(line.cost, Decimal("1.50"))
        self.assertEqual(line.calculation_details, "2 bundles × $0.75 (100 items/bundle)")

    def test_banding_exact_bundles(self):
        line = Banding(selected=True, price_per_bundle="0.75", items_per_bundle=100).calculate(100)
        self.assertEqual(line.cost, Decimal("0.75"))

    def test_shrink_wrapping(self):
        line = ShrinkWrapping(selected=True, price_per_bundle="0.30", items_per_bundle=100).calculate(250)
        self.assertEqual(line.cost, Decimal("0.90"))
        self.assertEqual(line.name, "Shrink Wrapping")

    def test_qr_code(self):
        line = QrCode(selected=True, price=5, content="https://example.com").calculate(500)
        self.assertEqual(line.cost, Decimal("5"))

    def test_postal_delivery(self):
        line = PostalDelivery(selected=True, price_per_box=30, number_of_boxes=3).calculate(5000)
        self.assertEqual(line.cost, Decimal("90"))
        self.assertEqual(line.calculation_details, "3 boxes × $30.00")

    def test_eddm_keeps_rate_precision(self):
        line = EddmProcess(selected=True, setup_fee=50, price_per_piece="0.239").calculate(1000)
        self.assertEqual(line.cost, Decimal("289"))
        self.assertEqual(
            line.calculation_details,
            "$50.00 setup + $0.239 × 1000 pieces (includes mandatory banding)",
        )

    def test_eddm_banding_flag_is_not_a_parameter(self):
        selection = EddmProcess.from_dict({
            "selected": True, "setup_fee": 50, "price_per_piece": "0.239", "mandatory_banding": False,
        })
        self.assertFalse(hasattr(selection, "mandatory_banding"))
        self.assertIn("mandatory banding", selection.calculate(1000).calculation_details)

    def test_custom_hole_drilling(self):
        line = HoleDrilling(
            selected=True, setup_fee=20, hole_type="custom", number_of_holes=3
        ).calculate(1000)
        self.assertEqual(line.cost, Decimal("80"))
        self.assertEqual(
            line.calculation_details,
            "$20.00 setup + $0.06 × 1000 pieces (3 custom holes)",
        )

    def test_binder_punch(self):
        line = HoleDrilling(
            selected=True, setup_fee=20, hole_type="binder_punch", binder_type="3-hole"
        ).calculate(500)
        self.assertEqual(line.cost, Decimal("25"))
        self.assertEqual(
            line.calculation_details,
            "$20.00 setup + $0.01 × 500 pieces (3-hole binder punch)",
        )


# =============================================================================
# Validation Tests
# =============================================================================


class AddOnValidationTests(SimpleTestCase):
    """Selected add-ons with missing or bad parameters are rejected."""

    def assertRejected(self, selection, field):
        with self.assertRaises(ConfigurationError) as ctx:
            selection.validate()
        self.assertEqual(ctx.exception.addon, selection.key)
        self.assertEqual(ctx.exception.field, field)

    def test_missing_price(self):
        self.assertRejected(DigitalProof(selected=True), "price")

    def test_negative_fee(self):
        self.assertRejected(Perforation(selected=True, setup_fee=-1, price_per_piece=0), "setup_fee")

    def test_missing_number_of_scores(self):
        self.assertRejected(ScoreOnly(selected=True, setup_fee=17, price_per_score_per_piece="0.01"), "number_of_scores")

    def test_unknown_folding_paper(self):
        self.assertRejected(Folding(selected=True, paper_type="vinyl"), "paper_type")

    def test_custom_design_requires_sides(self):
        self.assertRejected(Design(selected=True, service_type="standard_custom"), "sides")

    def test_unknown_design_service(self):
        self.assertRejected(Design(selected=True, service_type="logo"), "service_type")

    def test_zero_items_per_bundle(self):
        self.assertRejected(Banding(selected=True, price_per_bundle="0.75", items_per_bundle=0), "items_per_bundle")

    def test_bool_box_count(self):
        self.assertRejected(PostalDelivery(selected=True, price_per_box=30, number_of_boxes=True), "number_of_boxes")

    def test_custom_holes_required(self):
        self.assertRejected(HoleDrilling(selected=True, setup_fee=20, hole_type="custom"), "number_of_holes")

    def test_too_many_custom_holes(self):
        self.assertRejected(
            HoleDrilling(selected=True, setup_fee=20, hole_type="custom", number_of_holes=6),
            "number_of_holes",
        )

    def test_zero_custom_holes(self):
        self.assertRejected(
            HoleDrilling(selected=True, setup_fee=20, hole_type="custom", number_of_holes=0),
            "number_of_holes",
        )

    def test_binder_punch_ignores_number_of_holes(self):
        selection = HoleDrilling(
            selected=True, setup_fee=20, hole_type="binder_punch", number_of_holes=0
        )
        selection.validate()
        self.assertEqual(selection.calculate(500).cost, Decimal("25"))

    def test_unknown_hole_type(self):
        self.assertRejected(HoleDrilling(selected=True, setup_fee=20, hole_type="square"), "hole_type")

    def test_non_numeric_fee(self):
        with self.assertRaises(ConfigurationError):
            QrCode(selected=True, price="five")

    def test_non_finite_fee(self):
        for price in ("Infinity", "NaN", float("inf"), Decimal("-Infinity")):
            with self.subTest(price=price):
                with self.assertRaises(ConfigurationError):
                    DigitalProof(selected=True, price=price)

    def test_non_finite_fee_in_configuration(self):
        with self.assertRaises(ConfigurationError):
            AddOnConfiguration.from_dict({"digital_proof": {"selected": True, "price": "NaN"}})


# =============================================================================
# Configuration Tests
# =============================================================================


class AddOnConfigurationTests(SimpleTestCase):

    def test_unknown_keys_ignored(self):
        add_ons = AddOnConfiguration.from_dict({
            "glitter": {"selected": True, "price": 99},
            "digital_proof": {"selected": True, "price": 5, "color": "red"},
        })
        lines, total = resolve_addon_costs(add_ons, 100)
        self.assertEqual([line.key for line in lines], ["digital_proof"])
        self.assertEqual(total, Decimal("5"))

    def test_bool_shorthand(self):
        add_ons = AddOnConfiguration.from_dict({"our_tagline": True, "exact_size": False})
        self.assertTrue(add_ons.is_selected("our_tagline"))
        self.assertFalse(add_ons.is_selected("exact_size"))

    def test_unselected_addons_not_validated_or_priced(self):
        add_ons = AddOnConfiguration.from_dict({
            "digital_proof": {"selected": False},
            "hole_drilling": {"hole_type": "custom"},
        })
        self.assertEqual(resolve_addon_costs(add_ons, 100), ([], Decimal("0")))

    def test_modifier_addons_have_no_cost_line(self):
        add_ons = AddOnConfiguration.from_dict({"our_tagline": True, "exact_size": True})
        self.assertEqual(resolve_addon_costs(add_ons, 100), ([], Decimal("0")))

    def test_lines_follow_invoice_order(self):
        add_ons = AddOnConfiguration.from_dict({
            "qr_code": {"selected": True, "price": 5},
            "digital_proof": {"selected": True, "price": 5},
            "banding": {"selected": True, "price_per_bundle": "0.75", "items_per_bundle": 100},
        })
        lines, total = resolve_addon_costs(add_ons, 100)
        self.assertEqual([line.key for line in lines], ["digital_proof", "banding", "qr_code"])
        self.assertEqual(total, Decimal("10.75"))

    def test_one_bad_selection_fails_the_whole_set(self):
        add_ons = AddOnConfiguration.from_dict({
            "digital_proof": {"selected": True, "price": 5},
            "postal_delivery": {"selected": True, "price_per_box": 30},
        })
        with self.assertRaises(ConfigurationError) as ctx:
            resolve_addon_costs(add_ons, 100)
        self.assertEqual(ctx.exception.addon, "postal_delivery")

    def test_get_unknown_key(self):
        self.assertIsNone(AddOnConfiguration().get("glitter"))
        self.assertFalse(AddOnConfiguration().is_selected("glitter"))


# =============================================================================
# Add-on Rule Tests
# =============================================================================


def _config(width="3.5", height="2", add_ons=None, **kwargs):
    return ProductConfiguration(
        paper_stock=PaperStock(id="100lb", name="100lb Gloss Text", price_per_sq_inch="0.002"),
        print_size=PrintSize(id="s", name="Size", width=width, height=height),
        quantity=1000,
        sides="single",
        turnaround_time=TurnaroundTime(id="standard", name="Standard"),
        add_ons=add_ons,
        category_id="postcards",
        **kwargs,
    )


FOLDING = {"folding": {"selected": True, "paper_type": "text_paper"}}
EDDM = {"eddm_process": {"selected": True, "setup_fee": 50, "price_per_piece": "0.239"}}
BANDING = {"banding": {"selected": True, "price_per_bundle": "0.75", "items_per_bundle": 100}}


class AddOnRuleTests(SimpleTestCase):
    """Prerequisites, conflicts and visibility applied by the API layer."""

    def test_folding_needs_minimum_size(self):
        violations = addon_rule_violations(_config(add_ons=FOLDING))
        self.assertEqual(len(violations), 1)
        self.assertEqual(violations[0].addon, "folding")
        self.assertIn('at least 5" × 6"', violations[0].message)

    def test_folding_size_either_orientation(self):
        self.assertEqual(addon_rule_violations(_config("6", "9", add_ons=FOLDING)), [])
        self.assertEqual(addon_rule_violations(_config("9", "5", add_ons=FOLDING)), [])
        self.assertEqual(len(addon_rule_violations(_config("4", "11", add_ons=FOLDING))), 1)

    def test_eddm_requires_banding(self):
        violations = addon_rule_violations(_config("6", "9", add_ons=EDDM))
        self.assertEqual(len(violations), 1)
        self.assertEqual(violations[0].message, "EDDM Process & Postage requires Banding")
        self.assertEqual(addon_rule_violations(_config("6", "9", add_ons={**EDDM, **BANDING})), [])

    def test_score_only_conflicts_with_folding(self):
        add_ons = {
            **FOLDING,
            "score_only": {"selected": True, "setup_fee": 17, "price_per_score_per_piece": "0.01", "number_of_scores": 1},
        }
        violations = addon_rule_violations(_config("6", "9", add_ons=add_ons))
        self.assertEqual([v.addon for v in violations], ["score_only"])

    def test_validate_addon_rules_raises_first_violation(self):
        with self.assertRaises(ConfigurationError) as ctx:
            validate_addon_rules(_config(add_ons=FOLDING))
        self.assertEqual(ctx.exception.addon, "folding")

    def test_required_addons(self):
        self.assertEqual(required_addons("eddm_process"), ("banding",))
        self.assertEqual(required_addons("qr_code"), ())

    def test_tagline_hidden_for_broker_with_category_discount(self):
        broker = _config(
            is_broker=True,
            broker_discounts=[BrokerDiscount(category_id="postcards", discount_percentage=10)],
        )
        other = _config(
            is_broker=True,
            broker_discounts=[BrokerDiscount(category_id="flyers", discount_percentage=10)],
        )
        self.assertFalse(is_addon_visible("our_tagline", broker))
        self.assertTrue(is_addon_visible("our_tagline", other))
        self.assertTrue(is_addon_visible("our_tagline", _config()))

    def test_eddm_addons_hidden_for_ineligible_products(self):
        config = _config()
        self.assertFalse(is_addon_visible("eddm_process", config, is_eddm_eligible=False))
        self.assertFalse(is_addon_visible("postal_delivery", config, is_eddm_eligible=False))
        self.assertTrue(is_addon_visible("eddm_process", config))
        self.assertTrue(is_addon_visible("banding", config, is_eddm_eligible=False))
