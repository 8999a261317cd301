"""
Add-on prerequisites and visibility.

The pricing engine prices whatever it is given; these rules belong to the
caller (checkout, API) and are applied before `calculate_price` when
settings.PRICING_ENFORCE_ADDON_RULES is on.

- Folding needs a finished size of at least 5" × 6".
- EDDM needs Banding (auto-selected and costed alongside it).
- Score Only conflicts with Folding (card stock folding already scores).
- Our Tagline is hidden from brokers holding a discount for the category.
- EDDM and Postal Delivery are only offered on EDDM-eligible products.
"""

from dataclasses import dataclass
from decimal import Decimal

from ..exceptions import ConfigurationError
from ..types import ProductConfiguration
from .modifiers import find_broker_discount


FOLDING_MIN_SHORT_SIDE = Decimal("5")
FOLDING_MIN_LONG_SIDE = Decimal("6")

# trigger -> add-ons auto-selected with it
DEPENDENCIES = {
    "eddm_process": ("banding",),
}

CONFLICTS = {
    "score_only": (
        ("folding",),
        "Score Only service conflicts with Folding (card stock folding includes basic scoring)",
    ),
}

EDDM_ONLY_ADDONS = ("eddm_process", "postal_delivery")


@dataclass(frozen=True)
class AddOnRuleViolation:
    addon: str
    message: str


def required_addons(key: str) -> tuple:
    """Add-ons that must be selected together with `key`."""
    return DEPENDENCIES.get(key, ())


def is_addon_visible(
    key: str,
    config: ProductConfiguration,
    is_eddm_eligible: bool = True,
) -> bool:
    if key == "our_tagline":
        return not (
            config.is_broker
            and find_broker_discount(config.broker_discounts, config.category_id) is not None
        )
    if key in EDDM_ONLY_ADDONS:
        return is_eddm_eligible
    return True


def _folding_fits(config: ProductConfiguration) -> bool:
    width, height = config.print_size.width, config.print_size.height
    return min(width, height) >= FOLDING_MIN_SHORT_SIDE and max(width, height) >= FOLDING_MIN_LONG_SIDE


def addon_rule_violations(config: ProductConfiguration) -> list[AddOnRuleViolation]:
    """Every prerequisite or conflict broken by the selected add-ons."""
    add_ons = config.add_ons
    violations = []

    if add_ons.is_selected("folding") and not _folding_fits(config):
        violations.append(AddOnRuleViolation(
            addon="folding",
            message=(
                f"Folding requires a print size of at least "
                f"{FOLDING_MIN_SHORT_SIDE}\" × {FOLDING_MIN_LONG_SIDE}\", "
                f"got {config.print_size.width}\" × {config.print_size.height}\""
            ),
        ))

    for trigger, required in DEPENDENCIES.items():
        if not add_ons.is_selected(trigger):
            continue
        for key in required:
            if not add_ons.is_selected(key):
                violations.append(AddOnRuleViolation(
                    addon=trigger,
                    message=f"{add_ons.get(trigger).display_name} requires {key.replace('_', ' ').title()}",
                ))

    for key, (conflicting, message) in CONFLICTS.items():
        if add_ons.is_selected(key) and any(add_ons.is_selected(o) for o in conflicting):
            violations.append(AddOnRuleViolation(addon=key, message=message))

    return violations


def validate_addon_rules(config: ProductConfiguration) -> None:
    """Raise ConfigurationError for the first broken add-on rule."""
    violations = addon_rule_violations(config)
    if violations:
        first = violations[0]
        raise ConfigurationError(first.message, addon=first.addon)
