"""
Add-on cost resolver.

One variant per add-on key. Every variant carries only the parameters its
formula needs; `selected=False` (or an absent key) is a no-op. Discrete
add-ons are charged at full retail after turnaround and never see the
broker/tagline discount or the exact-size markup.

Our Tagline and Exact Size are selections too, but they are percentage
modifiers handled in `modifiers.py`, so they carry no cost here.
"""

import math
from dataclasses import dataclass, fields
from decimal import Decimal
from typing import ClassVar, Mapping

from common.formatting import format_currency, format_rate

from ..exceptions import ConfigurationError
from ..utils import to_decimal


# Folding: (setup fee, price per piece) by paper type
FOLDING_RATES = {
    "text_paper": (Decimal("0.17"), Decimal("0.01")),
    "card_stock": (Decimal("0.34"), Decimal("0.02")),
}

# Design: fixed price by service type; custom design priced per sides
DESIGN_CUSTOM_PRICES = {
    "standard_custom": {"one": Decimal("90.00"), "two": Decimal("135.00")},
    "rush_custom": {"one": Decimal("160.00"), "two": Decimal("240.00")},
}
DESIGN_CHANGE_PRICES = {
    "minor_changes": Decimal("22.50"),
    "major_changes": Decimal("45.00"),
}
DESIGN_SERVICE_TYPES = (
    "upload_artwork",
    *DESIGN_CUSTOM_PRICES,
    *DESIGN_CHANGE_PRICES,
)

# Hole drilling per-piece rates
CUSTOM_HOLE_PRICE_PER_HOLE = Decimal("0.02")
BINDER_PUNCH_PRICE_PER_PIECE = Decimal("0.01")
MAX_CUSTOM_HOLES = 5


@dataclass(frozen=True)
class AddOnCost:
    """A single priced add-on line, as shown on invoices."""

    key: str
    name: str
    cost: Decimal
    calculation_details: str


@dataclass(frozen=True)
class AddOnSelection:
    """Base for all add-on variants."""

    key: ClassVar[str] = ""
    display_name: ClassVar[str] = ""
    # Parameters that must be present when selected
    required_fields: ClassVar[tuple] = ()
    # Decimal parameters, coerced on construction and rejected when negative
    money_fields: ClassVar[tuple] = ()
    # Integer parameters that must be >= 1 when present
    count_fields: ClassVar[tuple] = ()

    selected: bool = False

    def __post_init__(self):
        for name in self.money_fields:
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, to_decimal(value, f"{self.key}.{name}"))

    @classmethod
    def from_dict(cls, data: Mapping) -> "AddOnSelection":
        """Build from a JSON-like mapping, dropping parameters the variant does not use."""
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})

    def _error(self, message: str, field: str | None = None) -> ConfigurationError:
        return ConfigurationError(
            f"{self.display_name}: {message}", addon=self.key, field=field
        )

    def _require(self, name: str):
        value = getattr(self, name)
        if value is None or value == "":
            raise self._error(f"'{name}' is required when selected", field=name)
        return value

    def validate(self) -> None:
        """Raise ConfigurationError if this selection cannot be priced."""
        for name in self.required_fields:
            self._require(name)
        for name in self.money_fields:
            value = getattr(self, name)
            if value is not None and value < 0:
                raise self._error(f"'{name}' cannot be negative", field=name)
        for name in self.count_fields:
            if getattr(self, name) is not None:
                self._check_count(name)

    def _check_count(self, name: str) -> int:
        value = getattr(self, name)
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise self._error(f"'{name}' must be a whole number of at least 1", field=name)
        return value

    def calculate(self, quantity: int) -> AddOnCost | None:
        """Return the priced line, or None when the selection carries no cost."""
        return None

    def _line(self, cost: Decimal, details: str) -> AddOnCost:
        return AddOnCost(
            key=self.key,
            name=self.display_name,
            cost=cost,
            calculation_details=details,
        )


# =============================================================================
# Percentage modifiers (priced in modifiers.py)
# =============================================================================


@dataclass(frozen=True)
class OurTagline(AddOnSelection):
    key: ClassVar[str] = "our_tagline"
    display_name: ClassVar[str] = "Our Tagline"


@dataclass(frozen=True)
class ExactSize(AddOnSelection):
    key: ClassVar[str] = "exact_size"
    display_name: ClassVar[str] = "Exact Size"


# =============================================================================
# Discrete add-on services
# =============================================================================


@dataclass(frozen=True)
class DigitalProof(AddOnSelection):
    key: ClassVar[str] = "digital_proof"
    display_name: ClassVar[str] = "Digital Proof"
    required_fields: ClassVar[tuple] = ("price",)
    money_fields: ClassVar[tuple] = ("price",)

    price: Decimal | None = None

    def calculate(self, quantity):
        return self._line(self.price, f"{format_currency(self.price)} flat fee")


@dataclass(frozen=True)
class Perforation(AddOnSelection):
    key: ClassVar[str] = "perforation"
    display_name: ClassVar[str] = "Perforation"
    required_fields: ClassVar[tuple] = ("setup_fee", "price_per_piece")
    money_fields: ClassVar[tuple] = ("setup_fee", "price_per_piece")

    setup_fee: Decimal | None = None
    price_per_piece: Decimal | None = None
    orientation: str | None = None
    position: str | None = None

    def calculate(self, quantity):
        cost = self.setup_fee + self.price_per_piece * quantity
        details = (
            f"{format_rate(self.setup_fee)} setup + "
            f"{format_rate(self.price_per_piece)} × {quantity} pieces"
        )
        return self._line(cost, details)


@dataclass(frozen=True)
class ScoreOnly(AddOnSelection):
    key: ClassVar[str] = "score_only"
    display_name: ClassVar[str] = "Score Only"
    required_fields: ClassVar[tuple] = ("setup_fee", "price_per_score_per_piece", "number_of_scores")
    money_fields: ClassVar[tuple] = ("setup_fee", "price_per_score_per_piece")
    count_fields: ClassVar[tuple] = ("number_of_scores",)

    setup_fee: Decimal | None = None
    price_per_score_per_piece: Decimal | None = None
    number_of_scores: int | None = None
    positions: str | None = None

    def calculate(self, quantity):
        cost = self.setup_fee + self.price_per_score_per_piece * self.number_of_scores * quantity
        details = (
            f"{format_rate(self.setup_fee)} setup + "
            f"{format_rate(self.price_per_score_per_piece)} × {self.number_of_scores} scores"
            f" × {quantity} pieces"
        )
        return self._line(cost, details)


@dataclass(frozen=True)
class Folding(AddOnSelection):
    """Text paper $0.17 + $0.01/piece; card stock $0.34 + $0.02/piece with a basic score."""

    key: ClassVar[str] = "folding"
    display_name: ClassVar[str] = "Folding"
    required_fields: ClassVar[tuple] = ("paper_type",)

    fold_type: str | None = None
    paper_type: str | None = None

    def validate(self):
        super().validate()
        if self.paper_type not in FOLDING_RATES:
            choices = ", ".join(FOLDING_RATES)
            raise self._error(
                f"unsupported paper_type '{self.paper_type}' (expected one of: {choices})",
                field="paper_type",
            )

    def calculate(self, quantity):
        setup_fee, price_per_piece = FOLDING_RATES[self.paper_type]
        cost = setup_fee + price_per_piece * quantity
        note = " (includes mandatory basic score)" if self.paper_type == "card_stock" else ""
        details = (
            f"{format_rate(setup_fee)} setup + {format_rate(price_per_piece)}"
            f" × {quantity} pieces{note}"
        )
        return self._line(cost, details)


@dataclass(frozen=True)
class Design(AddOnSelection):
    key: ClassVar[str] = "design"
    display_name: ClassVar[str] = "Design"
    required_fields: ClassVar[tuple] = ("service_type",)

    service_type: str | None = None
    sides: str | None = None

    def validate(self):
        super().validate()
        if self.service_type not in DESIGN_SERVICE_TYPES:
            choices = ", ".join(DESIGN_SERVICE_TYPES)
            raise self._error(
                f"unsupported service_type '{self.service_type}' (expected one of: {choices})",
                field="service_type",
            )
        if self.service_type in DESIGN_CUSTOM_PRICES:
            self._require("sides")
            if self.sides not in ("one", "two"):
                raise self._error(
                    f"unsupported sides '{self.sides}' (expected 'one' or 'two')",
                    field="sides",
                )

    def calculate(self, quantity):
        if self.service_type == "upload_artwork":
            return None

        if self.service_type in DESIGN_CHANGE_PRICES:
            label = "Minor" if self.service_type == "minor_changes" else "Major"
            return self._line(
                DESIGN_CHANGE_PRICES[self.service_type], f"Design Changes - {label}"
            )

        cost = DESIGN_CUSTOM_PRICES[self.service_type][self.sides]
        label = "Standard" if self.service_type == "standard_custom" else "Rush"
        plural = "s" if self.sides == "two" else ""
        return self._line(cost, f"{label} Custom Design ({self.sides} side{plural})")


@dataclass(frozen=True)
class BundledAddOn(AddOnSelection):
    """Charged per started bundle: ceil(quantity / items_per_bundle) × price_per_bundle."""

    required_fields: ClassVar[tuple] = ("price_per_bundle", "items_per_bundle")
    money_fields: ClassVar[tuple] = ("price_per_bundle",)
    count_fields: ClassVar[tuple] = ("items_per_bundle",)

    price_per_bundle: Decimal | None = None
    items_per_bundle: int | None = None

    def calculate(self, quantity):
        bundles = math.ceil(quantity / self.items_per_bundle)
        cost = bundles * self.price_per_bundle
        details = (
            f"{bundles} bundles × {format_rate(self.price_per_bundle)}"
            f" ({self.items_per_bundle} items/bundle)"
        )
        return self._line(cost, details)


@dataclass(frozen=True)
class Banding(BundledAddOn):
    key: ClassVar[str] = "banding"
    display_name: ClassVar[str] = "Banding"

    band_type: str | None = None


@dataclass(frozen=True)
class ShrinkWrapping(BundledAddOn):
    key: ClassVar[str] = "shrink_wrapping"
    display_name: ClassVar[str] = "Shrink Wrapping"


@dataclass(frozen=True)
class QrCode(AddOnSelection):
    key: ClassVar[str] = "qr_code"
    display_name: ClassVar[str] = "QR Code"
    required_fields: ClassVar[tuple] = ("price",)
    money_fields: ClassVar[tuple] = ("price",)

    price: Decimal | None = None
    content: str | None = None

    def calculate(self, quantity):
        return self._line(self.price, f"{format_currency(self.price)} flat fee")


@dataclass(frozen=True)
class PostalDelivery(AddOnSelection):
    key: ClassVar[str] = "postal_delivery"
    display_name: ClassVar[str] = "Postal Delivery (DDU)"
    required_fields: ClassVar[tuple] = ("price_per_box", "number_of_boxes")
    money_fields: ClassVar[tuple] = ("price_per_box",)
    count_fields: ClassVar[tuple] = ("number_of_boxes",)

    price_per_box: Decimal | None = None
    number_of_boxes: int | None = None

    def calculate(self, quantity):
        cost = self.number_of_boxes * self.price_per_box
        return self._line(
            cost, f"{self.number_of_boxes} boxes × {format_rate(self.price_per_box)}"
        )


@dataclass(frozen=True)
class EddmProcess(AddOnSelection):
    """
    EDDM process & postage.

    Banding is mandatory with EDDM but is priced by the Banding add-on,
    not here; the trace only notes it.
    """

    key: ClassVar[str] = "eddm_process"
    display_name: ClassVar[str] = "EDDM Process & Postage"
    required_fields: ClassVar[tuple] = ("setup_fee", "price_per_piece")
    money_fields: ClassVar[tuple] = ("setup_fee", "price_per_piece")

    setup_fee: Decimal | None = None
    price_per_piece: Decimal | None = None
    route_selection: str | None = None

    def calculate(self, quantity):
        cost = self.setup_fee + self.price_per_piece * quantity
        details = (
            f"{format_rate(self.setup_fee)} setup + {format_rate(self.price_per_piece)}"
            f" × {quantity} pieces (includes mandatory banding)"
        )
        return self._line(cost, details)


@dataclass(frozen=True)
class HoleDrilling(AddOnSelection):
    key: ClassVar[str] = "hole_drilling"
    display_name: ClassVar[str] = "Hole Drilling"
    required_fields: ClassVar[tuple] = ("setup_fee", "hole_type")
    money_fields: ClassVar[tuple] = ("setup_fee",)

    setup_fee: Decimal | None = None
    hole_type: str | None = None
    number_of_holes: int | None = None
    binder_type: str | None = None
    hole_size: str | None = None
    position: str | None = None

    def validate(self):
        super().validate()
        if self.hole_type == "custom":
            # number_of_holes only applies to custom drilling
            self._require("number_of_holes")
            holes = self._check_count("number_of_holes")
            if holes > MAX_CUSTOM_HOLES:
                raise self._error(
                    f"custom drilling supports 1-{MAX_CUSTOM_HOLES} holes, got {holes}",
                    field="number_of_holes",
                )
        elif self.hole_type != "binder_punch":
            raise self._error(
                f"unsupported hole_type '{self.hole_type}' (expected 'custom' or 'binder_punch')",
                field="hole_type",
            )

    def calculate(self, quantity):
        if self.hole_type == "custom":
            per_piece_cost = self.number_of_holes * CUSTOM_HOLE_PRICE_PER_HOLE
            description = f"{self.number_of_holes} custom holes"
        else:
            per_piece_cost = BINDER_PUNCH_PRICE_PER_PIECE
            description = f"{self.binder_type} binder punch" if self.binder_type else "binder punch"

        cost = self.setup_fee + per_piece_cost * quantity
        details = (
            f"{format_rate(self.setup_fee)} setup + {format_rate(per_piece_cost)}"
            f" × {quantity} pieces ({description})"
        )
        return self._line(cost, details)


# Order here is the order lines appear on the invoice
ADDON_TYPES = {
    variant.key: variant
    for variant in (
        OurTagline,
        ExactSize,
        DigitalProof,
        Perforation,
        ScoreOnly,
        Folding,
        Design,
        Banding,
        ShrinkWrapping,
        QrCode,
        PostalDelivery,
        EddmProcess,
        HoleDrilling,
    )
}

PERCENTAGE_ADDON_KEYS = (OurTagline.key, ExactSize.key)
DISCRETE_ADDON_KEYS = tuple(k for k in ADDON_TYPES if k not in PERCENTAGE_ADDON_KEYS)


@dataclass(frozen=True)
class AddOnConfiguration:
    """The add-on selections of a single configuration, one optional slot per key."""

    our_tagline: OurTagline | None = None
    exact_size: ExactSize | None = None
    digital_proof: DigitalProof | None = None
    perforation: Perforation | None = None
    score_only: ScoreOnly | None = None
    folding: Folding | None = None
    design: Design | None = None
    banding: Banding | None = None
    shrink_wrapping: ShrinkWrapping | None = None
    qr_code: QrCode | None = None
    postal_delivery: PostalDelivery | None = None
    eddm_process: EddmProcess | None = None
    hole_drilling: HoleDrilling | None = None

    @classmethod
    def from_dict(cls, data: Mapping | None) -> "AddOnConfiguration":
        """
        Build from `{add_on_key: {"selected": ..., **params}}`.
        Unknown keys are ignored so newer clients keep working.
        """
        slots = {}
        for key, value in (data or {}).items():
            variant = ADDON_TYPES.get(key)
            if variant is None or value is None:
                continue
            if isinstance(value, bool):
                value = {"selected": value}
            slots[key] = value if isinstance(value, variant) else variant.from_dict(value)
        return cls(**slots)

    def get(self, key: str) -> AddOnSelection | None:
        if key not in ADDON_TYPES:
            return None
        return getattr(self, key)

    def is_selected(self, key: str) -> bool:
        selection = self.get(key)
        return bool(selection is not None and selection.selected)

    def selected(self) -> list[AddOnSelection]:
        """Selected add-ons in invoice order."""
        return [getattr(self, key) for key in ADDON_TYPES if self.is_selected(key)]

    def validate(self) -> None:
        for selection in self.selected():
            selection.validate()


def resolve_addon_costs(
    add_ons: AddOnConfiguration,
    quantity: int,
) -> tuple[list[AddOnCost], Decimal]:
    """
    Price every selected discrete add-on.

    All selections are validated before any line is priced, so a bad
    parameter never yields a partial list.
    Returns (lines, total).
    """
    add_ons.validate()

    lines = []
    for key in DISCRETE_ADDON_KEYS:
        if not add_ons.is_selected(key):
            continue
        line = add_ons.get(key).calculate(quantity)
        if line is not None:
            lines.append(line)

    total = sum((line.cost for line in lines), Decimal("0"))
    return lines, total
