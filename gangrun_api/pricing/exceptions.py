# pricing/exceptions.py


class PricingError(ValueError):
    """Base error for the pricing engines."""


class ConfigurationError(PricingError):
    """
    Raised when a product configuration cannot be priced.

    `addon` and `field` are set when the problem is a selected add-on
    with a missing or invalid parameter.
    """

    def __init__(self, message: str, addon: str | None = None, field: str | None = None):
        super().__init__(message)
        self.addon = addon
        self.field = field
