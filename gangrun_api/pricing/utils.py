# pricing/utils.py

from decimal import Decimal, InvalidOperation

from .exceptions import ConfigurationError


def to_decimal(value, name: str = "value") -> Decimal:
    """Coerce caller-supplied numbers (int, float, str) to a finite Decimal."""
    if value is None or isinstance(value, bool):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation as exc:
            raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc
    if not result.is_finite():
        raise ConfigurationError(f"{name} must be a finite number, got {value!r}")
    return result


def is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0
