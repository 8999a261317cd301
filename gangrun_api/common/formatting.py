"""
Display formatting for prices, rates and volumes.

Used by add-on calculation traces (invoice display) and broker
discount summaries.
"""

from decimal import Decimal


def format_currency(amount: Decimal) -> str:
    """Format amount as a USD string with two decimals."""
    return f"${amount:,.2f}"


def format_rate(rate: Decimal) -> str:
    """
    Format a per-piece or per-bundle rate.

    Keeps at least two decimals but never rounds away precision,
    so $0.239/piece stays $0.239 rather than $0.24.
    """
    exponent = Decimal(rate).normalize().as_tuple().exponent
    places = max(2, -exponent) if exponent < 0 else 2
    return f"${rate:,.{places}f}"


def format_percentage(percentage: Decimal, decimals: int = 1) -> str:
    return f"{percentage:.{decimals}f}%"


def format_volume(volume) -> str:
    """Short form for annual volumes: 1.5M, 50.0K, 999."""
    if volume >= 1000000:
        return f"{Decimal(volume) / 1000000:.1f}M"
    if volume >= 1000:
        return f"{Decimal(volume) / 1000:.1f}K"
    return str(volume)
