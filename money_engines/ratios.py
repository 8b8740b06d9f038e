"""Zero-safe division helpers shared by the engines."""

from decimal import Decimal

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def safe_divide(numerator: Decimal, denominator: Decimal) -> Decimal:
    """numerator / denominator, or 0 when the denominator is not positive."""
    if denominator is None or denominator <= ZERO:
        return ZERO
    return numerator / denominator


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole x 100, or 0 when whole is not positive."""
    if whole is None or whole <= ZERO:
        return ZERO
    return part / whole * HUNDRED
