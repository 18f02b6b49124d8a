"""Exact decimal arithmetic for prices and order totals.

Amounts are persisted as canonical decimal strings ("25.50") so no float ever
touches a monetary value.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    """Parse `value` into a Decimal, rejecting NaN and infinities."""
    if isinstance(value, float):
        # Go through repr so 10.1 becomes Decimal("10.1"), not its binary expansion
        value = repr(value)
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        raise ValueError(f"Invalid amount: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return amount


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_amount(value) -> str:
    """Canonical two-decimal string for `value`."""
    return str(quantize(to_decimal(value)))


def line_total(quantity: int, unit_price) -> Decimal:
    return quantize(to_decimal(unit_price) * quantity)


def sum_lines(lines) -> Decimal:
    """Sum of quantity x unit price over `(quantity, unit_price)` pairs."""
    total = ZERO
    for quantity, unit_price in lines:
        total += to_decimal(unit_price) * quantity
    return quantize(total)
