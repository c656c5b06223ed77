from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value):
    """
    Coerce ``value`` to a two-place Decimal.
    Floats are converted through ``str`` so 0.1 stays 0.1.
    """
    if isinstance(value, Decimal):
        amount = value
    else:
        if isinstance(value, float):
            value = str(value)
        try:
            amount = Decimal(value)
        except (InvalidOperation, TypeError, ValueError):
            raise ValueError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return amount.quantize(CENT, ROUND_HALF_UP)


def clamp(amount):
    """Negative balances are stored as zero."""
    return amount if amount > ZERO else ZERO
