"""Currency rounding shared by every calculator."""

from decimal import ROUND_FLOOR, Decimal

_HALF = Decimal("0.5")


def round_currency(value: Decimal, minor_unit: Decimal = Decimal("1")) -> Decimal:
    """Round to the nearest minor unit, halves toward positive infinity.

    Matches the published GRA figures, which round 2.5 up to 3 and
    -2.5 up to -2.
    """
    units = (value / minor_unit + _HALF).to_integral_value(rounding=ROUND_FLOOR)
    return (units * minor_unit).quantize(minor_unit)


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Coerce a caller-supplied amount to Decimal without float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
