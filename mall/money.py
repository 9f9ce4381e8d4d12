"""
Money Utilities - Safe Decimal operations for monetary values.

Cart amounts are opaque numbers (Toman, Rial or minor units alike), so the
helpers here never assume a fixed number of decimal places unless asked to.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

Number = Union[str, int, float, Decimal, None]

# Default precision for money operations (2 decimal places)
MONEY_PRECISION = Decimal("0.01")

# Precision for integer currencies (Toman, Rial)
INTEGER_PRECISION = Decimal("1")

DEFAULT_CURRENCY = "تومان"

PERSIAN_DIGITS = "۰۱۲۳۴۵۶۷۸۹"
ARABIC_DIGITS = "٠١٢٣٤٥٦٧٨٩"
ENGLISH_DIGITS = "0123456789"

_TO_PERSIAN = str.maketrans(ENGLISH_DIGITS, PERSIAN_DIGITS)
_TO_ENGLISH = str.maketrans(PERSIAN_DIGITS + ARABIC_DIGITS, ENGLISH_DIGITS * 2)


def to_decimal(value: Number) -> Decimal:
    """
    Convert any value to Decimal safely.

    Strings may contain Persian or Arabic-Indic digits and thousands
    separators, as typed into storefront forms.

    Args:
        value: Value to convert (str, int, float, Decimal, or None)

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        if isinstance(value, float):
            # Go through str to avoid binary float artifacts
            return Decimal(str(value))
        if isinstance(value, str):
            return Decimal(to_english_digits(value).replace(",", "").replace("٬", "").strip())
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def round_money(value: Number, to_int: bool = False) -> Decimal:
    """
    Round monetary value to appropriate precision.

    Args:
        value: Value to round
        to_int: If True, round to integer (Toman, Rial)

    Returns:
        Rounded Decimal value
    """
    decimal_value = to_decimal(value)
    precision = INTEGER_PRECISION if to_int else MONEY_PRECISION
    return decimal_value.quantize(precision, rounding=ROUND_HALF_UP)


def add(a: Number, b: Number) -> Decimal:
    """Safe addition of monetary values."""
    return to_decimal(a) + to_decimal(b)


def multiply(value: Number, factor: Number) -> Decimal:
    """Safe multiplication of monetary value by a factor."""
    return to_decimal(value) * to_decimal(factor)


def to_float(value: Number) -> float:
    """Convert to float for JSON payloads. Use only at API boundaries."""
    return float(to_decimal(value))


def to_persian_digits(value: Union[str, int, Decimal]) -> str:
    """Replace ASCII digits with Persian digits."""
    return str(value).translate(_TO_PERSIAN)


def to_english_digits(text: str) -> str:
    """Replace Persian and Arabic-Indic digits with ASCII digits."""
    return text.translate(_TO_ENGLISH)


def format_toman(
    amount: Number,
    currency: str = DEFAULT_CURRENCY,
    show_currency: bool = True,
    persian_digits: bool = True,
) -> str:
    """
    Format an amount for display in the storefront.

    Integral amounts are shown without a fraction; others keep two places.

    >>> format_toman(1250000, persian_digits=False)
    '1,250,000 تومان'
    """
    decimal_value = to_decimal(amount)

    if decimal_value == decimal_value.to_integral_value():
        formatted = f"{int(decimal_value):,}"
    else:
        formatted = f"{round_money(decimal_value):,.2f}"

    if persian_digits:
        formatted = to_persian_digits(formatted)

    return f"{formatted} {currency}" if show_currency else formatted
