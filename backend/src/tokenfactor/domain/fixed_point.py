"""
Fixed-point and calendar primitives shared by the formula engine.

Monetary amounts and percentages are plain integers holding hundredths:
``850000`` is 8500.00 of the settlement currency and ``850`` is 8.50%.
Nothing here ever touches ``float``.

Design Decisions:
- Every division truncates toward zero so independent implementations agree
- Intermediates are bounded to 256 bits, mirroring the ledger word size
- Dates are reduced to integer Unix seconds before any day arithmetic
"""

import calendar
from datetime import date, datetime, timezone
from decimal import ROUND_DOWN, Decimal, InvalidOperation

from tokenfactor.exceptions import ArithmeticOverflow

# Number of decimal places carried by every scaled value
DECIMALS = 2
SCALE = 10**DECIMALS

# A percentage at SCALE is divided by this to become a plain fraction
PERCENT_BASE = 100 * SCALE

SECONDS_PER_DAY = 86_400
DAYS_PER_YEAR = 365

UINT256_MAX = 2**256 - 1
INT256_MIN = -(2**255)
INT256_MAX = 2**255 - 1


def checked_uint(value: int, label: str = "value") -> int:
    """Return ``value`` if it fits an unsigned 256-bit word, else raise."""
    if value < 0 or value > UINT256_MAX:
        raise ArithmeticOverflow(f"{label} out of unsigned range: {value}")
    return value


def checked_int(value: int, label: str = "value") -> int:
    """Return ``value`` if it fits a signed 256-bit word, else raise."""
    if value < INT256_MIN or value > INT256_MAX:
        raise ArithmeticOverflow(f"{label} out of signed range: {value}")
    return value


def trunc_div(numerator: int, denominator: int) -> int:
    """Integer division truncating toward zero (Python's ``//`` floors)."""
    if denominator == 0:
        raise ZeroDivisionError("fixed-point division by zero")
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


def to_scaled(value: Decimal | str | int) -> int:
    """
    Convert a human-readable figure into its scaled integer form.

    ``"8500.00"`` and ``Decimal("8500")`` both become ``850000``; an ``int``
    is read as whole currency units. Digits beyond the scale are truncated
    toward zero.

    Raises:
        TypeError: for floats, which cannot be represented exactly
        ValueError: for strings that are not decimal numbers
    """
    if isinstance(value, (bool, float)):
        raise TypeError(f"Cannot convert {type(value).__name__} to fixed point exactly")
    try:
        amount = Decimal(value)
    except InvalidOperation as e:
        raise ValueError(f"Not a decimal number: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return int((amount * SCALE).to_integral_value(rounding=ROUND_DOWN))


def from_scaled(value: int) -> Decimal:
    """Convert a scaled integer back into a ``Decimal`` with two places."""
    return Decimal(value).scaleb(-DECIMALS)


def to_timestamp(value: date | datetime | int | None) -> int | None:
    """
    Normalize a calendar instant to integer Unix seconds.

    ``None`` and ``0`` both mean "unset" and return ``None``. Plain dates are
    taken at UTC midnight; naive datetimes are read as UTC.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise TypeError("Booleans are not calendar instants")
    if isinstance(value, int):
        return value if value != 0 else None
    if isinstance(value, datetime):
        return calendar.timegm(value.utctimetuple())
    if isinstance(value, date):
        return calendar.timegm(value.timetuple())
    raise TypeError(f"Unsupported date value: {value!r}")


def days_between(later: date | datetime | int, earlier: date | datetime | int) -> int:
    """Whole days from ``earlier`` to ``later``, truncated toward zero."""
    later_ts = to_timestamp(later) or 0
    earlier_ts = to_timestamp(earlier) or 0
    return trunc_div(later_ts - earlier_ts, SECONDS_PER_DAY)


def to_date(value: date | datetime | int | None) -> date | None:
    """Reduce a calendar instant to its UTC calendar date; unset stays ``None``."""
    timestamp = to_timestamp(value)
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).date()
