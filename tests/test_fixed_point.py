"""Tests for fixed-point and calendar primitives."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from tokenfactor.domain.fixed_point import (
    PERCENT_BASE,
    SCALE,
    UINT256_MAX,
    checked_int,
    checked_uint,
    days_between,
    from_scaled,
    to_date,
    to_scaled,
    to_timestamp,
    trunc_div,
)
from tokenfactor.exceptions import ArithmeticOverflow


class TestConstants:
    def test_scale_is_two_decimals(self) -> None:
        assert SCALE == 100
        assert PERCENT_BASE == 10_000


class TestTruncDiv:
    """Division truncates toward zero, unlike floor division."""

    def test_positive(self) -> None:
        assert trunc_div(7, 2) == 3

    def test_negative_numerator(self) -> None:
        assert trunc_div(-7, 2) == -3

    def test_negative_denominator(self) -> None:
        assert trunc_div(7, -2) == -3

    def test_both_negative(self) -> None:
        assert trunc_div(-7, -2) == 3

    def test_zero_denominator(self) -> None:
        with pytest.raises(ZeroDivisionError):
            trunc_div(1, 0)


class TestCheckedRanges:
    def test_uint_accepts_bounds(self) -> None:
        assert checked_uint(0) == 0
        assert checked_uint(UINT256_MAX) == UINT256_MAX

    def test_uint_rejects_negative(self) -> None:
        with pytest.raises(ArithmeticOverflow):
            checked_uint(-1)

    def test_uint_rejects_overflow(self) -> None:
        with pytest.raises(ArithmeticOverflow, match="amount"):
            checked_uint(UINT256_MAX + 1, "amount")

    def test_int_accepts_negative(self) -> None:
        assert checked_int(-5) == -5

    def test_int_rejects_overflow(self) -> None:
        with pytest.raises(ArithmeticOverflow):
            checked_int(2**255)


class TestScaledConversion:
    """Human-readable figures to hundredths and back."""

    def test_string_with_decimals(self) -> None:
        assert to_scaled("8500.00") == 850_000

    def test_decimal(self) -> None:
        assert to_scaled(Decimal("2.27")) == 227

    def test_int_is_whole_units(self) -> None:
        assert to_scaled(10) == 1_000

    def test_extra_digits_truncated(self) -> None:
        assert to_scaled("1.239") == 123
        assert to_scaled("-1.239") == -123

    def test_float_rejected(self) -> None:
        with pytest.raises(TypeError):
            to_scaled(1.5)

    def test_bool_rejected(self) -> None:
        with pytest.raises(TypeError):
            to_scaled(True)

    def test_garbage_rejected(self) -> None:
        with pytest.raises(ValueError):
            to_scaled("ten")

    def test_infinity_rejected(self) -> None:
        with pytest.raises(ValueError):
            to_scaled("Infinity")

    def test_from_scaled(self) -> None:
        assert from_scaled(386_240) == Decimal("3862.40")
        assert from_scaled(-67_995) == Decimal("-679.95")


class TestCalendar:
    def test_unset_values(self) -> None:
        assert to_timestamp(None) is None
        assert to_timestamp(0) is None

    def test_date_is_utc_midnight(self) -> None:
        assert to_timestamp(date(1970, 1, 2)) == 86_400

    def test_int_passthrough(self) -> None:
        assert to_timestamp(1_676_000_000) == 1_676_000_000

    def test_aware_datetime(self) -> None:
        assert to_timestamp(datetime(1970, 1, 1, 1, tzinfo=timezone.utc)) == 3_600

    def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError):
            to_timestamp("2023-01-01")

    def test_days_between_whole_days(self) -> None:
        assert days_between(date(2023, 2, 15), date(2022, 10, 14)) == 124

    def test_days_between_negative(self) -> None:
        assert days_between(date(2023, 1, 1), date(2023, 1, 11)) == -10

    def test_partial_day_truncates_toward_zero(self) -> None:
        later = datetime(2023, 1, 2, 23, 0, tzinfo=timezone.utc)
        assert days_between(later, date(2023, 1, 1)) == 1
        assert days_between(date(2023, 1, 1), later) == -1

    def test_days_between_mixed_types(self) -> None:
        assert days_between(date(1970, 1, 11), 86_400) == 9

    def test_to_date(self) -> None:
        assert to_date(86_400 * 3) == date(1970, 1, 4)
        assert to_date(datetime(2023, 2, 10, 15, 30)) == date(2023, 2, 10)
        assert to_date(None) is None
        assert to_date(0) is None
