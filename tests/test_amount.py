"""Tests for minor-unit amount conversion."""

from decimal import Decimal

import pytest

from checkout_connector import (
    MAX_AMOUNT,
    Amount,
    AmountOverflowError,
    AmountPrecisionError,
    ConversionError,
    Currency,
    decode,
    encode,
    minor_unit_exponent,
)
from checkout_connector.currency import THREE_DECIMAL_CURRENCIES, ZERO_DECIMAL_CURRENCIES


class TestMinorUnitExponent:
    """Test the exponent each currency is scaled by."""

    @pytest.mark.parametrize("currency", ["JPY", "KRW", "VND", "CLF", "XOF"])
    def test_zero_decimal_currencies(self, currency):
        assert minor_unit_exponent(currency) == 0

    @pytest.mark.parametrize("currency", ["BHD", "IQD", "JOD", "KWD", "LYD", "OMR", "TND"])
    def test_three_decimal_currencies(self, currency):
        assert minor_unit_exponent(currency) == 3

    @pytest.mark.parametrize("currency", ["USD", "EUR", "GBP", "ALL", "TRY"])
    def test_default_exponent(self, currency):
        assert minor_unit_exponent(currency) == 2

    def test_lowercase_code_accepted(self):
        assert minor_unit_exponent("kwd") == 3

    def test_unknown_code_rejected(self):
        with pytest.raises(ValueError):
            minor_unit_exponent("XYZ")

    def test_exponent_sets_are_disjoint(self):
        assert not ZERO_DECIMAL_CURRENCIES & THREE_DECIMAL_CURRENCIES


class TestEncode:
    """Test scaling decimal values to minor units."""

    def test_two_decimal_currency(self):
        assert encode(Currency.USD, Decimal("1.00")) == 100
        assert encode(Currency.USD, Decimal("20.00")) == 2000

    def test_zero_decimal_currency(self):
        assert encode(Currency.JPY, Decimal("100")) == 100

    def test_three_decimal_currency(self):
        assert encode(Currency.KWD, Decimal("1.000")) == 1000
        assert encode(Currency.KWD, Decimal("1.5")) == 1500

    def test_string_and_int_inputs(self):
        assert encode("EUR", "12.34") == 1234
        assert encode("EUR", 7) == 700

    def test_trailing_zeros_beyond_exponent_are_exact(self):
        assert encode(Currency.USD, Decimal("1.2300")) == 123

    def test_result_is_amount(self):
        result = encode(Currency.USD, Decimal("0.01"))
        assert isinstance(result, Amount)
        assert result == 1

    def test_zero(self):
        assert encode(Currency.USD, Decimal("0")) == 0
        assert encode(Currency.USD, Decimal("-0.00")) == 0

    def test_largest_value(self):
        assert encode(Currency.JPY, Decimal(MAX_AMOUNT)) == MAX_AMOUNT

    def test_overflow_raises(self):
        with pytest.raises(AmountOverflowError):
            encode(Currency.USD, Decimal(MAX_AMOUNT))

    def test_negative_raises(self):
        with pytest.raises(AmountOverflowError):
            encode(Currency.USD, Decimal("-0.01"))

    def test_fractional_minor_unit_raises(self):
        with pytest.raises(AmountPrecisionError):
            encode(Currency.USD, Decimal("10.005"))
        with pytest.raises(AmountPrecisionError):
            encode(Currency.JPY, Decimal("1.5"))

    def test_float_rejected(self):
        with pytest.raises(ConversionError):
            encode(Currency.USD, 20.0)

    def test_non_finite_rejected(self):
        with pytest.raises(ConversionError):
            encode(Currency.USD, Decimal("NaN"))
        with pytest.raises(ConversionError):
            encode(Currency.USD, Decimal("Infinity"))

    def test_garbage_string_rejected(self):
        with pytest.raises(ConversionError):
            encode(Currency.USD, "twenty")

    def test_conversion_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            encode(Currency.USD, "1.001")

    def test_long_exact_value(self):
        assert encode(Currency.USD, "1." + "0" * 5000) == 100

    def test_long_value_overflows(self):
        with pytest.raises(AmountOverflowError):
            encode(Currency.USD, "9" * 5000)

    def test_long_fraction_raises_precision_error(self):
        with pytest.raises(AmountPrecisionError):
            encode(Currency.USD, "1." + "0" * 5000 + "1")


class TestDecode:
    """Test turning minor units back into decimal values."""

    def test_two_decimal_currency(self):
        value = decode(Currency.USD, 2000)
        assert value == Decimal("20")
        assert str(value) == "20.00"

    def test_three_decimal_currency(self):
        assert str(decode(Currency.BHD, 1500)) == "1.500"

    def test_zero_decimal_currency(self):
        assert str(decode(Currency.JPY, 100)) == "100"

    def test_small_amount_keeps_scale(self):
        assert str(decode(Currency.USD, 5)) == "0.05"

    def test_largest_value_is_exact(self):
        assert decode(Currency.USD, MAX_AMOUNT) == Decimal(MAX_AMOUNT) / 100

    def test_very_large_integer(self):
        value = decode(Currency.USD, 10 ** 5000)
        assert value == Decimal(10) ** 4998
        assert value.as_tuple().exponent == -2

    def test_negative_integer(self):
        assert str(decode(Currency.USD, -150)) == "-1.50"

    @pytest.mark.parametrize("currency", list(Currency))
    def test_round_trip_every_currency(self, currency):
        for minor in (0, 1, 12345, MAX_AMOUNT):
            assert encode(currency, decode(currency, minor)) == minor


class TestAmount:
    """Test the Amount integer type."""

    def test_range_enforced(self):
        assert Amount(0) == 0
        assert Amount(MAX_AMOUNT) == MAX_AMOUNT
        with pytest.raises(AmountOverflowError):
            Amount(-1)
        with pytest.raises(AmountOverflowError):
            Amount(MAX_AMOUNT + 1)

    def test_rejects_non_integers(self):
        with pytest.raises(ConversionError):
            Amount(True)
        with pytest.raises(ConversionError):
            Amount(1.0)

    def test_decimal_helpers(self):
        amount = Amount.from_decimal(Currency.GBP, "9.99")
        assert amount == 999
        assert amount.to_decimal(Currency.GBP) == Decimal("9.99")
        assert repr(amount) == "Amount(999)"
