"""Conversion between decimal money values and the integer minor units on the wire.

See https://docs.checkout.com/resources/calculating-the-value
"""

from decimal import Decimal, InvalidOperation
from typing import Union

from .currency import Currency, minor_unit_exponent
from .errors import AmountOverflowError, AmountPrecisionError, ConversionError

# Amounts are unsigned 64-bit integers on the wire.
MAX_AMOUNT = 2 ** 64 - 1

_MAX_AMOUNT_DIGITS = len(str(MAX_AMOUNT))

DecimalLike = Union[Decimal, int, str]


class Amount(int):
    """A non-negative monetary value in a currency's minor unit.

    The integer is meaningless without its currency: 100 is one dollar in USD,
    one hundred yen in JPY and a tenth of a dinar in KWD.
    """

    def __new__(cls, value: int) -> "Amount":
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConversionError(f"Amount must be an integer, got {type(value).__name__}")
        if value < 0 or value > MAX_AMOUNT:
            raise AmountOverflowError(f"Amount {value} is outside 0..{MAX_AMOUNT}")
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"Amount({int(self)})"

    @classmethod
    def from_decimal(cls, currency: Union[Currency, str], value: DecimalLike) -> "Amount":
        return encode(currency, value)

    def to_decimal(self, currency: Union[Currency, str]) -> Decimal:
        return decode(currency, self)


def _to_decimal(value: DecimalLike) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or isinstance(value, float):
        raise ConversionError(
            f"Refusing to convert {type(value).__name__} {value!r}; pass a Decimal or string"
        )
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation as exc:
            raise ConversionError(f"Not a decimal number: {value!r}") from exc
    raise ConversionError(f"Unsupported amount type: {type(value).__name__}")


def encode(currency: Union[Currency, str], value: DecimalLike) -> Amount:
    """Scale a decimal value to the currency's minor unit.

    The scaling is done on the decimal digits directly, so no precision is lost
    to a decimal context.

    Args:
        currency: The currency the value is expressed in.
        value: The face value, e.g. ``Decimal("20.00")`` for twenty dollars.

    Returns:
        The amount in minor units.

    Raises:
        AmountOverflowError: If the value is negative or too large for the wire.
        AmountPrecisionError: If the value has a fractional minor unit.
        ConversionError: If the value is not a finite decimal number.
    """
    exponent = minor_unit_exponent(currency)
    number = _to_decimal(value)
    if not number.is_finite():
        raise ConversionError(f"Amount must be finite, got {number}")

    sign, digits, digit_exponent = number.as_tuple()
    if not any(digits):
        return Amount(0)
    if sign:
        raise AmountOverflowError(f"Amount {number} is negative")

    # Work on the digit tuple until the length is known to be small, so huge
    # inputs never reach int().
    shift = digit_exponent + exponent
    if shift < 0:
        if any(digits[shift:]):
            raise AmountPrecisionError(
                f"Amount {number} has more than {exponent} decimal places"
            )
        digits = digits[:shift]
        shift = 0
    if len(digits) + shift > _MAX_AMOUNT_DIGITS:
        raise AmountOverflowError(f"Amount {number} {currency} does not fit in minor units")

    scaled = int("".join(str(d) for d in digits)) * 10 ** shift
    if scaled > MAX_AMOUNT:
        raise AmountOverflowError(f"Amount {number} {currency} does not fit in minor units")
    return Amount(scaled)


def decode(currency: Union[Currency, str], amount: int) -> Decimal:
    """Return the face value of a minor-unit amount, with the currency's scale.

    Works for any integer, including values that ``encode`` would never produce.
    """
    exponent = minor_unit_exponent(currency)
    sign, digits, _ = Decimal(int(amount)).as_tuple()
    return Decimal((sign, digits, -exponent))
