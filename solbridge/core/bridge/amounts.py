"""Human-decimal <-> smallest-unit conversion. Amounts stay integers inside the engine."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Union

from .errors import InvalidAmountError

AmountLike = Union[Decimal, str, int]

# Solana amounts are u64 on the wire.
MAX_UNITS = 2**64 - 1


def parse_amount(value: AmountLike) -> Decimal:
    """Parse a caller amount without going through binary floating point."""

    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmountError("Amounts must be given as Decimal, int or str, not float")
    try:
        amount = Decimal(str(value).strip()) if isinstance(value, str) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidAmountError(f"Invalid amount: {value!r}") from exc
    if not amount.is_finite():
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    if amount <= 0:
        raise InvalidAmountError("Amount must be strictly positive")
    return amount


def to_units(amount: AmountLike, decimals: int) -> int:
    """Convert a human amount to smallest units; extra precision is rejected, not truncated."""

    parsed = parse_amount(amount)
    # Integer arithmetic on the exact digits; Decimal context rounding never applies.
    _sign, digits, exponent = parsed.as_tuple()
    coefficient = int("".join(str(digit) for digit in digits))
    shift = exponent + decimals
    if shift >= 0:
        if len(str(coefficient)) + shift > len(str(MAX_UNITS)):
            raise InvalidAmountError(f"Amount {parsed} exceeds the maximum transferable amount")
        units = coefficient * 10**shift
    else:
        if -shift > len(digits):
            raise InvalidAmountError(f"Amount {parsed} has more than {decimals} decimal places")
        units, remainder = divmod(coefficient, 10**-shift)
        if remainder:
            raise InvalidAmountError(f"Amount {parsed} has more than {decimals} decimal places")
    if units > MAX_UNITS:
        raise InvalidAmountError(f"Amount {parsed} exceeds the maximum transferable amount")
    return units


def from_units(units: int, decimals: int) -> Decimal:
    return Decimal(units).scaleb(-decimals)


def format_amount(amount: Decimal) -> str:
    """Plain notation without trailing zeros (``1.500000000`` -> ``1.5``)."""

    normalized = amount.normalize()
    return f"{normalized:f}"
