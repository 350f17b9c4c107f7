"""
Amount units for the LFW staking pool.

The pool only ever handles integer *base units* (the token's smallest
indivisible amount), matching ERC-20 accounting:

    1 LFW = 10**18 base units

Decimal conversions are for display and config input only.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

# Number of decimal places of the staked token.
TOKEN_DECIMALS: int = 18

# Base units in one whole token.
BASE_UNITS_PER_TOKEN: int = 10 ** TOKEN_DECIMALS

DEFAULT_SYMBOL: str = "LFW"


def to_base_units(value: Decimal | str | int, decimals: int = TOKEN_DECIMALS) -> int:
    """Convert a whole-token amount to integer base units.

    Raises ``ValueError`` when *value* has more precision than the token
    supports, rather than silently truncating.

    >>> to_base_units("1.5", decimals=2)
    150
    """
    if isinstance(value, float):
        raise TypeError("Use Decimal or str for token amounts, not float")
    try:
        dec = Decimal(value)
    except InvalidOperation as exc:
        raise ValueError(f"Not a number: {value!r}") from exc
    if not dec.is_finite():
        raise ValueError(f"Not a finite amount: {value!r}")
    scaled = dec.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{value} has more than {decimals} decimal places")
    return int(scaled)


def from_base_units(amount: int, decimals: int = TOKEN_DECIMALS) -> Decimal:
    """Convert integer base units to a whole-token ``Decimal``."""
    return Decimal(amount).scaleb(-decimals)


def format_amount(
    amount: int,
    symbol: str = DEFAULT_SYMBOL,
    decimals: int = TOKEN_DECIMALS,
) -> str:
    """Return a human-readable amount, e.g. ``"1.500000000000000000 LFW"``."""
    return f"{from_base_units(amount, decimals):.{decimals}f} {symbol}"
