"""
Amounts travel as integer strings in minor units (wei-like, `10**decimals` per token)
and are shown to humans as decimals. Every conversion goes through `Decimal`
so summing thousands of daily snapshots never picks up float error.
"""

import re
from decimal import Decimal, InvalidOperation, getcontext
from typing import Union

from eth_utils import encode_hex, int_to_big_endian, remove_0x_prefix

from waterdrop.errors import NumericParseError

# 1e9 EGLD in 18 decimals is 27 digits, leave headroom for the window sums
getcontext().prec = 42

Numeric = Union[Decimal, int, float, str]

# bare hex digits only, no sign, prefix, separators or whitespace
HEX_DIGITS = re.compile(r"^[0-9a-fA-F]+$")


def to_human_scale(amount: str, decimals: int) -> Decimal:
    """
    Convert an integer string in minor units to a human scale decimal.

    :param `amount`: eg "1000000000000000000"
    :param `decimals`: decimal places of the token, eg 18
    """
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise NumericParseError(f"Invalid numeric literal {amount!r}") from e
    if not value.is_finite():
        raise NumericParseError(f"Invalid numeric literal {amount!r}")
    return value.scaleb(-decimals)


def to_minor_units(value: Numeric, decimals: int) -> str:
    """
    Convert a human scale value to minor units and hex encode the big endian bytes,
    without `0x` and without padding. Zero is encoded as the empty argument.
    """
    scaled = Decimal(str(value)).scaleb(decimals)
    if scaled < 0:
        raise ValueError(f"Cannot encode negative amount {value}")
    integer = int(scaled)
    if integer == 0:
        return ""
    return remove_0x_prefix(encode_hex(int_to_big_endian(integer)))


def parse_hex_int(literal: str) -> int:
    """Parse a hex smart contract argument, eg the amount of `unDelegate@<hex>`"""
    if not isinstance(literal, str) or not HEX_DIGITS.match(literal):
        raise NumericParseError(f"Invalid hex literal {literal!r}")
    return int(literal, 16)


def hex_encode_text(text: str) -> str:
    return remove_0x_prefix(encode_hex(text.encode("utf-8")))
