"""Overflow-checked payout arithmetic.

Python integers never wrap, so each step is checked against the width the
value is meant to occupy instead.  A step that leaves that range, or divides
by zero, returns ``None`` and the caller turns it into
:class:`~dicevault.errors.ArithmeticOverflow`.
"""

from __future__ import annotations

from typing import Optional

from .config import BPS_DENOMINATOR, HOUSE_EDGE_BPS, U64_MAX, U128_MAX
from .errors import ArithmeticOverflow


def checked_mul(a: int, b: int, limit: int = U128_MAX) -> Optional[int]:
    result = a * b
    if result < 0 or result > limit:
        return None
    return result


def checked_div(a: int, b: int) -> Optional[int]:
    if b <= 0:
        return None
    return a // b


def checked_sub(a: int, b: int) -> Optional[int]:
    result = a - b
    if result < 0:
        return None
    return result


def calculate_payout(amount: int, roll: int, *, house_edge_bps: int = HOUSE_EDGE_BPS) -> int:
    """Return the winnings for a stake of ``amount`` on threshold ``roll``.

    ``amount * (10000 - edge) / (roll - 1) / 100``, floored at every division.
    ``roll`` of 1 can never win; asking for its payout is an error rather than
    a division by zero.
    """
    if amount < 0 or amount > U64_MAX:
        raise ArithmeticOverflow("stake outside u64 range")
    bps = checked_sub(BPS_DENOMINATOR, house_edge_bps)
    if bps is None:
        raise ArithmeticOverflow("house edge exceeds 100%")
    divisor = checked_sub(roll, 1)
    if divisor is None:
        raise ArithmeticOverflow("roll below 1")

    payout = checked_mul(amount, bps)
    if payout is not None:
        payout = checked_div(payout, divisor)
    if payout is not None:
        payout = checked_div(payout, 100)
    if payout is None:
        raise ArithmeticOverflow(f"payout for amount={amount} roll={roll}")
    if payout > U64_MAX:
        raise ArithmeticOverflow("payout does not fit in u64")
    return payout


__all__ = ["checked_mul", "checked_div", "checked_sub", "calculate_payout"]
