"""
Fixed-width integer helpers for ledger amounts.

Python integers never overflow, so the width of the on-ledger fields is
enforced here explicitly. Aggregate counters clamp (saturate) at their
bound, per-grant balances fail hard (checked) because exceeding the bound
there means an invariant is already broken.

No function in this module uses floating point.
"""

from __future__ import annotations

from grantstream.core.constants import U64_MAX
from grantstream.core.exceptions import ArithmeticOverflowError


def saturating_add(a: int, b: int, bound: int = U64_MAX) -> int:
    """Add two non-negative integers, clamping the result at ``bound``."""
    return min(a + b, bound)


def saturating_sub(a: int, b: int) -> int:
    """Subtract ``b`` from ``a``, clamping the result at zero."""
    return a - b if a > b else 0


def checked_add(a: int, b: int, bound: int = U64_MAX, field: str = "value") -> int:
    """Add two non-negative integers, raising if the result exceeds ``bound``."""
    result = a + b
    if result > bound:
        raise ArithmeticOverflowError(
            f"{field} overflow: {a} + {b} exceeds {bound}",
            details={"field": field, "lhs": a, "rhs": b, "bound": bound},
        )
    return result


def linear_unlock(total_amount: int, elapsed: int, duration: int) -> int:
    """
    Amount unlocked after ``elapsed`` of ``duration`` seconds.

    Computes ``floor(total_amount * elapsed / duration)``. The product of two
    64-bit operands needs up to 128 bits; Python's arbitrary-precision ints
    hold it exactly, and floor division truncates toward zero for the
    non-negative operands used here.
    """
    if duration <= 0:
        raise ValueError("duration must be positive")
    if elapsed <= 0:
        return 0
    if elapsed >= duration:
        return total_amount
    return (total_amount * elapsed) // duration
