"""Read-window clamp policy for caller-supplied limits."""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from numbers import Real
from typing import Any

from daylog.core.constants import DEFAULT_READ_LIMIT, MAX_READ_LIMIT, MIN_READ_LIMIT


def clamp_limit(
    value: Any,
    *,
    default: int = DEFAULT_READ_LIMIT,
    lower: int = MIN_READ_LIMIT,
    upper: int = MAX_READ_LIMIT,
) -> int:
    """
    Coerce a loosely-typed read limit into ``[lower, upper]``.

    - non-finite numbers (``inf``, ``nan``) → ``default``
    - non-numeric input (``None``, ``"abc"``, booleans, objects) → ``default``
    - anything else → its integer part, clamped into the range

    Numeric strings are accepted (``"50"`` → 50, ``"2.9"`` → 2).

    >>> clamp_limit(0), clamp_limit(999_999_999), clamp_limit("not-a-number")
    (1, 10000, 1000)
    """
    number = _finite_number(value)
    if number is None:
        return default
    # compare before int(): "1e999999999" must not be expanded
    if number >= upper:
        return upper
    if number < lower:
        return lower
    return max(lower, int(number))


def _finite_number(value: Any) -> Real | Decimal | None:
    """``value`` as a finite number; None when it is non-numeric or non-finite."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, bytes):
        value = value.decode("ascii", "replace")
    if isinstance(value, str):
        try:
            value = Decimal(value.strip())
        except InvalidOperation:
            return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, Real):
        return value
    return None
