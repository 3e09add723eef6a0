"""Shared serialization helpers for report fields.

Provides the ``snake_to_camel`` alias generator used by the Pydantic
model configs, plus the rounding helpers that keep report numbers
stable across runs.
"""

from __future__ import annotations

import math


def snake_to_camel(name: str) -> str:
    """Convert a snake_case string to camelCase.

    Args:
        name: A snake_case identifier such as
            ``"my_field_name"``.

    Returns:
        The camelCase equivalent, e.g. ``"myFieldName"``.
    """
    parts = name.split("_")
    return parts[0] + "".join(w.capitalize() for w in parts[1:])


def round2(value: float | int | None) -> float | None:
    """Round *value* to two decimals, passing ``None`` and non-finite values through as ``None``."""
    if value is None:
        return None
    number = float(value)
    if not math.isfinite(number):
        return None
    return round(number, 2)


def bytes_to_kb(size: int | float | None) -> float:
    """Convert a byte count to kilobytes rounded to two decimals.

    ``None`` and negative sizes (browsers report ``-1`` for opaque
    cross-origin entries in some APIs) count as zero.
    """
    if not size or size < 0:
        return 0.0
    return round(size / 1024, 2)
