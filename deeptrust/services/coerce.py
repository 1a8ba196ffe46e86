"""
coerce.py: Permissive readers for model-supplied JSON values.

A field counts as missing when it is absent, null, or not a number.
Zero is a real value and is kept.
"""

import math
from typing import Any


def as_number(value: Any) -> float | None:
    """Return `value` as a finite float, or None if it isn't numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def number_or(value: Any, fallback: float) -> float:
    number = as_number(value)
    return fallback if number is None else number


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def as_text(value: Any, fallback: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return fallback
