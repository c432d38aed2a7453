"""Typed factor values, validated where raw configuration enters."""

from __future__ import annotations

import math
from typing import Any, Mapping, Union


FactorValue = Union[str, int, float, bool]


class FactorValueError(ValueError):
    """Raised when a factor key or value has an unsupported shape."""


def normalize_factors(raw: Mapping[str, Any] | None) -> dict[str, FactorValue]:
    if raw is None:
        return {}
    factors: dict[str, FactorValue] = {}
    for key, value in raw.items():
        if not isinstance(key, str) or not key.strip():
            raise FactorValueError(f"factor keys must be non-empty strings, got {key!r}")
        if isinstance(value, bool) or isinstance(value, (str, int)):
            factors[key] = value
        elif isinstance(value, float):
            if not math.isfinite(value):
                raise FactorValueError(f"factor '{key}' must be finite, got {value!r}")
            factors[key] = value
        else:
            raise FactorValueError(
                f"factor '{key}' has unsupported type {type(value).__name__}; "
                "expected str, int, float, or bool"
            )
    return factors


def canonical_factor_value(value: FactorValue) -> str:
    # bool is an int subclass, check it first.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    return value
