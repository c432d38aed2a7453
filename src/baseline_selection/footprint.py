"""Footprint hashing for use case + factor configuration + covariate declaration."""

from __future__ import annotations

import hashlib
from typing import Any, Mapping

from .factors import canonical_factor_value, normalize_factors
from .types import CovariateDeclaration


FOOTPRINT_LENGTH = 8


def compute_footprint(
    use_case_id: str,
    factors: Mapping[str, Any] | None = None,
    declaration: CovariateDeclaration | None = None,
) -> str:
    """Return the 8-hex-char footprint.

    Factors are hashed sorted by key so insertion order never matters; declared
    covariate keys are hashed in declaration order, which does matter. Absent
    factors and an absent declaration hash the same as empty ones.
    """
    if not use_case_id or not use_case_id.strip():
        raise ValueError("use_case_id must be non-empty")
    normalized = normalize_factors(factors)
    declared = declaration or CovariateDeclaration.EMPTY

    lines = [f"usecase:{use_case_id}\n"]
    for key in sorted(normalized):
        lines.append(f"factor:{key}={canonical_factor_value(normalized[key])}\n")
    for key in declared.keys:
        lines.append(f"covariate:{key}\n")

    digest = hashlib.sha256("".join(lines).encode("utf-8")).hexdigest()
    return digest[:FOOTPRINT_LENGTH]
