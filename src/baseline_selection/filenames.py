"""Baseline file naming: ``{useCase}-{fp4}[-{valueHash4}]*.yaml``."""

from __future__ import annotations

from dataclasses import dataclass
import re

from .types import CovariateDeclaration, CovariateProfile, value_hash


BASELINE_EXTENSIONS: tuple[str, ...] = (".yaml", ".yml")
FOOTPRINT_PREFIX_LENGTH = 4

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def sanitize_use_case_id(use_case_id: str) -> str:
    if not use_case_id:
        raise ValueError("use_case_id must be non-empty")
    return _UNSAFE_CHARS.sub("_", use_case_id)


def filename_covariate_hashes(
    profile: CovariateProfile,
    declaration: CovariateDeclaration | None = None,
) -> tuple[str, ...]:
    """Value hashes in profile order, skipping INFORMATIONAL covariates."""
    hashes: list[str] = []
    for key, value in profile.entries:
        if declaration is not None and key in declaration:
            if not declaration.category_of(key).contributes_to_filename:
                continue
        hashes.append(value_hash(key, value))
    return tuple(hashes)


def baseline_filename(
    use_case_id: str,
    footprint: str,
    profile: CovariateProfile | None = None,
    declaration: CovariateDeclaration | None = None,
) -> str:
    if len(footprint) < FOOTPRINT_PREFIX_LENGTH:
        raise ValueError(f"footprint '{footprint}' is too short")
    parts = [sanitize_use_case_id(use_case_id), footprint[:FOOTPRINT_PREFIX_LENGTH]]
    if profile is not None:
        parts.extend(filename_covariate_hashes(profile, declaration))
    return "-".join(parts) + BASELINE_EXTENSIONS[0]


@dataclass(frozen=True)
class ParsedBaselineFilename:
    use_case_name: str
    footprint_prefix: str
    covariate_hashes: tuple[str, ...]

    @property
    def has_covariates(self) -> bool:
        return bool(self.covariate_hashes)


def parse_baseline_filename(filename: str, use_case_id: str | None = None) -> ParsedBaselineFilename:
    """Split a baseline filename into its parts.

    Sanitised use-case names may themselves contain ``-``; pass ``use_case_id``
    to strip a known prefix, otherwise the first segment is taken as the name.
    """
    stem = None
    for extension in BASELINE_EXTENSIONS:
        if filename.endswith(extension):
            stem = filename[: -len(extension)]
            break
    if stem is None:
        raise ValueError(f"'{filename}' is not a baseline file")

    if use_case_id is not None:
        name = sanitize_use_case_id(use_case_id)
        if not stem.startswith(name + "-"):
            raise ValueError(f"'{filename}' does not belong to use case '{use_case_id}'")
        rest = stem[len(name) + 1 :].split("-")
    else:
        name, _, remainder = stem.partition("-")
        rest = remainder.split("-") if remainder else []

    if not rest or not rest[0]:
        raise ValueError(f"'{filename}' has no footprint segment")
    return ParsedBaselineFilename(
        use_case_name=name,
        footprint_prefix=rest[0],
        covariate_hashes=tuple(part for part in rest[1:] if part),
    )
