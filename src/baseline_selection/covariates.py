"""Covariate categories, standard covariate keys, and match outcomes."""

from __future__ import annotations

from enum import Enum


UNDEFINED_TEXT = "UNDEFINED"

DEFAULT_TIME_LENIENCY_MINUTES = 30
MINUTES_PER_DAY = 24 * 60

# Day groups use datetime.weekday() numbering (Monday == 0).
DEFAULT_DAY_GROUPS: dict[str, tuple[int, ...]] = {
    "Mo-Fr": (0, 1, 2, 3, 4),
    "Sa-So": (5, 6),
}

REGION_PROPERTY = "PROBCHECK_REGION"
REGION_ENVIRONMENT_KEY = "region"
COVARIATE_OVERRIDE_PREFIX = "PROBCHECK_COVARIATE_"


class CovariateCategory(str, Enum):
    """Matching strictness for a declared covariate."""

    CONFIGURATION = "CONFIGURATION"
    TEMPORAL = "TEMPORAL"
    OPERATIONAL = "OPERATIONAL"
    INFRASTRUCTURE = "INFRASTRUCTURE"
    INFORMATIONAL = "INFORMATIONAL"

    @property
    def is_hard_gate(self) -> bool:
        return self is CovariateCategory.CONFIGURATION

    @property
    def contributes_to_filename(self) -> bool:
        return self is not CovariateCategory.INFORMATIONAL


class MatchResult(str, Enum):
    CONFORMS = "CONFORMS"
    DOES_NOT_CONFORM = "DOES_NOT_CONFORM"

    @property
    def conforms(self) -> bool:
        return self is MatchResult.CONFORMS


class StandardCovariate(Enum):
    """Covariates with built-in resolvers, matchers, and categories."""

    WEEKDAY_VERSUS_WEEKEND = ("weekday_vs_weekend", CovariateCategory.TEMPORAL)
    TIME_OF_DAY = ("time_of_day", CovariateCategory.TEMPORAL)
    REGION = ("region", CovariateCategory.OPERATIONAL)
    TIMEZONE = ("timezone", CovariateCategory.INFRASTRUCTURE)

    def __init__(self, key: str, category: CovariateCategory) -> None:
        self.key = key
        self.category = category

    @classmethod
    def from_key(cls, key: str) -> "StandardCovariate | None":
        for member in cls:
            if member.key == key:
                return member
        return None


STANDARD_COVARIATE_KEYS: tuple[str, ...] = tuple(member.key for member in StandardCovariate)

# Keys whose stored canonical strings are parsed back into time windows.
TIME_WINDOW_KEYS: frozenset[str] = frozenset({StandardCovariate.TIME_OF_DAY.key})
