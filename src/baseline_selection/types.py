"""Core datatypes for covariate-aware baseline selection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
import hashlib
import re
from typing import Any, ClassVar, Iterable, Iterator, Mapping, Union

from .covariates import (
    TIME_WINDOW_KEYS,
    UNDEFINED_TEXT,
    CovariateCategory,
    MatchResult,
    StandardCovariate,
)


VALUE_HASH_LENGTH = 4

_TIME_WINDOW_PATTERN = re.compile(r"^(\d{2}):(\d{2})-(\d{2}):(\d{2})\s+(\S+)$")


class CovariateValue:
    """Closed variant base: StringValue or TimeWindowValue.

    Equality and hashing use the variant plus its canonical string, never the
    underlying fields, so two time windows differing only in seconds are equal.
    """

    __slots__ = ()

    def canonical_string(self) -> str:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CovariateValue):
            return NotImplemented
        return type(self) is type(other) and self.canonical_string() == other.canonical_string()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.canonical_string()))

    def __str__(self) -> str:
        return self.canonical_string()


@dataclass(frozen=True, eq=False)
class StringValue(CovariateValue):
    text: str

    def canonical_string(self) -> str:
        return self.text


@dataclass(frozen=True, eq=False)
class TimeWindowValue(CovariateValue):
    """Wall-clock window in a named zone, held at whole-minute precision."""

    start: time
    end: time
    timezone: str

    def __post_init__(self) -> None:
        if not self.timezone or any(ch.isspace() for ch in self.timezone):
            raise ValueError("timezone must be a non-empty zone identifier")
        object.__setattr__(self, "start", time(self.start.hour, self.start.minute))
        object.__setattr__(self, "end", time(self.end.hour, self.end.minute))

    def canonical_string(self) -> str:
        return f"{self.start:%H:%M}-{self.end:%H:%M} {self.timezone}"

    @property
    def start_minute(self) -> int:
        return self.start.hour * 60 + self.start.minute

    @property
    def end_minute(self) -> int:
        return self.end.hour * 60 + self.end.minute

    @property
    def wraps_midnight(self) -> bool:
        return self.start_minute > self.end_minute

    @classmethod
    def parse(cls, text: str) -> "TimeWindowValue":
        match = _TIME_WINDOW_PATTERN.match(text.strip())
        if match is None:
            raise ValueError(f"Invalid time window '{text}', expected 'HH:MM-HH:MM Zone'")
        start_h, start_m, end_h, end_m, zone = match.groups()
        try:
            start = time(int(start_h), int(start_m))
            end = time(int(end_h), int(end_m))
        except ValueError as exc:
            raise ValueError(f"Invalid time window '{text}': {exc}") from exc
        return cls(start=start, end=end, timezone=zone)


UNDEFINED = StringValue(UNDEFINED_TEXT)


def is_undefined(value: CovariateValue | None) -> bool:
    return value is None or (isinstance(value, StringValue) and value.text == UNDEFINED_TEXT)


def parse_covariate_value(
    key: str,
    text: str,
    time_window_keys: Iterable[str] = TIME_WINDOW_KEYS,
) -> CovariateValue:
    """Rebuild a covariate value from its canonical string.

    Keys listed in ``time_window_keys`` are parsed as time windows when the text
    has that shape; anything else is kept as plain text so older records still
    load and simply fail to conform.
    """
    if key in set(time_window_keys):
        try:
            return TimeWindowValue.parse(text)
        except ValueError:
            return StringValue(text)
    return StringValue(text)


def value_hash(key: str, value: CovariateValue) -> str:
    digest = hashlib.sha256(f"{key}={value.canonical_string()}".encode("utf-8")).hexdigest()
    return digest[:VALUE_HASH_LENGTH]


@dataclass(frozen=True)
class DeclaredCovariate:
    key: str
    category: CovariateCategory

    def __post_init__(self) -> None:
        if not self.key or not self.key.strip():
            raise ValueError("covariate key must be non-empty")
        if not isinstance(self.category, CovariateCategory):
            raise ValueError(f"covariate '{self.key}' has an invalid category: {self.category!r}")


DeclarationItem = Union[DeclaredCovariate, StandardCovariate, str, tuple]


@dataclass(frozen=True)
class CovariateDeclaration:
    """Ordered covariate keys a use case cares about, each with one category."""

    entries: tuple[DeclaredCovariate, ...] = ()

    EMPTY: ClassVar["CovariateDeclaration"]

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for entry in self.entries:
            if entry.key in seen:
                raise ValueError(f"covariate '{entry.key}' is declared more than once")
            seen.add(entry.key)

    @classmethod
    def of(cls, *items: DeclarationItem) -> "CovariateDeclaration":
        return cls(entries=tuple(_declared(item) for item in items))

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(entry.key for entry in self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def category_of(self, key: str) -> CovariateCategory:
        for entry in self.entries:
            if entry.key == key:
                return entry.category
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return any(entry.key == key for entry in self.entries)

    def __iter__(self) -> Iterator[DeclaredCovariate]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def to_dict(self) -> list[dict[str, str]]:
        return [{"key": entry.key, "category": entry.category.value} for entry in self.entries]


CovariateDeclaration.EMPTY = CovariateDeclaration()


def _declared(item: Any) -> DeclaredCovariate:
    if isinstance(item, DeclaredCovariate):
        return item
    if isinstance(item, StandardCovariate):
        return DeclaredCovariate(key=item.key, category=item.category)
    if isinstance(item, tuple) and len(item) == 2:
        key, category = item
        if isinstance(key, StandardCovariate):
            key = key.key
        return DeclaredCovariate(key=str(key), category=CovariateCategory(category))
    if isinstance(item, str):
        standard = StandardCovariate.from_key(item)
        if standard is None:
            raise ValueError(f"custom covariate '{item}' requires an explicit category")
        return DeclaredCovariate(key=standard.key, category=standard.category)
    raise ValueError(f"Unsupported covariate declaration item: {item!r}")


@dataclass(frozen=True)
class CovariateProfile:
    """Resolved covariate values for one execution, in declaration order."""

    entries: tuple[tuple[str, CovariateValue], ...] = ()

    def __post_init__(self) -> None:
        keys = [key for key, _ in self.entries]
        if len(keys) != len(set(keys)):
            raise ValueError("covariate profile keys must be unique")

    @classmethod
    def from_pairs(
        cls,
        pairs: Mapping[str, CovariateValue] | Iterable[tuple[str, CovariateValue]],
    ) -> "CovariateProfile":
        items = pairs.items() if isinstance(pairs, Mapping) else pairs
        return cls(entries=tuple((str(key), value) for key, value in items))

    def get(self, key: str) -> CovariateValue | None:
        for entry_key, value in self.entries:
            if entry_key == key:
                return value
        return None

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(key for key, _ in self.entries)

    def __contains__(self, key: object) -> bool:
        return any(entry_key == key for entry_key, _ in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def value_hashes(self, exclude: Iterable[str] = ()) -> tuple[str, ...]:
        skipped = set(exclude)
        return tuple(value_hash(key, value) for key, value in self.entries if key not in skipped)

    def to_dict(self) -> dict[str, str]:
        return {key: value.canonical_string() for key, value in self.entries}


@dataclass(frozen=True)
class ExecutionSpecification:
    """Empirical statistics recorded with a baseline."""

    use_case_id: str
    samples_executed: int
    successes: int
    samples_planned: int | None = None

    def __post_init__(self) -> None:
        if self.samples_executed <= 0:
            raise ValueError("samples_executed must be positive")
        if not (0 <= self.successes <= self.samples_executed):
            raise ValueError("successes must be within [0, samples_executed]")
        if self.samples_planned is not None and self.samples_planned <= 0:
            raise ValueError("samples_planned must be positive")

    @property
    def failures(self) -> int:
        return self.samples_executed - self.successes

    @property
    def observed_rate(self) -> float:
        return self.successes / self.samples_executed

    def to_dict(self) -> dict[str, Any]:
        return {
            "use_case_id": self.use_case_id,
            "samples_planned": self.samples_planned,
            "samples_executed": self.samples_executed,
            "successes": self.successes,
            "failures": self.failures,
            "observed_rate": self.observed_rate,
        }


@dataclass(frozen=True)
class BaselineCandidate:
    filename: str
    footprint: str
    covariate_profile: CovariateProfile
    generated_at: datetime | None
    execution_specification: ExecutionSpecification

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "footprint": self.footprint,
            "covariates": self.covariate_profile.to_dict(),
            "generated_at": self.generated_at.isoformat() if self.generated_at else None,
            "execution": self.execution_specification.to_dict(),
        }


@dataclass(frozen=True)
class ConformanceDetail:
    covariate_key: str
    baseline_value: CovariateValue
    test_value: CovariateValue
    match_result: MatchResult

    @property
    def conforms(self) -> bool:
        return self.match_result.conforms

    def to_dict(self) -> dict[str, str]:
        return {
            "covariate_key": self.covariate_key,
            "baseline_value": self.baseline_value.canonical_string(),
            "test_value": self.test_value.canonical_string(),
            "match_result": self.match_result.value,
        }


@dataclass(frozen=True)
class SelectionResult:
    """Outcome of baseline selection; no-match and ambiguity are ordinary outcomes."""

    selected: BaselineCandidate | None
    ambiguous: bool
    conformance_details: tuple[ConformanceDetail, ...]
    candidate_count: int
    eliminated_count: int = 0
    score: int | None = None

    @classmethod
    def empty(cls) -> "SelectionResult":
        return cls(selected=None, ambiguous=False, conformance_details=(), candidate_count=0)

    @property
    def has_selection(self) -> bool:
        return self.selected is not None

    @property
    def non_conforming_details(self) -> tuple[ConformanceDetail, ...]:
        return tuple(detail for detail in self.conformance_details if not detail.conforms)

    @property
    def has_non_conformance(self) -> bool:
        return bool(self.non_conforming_details)

    def to_dict(self) -> dict[str, Any]:
        return {
            "selected": self.selected.to_dict() if self.selected is not None else None,
            "ambiguous": self.ambiguous,
            "score": self.score,
            "candidate_count": self.candidate_count,
            "eliminated_count": self.eliminated_count,
            "conformance_details": [detail.to_dict() for detail in self.conformance_details],
            "non_conforming_details": [detail.to_dict() for detail in self.non_conforming_details],
        }
