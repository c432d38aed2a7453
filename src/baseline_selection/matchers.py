"""Covariate matchers and the matcher registry."""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Mapping

from .config import SelectionConfig
from .covariates import DEFAULT_TIME_LENIENCY_MINUTES, MINUTES_PER_DAY, MatchResult, StandardCovariate
from .types import CovariateValue, StringValue, TimeWindowValue, is_undefined


Matcher = Callable[[CovariateValue, CovariateValue], MatchResult]


def _result(conforms: bool) -> MatchResult:
    return MatchResult.CONFORMS if conforms else MatchResult.DOES_NOT_CONFORM


class ExactStringMatcher:
    """Canonical-string equality. UNDEFINED never conforms, not even to itself."""

    def __init__(self, case_sensitive: bool = True) -> None:
        self.case_sensitive = case_sensitive

    def __call__(self, baseline: CovariateValue, test: CovariateValue) -> MatchResult:
        if is_undefined(baseline) or is_undefined(test):
            return MatchResult.DOES_NOT_CONFORM
        if type(baseline) is not type(test):
            return MatchResult.DOES_NOT_CONFORM
        left = baseline.canonical_string()
        right = test.canonical_string()
        if not self.case_sensitive:
            left, right = left.casefold(), right.casefold()
        return _result(left == right)


class GroupLabelMatcher:
    def __call__(self, baseline: CovariateValue, test: CovariateValue) -> MatchResult:
        if not isinstance(baseline, StringValue) or not isinstance(test, StringValue):
            return MatchResult.DOES_NOT_CONFORM
        if is_undefined(baseline) or is_undefined(test):
            return MatchResult.DOES_NOT_CONFORM
        return _result(baseline.text == test.text)


def window_contains(window: TimeWindowValue, minute: int, leniency_minutes: int) -> bool:
    """True when ``minute`` lies in [start - L, end + L], wrapping past midnight."""
    span = (window.end_minute - window.start_minute) % MINUTES_PER_DAY
    lenient_span = span + 2 * leniency_minutes
    if lenient_span >= MINUTES_PER_DAY:
        return True
    offset = (minute - (window.start_minute - leniency_minutes)) % MINUTES_PER_DAY
    return offset <= lenient_span


class TimeWindowMatcher:
    """Conforms when the test window's start falls inside the widened baseline window."""

    def __init__(self, leniency_minutes: int = DEFAULT_TIME_LENIENCY_MINUTES) -> None:
        if leniency_minutes < 0:
            raise ValueError("leniency_minutes must be >= 0")
        self.leniency_minutes = leniency_minutes

    def __call__(self, baseline: CovariateValue, test: CovariateValue) -> MatchResult:
        if not isinstance(baseline, TimeWindowValue) or not isinstance(test, TimeWindowValue):
            return MatchResult.DOES_NOT_CONFORM
        # Wall-clock minutes are only comparable within one zone.
        if baseline.timezone != test.timezone:
            return MatchResult.DOES_NOT_CONFORM
        return _result(window_contains(baseline, test.start_minute, self.leniency_minutes))


class CovariateMatcherRegistry:
    """Read-only key -> matcher map with an exact-string default."""

    def __init__(
        self,
        matchers: Mapping[str, Matcher] | None = None,
        default: Matcher | None = None,
    ) -> None:
        self._matchers: Mapping[str, Matcher] = MappingProxyType(dict(matchers or {}))
        self.default: Matcher = default or ExactStringMatcher()

    @classmethod
    def standard(cls, config: SelectionConfig | None = None) -> "CovariateMatcherRegistry":
        cfg = config or SelectionConfig()
        return cls(
            {
                StandardCovariate.WEEKDAY_VERSUS_WEEKEND.key: GroupLabelMatcher(),
                StandardCovariate.TIME_OF_DAY.key: TimeWindowMatcher(cfg.time_leniency_minutes),
                StandardCovariate.REGION.key: ExactStringMatcher(case_sensitive=False),
                StandardCovariate.TIMEZONE.key: ExactStringMatcher(),
            }
        )

    def with_matcher(self, key: str, matcher: Matcher) -> "CovariateMatcherRegistry":
        if not key:
            raise ValueError("matcher key must be non-empty")
        merged = dict(self._matchers)
        merged[key] = matcher
        return CovariateMatcherRegistry(merged, default=self.default)

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(self._matchers)

    def matcher_for(self, key: str) -> Matcher:
        return self._matchers.get(key, self.default)

    def match(self, key: str, baseline: CovariateValue, test: CovariateValue) -> MatchResult:
        return self.matcher_for(key)(baseline, test)
