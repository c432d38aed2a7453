"""Covariate resolvers and the resolver registry."""

from __future__ import annotations

from datetime import datetime, time
import logging
import re
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

from .config import SelectionConfig
from .context import ResolutionContext
from .covariates import (
    COVARIATE_OVERRIDE_PREFIX,
    DEFAULT_DAY_GROUPS,
    REGION_ENVIRONMENT_KEY,
    REGION_PROPERTY,
    StandardCovariate,
)
from .types import (
    UNDEFINED,
    CovariateDeclaration,
    CovariateProfile,
    CovariateValue,
    StringValue,
    TimeWindowValue,
    parse_covariate_value,
)


logger = logging.getLogger(__name__)

Resolver = Callable[[ResolutionContext], CovariateValue]
CovariateSource = Callable[[], Any]


def property_name(key: str) -> str:
    """Environment-style spelling of a covariate key: ``llm.model`` -> ``LLM_MODEL``."""
    return re.sub(r"[.\-]", "_", key).upper()


def _minute(moment: datetime) -> time:
    return time(moment.hour, moment.minute)


class DayGroupResolver:
    """Classifies the zone-local date of ``now`` into a named weekday group."""

    def __init__(self, groups: Mapping[str, Iterable[int]] | None = None) -> None:
        source = DEFAULT_DAY_GROUPS if groups is None else groups
        self.groups: tuple[tuple[str, frozenset[int]], ...] = tuple(
            (label, frozenset(days)) for label, days in source.items()
        )

    def __call__(self, context: ResolutionContext) -> CovariateValue:
        weekday = context.local_now().weekday()
        for label, days in self.groups:
            if weekday in days:
                return StringValue(label)
        return UNDEFINED


class TimeOfDayResolver:
    def __call__(self, context: ResolutionContext) -> CovariateValue:
        zone = context.zone
        if context.has_experiment_window:
            start = context.experiment_start.astimezone(zone)
            end = context.experiment_end.astimezone(zone)
        else:
            start = end = context.now.astimezone(zone)
        return TimeWindowValue(start=_minute(start), end=_minute(end), timezone=context.timezone_id)


class TimezoneResolver:
    def __call__(self, context: ResolutionContext) -> CovariateValue:
        return StringValue(context.timezone_id)


class RegionResolver:
    def __init__(
        self,
        property_key: str = REGION_PROPERTY,
        environment_key: str = REGION_ENVIRONMENT_KEY,
    ) -> None:
        self.property_key = property_key
        self.environment_key = environment_key

    def __call__(self, context: ResolutionContext) -> CovariateValue:
        value = context.system_property(self.property_key) or context.environment_value(self.environment_key)
        return StringValue(value) if value else UNDEFINED


class CustomCovariateResolver:
    """Fallback for unregistered keys: system property, then framework environment."""

    def __init__(self, key: str) -> None:
        self.key = key

    def __call__(self, context: ResolutionContext) -> CovariateValue:
        for name in (self.key, property_name(self.key)):
            value = context.system_property(name)
            if value:
                return StringValue(value)
        value = context.environment_value(self.key)
        if value:
            return StringValue(value)
        return UNDEFINED


class CovariateResolverRegistry:
    """Read-only key -> resolver map; ``with_resolver`` returns an extended copy."""

    def __init__(self, resolvers: Mapping[str, Resolver] | None = None) -> None:
        self._resolvers: Mapping[str, Resolver] = MappingProxyType(dict(resolvers or {}))

    @classmethod
    def standard(cls, config: SelectionConfig | None = None) -> "CovariateResolverRegistry":
        cfg = config or SelectionConfig()
        return cls(
            {
                StandardCovariate.WEEKDAY_VERSUS_WEEKEND.key: DayGroupResolver(cfg.day_group_map()),
                StandardCovariate.TIME_OF_DAY.key: TimeOfDayResolver(),
                StandardCovariate.REGION.key: RegionResolver(property_key=cfg.region_property),
                StandardCovariate.TIMEZONE.key: TimezoneResolver(),
            }
        )

    def with_resolver(self, key: str, resolver: Resolver) -> "CovariateResolverRegistry":
        if not key:
            raise ValueError("resolver key must be non-empty")
        merged = dict(self._resolvers)
        if key in merged:
            logger.debug("Overriding covariate resolver for key %s", key)
        merged[key] = resolver
        return CovariateResolverRegistry(merged)

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(self._resolvers)

    def is_registered(self, key: str) -> bool:
        return key in self._resolvers

    def resolver_for(self, key: str) -> Resolver:
        resolver = self._resolvers.get(key)
        if resolver is None:
            return CustomCovariateResolver(key)
        return resolver

    def resolve(self, key: str, context: ResolutionContext) -> CovariateValue:
        return self.resolver_for(key)(context)


def _source_value(key: str, raw: Any) -> CovariateValue | None:
    if raw is None:
        return None
    if isinstance(raw, CovariateValue):
        return raw
    text = str(raw).strip()
    if not text:
        return None
    return parse_covariate_value(key, text)


def resolve_profile(
    declaration: CovariateDeclaration,
    registry: CovariateResolverRegistry,
    context: ResolutionContext,
    sources: Mapping[str, CovariateSource] | None = None,
) -> CovariateProfile:
    """Resolve every declared key, in declaration order.

    Per key the first hit wins: a caller-supplied source, then the
    ``PROBCHECK_COVARIATE_<KEY>`` system property, then the registry.
    """
    sources = sources or {}
    pairs: list[tuple[str, CovariateValue]] = []
    for key in declaration.keys:
        value: CovariateValue | None = None
        source = sources.get(key)
        if source is not None:
            try:
                value = _source_value(key, source())
            except Exception as exc:
                logger.debug("Covariate source for %s failed: %s", key, exc)
                value = None
        if value is None:
            override = context.system_property(COVARIATE_OVERRIDE_PREFIX + property_name(key))
            if override:
                value = parse_covariate_value(key, override)
        if value is None:
            value = registry.resolve(key, context)
        pairs.append((key, value))
    return CovariateProfile(entries=tuple(pairs))
