"""Selection and derivation defaults."""

from __future__ import annotations

from dataclasses import dataclass, field

from .covariates import DEFAULT_DAY_GROUPS, DEFAULT_TIME_LENIENCY_MINUTES, REGION_PROPERTY


def _default_day_groups() -> tuple[tuple[str, tuple[int, ...]], ...]:
    return tuple((label, days) for label, days in DEFAULT_DAY_GROUPS.items())


@dataclass(frozen=True)
class SelectionConfig:
    """Configurable controls shared by resolvers, matchers, and the deriver."""

    # Derivation
    confidence: float = 0.95
    sla_alpha: float = 0.001
    min_sound_confidence: float = 0.80

    # Resolution
    timezone: str = "UTC"
    day_groups: tuple[tuple[str, tuple[int, ...]], ...] = field(default_factory=_default_day_groups)
    region_property: str = REGION_PROPERTY

    # Matching
    time_leniency_minutes: int = DEFAULT_TIME_LENIENCY_MINUTES

    def __post_init__(self) -> None:
        if not (0.0 < self.confidence < 1.0):
            raise ValueError("confidence must be within (0, 1)")
        if not (0.0 < self.sla_alpha < 1.0):
            raise ValueError("sla_alpha must be within (0, 1)")
        if not (0.0 < self.min_sound_confidence < 1.0):
            raise ValueError("min_sound_confidence must be within (0, 1)")
        if not self.timezone.strip():
            raise ValueError("timezone must be non-empty")
        if self.time_leniency_minutes < 0:
            raise ValueError("time_leniency_minutes must be >= 0")
        if not self.region_property.strip():
            raise ValueError("region_property must be non-empty")
        labels = [label for label, _ in self.day_groups]
        if len(labels) != len(set(labels)):
            raise ValueError("day group labels must be unique")
        claimed: set[int] = set()
        for label, days in self.day_groups:
            if not days:
                raise ValueError(f"day group '{label}' must contain at least one weekday")
            for day in days:
                if not (0 <= day <= 6):
                    raise ValueError(f"day group '{label}' has invalid weekday {day}")
                if day in claimed:
                    raise ValueError(f"weekday {day} belongs to more than one day group")
                claimed.add(day)

    def day_group_map(self) -> dict[str, tuple[int, ...]]:
        return {label: tuple(days) for label, days in self.day_groups}
