"""Injectable clock and environment for covariate resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import os
from types import MappingProxyType
from typing import Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


@dataclass(frozen=True)
class ResolutionContext:
    """Everything a resolver may read: time, zone, and environment maps.

    Resolvers never consult a global clock or ``os.environ`` directly, so a fixed
    context always resolves to the same profile.
    """

    now: datetime
    timezone_id: str = "UTC"
    experiment_start: datetime | None = None
    experiment_end: datetime | None = None
    system_properties: Mapping[str, str] = field(default_factory=dict)
    environment: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("now", "experiment_start", "experiment_end"):
            moment = getattr(self, name)
            if moment is not None and moment.tzinfo is None:
                raise ValueError(f"{name} must be timezone-aware")
        if (self.experiment_start is None) != (self.experiment_end is None):
            raise ValueError("experiment_start and experiment_end must be given together")
        if self.experiment_start is not None and self.experiment_end < self.experiment_start:
            raise ValueError("experiment_end must not precede experiment_start")
        if not self.timezone_id.strip():
            raise ValueError("timezone_id must be non-empty")
        try:
            ZoneInfo(self.timezone_id)
        except ZoneInfoNotFoundError as exc:
            raise ValueError(f"Unknown timezone '{self.timezone_id}'") from exc
        object.__setattr__(self, "system_properties", MappingProxyType(dict(self.system_properties)))
        object.__setattr__(self, "environment", MappingProxyType(dict(self.environment)))

    @classmethod
    def current(
        cls,
        timezone_id: str = "UTC",
        environment: Mapping[str, str] | None = None,
        experiment_start: datetime | None = None,
        experiment_end: datetime | None = None,
    ) -> "ResolutionContext":
        return cls(
            now=datetime.now(timezone.utc),
            timezone_id=timezone_id,
            experiment_start=experiment_start,
            experiment_end=experiment_end,
            system_properties=dict(os.environ),
            environment=dict(environment or {}),
        )

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone_id)

    @property
    def has_experiment_window(self) -> bool:
        return self.experiment_start is not None and self.experiment_end is not None

    def local_now(self) -> datetime:
        return self.now.astimezone(self.zone)

    def system_property(self, name: str) -> str | None:
        value = self.system_properties.get(name)
        if value is None or not value.strip():
            return None
        return value.strip()

    def environment_value(self, key: str) -> str | None:
        value = self.environment.get(key)
        if value is None or not value.strip():
            return None
        return value.strip()
