"""Service container helpers for FastAPI app state."""

from __future__ import annotations

from dataclasses import dataclass

from baseline_selection.config import SelectionConfig
from baseline_selection.lookup import BaselineLookup
from baseline_selection.repository import BaselineRepository
from baseline_selection.thresholds import ThresholdDeriver

from .settings import AppSettings


@dataclass
class AppServices:
    settings: AppSettings
    config: SelectionConfig
    repository: BaselineRepository
    lookup: BaselineLookup
    deriver: ThresholdDeriver

    @classmethod
    def build(cls, settings: AppSettings) -> "AppServices":
        config = settings.selection_config()
        repository = BaselineRepository(settings.baselines_dir, schema_path=settings.schema_path)
        lookup = BaselineLookup(repository, config=config)
        return cls(
            settings=settings,
            config=config,
            repository=repository,
            lookup=lookup,
            deriver=lookup.deriver,
        )
