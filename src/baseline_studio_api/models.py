"""Pydantic request/response contracts for Baseline Studio APIs."""

from __future__ import annotations

from datetime import datetime
from typing import Union

from pydantic import BaseModel, Field

from baseline_selection.covariates import CovariateCategory


FactorInput = Union[bool, int, float, str]


class DeclaredCovariateModel(BaseModel):
    key: str = Field(min_length=1)
    category: CovariateCategory | None = None


class SelectionRequest(BaseModel):
    use_case_id: str = Field(min_length=1)
    factors: dict[str, FactorInput] = Field(default_factory=dict)
    declaration: list[DeclaredCovariateModel] = Field(default_factory=list)
    now: datetime | None = None
    experiment_start: datetime | None = None
    experiment_end: datetime | None = None
    timezone: str | None = None
    environment: dict[str, str] = Field(default_factory=dict)
    covariates: dict[str, str] = Field(default_factory=dict)
    test_samples: int | None = None
    confidence: float | None = None


class ThresholdRequest(BaseModel):
    baseline_rate: float
    baseline_samples: int
    test_samples: int
    confidence: float | None = None


class ThresholdFirstRequest(BaseModel):
    baseline_successes: int
    baseline_samples: int
    test_samples: int
    threshold: float


class VerdictRequest(BaseModel):
    successes: int
    samples: int
    threshold: float
    confidence: float | None = None


class SizingRequest(BaseModel):
    samples: int
    target: float
    confidence: float | None = None
    alpha: float | None = None


class BaselineListResponse(BaseModel):
    use_case_id: str
    footprints: list[str]
    baselines: list[dict[str, object]]
