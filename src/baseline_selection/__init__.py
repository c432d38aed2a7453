"""Covariate-aware baseline selection and threshold derivation."""

from .config import SelectionConfig
from .context import ResolutionContext
from .covariates import CovariateCategory, MatchResult, StandardCovariate
from .footprint import compute_footprint
from .lookup import BaselineLookup, BaselineResolution, NoCompatibleBaselineError
from .matchers import CovariateMatcherRegistry
from .repository import BaselineLoadError, BaselineRepository
from .resolvers import CovariateResolverRegistry, resolve_profile
from .selector import BaselineSelector
from .thresholds import DerivationContext, DerivedThreshold, ThresholdDeriver
from .types import (
    UNDEFINED,
    BaselineCandidate,
    ConformanceDetail,
    CovariateDeclaration,
    CovariateProfile,
    CovariateValue,
    ExecutionSpecification,
    SelectionResult,
    StringValue,
    TimeWindowValue,
)
from .verdict import Verdict, evaluate_verdict

__all__ = [
    "UNDEFINED",
    "BaselineCandidate",
    "BaselineLoadError",
    "BaselineLookup",
    "BaselineRepository",
    "BaselineResolution",
    "BaselineSelector",
    "ConformanceDetail",
    "CovariateCategory",
    "CovariateDeclaration",
    "CovariateMatcherRegistry",
    "CovariateProfile",
    "CovariateResolverRegistry",
    "CovariateValue",
    "DerivationContext",
    "DerivedThreshold",
    "ExecutionSpecification",
    "MatchResult",
    "NoCompatibleBaselineError",
    "ResolutionContext",
    "SelectionConfig",
    "SelectionResult",
    "StandardCovariate",
    "StringValue",
    "ThresholdDeriver",
    "TimeWindowValue",
    "Verdict",
    "compute_footprint",
    "evaluate_verdict",
    "resolve_profile",
]
