"""End-to-end baseline lookup: footprint, candidates, profile, selection, threshold."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Mapping, Sequence

from .config import SelectionConfig
from .context import ResolutionContext
from .footprint import compute_footprint
from .matchers import CovariateMatcherRegistry
from .repository import BaselineRepository
from .resolvers import CovariateResolverRegistry, CovariateSource, resolve_profile
from .selector import BaselineSelector
from .thresholds import DerivationContext, DerivedThreshold, ThresholdDeriver
from .types import BaselineCandidate, CovariateDeclaration, CovariateProfile, SelectionResult
from .verdict import Verdict, evaluate_verdict


logger = logging.getLogger(__name__)


class NoCompatibleBaselineError(RuntimeError):
    """Raised by callers that treat a missing baseline as fatal."""

    def __init__(self, use_case_id: str, footprint: str, available_footprints: Sequence[str] = ()) -> None:
        self.use_case_id = use_case_id
        self.footprint = footprint
        self.available_footprints = tuple(available_footprints)
        message = f"No compatible baseline for use case '{use_case_id}' with footprint {footprint}"
        if self.available_footprints:
            message += f"; available footprints: {', '.join(self.available_footprints)}"
        else:
            message += "; no baselines recorded for this use case"
        super().__init__(message)


@dataclass(frozen=True)
class BaselineResolution:
    use_case_id: str
    footprint: str
    profile: CovariateProfile
    selection: SelectionResult
    threshold: DerivedThreshold | None = None

    @property
    def selected(self) -> BaselineCandidate | None:
        return self.selection.selected

    def to_dict(self) -> dict[str, Any]:
        return {
            "use_case_id": self.use_case_id,
            "footprint": self.footprint,
            "profile": self.profile.to_dict(),
            "selection": self.selection.to_dict(),
            "threshold": self.threshold.to_dict() if self.threshold is not None else None,
        }


class BaselineLookup:
    """Wires the repository, registries, selector, and deriver into one flow."""

    def __init__(
        self,
        repository: BaselineRepository,
        config: SelectionConfig | None = None,
        resolvers: CovariateResolverRegistry | None = None,
        matchers: CovariateMatcherRegistry | None = None,
        deriver: ThresholdDeriver | None = None,
    ) -> None:
        self.config = config or SelectionConfig()
        self.repository = repository
        self.resolvers = resolvers or CovariateResolverRegistry.standard(self.config)
        self.selector = BaselineSelector(matchers or CovariateMatcherRegistry.standard(self.config))
        self.deriver = deriver or ThresholdDeriver(
            sla_alpha=self.config.sla_alpha,
            min_sound_confidence=self.config.min_sound_confidence,
        )

    def resolve(
        self,
        use_case_id: str,
        declaration: CovariateDeclaration,
        context: ResolutionContext,
        factors: Mapping[str, Any] | None = None,
        test_samples: int | None = None,
        confidence: float | None = None,
        sources: Mapping[str, CovariateSource] | None = None,
    ) -> BaselineResolution:
        footprint = compute_footprint(use_case_id, factors, declaration)
        candidates = self.repository.find_candidates(use_case_id, footprint)
        profile = resolve_profile(declaration, self.resolvers, context, sources)
        selection = self.selector.select(candidates, profile, declaration)

        threshold = None
        if selection.selected is not None and test_samples is not None:
            execution = selection.selected.execution_specification
            threshold = self.deriver.derive(
                DerivationContext(
                    baseline_rate=execution.observed_rate,
                    baseline_samples=execution.samples_executed,
                    test_samples=test_samples,
                    confidence=self.config.confidence if confidence is None else confidence,
                )
            )
        elif selection.selected is None:
            logger.info("No baseline selected for %s (footprint %s)", use_case_id, footprint)

        return BaselineResolution(
            use_case_id=use_case_id,
            footprint=footprint,
            profile=profile,
            selection=selection,
            threshold=threshold,
        )

    def require_selection(self, resolution: BaselineResolution) -> BaselineCandidate:
        if resolution.selection.selected is None:
            raise NoCompatibleBaselineError(
                resolution.use_case_id,
                resolution.footprint,
                self.repository.available_footprints(resolution.use_case_id),
            )
        return resolution.selection.selected

    def verdict(self, resolution: BaselineResolution, successes: int, samples: int) -> Verdict:
        if resolution.threshold is None:
            raise ValueError("resolution carries no derived threshold")
        return evaluate_verdict(
            successes=successes,
            samples=samples,
            threshold=resolution.threshold.value,
            confidence=resolution.threshold.context.confidence,
        )
