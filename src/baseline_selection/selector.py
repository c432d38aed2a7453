"""Covariate-aware baseline selection with hard gates and soft scoring."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import math
from typing import Sequence

from .matchers import CovariateMatcherRegistry
from .types import (
    UNDEFINED,
    BaselineCandidate,
    ConformanceDetail,
    CovariateDeclaration,
    CovariateProfile,
    SelectionResult,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoredCandidate:
    candidate: BaselineCandidate
    score: int
    details: tuple[ConformanceDetail, ...]


def _recency_key(generated_at: datetime | None) -> float:
    """Sort key placing newer timestamps first and missing timestamps last."""
    if generated_at is None:
        return math.inf
    if generated_at.tzinfo is None:
        generated_at = generated_at.replace(tzinfo=timezone.utc)
    return -generated_at.timestamp()


class BaselineSelector:
    def __init__(self, matchers: CovariateMatcherRegistry | None = None) -> None:
        self.matchers = matchers or CovariateMatcherRegistry.standard()

    def conformance_details(
        self,
        candidate: BaselineCandidate,
        test_profile: CovariateProfile,
        declaration: CovariateDeclaration,
    ) -> tuple[ConformanceDetail, ...]:
        details: list[ConformanceDetail] = []
        for key in declaration.keys:
            baseline_value = candidate.covariate_profile.get(key) or UNDEFINED
            test_value = test_profile.get(key) or UNDEFINED
            details.append(
                ConformanceDetail(
                    covariate_key=key,
                    baseline_value=baseline_value,
                    test_value=test_value,
                    match_result=self.matchers.match(key, baseline_value, test_value),
                )
            )
        return tuple(details)

    def select(
        self,
        candidates: Sequence[BaselineCandidate],
        test_profile: CovariateProfile,
        declaration: CovariateDeclaration,
    ) -> SelectionResult:
        pool = tuple(candidates)
        if not pool:
            return SelectionResult.empty()

        if declaration.is_empty:
            # Nothing to score against: fall back to recency and flag the guess.
            chosen = sorted(pool, key=lambda c: _recency_key(c.generated_at))[0]
            logger.info(
                "No covariates declared; selected most recent baseline %s of %d",
                chosen.filename,
                len(pool),
            )
            return SelectionResult(
                selected=chosen,
                ambiguous=True,
                conformance_details=(),
                candidate_count=len(pool),
                score=0,
            )

        survivors: list[ScoredCandidate] = []
        for candidate in pool:
            details = self.conformance_details(candidate, test_profile, declaration)
            gated = [
                d for d in details if declaration.category_of(d.covariate_key).is_hard_gate and not d.conforms
            ]
            if gated:
                logger.debug(
                    "Baseline %s eliminated by configuration covariate(s): %s",
                    candidate.filename,
                    ", ".join(d.covariate_key for d in gated),
                )
                continue
            score = sum(
                1 for d in details if d.conforms and not declaration.category_of(d.covariate_key).is_hard_gate
            )
            survivors.append(ScoredCandidate(candidate=candidate, score=score, details=details))

        eliminated = len(pool) - len(survivors)
        if not survivors:
            logger.info("All %d baseline candidates eliminated by configuration covariates", len(pool))
            return SelectionResult(
                selected=None,
                ambiguous=False,
                conformance_details=(),
                candidate_count=len(pool),
                eliminated_count=eliminated,
            )

        # Stable sort: equal keys keep their input order.
        ranked = sorted(survivors, key=lambda s: (-s.score, _recency_key(s.candidate.generated_at)))
        best = ranked[0]
        ambiguous = (
            len(ranked) > 1
            and ranked[1].score == best.score
            and _recency_key(ranked[1].candidate.generated_at) == _recency_key(best.candidate.generated_at)
        )
        if ambiguous:
            logger.warning(
                "Ambiguous baseline selection: %s and %s tie on score %d and timestamp",
                best.candidate.filename,
                ranked[1].candidate.filename,
                best.score,
            )
        else:
            logger.info(
                "Selected baseline %s with score %d/%d",
                best.candidate.filename,
                best.score,
                len(best.details),
            )

        return SelectionResult(
            selected=best.candidate,
            ambiguous=ambiguous,
            conformance_details=best.details,
            candidate_count=len(pool),
            eliminated_count=eliminated,
            score=best.score,
        )
