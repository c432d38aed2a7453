"""Baseline listing and covariate-aware selection endpoints."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query

from baseline_selection.context import ResolutionContext
from baseline_selection.covariates import CovariateCategory, StandardCovariate
from baseline_selection.factors import normalize_factors
from baseline_selection.types import CovariateDeclaration, DeclaredCovariate

from .deps import get_services
from .models import BaselineListResponse, DeclaredCovariateModel, SelectionRequest
from .services import AppServices


router = APIRouter(prefix="/api", tags=["baselines"])


def _declaration(items: list[DeclaredCovariateModel]) -> CovariateDeclaration:
    entries: list[DeclaredCovariate] = []
    for item in items:
        category: CovariateCategory | None = item.category
        if category is None:
            standard = StandardCovariate.from_key(item.key)
            if standard is None:
                raise ValueError(f"custom covariate '{item.key}' requires an explicit category")
            category = standard.category
        entries.append(DeclaredCovariate(key=item.key, category=category))
    return CovariateDeclaration(entries=tuple(entries))


@router.get("/baselines", response_model=BaselineListResponse)
def list_baselines(
    use_case_id: str = Query(min_length=1),
    services: AppServices = Depends(get_services),
) -> BaselineListResponse:
    candidates = services.repository.find_all(use_case_id)
    return BaselineListResponse(
        use_case_id=use_case_id,
        footprints=sorted({c.footprint for c in candidates}),
        baselines=[c.to_dict() for c in candidates],
    )


@router.post("/selection")
def select_baseline(request: SelectionRequest, services: AppServices = Depends(get_services)) -> dict[str, object]:
    try:
        declaration = _declaration(request.declaration)
        factors = normalize_factors(request.factors)
        context = ResolutionContext(
            now=request.now or datetime.now(timezone.utc),
            timezone_id=request.timezone or services.settings.timezone_id,
            experiment_start=request.experiment_start,
            experiment_end=request.experiment_end,
            environment=request.environment,
        )
        sources = {key: (lambda value=value: value) for key, value in request.covariates.items()}
        resolution = services.lookup.resolve(
            use_case_id=request.use_case_id,
            declaration=declaration,
            context=context,
            factors=factors,
            test_samples=request.test_samples,
            confidence=request.confidence,
            sources=sources,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    payload = resolution.to_dict()
    if resolution.selected is None:
        payload["available_footprints"] = services.repository.available_footprints(request.use_case_id)
    return payload
