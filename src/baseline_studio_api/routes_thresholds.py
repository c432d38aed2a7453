"""Threshold derivation, verdict, and sizing endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from baseline_selection.sizing import SLA_SIZING_NOTE, evaluate_feasibility, is_undersized
from baseline_selection.thresholds import DerivationContext
from baseline_selection.verdict import evaluate_verdict

from .deps import get_services
from .models import SizingRequest, ThresholdFirstRequest, ThresholdRequest, VerdictRequest
from .services import AppServices


router = APIRouter(prefix="/api", tags=["thresholds"])


@router.post("/thresholds")
def derive_threshold(request: ThresholdRequest, services: AppServices = Depends(get_services)) -> dict[str, object]:
    try:
        context = DerivationContext(
            baseline_rate=request.baseline_rate,
            baseline_samples=request.baseline_samples,
            test_samples=request.test_samples,
            confidence=services.config.confidence if request.confidence is None else request.confidence,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return services.deriver.derive(context).to_dict()


@router.post("/thresholds/threshold-first")
def derive_threshold_first(
    request: ThresholdFirstRequest,
    services: AppServices = Depends(get_services),
) -> dict[str, object]:
    try:
        derived = services.deriver.derive_threshold_first(
            baseline_successes=request.baseline_successes,
            baseline_samples=request.baseline_samples,
            test_samples=request.test_samples,
            threshold=request.threshold,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return derived.to_dict()


@router.post("/verdicts")
def verdict(request: VerdictRequest, services: AppServices = Depends(get_services)) -> dict[str, object]:
    try:
        result = evaluate_verdict(
            successes=request.successes,
            samples=request.samples,
            threshold=request.threshold,
            confidence=services.config.confidence if request.confidence is None else request.confidence,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return result.to_dict()


@router.post("/sizing")
def sizing(request: SizingRequest, services: AppServices = Depends(get_services)) -> dict[str, object]:
    confidence = services.config.confidence if request.confidence is None else request.confidence
    alpha = services.config.sla_alpha if request.alpha is None else request.alpha
    try:
        feasibility = evaluate_feasibility(request.samples, request.target, confidence)
        undersized = is_undersized(request.samples, request.target, alpha)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    payload = feasibility.to_dict()
    payload["undersized"] = undersized
    payload["note"] = SLA_SIZING_NOTE if undersized else None
    return payload
