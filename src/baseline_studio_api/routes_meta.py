"""Metadata endpoints describing covariates, categories, and defaults."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from baseline_selection.covariates import CovariateCategory, StandardCovariate

from .deps import get_services
from .services import AppServices


router = APIRouter(prefix="/api", tags=["meta"])


CATEGORY_HELP: dict[str, str] = {
    "CONFIGURATION": "Hard gate: a mismatch disqualifies the baseline outright.",
    "TEMPORAL": "Time-related conditions such as weekday grouping or time of day.",
    "OPERATIONAL": "Deployment conditions such as region.",
    "INFRASTRUCTURE": "Platform conditions such as the configured timezone.",
    "INFORMATIONAL": "Recorded and scored, but never part of baseline filenames.",
}


@router.get("/meta/covariates")
def covariates(services: AppServices = Depends(get_services)) -> dict[str, object]:
    matchers = services.lookup.selector.matchers
    return {
        "standard_covariates": [
            {
                "key": member.key,
                "category": member.category.value,
                "matcher": type(matchers.matcher_for(member.key)).__name__,
            }
            for member in StandardCovariate
        ],
        "categories": {
            category.value: {
                "hard_gate": category.is_hard_gate,
                "description": CATEGORY_HELP[category.value],
            }
            for category in CovariateCategory
        },
        "defaults": {
            "confidence": services.config.confidence,
            "timezone": services.config.timezone,
            "time_leniency_minutes": services.config.time_leniency_minutes,
            "sla_alpha": services.config.sla_alpha,
            "day_groups": services.config.day_group_map(),
        },
    }
