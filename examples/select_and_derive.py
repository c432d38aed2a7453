"""Example baseline selection and threshold derivation against a scratch baseline directory."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import json
import logging
from pathlib import Path
import tempfile

from baseline_selection import (
    BaselineLookup,
    BaselineRepository,
    CovariateCategory,
    CovariateDeclaration,
    CovariateProfile,
    ExecutionSpecification,
    ResolutionContext,
    StringValue,
    compute_footprint,
)


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    factors = {"model": "gpt-4o", "temperature": 0.2}
    declaration = CovariateDeclaration.of(
        ("llm_provider", CovariateCategory.CONFIGURATION),
        "region",
        "weekday_vs_weekend",
    )
    footprint = compute_footprint("ShoppingUseCase", factors, declaration)
    now = datetime(2026, 1, 7, 14, 30, tzinfo=timezone.utc)

    with tempfile.TemporaryDirectory() as tmp:
        repository = BaselineRepository(Path(tmp))
        for region, successes, age in (("EU", 870, 3), ("US", 910, 1)):
            repository.write_baseline(
                ExecutionSpecification(use_case_id="ShoppingUseCase", samples_executed=1000, successes=successes),
                footprint=footprint,
                profile=CovariateProfile.from_pairs(
                    {
                        "llm_provider": StringValue("openai"),
                        "region": StringValue(region),
                        "weekday_vs_weekend": StringValue("Mo-Fr"),
                    }
                ),
                declaration=declaration,
                generated_at=now - timedelta(days=age),
                factors=factors,
            )

        lookup = BaselineLookup(repository)
        context = ResolutionContext(now=now, environment={"region": "EU", "llm_provider": "openai"})
        resolution = lookup.resolve("ShoppingUseCase", declaration, context, factors=factors, test_samples=100)
        print(json.dumps(resolution.to_dict(), indent=2))

        verdict = lookup.verdict(resolution, successes=84, samples=100)
        print(json.dumps(verdict.to_dict(), indent=2))


if __name__ == "__main__":
    main()
