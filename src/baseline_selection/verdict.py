"""Pass/fail comparison of an observed run against a derived threshold."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any


@dataclass(frozen=True)
class Verdict:
    passed: bool
    successes: int
    samples: int
    observed_rate: float
    threshold: float
    confidence: float

    @property
    def shortfall(self) -> float:
        return max(0.0, self.threshold - self.observed_rate)

    @property
    def false_positive_probability(self) -> float:
        """Chance a failure is a sampling fluke rather than a real regression."""
        return 0.0 if self.passed else 1.0 - self.confidence

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "successes": self.successes,
            "samples": self.samples,
            "observed_rate": self.observed_rate,
            "threshold": self.threshold,
            "confidence": self.confidence,
            "shortfall": self.shortfall,
            "false_positive_probability": self.false_positive_probability,
        }


def evaluate_verdict(successes: int, samples: int, threshold: float, confidence: float) -> Verdict:
    if samples <= 0:
        raise ValueError(f"samples must be positive, got {samples!r}")
    if not (0 <= successes <= samples):
        raise ValueError(f"successes must be within [0, {samples}], got {successes!r}")
    if not math.isfinite(threshold) or not (0.0 <= threshold <= 1.0):
        raise ValueError(f"threshold must be within [0, 1], got {threshold!r}")
    if not math.isfinite(confidence) or not (0.0 < confidence < 1.0):
        raise ValueError(f"confidence must be within (0, 1), got {confidence!r}")
    observed = successes / samples
    return Verdict(
        passed=observed >= threshold,
        successes=successes,
        samples=samples,
        observed_rate=observed,
        threshold=threshold,
        confidence=confidence,
    )
