"""Minimum pass-rate derivation from baseline statistics."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math
from typing import Any

from .proportions import standard_error, wilson_lower_bound, z_one_sided
from .sizing import DEFAULT_SLA_ALPHA, is_undersized


STATISTICALLY_SOUND_CONFIDENCE = 0.80

# Bisection bounds for implied confidence; 0.5 corresponds to z == 0.
_IMPLIED_CONFIDENCE_MINIMUM = 0.01
_IMPLIED_CONFIDENCE_FLOOR = 0.5
_IMPLIED_CONFIDENCE_CEILING = 1.0 - 1e-9
_BISECTION_STEPS = 100


class OperationalApproach(str, Enum):
    SAMPLE_SIZE_FIRST = "SAMPLE_SIZE_FIRST"
    THRESHOLD_FIRST = "THRESHOLD_FIRST"


@dataclass(frozen=True)
class DerivationContext:
    """Validated inputs for threshold derivation; never clamps bad values."""

    baseline_rate: float
    baseline_samples: int
    test_samples: int
    confidence: float

    def __post_init__(self) -> None:
        if isinstance(self.baseline_rate, bool) or not isinstance(self.baseline_rate, (int, float)):
            raise ValueError(f"Baseline rate must be a number, got {self.baseline_rate!r}")
        if not math.isfinite(self.baseline_rate) or not (0.0 <= self.baseline_rate <= 1.0):
            raise ValueError(f"Baseline rate must be within [0, 1], got {self.baseline_rate!r}")
        if isinstance(self.baseline_samples, bool) or not isinstance(self.baseline_samples, int):
            raise ValueError(f"Baseline samples must be an integer, got {self.baseline_samples!r}")
        if self.baseline_samples <= 0:
            raise ValueError(f"Baseline samples must be positive, got {self.baseline_samples}")
        if isinstance(self.test_samples, bool) or not isinstance(self.test_samples, int):
            raise ValueError(f"Test samples must be an integer, got {self.test_samples!r}")
        if self.test_samples <= 0:
            raise ValueError(f"Test samples must be positive, got {self.test_samples}")
        if isinstance(self.confidence, bool) or not isinstance(self.confidence, (int, float)):
            raise ValueError(f"Confidence must be a number, got {self.confidence!r}")
        if not math.isfinite(self.confidence) or not (0.0 < self.confidence < 1.0):
            raise ValueError(f"Confidence must be within (0, 1), got {self.confidence!r}")

    @classmethod
    def from_counts(
        cls,
        baseline_successes: int,
        baseline_samples: int,
        test_samples: int,
        confidence: float,
    ) -> "DerivationContext":
        if baseline_samples <= 0:
            raise ValueError(f"Baseline samples must be positive, got {baseline_samples}")
        if not (0 <= baseline_successes <= baseline_samples):
            raise ValueError(
                f"Baseline successes must be within [0, {baseline_samples}], got {baseline_successes}"
            )
        return cls(
            baseline_rate=baseline_successes / baseline_samples,
            baseline_samples=baseline_samples,
            test_samples=test_samples,
            confidence=confidence,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "baseline_rate": self.baseline_rate,
            "baseline_samples": self.baseline_samples,
            "test_samples": self.test_samples,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class DerivedThreshold:
    value: float
    approach: OperationalApproach
    context: DerivationContext
    baseline_floor: float
    baseline_standard_error: float
    test_standard_error: float
    undersized: bool = False
    min_sound_confidence: float = STATISTICALLY_SOUND_CONFIDENCE

    @property
    def combined_standard_error(self) -> float:
        return math.hypot(self.baseline_standard_error, self.test_standard_error)

    @property
    def gap_from_baseline(self) -> float:
        return self.context.baseline_rate - self.value

    @property
    def is_statistically_sound(self) -> bool:
        return self.context.confidence >= self.min_sound_confidence

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": self.value,
            "approach": self.approach.value,
            "context": self.context.to_dict(),
            "baseline_floor": self.baseline_floor,
            "baseline_standard_error": self.baseline_standard_error,
            "test_standard_error": self.test_standard_error,
            "combined_standard_error": self.combined_standard_error,
            "gap_from_baseline": self.gap_from_baseline,
            "statistically_sound": self.is_statistically_sound,
            "undersized": self.undersized,
        }


def minimum_pass_rate(floor: float, test_samples: int, confidence: float) -> float:
    """Smallest observed rate over ``test_samples`` that rejects 'true rate < floor'.

    Normal-approximation one-sided binomial test with the floor as the
    hypothesised rate, clamped to [0, 1].
    """
    z = z_one_sided(confidence)
    value = floor - z * standard_error(floor, test_samples)
    return min(1.0, max(0.0, value))


class ThresholdDeriver:
    def __init__(
        self,
        sla_alpha: float = DEFAULT_SLA_ALPHA,
        min_sound_confidence: float = STATISTICALLY_SOUND_CONFIDENCE,
    ) -> None:
        if not (0.0 < sla_alpha < 1.0):
            raise ValueError("sla_alpha must be within (0, 1)")
        if not (0.0 < min_sound_confidence < 1.0):
            raise ValueError("min_sound_confidence must be within (0, 1)")
        self.sla_alpha = sla_alpha
        self.min_sound_confidence = min_sound_confidence

    def _threshold_at(self, context: DerivationContext) -> tuple[float, float]:
        floor = wilson_lower_bound(context.baseline_rate, context.baseline_samples, context.confidence)
        return minimum_pass_rate(floor, context.test_samples, context.confidence), floor

    def _build(
        self,
        value: float,
        floor: float,
        context: DerivationContext,
        approach: OperationalApproach,
    ) -> DerivedThreshold:
        return DerivedThreshold(
            value=value,
            approach=approach,
            context=context,
            baseline_floor=floor,
            baseline_standard_error=standard_error(context.baseline_rate, context.baseline_samples),
            test_standard_error=standard_error(floor, context.test_samples),
            undersized=is_undersized(context.test_samples, context.baseline_rate, self.sla_alpha),
            min_sound_confidence=self.min_sound_confidence,
        )

    def derive(self, context: DerivationContext) -> DerivedThreshold:
        value, floor = self._threshold_at(context)
        return self._build(value, floor, context, OperationalApproach.SAMPLE_SIZE_FIRST)

    def derive_from_counts(
        self,
        baseline_successes: int,
        baseline_samples: int,
        test_samples: int,
        confidence: float,
    ) -> DerivedThreshold:
        return self.derive(
            DerivationContext.from_counts(baseline_successes, baseline_samples, test_samples, confidence)
        )

    def implied_confidence(
        self,
        baseline_rate: float,
        baseline_samples: int,
        test_samples: int,
        threshold: float,
    ) -> float:
        """Confidence at which sample-size-first derivation would yield ``threshold``.

        The derived threshold falls as confidence rises, so bisection over
        [0.5, 1) finds it. Thresholds at or above the baseline rate search
        [0.01, 0.5] instead, where z is negative.
        """
        if not math.isfinite(threshold) or not (0.0 <= threshold <= 1.0):
            raise ValueError(f"Explicit threshold must be within [0, 1], got {threshold!r}")

        def derived(confidence: float) -> float:
            context = DerivationContext(baseline_rate, baseline_samples, test_samples, confidence)
            return self._threshold_at(context)[0]

        if threshold >= baseline_rate:
            low, high = _IMPLIED_CONFIDENCE_MINIMUM, _IMPLIED_CONFIDENCE_FLOOR
            if threshold >= derived(low):
                return low
        else:
            low, high = _IMPLIED_CONFIDENCE_FLOOR, _IMPLIED_CONFIDENCE_CEILING
            if threshold <= derived(high):
                return high
        for _ in range(_BISECTION_STEPS):
            middle = (low + high) / 2.0
            if derived(middle) > threshold:
                low = middle
            else:
                high = middle
            if high - low < 1e-12:
                break
        return (low + high) / 2.0

    def derive_threshold_first(
        self,
        baseline_successes: int,
        baseline_samples: int,
        test_samples: int,
        threshold: float,
    ) -> DerivedThreshold:
        if not math.isfinite(threshold) or not (0.0 <= threshold <= 1.0):
            raise ValueError(f"Explicit threshold must be within [0, 1], got {threshold!r}")
        probe = DerivationContext.from_counts(baseline_successes, baseline_samples, test_samples, 0.5)
        confidence = self.implied_confidence(probe.baseline_rate, baseline_samples, test_samples, threshold)
        context = DerivationContext(probe.baseline_rate, baseline_samples, test_samples, confidence)
        floor = wilson_lower_bound(context.baseline_rate, context.baseline_samples, confidence)
        return self._build(threshold, floor, context, OperationalApproach.THRESHOLD_FIRST)
