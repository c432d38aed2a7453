"""Sample sizing diagnostics: feasibility, SLA sizing, and power-based sample sizes."""

from __future__ import annotations

from dataclasses import dataclass
import math
from statistics import NormalDist

from .proportions import wilson_lower_bound, z_one_sided


DEFAULT_SLA_ALPHA = 0.001
SLA_SIZING_NOTE = "sample not sized for SLA verification"
FEASIBILITY_CRITERION = "wilson_one_sided_lower_bound_of_perfect_run"

_STANDARD_NORMAL = NormalDist()


def _check_target(target: float) -> None:
    if not math.isfinite(target) or not (0.0 < target < 1.0):
        raise ValueError(f"target must be within (0, 1), got {target!r}")


def minimum_samples(target: float, confidence: float) -> int:
    """Smallest n whose all-success Wilson lower bound reaches ``target``."""
    _check_target(target)
    z = z_one_sided(confidence)
    return max(1, math.ceil(target * z * z / (1.0 - target)))


@dataclass(frozen=True)
class FeasibilityResult:
    feasible: bool
    samples: int
    minimum_samples: int
    target: float
    confidence: float
    criterion: str = FEASIBILITY_CRITERION

    def to_dict(self) -> dict[str, object]:
        return {
            "feasible": self.feasible,
            "samples": self.samples,
            "minimum_samples": self.minimum_samples,
            "target": self.target,
            "confidence": self.confidence,
            "criterion": self.criterion,
        }


def evaluate_feasibility(samples: int, target: float, confidence: float) -> FeasibilityResult:
    """Can ``samples`` trials ever demonstrate ``target`` at ``confidence``?"""
    if samples <= 0:
        raise ValueError(f"samples must be positive, got {samples!r}")
    _check_target(target)
    best_case = wilson_lower_bound(1.0, samples, confidence)
    return FeasibilityResult(
        feasible=best_case >= target,
        samples=samples,
        minimum_samples=minimum_samples(target, confidence),
        target=target,
        confidence=confidence,
    )


def is_undersized(samples: int, target: float, alpha: float = DEFAULT_SLA_ALPHA) -> bool:
    """Informational flag: even a perfect run of ``samples`` cannot clear ``target``.

    Targets outside (0, 1) have nothing to verify and are never flagged.
    """
    if not math.isfinite(alpha) or not (0.0 < alpha < 1.0):
        raise ValueError(f"SLA alpha must be within (0, 1), got {alpha!r}")
    if samples <= 0 or not math.isfinite(target) or not (0.0 < target < 1.0):
        return False
    return wilson_lower_bound(1.0, samples, 1.0 - alpha) < target


@dataclass(frozen=True)
class SampleSizeRequirement:
    required_samples: int
    baseline_rate: float
    alternative_rate: float
    min_detectable_effect: float
    confidence: float
    power: float

    def to_dict(self) -> dict[str, object]:
        return {
            "required_samples": self.required_samples,
            "baseline_rate": self.baseline_rate,
            "alternative_rate": self.alternative_rate,
            "min_detectable_effect": self.min_detectable_effect,
            "confidence": self.confidence,
            "power": self.power,
        }


def _check_effect(baseline_rate: float, min_detectable_effect: float) -> float:
    if not (0.0 < baseline_rate < 1.0):
        raise ValueError(f"baseline_rate must be within (0, 1), got {baseline_rate!r}")
    if not (0.0 < min_detectable_effect < baseline_rate):
        raise ValueError("min_detectable_effect must be within (0, baseline_rate)")
    return baseline_rate - min_detectable_effect


def required_samples(
    baseline_rate: float,
    min_detectable_effect: float,
    confidence: float = 0.95,
    power: float = 0.80,
) -> SampleSizeRequirement:
    """n = ((z_a*s0 + z_b*s1) / delta)^2 for detecting a drop of ``min_detectable_effect``."""
    alternative = _check_effect(baseline_rate, min_detectable_effect)
    if not (0.0 < power < 1.0):
        raise ValueError(f"power must be within (0, 1), got {power!r}")
    z_alpha = z_one_sided(confidence)
    z_beta = _STANDARD_NORMAL.inv_cdf(power)
    sigma0 = math.sqrt(baseline_rate * (1.0 - baseline_rate))
    sigma1 = math.sqrt(alternative * (1.0 - alternative))
    n = ((z_alpha * sigma0 + z_beta * sigma1) / min_detectable_effect) ** 2
    return SampleSizeRequirement(
        required_samples=max(1, math.ceil(n)),
        baseline_rate=baseline_rate,
        alternative_rate=alternative,
        min_detectable_effect=min_detectable_effect,
        confidence=confidence,
        power=power,
    )


def achieved_power(
    baseline_rate: float,
    min_detectable_effect: float,
    samples: int,
    confidence: float = 0.95,
) -> float:
    alternative = _check_effect(baseline_rate, min_detectable_effect)
    if samples <= 0:
        raise ValueError(f"samples must be positive, got {samples!r}")
    z_alpha = z_one_sided(confidence)
    sigma0 = math.sqrt(baseline_rate * (1.0 - baseline_rate))
    sigma1 = math.sqrt(alternative * (1.0 - alternative))
    return _STANDARD_NORMAL.cdf((min_detectable_effect * math.sqrt(samples) - z_alpha * sigma0) / sigma1)
