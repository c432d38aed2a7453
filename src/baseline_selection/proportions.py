"""Binomial proportion estimation: normal-approximation SE and Wilson score bounds."""

from __future__ import annotations

from dataclasses import dataclass
import math
from statistics import NormalDist


_STANDARD_NORMAL = NormalDist()


def _check_rate(rate: float, name: str = "rate") -> None:
    if not math.isfinite(rate) or not (0.0 <= rate <= 1.0):
        raise ValueError(f"{name} must be within [0, 1], got {rate!r}")


def _check_samples(samples: int, name: str = "samples") -> None:
    if samples <= 0:
        raise ValueError(f"{name} must be positive, got {samples!r}")


def _check_confidence(confidence: float) -> None:
    if not math.isfinite(confidence) or not (0.0 < confidence < 1.0):
        raise ValueError(f"confidence must be within (0, 1), got {confidence!r}")


def z_one_sided(confidence: float) -> float:
    _check_confidence(confidence)
    return _STANDARD_NORMAL.inv_cdf(confidence)


def z_two_sided(confidence: float) -> float:
    _check_confidence(confidence)
    return _STANDARD_NORMAL.inv_cdf(1.0 - (1.0 - confidence) / 2.0)


def standard_error(rate: float, samples: int) -> float:
    """sqrt(p(1-p)/n), exactly zero at p in {0, 1}."""
    _check_rate(rate)
    _check_samples(samples)
    if rate in (0.0, 1.0):
        return 0.0
    return math.sqrt(rate * (1.0 - rate) / samples)


def _wilson_center_margin(rate: float, samples: int, z: float) -> tuple[float, float]:
    z_squared = z * z
    denominator = 1.0 + z_squared / samples
    center = (rate + z_squared / (2.0 * samples)) / denominator
    spread = rate * (1.0 - rate) / samples + z_squared / (4.0 * samples * samples)
    margin = z * math.sqrt(max(0.0, spread)) / denominator
    return center, margin


def wilson_lower_bound(rate: float, samples: int, confidence: float) -> float:
    """One-sided Wilson score lower bound for the true success probability."""
    _check_rate(rate)
    _check_samples(samples)
    z = z_one_sided(confidence)
    if rate == 0.0:
        return 0.0
    center, margin = _wilson_center_margin(rate, samples, z)
    return min(1.0, max(0.0, center - margin))


@dataclass(frozen=True)
class ProportionEstimate:
    rate: float
    samples: int
    lower: float
    upper: float
    confidence: float

    @property
    def width(self) -> float:
        return self.upper - self.lower

    def contains(self, value: float) -> bool:
        return self.lower <= value <= self.upper


def wilson_interval(rate: float, samples: int, confidence: float) -> ProportionEstimate:
    """Two-sided Wilson score interval."""
    _check_rate(rate)
    _check_samples(samples)
    center, margin = _wilson_center_margin(rate, samples, z_two_sided(confidence))
    return ProportionEstimate(
        rate=rate,
        samples=samples,
        lower=max(0.0, center - margin),
        upper=min(1.0, center + margin),
        confidence=confidence,
    )


def z_test_statistic(observed_rate: float, hypothesized_rate: float, samples: int) -> float:
    _check_rate(observed_rate, "observed_rate")
    _check_rate(hypothesized_rate, "hypothesized_rate")
    _check_samples(samples)
    se = standard_error(hypothesized_rate, samples)
    if se == 0.0:
        return 0.0
    return (observed_rate - hypothesized_rate) / se


def one_sided_p_value(z: float) -> float:
    """Upper-tail probability P(Z >= z)."""
    return 1.0 - _STANDARD_NORMAL.cdf(z)
