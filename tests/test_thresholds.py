from __future__ import annotations

import math
import unittest

from baseline_selection.proportions import (
    one_sided_p_value,
    standard_error,
    wilson_interval,
    wilson_lower_bound,
    z_one_sided,
    z_test_statistic,
)
from baseline_selection.thresholds import (
    DerivationContext,
    OperationalApproach,
    ThresholdDeriver,
    minimum_pass_rate,
)


class DerivationContextTest(unittest.TestCase):
    def test_valid_context(self) -> None:
        context = DerivationContext(baseline_rate=0.87, baseline_samples=1000, test_samples=100, confidence=0.95)
        self.assertEqual(context.baseline_samples, 1000)

    def test_invalid_inputs_fail_fast(self) -> None:
        cases = [
            ({"baseline_rate": -0.01}, "Baseline rate"),
            ({"baseline_rate": 1.01}, "Baseline rate"),
            ({"baseline_rate": float("nan")}, "Baseline rate"),
            ({"baseline_samples": 0}, "Baseline samples"),
            ({"test_samples": -5}, "Test samples"),
            ({"confidence": 0.0}, "Confidence"),
            ({"confidence": 1.0}, "Confidence"),
        ]
        for override, message in cases:
            kwargs = {"baseline_rate": 0.9, "baseline_samples": 100, "test_samples": 50, "confidence": 0.95}
            kwargs.update(override)
            with self.subTest(override=override):
                with self.assertRaises(ValueError) as ctx:
                    DerivationContext(**kwargs)
                self.assertIn(message, str(ctx.exception))

    def test_from_counts(self) -> None:
        context = DerivationContext.from_counts(951, 1000, 100, 0.95)
        self.assertAlmostEqual(context.baseline_rate, 0.951)
        with self.assertRaises(ValueError):
            DerivationContext.from_counts(1100, 1000, 100, 0.95)
        with self.assertRaises(ValueError):
            DerivationContext.from_counts(0, 0, 100, 0.95)


class ThresholdDeriverTest(unittest.TestCase):
    def setUp(self) -> None:
        self.deriver = ThresholdDeriver()

    def test_reference_scenario_lies_strictly_below_baseline(self) -> None:
        derived = self.deriver.derive(DerivationContext(0.87, 1000, 100, 0.95))
        self.assertGreater(derived.value, 0.0)
        self.assertLess(derived.value, 0.87)
        self.assertLess(derived.value, derived.baseline_floor)
        self.assertLess(derived.baseline_floor, 0.87)
        self.assertAlmostEqual(derived.value, 0.795, delta=0.01)
        self.assertEqual(derived.approach, OperationalApproach.SAMPLE_SIZE_FIRST)
        self.assertGreater(derived.gap_from_baseline, 0.0)
        self.assertTrue(derived.is_statistically_sound)
        self.assertFalse(derived.undersized)

    def test_standard_error_reported(self) -> None:
        derived = self.deriver.derive(DerivationContext(0.87, 1000, 100, 0.95))
        self.assertAlmostEqual(derived.baseline_standard_error, math.sqrt(0.87 * 0.13 / 1000))
        self.assertGreater(derived.combined_standard_error, derived.test_standard_error)

    def test_boundary_rates_are_finite(self) -> None:
        for rate in (0.0, 1.0):
            with self.subTest(rate=rate):
                derived = self.deriver.derive(DerivationContext(rate, 1000, 100, 0.95))
                self.assertEqual(derived.baseline_standard_error, 0.0)
                self.assertTrue(math.isfinite(derived.value))
                self.assertTrue(math.isfinite(derived.test_standard_error))
                self.assertGreaterEqual(derived.value, 0.0)
                self.assertLessEqual(derived.value, 1.0)

    def test_perfect_baseline_does_not_demand_perfection(self) -> None:
        derived = self.deriver.derive(DerivationContext(1.0, 1000, 100, 0.95))
        self.assertLess(derived.value, 1.0)
        self.assertGreater(derived.value, 0.98)
        self.assertAlmostEqual(derived.baseline_floor, 1000 / (1000 + z_one_sided(0.95) ** 2))

    def test_zero_baseline_yields_zero_threshold(self) -> None:
        self.assertEqual(self.deriver.derive(DerivationContext(0.0, 50, 10, 0.9)).value, 0.0)

    def test_smaller_test_runs_are_looser(self) -> None:
        small = self.deriver.derive(DerivationContext(0.9, 1000, 10, 0.95)).value
        medium = self.deriver.derive(DerivationContext(0.9, 1000, 100, 0.95)).value
        self.assertLess(small, medium)

    def test_large_test_runs_converge_to_floor(self) -> None:
        derived = self.deriver.derive(DerivationContext(0.9, 1000, 10_000_000, 0.95))
        self.assertAlmostEqual(derived.value, derived.baseline_floor, delta=0.001)

    def test_higher_confidence_is_more_conservative(self) -> None:
        at95 = self.deriver.derive_from_counts(951, 1000, 100, 0.95).value
        at99 = self.deriver.derive_from_counts(951, 1000, 100, 0.99).value
        self.assertLess(at99, at95)

    def test_larger_baseline_raises_threshold(self) -> None:
        small = self.deriver.derive_from_counts(95, 100, 50, 0.95).value
        large = self.deriver.derive_from_counts(9500, 10000, 50, 0.95).value
        self.assertGreater(large, small)

    def test_derivation_is_deterministic(self) -> None:
        context = DerivationContext(0.87, 1000, 100, 0.95)
        self.assertEqual(self.deriver.derive(context), self.deriver.derive(context))

    def test_undersized_flag_for_very_high_rates(self) -> None:
        derived = self.deriver.derive(DerivationContext(0.999, 10000, 100, 0.95))
        self.assertTrue(derived.undersized)

    def test_minimum_pass_rate_clamps(self) -> None:
        self.assertEqual(minimum_pass_rate(0.01, 1, 0.99), 0.0)


class ThresholdFirstTest(unittest.TestCase):
    def setUp(self) -> None:
        self.deriver = ThresholdDeriver()

    def test_implied_confidence_recovers_derivation(self) -> None:
        derived = self.deriver.derive_from_counts(951, 1000, 100, 0.95)
        result = self.deriver.derive_threshold_first(951, 1000, 100, derived.value)
        self.assertEqual(result.value, derived.value)
        self.assertEqual(result.approach, OperationalApproach.THRESHOLD_FIRST)
        self.assertAlmostEqual(result.context.confidence, 0.95, places=5)
        self.assertTrue(result.is_statistically_sound)

    def test_threshold_at_or_above_baseline_is_unsound(self) -> None:
        at_baseline = self.deriver.derive_threshold_first(951, 1000, 100, 0.951)
        self.assertFalse(at_baseline.is_statistically_sound)
        self.assertLess(at_baseline.context.confidence, 0.8)
        above = self.deriver.derive_threshold_first(900, 1000, 100, 0.95)
        self.assertFalse(above.is_statistically_sound)

    def test_implied_confidence_above_baseline_keeps_falling(self) -> None:
        near = self.deriver.implied_confidence(0.9, 1000, 100, 0.92)
        far = self.deriver.implied_confidence(0.9, 1000, 100, 0.95)
        self.assertLess(near, 0.5)
        self.assertLess(far, near)
        self.assertGreater(far, 0.01)
        self.assertAlmostEqual(self.deriver.implied_confidence(0.9, 1000, 100, 1.0), 0.01)

    def test_explicit_threshold_validated(self) -> None:
        for bad in (-0.1, 1.5):
            with self.assertRaises(ValueError) as ctx:
                self.deriver.derive_threshold_first(951, 1000, 100, bad)
            self.assertIn("Explicit threshold", str(ctx.exception))


class ProportionTest(unittest.TestCase):
    def test_standard_error(self) -> None:
        self.assertAlmostEqual(standard_error(0.5, 100), 0.05)
        self.assertEqual(standard_error(0.0, 10), 0.0)
        self.assertEqual(standard_error(1.0, 10), 0.0)
        with self.assertRaises(ValueError):
            standard_error(0.5, 0)

    def test_wilson_interval(self) -> None:
        estimate = wilson_interval(0.5, 100, 0.95)
        self.assertTrue(estimate.contains(0.5))
        self.assertAlmostEqual(estimate.lower, 0.4038, delta=0.001)
        self.assertAlmostEqual(estimate.upper, 0.5962, delta=0.001)

    def test_wilson_lower_bound_edges(self) -> None:
        self.assertEqual(wilson_lower_bound(0.0, 10, 0.95), 0.0)
        self.assertLess(wilson_lower_bound(1.0, 10, 0.95), 1.0)

    def test_z_test(self) -> None:
        self.assertAlmostEqual(z_test_statistic(0.9, 0.8, 100), 2.5)
        self.assertEqual(z_test_statistic(0.9, 1.0, 100), 0.0)
        self.assertAlmostEqual(one_sided_p_value(z_one_sided(0.95)), 0.05, places=6)


if __name__ == "__main__":
    unittest.main()
