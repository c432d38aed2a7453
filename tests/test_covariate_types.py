from __future__ import annotations

from datetime import time
import unittest

from baseline_selection.covariates import CovariateCategory, StandardCovariate
from baseline_selection.types import (
    UNDEFINED,
    CovariateDeclaration,
    CovariateProfile,
    DeclaredCovariate,
    StringValue,
    TimeWindowValue,
    is_undefined,
    parse_covariate_value,
    value_hash,
)


class CovariateValueTest(unittest.TestCase):
    def test_time_window_canonical_form(self) -> None:
        value = TimeWindowValue(time(14, 30), time(14, 45), "Europe/London")
        self.assertEqual(value.canonical_string(), "14:30-14:45 Europe/London")

    def test_time_window_equality_ignores_seconds(self) -> None:
        a = TimeWindowValue(time(8, 15, 30), time(9, 0, 59), "UTC")
        b = TimeWindowValue(time(8, 15), time(9, 0), "UTC")
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))

    def test_variants_never_equal_even_with_same_text(self) -> None:
        window = TimeWindowValue(time(8, 0), time(9, 0), "UTC")
        text = StringValue(window.canonical_string())
        self.assertNotEqual(window, text)

    def test_parse_round_trips_canonical_string(self) -> None:
        value = TimeWindowValue.parse("23:00-01:15 America/New_York")
        self.assertEqual(value.start, time(23, 0))
        self.assertEqual(value.end, time(1, 15))
        self.assertEqual(value.timezone, "America/New_York")
        self.assertTrue(value.wraps_midnight)

    def test_parse_requires_timezone(self) -> None:
        with self.assertRaises(ValueError):
            TimeWindowValue.parse("14:30-14:45")
        with self.assertRaises(ValueError):
            TimeWindowValue.parse("25:00-14:45 UTC")

    def test_parse_covariate_value_degrades_to_text(self) -> None:
        self.assertIsInstance(parse_covariate_value("time_of_day", "09:00-10:00 UTC"), TimeWindowValue)
        self.assertEqual(parse_covariate_value("time_of_day", "morning"), StringValue("morning"))
        self.assertEqual(parse_covariate_value("region", "09:00-10:00 UTC"), StringValue("09:00-10:00 UTC"))

    def test_undefined_sentinel(self) -> None:
        self.assertTrue(is_undefined(UNDEFINED))
        self.assertTrue(is_undefined(None))
        self.assertFalse(is_undefined(StringValue("EU")))


class CovariateDeclarationTest(unittest.TestCase):
    def test_standard_keys_carry_builtin_categories(self) -> None:
        declaration = CovariateDeclaration.of(StandardCovariate.REGION, "time_of_day")
        self.assertEqual(declaration.keys, ("region", "time_of_day"))
        self.assertEqual(declaration.category_of("region"), CovariateCategory.OPERATIONAL)
        self.assertEqual(declaration.category_of("time_of_day"), CovariateCategory.TEMPORAL)

    def test_standard_key_category_can_be_overridden(self) -> None:
        declaration = CovariateDeclaration.of((StandardCovariate.REGION, CovariateCategory.CONFIGURATION))
        self.assertEqual(declaration.category_of("region"), CovariateCategory.CONFIGURATION)

    def test_custom_key_requires_explicit_category(self) -> None:
        with self.assertRaises(ValueError):
            CovariateDeclaration.of("llm_model")
        declaration = CovariateDeclaration.of(("llm_model", CovariateCategory.CONFIGURATION))
        self.assertEqual(declaration.category_of("llm_model"), CovariateCategory.CONFIGURATION)

    def test_duplicate_keys_rejected(self) -> None:
        with self.assertRaises(ValueError):
            CovariateDeclaration.of("region", ("region", CovariateCategory.CONFIGURATION))

    def test_empty_constant(self) -> None:
        self.assertTrue(CovariateDeclaration.EMPTY.is_empty)
        self.assertEqual(CovariateDeclaration(), CovariateDeclaration.EMPTY)
        self.assertEqual(len(CovariateDeclaration.EMPTY), 0)

    def test_declared_covariate_rejects_blank_key(self) -> None:
        with self.assertRaises(ValueError):
            DeclaredCovariate(key=" ", category=CovariateCategory.TEMPORAL)


class CovariateProfileTest(unittest.TestCase):
    def test_preserves_insertion_order(self) -> None:
        profile = CovariateProfile.from_pairs(
            [("timezone", StringValue("UTC")), ("region", StringValue("EU")), ("a_key", StringValue("x"))]
        )
        self.assertEqual(profile.keys, ("timezone", "region", "a_key"))
        self.assertEqual(list(profile.to_dict()), ["timezone", "region", "a_key"])

    def test_value_hashes_are_four_hex_chars(self) -> None:
        profile = CovariateProfile.from_pairs({"region": StringValue("EU")})
        hashes = profile.value_hashes()
        self.assertEqual(len(hashes), 1)
        self.assertEqual(len(hashes[0]), 4)
        self.assertEqual(hashes[0], value_hash("region", StringValue("EU")))
        self.assertNotEqual(hashes[0], value_hash("region", StringValue("US")))

    def test_get_missing_key(self) -> None:
        profile = CovariateProfile.from_pairs({"region": StringValue("EU")})
        self.assertIsNone(profile.get("timezone"))
        self.assertIn("region", profile)

    def test_duplicate_keys_rejected(self) -> None:
        with self.assertRaises(ValueError):
            CovariateProfile(entries=(("region", StringValue("EU")), ("region", StringValue("US"))))


if __name__ == "__main__":
    unittest.main()
