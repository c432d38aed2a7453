from __future__ import annotations

from datetime import datetime, timezone
import unittest

from baseline_selection.config import SelectionConfig
from baseline_selection.context import ResolutionContext
from baseline_selection.covariates import CovariateCategory, StandardCovariate
from baseline_selection.resolvers import (
    CovariateResolverRegistry,
    CustomCovariateResolver,
    DayGroupResolver,
    TimeOfDayResolver,
    property_name,
    resolve_profile,
)
from baseline_selection.types import UNDEFINED, CovariateDeclaration, StringValue, TimeWindowValue


def _context(**kwargs) -> ResolutionContext:
    kwargs.setdefault("now", datetime(2026, 1, 7, 14, 30, 12, tzinfo=timezone.utc))
    return ResolutionContext(**kwargs)


class ResolutionContextTest(unittest.TestCase):
    def test_rejects_naive_now(self) -> None:
        with self.assertRaises(ValueError):
            ResolutionContext(now=datetime(2026, 1, 7, 14, 30))

    def test_rejects_half_open_experiment_window(self) -> None:
        with self.assertRaises(ValueError):
            _context(experiment_start=datetime(2026, 1, 7, 14, 0, tzinfo=timezone.utc))

    def test_rejects_unknown_timezone(self) -> None:
        with self.assertRaises(ValueError):
            _context(timezone_id="Mars/Olympus_Mons")


class TimeOfDayResolverTest(unittest.TestCase):
    def test_zero_width_window_from_now_truncated_to_minute(self) -> None:
        value = TimeOfDayResolver()(_context(timezone_id="Europe/London"))
        self.assertIsInstance(value, TimeWindowValue)
        self.assertEqual(value.canonical_string(), "14:30-14:30 Europe/London")

    def test_repeat_resolution_within_same_minute_is_identical(self) -> None:
        resolver = TimeOfDayResolver()
        first = resolver(_context(now=datetime(2026, 1, 7, 9, 5, 1, tzinfo=timezone.utc)))
        second = resolver(_context(now=datetime(2026, 1, 7, 9, 5, 59, tzinfo=timezone.utc)))
        self.assertEqual(first.canonical_string(), second.canonical_string())

    def test_experiment_window_in_configured_zone(self) -> None:
        context = _context(
            timezone_id="Europe/Zurich",
            experiment_start=datetime(2026, 1, 7, 13, 0, 45, tzinfo=timezone.utc),
            experiment_end=datetime(2026, 1, 7, 13, 42, 10, tzinfo=timezone.utc),
        )
        value = TimeOfDayResolver()(context)
        self.assertEqual(value.canonical_string(), "14:00-14:42 Europe/Zurich")


class DayGroupResolverTest(unittest.TestCase):
    def test_weekday_and_weekend(self) -> None:
        resolver = DayGroupResolver()
        wednesday = _context(now=datetime(2026, 1, 7, 12, 0, tzinfo=timezone.utc))
        saturday = _context(now=datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc))
        self.assertEqual(resolver(wednesday), StringValue("Mo-Fr"))
        self.assertEqual(resolver(saturday), StringValue("Sa-So"))

    def test_uses_zone_adjusted_date(self) -> None:
        # Friday 23:30 UTC is already Saturday in Tokyo.
        moment = datetime(2026, 1, 9, 23, 30, tzinfo=timezone.utc)
        resolver = DayGroupResolver()
        self.assertEqual(resolver(_context(now=moment)), StringValue("Mo-Fr"))
        self.assertEqual(resolver(_context(now=moment, timezone_id="Asia/Tokyo")), StringValue("Sa-So"))

    def test_day_outside_groups_is_undefined(self) -> None:
        resolver = DayGroupResolver({"Mid-week": (2,)})
        self.assertEqual(resolver(_context(now=datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc))), UNDEFINED)


class CustomResolverTest(unittest.TestCase):
    def test_system_property_wins_over_environment(self) -> None:
        context = _context(
            system_properties={"llm.model": "gpt-4o"},
            environment={"llm.model": "claude"},
        )
        self.assertEqual(CustomCovariateResolver("llm.model")(context), StringValue("gpt-4o"))

    def test_env_style_property_name(self) -> None:
        self.assertEqual(property_name("llm.model-id"), "LLM_MODEL_ID")
        context = _context(system_properties={"LLM_MODEL_ID": "gpt-4o"})
        self.assertEqual(CustomCovariateResolver("llm.model-id")(context), StringValue("gpt-4o"))

    def test_framework_environment_then_undefined(self) -> None:
        resolver = CustomCovariateResolver("temperature")
        self.assertEqual(resolver(_context(environment={"temperature": "0.2"})), StringValue("0.2"))
        self.assertEqual(resolver(_context()), UNDEFINED)


class ResolverRegistryTest(unittest.TestCase):
    def test_standard_registry_covers_standard_keys(self) -> None:
        registry = CovariateResolverRegistry.standard()
        for member in StandardCovariate:
            self.assertTrue(registry.is_registered(member.key))

    def test_later_registration_overrides(self) -> None:
        registry = CovariateResolverRegistry.standard().with_resolver("region", lambda ctx: StringValue("APAC"))
        self.assertEqual(registry.resolve("region", _context()), StringValue("APAC"))

    def test_with_resolver_leaves_source_registry_untouched(self) -> None:
        base_registry = CovariateResolverRegistry.standard()
        base_registry.with_resolver("region", lambda ctx: StringValue("APAC"))
        self.assertEqual(base_registry.resolve("region", _context()), UNDEFINED)

    def test_region_reads_property_then_environment(self) -> None:
        registry = CovariateResolverRegistry.standard(SelectionConfig())
        self.assertEqual(registry.resolve("region", _context(environment={"region": "EU"})), StringValue("EU"))
        context = _context(system_properties={"PROBCHECK_REGION": "US"}, environment={"region": "EU"})
        self.assertEqual(registry.resolve("region", context), StringValue("US"))


class ResolveProfileTest(unittest.TestCase):
    def test_profile_follows_declaration_order(self) -> None:
        declaration = CovariateDeclaration.of(
            "timezone",
            ("llm_model", CovariateCategory.CONFIGURATION),
            "region",
        )
        context = _context(timezone_id="Europe/London", environment={"region": "EU", "llm_model": "m1"})
        profile = resolve_profile(declaration, CovariateResolverRegistry.standard(), context)
        self.assertEqual(profile.keys, ("timezone", "llm_model", "region"))
        self.assertEqual(profile.to_dict(), {"timezone": "Europe/London", "llm_model": "m1", "region": "EU"})

    def test_source_then_override_then_registry(self) -> None:
        declaration = CovariateDeclaration.of("region", "time_of_day")
        context = _context(
            system_properties={
                "PROBCHECK_COVARIATE_REGION": "US",
                "PROBCHECK_COVARIATE_TIME_OF_DAY": "08:00-09:00 UTC",
            },
            environment={"region": "EU"},
        )
        registry = CovariateResolverRegistry.standard()

        profile = resolve_profile(declaration, registry, context)
        self.assertEqual(profile.get("region"), StringValue("US"))
        self.assertIsInstance(profile.get("time_of_day"), TimeWindowValue)

        sourced = resolve_profile(declaration, registry, context, sources={"region": lambda: "APAC"})
        self.assertEqual(sourced.get("region"), StringValue("APAC"))

    def test_blank_source_falls_through(self) -> None:
        declaration = CovariateDeclaration.of("region")
        context = _context(environment={"region": "EU"})
        profile = resolve_profile(
            declaration, CovariateResolverRegistry.standard(), context, sources={"region": lambda: "  "}
        )
        self.assertEqual(profile.get("region"), StringValue("EU"))

    def test_failing_source_falls_through(self) -> None:
        def failing_source() -> str:
            raise RuntimeError("source unavailable")

        declaration = CovariateDeclaration.of("region")
        context = _context(environment={"region": "EU"})
        profile = resolve_profile(
            declaration, CovariateResolverRegistry.standard(), context, sources={"region": failing_source}
        )
        self.assertEqual(profile.get("region"), StringValue("EU"))

        overridden = _context(
            system_properties={"PROBCHECK_COVARIATE_REGION": "US"}, environment={"region": "EU"}
        )
        profile = resolve_profile(
            declaration, CovariateResolverRegistry.standard(), overridden, sources={"region": failing_source}
        )
        self.assertEqual(profile.get("region"), StringValue("US"))

    def test_repeat_resolution_is_stable(self) -> None:
        declaration = CovariateDeclaration.of("weekday_vs_weekend", "time_of_day", "timezone", "region")
        context = _context(environment={"region": "EU"})
        registry = CovariateResolverRegistry.standard()
        self.assertEqual(
            resolve_profile(declaration, registry, context),
            resolve_profile(declaration, registry, context),
        )


if __name__ == "__main__":
    unittest.main()
