"""
Factory verification tests.

  - A correct resolver passes verification for every width.
  - A broken resolver is rejected with a counterexample.
"""

from __future__ import annotations

import random

import pytest

from bounds import INT8, INT16, INT32, INT64, Bounds
from constraints import FieldConstraint
from factory import ResolverFactory, VerificationError, _predicate_arity
from handles import FieldHandle
from resolver import IntFieldResolver, Outcome
from sanitizer import Sanitizer
from settings import SanitizerSettings
from spec import Property, Spec, resolution_spec


class ElseIfResolver(IntFieldResolver):
    """Clamps to max only when the min clamp did not fire."""

    def apply(self, handle: FieldHandle, constraint: FieldConstraint, field: str = "") -> Outcome:
        if handle.is_optional() and handle.is_absent():
            if constraint.has_default:
                handle.set_absent_to(constraint.default)
            return Outcome.UNCHANGED
        v = handle.get()
        if constraint.has_min and v < constraint.min:
            handle.set(constraint.min)
        elif constraint.has_max and v >= constraint.max:
            handle.set(constraint.max - 1)
        return Outcome.UNCHANGED


class ClampingDefaultResolver(IntFieldResolver):
    """Forgets to fill in defaults."""

    def apply(self, handle: FieldHandle, constraint: FieldConstraint, field: str = "") -> Outcome:
        if handle.is_optional() and handle.is_absent():
            return Outcome.UNCHANGED
        return super().apply(handle, constraint, field)


# ---------------------------------------------------------------------------
# Factory produces verified resolvers
# ---------------------------------------------------------------------------

class TestFactoryProducesVerified:

    @pytest.mark.parametrize("bounds", [INT8, INT16, INT32, INT64], ids=lambda b: b.name)
    def test_supported_widths(self, bounds):
        resolver = ResolverFactory.create(bounds, samples=100)
        assert isinstance(resolver, IntFieldResolver)
        assert resolver.bounds == bounds

    def test_odd_width(self):
        bounds = Bounds.signed(4)
        resolver = ResolverFactory.create(bounds, samples=50)
        assert resolver.bounds.hi == 7

    def test_report_counts_every_check(self):
        resolver = IntFieldResolver(bounds=INT8)
        report = ResolverFactory.verify(resolver, samples=10)
        domain = ResolverFactory.probe_domain(INT8)
        spec = resolution_spec(INT8)
        expected = sum(
            len(domain) ** _predicate_arity(p) + 10 for p in spec
        )
        assert report.passed
        assert report.checks == expected
        assert report.summary().startswith("int8 resolver: verified")

    def test_probe_domain(self):
        assert ResolverFactory.probe_domain(INT8) == [-128, -127, -1, 0, 1, 2, 3, 126, 127]

    def test_get_caches_per_width(self):
        ResolverFactory.clear()
        first = ResolverFactory.get(INT16, samples=10)
        assert ResolverFactory.get(INT16, samples=10) is first
        assert ResolverFactory.get(INT8, samples=10) is not first
        ResolverFactory.clear()

    def test_get_verifies_each_sampling_setup(self, monkeypatch):
        ResolverFactory.clear()
        calls = []
        real_create = ResolverFactory.create.__func__

        def recording_create(cls, bounds, samples=500, seed=0, **kwargs):
            calls.append((bounds.bits, samples, seed))
            return real_create(cls, bounds, samples=samples, seed=seed, **kwargs)

        monkeypatch.setattr(ResolverFactory, "create", classmethod(recording_create))
        Sanitizer(SanitizerSettings(verify_samples=0)).resolver_for(INT32)
        Sanitizer(SanitizerSettings(verify_samples=200, verify_seed=7)).resolver_for(INT32)
        Sanitizer(SanitizerSettings(verify_samples=200, verify_seed=7)).resolver_for(INT32)
        assert calls == [(32, 0, 0), (32, 200, 7)]
        ResolverFactory.clear()


# ---------------------------------------------------------------------------
# Factory rejects broken resolvers
# ---------------------------------------------------------------------------

class TestFactoryRejectsBroken:

    def test_else_if_resolver_rejected(self):
        with pytest.raises(VerificationError) as exc_info:
            ResolverFactory.create(INT8, samples=10, resolver_cls=ElseIfResolver)
        report = exc_info.value.report
        assert not report.passed
        assert "properties failed" in str(exc_info.value)
        assert report.failures

    def test_missing_default_reports_counterexample(self):
        report = ResolverFactory.verify(ClampingDefaultResolver(bounds=INT8), samples=0)
        failed = {r.property_name: r for r in report.results if not r.passed}
        assert "absent_takes_default" in failed
        assert failed["absent_takes_default"].counterexample is not None
        assert "in_range_unchanged" not in failed

    def test_custom_failing_property(self):
        bad_spec = Spec(bounds=INT8)
        bad_spec.add(Property(
            name="always_zero",
            description="every value resolves to 0",
            predicate=lambda r, v: r.resolve_value(v, FieldConstraint()) == 0,
        ))
        report = ResolverFactory._verify_spec(
            bad_spec, IntFieldResolver(bounds=INT8), 0, random.Random(0)
        )
        assert not report.passed
        assert report.results[0].counterexample == (-128,)
        assert str(report.results[0]).startswith("FAIL  always_zero")


# ---------------------------------------------------------------------------
# Spec
# ---------------------------------------------------------------------------

class TestResolutionSpec:

    def test_property_names(self):
        names = [p.name for p in resolution_spec(INT64)]
        assert names == [
            "in_range_unchanged",
            "below_min_clamps",
            "above_max_clamps",
            "closure",
            "idempotence",
            "min_only",
            "max_only",
            "absent_takes_default",
            "absent_without_default_stays_absent",
            "default_ignored_when_present",
        ]

    def test_spec_is_named_after_width(self):
        spec = resolution_spec(INT16)
        assert spec.name == "resolution[int16]"
        assert len(spec.properties) == 10

    def test_invalid_inputs_hold_vacuously(self):
        resolver = IntFieldResolver(bounds=INT8)
        props = {p.name: p for p in resolution_spec(INT8)}
        # min=10, max=5 is not a valid constraint
        assert props["below_min_clamps"].check(resolver, 10, 5, 0)
        assert props["absent_takes_default"].check(resolver, 5, 20, 25)
