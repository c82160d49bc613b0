"""
The resolver factory.

The factory does not just construct resolvers - it *verifies* them
against the properties in spec.py before releasing them.

Flow:
  1. Caller requests a resolver for an integer width.
  2. Factory builds the resolver.
  3. Factory runs the resolution spec against it, exhaustively over a
     probe domain and then over seeded random samples.
  4. If verification passes  -> return the resolver.
     If verification fails   -> raise, never hand out a broken instance.
"""

from __future__ import annotations

import inspect
import itertools
import logging
import random
from dataclasses import dataclass, field
from typing import Any, ClassVar

from bounds import Bounds
from resolver import IntFieldResolver
from spec import Property, Spec, resolution_spec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationResult:
    """One property checked against one resolver."""

    property_name: str
    passed: bool
    checks: int
    counterexample: tuple[int, ...] | None = None

    def __str__(self) -> str:
        if self.passed:
            return f"ok    {self.property_name} ({self.checks} checks)"
        return (
            f"FAIL  {self.property_name} after {self.checks} checks, "
            f"inputs {self.counterexample}"
        )


@dataclass
class VerificationReport:
    """Every property result for one resolver width."""

    bounds: Bounds
    results: list[VerificationResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.failures

    @property
    def failures(self) -> list[VerificationResult]:
        return [r for r in self.results if not r.passed]

    @property
    def checks(self) -> int:
        return sum(r.checks for r in self.results)

    def summary(self) -> str:
        verdict = "verified" if self.passed else f"{len(self.failures)} properties failed"
        lines = [f"{self.bounds.name} resolver: {verdict}"]
        lines.extend(f"  {r}" for r in self.results)
        return "\n".join(lines)


class VerificationError(Exception):
    """Raised instead of handing out a resolver that breaks a property."""

    def __init__(self, report: VerificationReport):
        self.report = report
        super().__init__(report.summary())

# ---------------------------------------------------------------------------
# The factory
# ---------------------------------------------------------------------------

class ResolverFactory:
    """
    Produces IntFieldResolver instances that are verified for their width.

    Every property is checked exhaustively over the probe domain (the
    width's edge values plus a small non-negative window), then over
    random samples drawn from a seeded generator.
    """

    PROBE_WINDOW = range(0, 4)

    # (width, samples, seed) -> verified resolver
    _cache: ClassVar[dict[tuple[Bounds, int, int], IntFieldResolver]] = {}

    @classmethod
    def create(
        cls,
        bounds: Bounds,
        samples: int = 500,
        seed: int = 0,
        resolver_cls: type[IntFieldResolver] = IntFieldResolver,
    ) -> IntFieldResolver:
        """Build, verify, and return a resolver for ``bounds``."""
        resolver = resolver_cls(bounds=bounds)
        report = cls.verify(resolver, samples=samples, seed=seed)
        if not report.passed:
            raise VerificationError(report)
        logger.info(
            "verified %s resolver (%d checks)", bounds.name, report.checks
        )
        return resolver

    @classmethod
    def get(cls, bounds: Bounds, samples: int = 500, seed: int = 0) -> IntFieldResolver:
        """Like create(), but verifies each width and sampling setup only once."""
        key = (bounds, samples, seed)
        resolver = cls._cache.get(key)
        if resolver is None:
            resolver = cls.create(bounds, samples=samples, seed=seed)
            cls._cache[key] = resolver
        return resolver

    @classmethod
    def clear(cls) -> None:
        cls._cache.clear()

    @classmethod
    def verify(
        cls, resolver: IntFieldResolver, samples: int = 500, seed: int = 0
    ) -> VerificationReport:
        spec = resolution_spec(resolver.bounds)
        rng = random.Random(seed)
        return cls._verify_spec(spec, resolver, samples, rng)

    # -- internal ---------------------------------------------------------

    @classmethod
    def probe_domain(cls, bounds: Bounds) -> list[int]:
        window = [v for v in cls.PROBE_WINDOW if bounds.contains(v)]
        return sorted(set(bounds.edge_values()) | set(window))

    @classmethod
    def _verify_spec(
        cls,
        spec: Spec,
        resolver: Any,
        samples: int,
        rng: random.Random,
    ) -> VerificationReport:
        report = VerificationReport(bounds=spec.bounds)
        for prop in spec:
            result = cls._verify_property(prop, resolver, spec.bounds, samples, rng)
            report.results.append(result)
        return report

    @classmethod
    def _verify_property(
        cls,
        prop: Property,
        resolver: Any,
        bounds: Bounds,
        samples: int,
        rng: random.Random,
    ) -> VerificationResult:
        arity = _predicate_arity(prop)
        domain = cls.probe_domain(bounds)

        exhaustive = itertools.product(domain, repeat=arity)
        sampled = _generate_samples(bounds, arity, samples, rng)

        checks = 0
        for combo in itertools.chain(exhaustive, sampled):
            checks += 1
            if not prop.check(resolver, *combo):
                return VerificationResult(
                    property_name=prop.name,
                    passed=False,
                    checks=checks,
                    counterexample=combo,
                )

        return VerificationResult(
            property_name=prop.name,
            passed=True,
            checks=checks,
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _predicate_arity(prop: Property) -> int:
    """
    Number of *value* arguments a property predicate expects
    (excluding the resolver, which is always the first arg).
    """
    sig = inspect.signature(prop.predicate)
    return len(sig.parameters) - 1


def _generate_samples(
    bounds: Bounds, arity: int, count: int, rng: random.Random
) -> list[tuple[int, ...]]:
    """Random samples, half of them drawn from the non-negative range."""
    samples: list[tuple[int, ...]] = []
    for i in range(count):
        lo = 0 if i % 2 == 0 else bounds.lo
        samples.append(tuple(rng.randint(lo, bounds.hi) for _ in range(arity)))
    return samples
