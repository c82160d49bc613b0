"""
Executable properties of field resolution.

Each property is a named predicate over a resolver and a few integer
inputs.  Inputs that do not form a valid constraint make the predicate
hold vacuously, so a verifier can feed it any combination of values
from a probe domain.

The factory (factory.py) runs these before handing out a resolver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from bounds import Bounds
from constraints import FieldConstraint, is_consistent


# ---------------------------------------------------------------------------
# Core spec primitives
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Property:
    """A named predicate; the first argument is always the resolver."""

    name: str
    description: str
    predicate: Callable[..., bool]

    def check(self, *args: Any) -> bool:
        return self.predicate(*args)


@dataclass
class Spec:
    """The properties a resolver of one width must satisfy, in check order."""

    bounds: Bounds
    properties: list[Property] = field(default_factory=list)

    @property
    def name(self) -> str:
        return f"resolution[{self.bounds.name}]"

    def add(self, prop: Property) -> None:
        self.properties.append(prop)

    def __iter__(self):
        return iter(self.properties)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _valid(mn: int, mx: int, df: int | None = None) -> bool:
    return is_consistent(FieldConstraint(min=mn, max=mx, default=df))


def _in_range(v: int, mn: int, mx: int) -> bool:
    return mn <= v <= mx


# ---------------------------------------------------------------------------
# Spec builder
# ---------------------------------------------------------------------------

def resolution_spec(bounds: Bounds) -> Spec:
    """Build the specification for resolving fields of one integer width."""
    spec = Spec(bounds=bounds)

    spec.add(Property(
        name="in_range_unchanged",
        description="A present value inside [min, max] is left as is",
        predicate=lambda r, mn, mx, v: (
            not _valid(mn, mx) or not _in_range(v, mn, mx)
            or r.resolve_value(v, FieldConstraint(min=mn, max=mx)) == v
        ),
    ))

    spec.add(Property(
        name="below_min_clamps",
        description="A present value below min becomes min",
        predicate=lambda r, mn, mx, v: (
            not _valid(mn, mx) or v >= mn
            or r.resolve_value(v, FieldConstraint(min=mn, max=mx)) == mn
        ),
    ))

    spec.add(Property(
        name="above_max_clamps",
        description="A present value above max becomes max",
        predicate=lambda r, mn, mx, v: (
            not _valid(mn, mx) or v <= mx
            or r.resolve_value(v, FieldConstraint(min=mn, max=mx)) == mx
        ),
    ))

    spec.add(Property(
        name="closure",
        description="A present value always ends up inside [min, max]",
        predicate=lambda r, mn, mx, v: (
            not _valid(mn, mx)
            or _in_range(r.resolve_value(v, FieldConstraint(min=mn, max=mx)), mn, mx)
        ),
    ))

    spec.add(Property(
        name="idempotence",
        description="Resolving a resolved value again changes nothing",
        predicate=lambda r, mn, mx, v: (
            not _valid(mn, mx)
            or _resolved_twice(r, FieldConstraint(min=mn, max=mx), v)
        ),
    ))

    spec.add(Property(
        name="min_only",
        description="With only a min, the result is max(v, min)",
        predicate=lambda r, mn, v: (
            mn < 0 or r.resolve_value(v, FieldConstraint(min=mn)) == max(v, mn)
        ),
    ))

    spec.add(Property(
        name="max_only",
        description="With only a max, the result is min(v, max)",
        predicate=lambda r, mx, v: (
            mx < 0 or r.resolve_value(v, FieldConstraint(max=mx)) == min(v, mx)
        ),
    ))

    spec.add(Property(
        name="absent_takes_default",
        description="An absent optional field with a default becomes the default",
        predicate=lambda r, mn, mx, df: (
            not _valid(mn, mx, df)
            or r.resolve_value(
                None, FieldConstraint(min=mn, max=mx, default=df), optional=True
            ) == df
        ),
    ))

    spec.add(Property(
        name="absent_without_default_stays_absent",
        description="An absent optional field without a default is not written",
        predicate=lambda r, mn, mx: (
            not _valid(mn, mx)
            or r.resolve_value(None, FieldConstraint(min=mn, max=mx), optional=True)
            is None
        ),
    ))

    spec.add(Property(
        name="default_ignored_when_present",
        description="A default never replaces a present value",
        predicate=lambda r, mn, mx, df, v: (
            not _valid(mn, mx, df) or not _in_range(v, mn, mx)
            or r.resolve_value(
                v, FieldConstraint(min=mn, max=mx, default=df), optional=True
            ) == v
        ),
    ))

    return spec


def _resolved_twice(r: Any, constraint: FieldConstraint, v: int) -> bool:
    once = r.resolve_value(v, constraint)
    return r.resolve_value(once, constraint) == once
