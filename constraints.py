"""Constraint parsing and validation.

A field's metadata map holds up to three raw strings: ``min``, ``max``
and ``def``.  Parsing turns them into a FieldConstraint for the field's
integer width; validation checks that the parsed components agree with
each other.  Both steps are pure and run before anything is written to
the field.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Mapping

from bounds import Bounds
from errors import (
    DefaultBelowMinError,
    DefaultExceedsMaxError,
    InconsistentBoundsError,
    NegativeBoundError,
    ParseError,
    SanitizeError,
)

MIN_KEY = "min"
MAX_KEY = "max"
DEFAULT_KEY = "def"

_INT_LITERAL = re.compile(r"[+-]?[0-9]+")


# ---------------------------------------------------------------------------
# FieldConstraint
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FieldConstraint:
    """Optional min, max and default of one field.

    ``None`` means the component was not given at all, which is not the
    same thing as a component of zero.
    """

    min: int | None = None
    max: int | None = None
    default: int | None = None

    @property
    def has_min(self) -> bool:
        return self.min is not None

    @property
    def has_max(self) -> bool:
        return self.max is not None

    @property
    def has_default(self) -> bool:
        return self.default is not None


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def parse_int(raw: str, bounds: Bounds) -> int:
    """Parse a base-10 signed integer literal that must fit in ``bounds``.

    Raises ValueError for anything else, including whitespace and the
    underscores that ``int()`` would otherwise accept.
    """
    if not _INT_LITERAL.fullmatch(raw):
        raise ValueError(f"{raw!r} is not a base-10 integer literal")
    value = int(raw)
    if not bounds.contains(value):
        raise ValueError(f"{raw!r} is out of range for {bounds.name}")
    return value


def parse_constraint(
    tags: Mapping[str, str], bounds: Bounds, field: str = ""
) -> FieldConstraint:
    """Build a FieldConstraint from a field's metadata map."""
    parsed: dict[str, int | None] = {}
    for key in (MIN_KEY, MAX_KEY, DEFAULT_KEY):
        if key not in tags:
            parsed[key] = None
            continue
        raw = tags[key]
        try:
            parsed[key] = parse_int(raw, bounds)
        except ValueError:
            raise ParseError(field, key, raw, bounds.bits) from None
    return FieldConstraint(
        min=parsed[MIN_KEY], max=parsed[MAX_KEY], default=parsed[DEFAULT_KEY]
    )


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rule:
    """A consistency rule: when ``violated`` holds, ``error`` is raised."""

    id: str
    description: str
    violated: Callable[[FieldConstraint], bool]
    error: Callable[[str, FieldConstraint], SanitizeError]


def _max_below_min(c: FieldConstraint) -> bool:
    return c.has_min and c.has_max and c.max < c.min


def _negative_bound(c: FieldConstraint) -> bool:
    return (c.has_min and c.min < 0) or (c.has_max and c.max < 0)


def _default_above_max(c: FieldConstraint) -> bool:
    return c.has_default and c.has_max and c.default > c.max


def _default_below_min(c: FieldConstraint) -> bool:
    return c.has_default and c.has_min and c.default < c.min


# Checked in this order; the first violated rule decides the error.
CONSTRAINT_RULES: list[Rule] = [
    Rule(
        id="BOUNDS-ORDER",
        description="max must not be lower than min",
        violated=_max_below_min,
        error=lambda field, c: InconsistentBoundsError(field, c.min, c.max),
    ),
    Rule(
        id="BOUNDS-NONNEG",
        description="min and max must not be below zero",
        violated=_negative_bound,
        error=lambda field, c: NegativeBoundError(field, c.min, c.max),
    ),
    Rule(
        id="DEF-MAX",
        description="def must not be higher than max",
        violated=_default_above_max,
        error=lambda field, c: DefaultExceedsMaxError(field, c.default, c.max),
    ),
    Rule(
        id="DEF-MIN",
        description="def must not be lower than min",
        violated=_default_below_min,
        error=lambda field, c: DefaultBelowMinError(field, c.default, c.min),
    ),
]


def validate_constraint(constraint: FieldConstraint, field: str = "") -> None:
    """Raise the error of the first rule the constraint violates."""
    for rule in CONSTRAINT_RULES:
        if rule.violated(constraint):
            raise rule.error(field, constraint)


def is_consistent(constraint: FieldConstraint) -> bool:
    return not any(rule.violated(constraint) for rule in CONSTRAINT_RULES)


def load_constraint(
    tags: Mapping[str, str], bounds: Bounds, field: str = ""
) -> FieldConstraint:
    """Parse and validate in one step."""
    constraint = parse_constraint(tags, bounds, field)
    validate_constraint(constraint, field)
    return constraint
