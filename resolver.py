"""Integer field resolver.

The resolver applies a validated FieldConstraint to one field through a
FieldHandle.  Decision branches are annotated with short branch ids so
tests can name the path they exercise.

Order of operations:
  1. absent optional field with a default  -> fill in the default, stop
  2. present optional field                -> work on the contained value
  3. clamp to min, then clamp to max against the value now in the field

An absent optional field without a default is never written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from bounds import Bounds, INT64
from constraints import FieldConstraint, load_constraint
from handles import FieldHandle, ValueHandle

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    """What resolution did to the field."""

    UNCHANGED = "unchanged"
    DEFAULTED = "defaulted"
    CLAMPED_MIN = "clamped_min"
    CLAMPED_MAX = "clamped_max"


@dataclass(frozen=True)
class IntFieldResolver:
    """Resolves fields of one integer width."""

    bounds: Bounds = INT64

    def resolve(
        self, handle: FieldHandle, tags: Mapping[str, str], field: str = ""
    ) -> Outcome:
        """Parse, validate and apply the constraint described by ``tags``.

        Any parse or validation error propagates before the handle is
        touched.
        """
        constraint = load_constraint(tags, self.bounds, field)
        return self.apply(handle, constraint, field)

    def apply(
        self, handle: FieldHandle, constraint: FieldConstraint, field: str = ""
    ) -> Outcome:
        """Apply an already validated constraint.  Never raises."""
        if handle.is_optional() and handle.is_absent():
            if constraint.has_default:                            # ABSENT-DEFAULT
                handle.set_absent_to(constraint.default)
                logger.debug("%s: absent, set to default %d", field, constraint.default)
                return Outcome.DEFAULTED
            return Outcome.UNCHANGED                              # ABSENT-KEEP

        # Present (optional or plain): clamp the current value.
        outcome = Outcome.UNCHANGED
        if constraint.has_min:
            value = handle.get()
            if value < constraint.min:                            # CLAMP-MIN
                handle.set(constraint.min)
                logger.debug("%s: %d clamped up to min %d", field, value, constraint.min)
                outcome = Outcome.CLAMPED_MIN
        if constraint.has_max:
            value = handle.get()
            if value > constraint.max:                            # CLAMP-MAX
                handle.set(constraint.max)
                logger.debug("%s: %d clamped down to max %d", field, value, constraint.max)
                outcome = Outcome.CLAMPED_MAX
        return outcome

    def resolve_value(
        self,
        value: int | None,
        constraint: FieldConstraint,
        optional: bool = False,
    ) -> int | None:
        """Apply ``constraint`` to a loose value and return the result."""
        handle = ValueHandle(value, optional=optional or value is None)
        self.apply(handle, constraint)
        return handle.value
