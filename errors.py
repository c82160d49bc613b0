"""Errors raised while resolving a constrained field.

Every error is raised before the field is touched, so a failed
resolution always leaves the field as it was.
"""

from __future__ import annotations


class SanitizeError(Exception):
    """Base class for constraint errors on a single field."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)


class ParseError(SanitizeError):
    """Raised when constraint text is not an integer literal of the field's width."""

    def __init__(self, field: str, key: str, raw: str, bits: int) -> None:
        self.key = key
        self.raw = raw
        self.bits = bits
        super().__init__(
            field,
            f"invalid {key} tag component {raw!r} on int{bits} field '{field}'",
        )


class InconsistentBoundsError(SanitizeError):
    """Raised when max is lower than min."""

    def __init__(self, field: str, min: int, max: int) -> None:
        self.min = min
        self.max = max
        super().__init__(
            field, f"max ({max}) less than min ({min}) on field '{field}'"
        )


class NegativeBoundError(SanitizeError):
    """Raised when min or max is below zero."""

    def __init__(self, field: str, min: int | None, max: int | None) -> None:
        self.min = min
        self.max = max
        super().__init__(
            field, f"min and max on field '{field}' can not be below 0"
        )


class DefaultExceedsMaxError(SanitizeError):
    """Raised when def is higher than max."""

    def __init__(self, field: str, default: int, max: int) -> None:
        self.default = default
        self.max = max
        super().__init__(
            field,
            f"incompatible def and max tag components on field '{field}', "
            f"def ({default}) is higher than max ({max})",
        )


class DefaultBelowMinError(SanitizeError):
    """Raised when def is lower than min."""

    def __init__(self, field: str, default: int, min: int) -> None:
        self.default = default
        self.min = min
        super().__init__(
            field,
            f"incompatible def and min tag components on field '{field}', "
            f"def ({default}) is lower than min ({min})",
        )
