"""
Integer widths for field resolution.

A Bounds value describes one fixed-width signed integer type.  Every
constraint parsed for a field must be representable in the field's
width, and the resolver is parametrised by the width rather than being
copied once per integer type.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Bounds:
    """
    The value range [lo, hi] of a signed integer that is `bits` wide.

    Constraint text is checked against this range when parsed, so any
    value the resolver writes back is guaranteed to fit the field.
    """

    bits: int
    lo: int
    hi: int

    def __post_init__(self):
        if self.bits <= 0:
            raise ValueError(f"bits ({self.bits}) must be positive")
        if self.lo > self.hi:
            raise ValueError(f"lo ({self.lo}) must be <= hi ({self.hi})")

    @classmethod
    def signed(cls, bits: int) -> Bounds:
        """Two's complement range for a signed integer of the given width."""
        if bits <= 0:
            raise ValueError(f"bits ({bits}) must be positive")
        return cls(bits=bits, lo=-(2 ** (bits - 1)), hi=2 ** (bits - 1) - 1)

    @property
    def name(self) -> str:
        return f"int{self.bits}"

    @property
    def width(self) -> int:
        """Total number of representable values."""
        return self.hi - self.lo + 1

    def contains(self, value: int) -> bool:
        return self.lo <= value <= self.hi

    def edge_values(self) -> list[int]:
        """Boundary values of the width, in ascending order."""
        candidates = [self.lo, self.lo + 1, -1, 0, 1, self.hi - 1, self.hi]
        return sorted({v for v in candidates if self.contains(v)})


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

INT8 = Bounds.signed(8)
INT16 = Bounds.signed(16)
INT32 = Bounds.signed(32)
INT64 = Bounds.signed(64)

SUPPORTED = {b.bits: b for b in (INT8, INT16, INT32, INT64)}


def for_bits(bits: int) -> Bounds:
    """Look up the preset for a supported width."""
    try:
        return SUPPORTED[bits]
    except KeyError:
        raise ValueError(
            f"unsupported integer width {bits}, expected one of {sorted(SUPPORTED)}"
        ) from None
