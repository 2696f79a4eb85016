"""
Reflection-level value types.

A MillerIndex identifies a reciprocal-lattice point; an Observation is one
measured (or merged) intensity at that point.
"""

from dataclasses import dataclass
from typing import NamedTuple

from hklmerge.enums import SignTag


class MillerIndex(NamedTuple):
    """Reciprocal-lattice index (h, k, l), ordered lexicographically."""

    h: int
    k: int
    l: int  # noqa: E741

    @classmethod
    def of(cls, values) -> "MillerIndex":
        """Build from any 3-item sequence of integral numbers."""
        h, k, l = values  # noqa: E741
        return cls(int(h), int(k), int(l))

    def friedel_mate(self) -> "MillerIndex":
        return MillerIndex(-self.h, -self.k, -self.l)


@dataclass
class Observation:
    """
    One intensity measurement.

    Attributes:
        hkl: Miller index
        sign: Friedel side (NONE for symmetry-averaged data)
        value: Intensity, may be negative after background subtraction
        sigma: Standard uncertainty of value, positive
    """

    hkl: MillerIndex
    sign: SignTag
    value: float
    sigma: float

    @property
    def key(self) -> tuple[int, int, int, int]:
        """Merge key (h, k, l, sign)."""
        return (self.hkl.h, self.hkl.k, self.hkl.l, int(self.sign))

    @property
    def weight(self) -> float:
        """Inverse-variance weight."""
        return 1.0 / (self.sigma * self.sigma)

    def __str__(self) -> str:
        h, k, l = self.hkl  # noqa: E741
        return f"({h:4d} {k:4d} {l:4d}) {self.sign.name:5s} {self.value:12.3f} {self.sigma:10.3f}"
