"""
Enums for reflection data.

These enums define the valid values for key reflection attributes.
"""

from enum import Enum, IntEnum


class SignTag(IntEnum):
    """
    Friedel side of an observation.

    The integer values give the total order used when sorting
    reflections: MINUS < NONE < PLUS.
    """

    MINUS = -1
    NONE = 0
    PLUS = 1

    @classmethod
    def from_parity(cls, code: int) -> "SignTag":
        """Sign encoded by a symmetry operation id: even is I(-), odd is I(+)."""
        return cls.MINUS if int(code) % 2 == 0 else cls.PLUS


class DataKind(str, Enum):
    """What kind of intensities a source provides."""

    UNMERGED = "unmerged"
    MEAN = "mean"
    ANOMALOUS = "anomalous"
