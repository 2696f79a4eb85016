"""
Crystal symmetry support.

Provides:
- SymmetryOracle: asymmetric-unit and systematic-absence queries
- Space-group lookup by number or symbol
"""

from hklmerge.symmetry.oracle import SymmetryOracle
from hklmerge.symmetry.registry import (
    SPACEGROUP_ALIASES,
    find_spacegroup,
    get_oracle,
    require_spacegroup,
)

__all__ = [
    "SymmetryOracle",
    "SPACEGROUP_ALIASES",
    "find_spacegroup",
    "require_spacegroup",
    "get_oracle",
]
