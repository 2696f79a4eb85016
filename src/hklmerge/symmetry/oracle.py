"""
Symmetry queries for one space group.

The oracle answers the three questions the merging pipeline asks about a
Miller index: is it in the reciprocal asymmetric unit, what is its
representative there (and which operation maps it), and is it
systematically absent.
"""

import gemmi

from hklmerge.models.reflection import MillerIndex


class SymmetryOracle:
    """
    Space-group symmetry backed by gemmi.

    Operation ids returned by reduce_to_asymmetric_unit follow the ISYM
    convention: odd ids map an I(+) reflection, even ids its Friedel mate.

    Usage:
        oracle = SymmetryOracle(gemmi.find_spacegroup_by_name("P 21 21 21"))
        hkl, isym = oracle.reduce_to_asymmetric_unit((-1, 2, -3))
    """

    def __init__(self, spacegroup: gemmi.SpaceGroup):
        self.spacegroup = spacegroup
        self.operations = spacegroup.operations()
        self.asu = gemmi.ReciprocalAsu(spacegroup)

    @property
    def name(self) -> str:
        return self.spacegroup.xhm()

    def is_in_asymmetric_unit(self, hkl) -> bool:
        return self.asu.is_in(list(hkl))

    def reduce_to_asymmetric_unit(self, hkl) -> tuple[MillerIndex, int]:
        """Map hkl into the asymmetric unit; returns (index, operation id)."""
        reduced, isym = self.asu.to_asu(list(hkl), self.operations)
        return MillerIndex.of(reduced), int(isym)

    def is_systematically_absent(self, hkl) -> bool:
        return self.operations.is_systematically_absent(list(hkl))

    def __repr__(self) -> str:
        return f"SymmetryOracle({self.name!r})"
