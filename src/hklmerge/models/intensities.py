"""
The canonical reflection set.

An Intensities object is filled once by one of the ingestion readers,
optionally reduced to the asymmetric unit and filtered for systematic
absences, and finally merged in place.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Iterator, Optional

import gemmi
import numpy as np
from numpy.typing import NDArray

from hklmerge.enums import SignTag
from hklmerge.errors import DomainError
from hklmerge.models.reflection import MillerIndex, Observation

logger = logging.getLogger(__name__)


@dataclass
class Intensities:
    """
    Intensity observations of one crystal dataset.

    Attributes:
        spacegroup: Space group of the crystal (required)
        unit_cell: Unit cell used for resolution calculations
        wavelength: X-ray wavelength in Å (0.0 if unknown)
        data: Observations, owned by this object

    Usage:
        intensities = read_unmerged_intensities_from_mtz(table)
        intensities.remove_systematic_absences()
        intensities.merge_in_place(output_plus_minus=False)
        d_high, d_low = intensities.resolution_range()
    """

    spacegroup: gemmi.SpaceGroup
    unit_cell: gemmi.UnitCell = field(default_factory=gemmi.UnitCell)
    wavelength: float = 0.0
    data: list[Observation] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.spacegroup is None:
            raise DomainError("unknown space group")

    def __len__(self) -> int:
        return len(self.data)

    def __iter__(self) -> Iterator[Observation]:
        return iter(self.data)

    @property
    def oracle(self):
        """SymmetryOracle for this set's space group."""
        from hklmerge.symmetry.registry import get_oracle

        return get_oracle(self.spacegroup)

    def have_sign(self) -> bool:
        """True if observations carry the I(+)/I(-) distinction."""
        return bool(self.data) and self.data[0].sign != SignTag.NONE

    def spacegroup_str(self) -> str:
        return self.spacegroup.xhm() if self.spacegroup is not None else "none"

    def add_if_valid(
        self,
        hkl: MillerIndex,
        value: float,
        sigma: float,
        sign: SignTag = SignTag.NONE,
    ) -> bool:
        """
        Append an observation unless the validity filter rejects it.

        Returns:
            True if the observation was added
        """
        from hklmerge.processing.filters import is_valid

        if not is_valid(value, sigma):
            return False
        self.data.append(Observation(hkl=hkl, sign=sign, value=value, sigma=sigma))
        return True

    def sort(self) -> None:
        from hklmerge.processing.merger import sort_key

        self.data.sort(key=sort_key)

    def switch_to_asu_indices(self, merged: bool = False) -> None:
        """Reduce all indices to the asymmetric unit (see processing.reducer)."""
        from hklmerge.processing.reducer import switch_to_asu_indices

        switch_to_asu_indices(self.data, self.oracle, merged=merged)

    def remove_systematic_absences(self) -> None:
        from hklmerge.processing.filters import remove_systematic_absences

        self.data = remove_systematic_absences(self.data, self.oracle)

    def merge_in_place(self, output_plus_minus: bool = False) -> None:
        """
        Replace the observations by their weighted means.

        Args:
            output_plus_minus: Keep I(+) and I(-) separate. When False the
                anomalous distinction is discarded and mean intensities
                are produced.
        """
        from hklmerge.processing.merger import merge_observations

        if not self.data:
            return
        self.data = merge_observations(self.data, output_plus_minus=output_plus_minus)

    def resolution_range(self) -> tuple[float, float]:
        """
        Resolution limits of the data in Å.

        The 0 0 0 reflection has no resolution; it makes d_max infinite.

        Returns:
            (d_min, d_max): the high-resolution and low-resolution limits

        Raises:
            ValueError: If the set is empty
        """
        if not self.data:
            raise ValueError("resolution range of an empty reflection set")

        min_1_d2 = math.inf
        max_1_d2 = 0.0
        for obs in self.data:
            a_1_d2 = self.unit_cell.calculate_1_d2(list(obs.hkl))
            if a_1_d2 < min_1_d2:
                min_1_d2 = a_1_d2
            if a_1_d2 > max_1_d2:
                max_1_d2 = a_1_d2
        d_min = 1 / math.sqrt(max_1_d2) if max_1_d2 > 0 else math.inf
        d_max = 1 / math.sqrt(min_1_d2) if min_1_d2 > 0 else math.inf
        return (d_min, d_max)

    def to_numpy(self) -> dict[str, NDArray]:
        """Convert observations to column arrays."""
        return {
            "h": np.array([obs.hkl.h for obs in self.data], dtype=np.int32),
            "k": np.array([obs.hkl.k for obs in self.data], dtype=np.int32),
            "l": np.array([obs.hkl.l for obs in self.data], dtype=np.int32),
            "sign": np.array([int(obs.sign) for obs in self.data], dtype=np.int8),
            "value": np.array([obs.value for obs in self.data], dtype=np.float64),
            "sigma": np.array([obs.sigma for obs in self.data], dtype=np.float64),
        }

    def __str__(self) -> str:
        return (
            f"Intensities: {len(self.data)} reflections, {self.spacegroup_str()}, "
            f"wavelength {self.wavelength:.4f} Å"
        )


def copy_metadata(
    spacegroup: Optional[gemmi.SpaceGroup],
    unit_cell: Optional[gemmi.UnitCell],
    wavelength: Optional[float],
) -> Intensities:
    """
    Create an empty Intensities set from source metadata.

    Raises:
        DomainError: If the space group or unit cell is missing
    """
    if spacegroup is None:
        raise DomainError("unknown space group")
    if unit_cell is None or not unit_cell.is_crystal():
        raise DomainError("unit cell is not set")
    return Intensities(
        spacegroup=spacegroup,
        unit_cell=unit_cell,
        wavelength=wavelength if wavelength is not None and math.isfinite(wavelength) else 0.0,
    )
