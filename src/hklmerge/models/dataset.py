"""
Record describing one merge run.

MergedDataset is the exported summary of a processed reflection file:
where the data came from, its crystal metadata, and how many reflections
survived each stage.
"""

from typing import Optional

import gemmi
from pydantic import BaseModel, Field, field_validator

from hklmerge.enums import DataKind
from hklmerge.models.base import DataModel
from hklmerge.symmetry.registry import find_spacegroup


class CrystalCell(BaseModel):
    """
    Unit cell parameters.

    Attributes:
        a, b, c: Cell edges in Å
        alpha, beta, gamma: Cell angles in degrees
    """

    a: float = Field(..., gt=0, description="Cell edge a in Å")
    b: float = Field(..., gt=0, description="Cell edge b in Å")
    c: float = Field(..., gt=0, description="Cell edge c in Å")
    alpha: float = Field(..., gt=0, lt=180, description="Angle alpha in degrees")
    beta: float = Field(..., gt=0, lt=180, description="Angle beta in degrees")
    gamma: float = Field(..., gt=0, lt=180, description="Angle gamma in degrees")

    @classmethod
    def from_gemmi(cls, cell: gemmi.UnitCell) -> "CrystalCell":
        return cls(a=cell.a, b=cell.b, c=cell.c, alpha=cell.alpha, beta=cell.beta, gamma=cell.gamma)

    def to_gemmi(self) -> gemmi.UnitCell:
        return gemmi.UnitCell(self.a, self.b, self.c, self.alpha, self.beta, self.gamma)

    @property
    def parameters(self) -> tuple[float, float, float, float, float, float]:
        return (self.a, self.b, self.c, self.alpha, self.beta, self.gamma)

    def __str__(self) -> str:
        return " ".join(f"{p:.3f}" for p in self.parameters)


class MergedDataset(DataModel):
    """
    Summary record of a merged reflection file.

    Attributes:
        source_file: Path of the ingested file
        file_type: Detected source format (e.g., "mtz")
        kind: Which intensities were read
        anomalous: Whether I(+) and I(-) were kept apart
        spacegroup: Extended Hermann-Mauguin symbol
        cell: Unit cell
        wavelength: X-ray wavelength in Å
        rows_read: Reflection rows in the source
        observations: Observations that passed the validity filter
        unique_reflections: Reflections after merging
        d_min: High-resolution limit in Å
        d_max: Low-resolution limit in Å
    """

    source_file: Optional[str] = Field(default=None, description="Path of the ingested file")

    file_type: str = Field(..., description="Source format")

    kind: DataKind = Field(..., description="Which intensities were read")

    anomalous: bool = Field(default=False, description="I(+) and I(-) kept apart")

    spacegroup: str = Field(..., min_length=1, description="Extended Hermann-Mauguin symbol")

    cell: CrystalCell = Field(..., description="Unit cell")

    wavelength: float = Field(default=0.0, ge=0, description="X-ray wavelength in Å")

    rows_read: int = Field(default=0, ge=0, description="Reflection rows in the source")

    observations: int = Field(default=0, ge=0, description="Observations after validity filter")

    unique_reflections: int = Field(default=0, ge=0, description="Reflections after merging")

    d_min: Optional[float] = Field(default=None, gt=0, description="High-resolution limit in Å")

    d_max: Optional[float] = Field(default=None, gt=0, description="Low-resolution limit in Å")

    @field_validator("spacegroup")
    @classmethod
    def validate_spacegroup(cls, v: str) -> str:
        """Space group symbols must be known to gemmi."""
        if find_spacegroup(v) is None:
            raise ValueError(f"unknown space group: {v!r}")
        return v

    @property
    def multiplicity(self) -> float:
        """Mean number of observations per unique reflection."""
        if self.unique_reflections == 0:
            return 0.0
        return self.observations / self.unique_reflections

    @property
    def resolution_range(self) -> Optional[tuple[float, float]]:
        if self.d_min is None or self.d_max is None:
            return None
        return (self.d_min, self.d_max)

    def __str__(self) -> str:
        res = ""
        if self.d_min is not None and self.d_max is not None:
            res = f", {self.d_max:.2f} - {self.d_min:.2f} Å"
        return (
            f"MergedDataset: {self.spacegroup} [{self.unique_reflections} unique, "
            f"{self.observations} obs{res}]"
        )
