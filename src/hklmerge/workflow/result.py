"""
Merge result dataclass.

Holds the output of the merge pipeline.
"""

from dataclasses import dataclass, field
from typing import Optional

from hklmerge.models.dataset import MergedDataset
from hklmerge.models.intensities import Intensities


@dataclass
class MergeResult:
    """
    Result of merging one reflection file.

    Attributes:
        intensities: The merged reflection set
        dataset: Summary record of the run
        source_file: Path to the source file
        warnings: Non-fatal issues encountered
    """

    intensities: Optional[Intensities] = None
    dataset: Optional[MergedDataset] = None

    source_file: Optional[str] = None

    warnings: list[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """Check if the merge produced a reflection set and its record."""
        return self.intensities is not None and self.dataset is not None

    def summary(self) -> str:
        """Generate a human-readable summary."""
        lines = ["Merge Summary:"]

        if self.source_file:
            lines.append(f"  Source: {self.source_file}")

        if self.dataset:
            ds = self.dataset
            lines.append(f"  Format: {ds.file_type} ({ds.kind} intensities)")
            lines.append(f"  Space group: {ds.spacegroup}")
            lines.append(f"  Unit cell: {ds.cell}")
            lines.append(f"  Wavelength: {ds.wavelength:.4f} Å")
            lines.append(f"  Rows read: {ds.rows_read}")
            lines.append(f"  Valid observations: {ds.observations}")
            lines.append(
                f"  Unique reflections: {ds.unique_reflections}"
                f"{' (I+ and I- separate)' if ds.anomalous else ''}"
            )
            if ds.unique_reflections:
                lines.append(f"  Multiplicity: {ds.multiplicity:.2f}")
            if ds.resolution_range:
                lines.append(f"  Resolution: {ds.d_max:.2f} - {ds.d_min:.2f} Å")
        else:
            lines.append("  Dataset: Not merged")

        if self.warnings:
            lines.append(f"\nWarnings ({len(self.warnings)}):")
            for w in self.warnings[:5]:  # Limit to first 5
                lines.append(f"  - {w}")

        return "\n".join(lines)
