"""
Row-access contract for reflection sources.

Every source format is exposed through the same small interface so that
the ingestion strategies never depend on a concrete file format.
"""

from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence, runtime_checkable

import gemmi
import numpy as np
from numpy.typing import NDArray

from hklmerge.errors import SchemaError
from hklmerge.models.reflection import MillerIndex


@runtime_checkable
class RowSource(Protocol):
    """Uniform random access to reflection rows."""

    @property
    def row_count(self) -> int: ...

    @property
    def row_stride(self) -> int: ...

    def lattice_index_at(self, row: int) -> MillerIndex: ...

    def numeric_field_at(self, row: int, field_offset: int) -> float: ...


@dataclass
class SourceMetadata:
    """
    Crystal and provenance metadata carried by a reflection source.

    Attributes:
        unit_cell: Cell from the file header (None if absent)
        spacegroup: Resolved space group (None if absent or unknown)
        wavelength: Default wavelength in Å
        merged: False if the source holds per-measurement data
        batch_cells: Cell parameters from per-image batch headers
        source: Description of the origin, e.g. a file path
    """

    unit_cell: Optional[gemmi.UnitCell] = None
    spacegroup: Optional[gemmi.SpaceGroup] = None
    wavelength: Optional[float] = None
    merged: bool = True
    batch_cells: list[tuple[float, ...]] = field(default_factory=list)
    source: str = ""

    def average_batch_cell(self) -> Optional[gemmi.UnitCell]:
        """Mean of the batch-header cells, or None without batches."""
        if not self.batch_cells:
            return None
        mean = np.mean(np.array(self.batch_cells, dtype=np.float64), axis=0)
        return gemmi.UnitCell(*(float(x) for x in mean[:6]))


class ReflectionTable:
    """
    Column table of reflection data backed by a 2-D numpy array.

    Rows are reflections; columns are labelled fields. Three of the
    columns hold the Miller index.

    Usage:
        table = ReflectionTable(["H", "K", "L", "I", "SIGI"], array)
        i_col = table.column_index("I")
        for row in range(table.row_count):
            hkl = table.lattice_index_at(row)
            value = table.numeric_field_at(row, i_col)
    """

    def __init__(
        self,
        labels: Sequence[str],
        data: NDArray,
        metadata: Optional[SourceMetadata] = None,
        hkl_labels: Sequence[str] = ("H", "K", "L"),
        column_wavelengths: Optional[dict[str, float]] = None,
    ):
        """
        Initialize the table.

        Args:
            labels: Column labels, one per array column
            data: Array of shape (rows, len(labels))
            metadata: Crystal metadata of the source
            hkl_labels: Labels of the Miller index columns
            column_wavelengths: Wavelength per column, where it differs
                between columns (MTZ datasets)

        Raises:
            SchemaError: If the array shape does not match the labels or
                the Miller index columns are missing
        """
        array = np.asarray(data, dtype=np.float64)
        if array.ndim == 1 and array.size == 0:
            array = array.reshape(0, len(labels))
        if array.ndim != 2 or array.shape[1] != len(labels):
            raise SchemaError(
                f"expected a table with {len(labels)} columns, got shape {array.shape}"
            )
        self.labels = list(labels)
        self.data = array
        self.metadata = metadata or SourceMetadata()
        self.column_wavelengths = dict(column_wavelengths or {})
        self._hkl_idx = tuple(self.column_index(label) for label in hkl_labels)

    @property
    def row_count(self) -> int:
        return self.data.shape[0]

    @property
    def row_stride(self) -> int:
        return self.data.shape[1]

    def lattice_index_at(self, row: int) -> MillerIndex:
        """
        Miller index of a row.

        Raises:
            SchemaError: If an index field is missing
        """
        values = self.data[row, list(self._hkl_idx)]
        if not np.isfinite(values).all():
            raise SchemaError(f"Missing Miller index in row {row + 1}")
        h, k, l = (int(round(v)) for v in values)  # noqa: E741
        return MillerIndex(h, k, l)

    def numeric_field_at(self, row: int, field_offset: int) -> float:
        return float(self.data[row, field_offset])

    def has_column(self, label: str) -> bool:
        return label in self.labels

    def column_index(self, label: str) -> int:
        """
        Position of a column.

        Raises:
            SchemaError: If no column has this label
        """
        try:
            return self.labels.index(label)
        except ValueError:
            raise SchemaError(f"Column not found: {label}") from None

    def find_column(self, labels: Sequence[str]) -> Optional[str]:
        """Return the first of the given labels present in the table."""
        for label in labels:
            if label in self.labels:
                return label
        return None

    def wavelength_of(self, label: str) -> Optional[float]:
        """Wavelength of the dataset a column belongs to."""
        return self.column_wavelengths.get(label, self.metadata.wavelength)

    def __len__(self) -> int:
        return self.row_count

    def __repr__(self) -> str:
        return f"ReflectionTable({self.row_count} rows, columns={self.labels})"
