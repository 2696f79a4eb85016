"""
MTZ reflection files.

Reads the binary MTZ column table with gemmi and exposes it as a
ReflectionTable.
"""

import logging
from pathlib import Path

import gemmi

from hklmerge.adapters.base import ReflectionTable, SourceMetadata

logger = logging.getLogger(__name__)


def table_from_mtz(mtz: gemmi.Mtz, source: str = "") -> ReflectionTable:
    """
    Wrap an in-memory gemmi.Mtz.

    The first three columns of an MTZ file are always H, K, L. Files with
    batch headers hold unmerged data; the cell of each batch header is the
    first six batch floats.

    Args:
        mtz: Parsed MTZ file
        source: Description of the origin for messages

    Returns:
        ReflectionTable with one row per reflection record
    """
    labels = [col.label for col in mtz.columns]
    column_wavelengths = {
        col.label: float(mtz.dataset(col.dataset_id).wavelength) for col in mtz.columns
    }
    batch_cells = [
        tuple(float(batch.floats[i]) for i in range(6)) for batch in mtz.batches
    ]

    metadata = SourceMetadata(
        unit_cell=mtz.cell,
        spacegroup=mtz.spacegroup,
        merged=len(mtz.batches) == 0,
        batch_cells=batch_cells,
        source=source,
    )

    return ReflectionTable(
        labels,
        mtz.array,
        metadata=metadata,
        hkl_labels=labels[:3],
        column_wavelengths=column_wavelengths,
    )


def read_mtz_table(file_path: str | Path) -> ReflectionTable:
    """
    Read an MTZ file from disk.

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    mtz = gemmi.read_mtz_file(str(file_path))
    logger.info(
        f"Read {file_path.name}: {mtz.nreflections} reflections, "
        f"{len(mtz.columns)} columns, {len(mtz.batches)} batches"
    )
    return table_from_mtz(mtz, source=str(file_path))
