"""
Reading intensities from MTZ tables.
"""

import logging
from typing import Sequence

from hklmerge.adapters.base import ReflectionTable
from hklmerge.config import DEFAULT_MEAN_LABELS
from hklmerge.errors import FormatMismatch, SchemaError
from hklmerge.ingest.core import (
    new_intensities,
    read_data,
    read_paired_data,
    read_signed_data,
    select_columns,
)
from hklmerge.models.intensities import Intensities

logger = logging.getLogger(__name__)

ISYM_LABEL = "M/ISYM"
ISYM_POSITION = 3
SIGMA_PREFIX = "SIG"
ANOMALOUS_LABELS = {
    "plus": ("I(+)", "SIGI(+)"),
    "minus": ("I(-)", "SIGI(-)"),
}


def read_unmerged_intensities_from_mtz(table: ReflectionTable) -> Intensities:
    """
    Read unmerged I/SIGI with signs from the packed M/ISYM column.

    M/ISYM must be the 4th column. Indices are reduced to the asymmetric
    unit afterwards: Aimless (since 0.7.6) can write unmerged files with
    original indices and all ISYM = 1.

    Raises:
        FormatMismatch: If the file has no batch headers
        SchemaError: If M/ISYM, I or SIGI is missing or misplaced
        DomainError: If the space group is unknown
    """
    if table.metadata.merged:
        raise FormatMismatch("expected unmerged file")
    if not table.has_column(ISYM_LABEL) or table.column_index(ISYM_LABEL) != ISYM_POSITION:
        raise SchemaError(f"unmerged file should have {ISYM_LABEL} as 4th column")

    value_idx = table.column_index("I")
    sigma_idx = table.column_index("SIGI")
    intensities = new_intensities(
        table,
        wavelength_label="I",
        unit_cell=table.metadata.average_batch_cell(),
    )
    read_signed_data(intensities, table, value_idx, sigma_idx, ISYM_POSITION)
    intensities.switch_to_asu_indices()

    logger.info(f"Read {len(intensities)} unmerged observations from MTZ")
    return intensities


def read_mean_intensities_from_mtz(
    table: ReflectionTable,
    labels: Sequence[str] = DEFAULT_MEAN_LABELS,
) -> Intensities:
    """
    Read mean intensities from a merged file.

    Args:
        table: MTZ table
        labels: Intensity labels in order of preference; the sigma column
            is "SIG" + label

    Raises:
        FormatMismatch: If the file has batch headers
        SchemaError: If none of the labels (or the matching sigma) exists
    """
    if not table.metadata.merged:
        raise FormatMismatch("expected merged file")

    value_label, sigma_label = select_columns(
        table, [(label, SIGMA_PREFIX + label) for label in labels]
    )
    intensities = new_intensities(table, wavelength_label=value_label)
    read_data(
        intensities,
        table,
        table.column_index(value_label),
        table.column_index(sigma_label),
    )

    logger.info(f"Read {len(intensities)} mean intensities ({value_label}) from MTZ")
    return intensities


def read_anomalous_intensities_from_mtz(table: ReflectionTable) -> Intensities:
    """
    Read I(+) and I(-) from a merged file.

    Raises:
        FormatMismatch: If the file has batch headers
        SchemaError: If any of I(+), SIGI(+), I(-), SIGI(-) is missing
    """
    if not table.metadata.merged:
        raise FormatMismatch("expected merged file")

    plus = tuple(table.column_index(label) for label in ANOMALOUS_LABELS["plus"])
    minus = tuple(table.column_index(label) for label in ANOMALOUS_LABELS["minus"])
    intensities = new_intensities(table, wavelength_label=ANOMALOUS_LABELS["plus"][0])
    read_paired_data(intensities, table, plus, minus)

    logger.info(f"Read {len(intensities)} anomalous intensities from MTZ")
    return intensities


def has_anomalous_columns(table: ReflectionTable) -> bool:
    """True if all four I(+)/I(-) columns are present."""
    return all(
        table.has_column(label)
        for pair in ANOMALOUS_LABELS.values()
        for label in pair
    )
