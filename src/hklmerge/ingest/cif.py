"""
Reading intensities from mmCIF and mmJSON blocks.
"""

import logging

import gemmi

from hklmerge.adapters.cif import (
    MERGED_CATEGORY,
    UNMERGED_CATEGORY,
    has_category,
    table_from_block,
)
from hklmerge.errors import FormatMismatch
from hklmerge.ingest.core import new_intensities, read_data, read_paired_data, select_columns
from hklmerge.models.intensities import Intensities

logger = logging.getLogger(__name__)

UNMERGED_LABELS = [("intensity_net", "intensity_sigma")]
MEAN_LABELS = [("intensity_meas", "intensity_sigma")]
ANOMALOUS_LABELS = {
    "plus": ("pdbx_I_plus", "pdbx_I_plus_sigma"),
    "minus": ("pdbx_I_minus", "pdbx_I_minus_sigma"),
}


def read_unmerged_intensities_from_mmcif(block: gemmi.cif.Block, source: str = "") -> Intensities:
    """
    Read per-measurement intensities from the _diffrn_refln loop.

    The list carries no Friedel signs; indices are reduced to the
    asymmetric unit and signed by the reducing operation.

    Raises:
        FormatMismatch: If the block has no _diffrn_refln data
        SchemaError: If intensity_net or intensity_sigma is missing
        DomainError: If the space group or cell is unknown
    """
    if not has_category(block, UNMERGED_CATEGORY):
        raise FormatMismatch("expected unmerged data (_diffrn_refln)")

    table = table_from_block(block, UNMERGED_CATEGORY, source=source)
    value_label, sigma_label = select_columns(table, UNMERGED_LABELS)
    intensities = new_intensities(table)
    read_data(
        intensities,
        table,
        table.column_index(value_label),
        table.column_index(sigma_label),
    )
    intensities.switch_to_asu_indices()

    logger.info(f"Read {len(intensities)} unmerged observations from block {block.name}")
    return intensities


def read_mean_intensities_from_mmcif(block: gemmi.cif.Block, source: str = "") -> Intensities:
    """
    Read intensity_meas from the _refln loop.

    Raises:
        FormatMismatch: If the block has no _refln data
        SchemaError: If intensity_meas or intensity_sigma is missing
    """
    if not has_category(block, MERGED_CATEGORY):
        raise FormatMismatch("expected merged data (_refln)")

    table = table_from_block(block, MERGED_CATEGORY, source=source)
    value_label, sigma_label = select_columns(table, MEAN_LABELS)
    intensities = new_intensities(table)
    read_data(
        intensities,
        table,
        table.column_index(value_label),
        table.column_index(sigma_label),
    )

    logger.info(f"Read {len(intensities)} mean intensities from block {block.name}")
    return intensities


def read_anomalous_intensities_from_mmcif(block: gemmi.cif.Block, source: str = "") -> Intensities:
    """
    Read pdbx_I_plus and pdbx_I_minus from the _refln loop.

    Raises:
        FormatMismatch: If the block has no _refln data
        SchemaError: If any of the four anomalous items is missing
    """
    if not has_category(block, MERGED_CATEGORY):
        raise FormatMismatch("expected merged data (_refln)")

    table = table_from_block(block, MERGED_CATEGORY, source=source)
    plus = tuple(table.column_index(label) for label in ANOMALOUS_LABELS["plus"])
    minus = tuple(table.column_index(label) for label in ANOMALOUS_LABELS["minus"])
    intensities = new_intensities(table)
    read_paired_data(intensities, table, plus, minus)

    logger.info(f"Read {len(intensities)} anomalous intensities from block {block.name}")
    return intensities


def has_anomalous_items(block: gemmi.cif.Block) -> bool:
    """True if the _refln loop has all four I(+)/I(-) items."""
    return all(
        block.find_values(MERGED_CATEGORY + label)
        for pair in ANOMALOUS_LABELS.values()
        for label in pair
    )
