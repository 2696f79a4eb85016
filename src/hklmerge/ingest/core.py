"""
Format-independent ingestion strategies.

These functions walk any RowSource and append valid observations to an
Intensities set. They know nothing about file formats; the per-format
readers decide which columns to pass in.
"""

import logging
import math
from typing import Optional, Sequence

import gemmi

from hklmerge.adapters.base import ReflectionTable, RowSource
from hklmerge.enums import SignTag
from hklmerge.errors import SchemaError
from hklmerge.models.intensities import Intensities, copy_metadata

logger = logging.getLogger(__name__)


def check_offsets(source: RowSource, *offsets: int) -> None:
    """
    Make sure field offsets fit in a row.

    Raises:
        SchemaError: If an offset is outside the row
    """
    for offset in offsets:
        if not 0 <= offset < source.row_stride:
            raise SchemaError(f"field offset {offset} outside row of {source.row_stride} fields")


def new_intensities(
    table: ReflectionTable,
    wavelength_label: Optional[str] = None,
    unit_cell: Optional[gemmi.UnitCell] = None,
) -> Intensities:
    """
    Create an empty set carrying the table's crystal metadata.

    Args:
        table: Source table
        wavelength_label: Column whose dataset wavelength is used
        unit_cell: Overrides the cell from the table metadata

    Raises:
        DomainError: If the space group or cell is unknown
    """
    metadata = table.metadata
    wavelength = table.wavelength_of(wavelength_label) if wavelength_label else metadata.wavelength
    return copy_metadata(
        spacegroup=metadata.spacegroup,
        unit_cell=unit_cell if unit_cell is not None else metadata.unit_cell,
        wavelength=wavelength,
    )


def select_columns(
    table: ReflectionTable,
    candidates: Sequence[tuple[str, str]],
) -> tuple[str, str]:
    """
    Pick the first available (value, sigma) column pair.

    The value label decides: once a value column is found, its sigma
    column must exist too.

    Args:
        table: Source table
        candidates: (value label, sigma label) pairs in order of preference

    Raises:
        SchemaError: If no value column is present, or its sigma is missing
    """
    for value_label, sigma_label in candidates:
        if table.has_column(value_label):
            table.column_index(sigma_label)
            return value_label, sigma_label
    tried = " or ".join(value for value, _ in candidates)
    raise SchemaError(f"Intensities ({tried}) not found.")


def read_data(
    intensities: Intensities,
    source: RowSource,
    value_idx: int,
    sigma_idx: int,
    sign: SignTag = SignTag.NONE,
) -> int:
    """
    One observation per row, all with the same sign.

    Returns:
        Number of observations added
    """
    check_offsets(source, value_idx, sigma_idx)
    added = 0
    for row in range(source.row_count):
        added += intensities.add_if_valid(
            source.lattice_index_at(row),
            source.numeric_field_at(row, value_idx),
            source.numeric_field_at(row, sigma_idx),
            sign,
        )
    _log_rejected(source.row_count, added)
    return added


def read_signed_data(
    intensities: Intensities,
    source: RowSource,
    value_idx: int,
    sigma_idx: int,
    code_idx: int,
) -> int:
    """
    One observation per row, signed by the parity of a packed symmetry code.

    An even code marks I(-), an odd code I(+). Rows without a usable code
    are skipped like any other invalid row.

    Returns:
        Number of observations added
    """
    check_offsets(source, value_idx, sigma_idx, code_idx)
    added = 0
    for row in range(source.row_count):
        code = source.numeric_field_at(row, code_idx)
        if not math.isfinite(code):
            continue
        added += intensities.add_if_valid(
            source.lattice_index_at(row),
            source.numeric_field_at(row, value_idx),
            source.numeric_field_at(row, sigma_idx),
            SignTag.from_parity(int(code)),
        )
    _log_rejected(source.row_count, added)
    return added


def read_paired_data(
    intensities: Intensities,
    source: RowSource,
    plus: tuple[int, int],
    minus: tuple[int, int],
) -> int:
    """
    Up to two observations per row, from I(+) and I(-) column pairs.

    Args:
        plus: (value offset, sigma offset) of I(+)
        minus: (value offset, sigma offset) of I(-)

    Returns:
        Number of observations added
    """
    check_offsets(source, *plus, *minus)
    added = 0
    for row in range(source.row_count):
        hkl = source.lattice_index_at(row)
        for (value_idx, sigma_idx), sign in ((plus, SignTag.PLUS), (minus, SignTag.MINUS)):
            added += intensities.add_if_valid(
                hkl,
                source.numeric_field_at(row, value_idx),
                source.numeric_field_at(row, sigma_idx),
                sign,
            )
    _log_rejected(2 * source.row_count, added)
    return added


def _log_rejected(total: int, added: int) -> None:
    if total > added:
        logger.debug(f"Skipped {total - added} of {total} values (missing or invalid)")
