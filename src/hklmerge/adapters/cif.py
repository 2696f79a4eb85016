"""
mmCIF and mmJSON reflection files.

Both are read into a gemmi.cif.Document; the reflection loop of one block
(`_refln` for merged data, `_diffrn_refln` for unmerged data) becomes a
ReflectionTable.
"""

import logging
import math
from pathlib import Path
from typing import Optional

import gemmi
import numpy as np

from hklmerge.adapters.base import ReflectionTable, SourceMetadata
from hklmerge.errors import SchemaError
from hklmerge.symmetry.registry import find_spacegroup

logger = logging.getLogger(__name__)

MERGED_CATEGORY = "_refln."
UNMERGED_CATEGORY = "_diffrn_refln."

CELL_TAGS = [
    "_cell.length_a",
    "_cell.length_b",
    "_cell.length_c",
    "_cell.angle_alpha",
    "_cell.angle_beta",
    "_cell.angle_gamma",
]

# Tried in order; the first one present in the block wins
SPACEGROUP_NAME_TAGS = [
    "_symmetry.space_group_name_H-M",
    "_space_group.name_H-M_alt",
    "_space_group.name_H-M_full",
]
SPACEGROUP_NUMBER_TAGS = [
    "_symmetry.Int_Tables_number",
    "_space_group.IT_number",
]
WAVELENGTH_TAGS = [
    "_diffrn_radiation_wavelength.wavelength",
    "_diffrn_source.pdbx_wavelength",
]


def read_cif_document(file_path: str | Path) -> gemmi.cif.Document:
    """
    Read an mmCIF or mmJSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    if file_path.suffix.lower() == ".json":
        return gemmi.cif.read_mmjson(str(file_path))
    return gemmi.cif.read(str(file_path))


def find_reflection_block(doc: gemmi.cif.Document) -> gemmi.cif.Block:
    """
    Return the first block that contains reflection data.

    Raises:
        SchemaError: If no block has a reflection category
    """
    for block in doc:
        if has_category(block, MERGED_CATEGORY) or has_category(block, UNMERGED_CATEGORY):
            return block
    raise SchemaError("no block with _refln or _diffrn_refln data")


def has_category(block: gemmi.cif.Block, category: str) -> bool:
    """True if the block has an index_h item in the category."""
    return block.find_value(category + "index_h") is not None or bool(
        block.find_loop(category + "index_h")
    )


def _first_value(block: gemmi.cif.Block, tags: list[str]) -> Optional[str]:
    for tag in tags:
        value = block.find_value(tag)
        if value is not None and value not in ("?", "."):
            return gemmi.cif.as_string(value)
    return None


def _first_number(block: gemmi.cif.Block, tags: list[str]) -> Optional[float]:
    value = _first_value(block, tags)
    if value is None:
        return None
    number = gemmi.cif.as_number(value)
    return number if math.isfinite(number) else None


def read_block_metadata(block: gemmi.cif.Block, source: str = "") -> SourceMetadata:
    """Extract cell, space group and wavelength from a block."""
    cell = None
    params = [_first_number(block, [tag]) for tag in CELL_TAGS]
    if all(p is not None for p in params):
        cell = gemmi.UnitCell(*params)

    spacegroup = None
    name = _first_value(block, SPACEGROUP_NAME_TAGS)
    if name is not None:
        spacegroup = find_spacegroup(name)
    if spacegroup is None:
        number = _first_number(block, SPACEGROUP_NUMBER_TAGS)
        if number is not None:
            spacegroup = find_spacegroup(int(number))
    if spacegroup is None:
        logger.debug(f"No usable space group in block {block.name}")

    wavelength = None
    loop_column = block.find_loop(WAVELENGTH_TAGS[0])
    if loop_column:
        wavelength = gemmi.cif.as_number(loop_column[0])
    if wavelength is None or not math.isfinite(wavelength):
        wavelength = _first_number(block, WAVELENGTH_TAGS)

    return SourceMetadata(
        unit_cell=cell,
        spacegroup=spacegroup,
        wavelength=wavelength,
        merged=has_category(block, MERGED_CATEGORY),
        source=source,
    )


def table_from_block(
    block: gemmi.cif.Block,
    category: str = MERGED_CATEGORY,
    source: str = "",
) -> ReflectionTable:
    """
    Build a ReflectionTable from one reflection loop of a block.

    Column labels are the item names without the category prefix
    (e.g. "intensity_meas"). Unknown and inapplicable values become NaN.

    Args:
        block: CIF block holding the data
        category: Category prefix, "_refln." or "_diffrn_refln."
        source: Description of the origin for messages

    Raises:
        SchemaError: If the category is missing or is not a loop
    """
    column = block.find_loop(category + "index_h")
    loop = column.get_loop() if column else None
    if loop is None:
        if block.find_value(category + "index_h") is not None:
            raise SchemaError(f"{category[:-1]} must be a loop, found single values")
        raise SchemaError(f"{category[:-1]} not found in block {block.name}")

    labels = [tag[len(category):] for tag in loop.tags]
    width = loop.width()
    values = np.array([gemmi.cif.as_number(v) for v in loop.values], dtype=np.float64)
    data = values.reshape(-1, width)

    logger.debug(f"Block {block.name}: {data.shape[0]} rows in {category[:-1]}")
    return ReflectionTable(
        labels,
        data,
        metadata=read_block_metadata(block, source=source),
        hkl_labels=("index_h", "index_k", "index_l"),
    )
