"""
Format adapters.

Each supported file format is exposed as a ReflectionTable, which
implements the RowSource contract used by the ingestion layer:
- MTZ via gemmi.Mtz
- mmCIF / mmJSON via gemmi.cif
- XDS_ASCII via XdsAsciiParser
"""

from hklmerge.adapters.base import ReflectionTable, RowSource, SourceMetadata
from hklmerge.adapters.cif import (
    MERGED_CATEGORY,
    UNMERGED_CATEGORY,
    find_reflection_block,
    has_category,
    read_block_metadata,
    read_cif_document,
    table_from_block,
)
from hklmerge.adapters.mtz import read_mtz_table, table_from_mtz
from hklmerge.adapters.xds import read_xds_table, table_from_xds

__all__ = [
    # Contract
    "RowSource",
    "ReflectionTable",
    "SourceMetadata",
    # MTZ
    "table_from_mtz",
    "read_mtz_table",
    # mmCIF / mmJSON
    "MERGED_CATEGORY",
    "UNMERGED_CATEGORY",
    "read_cif_document",
    "find_reflection_block",
    "has_category",
    "read_block_metadata",
    "table_from_block",
    # XDS_ASCII
    "table_from_xds",
    "read_xds_table",
]
