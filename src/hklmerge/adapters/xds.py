"""
XDS_ASCII reflection files as a ReflectionTable.
"""

from pathlib import Path

import gemmi

from hklmerge.adapters.base import ReflectionTable, SourceMetadata
from hklmerge.parsers.xds_parser import XdsAsciiData, XdsAsciiParser
from hklmerge.symmetry.registry import find_spacegroup


def table_from_xds(xds: XdsAsciiData) -> ReflectionTable:
    """
    Wrap parsed XDS_ASCII data.

    Column labels are the ITEM_ names (H, K, L, IOBS, SIGMA(IOBS), ...).
    """
    unit_cell = gemmi.UnitCell(*xds.unit_cell) if xds.unit_cell else None
    metadata = SourceMetadata(
        unit_cell=unit_cell,
        spacegroup=find_spacegroup(xds.space_group_number),
        wavelength=xds.wavelength,
        merged=xds.merged,
        source=xds.file_path,
    )
    return ReflectionTable(xds.labels, xds.as_array(), metadata=metadata)


def read_xds_table(file_path: str | Path) -> tuple[XdsAsciiData, ReflectionTable]:
    """Parse an XDS_ASCII file; returns the parsed data and its table."""
    xds = XdsAsciiParser().parse(file_path)
    return xds, table_from_xds(xds)
