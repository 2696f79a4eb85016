"""
Ingestion of reflection data into Intensities sets.

Module structure:
- core.py: format-independent strategies over the RowSource contract
- mtz.py, cif.py, xds.py: per-format readers
- registry.py: FormatHandler classes selected by FileType
"""

from .cif import (
    read_anomalous_intensities_from_mmcif,
    read_mean_intensities_from_mmcif,
    read_unmerged_intensities_from_mmcif,
)
from .core import (
    read_data,
    read_paired_data,
    read_signed_data,
    select_columns,
)
from .mtz import (
    read_anomalous_intensities_from_mtz,
    read_mean_intensities_from_mtz,
    read_unmerged_intensities_from_mtz,
)
from .registry import (
    CifHandler,
    FormatHandler,
    FormatRegistry,
    MtzHandler,
    XdsHandler,
)
from .xds import read_unmerged_intensities_from_xds

__all__ = [
    # Strategies
    "read_data",
    "read_signed_data",
    "read_paired_data",
    "select_columns",
    # MTZ
    "read_unmerged_intensities_from_mtz",
    "read_mean_intensities_from_mtz",
    "read_anomalous_intensities_from_mtz",
    # mmCIF / mmJSON
    "read_unmerged_intensities_from_mmcif",
    "read_mean_intensities_from_mmcif",
    "read_anomalous_intensities_from_mmcif",
    # XDS_ASCII
    "read_unmerged_intensities_from_xds",
    # Handlers
    "FormatHandler",
    "FormatRegistry",
    "MtzHandler",
    "CifHandler",
    "XdsHandler",
]
