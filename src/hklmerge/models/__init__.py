"""
Data models for reflection intensities.

- MillerIndex / Observation: single reflections
- Intensities: the canonical reflection set that all readers produce
- MergedDataset / CrystalCell: pydantic records for export
"""

from hklmerge.enums import DataKind, SignTag
from hklmerge.models.base import DataModel
from hklmerge.models.dataset import CrystalCell, MergedDataset
from hklmerge.models.intensities import Intensities, copy_metadata
from hklmerge.models.reflection import MillerIndex, Observation

__all__ = [
    "DataModel",
    "DataKind",
    "SignTag",
    "MillerIndex",
    "Observation",
    "Intensities",
    "copy_metadata",
    "CrystalCell",
    "MergedDataset",
]
