"""
hkl-merge - Normalization and merging of crystallographic reflection intensities.

This package reads reflection intensities from MTZ, mmCIF, mmJSON and
XDS_ASCII files into one canonical representation, reduces Miller indices
to the asymmetric unit, drops systematic absences and merges equivalent
observations by inverse-variance weighting.
"""

__version__ = "0.1.0"

from hklmerge.config import MergeOptions
from hklmerge.enums import DataKind, SignTag
from hklmerge.errors import (
    DomainError,
    FormatMismatch,
    IngestionError,
    SchemaError,
    UnsupportedFormatError,
)
from hklmerge.models import Intensities, MergedDataset, MillerIndex, Observation
from hklmerge.tools import (
    FileFinder,
    FileInfo,
    FileType,
    detect_file_type,
)
from hklmerge.validation import DataValidator, ValidationResult
from hklmerge.workflow import MergePipeline, MergeResult, merge_file
from hklmerge.writers import ParquetWriter, write_result_to_parquet

__all__ = [
    # Configuration
    "MergeOptions",
    # Models
    "DataKind",
    "SignTag",
    "MillerIndex",
    "Observation",
    "Intensities",
    "MergedDataset",
    # Errors
    "IngestionError",
    "SchemaError",
    "DomainError",
    "FormatMismatch",
    "UnsupportedFormatError",
    # File detection tools
    "FileType",
    "FileInfo",
    "FileFinder",
    "detect_file_type",
    # Workflow
    "MergePipeline",
    "MergeResult",
    "merge_file",
    # Validation
    "DataValidator",
    "ValidationResult",
    # Writers
    "ParquetWriter",
    "write_result_to_parquet",
]
