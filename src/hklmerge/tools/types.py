"""
Type definitions for file detection.

Contains enums and dataclasses for representing file information.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class FileType(str, Enum):
    """
    Types of reflection files.

    Attributes:
        MTZ: CCP4 MTZ binary file (.mtz)
        MMCIF: mmCIF text file with _refln or _diffrn_refln data
        MMJSON: mmJSON (PDBj) rendition of mmCIF (.json)
        XDS_ASCII: XDS_ASCII text file from CORRECT or XSCALE (.HKL)
        UNKNOWN: Unrecognized file type
    """

    MTZ = "mtz"
    MMCIF = "mmcif"
    MMJSON = "mmjson"
    XDS_ASCII = "xds_ascii"
    UNKNOWN = "unknown"


@dataclass
class FileInfo:
    """
    Information about a detected file.

    Attributes:
        path: Absolute path to the file
        file_type: Detected FileType
        size: File size in bytes
    """

    path: str
    file_type: FileType
    size: int = 0

    @property
    def filename(self) -> str:
        """Get the filename without path."""
        return Path(self.path).name

    @property
    def exists(self) -> bool:
        """Check if the file exists."""
        return Path(self.path).exists()

    @property
    def is_supported(self) -> bool:
        """True if the file can be read."""
        return self.file_type != FileType.UNKNOWN
