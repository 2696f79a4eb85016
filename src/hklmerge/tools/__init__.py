"""
Tools module for file detection.

Provides utilities to detect reflection file types and find readable
files across a set of directories.

Module structure:
- types.py: FileType enum, FileInfo dataclass
- detection.py: File type detection functions
- finder.py: FileFinder class for locating reflection files
"""

from .detection import (
    PATTERNS,
    detect_file,
    detect_file_type,
)
from .finder import FileFinder
from .types import (
    FileInfo,
    FileType,
)

__all__ = [
    # Types
    "FileType",
    "FileInfo",
    # Detection functions
    "PATTERNS",
    "detect_file_type",
    "detect_file",
    # Finder
    "FileFinder",
]
