"""
File detection utilities.

Functions for detecting reflection file types from their content.
"""

import logging
import re
from pathlib import Path

from .types import FileInfo, FileType

logger = logging.getLogger(__name__)

MTZ_MAGIC = b"MTZ "

# Regex patterns for content sniffing
PATTERNS = {
    "xds_ascii": re.compile(r"^!FORMAT=XDS_ASCII\b"),
    "cif_block": re.compile(r"^data_\S+"),
    "cif_reflections": re.compile(r"^\s*_(refln|diffrn_refln)\.index_h\b"),
    # mmJSON: {"data_XXXX": {...}}
    "mmjson_block": re.compile(r'^\s*\{\s*"data_[^"]*"\s*:'),
}


def detect_file_type(file_path: str | Path) -> FileType:
    """
    Detect the type of a reflection file based on its content.

    MTZ files are recognised by their magic bytes, mmJSON by a top-level
    "data_" key, XDS_ASCII by its first line and mmCIF by a data block
    with a reflection loop. The extension only selects the JSON check.

    Args:
        file_path: Path to the file

    Returns:
        FileType enum value

    Example:
        >>> detect_file_type("/data/XDS_ASCII.HKL")
        FileType.XDS_ASCII
        >>> detect_file_type("/data/1abc-sf.cif")
        FileType.MMCIF
    """
    path = Path(file_path)

    if not path.is_file():
        return FileType.UNKNOWN

    try:
        with open(path, "rb") as f:
            if f.read(4) == MTZ_MAGIC:
                return FileType.MTZ
    except OSError as e:
        logger.debug(f"Cannot read {path}: {e}")
        return FileType.UNKNOWN

    if path.suffix.lower() == ".json":
        return _detect_json_type(path)
    return _detect_text_type(path)


def _detect_json_type(path: Path) -> FileType:
    """Detect if a JSON file is mmJSON."""
    try:
        with open(path, "r", errors="replace") as f:
            content = f.read(4096)
    except OSError as e:
        logger.debug(f"Cannot read {path}: {e}")
        return FileType.UNKNOWN

    if PATTERNS["mmjson_block"].match(content):
        return FileType.MMJSON
    return FileType.UNKNOWN


def _detect_text_type(path: Path) -> FileType:
    """Detect XDS_ASCII or mmCIF text files."""
    try:
        with open(path, "r", errors="replace") as f:
            first = f.readline()
            if PATTERNS["xds_ascii"].match(first):
                return FileType.XDS_ASCII

            # Reflection loops can follow a long header, so scan the file
            in_block = bool(PATTERNS["cif_block"].match(first))
            for line in f:
                if not in_block:
                    in_block = bool(PATTERNS["cif_block"].match(line))
                elif PATTERNS["cif_reflections"].match(line):
                    return FileType.MMCIF
    except OSError as e:
        logger.debug(f"Cannot read {path}: {e}")

    return FileType.UNKNOWN


def detect_file(file_path: str | Path) -> FileInfo:
    """
    Detect file type and size.

    This is the main entry point for file detection.

    Args:
        file_path: Path to the file

    Returns:
        FileInfo with type and size

    Example:
        >>> info = detect_file("/data/scaled.mtz")
        >>> info.file_type
        FileType.MTZ
    """
    path = Path(file_path)

    file_type = detect_file_type(path)
    size = path.stat().st_size if path.is_file() else 0

    return FileInfo(
        path=str(path.absolute()),
        file_type=file_type,
        size=size,
    )
