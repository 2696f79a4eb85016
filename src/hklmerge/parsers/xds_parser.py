"""
Parser for XDS_ASCII reflection files.

Parses the text format written by XDS CORRECT and XSCALE, extracting the
`!`-prefixed header metadata and the numeric data records.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

import numpy as np
from dateutil import parser as date_parser
from numpy.typing import NDArray

from hklmerge.errors import SchemaError

logger = logging.getLogger(__name__)

REQUIRED_ITEMS = ("H", "K", "L", "IOBS", "SIGMA(IOBS)")


@dataclass
class XdsAsciiData:
    """
    Complete parsed data from an XDS_ASCII file.

    Contains both header metadata and the data records.
    """

    # File info
    file_path: str

    # Header metadata
    space_group_number: Optional[int] = None
    unit_cell: Optional[tuple[float, ...]] = None
    wavelength: Optional[float] = None
    merged: bool = False
    friedels_law: bool = True
    generated_at: Optional[datetime] = None

    # Column names (without ITEM_) mapped to 0-based positions
    items: dict[str, int] = field(default_factory=dict)

    # Data records
    rows: list[list[float]] = field(default_factory=list)

    @property
    def num_items(self) -> int:
        """Width of a data record."""
        return max(self.items.values()) + 1 if self.items else 0

    @property
    def num_records(self) -> int:
        """Number of data records."""
        return len(self.rows)

    @property
    def labels(self) -> list[str]:
        """Item names ordered by column; undeclared positions are named COL<n>."""
        names = [f"COL{i + 1}" for i in range(self.num_items)]
        for name, position in self.items.items():
            names[position] = name
        return names

    def as_array(self) -> NDArray:
        """Data records as a (records, items) float array."""
        if not self.rows:
            return np.empty((0, self.num_items), dtype=np.float64)
        return np.array(self.rows, dtype=np.float64)


class XdsAsciiParser:
    """
    Parser for XDS_ASCII files.

    Handles the format with:
    - A first line !FORMAT=XDS_ASCII
    - Header lines of the form !KEY=value (several per line allowed)
    - !ITEM_<name>=<position> declarations of the record layout
    - Whitespace-separated numeric records up to !END_OF_DATA

    Usage:
        parser = XdsAsciiParser()
        data = parser.parse("/path/to/XDS_ASCII.HKL")

        print(f"Space group {data.space_group_number}: {data.num_records} records")
    """

    # Regex patterns for header parsing
    # Note: patterns with $ need MULTILINE to match end-of-line, not just end-of-string
    PATTERNS = {
        "format": re.compile(r"^!FORMAT=XDS_ASCII\b"),
        "merge": re.compile(r"MERGE=(TRUE|FALSE)", re.IGNORECASE),
        "friedel": re.compile(r"FRIEDEL'S_LAW=(TRUE|FALSE)", re.IGNORECASE),
        "date": re.compile(r"\bDATE=\s*(\S+)"),
        "space_group": re.compile(r"^!SPACE_GROUP_NUMBER=\s*(-?\d+)", re.MULTILINE),
        "unit_cell": re.compile(r"^!UNIT_CELL_CONSTANTS=\s*(.+)$", re.MULTILINE),
        # XSCALE writes the wavelength on !ISET= lines
        "wavelength": re.compile(
            r"^!(?:ISET=\s*\d+\s+)?X-RAY_WAVELENGTH=\s*([\d.eE+-]+)", re.MULTILINE
        ),
        "num_items": re.compile(
            r"^!NUMBER_OF_ITEMS_IN_EACH_DATA_RECORD=\s*(\d+)", re.MULTILINE
        ),
    }

    # Pattern for record layout declarations, e.g. !ITEM_SIGMA(IOBS)=5
    ITEM_PATTERN = re.compile(r"^!ITEM_([A-Z0-9_()]+)=\s*(\d+)", re.MULTILINE)

    def parse(self, file_path: str | Path) -> XdsAsciiData:
        """
        Parse an XDS_ASCII file.

        Args:
            file_path: Path to the file

        Returns:
            XdsAsciiData with parsed header and data

        Raises:
            FileNotFoundError: If file doesn't exist
            SchemaError: If the file is not valid XDS_ASCII
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        with open(file_path, "r") as f:
            content = f.read()

        return self.parse_content(content, str(file_path))

    def parse_content(self, content: str, file_path: str = "") -> XdsAsciiData:
        """
        Parse XDS_ASCII data from string content.

        Args:
            content: File content as string
            file_path: Optional file path for reference

        Returns:
            XdsAsciiData with parsed header and data
        """
        lines = content.splitlines()
        if not lines or not self.PATTERNS["format"].match(lines[0]):
            raise SchemaError(f"not an XDS_ASCII file: {file_path or '<string>'}")

        result = XdsAsciiData(file_path=file_path)

        # Separate header and data
        header_lines = []
        data_lines = []
        in_data = False

        for lineno, line in enumerate(lines, start=1):
            stripped = line.strip()

            if not stripped:
                continue

            if stripped.startswith("!"):
                if stripped.startswith("!END_OF_HEADER"):
                    in_data = True
                elif stripped.startswith("!END_OF_DATA"):
                    break
                elif not in_data:
                    header_lines.append(stripped)
                continue

            data_lines.append((lineno, stripped))

        # Parse header
        self._parse_header(header_lines, result)

        # Parse data
        self._parse_data(data_lines, result)

        logger.debug(
            f"Parsed XDS_ASCII {file_path}: {result.num_records} records, "
            f"space group {result.space_group_number}"
        )
        return result

    def _parse_header(self, header_lines: list[str], result: XdsAsciiData) -> None:
        """Parse header lines."""
        full_header = "\n".join(header_lines)

        match = self.PATTERNS["merge"].search(header_lines[0])
        if match:
            result.merged = match.group(1).upper() == "TRUE"

        match = self.PATTERNS["friedel"].search(header_lines[0])
        if match:
            result.friedels_law = match.group(1).upper() == "TRUE"

        match = self.PATTERNS["date"].search(full_header)
        if match:
            try:
                result.generated_at = date_parser.parse(match.group(1))
            except (ValueError, OverflowError):
                logger.debug(f"Unparseable date in XDS header: {match.group(1)}")

        match = self.PATTERNS["space_group"].search(full_header)
        if match:
            result.space_group_number = int(match.group(1))

        match = self.PATTERNS["unit_cell"].search(full_header)
        if match:
            try:
                params = tuple(float(x) for x in match.group(1).split()[:6])
            except ValueError:
                raise SchemaError(f"bad UNIT_CELL_CONSTANTS: {match.group(1)}") from None
            if len(params) == 6:
                result.unit_cell = params

        match = self.PATTERNS["wavelength"].search(full_header)
        if match:
            result.wavelength = float(match.group(1))

        for match in self.ITEM_PATTERN.finditer(full_header):
            result.items[match.group(1)] = int(match.group(2)) - 1

        missing = [name for name in REQUIRED_ITEMS if name not in result.items]
        if missing:
            raise SchemaError(f"XDS_ASCII header lacks ITEM_{', ITEM_'.join(missing)}")

        match = self.PATTERNS["num_items"].search(full_header)
        if match and int(match.group(1)) != len(result.items):
            logger.warning(
                f"NUMBER_OF_ITEMS_IN_EACH_DATA_RECORD={match.group(1)} but "
                f"{len(result.items)} ITEM_ lines"
            )

    def _parse_data(self, data_lines: list[tuple[int, str]], result: XdsAsciiData) -> None:
        """Parse data records."""
        width = result.num_items
        for lineno, line in data_lines:
            parts = line.split()
            if len(parts) < width:
                raise SchemaError(
                    f"line {lineno}: expected {width} items, found {len(parts)}"
                )
            try:
                result.rows.append([float(x) for x in parts[:width]])
            except ValueError:
                raise SchemaError(f"line {lineno}: non-numeric data record") from None
