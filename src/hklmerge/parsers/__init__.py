"""
File parsers for data ingestion.

Provides parsers for:
- XDS_ASCII text files (XDS CORRECT / XSCALE output)

MTZ, mmCIF and mmJSON files are read with gemmi (see hklmerge.adapters).
"""

from hklmerge.parsers.xds_parser import REQUIRED_ITEMS, XdsAsciiData, XdsAsciiParser

__all__ = [
    "XdsAsciiParser",
    "XdsAsciiData",
    "REQUIRED_ITEMS",
]
