"""
Command-line interface for hkl-merge.

Provides commands for detecting, finding, validating and merging
reflection files.
"""

from .main import app, main

__all__ = ["main", "app"]
