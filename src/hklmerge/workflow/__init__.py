"""
Workflow module for merging reflection files.

Module structure:
- result.py: MergeResult dataclass
- pipeline.py: Main MergePipeline orchestrator class
"""

from pathlib import Path
from typing import Optional

from hklmerge.config import MergeOptions

from .pipeline import MergePipeline
from .result import MergeResult

__all__ = [
    # Main classes
    "MergeResult",
    "MergePipeline",
    # Convenience function
    "merge_file",
]


def merge_file(
    file_path: str | Path,
    options: Optional[MergeOptions] = None,
) -> MergeResult:
    """
    Convenience function to merge a reflection file.

    For more control (already loaded sources, custom handlers), use
    MergePipeline directly.

    Args:
        file_path: Path to an MTZ, mmCIF, mmJSON or XDS_ASCII file
        options: Merge options

    Returns:
        MergeResult with the merged set and its record

    Example:
        result = merge_file("/data/XDS_ASCII.HKL", MergeOptions(anomalous=True))
        print(result.summary())
    """
    return MergePipeline(options).run(file_path)
