"""
JSON writer for merged data.

This module writes merged reflections and dataset records to JSON files,
with the same fields as the Parquet output.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from hklmerge.models.dataset import MergedDataset
from hklmerge.models.intensities import Intensities
from hklmerge.workflow import MergeResult

from .serializers import (
    dataset_to_record,
    intensities_to_records,
    intensity_metadata,
    output_stem,
)


class JSONEncoder(json.JSONEncoder):
    """Encodes record timestamps as ISO 8601 and paths as strings."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


class JSONWriter:
    """
    Writes merged data to JSON files.

    This writer produces JSON files with the same fields as the Parquet
    output, making it easy for consumers to switch between formats.
    """

    def __init__(self, output_dir: str | Path):
        """
        Initialize the JSON writer.

        Args:
            output_dir: Base directory for output files
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def write_intensities(self, intensities: Intensities, name: str) -> Path:
        """
        Write merged reflections to JSON.

        The file holds the crystal metadata and a "reflections" list.

        Args:
            intensities: The reflection set
            name: File name prefix

        Returns:
            Path to the written JSON file
        """
        record = {
            **intensity_metadata(intensities),
            "reflections": intensities_to_records(intensities),
        }

        output_path = self.output_dir / f"{name}_intensities.json"

        with open(output_path, "w") as f:
            json.dump(record, f, cls=JSONEncoder, indent=2)

        return output_path

    def write_dataset(self, dataset: MergedDataset, name: Optional[str] = None) -> Path:
        """
        Write a MergedDataset record to JSON.

        Args:
            dataset: The record to write
            name: File name prefix (default from the source file)

        Returns:
            Path to the written JSON file
        """
        record = dataset_to_record(dataset)

        output_path = self.output_dir / f"{name or output_stem(dataset)}_dataset.json"

        with open(output_path, "w") as f:
            json.dump(record, f, cls=JSONEncoder, indent=2)

        return output_path

    def write_all(self, result: MergeResult) -> dict[str, Path]:
        """
        Write all merged data to JSON files.

        Args:
            result: The MergeResult from MergePipeline

        Returns:
            Dict mapping table names to written file paths
        """
        paths: dict[str, Path] = {}
        if result.dataset is None or result.intensities is None:
            return paths

        name = output_stem(result.dataset)
        paths["intensities"] = self.write_intensities(result.intensities, name)
        paths["dataset"] = self.write_dataset(result.dataset, name)
        return paths


def write_result_to_json(result: MergeResult, output_dir: str | Path) -> dict[str, Path]:
    """
    Convenience function to write a merge result to JSON.

    Args:
        result: The MergeResult from MergePipeline
        output_dir: Directory for output files

    Returns:
        Dict mapping table names to written file paths

    Example:
        result = merge_file("/data/scaled.mtz")

        paths = write_result_to_json(result, "/data/output")
        print(f"Wrote reflections to: {paths['intensities']}")
    """
    writer = JSONWriter(output_dir)
    return writer.write_all(result)
