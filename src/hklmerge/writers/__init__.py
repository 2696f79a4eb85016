"""
Writers module for outputting merged data to Parquet and JSON files.

Module structure:
- schemas.py: PyArrow schema definitions
- serializers.py: Model-to-record conversion utilities
- parquet_writer.py: Main ParquetWriter class
- json_writer.py: JSONWriter class for JSON output
"""

from pathlib import Path

from hklmerge.workflow import MergeResult

# Re-export writer classes
from .json_writer import JSONWriter, write_result_to_json
from .parquet_writer import ParquetWriter

# Re-export schemas
from .schemas import (
    DATASET_SCHEMA,
    INTENSITY_SCHEMA,
    get_schema_for_model,
)

# Re-export serializers
from .serializers import (
    dataset_to_record,
    intensities_to_records,
    intensities_to_table,
    serialize_value,
)

__all__ = [
    # Schemas
    "INTENSITY_SCHEMA",
    "DATASET_SCHEMA",
    "get_schema_for_model",
    # Serializers
    "serialize_value",
    "intensities_to_table",
    "intensities_to_records",
    "dataset_to_record",
    # Writers
    "ParquetWriter",
    "JSONWriter",
    # Convenience functions
    "write_result_to_parquet",
    "write_result_to_json",
]


def write_result_to_parquet(result: MergeResult, output_dir: str | Path) -> dict[str, Path]:
    """
    Convenience function to write a merge result to Parquet.

    Args:
        result: The MergeResult from MergePipeline
        output_dir: Directory for output files

    Returns:
        Dict mapping table names to written file paths

    Example:
        result = merge_file("/data/XDS_ASCII.HKL")

        paths = write_result_to_parquet(result, "/data/lakehouse")
        print(f"Wrote reflections to: {paths['intensities']}")
    """
    writer = ParquetWriter(output_dir)
    return writer.write(result)
