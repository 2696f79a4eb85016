"""
Parquet file writer for merged data.

This module provides the main writer class for outputting merged
reflections and their summary records to Parquet files.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

import pyarrow as pa
import pyarrow.parquet as pq

from hklmerge.models.dataset import MergedDataset
from hklmerge.models.intensities import Intensities

from .schemas import DATASET_SCHEMA
from .serializers import dataset_to_record, intensities_to_table, output_stem

if TYPE_CHECKING:
    from hklmerge.workflow import MergeResult


class ParquetWriter:
    """
    Writes merged data to Parquet files.

    Layout:
        <output_dir>/intensities/[kind=<kind>/]<name>.parquet
        <output_dir>/dataset/[kind=<kind>/]<name>.parquet

    Example:
        writer = ParquetWriter("/data/merged")
        paths = writer.write(merge_result)
        print(f"Wrote reflections to: {paths['intensities']}")
    """

    def __init__(
        self,
        output_dir: str | Path,
        partition_by_kind: bool = False,
    ):
        """
        Initialize the writer with an output directory.

        Args:
            output_dir: Base directory for output files. Subdirectories
                       will be created for each table.
            partition_by_kind: Whether to partition by data kind
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.partition_by_kind = partition_by_kind

    def _get_partition_path(self, table_name: str, kind: Optional[str] = None) -> Path:
        """
        Build a partition path.

        Args:
            table_name: The table name ('intensities' or 'dataset')
            kind: Optional data kind for partitioning

        Returns:
            Path to the partition directory
        """
        parts = [self.output_dir, table_name]
        if kind and self.partition_by_kind:
            parts.append(f"kind={kind}")
        return Path(*parts)

    def write(self, result: MergeResult) -> dict[str, Path]:
        """
        Write the merged reflections and the dataset record of a result.

        Args:
            result: The merge result to write

        Returns:
            Dict mapping table names to written file paths
        """
        paths: dict[str, Path] = {}
        if result.dataset is None or result.intensities is None:
            return paths

        name = output_stem(result.dataset)
        kind = result.dataset.kind
        paths["intensities"] = self.write_intensities(result.intensities, name, kind=kind)
        paths["dataset"] = self.write_dataset(result.dataset, name)
        return paths

    def write_intensities(
        self,
        intensities: Intensities,
        name: str,
        kind: Optional[str] = None,
    ) -> Path:
        """
        Write merged reflections to Parquet.

        Args:
            intensities: The reflection set
            name: File name without extension
            kind: Partition by data kind

        Returns:
            Path to the written file
        """
        table = intensities_to_table(intensities)

        partition_dir = self._get_partition_path("intensities", kind)
        partition_dir.mkdir(parents=True, exist_ok=True)

        output_path = partition_dir / f"{name}.parquet"

        pq.write_table(table, output_path)
        return output_path

    def write_dataset(self, dataset: MergedDataset, name: Optional[str] = None) -> Path:
        """
        Write a dataset summary record to Parquet.

        Args:
            dataset: The MergedDataset instance
            name: File name without extension (default from the source file)

        Returns:
            Path to the written file
        """
        record = dataset_to_record(dataset)
        table = pa.Table.from_pylist([record], schema=DATASET_SCHEMA)

        partition_dir = self._get_partition_path("dataset", dataset.kind)
        partition_dir.mkdir(parents=True, exist_ok=True)

        output_path = partition_dir / f"{name or output_stem(dataset)}.parquet"

        pq.write_table(table, output_path)
        return output_path
