"""
Serialization utilities for converting merged data to output records.

This module turns Intensities sets and MergedDataset records into
pyarrow tables and plain dicts.
"""

import json
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

import pyarrow as pa

from hklmerge.models.dataset import MergedDataset
from hklmerge.models.intensities import Intensities

from .schemas import INTENSITY_SCHEMA


def serialize_value(value: Any) -> Any:
    """
    Serialize a value to a Parquet-compatible type.

    Handles:
    - Enums -> their values
    - datetime -> preserved as-is (PyArrow handles conversion)
    - Pydantic models -> dicts
    - dicts -> JSON strings
    - None -> preserved as None

    Args:
        value: Any Python value to serialize

    Returns:
        Parquet-compatible representation
    """
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value
    if isinstance(value, dict):
        return json.dumps(value)
    if hasattr(value, "model_dump"):
        return value.model_dump()
    return value


def intensity_metadata(intensities: Intensities) -> dict[str, str]:
    """Crystal metadata stored alongside the reflection table."""
    cell = intensities.unit_cell
    return {
        "spacegroup": intensities.spacegroup_str(),
        "cell": " ".join(
            f"{p:g}" for p in (cell.a, cell.b, cell.c, cell.alpha, cell.beta, cell.gamma)
        ),
        "wavelength": f"{intensities.wavelength:g}",
    }


def intensities_to_table(intensities: Intensities) -> pa.Table:
    """
    Convert an Intensities set to a pyarrow table.

    Returns:
        Table matching INTENSITY_SCHEMA, with crystal metadata attached
    """
    columns = intensities.to_numpy()
    schema = INTENSITY_SCHEMA.with_metadata(intensity_metadata(intensities))
    return pa.Table.from_pydict(columns, schema=schema)


def intensities_to_records(intensities: Intensities) -> list[dict[str, Any]]:
    """Convert observations to a list of flat dicts."""
    return [
        {
            "h": obs.hkl.h,
            "k": obs.hkl.k,
            "l": obs.hkl.l,
            "sign": int(obs.sign),
            "value": obs.value,
            "sigma": obs.sigma,
        }
        for obs in intensities
    ]


def dataset_to_record(dataset: MergedDataset) -> dict[str, Any]:
    """
    Convert a MergedDataset to a flat dict.

    Args:
        dataset: The MergedDataset model instance

    Returns:
        Dict with keys matching DATASET_SCHEMA
    """
    return {
        # Base fields
        "id": dataset.id,
        "created_at": dataset.created_at,
        # Source
        "source_file": dataset.source_file,
        "file_type": dataset.file_type,
        "kind": serialize_value(dataset.kind),
        "anomalous": dataset.anomalous,
        # Crystal
        "spacegroup": dataset.spacegroup,
        "cell": serialize_value(dataset.cell),
        "wavelength": dataset.wavelength,
        # Counts
        "rows_read": dataset.rows_read,
        "observations": dataset.observations,
        "unique_reflections": dataset.unique_reflections,
        # Resolution
        "d_min": dataset.d_min,
        "d_max": dataset.d_max,
    }


def output_stem(dataset: MergedDataset) -> str:
    """Base name for output files of a dataset."""
    if dataset.source_file:
        return Path(dataset.source_file).stem
    return dataset.id or "merged"
