"""
PyArrow schema definitions for output tables.

These schemas define the Parquet file structure for merged reflections
and for the dataset summary records.
"""

import pyarrow as pa

# Schema for merged reflections; crystal metadata goes into schema metadata
INTENSITY_SCHEMA = pa.schema(
    [
        ("h", pa.int32()),
        ("k", pa.int32()),
        ("l", pa.int32()),
        pa.field("sign", pa.int8(), metadata={b"description": b"-1 = I(-), 0 = mean, 1 = I(+)"}),
        ("value", pa.float64()),
        ("sigma", pa.float64()),
    ],
)

CELL_TYPE = pa.struct(
    [
        ("a", pa.float64()),
        ("b", pa.float64()),
        ("c", pa.float64()),
        ("alpha", pa.float64()),
        ("beta", pa.float64()),
        ("gamma", pa.float64()),
    ]
)

# Schema for MergedDataset records
DATASET_SCHEMA = pa.schema(
    [
        # Base DataModel fields
        ("id", pa.string()),
        ("created_at", pa.timestamp("us", tz="UTC")),
        # Source
        ("source_file", pa.string()),
        ("file_type", pa.string()),
        ("kind", pa.string()),
        ("anomalous", pa.bool_()),
        # Crystal
        ("spacegroup", pa.string()),
        ("cell", CELL_TYPE),
        pa.field("wavelength", pa.float64(), metadata={b"description": b"Wavelength in Angstrom, 0 if unknown"}),
        # Counts
        ("rows_read", pa.int64()),
        ("observations", pa.int64()),
        ("unique_reflections", pa.int64()),
        # Resolution
        ("d_min", pa.float64()),
        ("d_max", pa.float64()),
    ],
)

SCHEMAS = {
    "intensities": INTENSITY_SCHEMA,
    "dataset": DATASET_SCHEMA,
}


def get_schema_for_model(model_name: str) -> pa.Schema:
    """
    Get the PyArrow schema for a table name.

    Args:
        model_name: "intensities" or "dataset" (case-insensitive)

    Returns:
        The corresponding PyArrow schema

    Raises:
        ValueError: If the name is unknown
    """
    try:
        return SCHEMAS[model_name.lower()]
    except KeyError:
        raise ValueError(f"Unknown model name: {model_name}") from None
