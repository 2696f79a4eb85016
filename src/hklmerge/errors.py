"""
Exceptions raised while ingesting reflection data.

All of them abort the current ingestion call. Rejection of individual
observations (non-finite value, non-positive sigma) is not an error and
never raises.
"""


class IngestionError(ValueError):
    """Base class for errors that prevent building an Intensities set."""


class SchemaError(IngestionError):
    """A required column or field is missing, misplaced or has the wrong shape."""


class DomainError(IngestionError):
    """Crystallographic metadata (space group, unit cell) cannot be resolved."""


class FormatMismatch(IngestionError):
    """A merged-data reader was used on unmerged data, or vice versa."""


class UnsupportedFormatError(IngestionError):
    """The file is not one of the supported reflection formats."""
