"""
Options controlling how a reflection file is read and merged.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hklmerge.enums import DataKind

DEFAULT_MEAN_LABELS = ("IMEAN", "I")


class MergeOptions(BaseModel):
    """
    Merge configuration.

    Attributes:
        kind: Intensities to read; None picks what the source provides
        anomalous: Keep I(+) and I(-) apart in the output
        remove_absences: Drop systematically absent reflections
        mean_labels: MTZ column labels tried, in order, for mean intensities

    Example:
        options = MergeOptions(anomalous=True, mean_labels=("IMEAN",))
    """

    model_config = ConfigDict(frozen=True)

    kind: Optional[DataKind] = Field(
        default=None,
        description="Intensities to read (unmerged, mean, anomalous); None = auto",
    )

    anomalous: bool = Field(
        default=False,
        description="Keep I(+) and I(-) separate when merging",
    )

    remove_absences: bool = Field(
        default=True,
        description="Drop systematically absent reflections",
    )

    mean_labels: tuple[str, ...] = Field(
        default=DEFAULT_MEAN_LABELS,
        description="Preferred mean-intensity column labels, first match wins",
        min_length=1,
    )

    @field_validator("mean_labels")
    @classmethod
    def validate_labels(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Strip whitespace and reject empty labels."""
        labels = tuple(label.strip() for label in v)
        if any(not label for label in labels):
            raise ValueError("column labels must not be empty")
        return labels

    @classmethod
    def from_label_string(cls, labels: str, **kwargs) -> "MergeOptions":
        """Build options from a comma-separated label list such as "IMEAN,I"."""
        return cls(mean_labels=tuple(labels.split(",")), **kwargs)
