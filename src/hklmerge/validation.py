"""
Validation utilities for merged data.

Provides record validation and data quality checks on a MergeResult.
"""

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import ValidationError

from hklmerge.enums import SignTag
from hklmerge.models.dataset import MergedDataset
from hklmerge.models.intensities import Intensities
from hklmerge.workflow import MergeResult

logger = logging.getLogger(__name__)


@dataclass
class ValidationIssue:
    """A single validation issue."""

    field: str
    message: str
    severity: str  # "error", "warning", "info"
    value: Optional[Any] = None


@dataclass
class ValidationResult:
    """Result of validating merged data."""

    is_valid: bool
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        """Get only error-level issues."""
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[ValidationIssue]:
        """Get only warning-level issues."""
        return [i for i in self.issues if i.severity == "warning"]

    def add_error(self, field: str, message: str, value: Any = None) -> None:
        """Add an error issue."""
        self.issues.append(
            ValidationIssue(field=field, message=message, severity="error", value=value)
        )
        self.is_valid = False

    def add_warning(self, field: str, message: str, value: Any = None) -> None:
        """Add a warning issue."""
        self.issues.append(
            ValidationIssue(field=field, message=message, severity="warning", value=value)
        )

    def add_info(self, field: str, message: str, value: Any = None) -> None:
        """Add an info issue."""
        self.issues.append(
            ValidationIssue(field=field, message=message, severity="info", value=value)
        )


class DataValidator:
    """
    Validates merged data against the merge invariants and quality rules.

    Validation levels:
    1. Record validation - Pydantic model validation of the MergedDataset
    2. Invariant validation - positive sigmas, unique keys, asymmetric unit
    3. Data quality validation - sign consistency, dataset size

    Usage:
        validator = DataValidator()
        result = validator.validate(merge_result)

        if result.is_valid:
            print("Validation passed!")
        else:
            for issue in result.errors:
                print(f"ERROR: {issue.field}: {issue.message}")
    """

    def __init__(
        self,
        check_quality: bool = True,
        check_asu: bool = True,
        min_reflections: int = 100,
    ):
        """
        Initialize the validator.

        Args:
            check_quality: Whether to run data quality checks
            check_asu: Whether to require indices in the asymmetric unit
            min_reflections: Fewer unique reflections raise a warning
        """
        self.check_quality = check_quality
        self.check_asu = check_asu
        self.min_reflections = min_reflections

    def validate(self, merged: MergeResult) -> ValidationResult:
        """
        Validate a merge result.

        Args:
            merged: The merge result to validate

        Returns:
            ValidationResult with issues found
        """
        result = ValidationResult(is_valid=True)

        # Merge failures raise, so only warnings are carried over
        for warning in merged.warnings:
            result.add_warning("merge", warning)

        if merged.dataset:
            self._validate_dataset(merged.dataset, result)

        if merged.intensities is None or len(merged.intensities) == 0:
            result.add_error("intensities", "No observations")
            return result

        self._validate_observations(merged.intensities, result)

        if self.check_quality:
            self._validate_data_quality(merged.intensities, result)

        return result

    def _validate_dataset(self, dataset: MergedDataset, result: ValidationResult) -> None:
        """Validate the MergedDataset record."""
        try:
            MergedDataset.model_validate(dataset.model_dump())
        except ValidationError as e:
            for err in e.errors():
                loc = ".".join(str(part) for part in err["loc"])
                result.add_error(f"dataset.{loc}", err["msg"])

        if dataset.wavelength == 0.0:
            result.add_info("dataset.wavelength", "Wavelength not recorded")

    def _validate_observations(self, intensities: Intensities, result: ValidationResult) -> None:
        """Check the invariants every merged set must satisfy."""
        bad_value = sum(1 for obs in intensities if not math.isfinite(obs.value))
        if bad_value > 0:
            result.add_error("intensities.value", f"{bad_value} non-finite intensities found")

        bad_sigma = sum(
            1 for obs in intensities if not math.isfinite(obs.sigma) or obs.sigma <= 0
        )
        if bad_sigma > 0:
            result.add_error(
                "intensities.sigma",
                f"{bad_sigma} non-finite or non-positive sigma values found",
            )

        duplicates = [key for key, n in Counter(obs.key for obs in intensities).items() if n > 1]
        if duplicates:
            result.add_error(
                "intensities.hkl",
                f"{len(duplicates)} duplicate (h, k, l, sign) keys found",
                duplicates[:5],
            )

        if self.check_asu:
            oracle = intensities.oracle
            outside = [obs.hkl for obs in intensities if not oracle.is_in_asymmetric_unit(obs.hkl)]
            if outside:
                result.add_error(
                    "intensities.hkl",
                    f"{len(outside)} indices outside the asymmetric unit of {oracle.name}",
                    outside[:5],
                )

    def _validate_data_quality(self, intensities: Intensities, result: ValidationResult) -> None:
        """Run data quality checks."""
        signs = Counter(obs.sign for obs in intensities)
        if signs[SignTag.NONE] and (signs[SignTag.PLUS] or signs[SignTag.MINUS]):
            result.add_warning(
                "intensities.sign",
                f"{signs[SignTag.NONE]} unsigned reflections mixed with I(+)/I(-)",
            )

        if len(intensities) < self.min_reflections:
            result.add_warning(
                "intensities",
                f"Only {len(intensities)} reflections - unusually small dataset",
            )

        negative = sum(1 for obs in intensities if obs.value < 0)
        if negative > len(intensities) / 2:
            result.add_warning(
                "intensities.value",
                f"{negative} of {len(intensities)} intensities are negative",
            )


def validate_merge(
    merged: MergeResult,
    check_quality: bool = True,
    check_asu: bool = True,
) -> ValidationResult:
    """
    Convenience function to validate a merge result.

    Args:
        merged: The merge result to validate
        check_quality: Whether to run data quality checks
        check_asu: Whether to require indices in the asymmetric unit

    Returns:
        ValidationResult with issues found
    """
    validator = DataValidator(check_quality=check_quality, check_asu=check_asu)
    return validator.validate(merged)
