"""
Observation filters.

The validity filter rejects physically meaningless measurements at
ingestion; the absence filter drops reflections that the space group
forces to zero intensity.
"""

import logging
import math

from hklmerge.models.reflection import Observation
from hklmerge.symmetry.oracle import SymmetryOracle

logger = logging.getLogger(__name__)


def is_valid(value: float, sigma: float) -> bool:
    """
    Check whether a measured value/sigma pair can enter the reflection set.

    XDS marks rejected reflections with a negative sigma, and a sigma of
    exactly 0.0 occasionally shows up in deposited files; neither can be
    weighted.
    """
    return math.isfinite(value) and math.isfinite(sigma) and sigma > 0


def remove_systematic_absences(
    observations: list[Observation], oracle: SymmetryOracle
) -> list[Observation]:
    """
    Return the observations whose index is allowed by the space group.

    Args:
        observations: Observations to filter
        oracle: Symmetry of the crystal

    Returns:
        New list without systematically absent reflections
    """
    kept = [obs for obs in observations if not oracle.is_systematically_absent(obs.hkl)]
    removed = len(observations) - len(kept)
    if removed:
        logger.info(f"Removed {removed} systematically absent reflections ({oracle.name})")
    return kept
