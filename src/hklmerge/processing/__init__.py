"""
Processing stages applied to a reflection set.

Provides:
- Validity and systematic-absence filters
- Reduction of indices to the reciprocal asymmetric unit
- Inverse-variance weighted merging
"""

from hklmerge.processing.filters import is_valid, remove_systematic_absences
from hklmerge.processing.merger import merge_observations, sort_key
from hklmerge.processing.reducer import switch_to_asu_indices

__all__ = [
    "is_valid",
    "remove_systematic_absences",
    "switch_to_asu_indices",
    "merge_observations",
    "sort_key",
]
