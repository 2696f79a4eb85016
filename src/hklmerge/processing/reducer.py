"""
Reduction of Miller indices to the reciprocal asymmetric unit.
"""

import logging

from hklmerge.enums import SignTag
from hklmerge.models.reflection import Observation
from hklmerge.symmetry.oracle import SymmetryOracle

logger = logging.getLogger(__name__)


def switch_to_asu_indices(
    observations: list[Observation],
    oracle: SymmetryOracle,
    merged: bool = False,
) -> None:
    """
    Rewrite every observation's index to its asymmetric-unit representative.

    In Friedel-aware mode (merged=False) the sign is taken from the parity
    of the symmetry operation that did the mapping. Indices that are
    already in the asymmetric unit were mapped by the identity, so an
    unset sign becomes PLUS and a sign set by the source is kept.
    In-ASU rows are not left as they were: no Friedel-aware observation
    leaves this function with sign NONE. In sign-blind mode (merged=True)
    every sign becomes NONE.

    Args:
        observations: Observations to rewrite in place
        oracle: Symmetry of the crystal
        merged: Discard the Friedel distinction
    """
    moved = 0
    for obs in observations:
        if oracle.is_in_asymmetric_unit(obs.hkl):
            if merged:
                obs.sign = SignTag.NONE
            elif obs.sign == SignTag.NONE:
                obs.sign = SignTag.PLUS
            continue
        obs.hkl, isym = oracle.reduce_to_asymmetric_unit(obs.hkl)
        obs.sign = SignTag.NONE if merged else SignTag.from_parity(isym)
        moved += 1

    logger.debug(
        f"Mapped {moved} of {len(observations)} reflections into the ASU of {oracle.name}"
    )
