"""
Inverse-variance weighted merging of equivalent observations.
"""

import logging
import math

from hklmerge.enums import SignTag
from hklmerge.models.reflection import Observation

logger = logging.getLogger(__name__)


def sort_key(obs: Observation) -> tuple:
    """Total order: (h, k, l, sign), then value and sigma to fix summation order."""
    return (obs.hkl.h, obs.hkl.k, obs.hkl.l, int(obs.sign), obs.value, obs.sigma)


def merge_observations(
    observations: list[Observation],
    output_plus_minus: bool = False,
) -> list[Observation]:
    """
    Merge observations that share the same (hkl, sign) key.

    Each output value is the weighted mean sum(w*I)/sum(w) with
    w = 1/sigma^2, and its sigma is 1/sqrt(sum(w)). Sigmas must already be
    positive; the validity filter guarantees this. A key seen only once is
    copied through unchanged.

    Args:
        observations: Observations in any order. Their signs are reset to
            NONE when output_plus_minus is False.
        output_plus_minus: Keep I(+) and I(-) apart instead of producing
            mean intensities

    Returns:
        New list with one observation per key, sorted by key
    """
    if not observations:
        return []

    if not output_plus_minus:
        # discard signs so that merging produces Imean
        for obs in observations:
            obs.sign = SignTag.NONE

    ordered = sorted(observations, key=sort_key)

    merged: list[Observation] = []
    first = ordered[0]
    count = 0
    sum_wI = 0.0
    sum_w = 0.0
    for obs in ordered:
        if obs.key != first.key:
            merged.append(_close_run(first, count, sum_wI, sum_w))
            first = obs
            count = 0
            sum_wI = sum_w = 0.0
        w = obs.weight
        sum_wI += w * obs.value
        sum_w += w
        count += 1
    merged.append(_close_run(first, count, sum_wI, sum_w))

    logger.debug(f"Merged {len(observations)} observations into {len(merged)} reflections")
    return merged


def _close_run(first: Observation, count: int, sum_wI: float, sum_w: float) -> Observation:
    if count == 1:
        return Observation(hkl=first.hkl, sign=first.sign, value=first.value, sigma=first.sigma)
    return Observation(
        hkl=first.hkl,
        sign=first.sign,
        value=sum_wI / sum_w,
        sigma=1.0 / math.sqrt(sum_w),
    )
