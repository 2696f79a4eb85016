"""
Space-group lookup.

Wraps gemmi's built-in space-group table. The table is static and shared
by the whole process; oracles built from it are cached per space group.
"""

import logging
from functools import lru_cache
from typing import Optional, Union

import gemmi

from hklmerge.errors import DomainError
from hklmerge.symmetry.oracle import SymmetryOracle

logger = logging.getLogger(__name__)

# Legacy or program-specific symbols that gemmi does not parse directly
SPACEGROUP_ALIASES = {
    "H3": "R 3:H",
    "H32": "R 3 2:H",
    "R3:R": "R 3:R",
    "R32:R": "R 3 2:R",
    "P21212A": "P 21 21 2",
    "P2": "P 1 2 1",
    "P21": "P 1 21 1",
    "C2": "C 1 2 1",
    "I2": "I 1 2 1",
}


def _normalize_symbol(symbol: str) -> str:
    """Strip quoting and collapse whitespace in a Hermann-Mauguin symbol."""
    return " ".join(symbol.strip().strip("'\"").split())


def find_spacegroup(identifier: Union[int, str, None]) -> Optional[gemmi.SpaceGroup]:
    """
    Look up a space group by number or Hermann-Mauguin symbol.

    Args:
        identifier: International Tables number, or a symbol such as
            "P 21 21 21" or "P212121"

    Returns:
        The gemmi SpaceGroup, or None if the identifier is unknown
    """
    if identifier is None:
        return None

    if isinstance(identifier, int):
        if identifier <= 0:
            return None
        try:
            return gemmi.find_spacegroup_by_number(identifier)
        except (ValueError, RuntimeError):
            return None

    symbol = _normalize_symbol(identifier)
    if not symbol or symbol in ("?", "."):
        return None

    if symbol.isdigit():
        return find_spacegroup(int(symbol))

    alias = SPACEGROUP_ALIASES.get(symbol.replace(" ", "").upper())
    if alias is not None:
        logger.debug(f"Space group alias {symbol!r} -> {alias!r}")
        symbol = alias

    try:
        return gemmi.find_spacegroup_by_name(symbol)
    except (ValueError, RuntimeError):
        return None


def require_spacegroup(identifier: Union[int, str, None]) -> gemmi.SpaceGroup:
    """
    Like find_spacegroup, but an unresolved identifier is an error.

    Raises:
        DomainError: If the space group is unset or unknown
    """
    spacegroup = find_spacegroup(identifier)
    if spacegroup is None:
        if identifier is None:
            raise DomainError("unknown space group")
        raise DomainError(f"unknown space group: {identifier!r}")
    return spacegroup


@lru_cache(maxsize=None)
def _oracle_for_symbol(xhm: str) -> SymmetryOracle:
    return SymmetryOracle(gemmi.find_spacegroup_by_name(xhm))


def get_oracle(spacegroup: gemmi.SpaceGroup) -> SymmetryOracle:
    """Return the shared SymmetryOracle for a space group."""
    return _oracle_for_symbol(spacegroup.xhm())
