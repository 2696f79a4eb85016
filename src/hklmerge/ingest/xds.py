"""
Reading intensities from XDS_ASCII files.
"""

import logging

from hklmerge.adapters.base import ReflectionTable
from hklmerge.errors import DomainError
from hklmerge.ingest.core import new_intensities, read_data
from hklmerge.models.intensities import Intensities

logger = logging.getLogger(__name__)

VALUE_LABEL = "IOBS"
SIGMA_LABEL = "SIGMA(IOBS)"


def read_unmerged_intensities_from_xds(table: ReflectionTable) -> Intensities:
    """
    Read IOBS/SIGMA(IOBS) records and reduce them to the asymmetric unit.

    XDS writes negative sigmas for rejected (misfit) reflections; the
    validity filter drops them.

    Raises:
        DomainError: If the space group number is not recognised or the
            header has no cell
        SchemaError: If IOBS or SIGMA(IOBS) is missing
    """
    if table.metadata.spacegroup is None:
        raise DomainError(f"unknown space group in {table.metadata.source or 'XDS_ASCII data'}")

    value_idx = table.column_index(VALUE_LABEL)
    sigma_idx = table.column_index(SIGMA_LABEL)
    intensities = new_intensities(table)
    read_data(intensities, table, value_idx, sigma_idx)
    intensities.switch_to_asu_indices()

    logger.info(f"Read {len(intensities)} observations from XDS_ASCII")
    return intensities
