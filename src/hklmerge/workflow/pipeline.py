"""
Merge pipeline for reflection files.

The main orchestrator: detect, load, read, filter, merge, summarize.
"""

import logging
import math
from pathlib import Path
from typing import Any, Optional, Type

from hklmerge.config import MergeOptions
from hklmerge.enums import DataKind
from hklmerge.errors import UnsupportedFormatError
from hklmerge.ingest.registry import FormatHandler, FormatRegistry
from hklmerge.models.dataset import CrystalCell, MergedDataset
from hklmerge.tools.detection import detect_file
from hklmerge.tools.types import FileType

from .result import MergeResult

logger = logging.getLogger(__name__)


class MergePipeline:
    """
    Reads one reflection file and merges it into unique reflections.

    Workflow:
    1. Detect the file type and pick its FormatHandler
    2. Load the file and read the requested kind of intensities
    3. Drop systematic absences (optional)
    4. Merge equivalent observations
    5. Summarize the run in a MergedDataset record

    Example:
        pipeline = MergePipeline(MergeOptions(anomalous=True))
        result = pipeline.run("/data/aimless_unmerged.mtz")

        print(result.summary())
        for obs in result.intensities:
            print(obs)
    """

    def __init__(self, options: Optional[MergeOptions] = None):
        """
        Initialize the pipeline.

        Args:
            options: Merge options; defaults merge to mean intensities
        """
        self.options = options or MergeOptions()

    def run(self, file_path: str | Path) -> MergeResult:
        """
        Merge a reflection file.

        Args:
            file_path: Path to an MTZ, mmCIF, mmJSON or XDS_ASCII file

        Returns:
            MergeResult with the merged set and its record

        Raises:
            FileNotFoundError: If the file doesn't exist
            UnsupportedFormatError: If the file is not a readable reflection file
            IngestionError: If the data cannot be read (SchemaError,
                DomainError, FormatMismatch)
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        info = detect_file(path)
        if not info.is_supported:
            raise UnsupportedFormatError(f"not a recognised reflection file: {path}")

        handler = FormatRegistry.get_handler(info.file_type)
        logger.info(f"Reading {path.name} as {info.file_type.value}")
        try:
            source = handler.load(path)
        except RuntimeError as e:
            # gemmi reports unreadable files as RuntimeError
            raise UnsupportedFormatError(f"cannot read {path}: {e}") from e

        return self.process(source, handler, info.file_type, source_file=info.path)

    def process(
        self,
        source: Any,
        handler: Type[FormatHandler],
        file_type: FileType,
        source_file: Optional[str] = None,
    ) -> MergeResult:
        """
        Merge an already loaded source.

        Args:
            source: Object returned by handler.load()
            handler: FormatHandler for the source
            file_type: Format of the source
            source_file: Origin, recorded in the result

        Returns:
            MergeResult with the merged set and its record
        """
        options = self.options
        result = MergeResult(source_file=source_file)

        kind = options.kind or handler.detect_kind(source, options)
        intensities = handler.read(source, kind, options)
        rows_read = handler.row_count(source)
        observations = len(intensities)

        if observations == 0:
            result.warnings.append("No valid observations in source")

        if options.anomalous and kind == DataKind.MEAN:
            result.warnings.append("Mean intensities carry no I(+)/I(-) distinction")

        if options.remove_absences:
            before = len(intensities)
            intensities.remove_systematic_absences()
            if len(intensities) < before:
                logger.info(f"Removed {before - len(intensities)} systematically absent observations")
            observations = len(intensities)

        intensities.merge_in_place(output_plus_minus=options.anomalous)

        d_min = d_max = None
        if len(intensities):
            d_min, d_max = intensities.resolution_range()
            if math.isinf(d_min):
                d_min = None
            if math.isinf(d_max):
                result.warnings.append("0 0 0 reflection present; low-resolution limit not recorded")
                d_max = None

        result.intensities = intensities
        result.dataset = MergedDataset(
            source_file=source_file,
            file_type=file_type.value,
            kind=kind,
            anomalous=options.anomalous,
            spacegroup=intensities.spacegroup_str(),
            cell=CrystalCell.from_gemmi(intensities.unit_cell),
            wavelength=intensities.wavelength,
            rows_read=rows_read,
            observations=observations,
            unique_reflections=len(intensities),
            d_min=d_min,
            d_max=d_max,
        )

        logger.info(
            f"Merged {observations} observations into {len(intensities)} reflections "
            f"({intensities.spacegroup_str()})"
        )
        return result
