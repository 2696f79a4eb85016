"""
Format handlers and their registry.

Each handler knows how to load one kind of reflection file, which kinds
of intensities it holds, and which reader to use for each kind.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, Type

from hklmerge.adapters.base import ReflectionTable
from hklmerge.adapters.cif import (
    MERGED_CATEGORY,
    UNMERGED_CATEGORY,
    find_reflection_block,
    has_category,
    read_cif_document,
)
from hklmerge.adapters.mtz import read_mtz_table
from hklmerge.adapters.xds import read_xds_table
from hklmerge.config import MergeOptions
from hklmerge.enums import DataKind
from hklmerge.errors import FormatMismatch, UnsupportedFormatError
from hklmerge.ingest.cif import (
    has_anomalous_items,
    read_anomalous_intensities_from_mmcif,
    read_mean_intensities_from_mmcif,
    read_unmerged_intensities_from_mmcif,
)
from hklmerge.ingest.mtz import (
    has_anomalous_columns,
    read_anomalous_intensities_from_mtz,
    read_mean_intensities_from_mtz,
    read_unmerged_intensities_from_mtz,
)
from hklmerge.ingest.xds import read_unmerged_intensities_from_xds
from hklmerge.models.intensities import Intensities
from hklmerge.tools.types import FileType

logger = logging.getLogger(__name__)


class FormatHandler(ABC):
    """
    Abstract base class for format-specific handlers.

    Each handler subclass knows how to:
    1. Load its file format into an in-memory source
    2. Tell which kinds of intensities the source provides
    3. Read a requested kind into an Intensities set
    """

    # Class attributes - override in subclasses
    name: str = "UNKNOWN"
    file_types: list[FileType] = []

    @classmethod
    @abstractmethod
    def load(cls, file_path: str | Path) -> Any:
        """
        Load a file into the handler's source object.

        Raises:
            FileNotFoundError: If file doesn't exist
        """

    @classmethod
    @abstractmethod
    def available_kinds(cls, source: Any, options: MergeOptions) -> list[DataKind]:
        """Kinds of intensities present in the source."""

    @classmethod
    @abstractmethod
    def row_count(cls, source: Any) -> int:
        """Number of reflection records in the source."""

    @classmethod
    @abstractmethod
    def _read(cls, source: Any, kind: DataKind, options: MergeOptions) -> Intensities:
        pass

    @classmethod
    def detect_kind(cls, source: Any, options: Optional[MergeOptions] = None) -> DataKind:
        """
        Pick the kind of intensities to read.

        Unmerged data wins over merged data. Among merged data, mean
        intensities are preferred unless anomalous output is requested.

        Raises:
            FormatMismatch: If the source holds no known intensities
        """
        options = options or MergeOptions()
        kinds = cls.available_kinds(source, options)
        if not kinds:
            raise FormatMismatch(f"{cls.name}: no intensities found")
        if DataKind.UNMERGED in kinds:
            return DataKind.UNMERGED
        if options.anomalous and DataKind.ANOMALOUS in kinds:
            return DataKind.ANOMALOUS
        return kinds[0]

    @classmethod
    def read(
        cls,
        source: Any,
        kind: Optional[DataKind] = None,
        options: Optional[MergeOptions] = None,
    ) -> Intensities:
        """
        Read intensities of the given kind.

        Args:
            source: Object returned by load()
            kind: Kind to read; None picks one with detect_kind()
            options: Merge options (label preferences)

        Raises:
            FormatMismatch: If the source does not provide this kind
        """
        options = options or MergeOptions()
        if kind is None:
            kind = cls.detect_kind(source, options)
        if kind not in cls.available_kinds(source, options):
            raise FormatMismatch(f"{cls.name} source has no {kind.value} intensities")

        logger.debug(f"{cls.name}: reading {kind.value} intensities")
        return cls._read(source, kind, options)


class FormatRegistry:
    """
    Registry of format handlers.

    Maintains a mapping of file types to handler classes.
    """

    _handlers: dict[FileType, Type[FormatHandler]] = {}

    @classmethod
    def register(cls, handler: Type[FormatHandler]) -> Type[FormatHandler]:
        """
        Register a format handler.

        Can be used as a decorator:
            @FormatRegistry.register
            class MyHandler(FormatHandler):
                ...

        Args:
            handler: The handler class

        Returns:
            The handler class (for decorator use)
        """
        for file_type in handler.file_types:
            cls._handlers[file_type] = handler
        return handler

    @classmethod
    def get_handler(cls, file_type: FileType) -> Type[FormatHandler]:
        """
        Get the handler for a file type.

        Raises:
            UnsupportedFormatError: If no handler is registered
        """
        try:
            return cls._handlers[file_type]
        except KeyError:
            raise UnsupportedFormatError(f"unsupported file type: {file_type.value}") from None

    @classmethod
    def list_formats(cls) -> list[str]:
        """List all registered file types."""
        return sorted(file_type.value for file_type in cls._handlers)


@FormatRegistry.register
class MtzHandler(FormatHandler):
    """CCP4 MTZ files, merged or unmerged."""

    name = "MTZ"
    file_types = [FileType.MTZ]

    @classmethod
    def load(cls, file_path: str | Path) -> ReflectionTable:
        return read_mtz_table(file_path)

    @classmethod
    def available_kinds(cls, source: ReflectionTable, options: MergeOptions) -> list[DataKind]:
        if not source.metadata.merged:
            return [DataKind.UNMERGED]
        kinds = []
        if source.find_column(options.mean_labels):
            kinds.append(DataKind.MEAN)
        if has_anomalous_columns(source):
            kinds.append(DataKind.ANOMALOUS)
        return kinds

    @classmethod
    def row_count(cls, source: ReflectionTable) -> int:
        return source.row_count

    @classmethod
    def _read(cls, source: ReflectionTable, kind: DataKind, options: MergeOptions) -> Intensities:
        if kind == DataKind.UNMERGED:
            return read_unmerged_intensities_from_mtz(source)
        if kind == DataKind.MEAN:
            return read_mean_intensities_from_mtz(source, labels=options.mean_labels)
        return read_anomalous_intensities_from_mtz(source)


@FormatRegistry.register
class CifHandler(FormatHandler):
    """mmCIF and mmJSON structure-factor files."""

    name = "mmCIF"
    file_types = [FileType.MMCIF, FileType.MMJSON]

    @classmethod
    def load(cls, file_path: str | Path):
        return find_reflection_block(read_cif_document(file_path))

    @classmethod
    def available_kinds(cls, source, options: MergeOptions) -> list[DataKind]:
        kinds = []
        if has_category(source, UNMERGED_CATEGORY):
            kinds.append(DataKind.UNMERGED)
        if has_category(source, MERGED_CATEGORY):
            if source.find_values(MERGED_CATEGORY + "intensity_meas"):
                kinds.append(DataKind.MEAN)
            if has_anomalous_items(source):
                kinds.append(DataKind.ANOMALOUS)
        return kinds

    @classmethod
    def row_count(cls, source) -> int:
        for category in (UNMERGED_CATEGORY, MERGED_CATEGORY):
            values = source.find_values(category + "index_h")
            if values:
                return len(values)
        return 0

    @classmethod
    def _read(cls, source, kind: DataKind, options: MergeOptions) -> Intensities:
        if kind == DataKind.UNMERGED:
            return read_unmerged_intensities_from_mmcif(source)
        if kind == DataKind.MEAN:
            return read_mean_intensities_from_mmcif(source)
        return read_anomalous_intensities_from_mmcif(source)


@FormatRegistry.register
class XdsHandler(FormatHandler):
    """XDS_ASCII files from CORRECT or XSCALE."""

    name = "XDS_ASCII"
    file_types = [FileType.XDS_ASCII]

    @classmethod
    def load(cls, file_path: str | Path) -> ReflectionTable:
        _, table = read_xds_table(file_path)
        return table

    @classmethod
    def available_kinds(cls, source: ReflectionTable, options: MergeOptions) -> list[DataKind]:
        # Records are read one by one whether or not XSCALE merged them
        return [DataKind.UNMERGED]

    @classmethod
    def row_count(cls, source: ReflectionTable) -> int:
        return source.row_count

    @classmethod
    def _read(cls, source: ReflectionTable, kind: DataKind, options: MergeOptions) -> Intensities:
        return read_unmerged_intensities_from_xds(source)
