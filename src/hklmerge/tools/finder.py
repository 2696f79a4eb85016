"""
File finder for locating reflection files across directories.
"""

from pathlib import Path
from typing import Optional

from .detection import detect_file
from .types import FileInfo, FileType

# Only these suffixes are opened for content detection
CANDIDATE_SUFFIXES = {".mtz", ".cif", ".mmcif", ".json", ".hkl"}


class FileFinder:
    """
    Find readable reflection files across configured search paths.

    Example:
        finder = FileFinder(["/data/run1", "/data/run2"])
        for info in finder.find_files():
            print(f"{info.file_type.value}: {info.path}")
    """

    def __init__(self, search_paths: list[str | Path]):
        """
        Initialize the file finder.

        Args:
            search_paths: List of directories to search
        """
        self.search_paths = [Path(p) for p in search_paths]

    def find_files(
        self,
        file_types: Optional[set[FileType]] = None,
        recursive: bool = True,
    ) -> list[FileInfo]:
        """
        Find all supported reflection files.

        Args:
            file_types: Restrict the result to these types
            recursive: Whether to search subdirectories (default True)

        Returns:
            FileInfo list sorted by path, without duplicates
        """
        found: dict[str, FileInfo] = {}

        for search_path in self.search_paths:
            if not search_path.exists():
                continue

            if search_path.is_file():
                files = [search_path]
            elif recursive:
                files = list(search_path.rglob("*"))
            else:
                files = list(search_path.glob("*"))

            for file_path in files:
                if not file_path.is_file():
                    continue
                if file_path.suffix.lower() not in CANDIDATE_SUFFIXES:
                    continue

                file_info = detect_file(file_path)
                if not file_info.is_supported:
                    continue
                if file_types and file_info.file_type not in file_types:
                    continue
                found[file_info.path] = file_info

        return [found[path] for path in sorted(found)]

    def add_search_path(self, path: str | Path) -> None:
        """
        Add a search path to the finder.

        Args:
            path: Directory path to add
        """
        self.search_paths.append(Path(path))

    def search_path_count(self) -> int:
        """Get the number of configured search paths."""
        return len(self.search_paths)
