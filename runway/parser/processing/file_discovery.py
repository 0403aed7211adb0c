"""
File discovery functionality for finding schema-definition files.
"""

import logging
from pathlib import Path

from runway.parser.shared.constants import SUPPORTED_SQL_EXTENSIONS
from runway.parser.shared.exceptions import FileDiscoveryError
from runway.parser.shared.types import SourceFile

# Configure logging
logger = logging.getLogger(__name__)


class FileDiscovery:
    """Handles discovery and reading of SQL files below a schema folder."""

    def __init__(self, schema_folder: Path):
        """
        Initialize the file discovery.

        Args:
            schema_folder: Path to the folder holding the DDL files
        """
        self.schema_folder = Path(schema_folder)
        self._file_cache: dict[str, list[Path]] = {}

    def relative_path(self, file_path: Path) -> str:
        """Path of a discovered file relative to the schema folder, POSIX style."""
        return file_path.relative_to(self.schema_folder).as_posix()

    def discover_sql_files(self) -> list[Path]:
        """
        Discover all SQL files in the schema folder, recursively.

        Returns:
            List of SQL file paths sorted by relative POSIX path

        Raises:
            FileDiscoveryError: If file discovery fails
        """
        try:
            cache_key = "sql_files"
            if cache_key in self._file_cache:
                return self._file_cache[cache_key]

            if not self.schema_folder.is_dir():
                raise FileDiscoveryError(f"Schema folder not found: {self.schema_folder}")

            sql_files = []
            for ext in SUPPORTED_SQL_EXTENSIONS:
                sql_files.extend(path for path in self.schema_folder.rglob(f"*{ext}") if path.is_file())

            # Sort by relative path so ordering is platform independent
            sql_files.sort(key=self.relative_path)

            self._file_cache[cache_key] = sql_files

            logger.debug(f"Discovered {len(sql_files)} SQL files")
            return sql_files

        except Exception as e:
            if isinstance(e, FileDiscoveryError):
                raise
            raise FileDiscoveryError(f"Failed to discover SQL files: {e}") from e

    def read_sql_files(self) -> tuple[list[SourceFile], dict[str, str]]:
        """
        Read every discovered file as UTF-8, replacing undecodable bytes.

        Returns:
            Tuple of the ``(relative path, text)`` pairs that could be read and a
            mapping from relative path to error message for files that could not
        """
        sources: list[SourceFile] = []
        failures: dict[str, str] = {}
        for file_path in self.discover_sql_files():
            relative = self.relative_path(file_path)
            try:
                sources.append((relative, file_path.read_text(encoding="utf-8", errors="replace")))
            except OSError as e:
                logger.warning(f"Could not read {relative}: {e}")
                failures[relative] = str(e)
        return sources, failures

    def clear_cache(self) -> None:
        """Forget previously discovered files."""
        self._file_cache.clear()
