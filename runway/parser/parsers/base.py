"""
Abstract base parser class for all DDL statement parsers.
"""

from abc import ABC, abstractmethod

from runway.parser.shared.types import FilePath
from runway.typing.declarations import Declaration


class BaseParser(ABC):
    """Abstract base class for all parsers."""

    #: Strategy name used by the parser factory and in log messages
    name: str = "base"

    def __init__(self):
        """Initialize the parser."""
        self._cache: dict[str, list[Declaration]] = {}

    def clear_cache(self) -> None:
        """Clear the parser cache."""
        self._cache.clear()

    @abstractmethod
    def parse(self, content: str, file_path: FilePath = None) -> list[Declaration]:
        """
        Parse the text of one file into an ordered list of declarations.

        Args:
            content: The DDL text to parse
            file_path: Optional file path for context and error messages

        Returns:
            Declarations in source order

        Raises:
            SQLParsingError: If parsing fails. No partial result is returned.
        """
        pass

    def _get_cache_key(self, content: str, file_path: FilePath = None) -> str:
        """Generate a cache key for the given content and file path."""
        if file_path:
            return f"{file_path}:{hash(content)}"
        return str(hash(content))

    def _get_from_cache(self, cache_key: str) -> list[Declaration] | None:
        """Get parsed declarations from cache."""
        cached = self._cache.get(cache_key)
        return list(cached) if cached is not None else None

    def _set_cache(self, cache_key: str, declarations: list[Declaration]) -> None:
        """Store parsed declarations in cache."""
        self._cache[cache_key] = list(declarations)
