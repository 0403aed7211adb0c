"""
Factory for creating DDL parsers based on the configured strategy.
"""

import logging
from pathlib import Path

from runway.parser.shared.constants import (
    DEFAULT_DIALECT,
    PARSER_STRATEGIES,
    PARSER_STRATEGY_AUTO,
    PARSER_STRATEGY_REGEX,
    PARSER_STRATEGY_SQLGLOT,
    SUPPORTED_SQL_EXTENSIONS,
)
from runway.parser.shared.exceptions import ConfigurationError, SQLParsingError
from runway.parser.shared.types import FilePath
from runway.typing.declarations import Declaration

from .base import BaseParser
from .regex_parser import RegexParser
from .sqlglot_parser import SQLglotParser

logger = logging.getLogger(__name__)


class FallbackParser(BaseParser):
    """Tries the strict parser first and falls back to the tolerant one."""

    name = PARSER_STRATEGY_AUTO

    def __init__(self, dialect: str = DEFAULT_DIALECT):
        super().__init__()
        self.strict = SQLglotParser(dialect)
        self.tolerant = RegexParser()

    def parse(self, content: str, file_path: FilePath = None) -> list[Declaration]:
        try:
            return self.strict.parse(content, file_path)
        except SQLParsingError as e:
            logger.debug(f"Falling back to regex parser for {file_path or '<text>'}: {e}")
            return self.tolerant.parse(content, file_path)

    def clear_cache(self) -> None:
        self.strict.clear_cache()
        self.tolerant.clear_cache()


class ParserFactory:
    """Factory for creating the parser selected by a strategy name."""

    # Registry of parsers by strategy
    _parsers: dict[str, type[BaseParser]] = {
        PARSER_STRATEGY_AUTO: FallbackParser,
        PARSER_STRATEGY_SQLGLOT: SQLglotParser,
        PARSER_STRATEGY_REGEX: RegexParser,
    }

    @classmethod
    def create_parser(cls, strategy: str = PARSER_STRATEGY_AUTO, dialect: str = DEFAULT_DIALECT) -> BaseParser:
        """
        Create the parser for the given strategy.

        Args:
            strategy: One of ``auto``, ``sqlglot`` or ``regex``
            dialect: SQLglot dialect used by grammar-based parsers

        Returns:
            Parser instance

        Raises:
            ConfigurationError: If the strategy is unknown
        """
        parser_class = cls._parsers.get(strategy.lower())
        if parser_class is None:
            raise ConfigurationError(
                f"Unknown parser strategy: {strategy}. Expected one of: {', '.join(PARSER_STRATEGIES)}"
            )
        if parser_class is RegexParser:
            return parser_class()
        return parser_class(dialect)

    @classmethod
    def is_supported(cls, file_path: Path) -> bool:
        """
        Check if a file type is supported.

        Args:
            file_path: Path to the file

        Returns:
            True if the file type is supported
        """
        return Path(file_path).suffix.lower() in SUPPORTED_SQL_EXTENSIONS
