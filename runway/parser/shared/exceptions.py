"""
Custom exceptions for the parser module.
"""


class ParserError(Exception):
    """Base exception for all parser-related errors."""

    pass


class SQLParsingError(ParserError):
    """Raised when DDL parsing fails."""

    def __init__(self, message: str, file_path: str | None = None):
        super().__init__(message)
        self.file_path = file_path


class FileDiscoveryError(ParserError):
    """Raised when file discovery fails."""

    pass


class ResolutionError(ParserError):
    """Raised when model merging or reference resolution fails."""

    pass


class LayoutError(ParserError):
    """Raised when layout input is inconsistent."""

    pass


class OutputGenerationError(ParserError):
    """Raised when output generation fails."""

    pass


class ConfigurationError(ParserError):
    """Raised when configuration values are invalid."""

    pass
