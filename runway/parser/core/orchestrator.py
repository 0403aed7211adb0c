"""
High-level orchestration for the parse, resolve, analyze and layout workflow.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from runway.config import RunwayConfig
from runway.layout import LayoutEngine, LayoutOptions, LayoutResult
from runway.parser.analysis import analyze_schema, merge_models, resolve_references
from runway.parser.parsers import BaseParser, ParserFactory
from runway.parser.processing import FileDiscovery, FileModel, build_model
from runway.parser.shared.constants import DEFAULT_DIALECT, PARSER_STRATEGY_AUTO
from runway.parser.shared.exceptions import ParserError
from runway.parser.shared.types import SourceFile
from runway.typing import Category, Diagnostic, SchemaModel, Severity

# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class ParseOptions:
    parser_strategy: str = PARSER_STRATEGY_AUTO
    dialect: str = DEFAULT_DIALECT


@dataclass
class ParseResult:
    """A resolved model plus the non-fatal diagnostics of parsing and resolution."""

    model: SchemaModel
    diagnostics: list[Diagnostic] = field(default_factory=list)


def _parse_failure(source_file: str, message: str) -> Diagnostic:
    return Diagnostic(
        severity=Severity.ERROR,
        category=Category.PARSING,
        message=message,
        source_file=source_file,
        suggestion="Fix the syntax error; the file contributes no declarations until it parses",
    )


def parse_files(
    files: list[SourceFile],
    options: ParseOptions | None = None,
    parser: BaseParser | None = None,
) -> ParseResult:
    """
    Parse a batch of ``(path, text)`` pairs into one resolved model.

    Files are processed in the given order. A file that fails to parse is
    reported as an error diagnostic and contributes nothing; the rest of the
    batch is unaffected.

    Args:
        files: Schema-definition files, usually sorted by relative path
        options: Parser strategy and dialect
        parser: Optional pre-built parser, overrides ``options``

    Returns:
        ParseResult with the resolved model and diagnostics
    """
    options = options or ParseOptions()
    parser = parser or ParserFactory.create_parser(options.parser_strategy, options.dialect)

    diagnostics: list[Diagnostic] = []
    file_models: list[FileModel] = []

    for source_file, content in files:
        logger.debug(f"Processing SQL file: {source_file}")
        try:
            declarations = parser.parse(content, source_file)
            file_models.append(build_model(declarations, source_file))
        except (ParserError, ValueError) as e:
            logger.warning(f"Failed to parse {source_file}: {e}")
            diagnostics.append(_parse_failure(source_file, str(e)))
            file_models.append(FileModel(source_file=source_file))

    merged = merge_models(file_models)
    resolved = resolve_references(merged.model)
    diagnostics.extend(merged.diagnostics)
    diagnostics.extend(resolved.diagnostics)

    logger.info(
        f"Parsed {len(files)} files into {len(resolved.model.tables)} tables, "
        f"{len(resolved.model.types)} types and {len(resolved.model.sequences)} sequences"
    )
    return ParseResult(model=resolved.model, diagnostics=diagnostics)


class SchemaParser:
    """Discovers the DDL files of a folder and runs the full workflow on them."""

    def __init__(self, schema_folder: str | Path, config: RunwayConfig | None = None) -> None:
        """
        Initialize the schema parser.

        Args:
            schema_folder: Folder searched recursively for ``*.sql`` files
            config: Optional configuration; defaults apply when omitted
        """
        self.schema_folder = Path(schema_folder)
        self.config = config or RunwayConfig()
        self.file_discovery = FileDiscovery(self.schema_folder)

        # Cached results
        self._result: ParseResult | None = None

    def parse(self) -> ParseResult:
        """
        Read and parse every file of the folder.

        Returns:
            ParseResult for the whole folder

        Raises:
            FileDiscoveryError: If the folder cannot be searched
        """
        if self._result is not None:
            return self._result

        logger.info(f"Starting schema discovery in {self.schema_folder}")
        sources, failures = self.file_discovery.read_sql_files()
        logger.info(f"Discovered {len(sources) + len(failures)} SQL files")

        result = parse_files(
            sources,
            ParseOptions(parser_strategy=self.config.parser_strategy, dialect=self.config.dialect),
        )
        result.diagnostics[:0] = [
            _parse_failure(source_file, f"Could not read file: {message}")
            for source_file, message in failures.items()
        ]

        self._result = result
        return result

    def analyze(self) -> list[Diagnostic]:
        """Run the structural analyzer over the parsed model."""
        return analyze_schema(self.parse().model, self.config.analysis)

    def layout(self, options: LayoutOptions | None = None, overrides=None) -> LayoutResult:
        """Compute node positions for the parsed model."""
        return LayoutEngine(options or self.config.layout).layout_model(self.parse().model, overrides)

    def invalidate(self) -> None:
        """Drop cached results so the next call re-reads the folder."""
        self._result = None
        self.file_discovery.clear_cache()
