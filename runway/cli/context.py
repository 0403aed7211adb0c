"""
Command context for shared setup across CLI commands.
"""

import traceback
from pathlib import Path
from typing import Any

import typer

from runway.config import ConfigManager, RunwayConfig
from runway.parser.output import JSONExporter

from .utils import setup_logging


class CommandContext:
    """
    Shared context for CLI commands.

    Handles common setup: resolving the schema folder, loading configuration
    and setting up logging.
    """

    def __init__(
        self,
        schema_folder: str,
        verbose: bool = False,
        format: str = "json",
        output: str | None = None,
    ):
        """
        Initialize command context from parameters.

        Args:
            schema_folder: Path to the folder holding the DDL files
            verbose: Enable verbose output
            format: Output format ("json" or "yaml")
            output: Optional output file; stdout is used when omitted
        """
        # Set up logging
        self.verbose = verbose
        setup_logging(self.verbose)

        # Resolve schema folder to absolute path
        self.schema_path = Path(schema_folder).resolve()
        self.format = format
        self.output = output

        self.config: RunwayConfig | None = None

    def load_config(self) -> RunwayConfig:
        """Load configuration from the schema folder (pyproject.toml or runway.toml)."""
        self.config = ConfigManager(self.schema_path).load_config()
        return self.config

    def emit(self, document: dict[str, Any], summary: str | None = None) -> None:
        """Write a document to the output file, or to stdout when no file was given."""
        exporter = JSONExporter(self.format)
        if self.output:
            path = exporter.export(document, self.output)
            if summary:
                typer.echo(summary)
            typer.echo(f"Output written to {path}")
        else:
            typer.echo(exporter.render(document), nl=False)

    def handle_error(self, error: Exception, show_traceback: bool | None = None) -> None:
        """
        Handle errors consistently across commands.

        Args:
            error: The exception that occurred
            show_traceback: Whether to show traceback (defaults to verbose mode)
        """
        if show_traceback is None:
            show_traceback = self.verbose

        error_prefix = typer.style("Error: ", fg=typer.colors.RED, bold=True)
        typer.echo(f"{error_prefix}{error}", err=True)
        if show_traceback:
            traceback.print_exc()
        raise typer.Exit(1)
