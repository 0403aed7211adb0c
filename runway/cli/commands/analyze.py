"""
Analyze command implementation.
"""

from runway.cli.context import CommandContext
from runway.parser.analysis import summarize
from runway.parser.core import SchemaParser
from runway.parser.output import JSONExporter


def cmd_analyze(
    schema_folder: str,
    verbose: bool = False,
    format: str = "json",
    output: str | None = None,
    fk_suffix: str | None = None,
) -> None:
    """
    Execute the analyze command.

    Parsing and resolution diagnostics come first, followed by the
    structural findings ordered by severity.
    """
    ctx = CommandContext(schema_folder=schema_folder, verbose=verbose, format=format, output=output)

    try:
        config = ctx.load_config()
        if fk_suffix is not None:
            config.analysis.fk_suffix = fk_suffix

        parser = SchemaParser(ctx.schema_path, config)
        diagnostics = parser.parse().diagnostics + parser.analyze()
        summary = summarize(diagnostics)

        ctx.emit(
            JSONExporter.analysis_document(diagnostics, summary),
            f"Found {summary['errors']} errors, {summary['warnings']} warnings and {summary['info']} info messages",
        )

    except Exception as e:
        ctx.handle_error(e)
