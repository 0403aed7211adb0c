"""
Parse command implementation.
"""

from runway.cli.context import CommandContext
from runway.parser.core import SchemaParser
from runway.parser.output import JSONExporter


def cmd_parse(
    schema_folder: str,
    verbose: bool = False,
    format: str = "json",
    output: str | None = None,
) -> None:
    """Execute the parse command."""
    ctx = CommandContext(schema_folder=schema_folder, verbose=verbose, format=format, output=output)

    try:
        config = ctx.load_config()
        result = SchemaParser(ctx.schema_path, config).parse()
        model = result.model

        summary = (
            f"Parsed {len(model.tables)} tables, {len(model.types)} enum types and "
            f"{len(model.sequences)} sequences with {len(result.diagnostics)} diagnostics"
        )
        ctx.emit(JSONExporter.model_document(model, result.diagnostics), summary)

    except Exception as e:
        ctx.handle_error(e)
