"""
Layout command implementation.
"""

from runway.cli.context import CommandContext
from runway.cli.utils import load_positions
from runway.layout import DIRECTIONS
from runway.parser.core import SchemaParser
from runway.parser.output import JSONExporter
from runway.parser.shared.exceptions import ConfigurationError


def cmd_layout(
    schema_folder: str,
    verbose: bool = False,
    format: str = "json",
    output: str | None = None,
    direction: str | None = None,
    group_by_folder: bool = False,
    positions: str | None = None,
) -> None:
    """Execute the layout command."""
    ctx = CommandContext(schema_folder=schema_folder, verbose=verbose, format=format, output=output)

    try:
        config = ctx.load_config()
        if direction is not None:
            if direction.upper() not in DIRECTIONS:
                raise ConfigurationError(
                    f"Invalid direction '{direction}'. Expected one of: {', '.join(DIRECTIONS)}"
                )
            config.layout.direction = direction.upper()
        if group_by_folder:
            config.layout.grouped = True

        parser = SchemaParser(ctx.schema_path, config)
        result = parser.layout(overrides=load_positions(positions))

        ctx.emit(
            JSONExporter.layout_document(result),
            f"Placed {len(result.positions)} nodes in {len(result.groups)} groups",
        )

    except Exception as e:
        ctx.handle_error(e)
