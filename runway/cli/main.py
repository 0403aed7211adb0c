"""
Runway CLI Main Module

Command-line interface for parsing, analyzing and laying out DDL schemas.
"""

from typing import Any, Literal

import typer

from runway.cli.commands import cmd_analyze, cmd_layout, cmd_parse

# Type aliases for better type safety and IDE support
OutputFormat = Literal["json", "yaml"]


class AlphabeticalOrderGroup(typer.core.TyperGroup):
    """Custom Typer Group that lists commands in alphabetical order."""

    def list_commands(self, ctx: typer.Context) -> list[str]:
        return sorted(self.commands.keys())


def validate_format(value: str) -> OutputFormat:
    """Validate format option (json or yaml)."""
    if value not in ["json", "yaml"]:
        raise typer.BadParameter(
            typer.style("Error: ", fg=typer.colors.RED, bold=True)
            + f"Invalid format '{value}'. Must be 'json' or 'yaml'."
        )
    return value  # type: ignore[return-value]


# Create Typer app with alphabetical command ordering
app = typer.Typer(
    name="runway",
    help="runway - parse, check and lay out SQL schema folders",
    add_completion=False,
    rich_markup_mode="rich",
    cls=AlphabeticalOrderGroup,
    invoke_without_command=True,
)


@app.callback()
def main_callback(ctx: typer.Context) -> None:
    """Main CLI callback - shows help when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


# Common option definitions to reduce duplication
SCHEMA_FOLDER_ARG = typer.Argument(None, help="Path to the folder containing the .sql files")
VERBOSE_OPTION = typer.Option(False, "-v", "--verbose", help="Enable verbose output")
FORMAT_OPTION = typer.Option(
    "json", "-f", "--format", help="Output format: json or yaml", callback=validate_format
)
OUTPUT_OPTION = typer.Option(None, "-o", "--output", help="Write output to a file instead of stdout")


def _check_required_argument(ctx: typer.Context, arg_name: str, arg_value: Any) -> None:
    """Check if a required argument is provided, show help if not."""
    if arg_value is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


@app.command()
def parse(
    ctx: typer.Context,
    schema_folder: str | None = SCHEMA_FOLDER_ARG,
    verbose: bool = VERBOSE_OPTION,
    format: str = FORMAT_OPTION,
    output: str | None = OUTPUT_OPTION,
) -> None:
    """Parse DDL files into a resolved schema model."""
    _check_required_argument(ctx, "schema_folder", schema_folder)
    cmd_parse(schema_folder=schema_folder, verbose=verbose, format=format, output=output)


@app.command()
def analyze(
    ctx: typer.Context,
    schema_folder: str | None = SCHEMA_FOLDER_ARG,
    verbose: bool = VERBOSE_OPTION,
    format: str = FORMAT_OPTION,
    output: str | None = OUTPUT_OPTION,
    fk_suffix: str | None = typer.Option(
        None, "--fk-suffix", help="Expected suffix of foreign key columns (default: _id)"
    ),
) -> None:
    """Check the schema for structural problems."""
    _check_required_argument(ctx, "schema_folder", schema_folder)
    cmd_analyze(
        schema_folder=schema_folder,
        verbose=verbose,
        format=format,
        output=output,
        fk_suffix=fk_suffix,
    )


@app.command()
def layout(
    ctx: typer.Context,
    schema_folder: str | None = SCHEMA_FOLDER_ARG,
    verbose: bool = VERBOSE_OPTION,
    format: str = FORMAT_OPTION,
    output: str | None = OUTPUT_OPTION,
    direction: str | None = typer.Option(
        None, "-d", "--direction", help="Rank direction: LR, TB, RL or BT"
    ),
    group_by_folder: bool = typer.Option(
        False, "--group-by-folder", help="Lay out each source folder as its own group"
    ),
    positions: str | None = typer.Option(
        None, "--positions", help="JSON file with stored node positions to reuse"
    ),
) -> None:
    """Compute diagram positions for tables and enum types."""
    _check_required_argument(ctx, "schema_folder", schema_folder)
    cmd_layout(
        schema_folder=schema_folder,
        verbose=verbose,
        format=format,
        output=output,
        direction=direction,
        group_by_folder=group_by_folder,
        positions=positions,
    )


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
