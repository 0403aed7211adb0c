"""
CLI command implementations.
"""

from runway.cli.commands.analyze import cmd_analyze
from runway.cli.commands.layout import cmd_layout
from runway.cli.commands.parse import cmd_parse

__all__ = ["cmd_parse", "cmd_analyze", "cmd_layout"]
