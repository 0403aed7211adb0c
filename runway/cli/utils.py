"""
CLI utility functions.

Pure, stateless utility functions used across CLI commands.
"""

import json
import logging
from pathlib import Path


def setup_logging(verbose: bool = False) -> None:
    """
    Set up logging configuration.

    Args:
        verbose: If True, set logging level to DEBUG, otherwise INFO
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s - %(name)s - %(message)s")


def load_positions(positions_file: str | None) -> dict[str, tuple[float, float]]:
    """
    Load stored node positions from a JSON file.

    Accepts either a mapping ``{"id": [x, y]}`` or a layout document as
    written by the layout command (``{"nodes": [{"id", "x", "y"}, ...]}``).

    Raises:
        ValueError: If the file is not valid JSON or has an unexpected shape
    """
    if not positions_file:
        return {}

    try:
        data = json.loads(Path(positions_file).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid positions file (must be valid JSON): {e}") from e

    if isinstance(data, dict) and isinstance(data.get("nodes"), list):
        return {node["id"]: (float(node["x"]), float(node["y"])) for node in data["nodes"]}
    if isinstance(data, dict):
        return {node_id: (float(value[0]), float(value[1])) for node_id, value in data.items()}
    raise ValueError("Positions file must contain a JSON object")
