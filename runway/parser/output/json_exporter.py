"""
JSON and YAML export of schema models, diagnostics and layouts.
"""

import json
import logging
from pathlib import Path
from typing import Any, Literal

import yaml

from runway.layout import LayoutResult
from runway.parser.shared.exceptions import OutputGenerationError
from runway.typing import Diagnostic, SchemaModel

# Configure logging
logger = logging.getLogger(__name__)

OutputFormat = Literal["json", "yaml"]
OUTPUT_FORMATS = ("json", "yaml")


class JSONExporter:
    """Handles JSON and YAML export of parse, analysis and layout results."""

    def __init__(self, format: OutputFormat = "json"):
        """
        Initialize the exporter.

        Args:
            format: Output format ("json" or "yaml")

        Raises:
            OutputGenerationError: If the format is unknown
        """
        if format not in OUTPUT_FORMATS:
            raise OutputGenerationError(f"Unknown output format: {format}. Expected one of: {', '.join(OUTPUT_FORMATS)}")
        self.format = format

    @staticmethod
    def model_document(model: SchemaModel, diagnostics: list[Diagnostic] | None = None) -> dict[str, Any]:
        document = model.to_dict()
        document["diagnostics"] = [diagnostic.to_dict() for diagnostic in diagnostics or []]
        return document

    @staticmethod
    def analysis_document(diagnostics: list[Diagnostic], summary: dict[str, Any]) -> dict[str, Any]:
        return {"summary": summary, "diagnostics": [diagnostic.to_dict() for diagnostic in diagnostics]}

    @staticmethod
    def layout_document(layout: LayoutResult) -> dict[str, Any]:
        return layout.to_dict()

    def render(self, document: dict[str, Any]) -> str:
        """
        Serialize a document in the configured format.

        Raises:
            OutputGenerationError: If serialization fails
        """
        try:
            if self.format == "yaml":
                return yaml.dump(document, default_flow_style=False, sort_keys=False, allow_unicode=True)
            return json.dumps(document, indent=2, ensure_ascii=False) + "\n"
        except (TypeError, ValueError, yaml.YAMLError) as e:
            raise OutputGenerationError(f"Failed to render {self.format.upper()} output: {e}") from e

    def export(self, document: dict[str, Any], output_file: str | Path) -> Path:
        """
        Write a document to a file, creating parent folders as needed.

        Returns:
            Path to the exported file

        Raises:
            OutputGenerationError: If export fails
        """
        output_file = Path(output_file)
        content = self.render(document)
        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            with open(output_file, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise OutputGenerationError(f"Failed to write {output_file}: {e}") from e

        logger.info(f"Exported {self.format.upper()} output to {output_file}")
        return output_file
