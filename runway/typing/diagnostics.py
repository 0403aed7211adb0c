"""
Diagnostic types shared by the pipeline and the structural analyzer.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Severity(Enum):
    """Severity level for diagnostics, most severe first."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}


class Category(Enum):
    """Categories for diagnostics."""

    PARSING = "Parsing"
    RESOLUTION = "Resolution"
    STRUCTURE = "Structure"
    RELATIONSHIPS = "Relationships"
    NAMING = "Naming Conventions"
    BEST_PRACTICES = "Best Practices"


@dataclass(frozen=True)
class Diagnostic:
    """A single finding produced while parsing, resolving or analyzing a schema."""

    severity: Severity
    category: Category
    message: str
    table: str | None = None
    column: str | None = None
    source_file: str | None = None
    suggestion: str | None = None
    tables: tuple[str, ...] = ()

    def __str__(self) -> str:
        location = f"{self.table}.{self.column}" if self.column else (self.table or self.source_file or "")
        prefix = f"[{self.severity.value.upper()}] {self.category.value}"
        return f"{prefix} ({location}): {self.message}" if location else f"{prefix}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "severity": self.severity.value,
            "category": self.category.value,
            "message": self.message,
            "table": self.table,
            "column": self.column,
            "source_file": self.source_file,
            "suggestion": self.suggestion,
        }
        if self.tables:
            data["tables"] = list(self.tables)
        return data


def sort_by_severity(diagnostics: list[Diagnostic]) -> list[Diagnostic]:
    """Stable sort by severity only; order within a tier is preserved."""
    return sorted(diagnostics, key=lambda diagnostic: diagnostic.severity.rank)
