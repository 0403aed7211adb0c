"""
Structural analysis of a resolved schema model.

Each rule is an independent function from the model to a list of
diagnostics. ``analyze_schema`` runs the enabled rules in a fixed order and
sorts the combined result by severity only, so findings of equal severity
keep their rule-execution order.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any

from runway.parser.shared.types import GraphCycles
from runway.typing import Category, Diagnostic, SchemaModel, Severity, sort_by_severity

logger = logging.getLogger(__name__)

_UPPERCASE = re.compile(r"[A-Z]")


@dataclass
class AnalysisOptions:
    """Rule toggles for the structural analyzer."""

    check_orphan_tables: bool = True
    check_circular_dependencies: bool = True
    check_missing_primary_keys: bool = True
    check_naming_conventions: bool = True
    check_foreign_key_naming: bool = True
    check_missing_indexes: bool = True
    fk_suffix: str = "_id"


def analyze_schema(model: SchemaModel, options: AnalysisOptions | None = None) -> list[Diagnostic]:
    """
    Run the enabled rules over a resolved model.

    Args:
        model: Resolved schema model
        options: Rule toggles; every rule is enabled by default

    Returns:
        Diagnostics ordered by severity, most severe first
    """
    options = options or AnalysisOptions()
    diagnostics: list[Diagnostic] = []

    if options.check_orphan_tables:
        diagnostics.extend(detect_orphan_tables(model))
    if options.check_circular_dependencies:
        diagnostics.extend(detect_circular_dependencies(model))
    if options.check_missing_primary_keys:
        diagnostics.extend(detect_missing_primary_keys(model))
    if options.check_naming_conventions:
        diagnostics.extend(check_naming_conventions(model))
    if options.check_foreign_key_naming:
        diagnostics.extend(check_foreign_key_naming(model, options.fk_suffix))
    if options.check_missing_indexes:
        diagnostics.extend(detect_missing_foreign_key_indexes(model))

    logger.debug(f"Analysis produced {len(diagnostics)} diagnostics for {len(model.tables)} tables")
    return sort_by_severity(diagnostics)


def detect_orphan_tables(model: SchemaModel) -> list[Diagnostic]:
    """Flag tables that neither declare nor receive a foreign key."""
    related: set[str] = set()
    for table in model.tables:
        if table.foreign_keys:
            related.add(table.name)
            related.update(foreign_key.referenced_table for foreign_key in table.foreign_keys)

    return [
        Diagnostic(
            severity=Severity.INFO,
            category=Category.RELATIONSHIPS,
            message=f"Table '{table.name}' has no foreign key relationships",
            table=table.name,
            source_file=table.source_file,
            suggestion=(
                "Consider whether this table should be related to other tables, "
                "or if it is intentionally standalone"
            ),
        )
        for table in model.tables
        if table.name not in related
    ]


def find_cycles(dependencies: dict[str, list[str]]) -> GraphCycles:
    """
    Find cycles with a depth-first search tracking the recursion stack.

    Every edge into a node that is still on the stack closes a cycle. Cycles
    are returned as open member sequences in discovery order (the closing
    node is not repeated) and are not deduplicated. The search keeps its own
    stack of frames, so arbitrarily long reference chains are supported.
    """
    visited: set[str] = set()
    rec_stack: set[str] = set()
    cycles: GraphCycles = []

    for root in dependencies:
        if root in visited:
            continue

        path: list[str] = [root]
        visited.add(root)
        rec_stack.add(root)
        frames = [(root, iter(dependencies.get(root, [])))]
        while frames:
            node, neighbors = frames[-1]
            neighbor = next(neighbors, None)
            if neighbor is None:
                frames.pop()
                path.pop()
                rec_stack.remove(node)
            elif neighbor not in visited:
                visited.add(neighbor)
                rec_stack.add(neighbor)
                path.append(neighbor)
                frames.append((neighbor, iter(dependencies.get(neighbor, []))))
            elif neighbor in rec_stack:
                cycles.append(path[path.index(neighbor) :])

    return cycles


def normalize_cycle(cycle: list[str]) -> list[str]:
    """
    Rotate a cycle so it starts at its lexicographically smallest member.

    >>> normalize_cycle(["orders", "customers", "invoices"])
    ['customers', 'invoices', 'orders']
    """
    if not cycle:
        return []
    start = cycle.index(min(cycle))
    return cycle[start:] + cycle[:start]


def detect_circular_dependencies(model: SchemaModel) -> list[Diagnostic]:
    """Report each distinct foreign key cycle once, in canonical rotation."""
    dependencies: dict[str, list[str]] = {}
    source_files: dict[str, str] = {}
    for table in model.tables:
        dependencies.setdefault(table.name, [])
        source_files.setdefault(table.name, table.source_file)
        dependencies[table.name].extend(foreign_key.referenced_table for foreign_key in table.foreign_keys)

    diagnostics = []
    reported: set[tuple[str, ...]] = set()
    for cycle in find_cycles(dependencies):
        canonical = tuple(normalize_cycle(cycle))
        if canonical in reported:
            continue
        reported.add(canonical)

        path = " -> ".join([*canonical, canonical[0]])
        diagnostics.append(
            Diagnostic(
                severity=Severity.WARNING,
                category=Category.RELATIONSHIPS,
                message=f"Circular dependency detected: {path}",
                table=canonical[0],
                source_file=source_files.get(canonical[0]),
                suggestion=(
                    "Circular dependencies complicate data insertion order. "
                    "Consider nullable foreign keys or restructuring the schema"
                ),
                tables=canonical,
            )
        )
    return diagnostics


def detect_missing_primary_keys(model: SchemaModel) -> list[Diagnostic]:
    return [
        Diagnostic(
            severity=Severity.WARNING,
            category=Category.BEST_PRACTICES,
            message=f"Table '{table.name}' has no primary key defined",
            table=table.name,
            source_file=table.source_file,
            suggestion="Every table should have a primary key for data integrity and efficient querying",
        )
        for table in model.tables
        if not table.primary_key
    ]


def check_naming_conventions(model: SchemaModel) -> list[Diagnostic]:
    """Flag table and column names containing uppercase letters."""
    diagnostics = []
    for table in model.tables:
        if _UPPERCASE.search(table.name):
            diagnostics.append(
                Diagnostic(
                    severity=Severity.INFO,
                    category=Category.NAMING,
                    message=f"Table '{table.name}' uses mixed case naming",
                    table=table.name,
                    source_file=table.source_file,
                    suggestion="Use snake_case for table names (e.g. 'user_accounts' instead of 'UserAccounts')",
                )
            )
        for column in table.columns:
            if _UPPERCASE.search(column.name):
                diagnostics.append(
                    Diagnostic(
                        severity=Severity.INFO,
                        category=Category.NAMING,
                        message=f"Column '{table.name}.{column.name}' uses mixed case naming",
                        table=table.name,
                        column=column.name,
                        source_file=table.source_file,
                        suggestion="Use snake_case for column names",
                    )
                )
    return diagnostics


def check_foreign_key_naming(model: SchemaModel, fk_suffix: str = "_id") -> list[Diagnostic]:
    """Flag foreign key columns that do not end with the expected suffix."""
    diagnostics = []
    for table in model.tables:
        for foreign_key in table.foreign_keys:
            for column in foreign_key.columns:
                if column.endswith(fk_suffix):
                    continue
                diagnostics.append(
                    Diagnostic(
                        severity=Severity.INFO,
                        category=Category.NAMING,
                        message=f"Foreign key column '{table.name}.{column}' doesn't end with '{fk_suffix}'",
                        table=table.name,
                        column=column,
                        source_file=table.source_file,
                        suggestion=f"Consider renaming to '{column}{fk_suffix}' or similar for clarity",
                    )
                )
    return diagnostics


def detect_missing_foreign_key_indexes(model: SchemaModel) -> list[Diagnostic]:
    """
    Flag foreign key columns without index coverage.

    A column is covered by its table's primary key, by a single-column unique
    constraint, or by being the first column of an index on the table.
    Comparison is case-insensitive.
    """
    covered: dict[str, set[str]] = {}
    for table in model.tables:
        table_covered = covered.setdefault(table.name, set())
        table_covered.update(column.lower() for column in table.primary_key)
        table_covered.update(unique[0].lower() for unique in table.unique_constraints if len(unique) == 1)

    index_prefixes: dict[str, set[str]] = {}
    for index in model.indexes:
        if index.columns:
            index_prefixes.setdefault(index.table, set()).add(index.columns[0].lower())

    diagnostics = []
    for table in model.tables:
        table_covered = covered.get(table.name, set()) | index_prefixes.get(table.name, set())
        for foreign_key in table.foreign_keys:
            for column in foreign_key.columns:
                if column.lower() in table_covered:
                    continue
                diagnostics.append(
                    Diagnostic(
                        severity=Severity.WARNING,
                        category=Category.BEST_PRACTICES,
                        message=f"Foreign key column '{table.name}.{column}' has no index",
                        table=table.name,
                        column=column,
                        source_file=table.source_file,
                        suggestion=(
                            f"Consider adding an index: CREATE INDEX idx_{table.name}_{column} "
                            f"ON {table.name}({column});"
                        ),
                    )
                )
    return diagnostics


def summarize(diagnostics: list[Diagnostic]) -> dict[str, Any]:
    """Count diagnostics per severity and per category."""
    by_category: dict[str, int] = {}
    for diagnostic in diagnostics:
        by_category[diagnostic.category.value] = by_category.get(diagnostic.category.value, 0) + 1

    return {
        "total": len(diagnostics),
        "errors": sum(1 for d in diagnostics if d.severity == Severity.ERROR),
        "warnings": sum(1 for d in diagnostics if d.severity == Severity.WARNING),
        "info": sum(1 for d in diagnostics if d.severity == Severity.INFO),
        "by_category": by_category,
    }
