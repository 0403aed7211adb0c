"""
Merging of per-file models and resolution of foreign key references.

Resolution runs in two phases. Phase one (the model builder) collects every
file's entities together with its deferred ALTER TABLE declarations. Phase
two merges the files, applies the deferred declarations against the complete
table set and prunes foreign keys that cannot be resolved.
"""

import logging
from dataclasses import dataclass, field, replace

from runway.parser.processing.model_builder import FileModel, build_foreign_key
from runway.parser.shared.exceptions import ResolutionError
from runway.typing import Category, Diagnostic, ForeignKey, SchemaModel, Severity, Table

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    model: SchemaModel
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass
class ResolutionResult:
    """A resolved model and the diagnostics produced while resolving it."""

    model: SchemaModel
    diagnostics: list[Diagnostic] = field(default_factory=list)
    dropped_foreign_keys: int = 0


def merge_models(file_models: list[FileModel]) -> MergeResult:
    """
    Concatenate per-file models in file order and apply deferred ALTERs.

    Same-named tables are kept as separate entries and reported once per
    extra occurrence. A deferred foreign key is added to the first table with
    the matching name; one targeting an unknown table is dropped.

    Args:
        file_models: Per-file models in file-processing order

    Returns:
        MergeResult holding the merged, not yet resolved model

    Raises:
        ResolutionError: If a deferred foreign key declaration is malformed
    """
    tables: list[Table] = []
    diagnostics: list[Diagnostic] = []
    first_seen: dict[str, Table] = {}

    for file_model in file_models:
        for table in file_model.tables:
            original = first_seen.get(table.name)
            if original is None:
                first_seen[table.name] = table
            else:
                diagnostics.append(
                    Diagnostic(
                        severity=Severity.WARNING,
                        category=Category.STRUCTURE,
                        message=(
                            f"Table '{table.name}' is declared in both "
                            f"'{original.source_file}' and '{table.source_file}'"
                        ),
                        table=table.name,
                        source_file=table.source_file,
                        suggestion="Rename one of the tables or remove the duplicate declaration",
                    )
                )
            tables.append(table)

    index_by_name: dict[str, int] = {}
    for position, table in enumerate(tables):
        index_by_name.setdefault(table.name, position)

    for file_model in file_models:
        for alter in file_model.alters:
            position = index_by_name.get(alter.table)
            if position is None:
                logger.debug(
                    f"Dropping ALTER TABLE on unknown table '{alter.table}' from {file_model.source_file}"
                )
                continue
            target = tables[position]
            try:
                foreign_key = build_foreign_key(alter.foreign_key)
            except ValueError as e:
                raise ResolutionError(
                    f"Could not apply ALTER TABLE on '{alter.table}' from {file_model.source_file}: {e}"
                ) from e
            tables[position] = replace(target, foreign_keys=target.foreign_keys + (foreign_key,))

    model = SchemaModel(
        tables=tuple(tables),
        types=tuple(enum_type for file_model in file_models for enum_type in file_model.types),
        sequences=tuple(sequence for file_model in file_models for sequence in file_model.sequences),
        indexes=tuple(index for file_model in file_models for index in file_model.indexes),
    )
    logger.debug(f"Merged {len(file_models)} files into {len(model.tables)} tables")
    return MergeResult(model=model, diagnostics=diagnostics)


def _check_foreign_key(
    table: Table, foreign_key: ForeignKey, targets: dict[str, Table]
) -> Diagnostic | None:
    """Return the diagnostic for a foreign key that cannot be kept, if any."""
    described = f"Foreign key ({', '.join(foreign_key.columns)}) on '{table.name}'"
    if foreign_key.referenced_table not in targets:
        return Diagnostic(
            severity=Severity.WARNING,
            category=Category.RESOLUTION,
            message=f"{described} references unknown table '{foreign_key.referenced_table}' and was dropped",
            table=table.name,
            column=foreign_key.columns[0],
            source_file=table.source_file,
            suggestion=f"Declare table '{foreign_key.referenced_table}' or remove the reference",
        )
    if len(foreign_key.columns) != len(foreign_key.referenced_columns):
        return Diagnostic(
            severity=Severity.WARNING,
            category=Category.RESOLUTION,
            message=(
                f"{described} lists {len(foreign_key.columns)} columns but references "
                f"{len(foreign_key.referenced_columns)} and was dropped"
            ),
            table=table.name,
            column=foreign_key.columns[0],
            source_file=table.source_file,
            suggestion="Reference the same number of columns as the foreign key declares",
        )
    return None


def resolve_references(model: SchemaModel) -> ResolutionResult:
    """
    Remove foreign keys that cannot be resolved against the model.

    A foreign key is dropped when its referenced table is absent or when its
    column and referenced-column counts differ; one warning is emitted per
    dropped key. Keys whose referenced columns do not exist on the target
    table are kept and reported as info. Running this on an already resolved
    model returns an equal model.

    Args:
        model: Merged schema model

    Returns:
        ResolutionResult with the resolved model
    """
    targets: dict[str, Table] = {}
    for table in model.tables:
        targets.setdefault(table.name, table)

    diagnostics: list[Diagnostic] = []
    dropped = 0
    resolved_tables: list[Table] = []

    for table in model.tables:
        kept: list[ForeignKey] = []
        unbacked: set[tuple[str, str]] = set()
        for foreign_key in table.foreign_keys:
            problem = _check_foreign_key(table, foreign_key, targets)
            if problem is not None:
                logger.warning(problem.message)
                diagnostics.append(problem)
                dropped += 1
                unbacked.update((name, foreign_key.referenced_table) for name in foreign_key.columns)
                continue

            target = targets[foreign_key.referenced_table]
            missing = [name for name in foreign_key.referenced_columns if target.get_column(name) is None]
            if missing:
                diagnostics.append(
                    Diagnostic(
                        severity=Severity.INFO,
                        category=Category.RESOLUTION,
                        message=(
                            f"Foreign key ({', '.join(foreign_key.columns)}) on '{table.name}' references "
                            f"columns not found on '{target.name}': {', '.join(missing)}"
                        ),
                        table=table.name,
                        column=foreign_key.columns[0],
                        source_file=table.source_file,
                        suggestion="Name the referenced columns explicitly",
                    )
                )
            kept.append(foreign_key)

        # Inline references must stay backed by a kept foreign key
        unbacked -= {(name, foreign_key.referenced_table) for foreign_key in kept for name in foreign_key.columns}
        columns = tuple(
            replace(column, references=None)
            if column.references is not None
            and (
                column.references.table not in targets
                or (column.name, column.references.table) in unbacked
            )
            else column
            for column in table.columns
        )
        if len(kept) == len(table.foreign_keys) and columns == table.columns:
            resolved_tables.append(table)
        else:
            resolved_tables.append(replace(table, columns=columns, foreign_keys=tuple(kept)))

    if dropped:
        logger.info(f"Dropped {dropped} unresolved foreign keys")
    return ResolutionResult(
        model=replace(model, tables=tuple(resolved_tables)),
        diagnostics=diagnostics,
        dropped_foreign_keys=dropped,
    )
