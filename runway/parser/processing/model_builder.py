"""
Builds per-file schema entities from parsed declarations.

Table-level and column-level constraints of the same kind accumulate into
the same table fields. ALTER TABLE declarations are not applied here; they
are collected on the FileModel and applied by the merger once every file of
the batch has been built.
"""

import logging
import re
from dataclasses import dataclass, field

from runway.parser.shared.identifiers import collapse_whitespace
from runway.typing.declarations import (
    AlterTableAddForeignKey,
    ColumnDefinition,
    ColumnReference,
    CreateEnum,
    CreateIndex,
    CreateSequence,
    CreateTable,
    Declaration,
    ForeignKeyConstraint,
    PrimaryKeyConstraint,
    UniqueConstraint,
)
from runway.typing.schema import Column, EnumType, ForeignKey, Index, Sequence, Table

logger = logging.getLogger(__name__)

_FUNCTION_CALL = re.compile(r"^([A-Za-z_][\w.]*)\s*\((.*)\)$", re.DOTALL)


@dataclass
class FileModel:
    """Entities built from one file, plus its deferred ALTER declarations."""

    source_file: str
    tables: list[Table] = field(default_factory=list)
    types: list[EnumType] = field(default_factory=list)
    sequences: list[Sequence] = field(default_factory=list)
    indexes: list[Index] = field(default_factory=list)
    alters: list[AlterTableAddForeignKey] = field(default_factory=list)


def format_default(expression: str | None) -> str | None:
    """
    Format a raw DEFAULT expression for display.

    Function calls keep only their name (``nextval('s'::regclass)`` becomes
    ``nextval()``); anything else is kept as written with whitespace collapsed.
    """
    if expression is None:
        return None
    text = collapse_whitespace(expression)
    if not text:
        return None
    match = _FUNCTION_CALL.match(text)
    if match and _balanced(match.group(2)):
        return f"{match.group(1)}()"
    return text


def _balanced(text: str) -> bool:
    depth = 0
    quote = None
    for char in text:
        if quote:
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def _append_unique(target: list, items) -> None:
    for item in items:
        if item not in target:
            target.append(item)


def build_table(declaration: CreateTable, source_file: str) -> Table:
    """Build a Table entity from a CREATE TABLE declaration."""
    column_definitions: list[ColumnDefinition] = []
    primary_key: list[str] = []
    foreign_keys: list[ForeignKey] = []
    unique_constraints: list[tuple[str, ...]] = []

    for element in declaration.elements:
        match element:
            case ColumnDefinition():
                column_definitions.append(element)
                if element.primary_key:
                    _append_unique(primary_key, [element.name])
                if element.unique:
                    _append_unique(unique_constraints, [(element.name,)])
                if element.references is not None:
                    foreign_keys.append(
                        ForeignKey(
                            columns=(element.name,),
                            referenced_table=element.references.table,
                            referenced_columns=element.references.columns or (element.name,),
                        )
                    )
            case PrimaryKeyConstraint():
                _append_unique(primary_key, element.columns)
            case ForeignKeyConstraint():
                foreign_keys.append(build_foreign_key(element))
            case UniqueConstraint():
                _append_unique(unique_constraints, [element.columns])
            case _:
                raise TypeError(f"Unexpected table element: {element!r}")

    single_unique = {unique[0] for unique in unique_constraints if len(unique) == 1}
    columns = tuple(
        build_column(definition, definition.name in primary_key, definition.name in single_unique)
        for definition in column_definitions
    )

    return Table(
        name=declaration.name,
        columns=columns,
        primary_key=tuple(primary_key),
        foreign_keys=tuple(foreign_keys),
        unique_constraints=tuple(unique_constraints),
        source_file=source_file,
    )


def build_column(definition: ColumnDefinition, is_primary_key: bool = False, is_unique: bool = False) -> Column:
    """Build a Column; primary key membership forces NOT NULL."""
    primary = definition.primary_key or is_primary_key
    references = None
    if definition.references is not None:
        references = ColumnReference(
            table=definition.references.table,
            columns=definition.references.columns or (definition.name,),
        )
    return Column(
        name=definition.name,
        data_type=definition.data_type,
        nullable=not (definition.not_null or primary),
        default_value=format_default(definition.default),
        is_unique=definition.unique or is_unique,
        is_primary_key=primary,
        references=references,
    )


def build_foreign_key(constraint: ForeignKeyConstraint) -> ForeignKey:
    """Build a ForeignKey; missing target columns default to the source columns."""
    return ForeignKey(
        columns=constraint.columns,
        referenced_table=constraint.referenced_table,
        referenced_columns=constraint.referenced_columns or constraint.columns,
        constraint_name=constraint.name,
    )


def build_model(declarations: list[Declaration], source_file: str) -> FileModel:
    """
    Map one file's declarations to schema entities.

    Args:
        declarations: Declarations in source order
        source_file: Identifier of the file the declarations came from

    Returns:
        FileModel with entities in declaration order

    Raises:
        TypeError: If a declaration is not one of the known kinds
    """
    file_model = FileModel(source_file=source_file)

    for declaration in declarations:
        match declaration:
            case CreateTable():
                file_model.tables.append(build_table(declaration, source_file))
            case CreateEnum(name=name, values=values):
                file_model.types.append(EnumType(name=name, values=values, source_file=source_file))
            case CreateSequence(name=name, start=start, increment=increment):
                file_model.sequences.append(
                    Sequence(name=name, start=start, increment=increment, source_file=source_file)
                )
            case CreateIndex(table=table, columns=columns, name=name, unique=unique):
                file_model.indexes.append(
                    Index(table=table, columns=columns, name=name, unique=unique, source_file=source_file)
                )
            case AlterTableAddForeignKey():
                file_model.alters.append(declaration)
            case _:
                raise TypeError(f"Unexpected declaration: {declaration!r}")

    logger.debug(
        f"Built {len(file_model.tables)} tables, {len(file_model.types)} types and "
        f"{len(file_model.sequences)} sequences from {source_file}"
    )
    return file_model
