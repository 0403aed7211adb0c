"""
Type definitions for the resolved schema model.

Entities are frozen dataclasses holding tuples, so a resolved model can be
shared between the analyzer and the layout engine without copying.
"""

from dataclasses import dataclass, field
from typing import Any

from .declarations import ColumnReference, DataType


@dataclass(frozen=True)
class Column:
    """A table column after semantic normalization."""

    name: str
    data_type: DataType
    nullable: bool = True
    default_value: str | None = None
    is_unique: bool = False
    is_primary_key: bool = False
    references: ColumnReference | None = None

    def __post_init__(self):
        if not self.name:
            raise ValueError("Column name is required")
        if self.is_primary_key and self.nullable:
            raise ValueError(f"Primary key column '{self.name}' cannot be nullable")

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "data_type": str(self.data_type),
            "nullable": self.nullable,
            "default_value": self.default_value,
            "is_unique": self.is_unique,
            "is_primary_key": self.is_primary_key,
            "references": (
                {"table": self.references.table, "columns": list(self.references.columns)}
                if self.references
                else None
            ),
        }


@dataclass(frozen=True)
class ForeignKey:
    """A foreign key relationship from one table to another."""

    columns: tuple[str, ...]
    referenced_table: str
    referenced_columns: tuple[str, ...]
    constraint_name: str | None = None

    def __post_init__(self):
        if not self.columns:
            raise ValueError("Foreign key requires at least one column")
        if not self.referenced_table:
            raise ValueError("Foreign key requires a referenced table")

    def to_dict(self) -> dict[str, Any]:
        return {
            "constraint_name": self.constraint_name,
            "columns": list(self.columns),
            "referenced_table": self.referenced_table,
            "referenced_columns": list(self.referenced_columns),
        }


@dataclass(frozen=True)
class Table:
    """A table with its columns and constraints."""

    name: str
    columns: tuple[Column, ...] = ()
    primary_key: tuple[str, ...] = ()
    foreign_keys: tuple[ForeignKey, ...] = ()
    unique_constraints: tuple[tuple[str, ...], ...] = ()
    source_file: str = ""

    def get_column(self, name: str) -> Column | None:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "source_file": self.source_file,
            "columns": [column.to_dict() for column in self.columns],
            "primary_key": list(self.primary_key),
            "foreign_keys": [fk.to_dict() for fk in self.foreign_keys],
            "unique_constraints": [list(unique) for unique in self.unique_constraints],
        }


@dataclass(frozen=True)
class EnumType:
    name: str
    values: tuple[str, ...] = ()
    source_file: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "values": list(self.values), "source_file": self.source_file}


@dataclass(frozen=True)
class Sequence:
    name: str
    start: int = 1
    increment: int = 1
    source_file: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "start": self.start,
            "increment": self.increment,
            "source_file": self.source_file,
        }


@dataclass(frozen=True)
class Index:
    """A CREATE INDEX statement; only the column order matters for analysis."""

    table: str
    columns: tuple[str, ...]
    name: str | None = None
    unique: bool = False
    source_file: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "table": self.table,
            "columns": list(self.columns),
            "unique": self.unique,
            "source_file": self.source_file,
        }


@dataclass(frozen=True)
class SchemaModel:
    """
    The resolved, cross-referenced schema of one parse batch.

    Order follows file-processing order, then declaration order within a
    file. Same-named tables from different files are kept as separate entries.
    """

    tables: tuple[Table, ...] = ()
    types: tuple[EnumType, ...] = ()
    sequences: tuple[Sequence, ...] = ()
    indexes: tuple[Index, ...] = field(default_factory=tuple)

    def get_table(self, name: str) -> Table | None:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    @property
    def table_names(self) -> set[str]:
        return {table.name for table in self.tables}

    def to_dict(self) -> dict[str, Any]:
        return {
            "tables": [table.to_dict() for table in self.tables],
            "types": [enum_type.to_dict() for enum_type in self.types],
            "sequences": [sequence.to_dict() for sequence in self.sequences],
            "indexes": [index.to_dict() for index in self.indexes],
        }
