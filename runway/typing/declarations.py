"""
Type definitions for parsed DDL declarations.

The statement parsers emit one of a closed set of declaration kinds. Every
kind is an immutable dataclass so the model builder can match on it
exhaustively.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DataType:
    """A normalized column type: base token, optional parameters and array marker."""

    base: str
    parameters: tuple[str, ...] = ()
    is_array: bool = False

    def __str__(self) -> str:
        text = self.base
        if self.parameters:
            text += f"({','.join(self.parameters)})"
        if self.is_array:
            text += "[]"
        return text


@dataclass(frozen=True)
class ColumnReference:
    """Inline REFERENCES clause attached to a column."""

    table: str
    columns: tuple[str, ...]


@dataclass(frozen=True)
class ColumnDefinition:
    """A single column definition inside a CREATE TABLE body."""

    name: str
    data_type: DataType
    not_null: bool = False
    primary_key: bool = False
    unique: bool = False
    default: str | None = None
    references: ColumnReference | None = None


@dataclass(frozen=True)
class PrimaryKeyConstraint:
    """Table-level PRIMARY KEY (...) constraint."""

    columns: tuple[str, ...]
    name: str | None = None


@dataclass(frozen=True)
class ForeignKeyConstraint:
    """
    FOREIGN KEY (...) REFERENCES table (...) constraint.

    ``referenced_columns`` is empty when the source names no target columns;
    the model builder applies the defaulting convention.
    """

    columns: tuple[str, ...]
    referenced_table: str
    referenced_columns: tuple[str, ...] = ()
    name: str | None = None


@dataclass(frozen=True)
class UniqueConstraint:
    """Table-level UNIQUE (...) constraint."""

    columns: tuple[str, ...]
    name: str | None = None


TableElement = ColumnDefinition | PrimaryKeyConstraint | ForeignKeyConstraint | UniqueConstraint


@dataclass(frozen=True)
class CreateTable:
    name: str
    elements: tuple[TableElement, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CreateEnum:
    name: str
    values: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CreateSequence:
    name: str
    start: int = 1
    increment: int = 1


@dataclass(frozen=True)
class AlterTableAddForeignKey:
    """ALTER TABLE ... ADD [CONSTRAINT name] FOREIGN KEY ... REFERENCES ..."""

    table: str
    foreign_key: ForeignKeyConstraint


@dataclass(frozen=True)
class CreateIndex:
    """CREATE [UNIQUE] INDEX ... ON table (...)"""

    table: str
    columns: tuple[str, ...]
    name: str | None = None
    unique: bool = False


Declaration = CreateTable | CreateEnum | CreateSequence | AlterTableAddForeignKey | CreateIndex
