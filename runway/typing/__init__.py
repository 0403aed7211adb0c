"""
Type definitions for the Runway project.
"""

from .declarations import (
    AlterTableAddForeignKey,
    ColumnDefinition,
    ColumnReference,
    CreateEnum,
    CreateIndex,
    CreateSequence,
    CreateTable,
    DataType,
    Declaration,
    ForeignKeyConstraint,
    PrimaryKeyConstraint,
    TableElement,
    UniqueConstraint,
)
from .diagnostics import Category, Diagnostic, Severity, sort_by_severity
from .schema import Column, EnumType, ForeignKey, Index, SchemaModel, Sequence, Table

__all__ = [
    # Declarations
    "AlterTableAddForeignKey",
    "ColumnDefinition",
    "ColumnReference",
    "CreateEnum",
    "CreateIndex",
    "CreateSequence",
    "CreateTable",
    "DataType",
    "Declaration",
    "ForeignKeyConstraint",
    "PrimaryKeyConstraint",
    "TableElement",
    "UniqueConstraint",
    # Schema model
    "Column",
    "EnumType",
    "ForeignKey",
    "Index",
    "SchemaModel",
    "Sequence",
    "Table",
    # Diagnostics
    "Category",
    "Diagnostic",
    "Severity",
    "sort_by_severity",
]
