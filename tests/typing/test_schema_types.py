"""
Tests for declaration, schema and diagnostic types.
"""

import pytest

from runway.typing import (
    Category,
    Column,
    DataType,
    Diagnostic,
    ForeignKey,
    SchemaModel,
    Severity,
    Table,
    sort_by_severity,
)


class TestDataType:
    """Test cases for DataType."""

    def test_str(self):
        assert str(DataType("VARCHAR")) == "VARCHAR"
        assert str(DataType("NUMERIC", ("10", "2"))) == "NUMERIC(10,2)"
        assert str(DataType("INT", is_array=True)) == "INT[]"


class TestColumn:
    """Test cases for Column."""

    def test_primary_key_cannot_be_nullable(self):
        with pytest.raises(ValueError, match="cannot be nullable"):
            Column(name="id", data_type=DataType("INT"), is_primary_key=True)

    def test_name_is_required(self):
        with pytest.raises(ValueError):
            Column(name="", data_type=DataType("INT"))

    def test_defaults(self):
        column = Column(name="note", data_type=DataType("TEXT"))

        assert column.nullable is True
        assert column.is_unique is False
        assert column.references is None


class TestForeignKey:
    """Test cases for ForeignKey."""

    def test_requires_columns(self):
        with pytest.raises(ValueError):
            ForeignKey(columns=(), referenced_table="users", referenced_columns=())

    def test_requires_referenced_table(self):
        with pytest.raises(ValueError):
            ForeignKey(columns=("user_id",), referenced_table="", referenced_columns=("id",))


class TestSchemaModel:
    """Test cases for SchemaModel and Table."""

    def test_lookup(self):
        users = Table(name="users", columns=(Column(name="id", data_type=DataType("INT")),))
        model = SchemaModel(tables=(users,))

        assert model.get_table("users") is users
        assert model.get_table("missing") is None
        assert model.table_names == {"users"}
        assert users.get_column("id").name == "id"
        assert users.get_column("missing") is None

    def test_value_equality(self):
        def build():
            return SchemaModel(tables=(Table(name="t", columns=(Column(name="a", data_type=DataType("INT")),)),))

        assert build() == build()

    def test_to_dict_of_empty_model(self):
        assert SchemaModel().to_dict() == {"tables": [], "types": [], "sequences": [], "indexes": []}


class TestDiagnostics:
    """Test cases for Diagnostic and severity ordering."""

    def test_str_with_column(self):
        diagnostic = Diagnostic(
            Severity.WARNING, Category.BEST_PRACTICES, "no index", table="orders", column="user_id"
        )
        assert str(diagnostic) == "[WARNING] Best Practices (orders.user_id): no index"

    def test_str_without_location(self):
        assert str(Diagnostic(Severity.INFO, Category.NAMING, "case")) == "[INFO] Naming Conventions: case"

    def test_to_dict_omits_empty_tables(self):
        assert "tables" not in Diagnostic(Severity.INFO, Category.NAMING, "case").to_dict()

    def test_sort_is_stable_within_severity(self):
        first_info = Diagnostic(Severity.INFO, Category.NAMING, "first")
        warning = Diagnostic(Severity.WARNING, Category.RELATIONSHIPS, "warning")
        second_info = Diagnostic(Severity.INFO, Category.RELATIONSHIPS, "second")
        error = Diagnostic(Severity.ERROR, Category.PARSING, "error")

        ordered = sort_by_severity([first_info, warning, second_info, error])

        assert [d.message for d in ordered] == ["error", "warning", "first", "second"]
