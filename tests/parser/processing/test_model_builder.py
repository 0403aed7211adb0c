"""
Tests for building schema entities from parsed declarations.
"""

import pytest

from runway.parser.parsers import RegexParser
from runway.parser.processing import build_model, build_table, format_default
from runway.typing import (
    AlterTableAddForeignKey,
    ColumnDefinition,
    ColumnReference,
    CreateEnum,
    CreateIndex,
    CreateSequence,
    CreateTable,
    DataType,
    ForeignKey,
    ForeignKeyConstraint,
    PrimaryKeyConstraint,
    UniqueConstraint,
)

INT = DataType("INT")


class TestFormatDefault:
    """Test cases for format_default."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("nextval('users_id_seq'::regclass)", "nextval()"),
            ("now()", "now()"),
            ("gen_random_uuid( )", "gen_random_uuid()"),
            ("pg_catalog.now()", "pg_catalog.now()"),
            ("0", "0"),
            ("'pending'", "'pending'"),
            ("'a'   ||   'b'", "'a' || 'b'"),
            ("(1 + 2)", "(1 + 2)"),
            ("lower(a) || upper(b)", "lower(a) || upper(b)"),
        ],
    )
    def test_formatting(self, raw, expected):
        assert format_default(raw) == expected

    def test_missing_default(self):
        assert format_default(None) is None
        assert format_default("   ") is None


class TestBuildTable:
    """Test cases for build_table."""

    def test_column_flags(self):
        declaration = CreateTable(
            name="users",
            elements=(
                ColumnDefinition(name="id", data_type=INT, primary_key=True),
                ColumnDefinition(name="email", data_type=DataType("TEXT"), not_null=True, unique=True),
                ColumnDefinition(name="bio", data_type=DataType("TEXT"), default="'none'"),
            ),
        )

        table = build_table(declaration, "users.sql")

        assert table.source_file == "users.sql"
        assert table.primary_key == ("id",)
        assert table.unique_constraints == (("email",),)
        id_column, email, bio = table.columns
        assert id_column.is_primary_key and not id_column.nullable
        assert email.is_unique and not email.nullable
        assert bio.nullable and bio.default_value == "'none'"

    def test_table_level_constraints_mark_columns(self):
        declaration = CreateTable(
            name="orders",
            elements=(
                ColumnDefinition(name="id", data_type=INT),
                ColumnDefinition(name="code", data_type=DataType("TEXT")),
                PrimaryKeyConstraint(columns=("id",)),
                UniqueConstraint(columns=("code",)),
            ),
        )

        table = build_table(declaration, "orders.sql")
        id_column, code = table.columns

        assert id_column.is_primary_key is True
        assert id_column.nullable is False
        assert code.is_unique is True

    def test_composite_unique_does_not_mark_columns(self):
        declaration = CreateTable(
            name="t",
            elements=(
                ColumnDefinition(name="a", data_type=INT),
                ColumnDefinition(name="b", data_type=INT),
                UniqueConstraint(columns=("a", "b")),
            ),
        )

        table = build_table(declaration, "t.sql")

        assert table.unique_constraints == (("a", "b"),)
        assert not any(column.is_unique for column in table.columns)

    def test_primary_key_accumulates_without_duplicates(self):
        declaration = CreateTable(
            name="t",
            elements=(
                ColumnDefinition(name="a", data_type=INT, primary_key=True),
                ColumnDefinition(name="b", data_type=INT),
                PrimaryKeyConstraint(columns=("a", "b")),
            ),
        )

        assert build_table(declaration, "t.sql").primary_key == ("a", "b")

    def test_inline_reference_becomes_foreign_key(self):
        declaration = CreateTable(
            name="orders",
            elements=(
                ColumnDefinition(
                    name="user_id", data_type=INT, references=ColumnReference(table="users", columns=("id",))
                ),
                ColumnDefinition(name="users", data_type=INT, references=ColumnReference(table="users", columns=())),
            ),
        )

        table = build_table(declaration, "orders.sql")

        assert table.foreign_keys == (
            ForeignKey(columns=("user_id",), referenced_table="users", referenced_columns=("id",)),
            ForeignKey(columns=("users",), referenced_table="users", referenced_columns=("users",)),
        )
        assert table.columns[1].references == ColumnReference(table="users", columns=("users",))

    def test_foreign_key_columns_default_to_source_columns(self):
        declaration = CreateTable(
            name="t",
            elements=(
                ColumnDefinition(name="tenant_id", data_type=INT),
                ForeignKeyConstraint(columns=("tenant_id",), referenced_table="tenants", name="fk_tenant"),
            ),
        )

        (foreign_key,) = build_table(declaration, "t.sql").foreign_keys

        assert foreign_key.referenced_columns == ("tenant_id",)
        assert foreign_key.constraint_name == "fk_tenant"

    def test_columns_keep_declaration_order(self):
        names = [f"col_{i}" for i in range(20)]
        declaration = CreateTable(
            name="wide", elements=tuple(ColumnDefinition(name=name, data_type=INT) for name in names)
        )

        assert build_table(declaration, "wide.sql").column_names == names

    def test_unknown_element(self):
        with pytest.raises(TypeError):
            build_table(CreateTable(name="t", elements=("bogus",)), "t.sql")


class TestBuildModel:
    """Test cases for build_model."""

    def test_every_declaration_kind(self):
        alter = AlterTableAddForeignKey(
            table="orders", foreign_key=ForeignKeyConstraint(columns=("user_id",), referenced_table="users")
        )
        declarations = [
            CreateTable(name="orders", elements=(ColumnDefinition(name="id", data_type=INT),)),
            CreateEnum(name="status", values=("a", "b")),
            CreateSequence(name="seq", start=5, increment=2),
            CreateIndex(table="orders", columns=("id",), name="idx"),
            alter,
        ]

        file_model = build_model(declarations, "schema/orders.sql")

        assert [table.name for table in file_model.tables] == ["orders"]
        assert file_model.types[0].values == ("a", "b")
        assert file_model.types[0].source_file == "schema/orders.sql"
        assert (file_model.sequences[0].start, file_model.sequences[0].increment) == (5, 2)
        assert file_model.indexes[0].name == "idx"
        assert file_model.alters == [alter]

    def test_alters_are_not_applied(self):
        alter = AlterTableAddForeignKey(
            table="orders", foreign_key=ForeignKeyConstraint(columns=("user_id",), referenced_table="users")
        )
        file_model = build_model(
            [CreateTable(name="orders", elements=(ColumnDefinition(name="user_id", data_type=INT),)), alter],
            "orders.sql",
        )

        assert file_model.tables[0].foreign_keys == ()

    def test_unknown_declaration(self):
        with pytest.raises(TypeError):
            build_model([object()], "x.sql")

    def test_function_default_from_parsed_text(self):
        declarations = RegexParser().parse(
            "CREATE TABLE events (id SERIAL PRIMARY KEY, created_at TIMESTAMP DEFAULT now(), "
            "seq_no INT DEFAULT nextval('events_seq'::regclass));"
        )

        table = build_model(declarations, "events.sql").tables[0]

        assert table.get_column("created_at").default_value == "now()"
        assert table.get_column("seq_no").default_value == "nextval()"
        assert table.get_column("id").data_type == DataType("SERIAL")
