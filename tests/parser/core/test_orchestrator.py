"""
Tests for the parse workflow over batches of files and schema folders.
"""

import pytest

from runway.config import RunwayConfig
from runway.layout import LayoutOptions
from runway.parser.core import ParseOptions, SchemaParser, parse_files
from runway.parser.parsers import RegexParser
from runway.parser.shared.exceptions import FileDiscoveryError
from runway.typing import Category, Severity


class TestParseFiles:
    """Test cases for parse_files."""

    def test_users_and_orders(self, users_sql, orders_sql):
        result = parse_files([("orders.sql", orders_sql), ("users.sql", users_sql)])

        assert [table.name for table in result.model.tables] == ["orders", "users"]
        orders = result.model.get_table("orders")
        assert orders.foreign_keys[0].referenced_table == "users"
        assert orders.get_column("user_id").nullable is False
        assert result.diagnostics == []

    def test_every_strategy_builds_the_same_model(self, shop_sql):
        models = [
            parse_files([("shop.sql", shop_sql)], ParseOptions(parser_strategy=strategy)).model
            for strategy in ("regex", "auto")
        ]

        regex_model, auto_model = models
        assert [table.name for table in auto_model.tables] == [table.name for table in regex_model.tables]
        assert [fk.referenced_table for fk in auto_model.get_table("orders").foreign_keys] == ["customers"]

    def test_alter_foreign_key_applied_with_default_strategy(self):
        files = [
            ("customers.sql", "CREATE TABLE customers (id INTEGER PRIMARY KEY);"),
            (
                "orders.sql",
                "CREATE TABLE orders (id INTEGER PRIMARY KEY, customer_id INTEGER);\n"
                "ALTER TABLE orders ADD CONSTRAINT fk_orders_customer "
                "FOREIGN KEY (customer_id) REFERENCES customers (id);",
            ),
        ]

        result = parse_files(files)

        (foreign_key,) = result.model.get_table("orders").foreign_keys
        assert foreign_key.columns == ("customer_id",)
        assert foreign_key.referenced_table == "customers"
        assert result.diagnostics == []

    @pytest.mark.parametrize("strategy", ["auto", "sqlglot"])
    def test_defaults_match_the_tolerant_parser(self, strategy):
        sql = """
        CREATE TABLE accounts (
            id UUID DEFAULT gen_random_uuid() PRIMARY KEY,
            created_at TIMESTAMP DEFAULT now(),
            is_primary BOOLEAN DEFAULT false,
            seq INTEGER DEFAULT nextval('accounts_seq'::regclass),
            note TEXT
        );
        """

        def defaults(parser_strategy):
            model = parse_files([("accounts.sql", sql)], ParseOptions(parser_strategy=parser_strategy)).model
            return [column.default_value for column in model.tables[0].columns]

        assert defaults(strategy) == ["gen_random_uuid()", "now()", "false", "nextval()", None]
        assert defaults(strategy) == defaults("regex")

    def test_shop_schema(self, shop_sql):
        model = parse_files([("shop.sql", shop_sql)], ParseOptions(parser_strategy="regex")).model

        assert [table.name for table in model.tables] == ["customers", "orders", "invoices"]
        assert model.types[0].values == ("pending", "shipped", "delivered")
        assert (model.sequences[0].start, model.sequences[0].increment) == (1000, 10)
        assert model.indexes[0].columns == ("customer_id",)
        assert model.get_table("customers").get_column("email").is_unique is True
        assert model.get_table("orders").primary_key == ("id",)
        assert model.get_table("invoices").foreign_keys[0].constraint_name == "fk_invoices_order"

    def test_failed_file_is_reported_and_skipped(self, users_sql):
        result = parse_files(
            [("broken.sql", "CREATE TYPE s AS ENUM (1, 2);"), ("users.sql", users_sql)],
            ParseOptions(parser_strategy="sqlglot"),
        )

        assert [table.name for table in result.model.tables] == ["users"]
        (error,) = result.diagnostics
        assert error.severity == Severity.ERROR
        assert error.category == Category.PARSING
        assert error.source_file == "broken.sql"

    def test_unresolved_reference_is_reported(self, orders_sql):
        result = parse_files([("orders.sql", orders_sql)])

        assert result.model.get_table("orders").foreign_keys == ()
        assert [d.category for d in result.diagnostics] == [Category.RESOLUTION]

    def test_explicit_parser_instance(self, users_sql):
        result = parse_files([("users.sql", users_sql)], parser=RegexParser())
        assert result.model.tables[0].name == "users"

    def test_parsing_twice_gives_equal_models(self, users_sql, orders_sql):
        files = [("orders.sql", orders_sql), ("users.sql", users_sql)]
        assert parse_files(files).model == parse_files(files).model

    def test_empty_batch(self):
        result = parse_files([])

        assert result.model.tables == ()
        assert result.diagnostics == []


class TestSchemaParser:
    """Test cases for SchemaParser."""

    def test_parse_folder(self, schema_folder):
        result = SchemaParser(schema_folder).parse()

        assert [table.name for table in result.model.tables] == ["orders", "users"]
        assert [(t.name, t.source_file) for t in result.model.types] == [("status", "types/status.sql")]
        assert result.model.get_table("orders").source_file == "orders.sql"

    def test_results_are_cached_until_invalidated(self, schema_folder):
        parser = SchemaParser(schema_folder)
        first = parser.parse()
        assert parser.parse() is first

        (schema_folder / "tags.sql").write_text("CREATE TABLE tags (id INT PRIMARY KEY);", encoding="utf-8")
        parser.invalidate()

        assert "tags" in parser.parse().model.table_names

    def test_missing_folder(self, tmp_path):
        with pytest.raises(FileDiscoveryError):
            SchemaParser(tmp_path / "missing").parse()

    def test_analyze_uses_config(self, schema_folder):
        config = RunwayConfig()
        config.analysis.check_orphan_tables = False

        diagnostics = SchemaParser(schema_folder, config).analyze()

        assert [(d.table, d.column) for d in diagnostics] == [("orders", "user_id")]

    def test_layout(self, schema_folder):
        result = SchemaParser(schema_folder).layout(LayoutOptions(direction="TB"))

        assert set(result.positions) == {"orders", "users", "status"}
        assert result.width > 0 and result.height > 0
