"""
Tests for the structural schema analyzer.
"""

import pytest

from runway.parser.analysis import (
    AnalysisOptions,
    analyze_schema,
    find_cycles,
    merge_models,
    normalize_cycle,
    resolve_references,
    summarize,
)
from runway.parser.analysis.schema_analyzer import (
    check_foreign_key_naming,
    check_naming_conventions,
    detect_circular_dependencies,
    detect_missing_foreign_key_indexes,
    detect_missing_primary_keys,
    detect_orphan_tables,
)
from runway.parser.parsers import RegexParser
from runway.parser.processing import build_model
from runway.typing import Category, Diagnostic, SchemaModel, Severity


def model_of(sql: str) -> SchemaModel:
    file_model = build_model(RegexParser().parse(sql, "schema.sql"), "schema.sql")
    return resolve_references(merge_models([file_model]).model).model


CYCLE_SQL = """
CREATE TABLE a (id INT PRIMARY KEY, b_id INT REFERENCES b(id));
CREATE TABLE b (id INT PRIMARY KEY, c_id INT REFERENCES c(id));
CREATE TABLE c (id INT PRIMARY KEY, a_id INT REFERENCES a(id));
"""


class TestCycles:
    """Test cases for cycle detection."""

    def test_find_cycles(self):
        assert find_cycles({"a": ["b"], "b": ["c"], "c": ["a"]}) == [["a", "b", "c"]]

    def test_find_cycles_self_loop(self):
        assert find_cycles({"node": ["node"]}) == [["node"]]

    def test_acyclic(self):
        assert find_cycles({"a": ["b"], "b": ["c"], "c": []}) == []

    def test_find_cycles_on_long_chain(self):
        names = [f"t{i:05d}" for i in range(5000)]
        chain = {name: [following] for name, following in zip(names, names[1:])}
        chain[names[-1]] = [names[0]]

        assert find_cycles(chain) == [names]

    def test_long_reference_chain_is_analyzed(self):
        count = 1200
        sql = "\n".join(
            f"CREATE TABLE t{i:05d} (id INT PRIMARY KEY, next_id INT REFERENCES t{i + 1:05d}(id));"
            for i in range(count)
        )
        sql += f"\nCREATE TABLE t{count:05d} (id INT PRIMARY KEY);"

        model = model_of(sql)
        diagnostics = analyze_schema(model)

        assert len(model.tables) == count + 1
        assert not [d for d in diagnostics if d.message.startswith("Circular dependency")]
        assert detect_circular_dependencies(model) == []

    @pytest.mark.parametrize("rotation", [["a", "b", "c"], ["b", "c", "a"], ["c", "a", "b"]])
    def test_normalize_cycle_from_any_start(self, rotation):
        assert normalize_cycle(rotation) == ["a", "b", "c"]

    def test_normalize_empty_cycle(self):
        assert normalize_cycle([]) == []

    def test_circular_dependency_is_reported_once(self):
        diagnostics = detect_circular_dependencies(model_of(CYCLE_SQL))

        (diagnostic,) = diagnostics
        assert diagnostic.severity == Severity.WARNING
        assert diagnostic.category == Category.RELATIONSHIPS
        assert diagnostic.message == "Circular dependency detected: a -> b -> c -> a"
        assert diagnostic.tables == ("a", "b", "c")

    def test_cycle_found_from_other_start_is_canonical(self):
        sql = """
        CREATE TABLE c (id INT PRIMARY KEY, a_id INT REFERENCES a(id));
        CREATE TABLE b (id INT PRIMARY KEY, c_id INT REFERENCES c(id));
        CREATE TABLE a (id INT PRIMARY KEY, b_id INT REFERENCES b(id));
        """
        (diagnostic,) = detect_circular_dependencies(model_of(sql))

        assert diagnostic.tables == ("a", "b", "c")
        assert diagnostic.table == "a"

    def test_self_reference_is_a_cycle(self):
        model = model_of("CREATE TABLE employees (id INT PRIMARY KEY, manager_id INT REFERENCES employees(id));")

        (diagnostic,) = detect_circular_dependencies(model)

        assert diagnostic.message == "Circular dependency detected: employees -> employees"


class TestRules:
    """Test cases for the individual analysis rules."""

    def test_orphan_tables(self, users_sql, orders_sql):
        model = model_of(users_sql + orders_sql + "CREATE TABLE settings (key TEXT PRIMARY KEY);")

        diagnostics = detect_orphan_tables(model)

        assert [d.table for d in diagnostics] == ["settings"]
        assert diagnostics[0].severity == Severity.INFO
        assert diagnostics[0].category == Category.RELATIONSHIPS

    def test_missing_primary_keys(self):
        model = model_of("CREATE TABLE logs (message TEXT); CREATE TABLE users (id INT PRIMARY KEY);")

        diagnostics = detect_missing_primary_keys(model)

        assert [d.table for d in diagnostics] == ["logs"]
        assert diagnostics[0].category == Category.BEST_PRACTICES

    def test_naming_conventions(self):
        model = model_of('CREATE TABLE "UserAccounts" ("Id" INT PRIMARY KEY, name TEXT);')

        diagnostics = check_naming_conventions(model)

        assert [(d.table, d.column) for d in diagnostics] == [("UserAccounts", None), ("UserAccounts", "Id")]
        assert all(d.category == Category.NAMING for d in diagnostics)

    def test_foreign_key_naming(self, users_sql):
        model = model_of(users_sql + "CREATE TABLE posts (id INT PRIMARY KEY, author INT REFERENCES users(id));")

        (diagnostic,) = check_foreign_key_naming(model)

        assert diagnostic.column == "author"
        assert "'_id'" in diagnostic.message

    def test_foreign_key_naming_custom_suffix(self, users_sql):
        model = model_of(users_sql + "CREATE TABLE posts (id INT PRIMARY KEY, user_fk INT REFERENCES users(id));")

        assert check_foreign_key_naming(model, "_fk") == []
        assert len(check_foreign_key_naming(model)) == 1

    def test_missing_foreign_key_index(self, users_sql, orders_sql):
        diagnostics = detect_missing_foreign_key_indexes(model_of(users_sql + orders_sql))

        (diagnostic,) = diagnostics
        assert diagnostic.severity == Severity.WARNING
        assert (diagnostic.table, diagnostic.column) == ("orders", "user_id")
        assert diagnostic.suggestion.endswith("CREATE INDEX idx_orders_user_id ON orders(user_id);")

    def test_index_on_first_column_covers_foreign_key(self, users_sql, orders_sql):
        model = model_of(users_sql + orders_sql + "CREATE INDEX idx ON orders (USER_ID, total);")
        assert detect_missing_foreign_key_indexes(model) == []

    def test_index_on_second_column_does_not_cover(self, users_sql, orders_sql):
        model = model_of(users_sql + orders_sql + "CREATE INDEX idx ON orders (total, user_id);")
        assert len(detect_missing_foreign_key_indexes(model)) == 1

    def test_primary_key_column_is_covered(self):
        model = model_of(
            "CREATE TABLE users (id INT PRIMARY KEY);\n"
            "CREATE TABLE profiles (user_id INT PRIMARY KEY REFERENCES users(id));"
        )
        assert detect_missing_foreign_key_indexes(model) == []

    def test_single_column_unique_is_covered(self):
        model = model_of(
            "CREATE TABLE users (id INT PRIMARY KEY);\n"
            "CREATE TABLE avatars (id INT PRIMARY KEY, user_id INT UNIQUE REFERENCES users(id));"
        )
        assert detect_missing_foreign_key_indexes(model) == []


class TestAnalyzeSchema:
    """Test cases for analyze_schema."""

    def test_sorted_by_severity(self):
        diagnostics = analyze_schema(model_of(CYCLE_SQL + "CREATE TABLE lonely (note TEXT);"))
        ranks = [d.severity.rank for d in diagnostics]

        assert ranks == sorted(ranks)
        assert any(d.category == Category.RELATIONSHIPS and d.tables for d in diagnostics)

    def test_rules_can_be_disabled(self):
        options = AnalysisOptions(
            check_orphan_tables=False,
            check_circular_dependencies=False,
            check_missing_primary_keys=True,
            check_naming_conventions=False,
            check_foreign_key_naming=False,
            check_missing_indexes=False,
        )

        diagnostics = analyze_schema(model_of("CREATE TABLE lonely (note TEXT);"), options)

        assert [d.category for d in diagnostics] == [Category.BEST_PRACTICES]

    def test_clean_schema(self):
        model = model_of(
            "CREATE TABLE users (id INT PRIMARY KEY);\n"
            "CREATE TABLE orders (id INT PRIMARY KEY, user_id INT REFERENCES users(id));\n"
            "CREATE INDEX idx_orders_user ON orders (user_id);"
        )
        assert analyze_schema(model) == []

    def test_empty_model(self):
        assert analyze_schema(SchemaModel()) == []

    def test_summarize(self):
        diagnostics = [
            Diagnostic(Severity.WARNING, Category.RELATIONSHIPS, "cycle"),
            Diagnostic(Severity.INFO, Category.RELATIONSHIPS, "orphan"),
            Diagnostic(Severity.INFO, Category.NAMING, "case"),
        ]

        assert summarize(diagnostics) == {
            "total": 3,
            "errors": 0,
            "warnings": 1,
            "info": 2,
            "by_category": {"Relationships": 2, "Naming Conventions": 1},
        }
