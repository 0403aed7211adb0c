"""
Tests for the parser factory and the fallback parser.
"""

from pathlib import Path

import pytest

from runway.parser.parsers import FallbackParser, ParserFactory, RegexParser, SQLglotParser
from runway.parser.shared.exceptions import ConfigurationError
from runway.typing import CreateEnum, CreateTable


class TestParserFactory:
    """Test cases for ParserFactory."""

    def test_create_regex_parser(self):
        assert isinstance(ParserFactory.create_parser("regex"), RegexParser)

    def test_create_sqlglot_parser_with_dialect(self):
        parser = ParserFactory.create_parser("SQLGLOT", dialect="mysql")

        assert isinstance(parser, SQLglotParser)
        assert parser.dialect == "mysql"

    def test_default_is_fallback_parser(self):
        parser = ParserFactory.create_parser()

        assert isinstance(parser, FallbackParser)
        assert isinstance(parser.strict, SQLglotParser)
        assert isinstance(parser.tolerant, RegexParser)

    def test_unknown_strategy(self):
        with pytest.raises(ConfigurationError, match="Unknown parser strategy"):
            ParserFactory.create_parser("antlr")

    @pytest.mark.parametrize(
        "name,supported",
        [("schema.sql", True), ("SCHEMA.SQL", True), ("notes.md", False), ("schema.sql.bak", False)],
    )
    def test_is_supported(self, name, supported):
        assert ParserFactory.is_supported(Path(name)) is supported


class TestFallbackParser:
    """Test cases for FallbackParser."""

    def test_uses_strict_parser_when_it_succeeds(self, users_sql):
        parser = FallbackParser()
        assert parser.parse(users_sql) == parser.strict.parse(users_sql)

    def test_falls_back_on_strict_failure(self):
        sql = "CREATE TYPE s AS ENUM (1, 'a');\nCREATE TABLE t (id INT PRIMARY KEY);"

        declarations = FallbackParser().parse(sql, "mixed.sql")

        assert declarations[0] == CreateEnum(name="s", values=("a",))
        assert isinstance(declarations[1], CreateTable)
        assert declarations[1].name == "t"

    def test_clear_cache_clears_both_parsers(self, users_sql):
        parser = FallbackParser()
        parser.parse(users_sql)
        parser.tolerant.parse(users_sql)

        parser.clear_cache()

        assert parser.strict._cache == {}
        assert parser.tolerant._cache == {}
