"""
Tolerant regex-based parser for DDL files.

This parser recognizes CREATE TABLE, CREATE TYPE ... AS ENUM, CREATE SEQUENCE,
CREATE INDEX and ALTER TABLE ... ADD FOREIGN KEY statements with patterns.
It never fails on malformed text: statements it cannot recognize are
skipped. Use it when the grammar-based parser rejects a file, or as the
only parser for DDL written in a loose dialect.
"""

import logging
import re

from runway.parser.shared.datatypes import normalize_data_type
from runway.parser.shared.identifiers import (
    clean_identifier,
    collapse_whitespace,
    split_identifier_list,
    split_statements,
    split_top_level,
    strip_comments,
)
from runway.parser.shared.types import FilePath
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
    TableElement,
    UniqueConstraint,
)

from .base import BaseParser

logger = logging.getLogger(__name__)

# Identifier, optionally quoted, optionally schema-qualified
_NAME = r'(?:"(?:[^"]|"")+"|\w+)(?:\s*\.\s*(?:"(?:[^"]|"")+"|\w+))*'
_SIMPLE_NAME = r'(?:"(?:[^"]|"")+"|\w+)'

_TABLE_HEADER = re.compile(
    r"CREATE\s+(?:OR\s+REPLACE\s+)?(?:(?:GLOBAL|LOCAL)\s+)?(?:(?:TEMP|TEMPORARY|UNLOGGED)\s+)?"
    rf"TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?({_NAME})\s*\(",
    re.IGNORECASE,
)
_ENUM = re.compile(
    rf"CREATE\s+TYPE\s+(?:IF\s+NOT\s+EXISTS\s+)?({_NAME})\s+AS\s+ENUM\s*\((.*)\)\s*$",
    re.IGNORECASE | re.DOTALL,
)
_SEQUENCE = re.compile(
    rf"CREATE\s+(?:(?:TEMP|TEMPORARY|UNLOGGED)\s+)?SEQUENCE\s+(?:IF\s+NOT\s+EXISTS\s+)?({_NAME})(.*)$",
    re.IGNORECASE | re.DOTALL,
)
_SEQUENCE_START = re.compile(r"\bSTART\s+(?:WITH\s+)?([+-]?\d+)", re.IGNORECASE)
_SEQUENCE_INCREMENT = re.compile(r"\bINCREMENT\s+(?:BY\s+)?([+-]?\d+)", re.IGNORECASE)
_INDEX = re.compile(
    r"CREATE\s+(UNIQUE\s+)?INDEX\s+(?:CONCURRENTLY\s+)?(?:IF\s+NOT\s+EXISTS\s+)?"
    rf"(?:({_SIMPLE_NAME})\s+)?ON\s+(?:ONLY\s+)?({_NAME})\s*(?:USING\s+\w+\s*)?\(",
    re.IGNORECASE,
)
_ALTER_TABLE = re.compile(
    rf"ALTER\s+TABLE\s+(?:IF\s+EXISTS\s+)?(?:ONLY\s+)?({_NAME})\s+(.*)$",
    re.IGNORECASE | re.DOTALL,
)
_ADD_FOREIGN_KEY = re.compile(
    rf"ADD\s+(?:CONSTRAINT\s+({_SIMPLE_NAME})\s+)?FOREIGN\s+KEY\s*\(([^)]+)\)\s*"
    rf"REFERENCES\s+({_NAME})\s*(?:\(([^)]+)\))?",
    re.IGNORECASE,
)

# Table body constraints
_CONSTRAINT_PREFIX = rf"(?:CONSTRAINT\s+({_SIMPLE_NAME})\s+)?"
_PRIMARY_KEY = re.compile(rf"^{_CONSTRAINT_PREFIX}PRIMARY\s+KEY\s*\(([^)]+)\)", re.IGNORECASE)
_FOREIGN_KEY = re.compile(
    rf"^{_CONSTRAINT_PREFIX}FOREIGN\s+KEY\s*\(([^)]+)\)\s*REFERENCES\s+({_NAME})\s*(?:\(([^)]+)\))?",
    re.IGNORECASE,
)
_UNIQUE = re.compile(
    rf"^{_CONSTRAINT_PREFIX}UNIQUE\s*(?:NULLS\s+(?:NOT\s+)?DISTINCT\s*)?\(([^)]+)\)", re.IGNORECASE
)
_OTHER_TABLE_CONSTRAINT = re.compile(
    rf"^(?:{_CONSTRAINT_PREFIX}(?:CHECK|EXCLUDE)\b|LIKE\s)", re.IGNORECASE
)

# Column definitions
_COLUMN = re.compile(rf"^({_SIMPLE_NAME})\s+(.+)$", re.IGNORECASE | re.DOTALL)
_COLUMN_KEYWORD = re.compile(
    r"(NOT\s+NULL|NULL|DEFAULT|PRIMARY\s+KEY|UNIQUE|REFERENCES|CHECK|CONSTRAINT|GENERATED|COLLATE)\b",
    re.IGNORECASE,
)
_REFERENCES = re.compile(rf"REFERENCES\s+({_NAME})\s*(?:\(([^)]+)\))?", re.IGNORECASE)
_INDEX_COLUMN = re.compile(
    rf"^({_SIMPLE_NAME})(?:\s+(?:ASC|DESC|NULLS\s+(?:FIRST|LAST)|COLLATE\s+\S+|\w+_ops))*$",
    re.IGNORECASE,
)


class RegexParser(BaseParser):
    """Parses DDL statements using regex patterns."""

    name = "regex"

    def parse(self, content: str, file_path: FilePath = None) -> list[Declaration]:
        """
        Parse DDL content into declarations in source order.

        Args:
            content: DDL text
            file_path: Optional file path for context

        Returns:
            List of recognized declarations
        """
        cache_key = self._get_cache_key(content, file_path)
        cached_result = self._get_from_cache(cache_key)
        if cached_result is not None:
            return cached_result

        declarations: list[Declaration] = []
        for statement in split_statements(strip_comments(content)):
            declaration = self._parse_statement(statement)
            if isinstance(declaration, list):
                declarations.extend(declaration)
            elif declaration is not None:
                declarations.append(declaration)

        logger.debug(f"Regex parser found {len(declarations)} declarations in {file_path or '<text>'}")
        self._set_cache(cache_key, declarations)
        return declarations

    def _parse_statement(self, statement: str) -> Declaration | list[Declaration] | None:
        table_match = _TABLE_HEADER.match(statement)
        if table_match:
            return self._parse_table(statement, table_match)

        enum_match = _ENUM.match(statement)
        if enum_match:
            values = tuple(
                value.replace("''", "'")
                for value in re.findall(r"'((?:[^']|'')*)'", enum_match.group(2))
                if value
            )
            return CreateEnum(name=clean_identifier(enum_match.group(1)), values=values)

        sequence_match = _SEQUENCE.match(statement)
        if sequence_match:
            options = sequence_match.group(2)
            start_match = _SEQUENCE_START.search(options)
            increment_match = _SEQUENCE_INCREMENT.search(options)
            return CreateSequence(
                name=clean_identifier(sequence_match.group(1)),
                start=int(start_match.group(1)) if start_match else 1,
                increment=int(increment_match.group(1)) if increment_match else 1,
            )

        index_match = _INDEX.match(statement)
        if index_match:
            return self._parse_index(statement, index_match)

        alter_match = _ALTER_TABLE.match(statement)
        if alter_match:
            return self._parse_alter_table(alter_match)

        return None

    def _parse_table(self, statement: str, header: re.Match) -> CreateTable | None:
        body = _balanced_body(statement, header.end() - 1)
        if body is None:
            logger.debug(f"Skipping CREATE TABLE with unbalanced parentheses: {header.group(1)}")
            return None

        elements: list[TableElement] = []
        for part in split_top_level(body, ","):
            element = self._parse_table_element(part.strip())
            if element is not None:
                elements.append(element)
        return CreateTable(name=clean_identifier(header.group(1)), elements=tuple(elements))

    def _parse_table_element(self, part: str) -> TableElement | None:
        if not part:
            return None

        pk_match = _PRIMARY_KEY.match(part)
        if pk_match:
            return PrimaryKeyConstraint(
                columns=split_identifier_list(pk_match.group(2)),
                name=_optional_identifier(pk_match.group(1)),
            )

        fk_match = _FOREIGN_KEY.match(part)
        if fk_match:
            return ForeignKeyConstraint(
                columns=split_identifier_list(fk_match.group(2)),
                referenced_table=clean_identifier(fk_match.group(3)),
                referenced_columns=split_identifier_list(fk_match.group(4) or ""),
                name=_optional_identifier(fk_match.group(1)),
            )

        unique_match = _UNIQUE.match(part)
        if unique_match:
            return UniqueConstraint(
                columns=split_identifier_list(unique_match.group(2)),
                name=_optional_identifier(unique_match.group(1)),
            )

        if _OTHER_TABLE_CONSTRAINT.match(part):
            return None

        return self._parse_column(part)

    def _parse_column(self, definition: str) -> ColumnDefinition | None:
        column_match = _COLUMN.match(definition)
        if not column_match:
            return None

        rest = column_match.group(2)
        clauses = _split_column_clauses(rest)
        type_text = rest[: clauses[0][0]] if clauses else rest
        type_text = type_text.strip()
        if not type_text or not re.match(r'[A-Za-z_"]', type_text):
            return None

        not_null = primary_key = unique = False
        default = None
        references = None
        name = clean_identifier(column_match.group(1))

        for start, end, keyword in clauses:
            clause = rest[start:end]
            if keyword == "NOT NULL":
                not_null = True
            elif keyword == "PRIMARY KEY":
                primary_key = True
            elif keyword == "UNIQUE":
                unique = True
            elif keyword == "DEFAULT":
                expression = collapse_whitespace(clause[len("DEFAULT") :])
                if expression:
                    default = expression
            elif keyword == "REFERENCES":
                ref_match = _REFERENCES.match(clause)
                if ref_match:
                    references = ColumnReference(
                        table=clean_identifier(ref_match.group(1)),
                        columns=split_identifier_list(ref_match.group(2) or ""),
                    )

        return ColumnDefinition(
            name=name,
            data_type=normalize_data_type(type_text),
            not_null=not_null,
            primary_key=primary_key,
            unique=unique,
            default=default,
            references=references,
        )

    def _parse_index(self, statement: str, header: re.Match) -> CreateIndex | None:
        body = _balanced_body(statement, header.end() - 1)
        if body is None:
            return None

        columns = []
        for item in split_top_level(body, ","):
            item = collapse_whitespace(item)
            column_match = _INDEX_COLUMN.match(item)
            columns.append(clean_identifier(column_match.group(1)) if column_match else item)

        if not columns:
            return None
        return CreateIndex(
            table=clean_identifier(header.group(3)),
            columns=tuple(columns),
            name=_optional_identifier(header.group(2)),
            unique=bool(header.group(1)),
        )

    def _parse_alter_table(self, alter_match: re.Match) -> list[Declaration]:
        table_name = clean_identifier(alter_match.group(1))
        declarations: list[Declaration] = []
        for action in split_top_level(alter_match.group(2), ","):
            fk_match = _ADD_FOREIGN_KEY.match(action.strip())
            if not fk_match:
                continue
            declarations.append(
                AlterTableAddForeignKey(
                    table=table_name,
                    foreign_key=ForeignKeyConstraint(
                        columns=split_identifier_list(fk_match.group(2)),
                        referenced_table=clean_identifier(fk_match.group(3)),
                        referenced_columns=split_identifier_list(fk_match.group(4) or ""),
                        name=_optional_identifier(fk_match.group(1)),
                    ),
                )
            )
        return declarations


def _optional_identifier(text: str | None) -> str | None:
    return clean_identifier(text) if text else None


def _balanced_body(statement: str, open_index: int) -> str | None:
    """Return the text between the parenthesis at open_index and its match."""
    depth = 0
    quote = None
    for index in range(open_index, len(statement)):
        char = statement[index]
        if quote:
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return statement[open_index + 1 : index]
    return None


def _split_column_clauses(text: str) -> list[tuple[int, int, str]]:
    """
    Locate constraint clauses in the text following a column name.

    Returns (start, end, keyword) triples for keywords found outside quotes
    and parentheses. A keyword directly after DEFAULT is part of the default
    expression, while ``BY DEFAULT`` and ``SET DEFAULT``
    belong to GENERATED and ON DELETE clauses.
    """
    starts: list[tuple[int, str]] = []
    depth = 0
    quote = None
    index = 0
    while index < len(text):
        char = text[index]
        if quote:
            if char == quote:
                quote = None
            index += 1
            continue
        if char in ("'", '"'):
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif depth == 0 and (index == 0 or text[index - 1].isspace()):
            keyword_match = _COLUMN_KEYWORD.match(text, index)
            if keyword_match:
                keyword = collapse_whitespace(keyword_match.group(1)).upper()
                previous = text[:index].split()
                follows_default = bool(starts) and starts[-1][1] == "DEFAULT" and not text[
                    starts[-1][0] + len("DEFAULT") : index
                ].strip()
                qualified_default = (
                    keyword == "DEFAULT" and bool(previous) and previous[-1].upper() in ("BY", "SET")
                )
                if not follows_default and not qualified_default:
                    starts.append((index, keyword))
                index = keyword_match.end()
                continue
        index += 1

    clauses = []
    for position, (start, keyword) in enumerate(starts):
        end = starts[position + 1][0] if position + 1 < len(starts) else len(text)
        clauses.append((start, end, keyword))
    return clauses
