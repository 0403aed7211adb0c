"""
Strict grammar-based DDL parser built on SQLglot.

Statements are tokenized with the SQLglot tokenizer of the configured
dialect and split on top-level semicolons. CREATE TABLE and ALTER TABLE
statements are parsed into SQLglot expression trees. CREATE TYPE ... AS ENUM,
CREATE SEQUENCE and CREATE INDEX are read with a small token-level grammar,
since SQLglot does not model them uniformly across versions and dialects.

Any recognized statement that cannot be read structurally fails the whole
file with SQLParsingError; no partial result is returned. Statements of other
kinds (views, functions, inserts, grants, ...) are ignored.
"""

import logging

from sqlglot import exp
from sqlglot.dialects.dialect import Dialect
from sqlglot.errors import ParseError, TokenError
from sqlglot.tokens import Token, TokenType

from runway.parser.shared.constants import DEFAULT_DIALECT
from runway.parser.shared.datatypes import normalize_data_type
from runway.parser.shared.exceptions import SQLParsingError
from runway.parser.shared.identifiers import clean_identifier, collapse_whitespace, strip_comments
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

_PUNCTUATION = {
    TokenType.L_PAREN,
    TokenType.R_PAREN,
    TokenType.COMMA,
    TokenType.DOT,
    TokenType.SEMICOLON,
    TokenType.STRING,
    TokenType.NUMBER,
}
_TABLE_PREFIXES = {"OR", "REPLACE", "GLOBAL", "LOCAL", "TEMP", "TEMPORARY", "UNLOGGED"}
_INDEX_MODIFIERS = {"ASC", "DESC", "NULLS", "FIRST", "LAST"}
_TABLE_CONSTRAINT_WORDS = {"CONSTRAINT", "PRIMARY", "FOREIGN", "UNIQUE", "CHECK", "EXCLUDE", "LIKE"}
# Keywords that end a DEFAULT expression inside a column definition
_DEFAULT_TERMINATORS = {
    "NOT",
    "NULL",
    "DEFAULT",
    "PRIMARY",
    "UNIQUE",
    "REFERENCES",
    "CHECK",
    "CONSTRAINT",
    "GENERATED",
    "COLLATE",
}


class _TokenStream:
    """Cursor over the tokens of one statement."""

    def __init__(self, tokens: list[Token], sql: str, label: str):
        self.tokens = tokens
        self.sql = sql
        self.label = label
        self.index = 0

    def peek(self, offset: int = 0) -> Token | None:
        position = self.index + offset
        return self.tokens[position] if position < len(self.tokens) else None

    def at_end(self) -> bool:
        return self.index >= len(self.tokens)

    def at(self, *words: str) -> bool:
        for offset, word in enumerate(words):
            token = self.peek(offset)
            if token is None or token.token_type in _PUNCTUATION or token.text.upper() != word:
                return False
        return True

    def accept(self, *words: str) -> bool:
        if self.at(*words):
            self.index += len(words)
            return True
        return False

    def expect(self, *words: str) -> None:
        if not self.accept(*words):
            self.fail(f"expected {' '.join(words)}")

    def advance(self) -> Token:
        token = self.peek()
        if token is None:
            self.fail("unexpected end of statement")
        self.index += 1
        return token

    def name(self) -> str:
        """Read a possibly schema-qualified name and return its last component."""
        token = self.advance()
        if token.token_type in _PUNCTUATION:
            self.fail(f"expected a name, found '{token.text}'")
        while (dot := self.peek()) is not None and dot.token_type == TokenType.DOT:
            self.index += 1
            token = self.advance()
            if token.token_type in _PUNCTUATION:
                self.fail(f"expected a name after '.', found '{token.text}'")
        # Quoted identifiers arrive unquoted and may legitimately contain dots
        return token.text if token.token_type == TokenType.IDENTIFIER else clean_identifier(token.text)

    def integer(self) -> int:
        sign = 1
        token = self.advance()
        if token.token_type in (TokenType.DASH, TokenType.PLUS):
            sign = -1 if token.token_type == TokenType.DASH else 1
            token = self.advance()
        if token.token_type != TokenType.NUMBER:
            self.fail(f"expected an integer, found '{token.text}'")
        try:
            return sign * int(token.text)
        except ValueError:
            self.fail(f"expected an integer, found '{token.text}'")

    def wrapped_items(self) -> list[list[Token]]:
        """Read ``( item, item, ... )`` and return the tokens of each item."""
        opening = self.advance()
        if opening.token_type != TokenType.L_PAREN:
            self.fail(f"expected '(', found '{opening.text}'")

        items: list[list[Token]] = [[]]
        depth = 1
        while True:
            token = self.advance()
            if token.token_type == TokenType.L_PAREN:
                depth += 1
            elif token.token_type == TokenType.R_PAREN:
                depth -= 1
                if depth == 0:
                    break
            elif token.token_type == TokenType.COMMA and depth == 1:
                items.append([])
                continue
            items[-1].append(token)
        return [item for item in items if item]

    def text_of(self, tokens: list[Token]) -> str:
        return collapse_whitespace(self.sql[tokens[0].start : tokens[-1].end + 1])

    def fail(self, reason: str):
        token = self.peek() or (self.tokens[-1] if self.tokens else None)
        location = f" at line {token.line}" if token is not None else ""
        raise SQLParsingError(f"Invalid DDL in {self.label}{location}: {reason}", self.label)


class SQLglotParser(BaseParser):
    """Parses DDL statements using SQLglot."""

    name = "sqlglot"

    def __init__(self, dialect: str = DEFAULT_DIALECT):
        """
        Initialize the parser.

        Args:
            dialect: SQLglot dialect name used for tokenizing and parsing
        """
        super().__init__()
        self.dialect = dialect
        self._dialect = Dialect.get_or_raise(dialect)

    def parse(self, content: str, file_path: FilePath = None) -> list[Declaration]:
        """
        Parse DDL content into declarations in source order.

        Args:
            content: DDL text
            file_path: Optional file path for context

        Returns:
            List of declarations

        Raises:
            SQLParsingError: If any recognized statement is malformed
        """
        cache_key = self._get_cache_key(content, file_path)
        cached_result = self._get_from_cache(cache_key)
        if cached_result is not None:
            return cached_result

        label = str(file_path) if file_path else "<text>"
        sql = strip_comments(content)
        try:
            tokens = self._dialect.tokenize(sql)
        except TokenError as e:
            raise SQLParsingError(f"Could not tokenize {label}: {e}", label) from e

        declarations: list[Declaration] = []
        try:
            for statement in _split_statements(tokens):
                declarations.extend(self._parse_statement(_TokenStream(statement, sql, label)))
        except SQLParsingError:
            raise
        except Exception as e:
            raise SQLParsingError(f"Error parsing DDL file {label}: {e}", label) from e

        logger.debug(f"SQLglot parser found {len(declarations)} declarations in {label}")
        self._set_cache(cache_key, declarations)
        return declarations

    def _parse_statement(self, stream: _TokenStream) -> list[Declaration]:
        if stream.at("ALTER", "TABLE"):
            return self._parse_alter_table(stream)
        if not stream.at("CREATE"):
            return []

        offset = 1
        while (token := stream.peek(offset)) is not None and token.text.upper() in _TABLE_PREFIXES:
            offset += 1
        kind_token = stream.peek(offset)
        kind = kind_token.text.upper() if kind_token is not None else ""

        if kind == "TABLE":
            return self._parse_create_table(stream)
        if kind == "TYPE" and offset == 1:
            return self._parse_create_type(stream)
        if kind == "SEQUENCE":
            return [self._parse_create_sequence(stream)]
        if kind in ("INDEX", "UNIQUE") and offset == 1:
            return [self._parse_create_index(stream)]
        return []

    def _parse_expression(self, stream: _TokenStream) -> exp.Expression:
        try:
            expressions = self._dialect.parser().parse(stream.tokens, stream.sql)
        except ParseError as e:
            raise SQLParsingError(f"Invalid DDL in {stream.label}: {e}", stream.label) from e
        if not expressions or expressions[0] is None:
            stream.fail("empty statement")
        return expressions[0]

    def _parse_create_table(self, stream: _TokenStream) -> list[Declaration]:
        expression = self._parse_expression(stream)
        if not isinstance(expression, exp.Create) or str(expression.args.get("kind") or "").upper() != "TABLE":
            stream.fail("CREATE TABLE statement was not recognized")

        schema = expression.this
        if not isinstance(schema, exp.Schema):
            # CREATE TABLE ... AS SELECT / PARTITION OF carry no column list
            logger.debug(f"Skipping CREATE TABLE without column list in {stream.label}")
            return []

        defaults = _column_defaults(stream)
        elements: list[TableElement] = []
        for item in schema.expressions:
            if isinstance(item, exp.ColumnDef):
                elements.append(self._column_definition(item, stream, defaults))
            elif isinstance(item, exp.Constraint):
                for inner in item.expressions:
                    element = self._table_constraint(inner, item.name or None)
                    if element is not None:
                        elements.append(element)
            else:
                element = self._table_constraint(item, None)
                if element is not None:
                    elements.append(element)

        return [CreateTable(name=clean_identifier(schema.this.name), elements=tuple(elements))]

    def _column_definition(
        self, column_def: exp.ColumnDef, stream: _TokenStream, defaults: dict[str, str]
    ) -> ColumnDefinition:
        name = clean_identifier(column_def.name)
        data_type = column_def.args.get("kind")
        if data_type is None:
            stream.fail(f"column '{name}' has no data type")

        not_null = primary_key = unique = False
        default = None
        references = None
        for constraint in column_def.args.get("constraints") or []:
            kind = constraint.args.get("kind") if isinstance(constraint, exp.ColumnConstraint) else constraint
            if isinstance(kind, exp.NotNullColumnConstraint):
                if not kind.args.get("allow_null"):
                    not_null = True
            elif isinstance(kind, exp.PrimaryKeyColumnConstraint):
                primary_key = True
            elif isinstance(kind, exp.UniqueColumnConstraint):
                unique = True
            elif isinstance(kind, exp.DefaultColumnConstraint):
                # Keep the expression as written; regenerating it from the tree rewrites e.g. now()
                if name not in defaults:
                    stream.fail(f"could not locate the DEFAULT expression of column '{name}'")
                default = defaults[name]
            elif isinstance(kind, exp.Reference):
                table, columns = self._reference(kind)
                references = ColumnReference(table=table, columns=columns)

        return ColumnDefinition(
            name=name,
            data_type=normalize_data_type(self._sql(data_type)),
            not_null=not_null,
            primary_key=primary_key,
            unique=unique,
            default=default,
            references=references,
        )

    def _table_constraint(self, node: exp.Expression, name: str | None) -> TableElement | None:
        if isinstance(node, exp.PrimaryKey):
            return PrimaryKeyConstraint(columns=_names(node.expressions), name=name)
        if isinstance(node, exp.ForeignKey):
            return self._foreign_key(node, name)
        if isinstance(node, exp.UniqueColumnConstraint):
            target = node.this
            columns = _names(target.expressions) if isinstance(target, exp.Schema) else ()
            return UniqueConstraint(columns=columns, name=name) if columns else None
        return None

    def _foreign_key(self, node: exp.ForeignKey, name: str | None) -> ForeignKeyConstraint:
        reference = node.args.get("reference")
        if not isinstance(reference, exp.Reference):
            raise SQLParsingError(f"FOREIGN KEY without REFERENCES clause: {node.sql()}")
        table, referenced_columns = self._reference(reference)
        columns = _names(node.expressions)
        if not columns:
            raise SQLParsingError(f"FOREIGN KEY without columns: {node.sql()}")
        return ForeignKeyConstraint(
            columns=columns,
            referenced_table=table,
            referenced_columns=referenced_columns,
            name=name,
        )

    def _reference(self, reference: exp.Reference) -> tuple[str, tuple[str, ...]]:
        target = reference.this
        if isinstance(target, exp.Schema):
            return clean_identifier(target.this.name), _names(target.expressions)
        return clean_identifier(target.name), ()

    def _parse_alter_table(self, stream: _TokenStream) -> list[Declaration]:
        # Newer tokenizers emit FOREIGN KEY as a single token
        mentions_foreign_key = any(
            token.token_type == TokenType.FOREIGN_KEY
            or (_is_keyword(token) and token.text.upper().split()[0] == "FOREIGN")
            for token in stream.tokens
        )
        if not mentions_foreign_key:
            return []

        expression = self._parse_expression(stream)
        foreign_keys = list(expression.find_all(exp.ForeignKey))
        if expression.key not in ("alter", "altertable") or not foreign_keys:
            stream.fail("ALTER TABLE ... ADD FOREIGN KEY statement was not recognized")

        table_name = clean_identifier(expression.this.name)
        return [
            AlterTableAddForeignKey(table=table_name, foreign_key=self._foreign_key(fk, _constraint_name(fk)))
            for fk in foreign_keys
        ]

    def _parse_create_type(self, stream: _TokenStream) -> list[Declaration]:
        stream.expect("CREATE", "TYPE")
        stream.accept("IF", "NOT", "EXISTS")
        name = stream.name()
        if not stream.accept("AS", "ENUM"):
            # Composite, range and base types are not modeled
            return []

        values = []
        for item in stream.wrapped_items():
            if len(item) != 1 or item[0].token_type != TokenType.STRING:
                stream.fail(f"enum '{name}' values must be string literals")
            if item[0].text:
                values.append(item[0].text)
        if not stream.at_end():
            stream.fail(f"unexpected '{stream.peek().text}' after enum '{name}'")
        return [CreateEnum(name=name, values=tuple(values))]

    def _parse_create_sequence(self, stream: _TokenStream) -> CreateSequence:
        stream.expect("CREATE")
        while stream.peek() is not None and stream.peek().text.upper() in _TABLE_PREFIXES:
            stream.advance()
        stream.expect("SEQUENCE")
        stream.accept("IF", "NOT", "EXISTS")
        name = stream.name()

        start = 1
        increment = 1
        while not stream.at_end():
            if stream.accept("START"):
                stream.accept("WITH")
                start = stream.integer()
            elif stream.accept("INCREMENT"):
                stream.accept("BY")
                increment = stream.integer()
            else:
                stream.advance()
        return CreateSequence(name=name, start=start, increment=increment)

    def _parse_create_index(self, stream: _TokenStream) -> CreateIndex:
        stream.expect("CREATE")
        unique = stream.accept("UNIQUE")
        stream.expect("INDEX")
        stream.accept("CONCURRENTLY")
        stream.accept("IF", "NOT", "EXISTS")
        index_name = None if stream.at("ON") else stream.name()
        stream.expect("ON")
        stream.accept("ONLY")
        table = stream.name()
        if stream.accept("USING"):
            stream.advance()

        columns = []
        for item in stream.wrapped_items():
            first = item[0]
            is_plain_column = first.token_type not in _PUNCTUATION and all(
                token.text.upper() in _INDEX_MODIFIERS or token.text.lower().endswith("_ops") for token in item[1:]
            )
            columns.append(clean_identifier(first.text) if is_plain_column else stream.text_of(item))
        if not columns:
            stream.fail(f"index on '{table}' has no columns")
        return CreateIndex(table=table, columns=tuple(columns), name=index_name, unique=unique)

    def _sql(self, node: exp.Expression) -> str:
        return node.sql(dialect=self.dialect, normalize_functions=False)


def _split_statements(tokens: list[Token]) -> list[list[Token]]:
    statements: list[list[Token]] = [[]]
    for token in tokens:
        if token.token_type == TokenType.SEMICOLON:
            statements.append([])
        else:
            statements[-1].append(token)
    return [statement for statement in statements if statement]


def _is_keyword(token: Token) -> bool:
    return token.token_type not in _PUNCTUATION and token.token_type != TokenType.IDENTIFIER


def _first_word(token: Token) -> str:
    words = token.text.upper().split()
    return words[0] if words else ""


def _column_defaults(stream: _TokenStream) -> dict[str, str]:
    """Map column names to the source text of their DEFAULT expressions."""
    start = next(
        (index for index, token in enumerate(stream.tokens) if token.token_type == TokenType.L_PAREN),
        None,
    )
    if start is None:
        return {}

    body = _TokenStream(stream.tokens[start:], stream.sql, stream.label)
    defaults: dict[str, str] = {}
    for item in body.wrapped_items():
        head = item[0]
        if _is_keyword(head) and _first_word(head) in _TABLE_CONSTRAINT_WORDS:
            continue
        expression = _default_tokens(item)
        if expression:
            defaults[clean_identifier(head.text)] = body.text_of(expression)
    return defaults


def _default_tokens(item: list[Token]) -> list[Token]:
    """Return the tokens of the DEFAULT expression of one column definition."""
    depth = 0
    collected: list[Token] | None = None
    for position, token in enumerate(item):
        if collected is not None:
            if depth == 0 and collected and _is_keyword(token) and _first_word(token) in _DEFAULT_TERMINATORS:
                break
            collected.append(token)
        elif (
            depth == 0
            and position > 1
            and _is_keyword(token)
            and _first_word(token) == "DEFAULT"
            and _first_word(item[position - 1]) not in ("BY", "SET")
        ):
            collected = []
            continue

        if token.token_type == TokenType.L_PAREN:
            depth += 1
        elif token.token_type == TokenType.R_PAREN:
            depth -= 1
    return collected or []


def _names(nodes: list[exp.Expression]) -> tuple[str, ...]:
    """Extract plain identifier names from column lists."""
    names = []
    for node in nodes:
        identifier = node if isinstance(node, exp.Identifier) else node.find(exp.Identifier)
        names.append(clean_identifier(identifier.name if identifier is not None else node.name))
    return tuple(name for name in names if name)


def _constraint_name(node: exp.Expression) -> str | None:
    parent = node.parent
    if parent is not None and isinstance(parent.args.get("this"), exp.Identifier):
        return clean_identifier(parent.args["this"].name)
    return None
