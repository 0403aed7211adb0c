"""
Identifier and text helpers shared by both statement parsers.
"""

import re

_WHITESPACE = re.compile(r"\s+")
_DOLLAR_TAG = re.compile(r"\$(?:[A-Za-z_]\w*)?\$")


def strip_comments(content: str) -> str:
    """
    Remove ``--`` line comments and ``/* */`` block comments.

    Quoted strings and quoted identifiers are copied verbatim, so a ``--``
    inside a literal survives. Newlines ending a line comment are kept.
    An unterminated block comment swallows the rest of the text.
    """
    result = []
    i = 0
    length = len(content)
    while i < length:
        char = content[i]
        if char in ("'", '"'):
            end = i + 1
            while end < length:
                if content[end] == char:
                    # Doubled quote is an escaped quote
                    if end + 1 < length and content[end + 1] == char:
                        end += 2
                        continue
                    break
                end += 1
            result.append(content[i : end + 1])
            i = end + 1
        elif content.startswith("--", i):
            newline = content.find("\n", i)
            i = length if newline == -1 else newline
        elif content.startswith("/*", i):
            close = content.find("*/", i + 2)
            i = length if close == -1 else close + 2
            result.append(" ")
        else:
            result.append(char)
            i += 1
    return "".join(result)


def clean_identifier(identifier: str) -> str:
    """
    Clean an identifier: trim, unquote, and keep the last dotted component.

    ``"public"."Users"`` becomes ``Users``; ``public.users`` becomes ``users``.
    """
    cleaned = identifier.strip()
    if "." in cleaned:
        parts = split_top_level(cleaned, ".")
        cleaned = parts[-1].strip() if parts else cleaned
    if len(cleaned) >= 2 and cleaned.startswith('"') and cleaned.endswith('"'):
        cleaned = cleaned[1:-1].replace('""', '"')
    return cleaned


def split_identifier_list(text: str) -> tuple[str, ...]:
    """Split ``a, "b", c`` into cleaned identifiers, dropping empty entries."""
    return tuple(
        cleaned for cleaned in (clean_identifier(part) for part in split_top_level(text, ",")) if cleaned
    )


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """
    Split text on a single-character separator outside parentheses and quotes.

    Trailing empty segments are dropped.
    """
    parts = []
    current = []
    depth = 0
    quote = None
    for char in text:
        if quote:
            current.append(char)
            if char == quote:
                quote = None
            continue
        if char in ("'", '"'):
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == separator and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)

    if "".join(current).strip():
        parts.append("".join(current))
    return parts


def split_statements(content: str) -> list[str]:
    """
    Split DDL text into statements on semicolons outside quotes.

    Single-quoted strings, double-quoted identifiers and dollar-quoted bodies
    (``$$ ... $$`` or ``$tag$ ... $tag$``) are kept intact. Empty statements
    are dropped; the final statement does not need a terminating semicolon.
    """
    statements = []
    start = 0
    i = 0
    length = len(content)
    while i < length:
        char = content[i]
        if char in ("'", '"'):
            close = content.find(char, i + 1)
            while close != -1 and close + 1 < length and content[close + 1] == char:
                close = content.find(char, close + 2)
            i = length if close == -1 else close + 1
            continue
        if char == "$":
            tag_match = _DOLLAR_TAG.match(content, i)
            if tag_match:
                tag = tag_match.group(0)
                close = content.find(tag, tag_match.end())
                i = length if close == -1 else close + len(tag)
                continue
        if char == ";":
            statements.append(content[start:i])
            start = i + 1
        i += 1
    statements.append(content[start:])
    return [statement.strip() for statement in statements if statement.strip()]


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()
