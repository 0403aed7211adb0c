"""
Column data type normalization.
"""

import re

from runway.typing.declarations import DataType

from .constants import BUILT_IN_DATA_TYPES, DATA_TYPE_ALIASES
from .identifiers import clean_identifier, collapse_whitespace, split_top_level

_ARRAY_SUFFIX = re.compile(r"(?:\s*\[\s*\d*\s*\])+$")
_ARRAY_KEYWORD_SUFFIX = re.compile(r"\s+ARRAY(?:\s*\[\s*\d*\s*\])?$", re.IGNORECASE)


def normalize_data_type(type_text: str) -> DataType:
    """
    Normalize a column type to its canonical token.

    Size, precision and scale parameters are kept in order and an array
    suffix (``[]`` or ``ARRAY``) sets ``is_array``. Unknown names are treated
    as user-defined types and keep their spelling.

    Examples:
        >>> str(normalize_data_type("character varying(255)"))
        'VARCHAR(255)'
        >>> str(normalize_data_type("integer[]"))
        'INT[]'
    """
    text = collapse_whitespace(type_text)
    if not text:
        raise ValueError("Data type text is empty")

    is_array = False
    array_match = _ARRAY_SUFFIX.search(text) or _ARRAY_KEYWORD_SUFFIX.search(text)
    if array_match:
        is_array = True
        text = text[: array_match.start()].strip()

    parameters: tuple[str, ...] = ()
    open_paren = text.find("(")
    if open_paren != -1:
        close_paren = _find_closing_paren(text, open_paren)
        inner = text[open_paren + 1 : close_paren]
        parameters = tuple(
            re.sub(r"\s+", "", part) for part in split_top_level(inner, ",") if part.strip()
        )
        text = collapse_whitespace(f"{text[:open_paren]} {text[close_paren + 1:]}")

    upper = text.upper()
    if upper in BUILT_IN_DATA_TYPES:
        base = DATA_TYPE_ALIASES.get(upper, upper)
    else:
        base = clean_identifier(text)

    return DataType(base=base, parameters=parameters, is_array=is_array)


def _find_closing_paren(text: str, open_index: int) -> int:
    depth = 0
    for index in range(open_index, len(text)):
        if text[index] == "(":
            depth += 1
        elif text[index] == ")":
            depth -= 1
            if depth == 0:
                return index
    return len(text)
