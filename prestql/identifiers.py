"""Validation of SQL identifiers and translation of URL operators."""

from __future__ import annotations

import unicodedata

from .errors import InvalidGroupFunctionError, InvalidIdentifierError, InvalidOperatorError

_MAX_IDENTIFIER_BYTES = 63
_ALLOWED_SYMBOLS = frozenset('()_.-*[]"')

_OPERATORS = {
    "eq": "=",
    "ne": "!=",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
    "in": "IN",
    "nin": "NOT IN",
    "any": "ANY",
    "some": "SOME",
    "all": "ALL",
    "notnull": "IS NOT NULL",
    "null": "IS NULL",
    "true": "IS TRUE",
    "nottrue": "IS NOT TRUE",
    "false": "IS FALSE",
    "notfalse": "IS NOT FALSE",
    "like": "LIKE",
    "ilike": "ILIKE",
    "nlike": "NOT LIKE",
    "nilike": "NOT ILIKE",
}

_GROUP_FUNCTIONS = frozenset({"SUM", "AVG", "MAX", "MIN", "STDDEV", "VARIANCE"})


def _byte_length(text: str) -> int:
    return len(text.encode("utf-8"))


def _is_digit(ch: str) -> bool:
    return unicodedata.category(ch) == "Nd"


def _is_letter(ch: str) -> bool:
    return unicodedata.category(ch).startswith("L")


def _invalid(name: str) -> bool:
    if not name or _is_digit(name[0]):
        return True
    parts = name.split(".")
    if len(parts) == 2 and _byte_length(parts[-1]) > _MAX_IDENTIFIER_BYTES:
        return True
    if "." not in name and _byte_length(name) > _MAX_IDENTIFIER_BYTES:
        return True
    if any(
        not (_is_letter(ch) or _is_digit(ch) or ch in _ALLOWED_SYMBOLS) for ch in name
    ):
        return True
    return name.count('"') % 2 != 0


def is_invalid_identifier(*args: str) -> bool:
    """Return True if any of the given identifiers is unsafe to use in SQL."""
    return any(_invalid(name) for name in args)


def query_operator(op: str) -> str:
    """Translate a URL operator such as ``$gte`` to its SQL form."""
    key = op.replace("$", "").replace(" ", "")
    try:
        return _OPERATORS[key]
    except KeyError:
        raise InvalidOperatorError() from None


def normalize_group_function(value: str) -> str:
    """Turn ``func:field[:alias]`` into an SQL aggregate expression."""
    parts = value.split(":")
    func = parts[0].upper()
    if func not in _GROUP_FUNCTIONS or len(parts) < 2:
        raise InvalidGroupFunctionError(f"{func}: invalid group function")
    field = parts[1]
    if field != "*":
        field = f'"{field}"'
    sql = f"{func}({field})"
    if len(parts) == 3:
        sql = f'{sql} AS "{parts[2]}"'
    return sql