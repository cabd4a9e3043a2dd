"""Conversion of Python values to PostgreSQL array literals."""

from typing import Any


def _has_own_str(value: Any) -> bool:
    return type(value).__str__ is not object.__str__


def format_array(value: Any) -> str:
    """Format a list of strings, integers or string-like objects as a
    PostgreSQL array literal.

    Strings are quoted with backslashes and double quotes escaped. Values of
    unsupported types yield an empty string.
    """
    if isinstance(value, (list, tuple)):
        return "{" + ",".join(format_array(item) for item in value) + "}"
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return ""
    if _has_own_str(value):
        return format_array(str(value))
    return ""