"""Building WHERE, SET, RETURNING and INSERT fragments from request data."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qs, urlsplit

from .errors import BodyEmptyError, EmptyOrInvalidSliceError, InvalidIdentifierError
from .formatters import format_array
from .identifiers import is_invalid_identifier, query_operator

_OPERATOR_PREFIX = re.compile(r"\$[a-z]+.")

_GO_QUOTE_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


def _parse_query(query: Any) -> dict[str, list[str]]:
    """Accept a URL, a query string or a mapping of names to values."""
    if query is None:
        return {}
    if isinstance(query, str):
        text = urlsplit(query).query if "?" in query else query
        return parse_qs(text, keep_blank_values=True)
    result: dict[str, list[str]] = {}
    for key, values in query.items():
        result[key] = [values] if isinstance(values, str) else list(values)
    return result


def _quote(name: str) -> str:
    return '"' + '"."'.join(name.split(".")) + '"'


def _go_json(value: Any) -> str:
    text = json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return (
        text.replace("<", "\\u003c").replace(">", "\\u003e").replace("&", "\\u0026")
    )


def _go_quote(text: str) -> str:
    out = []
    for ch in text:
        if ch in _GO_QUOTE_ESCAPES:
            out.append(_GO_QUOTE_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\x{ord(ch):02x}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def _decode(body: Any) -> Any:
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8")
    if isinstance(body, str):
        return json.loads(body)
    return body


def _placeholders(initial: int, length: int) -> str:
    return "(" + ",".join(f"${i}" for i in range(initial, length + 1)) + ")"


def _array_or_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return format_array(list(value))
    return value


def where_by_request(query: Any, initial_placeholder: int) -> tuple[str, list[Any]]:
    """Build a WHERE expression and its parameters from URL query values.

    Keys starting with ``_`` are ignored. Values carry an optional operator
    prefix such as ``$gte.``; without one, equality is used.
    """
    conditions: list[str] = []
    values: list[Any] = []
    op = ""
    value = ""
    pid = initial_placeholder

    for key, raw_values in _parse_query(query).items():
        if key.startswith("_"):
            continue
        column = key
        for index, raw in enumerate(raw_values):
            if raw:
                match = _OPERATOR_PREFIX.search(raw)
                op = match.group(0).replace(".", "") if match else ""
                value = _OPERATOR_PREFIX.sub("", raw)
                op = query_operator(op or "$eq")

            key_info = column.split(":")
            if len(key_info) > 1:
                kind = key_info[1]
                if kind == "jsonb":
                    json_field = key_info[0].split("->>")
                    if len(json_field) < 2 or is_invalid_identifier(
                        json_field[0], json_field[1]
                    ):
                        raise InvalidIdentifierError(
                            f"[{' '.join(json_field)}]: invalid identifier"
                        )
                    conditions.append(
                        f"{_quote(json_field[0])}->>'{json_field[1]}' {op} ${pid}"
                    )
                    values.append(value)
                elif kind == "tsquery":
                    ts_field = key_info[0].split("$")
                    if len(ts_field) == 2:
                        conditions.append(
                            f"{ts_field[0]} @@ to_tsquery('{ts_field[1]}', '{value}')"
                        )
                    else:
                        conditions.append(f"{ts_field[0]} @@ to_tsquery('{value}')")
                elif is_invalid_identifier(key_info[0]):
                    raise InvalidIdentifierError(f"{key_info[0]}: invalid identifier")
                pid += 1
                continue

            if is_invalid_identifier(column):
                raise InvalidIdentifierError(f"{column}: invalid identifier")
            if index == 0:
                column = _quote(column)

            if op in ("IN", "NOT IN"):
                items = value.split(",")
                params = [f"${pid + offset}" for offset in range(len(items))]
                values.extend(items)
                pid += len(items)
                conditions.append(f"{column} {op} ({','.join(params)})")
            elif op in ("ANY", "SOME", "ALL"):
                conditions.append(f"{column} = {op} (${pid})")
                values.append(format_array(value.split(",")))
                pid += 1
            elif op in (
                "IS NULL",
                "IS NOT NULL",
                "IS TRUE",
                "IS NOT TRUE",
                "IS FALSE",
                "IS NOT FALSE",
            ):
                conditions.append(f"{column} {op}")
            else:
                conditions.append(f"{column} {op} ${pid}")
                values.append(value)
                pid += 1

    return " AND ".join(conditions), values


def returning_by_request(query: Any) -> str:
    """Join every ``_returning`` value with commas."""
    return ", ".join(_parse_query(query).get("_returning", []))


def slice_to_json_list(values: Any) -> str:
    """Render a list as a JSON-like array; numbers bare, everything else quoted."""
    if not isinstance(values, (list, tuple)):
        raise EmptyOrInvalidSliceError()
    items = []
    for item in values:
        if isinstance(item, (int, float)) and not isinstance(item, bool):
            items.append(str(item))
        else:
            items.append(f'"{item}"')
    return "[" + ", ".join(items) + "]"


def _object_body(body: Any) -> dict[str, Any]:
    data = _decode(body)
    if data is None:
        raise BodyEmptyError()
    if not isinstance(data, Mapping):
        raise ValueError("request body is not a JSON object")
    if not data:
        raise BodyEmptyError()
    return dict(data)


def set_by_request(body: Any, initial_placeholder: int) -> tuple[str, list[Any]]:
    """Build an UPDATE SET clause and its parameters from a JSON object."""
    data = _object_body(body)
    fields: list[str] = []
    values: list[Any] = []
    pid = initial_placeholder
    for key, value in data.items():
        if is_invalid_identifier(key):
            raise InvalidIdentifierError("Set: invalid identifier")
        fields.append(f"{_quote(key)}=${pid}")
        if isinstance(value, Mapping):
            values.append(_go_json(value))
        elif isinstance(value, (list, tuple)):
            values.append(slice_to_json_list(value))
        else:
            values.append(value)
        pid += 1
    return ", ".join(fields), values


def parse_insert_request(body: Any) -> tuple[str, str, list[Any]]:
    """Return column names, placeholders and values for a single-row insert."""
    data = _object_body(body)
    fields: list[str] = []
    values: list[Any] = []
    for key, value in data.items():
        if is_invalid_identifier(key):
            raise InvalidIdentifierError("Insert: invalid identifier")
        fields.append(f'"{key}"')
        values.append(_array_or_value(value))
    return ", ".join(fields), _placeholders(1, len(values)), values


def parse_batch_insert_request(body: Any) -> tuple[str, str, list[Any]]:
    """Return column names, placeholders and values for a multi-row insert.

    Columns are the sorted keys of the first record.
    """
    records = _decode(body)
    if records is None:
        raise BodyEmptyError()
    if not isinstance(records, (list, tuple)) or not all(
        isinstance(record, Mapping) for record in records
    ):
        raise ValueError("request body is not a JSON array of objects")
    if not records:
        raise BodyEmptyError()

    keys = sorted((_go_quote(key), key) for key in records[0])
    values: list[Any] = []
    groups: list[str] = []
    for record in records:
        first = len(values) + 1
        values.extend(_array_or_value(record.get(raw)) for _, raw in keys)
        groups.append(_placeholders(first, len(values)))
    cols = ",".join(quoted for quoted, _ in keys)
    return cols, ",".join(groups), values