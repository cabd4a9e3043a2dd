"""SQL clause builders driven by URL query parameters."""

from __future__ import annotations

import re
from typing import Any

from . import statements
from .errors import (
    InvalidGroupFunctionError,
    InvalidIdentifierError,
    InvalidJoinClauseError,
    InvalidOperatorError,
    JoinInvalidNumberOfArgsError,
    MustSelectOneFieldError,
)
from .identifiers import is_invalid_identifier, normalize_group_function, query_operator
from .request_parsing import _parse_query, _quote

_QUOTED_NAME = re.compile(r'"(.+?)"')


def _first(query: Any, name: str) -> str:
    values = _parse_query(query).get(name)
    return values[0] if values else ""


def _quote_all(fields: list[str]) -> str:
    return ",".join(_quote(field) for field in fields)


def join_by_request(query: Any) -> list[str]:
    """Build a JOIN clause from ``_join=type:table:left.col:$op:right.col``.

    Returns an empty list when no join is requested.
    """
    join = _first(query, "_join")
    if not join:
        return []
    args = join.split(":")
    if len(args) != 5:
        raise JoinInvalidNumberOfArgsError()
    if is_invalid_identifier(args[1], args[2], args[4]):
        raise InvalidIdentifierError()
    op = query_operator(args[3])
    table = args[1]
    join_with = table.split(".")
    if len(join_with) == 2:
        table = f'{join_with[0]}"."{join_with[1]}'
    left = args[2].split(".")
    if len(left) != 2:
        raise InvalidJoinClauseError()
    right = args[4].split(".")
    if len(right) != 2:
        raise InvalidJoinClauseError()
    return [
        f' {args[0].upper()} JOIN "{table}" ON "{left[0]}"."{left[1]}" '
        f'{op} "{right[0]}"."{right[1]}" '
    ]


def select_fields(fields: list[str]) -> str:
    """Return ``SELECT <fields> FROM`` with identifiers quoted."""
    if not fields:
        raise MustSelectOneFieldError()
    parts: list[str] = []
    for field in fields:
        try:
            parts.append(normalize_group_function(field))
            continue
        except InvalidGroupFunctionError:
            pass
        if field == "*":
            parts.append("*")
            continue
        if is_invalid_identifier(field):
            raise InvalidIdentifierError(f"{field}: invalid identifier")
        if _QUOTED_NAME.search(field):
            parts.append(field)
        else:
            parts.append(_quote(field))
    return f"SELECT {','.join(parts)} FROM"


def order_by_request(query: Any) -> str:
    """Build an ORDER BY clause from ``_order``; a leading ``-`` sorts descending."""
    order = _first(query, "_order")
    if not order:
        return ""
    fields: list[str] = []
    for field in order.split(","):
        if is_invalid_identifier(field):
            raise InvalidIdentifierError()
        quoted = _quote(field)
        if quoted.startswith('"-'):
            quoted = quoted.replace('"-', '"', 1) + " DESC"
        fields.append(quoted)
    return " ORDER BY  " + " , ".join(fields)


def count_by_request(query: Any) -> str:
    """Build ``SELECT COUNT(...) FROM`` from ``_count`` and ``_select``."""
    count = _first(query, "_count")
    if not count:
        return ""
    select = _first(query, "_select")
    if select:
        select = f", {select}"
    fields: list[str] = []
    for field in count.split(","):
        if field == "*":
            fields.append(field)
            continue
        if is_invalid_identifier(field):
            raise InvalidIdentifierError()
        fields.append(_quote(field))
    return f"SELECT COUNT({','.join(fields)}){select} FROM"


def distinct_clause(query: Any) -> str:
    """Return ``SELECT DISTINCT`` when ``_distinct=true``, otherwise ``""``."""
    distinct = _first(query, "_distinct")
    if distinct == "true":
        return "SELECT DISTINCT"
    return ""


def group_by_clause(query: Any) -> str:
    """Build GROUP BY, with an optional ``->>having:func:field:$op:value``.

    A malformed HAVING part is dropped and only GROUP BY is returned.
    """
    group = _first(query, "_groupby")
    if not group:
        return ""
    if "->>having" not in group:
        return statements.GROUP_BY.format(_quote_all(group.split(",")))

    params = group.split(":")
    group_fields = _quote_all(group.split("->>having")[0].split(","))
    group_by = statements.GROUP_BY.format(group_fields)
    if len(params) != 5:
        return group_by
    try:
        func = normalize_group_function(f"{params[1]}:{params[2]}")
        operator = query_operator(params[3])
    except (InvalidGroupFunctionError, InvalidOperatorError):
        return group_by
    having = statements.HAVING.format(func, operator, params[4])
    return f"{group_by} {having}"


def database_clause(query: Any) -> tuple[str, bool]:
    """Return the database listing SELECT and whether it counts."""
    if _first(query, "_count"):
        return statements.DATABASES_SELECT.format(statements.FIELD_COUNT_DATABASE_NAME), True
    return statements.DATABASES_SELECT.format(statements.FIELD_DATABASE_NAME), False


def schema_clause(query: Any) -> tuple[str, bool]:
    """Return the schema listing SELECT and whether it counts."""
    if _first(query, "_count"):
        return statements.SCHEMAS_SELECT.format(statements.FIELD_COUNT_SCHEMA_NAME), True
    return statements.SCHEMAS_SELECT.format(statements.FIELD_SCHEMA_NAME), False


def columns_by_request(query: Any) -> list[str]:
    """Collect ``_select`` columns; with ``_groupby`` aggregates are normalised."""
    params = _parse_query(query)
    columns = [col for value in params.get("_select", []) for col in value.split(",")]
    if _first(params, "_groupby"):
        columns = [
            normalize_group_function(col) if ":" in col else col for col in columns
        ]
    return columns


def select_sql(select: str, database: str, schema: str, table: str) -> str:
    return f'{select} "{database}"."{schema}"."{table}"'


def insert_sql(
    database: str, schema: str, table: str, names: str, placeholders: str
) -> str:
    return statements.INSERT_QUERY.format(database, schema, table, names, placeholders)


def delete_sql(database: str, schema: str, table: str) -> str:
    return statements.DELETE_QUERY.format(database, schema, table)


def update_sql(database: str, schema: str, table: str, set_syntax: str) -> str:
    return statements.UPDATE_QUERY.format(database, schema, table, set_syntax)


def _where(base: str, request_where: str) -> str:
    return f"{base} AND {request_where}" if request_where else base


def database_where(request_where: str) -> str:
    return _where(statements.DATABASES_WHERE, request_where)


def database_order_by(order: str, has_count: bool) -> str:
    if order:
        return order
    if has_count:
        return ""
    return statements.DATABASES_ORDER_BY.format(statements.FIELD_DATABASE_NAME)


def schema_order_by(order: str, has_count: bool) -> str:
    if order:
        return order
    if has_count:
        return ""
    return statements.SCHEMAS_ORDER_BY.format(statements.FIELD_SCHEMA_NAME)


def table_where(request_where: str) -> str:
    return _where(statements.TABLES_WHERE, request_where)


def table_order_by(order: str) -> str:
    return order or statements.TABLES_ORDER_BY


def schema_tables_where(request_where: str) -> str:
    return _where(statements.SCHEMA_TABLES_WHERE, request_where)


def schema_tables_order_by(order: str) -> str:
    return order or statements.SCHEMA_TABLES_ORDER_BY