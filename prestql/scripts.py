"""Lookup and execution of user-provided SQL script files."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Sequence
from typing import Any

from .adapter import PostgresAdapter
from .errors import PrestError
from .scanner import PrestScanner

logger = logging.getLogger(__name__)

_SCRIPT_SUFFIXES = {
    "GET": ".read.sql",
    "POST": ".write.sql",
    "PATCH": ".update.sql",
    "PUT": ".update.sql",
    "DELETE": ".delete.sql",
}

_WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def get_script(queries_path: str, verb: str, folder: str, name: str) -> str:
    """Return the path of the script serving ``verb`` for ``folder/name``.

    The file suffix depends on the HTTP method, e.g. ``.read.sql`` for GET.
    """
    try:
        suffix = _SCRIPT_SUFFIXES[verb]
    except KeyError:
        raise ValueError(f"invalid http method {verb}") from None
    script = os.path.join(queries_path, folder, f"{name}{suffix}")
    if not os.path.exists(script):
        raise FileNotFoundError(f"could not load {script}")
    return script


def write_sql(adapter: PostgresAdapter, sql: str, values: Sequence[Any]) -> PrestScanner:
    """Run an INSERT, UPDATE or DELETE and return the affected row count."""
    params = tuple(values)
    logger.debug("generated SQL: %s parameters: %s", sql, params)
    with adapter._cursor() as cursor:
        try:
            cursor.execute(sql, params)
        except Exception as exc:
            logger.error("sql = %s", sql)
            raise PrestError(f"could not perform sql: {exc}") from exc
        affected = cursor.rowcount
    data = json.dumps({"rows_affected": affected}, separators=(",", ":"))
    return PrestScanner(data=data.encode("utf-8"))


def execute_scripts(
    adapter: PostgresAdapter, method: str, sql: str, values: Sequence[Any]
) -> PrestScanner:
    """Run a rendered script: GET reads rows, write methods modify them."""
    if method == "GET":
        return adapter.query(sql, *values)
    if method in _WRITE_METHODS:
        return write_sql(adapter, sql, values)
    raise ValueError(f"invalid method {method}")