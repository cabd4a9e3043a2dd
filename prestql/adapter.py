"""Execution of generated SQL against PostgreSQL through pooled connections.

Connections are DB-API 2.0 objects: ``cursor()``, ``commit()`` and
``rollback()``. Bulk copy additionally needs a cursor with a ``copy(sql)``
context manager whose object offers ``write_row(row)``.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from .connection import ConnectionPool
from .errors import NoTableNameError
from .scanner import PrestScanner

logger = logging.getLogger(__name__)

_INSERT_TABLE_QUOTED = re.compile(
    r'INTO\s+([\w|\.|"|-]*\.)*"([\w|-]+)"\s*\(', re.IGNORECASE | re.ASCII
)
_INSERT_TABLE = re.compile(
    r"INTO\s+([\w|\.|-]*\.)*([\w|-]+)\s*\(", re.IGNORECASE | re.ASCII
)

_SHOW_TABLE_SQL = """SELECT table_schema, table_name, ordinal_position as position, column_name,data_type,
			  	CASE WHEN character_maximum_length is not null
					THEN character_maximum_length
					ELSE numeric_precision end as max_length,
			  	is_nullable,
			  	is_generated,
			  	is_updatable,
			  	column_default as default_value
			 FROM information_schema.columns
			 WHERE table_name=$1 AND table_schema=$2
			 ORDER BY table_schema, table_name, ordinal_position"""


def insert_table_name(sql: str) -> str:
    """Return the table name targeted by an INSERT statement."""
    match = _INSERT_TABLE_QUOTED.search(sql) or _INSERT_TABLE.search(sql)
    if match is None:
        raise NoTableNameError()
    return match.group(2)


def _json_bytes(value: Any) -> bytes | None:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    return json.dumps(value, separators=(",", ":"), default=str).encode("utf-8")


def _dump(data: Any) -> bytes:
    return json.dumps(
        data, sort_keys=True, separators=(",", ":"), default=str
    ).encode("utf-8")


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _unquote_key(key: str) -> str:
    if not key.startswith('"'):
        return key
    try:
        value = json.loads(key)
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid quoted column name: {key}") from exc
    if not isinstance(value, str):
        raise ValueError(f"invalid quoted column name: {key}")
    return value


def _row_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8")
    return value


class PostgresAdapter:
    """Runs queries and writes, returning results as JSON scanners."""

    def __init__(self, pool: ConnectionPool) -> None:
        self.pool = pool
        self._database: str | None = None
        self._connection: Any = None

    def _bound(self) -> PostgresAdapter:
        other = PostgresAdapter(self.pool)
        other._database = self._database
        other._connection = self._connection
        return other

    def using(self, database: str) -> PostgresAdapter:
        """Return an adapter that runs on the pooled connection of ``database``."""
        other = self._bound()
        other._database = database
        other._connection = None
        return other

    def _db(self) -> Any:
        if self._connection is not None:
            return self._connection
        if self._database is not None:
            return self.pool.get_from_pool(self._database)
        return self.pool.get()

    @contextmanager
    def transaction(self) -> Iterator[PostgresAdapter]:
        """Yield an adapter whose operations share one transaction.

        The transaction commits on normal exit and rolls back on error.
        """
        conn = self._db()
        tx = self._bound()
        tx._connection = conn
        tx._in_transaction = True
        try:
            yield tx
        except BaseException:
            conn.rollback()
            raise
        conn.commit()

    @contextmanager
    def _cursor(self) -> Iterator[Any]:
        conn = self._db()
        managed = not getattr(self, "_in_transaction", False)
        cursor = conn.cursor()
        try:
            yield cursor
            if managed:
                conn.commit()
        except BaseException:
            if managed:
                conn.rollback()
            raise
        finally:
            cursor.close()

    def query(self, sql: str, *args: Any) -> PrestScanner:
        """Run a SELECT and return its rows aggregated as a JSON array."""
        wrapped = f"SELECT jsonb_agg(s) FROM ({sql}) s"
        logger.debug("generated SQL: %s parameters: %s", wrapped, args)
        with self._cursor() as cursor:
            cursor.execute(wrapped, args)
            row = cursor.fetchone()
        data = _json_bytes(row[0]) if row else None
        return PrestScanner(data=data or b"[]", is_query=True)

    def query_count(self, sql: str, *args: Any) -> PrestScanner:
        """Run a COUNT query and return ``{"count": n}``."""
        logger.debug("generated SQL: %s parameters: %s", sql, args)
        with self._cursor() as cursor:
            cursor.execute(sql, args)
            row = cursor.fetchone()
        if not row:
            raise LookupError("count query returned no rows")
        return PrestScanner(data=_dump({"count": int(row[0])}))

    def _full_insert(self, sql: str) -> str:
        return f'{sql} RETURNING row_to_json("{insert_table_name(sql)}")'

    def insert(self, sql: str, *args: Any) -> PrestScanner:
        """Insert one row and return it as a JSON object."""
        statement = self._full_insert(sql)
        logger.debug("%s parameters: %s", statement, args)
        with self._cursor() as cursor:
            cursor.execute(statement, args)
            row = cursor.fetchone()
        data = _json_bytes(row[0]) if row else None
        return PrestScanner(data=data or b"")

    def batch_insert_values(self, sql: str, *args: Any) -> PrestScanner:
        """Insert several rows with one statement and return them as an array."""
        statement = self._full_insert(sql)
        logger.debug("generated SQL: %s parameters: %s", statement, args)
        with self._cursor() as cursor:
            cursor.execute(statement, args)
            rows = cursor.fetchall()
        items = [_json_bytes(row[0]) or b"" for row in rows]
        return PrestScanner(data=b"[" + b",".join(items) + b"]", is_query=True)

    def batch_insert_copy(
        self, schema: str, table: str, keys: list[str], *args: Any
    ) -> PrestScanner:
        """Bulk load values into ``schema.table`` with COPY.

        Values are taken ``len(keys)`` at a time; a trailing partial row is ignored.
        """
        columns = [_unquote_key(key) for key in keys]
        if not columns:
            raise ValueError("at least one column is required for copy")
        statement = (
            f"COPY {_quote_identifier(schema)}.{_quote_identifier(table)} ("
            + ", ".join(_quote_identifier(col) for col in columns)
            + ") FROM STDIN"
        )
        width = len(columns)
        logger.debug("generated SQL: %s", statement)
        with self._cursor() as cursor:
            with cursor.copy(statement) as copy:
                for start in range(0, len(args) - width + 1, width):
                    copy.write_row(list(args[start : start + width]))
        return PrestScanner()

    def _write(self, sql: str, args: tuple[Any, ...]) -> PrestScanner:
        logger.debug("generated SQL: %s parameters: %s", sql, args)
        with self._cursor() as cursor:
            cursor.execute(sql, args)
            if "RETURNING" in sql:
                names = [column[0] for column in cursor.description or ()]
                rows = [
                    {name: _row_value(value) for name, value in zip(names, row)}
                    for row in cursor.fetchall()
                ]
                return PrestScanner(data=_dump(rows or None))
            affected = cursor.rowcount
        return PrestScanner(data=_dump({"rows_affected": affected}))

    def delete(self, sql: str, *args: Any) -> PrestScanner:
        """Run a DELETE; returns the deleted rows or the affected row count."""
        return self._write(sql, args)

    def update(self, sql: str, *args: Any) -> PrestScanner:
        """Run an UPDATE; returns the updated rows or the affected row count."""
        return self._write(sql, args)

    def show_table(self, schema: str, table: str) -> PrestScanner:
        """Describe the columns of ``schema.table``."""
        return self.query(_SHOW_TABLE_SQL, table, schema)