"""Table and column access rules."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from .clauses import columns_by_request

_QUOTED_NAME = re.compile(r'"(.+?)"')


@dataclass
class TableAccess:
    """Permissions granted on one table, optionally limited to some fields."""

    name: str
    permissions: list[str] = field(default_factory=list)
    fields: list[str] = field(default_factory=list)


@dataclass
class AccessSettings:
    """Access configuration: restriction mode, ignored tables and table rules."""

    restrict: bool = False
    ignore_table: list[str] = field(default_factory=list)
    tables: list[TableAccess] = field(default_factory=list)

    def table_permissions(self, table: str, op: str) -> bool:
        """Return whether operation ``op`` is allowed on ``table``."""
        if not self.restrict or table in self.ignore_table:
            return True
        return any(t.name == table and op in t.permissions for t in self.tables)

    def _fields_by_permission(self, table: str, op: str) -> list[str]:
        fields: list[str] = []
        for t in self.tables:
            if t.name == table and op in t.permissions:
                fields = list(t.fields)
        return fields or ["*"]

    def fields_permissions(self, query: Any, table: str, op: str) -> list[str]:
        """Return the columns the request may use on ``table`` for ``op``."""
        cols = columns_by_request(query)
        if not self.restrict or op == "delete":
            return cols if cols else ["*"]
        allowed = self._fields_by_permission(table, op)
        if contains_asterisk(allowed):
            return cols if cols else ["*"]
        if not cols:
            return allowed
        return intersection(cols, allowed)


def _check_field(col: str, fields: list[str]) -> str | None:
    match = _QUOTED_NAME.search(col)
    for name in fields:
        if match and match.group(1) == name:
            return col
        if col == name:
            return col
    return None


def intersection(fields: list[str], allowed: list[str]) -> list[str]:
    """Keep the requested fields, aggregates included, that are allowed."""
    return [col for col in fields if _check_field(col, allowed)]


def contains_asterisk(fields: list[str]) -> bool:
    return "*" in fields