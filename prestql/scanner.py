"""Decoding of JSON query results into caller-supplied containers."""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass
from typing import Any

from .errors import PrestError

logger = logging.getLogger(__name__)


class UnsupportedTypeError(PrestError, TypeError):
    default_message = "item to input data has an unsupported type"


class RowCountError(PrestError, ValueError):
    """Raised when a single-row target receives a result of another size."""

    default_message = "rows returned is not 1"

    def __init__(self, count: int) -> None:
        super().__init__()
        self.count = count


def _is_record(target: Any) -> bool:
    return isinstance(target, dict) or (
        dataclasses.is_dataclass(target) and not isinstance(target, type)
    )


def _check_target(target: Any) -> None:
    if not (isinstance(target, list) or _is_record(target)):
        raise UnsupportedTypeError()


def _fill(target: Any, data: Any) -> None:
    if not isinstance(data, dict):
        raise ValueError(
            f"cannot decode {type(data).__name__} into {type(target).__name__}"
        )
    if isinstance(target, dict):
        target.update(data)
        return
    names = {field.name for field in dataclasses.fields(target)}
    for key, value in data.items():
        if key in names:
            setattr(target, key, value)


@dataclass
class PrestScanner:
    """Result of a database operation as raw JSON bytes.

    ``is_query`` marks results that are a JSON array of rows.
    """

    data: bytes = b""
    is_query: bool = False
    error: BaseException | None = None

    def scan(self, target: Any) -> int:
        """Decode the result into a list, dict or dataclass instance.

        Lists receive every row; dicts and dataclasses receive the single
        row. Returns the number of rows decoded.
        """
        logger.debug("database return: %s", self.data)
        _check_target(target)
        if self.is_query:
            return self._scan_query(target)
        return self._scan_not_query(target)

    def _scan_query(self, target: Any) -> int:
        rows = json.loads(self.data)
        if isinstance(target, list):
            if rows is None:
                rows = []
            if not isinstance(rows, list):
                raise ValueError("query result is not a JSON array")
            target[:] = rows
            return len(target)
        if not isinstance(rows, list):
            raise ValueError("query result is not a JSON array")
        if not rows:
            return 0
        if len(rows) != 1:
            raise RowCountError(len(rows))
        _fill(target, rows[0])
        return 1

    def _scan_not_query(self, target: Any) -> int:
        if isinstance(target, list):
            raise UnsupportedTypeError()
        _fill(target, json.loads(self.data))
        return 1