import json
from dataclasses import dataclass

import pytest

from prestql.scanner import PrestScanner, RowCountError, UnsupportedTypeError


@dataclass
class ComplexType:
    name: str = ""


ONE_ROW = json.dumps([{"name": "test"}]).encode()
TWO_ROWS = json.dumps([{"name": "test"}, {"name": "Test"}]).encode()
SINGLE = json.dumps({"name": "test"}).encode()


@pytest.mark.parametrize("target", [1, None, "text", ComplexType])
def test_unsupported_targets(target):
    with pytest.raises(UnsupportedTypeError):
        PrestScanner(data=ONE_ROW, is_query=True).scan(target)


def test_scan_query_map():
    target = {}
    assert PrestScanner(data=ONE_ROW, is_query=True).scan(target) == 1
    assert target == {"name": "test"}


def test_scan_query_struct():
    target = ComplexType()
    assert PrestScanner(data=ONE_ROW, is_query=True).scan(target) == 1
    assert target.name == "test"


def test_scan_query_slice():
    target = []
    assert PrestScanner(data=ONE_ROW, is_query=True).scan(target) == 1
    assert target == [{"name": "test"}]


def test_scan_query_length_error():
    with pytest.raises(RowCountError) as info:
        PrestScanner(data=TWO_ROWS, is_query=True).scan(ComplexType())
    assert info.value.count == 2


def test_scan_empty_table():
    target = {}
    assert PrestScanner(data=b"[]", is_query=True).scan(target) == 0
    assert target == {}


def test_scan_not_query_map():
    target = {}
    assert PrestScanner(data=SINGLE).scan(target) == 1
    assert target == {"name": "test"}


def test_scan_not_query_struct():
    target = ComplexType()
    assert PrestScanner(data=SINGLE).scan(target) == 1
    assert target.name == "test"


def test_scan_not_query_slice_is_unsupported():
    with pytest.raises(UnsupportedTypeError):
        PrestScanner(data=SINGLE).scan([])


def test_scan_leaves_data_intact():
    scanner = PrestScanner(data=ONE_ROW, is_query=True)
    scanner.scan({})
    assert scanner.data == ONE_ROW


def test_scan_not_query_array_into_struct_fails():
    with pytest.raises(ValueError):
        PrestScanner(data=ONE_ROW).scan(ComplexType())