import pytest

from prestql.errors import InvalidGroupFunctionError
from prestql.permissions import (
    AccessSettings,
    TableAccess,
    contains_asterisk,
    intersection,
)


@pytest.fixture
def restricted():
    return AccessSettings(
        restrict=True,
        tables=[
            TableAccess(name="test_readonly_access", permissions=["read"]),
            TableAccess(
                name="test_write_and_delete_access", permissions=["write", "delete"]
            ),
        ],
    )


@pytest.mark.parametrize(
    "table, op, expected",
    [
        ("test_readonly_access", "read", True),
        ("test_write_and_delete_access", "read", False),
        ("test_write_and_delete_access", "write", True),
        ("test_readonly_access", "write", False),
        ("test_write_and_delete_access", "delete", True),
        ("test_readonly_access", "delete", False),
        ("test_permission_does_not_exist", "read", False),
    ],
)
def test_table_permissions(restricted, table, op, expected):
    assert restricted.table_permissions(table, op) is expected


def test_ignored_table_allowed(restricted):
    restricted.ignore_table = ["free_table"]
    assert restricted.table_permissions("free_table", "write") is True


def test_restrict_false():
    settings = AccessSettings(restrict=False)
    fields = settings.fields_permissions(
        "/prest-test/public/test_list_only_id?_select=*", "test_list_only_id", "read"
    )
    assert fields[0] == "*"
    assert settings.table_permissions("test_readonly_access", "delete") is True


@pytest.mark.parametrize(
    "url, table, op, allowed, restrict, expected",
    [
        ("", "", "delete", [], False, ["*"]),
        ("", "", "", [], False, ["*"]),
        ("/table_field_permission", "", "", [], True, ["*"]),
        ("/table_field_permission", "test_field_permission", "write", ["*"], True, ["*"]),
        ("/table_field_permission?_select=name", "test_field_permission", "write",
         ["*"], True, ["name"]),
        ("/table_field_permission?_select=name,age", "test_field_permission", "write",
         ["*"], True, ["name", "age"]),
        ("/table_field_permission?_select=name", "test_field_permission", "write",
         ["name", "age"], True, ["name"]),
        ("/table_field_permission?_select=id", "test_field_permission", "write",
         ["name", "age"], True, []),
        ("/table_field_permission", "test_field_permission", "write",
         ["name", "age"], True, ["name", "age"]),
        ("/table_field_permission?_groupby=number&_select=max:number",
         "test_field_permission", "write", ["name", "age"], True, []),
        ("/table_field_permission?_groupby=age&_select=max:age",
         "test_field_permission", "write", ["name", "age"], True, ['MAX("age")']),
    ],
)
def test_fields_permissions(url, table, op, allowed, restrict, expected):
    settings = AccessSettings(
        restrict=restrict,
        tables=[
            TableAccess(
                name="test_field_permission",
                permissions=["read", "write", "delete"],
                fields=allowed,
            )
        ],
    )
    assert settings.fields_permissions(url, table, op) == expected


def test_fields_permissions_bad_groupby():
    settings = AccessSettings(restrict=True)
    with pytest.raises(InvalidGroupFunctionError):
        settings.fields_permissions(
            "/table_field_permission?_select=fail:fail&_groupby=fail", "", ""
        )


@pytest.mark.parametrize(
    "fields, allowed, expected",
    [
        ([], [], []),
        (["name"], [], []),
        ([], ["name"], []),
        (["name", "age"], ["name"], ["name"]),
        (['SUM("age")'], ["age"], ['SUM("age")']),
    ],
)
def test_intersection(fields, allowed, expected):
    assert intersection(fields, allowed) == expected


@pytest.mark.parametrize("fields, expected", [(["*"], True), ([], False)])
def test_contains_asterisk(fields, expected):
    assert contains_asterisk(fields) is expected