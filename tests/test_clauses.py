import pytest

from prestql import clauses, statements
from prestql.errors import (
    InvalidGroupFunctionError,
    InvalidIdentifierError,
    InvalidOperatorError,
    JoinInvalidNumberOfArgsError,
    MustSelectOneFieldError,
)


@pytest.mark.parametrize(
    "url, expected",
    [
        (
            "/prest-test/public/test?_join=inner:test2:test2.name:$eq:test.name",
            ["INNER JOIN", '"test2" ON ', '"test2"."name" = "test"."name"'],
        ),
        (
            "/prest-test/public/test?_join=inner:public.test2:test2.name:$eq:test.name",
            ["INNER JOIN", '"public"."test2" ON ', '"test2"."name" = "test"."name"'],
        ),
    ],
)
def test_join_by_request(url, expected):
    joined = " ".join(clauses.join_by_request(url))
    for part in expected:
        assert part in joined


def test_join_exact_value():
    url = "/t?_join=inner:test2:test2.name:$eq:test.name&name=$eq.test"
    assert clauses.join_by_request(url) == [
        ' INNER JOIN "test2" ON "test2"."name" = "test"."name" '
    ]


def test_join_empty_params():
    assert clauses.join_by_request("/prest-test/public/test?_join") == []


@pytest.mark.parametrize(
    "url, error",
    [
        ("/t?_join=inner:test2:test2.name:$eq", JoinInvalidNumberOfArgsError),
        ("/t?_join=inner:test2:test2.name:notexist:test.name", InvalidOperatorError),
        ("/t?_join=inner:0test2:test2.name:notexist:test.name", InvalidIdentifierError),
    ],
)
def test_join_errors(url, error):
    with pytest.raises(error):
        clauses.join_by_request(url)


@pytest.mark.parametrize(
    "fields, expected",
    [
        (["test"], 'SELECT "test" FROM'),
        (["c.test"], 'SELECT "c"."test" FROM'),
        (["test", "test02"], 'SELECT "test","test02" FROM'),
        (["max:age"], 'SELECT MAX("age") FROM'),
        (["*"], "SELECT * FROM"),
    ],
)
def test_select_fields(fields, expected):
    assert clauses.select_fields(fields) == expected


def test_select_fields_invalid():
    with pytest.raises(InvalidIdentifierError):
        clauses.select_fields(["0test", "test02"])


def test_select_fields_empty():
    with pytest.raises(MustSelectOneFieldError):
        clauses.select_fields([])


def test_order_by_request():
    order = clauses.order_by_request("/prest-test/public/test?_order=name,-number")
    for part in ["ORDER BY", '"name"', '"number" DESC']:
        assert part in order
    assert order == ' ORDER BY  "name" , "number" DESC'


def test_order_by_request_alias():
    order = clauses.order_by_request("/prest-test/public/test?_order=c.name,-c.number")
    for part in ["ORDER BY", '"c"."name"', '"c"."number" DESC']:
        assert part in order


def test_order_by_request_empty():
    assert clauses.order_by_request("/prest-test/public/test?_order=") == ""


def test_order_by_request_invalid():
    with pytest.raises(InvalidIdentifierError):
        clauses.order_by_request("/prest-test/public/test?_order=0name")


@pytest.mark.parametrize(
    "url, expected",
    [
        ("/t?_count=celphone", 'SELECT COUNT("celphone") FROM'),
        ("/t?_count=*", "SELECT COUNT(*) FROM"),
        ("/t?_count=", ""),
        ("/t?_count=celphone&_groupby=celphone", 'SELECT COUNT("celphone") FROM'),
        (
            "/t?_count=celphone&_groupby=celphone&_select=celphone",
            'SELECT COUNT("celphone"), celphone FROM',
        ),
    ],
)
def test_count_by_request(url, expected):
    assert clauses.count_by_request(url) == expected


def test_count_by_request_invalid():
    with pytest.raises(InvalidIdentifierError):
        clauses.count_by_request("/t?_count=celphone,0name")


@pytest.mark.parametrize(
    "url, expected",
    [
        ("/databases?dbname=prest-test&test=cool&_distinct=true", "SELECT DISTINCT"),
        ("/databases?dbname=prest-test&test=cool&_distinct=false", ""),
        ("/databases?dbname=prest-test&test=cool", ""),
    ],
)
def test_distinct_clause(url, expected):
    assert clauses.distinct_clause(url) == expected


@pytest.mark.parametrize(
    "url, expected",
    [
        ("/t?_groupby=celphone", 'GROUP BY "celphone"'),
        ("/t?_groupby=celphone,name", 'GROUP BY "celphone","name"'),
        ("/t?_groupby=c.celphone,c.name", 'GROUP BY "c"."celphone","c"."name"'),
        ("/t?_groupby=", ""),
        (
            "/t?_groupby=celphone->>having:sum:salary:$gt:500",
            'GROUP BY "celphone" HAVING SUM("salary") > 500',
        ),
        (
            "/t?_groupby=c.celphone->>having:sum:salary:$gt:500",
            'GROUP BY "c"."celphone" HAVING SUM("salary") > 500',
        ),
        ("/t?_groupby=celphone->>having:sum:salary", 'GROUP BY "celphone"'),
        ("/t?_groupby=celphone->>having:sum:salary:$at:500", 'GROUP BY "celphone"'),
        ("/t?_groupby=celphone->>having:sun:salary:$gt:500", 'GROUP BY "celphone"'),
    ],
)
def test_group_by_clause(url, expected):
    assert clauses.group_by_clause(url) == expected


def test_database_clause():
    assert clauses.database_clause("/databases") == (
        statements.DATABASES_SELECT.format(statements.FIELD_DATABASE_NAME),
        False,
    )
    assert clauses.database_clause("/databases?_count=*") == (
        statements.DATABASES_SELECT.format(statements.FIELD_COUNT_DATABASE_NAME),
        True,
    )


def test_schema_clause():
    assert clauses.schema_clause("/schemas") == (
        statements.SCHEMAS_SELECT.format(statements.FIELD_SCHEMA_NAME),
        False,
    )
    assert clauses.schema_clause("/schemas?_count=*") == (
        statements.SCHEMAS_SELECT.format(statements.FIELD_COUNT_SCHEMA_NAME),
        True,
    )


@pytest.mark.parametrize(
    "url, expected",
    [
        ("/t?_select=data", "data"),
        ("/t?_select=celphone", "celphone"),
        ("/t?_select=*", "*"),
        ("/t?_select=", ""),
        ("/t?_select=celphone,battery", "celphone,battery"),
        ("/t?_select=age,sum:salary&_groupby=age", 'age,SUM("salary")'),
        ("/t?_select=sum:salary", "sum:salary"),
    ],
)
def test_columns_by_request(url, expected):
    assert ",".join(clauses.columns_by_request(url)) == expected


def test_columns_by_request_bad_group_function():
    with pytest.raises(InvalidGroupFunctionError):
        clauses.columns_by_request("/t?_select=fail:fail&_groupby=fail")


@pytest.mark.parametrize(
    "got, expected",
    [
        (clauses.select_sql("select", "database", "schema", "table"),
         'select "database"."schema"."table"'),
        (clauses.insert_sql("database", "schema", "table", "names", "(name1, name2)"),
         'INSERT INTO "database"."schema"."table"(names) VALUES(name1, name2)'),
        (clauses.delete_sql("database", "schema", "table"),
         'DELETE FROM "database"."schema"."table"'),
        (clauses.update_sql("database", "schema", "table", "syntax"),
         'UPDATE "database"."schema"."table" SET syntax'),
        (clauses.database_where(""), statements.DATABASES_WHERE),
        (clauses.database_where("testrequestwhere"),
         f"{statements.DATABASES_WHERE} AND testrequestwhere"),
        (clauses.database_order_by("order", True), "order"),
        (clauses.database_order_by("", True), ""),
        (clauses.database_order_by("", False), "\nORDER BY\n\tdatname ASC"),
        (clauses.schema_order_by("order", True), "order"),
        (clauses.schema_order_by("", True), ""),
        (clauses.schema_order_by("", False), "\nORDER BY\n\tschema_name ASC"),
        (clauses.table_where("requestWhere"),
         f"{statements.TABLES_WHERE} AND requestWhere"),
        (clauses.table_where(""), statements.TABLES_WHERE),
        (clauses.table_order_by("order"), "order"),
        (clauses.table_order_by(""), statements.TABLES_ORDER_BY),
        (clauses.schema_tables_where("requestWhere"),
         f"{statements.SCHEMA_TABLES_WHERE} AND requestWhere"),
        (clauses.schema_tables_where(""), statements.SCHEMA_TABLES_WHERE),
        (clauses.schema_tables_order_by("order"), "order"),
        (clauses.schema_tables_order_by(""), statements.SCHEMA_TABLES_ORDER_BY),
    ],
)
def test_generated_sql(got, expected):
    assert got == expected