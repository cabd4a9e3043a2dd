# prestql

`prestql` turns the parts of an HTTP request, query-string parameters and
JSON bodies, into parameterised PostgreSQL statements. It checks every
identifier it is given, maps short operator names such as `$eq` or `$gte` to
SQL, and keeps user values out of the SQL text by returning them as
parameters for the `$1`, `$2`, … placeholders.

Around that translation it also provides a connection pool keyed by
database, an adapter that runs statements and returns their results as JSON,
table and field permissions, lookup and execution of SQL script files, and a
per-endpoint response cache.

## What is inside

| Module | Purpose |
| --- | --- |
| `prestql.identifiers` | `is_invalid_identifier`, `query_operator`, `normalize_group_function` |
| `prestql.request_parsing` | `where_by_request`, `returning_by_request`, `set_by_request`, `parse_insert_request`, `parse_batch_insert_request`, `slice_to_json_list` |
| `prestql.clauses` | `join_by_request`, `select_fields`, `order_by_request`, `count_by_request`, `distinct_clause`, `group_by_clause`, `database_clause`, `schema_clause`, `columns_by_request`, and the `*_sql`, `*_where` and `*_order_by` builders |
| `prestql.formatters` | `format_array`, for PostgreSQL array literals |
| `prestql.statements` | fixed SQL fragments for listing databases, schemas and tables |
| `prestql.permissions` | `AccessSettings`, `TableAccess`, `intersection`, `contains_asterisk` |
| `prestql.connection` | `ConnectionSettings`, `ConnectionPool`, `DatabaseNotInPoolError` |
| `prestql.adapter` | `PostgresAdapter`, `insert_table_name` |
| `prestql.scanner` | `PrestScanner`, which decodes a JSON result into a list, dict or dataclass |
| `prestql.scripts` | `get_script`, `write_sql`, `execute_scripts` |
| `prestql.cache` | `CacheSettings`, `CacheEndpoint`, `ResponseCache` |
| `prestql.errors` | `PrestError` and the specific errors derived from it |

## Building pieces of SQL

```python
from prestql.identifiers import query_operator, normalize_group_function
from prestql.clauses import select_fields, delete_sql
from prestql.formatters import format_array
from prestql.request_parsing import where_by_request

query_operator("$gte")                       # ">="
query_operator("$nilike")                    # "NOT ILIKE"
normalize_group_function("sum:age:total")    # 'SUM("age") AS "total"'
select_fields(["c.test"])                    # 'SELECT "c"."test" FROM'
delete_sql("db", "public", "users")          # 'DELETE FROM "db"."public"."users"'
format_array(["value 1", "value 2"])         # '{"value 1","value 2"}'

where_by_request("/t?name=$like.%25val%25", 1)
# ('"name" LIKE $1', ['%val%'])
```

Query arguments may be a URL, a bare query string or a mapping of names to
values. Keys starting with `_` are options (`_select`, `_order`, `_count`,
`_groupby`, `_join`, `_distinct`, `_returning`) and are skipped by
`where_by_request`; every other key is a column, and its value is an operator
prefix followed by the value: `name=$like.%val%`, `age=$gte.18`,
`id=$in.1,2,3`. Without a prefix, equality is used.

Body arguments of `set_by_request`, `parse_insert_request` and
`parse_batch_insert_request` may be JSON text, bytes or already decoded
objects.

## Errors

Invalid input raises an exception instead of producing SQL. The errors of
this package derive from `prestql.errors.PrestError`; those about bad input
(`InvalidIdentifierError`, `InvalidOperatorError`, `BodyEmptyError`, …) are
also `ValueError`s:

```python
from prestql.errors import InvalidIdentifierError
from prestql.clauses import select_fields

try:
    select_fields(["0test"])
except InvalidIdentifierError:
    ...
```

An identifier is rejected when it is empty, starts with a digit, contains
characters other than letters, digits and `( ) _ . - * [ ] "`, has an odd
number of double quotes, or is longer than 63 bytes (for a `table.column`
pair, the column part).

## Running statements

`ConnectionPool` takes a `ConnectionSettings` and a callable that receives a
libpq keyword/value connection string and returns an open DB-API 2.0
connection. The driver behind it must accept `$n` placeholders. Set
`pool.database` to the database in use.

`PostgresAdapter(pool)` offers `query`, `query_count`, `insert`,
`batch_insert_values`, `batch_insert_copy`, `update`, `delete` and
`show_table`, each returning a `PrestScanner` whose `data` holds the JSON
result. `adapter.using(name)` runs on an already pooled connection for
another database, and `with adapter.transaction() as tx:` groups operations
into one transaction that commits on exit and rolls back on error.
`batch_insert_copy` needs a cursor with a `copy(sql)` context manager
offering `write_row(row)`.

## Permissions

`AccessSettings` describes which tables may be read, written or deleted and
which fields each operation may touch. With `restrict` off every table is
open; with it on, only tables listed as `TableAccess` entries (or in
`ignore_table`) are reachable, and `fields_permissions` narrows the requested
`_select` columns to the allowed ones.

## Scripts

`get_script(queries_path, verb, folder, name)` finds the SQL file for an
HTTP method (`.read.sql` for GET, `.write.sql` for POST, `.update.sql` for
PUT and PATCH, `.delete.sql` for DELETE). `execute_scripts` runs ready SQL:
GET as a query, the write methods through `write_sql`, which returns the
number of affected rows.

## Response cache

`CacheSettings.endpoint_rules(uri)` tells whether a request path should be
cached and for how many minutes. `ResponseCache` stores values by their full
URL in JSON files under `storage_path`, one file per slugified key, and
returns them until they expire.

## What it does not do

This is a library. It has no command, runs no HTTP server and reads no
configuration files or environment variables; settings are passed in as
objects. It does not paginate (`_page` and `_page_size` are not handled) and
does not render templates inside SQL script files: `get_script` only locates
a file, and `execute_scripts` runs SQL that is already complete. It ships no
database driver of its own.