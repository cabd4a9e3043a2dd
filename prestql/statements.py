"""SQL statement templates for PostgreSQL catalog and table queries.

Templates with ``{}`` placeholders are filled with ``str.format``.
"""

FIELD_DATABASE_NAME = "datname"
FIELD_SCHEMA_NAME = "schema_name"
FIELD_COUNT_DATABASE_NAME = "COUNT(datname)"
FIELD_COUNT_SCHEMA_NAME = "COUNT(schema_name)"

DATABASES_SELECT = "\nSELECT\n\t{}\nFROM\n\tpg_database"
DATABASES_WHERE = "\nWHERE\n\tNOT datistemplate"
DATABASES_ORDER_BY = "\nORDER BY\n\t{} ASC"

SCHEMAS_SELECT = "\nSELECT\n\t{}\nFROM\n\tinformation_schema.schemata"
SCHEMAS_GROUP_BY = "\nGROUP BY\n\t{}"
SCHEMAS_ORDER_BY = "\nORDER BY\n\t{} ASC"

TABLES_SELECT = (
    "\nSELECT\n"
    '\tn.nspname as "schema",\n'
    '\tc.relname as "name",\n'
    "\tCASE c.relkind\n"
    "\t\tWHEN 'r' THEN 'table'\n"
    "\t\tWHEN 'v' THEN 'view'\n"
    "\t\tWHEN 'm' THEN 'materialized_view'\n"
    "\t\tWHEN 'i' THEN 'index'\n"
    "\t\tWHEN 'S' THEN 'sequence'\n"
    "\t\tWHEN 's' THEN 'special'\n"
    "\t\tWHEN 'f' THEN 'foreign_table'\n"
    '\tEND as "type",\n'
    '\tpg_catalog.pg_get_userbyid(c.relowner) as "owner"\n'
    "FROM\n"
    "\tpg_catalog.pg_class c\n"
    "LEFT JOIN\n"
    "\tpg_catalog.pg_namespace n ON n.oid = c.relnamespace "
)
TABLES_WHERE = (
    "\nWHERE\n"
    "\tc.relkind IN ('r','v','m','S','s','') AND\n"
    "\tn.nspname !~ '^pg_toast' AND\n"
    "\tn.nspname NOT IN ('information_schema', 'pg_catalog') AND\n"
    "\thas_schema_privilege(n.nspname, 'USAGE') "
)
TABLES_ORDER_BY = "\nORDER BY 1, 2"
TABLES = TABLES_SELECT + TABLES_WHERE + TABLES_ORDER_BY

SCHEMA_TABLES_SELECT = (
    "\nSELECT\n"
    '\tt.tablename as "name",\n'
    '\tt.schemaname as "schema",\n'
    '\tsc.catalog_name as "database"\n'
    "FROM\n"
    "\tpg_catalog.pg_tables t\n"
    "INNER JOIN\n"
    "\tinformation_schema.schemata sc ON sc.schema_name = t.schemaname"
)
SCHEMA_TABLES_WHERE = "\nWHERE\n\tsc.catalog_name = $1 AND\n\tt.schemaname = $2"
SCHEMA_TABLES_ORDER_BY = "\nORDER BY\n\tt.tablename ASC"
SCHEMA_TABLES = SCHEMA_TABLES_SELECT + SCHEMA_TABLES_WHERE + SCHEMA_TABLES_ORDER_BY

SELECT_IN_TABLE = "\nSELECT\n\t*\nFROM"

INSERT_QUERY = 'INSERT INTO "{}"."{}"."{}"({}) VALUES{}'
DELETE_QUERY = 'DELETE FROM "{}"."{}"."{}"'
UPDATE_QUERY = 'UPDATE "{}"."{}"."{}" SET {}'
GROUP_BY = "GROUP BY {}"
HAVING = "HAVING {} {} {}"

DATABASES = (
    DATABASES_SELECT.format(FIELD_DATABASE_NAME)
    + DATABASES_WHERE
    + DATABASES_ORDER_BY.format(FIELD_DATABASE_NAME)
)
SCHEMAS = SCHEMAS_SELECT.format(FIELD_SCHEMA_NAME) + SCHEMAS_ORDER_BY.format(
    FIELD_SCHEMA_NAME
)