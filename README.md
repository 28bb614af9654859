# dbmeta

Read database metadata (catalogs, schemas, tables, columns, column
statistics, indexes, constraints, functions, sequences, triggers and
privileges) as structured Python records.

## Installation

```
pip install dbmeta
```

The package has no runtime dependencies.

## Connecting a database

Readers run SQL through the `db` object they are given. It must have an
`execute(sql, params)` method that returns an iterable of row sequences,
as `sqlite3.Connection.execute` does. Each reader writes bind parameters in
one fixed style, so `db` must accept that style (or translate it):

| Reader | Placeholders |
| --- | --- |
| `dbmeta.infoschema.reader.InformationSchema` (default) | `$1`, `$2`, ... |
| `dbmeta.mysql.new_reader` | `?` |
| `dbmeta.postgres.PostgresReader` | `$1`, `$2`, ... |
| `dbmeta.oracle.OracleReader` | `:1`, `:2`, ... |

## Readers

- `dbmeta.infoschema.reader.InformationSchema(db, **options)` queries the
  standard `information_schema` views. Its options are those of
  `dbmeta.infoschema.queries.QueryBuilder` (`placeholder`, `clauses`,
  `system_schemas`, `current_schema`, `limit` and the switches
  `has_functions`, `has_sequences`, `has_indexes`, `has_constraints`,
  `has_check_constraints`, `has_table_privileges`,
  `has_column_privileges`, `has_usage_privileges`), plus
  `data_type_formatter` and the `LoggingReader` options below. Unknown
  options raise `TypeError`. A method whose view is switched off raises
  `NotSupportedError`. `dbmeta.infoschema.reader.new(**options)` returns a
  factory `factory(db, **more_options)`.
- `dbmeta.infoschema.queries.QueryBuilder` builds the SQL text and bind
  values alone, without running anything. Each of its methods returns a
  `(sql, values)` pair. `ClauseName` names the column expressions that
  can be replaced through `clauses`. `dollar_placeholder` and
  `question_placeholder` are the two placeholder functions provided.
- `dbmeta.mysql.new_reader(db, **options)` returns an `InformationSchema`
  set up for MySQL. It uses `?` placeholders, `column_type` as the data
  type, the MySQL system schemas and the current `DATABASE()`. It has no
  sequences, check constraints or usage privileges.
- `dbmeta.postgres.new_reader(db, **options)` returns a `PluginReader`. It
  combines an information-schema reader (indexes switched off, PostgreSQL
  system schemas, `data_type_formatter` applied to column types) with
  `PostgresReader`. `PostgresReader` reads `pg_catalog` for catalogs
  (`PostgresCatalog` records), tables, column statistics, indexes, index
  columns and triggers.
- `dbmeta.oracle.new_reader(db, **options)` returns an `OracleReader`. It
  reads the Oracle data dictionary views for catalogs, schemas, tables
  (synonyms included when `"SYNONYM"` is among the types), columns,
  functions, function arguments, indexes and index columns. It upper-cases
  filter values and ignores a `limit` option.

`dbmeta.readers.PluginReader(*readers)` composes readers into one. For
each kind of metadata, the last reader given that has a method for it
wins. A kind that none of them supplies raises
`dbmeta.resultset.NotSupportedError`.

## Filtering

Every reader method takes a `dbmeta.resultset.Filter`. Its `catalog`,
`schema`, `parent`, `reference` and `name` fields are SQL `LIKE`
patterns, and each reader applies those it supports. The other fields
work as follows:

- `types` narrows the object types.
- `with_system` includes the system schemas.
- `only_visible` restricts results to the current or visible schema.

```python
from dbmeta import postgres
from dbmeta.resultset import Filter

reader = postgres.new_reader(db)
for table in reader.tables(Filter(schema="public", types=["TABLE"])):
    print(table.schema, table.name, table.rows, table.size)
```

## Result sets

Readers return result sets from `dbmeta.records`, such as `TableSet` or
`ColumnSet`. These hold dataclass records such as `Table` and `Column`.
A result set supports:

- iteration and `len()`;
- cursor-style access with `next()`, `get()`, `reset()` and
  `scan(count)`;
- `column_names()`, which gives display column titles.

`set_filter(predicate)` hides the rows for which the predicate is false.
`set_scan_values(func)` changes what `scan()` returns. `scan()` raises
`WrongNumberOfArgumentsError` when `count` does not match the row.

## Privileges

`PrivilegeSummary` records hold the grants on one object:
`dbmeta.privileges.ObjectPrivileges` and `ColumnPrivileges`. Both are
lists. `str()` renders them in the form `grantee=PRIV*,PRIV/grantor`,
with `*` marking grantable privileges and column grants grouped under
`column:` headings. The grants must be sorted by their `sort_key()`
first.

## Logging, dry runs and timeouts

All readers are built on `dbmeta.readers.LoggingReader` and accept these
options:

- `logger`: a callable. It is called with each SQL string and then with
  its list of bind values, before the query runs.
- `dry_run`: queries are not run, and `query()` raises `NoRowsError`.
  The information-schema and Oracle readers, and `PostgresReader.tables`,
  turn that into an empty result set. The other `PostgresReader` methods
  let it propagate.
- `timeout`: seconds or a `timedelta`. The query runs in a worker thread,
  and `TimeoutError` is raised if it has not finished in time. The query
  itself is not cancelled on the database side.

`set_limit(n)` on `InformationSchema` and `PostgresReader` appends
`LIMIT n` to their queries.

## What this package does not do

- It opens no connections and ships no database drivers. You supply `db`.
- It has no command-line tool and no interactive completion.
- Apart from the privilege strings, it does not format tables or
  descriptions for display. It returns records only.

## Running the tests

```
pip install -e .[test]
pytest
```