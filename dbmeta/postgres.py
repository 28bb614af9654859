"""Metadata reader for PostgreSQL, combining information_schema with the pg_catalog views."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from dbmeta.infoschema.queries import ClauseName
from dbmeta.infoschema.reader import new as new_information_schema
from dbmeta.readers import Database, LoggingReader, PluginReader
from dbmeta.records import (
    CatalogSet,
    Column,
    ColumnStat,
    ColumnStatSet,
    Index,
    IndexColumn,
    IndexColumnSet,
    IndexSet,
    Table,
    TableSet,
    Trigger,
    TriggerSet,
)
from dbmeta.resultset import Bool, Filter, NoRowsError

CATALOG_COLUMNS = ["Catalog", "Owner", "Encoding", "Collate", "Ctype", "Access privileges"]

_TABLE_KINDS: dict[str, tuple[str, ...]] = {
    "TABLE": ("r", "p", "s", "f"),
    "VIEW": ("v",),
    "MATERIALIZED VIEW": ("m",),
    "SEQUENCE": ("S",),
}

_SIZE_COLUMN = (
    "COALESCE(character_maximum_length, numeric_precision, datetime_precision, "
    "interval_precision, 0)"
)


def data_type_formatter(column: Column) -> str:
    """Spell a column's data type with its size, the way PostgreSQL shows it."""
    kind = column.data_type
    size = column.column_size
    if kind in ("bit", "character"):
        return f"{kind}({size})"
    if kind in ("bit varying", "character varying"):
        return f"{kind}({size})" if size else kind
    if kind == "numeric":
        return f"numeric({size},{column.decimal_digits})" if size else kind
    if kind == "time without time zone":
        return f"time({size}) without time zone"
    if kind == "time with time zone":
        return f"time({size}) with time zone"
    if kind == "timestamp without time zone":
        return f"timestamp({size}) without time zone"
    if kind == "timestamp with time zone":
        return f"timestamp({size}) with time zone"
    return kind


@dataclass
class PostgresCatalog:
    """A database as listed by PostgreSQL, with owner, encoding and access details."""

    catalog: str = ""
    owner: str = ""
    encoding: str = ""
    collate: str = ""
    ctype: str = ""
    access_privileges: str = ""

    def values(self) -> list[Any]:
        return [
            self.catalog,
            self.owner,
            self.encoding,
            self.collate,
            self.ctype,
            self.access_privileges,
        ]


def _flag(value: Any) -> Bool | str:
    try:
        return Bool(value)
    except ValueError:
        return value


def _split_array_literal(text: str) -> list[str]:
    body = text.strip()
    if body.startswith("{") and body.endswith("}"):
        body = body[1:-1]
    if not body:
        return []
    items: list[str] = []
    current: list[str] = []
    quoted = escaped = False
    for char in body:
        if escaped:
            current.append(char)
            escaped = False
        elif char == "\\" and quoted:
            escaped = True
        elif char == '"':
            quoted = not quoted
        elif char == "," and not quoted:
            items.append("".join(current))
            current = []
        else:
            current.append(char)
    items.append("".join(current))
    return items


def _array(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, str):
        return _split_array_literal(value)
    return list(value)


class PostgresReader(LoggingReader):
    """Reads catalogs, tables, column statistics, indexes and triggers from pg_catalog."""

    def __init__(self, db: Database, **kwargs: Any) -> None:
        limit = kwargs.pop("limit", 0)
        super().__init__(db, **kwargs)
        self.limit = int(limit or 0)

    def set_limit(self, limit: int) -> None:
        """Limit the number of rows every query returns; 0 means no limit."""
        self.limit = limit

    def _query(self, sql: str, conds: list[str], order: str, *vals: Any) -> list[tuple[Any, ...]]:
        if conds:
            sql += "\nWHERE " + " AND ".join(conds)
        if order:
            sql += "\nORDER BY " + order
        if self.limit:
            sql += f"\nLIMIT {self.limit}"
        return self.query(sql, *vals)

    def catalogs(self, f: Filter | None = None) -> CatalogSet:
        sql = """SELECT d.datname as "Name",
       pg_catalog.pg_get_userbyid(d.datdba) as "Owner",
       pg_catalog.pg_encoding_to_char(d.encoding) as "Encoding",
       d.datcollate as "Collate",
       d.datctype as "Ctype",
       COALESCE(pg_catalog.array_to_string(d.datacl, E'\\n'),'') AS "Access privileges"
FROM pg_catalog.pg_database d"""
        results = [
            PostgresCatalog(
                catalog=name,
                owner=owner,
                encoding=encoding,
                collate=collate,
                ctype=ctype,
                access_privileges=access,
            )
            for name, owner, encoding, collate, ctype, access in self._query(sql, [], "1")
        ]
        catalogs = CatalogSet(results)
        catalogs.set_columns(CATALOG_COLUMNS)
        return catalogs

    def tables(self, f: Filter) -> TableSet:
        sql = """SELECT n.nspname as "Schema",
  c.relname as "Name",
  CASE c.relkind WHEN 'r' THEN 'table' WHEN 'v' THEN 'view' WHEN 'm' THEN 'materialized view' WHEN 'i' THEN 'index' WHEN 'S' THEN 'sequence' WHEN 's' THEN 'special' WHEN 'f' THEN 'foreign table' WHEN 'p' THEN 'partitioned table' WHEN 'I' THEN 'partitioned index' ELSE 'unknown' END as "Type",
  COALESCE((c.reltuples / NULLIF(c.relpages, 0)) * (pg_catalog.pg_relation_size(c.oid) / current_setting('block_size')::int), 0)::bigint as "Rows",
  pg_catalog.pg_size_pretty(pg_catalog.pg_table_size(c.oid)) as "Size",
  COALESCE(pg_catalog.obj_description(c.oid, 'pg_class'), '') as "Description"
FROM pg_catalog.pg_class c
     LEFT JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
"""
        conds = ["n.nspname !~ '^pg_toast' AND c.relkind != 'c'"]
        vals: list[Any] = []
        if f.only_visible:
            conds.append("pg_catalog.pg_table_is_visible(c.oid)")
        if not f.with_system:
            conds.append("n.nspname NOT IN ('pg_catalog', 'information_schema')")
        if f.schema:
            vals.append(f.schema)
            conds.append(f"n.nspname LIKE ${len(vals)}")
        if f.name:
            vals.append(f.name)
            conds.append(f"c.relname LIKE ${len(vals)}")
        if f.types:
            holders = ["''"]
            for kind in f.types:
                for relkind in _TABLE_KINDS.get(kind, ()):
                    vals.append(relkind)
                    holders.append(f"${len(vals)}")
            conds.append(f"c.relkind IN ({', '.join(holders)})")
        try:
            rows = self._query(sql, conds, "1, 3, 2", *vals)
        except NoRowsError:
            rows = []
        return TableSet(
            Table(schema=schema, name=name, type=kind, rows=int(count), size=size, comment=comment)
            for schema, name, kind, count, size, comment in rows
        )

    def column_stats(self, f: Filter) -> ColumnStatSet:
        tables = self.tables(Filter(schema=f.schema, name=f.parent, with_system=True))
        first = next(iter(tables), None)
        row_count = first.rows if first is not None else 0

        sql = """
SELECT
  n.nspname,
  c.relname,
  a.attname,
  COALESCE(s.avg_width, 0),
  COALESCE(s.null_frac, 0.0),
  COALESCE(CASE WHEN n_distinct >= 0 THEN n_distinct ELSE (-n_distinct * $1) END::bigint, 0) AS n_distinct,
  COALESCE((histogram_bounds::text::text[])[1], ''),
  COALESCE((histogram_bounds::text::text[])[array_length(histogram_bounds::text::text[], 1)], ''),
  most_common_vals::text::text[],
  most_common_freqs::text::text[]
FROM pg_catalog.pg_namespace n
JOIN pg_catalog.pg_class c ON c.relnamespace = n.oid
JOIN pg_catalog.pg_attribute a ON a.attrelid = c.oid AND a.attnum > 0
LEFT JOIN pg_catalog.pg_stats s ON n.nspname = s.schemaname AND c.relname = s.tablename AND a.attname = s.attname
"""
        conds: list[str] = []
        vals: list[Any] = [row_count]
        if f.schema:
            vals.append(f.schema)
            conds.append(f"n.nspname LIKE ${len(vals)}")
        if f.parent:
            vals.append(f.parent)
            conds.append(f"c.relname LIKE ${len(vals)}")
        if f.name:
            vals.append(f.name)
            conds.append(f"a.attname LIKE ${len(vals)}")
        return ColumnStatSet(
            ColumnStat(
                schema=schema,
                table=table,
                name=name,
                avg_width=int(width),
                null_frac=float(null_frac),
                num_distinct=int(distinct),
                min=minimum,
                max=maximum,
                top_n=[str(v) for v in _array(top_n)],
                top_n_freqs=[float(v) for v in _array(freqs)],
            )
            for schema, table, name, width, null_frac, distinct, minimum, maximum, top_n, freqs in self._query(
                sql, conds, "a.attnum", *vals
            )
        )

    def indexes(self, f: Filter) -> IndexSet:
        sql = """
SELECT
  'postgres' as "Catalog",
  n.nspname as "Schema",
  c2.relname as "Table",
  c.relname as "Name",
  CASE i.indisprimary WHEN TRUE THEN 'YES' ELSE 'NO' END,
  CASE i.indisunique WHEN TRUE THEN 'YES' ELSE 'NO' END,
  COALESCE(am.amname, 
  	CASE c.relkind 
		WHEN 'i' THEN 'index' 
		WHEN 'I' THEN 'partitioned index' 
	END
   ) as "Type"
FROM pg_catalog.pg_class c
     LEFT JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
     LEFT JOIN pg_catalog.pg_index i ON i.indexrelid = c.oid
     LEFT JOIN pg_catalog.pg_class c2 ON i.indrelid = c2.oid
     LEFT JOIN pg_am am ON am.oid=c.relam"""
        conds = ["c.relkind IN ('i','I','')", "n.nspname !~ '^pg_toast'"]
        if f.only_visible:
            conds.append("pg_catalog.pg_table_is_visible(c.oid)")
        vals: list[Any] = []
        if not f.with_system:
            conds.append("n.nspname NOT IN ('pg_catalog', 'information_schema')")
        if f.schema:
            vals.append(f.schema)
            conds.append(f"n.nspname LIKE ${len(vals)}")
        if f.parent:
            vals.append(f.parent)
            conds.append(f"c2.relname LIKE ${len(vals)}")
        if f.name:
            vals.append(f.name)
            conds.append(f"c.relname LIKE ${len(vals)}")
        # The fifth and sixth columns are read as unique and primary, in that order.
        return IndexSet(
            Index(
                catalog=catalog,
                schema=schema,
                table=table,
                name=name,
                is_unique=_flag(first_flag),
                is_primary=_flag(second_flag),
                type=kind or "",
            )
            for catalog, schema, table, name, first_flag, second_flag, kind in self._query(
                sql, conds, "1, 2, 4", *vals
            )
        )

    def index_columns(self, f: Filter) -> IndexColumnSet:
        sql = """
SELECT
  'postgres' as "Catalog",
  n.nspname as "Schema",
  c2.relname as "Table",
  c.relname as "IndexName",
  a.attname AS "Name",
  pg_catalog.format_type(a.atttypid, a.atttypmod) AS "DataType",
  a.attnum AS "OrdinalPosition"
FROM pg_catalog.pg_class c
     JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
     JOIN pg_catalog.pg_index i ON i.indexrelid = c.oid
     JOIN pg_catalog.pg_class c2 ON i.indrelid = c2.oid
     JOIN pg_catalog.pg_attribute a ON c.oid = a.attrelid
"""
        conds = [
            "c.relkind IN ('i','I','')",
            "n.nspname <> 'pg_catalog'",
            "n.nspname <> 'information_schema'",
            "n.nspname !~ '^pg_toast'",
            "a.attnum > 0",
            "NOT a.attisdropped",
        ]
        if f.only_visible:
            conds.append("pg_catalog.pg_table_is_visible(c.oid)")
        vals: list[Any] = []
        if not f.with_system:
            conds.append("n.nspname NOT IN ('pg_catalog', 'pg_toast', 'information_schema')")
        if f.schema:
            vals.append(f.schema)
            conds.append(f"n.nspname LIKE ${len(vals)}")
        if f.parent:
            vals.append(f.parent)
            conds.append(f"c2.relname LIKE ${len(vals)}")
        if f.name:
            vals.append(f.name)
            conds.append(f"c.relname LIKE ${len(vals)}")
        return IndexColumnSet(
            IndexColumn(
                catalog=catalog,
                schema=schema,
                table=table,
                index_name=index,
                name=name,
                data_type=data_type,
                ordinal_position=int(position),
            )
            for catalog, schema, table, index, name, data_type, position in self._query(
                sql, conds, "1, 2, 3, 4, 7", *vals
            )
        )

    def triggers(self, f: Filter) -> TriggerSet:
        sql = """SELECT
	n.nspname,
	c.relname,
    t.tgname, 
    pg_catalog.pg_get_triggerdef(t.oid, true)
FROM 
    pg_catalog.pg_trigger t 
    JOIN pg_catalog.pg_class c ON c.oid = t.tgrelid
	LEFT JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace"""
        conds = [
            """(
	NOT t.tgisinternal OR (t.tgisinternal AND t.tgenabled = 'D') 
			OR 
				EXISTS (SELECT 1 FROM pg_catalog.pg_depend WHERE objid = t.oid 
			AND 
				refclassid = 'pg_catalog.pg_trigger'::pg_catalog.regclass)
	)"""
        ]
        vals: list[Any] = []
        if f.schema:
            vals.append(f.schema)
            conds.append(f"n.nspname LIKE ${len(vals)}")
        if f.parent:
            vals.append(f.parent)
            conds.append(f"c.relname LIKE ${len(vals)}")
        if f.name:
            vals.append(f.name)
            conds.append(f"t.tgname LIKE ${len(vals)}")
        return TriggerSet(
            Trigger(schema=schema, table=table, name=name, definition=definition)
            for schema, table, name, definition in self._query(sql, conds, "t.tgname", *vals)
        )


_new_information_schema = new_information_schema(
    has_indexes=False,
    clauses={
        ClauseName.COLUMNS_COLUMN_SIZE: _SIZE_COLUMN,
        ClauseName.FUNCTION_COLUMNS_COLUMN_SIZE: _SIZE_COLUMN,
    },
    system_schemas=["pg_catalog", "pg_toast", "information_schema"],
    current_schema="CURRENT_SCHEMA",
    data_type_formatter=data_type_formatter,
)


def new_reader(db: Database, **kwargs: Any) -> PluginReader:
    """Create a PostgreSQL metadata reader over db.

    kwargs configure logging, dry runs, timeouts and row limits for both underlying readers.
    """
    return PluginReader(_new_information_schema(db, **kwargs), PostgresReader(db, **kwargs))