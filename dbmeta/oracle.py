"""Metadata reader for Oracle databases, built on the data dictionary views."""

from __future__ import annotations

from typing import Any, Mapping

from dbmeta.readers import Database, LoggingReader
from dbmeta.records import (
    Catalog,
    CatalogSet,
    Column,
    ColumnSet,
    Function,
    FunctionColumn,
    FunctionColumnSet,
    FunctionSet,
    Index,
    IndexColumn,
    IndexColumnSet,
    IndexSet,
    Schema,
    SchemaSet,
    Table,
    TableSet,
)
from dbmeta.resultset import Bool, Filter, NoRowsError

_SYSTEM_SCHEMAS = "'CTXSYS', 'FLOWS_FILES', 'MDSYS', 'OUTLN', 'SYS', 'SYSTEM', 'XDB', 'XS$NULL'"


def _flag(value: Any) -> Bool | str:
    try:
        return Bool(value)
    except ValueError:
        return value


def _where(sql: str, conds: list[str]) -> str:
    if conds:
        sql += " WHERE " + " AND ".join(conds)
    return sql


class OracleReader(LoggingReader):
    """Reads catalogs, schemas, tables, columns, functions and indexes of an Oracle database."""

    def __init__(self, db: Database, **kwargs: Any) -> None:
        kwargs.pop("limit", None)  # row limits are not supported here
        super().__init__(db, **kwargs)
        self.system_schemas = _SYSTEM_SCHEMAS

    def _rows(self, sql: str, vals: list[Any]) -> list[tuple[Any, ...]]:
        try:
            return self.query(sql, *vals)
        except NoRowsError:
            return []

    def conditions(self, filter: Filter, formats: Mapping[str, str]) -> tuple[list[str], list[Any]]:
        """Build WHERE conditions and bind values from a filter.

        formats maps schema, not_schemas, parent, name and types to condition templates.
        """
        base = 1
        conds: list[str] = []
        vals: list[Any] = []
        schema_fmt = formats.get("schema", "")
        not_schemas_fmt = formats.get("not_schemas", "")
        parent_fmt = formats.get("parent", "")
        name_fmt = formats.get("name", "")
        types_fmt = formats.get("types", "")

        if filter.schema and schema_fmt:
            vals.append(filter.schema.upper())
            conds.append(schema_fmt % f":{base}")
            base += 1
        if not filter.with_system and not_schemas_fmt:
            conds.append(not_schemas_fmt % self.system_schemas)
        if filter.only_visible and schema_fmt:
            conds.append(schema_fmt % "user")
        if filter.parent and parent_fmt:
            vals.append(filter.parent.upper())
            conds.append(parent_fmt % base)
            base += 1
        if filter.name and name_fmt:
            vals.append(filter.name.upper())
            conds.append(name_fmt % base)
            base += 1
        if filter.types and types_fmt:
            holders = []
            for kind in filter.types:
                vals.append(kind.upper())
                holders.append(f":{base}")
                base += 1
            conds.append(types_fmt % ", ".join(holders))
        return conds, vals

    def catalogs(self, f: Filter | None = None) -> CatalogSet:
        sql = """SELECT
  UPPER(Value) AS catalog
FROM v$parameter o
WHERE name = 'db_name'
UNION ALL
SELECT
  db_link AS catalog
FROM dba_db_links
ORDER BY catalog
"""
        return CatalogSet(Catalog(catalog=row[0]) for row in self._rows(sql, []))

    def schemas(self, f: Filter) -> SchemaSet:
        sql = """SELECT
  username
FROM all_users
"""
        conds, vals = self.conditions(
            f, {"name": "username LIKE :%d", "not_schemas": "username NOT IN (%s)"}
        )
        sql = _where(sql, conds) + "\nORDER BY username"
        return SchemaSet(Schema(schema=row[0]) for row in self._rows(sql, vals))

    def tables(self, f: Filter) -> TableSet:
        sql = """SELECT
o.owner AS table_schem,
o.object_name AS table_name,
o.object_type AS table_type
FROM all_objects o
"""
        conds, vals = self.conditions(
            f,
            {
                "schema": "o.owner LIKE %s",
                "not_schemas": "o.owner NOT IN (%s)",
                "name": "o.object_name LIKE :%d",
                "types": "o.object_type IN (%s)",
            },
        )
        sql = _where(sql, conds)
        if "SYNONYM" in f.types:
            sql += """
UNION ALL
SELECT
  s.owner AS table_schem,
  s.synonym_name AS table_name,
  'SYNONYM' AS table_type
FROM all_synonyms s
"""
            syn_conds, syn_vals = self.conditions(
                f,
                {
                    "schema": "s.owner LIKE %s",
                    "not_schemas": "s.owner NOT IN (%s)",
                    "name": "s.synonym_name LIKE :%d",
                },
            )
            vals.extend(syn_vals)
            sql = _where(sql, syn_conds)
        sql += "\nORDER BY table_schem, table_name, table_type"
        return TableSet(
            Table(schema=schema, name=name, type=kind)
            for schema, name, kind in self._rows(sql, vals)
        )

    def columns(self, f: Filter) -> ColumnSet:
        sql = """SELECT
  c.owner,
  c.table_name,
  c.column_name,
  c.column_id AS ordinal_position,
  c.data_type,
  CASE c.nullable
    WHEN 'Y' THEN 'YES'
    ELSE  'NO'  END AS nullable,
  COALESCE(c.data_length, c.data_precision, 0),
  COALESCE(c.data_scale, 0),
  CASE c.data_type
           WHEN 'FLOAT'  THEN  2
           WHEN 'NUMBER' THEN 10
  ELSE  0  END AS num_prec_radix,
  COALESCE(c.char_col_decl_length, 0) as char_octet_length
FROM all_tab_columns c
"""
        conds, vals = self.conditions(
            f,
            {
                "schema": "c.owner LIKE %s",
                "not_schemas": "c.owner NOT IN (%s)",
                "parent": "c.table_name LIKE :%d",
            },
        )
        sql = _where(sql, conds) + "\nORDER BY c.owner, c.table_name, c.column_id"
        return ColumnSet(
            Column(
                schema=schema,
                table=table,
                name=name,
                ordinal_position=int(position),
                data_type=data_type,
                is_nullable=_flag(nullable),
                column_size=int(size),
                decimal_digits=int(digits),
                num_prec_radix=int(radix),
                char_octet_length=int(octet),
            )
            for schema, table, name, position, data_type, nullable, size, digits, radix, octet in self._rows(
                sql, vals
            )
        )

    def functions(self, f: Filter) -> FunctionSet:
        sql = """SELECT
  decode (b.object_type,'PACKAGE',CONCAT(CONCAT(b.object_name,'.'), a.object_name)
         ,b.object_name) as specific_name,
  b.owner   as procedure_schem,
  decode (b.object_type,'PACKAGE',CONCAT(CONCAT(b.object_name,'.'), a.object_name)
         ,b.object_name) as procedure_name,
  decode (b.object_type,'PACKAGE',decode(a.position,0,2,1,1,0),
          decode(b.object_type,'PROCEDURE',1,'FUNCTION',2,0)) as procedure_type
FROM all_arguments a
JOIN all_objects b ON b.object_id = a.object_id AND a.sequence  = 1
"""
        conds, vals = self.conditions(
            f,
            {
                "schema": "b.owner LIKE %s",
                "not_schemas": "b.owner NOT IN (%s)",
                "name": "b.object_name LIKE :%d",
                "types": "b.object_type IN (%s)",
            },
        )
        conds.append(
            "(b.object_type = 'PROCEDURE' OR b.object_type = 'FUNCTION' OR b.object_type = 'PACKAGE')"
        )
        sql = _where(sql, conds) + "\nORDER BY procedure_schem, procedure_name, procedure_type"
        return FunctionSet(
            Function(specific_name=specific, schema=schema, name=name, type=str(kind))
            for specific, schema, name, kind in self._rows(sql, vals)
        )

    def function_columns(self, f: Filter) -> FunctionColumnSet:
        sql = """SELECT
     a.owner   as procedure_schem,
     decode (b.object_type,'PACKAGE',CONCAT(CONCAT(b.object_name,'.'),a.object_name),
             b.object_name) as procedure_name,
     decode(a.position,0,'RETURN_VALUE',a.argument_name) as column_name,
     a.position       as ordinal_position,
     decode(a.position,0,5,decode(a.in_out,'IN',1,'IN/OUT',2,'OUT',4)) as column_type,
     a.data_type      as type_name,
     COALESCE(a.data_length, a.data_precision, 0) as column_size,
     COALESCE(a.data_scale, 0) as decimal_digits,
     COALESCE(a.radix, 0) as num_prec_radix
FROM all_objects b
JOIN all_arguments a ON b.object_id = a.object_id AND a.data_level = 0
"""
        conds, vals = self.conditions(
            f,
            {
                "schema": "a.owner LIKE %s",
                "not_schemas": "a.owner NOT IN (%s)",
                "parent": "b.object_name LIKE :%d",
            },
        )
        conds.append("b.object_type = 'PROCEDURE' OR b.object_type = 'FUNCTION'")
        sql = _where(sql, conds) + "\nORDER BY procedure_schem, procedure_name, ordinal_position"
        return FunctionColumnSet(
            FunctionColumn(
                schema=schema,
                function_name=function,
                name=name,
                ordinal_position=int(position),
                type=str(kind),
                data_type=data_type,
                column_size=int(size),
                decimal_digits=int(digits),
                num_prec_radix=int(radix),
            )
            for schema, function, name, position, kind, data_type, size, digits, radix in self._rows(
                sql, vals
            )
        )

    def indexes(self, f: Filter) -> IndexSet:
        sql = """SELECT
  o.owner,
  o.table_name,
  o.index_name,
  decode(o.uniqueness,'UNIQUE','NO','YES')
FROM all_indexes o
"""
        conds, vals = self.conditions(
            f,
            {
                "schema": "o.owner LIKE %s",
                "not_schemas": "o.owner NOT IN (%s)",
                "parent": "o.table_name LIKE :%d",
                "name": "o.index_name LIKE :%d",
            },
        )
        sql = _where(sql, conds) + "\nORDER BY o.owner, o.table_name, o.index_name"
        return IndexSet(
            Index(schema=schema, table=table, name=name, is_unique=_flag(unique))
            for schema, table, name, unique in self._rows(sql, vals)
        )

    def index_columns(self, f: Filter) -> IndexColumnSet:
        sql = """SELECT
  o.owner,
  o.table_name,
  o.index_name,
  b.column_name,
  b.column_position
FROM all_indexes o
JOIN all_ind_columns b ON o.owner = b.index_owner AND o.index_name = b.index_name
"""
        conds, vals = self.conditions(
            f,
            {
                "schema": "o.owner LIKE %s",
                "not_schemas": "o.owner NOT IN (%s)",
                "parent": "o.table_name LIKE :%d",
                "name": "o.index_name LIKE :%d",
            },
        )
        sql = _where(sql, conds) + "\nORDER BY o.owner, o.table_name, o.index_name, b.column_position"
        return IndexColumnSet(
            IndexColumn(
                schema=schema,
                table=table,
                index_name=index,
                name=name,
                ordinal_position=int(position),
            )
            for schema, table, index, name, position in self._rows(sql, vals)
        )


def new_reader(db: Database, **kwargs: Any) -> OracleReader:
    """Create an Oracle metadata reader over db; kwargs configure logging, dry runs and timeouts."""
    return OracleReader(db, **kwargs)