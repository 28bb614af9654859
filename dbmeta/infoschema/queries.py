"""SQL text and bind values for metadata queries against information_schema views."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable

from dbmeta.resultset import Filter, NotSupportedError

Query = tuple[str, list[Any]]


def dollar_placeholder(n: int) -> str:
    """Numbered placeholder of the form $n."""
    return f"${n}"


def question_placeholder(n: int) -> str:
    """Positional placeholder "?" for bind parameter n; parameters are numbered from 1."""
    if n < 1:
        raise ValueError(f"bind parameters are numbered from 1, got {n}")
    return "?"


class ClauseName(str, enum.Enum):
    """Names of column expressions that differ between databases."""

    COLUMNS_DATA_TYPE = "columns.data_type"
    COLUMNS_COLUMN_SIZE = "columns.column_size"
    COLUMNS_NUMERIC_SCALE = "columns.numeric_scale"
    COLUMNS_NUMERIC_PREC_RADIX = "columns.numeric_precision_radix"
    COLUMNS_CHAR_OCTET_LENGTH = "columns.character_octet_length"

    FUNCTION_COLUMNS_COLUMN_SIZE = "function_columns.column_size"
    FUNCTION_COLUMNS_NUMERIC_SCALE = "function_columns.numeric_scale"
    FUNCTION_COLUMNS_NUMERIC_PREC_RADIX = "function_columns.numeric_precision_radix"
    FUNCTION_COLUMNS_CHAR_OCTET_LENGTH = "function_columns.character_octet_length"

    FUNCTIONS_SECURITY_TYPE = "functions.security_type"

    CONSTRAINT_IS_DEFERRABLE = "constraint_columns.is_deferrable"
    CONSTRAINT_INITIALLY_DEFERRED = "constraint_columns.initially_deferred"
    CONSTRAINT_JOIN_COND = "constraint_join.fk"

    SEQUENCE_COLUMNS_INCREMENT = "sequence_columns.increment"

    PRIVILEGES_GRANTOR = "privileges.grantor"


DEFAULT_CLAUSES: dict[ClauseName, str] = {
    ClauseName.COLUMNS_DATA_TYPE: "data_type",
    ClauseName.COLUMNS_COLUMN_SIZE: "COALESCE(character_maximum_length, numeric_precision, datetime_precision, 0)",
    ClauseName.COLUMNS_NUMERIC_SCALE: "COALESCE(numeric_scale, 0)",
    ClauseName.COLUMNS_NUMERIC_PREC_RADIX: "COALESCE(numeric_precision_radix, 10)",
    ClauseName.COLUMNS_CHAR_OCTET_LENGTH: "COALESCE(character_octet_length, 0)",
    ClauseName.FUNCTION_COLUMNS_COLUMN_SIZE: "COALESCE(character_maximum_length, numeric_precision, datetime_precision, 0)",
    ClauseName.FUNCTION_COLUMNS_NUMERIC_SCALE: "COALESCE(numeric_scale, 0)",
    ClauseName.FUNCTION_COLUMNS_NUMERIC_PREC_RADIX: "COALESCE(numeric_precision_radix, 10)",
    ClauseName.FUNCTION_COLUMNS_CHAR_OCTET_LENGTH: "COALESCE(character_octet_length, 0)",
    ClauseName.FUNCTIONS_SECURITY_TYPE: "security_type",
    ClauseName.CONSTRAINT_IS_DEFERRABLE: "t.is_deferrable",
    ClauseName.CONSTRAINT_INITIALLY_DEFERRED: "t.initially_deferred",
    ClauseName.SEQUENCE_COLUMNS_INCREMENT: "increment",
    ClauseName.PRIVILEGES_GRANTOR: "grantor",
}


@dataclass(frozen=True)
class Formats:
    """Condition templates, each with one %s slot; an empty template disables that condition."""

    catalog: str = ""
    schema: str = ""
    not_schemas: str = ""
    parent: str = ""
    reference: str = ""
    name: str = ""
    types: str = ""


def _select(columns: list[str], source: str) -> str:
    return "SELECT\n  " + ",\n  ".join(columns) + f" FROM {source}\n"


def _where(sql: str, conds: list[str]) -> str:
    if conds:
        sql += " WHERE " + " AND ".join(conds)
    return sql


@dataclass
class QueryBuilder:
    """Builds information_schema queries; each query method returns (sql, bind values)."""

    placeholder: Callable[[int], str] = dollar_placeholder
    clauses: dict[ClauseName, str] = field(default_factory=dict)
    system_schemas: list[str] = field(default_factory=lambda: ["information_schema"])
    current_schema: str = ""
    limit: int = 0
    has_functions: bool = True
    has_sequences: bool = True
    has_indexes: bool = True
    has_constraints: bool = True
    has_check_constraints: bool = True
    has_table_privileges: bool = True
    has_column_privileges: bool = True
    has_usage_privileges: bool = True

    def __post_init__(self) -> None:
        self.clauses = {**DEFAULT_CLAUSES, **self.clauses}

    def _clause(self, name: ClauseName) -> str:
        return self.clauses.get(name, "")

    def conditions(self, base_param: int, filter: Filter, formats: Formats) -> tuple[list[str], list[Any]]:
        """Build conditions and bind values, numbering placeholders from base_param."""
        conds: list[str] = []
        vals: list[Any] = []
        param = base_param

        def bind(value: Any) -> str:
            nonlocal param
            vals.append(value)
            holder = self.placeholder(param)
            param += 1
            return holder

        if filter.catalog and formats.catalog:
            conds.append(formats.catalog % bind(filter.catalog))
        if filter.schema and formats.schema:
            conds.append(formats.schema % bind(filter.schema))
        if not filter.with_system and formats.not_schemas and self.system_schemas:
            holders = [bind(s) for s in self.system_schemas if s != filter.schema]
            if holders:
                conds.append(formats.not_schemas % ", ".join(holders))
        if filter.only_visible and formats.schema and self.current_schema:
            conds.append(formats.schema % self.current_schema)
        if filter.parent and formats.parent:
            conds.append(formats.parent % bind(filter.parent))
        if filter.reference and formats.reference:
            conds.append(formats.reference % bind(filter.reference))
        if filter.name and formats.name:
            conds.append(formats.name % bind(filter.name))
        if filter.types and formats.types:
            holders = [bind(t) for t in filter.types]
            conds.append(formats.types % ", ".join(holders))
        return conds, vals

    def finish(self, sql: str, conds: list[str], order: str) -> str:
        """Append WHERE, ORDER BY and LIMIT clauses."""
        if conds:
            sql += "\nWHERE " + " AND ".join(conds)
        if order:
            sql += "\nORDER BY " + order
        if self.limit:
            sql += f"\nLIMIT {self.limit}"
        return sql

    def columns(self, f: Filter) -> Query:
        cols = [
            "table_catalog",
            "table_schema",
            "table_name",
            "column_name",
            "ordinal_position",
            self._clause(ClauseName.COLUMNS_DATA_TYPE),
            "COALESCE(column_default, '')",
            "COALESCE(is_nullable, '') AS is_nullable",
            self._clause(ClauseName.COLUMNS_COLUMN_SIZE),
            self._clause(ClauseName.COLUMNS_NUMERIC_SCALE),
            self._clause(ClauseName.COLUMNS_NUMERIC_PREC_RADIX),
            self._clause(ClauseName.COLUMNS_CHAR_OCTET_LENGTH),
        ]
        sql = _select(cols, "information_schema.columns")
        conds, vals = self.conditions(
            1,
            f,
            Formats(
                catalog="table_catalog LIKE %s",
                schema="table_schema LIKE %s",
                not_schemas="table_schema NOT IN (%s)",
                parent="table_name LIKE %s",
            ),
        )
        order = "table_catalog, table_schema, table_name, ordinal_position"
        return self.finish(sql, conds, order), vals

    def tables(self, f: Filter) -> Query:
        sql = """SELECT
  table_catalog,
  table_schema,
  table_name,
  table_type
FROM information_schema.tables
"""
        conds, vals = self.conditions(
            1,
            f,
            Formats(
                catalog="table_catalog LIKE %s",
                schema="table_schema LIKE %s",
                not_schemas="table_schema NOT IN (%s)",
                name="table_name LIKE %s",
                types="table_type IN (%s)",
            ),
        )
        sql = _where(sql, conds)
        if self.has_sequences and "SEQUENCE" in f.types:
            sql += """
UNION ALL
SELECT
  sequence_catalog AS table_catalog,
  sequence_schema AS table_schema,
  sequence_name AS table_name,
  'SEQUENCE' AS table_type
FROM information_schema.sequences
"""
            seq_conds, seq_vals = self.conditions(
                len(vals) + 1,
                f,
                Formats(
                    catalog="sequence_catalog LIKE %s",
                    schema="sequence_schema LIKE %s",
                    not_schemas="sequence_schema NOT IN (%s)",
                    name="sequence_name LIKE %s",
                ),
            )
            vals.extend(seq_vals)
            sql = _where(sql, seq_conds)
        return self.finish(sql, [], "table_catalog, table_schema, table_type, table_name"), vals

    def schemas(self, f: Filter) -> Query:
        sql = """SELECT
  schema_name,
  catalog_name
FROM information_schema.schemata
"""
        conds, vals = self.conditions(
            1,
            f,
            Formats(
                catalog="catalog_name LIKE %s",
                name="schema_name LIKE %s",
                not_schemas="schema_name NOT IN (%s)",
            ),
        )
        return self.finish(sql, conds, "catalog_name, schema_name"), vals

    def functions(self, f: Filter) -> Query:
        if not self.has_functions:
            raise NotSupportedError()
        cols = [
            "specific_name",
            "routine_catalog",
            "routine_schema",
            "routine_name",
            "COALESCE(routine_type, '')",
            "COALESCE(data_type, '')",
            "routine_definition",
            "COALESCE(external_language, routine_body) AS language",
            "is_deterministic",
            self._clause(ClauseName.FUNCTIONS_SECURITY_TYPE),
        ]
        sql = _select(cols, "information_schema.routines")
        conds, vals = self.conditions(
            1,
            f,
            Formats(
                catalog="routine_catalog LIKE %s",
                schema="routine_schema LIKE %s",
                not_schemas="routine_schema NOT IN (%s)",
                name="routine_name LIKE %s",
                types="routine_type IN (%s)",
            ),
        )
        order = "routine_catalog, routine_schema, routine_name, COALESCE(routine_type, '')"
        return self.finish(sql, conds, order), vals

    def function_columns(self, f: Filter) -> Query:
        if not self.has_functions:
            raise NotSupportedError()
        cols = [
            "specific_catalog",
            "specific_schema",
            "specific_name",
            "COALESCE(parameter_name, '')",
            "ordinal_position",
            "COALESCE(parameter_mode, '')",
            "COALESCE(data_type, '')",
            self._clause(ClauseName.FUNCTION_COLUMNS_COLUMN_SIZE),
            self._clause(ClauseName.FUNCTION_COLUMNS_NUMERIC_SCALE),
            self._clause(ClauseName.FUNCTION_COLUMNS_NUMERIC_PREC_RADIX),
            self._clause(ClauseName.FUNCTION_COLUMNS_CHAR_OCTET_LENGTH),
        ]
        sql = _select(cols, "information_schema.parameters")
        conds, vals = self.conditions(
            1,
            f,
            Formats(
                catalog="specific_catalog LIKE %s",
                schema="specific_schema LIKE %s",
                not_schemas="specific_schema NOT IN (%s)",
                parent="specific_name LIKE %s",
            ),
        )
        order = "specific_catalog, specific_schema, specific_name, ordinal_position, COALESCE(parameter_name, '')"
        return self.finish(sql, conds, order), vals

    def indexes(self, f: Filter) -> Query:
        if not self.has_indexes:
            raise NotSupportedError()
        sql = """SELECT
  table_catalog,
  index_schema,
  table_name,
  index_name,
  CASE WHEN non_unique = 0 THEN 'YES' ELSE 'NO' END AS is_unique,
  CASE WHEN index_name = 'PRIMARY' THEN 'YES' ELSE 'NO' END AS is_primary,
  index_type
FROM information_schema.statistics
"""
        conds, vals = self.conditions(
            1,
            f,
            Formats(
                catalog="table_catalog LIKE %s",
                schema="index_schema LIKE %s",
                not_schemas="index_schema NOT IN (%s)",
                parent="table_name LIKE %s",
                name="index_name LIKE %s",
            ),
        )
        sql = _where(sql, conds)
        sql += """
GROUP BY table_catalog, index_schema, table_name, index_name,
  CASE WHEN non_unique = 0 THEN 'YES' ELSE 'NO' END,
  CASE WHEN index_name = 'PRIMARY' THEN 'YES' ELSE 'NO' END,
  index_type"""
        return self.finish(sql, [], "table_catalog, index_schema, table_name, index_name"), vals

    def index_columns(self, f: Filter) -> Query:
        if not self.has_indexes:
            raise NotSupportedError()
        sql = """SELECT
  i.table_catalog,
  i.table_schema,
  i.table_name,
  i.index_name,
  i.column_name,
  c.data_type,
  i.seq_in_index

FROM information_schema.statistics i
JOIN information_schema.columns c ON
  i.table_catalog = c.table_catalog AND
  i.table_schema = c.table_schema AND
  i.table_name = c.table_name AND
  i.column_name = c.column_name
"""
        conds, vals = self.conditions(
            1,
            f,
            Formats(
                catalog="i.table_catalog LIKE %s",
                schema="index_schema LIKE %s",
                not_schemas="index_schema NOT IN (%s)",
                parent="i.table_name LIKE %s",
                name="index_name LIKE %s",
            ),
        )
        order = "i.table_catalog, index_schema, table_name, index_name, seq_in_index"
        return self.finish(sql, conds, order), vals

    def constraints(self, f: Filter) -> Query:
        if not self.has_constraints:
            raise NotSupportedError()
        cols = [
            "t.constraint_catalog",
            "t.table_schema",
            "t.table_name",
            "t.constraint_name",
            "t.constraint_type",
            self._clause(ClauseName.CONSTRAINT_IS_DEFERRABLE),
            self._clause(ClauseName.CONSTRAINT_INITIALLY_DEFERRED),
            "COALESCE(r.unique_constraint_catalog, '') AS foreign_catalog",
            "COALESCE(r.unique_constraint_schema, '') AS foreign_schema",
            "COALESCE(f.table_name, '') AS foreign_table",
            "COALESCE(r.unique_constraint_name, '') AS foreign_constraint",
            "COALESCE(r.match_option, '') AS match_options",
            "COALESCE(r.update_rule, '') AS update_rule",
            "COALESCE(r.delete_rule, '') AS delete_rule",
            "COALESCE(c.check_clause, '') AS check_clause",
        ]
        sql = (
            "SELECT\n  "
            + ",\n  ".join(cols)
            + """
FROM information_schema.table_constraints t
LEFT JOIN information_schema.referential_constraints r ON t.constraint_catalog = r.constraint_catalog
  AND t.constraint_schema = r.constraint_schema
  AND t.constraint_name = r.constraint_name
  AND t.constraint_type = 'FOREIGN KEY'
LEFT JOIN information_schema.table_constraints f ON r.unique_constraint_catalog = f.constraint_catalog
  AND r.unique_constraint_schema = f.constraint_schema
  AND r.unique_constraint_name = f.constraint_name
  """
            + self._clause(ClauseName.CONSTRAINT_JOIN_COND)
            + """
LEFT JOIN information_schema.check_constraints c ON t.constraint_catalog = c.constraint_catalog
  AND t.constraint_schema = c.constraint_schema
  AND t.constraint_name = c.constraint_name
"""
        )
        conds, vals = self.conditions(
            1,
            f,
            Formats(
                catalog="t.constraint_catalog LIKE %s",
                schema="t.table_schema LIKE %s",
                not_schemas="t.table_schema NOT IN (%s)",
                parent="t.table_name LIKE %s",
                reference="f.table_name LIKE %s",
                name="t.constraint_name LIKE %s",
            ),
        )
        sql = _where(sql, conds)
        order = "t.constraint_catalog, t.table_schema, t.table_name, t.constraint_name"
        return self.finish(sql, [], order), vals

    def constraint_columns(self, f: Filter) -> Query:
        if not self.has_constraints:
            raise NotSupportedError()
        vals: list[Any] = []
        sql = ""
        if self.has_check_constraints:
            sql = (
                "SELECT\n"
                "\t  c.constraint_catalog,\n"
                "\t  c.table_schema,\n"
                "\t  c.table_name,\n"
                "\t  c.constraint_name,\n"
                "\t  c.column_name,\n"
                "\t  1 AS ordinal_position,\n"
                "\t  '' AS foreign_catalog,\n"
                "\t  '' AS foreign_schema,\n"
                "\t  '' AS foreign_table,\n"
                "\t  '' AS foreign_name\n"
                "\tFROM information_schema.constraint_column_usage c\n"
                "\t"
            )
            check_conds, check_vals = self.conditions(
                len(vals) + 1,
                f,
                Formats(
                    catalog="c.constraint_catalog LIKE %s",
                    schema="c.table_schema LIKE %s",
                    not_schemas="c.table_schema NOT IN (%s)",
                    parent="c.table_name LIKE %s",
                    name="c.constraint_name LIKE %s",
                ),
            )
            if check_conds:
                sql = _where(sql, check_conds)
                vals.extend(check_vals)
            sql += "\nUNION ALL\n"
        sql += (
            """SELECT
  c.constraint_catalog,
  c.table_schema,
  c.table_name,
  c.constraint_name,
  c.column_name,
  c.ordinal_position,
  COALESCE(f.constraint_catalog, '') AS foreign_catalog,
  COALESCE(f.table_schema, '') AS foreign_schema,
  COALESCE(f.table_name, '') AS foreign_table,
  COALESCE(f.column_name, '') AS foreign_name
FROM information_schema.key_column_usage c
LEFT JOIN information_schema.referential_constraints r ON c.constraint_catalog = r.constraint_catalog
  AND c.constraint_schema = r.constraint_schema
  AND c.constraint_name = r.constraint_name
LEFT JOIN information_schema.key_column_usage f ON r.unique_constraint_catalog = f.constraint_catalog
  AND r.unique_constraint_schema = f.constraint_schema
  AND r.unique_constraint_name = f.constraint_name
  """
            + self._clause(ClauseName.CONSTRAINT_JOIN_COND)
            + """
  AND c.position_in_unique_constraint = f.ordinal_position
"""
        )
        key_conds, key_vals = self.conditions(
            len(vals) + 1,
            f,
            Formats(
                catalog="c.constraint_catalog LIKE %s",
                schema="c.table_schema LIKE %s",
                not_schemas="c.table_schema NOT IN (%s)",
                parent="c.table_name LIKE %s",
                reference="f.table_name LIKE %s",
                name="c.constraint_name LIKE %s",
            ),
        )
        if key_conds:
            sql = _where(sql, key_conds)
            vals.extend(key_vals)
        order = "constraint_catalog, table_schema, table_name, constraint_name, ordinal_position, column_name"
        return self.finish(sql, [], order), vals

    def sequences(self, f: Filter) -> Query:
        if not self.has_sequences:
            raise NotSupportedError()
        cols = [
            "sequence_catalog",
            "sequence_schema",
            "sequence_name",
            "data_type",
            "start_value",
            "minimum_value",
            "maximum_value",
            self._clause(ClauseName.SEQUENCE_COLUMNS_INCREMENT),
            "cycle_option",
        ]
        sql = _select(cols, "information_schema.sequences")
        conds, vals = self.conditions(
            1,
            f,
            Formats(
                catalog="sequence_catalog LIKE %s",
                schema="sequence_schema LIKE %s",
                not_schemas="sequence_schema NOT IN (%s)",
                name="sequence_name LIKE %s",
            ),
        )
        return self.finish(sql, conds, "sequence_catalog, sequence_schema, sequence_name"), vals

    def privilege_summaries(self, f: Filter) -> Query:
        if not (self.has_table_privileges or self.has_column_privileges or self.has_usage_privileges):
            raise NotSupportedError()
        conds, vals = self.conditions(
            1,
            f,
            Formats(
                catalog="object_catalog LIKE %s",
                schema="object_schema LIKE %s",
                not_schemas="object_schema NOT IN (%s)",
                name="object_name LIKE %s",
                types="object_type IN (%s)",
            ),
        )
        grantor = self._clause(ClauseName.PRIVILEGES_GRANTOR)
        grantable = "CASE WHEN is_grantable='YES' THEN 1 ELSE 0 END AS is_grantable"
        parts: list[str] = []
        if self.has_table_privileges:
            cols = [
                "t.table_catalog AS object_catalog",
                "t.table_schema AS object_schema",
                "t.table_name AS object_name",
                "t.table_type AS object_type",
                "'' AS column_name",
                "COALESCE(grantee, '') AS grantee",
                f"COALESCE({grantor}, '') AS grantor",
                "COALESCE(privilege_type, '') AS privilege_type",
                grantable,
            ]
            # tables on the left so that objects without any grants are listed too
            parts.append(
                "SELECT\n  "
                + ", ".join(cols)
                + "\nFROM information_schema.tables t\n"
                "LEFT JOIN information_schema.table_privileges tp\n"
                "  ON t.table_catalog = tp.table_catalog AND t.table_schema = tp.table_schema"
                " AND t.table_name = tp.table_name"
            )
        if self.has_column_privileges:
            cols = [
                "t.table_catalog AS object_catalog",
                "t.table_schema AS object_schema",
                "t.table_name AS object_name",
                "t.table_type AS object_type",
                "column_name",
                "grantee",
                f"{grantor} AS grantor",
                "privilege_type",
                grantable,
            ]
            parts.append(
                "SELECT\n  "
                + ", ".join(cols)
                + "\nFROM information_schema.column_privileges cp\n"
                "LEFT JOIN information_schema.tables t\n"
                "  ON t.table_catalog = cp.table_catalog AND t.table_schema = cp.table_schema"
                " AND t.table_name = cp.table_name"
            )
        if self.has_usage_privileges:
            cols = [
                "object_catalog",
                "object_schema",
                "object_name",
                "object_type",
                "'' AS column_name",
                "grantee",
                f"{grantor} AS grantor",
                "privilege_type",
                grantable,
            ]
            parts.append("SELECT\n  " + ", ".join(cols) + "\nFROM information_schema.usage_privileges")
        sql = "SELECT * FROM (\n" + "\nUNION ALL\n".join(parts) + "\n) AS subquery"
        order = "object_catalog, object_schema, object_type, object_name, column_name, grantee, grantor, privilege_type"
        return self.finish(sql, conds, order), vals