"""Metadata reader for MySQL databases, based on information_schema."""

from __future__ import annotations

from typing import Any

from dbmeta.infoschema.queries import ClauseName, question_placeholder
from dbmeta.infoschema.reader import InformationSchema, new
from dbmeta.readers import Database

_new_mysql_reader = new(
    placeholder=question_placeholder,
    has_sequences=False,
    has_check_constraints=False,
    clauses={
        ClauseName.COLUMNS_DATA_TYPE: "column_type",
        ClauseName.COLUMNS_NUMERIC_PREC_RADIX: "10",
        ClauseName.FUNCTION_COLUMNS_NUMERIC_PREC_RADIX: "10",
        ClauseName.CONSTRAINT_IS_DEFERRABLE: "''",
        ClauseName.CONSTRAINT_INITIALLY_DEFERRED: "''",
        ClauseName.PRIVILEGES_GRANTOR: "''",
        ClauseName.CONSTRAINT_JOIN_COND: "AND r.referenced_table_name = f.table_name",
    },
    system_schemas=["mysql", "information_schema", "performance_schema", "sys"],
    current_schema="COALESCE(DATABASE(), '%')",
    has_usage_privileges=False,
)


def new_reader(db: Database, **kwargs: Any) -> InformationSchema:
    """Create a MySQL metadata reader over db; kwargs configure logging, dry runs, timeouts and limits."""
    return _new_mysql_reader(db, **kwargs)