"""Metadata reader that queries the standard information_schema views."""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Callable

from dbmeta.infoschema.queries import Query, QueryBuilder
from dbmeta.privileges import ColumnPrivilege, ObjectPrivilege
from dbmeta.readers import Database, LoggingReader
from dbmeta.records import (
    Column,
    ColumnSet,
    Constraint,
    ConstraintColumn,
    ConstraintColumnSet,
    ConstraintSet,
    Function,
    FunctionColumn,
    FunctionColumnSet,
    FunctionSet,
    Index,
    IndexColumn,
    IndexColumnSet,
    IndexSet,
    PrivilegeSummary,
    PrivilegeSummarySet,
    Schema,
    SchemaSet,
    Sequence,
    SequenceSet,
    Table,
    TableSet,
)
from dbmeta.resultset import Bool, Filter, NoRowsError

_BUILDER_OPTIONS = frozenset(f.name for f in fields(QueryBuilder))


def _flag(value: Any) -> Bool | str:
    try:
        return Bool(value)
    except ValueError:
        return value


def _plain_data_type(column: Column) -> str:
    return column.data_type


class InformationSchema(LoggingReader):
    """Reads metadata from information_schema; options describe which views and columns exist.

    Keyword options are those of QueryBuilder (placeholder, clauses, system_schemas,
    current_schema, limit and the has_* switches), data_type_formatter, and the
    LoggingReader options logger, dry_run and timeout.
    """

    def __init__(self, db: Database, **kwargs: Any) -> None:
        data_type_formatter: Callable[[Column], str] | None = kwargs.pop(
            "data_type_formatter", None
        )
        logger = kwargs.pop("logger", None)
        dry_run = kwargs.pop("dry_run", False)
        timeout = kwargs.pop("timeout", None)
        super().__init__(db, logger=logger, dry_run=dry_run, timeout=timeout)
        unknown = sorted(set(kwargs) - _BUILDER_OPTIONS)
        if unknown:
            raise TypeError(f"unknown information schema options: {', '.join(unknown)}")
        self.queries = QueryBuilder(**kwargs)
        self.data_type_formatter = data_type_formatter or _plain_data_type

    def set_limit(self, limit: int) -> None:
        """Limit the number of rows every query returns; 0 means no limit."""
        self.queries.limit = limit

    def _rows(self, query: Query) -> list[tuple[Any, ...]]:
        sql, vals = query
        try:
            return self.query(sql, *vals)
        except NoRowsError:
            return []

    def columns(self, f: Filter) -> ColumnSet:
        results = []
        for (
            catalog,
            schema,
            table,
            name,
            position,
            data_type,
            default,
            nullable,
            size,
            digits,
            radix,
            octet,
        ) in self._rows(self.queries.columns(f)):
            rec = Column(
                catalog=catalog,
                schema=schema,
                table=table,
                name=name,
                ordinal_position=int(position),
                data_type=data_type,
                default=default,
                is_nullable=_flag(nullable),
                column_size=int(size),
                decimal_digits=int(digits),
                num_prec_radix=int(radix),
                char_octet_length=int(octet),
            )
            rec.data_type = self.data_type_formatter(rec)
            results.append(rec)
        return ColumnSet(results)

    def tables(self, f: Filter) -> TableSet:
        return TableSet(
            Table(catalog=catalog, schema=schema, name=name, type=kind)
            for catalog, schema, name, kind in self._rows(self.queries.tables(f))
        )

    def schemas(self, f: Filter) -> SchemaSet:
        return SchemaSet(
            Schema(schema=schema, catalog=catalog)
            for schema, catalog in self._rows(self.queries.schemas(f))
        )

    def functions(self, f: Filter) -> FunctionSet:
        return FunctionSet(
            Function(
                specific_name=specific,
                catalog=catalog,
                schema=schema,
                name=name,
                type=kind,
                result_type=result_type,
                source=source,
                language=language,
                volatility=volatility,
                security=security,
            )
            for (
                specific,
                catalog,
                schema,
                name,
                kind,
                result_type,
                source,
                language,
                volatility,
                security,
            ) in self._rows(self.queries.functions(f))
        )

    def function_columns(self, f: Filter) -> FunctionColumnSet:
        return FunctionColumnSet(
            FunctionColumn(
                catalog=catalog,
                schema=schema,
                function_name=function,
                name=name,
                ordinal_position=int(position),
                type=mode,
                data_type=data_type,
                column_size=int(size),
                decimal_digits=int(digits),
                num_prec_radix=int(radix),
                char_octet_length=int(octet),
            )
            for (
                catalog,
                schema,
                function,
                name,
                position,
                mode,
                data_type,
                size,
                digits,
                radix,
                octet,
            ) in self._rows(self.queries.function_columns(f))
        )

    def indexes(self, f: Filter) -> IndexSet:
        return IndexSet(
            Index(
                catalog=catalog,
                schema=schema,
                table=table,
                name=name,
                is_unique=_flag(unique),
                is_primary=_flag(primary),
                type=kind,
            )
            for catalog, schema, table, name, unique, primary, kind in self._rows(
                self.queries.indexes(f)
            )
        )

    def index_columns(self, f: Filter) -> IndexColumnSet:
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
            for catalog, schema, table, index, name, data_type, position in self._rows(
                self.queries.index_columns(f)
            )
        )

    def constraints(self, f: Filter) -> ConstraintSet:
        return ConstraintSet(
            Constraint(
                catalog=catalog,
                schema=schema,
                table=table,
                name=name,
                type=kind,
                is_deferrable=_flag(deferrable),
                is_initially_deferred=_flag(deferred),
                foreign_catalog=foreign_catalog,
                foreign_schema=foreign_schema,
                foreign_table=foreign_table,
                foreign_name=foreign_name,
                match_type=match_type,
                update_rule=update_rule,
                delete_rule=delete_rule,
                check_clause=check_clause,
            )
            for (
                catalog,
                schema,
                table,
                name,
                kind,
                deferrable,
                deferred,
                foreign_catalog,
                foreign_schema,
                foreign_table,
                foreign_name,
                match_type,
                update_rule,
                delete_rule,
                check_clause,
            ) in self._rows(self.queries.constraints(f))
        )

    def constraint_columns(self, f: Filter) -> ConstraintColumnSet:
        return ConstraintColumnSet(
            ConstraintColumn(
                catalog=catalog,
                schema=schema,
                table=table,
                constraint=constraint,
                name=name,
                ordinal_position=int(position),
                foreign_catalog=foreign_catalog,
                foreign_schema=foreign_schema,
                foreign_table=foreign_table,
                foreign_name=foreign_name,
            )
            for (
                catalog,
                schema,
                table,
                constraint,
                name,
                position,
                foreign_catalog,
                foreign_schema,
                foreign_table,
                foreign_name,
            ) in self._rows(self.queries.constraint_columns(f))
        )

    def sequences(self, f: Filter) -> SequenceSet:
        return SequenceSet(
            Sequence(
                catalog=catalog,
                schema=schema,
                name=name,
                data_type=data_type,
                start=str(start),
                min=str(minimum),
                max=str(maximum),
                increment=str(increment),
                cycles=_flag(cycles),
            )
            for (
                catalog,
                schema,
                name,
                data_type,
                start,
                minimum,
                maximum,
                increment,
                cycles,
            ) in self._rows(self.queries.sequences(f))
        )

    def privilege_summaries(self, f: Filter) -> PrivilegeSummarySet:
        """One summary per object; rows arrive ordered by object so they can be grouped in order."""
        results: list[PrivilegeSummary] = []
        current = PrivilegeSummary()
        for (
            catalog,
            schema,
            name,
            object_type,
            column,
            grantee,
            grantor,
            privilege_type,
            grantable,
        ) in self._rows(self.queries.privilege_summaries(f)):
            if (current.catalog, current.schema, current.name) != (catalog, schema, name):
                current = PrivilegeSummary(
                    catalog=catalog, schema=schema, name=name, object_type=object_type
                )
                results.append(current)
            is_grantable = bool(int(grantable))
            if not privilege_type:
                continue
            if not column:
                current.object_privileges.append(
                    ObjectPrivilege(
                        grantee=grantee,
                        grantor=grantor,
                        privilege_type=privilege_type,
                        is_grantable=is_grantable,
                    )
                )
            else:
                current.column_privileges.append(
                    ColumnPrivilege(
                        column=column,
                        grantee=grantee,
                        grantor=grantor,
                        privilege_type=privilege_type,
                        is_grantable=is_grantable,
                    )
                )
        return PrivilegeSummarySet(results)


def new(**kwargs: Any) -> Callable[..., InformationSchema]:
    """Return a factory that builds readers over a database with these options.

    The factory takes the database and further options, which override these.
    """

    def factory(db: Database, **options: Any) -> InformationSchema:
        return InformationSchema(db, **{**kwargs, **options})

    return factory