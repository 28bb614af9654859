"""Metadata record types and the result sets that hold them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, TypeVar

from dbmeta.privileges import ColumnPrivileges, ObjectPrivileges
from dbmeta.resultset import Bool, Record, ResultSet

R = TypeVar("R", bound=Record)


@dataclass
class Catalog:
    catalog: str = ""

    def values(self) -> list[Any]:
        return [self.catalog]


@dataclass
class Schema:
    schema: str = ""
    catalog: str = ""

    def values(self) -> list[Any]:
        return [self.schema, self.catalog]


@dataclass
class Table:
    catalog: str = ""
    schema: str = ""
    name: str = ""
    type: str = ""
    rows: int = 0
    size: str = ""
    comment: str = ""

    def values(self) -> list[Any]:
        return [self.catalog, self.schema, self.name, self.type, self.rows, self.size, self.comment]


@dataclass
class Column:
    catalog: str = ""
    schema: str = ""
    table: str = ""
    name: str = ""
    ordinal_position: int = 0
    data_type: str = ""
    default: str = ""
    column_size: int = 0
    decimal_digits: int = 0
    num_prec_radix: int = 0
    char_octet_length: int = 0
    is_nullable: Bool | str = Bool.UNKNOWN

    def values(self) -> list[Any]:
        return [
            self.catalog,
            self.schema,
            self.table,
            self.name,
            self.data_type,
            self.is_nullable,
            self.default,
            self.column_size,
            self.decimal_digits,
            self.num_prec_radix,
            self.char_octet_length,
        ]


@dataclass
class ColumnStat:
    catalog: str = ""
    schema: str = ""
    table: str = ""
    name: str = ""
    avg_width: int = 0
    null_frac: float = 0.0
    num_distinct: int = 0
    min: str = ""
    max: str = ""
    mean: str = ""
    top_n: list[str] = field(default_factory=list)
    top_n_freqs: list[float] = field(default_factory=list)

    def values(self) -> list[Any]:
        return [
            self.catalog,
            self.schema,
            self.table,
            self.name,
            self.avg_width,
            self.null_frac,
            self.num_distinct,
            self.min,
            self.max,
            self.mean,
            self.top_n,
            self.top_n_freqs,
        ]


@dataclass
class Index:
    catalog: str = ""
    schema: str = ""
    table: str = ""
    name: str = ""
    is_primary: Bool | str = Bool.UNKNOWN
    is_unique: Bool | str = Bool.UNKNOWN
    type: str = ""
    columns: str = ""

    def values(self) -> list[Any]:
        return [
            self.catalog,
            self.schema,
            self.name,
            self.table,
            self.is_primary,
            self.is_unique,
            self.type,
        ]


@dataclass
class IndexColumn:
    catalog: str = ""
    schema: str = ""
    table: str = ""
    index_name: str = ""
    name: str = ""
    data_type: str = ""
    ordinal_position: int = 0

    def values(self) -> list[Any]:
        return [self.catalog, self.schema, self.table, self.index_name, self.name, self.data_type]


@dataclass
class Constraint:
    catalog: str = ""
    schema: str = ""
    table: str = ""
    name: str = ""
    type: str = ""
    is_deferrable: Bool | str = Bool.UNKNOWN
    is_initially_deferred: Bool | str = Bool.UNKNOWN
    foreign_catalog: str = ""
    foreign_schema: str = ""
    foreign_table: str = ""
    foreign_name: str = ""
    match_type: str = ""
    update_rule: str = ""
    delete_rule: str = ""
    check_clause: str = ""

    def values(self) -> list[Any]:
        return [
            self.catalog,
            self.schema,
            self.table,
            self.name,
            self.type,
            self.is_deferrable,
            self.is_initially_deferred,
            self.foreign_catalog,
            self.foreign_schema,
            self.foreign_table,
            self.foreign_name,
            self.match_type,
            self.update_rule,
            self.delete_rule,
        ]


@dataclass
class ConstraintColumn:
    catalog: str = ""
    schema: str = ""
    table: str = ""
    constraint: str = ""
    name: str = ""
    ordinal_position: int = 0
    foreign_catalog: str = ""
    foreign_schema: str = ""
    foreign_table: str = ""
    foreign_constraint: str = ""
    foreign_name: str = ""

    def values(self) -> list[Any]:
        return [
            self.catalog,
            self.schema,
            self.table,
            self.constraint,
            self.name,
            self.foreign_catalog,
            self.foreign_schema,
            self.foreign_table,
            self.foreign_constraint,
            self.foreign_name,
        ]


@dataclass
class Function:
    catalog: str = ""
    schema: str = ""
    name: str = ""
    result_type: str = ""
    arg_types: str = ""
    type: str = ""
    volatility: str = ""
    security: str = ""
    language: str = ""
    source: str = ""
    specific_name: str = ""

    def values(self) -> list[Any]:
        return [
            self.catalog,
            self.schema,
            self.name,
            self.result_type,
            self.arg_types,
            self.type,
            self.volatility,
            self.security,
            self.language,
            self.source,
        ]


@dataclass
class FunctionColumn:
    catalog: str = ""
    schema: str = ""
    table: str = ""
    name: str = ""
    function_name: str = ""
    ordinal_position: int = 0
    type: str = ""
    data_type: str = ""
    column_size: int = 0
    decimal_digits: int = 0
    num_prec_radix: int = 0
    char_octet_length: int = 0

    def values(self) -> list[Any]:
        return [
            self.catalog,
            self.schema,
            self.function_name,
            self.name,
            self.type,
            self.data_type,
            self.column_size,
            self.decimal_digits,
            self.num_prec_radix,
            self.char_octet_length,
        ]


@dataclass
class Sequence:
    catalog: str = ""
    schema: str = ""
    name: str = ""
    data_type: str = ""
    start: str = ""
    min: str = ""
    max: str = ""
    increment: str = ""
    cycles: Bool | str = Bool.UNKNOWN

    def values(self) -> list[Any]:
        return [self.data_type, self.start, self.min, self.max, self.increment, self.cycles]


@dataclass
class PrivilegeSummary:
    """The privileges granted on one table, view or sequence."""

    catalog: str = ""
    schema: str = ""
    name: str = ""
    object_type: str = ""
    object_privileges: ObjectPrivileges = field(default_factory=ObjectPrivileges)
    column_privileges: ColumnPrivileges = field(default_factory=ColumnPrivileges)

    def values(self) -> list[Any]:
        return [
            self.catalog,
            self.schema,
            self.name,
            self.object_type,
            self.object_privileges,
            self.column_privileges,
        ]


@dataclass
class Trigger:
    catalog: str = ""
    schema: str = ""
    table: str = ""
    name: str = ""
    definition: str = ""

    def values(self) -> list[Any]:
        return [self.catalog, self.schema, self.table, self.name, self.definition]


class _RecordSet(ResultSet[R]):
    COLUMNS: tuple[str, ...] = ()

    def __init__(self, results: Iterable[R] = (), columns: Iterable[str] | None = None) -> None:
        super().__init__(results, self.COLUMNS if columns is None else columns)


class CatalogSet(_RecordSet[Catalog]):
    COLUMNS = ("Catalog",)


class SchemaSet(_RecordSet[Schema]):
    COLUMNS = ("Schema", "Catalog")


class TableSet(_RecordSet[Table]):
    COLUMNS = ("Catalog", "Schema", "Name", "Type", "Rows", "Size", "Comment")


class ColumnSet(_RecordSet[Column]):
    COLUMNS = (
        "Catalog",
        "Schema",
        "Table",
        "Name",
        "Type",
        "Nullable",
        "Default",
        "Size",
        "Decimal Digits",
        "Precision Radix",
        "Octet Length",
    )


class ColumnStatSet(_RecordSet[ColumnStat]):
    COLUMNS = (
        "Catalog",
        "Schema",
        "Table",
        "Name",
        "Average width",
        "Nulls fraction",
        "Distinct values",
        "Minimum value",
        "Maximum value",
        "Mean value",
        "Top N common values",
        "Top N values freqs",
    )


class IndexSet(_RecordSet[Index]):
    COLUMNS = ("Catalog", "Schema", "Name", "Table", "Is primary", "Is unique", "Type")


class IndexColumnSet(_RecordSet[IndexColumn]):
    COLUMNS = ("Catalog", "Schema", "Table", "Index name", "Name", "Data type")


class ConstraintSet(_RecordSet[Constraint]):
    COLUMNS = (
        "Catalog",
        "Schema",
        "Table",
        "Name",
        "Type",
        "Is deferrable",
        "Initially deferred",
        "Foreign catalog",
        "Foreign schema",
        "Foreign table",
        "Foreign name",
        "Match type",
        "Update rule",
        "Delete rule",
        "Check Clause",
    )


class ConstraintColumnSet(_RecordSet[ConstraintColumn]):
    COLUMNS = (
        "Catalog",
        "Schema",
        "Table",
        "Constraint",
        "Name",
        "Foreign Catalog",
        "Foreign Schema",
        "Foreign Table",
        "Foreign Constraint",
        "Foreign Name",
    )


class FunctionSet(_RecordSet[Function]):
    COLUMNS = (
        "Catalog",
        "Schema",
        "Name",
        "Result data type",
        "Argument data types",
        "Type",
        "Volatility",
        "Security",
        "Language",
        "Source code",
    )


class FunctionColumnSet(_RecordSet[FunctionColumn]):
    COLUMNS = (
        "Catalog",
        "Schema",
        "Function name",
        "Name",
        "Type",
        "Data type",
        "Size",
        "Decimal Digits",
        "Precision Radix",
        "Octet Length",
    )


class SequenceSet(_RecordSet[Sequence]):
    COLUMNS = ("Type", "Start", "Min", "Max", "Increment", "Cycles?")


class PrivilegeSummarySet(_RecordSet[PrivilegeSummary]):
    COLUMNS = ("Schema", "Name", "Type", "Access privileges", "Column privileges")


class TriggerSet(_RecordSet[Trigger]):
    COLUMNS = ("Catalog", "Schema", "Table", "Name", "Definition")