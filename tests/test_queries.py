import re

import pytest

from dbmeta.infoschema.queries import (
    ClauseName,
    Formats,
    QueryBuilder,
    dollar_placeholder,
    question_placeholder,
)
from dbmeta.resultset import Filter, NotSupportedError

ALL_FORMATS = Formats(
    catalog="cat LIKE %s",
    schema="sch LIKE %s",
    not_schemas="sch NOT IN (%s)",
    parent="par LIKE %s",
    reference="ref LIKE %s",
    name="nam LIKE %s",
    types="typ IN (%s)",
)

QUERY_METHODS = [
    "columns",
    "tables",
    "schemas",
    "functions",
    "function_columns",
    "indexes",
    "index_columns",
    "constraints",
    "constraint_columns",
    "sequences",
    "privilege_summaries",
]

FULL_FILTER = Filter(
    catalog="db", schema="public", parent="film", reference="actor", name="x%", types=["BASE TABLE", "SEQUENCE"]
)


def _numbers(sql):
    return sorted(int(n) for n in re.findall(r"\$(\d+)", sql))


def test_placeholders():
    assert question_placeholder(7) == "?"
    assert dollar_placeholder(2) == "$2"


def test_conditions_order_and_values():
    qb = QueryBuilder()
    conds, vals = qb.conditions(1, FULL_FILTER, ALL_FORMATS)
    assert vals == ["db", "public", "information_schema", "film", "actor", "x%", "BASE TABLE", "SEQUENCE"]
    assert conds[0] == "cat LIKE $1"
    assert conds[-1] == "typ IN ($7, $8)"
    assert len(conds) == 7


def test_conditions_base_param_offsets_numbers():
    qb = QueryBuilder()
    conds, vals = qb.conditions(5, Filter(name="t"), Formats(name="n LIKE %s"))
    assert vals == ["t"]
    assert conds == ["n LIKE " + dollar_placeholder(5)]


def test_system_schema_matching_filter_is_not_excluded():
    qb = QueryBuilder(system_schemas=["a", "b"])
    conds, vals = qb.conditions(1, Filter(schema="a"), ALL_FORMATS)
    assert vals == ["a", "b"]
    assert conds[1] == "sch NOT IN (" + dollar_placeholder(2) + ")"


def test_with_system_omits_exclusion():
    qb = QueryBuilder()
    conds, vals = qb.conditions(1, Filter(with_system=True), ALL_FORMATS)
    assert conds == []
    assert vals == []


def test_only_visible_uses_current_schema_without_binding():
    qb = QueryBuilder(current_schema="CURRENT_SCHEMA")
    conds, vals = qb.conditions(1, Filter(only_visible=True, with_system=True), ALL_FORMATS)
    assert conds == ["sch LIKE CURRENT_SCHEMA"]
    assert vals == []


def test_only_visible_ignored_without_current_schema():
    conds, _ = QueryBuilder().conditions(1, Filter(only_visible=True, with_system=True), ALL_FORMATS)
    assert conds == []


def test_finish_appends_where_order_limit():
    qb = QueryBuilder(limit=1000)
    sql = qb.finish("SELECT 1", ["a", "b"], "x")
    assert sql == "SELECT 1\nWHERE a AND b\nORDER BY x\nLIMIT 1000"
    assert QueryBuilder().finish("SELECT 1", [], "") == "SELECT 1"


@pytest.mark.parametrize("method", QUERY_METHODS)
def test_placeholders_are_numbered_consecutively(method):
    qb = QueryBuilder()
    sql, vals = getattr(qb, method)(FULL_FILTER)
    assert _numbers(sql) == list(range(1, len(vals) + 1))


@pytest.mark.parametrize("method", QUERY_METHODS)
def test_question_placeholders_match_values(method):
    qb = QueryBuilder(placeholder=question_placeholder, system_schemas=["mysql", "sys"])
    sql, vals = getattr(qb, method)(FULL_FILTER)
    assert sql.count("?") == len(vals)


def test_tables_adds_sequences_union():
    qb = QueryBuilder()
    sql, vals = qb.tables(Filter(name="t", types=["SEQUENCE"]))
    assert "FROM information_schema.sequences" in sql
    assert vals == ["information_schema", "t", "SEQUENCE", "information_schema", "t"]
    no_seq = QueryBuilder(has_sequences=False)
    sql2, vals2 = no_seq.tables(Filter(name="t", types=["SEQUENCE"]))
    assert "information_schema.sequences" not in sql2
    assert vals2 == ["information_schema", "t", "SEQUENCE"]


def test_custom_clauses_merge_with_defaults():
    qb = QueryBuilder(clauses={ClauseName.COLUMNS_DATA_TYPE: "column_type"})
    sql, _ = qb.columns(Filter())
    assert "column_type" in sql
    assert "COALESCE(numeric_scale, 0)" in sql
    assert ClauseName.COLUMNS_DATA_TYPE.value == "columns.data_type"


def test_join_condition_clause_used_in_constraints():
    cond = "AND r.referenced_table_name = f.table_name"
    qb = QueryBuilder(clauses={ClauseName.CONSTRAINT_JOIN_COND: cond})
    sql, _ = qb.constraints(Filter())
    assert cond in sql
    sql_cols, _ = qb.constraint_columns(Filter())
    assert cond in sql_cols


def test_indexes_where_before_group_by_before_order():
    sql, vals = QueryBuilder(limit=5).indexes(Filter(name="idx"))
    where, group, order = sql.index("WHERE"), sql.index("GROUP BY"), sql.index("ORDER BY")
    assert where < group < order
    assert sql.endswith("LIMIT 5")
    assert vals == ["information_schema", "idx"]


def test_constraint_columns_without_check_constraints():
    sql, _ = QueryBuilder(has_check_constraints=False).constraint_columns(Filter())
    assert "constraint_column_usage" not in sql
    assert "UNION ALL" not in sql
    sql_full, _ = QueryBuilder().constraint_columns(Filter())
    assert "constraint_column_usage" in sql_full


@pytest.mark.parametrize(
    "flags,method",
    [
        ({"has_functions": False}, "functions"),
        ({"has_functions": False}, "function_columns"),
        ({"has_indexes": False}, "indexes"),
        ({"has_indexes": False}, "index_columns"),
        ({"has_constraints": False}, "constraints"),
        ({"has_constraints": False}, "constraint_columns"),
        ({"has_sequences": False}, "sequences"),
        (
            {"has_table_privileges": False, "has_column_privileges": False, "has_usage_privileges": False},
            "privilege_summaries",
        ),
    ],
)
def test_unsupported_queries_raise(flags, method):
    with pytest.raises(NotSupportedError):
        getattr(QueryBuilder(**flags), method)(Filter())


def test_privilege_summaries_parts_follow_flags():
    qb = QueryBuilder(has_usage_privileges=False, clauses={ClauseName.PRIVILEGES_GRANTOR: "''"})
    sql, _ = qb.privilege_summaries(Filter())
    assert "information_schema.usage_privileges" not in sql
    assert "information_schema.column_privileges" in sql
    assert "COALESCE('', '') AS grantor" in sql
    assert sql.startswith("SELECT * FROM (\n")
    assert sql.count("UNION ALL") == 1