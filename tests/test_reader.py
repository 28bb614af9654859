import pytest

from dbmeta.infoschema.queries import question_placeholder
from dbmeta.infoschema.reader import InformationSchema, new
from dbmeta.privileges import ColumnPrivilege, ObjectPrivilege
from dbmeta.resultset import Bool, Filter, NotSupportedError


class FakeDB:
    def __init__(self, rows=()):
        self.rows = list(rows)
        self.calls = []

    def execute(self, sql, params):
        self.calls.append((sql, list(params)))
        return iter(self.rows)


def test_columns_builds_records_and_binds_system_schemas():
    db = FakeDB([("c", "s", "t", "id", 1, "integer", "", "NO", 32, 0, 2, 0)])
    reader = InformationSchema(db)
    result = reader.columns(Filter())
    cols = list(result)
    assert len(cols) == 1
    assert cols[0].name == "id"
    assert cols[0].data_type == "integer"
    assert cols[0].is_nullable is Bool.NO
    assert cols[0].column_size == 32
    sql, params = db.calls[0]
    assert "FROM information_schema.columns" in sql
    assert params == ["information_schema"]


def test_columns_applies_data_type_formatter():
    db = FakeDB([("c", "s", "t", "name", 2, "varchar", "", "YES", 10, 0, 10, 40)])
    reader = InformationSchema(
        db, data_type_formatter=lambda col: f"{col.data_type}({col.column_size})"
    )
    [col] = list(reader.columns(Filter()))
    assert col.data_type == "varchar(10)"
    assert col.is_nullable is Bool.YES


def test_tables_with_sequence_type_adds_union():
    db = FakeDB([("c", "s", "t1", "BASE TABLE"), ("c", "s", "q1", "SEQUENCE")])
    reader = InformationSchema(db)
    result = reader.tables(Filter(types=["TABLE", "SEQUENCE"], with_system=True))
    assert [t.name for t in result] == ["t1", "q1"]
    sql, params = db.calls[0]
    assert "FROM information_schema.sequences" in sql
    assert params == ["TABLE", "SEQUENCE"]


def test_schemas_records():
    db = FakeDB([("public", "db")])
    result = InformationSchema(db).schemas(Filter(with_system=True))
    [schema] = list(result)
    assert (schema.schema, schema.catalog) == ("public", "db")
    assert db.calls[0][1] == []


def test_functions_not_supported():
    reader = InformationSchema(FakeDB(), has_functions=False)
    with pytest.raises(NotSupportedError):
        reader.functions(Filter())
    with pytest.raises(NotSupportedError):
        reader.function_columns(Filter())


def test_indexes_not_supported():
    reader = InformationSchema(FakeDB(), has_indexes=False)
    with pytest.raises(NotSupportedError):
        reader.indexes(Filter())
    with pytest.raises(NotSupportedError):
        reader.index_columns(Filter())


def test_privilege_summaries_not_supported_without_any_views():
    reader = InformationSchema(
        FakeDB(),
        has_table_privileges=False,
        has_column_privileges=False,
        has_usage_privileges=False,
    )
    with pytest.raises(NotSupportedError):
        reader.privilege_summaries(Filter())


def test_dry_run_returns_empty_sets_without_querying():
    db = FakeDB([("x",)])
    reader = InformationSchema(db, dry_run=True)
    assert len(reader.columns(Filter())) == 0
    assert len(reader.tables(Filter())) == 0
    assert len(reader.privilege_summaries(Filter())) == 0
    assert db.calls == []


def test_logger_receives_sql_and_args():
    logged = []
    db = FakeDB()
    reader = InformationSchema(db, logger=logged.append)
    reader.schemas(Filter(name="pub%"))
    sql, params = db.calls[0]
    assert logged == [sql, params]
    assert "pub%" in params


def test_set_limit_appends_limit():
    db = FakeDB()
    reader = InformationSchema(db)
    reader.set_limit(5)
    reader.sequences(Filter())
    assert db.calls[0][0].endswith("\nLIMIT 5")


def test_unknown_option_rejected():
    with pytest.raises(TypeError):
        InformationSchema(FakeDB(), bogus=True)


def test_indexes_and_index_columns_records():
    db = FakeDB([("c", "s", "t", "PRIMARY", "YES", "YES", "BTREE")])
    [index] = list(InformationSchema(db).indexes(Filter()))
    assert index.name == "PRIMARY"
    assert index.is_unique is Bool.YES
    assert index.is_primary is Bool.YES
    assert index.type == "BTREE"

    db = FakeDB([("c", "s", "t", "idx", "col", "int", 3)])
    [ic] = list(InformationSchema(db).index_columns(Filter()))
    assert (ic.index_name, ic.name, ic.ordinal_position) == ("idx", "col", 3)


def test_constraint_columns_take_position_from_row():
    db = FakeDB(
        [
            ("c", "s", "t", "fk", "a", 2, "c", "s", "other", "id"),
            ("c", "s", "t", "fk", "b", 7, "", "", "", ""),
        ]
    )
    result = InformationSchema(db).constraint_columns(Filter())
    assert [c.ordinal_position for c in result] == [2, 7]
    assert [c.foreign_table for c in result] == ["other", ""]


def test_constraints_records():
    row = ("c", "s", "t", "fk", "FOREIGN KEY", "NO", "NO", "c", "s", "u", "pk", "NONE", "CASCADE", "RESTRICT", "")
    [con] = list(InformationSchema(FakeDB([row])).constraints(Filter()))
    assert con.type == "FOREIGN KEY"
    assert con.is_deferrable is Bool.NO
    assert con.foreign_name == "pk"
    assert con.delete_rule == "RESTRICT"


def test_privilege_summaries_group_rows_per_object():
    db = FakeDB(
        [
            ("c", "s", "t1", "BASE TABLE", "", "alice", "bob", "SELECT", 1),
            ("c", "s", "t1", "BASE TABLE", "col", "carol", "bob", "UPDATE", 0),
            ("c", "s", "t2", "VIEW", "", "", "", "", 0),
        ]
    )
    summaries = list(InformationSchema(db).privilege_summaries(Filter()))
    assert [s.name for s in summaries] == ["t1", "t2"]
    assert summaries[0].object_privileges == [
        ObjectPrivilege(grantee="alice", grantor="bob", privilege_type="SELECT", is_grantable=True)
    ]
    assert summaries[0].column_privileges == [
        ColumnPrivilege(column="col", grantee="carol", grantor="bob", privilege_type="UPDATE", is_grantable=False)
    ]
    assert summaries[1].object_privileges == []
    assert summaries[1].column_privileges == []


def test_new_factory_applies_options_and_overrides():
    factory = new(placeholder=question_placeholder, system_schemas=["sys", "mysql"])
    db = FakeDB()
    reader = factory(db, limit=3)
    reader.columns(Filter(schema="app"))
    sql, params = db.calls[0]
    assert params == ["app", "sys", "mysql"]
    assert "table_schema NOT IN (?, ?)" in sql
    assert sql.endswith("\nLIMIT 3")