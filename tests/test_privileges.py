import pytest

from dbmeta.privileges import (
    ColumnPrivilege,
    ColumnPrivileges,
    ObjectPrivilege,
    ObjectPrivileges,
)

OP = ObjectPrivilege
CP = ColumnPrivilege

OBJECT_CASES = {
    "multi": (
        [
            OP(grantee="user1", grantor="user1", privilege_type="INSERT", is_grantable=True),
            OP(grantee="user1", grantor="user1", privilege_type="SELECT"),
            OP(grantee="user2", grantor="user1", privilege_type="INSERT"),
            OP(grantee="user2", grantor="user1", privilege_type="SELECT", is_grantable=True),
            OP(grantee="user3", grantor="user1", privilege_type="SELECT", is_grantable=True),
            OP(grantee="user3", grantor="user2", privilege_type="UPDATE"),
        ],
        "user1=INSERT*,SELECT/user1\n"
        "user2=INSERT,SELECT*/user1\n"
        "user3=SELECT*/user1\n"
        "user3=UPDATE/user2",
    ),
    "one": (
        [OP(grantee="user1", grantor="user1", privilege_type="INSERT")],
        "user1=INSERT/user1",
    ),
    "empty": ([], ""),
    "empty-grantor": (
        [
            OP(grantee="user1", grantor="", privilege_type="INSERT", is_grantable=True),
            OP(grantee="user1", grantor="", privilege_type="SELECT"),
            OP(grantee="user2", grantor="", privilege_type="INSERT"),
            OP(grantee="user2", grantor="", privilege_type="SELECT", is_grantable=True),
            OP(grantee="user3", grantor="", privilege_type="UPDATE"),
        ],
        "user1=INSERT*,SELECT\n"
        "user2=INSERT,SELECT*\n"
        "user3=UPDATE",
    ),
}

COLUMN_CASES = {
    "multi": (
        [
            CP("col1", "user1", "user1", "INSERT", True),
            CP("col1", "user1", "user1", "SELECT"),
            CP("col1", "user2", "user1", "INSERT"),
            CP("col1", "user2", "user1", "SELECT", True),
            CP("col1", "user3", "user1", "SELECT", True),
            CP("col1", "user3", "user2", "UPDATE"),
            CP("col2", "user1", "user1", "INSERT", True),
            CP("col2", "user1", "user1", "SELECT"),
            CP("col2", "user2", "user1", "INSERT"),
            CP("col2", "user2", "user1", "SELECT", True),
            CP("col2", "user3", "user2", "UPDATE"),
        ],
        "col1:\n"
        "  user1=INSERT*,SELECT/user1\n"
        "  user2=INSERT,SELECT*/user1\n"
        "  user3=SELECT*/user1\n"
        "  user3=UPDATE/user2\n"
        "col2:\n"
        "  user1=INSERT*,SELECT/user1\n"
        "  user2=INSERT,SELECT*/user1\n"
        "  user3=UPDATE/user2",
    ),
    "one-multi": (
        [
            CP("col2", "user1", "user1", "INSERT", True),
            CP("col3", "user1", "user1", "INSERT", True),
            CP("col3", "user1", "user1", "SELECT"),
            CP("col3", "user2", "user1", "INSERT"),
            CP("col3", "user2", "user1", "SELECT", True),
            CP("col3", "user3", "user2", "UPDATE"),
        ],
        "col2:\n"
        "  user1=INSERT*/user1\n"
        "col3:\n"
        "  user1=INSERT*,SELECT/user1\n"
        "  user2=INSERT,SELECT*/user1\n"
        "  user3=UPDATE/user2",
    ),
    "multi-one": (
        [
            CP("col1", "user1", "user1", "INSERT", True),
            CP("col1", "user1", "user1", "SELECT"),
            CP("col1", "user2", "user1", "INSERT"),
            CP("col1", "user2", "user1", "SELECT", True),
            CP("col1", "user3", "user2", "UPDATE"),
            CP("col2", "user1", "user1", "INSERT", True),
        ],
        "col1:\n"
        "  user1=INSERT*,SELECT/user1\n"
        "  user2=INSERT,SELECT*/user1\n"
        "  user3=UPDATE/user2\n"
        "col2:\n"
        "  user1=INSERT*/user1",
    ),
    "one": (
        [CP("col1", "user1", "user1", "INSERT")],
        "col1:\n  user1=INSERT/user1",
    ),
    "empty": ([], ""),
    "empty-grantor": (
        [
            CP("col1", "user1", "", "INSERT", True),
            CP("col1", "user1", "", "SELECT"),
            CP("col1", "user2", "", "INSERT"),
            CP("col1", "user2", "", "SELECT", True),
            CP("col1", "user3", "", "UPDATE"),
            CP("col2", "user1", "", "INSERT", True),
            CP("col2", "user1", "", "SELECT"),
            CP("col2", "user2", "", "INSERT"),
            CP("col2", "user2", "", "SELECT", True),
            CP("col2", "user3", "", "UPDATE"),
        ],
        "col1:\n"
        "  user1=INSERT*,SELECT\n"
        "  user2=INSERT,SELECT*\n"
        "  user3=UPDATE\n"
        "col2:\n"
        "  user1=INSERT*,SELECT\n"
        "  user2=INSERT,SELECT*\n"
        "  user3=UPDATE",
    ),
}


@pytest.mark.parametrize("name", list(OBJECT_CASES))
def test_object_privileges_str(name):
    privileges, want = OBJECT_CASES[name]
    assert str(ObjectPrivileges(privileges)) == want


@pytest.mark.parametrize("name", list(COLUMN_CASES))
def test_column_privileges_str(name):
    privileges, want = COLUMN_CASES[name]
    assert str(ColumnPrivileges(privileges)) == want


def test_object_sort_key_restores_order():
    privileges, want = OBJECT_CASES["multi"]
    shuffled = list(reversed(privileges))
    assert str(ObjectPrivileges(sorted(shuffled, key=ObjectPrivilege.sort_key))) == want


def test_column_sort_key_restores_order():
    privileges, want = COLUMN_CASES["multi"]
    shuffled = list(reversed(privileges))
    assert str(ColumnPrivileges(sorted(shuffled, key=ColumnPrivilege.sort_key))) == want


def test_privilege_collections_behave_as_lists():
    privilege = OP(grantee="user1", grantor="user1", privilege_type="INSERT")
    privileges = ObjectPrivileges()
    privileges.append(privilege)
    assert privileges == [privilege]