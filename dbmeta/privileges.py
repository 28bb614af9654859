"""Privileges granted on database objects and columns, and their compact text form."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import groupby
from typing import Iterable


@dataclass
class ObjectPrivilege:
    """A privilege granted on a database object."""

    grantee: str = ""
    grantor: str = ""
    privilege_type: str = ""
    is_grantable: bool = False

    def sort_key(self) -> tuple[str, str, str]:
        return (self.grantee, self.grantor, self.privilege_type)


@dataclass
class ColumnPrivilege:
    """A privilege granted on a single column."""

    column: str = ""
    grantee: str = ""
    grantor: str = ""
    privilege_type: str = ""
    is_grantable: bool = False

    def sort_key(self) -> tuple[str, str, str, str]:
        return (self.column, self.grantee, self.grantor, self.privilege_type)


def _type_str(privilege: str, grantable: bool) -> str:
    return privilege + "*" if grantable else privilege


def _line(grantee: str, grantor: str, types: Iterable[str]) -> str:
    line = f"{grantee}={','.join(types)}"
    return f"{line}/{grantor}" if grantor else line


def _grant_lines(privileges: Iterable[ObjectPrivilege | ColumnPrivilege]) -> list[str]:
    return [
        _line(grantee, grantor, (_type_str(p.privilege_type, p.is_grantable) for p in group))
        for (grantee, grantor), group in groupby(privileges, key=lambda p: (p.grantee, p.grantor))
    ]


class ObjectPrivileges(list):
    """Privileges on one object; str() expects them sorted by sort_key."""

    def __str__(self) -> str:
        return "\n".join(_grant_lines(self))


class ColumnPrivileges(list):
    """Privileges on the columns of one object; str() expects them sorted by sort_key."""

    def __str__(self) -> str:
        blocks = []
        for column, group in groupby(self, key=lambda p: p.column):
            lines = "\n".join("  " + line for line in _grant_lines(group))
            blocks.append(f"{column}:\n{lines}")
        return "\n".join(blocks)