"""Cursor-style result sets over metadata records, with the shared errors and filter."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Iterator, Protocol, TypeVar


class NotSupportedError(Exception):
    """Raised when a reader cannot provide the requested kind of metadata."""

    def __init__(self, message: str = "not supported") -> None:
        super().__init__(message)


class WrongNumberOfArgumentsError(ValueError):
    """Raised when a scan asks for a different number of values than a row has."""

    def __init__(self, message: str = "wrong number of arguments") -> None:
        super().__init__(message)


class NoRowsError(LookupError):
    """Raised when a query produced no rows, for example during a dry run."""

    def __init__(self, message: str = "no rows in result set") -> None:
        super().__init__(message)


class Bool(str, enum.Enum):
    """Three-valued flag as reported by information schemas."""

    UNKNOWN = ""
    YES = "YES"
    NO = "NO"

    def __str__(self) -> str:
        return self.value


@dataclass
class Filter:
    """Patterns and switches that select which objects a reader returns."""

    catalog: str = ""
    schema: str = ""
    parent: str = ""
    reference: str = ""
    name: str = ""
    types: list[str] = field(default_factory=list)
    with_system: bool = False
    only_visible: bool = False


class Record(Protocol):
    def values(self) -> list[Any]: ...


R = TypeVar("R", bound=Record)


class ResultSet(Generic[R]):
    """An ordered set of records with a cursor, an optional row filter and column names."""

    def __init__(self, results: Iterable[R], columns: Iterable[str]) -> None:
        self._results: list[R] = list(results)
        self._columns: list[str] = list(columns)
        self._current = 0
        self._filter: Callable[[R], bool] | None = None
        self._scan_values: Callable[[R], list[Any]] | None = None

    def set_filter(self, predicate: Callable[[R], bool] | None) -> None:
        """Only rows for which the predicate is true are visited."""
        self._filter = predicate

    def set_columns(self, columns: Iterable[str]) -> None:
        self._columns = list(columns)

    def set_scan_values(self, func: Callable[[R], list[Any]] | None) -> None:
        """Use func instead of the record's own values() when scanning."""
        self._scan_values = func

    def column_names(self) -> list[str]:
        return list(self._columns)

    def _accepts(self, record: R) -> bool:
        return self._filter is None or self._filter(record)

    def __len__(self) -> int:
        return sum(1 for record in self._results if self._accepts(record))

    def __iter__(self) -> Iterator[R]:
        return (record for record in self._results if self._accepts(record))

    def reset(self) -> None:
        """Move the cursor back before the first row."""
        self._current = 0

    def next(self) -> bool:
        """Advance the cursor to the next accepted row; False once past the end."""
        self._current += 1
        while self._current <= len(self._results) and not self._accepts(
            self._results[self._current - 1]
        ):
            self._current += 1
        return self._current <= len(self._results)

    def get(self) -> R:
        """Return the record under the cursor."""
        if not 1 <= self._current <= len(self._results):
            raise IndexError("no current row")
        return self._results[self._current - 1]

    def scan(self, count: int) -> list[Any]:
        """Return the values of the current row, which must number exactly count."""
        record = self.get()
        values = self._scan_values(record) if self._scan_values else record.values()
        if len(values) != count:
            raise WrongNumberOfArgumentsError()
        return list(values)