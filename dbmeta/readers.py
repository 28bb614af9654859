"""Readers that compose other readers, and a base reader that runs logged queries."""

from __future__ import annotations

import concurrent.futures
from datetime import timedelta
from typing import Any, Callable, Protocol, Sequence

from dbmeta.records import (
    CatalogSet,
    ColumnSet,
    ColumnStatSet,
    ConstraintColumnSet,
    ConstraintSet,
    FunctionColumnSet,
    FunctionSet,
    IndexColumnSet,
    IndexSet,
    PrivilegeSummarySet,
    SchemaSet,
    SequenceSet,
    TableSet,
    TriggerSet,
)
from dbmeta.resultset import Filter, NoRowsError, NotSupportedError

_KINDS = (
    "catalogs",
    "schemas",
    "tables",
    "columns",
    "column_stats",
    "indexes",
    "index_columns",
    "triggers",
    "constraints",
    "constraint_columns",
    "functions",
    "function_columns",
    "sequences",
    "privilege_summaries",
)


class Database(Protocol):
    """Anything with an execute(sql, params) that yields row tuples, e.g. sqlite3.Connection."""

    def execute(self, sql: str, params: Sequence[Any]) -> Any: ...


class PluginReader:
    """A reader assembled from the methods of other readers; later readers win."""

    def __init__(self, *args: Any) -> None:
        self._methods: dict[str, Callable[[Filter], Any]] = {}
        for reader in args:
            for kind in _KINDS:
                method = getattr(reader, kind, None)
                if callable(method):
                    self._methods[kind] = method

    def _dispatch(self, kind: str, f: Filter) -> Any:
        method = self._methods.get(kind)
        if method is None:
            raise NotSupportedError()
        return method(f)

    def catalogs(self, f: Filter) -> CatalogSet:
        return self._dispatch("catalogs", f)

    def schemas(self, f: Filter) -> SchemaSet:
        return self._dispatch("schemas", f)

    def tables(self, f: Filter) -> TableSet:
        return self._dispatch("tables", f)

    def columns(self, f: Filter) -> ColumnSet:
        return self._dispatch("columns", f)

    def column_stats(self, f: Filter) -> ColumnStatSet:
        return self._dispatch("column_stats", f)

    def indexes(self, f: Filter) -> IndexSet:
        return self._dispatch("indexes", f)

    def index_columns(self, f: Filter) -> IndexColumnSet:
        return self._dispatch("index_columns", f)

    def triggers(self, f: Filter) -> TriggerSet:
        return self._dispatch("triggers", f)

    def constraints(self, f: Filter) -> ConstraintSet:
        return self._dispatch("constraints", f)

    def constraint_columns(self, f: Filter) -> ConstraintColumnSet:
        return self._dispatch("constraint_columns", f)

    def functions(self, f: Filter) -> FunctionSet:
        return self._dispatch("functions", f)

    def function_columns(self, f: Filter) -> FunctionColumnSet:
        return self._dispatch("function_columns", f)

    def sequences(self, f: Filter) -> SequenceSet:
        return self._dispatch("sequences", f)

    def privilege_summaries(self, f: Filter) -> PrivilegeSummarySet:
        return self._dispatch("privilege_summaries", f)


class LoggingReader:
    """Runs queries against a database, optionally logging them, skipping them or timing out."""

    def __init__(
        self,
        db: Database,
        *,
        logger: Callable[[Any], Any] | None = None,
        dry_run: bool = False,
        timeout: float | timedelta | None = None,
    ) -> None:
        self.db = db
        self.logger = logger
        self.dry_run = dry_run
        if isinstance(timeout, timedelta):
            timeout = timeout.total_seconds()
        self.timeout: float = float(timeout or 0)

    def _fetch(self, sql: str, args: tuple[Any, ...]) -> list[tuple[Any, ...]]:
        return [tuple(row) for row in self.db.execute(sql, args)]

    def query(self, sql: str, *args: Any) -> list[tuple[Any, ...]]:
        """Run sql with positional args and return all rows.

        Raises NoRowsError in dry-run mode and TimeoutError when the timeout passes.
        """
        if self.logger is not None:
            self.logger(sql)
            self.logger(list(args))
        if self.dry_run:
            raise NoRowsError()
        if not self.timeout:
            return self._fetch(sql, args)
        pool = concurrent.futures.ThreadPoolExecutor(max_workers=1)
        try:
            future = pool.submit(self._fetch, sql, args)
            try:
                return future.result(timeout=self.timeout)
            except concurrent.futures.TimeoutError as exc:
                future.cancel()
                raise TimeoutError(f"query timed out after {self.timeout}s") from exc
        finally:
            pool.shutdown(wait=False)