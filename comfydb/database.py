# comfydb — convenience helpers over DB-API connections
# Copyright (C) 2024-2026 Dr Horst Herb
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""The :class:`ComfyDB` connection wrapper.

Usage::

    from comfydb import ComfyDB

    db = ComfyDB.connect_url("sqlite:///~/.myapp/data.db")
    user_id = db.insert("users", {"name": "Ada", "email": None})
    name = db.fetch("SELECT name FROM users WHERE id = %d", [user_id])
    emails = db.fetch_map("SELECT id, email FROM users WHERE id IN (%d+)", [[1, 2]])
    db.update("users", {"name": "Ada L."}, {"id": user_id})

    with db.transaction():
        db.delete("users", {"email": None})
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Generator, Mapping, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar

from comfydb.clauses import build_assignments, build_insert_columns, build_where_clause
from comfydb.config import DatabaseConfig
from comfydb.connection import connect_mysql, connect_url
from comfydb.dialects import MYSQL, Dialect, dialect_for, quote_identifier, quote_literal
from comfydb.exceptions import QueryError, TransactionError
from comfydb.formatting import format_query
from comfydb.operations import collapse_row, execute, first_value, rows_as_dicts
from comfydb.querylog import QueryLog
from comfydb.transactions import begin

logger = logging.getLogger(__name__)

T = TypeVar("T")

Where = str | Mapping[str, Any]


def _error_details(exc: BaseException) -> tuple[Any, str]:
    """Extract ``(code, message)`` from a driver exception."""
    code = getattr(exc, "pgcode", None)
    message = getattr(exc, "pgerror", None)
    if code is None:
        code = getattr(exc, "sqlite_errorcode", None)
    if code is None and len(exc.args) >= 2 and isinstance(exc.args[0], int):
        # pymysql / MySQLdb: (errno, message)
        code, message = exc.args[0], str(exc.args[1])
    return code, (message or str(exc)).strip()


class ComfyDB:
    """Convenience wrapper around a single DB-API connection.

    Args:
        conn: An open ``sqlite3``, ``psycopg2``, ``pymysql`` or ``MySQLdb``
            connection.  Other drivers work with ANSI quoting.
        logfile: Optional path of a query log file.
        autocommit: Commit every statement that runs outside an explicit
            transaction.

    Statements take an optional parameter list.  With ``params=None`` the
    SQL is sent verbatim; otherwise it is expanded by
    :func:`comfydb.formatting.format_query` and every placeholder must
    match exactly one parameter.
    """

    def __init__(
        self,
        conn: Any,
        logfile: str | Path | None = None,
        *,
        autocommit: bool = True,
    ) -> None:
        self._conn = conn
        self._dialect = dialect_for(conn)
        self._error_class = getattr(conn, "Error", Exception)
        self._querylog: QueryLog | None = None
        self._in_transaction = False
        self._last_insert_id: Any = None
        self.autocommit = autocommit
        self.set_logfile(logfile)

    # --- construction -------------------------------------------------------

    @classmethod
    def connect(
        cls,
        host: str,
        user: str,
        password: str,
        database: str,
        *,
        logfile: str | Path | None = None,
        autocommit: bool = True,
        **options: Any,
    ) -> ComfyDB:
        """Open a MySQL connection and wrap it."""
        conn = connect_mysql(host, user, password, database, **options)
        return cls(conn, logfile, autocommit=autocommit)

    @classmethod
    def connect_url(
        cls,
        url: str,
        *,
        logfile: str | Path | None = None,
        autocommit: bool = True,
    ) -> ComfyDB:
        """Open a connection from a database URL and wrap it."""
        return cls(connect_url(url), logfile, autocommit=autocommit)

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> ComfyDB:
        return cls.connect_url(config.url, logfile=config.logfile, autocommit=config.autocommit)

    @classmethod
    def from_env(cls, prefix: str = "COMFYDB_") -> ComfyDB:
        """Connect using ``COMFYDB_URL`` and friends, see :mod:`comfydb.config`."""
        return cls.from_config(DatabaseConfig.from_env(prefix))

    # --- accessors ----------------------------------------------------------

    @property
    def connection(self) -> Any:
        """The wrapped DB-API connection."""
        return self._conn

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    def set_logfile(self, logfile: str | Path | None) -> None:
        """Start logging statements to *logfile*, or stop with ``None``."""
        self._querylog = QueryLog(logfile) if logfile else None

    def close(self) -> None:
        self._conn.close()
        logger.debug("Connection closed (%s)", self._dialect.name)

    # --- formatting ---------------------------------------------------------

    def quote(self, value: Any) -> str:
        """Return *value* as a quoted SQL string literal."""
        return quote_literal(self._conn, value, self._dialect)

    def format_query(self, sql: str, params: Sequence[Any]) -> str:
        """Expand the placeholders of *sql*, quoting through this connection."""
        return format_query(sql, params, self.quote)

    def build_where_clause(self, where: Where) -> tuple[str, list[Any]]:
        return build_where_clause(where, self._dialect)

    # --- execution ----------------------------------------------------------

    def _should_commit(self) -> bool:
        return self.autocommit and not self._in_transaction

    def _send(
        self,
        sql: str,
        params: Sequence[Any] | None,
        handler: Callable[[Any], T],
    ) -> T:
        """Run one statement and hand its cursor to *handler*."""
        if params is not None:
            sql = self.format_query(sql, params)

        before = time.perf_counter()
        error: BaseException | None = None
        result: Any = None

        try:
            cur = execute(self._conn, sql)
            result = handler(cur)
        except self._error_class as exc:
            error = exc

        duration = time.perf_counter() - before

        if error is not None:
            code, message = _error_details(error)
            logger.warning("Query failed after %.4fs: %s (%s)", duration, sql, message)
            if self._querylog is not None:
                self._querylog.write(duration, sql, message)
            if self._should_commit():
                self._conn.rollback()
            raise QueryError(sql, code, message) from error

        logger.debug("/* %.4fs */ %s", duration, sql)
        # drivers report 0 or None for statements that inserted nothing
        rowid = getattr(cur, "lastrowid", None)
        if rowid:
            self._last_insert_id = rowid
        if self._querylog is not None:
            self._querylog.write(duration, sql)
        if self._should_commit():
            self._conn.commit()
        return result

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> int:
        """Run a statement and return the number of affected rows."""
        return self._send(sql, params, lambda cur: cur.rowcount)

    def query(self, sql: str, params: Sequence[Any] | None = None) -> list[dict[str, Any]]:
        """Run a query and return all rows as dicts."""
        return self._send(sql, params, rows_as_dicts)

    def fetch(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        """Return the first row of a query.

        ``None`` when there are no rows, the bare value when the row has a
        single column, the full row dict otherwise.
        """
        rows = self.query(sql, params)
        if not rows:
            return None
        return collapse_row(rows[0])

    def fetch_column(self, sql: str, params: Sequence[Any] | None = None) -> list[Any]:
        """Return the first column of every row."""
        return [first_value(row) for row in self.query(sql, params)]

    def fetch_map(self, sql: str, params: Sequence[Any] | None = None) -> dict[Any, Any]:
        """Return ``{first_column: rest}`` for every row.

        *rest* is the bare value when one other column remains, otherwise a
        dict of the remaining columns.  Later rows win on duplicate keys.
        """
        result: dict[Any, Any] = {}
        for row in self.query(sql, params):
            values = dict(row)
            key = values.pop(next(iter(values)))
            result[key] = collapse_row(values)
        return result

    # --- statement builders -------------------------------------------------

    def insert(
        self,
        table: str,
        data: Mapping[str, Any],
        *,
        returning: str | None = None,
    ) -> Any:
        """Insert one row and return its id.

        By default the id is the cursor's ``lastrowid``.  PostgreSQL has no
        meaningful ``lastrowid``; pass ``returning="id"`` to read the id
        from a ``RETURNING`` clause instead (SQLite 3.35+ supports it too).
        """
        table_sql = quote_identifier(table, self._dialect)
        columns, values, params = build_insert_columns(data, self._dialect)

        if data:
            sql = f"INSERT INTO {table_sql} ({columns}) VALUES ({values})"
        elif self._dialect is MYSQL:
            sql = f"INSERT INTO {table_sql} () VALUES ()"
        else:
            sql = f"INSERT INTO {table_sql} DEFAULT VALUES"

        if returning:
            sql += f" RETURNING {quote_identifier(returning, self._dialect)}"

            def _inserted_id(cur: Any) -> Any:
                row = cur.fetchone()
                if isinstance(row, Mapping):
                    return first_value(row)
                return row[0]

        else:

            def _inserted_id(cur: Any) -> Any:
                return cur.lastrowid

        self._last_insert_id = self._send(sql, params, _inserted_id)
        return self._last_insert_id

    def update(self, table: str, data: Mapping[str, Any], where: Where) -> int:
        """Update matching rows and return the number of affected rows."""
        if not data:
            raise ValueError("update() needs at least one column to set")

        assignments, params = build_assignments(data, self._dialect)
        condition, where_params = self.build_where_clause(where)

        sql = (
            f"UPDATE {quote_identifier(table, self._dialect)}"
            f" SET {assignments} WHERE {condition}"
        )
        return self.execute(sql, params + where_params)

    def delete(self, table: str, where: Where) -> int:
        """Delete matching rows and return the number of affected rows."""
        condition, params = self.build_where_clause(where)
        sql = f"DELETE FROM {quote_identifier(table, self._dialect)} WHERE {condition}"
        return self.execute(sql, params)

    def last_insert_id(self) -> Any:
        """Return the id generated by the most recent inserting statement.

        Covers :meth:`insert` as well as INSERTs sent through :meth:`execute`.
        """
        return self._last_insert_id

    # --- transactions -------------------------------------------------------

    def _driver_call(self, label: str, func: Callable[[], Any]) -> None:
        try:
            func()
        except self._error_class as exc:
            code, message = _error_details(exc)
            raise QueryError(label, code, message) from exc
        logger.debug("%s", label)

    def begin(self) -> None:
        """Start a transaction.

        Raises:
            TransactionError: A transaction is already active.
        """
        if self._in_transaction:
            raise TransactionError("A transaction is already active.")
        self._driver_call("BEGIN", lambda: begin(self._conn, self._dialect))
        self._in_transaction = True

    def commit(self) -> None:
        if not self._in_transaction:
            raise TransactionError("There is no active transaction to commit.")
        try:
            self._driver_call("COMMIT", self._conn.commit)
        finally:
            self._in_transaction = False

    def rollback(self) -> None:
        if not self._in_transaction:
            raise TransactionError("There is no active transaction to roll back.")
        try:
            self._driver_call("ROLLBACK", self._conn.rollback)
        finally:
            self._in_transaction = False

    def transactional(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Call ``func(self, *args, **kwargs)`` inside a transaction.

        Commits and returns the result on success; rolls back and re-raises
        on any exception.
        """
        self.begin()
        try:
            result = func(self, *args, **kwargs)
        except BaseException:
            self.rollback()
            raise
        self.commit()
        return result

    @contextmanager
    def transaction(self) -> Generator[ComfyDB, None, None]:
        """Context manager form of :meth:`transactional`.

        Usage::

            with db.transaction():
                db.insert("t", {"v": 1})
                db.update("t", {"v": 2}, {"v": 1})
            # auto-committed here
        """
        self.begin()
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        self.commit()
