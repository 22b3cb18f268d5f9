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

"""Transaction primitives."""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from comfydb.dialects import MYSQL, SQLITE, Dialect, dialect_for

logger = logging.getLogger(__name__)


def begin(conn: Any, dialect: Dialect | None = None) -> None:
    """Open a transaction on *conn*.

    SQLite gets an explicit ``BEGIN`` so that ``commit()`` has a
    well-defined scope.  MySQL drivers expose ``conn.begin()``.  psycopg2
    opens a transaction implicitly on the first statement, so nothing is
    sent.
    """
    if dialect is None:
        dialect = dialect_for(conn)

    if dialect is SQLITE:
        if not conn.in_transaction:
            conn.execute("BEGIN")
    elif dialect is MYSQL:
        conn.begin()
    logger.debug("Transaction started (%s)", dialect.name)


@contextmanager
def transaction(conn: Any) -> Generator[Any, None, None]:
    """Context manager that commits on success, rolls back on exception.

    Usage::

        with transaction(conn):
            conn.cursor().execute("INSERT INTO ...")
            conn.cursor().execute("UPDATE ...")
        # auto-committed here
    """
    begin(conn)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
