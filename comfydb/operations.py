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

"""Pure-function cursor helpers.

All functions take a DB-API connection as their first argument and a
finished SQL string; value substitution happens before they are called.
Rows come back as plain dicts whatever row type the driver produces
(tuples, ``sqlite3.Row``, ``RealDictRow``, pymysql ``DictCursor`` rows).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)


def execute(conn: Any, sql: str) -> Any:
    """Execute a single statement and return the cursor.

    Useful for INSERT / UPDATE / DELETE where you need
    ``cursor.lastrowid`` or ``cursor.rowcount``.
    """
    cur = conn.cursor()
    cur.execute(sql)
    return cur


def row_to_dict(cur: Any, row: Any) -> dict[str, Any]:
    """Convert one driver row into a ``{column: value}`` dict."""
    if isinstance(row, Mapping):
        return dict(row)
    names = [d[0] for d in cur.description]
    return dict(zip(names, row))


def rows_as_dicts(cur: Any) -> list[dict[str, Any]]:
    """Drain *cur* into dicts; statements without a result set give ``[]``."""
    if cur.description is None:
        return []
    return [row_to_dict(cur, row) for row in cur.fetchall()]


def fetch_all(conn: Any, sql: str) -> list[dict[str, Any]]:
    """Execute and return all rows as dicts."""
    return rows_as_dicts(execute(conn, sql))


def first_value(row: Mapping[str, Any]) -> Any:
    """Return the value of the first column of *row*."""
    return next(iter(row.values()))


def collapse_row(row: Mapping[str, Any]) -> Any:
    """Return the only value of a one-column row, else the row itself."""
    if len(row) == 1:
        return first_value(row)
    return dict(row)
