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

"""Backend detection and SQL quoting.

The backend is detected from the module of the connection's class, the
same way the rest of comfydb tells SQLite from everything else.  String
literals are escaped by the driver itself where it offers a way to do so;
SQLite and unknown drivers get ANSI single-quote doubling.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dialect:
    """SQL flavour of a connection.

    Attributes:
        name: ``"sqlite"``, ``"postgresql"``, ``"mysql"`` or ``"generic"``.
        identifier_quote: Character used to quote table and column names.
    """

    name: str
    identifier_quote: str = '"'


SQLITE = Dialect("sqlite")
POSTGRESQL = Dialect("postgresql")
MYSQL = Dialect("mysql", "`")
GENERIC = Dialect("generic")

_MODULE_PREFIXES = (
    ("sqlite3", SQLITE),
    ("psycopg2", POSTGRESQL),
    ("pymysql", MYSQL),
    ("MySQLdb", MYSQL),
)


def dialect_for(conn: Any) -> Dialect:
    """Return the :class:`Dialect` of a DB-API connection."""
    module_name = type(conn).__module__
    for prefix, dialect in _MODULE_PREFIXES:
        if module_name == prefix or module_name.startswith(prefix + "."):
            return dialect
    logger.debug("Unknown connection module %s, using generic dialect", module_name)
    return GENERIC


def quote_identifier(name: str, dialect: Dialect = GENERIC) -> str:
    """Quote a table or column name; ``schema.table`` quotes each part."""
    q = dialect.identifier_quote
    return ".".join(f"{q}{part.replace(q, q + q)}{q}" for part in str(name).split("."))


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return str(value)


def _ansi_literal(text: str) -> str:
    return "'" + text.replace("'", "''") + "'"


def quote_literal(conn: Any, value: Any, dialect: Dialect | None = None) -> str:
    """Return *value* as a quoted SQL string literal for *conn*.

    ``None`` becomes the empty string and booleans become ``'1'``/``'0'``;
    callers wanting ``NULL`` use the ``%n`` placeholder instead.
    """
    if dialect is None:
        dialect = dialect_for(conn)
    text = _as_text(value)

    if dialect is MYSQL:
        quoted = conn.literal(text)
        if isinstance(quoted, bytes):
            quoted = quoted.decode("utf-8")
        return quoted

    if dialect is POSTGRESQL:
        from psycopg2.extensions import QuotedString

        adapted = QuotedString(text)
        adapted.prepare(conn)
        return adapted.getquoted().decode("utf-8")

    return _ansi_literal(text)
