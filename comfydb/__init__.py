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

"""Convenience helpers over DB-API connections.

Supports SQLite (built-in), PostgreSQL (optional, via psycopg2) and MySQL
(optional, via pymysql).

Usage::

    from comfydb import ComfyDB

    db = ComfyDB.connect_url("sqlite:///~/.myapp/data.db")
    paper_id = db.insert("papers", {"doi": "10.1101/x", "title": "A paper"})
    title = db.fetch("SELECT title FROM papers WHERE id = %d", [paper_id])
    db.delete("papers", {"doi": ["10.1101/x", "10.1101/y"]})
"""

from comfydb.clauses import build_assignments, build_insert_columns, build_where_clause
from comfydb.config import DatabaseConfig
from comfydb.connection import (
    connect_mysql,
    connect_postgresql,
    connect_sqlite,
    connect_url,
)
from comfydb.database import ComfyDB
from comfydb.dialects import Dialect, dialect_for, quote_identifier, quote_literal
from comfydb.exceptions import (
    ComfyError,
    ConfigurationError,
    FormatError,
    MissingParameter,
    QueryError,
    TemplateMismatch,
    TransactionError,
    UnusedParameter,
)
from comfydb.formatting import format_query, placeholder_for
from comfydb.transactions import transaction

__all__ = [
    "ComfyDB",
    "DatabaseConfig",
    "connect_sqlite",
    "connect_postgresql",
    "connect_mysql",
    "connect_url",
    "format_query",
    "placeholder_for",
    "build_where_clause",
    "build_assignments",
    "build_insert_columns",
    "Dialect",
    "dialect_for",
    "quote_identifier",
    "quote_literal",
    "transaction",
    "ComfyError",
    "QueryError",
    "FormatError",
    "MissingParameter",
    "TemplateMismatch",
    "UnusedParameter",
    "TransactionError",
    "ConfigurationError",
]
