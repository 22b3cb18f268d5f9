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

"""Tests for comfydb.database — ComfyDB against in-memory SQLite."""

from __future__ import annotations

import sqlite3

import pytest

from comfydb import ComfyDB, MissingParameter, QueryError, connect_sqlite
from comfydb.dialects import SQLITE

SCHEMA = (
    "CREATE TABLE users ("
    " id INTEGER PRIMARY KEY,"
    " name TEXT,"
    " email TEXT,"
    " score REAL DEFAULT 0"
    ")"
)


def _db(**kwargs):
    db = ComfyDB(connect_sqlite(":memory:"), **kwargs)
    db.execute(SCHEMA)
    return db


def _seeded(**kwargs):
    db = _db(**kwargs)
    db.insert("users", {"name": "Ada", "email": "ada@example.org", "score": 9.5})
    db.insert("users", {"name": "Bob", "email": None, "score": 4.0})
    return db


class TestInsert:
    def test_returns_inserted_id(self):
        db = _db()
        assert db.insert("users", {"name": "Ada"}) == 1
        assert db.insert("users", {"name": "Bob"}) == 2
        assert db.last_insert_id() == 2

    def test_last_insert_id_follows_execute(self):
        db = _db()
        db.insert("users", {"name": "Ada"})
        db.insert("users", {"name": "Bob"})
        db.execute("INSERT INTO users (name) VALUES (%s)", ["Cy"])
        assert db.last_insert_id() == 3

    def test_last_insert_id_kept_after_select(self):
        db = _db()
        db.insert("users", {"name": "Ada"})
        db.query("SELECT * FROM users")
        assert db.last_insert_id() == 1

    def test_none_is_stored_as_null(self):
        db = _db()
        user_id = db.insert("users", {"name": "Ada", "email": None})
        assert db.fetch("SELECT email IS NULL FROM users WHERE id = %d", [user_id]) == 1

    def test_quotes_are_escaped(self):
        db = _db()
        db.insert("users", {"name": "O'Brien"})
        assert db.fetch("SELECT name FROM users") == "O'Brien"

    def test_empty_data_uses_defaults(self):
        db = _db()
        user_id = db.insert("users", {})
        assert db.fetch("SELECT score FROM users WHERE id = %d", [user_id]) == 0

    @pytest.mark.skipif(
        sqlite3.sqlite_version_info < (3, 35, 0), reason="RETURNING needs SQLite 3.35"
    )
    def test_returning(self):
        db = _db()
        assert db.insert("users", {"name": "Ada"}, returning="id") == 1


class TestFetch:
    def test_no_rows_is_none(self):
        db = _db()
        assert db.fetch("SELECT * FROM users") is None

    def test_single_column_is_scalar(self):
        db = _seeded()
        assert db.fetch("SELECT name FROM users WHERE id = %d", [2]) == "Bob"

    def test_multi_column_is_row(self):
        db = _seeded()
        row = db.fetch("SELECT id, name FROM users WHERE name = %s", ["Ada"])
        assert row == {"id": 1, "name": "Ada"}

    def test_only_first_row(self):
        db = _seeded()
        assert db.fetch("SELECT name FROM users ORDER BY id DESC") == "Bob"

    def test_without_params_sql_is_verbatim(self):
        db = _seeded()
        assert db.fetch("SELECT name FROM users WHERE name LIKE 'A%'") == "Ada"

    def test_literal_percent_with_params(self):
        db = _seeded()
        assert db.fetch("SELECT name FROM users WHERE name LIKE 'B%%' AND id > %d", [0]) == "Bob"


class TestQuery:
    def test_rows_are_dicts(self):
        db = _seeded()
        rows = db.query("SELECT id, name FROM users ORDER BY id")
        assert rows == [{"id": 1, "name": "Ada"}, {"id": 2, "name": "Bob"}]

    def test_empty_result(self):
        db = _db()
        assert db.query("SELECT * FROM users") == []

    def test_list_placeholder(self):
        db = _seeded()
        rows = db.query("SELECT name FROM users WHERE id IN (%d+) ORDER BY id", [[1, 2]])
        assert [r["name"] for r in rows] == ["Ada", "Bob"]

    def test_format_error_raised_before_sending(self):
        db = _db()
        with pytest.raises(MissingParameter):
            db.query("SELECT * FROM users WHERE id = %d", [])


class TestFetchColumn:
    def test_first_column_of_each_row(self):
        db = _seeded()
        assert db.fetch_column("SELECT name, email FROM users ORDER BY id") == ["Ada", "Bob"]

    def test_empty(self):
        db = _db()
        assert db.fetch_column("SELECT name FROM users") == []


class TestFetchMap:
    def test_two_columns(self):
        db = _seeded()
        assert db.fetch_map("SELECT id, name FROM users") == {1: "Ada", 2: "Bob"}

    def test_more_columns_give_dicts(self):
        db = _seeded()
        result = db.fetch_map("SELECT name, id, email FROM users")
        assert result == {
            "Ada": {"id": 1, "email": "ada@example.org"},
            "Bob": {"id": 2, "email": None},
        }

    def test_later_rows_win(self):
        db = _seeded()
        db.insert("users", {"name": "Ada", "email": "second@example.org"})
        result = db.fetch_map("SELECT name, email FROM users ORDER BY id")
        assert result["Ada"] == "second@example.org"


class TestUpdate:
    def test_returns_affected_rows(self):
        db = _seeded()
        assert db.update("users", {"score": 10.0}, {"name": "Ada"}) == 1
        assert db.fetch("SELECT score FROM users WHERE id = 1") == 10.0

    def test_set_null(self):
        db = _seeded()
        db.update("users", {"email": None}, {"id": 1})
        assert db.fetch("SELECT COUNT(*) FROM users WHERE email IS NULL") == 2

    def test_where_null(self):
        db = _seeded()
        assert db.update("users", {"email": "bob@example.org"}, {"email": None}) == 1

    def test_empty_where_updates_all(self):
        db = _seeded()
        assert db.update("users", {"score": 0}, {}) == 2

    def test_empty_in_list_updates_nothing(self):
        db = _seeded()
        assert db.update("users", {"score": 0}, {"id": []}) == 0

    def test_string_where(self):
        db = _seeded()
        assert db.update("users", {"score": 1}, "score < 5") == 1

    def test_none_where_is_rejected(self):
        db = _seeded()
        with pytest.raises(TypeError):
            db.update("users", {"score": 0}, None)
        assert db.fetch_column("SELECT score FROM users ORDER BY id") == [9.5, 4.0]

    def test_requires_data(self):
        db = _seeded()
        with pytest.raises(ValueError):
            db.update("users", {}, {"id": 1})


class TestDelete:
    def test_none_where_is_rejected(self):
        db = _seeded()
        with pytest.raises(TypeError):
            db.delete("users", None)
        assert db.fetch("SELECT COUNT(*) FROM users") == 2

    def test_list_where_is_rejected(self):
        db = _seeded()
        with pytest.raises(TypeError):
            db.delete("users", [])
        assert db.fetch("SELECT COUNT(*) FROM users") == 2

    def test_in_list(self):
        db = _seeded()
        assert db.delete("users", {"id": [1, 2, 99]}) == 2
        assert db.fetch("SELECT COUNT(*) FROM users") == 0

    def test_equality(self):
        db = _seeded()
        assert db.delete("users", {"name": "Bob"}) == 1
        assert db.fetch_column("SELECT name FROM users") == ["Ada"]

    def test_empty_in_list_deletes_nothing(self):
        db = _seeded()
        assert db.delete("users", {"id": []}) == 0


class TestExecute:
    def test_returns_rowcount(self):
        db = _seeded()
        assert db.execute("UPDATE users SET score = %f", [1.25]) == 2


class TestQuote:
    def test_quote(self):
        db = _db()
        assert db.quote("it's") == "'it''s'"

    def test_format_query(self):
        db = _db()
        assert db.format_query("a = %s AND b = %d", ["x", "2"]) == "a = 'x' AND b = 2"


class TestErrors:
    def test_driver_error_is_wrapped(self):
        db = _db()
        with pytest.raises(QueryError) as excinfo:
            db.query("SELECT * FROM missing_table")

        err = excinfo.value
        assert err.query == "SELECT * FROM missing_table"
        assert "no such table" in err.message
        assert str(err).startswith("A database query has failed:")
        assert isinstance(err.__cause__, sqlite3.Error)

    def test_failed_query_shows_formatted_sql(self):
        db = _db()
        with pytest.raises(QueryError) as excinfo:
            db.execute("INSERT INTO missing (a) VALUES (%s)", ["x"])
        assert excinfo.value.query == "INSERT INTO missing (a) VALUES ('x')"

    def test_connection_usable_after_error(self):
        db = _seeded()
        with pytest.raises(QueryError):
            db.query("SELECT nope FROM users")
        assert db.fetch("SELECT COUNT(*) FROM users") == 2


class TestQueryLog:
    def test_statements_are_logged(self, tmp_path):
        logfile = tmp_path / "logs" / "queries.log"
        db = _db(logfile=logfile)
        db.fetch("SELECT name FROM users WHERE id = %d", [1])

        lines = logfile.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("/* ")
        assert lines[1].endswith("SELECT name FROM users WHERE id = 1;")

    def test_errors_are_logged(self, tmp_path):
        logfile = tmp_path / "queries.log"
        db = _db(logfile=logfile)
        with pytest.raises(QueryError):
            db.query("SELECT * FROM missing_table")
        assert "-- ERROR: no such table" in logfile.read_text(encoding="utf-8")

    def test_set_logfile_none_stops_logging(self, tmp_path):
        logfile = tmp_path / "queries.log"
        db = _db(logfile=logfile)
        db.set_logfile(None)
        db.query("SELECT 1")
        assert len(logfile.read_text(encoding="utf-8").splitlines()) == 1


class TestAccessors:
    def test_connection_and_dialect(self):
        conn = connect_sqlite(":memory:")
        db = ComfyDB(conn)
        assert db.connection is conn
        assert db.dialect is SQLITE
        assert db.dialect.name == "sqlite"

    def test_close(self):
        db = _db()
        db.close()
        with pytest.raises(sqlite3.ProgrammingError):
            db.connection.execute("SELECT 1")
