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

"""Append-only query log file.

One line per statement, runnable as a SQL script::

    /* 0.0012s */ SELECT * FROM users WHERE `id` = 1;
    /* 0.0003s */ DELETE FROM users WHERE `id` = 1; -- ERROR: ...
"""

from __future__ import annotations

from pathlib import Path


class QueryLog:
    """Write executed statements and their timings to *path*."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def format_line(self, duration: float, query: str, error: str | None = None) -> str:
        line = f"/* {duration:.4f}s */ {query};"
        if error is not None:
            line += f" -- ERROR: {error}"
        return line

    def write(self, duration: float, query: str, error: str | None = None) -> None:
        """Append one statement to the log."""
        with self.path.open("a", encoding="utf-8") as fh:
            fh.write(self.format_line(duration, query, error) + "\n")
