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

"""Build SQL fragments from mappings.

Each builder returns the fragment together with the parameter list that
:func:`comfydb.formatting.format_query` consumes for it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from comfydb.dialects import GENERIC, Dialect, quote_identifier
from comfydb.formatting import placeholder_for

_LIST_TYPES = (list, tuple, set, frozenset)


def build_where_clause(
    where: str | Mapping[str, Any],
    dialect: Dialect = GENERIC,
) -> tuple[str, list[Any]]:
    """Turn a where description into ``(condition_sql, params)``.

    A string is used verbatim.  In a mapping, ``None`` means ``IS NULL``,
    a list means ``IN (...)`` and anything else means equality.  An empty
    mapping matches every row (``1``), an empty list matches none (``0``).

    Raises:
        TypeError: *where* is neither a string nor a mapping.
    """
    if isinstance(where, str):
        return where, []

    if not isinstance(where, Mapping):
        raise TypeError(
            f"where must be a string or a mapping, not {type(where).__name__}"
        )

    if not where:
        return "1", []

    conditions: list[str] = []
    params: list[Any] = []

    for column, value in where.items():
        col = quote_identifier(column, dialect)
        if value is None:
            conditions.append(f"{col} IS NULL")
        elif isinstance(value, _LIST_TYPES):
            if not value:
                # IN () is a syntax error
                conditions.append("0")
            else:
                conditions.append(f"{col} IN (%s+)")
                params.append(list(value))
        else:
            conditions.append(f"{col} = {placeholder_for(value)}")
            params.append(value)

    return " AND ".join(conditions), params


def build_assignments(
    data: Mapping[str, Any],
    dialect: Dialect = GENERIC,
) -> tuple[str, list[Any]]:
    """Return the ``SET`` list of an UPDATE and its parameters."""
    assignments = [
        f"{quote_identifier(column, dialect)} = {placeholder_for(value)}"
        for column, value in data.items()
    ]
    return ", ".join(assignments), list(data.values())


def build_insert_columns(
    data: Mapping[str, Any],
    dialect: Dialect = GENERIC,
) -> tuple[str, str, list[Any]]:
    """Return ``(columns_sql, values_sql, params)`` for an INSERT."""
    columns = ", ".join(quote_identifier(column, dialect) for column in data)
    values = ", ".join(placeholder_for(value) for value in data.values())
    return columns, values, list(data.values())
