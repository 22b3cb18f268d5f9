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

"""Restricted ``sprintf``-style query templates.

Placeholders::

    %s   quoted string          %s+  comma-separated list of quoted strings
    %d   integer                %d+  list of integers
    %i   integer (alias of %d)  %i+
    %f   float                  %f+
    %n   NULL or quoted string  %n+
    %%   a literal percent sign

Parameters are consumed left to right.  Every placeholder must find a
parameter and every parameter must be used.

Usage::

    format_query(
        "SELECT * FROM t WHERE id IN (%d+) AND name = %s",
        [[1, 2, 3], "O'Brien"],
        quote,
    )
    # SELECT * FROM t WHERE id IN (1, 2, 3) AND name = 'O''Brien'
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from decimal import Decimal
from typing import Any

from comfydb.exceptions import MissingParameter, TemplateMismatch, UnusedParameter

_TOKEN = re.compile(r"%(?:(%)|([sdfin])(\+?))")

_SCALAR_TYPES = (str, bytes, bytearray, int, float, Decimal)


def _is_scalar(value: Any) -> bool:
    if value is None or isinstance(value, _SCALAR_TYPES):
        return True
    return not isinstance(value, Iterable)


def _to_int(value: Any) -> int:
    try:
        if isinstance(value, str):
            text = value.strip()
            try:
                return int(text)
            except ValueError:
                return int(float(text))
        return int(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise TemplateMismatch(f"Cannot use {value!r} as an integer.") from exc


def _to_float(value: Any) -> str:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise TemplateMismatch(f"Cannot use {value!r} as a float.") from exc
    if not math.isfinite(number):
        raise TemplateMismatch(f"Cannot use non-finite float {value!r}.")
    return repr(number)


def _transforms(quote: Callable[[Any], str]) -> dict[str, Callable[[Any], str]]:
    return {
        "s": quote,
        "d": lambda v: str(_to_int(v)),
        "i": lambda v: str(_to_int(v)),
        "f": _to_float,
        "n": lambda v: "NULL" if v is None else quote(v),
    }


def format_query(template: str, args: Sequence[Any], quote: Callable[[Any], str]) -> str:
    """Expand the placeholders of *template* with *args*.

    Args:
        template: SQL with ``%s``/``%d``/``%i``/``%f``/``%n`` placeholders.
        args: Positional parameters, one per placeholder.  List-mode
            placeholders (``%s+``) take one iterable each.
        quote: Callable that turns a value into a quoted string literal.

    Raises:
        MissingParameter: A placeholder found no parameter.
        UnusedParameter: Parameters were left over.
        TemplateMismatch: A parameter does not fit its placeholder.
    """
    transforms = _transforms(quote)
    remaining = list(args)
    position = 0

    def _replace(match: re.Match[str]) -> str:
        nonlocal position
        if match.group(1):
            return "%"

        if position >= len(remaining):
            raise MissingParameter(
                f"Missing value for placeholder {match.group(0)!r} "
                f"(only {len(remaining)} parameter(s) given)."
            )
        arg = remaining[position]
        position += 1

        func = transforms[match.group(2)]
        list_mode = match.group(3) == "+"

        if list_mode:
            if _is_scalar(arg):
                raise TemplateMismatch(
                    f"Expected a list value for {match.group(0)!r} "
                    f"but got {type(arg).__name__} instead."
                )
            if isinstance(arg, Mapping):
                arg = arg.values()
            items = list(arg)
            for item in items:
                if not _is_scalar(item):
                    raise TemplateMismatch(
                        f"Nested list values are not allowed in {match.group(0)!r}."
                    )
            return ", ".join(func(v) for v in items)

        if not _is_scalar(arg):
            raise TemplateMismatch(
                f"List values are not allowed for placeholder {match.group(0)!r}."
            )
        return func(arg)

    result = _TOKEN.sub(_replace, template)

    if position < len(remaining):
        raise UnusedParameter(
            f"{len(remaining) - position} parameter(s) left over after formatting."
        )
    return result


def placeholder_for(value: Any) -> str:
    """Return the placeholder that fits the runtime type of *value*."""
    if value is None:
        return "%n"
    if isinstance(value, (int, bool)):
        return "%d"
    if isinstance(value, float):
        return "%f"
    return "%s"
