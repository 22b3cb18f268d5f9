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

"""Exception hierarchy for comfydb.

Driver failures are wrapped in a single :class:`QueryError`; template
problems raise the lightweight :class:`FormatError` family, which also
derives from :class:`ValueError`.
"""

from __future__ import annotations

from typing import Any


class ComfyError(Exception):
    """Base class for all comfydb errors."""


class QueryError(ComfyError):
    """A statement failed inside the database driver.

    Attributes:
        query: The final SQL text that was sent to the driver.
        code: Driver error code (MySQL errno, PostgreSQL SQLSTATE,
            SQLite extended result code), or ``None`` if unavailable.
        message: The driver's error message.
    """

    def __init__(self, query: str, code: Any, message: str) -> None:
        super().__init__(f"A database query has failed: {message}")
        self.query = query
        self.code = code
        self.message = message


class FormatError(ComfyError, ValueError):
    """A query template could not be expanded with the given parameters."""


class MissingParameter(FormatError):
    """More placeholders than parameters."""


class UnusedParameter(FormatError):
    """Parameters left over after all placeholders were resolved."""


class TemplateMismatch(FormatError):
    """Parameter shape or type does not fit its placeholder."""


class TransactionError(ComfyError):
    """Transaction helper called in the wrong state."""


class ConfigurationError(ComfyError):
    """Missing or invalid configuration."""
