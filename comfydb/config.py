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

"""Configuration for :class:`comfydb.ComfyDB`.

Settings can be given directly or read from the environment::

    COMFYDB_URL=mysql://app:secret@db/app
    COMFYDB_LOGFILE=/var/log/app/queries.log
    COMFYDB_AUTOCOMMIT=1
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from comfydb.exceptions import ConfigurationError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {raw!r}")


@dataclass
class DatabaseConfig:
    """Connection settings.

    Attributes:
        url: Database URL understood by :func:`comfydb.connection.connect_url`.
        logfile: Optional path of the query log file.
        autocommit: Commit every statement issued outside a transaction.
    """

    url: str
    logfile: Path | None = None
    autocommit: bool = True

    @classmethod
    def from_env(
        cls,
        prefix: str = "COMFYDB_",
        environ: Mapping[str, str] | None = None,
    ) -> DatabaseConfig:
        """Build a config from ``<prefix>URL``, ``<prefix>LOGFILE`` and
        ``<prefix>AUTOCOMMIT``.

        Raises:
            ConfigurationError: ``<prefix>URL`` is missing or a value is
                malformed.
        """
        env = os.environ if environ is None else environ

        url = env.get(f"{prefix}URL", "").strip()
        if not url:
            raise ConfigurationError(f"{prefix}URL is not set")

        logfile = env.get(f"{prefix}LOGFILE", "").strip()
        autocommit_raw = env.get(f"{prefix}AUTOCOMMIT")
        autocommit = (
            True if autocommit_raw is None
            else _parse_bool(f"{prefix}AUTOCOMMIT", autocommit_raw)
        )

        return cls(
            url=url,
            logfile=Path(logfile).expanduser() if logfile else None,
            autocommit=autocommit,
        )
