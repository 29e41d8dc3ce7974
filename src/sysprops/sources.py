"""Property sources: where the key/value pairs to apply come from.

Sources are read again on every call so that a reconciliation pass always
sees the current environment.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from sysprops.values import BinarySourceValue, ConfigEntry, Value, to_value

logger = logging.getLogger(__name__)

PROPERTIES_TABLE = "properties"


@runtime_checkable
class PropertySource(Protocol):
    def entries(self) -> list[ConfigEntry]:
        """Return a fresh snapshot of all key/value pairs."""
        ...


class MappingSource:
    """Entries from an injected mapping, in its iteration order."""

    def __init__(self, mapping: Mapping[str, Any]) -> None:
        self._mapping = mapping

    def entries(self) -> list[ConfigEntry]:
        return [ConfigEntry(k, to_value(v)) for k, v in self._mapping.items()]


class SystemPropertySource:
    """The ``[properties]`` table of a config file, overridden by the process environment.

    In the file, a value may be ``{ path = "logo.png" }`` to point an
    attachment at a local file relative to the config file.
    """

    def __init__(
        self, properties_file: Path | None = None, environ: Mapping[str, str] | None = None
    ) -> None:
        self.properties_file = properties_file
        self._environ = environ

    def entries(self) -> list[ConfigEntry]:
        merged: dict[str, Value] = dict(self._file_properties())
        environ = self._environ if self._environ is not None else os.environ
        for key, value in environ.items():
            merged[key] = to_value(value)
        return [ConfigEntry(k, v) for k, v in merged.items()]

    def _file_properties(self) -> dict[str, Value]:
        path = self.properties_file
        if not path or not path.exists():
            return {}
        try:
            table = tomllib.loads(path.read_text(encoding="utf-8")).get(PROPERTIES_TABLE, {})
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.error("Failed to read properties from %s: %s", path, e)
            return {}
        if not isinstance(table, dict):
            logger.error("Ignoring [%s] in %s: expected a table", PROPERTIES_TABLE, path)
            return {}
        return {str(k): self._file_value(v, path.parent) for k, v in table.items()}

    @staticmethod
    def _file_value(raw: Any, base_dir: Path) -> Value:
        if isinstance(raw, dict) and "path" in raw:
            return BinarySourceValue(base_dir / str(raw["path"]))
        return to_value(raw)
