"""Configuration loading from environment variables and sysprops.toml."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

logger = logging.getLogger(__name__)

_DEFAULT_STORE_DIR = Path.home() / ".sysprops" / "store"
_CONFIG_FILENAME = "sysprops.toml"
_TRUE_VALUES = ("1", "true", "yes", "on")


def _as_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


@dataclass
class UpdaterConfig:
    """How values are sanitized and attachments fetched."""

    trim_double_quotes: bool = False
    http_timeout: float | None = None


@dataclass
class SyspropsConfig:
    """Top-level sysprops configuration."""

    updater: UpdaterConfig = field(default_factory=UpdaterConfig)
    store_dir: Path = _DEFAULT_STORE_DIR
    main_wiki: str = "xwiki"
    log_level: str = "INFO"
    config_path: Path | None = None
    flavors: dict[str, str] = field(default_factory=dict)


def find_config(config_path: Path | None = None) -> Path | None:
    """Return the config file to use: explicit path, then cwd, then ~/.sysprops/."""
    if config_path:
        if config_path.exists():
            return config_path
        logger.warning("Config file %s not found, searching default locations", config_path)
    for candidate in [Path.cwd() / _CONFIG_FILENAME, Path.home() / ".sysprops" / _CONFIG_FILENAME]:
        if candidate.exists():
            return candidate
    return None


def load_config(config_path: Path | None = None) -> SyspropsConfig:
    """Load configuration from environment variables and optional sysprops.toml.

    Priority: environment variables > sysprops.toml > defaults.
    """
    path = find_config(config_path)
    file_data: dict = tomllib.loads(path.read_text()) if path else {}

    updater_data = file_data.get("updater", {})
    timeout = os.getenv("SYSPROPS_HTTP_TIMEOUT", updater_data.get("http_timeout"))

    return SyspropsConfig(
        updater=UpdaterConfig(
            trim_double_quotes=_as_bool(
                os.getenv("SYSPROPS_TRIM_DOUBLE_QUOTES", updater_data.get("trim_double_quotes", False))
            ),
            http_timeout=float(timeout) if timeout not in (None, "") else None,
        ),
        store_dir=Path(
            os.getenv("SYSPROPS_STORE_DIR", file_data.get("store_dir", str(_DEFAULT_STORE_DIR)))
        ).expanduser(),
        main_wiki=os.getenv("SYSPROPS_MAIN_WIKI", file_data.get("main_wiki", "xwiki")),
        log_level=os.getenv("SYSPROPS_LOG_LEVEL", file_data.get("log_level", "INFO")),
        config_path=path,
        flavors={str(k): str(v) for k, v in file_data.get("flavors", {}).items()},
    )
