"""Configuration loading for the JournalOwl MCP server.

Settings are resolved in order, later sources winning:
1. Built-in defaults
2. Optional config file (.toml or .json)
3. Environment variables
4. Explicit overrides (command-line flags)
"""

from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from .errors import ConfigurationError

VERSION = "0.1.0"

DEFAULT_BASE_URL = "https://journalai-backend-production.up.railway.app/api/v1"
DEFAULT_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "INFO"

ENV_API_KEY = "JOURNALOWL_API_KEY"
ENV_API_URL = "JOURNALOWL_API_URL"
ENV_TIMEOUT = "JOURNALOWL_TIMEOUT"
ENV_LOG_LEVEL = "JOURNALOWL_LOG_LEVEL"
ENV_CONFIG = "JOURNALOWL_CONFIG"

CONFIG_CANDIDATES = (
    "journalowl.toml",
    "journalowl.json",
    ".journalowl.toml",
    ".journalowl.json",
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ServerConfig:
    """Settings for the server and its backend client."""

    api_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    def validate(self) -> None:
        """Check the settings, raising ConfigurationError on the first problem."""
        if not self.api_key:
            raise ConfigurationError(
                f"{ENV_API_KEY} environment variable is required. "
                "Get your API key from JournalOwl Settings > API Keys."
            )

        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(f"Invalid base URL: {self.base_url}")

        if self.timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive, got {self.timeout}")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.log_level}")


def _parse_timeout(value: Any, source: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid timeout in {source}: {value!r}")


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def dict_to_config(data: dict[str, Any], base: Optional[ServerConfig] = None) -> ServerConfig:
    """Apply a parsed config file on top of `base`.

    Expected layout::

        [api]
        key = "..."
        url = "https://..."
        timeout = 30

        [logging]
        level = "INFO"
    """
    config = base or ServerConfig()
    changes: dict[str, Any] = {}

    api = data.get("api", {})
    if "key" in api:
        changes["api_key"] = api["key"]
    if "url" in api:
        changes["base_url"] = api["url"]
    if "timeout" in api:
        changes["timeout"] = _parse_timeout(api["timeout"], "config file")

    logging_section = data.get("logging", {})
    if "level" in logging_section:
        changes["log_level"] = logging_section["level"]

    return replace(config, **changes)


def apply_environment(config: ServerConfig, environ: Mapping[str, str]) -> ServerConfig:
    """Overlay JOURNALOWL_* environment variables. Empty values are ignored."""
    changes: dict[str, Any] = {}

    if environ.get(ENV_API_KEY):
        changes["api_key"] = environ[ENV_API_KEY]
    if environ.get(ENV_API_URL):
        changes["base_url"] = environ[ENV_API_URL]
    if environ.get(ENV_TIMEOUT):
        changes["timeout"] = _parse_timeout(environ[ENV_TIMEOUT], ENV_TIMEOUT)
    if environ.get(ENV_LOG_LEVEL):
        changes["log_level"] = environ[ENV_LOG_LEVEL]

    return replace(config, **changes)


def find_config_file(
    directory: Path, environ: Optional[Mapping[str, str]] = None
) -> Optional[Path]:
    """Find a config file.

    JOURNALOWL_CONFIG wins; otherwise the first of CONFIG_CANDIDATES that
    exists in `directory`.
    """
    environ = os.environ if environ is None else environ
    if environ.get(ENV_CONFIG):
        return Path(environ[ENV_CONFIG])

    for name in CONFIG_CANDIDATES:
        path = directory / name
        if path.exists():
            return path

    return None


def load_config_file(path: Path, base: Optional[ServerConfig] = None) -> ServerConfig:
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    suffix = path.suffix.lower()
    try:
        if suffix == ".toml":
            data = load_toml_config(path)
        elif suffix == ".json":
            data = load_json_config(path)
        else:
            raise ConfigurationError(f"Unsupported config file type: {suffix}")
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Invalid config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a table/object")

    return dict_to_config(data, base)


def load_config(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    directory: Optional[Path] = None,
    **overrides: Any,
) -> ServerConfig:
    """Resolve the server configuration.

    Args:
        config_path: Explicit config file (default: auto-detect)
        environ: Environment mapping (default: os.environ)
        directory: Where to look for config files (default: current directory)
        **overrides: ServerConfig fields to force; None values are skipped

    Returns:
        ServerConfig instance. It is not validated; call validate() before use.
    """
    environ = os.environ if environ is None else environ

    if config_path is None:
        config_path = find_config_file(directory or Path.cwd(), environ)

    config = ServerConfig()
    if config_path is not None:
        config = load_config_file(config_path, config)

    config = apply_environment(config, environ)

    forced = {k: v for k, v in overrides.items() if v is not None}
    if forced:
        config = replace(config, **forced)

    return config
