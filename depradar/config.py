"""Configuration file loader for depradar.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``depradar.toml`` — settings under ``[depradar]`` table
- ``pyproject.toml`` — settings under ``[tool.depradar]`` table

Discovery order:

1. Explicit path from ``--config`` or ``DEPRADAR_CONFIG``
2. ``depradar.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.depradar]`` section

Configuration precedence: defaults < config file < environment < CLI args.
Environment variables are read by the CLI options themselves.

Example (``depradar.toml``)::

    [depradar]
    concurrency = 8
    timeout = 15
    registry_url = "https://registry.npmmirror.com"

The GitHub token is deliberately not a file setting; pass it with
``--github-token`` or ``GITHUB_TOKEN``.
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from depradar.exceptions import ConfigError
from depradar.utils.logger import get_logger
from depradar.constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_SNAPSHOT_FILE,
    DEFAULT_TIMEOUT,
    GITHUB_API_URL,
    NPM_REGISTRY_URL,
)

logger = get_logger("config")


@dataclass
class DepRadarConfig:
    """Parsed and validated depradar configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        concurrency: Dependencies analyzed at the same time.
        timeout: HTTP timeout in seconds.
        registry_url: npm registry root.
        github_api_url: GitHub REST API root.
        snapshot_file: JSON file holding saved manifest snapshots.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    concurrency: int = DEFAULT_CONCURRENCY
    timeout: int = DEFAULT_TIMEOUT
    registry_url: str = NPM_REGISTRY_URL
    github_api_url: str = GITHUB_API_URL
    snapshot_file: str = DEFAULT_SNAPSHOT_FILE

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    @property
    def snapshot_path(self) -> Path:
        """:attr:`snapshot_file` with ``~`` expanded."""
        return Path(self.snapshot_file).expanduser()

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging."""
        return {
            "concurrency": self.concurrency,
            "timeout": self.timeout,
            "registry_url": self.registry_url,
            "github_api_url": self.github_api_url,
            "snapshot_file": self.snapshot_file,
        }


# option name → (expected type, validator description, validator)
_OPTIONS = {
    "concurrency": (int, "at least 1", lambda v: v >= 1),
    "timeout": (int, "greater than 0", lambda v: v > 0),
    "registry_url": (str, "a non-empty URL", lambda v: bool(v.strip())),
    "github_api_url": (str, "a non-empty URL", lambda v: bool(v.strip())),
    "snapshot_file": (str, "a non-empty path", lambda v: bool(v.strip())),
}


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    depradar_toml = cwd / "depradar.toml"
    if depradar_toml.is_file():
        logger.debug("Found depradar.toml: %s", depradar_toml)
        return depradar_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_depradar_section(pyproject_toml):
        logger.debug("Found [tool.depradar] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_depradar_section(path: Path) -> bool:
    """Check if pyproject.toml contains a ``[tool.depradar]`` section.

    An unreadable or invalid pyproject.toml is treated as having none.
    """
    try:
        raw = _read_toml(path)
    except ConfigError as exc:
        logger.debug("Ignoring %s: %s", path, exc)
        return False
    tool = raw.get("tool", {})
    return isinstance(tool, dict) and "depradar" in tool


def load_config(config_path: Optional[Path] = None) -> DepRadarConfig:
    """Load and validate depradar configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`DepRadarConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return DepRadarConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("depradar", {})
    else:
        section = raw.get("depradar", {})

    if not section:
        logger.debug("Config file found but no depradar section, using defaults")
        return DepRadarConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> DepRadarConfig:
    """Validate a ``[depradar]`` table and build a :class:`DepRadarConfig`.

    Raises:
        ConfigError: Unknown keys, wrong types, or out-of-range values.
    """
    if not isinstance(section, dict):
        raise ConfigError(
            "depradar configuration must be a table",
            config_path=config_path,
        )

    unknown = set(section) - set(_OPTIONS)
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    config = DepRadarConfig()

    for option, value in section.items():
        expected, description, is_valid = _OPTIONS[option]

        # bool is a subclass of int; ``concurrency = true`` is a mistake
        if isinstance(value, bool) or not isinstance(value, expected):
            raise ConfigError(
                f"{option} must be {'an integer' if expected is int else 'a string'}, "
                f"got {type(value).__name__}",
                config_path=config_path,
                option=option,
            )
        if not is_valid(value):
            raise ConfigError(
                f"{option} must be {description}, got {value!r}",
                config_path=config_path,
                option=option,
            )

        setattr(config, option, value)

    return config
