"""Configuration file loader for modgraph.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``modgraph.toml``: settings under ``[modgraph]`` table
- ``pyproject.toml``: settings under ``[tool.modgraph]`` table

Discovery order:

1. Explicit path from ``--config`` or ``MODGRAPH_CONFIG``
2. ``modgraph.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.modgraph]`` section

Configuration precedence: defaults < config file < environment < CLI args.

Example (``modgraph.toml``)::

    [modgraph]
    catalog = "catalog.json"
    candidate_selection = "highest_id"
    constraint_scope = "global"
"""

from __future__ import annotations

import os
import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Sequence
from dataclasses import dataclass, field

from modgraph.exceptions import ConfigError
from modgraph.utils.logger import get_logger
from modgraph.constants import (
    CANDIDATE_SELECTIONS,
    CONSTRAINT_SCOPES,
    DEFAULT_CANDIDATE_SELECTION,
    DEFAULT_CONSTRAINT_SCOPE,
)

logger = get_logger("config")

#: Environment variable overriding the catalog snapshot path.
CATALOG_ENV_VAR = "MODGRAPH_CATALOG"


@dataclass
class ModGraphConfig:
    """Parsed and validated modgraph configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        catalog: Default catalog snapshot path for CLI commands.
        candidate_selection: How the tree builder picks a representative
            candidate per dependency package.
        constraint_scope: Whether recorded constraints are shared by the
            whole tree or kept per branch.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    catalog: Optional[Path] = None
    candidate_selection: str = DEFAULT_CANDIDATE_SELECTION
    constraint_scope: str = DEFAULT_CONSTRAINT_SCOPE

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def resolve_catalog(self, cli_value: Optional[Path] = None) -> Optional[Path]:
        """Return the catalog path to use.

        CLI value wins over ``MODGRAPH_CATALOG``, which wins over the file.
        """
        if cli_value is not None:
            return cli_value
        env_value = os.environ.get(CATALOG_ENV_VAR)
        if env_value:
            return Path(env_value)
        return self.catalog

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging.

        Excludes ``source_path`` metadata.
        """
        return {
            "catalog": str(self.catalog) if self.catalog else None,
            "candidate_selection": self.candidate_selection,
            "constraint_scope": self.constraint_scope,
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Search order:

    1. ``explicit_path`` (from ``--config`` or ``MODGRAPH_CONFIG``)
    2. ``modgraph.toml`` in current directory
    3. ``pyproject.toml`` with ``[tool.modgraph]`` section in current directory

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

    modgraph_toml = cwd / "modgraph.toml"
    if modgraph_toml.is_file():
        logger.debug("Found modgraph.toml: %s", modgraph_toml)
        return modgraph_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_modgraph_section(pyproject_toml):
        logger.debug("Found [tool.modgraph] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_modgraph_section(path: Path) -> bool:
    """Check if pyproject.toml contains a [tool.modgraph] section.

    A pyproject.toml that cannot be parsed is treated as having none.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return "modgraph" in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> ModGraphConfig:
    """Load and validate modgraph configuration.

    Discovers config file (or uses provided path), parses and validates it.
    Returns config with defaults if no file found.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`ModGraphConfig`.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return ModGraphConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("modgraph", {})
    else:
        section = raw.get("modgraph", {})

    if not section:
        logger.debug("Config file found but no modgraph section, using defaults")
        return ModGraphConfig(source_path=resolved)

    config = _parse_section(section, config_path=resolved)
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


def _choice(
    section: Dict[str, Any],
    key: str,
    choices: Sequence[str],
    config_path: Path,
) -> Optional[str]:
    if key not in section:
        return None

    val = section[key]
    if not isinstance(val, str):
        raise ConfigError(
            f"{key} must be a string, got {type(val).__name__}",
            config_path=str(config_path),
            option=key,
        )
    if val not in choices:
        raise ConfigError(
            f"{key} must be one of {', '.join(choices)}, got {val!r}",
            config_path=str(config_path),
            option=key,
        )
    return val


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: Path,
) -> ModGraphConfig:
    """Parse and validate the ``[modgraph]`` or ``[tool.modgraph]`` table.

    A relative ``catalog`` path is taken relative to the config file.

    Raises:
        ConfigError: Unknown keys or incorrect types.
    """
    config = ModGraphConfig()

    known_top = {"catalog", "candidate_selection", "constraint_scope"}

    unknown_top = set(section.keys()) - known_top
    if unknown_top:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown_top))}",
            config_path=str(config_path),
        )

    if "catalog" in section:
        val = section["catalog"]
        if not isinstance(val, str) or not val.strip():
            raise ConfigError(
                "catalog must be a non-empty string path",
                config_path=str(config_path),
                option="catalog",
            )
        catalog = Path(val).expanduser()
        if not catalog.is_absolute():
            catalog = config_path.parent / catalog
        config.catalog = catalog

    selection = _choice(section, "candidate_selection", CANDIDATE_SELECTIONS, config_path)
    if selection is not None:
        config.candidate_selection = selection

    scope = _choice(section, "constraint_scope", CONSTRAINT_SCOPES, config_path)
    if scope is not None:
        config.constraint_scope = scope

    return config
