"""Locate, read and validate the Dometrics config file.

Lookup order: the path handed in by the caller (``--config`` or
``$DOMETRICS_CONFIG``), ``./config.yaml``, then ``~/.dometrics/config.yaml``.
With no file at all every setting takes its default.  String values may
reference environment variables as ``${NAME}``.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from dometrics.config.schema import DometricsConfig

logger = logging.getLogger(__name__)

CONFIG_SEARCH_PATH: tuple[tuple[str, Path], ...] = (
    ("working directory", Path("config.yaml")),
    ("home directory", Path("~/.dometrics/config.yaml")),
)

_ENV_REF = re.compile(r"\$\{(\w+)\}")


def _env_lookup(match: re.Match) -> str:
    name = match.group(1)
    if name not in os.environ:
        logger.debug("Config references unset variable %s", name)
    return os.environ.get(name, "")


def _expand_env_vars(value: Any) -> Any:
    """Substitute ${NAME} in every string value; unset names become ''."""
    if isinstance(value, str):
        return _ENV_REF.sub(_env_lookup, value)
    if isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    return value


def _find_config_file(explicit_path: str | Path | None = None) -> Path | None:
    """Path of the config file to use, or None to run on defaults."""
    if explicit_path is not None:
        path = Path(explicit_path).expanduser()
        if path.is_file():
            logger.info("Using config %s (explicit path)", path)
            return path
        logger.warning("Config file %s does not exist, using defaults", path)
        return None

    for origin, candidate in CONFIG_SEARCH_PATH:
        path = candidate.expanduser()
        if path.is_file():
            logger.info("Using config %s (%s)", path, origin)
            return path

    logger.info("No config file found, using defaults")
    return None


def _read_yaml(path: Path) -> dict[str, Any]:
    with path.open() as f:
        raw = yaml.safe_load(f)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a mapping at the top level, got {type(raw).__name__}")
    return _expand_env_vars(raw)


def load_config(path: str | Path | None = None) -> DometricsConfig:
    """Resolve, read and validate the configuration.

    Raises pydantic's ValidationError for out-of-schema values and
    ValueError when the file does not hold a mapping.
    """
    config_path = _find_config_file(path)
    raw = _read_yaml(config_path) if config_path is not None else {}

    config = DometricsConfig.model_validate(raw)
    logger.debug(
        "Config ready: version=%d weights=%s oracle=%s",
        config.version, config.weights.version,
        "enabled" if config.oracle.enabled else "disabled",
    )
    return config
