"""Config loader utilities."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .config_settings import Config
from .exceptions import ConfigurationError
from .utils.logging import get_logger

CONFIG_ENV_VAR = "NOTES_SYNC_CONFIG"

_config: Config | None = None


def default_config_paths() -> list[Path]:
    """Locations searched when no explicit config path is given."""
    paths: list[Path] = []
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        paths.append(Path(env_path).expanduser())
    paths.append(Path("~/.config/notes-sync/config.yaml").expanduser())
    paths.append(Path.cwd() / "config.yaml")
    return paths


def _read_yaml(path: Path) -> dict[str, Any]:
    logger = get_logger(__name__)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(
            "config_yaml_load_error",
            config_path=str(path),
            error=str(e),
            error_type=type(e).__name__,
        )
        msg = f"Failed to parse config file: {path}"
        suggestion = (
            "Check YAML syntax (indentation, colons, quotes). "
            f"Original error: {e}"
        )
        raise ConfigurationError(msg, suggestion=suggestion) from e

    if not isinstance(data, dict):
        msg = f"Config file must contain a mapping: {path}"
        raise ConfigurationError(
            msg, suggestion="Write settings as `key: value` lines at the top level."
        )
    return data


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from a YAML file, the environment and ``.env``.

    Values from the YAML file win over environment variables. An explicit
    ``config_path`` must exist; the default locations are optional.
    """
    logger = get_logger(__name__)

    if config_path is not None:
        config_path = config_path.expanduser()
        if not config_path.exists():
            msg = f"Config file not found: {config_path}"
            raise ConfigurationError(msg, suggestion="Check the --config path.")
        candidate_paths = [config_path]
        logger.info("config_loading", config_path=str(config_path), source="cli_argument")
    else:
        candidate_paths = default_config_paths()
        logger.debug(
            "config_searching",
            source="default_locations",
            paths=[str(p) for p in candidate_paths],
        )

    resolved_config_path = next((p for p in candidate_paths if p.is_file()), None)

    yaml_data: dict[str, Any] = {}
    if resolved_config_path is not None:
        yaml_data = _read_yaml(resolved_config_path)
        logger.debug(
            "config_yaml_loaded",
            config_path=str(resolved_config_path),
            keys_count=len(yaml_data),
        )
    else:
        logger.debug("config_file_not_found", searched_paths=[str(p) for p in candidate_paths])

    try:
        config = Config(**yaml_data)
    except ValidationError as e:
        logger.error(
            "config_validation_error",
            error=str(e),
            config_path=str(resolved_config_path) if resolved_config_path else None,
        )
        msg = f"Invalid configuration: {e.error_count()} error(s)"
        raise ConfigurationError(
            msg,
            suggestion=str(e),
            context={"config_path": str(resolved_config_path) if resolved_config_path else None},
        ) from e

    logger.debug(
        "config_loaded",
        notes_dir=str(config.notes_dir) if config.notes_dir else None,
        remote_url=config.remote_url,
    )
    return config


def get_config() -> Config:
    """Get singleton config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Config) -> None:
    """Set singleton config instance (for testing)."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset global config instance (for testing only)."""
    global _config
    _config = None


__all__ = ["Config", "get_config", "load_config", "reset_config", "set_config"]
