"""
Configuration for fnstore.

Settings live in a YAML file:

    database:
      driver: sqlite3
      path: ~/.fnstore/fnstore.sqlite
    logging:
      level: INFO

Priority for the file location: --config flag > FNSTORE_CONFIG env var >
~/.fnstore/config.yaml. FNSTORE_DB_PATH overrides database.path.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_BASE_PATH = Path.home() / ".fnstore"
DEFAULT_CONFIG_PATH = DEFAULT_BASE_PATH / "config.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "database": {
        "driver": "sqlite3",
        "path": str(DEFAULT_BASE_PATH / "fnstore.sqlite"),
    },
    "logging": {
        "level": "INFO",
    },
}


def get_config_path(config_path: Optional[Path] = None) -> Path:
    """Resolve the config file location."""
    if config_path:
        return Path(config_path)
    env_path = os.getenv("FNSTORE_CONFIG")
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration merged over the defaults.

    A missing file yields the defaults.

    Raises:
        ValueError: If the file is not valid YAML or not a mapping
    """
    path = get_config_path(config_path)
    config = copy.deepcopy(DEFAULT_CONFIG)

    if path.exists():
        try:
            data = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid config file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid config file {path}: expected a mapping")
        _merge(config, data)

    env_db_path = os.getenv("FNSTORE_DB_PATH")
    if env_db_path:
        config["database"]["path"] = env_db_path

    return config


def save_config(config: Dict[str, Any], config_path: Optional[Path] = None) -> Path:
    """Write configuration to the YAML file, creating parent directories."""
    path = get_config_path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.dump(config, default_flow_style=False))
    return path


def get_value(config: Dict[str, Any], key: str) -> Any:
    """
    Read a dotted key such as 'database.driver'.

    Raises:
        KeyError: If any part of the key is missing
    """
    current: Any = config
    for part in key.split('.'):
        if not isinstance(current, dict) or part not in current:
            raise KeyError(key)
        current = current[part]
    return current


def set_value(config: Dict[str, Any], key: str, value: Any) -> None:
    """Set a dotted key, creating intermediate sections."""
    keys = key.split('.')
    current = config
    for k in keys[:-1]:
        if not isinstance(current.get(k), dict):
            current[k] = {}
        current = current[k]
    current[keys[-1]] = value
