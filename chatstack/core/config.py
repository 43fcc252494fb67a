"""chatstack runtime configuration loading."""
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from chatstack.core.errors import ConfigError
from chatstack.models.stack import StackConfig

# Default config search paths (ordered by proximity to current run)
CONFIG_PATHS = [
    "./chatstack.yml",
    str(Path.home() / ".config" / "chatstack" / "chatstack.yml"),
    "/etc/chatstack/chatstack.yml",
]

# Environment variable -> StackConfig field
ENV_OVERRIDES = {
    "CHATSTACK_DOMAIN": "domain",
    "CHATSTACK_ADMIN_EMAIL": "admin_email",
    "CHATSTACK_ROOT": "root",
    "CHATSTACK_BRAND": "brand",
}


def find_config(config_path: Optional[str] = None) -> Optional[Path]:
    """Locate the active chatstack configuration file.

    An explicit path or $CHATSTACK_CONFIG is returned even if it does not
    exist, so that load_config() can report it. Returns None when no
    default location holds a file.
    """
    if config_path:
        return Path(config_path)

    if env_config := os.environ.get("CHATSTACK_CONFIG"):
        return Path(env_config)

    for path in CONFIG_PATHS:
        if Path(path).exists():
            return Path(path)

    return None


def is_mock() -> bool:
    """Return True when docker commands should only be logged."""
    return os.environ.get("CHATSTACK_MOCK") == "1"


def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return data


def load_config(config_path: Optional[str] = None, **overrides: Any) -> StackConfig:
    """Build a StackConfig from file, environment and explicit overrides.

    Later sources win: config file, then CHATSTACK_* environment
    variables, then keyword overrides whose value is not None.

    Raises:
        ConfigError: If domain or admin email is missing, or any value
            fails validation
    """
    data: Dict[str, Any] = {}

    path = find_config(config_path)
    if path is not None:
        data.update(_read_config_file(path))

    for env_name, field in ENV_OVERRIDES.items():
        if value := os.environ.get(env_name):
            data[field] = value

    data.update({key: value for key, value in overrides.items() if value is not None})

    missing = [field for field in ("domain", "admin_email") if not data.get(field)]
    if missing:
        raise ConfigError(
            f"Missing required setting(s): {', '.join(missing)}. "
            "Pass --domain/--email, set CHATSTACK_DOMAIN/CHATSTACK_ADMIN_EMAIL "
            "or add them to chatstack.yml"
        )

    try:
        return StackConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
