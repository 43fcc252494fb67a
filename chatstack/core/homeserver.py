"""Synapse homeserver.yaml synthesis and patching.

The default document comes from the Synapse image's `generate` mode. It is
then parsed as YAML, patched by key and written back, so each patch
touches exactly one top-level key no matter how the surrounding lines
look. Comments from the generated file do not survive re-serialization.
"""
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from chatstack.core.errors import HomeserverConfigError
from chatstack.core.layout import StackLayout
from chatstack.core.logger import get_logger

logger = get_logger(__name__)

MEDIA_STORE_PATH = "/data/media_store"


def postgres_database_stanza(password: str) -> Dict[str, Any]:
    """The psycopg2 database section pointing at the compose postgres service."""
    return {
        "name": "psycopg2",
        "args": {
            "user": "synapse",
            "password": password,
            "database": "synapse",
            "host": "postgres",
            "port": 5432,
            "cp_min": 5,
            "cp_max": 10,
        },
    }


class HomeserverConfig:
    """A parsed homeserver.yaml with idempotent patch operations.

    Every ensure_*/set_* method returns True if it changed the document.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None, path: Optional[Path] = None):
        self.data: Dict[str, Any] = data if data is not None else {}
        self.path = Path(path) if path else None

    @classmethod
    def from_text(cls, text: str, path: Optional[Path] = None) -> "HomeserverConfig":
        """Parse a homeserver.yaml document.

        Raises:
            HomeserverConfigError: If the text is not YAML or not a mapping
        """
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise HomeserverConfigError(f"Cannot parse {path or 'homeserver config'}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise HomeserverConfigError(
                f"{path or 'homeserver config'} must be a mapping, got {type(data).__name__}"
            )
        return cls(data, path)

    @classmethod
    def load(cls, path: Path) -> "HomeserverConfig":
        path = Path(path)
        if not path.exists():
            raise HomeserverConfigError(f"Homeserver config not found: {path}")
        return cls.from_text(path.read_text(), path)

    def dump(self) -> str:
        return yaml.safe_dump(self.data, default_flow_style=False, sort_keys=False)

    def save(self, path: Optional[Path] = None) -> Path:
        target = Path(path) if path else self.path
        if target is None:
            raise HomeserverConfigError("No path to save homeserver config to")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.dump())
        self.path = target
        return target

    def set_database(self, password: str) -> bool:
        """Replace the database section with the postgres stanza."""
        stanza = postgres_database_stanza(password)
        if self.data.get("database") == stanza:
            return False
        self.data["database"] = stanza
        return True

    def ensure_media_store_path(self, media_path: str = MEDIA_STORE_PATH) -> bool:
        """Set media_store_path unless the document already defines one."""
        return self._ensure_first("media_store_path", media_path)

    def ensure_report_stats_opt_out(self) -> bool:
        """Set report_stats: false unless the document already decides."""
        return self._ensure_first("report_stats", False)

    def ensure_app_service(self, registration_path: str) -> bool:
        """Reference an app-service registration file exactly once.

        Appends to app_service_config_files when the key exists, otherwise
        creates it with a single entry.
        """
        files = self.data.get("app_service_config_files")

        if files is None:
            self.data["app_service_config_files"] = [registration_path]
            return True

        if not isinstance(files, list):
            raise HomeserverConfigError(
                f"app_service_config_files must be a list, got {type(files).__name__}"
            )

        if registration_path in files:
            return False

        files.append(registration_path)
        return True

    def _ensure_first(self, key: str, value: Any) -> bool:
        """Insert key at the top of the document if it is absent."""
        if key in self.data:
            return False
        self.data = {key: value, **self.data}
        return True


def synthesize_homeserver_config(
    layout: StackLayout,
    server_name: str,
    postgres_password: str,
    runtime,
) -> HomeserverConfig:
    """Generate homeserver.yaml if missing, then apply the stack's patches.

    Args:
        layout: Stack layout
        server_name: Matrix server name
        postgres_password: Password for the synapse database user
        runtime: ContainerRuntime used for the one-shot generation

    Returns:
        The patched and saved document
    """
    path = layout.homeserver_config

    if not path.exists():
        runtime.generate_homeserver_config(layout.synapse_data_dir, server_name)

    if path.exists():
        config = HomeserverConfig.load(path)
    elif runtime.mock:
        logger.warning(f"MOCK: {path} was not generated, patching an empty document")
        config = HomeserverConfig(path=path)
    else:
        raise HomeserverConfigError(f"Homeserver image did not produce {path}")

    changed = [
        name for name, did_change in (
            ("database", config.set_database(postgres_password)),
            ("media_store_path", config.ensure_media_store_path()),
            ("report_stats", config.ensure_report_stats_opt_out()),
        ) if did_change
    ]

    config.save()
    if changed:
        logger.info(f"Patched homeserver.yaml: {', '.join(changed)}")
    else:
        logger.info("homeserver.yaml already up to date")

    return config
