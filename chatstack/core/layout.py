"""Directory layout of a provisioned stack."""
from pathlib import Path
from typing import List

from chatstack.core.logger import get_logger

logger = get_logger(__name__)


class StackLayout:
    """Paths of every file chatstack writes, relative to one root.

    Container-side paths (what the services see inside their volumes) are
    kept next to the host paths they map to.
    """

    # Synapse mounts ./data/synapse at /data
    REGISTRATION_IN_CONTAINER = "/data/wa-registration.yaml"

    def __init__(self, root: Path):
        self.root = Path(root)

        self.env_file = self.root / ".env"
        self.compose_file = self.root / "docker-compose.yml"

        self.synapse_data_dir = self.root / "data" / "synapse"
        self.postgres_data_dir = self.root / "data" / "postgres"
        self.homeserver_config = self.synapse_data_dir / "homeserver.yaml"
        self.homeserver_registration = self.synapse_data_dir / "wa-registration.yaml"

        self.traefik_dir = self.root / "traefik"
        self.traefik_config = self.traefik_dir / "traefik.yml"
        self.acme_storage = self.traefik_dir / "acme.json"

        self.coturn_dir = self.root / "coturn"
        self.turnserver_config = self.coturn_dir / "turnserver.conf"

        self.livekit_dir = self.root / "livekit"
        self.livekit_config = self.livekit_dir / "config.yaml"

        self.element_dir = self.root / "element"
        self.element_config = self.element_dir / "config.json"

        self.bridge_dir = self.root / "mautrix-whatsapp"
        self.bridge_config = self.bridge_dir / "config.yaml"
        self.bridge_registration = self.bridge_dir / "wa-registration.yaml"
        self.bridge_session_dir = self.bridge_dir / "whatsmeow"

    @property
    def directories(self) -> List[Path]:
        return [
            self.synapse_data_dir,
            self.postgres_data_dir,
            self.traefik_dir,
            self.coturn_dir,
            self.livekit_dir,
            self.bridge_dir,
            self.bridge_session_dir,
            self.element_dir,
        ]

    def ensure(self) -> None:
        """Create the directory tree and the ACME storage file.

        Traefik refuses to use acme.json unless it is mode 0600.
        """
        for directory in self.directories:
            directory.mkdir(parents=True, exist_ok=True)

        self.acme_storage.touch(exist_ok=True)
        self.acme_storage.chmod(0o600)

        logger.debug(f"Layout ready under {self.root}")
