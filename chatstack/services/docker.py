"""
Docker invocation for one-shot generators and the compose stack.

The pipeline only talks to ContainerRuntime, so tests can substitute a
runtime that writes fixture documents instead of starting containers.
"""
import shlex
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from chatstack.core.errors import DockerError
from chatstack.core.logger import get_logger
from chatstack.models.stack import StackImages

logger = get_logger(__name__)


class ContainerRuntime(ABC):
    """Abstract interface for the external container runtime."""

    def __init__(self, mock: bool = False):
        """Initialize runtime.

        Args:
            mock: If True, log commands without executing them
        """
        self.mock = mock

    @abstractmethod
    def generate_homeserver_config(self, data_dir: Path, server_name: str) -> Path:
        """Have the homeserver image write its default config into data_dir.

        Returns:
            Path of the generated homeserver.yaml
        """
        pass

    @abstractmethod
    def generate_bridge_registration(self, bridge_dir: Path) -> Path:
        """Have the bridge image write its app-service registration.

        The bridge reads config.yaml from bridge_dir.

        Returns:
            Path of the generated registration file
        """
        pass

    @abstractmethod
    def compose_pull(self, manifest: Path) -> None:
        """Pull every image referenced by the compose manifest."""
        pass

    @abstractmethod
    def compose_up(self, manifest: Path) -> None:
        """Start every service of the compose manifest in the background."""
        pass


class DockerRuntime(ContainerRuntime):
    """ContainerRuntime backed by the docker CLI.

    Example:
        runtime = DockerRuntime(StackImages())
        runtime.compose_pull(Path("synapse/docker-compose.yml"))
        runtime.compose_up(Path("synapse/docker-compose.yml"))
    """

    def __init__(self, images: StackImages, mock: bool = False, docker_bin: str = "docker"):
        super().__init__(mock=mock)
        self.images = images
        self.docker_bin = docker_bin

    def generate_homeserver_config(self, data_dir: Path, server_name: str) -> Path:
        logger.info("→ Generating homeserver.yaml")
        self._run([
            self.docker_bin, "run", "--rm",
            "-v", f"{Path(data_dir).resolve()}:/data",
            "-e", f"SYNAPSE_SERVER_NAME={server_name}",
            "-e", "SYNAPSE_REPORT_STATS=no",
            self.images.synapse, "generate",
        ])
        return Path(data_dir) / "homeserver.yaml"

    def generate_bridge_registration(self, bridge_dir: Path) -> Path:
        logger.info("→ Generating bridge app-service registration")
        self._run([
            self.docker_bin, "run", "--rm",
            "-v", f"{Path(bridge_dir).resolve()}:/data",
            self.images.bridge,
            "/usr/bin/mautrix-whatsapp", "-g",
            "-c", "/data/config.yaml",
            "-r", "/data/wa-registration.yaml",
        ])
        return Path(bridge_dir) / "wa-registration.yaml"

    def compose_pull(self, manifest: Path) -> None:
        logger.info("→ Pulling images")
        self._run([self.docker_bin, "compose", "-f", str(manifest), "pull"])

    def compose_up(self, manifest: Path) -> None:
        logger.info("→ Starting stack")
        self._run([self.docker_bin, "compose", "-f", str(manifest), "up", "-d"])

    def _run(self, cmd: List[str]) -> None:
        """Run cmd, raising DockerError if it cannot start or exits non-zero."""
        printable = shlex.join(cmd)

        if self.mock:
            logger.info(f"MOCK: Would run: {printable}")
            return

        logger.debug(f"Running: {printable}")
        try:
            subprocess.run(cmd, check=True)
        except FileNotFoundError as e:
            raise DockerError(f"'{self.docker_bin}' not found. Is Docker installed?") from e
        except subprocess.CalledProcessError as e:
            raise DockerError(
                f"Command failed with exit code {e.returncode}: {printable}",
                returncode=e.returncode,
            ) from e
