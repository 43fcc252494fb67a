"""Provisioning pipeline for the chat stack.

Steps run in order and any exception aborts the run; nothing written by
earlier steps is rolled back:

1. Secrets (.env), generated once
2. Directory layout and acme.json
3. homeserver.yaml generation and patching
4. Proxy, relay, SFU and web client configs
5. Bridge config, registration and homeserver link
6. Compose manifest, docker compose pull + up
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from chatstack.core.bridge import bootstrap_bridge
from chatstack.core.credentials import SecretBundle, ensure_secrets, export_to_environ
from chatstack.core.homeserver import synthesize_homeserver_config
from chatstack.core.layout import StackLayout
from chatstack.core.logger import get_logger
from chatstack.models.stack import StackConfig
from chatstack.services.compose import write_compose_manifest
from chatstack.services.docker import ContainerRuntime
from chatstack.services.renderers import render_bridge_config, write_config, write_service_configs

logger = get_logger(__name__)


def service_urls(domain: str) -> Dict[str, str]:
    """Public URLs of the stack's web-facing services."""
    return {
        "Element": f"https://app.{domain}",
        "Synapse": f"https://synapse.{domain}",
        "Traefik": f"https://traefik.{domain}",
    }


@dataclass
class ProvisionResult:
    """Outcome of a provisioning run."""

    secrets_file: Path
    secrets_created: bool
    written: List[Path] = field(default_factory=list)
    urls: Dict[str, str] = field(default_factory=dict)
    started: bool = False


class StackProvisioner:
    """Runs the provisioning pipeline for one StackConfig.

    Example:
        provisioner = StackProvisioner(config, DockerRuntime(config.images))
        result = provisioner.run()
    """

    def __init__(self, config: StackConfig, runtime: Optional[ContainerRuntime] = None):
        self.config = config
        self.runtime = runtime
        self.layout = StackLayout(config.root)

    def run(self, start: bool = True) -> ProvisionResult:
        """Provision the stack.

        Args:
            start: Pull images and start the stack after writing configs

        Returns:
            ProvisionResult describing what was written
        """
        if self.runtime is None:
            raise ValueError("A ContainerRuntime is required to provision the stack")

        result, secrets = self._prepare()

        homeserver = synthesize_homeserver_config(
            self.layout,
            self.config.domain,
            secrets.postgres_password,
            self.runtime,
        )
        result.written.append(self.layout.homeserver_config)

        result.written.extend(write_service_configs(self.layout, self.config, secrets))

        result.written.append(
            bootstrap_bridge(self.layout, self.config, secrets, self.runtime, homeserver)
        )

        manifest = write_compose_manifest(self.layout.compose_file, self.config.images)
        result.written.append(manifest)

        if start:
            self.runtime.compose_pull(manifest)
            self.runtime.compose_up(manifest)
            result.started = not self.runtime.mock
        else:
            logger.info("Skipping docker compose pull/up")

        return result

    def render_only(self) -> ProvisionResult:
        """Write secrets, layout and static configs without running containers.

        homeserver.yaml and the bridge registration need the images, so
        they are left untouched.
        """
        result, secrets = self._prepare()

        result.written.extend(write_service_configs(self.layout, self.config, secrets))
        result.written.append(
            write_config(self.layout.bridge_config, render_bridge_config(self.config, secrets))
        )
        result.written.append(
            write_compose_manifest(self.layout.compose_file, self.config.images)
        )
        return result

    def _prepare(self) -> Tuple[ProvisionResult, SecretBundle]:
        secrets, created = ensure_secrets(self.layout.env_file, self.config.domain)
        export_to_environ(secrets)

        self.layout.ensure()

        result = ProvisionResult(
            secrets_file=self.layout.env_file,
            secrets_created=created,
            urls=service_urls(self.config.domain),
        )
        if created:
            result.written.append(self.layout.env_file)
        return result, secrets

