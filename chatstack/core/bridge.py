"""mautrix-whatsapp bootstrap: config, registration and homeserver link."""
import shutil
from pathlib import Path

from chatstack.core.credentials import SecretBundle
from chatstack.core.errors import BridgeRegistrationError
from chatstack.core.homeserver import HomeserverConfig
from chatstack.core.layout import StackLayout
from chatstack.core.logger import get_logger
from chatstack.models.stack import StackConfig
from chatstack.services.renderers import render_bridge_config, write_config

logger = get_logger(__name__)


def publish_registration(registration: Path, target: Path) -> bool:
    """Copy the generated registration into the homeserver data volume.

    Synapse only sees its own /data mount, so the file the bridge wrote
    into its directory has to be placed next to homeserver.yaml.

    Returns:
        True if a file was copied
    """
    registration = Path(registration)
    if not registration.exists():
        logger.warning(f"No registration at {registration}, homeserver copy not updated")
        return False

    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(registration, target)
    logger.debug(f"Copied {registration} to {target}")
    return True


def link_registration(homeserver: HomeserverConfig, registration_path: str) -> bool:
    """Make the homeserver load registration_path, saving if it changed."""
    changed = homeserver.ensure_app_service(registration_path)
    if changed:
        homeserver.save()
        logger.info(f"Registered {registration_path} in homeserver.yaml")
    else:
        logger.debug(f"{registration_path} already listed in homeserver.yaml")
    return changed


def bootstrap_bridge(
    layout: StackLayout,
    config: StackConfig,
    secrets: SecretBundle,
    runtime,
    homeserver: HomeserverConfig,
) -> Path:
    """Write the bridge config, generate its registration and link it.

    Args:
        layout: Stack layout
        config: Stack configuration
        secrets: Secret bundle holding the app-service tokens
        runtime: ContainerRuntime used for the one-shot registration run
        homeserver: Patched homeserver document to link the registration into

    Returns:
        Host path of the bridge config

    Raises:
        BridgeRegistrationError: If a real run left no registration behind
    """
    layout.bridge_session_dir.mkdir(parents=True, exist_ok=True)
    write_config(layout.bridge_config, render_bridge_config(config, secrets))

    registration = runtime.generate_bridge_registration(layout.bridge_dir)
    published = publish_registration(registration, layout.homeserver_registration)
    if not published and not runtime.mock:
        raise BridgeRegistrationError(f"Bridge image did not produce {registration}")

    link_registration(homeserver, StackLayout.REGISTRATION_IN_CONTAINER)

    return layout.bridge_config
