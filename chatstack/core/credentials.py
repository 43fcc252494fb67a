"""Secret generation and persistence for the stack's .env file.

Secrets are generated exactly once. Later runs load the existing file and
reuse it verbatim.
"""
import os
import secrets
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Tuple

from dotenv import dotenv_values

from chatstack.core.errors import SecretsError
from chatstack.core.logger import get_logger

logger = get_logger(__name__)

# .env key -> random byte length (hex encoded, so twice as many characters)
SECRET_LENGTHS = {
    "POSTGRES_PASSWORD": 12,
    "AUTH_SECRET": 16,
    "WA_AS_TOKEN": 32,
    "WA_HS_TOKEN": 32,
}


@dataclass(frozen=True)
class SecretBundle:
    """Credentials shared between the stack's services.

    Attributes:
        server_name: Domain the secrets were generated for
        postgres_password: Password of the synapse database user
        auth_secret: Shared TURN secret for coturn and LiveKit
        wa_as_token: Application-service token the bridge presents
        wa_hs_token: Token the homeserver presents to the bridge
    """

    server_name: str
    postgres_password: str
    auth_secret: str
    wa_as_token: str
    wa_hs_token: str

    @classmethod
    def generate(cls, server_name: str) -> "SecretBundle":
        return cls(
            server_name=server_name,
            postgres_password=secrets.token_hex(SECRET_LENGTHS["POSTGRES_PASSWORD"]),
            auth_secret=secrets.token_hex(SECRET_LENGTHS["AUTH_SECRET"]),
            wa_as_token=secrets.token_hex(SECRET_LENGTHS["WA_AS_TOKEN"]),
            wa_hs_token=secrets.token_hex(SECRET_LENGTHS["WA_HS_TOKEN"]),
        )

    @classmethod
    def from_env(cls, values: Dict[str, str]) -> "SecretBundle":
        """Build a bundle from parsed .env values.

        Raises:
            SecretsError: If a required key is missing or empty
        """
        missing = [field.name.upper() for field in fields(cls) if not values.get(field.name.upper())]
        if missing:
            raise SecretsError(f"Secrets file is missing: {', '.join(missing)}")
        return cls(**{field.name: values[field.name.upper()] for field in fields(cls)})

    def to_env(self) -> Dict[str, str]:
        """Return the bundle as ordered .env key/value pairs."""
        return {field.name.upper(): getattr(self, field.name) for field in fields(self)}


def load_env_file(path: Path) -> Dict[str, str]:
    """Read a .env file into a dict, dropping keys that have no value."""
    return {key: value for key, value in dotenv_values(path).items() if value is not None}


def write_env_file(path: Path, bundle: SecretBundle) -> None:
    """Create path readable only by the owner and write the bundle to it.

    Raises:
        FileExistsError: If path already exists
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    content = "".join(f"{key}={value}\n" for key, value in bundle.to_env().items())
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write(content)


def ensure_secrets(path: Path, server_name: str) -> Tuple[SecretBundle, bool]:
    """Load the secrets file, generating it first if it does not exist.

    Args:
        path: Location of the .env file
        server_name: Configured domain

    Returns:
        Tuple of (bundle, created) where created is True on first run
    """
    path = Path(path)

    if not path.exists():
        logger.info(f"→ Generating secrets ({path})")
        bundle = SecretBundle.generate(server_name)
        write_env_file(path, bundle)
        return bundle, True

    logger.info(f"Reusing existing secrets from {path}")
    bundle = SecretBundle.from_env(load_env_file(path))

    if bundle.server_name != server_name:
        logger.warning(
            f"{path} was generated for {bundle.server_name}, not {server_name}; "
            "keeping the stored secrets. Delete the file to regenerate."
        )

    return bundle, False


def export_to_environ(bundle: SecretBundle) -> None:
    """Expose the secrets to child processes via os.environ."""
    os.environ.update(bundle.to_env())
