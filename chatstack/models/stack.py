"""Stack configuration models."""
import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

HOSTNAME_LABEL = re.compile(r'^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$')
# Characters the admin email may not contain
EMAIL_FORBIDDEN = re.compile(r'["\\\s]')


class StackImages(BaseModel):
    """Container images used by the stack."""

    model_config = ConfigDict(extra='forbid')

    postgres: str = "postgres:15-alpine"
    synapse: str = "matrixdotorg/synapse:latest"
    element: str = "vectorim/element-web:latest"
    bridge: str = "dock.mau.dev/mautrix/whatsapp:latest"
    livekit: str = "livekit/livekit-server:latest"
    coturn: str = "instrumentisto/coturn:latest"
    traefik: str = "traefik:v3.4"


class StackConfig(BaseModel):
    """Everything a provisioning run needs besides the generated secrets."""

    model_config = ConfigDict(extra='forbid')

    domain: str = Field(..., description="Matrix server name, e.g. example.org")
    admin_email: str = Field(..., description="Contact address for ACME registration")
    root: Path = Field(Path("synapse"), description="Directory the stack is written to")
    brand: str = Field("Raika Chat", description="Element Web brand name")
    default_theme: Literal["light", "dark"] = "light"
    images: StackImages = Field(default_factory=StackImages)

    @field_validator('domain')
    @classmethod
    def validate_domain(cls, v):
        """Validate domain is a lowercase, dotted hostname."""
        labels = v.split('.')
        if len(labels) < 2 or not all(HOSTNAME_LABEL.match(label) for label in labels):
            raise ValueError(
                f"Domain must be a lowercase hostname like example.org. Got: {v}"
            )
        return v

    @field_validator('admin_email')
    @classmethod
    def validate_admin_email(cls, v):
        """Validate the admin email has a local part and a dotted domain."""
        local, sep, host = v.partition('@')
        malformed = not sep or not local or '@' in host or '.' not in host.strip('.')
        if malformed or EMAIL_FORBIDDEN.search(v):
            raise ValueError(f"Admin email is not a valid address. Got: {v}")
        return v

    @property
    def homeserver_url(self) -> str:
        return f"https://synapse.{self.domain}"

    @property
    def turn_domain(self) -> str:
        return f"turn.{self.domain}"

    @property
    def admin_user(self) -> str:
        return f"@admin:{self.domain}"
