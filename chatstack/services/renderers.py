"""Per-service config renderers.

Each render_* function is a pure function of the stack config and the
secret bundle. write_service_configs() overwrites the files on every run;
the output is deterministic for the same inputs.
"""
import json
from pathlib import Path
from typing import Any, Dict, List

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from chatstack.core.credentials import SecretBundle
from chatstack.core.layout import StackLayout
from chatstack.core.logger import get_logger
from chatstack.models.stack import StackConfig

logger = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"

_jinja_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    undefined=StrictUndefined,
)


def _render(template_name: str, **context: Any) -> str:
    return _jinja_env.get_template(template_name).render(**context)


def render_traefik_config(config: StackConfig) -> str:
    """Traefik static config with the Let's Encrypt HTTP-01 resolver."""
    return _render("traefik.yml.j2", admin_email=config.admin_email)


def render_turnserver_config(config: StackConfig, secrets: SecretBundle) -> str:
    return _render(
        "turnserver.conf.j2",
        domain=config.domain,
        auth_secret=secrets.auth_secret,
    )


def render_livekit_config(config: StackConfig, secrets: SecretBundle) -> str:
    """LiveKit config sharing coturn's auth secret for TURN credentials."""
    return _render(
        "livekit.yaml.j2",
        turn_domain=config.turn_domain,
        auth_secret=secrets.auth_secret,
    )


def render_element_config(config: StackConfig) -> str:
    document: Dict[str, Any] = {
        "default_server_config": {
            "m.homeserver": {
                "base_url": config.homeserver_url,
                "server_name": config.domain,
            }
        },
        "brand": config.brand,
        "default_theme": config.default_theme,
    }
    return json.dumps(document, indent=2) + "\n"


def render_bridge_config(config: StackConfig, secrets: SecretBundle) -> str:
    return _render(
        "bridge.yaml.j2",
        homeserver_url=config.homeserver_url,
        domain=config.domain,
        as_token=secrets.wa_as_token,
        hs_token=secrets.wa_hs_token,
        admin_user=config.admin_user,
    )


def write_config(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    logger.debug(f"Wrote {path}")
    return path


def write_service_configs(layout: StackLayout, config: StackConfig, secrets: SecretBundle) -> List[Path]:
    """Render and write the proxy, relay, SFU and web client configs.

    Returns:
        Paths written, in pipeline order
    """
    written = [
        write_config(layout.traefik_config, render_traefik_config(config)),
        write_config(layout.turnserver_config, render_turnserver_config(config, secrets)),
        write_config(layout.livekit_config, render_livekit_config(config, secrets)),
        write_config(layout.element_config, render_element_config(config)),
    ]
    logger.info(f"Rendered {len(written)} service configs")
    return written
