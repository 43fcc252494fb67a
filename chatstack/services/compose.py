"""
Docker Compose manifest for the chat stack.

Routed services carry Traefik labels; Traefik builds its virtual hosts and
requests certificates from them. Hostnames are left as ${SERVER_NAME} so
docker compose fills them in from the stack's .env file.
"""
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from chatstack.core.logger import get_logger
from chatstack.models.stack import StackImages

logger = get_logger(__name__)

# compose service -> (router name, subdomain)
ROUTES = {
    "synapse": ("synapse", "synapse"),
    "element": ("element", "app"),
    "mautrix-whatsapp": ("wa", "wa"),
    "livekit": ("livekit", "livekit"),
}


def traefik_labels(service: str, port: Optional[int] = None) -> Dict[str, str]:
    """Router labels exposing service on its subdomain over websecure."""
    router, subdomain = ROUTES[service]
    labels = {
        "traefik.enable": "true",
        f"traefik.http.routers.{router}.rule": f"Host(`{subdomain}.${{SERVER_NAME}}`)",
        f"traefik.http.routers.{router}.entrypoints": "websecure",
    }
    if port is not None:
        labels[f"traefik.http.services.{router}.loadbalancer.server.port"] = str(port)
    return labels


def build_compose_manifest(images: StackImages) -> Dict[str, Any]:
    """Return the compose document as a dictionary."""
    return {
        "services": {
            "postgres": {
                "image": images.postgres,
                "restart": "unless-stopped",
                "env_file": ".env",
                "environment": {
                    "POSTGRES_DB": "synapse",
                    "POSTGRES_USER": "synapse",
                },
                "volumes": ["./data/postgres:/var/lib/postgresql/data"],
            },
            "synapse": {
                "image": images.synapse,
                "restart": "unless-stopped",
                "depends_on": ["postgres"],
                "env_file": ".env",
                "volumes": ["./data/synapse:/data"],
                "labels": traefik_labels("synapse", port=8008),
            },
            "element": {
                "image": images.element,
                "restart": "unless-stopped",
                "volumes": ["./element/config.json:/app/config.json:ro"],
                "labels": traefik_labels("element"),
            },
            "mautrix-whatsapp": {
                "image": images.bridge,
                "restart": "unless-stopped",
                "volumes": ["./mautrix-whatsapp:/data"],
                "labels": traefik_labels("mautrix-whatsapp"),
            },
            "livekit": {
                "image": images.livekit,
                "command": ["--config", "/etc/livekit/config.yaml"],
                "restart": "unless-stopped",
                "volumes": ["./livekit/config.yaml:/etc/livekit/config.yaml:ro"],
                "labels": traefik_labels("livekit"),
                # RTP/RTCP
                "ports": ["7881:7881/udp"],
            },
            "coturn": {
                "image": images.coturn,
                "restart": "unless-stopped",
                "network_mode": "host",
                "command": ["-c", "/etc/coturn/turnserver.conf"],
                "volumes": ["./coturn/turnserver.conf:/etc/coturn/turnserver.conf:ro"],
            },
            "traefik": {
                "image": images.traefik,
                "restart": "unless-stopped",
                "ports": ["80:80", "443:443"],
                "volumes": [
                    "/var/run/docker.sock:/var/run/docker.sock",
                    "./traefik/traefik.yml:/etc/traefik/traefik.yml:ro",
                    "./traefik/acme.json:/acme.json",
                ],
            },
        }
    }


def render_compose_manifest(images: StackImages) -> str:
    return yaml.safe_dump(
        build_compose_manifest(images),
        default_flow_style=False,
        sort_keys=False,
    )


def write_compose_manifest(path: Path, images: StackImages) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_compose_manifest(images))
    logger.info(f"Wrote compose manifest {path}")
    return path
