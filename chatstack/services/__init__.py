"""
External collaborators and config renderers.

Docker invocation, compose manifest authoring and per-service templates.
"""

from .compose import build_compose_manifest, render_compose_manifest
from .docker import ContainerRuntime, DockerRuntime

__all__ = [
    "ContainerRuntime",
    "DockerRuntime",
    "build_compose_manifest",
    "render_compose_manifest",
]
