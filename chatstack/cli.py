#!/usr/bin/env python3
"""chatstack CLI - Self-hosted Matrix chat stack on one Docker host."""

import typer
from rich.console import Console

from chatstack.cli_setup_commands import register_setup_commands
from chatstack.cli_utility_commands import register_utility_commands
from chatstack.core.logger import get_logger

app = typer.Typer(
    name="chatstack",
    help="""chatstack - Self-hosted Matrix chat stack on one Docker host

Synapse + Element + LiveKit + coturn + mautrix-whatsapp + Traefik.

Quick start:
  chatstack setup --domain example.org --email admin@example.org
  chatstack render                # Write configs without starting anything
  chatstack urls                  # Where to find your services

More commands: chatstack --help
""",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)

register_setup_commands(app, console)
register_utility_commands(app, console)

if __name__ == "__main__":
    app()
