"""Utility CLI commands - secrets, urls, version."""
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from chatstack import __version__
from chatstack.core.errors import ChatstackError

# Module-level console instance (will be set by register function)
console: Console = Console()


def _mask(value: str) -> str:
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}{'*' * (len(value) - 4)}"


def secrets(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file path"),
    root: Optional[str] = typer.Option(None, "--root", help="Stack directory"),
    reveal: bool = typer.Option(False, "--reveal", help="Print secret values unmasked"),
):
    """Show the stack's generated secrets (masked by default)."""
    from chatstack.cli_support import handle_cli_error, print_error
    from chatstack.core.config import load_config
    from chatstack.core.credentials import load_env_file
    from chatstack.core.layout import StackLayout
    from chatstack.models.stack import StackConfig

    if root is None:
        try:
            root = str(load_config(config).root)
        except ChatstackError:
            root = str(StackConfig.model_fields["root"].default)

    env_file = StackLayout(root).env_file
    if not env_file.exists():
        print_error(console, f"No secrets file at {env_file}. Run 'chatstack setup' first.")
        raise typer.Exit(1)

    try:
        values = load_env_file(env_file)
    except OSError as e:
        handle_cli_error(e, console)
        return

    table = Table(title=str(env_file), show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="bold")
    for key, value in values.items():
        shown = value if reveal or key == "SERVER_NAME" else _mask(value)
        table.add_row(key, shown)
    console.print(table)


def urls(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file path"),
    domain: Optional[str] = typer.Option(None, "--domain", help="Matrix server name"),
):
    """Show the public URLs of the stack's services."""
    from chatstack.cli_support import handle_cli_error, print_urls
    from chatstack.core.config import load_config
    from chatstack.core.provisioner import service_urls

    if domain is None:
        try:
            domain = load_config(config).domain
        except ChatstackError as e:
            handle_cli_error(e, console)
            return

    print_urls(console, service_urls(domain))


def version():
    """Show chatstack version."""
    console.print(f"chatstack v{__version__}")


def register_utility_commands(app: typer.Typer, shared_console: Console):
    """Register utility commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command()(secrets)
    app.command()(urls)
    app.command()(version)
