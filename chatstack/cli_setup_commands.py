"""Setup CLI commands - setup, render."""
from typing import Optional

import typer
from rich.console import Console

from chatstack.core.errors import ChatstackError
from chatstack.core.provisioner import ProvisionResult, StackProvisioner

# Module-level console instance (will be set by register function)
console: Console = Console()


def _show_result(result: ProvisionResult) -> None:
    from chatstack.cli_support import print_info, print_success

    if result.secrets_created:
        print_success(console, f"Generated secrets in {result.secrets_file}", prefix="🔐")
    else:
        print_info(console, f"Reusing secrets from {result.secrets_file}")

    console.print("\n[bold]Files written:[/bold]")
    for path in result.written:
        console.print(f"  [dim]{path}[/dim]")


def setup(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file path"),
    domain: Optional[str] = typer.Option(None, "--domain", help="Matrix server name (e.g. example.org)"),
    email: Optional[str] = typer.Option(None, "--email", help="Admin email for Let's Encrypt"),
    root: Optional[str] = typer.Option(None, "--root", help="Directory to write the stack to"),
    no_start: bool = typer.Option(False, "--no-start", help="Write configs but don't pull/start containers"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Log docker commands instead of running them"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Provision the whole stack and start it.

    Safe to re-run after edits or upgrades: secrets are generated once,
    homeserver.yaml patches are applied only where missing, and every
    other config is re-rendered.

    Examples:
        chatstack setup --domain example.org --email admin@example.org
        chatstack setup --no-start       # Stop after writing the compose file
        chatstack setup --dry-run        # Show docker commands only
    """
    from chatstack.cli_support import (
        get_runtime,
        handle_cli_error,
        print_success,
        print_urls,
        print_warning,
        resolve_config,
        setup_file_logging,
    )

    setup_file_logging(log_file=log_file, verbose=verbose)

    try:
        stack = resolve_config(config, domain=domain, email=email, root=root)
        runtime = get_runtime(stack, mock=True if dry_run else None)
        result = StackProvisioner(stack, runtime).run(start=not no_start)
    except (ChatstackError, OSError) as e:
        handle_cli_error(e, console, verbose=verbose)
        return

    _show_result(result)
    console.print()

    if result.started:
        print_success(console, "All services are (re)starting.", prefix="✅")
    else:
        print_success(console, "Configs written. Start the stack with:", prefix="✅")
        console.print(f"   [cyan]docker compose -f {stack.root / 'docker-compose.yml'} up -d[/cyan]")

    print_urls(console, result.urls)
    print_warning(
        console,
        "Make sure every sub-domain A-record points to this host's public IP "
        "before relying on HTTPS. Enable auth before exposing the Traefik dashboard.",
    )


def render(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file path"),
    domain: Optional[str] = typer.Option(None, "--domain", help="Matrix server name (e.g. example.org)"),
    email: Optional[str] = typer.Option(None, "--email", help="Admin email for Let's Encrypt"),
    root: Optional[str] = typer.Option(None, "--root", help="Directory to write the stack to"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Write secrets and static configs without touching Docker.

    homeserver.yaml and the bridge registration are produced by the
    container images, so they are only created by 'chatstack setup'.
    """
    from chatstack.cli_support import handle_cli_error, print_success, resolve_config

    try:
        stack = resolve_config(config, domain=domain, email=email, root=root)
        result = StackProvisioner(stack).render_only()
    except (ChatstackError, OSError) as e:
        handle_cli_error(e, console, verbose=verbose)
        return

    _show_result(result)
    console.print()
    print_success(console, f"Configs rendered under {stack.root}")


def register_setup_commands(app: typer.Typer, shared_console: Console):
    """Register setup commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command()(setup)
    app.command()(render)
