"""Shared utilities for chatstack CLI modules."""
from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from chatstack.core.config import is_mock, load_config
from chatstack.models.stack import StackConfig
from chatstack.services.docker import DockerRuntime


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> None:
    """Set up file logging for CLI commands.

    Args:
        log_file: Path to log file (optional)
        verbose: Enable verbose logging
    """
    from chatstack.core.logger import setup_file_logging as _setup_file_logging
    _setup_file_logging(log_file=log_file, verbose=verbose)


def resolve_config(
    config_path: Optional[str] = None,
    domain: Optional[str] = None,
    email: Optional[str] = None,
    root: Optional[str] = None,
) -> StackConfig:
    """Load the stack configuration with CLI flags taking precedence."""
    return load_config(config_path, domain=domain, admin_email=email, root=root)


def get_runtime(config: StackConfig, mock: Optional[bool] = None) -> DockerRuntime:
    """Return a DockerRuntime, in mock mode when CHATSTACK_MOCK=1."""
    if mock is None:
        mock = is_mock()
    return DockerRuntime(config.images, mock=mock)


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    console.print(f"[red]Error:[/red] {escape(str(e))}")
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def print_urls(console: Console, urls: dict) -> None:
    """Print service URLs as an aligned list."""
    width = max((len(name) for name in urls), default=0) + 1
    for name, url in urls.items():
        console.print(f"   → {name + ':':<{width}} [cyan]{url}[/cyan]")


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    """Print success message with consistent formatting."""
    console.print(f"[green]{prefix}[/green] {message}")


def print_error(console: Console, message: str, prefix: str = "✗") -> None:
    """Print error message with consistent formatting."""
    console.print(f"[red]{prefix}[/red] {message}")


def print_warning(console: Console, message: str, prefix: str = "⚠") -> None:
    """Print warning message with consistent formatting."""
    console.print(f"[yellow]{prefix}[/yellow] {message}")


def print_info(console: Console, message: str, prefix: str = "ℹ") -> None:
    """Print info message with consistent formatting."""
    console.print(f"[cyan]{prefix}[/cyan] {message}")
