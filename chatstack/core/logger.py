"""Logging for chatstack: Rich console output plus an optional run log.

Handlers live on the ``chatstack`` package logger only. Module loggers are
left at NOTSET and propagate to it, so a single level decides what every
module emits.
"""
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

console = Console()

PACKAGE_LOGGER = "chatstack"
LOG_DIR = Path.home() / ".local" / "state" / "chatstack"
LOG_FILE = LOG_DIR / "chatstack.log"
FALLBACK_LOG_FILE = Path("/tmp/chatstack.log")

FILE_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def _package_logger() -> logging.Logger:
    """Return the package logger, attaching the console handler on first use."""
    package = logging.getLogger(PACKAGE_LOGGER)
    if not any(isinstance(h, RichHandler) for h in package.handlers):
        handler = RichHandler(console=console, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        package.addHandler(handler)
        if package.level == logging.NOTSET:
            package.setLevel(logging.INFO)
    return package


def _open_log_file(log_file: Optional[str]) -> Path:
    target = Path(log_file) if log_file else LOG_FILE
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        target = FALLBACK_LOG_FILE
    return target


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> Path:
    """Send chatstack log records to a file for this run.

    Args:
        log_file: Path to log file (defaults to ~/.local/state/chatstack/chatstack.log)
        verbose: Log debug records (docker command lines, every file written)

    Returns:
        Path of the log file in use. Falls back to /tmp/chatstack.log when
        the default directory cannot be created.

    Calling it again replaces the previous file handler.
    """
    package = _package_logger()
    level = logging.DEBUG if verbose else logging.INFO

    for handler in [h for h in package.handlers if isinstance(h, logging.FileHandler)]:
        package.removeHandler(handler)
        handler.close()

    target = _open_log_file(log_file)
    file_handler = logging.FileHandler(target)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    file_handler.setLevel(level)
    package.addHandler(file_handler)
    package.setLevel(level)

    package.info(f"chatstack logging initialized: {target}")
    return target


def reset_logging() -> None:
    """Detach and close every handler on the package logger."""
    package = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package.handlers):
        package.removeHandler(handler)
        handler.close()
    package.setLevel(logging.NOTSET)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger whose records reach the chatstack handlers.

    Args:
        name: Logger name (typically __name__)
    """
    _package_logger()
    return logging.getLogger(name)
