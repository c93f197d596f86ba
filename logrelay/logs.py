"""Per-application logger provider.

Relays never look loggers up from global state; they are handed a
``LoggerProvider`` and ask it for a logger scoped to their application.
``LogManager`` is the stdlib ``logging`` implementation: every app gets
a child of the parent logger, and app-owned files live in one managed
log directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from rich.logging import RichHandler


@runtime_checkable
class LoggerProvider(Protocol):
    """Hands out application-scoped loggers and log file locations."""

    def get_logger(self, name: str, parent: logging.Logger | None = None) -> logging.Logger:
        """Return (creating if needed) the logger for application *name*."""
        ...

    def get_file_path(self, name: str) -> Path:
        """Return the absolute path of the managed log file *name*."""
        ...


class LogManager:
    """Stdlib-backed ``LoggerProvider``.

    Parameters
    ----------
    log_dir:
        Managed log directory.  Created if missing.
    parent:
        Logger that application loggers hang off when ``get_logger`` is
        called without an explicit parent.
    """

    def __init__(self, log_dir: Path | str, *, parent: logging.Logger | None = None) -> None:
        self._log_dir = Path(log_dir).resolve()
        self._log_dir.mkdir(parents=True, exist_ok=True)
        self._parent = parent or logging.getLogger("logrelay.apps")

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def get_logger(self, name: str, parent: logging.Logger | None = None) -> logging.Logger:
        return (parent or self._parent).getChild(name)

    def get_file_path(self, name: str) -> Path:
        return self._log_dir / f"{name}.log"


def configure_logging(level: str | int = "INFO") -> None:
    """Send all records through a rich console handler."""
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
