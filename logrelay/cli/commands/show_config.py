"""``logrelay config NAME`` — show the effective supervisor options.

Prints the output/error destinations the router would hand to the
supervisor for an application, after the relay for the chosen mode has
applied its defaults.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from logrelay.config import settings
from logrelay.logs import LogManager
from logrelay.models.app_config import AppConfig, AppLogOptions, LogMode, SupervisorOptions
from logrelay.routing.router import LogRouter

console = Console()


def config_cmd(
    name: str = typer.Argument(..., help="Application name."),
    mode: LogMode = typer.Option(LogMode.BUS, "--mode", "-m", help="Log delivery mode."),
    out: str = typer.Option(None, "--out", "-o", help="Explicit stdout destination."),
    err: str = typer.Option(None, "--err", "-e", help="Explicit stderr destination."),
    log_dir: Path = typer.Option(None, "--log-dir", help="Managed log directory."),
    no_managed_dir: bool = typer.Option(
        False,
        "--no-managed-dir",
        help="Leave unset files at the supervisor's defaults (tailLogFile mode).",
    ),
) -> None:
    """Show where an application's output would be written."""
    app_config = AppConfig(
        supervisor=SupervisorOptions(name=name, output=out, error=err),
        logging=AppLogOptions(mode=mode, log_to_managed_dir=not no_managed_dir),
    )
    # Relay warnings are for running apps, not for this preview.
    preview_logger = logging.getLogger("logrelay.preview")
    preview_logger.propagate = False
    if not preview_logger.handlers:
        preview_logger.addHandler(logging.NullHandler())

    router = LogRouter(LogManager(log_dir or settings.log_dir), logger=preview_logger)
    effective = router.register(app_config)

    table = Table(title=f"Supervisor options for {name}")
    table.add_column("Option", style="cyan")
    table.add_column("Value")
    table.add_row("mode", mode.value)
    for option in ("output", "error", "out_file", "error_file"):
        value = getattr(effective.supervisor, option)
        table.add_row(option, "[dim]supervisor default[/dim]" if value is None else value)
    console.print(table)
