"""``logrelay tail NAME`` — relay an application's log files to the console.

Registers one application in ``tailLogFile`` mode, tells the router it
came online and prints every line its stdout/stderr files receive until
interrupted.  Useful for checking which files a configuration would
follow without starting a supervisor.
"""

from __future__ import annotations

import threading
from pathlib import Path

import typer
from rich.console import Console

from logrelay.config import settings
from logrelay.core.event_bus import SupervisorBus
from logrelay.logs import LogManager, configure_logging
from logrelay.models.app_config import AppConfig, AppLogOptions, LogMode, SupervisorOptions
from logrelay.models.events import EXIT, ONLINE, PROCESS_EVENT, process_event
from logrelay.routing.router import LogRouter

console = Console()


def wait_for_interrupt() -> None:
    """Block the calling thread until Ctrl+C."""
    threading.Event().wait()


def tail_cmd(
    name: str = typer.Argument(..., help="Application name."),
    out: Path = typer.Option(None, "--out", "-o", help="stdout file to follow."),
    err: Path = typer.Option(None, "--err", "-e", help="stderr file to follow."),
    log_dir: Path = typer.Option(None, "--log-dir", help="Managed log directory."),
    hide_stdout: bool = typer.Option(False, "--hide-stdout", help="Do not relay stdout."),
    hide_stderr: bool = typer.Option(False, "--hide-stderr", help="Do not relay stderr."),
    interval: float = typer.Option(None, "--interval", "-i", help="Polling interval in seconds."),
) -> None:
    """Follow an application's stdout/stderr files until Ctrl+C."""
    configure_logging(settings.effective_log_level)

    router = LogRouter(
        LogManager(log_dir or settings.log_dir),
        poll_interval=interval or settings.poll_interval,
        encoding=settings.encoding,
    )
    app_config = AppConfig(
        supervisor=SupervisorOptions(
            name=name,
            output=str(out.resolve()) if out else None,
            error=str(err.resolve()) if err else None,
        ),
        logging=AppLogOptions(
            mode=LogMode.TAIL_LOG_FILE,
            show_stdout=not hide_stdout,
            show_stderr=not hide_stderr,
        ),
    )
    effective = router.register(app_config)

    bus = SupervisorBus()
    with router, router.attach(bus):
        console.print(f"[bold cyan]Following {name}[/bold cyan]")
        console.print(f"  stdout: {effective.output}")
        console.print(f"  stderr: {effective.error}")
        console.print("[dim]Press Ctrl+C to stop.[/dim]")
        bus.emit(PROCESS_EVENT, process_event(name, ONLINE))
        try:
            wait_for_interrupt()
        except KeyboardInterrupt:
            console.print()
        finally:
            bus.emit(PROCESS_EVENT, process_event(name, EXIT))
