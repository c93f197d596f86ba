"""Main Typer application — registers the logrelay CLI commands.

Entry point: ``logrelay`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from logrelay.cli.commands.show_config import config_cmd
from logrelay.cli.commands.tail import tail_cmd

app = typer.Typer(
    name="logrelay",
    help="logrelay: route managed applications' output into per-app loggers.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="tail", help="Follow an application's stdout/stderr files.")(tail_cmd)
app.command(name="config", help="Show the effective supervisor log options.")(config_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
