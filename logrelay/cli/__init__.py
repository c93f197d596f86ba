"""logrelay CLI — Typer-based command-line interface.

Provides the ``logrelay`` command with subcommands for following an
application's log files and previewing the supervisor options a relay
would produce.

All output uses Rich for formatted terminal display.
"""
