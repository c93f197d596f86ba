"""Relay protocol and variants.

A relay owns the delivery mechanism of one application and turns raw
supervisor events into calls on that application's logger.  The router
only depends on the ``LogRelay`` protocol; ``FileTailRelay`` and
``BusLogRelay`` are the two built-in strategies.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from logrelay.models.app_config import AppConfig


@runtime_checkable
class LogRelay(Protocol):
    """Protocol every log relay implements.

    Attributes
    ----------
    app_name : str
        Identity of the application the relay serves.
    effective_config : AppConfig
        Configuration after the relay's defaulting; this is what the
        supervisor must be given.
    """

    @property
    def app_name(self) -> str:
        ...

    @property
    def effective_config(self) -> AppConfig:
        ...

    def handle_event(self, event_type: str, event_data: Any) -> None:
        """React to one supervisor event.  Unknown types are ignored."""
        ...

    def close(self) -> None:
        """Release watches or other resources.  Idempotent."""
        ...
