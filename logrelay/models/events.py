"""Supervisor event tags and payload helpers.

The supervisor publishes every event as an ``(event_type, event_data)``
pair.  ``event_data`` is a mapping (or an object with attributes) whose
``process`` member names the owning application.  Lifecycle events add
an ``event`` field; log events add a ``data`` field holding the raw
bytes the process wrote.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

PROCESS_EVENT = "process:event"
LOG_OUT = "log:out"
LOG_ERR = "log:err"

ONLINE = "online"
EXIT = "exit"


def _field(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def extract_app_name(event_data: Any) -> str | None:
    """Return ``event_data.process.name``, or ``None`` when absent.

    Both mappings and attribute-style objects are accepted so that
    decoded JSON payloads and supervisor-native objects route the same
    way.  Empty or non-string names count as absent.
    """
    if event_data is None:
        return None
    name = _field(_field(event_data, "process"), "name")
    if isinstance(name, str) and name:
        return name
    return None


def lifecycle_state(event_data: Any) -> str | None:
    """Return the ``event`` field of a ``process:event`` payload."""
    return _field(event_data, "event")


def payload_data(event_data: Any) -> Any:
    """Return the ``data`` field of a ``log:out``/``log:err`` payload."""
    return _field(event_data, "data")


def process_event(name: str, state: str) -> dict[str, Any]:
    """Build a lifecycle payload for *name* (e.g. ``online``, ``exit``)."""
    return {"process": {"name": name}, "event": state}


def log_event(name: str, data: bytes | str) -> dict[str, Any]:
    """Build a log payload for *name* carrying *data*."""
    return {"process": {"name": name}, "data": data}
