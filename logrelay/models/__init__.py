"""logrelay data models — Pydantic v2, frozen (immutable)."""

from logrelay.models.app_config import (
    DISCARD,
    AppConfig,
    AppLogOptions,
    LogMode,
    Stream,
    SupervisorOptions,
)
from logrelay.models.events import (
    EXIT,
    LOG_ERR,
    LOG_OUT,
    ONLINE,
    PROCESS_EVENT,
    extract_app_name,
    log_event,
    process_event,
)

__all__ = [
    "DISCARD",
    "AppConfig",
    "AppLogOptions",
    "LogMode",
    "Stream",
    "SupervisorOptions",
    "EXIT",
    "LOG_ERR",
    "LOG_OUT",
    "ONLINE",
    "PROCESS_EVENT",
    "extract_app_name",
    "log_event",
    "process_event",
]
