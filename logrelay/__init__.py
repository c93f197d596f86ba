"""logrelay: routes managed applications' stdout/stderr into per-app loggers.

Sits between a process supervisor and the logging facility:
  - Two delivery strategies per application: tail the files the
    supervisor writes, or decode log payloads from the supervisor bus
  - Per-app visibility of stdout and stderr
  - File tails start and stop with the process's online/exit events
  - Watch and read failures always surface as errors on the app logger
"""

__version__ = "0.1.0"

from logrelay.core.event_bus import Subscription, SupervisorBus
from logrelay.logs import LogManager
from logrelay.models.app_config import DISCARD, AppConfig, AppLogOptions, LogMode, SupervisorOptions
from logrelay.routing.router import LogRouter

__all__ = [
    "DISCARD",
    "AppConfig",
    "AppLogOptions",
    "LogManager",
    "LogMode",
    "LogRouter",
    "Subscription",
    "SupervisorBus",
    "SupervisorOptions",
    "__version__",
]
