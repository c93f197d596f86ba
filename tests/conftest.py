"""Shared test fixtures for logrelay."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from logrelay.core.event_bus import SupervisorBus
from logrelay.models.app_config import AppConfig, AppLogOptions, LogMode, SupervisorOptions
from logrelay.routing.router import LogRouter

# Long enough that the polling observer never fires during a unit test;
# tests drive reads explicitly through LogTail.poll().
IDLE_INTERVAL = 60.0


class RecordingLogger:
    """Stands in for an application logger and records every call."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.records: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def _record(self, level: str, msg: Any, *args: Any) -> None:
        text = str(msg) % args if args else str(msg)
        with self._lock:
            self.records.append((level, text))

    def debug(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self._record("debug", msg, *args)

    def info(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self._record("info", msg, *args)

    def warning(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self._record("warning", msg, *args)

    def error(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self._record("error", msg, *args)

    def exception(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self._record("error", msg, *args)

    def getChild(self, suffix: str) -> RecordingLogger:  # noqa: N802
        return RecordingLogger(f"{self.name}.{suffix}")

    def at(self, level: str) -> list[str]:
        with self._lock:
            return [text for lvl, text in self.records if lvl == level]


class RecordingProvider:
    """LoggerProvider handing out RecordingLoggers, one per app."""

    def __init__(self, log_dir: Path) -> None:
        self.log_dir = log_dir
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.loggers: dict[str, RecordingLogger] = {}

    def get_logger(self, name: str, parent: Any = None) -> RecordingLogger:
        return self.loggers.setdefault(name, RecordingLogger(name))

    def get_file_path(self, name: str) -> Path:
        return self.log_dir / f"{name}.log"


def _wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


def _append(path: Path, text: str) -> None:
    with open(path, "a", encoding="utf-8", newline="") as fh:
        fh.write(text)


@pytest.fixture
def idle_interval() -> float:
    """Polling interval under which no observer tick happens during a test."""
    return IDLE_INTERVAL


@pytest.fixture
def wait_for() -> Callable[..., bool]:
    """Poll a predicate until it holds or the timeout (seconds) passes."""
    return _wait_for


@pytest.fixture
def append() -> Callable[[Path, str], None]:
    """Append text to a file without newline translation."""
    return _append


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for log files."""
    return tmp_path


@pytest.fixture
def provider(tmp_dir: Path) -> RecordingProvider:
    return RecordingProvider(tmp_dir / "logs")


@pytest.fixture
def app_logger() -> RecordingLogger:
    return RecordingLogger("demo")


@pytest.fixture
def parent_logger() -> RecordingLogger:
    """Parent logger handed to relays for their own diagnostics."""
    return RecordingLogger("logrelay")


@pytest.fixture
def bus() -> SupervisorBus:
    return SupervisorBus()


@pytest.fixture
def router(provider: RecordingProvider):
    """A LogRouter whose file tails only read when polled explicitly."""
    log_router = LogRouter(provider, poll_interval=IDLE_INTERVAL)
    yield log_router
    log_router.close()


@pytest.fixture
def make_app_config() -> Callable[..., AppConfig]:
    """Factory fixture: build an AppConfig with sensible defaults."""

    def _factory(
        name: str = "demo",
        mode: LogMode = LogMode.BUS,
        show_stdout: bool = True,
        show_stderr: bool = True,
        log_to_managed_dir: bool = True,
        **supervisor: Any,
    ) -> AppConfig:
        return AppConfig(
            supervisor=SupervisorOptions(name=name, **supervisor),
            logging=AppLogOptions(
                mode=mode,
                show_stdout=show_stdout,
                show_stderr=show_stderr,
                log_to_managed_dir=log_to_managed_dir,
            ),
        )

    return _factory
