"""File-tail relay — follows the files the supervisor writes.

The supervisor redirects each stream of the application into a file;
this relay tails those files while the process is online.  Each stream
is either idle or watched by exactly one ``LogTail``:

* ``online`` tears down both tails and opens a fresh one for every
  visible stream that has a file.
* ``exit`` tears both down.  Doing so on an idle relay is a no-op.

Lines from stdout go to ``logger.info`` and lines from stderr to
``logger.error``, each only if that stream is visible.  Failures to
watch or read either file are always logged at error level, even when
stderr is hidden.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from logrelay.core.log_tail import DEFAULT_POLL_INTERVAL, Dispatch, LogTail, TailObserver, inline
from logrelay.logs import LoggerProvider
from logrelay.models.app_config import DISCARD, AppConfig, Stream
from logrelay.models.events import EXIT, ONLINE, PROCESS_EVENT, lifecycle_state
from logrelay.relays.base import BaseLogRelay


class StreamState(str, Enum):
    IDLE = "idle"
    WATCHING = "watching"


class FileTailRelay(BaseLogRelay):
    """Relay for applications in ``tailLogFile`` mode.

    Parameters
    ----------
    app_config:
        Registered configuration of the application.
    logger:
        Logger scoped to the application.
    log_manager:
        Provides the managed log directory paths used when the app logs
        into the managed directory without explicit files.
    parent_logger:
        Logger receiving relay diagnostics.
    interval:
        Polling interval of the file tails, in seconds.  Ignored when
        *observer* is given.
    encoding:
        Encoding of the tailed files.
    dispatch:
        Where tail reads run; see ``logrelay.core.log_tail``.
    observer:
        Observer shared with other relays.  Without one the relay owns a
        private observer and stops it on ``close``.
    """

    def __init__(
        self,
        app_config: AppConfig,
        logger: logging.Logger,
        *,
        log_manager: LoggerProvider,
        parent_logger: logging.Logger | None = None,
        interval: float = DEFAULT_POLL_INTERVAL,
        encoding: str = "utf-8",
        dispatch: Dispatch = inline,
        observer: TailObserver | None = None,
    ) -> None:
        self._log_manager = log_manager
        self._owns_observer = observer is None
        self._observer = observer if observer is not None else TailObserver(interval)
        self._encoding = encoding
        self._dispatch = dispatch
        self._tails: dict[Stream, LogTail | None] = {Stream.STDOUT: None, Stream.STDERR: None}
        self._warned_missing: set[Stream] = set()
        super().__init__(app_config, logger, parent_logger=parent_logger)

    def resolve_destinations(self, app_config: AppConfig) -> tuple[str | None, str | None]:
        output, error = app_config.output, app_config.error
        if app_config.logging.log_to_managed_dir:
            name = app_config.name
            if output is None:
                output = str(self._log_manager.get_file_path(f"{name}-stdout").resolve())
            if error is None:
                error = str(self._log_manager.get_file_path(f"{name}-stderr").resolve())
        return output, error

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def state(self, stream: Stream) -> StreamState:
        return StreamState.IDLE if self._tails[stream] is None else StreamState.WATCHING

    def tail(self, stream: Stream) -> LogTail | None:
        """Return the active tail for *stream*, if any."""
        return self._tails[stream]

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def handle_event(self, event_type: str, event_data: Any) -> None:
        if event_type != PROCESS_EVENT:
            return
        state = lifecycle_state(event_data)
        if state == ONLINE:
            self._handle_online()
        elif state == EXIT:
            self._handle_offline()

    def _handle_online(self) -> None:
        self._stop_all()
        for stream in Stream:
            path = self._config.destination(stream)
            if path is None:
                self._warn_missing(stream)
                continue
            if not self.log_options.shows(stream):
                continue
            if path == DISCARD:
                self._parent_logger.debug("Not tailing %s of %s: discarded", stream.value, self.app_name)
                continue
            self._start(stream, path)

    def _handle_offline(self) -> None:
        self._stop_all()

    def close(self) -> None:
        self._stop_all()
        if self._owns_observer:
            self._observer.stop()

    def _start(self, stream: Stream, path: str) -> None:
        self._stop(stream)
        self._parent_logger.debug("Tailing %s of %s from %s", stream.value, self.app_name, path)
        on_line = self._handle_stdout_line if stream is Stream.STDOUT else self._handle_stderr_line
        tail = LogTail(
            path,
            on_line,
            self._handle_tail_error,
            encoding=self._encoding,
            dispatch=self._dispatch,
            observer=self._observer,
        )
        self._tails[stream] = tail
        tail.watch()

    def _stop(self, stream: Stream) -> None:
        tail, self._tails[stream] = self._tails[stream], None
        if tail is not None:
            tail.unwatch()

    def _stop_all(self) -> None:
        for stream in Stream:
            self._stop(stream)

    def _warn_missing(self, stream: Stream) -> None:
        if stream in self._warned_missing:
            return
        self._warned_missing.add(stream)
        option = "output" if stream is Stream.STDOUT else "error"
        self._logger.warning("App process for %s is missing the '%s' property.", self.app_name, option)

    # ------------------------------------------------------------------
    # Tail callbacks
    # ------------------------------------------------------------------

    def _handle_stdout_line(self, line: str) -> None:
        if self.log_options.show_stdout:
            self._logger.info(line)

    def _handle_stderr_line(self, line: str) -> None:
        if self.log_options.show_stderr:
            self._logger.error(line)

    def _handle_tail_error(self, message: str) -> None:
        self._logger.error(message)
