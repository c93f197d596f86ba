"""Bus relay — decodes log payloads published on the supervisor bus."""

from __future__ import annotations

import logging
from typing import Any

from logrelay.core.framing import decode_payload, split_lines
from logrelay.models.app_config import DISCARD, AppConfig
from logrelay.models.events import LOG_ERR, LOG_OUT, payload_data
from logrelay.relays.base import BaseLogRelay


class BusLogRelay(BaseLogRelay):
    """Relay for applications in ``bus`` mode.

    Has no lifecycle of its own: every ``log:out``/``log:err`` event
    carries a batch of newline-terminated output which is framed into
    lines and logged at info/error level respectively.  Destinations the
    app left unset default to ``DISCARD`` so the supervisor does not
    write its own copy of the output to disk.
    """

    def __init__(
        self,
        app_config: AppConfig,
        logger: logging.Logger,
        *,
        parent_logger: logging.Logger | None = None,
        encoding: str = "utf-8",
    ) -> None:
        self._encoding = encoding
        super().__init__(app_config, logger, parent_logger=parent_logger)

    def resolve_destinations(self, app_config: AppConfig) -> tuple[str | None, str | None]:
        output = app_config.output if app_config.output is not None else DISCARD
        error = app_config.error if app_config.error is not None else DISCARD
        return output, error

    def handle_event(self, event_type: str, event_data: Any) -> None:
        if event_type == LOG_OUT:
            self._handle_log_out(event_data)
        elif event_type == LOG_ERR:
            self._handle_log_err(event_data)

    def split_payload(self, event_data: Any) -> list[str]:
        return split_lines(decode_payload(payload_data(event_data), self._encoding))

    def _handle_log_out(self, event_data: Any) -> None:
        if self.log_options.show_stdout:
            for line in self.split_payload(event_data):
                self._logger.info(line)

    def _handle_log_err(self, event_data: Any) -> None:
        if self.log_options.show_stderr:
            for line in self.split_payload(event_data):
                self._logger.error(line)
