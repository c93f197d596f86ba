"""Shared construction logic for log relays."""

from __future__ import annotations

import logging
from typing import Any

from logrelay.models.app_config import DISCARD, AppConfig, AppLogOptions


class BaseLogRelay:
    """Common state and configuration handling for every relay variant.

    Subclasses decide where output should go by overriding
    ``resolve_destinations``; this class then keeps the supervisor's
    alias fields in step with the result and tells the operator what
    will happen to the files.

    Parameters
    ----------
    app_config:
        Configuration the application was registered with.  Never
        mutated; see ``effective_config`` for the normalised copy.
    logger:
        Logger scoped to this application.
    parent_logger:
        Logger receiving the relay's own debug diagnostics.
    """

    def __init__(
        self,
        app_config: AppConfig,
        logger: logging.Logger,
        *,
        parent_logger: logging.Logger | None = None,
    ) -> None:
        self._logger = logger
        self._parent_logger = parent_logger or logging.getLogger(__name__)

        output, error = self.resolve_destinations(app_config)
        self._config = app_config.with_destinations(output, error)

        self._parent_logger.debug("Saving output logs for %s to %s", self.app_name, self._config.output)
        self._parent_logger.debug("Saving error logs for %s to %s", self.app_name, self._config.error)

        if self._config.output != DISCARD or self._config.error != DISCARD:
            self._logger.warning("Unable to rotate log files written by the supervisor")
            self._logger.warning(
                "Set log mode to 'bus' and unset the output/error options to hide this warning."
            )

    def resolve_destinations(self, app_config: AppConfig) -> tuple[str | None, str | None]:
        """Return the ``(output, error)`` files the supervisor should write."""
        return app_config.output, app_config.error

    @property
    def app_name(self) -> str:
        return self._config.name

    @property
    def effective_config(self) -> AppConfig:
        return self._config

    @property
    def log_options(self) -> AppLogOptions:
        return self._config.logging

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def handle_event(self, event_type: str, event_data: Any) -> None:
        """Unknown event types are ignored."""

    def close(self) -> None:
        """Release any resources held by the relay."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.app_name!r})"
