"""LogRouter — routes every supervisor event to the owning app's relay.

Applications are registered before the supervisor learns about them,
so every event the supervisor can emit for a managed app already has a
relay waiting.  Events for unknown apps, or without an app at all, are
dropped: they are expected around startup and shutdown.

A failure inside one relay is logged and contained; it never reaches
the event source or affects other applications.
"""

from __future__ import annotations

import logging
from typing import Any

from logrelay.core.event_bus import EventSource, Subscription
from logrelay.core.log_tail import DEFAULT_POLL_INTERVAL, Dispatch, TailObserver, inline
from logrelay.logs import LoggerProvider
from logrelay.models.app_config import AppConfig, LogMode
from logrelay.models.events import extract_app_name
from logrelay.relays import LogRelay
from logrelay.relays.bus import BusLogRelay
from logrelay.relays.file_tail import FileTailRelay

logger = logging.getLogger(__name__)


class RelayRegistrationError(ValueError):
    """Raised when an application is registered twice."""


class LogRouter:
    """Registry of relays keyed by application name.

    Usage
    -----
    >>> router = LogRouter(LogManager("logs"))
    >>> effective = router.register(app_config)   # hand this to the supervisor
    >>> with router.attach(bus):
    ...     run_supervisor()

    Parameters
    ----------
    logger_provider:
        Source of application-scoped loggers and managed log paths.
    logger:
        Parent of the application loggers; relay diagnostics go here too.
        Defaults to the provider's own parent.
    dispatch:
        Where file-tail reads run.  Pass ``loop_dispatch(loop)`` to keep
        them on the same asyncio loop that delivers supervisor events.
    poll_interval:
        Polling interval of the observer shared by every file tail, in
        seconds.
    encoding:
        Encoding of application output.
    """

    def __init__(
        self,
        logger_provider: LoggerProvider,
        *,
        logger: logging.Logger | None = None,
        dispatch: Dispatch = inline,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        encoding: str = "utf-8",
    ) -> None:
        self._provider = logger_provider
        self._logger = logger
        self._dispatch = dispatch
        self._observer = TailObserver(poll_interval)
        self._encoding = encoding
        self._relays: dict[str, LogRelay] = {}
        self._subscriptions: dict[int, Subscription] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, app_config: AppConfig) -> AppConfig:
        """Create the relay for *app_config* and return its effective config.

        The returned configuration carries the output destinations the
        relay expects; give it, not the original, to the supervisor.

        Raises
        ------
        RelayRegistrationError
            If an application with the same name is already registered.
        """
        name = app_config.name
        if name in self._relays:
            raise RelayRegistrationError(f"Application '{name}' is already registered")

        app_logger = self._provider.get_logger(name, self._logger)
        relay: LogRelay
        if app_config.logging.mode is LogMode.TAIL_LOG_FILE:
            relay = FileTailRelay(
                app_config,
                app_logger,
                log_manager=self._provider,
                parent_logger=self._logger,
                encoding=self._encoding,
                dispatch=self._dispatch,
                observer=self._observer,
            )
        else:
            relay = BusLogRelay(
                app_config,
                app_logger,
                parent_logger=self._logger,
                encoding=self._encoding,
            )

        self._relays[name] = relay
        logger.info("Registered %s relay for %s", app_config.logging.mode.value, name)
        return relay.effective_config

    @property
    def observer(self) -> TailObserver:
        """Observer shared by the file tails of every tail-mode app."""
        return self._observer

    def get_relay(self, name: str) -> LogRelay | None:
        return self._relays.get(name)

    @property
    def app_names(self) -> list[str]:
        return list(self._relays)

    def __contains__(self, name: object) -> bool:
        return name in self._relays

    def __len__(self) -> int:
        return len(self._relays)

    # ------------------------------------------------------------------
    # Event sources
    # ------------------------------------------------------------------

    def attach(self, source: EventSource) -> Subscription:
        """Subscribe to all events of *source*.

        Returns the subscription handle; leaving its ``with`` block (or
        calling ``close``) detaches again.  Attaching an already
        attached source returns its live subscription.
        """
        current = self._subscriptions.get(id(source))
        if current is not None and not current.closed:
            return current
        subscription = source.subscribe(self.handle_event)
        self._subscriptions[id(source)] = subscription
        logger.debug("Attached to %r", source)
        return subscription

    def detach(self, source: EventSource) -> None:
        """Stop receiving events from *source*.  No-op if not attached."""
        subscription = self._subscriptions.pop(id(source), None)
        if subscription is not None:
            subscription.close()
            logger.debug("Detached from %r", source)

    def close(self) -> None:
        """Detach from every source and release every relay's watches."""
        subscriptions = list(self._subscriptions.values())
        self._subscriptions.clear()
        for subscription in subscriptions:
            subscription.close()
        for relay in self._relays.values():
            try:
                relay.close()
            except Exception:  # noqa: BLE001
                logger.exception("Failed to close relay for %s", relay.app_name)
        self._observer.stop()

    def __enter__(self) -> LogRouter:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def handle_event(self, event_type: str, event_data: Any) -> None:
        """Route one supervisor event to the relay owning it."""
        name = extract_app_name(event_data)
        if name is None:
            return
        relay = self._relays.get(name)
        if relay is None:
            return
        try:
            relay.handle_event(event_type, event_data)
        except Exception:  # noqa: BLE001
            logger.exception("Relay for %s failed on %s", name, event_type)

    def __repr__(self) -> str:
        return f"LogRouter(apps={self.app_names}, sources={len(self._subscriptions)})"
