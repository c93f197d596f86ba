"""Supervisor event bus — an in-process all-events stream.

The router only needs an ``EventSource``: something it can subscribe a
``(event_type, event_data)`` handler to.  ``SupervisorBus`` is the
in-process implementation used when embedding the router next to a
supervisor adapter, and in tests.

Subscriptions are explicit handles.  Closing one (directly, or by
leaving its ``with`` block) removes the handler; closing twice is a
no-op.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

EventHandler = Callable[[str, Any], None]


class Subscription:
    """Handle for one handler subscribed to an event source.

    Parameters
    ----------
    release:
        Callable that removes the handler from its source.  Called at
        most once.
    """

    def __init__(self, release: Callable[[], None]) -> None:
        self._release: Callable[[], None] | None = release

    @property
    def closed(self) -> bool:
        return self._release is None

    def close(self) -> None:
        """Unsubscribe.  Safe to call more than once."""
        release, self._release = self._release, None
        if release is not None:
            release()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


@runtime_checkable
class EventSource(Protocol):
    """Anything that delivers every supervisor event to subscribers."""

    def subscribe(self, handler: EventHandler) -> Subscription:
        """Deliver all future events to *handler* until the handle closes."""
        ...


class SupervisorBus:
    """Fan-out of supervisor events to every subscribed handler.

    Handlers run in subscription order.  A handler that raises is logged
    and skipped; the remaining handlers still receive the event.
    """

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def subscribe(self, handler: EventHandler) -> Subscription:
        self._handlers.append(handler)
        return Subscription(lambda: self._unsubscribe(handler))

    def _unsubscribe(self, handler: EventHandler) -> None:
        try:
            self._handlers.remove(handler)
        except ValueError:
            pass

    def emit(self, event_type: str, event_data: Any) -> None:
        """Deliver one event to every handler."""
        for handler in list(self._handlers):
            try:
                handler(event_type, event_data)
            except Exception:  # noqa: BLE001
                logger.exception("Event handler failed for %s", event_type)
