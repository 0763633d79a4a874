"""In-process event bus for car change events."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from pymonza.models.change import CarChange

_logger = logging.getLogger(__name__)

ChangeListener = Callable[[CarChange], None]
Unsubscribe = Callable[[], None]


class EventBus(Protocol):
    def publish(self, event: CarChange) -> None:
        ...

    def subscribe(self, listener: ChangeListener) -> Unsubscribe:
        ...


class LocalEventBus:
    """Synchronous broadcast of :class:`CarChange` events.

    Every published event is delivered to every listener registered at
    publish time, in subscription order. A listener that raises is logged
    and does not prevent delivery to the others.
    """

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: ChangeListener) -> Unsubscribe:
        """Register *listener* and return a callable that removes it again."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return _unsubscribe

    def publish(self, event: CarChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                _logger.exception("Change listener %r failed for %s event", listener, event.kind.value)
