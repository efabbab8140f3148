"""
Change Notification

Publish/subscribe fan-out from state owners (timeline, dataset) to views.

GUARANTEES:
===========
- Listeners are called synchronously, in subscription order
- A failing listener never prevents delivery to the others
- Unsubscribing during delivery is safe
"""

from __future__ import annotations
from typing import Callable, Generic, List, Optional, TypeVar
import logging

logger = logging.getLogger(__name__)

T = TypeVar('T')

Listener = Callable[[T], None]
Unsubscribe = Callable[[], None]


class ChangeNotifier(Generic[T]):
    """Ordered set of listeners for one kind of change."""

    def __init__(
        self,
        name: str,
        on_listener_error: Optional[Callable[[str, BaseException], None]] = None
    ):
        self._name = name
        self._listeners: List[Listener] = []
        self._on_listener_error = on_listener_error

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """Register listener; returns a callable that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, value: T) -> int:
        """
        Deliver value to every listener.

        Returns the number of listeners that failed.
        """
        failures = 0
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception as exc:
                failures += 1
                logger.exception("Listener %r on %s failed", listener, self._name)
                if self._on_listener_error is not None:
                    self._on_listener_error(self._name, exc)
        return failures

    @property
    def listener_count(self) -> int:
        return len(self._listeners)
