"""Minimal change-notification mixin for loop-owned state holders."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from forkly.observability.logging import get_logger


logger = get_logger(__name__)

Subscriber = Callable[[Any], None]


class Observable:
    """Publishes "state changed" to subscribers.

    Subscribers are called synchronously with the observable as the only
    argument. A failing subscriber is logged and does not prevent the
    others from being called.
    """

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` and return a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self)
            except Exception:
                logger.exception(
                    "Subscriber raised during notification",
                    observable=type(self).__name__,
                )
