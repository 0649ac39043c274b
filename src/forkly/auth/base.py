"""Shared current-user signal for identity provider implementations."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from forkly.observability.logging import get_logger


if TYPE_CHECKING:
    from forkly.auth.models import AuthUser
    from forkly.auth.protocol import IdentityListener


logger = get_logger(__name__)


class IdentitySignal:
    """Holds the current user and notifies listeners when it changes."""

    def __init__(self, user: AuthUser | None = None) -> None:
        self._current_user = user
        self._listeners: list[IdentityListener] = []

    @property
    def current_user(self) -> AuthUser | None:
        return self._current_user

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_user(self, user: AuthUser | None) -> None:
        if user == self._current_user:
            return
        self._current_user = user
        logger.info(
            "Identity changed",
            user_id=user.uid if user else None,
        )
        for listener in list(self._listeners):
            try:
                listener(user)
            except Exception:
                logger.exception("Identity listener raised")
