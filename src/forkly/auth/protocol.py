"""Identity provider protocol definition.

The favorites engine and the auth view model consume this interface; the
Firebase and preview implementations are interchangeable behind it.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable


if TYPE_CHECKING:
    from forkly.auth.models import AuthUser


IdentityListener = Callable[["AuthUser | None"], None]


@runtime_checkable
class IdentityProvider(Protocol):
    """Protocol for identity providers.

    The provider exposes the current user as a readable signal: listeners
    registered with ``subscribe`` receive the new user (or ``None``) on
    every change.
    """

    @property
    def current_user(self) -> AuthUser | None:
        """The signed-in user, or ``None`` when signed out."""
        ...

    async def sign_up(self, email: str, password: str) -> AuthUser:
        """Create an account and sign it in.

        Raises:
            IdentityError: With the provider's human-readable message.
        """
        ...

    async def sign_in(self, email: str, password: str) -> AuthUser:
        """Sign in with email and password.

        Raises:
            IdentityError: With the provider's human-readable message.
        """
        ...

    def sign_out(self) -> None:
        """End the current session."""
        ...

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register ``listener`` and return a function that unregisters it."""
        ...
