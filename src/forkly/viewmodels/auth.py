"""Sign-in, sign-up and sign-out state."""

from __future__ import annotations

from typing import TYPE_CHECKING

from forkly.auth.exceptions import IdentityError
from forkly.observability.logging import get_logger
from forkly.viewmodels.base import ViewModel


if TYPE_CHECKING:
    from collections.abc import Callable

    from forkly.auth.models import AuthUser
    from forkly.auth.protocol import IdentityProvider


logger = get_logger(__name__)


class AuthViewModel(ViewModel):
    """Wraps an identity provider for the login and profile screens.

    Failures surface the provider's message unchanged; nothing is retried.
    """

    def __init__(self, identity: IdentityProvider) -> None:
        super().__init__()
        self._identity = identity
        self._unsubscribe: Callable[[], None] | None = identity.subscribe(
            self._on_identity_changed
        )

    @property
    def current_user(self) -> AuthUser | None:
        return self._identity.current_user

    @property
    def is_authenticated(self) -> bool:
        return self._identity.current_user is not None

    async def sign_in(self, email: str, password: str) -> bool:
        return await self._run("sign_in", email, password)

    async def sign_up(self, email: str, password: str) -> bool:
        return await self._run("sign_up", email, password)

    def sign_out(self) -> bool:
        try:
            self._identity.sign_out()
        except IdentityError as e:
            self._update(error_message=e.message)
            return False
        self._update(error_message=None)
        return True

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def _run(self, action: str, email: str, password: str) -> bool:
        self._update(is_loading=True, error_message=None)
        operation = getattr(self._identity, action)
        try:
            await operation(email.strip(), password)
        except IdentityError as e:
            logger.info("Identity request failed", action=action, code=e.code)
            self._update(is_loading=False, error_message=e.message)
            return False
        self._update(is_loading=False)
        return True

    def _on_identity_changed(self, _user: AuthUser | None) -> None:
        self._notify()
