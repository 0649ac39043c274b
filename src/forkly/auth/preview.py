"""In-memory identity provider for previews and tests.

Never touches the network. Any email/password pair signs in successfully.
"""

from __future__ import annotations

from forkly.auth.base import IdentitySignal
from forkly.auth.models import AuthUser
from forkly.observability.logging import get_logger


logger = get_logger(__name__)

PREVIEW_USER = AuthUser(uid="preview-user-id", email="preview@forkly.app")
MOCK_USER_ID = "mock-user-id"


class PreviewIdentityProvider(IdentitySignal):
    """Identity provider that fakes a signed-in session."""

    def __init__(self, user: AuthUser | None = PREVIEW_USER) -> None:
        super().__init__(user)

    async def initialize(self) -> None:
        logger.debug("PreviewIdentityProvider initialized")

    async def shutdown(self) -> None:
        logger.debug("PreviewIdentityProvider shutdown")

    async def sign_up(self, email: str, password: str) -> AuthUser:
        return self._sign_in_as(email)

    async def sign_in(self, email: str, password: str) -> AuthUser:
        return self._sign_in_as(email)

    def sign_out(self) -> None:
        self._set_user(None)

    def _sign_in_as(self, email: str) -> AuthUser:
        user = AuthUser(uid=MOCK_USER_ID, email=email)
        self._set_user(user)
        return user
