"""Identity provider exceptions.

``IdentityError.message`` is shown to the user as-is; no retry is attempted
on their behalf.
"""

from __future__ import annotations


class IdentityError(Exception):
    """Raised when sign-up, sign-in or sign-out fails."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class IdentityUnavailableError(IdentityError):
    """Raised when the identity service cannot be reached."""
