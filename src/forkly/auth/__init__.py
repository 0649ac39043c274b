"""Identity providers.

Available providers:
- FirebaseIdentityProvider: Firebase Authentication over its REST API
- PreviewIdentityProvider: in-memory mock session (preview mode)
"""

from forkly.auth.exceptions import IdentityError, IdentityUnavailableError
from forkly.auth.firebase import FirebaseIdentityProvider
from forkly.auth.models import AuthUser
from forkly.auth.preview import PreviewIdentityProvider
from forkly.auth.protocol import IdentityListener, IdentityProvider


__all__ = [
    "AuthUser",
    "FirebaseIdentityProvider",
    "IdentityError",
    "IdentityListener",
    "IdentityProvider",
    "IdentityUnavailableError",
    "PreviewIdentityProvider",
]
