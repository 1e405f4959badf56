"""Authentication package."""

from sigeg.auth.authenticator import (
    Authenticator,
    BcryptAuthenticator,
    can_edit,
    hash_password,
)

__all__ = ["Authenticator", "BcryptAuthenticator", "can_edit", "hash_password"]
