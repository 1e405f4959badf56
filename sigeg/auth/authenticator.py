"""
Login and Edit Permissions

DESIGN DECISION: Authentication sits behind a small interface so the
front-end never knows how credentials are checked. The shipped
implementation compares against bcrypt hashes from the environment;
plaintext passwords are never stored or compared.

Permissions: poe administers both tables, every other user edits only
their own table and sees the other one read-only.
"""

import argparse
import getpass
import sys
from abc import ABC, abstractmethod
from typing import Optional

import bcrypt
import structlog

from sigeg.config import get_settings
from sigeg.models.task import Tenant


logger = structlog.get_logger(__name__)

ADMIN = Tenant.POE


class Authenticator(ABC):
    """Checks a username/password pair."""

    @abstractmethod
    def authenticate(self, username: str, password: str) -> Optional[Tenant]:
        """
        Returns:
            The tenant the user logs in as, or None if rejected
        """
        pass


class BcryptAuthenticator(Authenticator):
    """
    Credential table of username → bcrypt hash.

    Usernames are matched case-insensitively. A user without a
    configured hash can never log in.
    """

    def __init__(self, credentials: Optional[dict[str, str]] = None):
        if credentials is None:
            credentials = get_settings().auth.credential_table
        self._hashes = {
            user.lower(): hashed.encode("utf-8")
            for user, hashed in credentials.items()
            if hashed
        }

    def authenticate(self, username: str, password: str) -> Optional[Tenant]:
        user = username.lower()
        stored = self._hashes.get(user)
        if stored is None:
            return None

        try:
            tenant = Tenant(user)
        except ValueError:
            return None

        try:
            matches = bcrypt.checkpw(password.encode("utf-8"), stored)
        except ValueError as e:
            # Malformed stored hash or over-long password
            logger.warning("password_check_failed", username=user, error=str(e))
            return None

        return tenant if matches else None


def hash_password(password: str) -> str:
    """bcrypt hash of `password`, ready to paste into the environment."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def can_edit(user: Tenant, table: Tenant) -> bool:
    """Can `user` add, edit, delete or toggle tasks in `table`?"""
    return user == ADMIN or user == table


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for `sigeg-hash-password`."""
    parser = argparse.ArgumentParser(
        description="Print a bcrypt hash for a SIGEG login password.",
    )
    parser.add_argument(
        "user",
        choices=[tenant.value for tenant in Tenant],
        help="User the password is for",
    )
    args = parser.parse_args(argv)

    password = getpass.getpass(f"Password for {args.user}: ")
    if not password:
        print("Empty password, nothing to hash.", file=sys.stderr)
        return 1

    try:
        hashed = hash_password(password)
    except ValueError as e:
        print(f"Cannot hash this password: {e}", file=sys.stderr)
        return 1

    print(f"SIGEG_AUTH_{args.user.upper()}_PASSWORD_HASH='{hashed}'")
    return 0


if __name__ == "__main__":
    sys.exit(main())
