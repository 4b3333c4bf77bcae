"""Password hashing for protected resources."""

from __future__ import annotations

import logging
from typing import Sequence

from passlib.context import CryptContext

from linkhub.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_SCHEMES: tuple[str, ...] = ("pbkdf2_sha256",)


class PasswordHasher:
    """Hash and verify resource passwords through a passlib context."""

    def __init__(self, schemes: Sequence[str] = DEFAULT_SCHEMES) -> None:
        self._context = CryptContext(schemes=list(schemes), deprecated="auto")

    def hash(self, password: str) -> str:
        """Hash a password for storing in the database."""

        return self._context.hash(password)

    def verify(self, password_hash: str, password: str) -> bool:
        """Verify a plain password against its hashed counterpart."""

        try:
            return self._context.verify(password, password_hash)
        except (ValueError, TypeError):
            logger.warning("Stored password hash could not be parsed")
            return False

    def is_valid_hash(self, value: str) -> bool:
        """Return True when ``value`` is a well-formed hash of a configured scheme."""

        if not isinstance(value, str) or not value:
            return False
        scheme = self._context.identify(value, required=False)
        if scheme is None:
            return False
        try:
            self._context.handler(scheme).from_string(value)
        except (ValueError, TypeError):
            return False
        return True


def build_password_hasher(settings: Settings) -> PasswordHasher:
    return PasswordHasher(settings.password_schemes or DEFAULT_SCHEMES)
