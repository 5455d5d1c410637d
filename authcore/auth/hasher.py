"""Password hashing and verification.

Uses bcrypt with a per-hash salt and a configurable cost. The hash string is
self-contained ($2b$<cost>$<salt><digest>), so verification needs nothing
but the stored hash and the candidate password.
"""

import logging

import bcrypt

from ..config import AuthConfig
from ..exceptions import HashingError
from .schemas import MAX_PASSWORD_BYTES

logger = logging.getLogger(__name__)


class PasswordHasher:
    """bcrypt hasher with a fixed work factor taken from AuthConfig."""

    def __init__(self, config: AuthConfig):
        self._rounds = config.bcrypt_work_factor

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, password: str) -> str:
        """
        Hash a password with a fresh salt.

        Args:
            password: Plaintext password

        Returns:
            bcrypt hash string (60 characters)

        Raises:
            HashingError: If the password exceeds bcrypt's 72-byte limit or
                bcrypt rejects it
        """
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise HashingError(
                "Password exceeds bcrypt input limit",
                {"max_bytes": MAX_PASSWORD_BYTES}
            )

        try:
            hashed = bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self._rounds))
        except ValueError as e:
            raise HashingError(f"Failed to hash password: {e}") from e

        return hashed.decode("ascii")

    def verify(self, password_hash: str, password: str) -> bool:
        """
        Check a password against a stored hash in constant time.

        Returns:
            True on match, False on mismatch

        Raises:
            HashingError: If password_hash is not a valid bcrypt hash
        """
        try:
            hashed = password_hash.encode("ascii")
        except (AttributeError, UnicodeEncodeError) as e:
            raise HashingError("Malformed password hash") from e

        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            # Never hashed by us, so it cannot match
            return False

        try:
            return bcrypt.checkpw(encoded, hashed)
        except ValueError as e:
            logger.error("Stored password hash is malformed")
            raise HashingError("Malformed password hash") from e
