"""Authentication service: registration, login and user lookup.

AuthService orchestrates the identity store, the password hasher and the
token codec. It holds no mutable state beyond its collaborators, so one
instance serves every request of an app.

Login failures are deliberately uniform: an unknown email, a store failure
and a wrong password all raise the same InvalidCredentialsError, and the
unknown-email path still pays for one bcrypt comparison.
"""

import logging
from functools import cached_property

from flask import current_app

from ..exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    ResourceNotFound,
    StorageError,
)
from .hasher import PasswordHasher
from .schemas import LoginInput, RegisterInput, User
from .token import TokenCodec

logger = logging.getLogger(__name__)

EXTENSION_KEY = "authcore"

INVALID_CREDENTIALS = "invalid credentials"


class AuthService:
    """Register/Login/Lookup operations over an identity store."""

    def __init__(self, store, hasher: PasswordHasher, codec: TokenCodec):
        """
        Args:
            store: IdentityStore implementation
            hasher: Password hasher configured with the bcrypt work factor
            codec: Token codec configured with the signing secret and TTL
        """
        self._store = store
        self._hasher = hasher
        self._codec = codec

    @property
    def codec(self) -> TokenCodec:
        return self._codec

    @cached_property
    def _decoy_hash(self) -> str:
        return self._hasher.hash("authcore-timing-decoy")

    def register(self, data: RegisterInput) -> User:
        """
        Create a new user.

        Args:
            data: Validated registration input

        Returns:
            The stored User (id and timestamps assigned by the store)

        Raises:
            DuplicateEmailError: If the email is already registered
            StorageError: If the duplicate check or insert fails for any
                reason other than "not found"
            HashingError: If the password cannot be hashed
        """
        try:
            self._store.find_by_email(data.email)
        except ResourceNotFound:
            pass
        else:
            logger.warning("Registration rejected: email already registered")
            raise DuplicateEmailError("email already registered", {"email": data.email})

        user = User(
            email=data.email,
            password_hash=self._hasher.hash(data.password),
            full_name=data.full_name,
        )

        # The store's unique constraint covers the check-then-create race
        created = self._store.create(user)
        logger.info(f"Registered user {created.id}")
        return created

    def login(self, data: LoginInput) -> str:
        """
        Verify credentials and issue a bearer token.

        Returns:
            Signed token string

        Raises:
            InvalidCredentialsError: On unknown email, lookup failure or
                wrong password (indistinguishable to the caller)
        """
        try:
            user = self._store.find_by_email(data.email)
        except StorageError as e:
            logger.warning(f"Failed login attempt ({type(e).__name__})")
            self._hasher.verify(self._decoy_hash, data.password)
            raise InvalidCredentialsError(INVALID_CREDENTIALS) from None

        if not self._hasher.verify(user.password_hash, data.password):
            logger.warning(f"Failed login attempt for user {user.id}")
            raise InvalidCredentialsError(INVALID_CREDENTIALS)

        token = self._codec.issue(user.id, user.email)
        logger.info(f"Successful login for user {user.id}")
        return token

    def get_user_by_id(self, user_id: str) -> User:
        """
        Look up a user by ID.

        Raises:
            ResourceNotFound: If no such user exists
            StorageError: On any other store failure
        """
        return self._store.find_by_id(user_id)


def get_auth_service() -> AuthService:
    """Return the AuthService installed on the current Flask app."""
    return current_app.extensions[EXTENSION_KEY]
