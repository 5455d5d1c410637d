"""Custom exceptions for authcore.

Every error carries a human-readable message and an optional details dict.
The Flask error handlers in main.py turn them into JSON responses:

    {"error": {"type": "<class name>", "message": "...", "details": {...}}}
"""

from enum import Enum


class AuthCoreError(Exception):
    """Base exception for all authcore errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(AuthCoreError):
    """Fatal misconfiguration detected at startup."""


class ValidationError(AuthCoreError):
    """Caller input is malformed (raised by the transport layer)."""


class DuplicateEmailError(AuthCoreError):
    """Registration conflict: the email is already taken."""


class InvalidCredentialsError(AuthCoreError):
    """Login failed.

    Deliberately generic: raised both for unknown emails and wrong passwords.
    """


class AuthenticationError(AuthCoreError):
    """Request rejected by the bearer token gate (HTTP 401)."""


class StorageError(AuthCoreError):
    """Identity store failure. Propagated unchanged by the auth service."""


class ResourceNotFound(StorageError):
    """Lookup miss in the identity store."""


class HashingError(AuthCoreError):
    """Password hashing primitive rejected its input."""


class TokenErrorReason(str, Enum):
    """Why a token failed to parse or verify."""

    MALFORMED = "malformed"
    INVALID_SIGNATURE = "invalid_signature"
    WRONG_ALGORITHM = "wrong_algorithm"
    EXPIRED = "expired"
    MISSING_CLAIMS = "missing_claims"


class TokenError(AuthCoreError):
    """Token issuance or verification failure."""

    def __init__(self, reason: TokenErrorReason, message: str | None = None):
        super().__init__(message or f"token rejected: {reason.value}", {"reason": reason.value})
        self.reason = reason
