"""Authentication decorators for protected endpoints.

This module provides the bearer token gate:
- @auth_required - Requires a valid JWT in the Authorization header
- current_identity() - Identity attached to the request by the gate

Every rejection is an AuthenticationError with one of four fixed messages.
Token failures (expired, bad signature, wrong algorithm, malformed) all
produce the same "invalid token" response; the internal reason is logged.
"""

import logging
from functools import wraps

from flask import g, request

from ..exceptions import AuthenticationError, TokenError, TokenErrorReason
from .schemas import RequestIdentity
from .service import get_auth_service
from .token import TokenCodec

logger = logging.getLogger(__name__)

HEADER_REQUIRED = "authorization header required"
INVALID_HEADER_FORMAT = "invalid authorization header format"
INVALID_TOKEN = "invalid token"
INVALID_TOKEN_CLAIMS = "invalid token claims"


# ============================================================================
# Shared Authentication Logic
# ============================================================================


def authenticate_request(codec: TokenCodec) -> RequestIdentity:
    """
    Validate the bearer token on the current request.

    Stores the verified identity in flask.g:
    - g.identity: RequestIdentity(user_id, email)

    Raises:
        AuthenticationError: If the header is missing or malformed, or the
            token fails verification
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header:
        logger.warning("Unauthenticated request to protected endpoint")
        raise AuthenticationError(HEADER_REQUIRED)

    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        logger.warning("Malformed Authorization header")
        raise AuthenticationError(INVALID_HEADER_FORMAT)

    try:
        claims = codec.parse_and_verify(parts[1])
    except TokenError as e:
        logger.warning(f"Rejected bearer token: {e.reason.value}")
        if e.reason is TokenErrorReason.MISSING_CLAIMS:
            raise AuthenticationError(INVALID_TOKEN_CLAIMS) from None
        raise AuthenticationError(INVALID_TOKEN) from None

    identity = RequestIdentity(user_id=claims.user_id, email=claims.email)
    g.identity = identity

    logger.debug(f"JWT authentication successful for user {identity.user_id}")
    return identity


def current_identity() -> RequestIdentity:
    """
    Identity attached to the current request by @auth_required.

    Raises:
        AuthenticationError: If the request was not authenticated
    """
    identity = g.get("identity")
    if identity is None:
        raise AuthenticationError("unauthorized")
    return identity


# ============================================================================
# Auth Required Decorator
# ============================================================================


def auth_required(f):
    """
    Decorator to require a bearer token for endpoint access.

    Uses the token codec of the AuthService installed on the app.

    Example:
    ```python
    @auth_required
    def protected_endpoint():
        identity = current_identity()
        ...
    ```
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        authenticate_request(get_auth_service().codec)
        return f(*args, **kwargs)

    return wrapper
