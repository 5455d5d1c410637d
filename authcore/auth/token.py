"""JWT token issuance and verification.

Tokens are standard three-part JWTs (header.claims.signature) signed with a
symmetric HMAC key. Claims:

    user_id: ID of the authenticated user
    email:   email of the authenticated user
    exp:     expiry as Unix epoch seconds

The algorithm declared in the token header must equal the configured one.
That check runs before any signature work, so "none" and algorithm-swap
tokens are rejected outright.
"""

import logging
import time
from collections.abc import Callable
from datetime import timedelta

import jwt

from ..config import AuthConfig
from ..exceptions import TokenError, TokenErrorReason
from .schemas import TokenClaims

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ("user_id", "email")


class TokenCodec:
    """Issues and verifies signed, time-bounded bearer tokens."""

    def __init__(self, config: AuthConfig, clock: Callable[[], float] = time.time):
        """
        Args:
            config: Immutable auth configuration (secret, algorithm, TTL)
            clock: Source of the current Unix time, injectable for tests
        """
        self._secret = config.jwt_secret_key
        self._algorithm = config.jwt_algorithm
        self._ttl = config.token_ttl
        self._clock = clock

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, user_id: str, email: str, ttl: timedelta | None = None) -> str:
        """
        Create a signed token for a user.

        Args:
            user_id: User ID to embed
            email: User email to embed
            ttl: Lifetime of the token (defaults to the configured TTL)

        Returns:
            Encoded JWT string

        Raises:
            TokenError: If user_id or email is empty
        """
        if not user_id or not email:
            raise TokenError(
                TokenErrorReason.MISSING_CLAIMS,
                "Cannot issue a token without user_id and email"
            )

        lifetime = self._ttl if ttl is None else ttl
        payload = {
            "user_id": user_id,
            "email": email,
            "exp": int(self._clock() + lifetime.total_seconds()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def parse_and_verify(self, token: str) -> TokenClaims:
        """
        Decode a token and verify its algorithm, signature, expiry and claims.

        Returns:
            TokenClaims with non-empty user_id and email

        Raises:
            TokenError: With the reason the token was rejected
        """
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as e:
            raise TokenError(TokenErrorReason.MALFORMED, f"Malformed token: {e}") from e

        declared = header.get("alg")
        if declared != self._algorithm:
            raise TokenError(
                TokenErrorReason.WRONG_ALGORITHM,
                f"Token algorithm {declared!r} does not match {self._algorithm!r}"
            )

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp"], "verify_exp": False},
            )
        except jwt.InvalidSignatureError as e:
            raise TokenError(TokenErrorReason.INVALID_SIGNATURE, "Token signature mismatch") from e
        except jwt.InvalidAlgorithmError as e:
            raise TokenError(TokenErrorReason.WRONG_ALGORITHM, str(e)) from e
        except jwt.MissingRequiredClaimError as e:
            raise TokenError(TokenErrorReason.MISSING_CLAIMS, str(e)) from e
        except jwt.InvalidTokenError as e:
            raise TokenError(TokenErrorReason.MALFORMED, f"Malformed token: {e}") from e

        expires_at = payload["exp"]
        if not isinstance(expires_at, int) or isinstance(expires_at, bool):
            raise TokenError(TokenErrorReason.MALFORMED, "Expiry claim must be an integer")
        # exp is checked against our own clock, not PyJWT's
        if expires_at <= self._clock():
            raise TokenError(TokenErrorReason.EXPIRED, "Token has expired")

        for claim in REQUIRED_CLAIMS:
            value = payload.get(claim)
            if not isinstance(value, str) or not value:
                raise TokenError(
                    TokenErrorReason.MISSING_CLAIMS,
                    f"Token claim {claim!r} is missing or empty"
                )

        return TokenClaims(
            user_id=payload["user_id"],
            email=payload["email"],
            expires_at=expires_at,
        )
