"""Authentication Pydantic schemas for API validation."""

from .auth import (
    MAX_PASSWORD_BYTES,
    LoginInput,
    RegisterInput,
    RequestIdentity,
    TokenClaims,
    TokenResponse,
    User,
    UserResponse,
)

__all__ = [
    "MAX_PASSWORD_BYTES",
    "LoginInput",
    "RegisterInput",
    "RequestIdentity",
    "TokenClaims",
    "TokenResponse",
    "User",
    "UserResponse",
]
