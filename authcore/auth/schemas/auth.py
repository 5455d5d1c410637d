"""Authentication Pydantic schemas.

Covers the transport inputs (registration and login), the stored user
record, its public representation, and the identity carried by tokens.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


# ============================================================================
# Transport Inputs
# ============================================================================


class RegisterInput(BaseModel):
    """Schema for user registration."""

    email: EmailStr = Field(..., description="Login email, unique across users")
    password: str = Field(
        ...,
        min_length=8,
        description="Plaintext password (8 characters minimum)"
    )
    full_name: str = Field(..., min_length=1, max_length=255, description="Display name")

    @field_validator("password")
    @classmethod
    def password_fits_hasher(cls, v: str) -> str:
        """Reject passwords the hasher would silently truncate."""
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v

    @field_validator("full_name")
    @classmethod
    def full_name_not_blank(cls, v: str) -> str:
        """Strip surrounding whitespace and require a non-blank name."""
        v = v.strip()
        if not v:
            raise ValueError("Full name must not be blank")
        return v


class LoginInput(BaseModel):
    """Schema for user login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


# ============================================================================
# User Record
# ============================================================================


class User(BaseModel):
    """
    User record as held by the identity store.

    password_hash is excluded from model_dump()/model_dump_json() and from
    repr(), so a User can never leak its hash through serialization or logs.
    """

    id: str = ""
    email: str
    password_hash: str = Field(..., exclude=True, repr=False)
    full_name: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_response(self) -> "UserResponse":
        """Public representation of this user."""
        return UserResponse(
            id=self.id,
            email=self.email,
            full_name=self.full_name,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class UserResponse(BaseModel):
    """Schema for user API responses (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ============================================================================
# Tokens
# ============================================================================


class TokenClaims(BaseModel):
    """Verified identity claims decoded from a bearer token."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    expires_at: int = Field(..., description="Expiry as Unix epoch seconds")


class TokenResponse(BaseModel):
    """Schema for the login response."""

    token: str


class RequestIdentity(BaseModel):
    """Identity attached to a request by the bearer token gate."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
