"""Configuration management using pydantic-settings."""

from datetime import timedelta
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

# Shipped placeholder; running with it is a fatal misconfiguration
DEFAULT_JWT_SECRET = "change-me-in-production-use-env-var"

JWTAlgorithm = Literal["HS256", "HS384", "HS512"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    database_path: str = "./data/authcore.db"
    api_prefix: str = "/api"
    cors_origins: list[str] = ["http://localhost:3000"]
    server_host: str = "127.0.0.1"
    server_port: int = 8080

    # JWT Configuration
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: JWTAlgorithm = "HS256"
    jwt_expiry_hours: int = 24

    # Bcrypt work factor (higher = more secure but slower)
    # 12 is a good balance for security and performance
    # For tests, use 4 for faster execution while maintaining functionality
    bcrypt_work_factor: int = 12

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False
    )


class AuthConfig(BaseModel):
    """
    Immutable authentication configuration.

    Built once at startup and passed explicitly to the hasher, the token
    codec and the auth service. Never read from module globals by the core.
    """

    model_config = ConfigDict(frozen=True)

    jwt_secret_key: str = Field(..., min_length=1, repr=False)
    jwt_algorithm: JWTAlgorithm = "HS256"
    token_ttl: timedelta = timedelta(hours=24)
    bcrypt_work_factor: int = Field(default=12, ge=4, le=31)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthConfig":
        """
        Build auth configuration from application settings.

        Raises:
            ConfigurationError: If the signing secret is still the shipped
                placeholder, or any value is out of range
        """
        if settings.jwt_secret_key == DEFAULT_JWT_SECRET:
            raise ConfigurationError(
                "jwt secret must be set in environment",
                {"env": "JWT_SECRET_KEY"}
            )
        if settings.jwt_expiry_hours <= 0:
            raise ConfigurationError(
                "jwt expiry must be a positive number of hours",
                {"jwt_expiry_hours": settings.jwt_expiry_hours}
            )
        if not 4 <= settings.bcrypt_work_factor <= 31:
            raise ConfigurationError(
                "bcrypt work factor must be between 4 and 31",
                {"bcrypt_work_factor": settings.bcrypt_work_factor}
            )

        return cls(
            jwt_secret_key=settings.jwt_secret_key,
            jwt_algorithm=settings.jwt_algorithm,
            token_ttl=timedelta(hours=settings.jwt_expiry_hours),
            bcrypt_work_factor=settings.bcrypt_work_factor,
        )


settings = Settings()
