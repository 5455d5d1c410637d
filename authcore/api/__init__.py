"""HTTP transport for authcore: blueprints and request validation."""

from .auth import auth_bp

__all__ = ["auth_bp"]
