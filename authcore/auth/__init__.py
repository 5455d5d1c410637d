"""Authentication module for authcore.

This module provides authentication and authorization functionality:
- Schema validation for auth operations
- bcrypt password hashing and verification
- JWT token issuance and validation
- Registration, login and user lookup (AuthService)
- Bearer token gate for protected endpoints

Auth endpoints (under settings.api_prefix, /api by default):
- POST /api/register - Create an account
- POST /api/login - Authenticate and return JWT token
- GET /api/profile - Get current user info (bearer token required)
"""

from . import hasher, schemas, token

__all__ = ["hasher", "schemas", "token"]
