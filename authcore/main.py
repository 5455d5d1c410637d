"""Flask application factory and entry point."""

import logging

from flask import Flask, jsonify
from flask_cors import CORS

from .api import auth_bp
from .auth.hasher import PasswordHasher
from .auth.service import EXTENSION_KEY, AuthService
from .auth.token import TokenCodec
from . import config
from .config import AuthConfig, Settings
from .db import SQLiteIdentityStore, init_db
from .exceptions import (
    AuthCoreError,
    AuthenticationError,
    ConfigurationError,
    DuplicateEmailError,
    InvalidCredentialsError,
    ResourceNotFound,
    TokenError,
    ValidationError,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# Error handlers

def _error_response(error: AuthCoreError, status: int, headers: dict | None = None):
    response = {
        "error": {
            "type": error.__class__.__name__,
            "message": error.message
        }
    }
    if error.details:
        response["error"]["details"] = error.details
    return jsonify(response), status, headers or {}


def handle_validation_error(error):
    """Handle ValidationError exceptions."""
    return _error_response(error, 400)


def handle_duplicate_email(error):
    """Handle DuplicateEmailError exceptions."""
    return _error_response(error, 409)


def handle_invalid_credentials(error):
    """Handle InvalidCredentialsError exceptions."""
    return _error_response(error, 401)


def handle_unauthorized(error):
    """Handle AuthenticationError and TokenError exceptions.

    Details are dropped so gate rejections never reveal which check failed.
    """
    response = {
        "error": {
            "type": "AuthenticationError",
            "message": error.message
        }
    }
    return jsonify(response), 401, {"WWW-Authenticate": "Bearer"}


def handle_not_found(error):
    """Handle ResourceNotFound exceptions."""
    return _error_response(error, 404)


def handle_authcore_error(error):
    """Handle generic AuthCoreError exceptions (storage, hashing)."""
    logger.error(f"{error.__class__.__name__}: {error.message}")
    return jsonify({
        "error": {
            "type": error.__class__.__name__,
            "message": "An internal error occurred"
        }
    }), 500


def handle_internal_error(error):
    """Handle internal server errors."""
    logger.error(f"Internal error: {error}")
    return jsonify({
        "error": {
            "type": "InternalServerError",
            "message": "An internal error occurred"
        }
    }), 500


def health():
    """Health check endpoint."""
    return jsonify({"status": "ok"})


def create_app(settings: Settings | None = None, store=None) -> Flask:
    """
    Build the Flask application.

    Args:
        settings: Application settings (defaults to authcore.config.settings)
        store: IdentityStore to use (defaults to SQLiteIdentityStore on
            settings.database_path, initialized on startup)

    Raises:
        ConfigurationError: If the signing secret is the shipped placeholder
            or another auth setting is out of range
    """
    if settings is None:
        settings = config.settings

    auth_config = AuthConfig.from_settings(settings)

    if store is None:
        init_db(settings.database_path)
        logger.info("Database initialized successfully")
        store = SQLiteIdentityStore(settings.database_path)

    service = AuthService(
        store,
        PasswordHasher(auth_config),
        TokenCodec(auth_config),
    )

    app = Flask(__name__)
    app.extensions[EXTENSION_KEY] = service

    # CORS configuration
    CORS(app, origins=settings.cors_origins, supports_credentials=True)

    app.register_error_handler(ValidationError, handle_validation_error)
    app.register_error_handler(DuplicateEmailError, handle_duplicate_email)
    app.register_error_handler(InvalidCredentialsError, handle_invalid_credentials)
    app.register_error_handler(AuthenticationError, handle_unauthorized)
    app.register_error_handler(TokenError, handle_unauthorized)
    app.register_error_handler(ResourceNotFound, handle_not_found)
    app.register_error_handler(AuthCoreError, handle_authcore_error)
    app.register_error_handler(500, handle_internal_error)

    app.add_url_rule("/health", view_func=health)
    app.register_blueprint(auth_bp, url_prefix=settings.api_prefix)

    return app


def run() -> None:
    """Start the development server."""
    settings = config.settings

    try:
        app = create_app(settings)
    except ConfigurationError as e:
        logger.critical(f"Failed to load config: {e.message}")
        raise SystemExit(1) from e

    logger.info(f"Server running on port {settings.server_port}")
    app.run(host=settings.server_host, port=settings.server_port)


if __name__ == "__main__":
    run()
