"""Tests for the bearer token gate.

Tests authenticate_request / @auth_required against a probe route that
echoes the identity placed on flask.g.
"""

import time
from datetime import timedelta

import jwt as pyjwt
import pytest
from flask import jsonify

from authcore.auth.decorators import (
    HEADER_REQUIRED,
    INVALID_HEADER_FORMAT,
    INVALID_TOKEN,
    INVALID_TOKEN_CLAIMS,
    auth_required,
    current_identity,
)
from authcore.main import create_app

from tests.conftest import TEST_SECRET

USER_ID = "550e8400-e29b-41d4-a716-446655440000"
EMAIL = "a@x.com"


@pytest.fixture
def gate_client(test_settings, memory_store):
    """Client for an app with a protected /whoami probe route."""
    app = create_app(test_settings, store=memory_store)
    app.config["TESTING"] = True

    @auth_required
    def whoami():
        identity = current_identity()
        return jsonify({"user_id": identity.user_id, "email": identity.email})

    app.add_url_rule("/whoami", view_func=whoami)

    with app.test_client() as client:
        yield client


def _assert_unauthorized(response, message):
    assert response.status_code == 401
    data = response.get_json()
    assert data["error"]["type"] == "AuthenticationError"
    assert data["error"]["message"] == message
    assert "details" not in data["error"]
    assert response.headers["WWW-Authenticate"] == "Bearer"


class TestHeaderChecks:
    """Tests for Authorization header extraction."""

    def test_missing_header(self, gate_client):
        """No header should be rejected as required."""
        _assert_unauthorized(gate_client.get("/whoami"), HEADER_REQUIRED)

    def test_empty_header(self, gate_client):
        """An empty header counts as absent."""
        response = gate_client.get("/whoami", headers={"Authorization": ""})
        _assert_unauthorized(response, HEADER_REQUIRED)

    @pytest.mark.parametrize(
        "header",
        [
            "Token abc",
            "bearer abc",
            "Bearer",
            "Bearer a b",
            "Bearerabc",
            "Basic dXNlcjpwYXNz",
        ],
    )
    def test_bad_header_format(self, gate_client, header):
        """Anything but exactly "Bearer <token>" is a format error."""
        response = gate_client.get("/whoami", headers={"Authorization": header})
        _assert_unauthorized(response, INVALID_HEADER_FORMAT)


class TestTokenChecks:
    """Tests for token verification at the gate."""

    def test_valid_token_sets_identity(self, gate_client, codec):
        """A valid token should reach the view with identity attached."""
        token = codec.issue(USER_ID, EMAIL)

        response = gate_client.get("/whoami", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.get_json() == {"user_id": USER_ID, "email": EMAIL}

    def test_garbage_token(self, gate_client):
        """Unparseable tokens should be rejected as invalid."""
        response = gate_client.get("/whoami", headers={"Authorization": "Bearer garbage"})
        _assert_unauthorized(response, INVALID_TOKEN)

    def test_empty_token(self, gate_client):
        """An empty token after the scheme is rejected."""
        response = gate_client.get("/whoami", headers={"Authorization": "Bearer "})

        assert response.status_code == 401
        assert response.get_json()["error"]["message"] in (INVALID_TOKEN, INVALID_HEADER_FORMAT)

    def test_expired_token(self, gate_client, codec):
        """A validly signed but expired token should be rejected."""
        token = codec.issue(USER_ID, EMAIL, ttl=timedelta(seconds=-5))

        response = gate_client.get("/whoami", headers={"Authorization": f"Bearer {token}"})
        _assert_unauthorized(response, INVALID_TOKEN)

    def test_foreign_secret_token(self, gate_client):
        """A token signed with another secret should be rejected."""
        token = pyjwt.encode(
            {"user_id": USER_ID, "email": EMAIL, "exp": int(time.time()) + 60},
            "another-secret-0123456789abcdef0123456789abcdef0123456789abcdef-xyz",
            algorithm="HS256",
        )
        response = gate_client.get("/whoami", headers={"Authorization": f"Bearer {token}"})
        _assert_unauthorized(response, INVALID_TOKEN)

    def test_wrong_algorithm_token(self, gate_client):
        """A token with a different algorithm should be rejected."""
        token = pyjwt.encode(
            {"user_id": USER_ID, "email": EMAIL, "exp": int(time.time()) + 60},
            TEST_SECRET,
            algorithm="HS384",
        )
        response = gate_client.get("/whoami", headers={"Authorization": f"Bearer {token}"})
        _assert_unauthorized(response, INVALID_TOKEN)

    def test_token_failures_share_one_message(self, gate_client, codec):
        """Expired and malformed tokens must be indistinguishable externally."""
        expired = codec.issue(USER_ID, EMAIL, ttl=timedelta(seconds=-5))

        first = gate_client.get("/whoami", headers={"Authorization": f"Bearer {expired}"})
        second = gate_client.get("/whoami", headers={"Authorization": "Bearer x.y.z"})

        assert first.get_json() == second.get_json()

    @pytest.mark.parametrize(
        "claims",
        [
            {"email": EMAIL},
            {"user_id": USER_ID},
            {"user_id": "", "email": EMAIL},
            {"user_id": USER_ID, "email": ""},
        ],
    )
    def test_missing_claims(self, gate_client, claims):
        """Properly signed tokens without identity get the claims message."""
        token = pyjwt.encode(
            {**claims, "exp": int(time.time()) + 60},
            TEST_SECRET,
            algorithm="HS256",
        )
        response = gate_client.get("/whoami", headers={"Authorization": f"Bearer {token}"})
        _assert_unauthorized(response, INVALID_TOKEN_CLAIMS)


class TestCurrentIdentity:
    """Tests for current_identity outside the gate."""

    def test_unauthenticated_request_has_no_identity(self, test_settings, memory_store):
        """current_identity should refuse when the gate did not run."""
        app = create_app(test_settings, store=memory_store)
        app.config["TESTING"] = True

        def open_view():
            current_identity()
            return jsonify({})

        app.add_url_rule("/open", view_func=open_view)

        response = app.test_client().get("/open")
        assert response.status_code == 401
        assert response.get_json()["error"]["message"] == "unauthorized"
