# =============================================================================
# tests/test_auth.py - Authentication Tests
# =============================================================================
# This module contains tests for:
# - Access token verification (signature, expiry, audience, subject)
# - Identity lookup in the bearer-token gate
# - The auth route group (register / login / refresh)
#
# Supabase calls are mocked; no network access.
# =============================================================================

from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest

from app.auth.dependencies import decode_access_token
from app.exceptions import UnauthorizedException


# =============================================================================
# decode_access_token
# =============================================================================

class TestDecodeAccessToken:

    def test_valid_token(self, make_token, user_id):
        payload = decode_access_token(make_token())

        assert payload["sub"] == str(user_id)
        assert payload["email"] == "jane@example.com"

    def test_expired_token(self, make_token):
        with pytest.raises(UnauthorizedException) as exc_info:
            decode_access_token(make_token(expires_in=-10))
        assert exc_info.value.message == "Token has expired"

    def test_wrong_signature(self, make_token):
        with pytest.raises(UnauthorizedException):
            decode_access_token(make_token(secret="some-other-secret-value-123456"))

    def test_wrong_audience(self, make_token):
        with pytest.raises(UnauthorizedException):
            decode_access_token(make_token(audience="anon"))

    def test_missing_subject(self, make_token):
        with pytest.raises(UnauthorizedException) as exc_info:
            decode_access_token(make_token(sub=""))
        assert "missing user ID" in exc_info.value.message

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_malformed(self, token):
        with pytest.raises(UnauthorizedException):
            decode_access_token(token)

    def test_unknown_asymmetric_key(self, make_token):
        """ES256 tokens whose kid isn't in the JWKS are rejected."""
        with patch("app.auth.dependencies._fetch_jwks", return_value={"keys": []}), \
                patch("app.auth.dependencies.jwt.get_unverified_header", return_value={"alg": "ES256", "kid": "k1"}):
            with pytest.raises(UnauthorizedException):
                decode_access_token(make_token())


# =============================================================================
# Gate identity checks
# =============================================================================

class TestGateIdentity:

    @pytest.fixture
    def client(self, make_client):
        return make_client()

    def test_known_user(self, client, auth_headers, known_user, user_id):
        response = client.get("/user/current-user", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["id"] == str(user_id)
        assert response.json()["name"] == "Jane"

    def test_unknown_user_is_rejected(self, client, auth_headers):
        with patch("core.services.user_service.UserService.get_user_by_id", return_value=None):
            response = client.get("/user/current-user", headers=auth_headers)

        assert response.status_code == 401
        assert response.json()["detail"] == "User not found"

    def test_non_uuid_subject_is_rejected(self, client, make_token, known_user):
        token = make_token(sub="not-a-uuid")
        response = client.get("/user/current-user", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        known_user.assert_not_called()

    @pytest.mark.parametrize("sub", [12345, ["a"], {"id": "x"}])
    def test_non_string_subject_is_rejected(self, client, sub, known_user):
        with patch("app.auth.dependencies.decode_access_token", return_value={"sub": sub}):
            response = client.get("/user/current-user", headers={"Authorization": "Bearer signed-token"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token: malformed user ID"
        known_user.assert_not_called()

    def test_wrong_scheme_is_rejected(self, client, make_token, known_user):
        response = client.get("/user/current-user", headers={"Authorization": f"Basic {make_token()}"})
        assert response.status_code == 401


# =============================================================================
# Auth route group
# =============================================================================

def _auth_response(user_id, with_session=True):
    response = MagicMock()
    response.user.id = str(user_id)
    response.user.email = "jane@example.com"
    if with_session:
        response.session.access_token = "access-token"
        response.session.refresh_token = "refresh-token"
        response.session.expires_at = 1700000000
    else:
        response.session = None
    return response


class TestAuthRoutes:

    @pytest.fixture
    def client(self, make_client):
        return make_client(BASE_PATH="/api")

    @pytest.fixture
    def auth_client(self):
        with patch("app.auth.routes.SupabaseClient.create_auth_client") as factory:
            yield factory.return_value

    def test_login(self, client, auth_client, known_user, user_id):
        auth_client.auth.sign_in_with_password.return_value = _auth_response(user_id)

        response = client.post("/api/auth/login", json={"email": "jane@example.com", "password": "secret-pass"})

        assert response.status_code == 200
        body = response.json()
        assert body["access_token"] == "access-token"
        assert body["refresh_token"] == "refresh-token"
        assert body["token_type"] == "bearer"
        assert body["user"]["id"] == str(user_id)
        auth_client.auth.sign_in_with_password.assert_called_once_with(
            {"email": "jane@example.com", "password": "secret-pass"}
        )

    def test_login_without_session(self, client, auth_client, user_id):
        auth_client.auth.sign_in_with_password.return_value = _auth_response(user_id, with_session=False)

        response = client.post("/api/auth/login", json={"email": "jane@example.com", "password": "x"})

        assert response.status_code == 401

    def test_login_validation_error(self, client):
        response = client.post("/api/auth/login", json={"email": "jane@example.com"})

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert any(error["field"].endswith("password") for error in response.json()["errors"])

    def test_register(self, client, auth_client):
        new_id = uuid4()
        auth_client.auth.sign_up.return_value = _auth_response(new_id, with_session=False)

        with patch(
            "core.services.user_service.UserService.upsert_user",
            return_value={"id": str(new_id), "email": "new@example.com", "name": "New"},
        ) as upsert:
            response = client.post(
                "/api/auth/register",
                json={"name": "New", "email": "new@example.com", "password": "long-enough"},
            )

        assert response.status_code == 201
        assert response.json()["user"]["email"] == "new@example.com"
        upsert.assert_called_once_with(str(new_id), "new@example.com", "New")

    def test_register_rejected_by_provider(self, client, auth_client):
        auth_client.auth.sign_up.side_effect = RuntimeError("User already registered")

        response = client.post(
            "/api/auth/register",
            json={"name": "New", "email": "new@example.com", "password": "long-enough"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "BAD_REQUEST"

    def test_register_short_password(self, client):
        response = client.post(
            "/api/auth/register",
            json={"name": "New", "email": "new@example.com", "password": "short"},
        )
        assert response.status_code == 422

    def test_refresh_token(self, client, auth_client, known_user, user_id):
        auth_client.auth.refresh_session.return_value = _auth_response(user_id)

        response = client.post("/api/auth/refresh-token", json={"refresh_token": "refresh-token"})

        assert response.status_code == 200
        assert response.json()["access_token"] == "access-token"
        auth_client.auth.refresh_session.assert_called_once_with("refresh-token")

    def test_refresh_token_invalid(self, client, auth_client):
        auth_client.auth.refresh_session.side_effect = RuntimeError("Invalid Refresh Token")

        response = client.post("/api/auth/refresh-token", json={"refresh_token": "bad"})

        assert response.status_code == 401
