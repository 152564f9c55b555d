# =============================================================================
# tests/test_cors.py - CORS Gate Tests
# =============================================================================
# Covers the three gate outcomes (no origin / allowed / denied) for simple
# and preflight requests, and the Vary header invariant.
# =============================================================================

import asyncio

import pytest
from fastapi.testclient import TestClient

from app.cors import CorsDecision, CorsPolicy
from app.main import create_app

ALLOWED = "https://app.example.com"
OTHER = "https://evil.example.com"


@pytest.fixture
def client(make_client):
    return make_client(FRONTEND_ORIGIN=f"{ALLOWED}/, http://localhost:5173", BASE_PATH="/api")


def _vary_tokens(response) -> list[str]:
    return [token.strip().lower() for token in response.headers.get("vary", "").split(",") if token.strip()]


# =============================================================================
# CorsPolicy
# =============================================================================

class TestCorsPolicy:
    """Pure decision function."""

    def setup_method(self):
        self.policy = CorsPolicy(allowed_origins=frozenset({ALLOWED}))

    def test_no_origin(self):
        assert self.policy.evaluate(None) is CorsDecision.NO_ORIGIN

    def test_empty_origin_counts_as_no_origin(self):
        assert self.policy.evaluate("") is CorsDecision.NO_ORIGIN

    def test_allowed(self):
        assert self.policy.evaluate(ALLOWED) is CorsDecision.ORIGIN_ALLOWED

    def test_allowed_with_trailing_slash(self):
        assert self.policy.evaluate(f"{ALLOWED}/") is CorsDecision.ORIGIN_ALLOWED

    def test_denied(self):
        assert self.policy.evaluate(OTHER) is CorsDecision.ORIGIN_DENIED

    def test_no_subdomain_or_scheme_matching(self):
        assert self.policy.evaluate("https://sub.app.example.com") is CorsDecision.ORIGIN_DENIED
        assert self.policy.evaluate("http://app.example.com") is CorsDecision.ORIGIN_DENIED

    def test_empty_allowlist_still_allows_non_browser_clients(self):
        policy = CorsPolicy(allowed_origins=frozenset())
        assert policy.evaluate(None) is CorsDecision.NO_ORIGIN
        assert policy.evaluate(ALLOWED) is CorsDecision.ORIGIN_DENIED

    def test_defaults(self):
        assert self.policy.allow_methods == ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")
        assert self.policy.allow_headers == ("Content-Type", "Authorization", "Accept")
        assert self.policy.allow_credentials is True


# =============================================================================
# Simple requests
# =============================================================================

class TestSimpleRequests:

    def test_no_origin_is_allowed_without_cors_headers(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert "access-control-allow-origin" not in response.headers
        assert _vary_tokens(response) == ["origin"]

    def test_empty_origin_header_is_treated_as_non_browser(self, client):
        response = client.get("/", headers={"Origin": ""})

        assert response.status_code == 200
        assert "access-control-allow-origin" not in response.headers
        assert _vary_tokens(response) == ["origin"]

    def test_allowed_origin_is_echoed(self, client):
        response = client.get("/", headers={"Origin": ALLOWED})

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == ALLOWED
        assert response.headers["access-control-allow-credentials"] == "true"
        assert _vary_tokens(response) == ["origin"]

    def test_second_configured_origin(self, client):
        response = client.get("/", headers={"Origin": "http://localhost:5173"})
        assert response.headers["access-control-allow-origin"] == "http://localhost:5173"

    def test_origin_header_with_trailing_slash_is_normalized(self, client):
        response = client.get("/", headers={"Origin": f"{ALLOWED}/"})

        assert response.status_code == 200
        assert "access-control-allow-origin" in response.headers

    def test_denied_origin_is_rejected(self, client):
        response = client.get("/", headers={"Origin": OTHER})

        assert response.status_code == 403
        assert response.json()["code"] == "CORS_ORIGIN_DENIED"
        assert "access-control-allow-origin" not in response.headers
        assert _vary_tokens(response) == ["origin"]

    def test_denied_origin_never_reaches_routes(self, client, auth_headers, known_user):
        response = client.get("/api/user/current-user", headers={"Origin": OTHER, **auth_headers})

        assert response.status_code == 403
        known_user.assert_not_called()

    def test_vary_on_not_found(self, client):
        response = client.get("/nope", headers={"Origin": ALLOWED})

        assert response.status_code == 404
        assert _vary_tokens(response) == ["origin"]

    def test_empty_allowlist_rejects_browsers_but_not_tools(self, make_client):
        client = make_client(FRONTEND_ORIGIN="")

        assert client.get("/", headers={"Origin": ALLOWED}).status_code == 403
        assert client.get("/").status_code == 200


# =============================================================================
# Preflight requests
# =============================================================================

class TestPreflight:

    def _preflight(self, client, path, origin, method="POST", headers="Content-Type, Authorization"):
        return client.options(
            path,
            headers={
                "Origin": origin,
                "Access-Control-Request-Method": method,
                "Access-Control-Request-Headers": headers,
            },
        )

    def test_allowed_preflight(self, client):
        response = self._preflight(client, "/api/transaction/create", ALLOWED)

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == ALLOWED
        assert response.headers["access-control-allow-credentials"] == "true"
        methods = {m.strip() for m in response.headers["access-control-allow-methods"].split(",")}
        assert methods == {"GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"}
        assert _vary_tokens(response) == ["origin"]

    @pytest.mark.parametrize("path", ["/", "/api/auth/login", "/api/report/all", "/not/a/route"])
    def test_preflight_on_every_path(self, client, path):
        assert self._preflight(client, path, ALLOWED).status_code == 200
        assert self._preflight(client, path, OTHER).status_code == 403

    def test_denied_preflight_has_no_allow_origin(self, client):
        response = self._preflight(client, "/api/auth/login", OTHER)

        assert response.status_code == 403
        assert "access-control-allow-origin" not in response.headers
        assert _vary_tokens(response) == ["origin"]

    def test_disallowed_header_is_refused(self, client):
        response = self._preflight(client, "/api/auth/login", ALLOWED, headers="X-Custom")
        assert response.status_code == 400


# =============================================================================
# Error responses
# =============================================================================

class TestErrorResponses:
    """CORS headers survive server errors and timeouts."""

    @pytest.fixture
    def failing_client(self, make_settings):
        app = create_app(make_settings(FRONTEND_ORIGIN=ALLOWED, REQUEST_TIMEOUT_SECONDS=0.05))

        @app.get("/boom")
        async def boom():
            raise RuntimeError("kaboom")

        @app.get("/slow")
        async def slow():
            await asyncio.sleep(0.5)
            return {"ok": True}

        return TestClient(app, raise_server_exceptions=False)

    def test_unexpected_error_keeps_cors_headers(self, failing_client):
        response = failing_client.get("/boom", headers={"Origin": ALLOWED})

        assert response.status_code == 500
        assert response.json()["code"] == "INTERNAL_ERROR"
        assert response.headers["access-control-allow-origin"] == ALLOWED
        assert _vary_tokens(response) == ["origin"]

    def test_unexpected_error_without_origin_sets_vary(self, failing_client):
        response = failing_client.get("/boom")

        assert response.status_code == 500
        assert "access-control-allow-origin" not in response.headers
        assert _vary_tokens(response) == ["origin"]

    def test_timeout_keeps_cors_headers(self, failing_client):
        response = failing_client.get("/slow", headers={"Origin": ALLOWED})

        assert response.status_code == 504
        assert response.headers["access-control-allow-origin"] == ALLOWED
        assert _vary_tokens(response) == ["origin"]
