"""HTTP tests for the client context, error format and app-wide behavior."""

import json

import pytest
from fastapi.testclient import TestClient

from lemon.presentation.api.exception_handlers import ErrorNormalizer, NormalizedError
from lemon.presentation.api.responses import JSON_PREFIX, strip_json_prefix
from tests.integration.api.helpers import API, bearer, signup
from tests.shared.fixtures import TEST_USER_EMAIL

pytestmark = pytest.mark.integration


class OutOfCoffeeError(Exception):
    pass


class TestContext:
    def test_anonymous(self, client):
        response = client.get(f"{API}/context")

        assert response.status_code == 200
        assert response.json() == {
            "application_url": "https://lemon.example.com",
            "recaptcha_site_key": "site-key",
            "json_prefix_enabled": False,
            "user": None,
        }

    def test_with_user(self, client):
        token = signup(client, TEST_USER_EMAIL)["access_token"]

        response = client.get(f"{API}/context", headers=bearer(token))

        assert response.json()["user"]["email"] == TEST_USER_EMAIL


class TestJsonPrefix:
    def test_responses_are_prefixed(self, make_app):
        client = TestClient(make_app(json_prefix_enabled=True))

        response = client.get(f"{API}/context")

        assert response.status_code == 200
        assert response.text.startswith(JSON_PREFIX)
        assert json.loads(strip_json_prefix(response.content))["json_prefix_enabled"] is True

    def test_debug_openapi_document_is_not_prefixed(self, make_app):
        client = TestClient(make_app(json_prefix_enabled=True, api_debug=True))

        schema = client.get("/openapi.json")
        context = client.get(f"{API}/context")

        assert schema.json()["info"]["title"] == "Lemon API"
        assert context.text.startswith(JSON_PREFIX)

    def test_errors_are_prefixed(self, make_app):
        client = TestClient(make_app(json_prefix_enabled=True))

        response = client.get(f"{API}/users/me")

        assert response.status_code == 401
        assert response.text.startswith(JSON_PREFIX)
        assert json.loads(strip_json_prefix(response.content))["code"] == "UNAUTHORIZED"

    def test_login_failure_is_prefixed(self, make_app):
        client = TestClient(make_app(json_prefix_enabled=True))

        response = client.post(
            f"{API}/auth/login",
            json={"email": "nobody@example.com", "password": "whatever"},
        )

        assert response.status_code == 401
        assert response.text.startswith(JSON_PREFIX)


class TestErrorFormat:
    def test_unknown_route(self, client):
        response = client.get(f"{API}/nowhere")

        assert response.status_code == 404
        assert response.json() == {
            "version": 1,
            "status": 404,
            "error": "Not Found",
            "code": "ENTITY_NOT_FOUND",
            "detail": "Not Found",
            "errors": [],
        }

    def test_unexpected_error(self, app):
        @app.get("/explode")
        async def explode():
            raise RuntimeError("secret internals")

        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/explode")

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "INTERNAL_ERROR"
        assert "secret internals" not in body["detail"]

    def test_custom_error_normalizer(self, make_app):
        normalizer = ErrorNormalizer.default()
        normalizer.register(
            OutOfCoffeeError,
            lambda exc: NormalizedError(status=418, code="OUT_OF_COFFEE", detail="Brewing"),
        )
        app = make_app(error_normalizer=normalizer)

        @app.get("/coffee")
        async def coffee():
            raise OutOfCoffeeError

        response = TestClient(app).get("/coffee")

        assert response.status_code == 418
        assert response.json()["error"] == "I'm a Teapot"
        assert response.json()["code"] == "OUT_OF_COFFEE"


class TestCors:
    def test_preflight_when_configured(self, make_app):
        client = TestClient(make_app(cors_allowed_origins="https://app.example.com"))

        response = client.options(
            f"{API}/context",
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "GET",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "https://app.example.com"
        assert response.headers["access-control-allow-credentials"] == "true"

    def test_no_cors_headers_by_default(self, client):
        response = client.get(f"{API}/context", headers={"Origin": "https://app.example.com"})

        assert "access-control-allow-origin" not in response.headers


class TestInfoEndpoints:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        body = client.get("/").json()

        assert body["api_base"] == API
        assert body["endpoints"]["users"] == f"{API}/users"

    def test_docs_follow_debug_flag(self, make_app):
        assert TestClient(make_app(api_debug=False)).get("/openapi.json").status_code == 404
        assert TestClient(make_app(api_debug=True)).get("/openapi.json").status_code == 200
