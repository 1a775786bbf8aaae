"""
Tests for the middleware stack.

Run with: pytest tests/test_middleware.py -v
"""

import logging
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from plan_directory.core.security import REQUEST_ID_HEADER
from plan_directory.middleware import BodySizeLimitMiddleware


class TestSecurityHeaders:

    def test_headers_on_api_response(self, client):
        response = client.get("/api/plans")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "SAMEORIGIN"
        assert response.headers["Referrer-Policy"] == "no-referrer"
        assert "max-age=" in response.headers["Strict-Transport-Security"]
        assert "default-src 'none'" in response.headers["Content-Security-Policy"]
        assert response.headers["Cache-Control"].startswith("no-store")

    def test_headers_on_error_response(self, client):
        response = client.get("/nowhere")
        assert response.status_code == 404
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    def test_probes_not_marked_uncacheable(self, client):
        assert "Cache-Control" not in client.get("/health").headers


class TestCors:

    def test_any_origin_allowed(self, client):
        response = client.get("/api/plans", headers={"Origin": "https://example.com"})
        assert response.headers["access-control-allow-origin"] == "*"

    def test_preflight(self, client):
        response = client.options(
            "/api/plans",
            headers={
                "Origin": "https://example.com",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert response.status_code == 200
        assert "POST" in response.headers["access-control-allow-methods"]


class TestRequestId:

    def test_generated_when_absent(self, client):
        request_id = client.get("/health").headers[REQUEST_ID_HEADER]
        assert len(request_id) == 32

    def test_inbound_id_echoed(self, client):
        response = client.get("/health", headers={REQUEST_ID_HEADER: "trace-123"})
        assert response.headers[REQUEST_ID_HEADER] == "trace-123"

    @pytest.mark.parametrize("bad", ["has space", "x" * 65, "semi;colon"])
    def test_malformed_inbound_id_replaced(self, client, bad):
        assert client.get("/health", headers={REQUEST_ID_HEADER: bad}).headers[REQUEST_ID_HEADER] != bad


class TestBodyLimit:

    @pytest.fixture
    def small_limit_client(self, app):
        app.user_middleware = [m for m in app.user_middleware if m.cls is not BodySizeLimitMiddleware]
        app.add_middleware(BodySizeLimitMiddleware, max_body_size=64)
        with TestClient(app) as client:
            yield client

    def test_oversized_body_rejected(self, small_limit_client, firestore_db):
        response = small_limit_client.post("/api/plans", json={"name": "x" * 100, "price": 1})
        assert response.status_code == 413
        assert response.json() == {"success": False, "error": "Request body too large"}
        assert firestore_db.store.get("plans", {}) == {}

    def test_body_within_limit(self, client):
        assert client.post("/api/plans", json={"name": "Pro", "price": 1}).status_code == 201

    def test_streamed_body_without_length_rejected(self, small_limit_client, firestore_db):
        def chunks():
            yield b'{"name": "'
            for _ in range(20):
                yield b"x" * 50
            yield b'", "price": 1}'

        response = small_limit_client.post(
            "/api/plans",
            content=chunks(),
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 413
        assert response.json() == {"success": False, "error": "Request body too large"}
        assert firestore_db.store.get("plans", {}) == {}

    def test_streamed_body_within_limit(self, small_limit_client):
        def chunks():
            yield b'{"name": "Pro", '
            yield b'"price": 1}'

        response = small_limit_client.post(
            "/api/plans",
            content=chunks(),
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 201


class TestRequestLogging:

    def test_access_line_carries_status_and_request_id(self, client):
        with patch("plan_directory.middleware.logging.logger") as mock_logger:
            client.get("/api/plans", headers={REQUEST_ID_HEADER: "trace-42"})

        level, fmt, method, path, status_code = mock_logger.log.call_args.args[:5]
        assert level == logging.INFO
        assert (method, path, status_code) == ("GET", "/api/plans", 200)
        assert mock_logger.log.call_args.args[-1] == "trace-42"

    def test_client_error_logged_as_warning(self, client):
        with patch("plan_directory.middleware.logging.logger") as mock_logger:
            client.get("/api/plans/missing")

        assert mock_logger.log.call_args.args[0] == logging.WARNING

    def test_probes_not_logged(self, client):
        with patch("plan_directory.middleware.logging.logger") as mock_logger:
            client.get("/health")
            client.get("/ready")

        mock_logger.log.assert_not_called()


class TestErrorSanitization:

    def test_unhandled_error_becomes_envelope(self, app):
        @app.get("/boom")
        def boom():
            raise RuntimeError("secret internals")

        with TestClient(app) as client:
            response = client.get("/boom")
        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Internal server error"}
        assert "secret" not in response.text

    def test_missing_client_is_internal_error(self, app):
        with TestClient(app) as client:
            app.state.firestore = None
            response = client.get("/api/plans")
        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Internal server error"}
