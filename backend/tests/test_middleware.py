"""
Tests for middleware components.

This module tests:
- RequestContextMiddleware (correlation id and client address)
- LoggingMiddleware (request/response logging)

Tests follow AAA (Arrange, Act, Assert) pattern.
"""

import uuid
from unittest.mock import patch

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from storefront.core.config import settings
from storefront.middleware.logging import LoggingMiddleware
from storefront.middleware.context import RequestContextMiddleware


def build_app(endpoint=None) -> FastAPI:
    """App with logging inside the context layer, the order used in main.py."""
    app = FastAPI()
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestContextMiddleware)

    @app.get("/api/inventory")
    async def inventory(request: Request):
        if endpoint is not None:
            return await endpoint(request)
        return {"request_id": request.state.request_id, "client_ip": request.state.client_ip}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/api/broken")
    async def broken():
        return JSONResponse(status_code=503, content={"success": False})

    return app


class TestRequestContextMiddleware:
    """Tests for the request context middleware."""

    def test_request_id_generated_when_missing(self):
        """
        Test that request ID is generated when not provided.

        Arrange: App with RequestContextMiddleware
        Act: Make request without X-Request-ID header
        Assert: Response has X-Request-ID header with valid UUID
        """
        # Arrange
        client = TestClient(build_app())

        # Act
        response = client.get("/api/inventory")

        # Assert
        assert response.status_code == 200
        request_id = response.headers["X-Request-ID"]
        try:
            uuid.UUID(request_id)
        except ValueError:
            pytest.fail("Request ID is not a valid UUID")
        assert response.json()["request_id"] == request_id

    def test_request_id_preserved_from_header(self):
        """
        Test that existing request ID is preserved.

        Arrange: App with RequestContextMiddleware
        Act: Make request with X-Request-ID header
        Assert: Same request ID is returned in response and state
        """
        # Arrange
        client = TestClient(build_app())

        # Act
        response = client.get("/api/inventory", headers={"X-Request-ID": "checkout-trace-1"})

        # Assert
        assert response.headers["X-Request-ID"] == "checkout-trace-1"
        assert response.json()["request_id"] == "checkout-trace-1"

    def test_request_id_different_per_request(self):
        client = TestClient(build_app())

        ids = {client.get("/api/inventory").headers["X-Request-ID"] for _ in range(3)}

        assert len(ids) == 3

    def test_malformed_request_id_replaced(self):
        client = TestClient(build_app())

        response = client.get("/api/inventory", headers={"X-Request-ID": "bad id with spaces"})

        assert response.headers["X-Request-ID"] != "bad id with spaces"
        uuid.UUID(response.headers["X-Request-ID"])

    def test_client_ip_from_forwarded_header(self, monkeypatch):
        monkeypatch.setattr(settings, "trusted_proxies", ["*"])
        client = TestClient(build_app())

        response = client.get("/api/inventory", headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})

        assert response.json()["client_ip"] == "203.0.113.7"

    def test_forwarded_header_ignored_from_untrusted_peer(self, monkeypatch):
        monkeypatch.setattr(settings, "trusted_proxies", ["10.0.0.1"])
        client = TestClient(build_app())

        response = client.get("/api/inventory", headers={"X-Forwarded-For": "203.0.113.7"})

        assert response.json()["client_ip"] == "testclient"

    def test_forwarded_header_trusted_from_listed_peer(self, monkeypatch):
        monkeypatch.setattr(settings, "trusted_proxies", ["testclient"])
        client = TestClient(build_app())

        response = client.get("/api/inventory", headers={"X-Forwarded-For": " 198.51.100.9 ,10.0.0.1"})

        assert response.json()["client_ip"] == "198.51.100.9"


class TestLoggingMiddleware:
    """Tests for request/response logging middleware."""

    def test_logs_start_and_completion(self):
        """
        Test that logging middleware logs request details.

        Arrange: App with both middleware, mock logger
        Act: Make request
        Assert: Start and completion logged with status, latency and request id
        """
        # Arrange
        client = TestClient(build_app())

        with patch("storefront.middleware.logging.logger") as mock_logger:
            # Act
            response = client.get("/api/inventory?page=2", headers={"X-Request-ID": "req-456"})

        # Assert
        assert response.status_code == 200
        messages = [call.args[0] for call in mock_logger.info.call_args_list]
        assert messages == ["Request started", "Request completed"]

        started = mock_logger.info.call_args_list[0].kwargs["extra"]
        assert started["path"] == "/api/inventory"
        assert started["query_params"] == "page=2"

        completed = mock_logger.info.call_args_list[1].kwargs["extra"]
        assert completed["status_code"] == 200
        assert completed["request_id"] == "req-456"
        assert completed["latency_ms"] >= 0

    def test_health_checks_not_logged(self):
        client = TestClient(build_app())

        with patch("storefront.middleware.logging.logger") as mock_logger:
            response = client.get("/health")

        assert response.status_code == 200
        mock_logger.info.assert_not_called()

    def test_logs_exceptions(self):
        """
        Test that logging middleware logs exceptions.

        Arrange: Endpoint that raises
        Act: Make request
        Assert: "Request failed" logged at ERROR with the exception type
        """
        # Arrange
        async def explode(request):
            raise ValueError("Test exception")

        client = TestClient(build_app(explode), raise_server_exceptions=False)

        with patch("storefront.middleware.logging.logger") as mock_logger:
            # Act
            response = client.get("/api/inventory")

        # Assert
        assert response.status_code == 500
        error_call = mock_logger.error.call_args_list[0]
        assert "Request failed" in error_call.args[0]
        assert error_call.kwargs["extra"]["exception_type"] == "ValueError"

    def test_server_errors_logged_as_warning(self, monkeypatch):
        monkeypatch.setattr(settings, "trusted_proxies", ["*"])
        client = TestClient(build_app())

        with patch("storefront.middleware.logging.logger") as mock_logger:
            response = client.get("/api/broken", headers={"X-Forwarded-For": "198.51.100.2"})

        assert response.status_code == 503
        completed = mock_logger.warning.call_args_list[0]
        assert completed.args[0] == "Request completed"
        assert completed.kwargs["extra"]["status_code"] == 503
        assert completed.kwargs["extra"]["client_ip"] == "198.51.100.2"
