"""
Tests for security headers middleware.

Validates OWASP-recommended security headers are present in responses.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.middleware.security_headers import DEFAULT_CSP, DOCS_CSP, SecurityHeadersMiddleware


def build_client(**options) -> TestClient:
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware, **options)

    @app.get("/api/inventory")
    async def inventory():
        return {"success": True}

    return TestClient(app)


class TestSecurityHeaders:
    """Integration tests for security headers middleware."""

    @pytest.fixture
    def response(self):
        return build_client().get("/api/inventory")

    @pytest.mark.parametrize(
        "header,value",
        [
            ("X-Content-Type-Options", "nosniff"),
            ("X-Frame-Options", "DENY"),
            ("Referrer-Policy", "no-referrer"),
            ("Cross-Origin-Resource-Policy", "same-site"),
            ("X-Permitted-Cross-Domain-Policies", "none"),
            ("Strict-Transport-Security", "max-age=15552000; includeSubDomains"),
        ],
    )
    def test_static_header(self, response, header, value):
        assert response.headers[header] == value

    def test_api_csp_is_locked_down(self, response):
        csp = response.headers["Content-Security-Policy"]

        assert csp == DEFAULT_CSP
        assert "default-src 'none'" in csp
        assert "frame-ancestors 'none'" in csp

    def test_docs_get_relaxed_csp(self):
        """Swagger UI needs its CDN assets."""
        response = build_client().get("/docs")

        assert response.headers["Content-Security-Policy"] == DOCS_CSP

    def test_hsts_can_be_disabled(self):
        response = build_client(enable_hsts=False).get("/api/inventory")

        assert "Strict-Transport-Security" not in response.headers

    def test_custom_csp(self):
        response = build_client(csp_policy="default-src 'self'").get("/api/inventory")

        assert response.headers["Content-Security-Policy"] == "default-src 'self'"

    def test_headers_on_error_responses(self):
        response = build_client().get("/missing")

        assert response.status_code == 404
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_server_header_removed(self, response):
        assert "server" not in response.headers
