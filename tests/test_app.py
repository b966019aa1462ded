"""
Pressroom Backend: Application-Level Tests
==========================================

What we test:
    ✅ /health reports database connectivity and the storage backend
    ✅ Every response carries X-Request-ID; a plain client-sent id is echoed back,
       anything else is replaced
    ✅ Access log level follows status and duration; /health and query strings stay out
    ✅ Error bodies share one shape {error, message, request_id}
    ✅ Malformed path ids are 400, not 422
    ✅ Unsafe default configuration is reported
"""

import logging

import pytest

from pressroom.config import DEFAULT_JWT_SECRET, Settings
from pressroom.middleware.logging import level_for
from pressroom.middleware.request_id import accepted_client_id


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_ok(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["storage_backend"] == "local"


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generated_request_id(self, test_client):
        response = await test_client.get("/posts")
        assert response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_client_request_id_echoed_in_error_body(self, test_client):
        response = await test_client.get(
            "/posts/00000000-0000-0000-0000-000000000000",
            headers={"X-Request-ID": "trace-123"},
        )

        assert response.status_code == 404
        assert response.headers["X-Request-ID"] == "trace-123"
        body = response.json()
        assert body["request_id"] == "trace-123"
        assert set(body) >= {"error", "message", "request_id"}


class TestErrorShape:

    @pytest.mark.asyncio
    async def test_malformed_id_is_400(self, test_client):
        response = await test_client.get("/posts/not-a-uuid")

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"]["errors"][0]["field"] == "path.post_id"


class TestConfiguration:

    def test_default_secret_is_reported(self):
        settings = Settings(jwt_secret=DEFAULT_JWT_SECRET, smtp_username="", smtp_password="")
        with pytest.raises(ValueError) as exc_info:
            settings.validate_required_for_production()
        assert "JWT_SECRET" in str(exc_info.value)
        assert "SMTP_USERNAME" in str(exc_info.value)

    def test_invalid_storage_backend_rejected(self):
        with pytest.raises(ValueError):
            Settings(storage_backend="ftp")

    def test_cors_origins_list(self):
        settings = Settings(cors_origins="https://a.example, https://b.example")
        assert settings.cors_origins_list == ["https://a.example", "https://b.example"]


class TestRequestIdSanitising:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", ["has spaces", "x" * 65, "semi;colon"])
    async def test_unsafe_client_id_replaced(self, test_client, raw):
        response = await test_client.get("/posts", headers={"X-Request-ID": raw})

        echoed = response.headers["X-Request-ID"]
        assert echoed != raw
        assert len(echoed) == 8

    @pytest.mark.parametrize("raw", ["trace-123", "a.b_c-D", "x" * 64])
    def test_plain_token_accepted(self, raw):
        assert accepted_client_id(raw) == raw

    @pytest.mark.parametrize("raw", [None, "", "a\r\nb", "x" * 65])
    def test_unsafe_token_rejected(self, raw):
        assert accepted_client_id(raw) is None


class TestAccessLog:

    @pytest.mark.parametrize(
        "status, duration_ms, expected",
        [
            (200, 10, logging.INFO),
            (201, 9_000, logging.WARNING),
            (404, 10, logging.WARNING),
            (500, 10, logging.ERROR),
        ],
    )
    def test_level_for(self, status, duration_ms, expected):
        assert level_for(status, duration_ms, slow_request_ms=5_000) == expected

    @pytest.mark.asyncio
    async def test_request_logged_without_query_string(self, test_client, caplog):
        with caplog.at_level(logging.INFO, logger="pressroom.access"):
            await test_client.get("/posts?token=secret", headers={"X-Request-ID": "trace-log"})

        lines = [r.getMessage() for r in caplog.records if r.name == "pressroom.access"]
        assert any(line.startswith("GET /posts 200") and "[trace-log]" in line for line in lines)
        assert not any("secret" in line for line in lines)

    @pytest.mark.asyncio
    async def test_health_not_logged(self, test_client, caplog):
        with caplog.at_level(logging.INFO, logger="pressroom.access"):
            await test_client.get("/health")

        assert [r for r in caplog.records if r.name == "pressroom.access"] == []
