"""
Tests for middleware modules
"""

import json
import logging

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from contenthub.middleware.logging import (
    RequestIdFilter,
    StructuredFormatter,
    StructuredLoggingMiddleware,
    get_request_id,
)


def build_app() -> FastAPI:
    app = FastAPI()

    @app.get("/echo")
    async def echo():
        return {"request_id": get_request_id()}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    app.add_middleware(StructuredLoggingMiddleware)
    return app


class TestStructuredLoggingMiddleware:
    """Test request ID propagation and access logging"""

    def test_generates_request_id(self):
        client = TestClient(build_app())
        response = client.get("/echo")

        request_id = response.headers["X-Request-ID"]
        assert request_id
        assert response.json()["request_id"] == request_id

    def test_keeps_incoming_request_id(self):
        client = TestClient(build_app())
        response = client.get("/echo", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"
        assert response.json()["request_id"] == "abc-123"

    def test_request_id_is_reset_after_request(self):
        client = TestClient(build_app())
        client.get("/echo")
        assert get_request_id() == ""

    def test_access_log_line(self, caplog):
        client = TestClient(build_app())

        with caplog.at_level(logging.INFO, logger="contenthub.access"):
            client.get("/echo", headers={"X-Forwarded-For": "203.0.113.5, 10.0.0.1"})
            client.get("/missing")

        records = [record for record in caplog.records if record.name == "contenthub.access"]
        assert [record.status_code for record in records] == [200, 404]
        assert records[0].client_ip == "203.0.113.5"
        assert records[1].levelno == logging.WARNING

    def test_access_log_includes_user_id(self, caplog):
        app = build_app()

        @app.get("/whoami")
        async def whoami(request: Request):
            request.state.user_id = 42
            return {}

        with caplog.at_level(logging.INFO, logger="contenthub.access"):
            TestClient(app).get("/whoami")

        records = [record for record in caplog.records if record.name == "contenthub.access"]
        assert records[0].user_id == 42

    def test_health_checks_are_not_logged(self, caplog):
        client = TestClient(build_app())

        with caplog.at_level(logging.INFO, logger="contenthub.access"):
            client.get("/health")

        assert not [record for record in caplog.records if record.name == "contenthub.access"]


class TestStructuredFormatter:
    def test_formats_json_with_extras(self):
        record = logging.LogRecord("contenthub.test", logging.INFO, __file__, 1, "saved %s", ("class",), None)
        record.status_code = 201
        RequestIdFilter().filter(record)

        payload = json.loads(StructuredFormatter().format(record))

        assert payload["message"] == "saved class"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "contenthub.test"
        assert payload["status_code"] == 201
        assert payload["request_id"] == ""
        assert "duration_ms" not in payload
