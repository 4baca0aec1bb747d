"""Health endpoint tests."""

import logging

import pytest
from httpx import AsyncClient

from reviewapp.api.middleware import REQUEST_ID_HEADER, RequestContextFilter
from reviewapp.logging import get_uvicorn_log_config


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test basic health check endpoint."""
    response = await client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_health_check_db(client: AsyncClient):
    """Test health check with database connectivity."""
    response = await client.get("/api/health/db")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["database"] == "connected"


@pytest.mark.asyncio
async def test_request_id_is_generated(client: AsyncClient):
    """Test every response carries a request ID."""
    response = await client.get("/api/health")
    assert response.headers[REQUEST_ID_HEADER]


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    """Test a caller-supplied request ID is passed back."""
    response = await client.get("/api/health", headers={REQUEST_ID_HEADER: "abc123"})
    assert response.headers[REQUEST_ID_HEADER] == "abc123"


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client: AsyncClient):
    """Test framework errors share the error shape."""
    response = await client.get("/api/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


@pytest.mark.asyncio
async def test_request_id_reaches_log_records(client: AsyncClient, caplog):
    """Test log lines written while handling a request carry its ID."""
    request_filter = RequestContextFilter()
    caplog.handler.addFilter(request_filter)
    try:
        with caplog.at_level(logging.INFO, logger="reviewapp.api.middleware"):
            await client.get("/api/health", headers={REQUEST_ID_HEADER: "trace-me"})
    finally:
        caplog.handler.removeFilter(request_filter)

    records = [r for r in caplog.records if "/api/health" in r.getMessage()]
    assert records
    assert records[-1].request_id == "trace-me"


def test_server_log_config_includes_request_id():
    """Test the uvicorn handlers tag records and print the request ID."""
    config = get_uvicorn_log_config()

    assert config["filters"]["request_context"]["()"] == "reviewapp.api.middleware.RequestContextFilter"
    for name in ("default", "access"):
        assert config["handlers"][name]["filters"] == ["request_context"]
        assert "[%(request_id)s]" in config["formatters"][name]["fmt"]
    assert config["root"]["handlers"] == ["default"]
