"""Tests for request-id correlation."""

import uuid

import pytest
import structlog
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from tracklist.middleware import REQUEST_ID_HEADER, RequestIDMiddleware


def context_app() -> FastAPI:
    """App whose only route reports the structlog context it runs in."""
    app = FastAPI()
    app.add_middleware(RequestIDMiddleware)

    @app.get("/context")
    async def context() -> dict[str, str]:
        return structlog.contextvars.get_contextvars()

    return app


def is_uuid4(value: str) -> bool:
    return uuid.UUID(value).version == 4


@pytest.mark.asyncio
async def test_valid_request_id_is_echoed(client: AsyncClient) -> None:
    resp = await client.get("/health", headers={REQUEST_ID_HEADER: "checkout-42.retry_1"})

    assert resp.headers[REQUEST_ID_HEADER] == "checkout-42.retry_1"


@pytest.mark.asyncio
async def test_missing_request_id_is_generated(client: AsyncClient) -> None:
    resp = await client.get("/health")

    assert is_uuid4(resp.headers[REQUEST_ID_HEADER])


@pytest.mark.asyncio
@pytest.mark.parametrize("incoming", ["x" * 300, "id with spaces", "<script>", ""])
async def test_unsafe_request_id_is_replaced(client: AsyncClient, incoming: str) -> None:
    resp = await client.get("/health", headers={REQUEST_ID_HEADER: incoming})

    echoed = resp.headers[REQUEST_ID_HEADER]
    assert echoed != incoming
    assert is_uuid4(echoed)


@pytest.mark.asyncio
async def test_request_fields_are_bound_to_log_context() -> None:
    transport = ASGITransport(app=context_app())
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        first = await http.get("/context", headers={REQUEST_ID_HEADER: "req-1"})
        second = await http.get("/context")

    assert first.json() == {"request_id": "req-1", "method": "GET", "path": "/context"}
    assert second.json()["request_id"] == second.headers[REQUEST_ID_HEADER]
    assert second.json()["request_id"] != "req-1"
