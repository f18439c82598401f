"""Smoke tests for health and app wiring (middleware, error shape)."""

from httpx import AsyncClient

from userauth.middleware.request_id import resolve_request_id


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data.get("status") == "ok"
    assert data.get("version")


async def test_request_id_is_generated_and_echoed(client: AsyncClient) -> None:
    generated = await client.get("/api/v1/health")
    assert len(generated.headers["x-request-id"]) == 32

    echoed = await client.get("/api/v1/health", headers={"X-Request-ID": "trace-abc_123"})
    assert echoed.headers["x-request-id"] == "trace-abc_123"


async def test_security_headers_present(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health")
    assert response.headers["cache-control"] == "no-store"
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"


async def test_unknown_route_returns_json_404(client: AsyncClient) -> None:
    response = await client.get("/api/v1/nope")
    assert response.status_code == 404
    assert response.json()["error"] == "HTTP_ERROR"


def test_resolve_request_id_rejects_unsafe_values() -> None:
    assert resolve_request_id("abc-123") == "abc-123"
    for raw in (None, "", "has space", "x" * 65, "line\nbreak"):
        replaced = resolve_request_id(raw)
        assert replaced != raw
        assert len(replaced) == 32
