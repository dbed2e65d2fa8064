import json

import httpx
import pytest

from clients.ors_client import OpenRouteServiceClient
from core.errors import AuthorizationError, ExternalServiceError, QuotaExceededError


def patch_transport(monkeypatch, handler):
    """Patch httpx.AsyncClient so every client uses a MockTransport."""
    orig = httpx.AsyncClient

    def patched_async_client(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return orig(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", patched_async_client)


def _client(**kwargs):
    return OpenRouteServiceClient(api_key="secret-key", base_url="https://ors.example", timeout=5.0, **kwargs)


def test_is_configured():
    assert _client().is_configured() is True
    assert OpenRouteServiceClient(api_key="  ").is_configured() is False


@pytest.mark.asyncio
async def test_directions_posts_lnglat_body(monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"routes": [{"summary": {"distance": 1.0, "duration": 2.0}}]})

    patch_transport(monkeypatch, handler)

    out = await _client().directions([(-122.4194, 37.7749), (-118.2437, 34.0522)], profile="driving-hgv")

    assert out["routes"][0]["summary"]["distance"] == 1.0
    assert seen["method"] == "POST"
    assert seen["path"] == "/v2/directions/driving-hgv"
    assert seen["auth"] == "secret-key"
    assert seen["body"]["coordinates"] == [[-122.4194, 37.7749], [-118.2437, 34.0522]]
    assert seen["body"]["units"] == "m"
    assert seen["body"]["geometry"] is True
    assert seen["body"]["instructions"] is True
    assert "extra_info" not in seen["body"]


@pytest.mark.asyncio
async def test_directions_elevation_requests_surface(monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"routes": []})

    patch_transport(monkeypatch, handler)

    await _client().directions([(0.0, 0.0), (1.0, 1.0)], elevation=True)
    assert seen["body"]["elevation"] is True
    assert seen["body"]["extra_info"] == ["surface"]


@pytest.mark.asyncio
async def test_geocode_search_params(monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"features": []})

    patch_transport(monkeypatch, handler)

    out = await _client().geocode_search("San Francisco, CA", country="US")

    assert out == {"features": []}
    assert seen["method"] == "GET"
    assert seen["path"] == "/geocode/search"
    assert seen["params"] == {"text": "San Francisco, CA", "size": "1", "boundary.country": "US"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, exc",
    [(401, AuthorizationError), (429, QuotaExceededError), (500, ExternalServiceError), (404, ExternalServiceError)],
)
async def test_status_mapping(monkeypatch, status, exc):
    patch_transport(monkeypatch, lambda request: httpx.Response(status, text="boom"))

    with pytest.raises(exc):
        await _client().geocode_search("x")


@pytest.mark.asyncio
async def test_transport_error_raises_external(monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    patch_transport(monkeypatch, handler)

    with pytest.raises(ExternalServiceError):
        await _client().directions([(0.0, 0.0), (1.0, 1.0)])


@pytest.mark.asyncio
async def test_non_json_body_raises_external(monkeypatch):
    patch_transport(monkeypatch, lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(ExternalServiceError):
        await _client().geocode_search("x")
