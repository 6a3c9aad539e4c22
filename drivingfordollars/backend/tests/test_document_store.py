import hashlib
import hmac
import json

import httpx

from vdfd.integrations.document_store import HttpDocumentStore


def _store(handler, **kw) -> HttpDocumentStore:
    return HttpDocumentStore("https://docs.example.test/v1/", transport=httpx.MockTransport(handler), **kw)


async def test_upsert_puts_whole_document_with_auth_and_signature():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    store = _store(handler, api_key="k-123", secret="s3cret")
    res = await store.upsert("leads", "lead_1", {"id": "lead_1", "lat": 42.5})

    assert res.ok is True
    req = seen[0]
    assert req.method == "PUT"
    assert str(req.url) == "https://docs.example.test/v1/leads/lead_1"
    assert req.headers["Authorization"] == "Bearer k-123"
    assert json.loads(req.content) == {"id": "lead_1", "lat": 42.5}
    expected = hmac.new(b"s3cret", req.content, hashlib.sha256).hexdigest()
    assert req.headers["X-VDFD-Signature"] == expected


async def test_non_2xx_is_reported_not_raised():
    store = _store(lambda request: httpx.Response(503, text="maintenance"))
    res = await store.upsert("leads", "lead_1", {})
    assert res.ok is False
    assert res.error.startswith("HTTP 503")


async def test_transport_error_is_reported_not_raised():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route to host", request=request)

    res = await _store(handler).delete("routes", "route_1")
    assert res.ok is False
    assert "ConnectError" in res.error


async def test_delete_of_missing_document_is_ok():
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.method)
        return httpx.Response(404)

    res = await _store(handler).delete("routes", "route_1")
    assert res.ok is True
    assert seen == ["DELETE"]


async def test_no_signature_without_secret():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    await _store(handler).upsert("leads", "lead_1", {"id": "lead_1"})
    assert "X-VDFD-Signature" not in seen[0].headers
    assert "Authorization" not in seen[0].headers
