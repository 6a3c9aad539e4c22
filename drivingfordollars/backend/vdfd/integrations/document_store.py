# vdfd/integrations/document_store.py
from __future__ import annotations

import hmac
import hashlib
import json
from typing import Any

import httpx

from .base import RemoteResult


class HttpDocumentStore:
    """
    Remote mirror over a JSON document API:
      PUT    {base_url}/{collection}/{doc_id}   whole-document upsert
      DELETE {base_url}/{collection}/{doc_id}

    Never raises: every transport error or non-2xx comes back as RemoteResult(ok=False).
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        secret: str | None = None,
        timeout_s: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.secret = secret
        self.timeout_s = timeout_s
        self.transport = transport

    def _sign(self, body: bytes) -> str | None:
        if not self.secret:
            return None
        digest = hmac.new(self.secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
        return digest

    def _headers(self, body: bytes = b"") -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        sig = self._sign(body)
        if sig:
            headers["X-VDFD-Signature"] = sig
        return headers

    def _url(self, collection: str, doc_id: str) -> str:
        return f"{self.base_url}/{collection}/{doc_id}"

    async def _send(self, method: str, url: str, body: bytes | None) -> RemoteResult:
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self.transport) as client:
                r = await client.request(method, url, content=body, headers=self._headers(body or b""))
                if 200 <= r.status_code < 300:
                    return RemoteResult(ok=True)
                # already gone on the remote side is fine for deletes
                if method == "DELETE" and r.status_code == 404:
                    return RemoteResult(ok=True)
                return RemoteResult(ok=False, error=f"HTTP {r.status_code}: {r.text[:500]}")
        except httpx.HTTPError as e:
            return RemoteResult(ok=False, error=f"{type(e).__name__}: {e}")

    async def upsert(self, collection: str, doc_id: str, document: dict[str, Any]) -> RemoteResult:
        body = json.dumps(document).encode("utf-8")
        return await self._send("PUT", self._url(collection, doc_id), body)

    async def delete(self, collection: str, doc_id: str) -> RemoteResult:
        return await self._send("DELETE", self._url(collection, doc_id), None)
