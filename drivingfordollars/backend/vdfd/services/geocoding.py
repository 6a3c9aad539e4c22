# vdfd/services/geocoding.py
from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

log = logging.getLogger(__name__)


def format_coordinate(lat: float, lng: float) -> str:
    return f"{lat:.6f}, {lng:.6f}"


@dataclass(frozen=True)
class GeocodeResult:
    address: str
    resolved: bool  # False => coordinate fallback


class ReverseGeocoder:
    """
    Google-compatible reverse geocoding. Any failure (no key, transport error,
    non-OK status, empty results) degrades to a formatted coordinate string.
    One attempt, no retry.
    """

    def __init__(
        self,
        url: str,
        api_key: str | None,
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout_s = timeout_s
        self.transport = transport

    async def reverse(self, lat: float, lng: float) -> GeocodeResult:
        fallback = GeocodeResult(address=format_coordinate(lat, lng), resolved=False)
        if not self.api_key:
            return fallback

        params = {"latlng": f"{lat},{lng}", "key": self.api_key}
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self.transport) as client:
                r = await client.get(self.url, params=params)
                r.raise_for_status()
                data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            log.warning("reverse geocode failed for %s,%s: %s", lat, lng, e)
            return fallback

        results = data.get("results") or []
        if data.get("status") not in (None, "OK") or not results:
            log.warning("reverse geocode returned no address for %s,%s: status=%s", lat, lng, data.get("status"))
            return fallback

        address = (results[0] or {}).get("formatted_address")
        if not address:
            return fallback
        return GeocodeResult(address=str(address), resolved=True)
