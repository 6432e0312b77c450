"""
Google Geocoding helpers.

Lookups never raise for a bad address or a failed request: the caller gets
None and the failure is logged, so batch imports can drop the row and carry
on. The only error raised is a missing API key, checked at call time.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Iterable, List, Optional

import httpx
from cachetools import TTLCache

from ..store.entries import Position

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

DEFAULT_TIMEOUT_S = 10.0
DEFAULT_CACHE_TTL_S = 24 * 60 * 60
DEFAULT_CACHE_SIZE = 2048
DEFAULT_MAX_CONCURRENCY = 8


def _require_google_api_key() -> str:
    """Fetch the Google Maps API key from the environment at call time."""

    google_key = os.getenv("GOOGLE_MAPS_API_KEY", "")
    if not google_key:
        raise RuntimeError(
            "Missing GOOGLE_MAPS_API_KEY. Copy .env.sample to .env and set your key before geocoding addresses."
        )
    return google_key


def _position_from_payload(payload: dict) -> Optional[Position]:
    if payload.get("status") != "OK":
        return None
    try:
        location = payload["results"][0]["geometry"]["location"]
        return Position(lat=float(location["lat"]), lng=float(location["lng"]))
    except (KeyError, IndexError, TypeError, ValueError):
        return None


class GoogleGeocoder:
    """
    Resolve address text to a coordinate with the Google Geocoding API.

    Args:
        api_key: API key; looked up from ``GOOGLE_MAPS_API_KEY`` when omitted
        client: Optional shared ``httpx.AsyncClient`` (tests pass one with a
            mock transport)
        timeout_s: Request timeout when no client is given
        cache_ttl_s: How long resolved coordinates are reused
        cache_size: Maximum cached addresses
        language: Optional result language
        region: Optional region bias (ccTLD, e.g. ``us``)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        cache_ttl_s: float = DEFAULT_CACHE_TTL_S,
        cache_size: int = DEFAULT_CACHE_SIZE,
        language: Optional[str] = None,
        region: Optional[str] = None,
    ):
        self._api_key = api_key
        self._client = client
        self.timeout_s = timeout_s
        self.language = language
        self.region = region
        self._cache: TTLCache[str, Position] = TTLCache(maxsize=cache_size, ttl=cache_ttl_s)

    @classmethod
    def from_config(cls, config: dict, **kwargs) -> "GoogleGeocoder":
        """Build a geocoder from the ``geocoding`` section of a profile."""
        geo_cfg = config.get("geocoding", {}) or {}
        return cls(
            timeout_s=geo_cfg.get("timeout_s", DEFAULT_TIMEOUT_S),
            cache_ttl_s=geo_cfg.get("cache_ttl_s", DEFAULT_CACHE_TTL_S),
            cache_size=geo_cfg.get("cache_size", DEFAULT_CACHE_SIZE),
            language=geo_cfg.get("language"),
            region=geo_cfg.get("region"),
            **kwargs,
        )

    def _cache_key(self, address: str) -> str:
        return " ".join(address.split()).lower()

    async def _get_json(self, params: dict) -> dict:
        if self._client is not None:
            response = await self._client.get(GEOCODE_URL, params=params)
            response.raise_for_status()
            return response.json()

        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            response = await client.get(GEOCODE_URL, params=params)
            response.raise_for_status()
            return response.json()

    async def resolve(self, address: str) -> Optional[Position]:
        """
        Geocode one address.

        Returns:
            The first result's location, or None when the address is blank,
            the API finds nothing, or the request fails

        Raises:
            RuntimeError: If no API key is configured
        """
        if not address or not str(address).strip():
            return None

        address = str(address).strip()
        key = self._cache_key(address)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        params = {"address": address, "key": self._api_key or _require_google_api_key()}
        if self.language:
            params["language"] = self.language
        if self.region:
            params["region"] = self.region

        try:
            payload = await self._get_json(params)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Geocoding request failed for %r: %s", address, exc)
            return None

        position = _position_from_payload(payload)
        if position is None:
            logger.warning(
                "Unable to get coordinates for %r (status=%s)", address, payload.get("status")
            )
            return None

        self._cache[key] = position
        return position

    def clear_cache(self) -> None:
        self._cache.clear()


async def resolve_many(
    geocoder,
    addresses: Iterable[str],
    *,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> List[Optional[Position]]:
    """
    Resolve addresses concurrently, keeping input order.

    ``geocoder`` is anything with an async ``resolve(address)`` method. A
    lookup that raises counts as a failure for that address only; the rest
    of the batch still resolves. A missing API key (``RuntimeError``) is a
    configuration problem and is re-raised once the batch has settled.
    """
    addresses = list(addresses)
    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def _resolve(address: str) -> Optional[Position]:
        async with semaphore:
            return await geocoder.resolve(address)

    tasks = [asyncio.create_task(_resolve(a)) for a in addresses]
    results = await asyncio.gather(*tasks, return_exceptions=True)

    for result in results:
        if isinstance(result, RuntimeError):
            raise result

    positions: List[Optional[Position]] = []
    for address, result in zip(addresses, results):
        if isinstance(result, Exception):
            logger.warning("Geocoding failed for %r: %s", address, result)
            positions.append(None)
        else:
            positions.append(result)
    return positions
