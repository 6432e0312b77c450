"""HTTP client for a remote ``/addresses`` persistence endpoint."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import httpx

from ..store.entries import LocatedEntry, entries_from_records, entry_to_record

logger = logging.getLogger(__name__)


class AddressesClient:
    """
    Load and save the whole entry list against a persistence server.

    Failures are logged and degrade to an empty list (``load``) or a False
    result (``save``); nothing is retried.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout_s: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client
        self.timeout_s = timeout_s

    @property
    def url(self) -> str:
        return f"{self.base_url}/addresses"

    async def _request(self, method: str, **kwargs) -> httpx.Response:
        if self._client is not None:
            response = await self._client.request(method, self.url, **kwargs)
        else:
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                response = await client.request(method, self.url, **kwargs)
        response.raise_for_status()
        return response

    async def load(self) -> List[LocatedEntry]:
        try:
            response = await self._request("GET")
            records = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Failed to load addresses from %s: %s", self.url, exc)
            return []

        if not isinstance(records, list):
            logger.error("Failed to load addresses from %s: expected a JSON array", self.url)
            return []
        return entries_from_records(records)

    async def save(self, entries: Sequence[LocatedEntry]) -> bool:
        payload = [entry_to_record(e) for e in entries]
        try:
            await self._request("POST", json=payload)
        except httpx.HTTPError as exc:
            logger.error("Failed to save addresses to %s: %s", self.url, exc)
            return False
        return True
