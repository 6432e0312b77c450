"""Tests for the Google Geocoding client and batch resolution."""

from __future__ import annotations

import asyncio
import importlib
import sys

import httpx
import pytest

from hubmap.store import Position
from hubmap.tools.geocoding import GEOCODE_URL, GoogleGeocoder, resolve_many
from tests.conftest import MockGeocoder


def _ok_payload(lat: float, lng: float) -> dict:
    return {
        "status": "OK",
        "results": [{"geometry": {"location": {"lat": lat, "lng": lng}}}],
    }


def _geocoder(handler, **kwargs) -> GoogleGeocoder:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GoogleGeocoder(api_key=kwargs.pop("api_key", "test-key"), client=client, **kwargs)


class TestGoogleGeocoder:
    """Test single address lookups against a mocked Geocoding API."""

    def test_resolves_first_result(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_ok_payload(41.8789, -87.6359))

        geocoder = _geocoder(handler)
        position = asyncio.run(geocoder.resolve("233 S Wacker Dr, Chicago"))

        assert position == Position(41.8789, -87.6359)
        assert str(seen[0].url).startswith(GEOCODE_URL)
        assert seen[0].url.params["address"] == "233 S Wacker Dr, Chicago"
        assert seen[0].url.params["key"] == "test-key"

    def test_language_and_region_are_sent(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_ok_payload(0.0, 0.0))

        geocoder = _geocoder(handler, language="en", region="us")
        asyncio.run(geocoder.resolve("Springfield"))

        assert seen[0].url.params["language"] == "en"
        assert seen[0].url.params["region"] == "us"

    @pytest.mark.parametrize(
        "payload",
        [
            {"status": "ZERO_RESULTS", "results": []},
            {"status": "REQUEST_DENIED"},
            {"status": "OK", "results": []},
            {"status": "OK", "results": [{"geometry": {}}]},
        ],
    )
    def test_unusable_payload_gives_none(self, payload):
        geocoder = _geocoder(lambda request: httpx.Response(200, json=payload))
        assert asyncio.run(geocoder.resolve("nowhere")) is None

    def test_http_error_gives_none(self):
        geocoder = _geocoder(lambda request: httpx.Response(500, text="boom"))
        assert asyncio.run(geocoder.resolve("somewhere")) is None

    def test_transport_error_gives_none(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        geocoder = _geocoder(handler)
        assert asyncio.run(geocoder.resolve("somewhere")) is None

    def test_invalid_json_gives_none(self):
        geocoder = _geocoder(lambda request: httpx.Response(200, text="<html>"))
        assert asyncio.run(geocoder.resolve("somewhere")) is None

    @pytest.mark.parametrize("address", ["", "   ", None])
    def test_blank_address_skips_request(self, address):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=_ok_payload(0.0, 0.0))

        geocoder = _geocoder(handler)
        assert asyncio.run(geocoder.resolve(address)) is None
        assert calls == []

    def test_results_are_cached(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=_ok_payload(1.0, 2.0))

        geocoder = _geocoder(handler)

        async def _twice():
            first = await geocoder.resolve("233 S Wacker Dr")
            second = await geocoder.resolve("  233 s wacker   dr ")
            return first, second

        first, second = asyncio.run(_twice())

        assert first == second == Position(1.0, 2.0)
        assert len(calls) == 1

        geocoder.clear_cache()
        asyncio.run(geocoder.resolve("233 S Wacker Dr"))
        assert len(calls) == 2

    def test_failures_are_not_cached(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []})

        geocoder = _geocoder(handler)
        asyncio.run(geocoder.resolve("nowhere"))
        asyncio.run(geocoder.resolve("nowhere"))
        assert len(calls) == 2

    def test_from_config(self):
        config = {"geocoding": {"timeout_s": 3.0, "cache_size": 10, "language": "it", "region": None}}
        geocoder = GoogleGeocoder.from_config(config)
        assert geocoder.timeout_s == 3.0
        assert geocoder.language == "it"
        assert geocoder.region is None


class TestApiKeyHandling:
    """The key is read at call time so imports never fail without it."""

    def test_module_imports_without_api_key(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_MAPS_API_KEY", raising=False)

        sys.modules.pop("hubmap.tools.geocoding", None)
        module = importlib.import_module("hubmap.tools.geocoding")

        assert module.GEOCODE_URL == "https://maps.googleapis.com/maps/api/geocode/json"

    def test_resolve_raises_without_api_key(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_MAPS_API_KEY", raising=False)

        geocoder = _geocoder(lambda request: httpx.Response(200, json=_ok_payload(0, 0)), api_key=None)

        with pytest.raises(RuntimeError, match="Missing GOOGLE_MAPS_API_KEY"):
            asyncio.run(geocoder.resolve("233 S Wacker Dr"))

    def test_environment_key_is_used(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "env-key")
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_ok_payload(0, 0))

        geocoder = _geocoder(handler, api_key=None)
        asyncio.run(geocoder.resolve("somewhere"))

        assert seen[0].url.params["key"] == "env-key"


class TestResolveMany:
    """Test concurrent batch resolution."""

    def test_keeps_input_order(self, mock_geocoder):
        addresses = [
            "10000 W O'Hare Ave, Chicago",
            "unknown place",
            "233 S Wacker Dr, Chicago",
        ]

        positions = asyncio.run(resolve_many(mock_geocoder, addresses, max_concurrency=2))

        assert positions == [Position(41.9742, -87.9073), None, Position(41.8789, -87.6359)]
        assert sorted(mock_geocoder.calls) == sorted(addresses)

    def test_exception_only_fails_its_row(self):
        geocoder = MockGeocoder({"good": Position(1.0, 1.0), "bad": httpx.ReadTimeout("slow")})

        positions = asyncio.run(resolve_many(geocoder, ["bad", "good"]))

        assert positions == [None, Position(1.0, 1.0)]

    def test_missing_key_is_raised(self):
        geocoder = MockGeocoder({"a": RuntimeError("Missing GOOGLE_MAPS_API_KEY")})

        with pytest.raises(RuntimeError, match="Missing GOOGLE_MAPS_API_KEY"):
            asyncio.run(resolve_many(geocoder, ["a"]))

    def test_concurrency_is_bounded(self):
        in_flight = 0
        peak = 0

        class SlowGeocoder:
            async def resolve(self, address):
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                in_flight -= 1
                return Position(0.0, 0.0)

        positions = asyncio.run(resolve_many(SlowGeocoder(), [str(i) for i in range(10)], max_concurrency=3))

        assert len(positions) == 10
        assert peak <= 3

    def test_empty_batch(self, mock_geocoder):
        assert asyncio.run(resolve_many(mock_geocoder, [])) == []
