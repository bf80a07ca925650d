"""
Tests for the nearby-hospital search client and coordinate parsing.

Run with:
    pytest tests/test_places_client.py -v
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from backend.lifeline.core.errors import (
    ConfigurationError,
    InvalidArgumentError,
    UpstreamError,
    UpstreamUnavailableError,
)
from backend.lifeline.services.places import PlacesClient, parse_coordinates

from conftest import ProviderStub, make_settings


class TestParseCoordinates:

    def test_valid(self):
        assert parse_coordinates("12.9716", "77.5946") == (12.9716, 77.5946)

    def test_boundaries_inclusive(self):
        assert parse_coordinates("-90", "180") == (-90.0, 180.0)
        assert parse_coordinates("90", "-180") == (90.0, -180.0)

    @pytest.mark.parametrize("lat,lng", [(None, "1"), ("1", None), ("", "1"), (None, None)])
    def test_missing(self, lat, lng):
        with pytest.raises(InvalidArgumentError, match="required"):
            parse_coordinates(lat, lng)

    @pytest.mark.parametrize("lat,lng", [("abc", "1"), ("1", "east"), ("nan", "1"), ("1", "inf")])
    def test_not_a_finite_number(self, lat, lng):
        with pytest.raises(InvalidArgumentError, match="Invalid coordinates"):
            parse_coordinates(lat, lng)

    @pytest.mark.parametrize("lat,lng", [("90.0001", "0"), ("-91", "0"), ("0", "180.5"), ("0", "-181")])
    def test_out_of_range(self, lat, lng):
        with pytest.raises(InvalidArgumentError, match="out of valid range") as exc_info:
            parse_coordinates(lat, lng)
        assert exc_info.value.status_code == 400


class TestSearchNearbyHospitals:

    def _search(self, stub: ProviderStub, **settings_overrides):
        client = PlacesClient(make_settings(**settings_overrides), transport=stub.transport)

        async def go():
            try:
                return await client.search_nearby_hospitals(12.97, 77.59)
            finally:
                await client.close()

        return asyncio.run(go())

    def test_returns_provider_payload_verbatim(self):
        payload = {"status": "OK", "results": [{"name": "A"}, {"name": "B"}], "html_attributions": []}
        assert self._search(ProviderStub(json_body=payload)) == payload

    def test_request_parameters(self):
        stub = ProviderStub(json_body={"status": "OK", "results": []})
        self._search(stub)

        assert len(stub.requests) == 1
        request = stub.requests[0]
        assert request.url.path.endswith("/nearbysearch/json")
        assert request.url.params["location"] == "12.97,77.59"
        assert request.url.params["radius"] == "5000"
        assert request.url.params["type"] == "hospital"
        assert request.url.params["key"] == "maps-test-key"

    def test_missing_key_makes_no_call(self):
        stub = ProviderStub(json_body={"status": "OK"})
        with pytest.raises(ConfigurationError):
            self._search(stub, GOOGLE_MAPS_API_KEY=None)
        assert stub.requests == []

    def test_non_ok_status(self):
        stub = ProviderStub(json_body={"status": "REQUEST_DENIED", "results": []})
        with pytest.raises(UpstreamError) as exc_info:
            self._search(stub)
        assert exc_info.value.status_code == 400
        assert exc_info.value.details == "REQUEST_DENIED"

    def test_zero_results_is_reported_as_error(self):
        with pytest.raises(UpstreamError):
            self._search(ProviderStub(json_body={"status": "ZERO_RESULTS", "results": []}))

    def test_http_error_status_is_passed_through(self):
        stub = ProviderStub(status_code=403, json_body={"error_message": "forbidden"})
        with pytest.raises(UpstreamError) as exc_info:
            self._search(stub)
        assert exc_info.value.status_code == 403
        assert exc_info.value.details == {"error_message": "forbidden"}

    def test_no_response(self):
        stub = ProviderStub(exc=httpx.ConnectError("connection refused"))
        with pytest.raises(UpstreamUnavailableError) as exc_info:
            self._search(stub)
        assert exc_info.value.status_code == 503

    def test_timeout_is_unavailable(self):
        stub = ProviderStub(exc=httpx.ReadTimeout("timed out"))
        with pytest.raises(UpstreamUnavailableError):
            self._search(stub)
