import pytest
import requests

from soundscape.config import LOCATION_UNKNOWN_PHRASE
from soundscape.location import LocationService, phrase_from_geocode

INTERSECTION = {
    "types": ["intersection"],
    "address_components": [
        {"long_name": "Main Street", "types": ["route"]},
        {"long_name": "1st Avenue", "types": ["route"]},
    ],
}
STREET = {
    "types": ["street_address"],
    "address_components": [
        {"long_name": "12", "types": ["street_number"]},
        {"long_name": "Oak Road", "types": ["route"]},
    ],
}


def test_intersection_preferred():
    result = phrase_from_geocode({"status": "OK", "results": [STREET, INTERSECTION]})
    assert result.phrase == "At Main Street and 1st Avenue."
    assert result.intersection == ("Main Street", "1st Avenue")


def test_street_fallback():
    result = phrase_from_geocode({"status": "OK", "results": [STREET]})
    assert result.phrase == "You are on Oak Road."
    assert result.street == "Oak Road"


@pytest.mark.parametrize(
    "data",
    [
        {"status": "ZERO_RESULTS", "results": []},
        {"status": "OK", "results": []},
        {"status": "OK", "results": [{"types": ["locality"], "address_components": []}]},
    ],
)
def test_unknown(data):
    assert phrase_from_geocode(data).phrase == LOCATION_UNKNOWN_PHRASE


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


class FakeHTTP:
    def __init__(self, *payloads, error=None):
        self.payloads = list(payloads)
        self.error = error
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, params))
        if self.error is not None:
            raise self.error
        return FakeResponse(self.payloads.pop(0))


@pytest.mark.asyncio
async def test_where_am_i_end_to_end():
    http = FakeHTTP({"loc": "40.7128,-74.0060"}, {"status": "OK", "results": [STREET]})
    service = LocationService(api_key="key", session=http)
    result = await service.where_am_i()
    assert result.phrase == "You are on Oak Road."
    assert http.requests[1][1]["latlng"] == "40.7128,-74.006"


@pytest.mark.asyncio
async def test_where_am_i_network_error():
    service = LocationService(api_key="key", session=FakeHTTP(error=requests.ConnectionError()))
    assert (await service.where_am_i()).phrase == LOCATION_UNKNOWN_PHRASE


def test_no_key_skips_geocoding():
    http = FakeHTTP()
    assert LocationService(api_key="", session=http).reverse_geocode(1.0, 2.0).phrase == LOCATION_UNKNOWN_PHRASE
    assert http.requests == []
