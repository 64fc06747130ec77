"""Unit tests for single and batch geocoding."""

from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from src.models.place import GeocodeLocation
from src.models.results import ErrorKind
from src.services.errors import NotFoundError, UpstreamTimeoutError
from src.services.geocoding import GeocodingService
from src.services.places_client import GooglePlacesClient

API_KEY = "AIza" + "x" * 35


def location(lat=30.0, lng=-97.0):
    return GeocodeLocation(latitude=lat, longitude=lng, formatted_address="Somewhere")


@pytest.fixture
def places_client():
    client = Mock()
    client.geocode = AsyncMock(return_value=location())
    return client


@pytest.fixture
def service(places_client):
    return GeocodingService(places_client)


@pytest.mark.asyncio
async def test_geocode_success(service):
    result = await service.geocode("100 Main St, Austin, TX")

    assert result.success is True
    assert result.location.latitude == 30.0


@pytest.mark.asyncio
async def test_geocode_no_results(service, places_client):
    places_client.geocode.side_effect = NotFoundError("Address not found")

    result = await service.geocode("nowhere")

    assert result.success is False
    assert result.error is ErrorKind.NOT_FOUND
    assert result.retryable is False


@pytest.mark.asyncio
async def test_batch_of_eleven_rejected_before_any_lookup(service, places_client):
    result = await service.batch_geocode([f"{n} Main St" for n in range(11)])

    assert result.success is False
    assert result.error is ErrorKind.VALIDATION
    assert result.message == "Maximum 10 addresses allowed per batch request"
    places_client.geocode.assert_not_awaited()


@pytest.mark.asyncio
async def test_empty_batch_rejected(service, places_client):
    result = await service.batch_geocode([])

    assert result.success is False
    assert result.error is ErrorKind.VALIDATION
    places_client.geocode.assert_not_awaited()


@pytest.mark.asyncio
async def test_batch_records_individual_failures(service, places_client):
    async def geocode(address):
        if address == "bad":
            raise UpstreamTimeoutError("Geocoding service timed out")
        return location()

    places_client.geocode.side_effect = geocode

    result = await service.batch_geocode(["good", "bad", "also good"])

    assert result.success is True
    assert [item.index for item in result.results] == [0, 1, 2]
    assert [item.success for item in result.results] == [True, False, True]
    assert result.results[1].error == "Geocoding service timed out"
    assert result.results[1].original_address == "bad"
    assert result.summary.total == 3
    assert result.summary.successful == 2
    assert result.summary.failed == 1
    assert result.message == "Geocoded 2 of 3 addresses"


@pytest.mark.asyncio
async def test_batch_limit_is_configurable(places_client):
    service = GeocodingService(places_client, batch_limit=2)

    result = await service.batch_geocode(["a", "b", "c"])

    assert result.success is False
    assert "Maximum 2" in result.message


@pytest.mark.asyncio
async def test_batch_survives_malformed_geocoder_result():
    """A result without geometry fails only its own item."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["address"] == "broken":
            return httpx.Response(200, json={"status": "OK", "results": [{}]})
        return httpx.Response(
            200,
            json={
                "status": "OK",
                "results": [
                    {
                        "formatted_address": "100 Main St, Austin, TX 78701, USA",
                        "geometry": {"location": {"lat": 30.2672, "lng": -97.7431}},
                        "place_id": "geo-1",
                    }
                ],
            },
        )

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    service = GeocodingService(GooglePlacesClient(API_KEY, http_client=http_client))

    result = await service.batch_geocode(["100 Main St", "broken"])

    assert result.success is True
    assert [item.success for item in result.results] == [True, False]
    assert result.results[1].error == "Geocoding failed: malformed result"
    assert result.summary.failed == 1
