"""Unit tests for the places client using an in-process HTTP transport."""

import json

import httpx
import pytest

from src.services.errors import (
    InputValidationError,
    NotFoundError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from src.services.places_client import GooglePlacesClient

API_KEY = "AIza" + "x" * 35


def make_client(handler) -> GooglePlacesClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GooglePlacesClient(API_KEY, timeout=2.0, http_client=http_client)


@pytest.mark.asyncio
async def test_search_text_sends_query_and_location_bias():
    """Search posts the text query with a circular bias around the business."""
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["headers"] = request.headers
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "places": [
                    {
                        "id": "place-1",
                        "displayName": {"text": "Joe's Diner"},
                        "formattedAddress": "100 Main St, Austin, TX 78701",
                        "location": {"latitude": 30.26, "longitude": -97.74},
                        "types": ["restaurant"],
                    }
                ]
            },
        )

    client = make_client(handler)
    candidates = await client.search_text("Joe's Diner Austin", latitude=30.26, longitude=-97.74)

    assert captured["url"].endswith("/places:searchText")
    assert captured["headers"]["X-Goog-Api-Key"] == API_KEY
    assert "places.formattedAddress" in captured["headers"]["X-Goog-FieldMask"]
    assert captured["body"]["textQuery"] == "Joe's Diner Austin"
    assert captured["body"]["locationBias"]["circle"]["radius"] == 40234.0

    assert len(candidates) == 1
    assert candidates[0].place_id == "place-1"
    assert candidates[0].name == "Joe's Diner"
    assert candidates[0].latitude == 30.26


@pytest.mark.asyncio
async def test_search_text_without_coordinates_has_no_bias():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={})

    client = make_client(handler)
    candidates = await client.search_text("Joe's Diner")

    assert candidates == []
    assert "locationBias" not in captured["body"]


@pytest.mark.asyncio
async def test_search_text_tolerates_missing_fields():
    """Places without a name or address still become candidates."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"places": [{"id": "bare"}, {"displayName": {"text": "no id"}}]})

    client = make_client(handler)
    candidates = await client.search_text("anything")

    assert [c.place_id for c in candidates] == ["bare"]
    assert candidates[0].name == ""
    assert candidates[0].formatted_address == ""


@pytest.mark.asyncio
async def test_search_text_rejects_empty_query():
    client = make_client(lambda request: httpx.Response(200, json={}))

    with pytest.raises(InputValidationError):
        await client.search_text("   ")


@pytest.mark.asyncio
async def test_timeout_raises_retryable_timeout_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = make_client(handler)

    with pytest.raises(UpstreamTimeoutError) as exc_info:
        await client.search_text("Joe's Diner")
    assert exc_info.value.retryable is True


@pytest.mark.asyncio
async def test_server_error_raises_unavailable():
    client = make_client(lambda request: httpx.Response(503, json={"error": "down"}))

    with pytest.raises(UpstreamUnavailableError) as exc_info:
        await client.search_text("Joe's Diner")
    assert "503" in exc_info.value.message


@pytest.mark.asyncio
async def test_geocode_returns_first_result():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["address"] == "100 Main St, Austin, TX"
        return httpx.Response(
            200,
            json={
                "status": "OK",
                "results": [
                    {
                        "formatted_address": "100 Main St, Austin, TX 78701, USA",
                        "place_id": "geo-1",
                        "geometry": {"location": {"lat": 30.2672, "lng": -97.7431}},
                    }
                ],
            },
        )

    client = make_client(handler)
    location = await client.geocode("100 Main St, Austin, TX")

    assert location.latitude == 30.2672
    assert location.longitude == -97.7431
    assert location.place_id == "geo-1"


@pytest.mark.asyncio
async def test_geocode_zero_results_is_not_found():
    client = make_client(lambda request: httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []}))

    with pytest.raises(NotFoundError):
        await client.geocode("nowhere at all")


@pytest.mark.asyncio
async def test_geocode_denied_is_unavailable():
    client = make_client(
        lambda request: httpx.Response(
            200, json={"status": "REQUEST_DENIED", "error_message": "bad key", "results": []}
        )
    )

    with pytest.raises(UpstreamUnavailableError) as exc_info:
        await client.geocode("100 Main St")
    assert "REQUEST_DENIED" in exc_info.value.message


@pytest.mark.asyncio
async def test_geocode_rejects_empty_address():
    client = make_client(lambda request: httpx.Response(200, json={}))

    with pytest.raises(InputValidationError):
        await client.geocode("")


@pytest.mark.asyncio
async def test_geocode_result_without_geometry_is_unavailable():
    client = make_client(
        lambda request: httpx.Response(200, json={"status": "OK", "results": [{}]})
    )

    with pytest.raises(UpstreamUnavailableError) as exc_info:
        await client.geocode("100 Main St")
    assert exc_info.value.message == "Geocoding failed: malformed result"
    assert exc_info.value.retryable is True


@pytest.mark.asyncio
async def test_non_object_response_is_unavailable():
    client = make_client(lambda request: httpx.Response(200, json=["unexpected"]))

    with pytest.raises(UpstreamUnavailableError):
        await client.search_text("Joe's Diner")
