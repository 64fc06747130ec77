"""Client for the Google Places text search and Geocoding APIs."""

from typing import Any, Optional

import httpx

from src.logging import get_logger
from src.models.place import GeocodeLocation, PlaceCandidate
from src.services.errors import (
    InputValidationError,
    NotFoundError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)

logger = get_logger(__name__)

SEARCH_FIELD_MASK = ",".join(
    (
        "places.id",
        "places.displayName",
        "places.formattedAddress",
        "places.location",
        "places.types",
    )
)


class GooglePlacesClient:
    """Thin async wrapper over the place search and geocoding endpoints.

    Every call is bounded by ``timeout`` seconds; timeouts raise
    :class:`UpstreamTimeoutError` and other transport or HTTP failures raise
    :class:`UpstreamUnavailableError`, both retryable.
    """

    def __init__(
        self,
        api_key: str,
        places_base_url: str = "https://places.googleapis.com/v1",
        geocode_url: str = "https://maps.googleapis.com/maps/api/geocode/json",
        timeout: float = 10.0,
        search_radius_m: float = 40234.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.places_base_url = places_base_url.rstrip("/")
        self.geocode_url = geocode_url
        self.timeout = timeout
        self.search_radius_m = search_radius_m
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": "PatriotThanks-Places"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def search_text(
        self,
        query: str,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> list[PlaceCandidate]:
        """Search places by free text, optionally biased around a point."""
        if not query or not query.strip():
            raise InputValidationError("A search query is required")

        body: dict[str, Any] = {"textQuery": query}
        if latitude is not None and longitude is not None:
            body["locationBias"] = {
                "circle": {
                    "center": {"latitude": latitude, "longitude": longitude},
                    "radius": self.search_radius_m,
                }
            }

        data = await self._request(
            "POST",
            f"{self.places_base_url}/places:searchText",
            json=body,
            headers={
                "X-Goog-Api-Key": self.api_key,
                "X-Goog-FieldMask": SEARCH_FIELD_MASK,
            },
            timeout=timeout,
        )

        places = data.get("places") or []
        logger.info("places_search_completed", query=query, result_count=len(places))
        return [self._to_candidate(place) for place in places if place.get("id")]

    async def geocode(self, address: str, timeout: Optional[float] = None) -> GeocodeLocation:
        """Resolve an address to coordinates.

        Raises:
            InputValidationError: If the address is empty
            NotFoundError: If the geocoder has no result
            UpstreamUnavailableError: If the geocoder fails or its result is malformed
        """
        if not address or not address.strip():
            raise InputValidationError("Address parameter is required")

        data = await self._request(
            "GET",
            self.geocode_url,
            params={"address": address, "key": self.api_key},
            timeout=timeout,
        )

        status = data.get("status")
        results = data.get("results") or []
        if status != "OK" or not results:
            if status in (None, "OK", "ZERO_RESULTS"):
                raise NotFoundError(f"Geocoding failed: {status or 'no results'}")
            raise UpstreamUnavailableError(
                f"Geocoding failed: {status}: {data.get('error_message', 'No results found')}"
            )

        first = results[0]
        try:
            location = first["geometry"]["location"]
            return GeocodeLocation(
                latitude=location["lat"],
                longitude=location["lng"],
                formatted_address=first.get("formatted_address") or "",
                place_id=first.get("place_id"),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.error("geocode_result_malformed", address=address, error=str(e))
            raise UpstreamUnavailableError(
                "Geocoding failed: malformed result", original_error=e
            ) from e

    async def _request(
        self,
        method: str,
        url: str,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        try:
            response = await self._client.request(
                method, url, timeout=timeout or self.timeout, **kwargs
            )
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            logger.warning("places_request_timeout", url=url, timeout=timeout or self.timeout)
            raise UpstreamTimeoutError("Place service timed out", original_error=e) from e
        except httpx.HTTPStatusError as e:
            logger.error(
                "places_request_failed",
                url=url,
                status_code=e.response.status_code,
            )
            raise UpstreamUnavailableError(
                f"Place service returned HTTP {e.response.status_code}", original_error=e
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("places_request_error", url=url, error=str(e))
            raise UpstreamUnavailableError("Place service unavailable", original_error=e) from e

        if not isinstance(data, dict):
            logger.error("places_response_malformed", url=url)
            raise UpstreamUnavailableError("Place service returned an unexpected response")
        return data

    @staticmethod
    def _to_candidate(place: dict[str, Any]) -> PlaceCandidate:
        display_name = place.get("displayName")
        if isinstance(display_name, dict):
            display_name = display_name.get("text")
        location = place.get("location") or {}
        return PlaceCandidate(
            place_id=place["id"],
            name=display_name or "",
            formatted_address=place.get("formattedAddress") or "",
            latitude=location.get("latitude"),
            longitude=location.get("longitude"),
            types=place.get("types") or [],
        )
