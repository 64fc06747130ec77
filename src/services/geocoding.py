"""Single and batch address geocoding."""

import asyncio

from src.logging import get_logger
from src.models.place import GeocodeItem
from src.models.results import BatchGeocodeResult, ErrorKind, GeocodeResult, GeocodeSummary
from src.services.errors import PatriotThanksError
from src.services.places_client import GooglePlacesClient

logger = get_logger(__name__)

DEFAULT_BATCH_LIMIT = 10


class GeocodingService:
    """Resolve addresses to coordinates through the places client."""

    def __init__(self, places_client: GooglePlacesClient, batch_limit: int = DEFAULT_BATCH_LIMIT):
        self.places_client = places_client
        self.batch_limit = batch_limit

    async def geocode(self, address: str) -> GeocodeResult:
        try:
            location = await self.places_client.geocode(address)
        except PatriotThanksError as e:
            logger.warning("geocode_failed", error=e.message, kind=e.kind.value)
            return GeocodeResult(
                success=False, message=e.message, error=e.kind, retryable=e.retryable
            )
        return GeocodeResult(success=True, message="Geocoded", location=location)

    async def batch_geocode(self, addresses: list[str]) -> BatchGeocodeResult:
        """Geocode up to ``batch_limit`` addresses concurrently.

        An oversized or empty batch is rejected before any lookup is made.
        Individual failures are recorded on their item and never abort the
        batch.
        """
        if not addresses:
            return BatchGeocodeResult(
                success=False,
                message="Addresses array is required",
                error=ErrorKind.VALIDATION,
            )
        if len(addresses) > self.batch_limit:
            return BatchGeocodeResult(
                success=False,
                message=f"Maximum {self.batch_limit} addresses allowed per batch request",
                error=ErrorKind.VALIDATION,
            )

        items = await asyncio.gather(
            *(self._geocode_item(index, address) for index, address in enumerate(addresses))
        )
        successful = sum(1 for item in items if item.success)
        summary = GeocodeSummary(
            total=len(items), successful=successful, failed=len(items) - successful
        )

        logger.info(
            "batch_geocode_completed",
            total=summary.total,
            successful=summary.successful,
            failed=summary.failed,
        )
        return BatchGeocodeResult(
            success=True,
            message=f"Geocoded {successful} of {len(items)} addresses",
            results=list(items),
            summary=summary,
        )

    async def _geocode_item(self, index: int, address: str) -> GeocodeItem:
        try:
            location = await self.places_client.geocode(address)
        except PatriotThanksError as e:
            return GeocodeItem(
                index=index, original_address=address, success=False, error=e.message
            )
        return GeocodeItem(
            index=index, original_address=address, success=True, location=location
        )
