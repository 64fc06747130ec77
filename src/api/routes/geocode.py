"""Address geocoding endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.api.dependencies import get_geocoding_service
from src.api.responses import result_response
from src.models.results import BatchGeocodeResult, GeocodeResult
from src.services.geocoding import GeocodingService

router = APIRouter()


class BatchGeocodeBody(BaseModel):
    # Size is checked by the service so oversized batches get its message
    addresses: list[str]


@router.get("", response_model=GeocodeResult, summary="Geocode one address")
async def geocode_address(
    service: Annotated[GeocodingService, Depends(get_geocoding_service)],
    address: str = Query(default=""),
) -> JSONResponse:
    result = await service.geocode(address)
    return result_response(result)


@router.post("/batch", response_model=BatchGeocodeResult, summary="Geocode up to 10 addresses")
async def batch_geocode(
    body: BatchGeocodeBody,
    service: Annotated[GeocodingService, Depends(get_geocoding_service)],
) -> JSONResponse:
    result = await service.batch_geocode(body.addresses)
    return result_response(result)
