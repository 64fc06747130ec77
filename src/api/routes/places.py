"""Place matching endpoints for the admin place-ID fix tool."""

from typing import Annotated, Any, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.api.dependencies import get_current_principal, get_place_match_service
from src.api.responses import result_response
from src.models.business import PlaceIdAssignment
from src.models.normalization import normalize_business_record
from src.models.results import BusinessListResult, ErrorKind, PlaceMatchResult
from src.models.user import Principal
from src.services.place_match_service import PlaceMatchService

router = APIRouter()


class PlaceIdUpdate(BaseModel):
    place_id: str = Field(min_length=1, max_length=300)
    confirmed: bool = False


@router.get(
    "/businesses/needs-place-id",
    response_model=BusinessListResult,
    summary="Active businesses without a place ID",
)
async def list_businesses_needing_place_id(
    principal: Annotated[Principal, Depends(get_current_principal)],
    service: Annotated[PlaceMatchService, Depends(get_place_match_service)],
    search: Optional[str] = Query(default=None, max_length=100),
) -> JSONResponse:
    result = await service.list_businesses_needing_place_id(principal, search)
    return result_response(result)


@router.post(
    "/search",
    response_model=PlaceMatchResult,
    summary="Rank place candidates for a business record",
)
async def search_places_for_record(
    principal: Annotated[Principal, Depends(get_current_principal)],
    service: Annotated[PlaceMatchService, Depends(get_place_match_service)],
    record: dict[str, Any] = Body(...),
) -> JSONResponse:
    """Accepts a business record under any of the known field names."""
    try:
        business = normalize_business_record(record)
    except (TypeError, ValueError) as e:
        return result_response(
            PlaceMatchResult(
                success=False,
                message=f"Invalid business record: {e}",
                error=ErrorKind.VALIDATION,
            )
        )
    result = await service.search_for_business(principal, business)
    return result_response(result)


@router.post(
    "/businesses/{business_id}/search",
    response_model=PlaceMatchResult,
    summary="Rank place candidates for a stored business",
)
async def search_places_for_business(
    business_id: UUID,
    principal: Annotated[Principal, Depends(get_current_principal)],
    service: Annotated[PlaceMatchService, Depends(get_place_match_service)],
) -> JSONResponse:
    result = await service.search_for_business_id(principal, business_id)
    return result_response(result)


@router.put(
    "/businesses/{business_id}/place-id",
    summary="Assign a confirmed place ID to a business",
)
async def assign_place_id(
    business_id: UUID,
    body: PlaceIdUpdate,
    principal: Annotated[Principal, Depends(get_current_principal)],
    service: Annotated[PlaceMatchService, Depends(get_place_match_service)],
) -> JSONResponse:
    assignment = PlaceIdAssignment(
        business_id=business_id, place_id=body.place_id, confirmed=body.confirmed
    )
    result = await service.assign_place_id(principal, assignment)
    return result_response(result)


@router.get("/exists", summary="Whether a place ID is already assigned")
async def place_exists(
    principal: Annotated[Principal, Depends(get_current_principal)],
    service: Annotated[PlaceMatchService, Depends(get_place_match_service)],
    place_id: str = Query(default=""),
) -> JSONResponse:
    result = await service.place_exists(principal, place_id)
    return result_response(result)


@router.get("/chains/match", summary="Chain parent best matching a place name")
async def find_matching_chain(
    principal: Annotated[Principal, Depends(get_current_principal)],
    service: Annotated[PlaceMatchService, Depends(get_place_match_service)],
    name: str = Query(default=""),
) -> JSONResponse:
    result = await service.find_matching_chain(principal, name)
    return result_response(result)
