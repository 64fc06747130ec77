"""Incentive listing for a selected business."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse

from src.api.dependencies import get_incentive_aggregator
from src.api.responses import result_response
from src.models.results import IncentiveLoadResult
from src.services.incentive_aggregation import IncentiveAggregator

router = APIRouter()


@router.get(
    "/{business_id}/incentives",
    response_model=IncentiveLoadResult,
    summary="Local and chain-wide incentives for a business",
)
async def list_business_incentives(
    business_id: UUID,
    aggregator: Annotated[IncentiveAggregator, Depends(get_incentive_aggregator)],
    request_scope: Annotated[Optional[str], Header(max_length=100)] = None,
) -> JSONResponse:
    """Always a fresh read; chain-wide entries carry a ``chain_`` ID prefix.

    Clients that re-trigger loads from one view send the same
    ``Request-Scope`` header so an older load is answered as superseded.
    """
    requester = ("http", request_scope) if request_scope else None
    result = await aggregator.load_for_business_id(business_id, requester=requester)
    return result_response(result)
