"""Verification review and document submission endpoints."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.api.dependencies import get_current_principal, get_review_service
from src.api.responses import result_response
from src.models.results import PendingQueueResult, ReviewResult
from src.models.user import Principal
from src.models.verification import DocumentSubmission, ReviewAction, ReviewDecision
from src.services.verification_review import VerificationReviewService

router = APIRouter()


class ReviewBody(BaseModel):
    action: ReviewAction
    notes: Optional[str] = Field(default=None, max_length=2000)


@router.get(
    "/pending",
    response_model=PendingQueueResult,
    summary="Pending verification requests, oldest first",
)
async def list_pending(
    principal: Annotated[Principal, Depends(get_current_principal)],
    service: Annotated[VerificationReviewService, Depends(get_review_service)],
) -> JSONResponse:
    result = await service.list_pending(principal)
    return result_response(result)


@router.post(
    "/{user_id}/review",
    response_model=ReviewResult,
    summary="Approve or deny a pending request",
)
async def review_request(
    user_id: UUID,
    body: ReviewBody,
    principal: Annotated[Principal, Depends(get_current_principal)],
    service: Annotated[VerificationReviewService, Depends(get_review_service)],
) -> JSONResponse:
    decision = ReviewDecision(user_id=user_id, action=body.action, notes=body.notes)
    result = await service.review(principal, decision)
    return result_response(result)


@router.post(
    "/documents",
    response_model=ReviewResult,
    summary="Submit a verification document for the signed-in member",
)
async def submit_document(
    submission: DocumentSubmission,
    principal: Annotated[Principal, Depends(get_current_principal)],
    service: Annotated[VerificationReviewService, Depends(get_review_service)],
) -> JSONResponse:
    try:
        user_id = UUID(principal.user_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only member accounts can submit verification documents",
        ) from e
    result = await service.submit_document(user_id, submission)
    return result_response(result, success_status=status.HTTP_201_CREATED)
