"""Structured operation results returned across component boundaries.

Services never let external failures escape as exceptions; they return one
of these models instead and the HTTP or bot layer decides how to render it.
"""

from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from .business import Business
from .incentive import IncentiveView
from .place import GeocodeItem, GeocodeLocation, PlaceCandidate
from .verification import VerificationRequest


class ErrorKind(str, Enum):
    """Failure categories."""

    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    UPSTREAM_TIMEOUT = "upstream_timeout"
    SUPERSEDED = "superseded"


class OperationResult(BaseModel):
    """Outcome of a user-initiated operation."""

    success: bool
    message: str = ""
    error: Optional[ErrorKind] = None
    retryable: bool = False


class PlaceMatchResult(OperationResult):
    business_id: Optional[UUID] = None
    query: Optional[str] = None
    matches: list[PlaceCandidate] = Field(default_factory=list)


class PlaceAssignmentResult(OperationResult):
    business: Optional[Business] = None


class ChainMatchResult(OperationResult):
    chain: Optional[Business] = None
    similarity: float = 0.0


class IncentiveLoadResult(OperationResult):
    business_id: Optional[UUID] = None
    chain_id: Optional[UUID] = None
    incentives: list[IncentiveView] = Field(default_factory=list)
    chain_incentives_failed: bool = False


class ReviewResult(OperationResult):
    request: Optional[VerificationRequest] = None


class PendingQueueResult(OperationResult):
    requests: list[VerificationRequest] = Field(default_factory=list)


class GeocodeResult(OperationResult):
    location: Optional[GeocodeLocation] = None


class GeocodeSummary(BaseModel):
    total: int
    successful: int
    failed: int


class BatchGeocodeResult(OperationResult):
    results: list[GeocodeItem] = Field(default_factory=list)
    summary: Optional[GeocodeSummary] = None


class BusinessListResult(OperationResult):
    total: int = 0
    businesses: list[Business] = Field(default_factory=list)
