"""Models package - Pydantic domain models."""

from .business import Address, Business, BusinessKind, BusinessStatus, PlaceIdAssignment
from .incentive import (
    ChainIncentive,
    DiscountType,
    Incentive,
    IncentiveCategory,
    IncentiveScope,
    IncentiveView,
)
from .place import GeocodeItem, GeocodeLocation, PlaceCandidate
from .results import ErrorKind, OperationResult
from .user import Principal, ServiceType, User
from .verification import (
    DocumentSubmission,
    ReviewAction,
    ReviewDecision,
    VerificationDocument,
    VerificationRequest,
    VerificationStatus,
)

__all__ = [
    "Address",
    "Business",
    "BusinessKind",
    "BusinessStatus",
    "PlaceIdAssignment",
    "ChainIncentive",
    "DiscountType",
    "Incentive",
    "IncentiveCategory",
    "IncentiveScope",
    "IncentiveView",
    "GeocodeItem",
    "GeocodeLocation",
    "PlaceCandidate",
    "ErrorKind",
    "OperationResult",
    "Principal",
    "ServiceType",
    "User",
    "DocumentSubmission",
    "ReviewAction",
    "ReviewDecision",
    "VerificationDocument",
    "VerificationRequest",
    "VerificationStatus",
]
