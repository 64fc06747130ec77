"""Incentive domain models."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


class IncentiveCategory(str, Enum):
    """Eligible audience codes."""

    VETERAN = "VT"
    ACTIVE_DUTY = "AD"
    FIRST_RESPONDER = "FR"
    SPOUSE = "SP"
    OTHER = "OT"
    NOT_AVAILABLE = "NA"
    NO_CHAIN_INCENTIVE = "NC"


CATEGORY_LABELS = {
    IncentiveCategory.VETERAN: "Veterans",
    IncentiveCategory.ACTIVE_DUTY: "Active Duty",
    IncentiveCategory.FIRST_RESPONDER: "First Responders",
    IncentiveCategory.SPOUSE: "Spouses",
    IncentiveCategory.OTHER: "Other",
    IncentiveCategory.NOT_AVAILABLE: "Not Available",
    IncentiveCategory.NO_CHAIN_INCENTIVE: "No Chain Incentives",
}


class DiscountType(str, Enum):
    """How the amount is applied."""

    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "dollar"


class IncentiveScope(str, Enum):
    """Where an incentive applies."""

    LOCAL = "Local"
    CHAIN_WIDE = "Chain-wide"


def _validate_categories(categories: list[IncentiveCategory]) -> list[IncentiveCategory]:
    if not categories:
        raise ValueError("at least one eligible category is required")
    if IncentiveCategory.NOT_AVAILABLE in categories and len(set(categories)) > 1:
        raise ValueError("'NA' cannot be combined with other categories")
    return categories


class Incentive(BaseModel):
    """Location-specific incentive."""

    id: UUID = Field(default_factory=uuid4)
    business_id: UUID
    eligible_categories: list[IncentiveCategory]
    amount: Decimal = Field(ge=0)
    discount_type: DiscountType = DiscountType.PERCENTAGE
    information: Optional[str] = None
    other_description: str = ""
    is_available: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("eligible_categories")
    @classmethod
    def validate_categories(cls, v: list[IncentiveCategory]) -> list[IncentiveCategory]:
        """Require at least one category and keep NA exclusive."""
        return _validate_categories(v)


class ChainIncentive(BaseModel):
    """Incentive defined once on a chain parent."""

    id: UUID = Field(default_factory=uuid4)
    chain_id: UUID
    eligible_categories: list[IncentiveCategory]
    amount: Decimal = Field(ge=0, le=100)
    discount_type: Optional[DiscountType] = None
    description: Optional[str] = None
    information: Optional[str] = None
    other_description: Optional[str] = None
    is_active: Optional[bool] = True
    created_at: Optional[datetime] = None

    @field_validator("eligible_categories")
    @classmethod
    def validate_categories(cls, v: list[IncentiveCategory]) -> list[IncentiveCategory]:
        """Require at least one category and keep NA exclusive."""
        return _validate_categories(v)


class IncentiveView(BaseModel):
    """One entry of the merged incentive list shown for a business."""

    id: str
    business_id: Optional[UUID] = None
    eligible_categories: list[IncentiveCategory]
    amount: Decimal
    discount_type: DiscountType
    information: Optional[str] = None
    other_description: Optional[str] = None
    is_available: bool
    is_chain_wide: bool
    scope: IncentiveScope
    created_at: Optional[datetime] = None
    formatted_date: str

    @property
    def category_labels(self) -> list[str]:
        return [CATEGORY_LABELS[c] for c in self.eligible_categories]
