"""Business domain models."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, model_validator


class BusinessKind(str, Enum):
    """How a business relates to a chain."""

    STANDALONE = "STANDALONE"
    CHAIN_PARENT = "CHAIN_PARENT"
    CHAIN_LOCATION = "CHAIN_LOCATION"


class BusinessStatus(str, Enum):
    """Soft status; businesses are never hard-deleted."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class Address(BaseModel):
    """Street address of a business location."""

    address1: str = Field(default="", max_length=200)
    address2: Optional[str] = Field(default=None, max_length=200)
    city: str = Field(default="", max_length=100)
    state: str = Field(default="", max_length=50)
    zip_code: str = Field(default="", max_length=20)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class Business(BaseModel):
    """Business entity.

    A business is a standalone location, a chain parent (``is_chain``) or a
    chain location (``chain_id`` points at the parent), never more than one.
    """

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(min_length=1, max_length=200)
    address: Address = Field(default_factory=Address)
    business_type: Optional[str] = Field(default=None, max_length=50)
    phone: Optional[str] = Field(default=None, max_length=30)
    google_place_id: Optional[str] = Field(default=None, max_length=300)
    chain_id: Optional[UUID] = None
    chain_name: Optional[str] = None
    is_chain: bool = False
    status: BusinessStatus = BusinessStatus.ACTIVE
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="after")
    def validate_chain_role(self) -> "Business":
        """A chain parent cannot itself belong to a chain."""
        if self.is_chain and self.chain_id is not None:
            raise ValueError("a chain parent cannot have a chain_id")
        if self.chain_id is not None and self.chain_id == self.id:
            raise ValueError("a business cannot be its own chain parent")
        return self

    @property
    def kind(self) -> BusinessKind:
        if self.is_chain:
            return BusinessKind.CHAIN_PARENT
        if self.chain_id is not None:
            return BusinessKind.CHAIN_LOCATION
        return BusinessKind.STANDALONE


class PlaceIdAssignment(BaseModel):
    """Admin request to attach an external place identifier to a business."""

    business_id: UUID
    place_id: str = Field(min_length=1, max_length=300)
    confirmed: bool = Field(
        default=False,
        description="Must be true; the admin has reviewed the chosen candidate",
    )
