"""User and principal domain models."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ServiceType(str, Enum):
    """Membership status codes used across the directory."""

    VETERAN = "VT"
    ACTIVE_DUTY = "AD"
    FIRST_RESPONDER = "FR"
    SPOUSE = "SP"
    BUSINESS_OWNER = "BO"
    SUPPORTER = "SU"


class User(BaseModel):
    """Registered member."""

    id: UUID
    email: str = Field(max_length=254)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    service_type: Optional[ServiceType] = None
    military_branch: Optional[str] = Field(default=None, max_length=50)
    is_admin: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class Principal(BaseModel):
    """Identity of the caller as asserted by the auth provider."""

    user_id: str = Field(min_length=1)
    email: Optional[str] = None
    is_admin: bool = False
