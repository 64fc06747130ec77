"""Veteran verification request models."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

MAX_DOCUMENT_BYTES = 5 * 1024 * 1024
ALLOWED_DOCUMENT_CONTENT_TYPES = ("application/pdf", "image/jpeg", "image/png")


class VerificationStatus(str, Enum):
    """Verification lifecycle status."""

    PENDING = "pending"
    VERIFIED = "verified"
    DENIED = "denied"

    @property
    def is_terminal(self) -> bool:
        return self is not VerificationStatus.PENDING


class ReviewAction(str, Enum):
    """Admin decision on a pending request."""

    APPROVE = "approve"
    DENY = "deny"

    @property
    def target_status(self) -> VerificationStatus:
        if self is ReviewAction.APPROVE:
            return VerificationStatus.VERIFIED
        return VerificationStatus.DENIED


class VerificationDocument(BaseModel):
    """Descriptor of an uploaded supporting document."""

    document_type: str = Field(min_length=1, max_length=50)
    document_url: str = Field(min_length=1, max_length=500)
    uploaded_at: datetime = Field(default_factory=datetime.utcnow)


class DocumentSubmission(BaseModel):
    """Input model for adding a document to a user's verification request."""

    document_type: str = Field(min_length=1, max_length=50)
    document_url: str = Field(min_length=1, max_length=500)
    content_type: str
    size_bytes: int = Field(gt=0, le=MAX_DOCUMENT_BYTES)

    @field_validator("content_type")
    @classmethod
    def validate_content_type(cls, v: str) -> str:
        """Only PDF, JPEG and PNG documents are accepted."""
        if v not in ALLOWED_DOCUMENT_CONTENT_TYPES:
            raise ValueError("Invalid file type. Only PDF, JPG, and PNG are allowed.")
        return v


class VerificationRequest(BaseModel):
    """Verification request entity."""

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    service_type: Optional[str] = None
    military_branch: Optional[str] = None
    documents: list[VerificationDocument] = Field(default_factory=list)
    status: VerificationStatus = VerificationStatus.PENDING
    reviewer_notes: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class ReviewDecision(BaseModel):
    """Input model for an admin review."""

    user_id: UUID
    action: ReviewAction
    notes: Optional[str] = Field(default=None, max_length=2000)
