"""Structured audit logging for admin actions.

Provides an audit trail for verification decisions and business edits.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from src.logging import get_logger

logger = get_logger(__name__)


class AuditEventType(str, Enum):
    """Types of auditable events."""

    # Verification review
    VERIFICATION_SUBMITTED = "verification_submitted"
    VERIFICATION_APPROVED = "verification_approved"
    VERIFICATION_DENIED = "verification_denied"
    VERIFICATION_REVIEW_REJECTED = "verification_review_rejected"

    # Business data
    PLACE_ID_ASSIGNED = "place_id_assigned"

    # Security
    PERMISSION_DENIED = "permission_denied"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"


class AuditLogger:
    """Centralized audit logging service."""

    @staticmethod
    def log_event(
        event_type: AuditEventType,
        actor_id: str,
        resource_type: str,
        resource_id: UUID | str,
        action: str,
        success: bool = True,
        metadata: Optional[dict[str, Any]] = None,
        error: Optional[str] = None,
    ) -> None:
        """
        Log an auditable event with structured context.

        Args:
            event_type: Type of audit event
            actor_id: Principal performing the action
            resource_type: Type of resource (verification, business)
            resource_id: ID of the affected resource
            action: Human-readable action description
            success: Whether the action succeeded
            metadata: Additional context
            error: Error message if action failed
        """
        audit_entry = {
            "event_type": event_type.value,
            "actor_id": actor_id,
            "resource_type": resource_type,
            "resource_id": str(resource_id),
            "action": action,
            "success": success,
            "timestamp": datetime.utcnow().isoformat(),
            "metadata": metadata or {},
        }

        if error:
            audit_entry["error"] = error

        logger.info("audit_event", **audit_entry)

    @staticmethod
    def log_verification_reviewed(
        actor_id: str,
        user_id: UUID,
        approved: bool,
        notes: Optional[str],
    ) -> None:
        """Log a verification decision."""
        AuditLogger.log_event(
            event_type=(
                AuditEventType.VERIFICATION_APPROVED
                if approved
                else AuditEventType.VERIFICATION_DENIED
            ),
            actor_id=actor_id,
            resource_type="verification",
            resource_id=user_id,
            action=f"{'Approved' if approved else 'Denied'} veteran verification",
            metadata={"approved": approved, "has_notes": bool(notes)},
        )

    @staticmethod
    def log_review_rejected(
        actor_id: str,
        user_id: UUID,
        current_status: str,
    ) -> None:
        """Log an attempt to review a request that is already decided."""
        AuditLogger.log_event(
            event_type=AuditEventType.VERIFICATION_REVIEW_REJECTED,
            actor_id=actor_id,
            resource_type="verification",
            resource_id=user_id,
            action="Review rejected: request already resolved",
            success=False,
            metadata={"current_status": current_status},
        )

    @staticmethod
    def log_verification_submitted(
        user_id: UUID,
        document_type: str,
        created: bool,
    ) -> None:
        """Log a document submission."""
        AuditLogger.log_event(
            event_type=AuditEventType.VERIFICATION_SUBMITTED,
            actor_id=str(user_id),
            resource_type="verification",
            resource_id=user_id,
            action="Submitted verification document",
            metadata={"document_type": document_type, "created_request": created},
        )

    @staticmethod
    def log_place_id_assigned(
        actor_id: str,
        business_id: UUID,
        business_name: str,
        place_id: str,
    ) -> None:
        """Log an external place identifier assignment."""
        AuditLogger.log_event(
            event_type=AuditEventType.PLACE_ID_ASSIGNED,
            actor_id=actor_id,
            resource_type="business",
            resource_id=business_id,
            action=f"Assigned place ID to business: {business_name}",
            metadata={"place_id": place_id},
        )

    @staticmethod
    def log_permission_denied(
        actor_id: str,
        resource_type: str,
        resource_id: UUID | str,
        attempted_action: str,
    ) -> None:
        """Log unauthorized access attempts."""
        AuditLogger.log_event(
            event_type=AuditEventType.PERMISSION_DENIED,
            actor_id=actor_id,
            resource_type=resource_type,
            resource_id=resource_id,
            action=f"Permission denied: {attempted_action}",
            success=False,
            metadata={"attempted_action": attempted_action},
        )

    @staticmethod
    def log_rate_limit_exceeded(
        actor_id: str,
        action: str,
        limit: int,
        window_seconds: int,
    ) -> None:
        """Log rate limit violations."""
        AuditLogger.log_event(
            event_type=AuditEventType.RATE_LIMIT_EXCEEDED,
            actor_id=actor_id,
            resource_type="system",
            resource_id="rate_limiter",
            action=f"Rate limit exceeded: {action}",
            success=False,
            metadata={
                "action": action,
                "limit": limit,
                "window_seconds": window_seconds,
            },
        )
