"""Admin review of veteran verification requests.

Requests start ``pending`` and move once to ``verified`` or ``denied``.
A decided request cannot be reviewed again.
"""

from contextlib import nullcontext
from datetime import datetime
from typing import Optional
from uuid import UUID

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from src.logging import get_logger
from src.logging.audit import AuditLogger
from src.models.results import PendingQueueResult, ReviewResult
from src.models.user import Principal
from src.models.verification import (
    DocumentSubmission,
    ReviewAction,
    ReviewDecision,
    VerificationDocument,
    VerificationRequest,
)
from src.security.permissions import PermissionChecker
from src.services.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PatriotThanksError,
    ReviewInProgressError,
    UpstreamUnavailableError,
)
from src.storage.postgres_user_repo import PostgresUserRepository
from src.storage.postgres_verification_repo import PostgresVerificationRepository
from src.storage.redis_locks import RedisLockHelper

logger = get_logger(__name__)

ALL_CAUGHT_UP_MESSAGE = "All caught up! No pending verification requests."


def _failure(result_cls, error: PatriotThanksError, **fields):
    return result_cls(
        success=False,
        message=error.message,
        error=error.kind,
        retryable=error.retryable,
        **fields,
    )


class VerificationReviewService:
    """Pending queue, review transitions and document submission."""

    def __init__(
        self,
        verification_repo: PostgresVerificationRepository,
        user_repo: PostgresUserRepository,
        permission_checker: PermissionChecker,
        lock_helper: Optional[RedisLockHelper] = None,
    ):
        self.verification_repo = verification_repo
        self.user_repo = user_repo
        self.permission_checker = permission_checker
        self.lock_helper = lock_helper

    async def list_pending(self, principal: Principal) -> PendingQueueResult:
        """Pending requests, oldest first."""
        if not self.permission_checker.can_review_verification(principal):
            AuditLogger.log_permission_denied(
                principal.user_id, "verification", "pending_queue", "list_pending"
            )
            return _failure(
                PendingQueueResult,
                AuthorizationError("Access denied: administrator privileges required"),
            )

        try:
            requests = await self.verification_repo.list_pending()
        except SQLAlchemyError as e:
            logger.error("pending_queue_load_failed", error=str(e))
            return _failure(
                PendingQueueResult,
                UpstreamUnavailableError("Verification store unavailable", original_error=e),
            )

        if not requests:
            return PendingQueueResult(success=True, message=ALL_CAUGHT_UP_MESSAGE)

        return PendingQueueResult(
            success=True,
            message=f"{len(requests)} pending verification requests",
            requests=requests,
        )

    async def review(self, principal: Principal, decision: ReviewDecision) -> ReviewResult:
        """Approve or deny a pending request.

        The caller's admin capability is checked before anything is read or
        written. Status, notes and reviewer change together in one write; on
        any failure the request keeps its prior state.
        """
        if not self.permission_checker.can_review_verification(principal):
            AuditLogger.log_permission_denied(
                principal.user_id, "verification", decision.user_id, decision.action.value
            )
            return _failure(
                ReviewResult,
                AuthorizationError("Access denied: administrator privileges required"),
            )

        notes = decision.notes.strip() if decision.notes else None

        try:
            async with self._review_lock(decision.user_id) as acquired:
                if not acquired:
                    raise ReviewInProgressError(
                        "Another review of this request is in progress. Try again shortly."
                    )
                updated = await self.verification_repo.transition_from_pending(
                    decision.user_id,
                    decision.action.target_status,
                    notes or None,
                    principal.user_id,
                )
                if updated is None:
                    await self._raise_not_pending(principal, decision.user_id)
        except (SQLAlchemyError, RedisError) as e:
            logger.error(
                "verification_review_failed",
                user_id=str(decision.user_id),
                error=str(e),
            )
            return _failure(
                ReviewResult,
                UpstreamUnavailableError("Verification store unavailable", original_error=e),
            )
        except PatriotThanksError as e:
            logger.info(
                "verification_review_rejected",
                user_id=str(decision.user_id),
                error=e.message,
            )
            return _failure(ReviewResult, e)

        approved = decision.action is ReviewAction.APPROVE
        AuditLogger.log_verification_reviewed(principal.user_id, decision.user_id, approved, notes)
        return ReviewResult(
            success=True,
            message=f"Verification {'approved' if approved else 'denied'}",
            request=updated,
        )

    async def submit_document(
        self, user_id: UUID, submission: DocumentSubmission
    ) -> ReviewResult:
        """Attach a document, creating the pending request on first upload."""
        document = VerificationDocument(
            document_type=submission.document_type,
            document_url=submission.document_url,
            uploaded_at=datetime.utcnow(),
        )

        try:
            user = await self.user_repo.get_by_id(user_id)
            if not user:
                raise NotFoundError(f"User not found: {user_id}")

            existing = await self.verification_repo.get_by_user_id(user_id)
            created = existing is None
            if created:
                request = await self.verification_repo.create(
                    VerificationRequest(
                        user_id=user_id,
                        service_type=user.service_type.value if user.service_type else None,
                        military_branch=user.military_branch,
                        documents=[document],
                    )
                )
            else:
                if existing.status.is_terminal:
                    raise ConflictError(
                        f"Verification request is already {existing.status.value}"
                    )
                request = await self.verification_repo.append_document(user_id, document)
                if request is None:
                    raise ConflictError("Verification request is no longer pending")
        except SQLAlchemyError as e:
            logger.error("verification_submission_failed", user_id=str(user_id), error=str(e))
            return _failure(
                ReviewResult,
                UpstreamUnavailableError("Verification store unavailable", original_error=e),
            )
        except PatriotThanksError as e:
            return _failure(ReviewResult, e)

        AuditLogger.log_verification_submitted(user_id, document.document_type, created)
        return ReviewResult(
            success=True,
            message="Document submitted for review",
            request=request,
        )

    def _review_lock(self, user_id: UUID):
        if self.lock_helper is None:
            return nullcontext(True)
        return self.lock_helper.acquire_review_lock(user_id)

    async def _raise_not_pending(self, principal: Principal, user_id: UUID) -> None:
        current = await self.verification_repo.get_by_user_id(user_id)
        if current is None:
            raise NotFoundError(f"No verification request found for user {user_id}")
        AuditLogger.log_review_rejected(principal.user_id, user_id, current.status.value)
        raise ConflictError(f"Verification request is already {current.status.value}")
