"""PostgreSQL repository for veteran verification requests."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.logging import get_logger
from src.models.verification import (
    VerificationDocument,
    VerificationRequest,
    VerificationStatus,
)
from src.storage.db_models import VerificationRequestTable
from src.storage.repository_base import RepositoryBase

logger = get_logger(__name__)


class PostgresVerificationRepository(RepositoryBase[VerificationRequest]):
    """Verification request repository using PostgreSQL."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_by_id(self, id: UUID) -> Optional[VerificationRequest]:
        """Retrieve request by its own ID."""
        stmt = select(VerificationRequestTable).where(VerificationRequestTable.id == id)
        result = await self.session.execute(stmt)
        row = result.scalar_one_or_none()
        return self._to_domain_model(row) if row else None

    async def get_by_user_id(self, user_id: UUID) -> Optional[VerificationRequest]:
        """Retrieve the request owned by a user."""
        stmt = select(VerificationRequestTable).where(
            VerificationRequestTable.user_id == user_id
        )
        result = await self.session.execute(stmt)
        row = result.scalar_one_or_none()
        return self._to_domain_model(row) if row else None

    async def create(self, entity: VerificationRequest) -> VerificationRequest:
        """Create a new pending request."""
        row = VerificationRequestTable(
            id=entity.id,
            user_id=entity.user_id,
            service_type=entity.service_type,
            military_branch=entity.military_branch,
            documents=[doc.model_dump(mode="json") for doc in entity.documents],
            status=entity.status,
        )
        self.session.add(row)
        await self.session.flush()
        await self.session.commit()

        logger.info(
            "verification_request_created",
            request_id=str(row.id),
            user_id=str(entity.user_id),
        )
        return self._to_domain_model(row)

    async def list_pending(self) -> list[VerificationRequest]:
        """Pending requests, oldest first."""
        stmt = (
            select(VerificationRequestTable)
            .where(VerificationRequestTable.status == VerificationStatus.PENDING)
            .order_by(VerificationRequestTable.created_at)
        )
        result = await self.session.execute(stmt)
        return [self._to_domain_model(row) for row in result.scalars().all()]

    async def append_document(
        self, user_id: UUID, document: VerificationDocument
    ) -> Optional[VerificationRequest]:
        """Append a document descriptor while the request is still pending."""
        stmt = (
            select(VerificationRequestTable)
            .where(
                VerificationRequestTable.user_id == user_id,
                VerificationRequestTable.status == VerificationStatus.PENDING,
            )
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        row = result.scalar_one_or_none()

        if not row:
            return None

        # Reassign so the JSON column is flagged dirty
        row.documents = [*row.documents, document.model_dump(mode="json")]
        await self.session.flush()
        await self.session.commit()

        logger.info(
            "verification_document_added",
            user_id=str(user_id),
            document_type=document.document_type,
            document_count=len(row.documents),
        )
        return self._to_domain_model(row)

    async def transition_from_pending(
        self,
        user_id: UUID,
        status: VerificationStatus,
        notes: Optional[str],
        reviewed_by: str,
    ) -> Optional[VerificationRequest]:
        """Move a pending request to a terminal status.

        Status, notes and reviewer are written by one conditional UPDATE, so
        either all of them change or none do. Returns None when no pending
        request exists for the user.
        """
        now = datetime.utcnow()
        stmt = (
            update(VerificationRequestTable)
            .where(
                VerificationRequestTable.user_id == user_id,
                VerificationRequestTable.status == VerificationStatus.PENDING,
            )
            .values(
                status=status,
                reviewer_notes=notes,
                reviewed_by=reviewed_by,
                reviewed_at=now,
                updated_at=now,
            )
            .returning(VerificationRequestTable)
        )
        result = await self.session.execute(stmt)
        row = result.scalar_one_or_none()

        if not row:
            return None

        await self.session.flush()
        await self.session.commit()

        logger.info(
            "verification_request_transitioned",
            user_id=str(user_id),
            status=status.value,
            reviewed_by=reviewed_by,
        )
        return self._to_domain_model(row)

    def _to_domain_model(self, row: VerificationRequestTable) -> VerificationRequest:
        """Convert database model to domain model."""
        return VerificationRequest(
            id=row.id,
            user_id=row.user_id,
            service_type=row.service_type,
            military_branch=row.military_branch,
            documents=[VerificationDocument(**doc) for doc in row.documents or []],
            status=row.status,
            reviewer_notes=row.reviewer_notes,
            reviewed_by=row.reviewed_by,
            reviewed_at=row.reviewed_at,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
