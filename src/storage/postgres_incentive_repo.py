"""PostgreSQL repository for location and chain incentives."""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.logging import get_logger
from src.models.incentive import ChainIncentive, Incentive
from src.storage.db_models import ChainIncentiveTable, IncentiveTable
from src.storage.repository_base import RepositoryBase

logger = get_logger(__name__)


class PostgresIncentiveRepository(RepositoryBase[Incentive]):
    """Incentive repository using PostgreSQL."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_by_id(self, id: UUID) -> Optional[Incentive]:
        """Retrieve a location incentive by ID."""
        stmt = select(IncentiveTable).where(IncentiveTable.id == id)
        result = await self.session.execute(stmt)
        row = result.scalar_one_or_none()
        return self._to_incentive(row) if row else None

    async def create(self, entity: Incentive) -> Incentive:
        """Create a location incentive."""
        row = IncentiveTable(
            id=entity.id,
            business_id=entity.business_id,
            eligible_categories=[c.value for c in entity.eligible_categories],
            amount=entity.amount,
            discount_type=entity.discount_type,
            information=entity.information,
            other_description=entity.other_description,
            is_available=entity.is_available,
        )
        self.session.add(row)
        await self.session.flush()
        await self.session.commit()

        logger.info(
            "incentive_created",
            incentive_id=str(row.id),
            business_id=str(entity.business_id),
        )
        return self._to_incentive(row)

    async def list_for_business(self, business_id: UUID) -> list[Incentive]:
        """Location-specific incentives for one business, newest first.

        Unavailable incentives are included; they are shown as such.
        """
        stmt = (
            select(IncentiveTable)
            .where(IncentiveTable.business_id == business_id)
            .order_by(IncentiveTable.created_at.desc())
        )

        result = await self.session.execute(stmt)
        return [self._to_incentive(row) for row in result.scalars().all()]

    async def list_for_chain(self, chain_id: UUID) -> list[ChainIncentive]:
        """All chain-wide incentives of a chain, active or not."""
        stmt = (
            select(ChainIncentiveTable)
            .where(ChainIncentiveTable.chain_id == chain_id)
            .order_by(ChainIncentiveTable.created_at)
        )
        result = await self.session.execute(stmt)
        return [self._to_chain_incentive(row) for row in result.scalars().all()]

    def _to_incentive(self, row: IncentiveTable) -> Incentive:
        return Incentive(
            id=row.id,
            business_id=row.business_id,
            eligible_categories=row.eligible_categories,
            amount=Decimal(row.amount),
            discount_type=row.discount_type,
            information=row.information,
            other_description=row.other_description or "",
            is_available=row.is_available,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _to_chain_incentive(self, row: ChainIncentiveTable) -> ChainIncentive:
        return ChainIncentive(
            id=row.id,
            chain_id=row.chain_id,
            eligible_categories=row.eligible_categories,
            amount=Decimal(row.amount),
            discount_type=row.discount_type,
            description=row.description,
            information=row.information,
            other_description=row.other_description,
            is_active=row.is_active,
            created_at=row.created_at,
        )
