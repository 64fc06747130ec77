"""PostgreSQL repository for Business entities."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.logging import get_logger
from src.models.business import Address, Business, BusinessStatus
from src.storage.db_models import BusinessTable
from src.storage.repository_base import RepositoryBase

logger = get_logger(__name__)


class PostgresBusinessRepository(RepositoryBase[Business]):
    """Business repository using PostgreSQL."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_by_id(self, id: UUID) -> Optional[Business]:
        """Retrieve business by ID."""
        stmt = select(BusinessTable).where(BusinessTable.id == id)
        result = await self.session.execute(stmt)
        db_business = result.scalar_one_or_none()

        if not db_business:
            return None

        return self._to_domain_model(db_business)

    async def create(self, entity: Business) -> Business:
        """Create new business."""
        db_business = BusinessTable(
            id=entity.id,
            name=entity.name,
            address1=entity.address.address1,
            address2=entity.address.address2,
            city=entity.address.city,
            state=entity.address.state,
            zip_code=entity.address.zip_code,
            latitude=entity.address.latitude,
            longitude=entity.address.longitude,
            business_type=entity.business_type,
            phone=entity.phone,
            google_place_id=entity.google_place_id,
            chain_id=entity.chain_id,
            is_chain=entity.is_chain,
            status=entity.status.value,
        )

        self.session.add(db_business)
        await self.session.flush()
        await self.session.commit()

        logger.info(
            "business_created",
            business_id=str(db_business.id),
            business_name=entity.name,
            kind=entity.kind.value,
        )

        return self._to_domain_model(db_business)

    async def get_by_place_id(self, place_id: str) -> Optional[Business]:
        """Find the business an external place identifier is assigned to."""
        stmt = select(BusinessTable).where(BusinessTable.google_place_id == place_id)
        result = await self.session.execute(stmt)
        db_business = result.scalar_one_or_none()
        return self._to_domain_model(db_business) if db_business else None

    async def list_without_place_id(
        self, search_term: Optional[str] = None, limit: int = 500
    ) -> list[Business]:
        """Active businesses that still need an external place identifier."""
        stmt = select(BusinessTable).where(
            BusinessTable.google_place_id.is_(None),
            BusinessTable.status == BusinessStatus.ACTIVE.value,
        )
        if search_term:
            pattern = f"%{search_term}%"
            stmt = stmt.where(
                or_(
                    BusinessTable.name.ilike(pattern),
                    BusinessTable.address1.ilike(pattern),
                    BusinessTable.city.ilike(pattern),
                )
            )
        stmt = stmt.order_by(BusinessTable.name).limit(limit)

        result = await self.session.execute(stmt)
        return [self._to_domain_model(row) for row in result.scalars().all()]

    async def search_chains(self, name_fragment: str) -> list[Business]:
        """Chain parents whose name contains the fragment (case-insensitive)."""
        stmt = (
            select(BusinessTable)
            .where(
                BusinessTable.is_chain.is_(True),
                BusinessTable.name.ilike(f"%{name_fragment}%"),
            )
            .order_by(BusinessTable.name)
        )
        result = await self.session.execute(stmt)
        return [self._to_domain_model(row) for row in result.scalars().all()]

    async def assign_place_id(self, business_id: UUID, place_id: str) -> Optional[Business]:
        """Partial update setting only the external place identifier."""
        stmt = (
            update(BusinessTable)
            .where(BusinessTable.id == business_id)
            .values(google_place_id=place_id, updated_at=datetime.utcnow())
            .returning(BusinessTable)
        )
        result = await self.session.execute(stmt)
        db_business = result.scalar_one_or_none()

        if not db_business:
            return None

        await self.session.flush()
        await self.session.commit()

        logger.info(
            "business_place_id_assigned",
            business_id=str(business_id),
            place_id=place_id,
        )

        return self._to_domain_model(db_business)

    def _to_domain_model(self, db_business: BusinessTable) -> Business:
        """Convert database model to domain model."""
        address = Address(
            address1=db_business.address1 or "",
            address2=db_business.address2,
            city=db_business.city or "",
            state=db_business.state or "",
            zip_code=db_business.zip_code or "",
            latitude=float(db_business.latitude) if db_business.latitude is not None else None,
            longitude=float(db_business.longitude) if db_business.longitude is not None else None,
        )

        return Business(
            id=db_business.id,
            name=db_business.name,
            address=address,
            business_type=db_business.business_type,
            phone=db_business.phone,
            google_place_id=db_business.google_place_id,
            chain_id=db_business.chain_id,
            is_chain=db_business.is_chain,
            status=db_business.status,
            created_at=db_business.created_at,
            updated_at=db_business.updated_at,
        )
