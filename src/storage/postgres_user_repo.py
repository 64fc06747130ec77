"""PostgreSQL repository for User entities."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.logging import get_logger
from src.models.user import User
from src.storage.db_models import UserTable
from src.storage.repository_base import RepositoryBase

logger = get_logger(__name__)


class PostgresUserRepository(RepositoryBase[User]):
    """User repository using PostgreSQL."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_by_id(self, id: UUID) -> Optional[User]:
        """Retrieve user by ID."""
        stmt = select(UserTable).where(UserTable.id == id)
        result = await self.session.execute(stmt)
        db_user = result.scalar_one_or_none()

        if not db_user:
            return None

        return self._to_domain_model(db_user)

    async def get_telegram_user_id(self, id: UUID) -> Optional[int]:
        """Telegram chat linked to a member, if any (used for notifications)."""
        stmt = select(UserTable.telegram_user_id).where(UserTable.id == id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, entity: User) -> User:
        """Create new user."""
        db_user = UserTable(
            id=entity.id,
            email=entity.email.lower(),
            first_name=entity.first_name,
            last_name=entity.last_name,
            service_type=entity.service_type.value if entity.service_type else None,
            military_branch=entity.military_branch,
            is_admin=entity.is_admin,
        )

        self.session.add(db_user)
        await self.session.flush()
        await self.session.commit()

        logger.info("user_created", user_id=str(db_user.id))

        return self._to_domain_model(db_user)

    def _to_domain_model(self, db_user: UserTable) -> User:
        """Convert database model to domain model."""
        return User(
            id=db_user.id,
            email=db_user.email,
            first_name=db_user.first_name,
            last_name=db_user.last_name,
            service_type=db_user.service_type,
            military_branch=db_user.military_branch,
            is_admin=db_user.is_admin,
            created_at=db_user.created_at,
            updated_at=db_user.updated_at,
        )
