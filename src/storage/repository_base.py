"""Repository base interface."""

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar
from uuid import UUID

T = TypeVar("T")


class RepositoryBase(ABC, Generic[T]):
    """Base repository interface for lookups by ID.

    Records are never hard-deleted, so there is no delete operation.
    """

    @abstractmethod
    async def get_by_id(self, id: UUID) -> Optional[T]:
        """Retrieve entity by ID."""
        pass

    @abstractmethod
    async def create(self, entity: T) -> T:
        """Create new entity."""
        pass
