"""Merge location and chain-wide incentives for one business."""

import asyncio
from datetime import datetime
from typing import Hashable, Optional, Protocol
from uuid import UUID

from src.logging import get_logger
from src.models.business import Business
from src.models.incentive import (
    ChainIncentive,
    DiscountType,
    Incentive,
    IncentiveScope,
    IncentiveView,
)
from src.models.results import ErrorKind, IncentiveLoadResult
from src.services.errors import (
    NotFoundError,
    PatriotThanksError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from src.services.request_generation import RequestGenerationTracker
from src.storage.database import Database
from src.storage.postgres_business_repo import PostgresBusinessRepository
from src.storage.postgres_incentive_repo import PostgresIncentiveRepository

logger = get_logger(__name__)

CHAIN_ID_PREFIX = "chain_"


class IncentiveSource(Protocol):
    """Read side of the business and incentive stores."""

    async def get_business(self, business_id: UUID) -> Optional[Business]: ...

    async def list_local(self, business_id: UUID) -> list[Incentive]: ...

    async def list_chain(self, chain_id: UUID) -> list[ChainIncentive]: ...


class DatabaseIncentiveSource:
    """Incentive source backed by PostgreSQL.

    Every read opens its own session so the local and chain fetches can run
    concurrently.
    """

    def __init__(self, db: Database):
        self.db = db

    async def get_business(self, business_id: UUID) -> Optional[Business]:
        async with self.db.session() as session:
            return await PostgresBusinessRepository(session).get_by_id(business_id)

    async def list_local(self, business_id: UUID) -> list[Incentive]:
        async with self.db.session() as session:
            return await PostgresIncentiveRepository(session).list_for_business(business_id)

    async def list_chain(self, chain_id: UUID) -> list[ChainIncentive]:
        async with self.db.session() as session:
            return await PostgresIncentiveRepository(session).list_for_chain(chain_id)


def format_incentive_date(created_at: Optional[datetime]) -> str:
    """Short M/D/YYYY date for display, "N/A" when unknown."""
    if created_at is None:
        return "N/A"
    return f"{created_at.month}/{created_at.day}/{created_at.year}"


def local_to_view(incentive: Incentive) -> IncentiveView:
    return IncentiveView(
        id=str(incentive.id),
        business_id=incentive.business_id,
        eligible_categories=incentive.eligible_categories,
        amount=incentive.amount,
        discount_type=incentive.discount_type,
        information=incentive.information,
        other_description=incentive.other_description,
        is_available=incentive.is_available,
        is_chain_wide=False,
        scope=IncentiveScope.LOCAL,
        created_at=incentive.created_at,
        formatted_date=format_incentive_date(incentive.created_at),
    )


def chain_to_view(incentive: ChainIncentive, business_id: UUID) -> IncentiveView:
    """Reshape a chain incentive into a location entry for one business."""
    return IncentiveView(
        id=f"{CHAIN_ID_PREFIX}{incentive.id}",
        business_id=business_id,
        eligible_categories=incentive.eligible_categories,
        amount=incentive.amount,
        discount_type=incentive.discount_type or DiscountType.PERCENTAGE,
        information=incentive.information or incentive.description,
        other_description=incentive.other_description,
        is_available=True,
        is_chain_wide=True,
        scope=IncentiveScope.CHAIN_WIDE,
        created_at=incentive.created_at,
        formatted_date=format_incentive_date(incentive.created_at),
    )


class IncentiveAggregator:
    """Resolve the full incentive list visible for a business."""

    def __init__(
        self,
        source: IncentiveSource,
        timeout: float = 10.0,
        tracker: Optional[RequestGenerationTracker] = None,
    ):
        """
        Initialize aggregator.

        Args:
            source: Business and incentive reads
            timeout: Seconds allowed for each read
            tracker: Stale-response guard shared across calls
        """
        self.source = source
        self.timeout = timeout
        self.tracker = tracker or RequestGenerationTracker()

    async def load_for_business_id(
        self, business_id: UUID, requester: Optional[Hashable] = None
    ) -> IncentiveLoadResult:
        """Look up the business's chain, then load its incentives."""
        try:
            business = await self._bounded(self.source.get_business(business_id))
            if not business:
                raise NotFoundError(f"Business not found: {business_id}")
        except Exception as e:
            error = self._as_domain_error(e)
            if not isinstance(e, NotFoundError):
                logger.error("business_lookup_failed", business_id=str(business_id), error=str(e))
            return IncentiveLoadResult(
                success=False,
                message=error.message,
                error=error.kind,
                retryable=error.retryable,
                business_id=business_id,
            )
        return await self.load_incentives(business.id, business.chain_id, requester)

    async def load_incentives(
        self,
        business_id: UUID,
        chain_id: Optional[UUID] = None,
        requester: Optional[Hashable] = None,
    ) -> IncentiveLoadResult:
        """Fetch local and chain-wide incentives and merge them.

        The two reads run concurrently. A chain read failure is logged and
        the local list is returned on its own; a local read failure yields an
        empty list with an explanatory message.
        When a requester is given, a newer load by the same requester makes
        this one return a superseded result.
        """
        fetches = [self._bounded(self.source.list_local(business_id))]
        if chain_id is not None:
            fetches.append(self._bounded(self.source.list_chain(chain_id)))

        # Without a requester every caller is an independent viewer
        if requester is None:
            results = await asyncio.gather(*fetches, return_exceptions=True)
            is_current = True
        else:
            token = self.tracker.begin(requester)
            try:
                results = await asyncio.gather(*fetches, return_exceptions=True)
                is_current = self.tracker.is_current(requester, token)
            finally:
                self.tracker.finish(requester, token)

        if not is_current:
            return IncentiveLoadResult(
                success=False,
                message="Superseded by a newer request",
                error=ErrorKind.SUPERSEDED,
                business_id=business_id,
                chain_id=chain_id,
            )

        local = results[0]
        if isinstance(local, BaseException):
            error = self._as_domain_error(local)
            logger.error(
                "local_incentives_fetch_failed",
                business_id=str(business_id),
                error=str(local),
            )
            return IncentiveLoadResult(
                success=False,
                message=f"Could not load incentives: {error.message}",
                error=error.kind,
                retryable=error.retryable,
                business_id=business_id,
                chain_id=chain_id,
            )

        views = [local_to_view(incentive) for incentive in local]
        chain_failed = False

        if chain_id is not None:
            chain = results[1]
            if isinstance(chain, BaseException):
                chain_failed = True
                logger.warning(
                    "chain_incentives_fetch_failed",
                    business_id=str(business_id),
                    chain_id=str(chain_id),
                    error=str(chain),
                )
            else:
                # A missing flag counts as active; only explicit False is hidden
                views.extend(
                    chain_to_view(incentive, business_id)
                    for incentive in chain
                    if incentive.is_active is not False
                )

        logger.info(
            "incentives_loaded",
            business_id=str(business_id),
            chain_id=str(chain_id) if chain_id else None,
            incentive_count=len(views),
            chain_incentives_failed=chain_failed,
        )

        if not views:
            message = "No incentives found for this business"
        else:
            message = f"Found {len(views)} incentives"
        if chain_failed:
            message += " (chain-wide incentives are temporarily unavailable)"

        return IncentiveLoadResult(
            success=True,
            message=message,
            business_id=business_id,
            chain_id=chain_id,
            incentives=views,
            chain_incentives_failed=chain_failed,
        )

    async def _bounded(self, awaitable):
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise UpstreamTimeoutError("Incentive store timed out", original_error=e) from e

    @staticmethod
    def _as_domain_error(error: BaseException) -> PatriotThanksError:
        if isinstance(error, PatriotThanksError):
            return error
        return UpstreamUnavailableError("Incentive store unavailable", original_error=error)
