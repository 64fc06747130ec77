"""Place matching workflow for the admin place-ID fix tool.

Search ranks external place candidates for a business; assignment writes
the chosen place identifier only after explicit confirmation.
"""

from typing import Hashable, Optional
from uuid import UUID

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from src.logging import get_logger
from src.logging.audit import AuditLogger
from src.models.business import Business, PlaceIdAssignment
from src.models.results import (
    BusinessListResult,
    ChainMatchResult,
    ErrorKind,
    OperationResult,
    PlaceAssignmentResult,
    PlaceMatchResult,
)
from src.models.user import Principal
from src.security.permissions import PermissionChecker
from src.security.rate_limit import RateLimiter
from src.services.errors import (
    AuthorizationError,
    ConflictError,
    InputValidationError,
    NotFoundError,
    PatriotThanksError,
    RateLimitExceededError,
    UpstreamUnavailableError,
)
from src.services.place_matching import (
    build_search_query,
    calculate_name_similarity,
    rank_candidates,
)
from src.services.places_client import GooglePlacesClient
from src.services.request_generation import RequestGenerationTracker
from src.storage.postgres_business_repo import PostgresBusinessRepository

logger = get_logger(__name__)

NO_MATCHES_MESSAGE = (
    "No matching places found. Try a different business or search manually."
)
PLACE_SEARCH_ACTION = "place_search"


def _failure(result_cls, error: PatriotThanksError, **fields):
    return result_cls(
        success=False,
        message=error.message,
        error=error.kind,
        retryable=error.retryable,
        **fields,
    )


class PlaceMatchService:
    """Search, rank and assign external place identifiers."""

    def __init__(
        self,
        places_client: GooglePlacesClient,
        business_repo: PostgresBusinessRepository,
        permission_checker: PermissionChecker,
        tracker: Optional[RequestGenerationTracker] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        """
        Initialize place match service.

        Args:
            places_client: External place search client
            business_repo: Business store for lookups and the place ID write
            permission_checker: Admin capability checks
            tracker: Shared stale-response guard; one per process
            rate_limiter: Optional limiter for billable searches
        """
        self.places_client = places_client
        self.business_repo = business_repo
        self.permission_checker = permission_checker
        self.tracker = tracker or RequestGenerationTracker()
        self.rate_limiter = rate_limiter

    async def search_for_business(
        self,
        principal: Principal,
        business: Business,
        requester: Optional[Hashable] = None,
    ) -> PlaceMatchResult:
        """Rank place candidates for a business record.

        A failed or empty search is reported as "no matches" with a retry
        hint; a response overtaken by a newer search from the same requester
        is discarded.
        """
        requester = requester or principal.user_id
        query = build_search_query(business)
        base = {"business_id": business.id, "query": query}

        try:
            if not self.permission_checker.can_assign_place_id(principal):
                AuditLogger.log_permission_denied(
                    principal.user_id, "business", business.id, "search_places"
                )
                raise AuthorizationError("Access denied: administrator privileges required")
            if not query:
                raise InputValidationError("Business name or address is required to search")
            await self._check_rate_limit(principal)
        except PatriotThanksError as e:
            return _failure(PlaceMatchResult, e, **base)

        token = self.tracker.begin(requester)
        try:
            candidates = await self.places_client.search_text(
                query,
                latitude=business.address.latitude,
                longitude=business.address.longitude,
            )
        except PatriotThanksError as e:
            if not self.tracker.is_current(requester, token):
                return self._superseded(PlaceMatchResult, **base)
            logger.warning(
                "place_search_failed",
                business_id=str(business.id),
                error=e.message,
                retryable=e.retryable,
            )
            return PlaceMatchResult(
                success=False,
                message=f"{NO_MATCHES_MESSAGE} ({e.message})",
                error=e.kind,
                retryable=True,
                **base,
            )
        finally:
            is_current = self.tracker.is_current(requester, token)
            self.tracker.finish(requester, token)

        if not is_current:
            return self._superseded(PlaceMatchResult, **base)

        ranked = rank_candidates(business, candidates)
        logger.info(
            "place_candidates_ranked",
            business_id=str(business.id),
            candidate_count=len(ranked),
            best_score=ranked[0].score if ranked else None,
        )

        if not ranked:
            return PlaceMatchResult(
                success=True, message=NO_MATCHES_MESSAGE, retryable=True, **base
            )

        return PlaceMatchResult(
            success=True,
            message=f"Found {len(ranked)} potential matches",
            matches=ranked,
            **base,
        )

    async def search_for_business_id(
        self,
        principal: Principal,
        business_id: UUID,
        requester: Optional[Hashable] = None,
    ) -> PlaceMatchResult:
        """Look up a stored business, then search for it."""
        try:
            business = await self.business_repo.get_by_id(business_id)
        except SQLAlchemyError as e:
            logger.error("business_lookup_failed", business_id=str(business_id), error=str(e))
            return _failure(
                PlaceMatchResult,
                UpstreamUnavailableError("Business store unavailable", original_error=e),
                business_id=business_id,
            )
        if not business:
            return _failure(
                PlaceMatchResult,
                NotFoundError(f"Business not found: {business_id}"),
                business_id=business_id,
            )
        return await self.search_for_business(principal, business, requester)

    async def assign_place_id(
        self, principal: Principal, assignment: PlaceIdAssignment
    ) -> PlaceAssignmentResult:
        """Attach a confirmed place identifier to a business."""
        try:
            if not self.permission_checker.can_assign_place_id(principal):
                AuditLogger.log_permission_denied(
                    principal.user_id, "business", assignment.business_id, "assign_place_id"
                )
                raise AuthorizationError("Access denied: administrator privileges required")
            if not assignment.confirmed:
                raise InputValidationError(
                    "Place ID assignment must be confirmed before it is saved"
                )

            business = await self.business_repo.get_by_id(assignment.business_id)
            if not business:
                raise NotFoundError(f"Business not found: {assignment.business_id}")

            existing = await self.business_repo.get_by_place_id(assignment.place_id)
            if existing and existing.id != business.id:
                raise ConflictError(
                    f"Place ID is already assigned to '{existing.name}'"
                )

            updated = await self.business_repo.assign_place_id(
                business.id, assignment.place_id
            )
            if not updated:
                raise NotFoundError(f"Business not found: {assignment.business_id}")
        except SQLAlchemyError as e:
            logger.error("place_id_assignment_failed", business_id=str(assignment.business_id), error=str(e))
            return _failure(
                PlaceAssignmentResult,
                UpstreamUnavailableError("Business store unavailable", original_error=e),
            )
        except PatriotThanksError as e:
            logger.warning(
                "place_id_assignment_rejected",
                business_id=str(assignment.business_id),
                error=e.message,
            )
            return _failure(PlaceAssignmentResult, e)

        AuditLogger.log_place_id_assigned(
            principal.user_id, updated.id, updated.name, assignment.place_id
        )
        return PlaceAssignmentResult(
            success=True,
            message=f"Place ID assigned to {updated.name}",
            business=updated,
        )

    async def list_businesses_needing_place_id(
        self, principal: Principal, search_term: Optional[str] = None
    ) -> BusinessListResult:
        """Active businesses without an external place identifier."""
        try:
            self._require_admin(principal, "list_missing_place_ids")
            businesses = await self.business_repo.list_without_place_id(search_term or None)
        except SQLAlchemyError as e:
            logger.error("business_list_failed", error=str(e))
            return _failure(
                BusinessListResult,
                UpstreamUnavailableError("Business store unavailable", original_error=e),
            )
        except PatriotThanksError as e:
            return _failure(BusinessListResult, e)
        return BusinessListResult(
            success=True,
            message=f"{len(businesses)} businesses need a place ID",
            total=len(businesses),
            businesses=businesses,
        )

    async def place_exists(self, principal: Principal, place_id: str) -> OperationResult:
        """Whether a place identifier is already used by some business."""
        try:
            self._require_admin(principal, "check_place_id")
            if not place_id:
                raise InputValidationError("Place ID is required")
            business = await self.business_repo.get_by_place_id(place_id)
        except SQLAlchemyError as e:
            logger.error("place_lookup_failed", place_id=place_id, error=str(e))
            return _failure(
                OperationResult,
                UpstreamUnavailableError("Business store unavailable", original_error=e),
            )
        except PatriotThanksError as e:
            return _failure(OperationResult, e)
        return OperationResult(
            success=True,
            message="exists" if business else "not_found",
        )

    async def find_matching_chain(
        self, principal: Principal, place_name: str
    ) -> ChainMatchResult:
        """Chain parent whose name best matches a place name."""
        try:
            self._require_admin(principal, "match_chain")
            if not place_name or not place_name.strip():
                raise InputValidationError("Place name is required")
            chains = await self.business_repo.search_chains(place_name.strip())
            if not chains:
                raise NotFoundError("No matching chain found")
        except SQLAlchemyError as e:
            logger.error("chain_lookup_failed", place_name=place_name, error=str(e))
            return _failure(
                ChainMatchResult,
                UpstreamUnavailableError("Business store unavailable", original_error=e),
            )
        except PatriotThanksError as e:
            return _failure(ChainMatchResult, e)

        scored = [(calculate_name_similarity(chain.name, place_name), chain) for chain in chains]
        similarity, best = max(scored, key=lambda pair: pair[0])
        return ChainMatchResult(
            success=True,
            message=f"Matched chain {best.name}",
            chain=best,
            similarity=similarity,
        )

    def _require_admin(
        self, principal: Principal, action: str, resource_id: UUID | str = "place_ids"
    ) -> None:
        if not self.permission_checker.can_assign_place_id(principal):
            AuditLogger.log_permission_denied(principal.user_id, "business", resource_id, action)
            raise AuthorizationError("Access denied: administrator privileges required")

    async def _check_rate_limit(self, principal: Principal) -> None:
        if self.rate_limiter is None:
            return
        try:
            allowed, retry_after = await self.rate_limiter.check_rate_limit(
                principal.user_id, PLACE_SEARCH_ACTION
            )
        except RedisError as e:
            # Searches stay available while Redis is down
            logger.warning("rate_limit_check_failed", requester=principal.user_id, error=str(e))
            return
        if not allowed:
            AuditLogger.log_rate_limit_exceeded(
                principal.user_id,
                PLACE_SEARCH_ACTION,
                self.rate_limiter.max_requests,
                self.rate_limiter.window_seconds,
            )
            raise RateLimitExceededError(
                f"Too many searches. Please wait {retry_after} seconds before trying again."
            )

    @staticmethod
    def _superseded(result_cls, **fields):
        return result_cls(
            success=False,
            message="Superseded by a newer search",
            error=ErrorKind.SUPERSEDED,
            **fields,
        )
