"""Per-update service construction for bot handlers.

Long-lived collaborators (places client, Redis helpers, trackers) live in
``bot_data``; repositories are bound to a session opened for one update.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.services.place_match_service import PlaceMatchService
from src.services.verification_review import VerificationReviewService
from src.storage.postgres_business_repo import PostgresBusinessRepository
from src.storage.postgres_user_repo import PostgresUserRepository
from src.storage.postgres_verification_repo import PostgresVerificationRepository


def build_review_service(session: AsyncSession, bot_data: dict[str, Any]) -> VerificationReviewService:
    return VerificationReviewService(
        PostgresVerificationRepository(session),
        PostgresUserRepository(session),
        bot_data["permission_checker"],
        lock_helper=bot_data.get("redis_locks"),
    )


def build_place_match_service(session: AsyncSession, bot_data: dict[str, Any]) -> PlaceMatchService:
    return PlaceMatchService(
        bot_data["places_client"],
        PostgresBusinessRepository(session),
        bot_data["permission_checker"],
        tracker=bot_data["search_tracker"],
        rate_limiter=bot_data.get("rate_limiter"),
    )
