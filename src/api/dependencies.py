"""FastAPI dependency providers.

Long-lived collaborators are created in the app lifespan and kept on
``app.state``; repositories get a session scoped to one request.
"""

from typing import Annotated, AsyncIterator, Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import Settings
from src.logging import get_logger
from src.models.user import Principal
from src.services.geocoding import GeocodingService
from src.services.incentive_aggregation import IncentiveAggregator
from src.services.place_match_service import PlaceMatchService
from src.services.verification_review import VerificationReviewService
from src.storage.postgres_business_repo import PostgresBusinessRepository
from src.storage.postgres_user_repo import PostgresUserRepository
from src.storage.postgres_verification_repo import PostgresVerificationRepository

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_db_session(request: Request) -> AsyncIterator[AsyncSession]:
    async with request.app.state.db.session() as session:
        yield session


def decode_principal(token: str, settings: Settings) -> Principal:
    """Verify a bearer token and build the caller's principal.

    Raises:
        jwt.InvalidTokenError: If the signature, expiry or subject is invalid
    """
    claims = jwt.decode(
        token,
        settings.auth_jwt_secret,
        algorithms=[settings.auth_jwt_algorithm],
        options={"require": ["sub", "exp"]},
    )
    return Principal(
        user_id=str(claims["sub"]),
        email=claims.get("email"),
        is_admin=bool(claims.get("is_admin")) or claims.get("role") == "admin",
    )


async def get_current_principal(
    settings: Annotated[Settings, Depends(get_settings)],
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Principal:
    """Authenticated caller from the ``Authorization: Bearer`` header."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return decode_principal(credentials.credentials, settings)
    except jwt.InvalidTokenError as e:
        logger.warning("invalid_token", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


async def get_place_match_service(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PlaceMatchService:
    state = request.app.state
    return PlaceMatchService(
        state.places_client,
        PostgresBusinessRepository(session),
        state.permission_checker,
        tracker=state.search_tracker,
        rate_limiter=state.rate_limiter,
    )


async def get_review_service(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> VerificationReviewService:
    state = request.app.state
    return VerificationReviewService(
        PostgresVerificationRepository(session),
        PostgresUserRepository(session),
        state.permission_checker,
        lock_helper=state.redis_locks,
    )


def get_incentive_aggregator(request: Request) -> IncentiveAggregator:
    return request.app.state.incentive_aggregator


def get_geocoding_service(request: Request) -> GeocodingService:
    return request.app.state.geocoding_service
