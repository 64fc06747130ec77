"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.api.routes import geocode, health, incentives, places, verification
from src.config.settings import Settings, load_settings
from src.logging import get_logger
from src.models.results import ErrorKind
from src.security.permissions import PermissionChecker
from src.security.rate_limit import RateLimiter
from src.services.geocoding import GeocodingService
from src.services.incentive_aggregation import DatabaseIncentiveSource, IncentiveAggregator
from src.services.places_client import GooglePlacesClient
from src.services.request_generation import RequestGenerationTracker
from src.storage.database import Database
from src.storage.redis_locks import RedisLockHelper

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Connect shared resources on startup and release them on shutdown."""
    settings: Settings = app.state.settings

    db = Database(settings)
    await db.connect()

    redis_locks = RedisLockHelper(settings.redis_url, ttl_seconds=settings.redis_lock_ttl_seconds)
    await redis_locks.connect()
    rate_limiter = RateLimiter(
        settings.redis_url,
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    await rate_limiter.connect()

    places_client = GooglePlacesClient(
        settings.google_maps_api_key,
        places_base_url=settings.places_base_url,
        geocode_url=settings.geocode_base_url,
        timeout=settings.external_timeout_seconds,
        search_radius_m=settings.places_search_radius_m,
    )

    app.state.db = db
    app.state.redis_locks = redis_locks
    app.state.rate_limiter = rate_limiter
    app.state.places_client = places_client
    app.state.permission_checker = PermissionChecker(admin_user_ids=settings.admin_user_ids)
    app.state.search_tracker = RequestGenerationTracker()
    app.state.incentive_aggregator = IncentiveAggregator(
        DatabaseIncentiveSource(db),
        timeout=settings.store_timeout_seconds,
    )
    app.state.geocoding_service = GeocodingService(
        places_client, batch_limit=settings.geocode_batch_limit
    )

    logger.info("api_started", app_name=settings.app_name, environment=settings.environment)

    yield

    logger.info("api_shutting_down")
    await places_client.aclose()
    await rate_limiter.disconnect()
    await redis_locks.disconnect()
    await db.disconnect()


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed input is a 400 in the same shape as service results."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{field}: {first.get('msg', 'invalid input')}" if field else first.get("msg", "Invalid input")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": message,
            "error": ErrorKind.VALIDATION.value,
            "retryable": False,
        },
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API application."""
    settings = settings or load_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Military and first responder discount directory API",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(places.router, prefix="/api/places", tags=["Places"])
    app.include_router(incentives.router, prefix="/api/businesses", tags=["Incentives"])
    app.include_router(verification.router, prefix="/api/verifications", tags=["Verification"])
    app.include_router(geocode.router, prefix="/api/geocode", tags=["Geocoding"])
    app.include_router(health.router, prefix="/health", tags=["Health"])

    return app
