"""Admin console bot startup and entry point."""

import asyncio

from telegram import BotCommand
from telegram.ext import Application

from src.bot.command_map import register_handlers
from src.config import load_settings
from src.logging import get_logger, setup_logging
from src.security.permissions import PermissionChecker
from src.security.rate_limit import RateLimiter
from src.services.incentive_aggregation import DatabaseIncentiveSource, IncentiveAggregator
from src.services.places_client import GooglePlacesClient
from src.services.request_generation import RequestGenerationTracker
from src.storage.database import Database
from src.storage.redis_locks import RedisLockHelper


async def setup_bot_menu(application: Application) -> None:
    """Configure the bot menu commands."""
    commands = [
        BotCommand("start", "Start or restart the bot"),
        BotCommand("help", "Show help and commands"),
        BotCommand("pending", "Review verification requests (admins)"),
        BotCommand("needsplaceid", "Businesses missing a place ID (admins)"),
        BotCommand("placematch", "Match a business to a place (admins)"),
        BotCommand("incentives", "View a business's incentives"),
    ]

    await application.bot.set_my_commands(commands)

    logger = get_logger(__name__)
    logger.info("bot_menu_configured", command_count=len(commands))


async def main() -> None:
    """Initialize and start the admin console bot."""
    settings = load_settings()
    setup_logging(settings.log_level)
    logger = get_logger(__name__)

    if not settings.bot_token:
        raise SystemExit("BOT_TOKEN is required to run the admin console bot")

    logger.info("starting_admin_bot", environment=settings.environment)

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

    permission_checker = PermissionChecker(admin_user_ids=settings.admin_user_ids)
    incentive_aggregator = IncentiveAggregator(
        DatabaseIncentiveSource(db),
        timeout=settings.store_timeout_seconds,
    )

    application = Application.builder().token(settings.bot_token).build()

    # Long-lived collaborators; repositories are bound per update
    application.bot_data["db"] = db
    application.bot_data["redis_locks"] = redis_locks
    application.bot_data["rate_limiter"] = rate_limiter
    application.bot_data["places_client"] = places_client
    application.bot_data["permission_checker"] = permission_checker
    application.bot_data["search_tracker"] = RequestGenerationTracker()
    application.bot_data["incentive_aggregator"] = incentive_aggregator
    application.bot_data["settings"] = settings

    register_handlers(application)
    await setup_bot_menu(application)

    logger.info("bot_initialization_complete")

    await application.initialize()
    await application.start()
    await application.updater.start_polling(allowed_updates=["message", "callback_query"])

    try:
        await asyncio.Event().wait()
    except (KeyboardInterrupt, SystemExit):
        logger.info("shutting_down_bot")
    finally:
        await application.updater.stop()
        await application.stop()
        await application.shutdown()
        await places_client.aclose()
        await rate_limiter.disconnect()
        await redis_locks.disconnect()
        await db.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
