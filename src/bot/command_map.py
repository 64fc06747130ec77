"""Command routing configuration for bot handlers.

Registers all command and callback handlers with the bot application.
"""

from telegram.ext import Application

from src.handlers.admin.place_match_handler import get_place_match_handlers
from src.handlers.admin.verification_review_handler import (
    get_verification_review_handlers,
)
from src.handlers.incentives.incentive_view_handler import get_incentive_handlers
from src.handlers.system.help_handler import get_help_handler
from src.handlers.system.start_handler import (
    get_default_message_handler,
    get_start_handler,
)
from src.logging import get_logger

logger = get_logger(__name__)


def register_handlers(app: Application) -> None:
    """
    Register all command and callback handlers with the application.

    Args:
        app: Telegram bot Application instance
    """
    app.add_handler(get_start_handler())
    app.add_handler(get_help_handler())
    logger.info("handler_registered", handler="system")

    # Verification review (admin only)
    for handler in get_verification_review_handlers():
        app.add_handler(handler)
    logger.info("handler_registered", handler="verification_review")

    # Place ID fix tool (admin only)
    for handler in get_place_match_handlers():
        app.add_handler(handler)
    logger.info("handler_registered", handler="place_match")

    for handler in get_incentive_handlers():
        app.add_handler(handler)
    logger.info("handler_registered", handler="incentives")

    # Default message handler (must be last)
    app.add_handler(get_default_message_handler())
    logger.info("handler_registered", handler="default_message")

    logger.info("all_handlers_registered")
