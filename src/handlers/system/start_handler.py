"""Startup and fallback handlers for the admin console.

Provides a /start command and a default text handler so that plain
messages get a helpful response instead of no reply.
"""

from telegram import Update
from telegram.ext import CommandHandler, ContextTypes, MessageHandler, filters

from src.logging import get_logger
from src.security.permissions import PermissionChecker

logger = get_logger(__name__)


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Welcome message; admins see the review tools."""
    permission_checker: PermissionChecker = context.bot_data["permission_checker"]
    telegram_user = update.effective_user

    if permission_checker.is_admin(telegram_user.id):
        text = (
            f"👋 Welcome back, {telegram_user.first_name}!\n\n"
            "Admin tools:\n"
            "• /pending — Review verification requests\n"
            "• /needsplaceid — Businesses missing a place ID\n"
            "• /placematch <business_id> — Find the matching place\n"
            "• /incentives <business_id> — View a business's incentives"
        )
    else:
        text = (
            f"👋 Welcome to Patriot Thanks, {telegram_user.first_name}!\n\n"
            "Look up discounts for veterans, active duty, first responders and their families:\n"
            "• /incentives <business_id> — View a business's incentives"
        )

    await update.message.reply_text(text)
    logger.info("start_displayed", user_id=telegram_user.id)


async def default_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Fallback for plain text messages."""
    logger.info("received_plain_message", user_id=update.effective_user.id)
    await update.message.reply_text("I didn't understand that. Send /help to see what I can do.")


def get_start_handler() -> CommandHandler:
    return CommandHandler("start", start_command)


def get_default_message_handler() -> MessageHandler:
    # Catch plain text messages that are not commands
    return MessageHandler(filters.TEXT & ~filters.COMMAND, default_message)
