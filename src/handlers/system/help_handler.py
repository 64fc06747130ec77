"""Help command handler with admin-specific explanations."""

from telegram import Update
from telegram.ext import CommandHandler, ContextTypes

from src.logging import get_logger
from src.security.permissions import PermissionChecker

logger = get_logger(__name__)


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Show help for the caller's role."""
    permission_checker: PermissionChecker = context.bot_data["permission_checker"]
    telegram_user = update.effective_user
    is_admin = permission_checker.is_admin(telegram_user.id)

    if is_admin:
        text = (
            "🆘 <b>Admin Help</b>\n\n"
            "<b>Verification Review:</b>\n"
            "• /pending — Pending requests with approve/deny buttons\n"
            "• /approve &lt;user_id&gt; [notes] — Approve with optional notes\n"
            "• /deny &lt;user_id&gt; &lt;notes&gt; — Deny with a reason\n\n"
            "<b>Place IDs:</b>\n"
            "• /needsplaceid [search] — Businesses missing a place ID\n"
            "• /placematch &lt;business_id&gt; — Ranked place candidates; "
            "nothing is saved until you confirm\n\n"
            "<b>Incentives:</b>\n"
            "• /incentives &lt;business_id&gt; — Local and chain-wide incentives\n\n"
            "A decided request cannot be reviewed again."
        )
    else:
        text = (
            "🆘 <b>Help &amp; Commands</b>\n\n"
            "• /incentives &lt;business_id&gt; — Local and chain-wide incentives\n"
            "• /start — Show the welcome message"
        )

    await update.message.reply_text(text, parse_mode="HTML")
    logger.info("help_displayed", user_id=telegram_user.id, is_admin=is_admin)


def get_help_handler() -> CommandHandler:
    """Create the /help command handler."""
    return CommandHandler("help", help_command)
