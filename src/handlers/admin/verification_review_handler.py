"""Admin review handlers for veteran verification requests."""

from typing import Awaitable, Callable, Optional
from uuid import UUID

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.error import TelegramError
from telegram.ext import CallbackQueryHandler, CommandHandler, ContextTypes

from src.bot.services import build_review_service
from src.handlers import ERROR_TEMPLATES, format_result_error
from src.logging import get_logger
from src.models.verification import ReviewAction, ReviewDecision, VerificationRequest
from src.security.permissions import PermissionChecker
from src.storage.database import Database
from src.storage.postgres_user_repo import PostgresUserRepository

logger = get_logger(__name__)

PENDING_PAGE_SIZE = 10


def _format_request(request: VerificationRequest) -> str:
    documents = ", ".join(doc.document_type for doc in request.documents) or "none"
    return (
        f"👤 User: {request.user_id}\n"
        f"🎖 Service: {request.service_type or 'N/A'}"
        f"{' / ' + request.military_branch if request.military_branch else ''}\n"
        f"📎 Documents: {documents}\n"
        f"🕒 Submitted: {request.created_at:%Y-%m-%d %H:%M}\n"
    )


async def list_pending_verifications(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """List pending verification requests, oldest first (admin only)."""
    telegram_user = update.effective_user
    permission_checker: PermissionChecker = context.bot_data["permission_checker"]

    if not permission_checker.is_admin(telegram_user.id):
        await update.message.reply_text(ERROR_TEMPLATES["permission_denied"]())
        return

    principal = permission_checker.telegram_principal(telegram_user.id)
    db: Database = context.bot_data["db"]
    async with db.session() as session:
        service = build_review_service(session, context.bot_data)
        result = await service.list_pending(principal)

    if not result.success:
        await update.message.reply_text(format_result_error(result))
        return

    if not result.requests:
        await update.message.reply_text(f"✅ {result.message}")
        return

    shown = result.requests[:PENDING_PAGE_SIZE]
    text = f"📋 Pending Verification Requests ({len(result.requests)}):\n\n"
    text += "\n".join(_format_request(request) for request in shown)

    keyboard = []
    for request in shown:
        keyboard.append([
            InlineKeyboardButton(
                f"✅ Approve {str(request.user_id)[:8]}",
                callback_data=f"approve_verification:{request.user_id}",
            ),
            InlineKeyboardButton(
                f"❌ Deny {str(request.user_id)[:8]}",
                callback_data=f"deny_verification:{request.user_id}",
            ),
        ])

    await update.message.reply_text(text, reply_markup=InlineKeyboardMarkup(keyboard))


async def _notify_member(
    context: ContextTypes.DEFAULT_TYPE,
    chat_id: Optional[int],
    approved: bool,
    notes: Optional[str],
) -> None:
    if not chat_id:
        return

    if approved:
        text = (
            "🎉 Your military/first responder status has been verified!\n\n"
            "Thank you for your service."
        )
    else:
        text = (
            "Your verification request could not be approved at this time.\n\n"
            + (f"Reviewer notes: {notes}\n\n" if notes else "")
            + "If you believe this is an error, please contact support."
        )

    try:
        await context.bot.send_message(chat_id=chat_id, text=text)
    except TelegramError as e:
        logger.error("failed_to_notify_member", chat_id=chat_id, error=str(e))


async def _perform_review(
    context: ContextTypes.DEFAULT_TYPE,
    telegram_user_id: int,
    user_id: UUID,
    action: ReviewAction,
    notes: Optional[str],
    reply: Callable[[str], Awaitable[object]],
) -> None:
    permission_checker: PermissionChecker = context.bot_data["permission_checker"]
    principal = permission_checker.telegram_principal(telegram_user_id)
    decision = ReviewDecision(user_id=user_id, action=action, notes=notes)

    chat_id = None
    db: Database = context.bot_data["db"]
    async with db.session() as session:
        service = build_review_service(session, context.bot_data)
        result = await service.review(principal, decision)
        if result.success:
            chat_id = await PostgresUserRepository(session).get_telegram_user_id(user_id)

    if not result.success:
        await reply(format_result_error(result))
        return

    approved = action is ReviewAction.APPROVE
    await _notify_member(context, chat_id, approved, decision.notes)

    verb = "approved" if approved else "denied"
    suffix = "Member has been notified." if chat_id else "Member has no linked chat to notify."
    await reply(f"{'✅' if approved else '❌'} Verification for {user_id} {verb}.\n{suffix}")


async def handle_review_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle approve/deny buttons from the pending list."""
    query = update.callback_query
    await query.answer()

    telegram_user = update.effective_user
    permission_checker: PermissionChecker = context.bot_data["permission_checker"]

    if not permission_checker.is_admin(telegram_user.id):
        await query.edit_message_text("❌ Unauthorized action.")
        return

    prefix, user_id_str = query.data.split(":", 1)
    action = ReviewAction.APPROVE if prefix == "approve_verification" else ReviewAction.DENY
    try:
        user_id = UUID(user_id_str)
    except ValueError:
        await query.edit_message_text("❌ Invalid request reference.")
        return

    await _perform_review(
        context, telegram_user.id, user_id, action, None, query.edit_message_text
    )


async def _review_command(
    update: Update, context: ContextTypes.DEFAULT_TYPE, action: ReviewAction
) -> None:
    telegram_user = update.effective_user
    permission_checker: PermissionChecker = context.bot_data["permission_checker"]

    if not permission_checker.is_admin(telegram_user.id):
        await update.message.reply_text(ERROR_TEMPLATES["permission_denied"]())
        return

    command = action.value
    if not context.args:
        usage = f"/{command} <user_id> " + ("[notes]" if action is ReviewAction.APPROVE else "<notes>")
        await update.message.reply_text(f"Usage: {usage}")
        return

    try:
        user_id = UUID(context.args[0])
    except ValueError:
        await update.message.reply_text(
            ERROR_TEMPLATES["invalid_input"]("user ID format", "Use the ID shown by /pending")
        )
        return

    notes = " ".join(context.args[1:]).strip() or None
    if action is ReviewAction.DENY and not notes:
        await update.message.reply_text(
            ERROR_TEMPLATES["invalid_input"]("notes", "Give the member a reason for the denial")
        )
        return

    await _perform_review(
        context, telegram_user.id, user_id, action, notes, update.message.reply_text
    )


async def approve_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/approve <user_id> [notes]"""
    await _review_command(update, context, ReviewAction.APPROVE)


async def deny_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/deny <user_id> <notes>"""
    await _review_command(update, context, ReviewAction.DENY)


def get_verification_review_handlers() -> list:
    """Return list of verification review handlers."""
    return [
        CommandHandler("pending", list_pending_verifications),
        CommandHandler("approve", approve_command),
        CommandHandler("deny", deny_command),
        CallbackQueryHandler(
            handle_review_callback, pattern=r"^(approve|deny)_verification:"
        ),
    ]
