"""Admin place-ID fix tool: search, pick and confirm a place match."""

import secrets
from typing import Optional
from uuid import UUID

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import CallbackQueryHandler, CommandHandler, ContextTypes

from src.bot.services import build_place_match_service
from src.handlers import ERROR_TEMPLATES, format_result_error
from src.logging import get_logger
from src.models.business import PlaceIdAssignment
from src.models.place import PlaceCandidate
from src.models.results import ErrorKind
from src.security.permissions import PermissionChecker
from src.storage.database import Database

logger = get_logger(__name__)

# Candidates are kept per admin; callback data carries the search token and an index
PLACE_MATCH_STATE_KEY = "place_match"
MAX_CANDIDATES_SHOWN = 5
NEEDS_PLACE_ID_LIMIT = 20


def _retry_markup(business_id: UUID) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [[InlineKeyboardButton("🔄 Retry", callback_data=f"pm_retry:{business_id}")]]
    )


async def _run_search(
    context: ContextTypes.DEFAULT_TYPE, telegram_user_id: int, business_id: UUID
) -> Optional[tuple[str, Optional[InlineKeyboardMarkup]]]:
    """Search and render; None when a newer search replaced this one."""
    permission_checker: PermissionChecker = context.bot_data["permission_checker"]
    principal = permission_checker.telegram_principal(telegram_user_id)

    db: Database = context.bot_data["db"]
    async with db.session() as session:
        service = build_place_match_service(session, context.bot_data)
        result = await service.search_for_business_id(
            principal, business_id, requester=telegram_user_id
        )

    if result.error is ErrorKind.SUPERSEDED:
        logger.info("place_search_superseded", business_id=str(business_id))
        return None

    if not result.success:
        markup = _retry_markup(business_id) if result.retryable else None
        return format_result_error(result), markup

    if not result.matches:
        return ERROR_TEMPLATES["no_matches"](), _retry_markup(business_id)

    candidates = result.matches[:MAX_CANDIDATES_SHOWN]
    search_token = secrets.token_hex(4)
    context.user_data[PLACE_MATCH_STATE_KEY] = {
        "token": search_token,
        "business_id": str(business_id),
        "candidates": [candidate.model_dump() for candidate in candidates],
    }

    lines = [f"🔍 Matches for: {result.query}\n"]
    keyboard = []
    for index, candidate in enumerate(candidates):
        star = "⭐ " if candidate.is_best_match else ""
        lines.append(
            f"{index + 1}. {star}{candidate.name or 'Unnamed place'} "
            f"(score {candidate.score})\n   {candidate.formatted_address or 'No address'}"
        )
        keyboard.append([
            InlineKeyboardButton(
                f"{index + 1}. {(candidate.name or 'Unnamed place')[:30]}",
                callback_data=f"pm_pick:{search_token}:{index}",
            )
        ])
    keyboard.append([InlineKeyboardButton("🔄 Search again", callback_data=f"pm_retry:{business_id}")])

    return "\n".join(lines), InlineKeyboardMarkup(keyboard)


async def placematch_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/placematch <business_id>"""
    telegram_user = update.effective_user
    permission_checker: PermissionChecker = context.bot_data["permission_checker"]

    if not permission_checker.is_admin(telegram_user.id):
        await update.message.reply_text(ERROR_TEMPLATES["permission_denied"]())
        return

    if not context.args:
        await update.message.reply_text("Usage: /placematch <business_id>")
        return

    try:
        business_id = UUID(context.args[0])
    except ValueError:
        await update.message.reply_text(
            ERROR_TEMPLATES["invalid_input"]("business ID format", "Use the ID shown by /needsplaceid")
        )
        return

    rendered = await _run_search(context, telegram_user.id, business_id)
    if rendered is None:
        return
    text, markup = rendered
    await update.message.reply_text(text, reply_markup=markup)


async def handle_retry(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Re-run a search from the Retry button."""
    query = update.callback_query
    await query.answer()

    telegram_user = update.effective_user
    permission_checker: PermissionChecker = context.bot_data["permission_checker"]
    if not permission_checker.is_admin(telegram_user.id):
        await query.edit_message_text("❌ Unauthorized action.")
        return

    _, business_id_str = query.data.split(":", 1)
    rendered = await _run_search(context, telegram_user.id, UUID(business_id_str))
    if rendered is None:
        return
    text, markup = rendered
    await query.edit_message_text(text, reply_markup=markup)


def _selected_candidate(
    context: ContextTypes.DEFAULT_TYPE, selection: str
) -> Optional[tuple[UUID, PlaceCandidate]]:
    """Candidate behind ``<token>:<index>``; None when that search is no longer the latest."""
    state = context.user_data.get(PLACE_MATCH_STATE_KEY)
    search_token, _, index_str = selection.partition(":")
    if not state or state.get("token") != search_token:
        return None
    try:
        candidate = state["candidates"][int(index_str)]
    except (IndexError, ValueError):
        return None
    return UUID(state["business_id"]), PlaceCandidate(**candidate)


async def handle_pick(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Ask for explicit confirmation of the chosen candidate."""
    query = update.callback_query
    await query.answer()

    telegram_user = update.effective_user
    permission_checker: PermissionChecker = context.bot_data["permission_checker"]
    if not permission_checker.is_admin(telegram_user.id):
        await query.edit_message_text("❌ Unauthorized action.")
        return

    _, selection = query.data.split(":", 1)
    selected = _selected_candidate(context, selection)
    if not selected:
        await query.edit_message_text("⚠️ This search has expired. Run /placematch again.")
        return

    _, candidate = selected
    keyboard = [[
        InlineKeyboardButton("✅ Confirm", callback_data=f"pm_confirm:{selection}"),
        InlineKeyboardButton("✖️ Cancel", callback_data="pm_cancel"),
    ]]
    await query.edit_message_text(
        f"Assign this place?\n\n🏷 {candidate.name or 'Unnamed place'}\n"
        f"📍 {candidate.formatted_address or 'No address'}\n"
        f"🆔 {candidate.place_id}",
        reply_markup=InlineKeyboardMarkup(keyboard),
    )


async def handle_confirm(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Write the confirmed place ID."""
    query = update.callback_query
    await query.answer()

    telegram_user = update.effective_user
    permission_checker: PermissionChecker = context.bot_data["permission_checker"]
    if not permission_checker.is_admin(telegram_user.id):
        await query.edit_message_text("❌ Unauthorized action.")
        return

    _, selection = query.data.split(":", 1)
    selected = _selected_candidate(context, selection)
    if not selected:
        await query.edit_message_text("⚠️ This search has expired. Run /placematch again.")
        return

    business_id, candidate = selected
    principal = permission_checker.telegram_principal(telegram_user.id)
    assignment = PlaceIdAssignment(
        business_id=business_id, place_id=candidate.place_id, confirmed=True
    )

    db: Database = context.bot_data["db"]
    async with db.session() as session:
        service = build_place_match_service(session, context.bot_data)
        result = await service.assign_place_id(principal, assignment)

    if not result.success:
        await query.edit_message_text(format_result_error(result))
        return

    context.user_data.pop(PLACE_MATCH_STATE_KEY, None)
    await query.edit_message_text(f"✅ {result.message}\n🆔 {candidate.place_id}")


async def handle_cancel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()
    context.user_data.pop(PLACE_MATCH_STATE_KEY, None)
    await query.edit_message_text("Cancelled. Nothing was changed.")


async def needs_place_id_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/needsplaceid [search] - businesses missing a place ID."""
    telegram_user = update.effective_user
    permission_checker: PermissionChecker = context.bot_data["permission_checker"]

    if not permission_checker.is_admin(telegram_user.id):
        await update.message.reply_text(ERROR_TEMPLATES["permission_denied"]())
        return

    search_term = " ".join(context.args).strip() if context.args else None

    principal = permission_checker.telegram_principal(telegram_user.id)
    db: Database = context.bot_data["db"]
    async with db.session() as session:
        service = build_place_match_service(session, context.bot_data)
        result = await service.list_businesses_needing_place_id(principal, search_term)

    if not result.success:
        await update.message.reply_text(format_result_error(result))
        return

    businesses = result.businesses
    if not businesses:
        await update.message.reply_text("✅ Every active business has a place ID.")
        return

    lines = [f"🏪 Businesses without a place ID ({len(businesses)}):\n"]
    for business in businesses[:NEEDS_PLACE_ID_LIMIT]:
        lines.append(
            f"• {business.name}, {business.address.city or 'N/A'} "
            f"{business.address.state or ''}\n  /placematch {business.id}"
        )
    await update.message.reply_text("\n".join(lines))


def get_place_match_handlers() -> list:
    """Return list of place matching handlers."""
    return [
        CommandHandler("placematch", placematch_command),
        CommandHandler("needsplaceid", needs_place_id_command),
        CallbackQueryHandler(handle_retry, pattern=r"^pm_retry:"),
        CallbackQueryHandler(handle_pick, pattern=r"^pm_pick:"),
        CallbackQueryHandler(handle_confirm, pattern=r"^pm_confirm:"),
        CallbackQueryHandler(handle_cancel, pattern=r"^pm_cancel$"),
    ]
