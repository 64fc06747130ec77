"""Show the merged incentive list for a business."""

from uuid import UUID

from telegram import Update
from telegram.ext import CommandHandler, ContextTypes

from src.handlers import ERROR_TEMPLATES, format_result_error
from src.logging import get_logger
from src.models.incentive import DiscountType, IncentiveView
from src.models.results import ErrorKind
from src.services.incentive_aggregation import IncentiveAggregator

logger = get_logger(__name__)


def format_amount(incentive: IncentiveView) -> str:
    if incentive.discount_type is DiscountType.FIXED_AMOUNT:
        return f"${incentive.amount:.2f} off"
    return f"{incentive.amount.normalize():f}% off"


def format_incentive(incentive: IncentiveView) -> str:
    scope = "🌐" if incentive.is_chain_wide else "📍"
    text = (
        f"{scope} {format_amount(incentive)} ({incentive.scope.value})\n"
        f"   For: {', '.join(incentive.category_labels)}\n"
        f"   Added: {incentive.formatted_date}"
    )
    if incentive.information:
        text += f"\n   {incentive.information}"
    if not incentive.is_available:
        text += "\n   ⛔ Currently unavailable"
    return text


async def incentives_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/incentives <business_id>"""
    if not context.args:
        await update.message.reply_text("Usage: /incentives <business_id>")
        return

    try:
        business_id = UUID(context.args[0])
    except ValueError:
        await update.message.reply_text(
            ERROR_TEMPLATES["invalid_input"]("business ID format", "Send a valid business ID")
        )
        return

    aggregator: IncentiveAggregator = context.bot_data["incentive_aggregator"]
    result = await aggregator.load_for_business_id(
        business_id, requester=update.effective_user.id
    )

    if result.error is ErrorKind.SUPERSEDED:
        return

    if not result.success:
        await update.message.reply_text(format_result_error(result))
        return

    if not result.incentives:
        text = "No incentives found for this business."
    else:
        text = f"🎖 Incentives ({len(result.incentives)}):\n\n" + "\n\n".join(
            format_incentive(incentive) for incentive in result.incentives
        )
    if result.chain_incentives_failed:
        text += "\n\n⚠️ Chain-wide incentives could not be loaded. Try again later."

    await update.message.reply_text(text)


def get_incentive_handlers() -> list:
    return [CommandHandler("incentives", incentives_command)]
