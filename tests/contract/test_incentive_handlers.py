"""Contract tests for the /incentives command."""

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

from src.models.incentive import DiscountType, IncentiveCategory, IncentiveScope, IncentiveView
from src.models.results import ErrorKind, IncentiveLoadResult


class MockUpdate:
    """Mock Telegram Update object."""

    def __init__(self, user_id=12345):
        self.effective_user = Mock()
        self.effective_user.id = user_id
        self.message = Mock()
        self.message.reply_text = AsyncMock()


class MockContext:
    """Mock Telegram Context object."""

    def __init__(self, args=None, result=None):
        self.args = args or []
        self.user_data = {}
        aggregator = Mock()
        aggregator.load_for_business_id = AsyncMock(return_value=result)
        self.bot_data = {"incentive_aggregator": aggregator}


def view(**overrides):
    fields = {
        "id": str(uuid4()),
        "eligible_categories": [IncentiveCategory.VETERAN, IncentiveCategory.SPOUSE],
        "amount": Decimal("10.00"),
        "discount_type": DiscountType.PERCENTAGE,
        "is_available": True,
        "is_chain_wide": False,
        "scope": IncentiveScope.LOCAL,
        "created_at": datetime(2024, 3, 15),
        "formatted_date": "3/15/2024",
    }
    fields.update(overrides)
    return IncentiveView(**fields)


@pytest.mark.asyncio
async def test_incentives_requires_business_id():
    from src.handlers.incentives.incentive_view_handler import incentives_command

    update = MockUpdate()
    context = MockContext()

    await incentives_command(update, context)

    update.message.reply_text.assert_called_once_with("Usage: /incentives <business_id>")


@pytest.mark.asyncio
async def test_incentives_lists_local_and_chain_entries():
    from src.handlers.incentives.incentive_view_handler import incentives_command

    business_id = uuid4()
    result = IncentiveLoadResult(
        success=True,
        message="Found 2 incentives",
        business_id=business_id,
        incentives=[
            view(),
            view(
                id="chain_1",
                amount=Decimal("5"),
                discount_type=DiscountType.FIXED_AMOUNT,
                is_chain_wide=True,
                scope=IncentiveScope.CHAIN_WIDE,
            ),
        ],
    )
    update = MockUpdate()
    context = MockContext(args=[str(business_id)], result=result)

    await incentives_command(update, context)

    text = update.message.reply_text.call_args.args[0]
    assert "Incentives (2)" in text
    assert "10% off (Local)" in text
    assert "$5.00 off (Chain-wide)" in text
    assert "Veterans, Spouses" in text
    assert "3/15/2024" in text
    context.bot_data["incentive_aggregator"].load_for_business_id.assert_awaited_once_with(
        business_id, requester=12345
    )


@pytest.mark.asyncio
async def test_incentives_warns_when_chain_entries_missing():
    from src.handlers.incentives.incentive_view_handler import incentives_command

    result = IncentiveLoadResult(
        success=True,
        message="Found 1 incentives",
        incentives=[view()],
        chain_incentives_failed=True,
    )
    update = MockUpdate()
    context = MockContext(args=[str(uuid4())], result=result)

    await incentives_command(update, context)

    assert "Chain-wide incentives could not be loaded" in update.message.reply_text.call_args.args[0]


@pytest.mark.asyncio
async def test_incentives_store_failure():
    from src.handlers.incentives.incentive_view_handler import incentives_command

    result = IncentiveLoadResult(
        success=False,
        message="Could not load incentives: Incentive store unavailable",
        error=ErrorKind.UPSTREAM_UNAVAILABLE,
        retryable=True,
    )
    update = MockUpdate()
    context = MockContext(args=[str(uuid4())], result=result)

    await incentives_command(update, context)

    text = update.message.reply_text.call_args.args[0]
    assert "Could not load incentives" in text
    assert "Please try again." in text


@pytest.mark.asyncio
async def test_incentives_superseded_sends_nothing():
    from src.handlers.incentives.incentive_view_handler import incentives_command

    result = IncentiveLoadResult(success=False, error=ErrorKind.SUPERSEDED)
    update = MockUpdate()
    context = MockContext(args=[str(uuid4())], result=result)

    await incentives_command(update, context)

    update.message.reply_text.assert_not_called()
