"""Pytest configuration and shared fixtures."""

import sys
from datetime import datetime
from pathlib import Path
from uuid import uuid4

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest
from unittest.mock import AsyncMock, Mock

from src.models.business import Address, Business
from src.models.user import Principal
from src.security.permissions import PermissionChecker

ADMIN_TELEGRAM_ID = 99999


@pytest.fixture
def permission_checker():
    """Permission checker with one configured admin."""
    return PermissionChecker(admin_user_ids=[ADMIN_TELEGRAM_ID])


@pytest.fixture
def admin_principal():
    return Principal(user_id="admin-1", email="admin@example.com", is_admin=True)


@pytest.fixture
def member_principal():
    return Principal(user_id=str(uuid4()), email="member@example.com", is_admin=False)


@pytest.fixture
def joes_diner():
    """Business record used throughout the matching scenarios."""
    return Business(
        name="Joe's Diner",
        address=Address(
            address1="100 Main St",
            city="Austin",
            state="TX",
            zip_code="78701",
            latitude=30.2672,
            longitude=-97.7431,
        ),
        created_at=datetime(2024, 1, 1),
    )


@pytest.fixture
def mock_redis():
    """Mock Redis connection fixture."""
    return Mock()


@pytest.fixture
def mock_telegram_update():
    """Mock Telegram update fixture."""
    update = Mock()
    update.effective_user = Mock()
    update.effective_user.id = 12345
    update.effective_user.first_name = "Test"
    update.message = Mock()
    update.message.text = "/start"
    update.message.reply_text = AsyncMock()
    return update


@pytest.fixture
def mock_telegram_context(permission_checker):
    """Mock Telegram context fixture."""
    context = Mock()
    context.bot = Mock()
    context.args = []
    context.user_data = {}
    context.bot_data = {"permission_checker": permission_checker}
    return context
