"""Permission checks for admin-only operations."""

from enum import Enum

from src.models.user import Principal


class Permission(str, Enum):
    """Permission types."""

    REVIEW_VERIFICATION = "review_verification"
    ASSIGN_PLACE_ID = "assign_place_id"
    SEARCH_PLACES = "search_places"
    VIEW_INCENTIVES = "view_incentives"
    SUBMIT_VERIFICATION = "submit_verification"


ADMIN_PERMISSIONS = frozenset(
    {
        Permission.REVIEW_VERIFICATION,
        Permission.ASSIGN_PLACE_ID,
        Permission.SEARCH_PLACES,
    }
)


class PermissionChecker:
    """Check caller capabilities before any state is touched.

    Web callers carry an admin flag issued by the auth provider; the admin
    console bot identifies admins by Telegram user ID.
    """

    def __init__(self, admin_user_ids: list[int] | None = None):
        """Initialize permission checker."""
        self.admin_user_ids = admin_user_ids or []

    def is_admin(self, telegram_user_id: int) -> bool:
        """Check if a Telegram user is a configured admin."""
        return telegram_user_id in self.admin_user_ids

    def has_permission(self, principal: Principal, permission: Permission) -> bool:
        """Check a web principal against a permission."""
        if permission in ADMIN_PERMISSIONS:
            return principal.is_admin
        return True

    def can_review_verification(self, principal: Principal) -> bool:
        """Approving or denying verification requests is admin only."""
        return self.has_permission(principal, Permission.REVIEW_VERIFICATION)

    def can_assign_place_id(self, principal: Principal) -> bool:
        """Editing a business's external place identifier is admin only."""
        return self.has_permission(principal, Permission.ASSIGN_PLACE_ID)

    def telegram_principal(self, telegram_user_id: int) -> Principal:
        """Principal for an admin console user."""
        return Principal(
            user_id=f"telegram:{telegram_user_id}",
            is_admin=self.is_admin(telegram_user_id),
        )
