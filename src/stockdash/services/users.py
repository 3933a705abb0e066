"""User account administration."""
from typing import List

from stockdash.auth.session import Session, AccessPolicy
from stockdash.datastore.base import DataStore, OrderBy
from stockdash.records.models import UserAccount
from stockdash.records.schemas import UserSchema, parse_rows
from stockdash.utils.logger import get_logger

logger = get_logger()


class UserAdminService:
    """Lists users and toggles their active status."""

    def __init__(self, store: DataStore, policy: AccessPolicy):
        self.store = store
        self.policy = policy

    def list_users(self) -> List[UserAccount]:
        rows = self.store.query(
            "users",
            order_by=OrderBy("created_at", ascending=False),
            select="id, email, full_name, role, status, created_at"
        )
        return parse_rows(UserSchema, rows, "users")

    def toggle_status(self, session: Session, user: UserAccount) -> str:
        """
        Flip a user between active and inactive.

        Returns:
            The new status

        Raises:
            AuthorizationError: session may not manage users
            DataFetchError: the update failed; ``user`` is left unchanged
        """
        self.policy.require(self.policy.can_manage_users, session, "modify user status")

        new_status = "inactive" if user.status == "active" else "active"
        self.store.update("users", user.id, {"status": new_status})
        user.status = new_status

        logger.info(f"User {user.email or user.id} is now {new_status}")
        return new_status
