"""Explicit signed-in session and role-based access checks."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from stockdash.utils.exceptions import AuthorizationError


@dataclass
class Session:
    """Authenticated user context, created at login and invalidated at logout."""
    user_id: str
    email: Optional[str] = None
    role: str = "user"
    access_token: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    invalidated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.invalidated_at is None

    def invalidate(self) -> None:
        """End the session; later access checks fail."""
        if self.invalidated_at is None:
            self.invalidated_at = datetime.now(timezone.utc)
        self.access_token = None


class AccessPolicy:
    """Maps roles to the actions they may perform."""

    def __init__(
        self,
        admin_roles: Iterable[str] = ("admin", "supa-admin"),
        privileged_roles: Iterable[str] = ("supa-admin",)
    ):
        self.admin_roles = frozenset(admin_roles)
        self.privileged_roles = frozenset(privileged_roles)

    @classmethod
    def from_settings(cls, settings) -> "AccessPolicy":
        return cls(settings.admin_roles, settings.privileged_roles)

    def is_admin(self, session: Optional[Session]) -> bool:
        return self._has_role(session, self.admin_roles)

    def can_download_reports(self, session: Optional[Session]) -> bool:
        return self._has_role(session, self.privileged_roles)

    def can_manage_users(self, session: Optional[Session]) -> bool:
        return self._has_role(session, self.privileged_roles)

    def require(self, predicate: Callable[[Optional[Session]], bool], session: Optional[Session], action: str) -> None:
        """
        Raise unless the session passes the predicate.

        Raises:
            AuthorizationError: session missing, ended or lacking the role
        """
        if not predicate(session):
            role = session.role if session else "anonymous"
            raise AuthorizationError(f"Role '{role}' is not allowed to {action}")

    @staticmethod
    def _has_role(session: Optional[Session], roles: frozenset) -> bool:
        return session is not None and session.is_active and session.role in roles
