"""Sign-in and sign-out against Supabase Auth."""
from typing import Optional

import requests

from .session import Session
from stockdash.datastore.base import Filter
from stockdash.datastore.supabase import SupabaseStore
from stockdash.records.schemas import UserSchema, parse_rows
from stockdash.utils.logger import get_logger, set_user_context
from stockdash.utils.exceptions import AuthenticationError, DataFetchError

logger = get_logger()


class SupabaseAuth:
    """Password sign-in; the role comes from the ``users`` table."""

    def __init__(self, url: str, api_key: str, timeout: int = 30, http: Optional[requests.Session] = None):
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.http = http or requests.Session()

    def sign_in(self, email: str, password: str) -> Session:
        """
        Authenticate and open a session.

        Raises:
            AuthenticationError: credentials rejected or auth endpoint unreachable
        """
        try:
            resp = self.http.post(
                f"{self.url}/auth/v1/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
                headers={"apikey": self.api_key},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise AuthenticationError(f"Auth endpoint unreachable: {e}")

        if resp.status_code != 200:
            logger.warning(f"Sign-in rejected for {email} [{resp.status_code}]")
            raise AuthenticationError("Invalid email or password")

        payload = resp.json()
        user = payload.get("user") or {}
        if not user.get("id") or not payload.get("access_token"):
            raise AuthenticationError("Auth response missing user or token")

        session = Session(
            user_id=user["id"],
            email=user.get("email", email),
            access_token=payload["access_token"]
        )
        session.role = self._fetch_role(session)

        set_user_context(session.email)
        logger.info(f"Signed in with role {session.role}")
        return session

    def sign_out(self, session: Session) -> None:
        """Revoke the token when possible and invalidate the session."""
        token = session.access_token
        try:
            if token:
                self.http.post(
                    f"{self.url}/auth/v1/logout",
                    headers={"apikey": self.api_key, "Authorization": f"Bearer {token}"},
                    timeout=self.timeout
                )
        except requests.RequestException as e:
            logger.warning(f"Logout request failed: {e}")
        finally:
            session.invalidate()
            set_user_context(None)
            logger.info("Signed out")

    def _fetch_role(self, session: Session) -> str:
        store = SupabaseStore(
            self.url,
            self.api_key,
            access_token=session.access_token,
            timeout=self.timeout,
            http=self.http
        )
        try:
            rows = store.query("users", [Filter("id", "eq", session.user_id)], limit=1)
            users = parse_rows(UserSchema, rows, "users")
        except DataFetchError as e:
            logger.warning(f"Could not load role, defaulting to user: {e}")
            return "user"
        return users[0].role if users else "user"
