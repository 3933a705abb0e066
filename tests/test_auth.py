"""Tests for sessions, access checks and Supabase sign-in."""
import unittest

import requests

from stockdash.auth.client import SupabaseAuth
from stockdash.auth.session import Session, AccessPolicy
from stockdash.utils.exceptions import AuthorizationError, AuthenticationError

from fakes import FakeResponse


class FakeAuthHttp:
    """Serves auth posts and the users lookup."""

    def __init__(self, token_response, user_rows=None, fail_logout=False):
        self.token_response = token_response
        self.user_rows = user_rows
        self.fail_logout = fail_logout
        self.posts = []
        self.requests = []

    def post(self, url, **kwargs):
        self.posts.append((url, kwargs))
        if url.endswith("/logout"):
            if self.fail_logout:
                raise requests.ConnectionError("offline")
            return FakeResponse(204, text="")
        if isinstance(self.token_response, Exception):
            raise self.token_response
        return self.token_response

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        if self.user_rows is None:
            return FakeResponse(500, text="boom")
        return FakeResponse(payload=self.user_rows)


TOKEN = {"access_token": "jwt-123", "user": {"id": "u1", "email": "boss@shop.rw"}}


class TestAccessPolicy(unittest.TestCase):
    """Test role checks."""

    def setUp(self):
        """Set up test fixtures."""
        self.policy = AccessPolicy()

    def test_roles(self):
        admin = Session("1", role="admin")
        super_admin = Session("2", role="supa-admin")
        user = Session("3")

        self.assertTrue(self.policy.is_admin(admin))
        self.assertTrue(self.policy.is_admin(super_admin))
        self.assertFalse(self.policy.is_admin(user))

        self.assertTrue(self.policy.can_download_reports(super_admin))
        self.assertFalse(self.policy.can_download_reports(admin))
        self.assertTrue(self.policy.can_manage_users(super_admin))
        self.assertFalse(self.policy.can_manage_users(user))

    def test_missing_or_ended_session(self):
        session = Session("2", role="supa-admin", access_token="t")
        session.invalidate()

        self.assertFalse(session.is_active)
        self.assertIsNone(session.access_token)
        self.assertFalse(self.policy.can_download_reports(session))
        self.assertFalse(self.policy.is_admin(None))

    def test_require(self):
        self.policy.require(self.policy.is_admin, Session("1", role="admin"), "view users")

        with self.assertRaises(AuthorizationError) as ctx:
            self.policy.require(self.policy.can_download_reports, Session("1", role="admin"), "download reports")
        self.assertIn("admin", str(ctx.exception))

        with self.assertRaises(AuthorizationError):
            self.policy.require(self.policy.can_download_reports, None, "download reports")


class TestSupabaseAuth(unittest.TestCase):
    """Test sign-in and sign-out."""

    def test_sign_in_loads_role(self):
        http = FakeAuthHttp(FakeResponse(payload=TOKEN), user_rows=[{"id": "u1", "role": "supa-admin"}])
        auth = SupabaseAuth("https://demo.supabase.co", "anon", http=http)

        session = auth.sign_in("boss@shop.rw", "secret")

        self.assertEqual(session.user_id, "u1")
        self.assertEqual(session.role, "supa-admin")
        self.assertEqual(session.access_token, "jwt-123")

        url, kwargs = http.posts[0]
        self.assertEqual(url, "https://demo.supabase.co/auth/v1/token")
        self.assertEqual(kwargs["params"], {"grant_type": "password"})
        self.assertEqual(kwargs["json"], {"email": "boss@shop.rw", "password": "secret"})

        method, url, kwargs = http.requests[0]
        self.assertEqual(url, "https://demo.supabase.co/rest/v1/users")
        self.assertIn(("id", "eq.u1"), kwargs["params"])
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer jwt-123")

    def test_role_defaults_to_user(self):
        """Test fallback when the users lookup fails or is empty."""
        for rows in (None, []):
            http = FakeAuthHttp(FakeResponse(payload=TOKEN), user_rows=rows)
            session = SupabaseAuth("https://demo.supabase.co", "anon", http=http).sign_in("a@b.c", "pw")
            self.assertEqual(session.role, "user")

    def test_rejected_credentials(self):
        http = FakeAuthHttp(FakeResponse(400, payload={"error": "invalid_grant"}))
        with self.assertRaises(AuthenticationError):
            SupabaseAuth("https://demo.supabase.co", "anon", http=http).sign_in("a@b.c", "bad")

    def test_unreachable_or_incomplete(self):
        http = FakeAuthHttp(requests.Timeout("slow"))
        with self.assertRaises(AuthenticationError):
            SupabaseAuth("https://demo.supabase.co", "anon", http=http).sign_in("a@b.c", "pw")

        http = FakeAuthHttp(FakeResponse(payload={"user": {"id": "u1"}}))
        with self.assertRaises(AuthenticationError):
            SupabaseAuth("https://demo.supabase.co", "anon", http=http).sign_in("a@b.c", "pw")

    def test_sign_out_always_invalidates(self):
        """Test that a failed logout call still ends the session."""
        http = FakeAuthHttp(FakeResponse(payload=TOKEN), fail_logout=True)
        auth = SupabaseAuth("https://demo.supabase.co", "anon", http=http)
        session = Session("u1", role="supa-admin", access_token="jwt-123")

        auth.sign_out(session)

        self.assertFalse(session.is_active)
        self.assertIsNone(session.access_token)
        self.assertTrue(http.posts[-1][0].endswith("/auth/v1/logout"))


if __name__ == "__main__":
    unittest.main()
