"""Tests for the create_user admin script."""

import support

import io
import unittest
from contextlib import redirect_stderr
from unittest.mock import patch

from app.core.security import verify_password
from app.models import Authority, User
from app.scripts import create_user as script
from app.services.authentication import CredentialVerifier


class TestCreateUser(unittest.TestCase):
    def setUp(self) -> None:
        self.SessionFactory = support.make_session_factory()
        self.db = self.SessionFactory()

    def tearDown(self) -> None:
        self.db.close()

    def test_inserts_hashed_user_and_authorities(self) -> None:
        script.create_user(self.db, "alice", "password", ["ROLE_USER", "ROLE_ADMIN", "ROLE_USER"])
        user = self.db.get(User, "alice")
        self.assertTrue(user.enabled)
        self.assertNotEqual(user.password, "password")
        self.assertTrue(verify_password("password", user.password))
        rows = self.db.query(Authority).filter(Authority.username == "alice").all()
        self.assertEqual(sorted(a.authority for a in rows), ["ROLE_ADMIN", "ROLE_USER"])

    def test_created_user_can_authenticate(self) -> None:
        script.create_user(self.db, "bob", "hunter22", ["ROLE_USER"])
        principal = CredentialVerifier().authenticate(self.db, "bob", "hunter22")
        self.assertEqual(principal.username, "bob")

    def test_disabled(self) -> None:
        script.create_user(self.db, "carol", "password", ["ROLE_USER"], enabled=False)
        self.assertFalse(self.db.get(User, "carol").enabled)

    def test_duplicate_rejected(self) -> None:
        script.create_user(self.db, "dave", "password", ["ROLE_USER"])
        with self.assertRaises(ValueError):
            script.create_user(self.db, "dave", "other", ["ROLE_USER"])

    def test_invalid_input(self) -> None:
        cases = [
            ("", "password", ["ROLE_USER"]),
            ("u" * 51, "password", ["ROLE_USER"]),
            ("erin", "", ["ROLE_USER"]),
            ("erin", "x" * 73, ["ROLE_USER"]),
            ("erin", "é" * 37, ["ROLE_USER"]),
            ("erin", "password", []),
            ("erin", "password", ["R" * 51]),
        ]
        for username, password, authorities in cases:
            with self.subTest(username=username[:5], authorities=authorities[:1]):
                with self.assertRaises(ValueError):
                    script.create_user(self.db, username, password, authorities)

    def test_concurrent_duplicate_insert_reported_as_exists(self) -> None:
        script.create_user(self.db, "hank", "password", ["ROLE_USER"])
        with self.SessionFactory() as other:
            # Simulates the row appearing after the existence check.
            with patch.object(other, "get", return_value=None):
                with self.assertRaises(ValueError) as ctx:
                    script.create_user(other, "hank", "password", ["ROLE_USER"])
            self.assertIn("already exists", str(ctx.exception))
            self.assertEqual(other.query(User).count(), 1)


class TestCreateUserMain(unittest.TestCase):
    def setUp(self) -> None:
        self.SessionFactory = support.make_session_factory()

    def test_main_defaults_to_role_user(self) -> None:
        with patch.object(script, "SessionLocal", self.SessionFactory):
            self.assertEqual(script.main(["frank", "password"]), 0)
        with self.SessionFactory() as db:
            user = db.get(User, "frank")
            self.assertEqual([a.authority for a in user.authorities], ["ROLE_USER"])

    def test_main_reports_duplicate(self) -> None:
        with patch.object(script, "SessionLocal", self.SessionFactory):
            self.assertEqual(script.main(["gina", "password", "--disabled"]), 0)
            stderr = io.StringIO()
            with redirect_stderr(stderr):
                self.assertEqual(script.main(["gina", "password"]), 1)
        self.assertIn("already exists", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
