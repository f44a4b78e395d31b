"""Tests for the account bootstrap CLI (app.scripts.create_user)."""

import io
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import patch

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.models import Account, Base
from app.scripts.create_user import main


class TestCreateUserCli(unittest.TestCase):
    def setUp(self) -> None:
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(engine)
        self.factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        settings = Settings(JWT_SECRET="unit-test-secret-0123456789abcdef0123", BCRYPT_ROUNDS=4)
        self.patches = [
            patch("app.scripts.create_user.SessionLocal", self.factory),
            patch("app.scripts.create_user.get_settings", return_value=settings),
        ]
        for p in self.patches:
            p.start()

    def tearDown(self) -> None:
        for p in self.patches:
            p.stop()

    def _run(self, *argv: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_creates_admin(self) -> None:
        code, out, _ = self._run("root", "root@x.com", "s3cret", "--role", "Admin", "--write")
        self.assertEqual(code, 0)
        self.assertIn("Admin", out)
        db = self.factory()
        try:
            account = db.query(Account).one()
            self.assertEqual(account.name, "root")
            self.assertEqual([r.name for r in account.roles], ["Admin"])
            self.assertTrue(account.permission.can_write)
            self.assertTrue(account.permission.can_read)
        finally:
            db.close()

    def test_defaults_to_plain_user(self) -> None:
        code, _, _ = self._run("ana", "a@x.com", "p1", "--no-read")
        self.assertEqual(code, 0)
        db = self.factory()
        try:
            account = db.query(Account).one()
            self.assertEqual([r.name for r in account.roles], ["Usuario"])
            self.assertFalse(account.permission.can_read)
        finally:
            db.close()

    def test_duplicate_email_fails(self) -> None:
        self._run("ana", "a@x.com", "p1")
        code, _, err = self._run("bea", "a@x.com", "p1")
        self.assertEqual(code, 1)
        self.assertIn("Email", err)

    def test_blank_name_fails(self) -> None:
        code, _, err = self._run("  ", "a@x.com", "p1")
        self.assertEqual(code, 1)
        self.assertIn("name", err)


if __name__ == "__main__":
    unittest.main()
