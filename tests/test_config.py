"""Unit tests for app.core.config: settings validation and DATABASE_URL driver selection."""

import unittest

from pydantic import ValidationError

from app.core.config import Settings

SECRET = "unit-test-secret-0123456789abcdef0123"


class TestDatabaseUrl(unittest.TestCase):
    """Every accepted PostgreSQL URL is pinned to the psycopg2 driver."""

    def test_default_names_psycopg2(self) -> None:
        default = Settings.model_fields["DATABASE_URL"].default
        self.assertTrue(default.startswith("postgresql+psycopg2://"))

    def test_bare_schemes_rewritten(self) -> None:
        for url in (
            "postgresql://u:p@db:5432/cuentas",
            "postgres://u:p@db:5432/cuentas",
            "postgres+psycopg2://u:p@db:5432/cuentas",
            "  postgresql+psycopg2://u:p@db:5432/cuentas  ",
        ):
            with self.subTest(url=url):
                settings = Settings(DATABASE_URL=url, JWT_SECRET=SECRET)
                self.assertEqual(
                    settings.DATABASE_URL, "postgresql+psycopg2://u:p@db:5432/cuentas"
                )

    def test_engine_uses_psycopg2(self) -> None:
        from app.core.database import engine

        self.assertEqual(engine.dialect.driver, "psycopg2")

    def test_non_postgres_url_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(DATABASE_URL="mysql://u:p@db/cuentas", JWT_SECRET=SECRET)


class TestSecuritySettings(unittest.TestCase):
    def test_short_jwt_secret_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(JWT_SECRET="too-short")

    def test_bcrypt_rounds_bounds(self) -> None:
        for rounds in (3, 32):
            with self.subTest(rounds=rounds):
                with self.assertRaises(ValidationError):
                    Settings(JWT_SECRET=SECRET, BCRYPT_ROUNDS=rounds)


if __name__ == "__main__":
    unittest.main()
