"""Unit tests for app.core.security: bcrypt hashing and signed token issue/verify."""

import unittest
from datetime import UTC, datetime, timedelta

import jwt

from app.core.security import (
    MalformedHashError,
    TokenError,
    TokenExpiredError,
    TokenMalformedError,
    TokenSignatureError,
    burn_password_check,
    hash_password,
    issue_token,
    verify_password,
    verify_token,
)

SECRET = "unit-test-secret-0123456789abcdef0123"
OTHER_SECRET = "another-secret-fedcba9876543210fedcba"


def _replace_at(token: str, index: int) -> str:
    """Replace one character; "g" differs from "A" in the high bit so base64 padding cannot absorb it."""
    replacement = "A" if token[index] != "A" else "g"
    return token[:index] + replacement + token[index + 1:]


class TestPasswordHashing(unittest.TestCase):
    """hash_password / verify_password round trip and mismatch."""

    def test_hash_differs_from_plaintext(self) -> None:
        hashed = hash_password("p1", rounds=4)
        self.assertNotEqual(hashed, "p1")
        self.assertTrue(hashed.startswith("$2b$04$"))

    def test_hash_is_salted(self) -> None:
        self.assertNotEqual(hash_password("same", rounds=4), hash_password("same", rounds=4))

    def test_verify_matching_password(self) -> None:
        for plain in ("p1", "correct horse battery staple", "ñandú-ü"):
            with self.subTest(plain=plain):
                self.assertTrue(verify_password(plain, hash_password(plain, rounds=4)))

    def test_verify_other_password_is_false(self) -> None:
        hashed = hash_password("q", rounds=4)
        self.assertFalse(verify_password("p", hashed))

    def test_malformed_hash_raises(self) -> None:
        with self.assertRaises(MalformedHashError):
            verify_password("p1", "not-a-bcrypt-hash")

    def test_unencodable_plaintext_is_a_mismatch(self) -> None:
        hashed = hash_password("p1", rounds=4)
        self.assertFalse(verify_password("\ud800", hashed))

    def test_passwords_sharing_first_72_bytes_match(self) -> None:
        # bcrypt limit: only the first 72 bytes take part in the hash
        base = "x" * 72
        hashed = hash_password(base + "tail", rounds=4)
        self.assertTrue(verify_password(base + "other", hashed))

    def test_burn_password_check_returns_none(self) -> None:
        self.assertIsNone(burn_password_check("whatever", rounds=4))


class TestTokenIssueVerify(unittest.TestCase):
    """issue_token signs claims with iat/exp; verify_token checks signature and expiry."""

    def test_fresh_token_verifies(self) -> None:
        token = issue_token({"sub": "7", "userId": 7}, SECRET, ttl=timedelta(hours=1))
        claims = verify_token(token, SECRET)
        self.assertEqual(claims["sub"], "7")
        self.assertEqual(claims["userId"], 7)
        self.assertEqual(claims["exp"] - claims["iat"], 3600)

    def test_expired_token_rejected(self) -> None:
        issued = datetime.now(UTC) - timedelta(hours=2)
        token = issue_token({"sub": "7"}, SECRET, ttl=timedelta(hours=1), now=issued)
        with self.assertRaises(TokenExpiredError) as ctx:
            verify_token(token, SECRET)
        self.assertEqual(ctx.exception.reason, "expired")

    def test_any_changed_character_rejected_as_bad_signature(self) -> None:
        token = issue_token(
            {"sub": "7", "userId": 7, "roles": [{"nombre": "Usuario"}]},
            SECRET,
            ttl=timedelta(hours=1),
        )
        self.assertEqual(token.count("."), 2)
        for index in range(len(token)):
            with self.subTest(index=index, char=token[index]):
                with self.assertRaises(TokenSignatureError):
                    verify_token(_replace_at(token, index), SECRET)

    def test_wrong_secret_rejected(self) -> None:
        token = issue_token({"sub": "7"}, SECRET, ttl=timedelta(hours=1))
        with self.assertRaises(TokenSignatureError):
            verify_token(token, OTHER_SECRET)

    def test_empty_token_is_malformed(self) -> None:
        with self.assertRaises(TokenMalformedError):
            verify_token("", SECRET)

    def test_undecodable_token_is_bad_signature(self) -> None:
        for token in ("abc", "a.b", "a.b.c.d"):
            with self.subTest(token=token):
                with self.assertRaises(TokenSignatureError):
                    verify_token(token, SECRET)

    def test_missing_subject_is_malformed(self) -> None:
        token = issue_token({"userId": 7}, SECRET, ttl=timedelta(hours=1))
        with self.assertRaises(TokenMalformedError):
            verify_token(token, SECRET)

    def test_missing_expiry_is_malformed(self) -> None:
        token = jwt.encode({"sub": "7", "iat": 0}, SECRET, algorithm="HS256")
        with self.assertRaises(TokenMalformedError):
            verify_token(token, SECRET)

    def test_rejections_share_base_class(self) -> None:
        for cls in (TokenMalformedError, TokenSignatureError, TokenExpiredError):
            self.assertTrue(issubclass(cls, TokenError))
        reasons = {cls.reason for cls in (TokenMalformedError, TokenSignatureError, TokenExpiredError)}
        self.assertEqual(len(reasons), 3)


if __name__ == "__main__":
    unittest.main()
