"""Password hashing and signed session-token encoding/verification."""

from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import bcrypt
import jwt

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of input.
BCRYPT_MAX_BYTES = 72

DEFAULT_TOKEN_ALGORITHM = "HS256"
REQUIRED_TOKEN_CLAIMS = ("sub", "iat", "exp")


class MalformedHashError(ValueError):
    """Stored password hash is not a bcrypt hash (data or configuration error)."""


class TokenError(Exception):
    """Base for rejected session tokens."""

    reason = "invalid"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class TokenMalformedError(TokenError):
    """Token is not a JWT, or lacks the claims a session token must carry."""

    reason = "malformed"


class TokenSignatureError(TokenError):
    """Token signature or encoding does not verify against the secret."""

    reason = "invalid_signature"


class TokenExpiredError(TokenError):
    """Token verified but its exp claim is in the past."""

    reason = "expired"


def _password_bytes(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """
    Hash a plain-text password for storage. Do not store plain passwords.

    bcrypt reads only the first 72 bytes, so passwords sharing that prefix
    verify against each other's hash.
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_password_bytes(plain_password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """
    Verify a plain password against a stored hash.

    Returns False on mismatch, including a plaintext that cannot be encoded.
    Raises MalformedHashError when `hashed` is not a bcrypt hash.
    """
    try:
        pw_bytes = _password_bytes(plain_password)
    except UnicodeEncodeError:
        return False
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError, AttributeError) as e:
        raise MalformedHashError("Stored password hash is not a valid bcrypt hash") from e


@lru_cache
def _dummy_hash(rounds: int) -> str:
    return hash_password("timing-equalization-dummy", rounds=rounds)


def burn_password_check(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> None:
    """Run a bcrypt comparison against a dummy hash so a missing account costs the same time."""
    verify_password(plain_password, _dummy_hash(rounds))


def issue_token(
    claims: dict[str, Any],
    secret: str,
    ttl: timedelta,
    algorithm: str = DEFAULT_TOKEN_ALGORITHM,
    now: datetime | None = None,
) -> str:
    """Sign claims into a JWT with iat (now) and exp (now + ttl)."""
    issued_at = now or datetime.now(UTC)
    payload: dict[str, Any] = {
        **claims,
        "iat": issued_at,
        "exp": issued_at + ttl,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def verify_token(
    token: str,
    secret: str,
    algorithm: str = DEFAULT_TOKEN_ALGORITHM,
) -> dict[str, Any]:
    """
    Verify signature and expiry; return the decoded claims.

    Any decode or signature failure, including a damaged separator, is
    TokenSignatureError. TokenMalformedError means a verified token lacks
    sub, iat or exp.
    """
    if not token:
        raise TokenMalformedError("Token is empty")
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": list(REQUIRED_TOKEN_CLAIMS)},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError("Token has expired") from e
    except jwt.MissingRequiredClaimError as e:
        raise TokenMalformedError(f"Token is missing claim: {e.claim}") from e
    except jwt.InvalidTokenError as e:
        raise TokenSignatureError("Token signature verification failed") from e
