"""Pydantic request/response schemas."""

from app.schemas.accounts import (
    AccountListItem,
    AccountProfile,
    AccountRequest,
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    Permissions,
    RoleClaim,
    TokenClaims,
    TokenResponse,
)
from app.schemas.health import HealthResponse

__all__ = [
    "AccountListItem",
    "AccountProfile",
    "AccountRequest",
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "Permissions",
    "RoleClaim",
    "TokenClaims",
    "TokenResponse",
]
