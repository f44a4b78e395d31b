"""Session-token auth dependencies (get_token, get_current_account)."""

import logging
from typing import Annotated

from fastapi import Depends, Header

from app.core.config import Settings, get_settings
from app.core.security import TokenError
from app.schemas.accounts import TokenClaims
from app.services.accounts import (
    UnauthorizedError,
    extract_token,
    read_session_token,
)

logger = logging.getLogger(__name__)


def get_token(
    authorization: Annotated[str | None, Header()] = None,
) -> str | None:
    """Dependency: raw session token from the authorization header, or None."""
    return extract_token(authorization)


def get_current_account(
    token: Annotated[str | None, Depends(get_token)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TokenClaims:
    """Dependency: require a valid session token and return its claims. Raises 401 if missing or invalid."""
    if token is None:
        raise UnauthorizedError("Token not provided.")
    try:
        return read_session_token(token, settings)
    except TokenError as e:
        logger.info("Session token rejected", extra={"reason": e.reason})
        raise UnauthorizedError("Invalid or expired token.") from e