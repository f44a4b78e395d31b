"""Account endpoints: register, login, role-gated read, update, deactivate and reactivate."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_account, get_token
from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.security import MalformedHashError
from app.schemas.accounts import (
    AccountListItem,
    AccountProfile,
    AccountRequest,
    LoginRequest,
    MessageResponse,
    TokenClaims,
    TokenResponse,
)
from app.services.accounts import (
    InternalError,
    get_accounts,
    login_account,
    register_account,
    set_account_active,
    update_account,
)

logger = logging.getLogger(__name__)
router = APIRouter()

# Store and hash failures surface as 500 with the raw error text.
STORE_ERRORS = (SQLAlchemyError, MalformedHashError)


@router.get("", response_model=list[AccountListItem] | AccountProfile)
def get_usuarios(
    current: Annotated[TokenClaims, Depends(get_current_account)],
    db: Annotated[Session, Depends(get_db)],
) -> list[AccountListItem] | AccountProfile:
    """
    Admin: list active accounts with their roles and permissions.
    Usuario: return the caller's own profile. Other roles get 403.
    """
    try:
        return get_accounts(db, current.userId, current.role_names)
    except STORE_ERRORS as e:
        logger.exception("Account read failed")
        raise InternalError("Error processing the request.", error=str(e)) from e


@router.post("/registro", response_model=TokenResponse)
def post_registro(
    body: AccountRequest,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TokenResponse:
    """Register an account and return a session token carrying the submitted roles and permissions."""
    try:
        return register_account(db, body, settings)
    except STORE_ERRORS as e:
        logger.exception("Account registration failed")
        raise InternalError("Error registering account.", error=str(e)) from e


@router.post("/login", response_model=TokenResponse)
def post_login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TokenResponse:
    """
    Authenticate with email and password; returns a session token.
    Send the token in the authorization header on protected routes.
    """
    try:
        return login_account(db, body.email, body.password, settings)
    except STORE_ERRORS as e:
        logger.exception("Login failed")
        raise InternalError("Error authenticating account.", error=str(e)) from e


@router.put("/{account_id}", response_model=MessageResponse)
def put_usuario(
    account_id: int,
    body: AccountRequest,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> MessageResponse:
    """Replace an account's name, email, password, roles and permissions."""
    try:
        update_account(db, account_id, body, settings)
    except STORE_ERRORS as e:
        logger.exception("Account update failed", extra={"account_id": account_id})
        raise InternalError("Error updating account.", error=str(e)) from e
    return MessageResponse(message="Account updated.")


def _set_active(
    account_id: int,
    active: bool,
    token: str | None,
    db: Session,
    settings: Settings,
) -> None:
    try:
        set_account_active(db, account_id, active, token, settings)
    except STORE_ERRORS as e:
        action = "reactivating" if active else "deactivating"
        logger.exception("Account activation change failed", extra={"account_id": account_id})
        raise InternalError(f"Error {action} account.", error=str(e)) from e


@router.put("/{account_id}/desactivar", response_model=MessageResponse)
def put_desactivar(
    account_id: int,
    token: Annotated[str | None, Depends(get_token)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> MessageResponse:
    """Deactivate an account (Admin token required)."""
    _set_active(account_id, False, token, db, settings)
    return MessageResponse(message="Account deactivated.")


@router.put("/{account_id}/reactivar", response_model=MessageResponse)
def put_reactivar(
    account_id: int,
    token: Annotated[str | None, Depends(get_token)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> MessageResponse:
    """Reactivate an account (Admin token required)."""
    _set_active(account_id, True, token, db, settings)
    return MessageResponse(message="Account reactivated.")
