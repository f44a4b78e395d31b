"""
Account service: registration, login, role-gated reads, update and activation.

Every function takes the SQLAlchemy session and settings explicitly so the
flow can run against any engine. Multi-statement writes commit once and roll
back on failure.
"""

import logging
from datetime import timedelta
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.security import (
    TokenError,
    TokenMalformedError,
    burn_password_check,
    hash_password,
    issue_token,
    verify_password,
    verify_token,
)
from app.models import Account, Permission, RoleAssignment
from app.schemas.accounts import (
    AccountListItem,
    AccountProfile,
    AccountRequest,
    Permissions,
    TokenClaims,
    TokenResponse,
)

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


class Role(StrEnum):
    """Roles the service gates on. Stored role names are free text."""

    ADMIN = "Admin"
    USUARIO = "Usuario"


class AccountServiceError(Exception):
    """Raised when an account operation is rejected; carries the HTTP status to answer with."""

    status_code = 500

    def __init__(self, message: str, error: str | None = None) -> None:
        self.message = message
        self.error = error
        super().__init__(message)


class DuplicateEmailError(AccountServiceError):
    status_code = 400


class DuplicateNameError(AccountServiceError):
    status_code = 400


class InvalidCredentialsError(AccountServiceError):
    status_code = 401


class UnauthorizedError(AccountServiceError):
    status_code = 401


class ForbiddenError(AccountServiceError):
    status_code = 403


class AccountNotFoundError(AccountServiceError):
    status_code = 404


class InternalError(AccountServiceError):
    status_code = 500


INVALID_CREDENTIALS_MESSAGE = "Invalid email or password."


def has_role(roles: list[str], role: str) -> bool:
    return role in roles


def require_role(roles: list[str], role: str) -> None:
    """Role gate: raise ForbiddenError unless `role` is among `roles`."""
    if not has_role(roles, role):
        raise ForbiddenError("Access not authorized.")


def _unique_roles(roles: list[str]) -> list[str]:
    return list(dict.fromkeys(roles))


def issue_session_token(
    account_id: int,
    roles: list[str],
    permissions: Permissions,
    settings: "Settings",
) -> str:
    """Sign a session token embedding the account id, roles and permissions."""
    claims = {
        "sub": str(account_id),
        "userId": account_id,
        "roles": [{"nombre": role} for role in roles],
        "permisos": permissions.model_dump(),
    }
    return issue_token(
        claims,
        settings.JWT_SECRET.get_secret_value(),
        ttl=timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
        algorithm=settings.JWT_ALGORITHM,
    )


def read_session_token(token: str, settings: "Settings") -> TokenClaims:
    """
    Verify a session token and return its claims.

    Raises TokenMalformedError, TokenSignatureError or TokenExpiredError.
    """
    payload = verify_token(
        token,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )
    try:
        return TokenClaims.model_validate(payload)
    except ValidationError as e:
        raise TokenMalformedError("Token claims do not describe a session") from e


def extract_token(authorization: str | None) -> str | None:
    """Return the token from an authorization header value; a 'Bearer ' scheme is optional."""
    if authorization is None:
        return None
    value = authorization.strip()
    scheme, _, rest = value.partition(" ")
    if scheme.lower() == BEARER_SCHEME:
        value = rest.strip()
    return value or None


def _email_taken(db: Session, email: str, exclude_id: int | None = None) -> bool:
    query = db.query(Account.id).filter(Account.email == email)
    if exclude_id is not None:
        query = query.filter(Account.id != exclude_id)
    return query.first() is not None


def _name_taken(db: Session, name: str) -> bool:
    return db.query(Account.id).filter(Account.name == name).first() is not None


def create_account(db: Session, body: AccountRequest, settings: "Settings") -> Account:
    """
    Check uniqueness, then insert the account, its roles and its permission row.

    All rows are written in one transaction. Raises DuplicateEmailError or
    DuplicateNameError.
    """
    if _email_taken(db, body.email):
        raise DuplicateEmailError("Email is already registered.")
    if _name_taken(db, body.nombre):
        raise DuplicateNameError("Name is already registered.")

    account = Account(
        name=body.nombre,
        email=body.email,
        password_hash=hash_password(body.password, rounds=settings.BCRYPT_ROUNDS),
    )
    account.roles = [RoleAssignment(name=role) for role in _unique_roles(body.roles)]
    account.permission = Permission(
        can_write=body.permisos.escritura,
        can_read=body.permisos.lectura,
    )
    db.add(account)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(account)
    logger.info(
        "Account created",
        extra={"account_id": account.id, "role_count": len(account.roles)},
    )
    return account


def register_account(db: Session, body: AccountRequest, settings: "Settings") -> TokenResponse:
    """Create an account and return a session token built from the submitted roles and permissions."""
    account = create_account(db, body, settings)
    token = issue_session_token(
        account.id,
        _unique_roles(body.roles),
        body.permisos,
        settings,
    )
    return TokenResponse(token=token, message="Account registered and authenticated.")


def login_account(
    db: Session, email: str, password: str, settings: "Settings"
) -> TokenResponse:
    """
    Verify credentials and return a session token with the stored roles and permissions.

    Unknown email and wrong password raise the same InvalidCredentialsError.
    The active flag is not consulted.
    """
    account = db.query(Account).filter(Account.email == email).first()
    if account is None:
        burn_password_check(password, rounds=settings.BCRYPT_ROUNDS)
        logger.info("Login rejected", extra={"reason": "unknown_email"})
        raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)
    if not verify_password(password, account.password_hash):
        logger.info(
            "Login rejected",
            extra={"reason": "password_mismatch", "account_id": account.id},
        )
        raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

    roles = [
        name
        for (name,) in db.query(RoleAssignment.name)
        .filter(RoleAssignment.account_id == account.id)
        .order_by(RoleAssignment.name)
        .all()
    ]
    permission = (
        db.query(Permission).filter(Permission.account_id == account.id).first()
    )
    permissions = (
        Permissions(escritura=permission.can_write, lectura=permission.can_read)
        if permission is not None
        else Permissions()
    )
    token = issue_session_token(account.id, roles, permissions, settings)
    logger.info("Login succeeded", extra={"account_id": account.id})
    return TokenResponse(token=token, message="Account authenticated.")


def list_active_accounts(db: Session) -> list[AccountListItem]:
    """Active accounts joined with their role and permission rows (one item per role)."""
    rows = (
        db.query(
            Account.id,
            Account.name,
            Account.email,
            RoleAssignment.name,
            Permission.can_write,
            Permission.can_read,
        )
        .join(RoleAssignment, RoleAssignment.account_id == Account.id)
        .join(Permission, Permission.account_id == Account.id)
        .filter(Account.active.is_(True))
        .order_by(Account.id, RoleAssignment.name)
        .all()
    )
    return [
        AccountListItem(
            id=account_id,
            nombre=name,
            email=email,
            rol=role,
            escritura=can_write,
            lectura=can_read,
        )
        for account_id, name, email, role, can_write, can_read in rows
    ]


def get_account_profile(db: Session, account_id: int) -> AccountProfile:
    account = db.query(Account).filter(Account.id == account_id).first()
    if account is None:
        raise AccountNotFoundError("Account not found.")
    permission = account.permission
    return AccountProfile(
        id=account.id,
        nombre=account.name,
        email=account.email,
        roles=[role.name for role in account.roles],
        permisos=Permissions(
            escritura=permission.can_write if permission else False,
            lectura=permission.can_read if permission else False,
        ),
    )


def get_accounts(
    db: Session, requester_id: int, requester_roles: list[str]
) -> list[AccountListItem] | AccountProfile:
    """
    Role-gated read.

    Admin gets the listing of all active accounts; Usuario gets their own
    profile; anyone else is rejected with ForbiddenError.
    """
    if has_role(requester_roles, Role.ADMIN):
        return list_active_accounts(db)
    if has_role(requester_roles, Role.USUARIO):
        return get_account_profile(db, requester_id)
    raise ForbiddenError("Access not authorized.")


def update_account(
    db: Session, account_id: int, body: AccountRequest, settings: "Settings"
) -> None:
    """
    Overwrite name, email and password; replace roles and the permission row.

    The password is always re-hashed. Issued tokens keep their old claims
    until they expire.
    """
    if _email_taken(db, body.email, exclude_id=account_id):
        raise DuplicateEmailError("Email is already in use by another account.")
    account = db.query(Account).filter(Account.id == account_id).first()
    if account is None:
        raise AccountNotFoundError("Account not found.")

    account.name = body.nombre
    account.email = body.email
    account.password_hash = hash_password(body.password, rounds=settings.BCRYPT_ROUNDS)
    # delete-orphan cascade removes the old role and permission rows in the same flush
    account.roles = [
        RoleAssignment(account_id=account_id, name=role)
        for role in _unique_roles(body.roles)
    ]
    account.permission = Permission(
        account_id=account_id,
        can_write=body.permisos.escritura,
        can_read=body.permisos.lectura,
    )
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Account updated", extra={"account_id": account_id})


def set_account_active(
    db: Session,
    account_id: int,
    active: bool,
    token: str | None,
    settings: "Settings",
) -> None:
    """
    Flip an account's active flag. Requires a valid session token carrying the Admin role.

    Raises UnauthorizedError (missing or rejected token), ForbiddenError
    (no Admin role) or AccountNotFoundError.
    """
    if not token:
        raise UnauthorizedError("Token not provided.")
    try:
        claims = read_session_token(token, settings)
    except TokenError as e:
        logger.info("Session token rejected", extra={"reason": e.reason})
        raise UnauthorizedError("Invalid or expired token.") from e
    require_role(claims.role_names, Role.ADMIN)

    account = db.query(Account).filter(Account.id == account_id).first()
    if account is None:
        raise AccountNotFoundError("Account not found.")
    account.active = active
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(
        "Account active flag changed",
        extra={"account_id": account_id, "active": active, "admin_id": claims.userId},
    )
