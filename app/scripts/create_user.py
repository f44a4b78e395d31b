"""
Create an account (e.g. the first Admin). Run from project root:
  python -m app.scripts.create_user NAME EMAIL PASSWORD [--role ROLE ...] [--write] [--no-read]
Example:
  python -m app.scripts.create_user ana ana@example.com your-secure-password --role Admin --write
"""
import argparse
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.schemas.accounts import AccountRequest, Permissions
from app.services.accounts import AccountServiceError, Role, create_account

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create an account without going through the API.")
    parser.add_argument("name", help="Unique account name")
    parser.add_argument("email", help="Unique email address")
    parser.add_argument("password", help="Plain-text password")
    parser.add_argument(
        "--role",
        dest="roles",
        action="append",
        default=None,
        help=f"Role name; repeat for several (default: {Role.USUARIO.value})",
    )
    parser.add_argument("--write", action="store_true", help="Grant write permission")
    parser.add_argument("--no-read", action="store_true", help="Withhold read permission")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    name = args.name.strip()
    if not name or len(name) > 255:
        print("Invalid name length.", file=sys.stderr)
        return 1

    body = AccountRequest(
        nombre=name,
        email=args.email.strip(),
        password=args.password,
        roles=args.roles or [Role.USUARIO.value],
        permisos=Permissions(escritura=args.write, lectura=not args.no_read),
    )
    db = SessionLocal()
    try:
        account = create_account(db, body, get_settings())
    except AccountServiceError as e:
        print(e.message, file=sys.stderr)
        return 1
    except SQLAlchemyError as e:
        logger.exception("Account creation failed: %s", e)
        return 1
    finally:
        db.close()
    print(f"Created account '{name}' (id {account.id}) with roles {', '.join(body.roles)}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
