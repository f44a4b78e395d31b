"""SQLAlchemy ORM models."""

from app.models.account import Account, Permission, RoleAssignment
from app.models.base import Base

__all__ = ["Account", "Base", "Permission", "RoleAssignment"]
