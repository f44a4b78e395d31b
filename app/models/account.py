"""ORM models for accounts, their role assignments and permission records."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, false, true
from sqlalchemy.orm import relationship

from app.models.base import Base


class Account(Base):
    """
    Registered user with credentials and an active flag.

    Accounts are never deleted; `active` is flipped by deactivate/reactivate
    and inactive accounts are left out of the admin listing.
    """

    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column("nombre", String(255), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column("password", String(255), nullable=False)
    active = Column(
        "activo",
        Boolean,
        nullable=False,
        default=True,
        server_default=true(),
    )

    roles = relationship(
        "RoleAssignment",
        back_populates="account",
        order_by="RoleAssignment.name",
        cascade="all, delete-orphan",
    )
    permission = relationship(
        "Permission",
        back_populates="account",
        uselist=False,
        cascade="all, delete-orphan",
    )


class RoleAssignment(Base):
    """One named role held by an account; an account may hold several."""

    __tablename__ = "roles"

    account_id = Column(
        "usuarioid",
        Integer,
        ForeignKey("usuarios.id"),
        primary_key=True,
    )
    name = Column("nombre", String(64), primary_key=True)

    account = relationship("Account", back_populates="roles")


class Permission(Base):
    """Read/write permission flags; at most one row per account."""

    __tablename__ = "permisos"

    account_id = Column(
        "idpermisos",
        Integer,
        ForeignKey("usuarios.id"),
        primary_key=True,
    )
    can_write = Column(
        "escritura", Boolean, nullable=False, default=False, server_default=false()
    )
    can_read = Column(
        "lectura", Boolean, nullable=False, default=False, server_default=false()
    )

    account = relationship("Account", back_populates="permission")
