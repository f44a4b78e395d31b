"""Create usuarios, roles and permisos tables.

Revision ID: 20250301000000
Revises:
Create Date: 2025-03-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20250301000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "usuarios",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("nombre", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password", sa.String(length=255), nullable=False),
        sa.Column("activo", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_usuarios_nombre"), "usuarios", ["nombre"], unique=True)
    op.create_index(op.f("ix_usuarios_email"), "usuarios", ["email"], unique=True)
    op.create_table(
        "roles",
        sa.Column("usuarioid", sa.Integer(), nullable=False),
        sa.Column("nombre", sa.String(length=64), nullable=False),
        sa.ForeignKeyConstraint(["usuarioid"], ["usuarios.id"]),
        sa.PrimaryKeyConstraint("usuarioid", "nombre"),
    )
    op.create_table(
        "permisos",
        sa.Column("idpermisos", sa.Integer(), nullable=False),
        sa.Column("escritura", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("lectura", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["idpermisos"], ["usuarios.id"]),
        sa.PrimaryKeyConstraint("idpermisos"),
    )


def downgrade() -> None:
    op.drop_table("permisos")
    op.drop_table("roles")
    op.drop_index(op.f("ix_usuarios_email"), table_name="usuarios")
    op.drop_index(op.f("ix_usuarios_nombre"), table_name="usuarios")
    op.drop_table("usuarios")
