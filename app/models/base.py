"""SQLAlchemy declarative Base shared by the account tables."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
