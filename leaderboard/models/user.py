"""Database model for leaderboard users."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger, Column
from sqlmodel import Field as ORMField, SQLModel


class User(SQLModel, table=True):
    """Participant identified by a unique display name.

    ``rank`` is only written under the on-write ranking policy; it is a cache
    of what the ranking engine would compute from ``points`` and is never
    authoritative.
    """

    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = ORMField(default=None, primary_key=True)
    display_name: str = ORMField(index=True, unique=True, max_length=30)
    points: int = ORMField(default=0, sa_column=Column(BigInteger, nullable=False, default=0))
    rank: Optional[int] = ORMField(default=None)


__all__ = ["User"]
