"""Persistence helpers for leaderboard users."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UniquenessConflict:
    """An insert rejected because another user already holds the value."""

    field: str
    value: str

    @property
    def message(self) -> str:
        return f"{self.field} '{self.value}' is already in use."


InsertResult = Union[User, UniquenessConflict]


class UserStore:
    """Thin repository over a session.

    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_users(self) -> List[User]:
        """Return every user in store order (ascending id)."""

        return list(self.session.exec(select(User).order_by(User.id)).all())

    def list_by_stored_rank(self) -> List[User]:
        return list(
            self.session.exec(select(User).order_by(User.rank, User.id)).all()
        )

    def get(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def insert(self, display_name: str) -> InsertResult:
        """Insert a new user, relying on the unique index to reject duplicates.

        A duplicate rolls back the session's transaction and comes back as a
        ``UniquenessConflict`` rather than an exception.
        """

        user = User(display_name=display_name)
        self.session.add(user)
        try:
            self.session.flush()
        except IntegrityError:
            self.session.rollback()
            logger.warning("Rejected duplicate display name %r", display_name)
            return UniquenessConflict(field="displayName", value=display_name)
        self.session.refresh(user)
        return user

    def update_points(self, user_id: int, points: int) -> Optional[User]:
        user = self.get(user_id)
        if user is None:
            return None
        user.points = points
        self.session.add(user)
        self.session.flush()
        return user

    def set_rank(self, user: User, rank: int) -> None:
        user.rank = rank
        self.session.add(user)

    def delete(self, user_id: int) -> bool:
        user = self.get(user_id)
        if user is None:
            return False
        self.session.delete(user)
        self.session.flush()
        return True

    def delete_all(self) -> int:
        """Delete every user in one statement and return how many were removed."""

        result = self.session.connection().execute(delete(User))
        self.session.expunge_all()
        return result.rowcount or 0


__all__ = ["InsertResult", "UniquenessConflict", "UserStore"]
