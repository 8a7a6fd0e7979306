"""Rank computation and the service that serves ranked users."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Protocol, Sequence, Tuple, TypeVar, Union

from sqlmodel import Session

from ..models import User
from .users import UniquenessConflict, UserStore

logger = logging.getLogger(__name__)


class HasPoints(Protocol):
    points: int


T = TypeVar("T", bound=HasPoints)


def compute_ranks(users: Sequence[T]) -> List[Tuple[T, int]]:
    """Pair each user with its 1-based rank, best first.

    Users are ordered by points descending. ``sorted`` is stable, so users with
    equal points keep the relative order they had in ``users``; no two users
    ever share a rank.
    """

    ordered = sorted(users, key=lambda user: user.points, reverse=True)
    return [(user, position) for position, user in enumerate(ordered, start=1)]


class RankingPolicy(str, Enum):
    """When ranks are computed."""

    ON_DEMAND = "on_demand"
    ON_WRITE = "on_write"

    @classmethod
    def parse(cls, raw: str) -> "RankingPolicy":
        try:
            return cls(raw.strip().lower())
        except ValueError as exc:
            allowed = ", ".join(policy.value for policy in cls)
            raise RuntimeError(
                f"RANKING_POLICY must be one of {allowed} (got {raw!r})"
            ) from exc


@dataclass(frozen=True)
class RankedUser:
    id: int
    display_name: str
    points: int
    rank: int

    @classmethod
    def from_user(cls, user: User, rank: int) -> "RankedUser":
        return cls(
            id=user.id,
            display_name=user.display_name,
            points=user.points,
            rank=rank,
        )


CreateResult = Union[RankedUser, UniquenessConflict]

# Serialises mutation + recompute + commit under the on-write policy.
_RECOMPUTE_LOCK = threading.Lock()


class RankingService:
    """Serves ranked users from a store under a fixed ranking policy.

    Under ``ON_DEMAND`` every read ranks the full population and nothing rank
    related is ever written. Under ``ON_WRITE`` each mutation recomputes and
    persists ranks inside the same transaction, and reads return the stored
    values.
    """

    def __init__(
        self,
        session: Session,
        policy: RankingPolicy = RankingPolicy.ON_DEMAND,
    ) -> None:
        self.session = session
        self.store = UserStore(session)
        self.policy = policy

    # Reads ---------------------------------------------------------------
    def list_ranked(self) -> List[RankedUser]:
        if self.policy is RankingPolicy.ON_WRITE:
            return [
                RankedUser.from_user(user, user.rank)
                for user in self.store.list_by_stored_rank()
            ]
        return [
            RankedUser.from_user(user, rank)
            for user, rank in compute_ranks(self.store.list_users())
        ]

    def get_ranked(self, user_id: int) -> Optional[RankedUser]:
        if self.policy is RankingPolicy.ON_WRITE:
            user = self.store.get(user_id)
            return RankedUser.from_user(user, user.rank) if user else None
        # A rank only means something relative to everyone, so rank first.
        for entry in self.list_ranked():
            if entry.id == user_id:
                return entry
        return None

    # Writes --------------------------------------------------------------
    def create_user(self, display_name: str) -> Optional[CreateResult]:
        """Insert a user and return it ranked.

        ``None`` means the user was deleted by another request before it
        could be read back.
        """

        with self._mutation():
            result = self.store.insert(display_name)
            if isinstance(result, UniquenessConflict):
                return result
            user_id = result.id
        logger.info("Created user %s (%r)", user_id, display_name)
        return self.get_ranked(user_id)

    def update_points(self, user_id: int, points: int) -> bool:
        with self._mutation():
            user = self.store.update_points(user_id, points)
        if user is None:
            return False
        logger.info("Set points of user %s to %s", user_id, points)
        return True

    def delete_user(self, user_id: int) -> bool:
        with self._mutation():
            deleted = self.store.delete(user_id)
        if deleted:
            logger.info("Deleted user %s", user_id)
        return deleted

    def delete_all(self) -> int:
        with self._mutation():
            count = self.store.delete_all()
        logger.info("Deleted all users (%d)", count)
        return count

    def recompute(self) -> int:
        """Persist fresh ranks for every user whose stored rank is stale.

        Returns the number of rows rewritten. Only needed under ``ON_WRITE``,
        where it runs after every mutation and once at startup.
        """

        with _RECOMPUTE_LOCK:
            try:
                changed = self._persist_ranks()
                self.session.commit()
            except Exception:
                self.session.rollback()
                raise
        return changed

    # Internals -----------------------------------------------------------
    def _persist_ranks(self) -> int:
        changed = 0
        for user, rank in compute_ranks(self.store.list_users()):
            if user.rank != rank:
                self.store.set_rank(user, rank)
                changed += 1
        self.session.flush()
        logger.debug("Recomputed ranks, %d row(s) rewritten", changed)
        return changed

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        """Run a write as one transaction, re-ranking before commit on write."""

        on_write = self.policy is RankingPolicy.ON_WRITE
        if on_write:
            _RECOMPUTE_LOCK.acquire()
        try:
            yield
            if on_write:
                self._persist_ranks()
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        finally:
            if on_write:
                _RECOMPUTE_LOCK.release()


__all__ = [
    "CreateResult",
    "RankedUser",
    "RankingPolicy",
    "RankingService",
    "compute_ranks",
]
