"""Service layer helpers."""

from .ranking import RankedUser, RankingPolicy, RankingService, compute_ranks
from .users import UniquenessConflict, UserStore

__all__ = [
    "RankedUser",
    "RankingPolicy",
    "RankingService",
    "UniquenessConflict",
    "UserStore",
    "compute_ranks",
]
