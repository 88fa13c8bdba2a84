"""Service layer helpers."""

from .errors import EmptyNickname, PersistenceError, ProfileError
from .profile import (
    ProfileSnapshot,
    normalize_nickname,
    profile_to_dict,
    seed_nickname,
    validate_nickname,
)
from .ranking import (
    RankingBoard,
    RankingEntry,
    SessionRankingProvider,
    find_rank,
    load_ranking,
)
from .store import SessionProfileStore

__all__ = [
    "EmptyNickname",
    "PersistenceError",
    "ProfileError",
    "ProfileSnapshot",
    "RankingBoard",
    "RankingEntry",
    "SessionProfileStore",
    "SessionRankingProvider",
    "find_rank",
    "load_ranking",
    "normalize_nickname",
    "profile_to_dict",
    "seed_nickname",
    "validate_nickname",
]
