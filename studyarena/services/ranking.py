"""Ranking lookup and the shared ranking snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
from starlette.concurrency import run_in_threadpool

from ..models import User
from .errors import PersistenceError

logger = logging.getLogger(__name__)

RankingListener = Callable[[Tuple["RankingEntry", ...]], None]


@dataclass(frozen=True)
class RankingEntry:
    """Position holder in an externally ordered ranking."""

    user_id: str
    nickname: str = ""
    experience: float = 0.0


def find_rank(ranking: Sequence[RankingEntry], user_id: str) -> Optional[int]:
    """Return the 1-based position of ``user_id`` in ``ranking``.

    The first matching entry wins. ``None`` means the user is not ranked.
    """

    for index, entry in enumerate(ranking):
        if entry.user_id == user_id:
            return index + 1
    return None


def load_ranking(session: Session, limit: Optional[int] = None) -> List[RankingEntry]:
    """Load users ordered by experience, highest first."""

    query = select(User).order_by(User.experience.desc(), User.id.asc())
    if limit is not None:
        query = query.limit(limit)
    users = session.exec(query).all()
    return [
        RankingEntry(user_id=user.id, nickname=user.nickname, experience=user.experience)
        for user in users
    ]


class RankingProvider(Protocol):
    """Source of the current ranking snapshot."""

    async def current_ranking(self) -> List[RankingEntry]:
        ...


class SessionRankingProvider:
    """Ranking provider backed by a database session."""

    def __init__(self, session: Session, limit: Optional[int] = None) -> None:
        self._session = session
        self._limit = limit

    async def current_ranking(self) -> List[RankingEntry]:
        try:
            return await run_in_threadpool(load_ranking, self._session, self._limit)
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to load ranking") from exc


class RankingBoard:
    """Holds the current ranking and pushes replacements to subscribers.

    The sequence is always swapped as a whole; listeners receive the new
    tuple after it has been installed.
    """

    def __init__(self, entries: Sequence[RankingEntry] = ()) -> None:
        self._entries: Tuple[RankingEntry, ...] = tuple(entries)
        self._listeners: List[RankingListener] = []

    @property
    def entries(self) -> Tuple[RankingEntry, ...]:
        return self._entries

    def rank_of(self, user_id: str) -> Optional[int]:
        return find_rank(self._entries, user_id)

    def replace(self, entries: Sequence[RankingEntry]) -> None:
        self._entries = tuple(entries)
        logger.debug("Ranking replaced with %d entries", len(self._entries))
        for listener in list(self._listeners):
            listener(self._entries)

    def subscribe(self, listener: RankingListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


__all__ = [
    "RankingBoard",
    "RankingEntry",
    "RankingProvider",
    "SessionRankingProvider",
    "find_rank",
    "load_ranking",
]
