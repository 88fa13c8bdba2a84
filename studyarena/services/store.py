"""Profile persistence."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from ..core.config import DEFAULT_NICKNAME
from ..core.time import utcnow
from ..models import User
from .errors import PersistenceError
from .profile import ProfileSnapshot

logger = logging.getLogger(__name__)


class ProfileStore(Protocol):
    """Anything able to persist a profile snapshot."""

    async def save(self, profile: ProfileSnapshot) -> None:
        ...


class SessionProfileStore:
    """SQLModel-backed store; blocking work runs in the threadpool.

    Every failure of the database layer is rolled back and re-raised as
    :class:`PersistenceError`. Nothing is retried.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    async def save(self, profile: ProfileSnapshot) -> None:
        await run_in_threadpool(self._save, profile)

    async def load(self, user_id: str) -> Optional[ProfileSnapshot]:
        return await run_in_threadpool(self._load, user_id)

    async def register(self, user_id: str) -> ProfileSnapshot:
        """Return the profile for ``user_id``, creating it if needed."""

        return await run_in_threadpool(self._register, user_id)

    def _save(self, profile: ProfileSnapshot) -> None:
        try:
            user = self._session.get(User, profile.user_id)
            if user is None:
                user = User(
                    id=profile.user_id,
                    level=profile.level,
                    total_study_time=profile.total_study_time,
                    experience=profile.experience,
                )
            # Stats on an existing row belong to other writers; only the
            # nickname is edited here.
            user.nickname = profile.nickname
            user.updated_at = utcnow()
            self._session.add(user)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise PersistenceError(f"Failed to save profile {profile.user_id}") from exc
        logger.info("Saved profile %s", profile.user_id)

    def _load(self, user_id: str) -> Optional[ProfileSnapshot]:
        try:
            user = self._session.get(User, user_id)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to load profile {user_id}") from exc
        if user is None:
            return None
        return ProfileSnapshot.from_user(user)

    def _register(self, user_id: str) -> ProfileSnapshot:
        try:
            user = self._session.get(User, user_id)
            if user is None:
                user = User(id=user_id, nickname=DEFAULT_NICKNAME)
                self._session.add(user)
                self._session.commit()
                self._session.refresh(user)
                logger.info("Registered user %s", user_id)
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise PersistenceError(f"Failed to register user {user_id}") from exc
        return ProfileSnapshot.from_user(user)


__all__ = ["ProfileStore", "SessionProfileStore"]
