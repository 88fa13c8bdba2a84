"""Database model for StudyArena users."""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


class User(SQLModel, table=True):
    """Study participant with accumulated stats.

    ``total_study_time`` is stored in seconds. An empty ``nickname`` means
    the user never picked one.
    """

    id: str = ORMField(primary_key=True)
    nickname: str = ""
    level: int = 1
    total_study_time: float = 0.0
    experience: float = ORMField(default=0.0, index=True)
    created_at: datetime = ORMField(default_factory=utcnow)
    updated_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["User"]
