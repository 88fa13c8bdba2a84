"""Nickname rules and profile serialisation."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from ..core.config import DEFAULT_NICKNAME, UNSET_NICKNAME_LABEL
from ..models import User
from .errors import EmptyNickname


@dataclass(frozen=True)
class ProfileSnapshot:
    """Immutable copy of the user fields shown on the profile."""

    user_id: str
    nickname: str = ""
    level: int = 1
    total_study_time: float = 0.0
    experience: float = 0.0

    @classmethod
    def from_user(cls, user: User) -> "ProfileSnapshot":
        return cls(
            user_id=user.id,
            nickname=user.nickname,
            level=user.level,
            total_study_time=user.total_study_time,
            experience=user.experience,
        )

    def with_nickname(self, nickname: str) -> "ProfileSnapshot":
        return replace(self, nickname=nickname)


def normalize_nickname(candidate: str) -> str:
    """Strip leading and trailing whitespace, newlines included."""

    return (candidate or "").strip()


def validate_nickname(candidate: str) -> str:
    """Return the trimmed nickname or raise :class:`EmptyNickname`.

    Any upper bound on length is left to the caller.
    """

    normalized = normalize_nickname(candidate)
    if not normalized:
        raise EmptyNickname(candidate)
    return normalized


def seed_nickname(current: str, sentinel: str = DEFAULT_NICKNAME) -> str:
    """Initial value of the edit field for ``current``.

    The sentinel default starts as an empty field so first-time users type a
    fresh name instead of clearing the placeholder.
    """

    current = current or ""
    if current == sentinel:
        return ""
    return current


def display_nickname(nickname: str) -> str:
    return nickname or UNSET_NICKNAME_LABEL


def format_study_time(seconds: float) -> str:
    """Render a duration in seconds as ``H:MM:SS``."""

    total = max(int(seconds or 0), 0)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def format_rank(rank: Optional[int]) -> str:
    return f"#{rank}" if rank is not None else "---"


def profile_to_dict(profile: ProfileSnapshot, rank: Optional[int]) -> Dict[str, Any]:
    """Serialise a profile and its rank to an API-friendly dict."""

    return {
        "id": profile.user_id,
        "nickname": profile.nickname,
        "displayNickname": display_nickname(profile.nickname),
        "level": profile.level,
        "levelLabel": f"Lv. {profile.level}",
        "totalStudyTime": profile.total_study_time,
        "totalStudyTimeLabel": format_study_time(profile.total_study_time),
        "experience": profile.experience,
        "experienceLabel": f"{int(profile.experience)} EXP",
        "rank": rank,
        "rankLabel": format_rank(rank),
    }


__all__ = [
    "ProfileSnapshot",
    "display_nickname",
    "format_rank",
    "format_study_time",
    "normalize_nickname",
    "profile_to_dict",
    "seed_nickname",
    "validate_nickname",
]
