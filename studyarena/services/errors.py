"""Errors raised by the profile services."""

from __future__ import annotations


class ProfileError(Exception):
    """Base class for recoverable profile failures."""


class EmptyNickname(ProfileError, ValueError):
    """Nickname is empty once surrounding whitespace is removed."""

    def __init__(self, candidate: str = "") -> None:
        super().__init__("Nickname must contain at least one visible character")
        self.candidate = candidate


class PersistenceError(ProfileError):
    """The backing store failed to read or write profile data.

    The underlying exception is chained as ``__cause__``.
    """


__all__ = ["EmptyNickname", "PersistenceError", "ProfileError"]
