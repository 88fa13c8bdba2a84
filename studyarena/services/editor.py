"""Profile edit flow as an immutable state plus a pure reducer.

``reduce`` maps ``(state, event)`` to a new :class:`ProfileState` and never
touches storage. :class:`ProfileController` is the thin async shim that feeds
it events, talks to the profile store and ranking provider, and notifies
render observers.

Saves are pessimistic: ``committed`` only changes once the store confirms,
so a failed save leaves nothing to roll back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from ..core.config import DEFAULT_NICKNAME
from .errors import EmptyNickname, PersistenceError
from .profile import ProfileSnapshot, normalize_nickname, seed_nickname, validate_nickname
from .ranking import RankingBoard, RankingEntry, RankingProvider, find_rank
from .store import ProfileStore

logger = logging.getLogger(__name__)

NOTICE_DISCARDED = "Changes discarded"
NOTICE_EMPTY_NICKNAME = "Please enter a nickname"
NOTICE_SAVED = "Profile saved"
NOTICE_SAVE_FAILED = "Failed to save profile"


class EditPhase(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"
    SAVING = "saving"


class NoticeKind(str, Enum):
    SUCCESS = "success"
    CANCEL = "cancel"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """Transient message shown to the user."""

    kind: NoticeKind
    message: str


@dataclass(frozen=True)
class ProfileState:
    committed: Optional[ProfileSnapshot] = None
    phase: EditPhase = EditPhase.VIEWING
    draft: str = ""
    pending: Optional[str] = None
    ranking: Tuple[RankingEntry, ...] = ()
    notice: Optional[Notice] = None

    @property
    def rank(self) -> Optional[int]:
        if self.committed is None:
            return None
        return find_rank(self.ranking, self.committed.user_id)

    @property
    def can_save(self) -> bool:
        return self.phase is EditPhase.EDITING and bool(normalize_nickname(self.draft))

    @property
    def draft_is_blank(self) -> bool:
        """True when the draft has characters but all of them are whitespace."""
        return bool(self.draft) and not normalize_nickname(self.draft)


# Events ---------------------------------------------------------------------


@dataclass(frozen=True)
class ProfileLoaded:
    profile: ProfileSnapshot


@dataclass(frozen=True)
class BeginEdit:
    pass


@dataclass(frozen=True)
class DraftChanged:
    text: str


@dataclass(frozen=True)
class CancelEdit:
    pass


@dataclass(frozen=True)
class SaveRequested:
    pass


@dataclass(frozen=True)
class SaveSucceeded:
    pass


@dataclass(frozen=True)
class SaveFailed:
    reason: str = ""


@dataclass(frozen=True)
class RankingChanged:
    entries: Tuple[RankingEntry, ...]


@dataclass(frozen=True)
class NoticeDismissed:
    pass


def reduce(state: ProfileState, event: object, *, sentinel: str = DEFAULT_NICKNAME) -> ProfileState:
    """Return the state that follows ``event``.

    Events that make no sense in the current phase return ``state`` itself.
    """

    if isinstance(event, ProfileLoaded):
        return replace(state, committed=event.profile)

    if isinstance(event, RankingChanged):
        return replace(state, ranking=tuple(event.entries))

    if isinstance(event, NoticeDismissed):
        return replace(state, notice=None) if state.notice is not None else state

    if isinstance(event, BeginEdit):
        if state.phase is not EditPhase.VIEWING or state.committed is None:
            return _ignored(state, event)
        return replace(
            state,
            phase=EditPhase.EDITING,
            draft=seed_nickname(state.committed.nickname, sentinel),
        )

    if isinstance(event, DraftChanged):
        if state.phase is not EditPhase.EDITING:
            return _ignored(state, event)
        return replace(state, draft=event.text)

    if isinstance(event, CancelEdit):
        if state.phase is not EditPhase.EDITING:
            return _ignored(state, event)
        original = state.committed.nickname if state.committed else ""
        notice = state.notice
        if state.draft != original:
            notice = Notice(NoticeKind.CANCEL, NOTICE_DISCARDED)
        return replace(state, phase=EditPhase.VIEWING, draft=original, notice=notice)

    if isinstance(event, SaveRequested):
        if state.phase is not EditPhase.EDITING or state.committed is None:
            return _ignored(state, event)
        try:
            nickname = validate_nickname(state.draft)
        except EmptyNickname:
            return replace(state, notice=Notice(NoticeKind.ERROR, NOTICE_EMPTY_NICKNAME))
        return replace(state, phase=EditPhase.SAVING, pending=nickname)

    if isinstance(event, SaveSucceeded):
        if state.phase is not EditPhase.SAVING or state.committed is None or state.pending is None:
            return _ignored(state, event)
        return replace(
            state,
            committed=state.committed.with_nickname(state.pending),
            phase=EditPhase.VIEWING,
            draft=state.pending,
            pending=None,
            notice=Notice(NoticeKind.SUCCESS, NOTICE_SAVED),
        )

    if isinstance(event, SaveFailed):
        if state.phase is not EditPhase.SAVING:
            return _ignored(state, event)
        return replace(
            state,
            phase=EditPhase.EDITING,
            pending=None,
            notice=Notice(NoticeKind.ERROR, NOTICE_SAVE_FAILED),
        )

    raise TypeError(f"Unknown profile event: {event!r}")


def _ignored(state: ProfileState, event: object) -> ProfileState:
    logger.debug("Ignoring %s in phase %s", type(event).__name__, state.phase.value)
    return state


StateListener = Callable[[ProfileState], None]


class ProfileController:
    """Drives the edit flow for a single profile."""

    def __init__(
        self,
        store: ProfileStore,
        ranking_provider: Optional[RankingProvider] = None,
        *,
        state: Optional[ProfileState] = None,
        sentinel: str = DEFAULT_NICKNAME,
    ) -> None:
        self._store = store
        self._ranking_provider = ranking_provider
        self._state = state or ProfileState()
        self._sentinel = sentinel
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> ProfileState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, event: object) -> ProfileState:
        new_state = reduce(self._state, event, sentinel=self._sentinel)
        if new_state is not self._state:
            self._state = new_state
            for listener in list(self._listeners):
                listener(new_state)
        return self._state

    def load(self, profile: ProfileSnapshot) -> ProfileState:
        return self.dispatch(ProfileLoaded(profile))

    def begin_edit(self) -> ProfileState:
        return self.dispatch(BeginEdit())

    def update_draft(self, text: str) -> ProfileState:
        return self.dispatch(DraftChanged(text))

    def cancel_edit(self) -> ProfileState:
        return self.dispatch(CancelEdit())

    def dismiss_notice(self) -> ProfileState:
        return self.dispatch(NoticeDismissed())

    async def save(self) -> ProfileState:
        """Validate the draft and persist it with a single store call."""

        before = self._state
        state = self.dispatch(SaveRequested())
        if before.phase is not EditPhase.EDITING or state.phase is not EditPhase.SAVING:
            return state

        updated = state.committed.with_nickname(state.pending)
        try:
            await self._store.save(updated)
        except PersistenceError as exc:
            logger.warning("Failed to save profile %s: %s", updated.user_id, exc, exc_info=True)
            return self.dispatch(SaveFailed(str(exc)))
        except Exception as exc:
            # Leave SAVING before propagating so the edit flow stays usable.
            logger.exception("Unexpected error saving profile %s", updated.user_id)
            self.dispatch(SaveFailed(str(exc)))
            raise

        self.dispatch(SaveSucceeded())
        await self.refresh_ranking()
        return self._state

    async def refresh_ranking(self) -> None:
        """Reload the ranking; on failure the previous snapshot is kept."""

        if self._ranking_provider is None:
            return
        try:
            entries = await self._ranking_provider.current_ranking()
        except PersistenceError as exc:
            logger.warning("Failed to refresh ranking: %s", exc, exc_info=True)
            return
        self.dispatch(RankingChanged(tuple(entries)))

    def watch(self, board: RankingBoard) -> Callable[[], None]:
        """Follow ``board``; returns a callable that stops following it."""

        self.dispatch(RankingChanged(board.entries))
        return board.subscribe(self._on_ranking)

    def _on_ranking(self, entries: Sequence[RankingEntry]) -> None:
        self.dispatch(RankingChanged(tuple(entries)))


__all__ = [
    "BeginEdit",
    "CancelEdit",
    "DraftChanged",
    "EditPhase",
    "Notice",
    "NoticeDismissed",
    "NoticeKind",
    "ProfileController",
    "ProfileLoaded",
    "ProfileState",
    "RankingChanged",
    "SaveFailed",
    "SaveRequested",
    "SaveSucceeded",
    "reduce",
]
