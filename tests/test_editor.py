"""Tests for the profile edit flow reducer and controller."""

from unittest.mock import AsyncMock

import pytest

from studyarena.services.editor import (
    NOTICE_DISCARDED,
    NOTICE_EMPTY_NICKNAME,
    NOTICE_SAVE_FAILED,
    NOTICE_SAVED,
    BeginEdit,
    CancelEdit,
    DraftChanged,
    EditPhase,
    NoticeDismissed,
    NoticeKind,
    ProfileController,
    ProfileLoaded,
    ProfileState,
    RankingChanged,
    SaveFailed,
    SaveRequested,
    SaveSucceeded,
    reduce,
)
from studyarena.services.errors import PersistenceError
from studyarena.services.profile import ProfileSnapshot
from studyarena.services.ranking import RankingBoard, RankingEntry

SENTINEL = "挑戦者"


def _profile(nickname="Alex", user_id="u7"):
    return ProfileSnapshot(user_id=user_id, nickname=nickname, level=3, experience=150)


def _run(state, *events):
    for event in events:
        state = reduce(state, event, sentinel=SENTINEL)
    return state


def _ranking(*user_ids):
    return tuple(RankingEntry(user_id=user_id) for user_id in user_ids)


@pytest.fixture
def viewing():
    return _run(ProfileState(), ProfileLoaded(_profile()))


class TestReducer:
    def test_begin_edit_seeds_current_nickname(self, viewing):
        state = _run(viewing, BeginEdit())

        assert state.phase is EditPhase.EDITING
        assert state.draft == "Alex"

    def test_begin_edit_with_sentinel_seeds_empty_field(self):
        state = _run(ProfileState(), ProfileLoaded(_profile(SENTINEL)), BeginEdit())

        assert state.draft == ""

    def test_begin_edit_without_profile_is_ignored(self):
        state = ProfileState()

        assert reduce(state, BeginEdit()) is state

    def test_draft_changes_only_while_editing(self, viewing):
        assert reduce(viewing, DraftChanged("x")) is viewing
        assert _run(viewing, BeginEdit(), DraftChanged("Sam")).draft == "Sam"

    def test_cancel_with_changes_shows_discard_notice(self, viewing):
        state = _run(viewing, BeginEdit(), DraftChanged("Sam"), CancelEdit())

        assert state.phase is EditPhase.VIEWING
        assert state.draft == "Alex"
        assert state.committed.nickname == "Alex"
        assert state.notice.kind is NoticeKind.CANCEL
        assert state.notice.message == NOTICE_DISCARDED

    def test_cancel_without_changes_is_silent(self, viewing):
        state = _run(viewing, BeginEdit(), CancelEdit())

        assert state.phase is EditPhase.VIEWING
        assert state.notice is None

    def test_cancel_untouched_sentinel_field_reports_discard(self):
        state = _run(
            ProfileState(), ProfileLoaded(_profile(SENTINEL)), BeginEdit(), CancelEdit()
        )

        assert state.phase is EditPhase.VIEWING
        assert state.draft == SENTINEL
        assert state.notice.kind is NoticeKind.CANCEL
        assert state.notice.message == NOTICE_DISCARDED

    def test_blank_draft_stays_in_editing(self, viewing):
        state = _run(viewing, BeginEdit(), DraftChanged("   "), SaveRequested())

        assert state.phase is EditPhase.EDITING
        assert state.pending is None
        assert state.notice.kind is NoticeKind.ERROR
        assert state.notice.message == NOTICE_EMPTY_NICKNAME

    def test_valid_draft_moves_to_saving_with_trimmed_nickname(self, viewing):
        state = _run(viewing, BeginEdit(), DraftChanged("  Sam  "), SaveRequested())

        assert state.phase is EditPhase.SAVING
        assert state.pending == "Sam"
        assert state.committed.nickname == "Alex"

    def test_save_requested_while_saving_is_ignored(self, viewing):
        saving = _run(viewing, BeginEdit(), DraftChanged("Sam"), SaveRequested())

        assert reduce(saving, SaveRequested()) is saving

    def test_save_succeeded_commits_pending(self, viewing):
        state = _run(viewing, BeginEdit(), DraftChanged(" Sam "), SaveRequested(), SaveSucceeded())

        assert state.phase is EditPhase.VIEWING
        assert state.committed.nickname == "Sam"
        assert state.committed.user_id == "u7"
        assert state.pending is None
        assert state.notice.kind is NoticeKind.SUCCESS
        assert state.notice.message == NOTICE_SAVED

    def test_save_failed_keeps_committed_nickname(self, viewing):
        state = _run(viewing, BeginEdit(), DraftChanged("Sam"), SaveRequested(), SaveFailed("boom"))

        assert state.phase is EditPhase.EDITING
        assert state.committed.nickname == "Alex"
        assert state.draft == "Sam"
        assert state.pending is None
        assert state.notice.message == NOTICE_SAVE_FAILED

    def test_outcome_events_outside_saving_are_ignored(self, viewing):
        assert reduce(viewing, SaveSucceeded()) is viewing
        assert reduce(viewing, SaveFailed()) is viewing

    def test_rank_follows_ranking_changes(self, viewing):
        state = _run(viewing, RankingChanged(_ranking("u2", "u7", "u3")))
        assert state.rank == 2

        state = _run(state, RankingChanged(_ranking("u2", "u3")))
        assert state.rank is None

    def test_rank_without_profile(self):
        assert _run(ProfileState(), RankingChanged(_ranking("u1"))).rank is None

    def test_notice_dismissed(self, viewing):
        state = _run(viewing, BeginEdit(), DraftChanged("Sam"), CancelEdit(), NoticeDismissed())

        assert state.notice is None
        assert reduce(state, NoticeDismissed()) is state

    def test_draft_flags(self, viewing):
        editing = _run(viewing, BeginEdit())

        assert _run(editing, DraftChanged("  ")).draft_is_blank
        assert not _run(editing, DraftChanged("  ")).can_save
        assert not _run(editing, DraftChanged("")).draft_is_blank
        assert _run(editing, DraftChanged(" a ")).can_save

    def test_unknown_event(self, viewing):
        with pytest.raises(TypeError):
            reduce(viewing, object())


@pytest.mark.asyncio
class TestProfileController:
    def _controller(self, store=None, provider=None):
        store = store or AsyncMock()
        controller = ProfileController(store, provider, sentinel=SENTINEL)
        controller.load(_profile())
        return controller

    async def test_successful_save_persists_once_and_reloads_ranking(self):
        store = AsyncMock()
        provider = AsyncMock()
        provider.current_ranking.return_value = [RankingEntry(user_id="u1"), RankingEntry(user_id="u7")]
        controller = self._controller(store, provider)

        controller.begin_edit()
        controller.update_draft("  Sam ")
        state = await controller.save()

        store.save.assert_awaited_once_with(_profile("Sam"))
        provider.current_ranking.assert_awaited_once()
        assert state.phase is EditPhase.VIEWING
        assert state.committed.nickname == "Sam"
        assert state.rank == 2

    async def test_blank_draft_never_reaches_store(self):
        store = AsyncMock()
        controller = self._controller(store)

        controller.begin_edit()
        controller.update_draft("   ")
        state = await controller.save()

        store.save.assert_not_awaited()
        assert state.notice.message == NOTICE_EMPTY_NICKNAME

    async def test_failed_save_surfaces_error_without_retry(self):
        store = AsyncMock()
        store.save.side_effect = PersistenceError("network down")
        provider = AsyncMock()
        controller = self._controller(store, provider)

        controller.begin_edit()
        controller.update_draft("Sam")
        state = await controller.save()

        store.save.assert_awaited_once()
        provider.current_ranking.assert_not_awaited()
        assert state.phase is EditPhase.EDITING
        assert state.committed.nickname == "Alex"
        assert state.notice.kind is NoticeKind.ERROR

    async def test_unexpected_store_error_returns_to_editing(self):
        store = AsyncMock()
        store.save.side_effect = ConnectionError("socket reset")
        controller = self._controller(store)

        controller.begin_edit()
        controller.update_draft("Sam")
        with pytest.raises(ConnectionError):
            await controller.save()

        state = controller.state
        assert state.phase is EditPhase.EDITING
        assert state.committed.nickname == "Alex"
        assert state.notice.message == NOTICE_SAVE_FAILED

        controller.update_draft("Bob")
        assert controller.cancel_edit().phase is EditPhase.VIEWING

    async def test_save_outside_editing_does_nothing(self):
        store = AsyncMock()
        controller = self._controller(store)

        state = await controller.save()

        store.save.assert_not_awaited()
        assert state.phase is EditPhase.VIEWING

    async def test_ranking_refresh_failure_keeps_previous_ranking(self):
        provider = AsyncMock()
        provider.current_ranking.side_effect = PersistenceError("timeout")
        controller = self._controller(provider=provider)
        controller.dispatch(RankingChanged(_ranking("u7")))

        controller.begin_edit()
        controller.update_draft("Sam")
        state = await controller.save()

        assert state.committed.nickname == "Sam"
        assert state.rank == 1

    async def test_observers_see_each_state(self):
        controller = self._controller()
        phases = []
        controller.subscribe(lambda state: phases.append(state.phase))

        controller.begin_edit()
        controller.update_draft("Sam")
        await controller.save()

        assert phases == [
            EditPhase.EDITING,
            EditPhase.EDITING,
            EditPhase.SAVING,
            EditPhase.VIEWING,
        ]

    async def test_watch_follows_board(self):
        board = RankingBoard(_ranking("u7"))
        controller = self._controller()

        stop = controller.watch(board)
        assert controller.state.rank == 1

        board.replace(_ranking("u1", "u2", "u7"))
        assert controller.state.rank == 3

        stop()
        board.replace(_ranking("u9"))
        assert controller.state.rank == 3

    async def test_cancel_and_dismiss(self):
        controller = self._controller()

        controller.begin_edit()
        controller.update_draft("Sam")
        state = controller.cancel_edit()
        assert state.notice.message == NOTICE_DISCARDED

        assert controller.dismiss_notice().notice is None
