"""Tests for memostack.workflow.lifecycle module."""

import random

import pytest
from datetime import datetime, timedelta, timezone

from memostack.lib.config import AppConfig
from memostack.lib.types import MemoStatus
from memostack.storage import InMemoryStorage, StorageError
from memostack.workflow.lifecycle import LifecycleManager
from memostack.workflow.memo_store import MemoNotFound

T0 = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FailingStorage(InMemoryStorage):
    """InMemoryStorage whose writes fail once `broken` is set."""

    broken = False

    def update_memo(self, memo):
        if self.broken:
            raise StorageError("disk full")
        super().update_memo(memo)

    def save_hot_stack(self, memo_ids):
        if self.broken:
            raise StorageError("disk full")
        super().save_hot_stack(memo_ids)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return InMemoryStorage()


def make_manager(storage, clock, max_hot_count=7):
    manager = LifecycleManager(storage, AppConfig(max_hot_count=max_hot_count), clock=clock)
    manager.load()
    return manager


def check_invariants(manager):
    assert len(manager.hot_stack) <= manager.max_hot_count
    assert len(set(manager.hot_stack)) == len(manager.hot_stack)
    for memo_id in manager.hot_stack:
        assert manager.get(memo_id).status == MemoStatus.HOT
    for memo in manager.memos.values():
        assert (memo.completion_time is not None) == (memo.status == MemoStatus.DONE)


class TestCapture:
    """Test capture and eviction."""

    def test_capture_hot_goes_to_front(self, storage, clock):
        manager = make_manager(storage, clock)
        a = manager.capture("A")
        b = manager.capture("B", "details")

        assert manager.hot_stack == [b.id, a.id]
        assert b.status == MemoStatus.HOT
        assert b.body == "details"
        assert b.creation_time == T0
        assert storage.load_hot_stack() == [b.id, a.id]

    def test_eviction_scenario(self, storage, clock):
        """Capacity 2: capture A, B, C gives [C, B] and archives A."""
        manager = make_manager(storage, clock, max_hot_count=2)
        a = manager.capture("A")
        b = manager.capture("B")
        c = manager.capture("C")

        assert manager.hot_stack == [c.id, b.id]
        assert manager.get(a.id).status == MemoStatus.COLD
        assert storage.load_memos()[a.id].status == MemoStatus.COLD

    def test_capacity_plus_one_archives_exactly_first(self, storage, clock):
        manager = make_manager(storage, clock)
        memos = [manager.capture(f"memo {i}") for i in range(8)]

        cold = manager.search(MemoStatus.COLD)
        assert [m.id for m in cold] == [memos[0].id]
        assert manager.hot_stack == [m.id for m in reversed(memos[1:])]

    def test_capacity_never_exceeded(self, storage, clock):
        """Random captures and promotions keep the stack within capacity."""
        rng = random.Random(42)
        manager = make_manager(storage, clock, max_hot_count=3)
        for i in range(60):
            clock.advance(seconds=1)
            cold = manager.search(MemoStatus.COLD)
            if cold and rng.random() < 0.4:
                manager.promote_to_hot(rng.choice(cold).id)
            else:
                manager.capture(f"memo {i}")
            check_invariants(manager)

    def test_capture_delayed(self, storage, clock):
        manager = make_manager(storage, clock)
        memo = manager.capture("Later", delay_minutes=30)

        assert memo.status == MemoStatus.DELAYED
        assert memo.delay_minutes == 30
        assert memo.id not in manager.hot_stack
        assert manager.delayed_memos() == [memo]

    def test_non_positive_delay_captures_hot(self, storage, clock):
        manager = make_manager(storage, clock)
        memo = manager.capture("Now", delay_minutes=0)
        assert memo.status == MemoStatus.HOT
        assert memo.delay_minutes is None
        assert manager.hot_stack == [memo.id]

    def test_capture_text_splits_title_and_body(self, storage, clock):
        manager = make_manager(storage, clock)
        memo = manager.capture_text("  Groceries \n eggs\nflour ")
        assert memo.title == "Groceries"
        assert memo.body == "eggs\nflour"

    def test_capture_text_blank_returns_none(self, storage, clock):
        manager = make_manager(storage, clock)
        assert manager.capture_text("   \n  ") is None
        assert len(manager.memos) == 0

    def test_ids_never_reused(self, storage, clock):
        manager = make_manager(storage, clock)
        first = manager.capture("first")
        manager.delete(first.id)
        second = manager.capture("second")
        assert second.id > first.id


class TestTransitions:
    """Test promote, archive, complete and delete."""

    def test_complete_then_promote_scenario(self, storage, clock):
        """Completing removes from the stack; promoting clears completion_time."""
        manager = make_manager(storage, clock)
        memo = manager.capture("Pay rent")
        manager.capture("Other")

        clock.advance(minutes=5)
        manager.complete(memo.id)
        assert memo.id not in manager.hot_stack
        assert memo.status == MemoStatus.DONE
        assert memo.completion_time == T0 + timedelta(minutes=5)

        manager.promote_to_hot(memo.id)
        assert memo.completion_time is None
        assert memo.status == MemoStatus.HOT
        assert manager.hot_stack[0] == memo.id

    def test_promote_evicts_back(self, storage, clock):
        manager = make_manager(storage, clock, max_hot_count=2)
        a = manager.capture("A")
        manager.archive(a.id)
        b = manager.capture("B")
        c = manager.capture("C")

        manager.promote_to_hot(a.id)
        assert manager.hot_stack == [a.id, c.id]
        assert manager.get(b.id).status == MemoStatus.COLD
        check_invariants(manager)

    def test_promote_already_stacked_moves_to_front(self, storage, clock):
        manager = make_manager(storage, clock, max_hot_count=2)
        a = manager.capture("A")
        b = manager.capture("B")
        manager.promote_to_hot(a.id)
        assert manager.hot_stack == [a.id, b.id]
        assert manager.get(b.id).status == MemoStatus.HOT

    def test_archive_removes_from_stack(self, storage, clock):
        manager = make_manager(storage, clock)
        memo = manager.capture("A")
        manager.archive(memo.id)
        assert manager.hot_stack == []
        assert memo.status == MemoStatus.COLD
        assert storage.load_hot_stack() == []

    def test_archive_cold_is_noop(self, storage, clock):
        manager = make_manager(storage, clock)
        memo = manager.capture("A")
        manager.archive(memo.id)
        manager.archive(memo.id)
        assert memo.status == MemoStatus.COLD

    def test_complete_delayed(self, storage, clock):
        manager = make_manager(storage, clock)
        memo = manager.capture("Later", delay_minutes=10)
        manager.complete(memo.id)
        assert memo.status == MemoStatus.DONE
        assert manager.delayed_memos() == []

    def test_delete(self, storage, clock):
        manager = make_manager(storage, clock)
        memo = manager.capture("A")
        manager.delete(memo.id)
        assert memo.id not in manager.memos
        assert manager.hot_stack == []
        assert storage.load_memos() == {}

    def test_unknown_id_raises(self, storage, clock):
        manager = make_manager(storage, clock)
        with pytest.raises(MemoNotFound) as exc_info:
            manager.archive(99)
        assert str(exc_info.value) == "Memo 99 not found"
        with pytest.raises(MemoNotFound):
            manager.delete(99)


class TestReordering:
    """Test shift_up and move_to_front through the manager."""

    def test_shift_up_persists(self, storage, clock):
        manager = make_manager(storage, clock)
        a = manager.capture("A")
        b = manager.capture("B")
        assert manager.shift_up(a.id) is True
        assert manager.hot_stack == [a.id, b.id]
        assert storage.load_hot_stack() == [a.id, b.id]

    def test_front_is_noop(self, storage, clock):
        manager = make_manager(storage, clock)
        manager.capture("A")
        b = manager.capture("B")
        assert manager.shift_up(b.id) is False
        assert manager.move_to_front(b.id) is False

    def test_move_to_front_never_evicts(self, storage, clock):
        manager = make_manager(storage, clock, max_hot_count=3)
        ids = [manager.capture(name).id for name in "ABC"]
        assert manager.move_to_front(ids[0]) is True
        assert manager.hot_stack == [ids[0], ids[2], ids[1]]
        assert manager.search(MemoStatus.COLD) == []

    def test_not_stacked_is_noop(self, storage, clock):
        manager = make_manager(storage, clock)
        memo = manager.capture("A")
        manager.archive(memo.id)
        assert manager.move_to_front(memo.id) is False


class TestDelayedPromotion:
    """Test check_and_promote_delayed."""

    def test_promotes_exactly_at_ready_time(self, storage, clock):
        manager = make_manager(storage, clock)
        memo = manager.capture("Later", delay_minutes=30)

        assert manager.check_and_promote_delayed(T0 + timedelta(minutes=29, seconds=59)) == []
        assert memo.status == MemoStatus.DELAYED

        assert manager.check_and_promote_delayed(T0 + timedelta(minutes=30)) == [memo.id]
        assert memo.status == MemoStatus.HOT
        assert manager.hot_stack[0] == memo.id
        assert memo.delay_minutes == 30

    def test_batch_promotes_soonest_first(self, storage, clock):
        """Later-due memos end up nearer the front."""
        manager = make_manager(storage, clock)
        late = manager.capture("late", delay_minutes=20)
        early = manager.capture("early", delay_minutes=10)

        promoted = manager.check_and_promote_delayed(T0 + timedelta(hours=1))
        assert promoted == [early.id, late.id]
        assert manager.hot_stack == [late.id, early.id]

    def test_batch_respects_capacity(self, storage, clock):
        manager = make_manager(storage, clock, max_hot_count=1)
        first = manager.capture("first", delay_minutes=1)
        second = manager.capture("second", delay_minutes=2)

        manager.check_and_promote_delayed(T0 + timedelta(minutes=5))
        assert manager.hot_stack == [second.id]
        assert first.status == MemoStatus.COLD


    def test_naive_now_is_taken_as_utc(self, storage, clock):
        """A naive now is compared as UTC rather than raising TypeError."""
        manager = make_manager(storage, clock)
        memo = manager.capture("Later", delay_minutes=30)
        naive = (T0 + timedelta(minutes=30)).replace(tzinfo=None)

        assert manager.check_and_promote_delayed(naive - timedelta(seconds=1)) == []
        assert manager.check_and_promote_delayed(naive) == [memo.id]


class TestReplace:
    """Test replace: capture the draft, then take the memo for editing."""

    def test_replace_returns_text_and_deletes(self, storage, clock):
        manager = make_manager(storage, clock)
        memo = manager.capture("Title", "line one\nline two")
        text = manager.replace(memo.id)
        assert text == "Title\nline one\nline two"
        assert memo.id not in manager.memos

    def test_replace_without_body(self, storage, clock):
        manager = make_manager(storage, clock)
        memo = manager.capture("Just a title")
        assert manager.replace(memo.id) == "Just a title"

    def test_replace_saves_draft_first(self, storage, clock):
        manager = make_manager(storage, clock)
        memo = manager.capture("Old")
        manager.replace(memo.id, draft="Unsaved idea\nwith body")

        remaining = list(manager.memos.values())
        assert [m.title for m in remaining] == ["Unsaved idea"]
        assert remaining[0].status == MemoStatus.HOT
        assert manager.hot_stack == [remaining[0].id]

    def test_blank_draft_not_captured(self, storage, clock):
        manager = make_manager(storage, clock)
        memo = manager.capture("Old")
        manager.replace(memo.id, draft="   ")
        assert manager.memos == {}

    def test_replace_unknown_does_not_capture_draft(self, storage, clock):
        manager = make_manager(storage, clock)
        with pytest.raises(MemoNotFound):
            manager.replace(42, draft="keep me")
        assert manager.memos == {}


class TestLoad:
    """Test load-time reconciliation and round trip."""

    def test_round_trip(self, storage, clock):
        manager = make_manager(storage, clock)
        a = manager.capture("A", "body a")
        b = manager.capture("B")
        manager.complete(b.id)
        c = manager.capture("C", delay_minutes=15)
        a.expanded = True

        reloaded = make_manager(storage, clock)
        assert reloaded.hot_stack == manager.hot_stack
        assert reloaded.memos == manager.memos
        assert reloaded.get(a.id).expanded is False
        assert reloaded.get(c.id).delay_minutes == 15

    def test_stray_ids_dropped_and_persisted(self, storage, clock, caplog):
        hot = storage.insert_memo("hot", "", MemoStatus.HOT, T0)
        cold = storage.insert_memo("cold", "", MemoStatus.COLD, T0)
        storage.save_hot_stack([99, cold, hot])

        manager = make_manager(storage, clock)
        assert manager.hot_stack == [hot]
        assert storage.load_hot_stack() == [hot]
        assert "Dropped stray ids" in caplog.text

    def test_hot_memo_outside_stack_left_alone(self, storage, clock):
        memo_id = storage.insert_memo("orphan", "", MemoStatus.HOT, T0)
        manager = make_manager(storage, clock)
        assert manager.hot_stack == []
        assert manager.get(memo_id).status == MemoStatus.HOT

    def test_lowered_capacity_archives_overflow(self, storage, clock):
        ids = [storage.insert_memo(name, "", MemoStatus.HOT, T0) for name in "ABC"]
        storage.save_hot_stack(ids)

        manager = make_manager(storage, clock, max_hot_count=2)
        assert manager.hot_stack == ids[:2]
        assert manager.get(ids[2]).status == MemoStatus.COLD
        assert storage.load_memos()[ids[2]].status == MemoStatus.COLD


class TestStorageFailure:
    """In-memory state stays correct when a flush fails."""

    def test_failed_flush_raises_after_applying(self, clock):
        storage = FailingStorage()
        manager = make_manager(storage, clock)
        memo = manager.capture("A")

        storage.broken = True
        with pytest.raises(StorageError):
            manager.complete(memo.id)

        assert memo.status == MemoStatus.DONE
        assert manager.hot_stack == []
        check_invariants(manager)
