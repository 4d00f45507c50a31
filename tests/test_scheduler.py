"""Tests for memostack.workflow.scheduler module."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from memostack.lib.config import AppConfig
from memostack.lib.types import MemoStatus
from memostack.storage import InMemoryStorage
from memostack.workflow.lifecycle import LifecycleManager
from memostack.workflow.scheduler import DelayedPromotionScheduler

T0 = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


def make_manager():
    manager = LifecycleManager(InMemoryStorage(), AppConfig(), clock=lambda: T0)
    manager.load()
    return manager


class TestIsDue:
    """Test the check interval."""

    def test_first_tick_is_due(self):
        scheduler = DelayedPromotionScheduler(MagicMock(), interval_seconds=60)
        assert scheduler.is_due(T0)

    def test_within_interval_not_due(self):
        scheduler = DelayedPromotionScheduler(MagicMock(), interval_seconds=60)
        scheduler.last_checked = T0
        assert not scheduler.is_due(T0 + timedelta(seconds=59))
        assert scheduler.is_due(T0 + timedelta(seconds=60))

    def test_clock_going_backwards_is_due(self):
        scheduler = DelayedPromotionScheduler(MagicMock(), interval_seconds=60)
        scheduler.last_checked = T0
        assert scheduler.is_due(T0 - timedelta(seconds=1))

    def test_zero_interval_always_due(self):
        scheduler = DelayedPromotionScheduler(MagicMock())
        scheduler.last_checked = T0
        assert scheduler.is_due(T0)


class TestTick:
    """Test promotion through tick()."""

    def test_tick_promotes_due_memo(self):
        manager = make_manager()
        memo = manager.capture("Later", delay_minutes=30)
        scheduler = DelayedPromotionScheduler(manager)

        assert scheduler.tick(T0 + timedelta(minutes=10)) == []
        assert scheduler.tick(T0 + timedelta(minutes=30)) == [memo.id]
        assert memo.status == MemoStatus.HOT

    def test_naive_times_after_aware_tick(self):
        """Mixing naive and aware tick times does not raise."""
        manager = make_manager()
        memo = manager.capture("Later", delay_minutes=5)
        scheduler = DelayedPromotionScheduler(manager)

        scheduler.tick(T0)
        assert scheduler.tick((T0 + timedelta(minutes=5)).replace(tzinfo=None)) == [memo.id]

    def test_tick_skips_when_not_due(self):
        manager = MagicMock()
        manager.check_and_promote_delayed.return_value = []
        scheduler = DelayedPromotionScheduler(manager, interval_seconds=5)

        scheduler.tick(T0)
        scheduler.tick(T0 + timedelta(seconds=1))
        manager.check_and_promote_delayed.assert_called_once_with(T0)
        assert scheduler.last_checked == T0

    def test_tick_defaults_to_manager_clock(self):
        manager = MagicMock()
        manager.clock.return_value = T0
        manager.check_and_promote_delayed.return_value = [3]
        scheduler = DelayedPromotionScheduler(manager)

        assert scheduler.tick() == [3]
        manager.check_and_promote_delayed.assert_called_once_with(T0)
