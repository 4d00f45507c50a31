"""Polled promotion of delayed memos.

The scheduler owns no memo state, only the time of its last check. The
presentation loop calls tick() periodically; promotion is observed within
one polling interval of a memo's ready time.
"""

import logging
from datetime import datetime

from memostack.lib.timestamps import as_utc
from memostack.workflow.lifecycle import LifecycleManager

logger = logging.getLogger(__name__)


class DelayedPromotionScheduler:
    """Calls LifecycleManager.check_and_promote_delayed at most once per interval.

    Args:
        manager: Lifecycle manager to promote through
        interval_seconds: Minimum wall-clock seconds between checks (0 checks every tick)
    """

    def __init__(self, manager: LifecycleManager, interval_seconds: float = 0) -> None:
        self.manager = manager
        self.interval_seconds = interval_seconds
        self.last_checked: datetime | None = None

    def is_due(self, now: datetime) -> bool:
        if self.last_checked is None:
            return True
        # A clock that went backwards counts as due
        elapsed = (now - self.last_checked).total_seconds()
        return elapsed < 0 or elapsed >= self.interval_seconds

    def tick(self, now: datetime | None = None) -> list[int]:
        """Promote due delayed memos if the check interval has elapsed.

        Returns:
            Ids promoted on this tick
        """
        now = as_utc(now) if now is not None else self.manager.clock()
        if not self.is_due(now):
            return []

        self.last_checked = now
        promoted = self.manager.check_and_promote_delayed(now)
        if promoted:
            logger.info(f"[DELAY] promoted {len(promoted)} delayed memo(s): {promoted}")
        return promoted
