"""Cold spotlight: periodic random pick of one archived memo.

The pick is held until the interval elapses. If the picked memo leaves
the cold set in the meantime, the spotlight shows nothing until the next
resample rather than reselecting early. An interval of 0 disables it.
With pause_when_expanded, a pick the user has expanded is held past the
interval until it is collapsed again.
"""

import random
import time

from memostack.lib.types import Memo, MemoStatus
from memostack.workflow.lifecycle import LifecycleManager


class SpotlightSelector:
    """Resamples a random cold memo every interval_seconds.

    Times are monotonic seconds (time.monotonic by default).
    """

    def __init__(
        self,
        interval_seconds: float,
        rng: random.Random | None = None,
        pause_when_expanded: bool = False,
    ) -> None:
        self.interval_seconds = interval_seconds
        self.pause_when_expanded = pause_when_expanded
        self.rng = rng or random.Random()
        self.current_id: int | None = None
        self.last_update: float | None = None

    @property
    def enabled(self) -> bool:
        return self.interval_seconds > 0

    def refresh(self, manager: LifecycleManager, now: float | None = None) -> bool:
        """Resample if the interval elapsed (or nothing was sampled yet).

        An expanded pick is held when pause_when_expanded is set.

        Returns:
            True if a resample happened
        """
        if not self.enabled:
            return False

        now = time.monotonic() if now is None else now
        if self.last_update is not None and now - self.last_update < self.interval_seconds:
            return False
        if self.pause_when_expanded:
            held = self.current(manager)
            if held is not None and held.expanded:
                return False

        cold_ids = sorted(m.id for m in manager.store.with_status(MemoStatus.COLD))
        self.current_id = self.rng.choice(cold_ids) if cold_ids else None
        self.last_update = now
        return True

    def current(self, manager: LifecycleManager) -> Memo | None:
        """The held pick, or None if disabled, empty, or no longer cold."""
        if not self.enabled or self.current_id is None:
            return None
        memo = manager.store.get(self.current_id)
        if memo is None or memo.status != MemoStatus.COLD:
            return None
        return memo
