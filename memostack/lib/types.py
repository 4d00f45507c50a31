"""
Shared data types for memostack.

This module contains the dataclasses used across storage, workflow and
presentation code to avoid circular imports.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from .constants import STATUS_COLD, STATUS_DELAYED, STATUS_DONE, STATUS_HOT


class MemoStatus(Enum):
    """Lifecycle status of a memo.

    Values are the tags stored in the memos table.
    """

    HOT = STATUS_HOT
    COLD = STATUS_COLD
    DONE = STATUS_DONE
    DELAYED = STATUS_DELAYED


@dataclass
class Memo:
    """A titled note with optional body text and a lifecycle status.

    completion_time is set exactly while status is DONE. delay_minutes is a
    historical record of a delayed capture and survives later transitions.
    """
    id: int
    title: str
    body: str
    status: MemoStatus
    creation_time: datetime
    completion_time: datetime | None = None
    delay_minutes: int | None = None
    expanded: bool = field(default=False, compare=False)  # UI state only, never persisted

    @property
    def ready_time(self) -> datetime | None:
        """When a delayed capture becomes due, or None for undelayed memos."""
        if self.delay_minutes is None:
            return None
        return self.creation_time + timedelta(minutes=self.delay_minutes)

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match against title or body."""
        needle = query.lower()
        return needle in self.title.lower() or needle in self.body.lower()


@dataclass
class Preferences:
    """Scalar UI settings from the app_state record.

    Owned by the presentation layer; the lifecycle core never touches these.
    """
    always_on_top: bool = False
    last_input_text: str = ""
    memo_input_height: float = 180.0
    window_width: float = 800.0
    window_height: float = 600.0
    window_x: float | None = None
    window_y: float | None = None
