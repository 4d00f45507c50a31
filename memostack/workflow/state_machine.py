"""Memo status transitions by destination.

Thin wrapper around the FSM in fsm.py. This module provides:
- parse_status() for stored status tags
- transition() function that maps a target status to an FSM trigger

Usage:
    from memostack.workflow.state_machine import transition

    transition(memo, MemoStatus.COLD, now=utc_now())
"""

import logging
from datetime import datetime

from memostack.lib.types import Memo, MemoStatus

logger = logging.getLogger(__name__)


class InvalidTransition(Exception):
    """Raised when attempting an invalid status transition."""

    def __init__(self, from_status: str, to_status: MemoStatus, memo_id: int | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.memo_id = memo_id
        super().__init__(
            f"Invalid transition: {from_status} -> {to_status.value}"
            + (f" (memo: {memo_id})" if memo_id is not None else "")
        )


def parse_status(status_str: str | None) -> MemoStatus | None:
    """Parse a stored status tag into MemoStatus.

    Returns None if status is unknown.
    """
    if status_str is None:
        return None
    for status in MemoStatus:
        if status.value == status_str:
            return status
    return None


def transition(memo: Memo, to_status: MemoStatus, now: datetime | None = None) -> bool:
    """Move a memo to a new status with validation.

    Uses the FSM for validation and for applying the status and
    completion timestamp to the memo.

    Args:
        memo: Memo to transition (mutated in place)
        to_status: Target status
        now: Transition time, used as completion_time when entering done

    Returns:
        True if the status changed, False for a self-transition (no-op)

    Raises:
        InvalidTransition: If the transition is not allowed
    """
    from transitions import MachineError
    from memostack.workflow.fsm import MemoFSM, TRIGGER_FOR

    current = memo.status.value

    # Self-transition is a no-op
    if current == to_status.value:
        logger.debug(f"[STATE] memo {memo.id}: already {current}, no-op")
        return False

    trigger = TRIGGER_FOR.get((current, to_status.value))
    if trigger is None:
        raise InvalidTransition(current, to_status, memo.id)

    fsm = MemoFSM(memo)
    try:
        getattr(fsm, trigger)(now=now)
    except MachineError as e:
        raise InvalidTransition(current, to_status, memo.id) from e
    return True
