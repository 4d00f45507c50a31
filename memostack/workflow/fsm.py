"""Memo status state machine using transitions library.

Provides the memo lifecycle as explicit triggers:
- promote: cold/done/delayed -> hot
- archive: hot/done/delayed -> cold
- complete: hot/cold/delayed -> done

Nothing transitions into delayed; that state is only entered by capture.

Usage:
    from memostack.workflow.fsm import MemoFSM

    fsm = MemoFSM(memo)
    fsm.complete(now=utc_now())  # memo.status is now DONE, completion_time set
    fsm.promote(now=utc_now())   # back to HOT, completion_time cleared
"""

import logging
from transitions import Machine

from memostack.lib.timestamps import utc_now
from memostack.lib.types import Memo, MemoStatus

logger = logging.getLogger(__name__)


# State values must match MemoStatus enum values
STATES = [
    "hot",
    "cold",
    "done",
    "delayed",
]

# Transitions defined as (trigger, source, dest)
# Each trigger becomes a method on the FSM
TRANSITIONS = [
    # Surface a memo at the front of the hot stack
    {"trigger": "promote", "source": "cold", "dest": "hot"},
    {"trigger": "promote", "source": "done", "dest": "hot"},
    {"trigger": "promote", "source": "delayed", "dest": "hot"},  # Delay elapsed

    # Archive (also used for overflow eviction from the hot stack)
    {"trigger": "archive", "source": "hot", "dest": "cold"},
    {"trigger": "archive", "source": "done", "dest": "cold"},
    {"trigger": "archive", "source": "delayed", "dest": "cold"},

    # Completion
    {"trigger": "complete", "source": "hot", "dest": "done"},
    {"trigger": "complete", "source": "cold", "dest": "done"},
    {"trigger": "complete", "source": "delayed", "dest": "done"},
]


# Pre-computed lookup: (source, dest) -> trigger name
# Built once at module load, used to map destination-based API to trigger-based FSM
def _build_trigger_lookup() -> dict[tuple[str, str], str]:
    """Build lookup from (source, dest) -> trigger name."""
    lookup: dict[tuple[str, str], str] = {}
    for t in TRANSITIONS:
        key = (t["source"], t["dest"])
        if key not in lookup:  # First trigger wins for a given source->dest
            lookup[key] = t["trigger"]
    return lookup


TRIGGER_FOR = _build_trigger_lookup()


class MemoFSM:
    """State machine for a single memo's status.

    Wraps the transitions library with memo-specific logic:
    - Starts from the memo's current status
    - Writes the new status back onto the memo
    - Keeps completion_time set exactly while the memo is done
    - Logs all transitions
    """

    def __init__(self, memo: Memo):
        """Initialize FSM for a memo.

        Args:
            memo: The live memo whose status this machine drives
        """
        self.memo = memo

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial=memo.status.value,
            auto_transitions=False,  # Only explicit transitions
            send_event=True,  # Pass EventData to callbacks
            after_state_change="on_state_change",  # Callback after any transition
        )

    def on_state_change(self, event) -> None:
        """Callback after any state transition.

        Applies the new status and completion timestamp to the memo.
        """
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name
        now = event.kwargs.get("now") or utc_now()

        self.memo.status = MemoStatus(to_state)
        if self.memo.status == MemoStatus.DONE:
            self.memo.completion_time = now
        else:
            self.memo.completion_time = None

        logger.info(f"[FSM] memo {self.memo.id}: {from_state} -> {to_state} ({trigger})")
