"""
memostack tick / spotlight - Polling entry points for scripts and cron.
"""

from memostack.storage.base import StorageError
from memostack.workflow.lifecycle import LifecycleManager
from memostack.workflow.spotlight import SpotlightSelector


def cmd_tick(args, manager: LifecycleManager) -> int:
    """Promote delayed memos that are due now."""
    try:
        promoted = manager.check_and_promote_delayed()
    except StorageError as e:
        print(f"ERROR: {e}")
        return 1

    if not promoted:
        print("No delayed memos due")
        return 0

    for memo_id in promoted:
        print(f"Promoted memo {memo_id} to hot")
    return 0


def cmd_spotlight(args, manager: LifecycleManager) -> int:
    """Show one random cold memo."""
    selector = SpotlightSelector(manager.config.cold_spotlight_interval_seconds)
    if not selector.enabled:
        print("Cold spotlight is disabled (cold_spotlight_interval_seconds: 0)")
        return 0

    selector.refresh(manager)
    memo = selector.current(manager)
    if memo is None:
        print("No cold memos")
        return 0

    print(f"[{memo.id}] {memo.title}")
    if memo.body:
        print(memo.body)
    return 0
