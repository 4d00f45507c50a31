"""
memostack up / top - Reorder the hot stack.
"""

from memostack.storage.base import StorageError
from memostack.workflow.lifecycle import LifecycleManager
from memostack.workflow.memo_store import MemoNotFound


def _reorder(action, memo_id: int, done_msg: str, noop_msg: str) -> int:
    try:
        moved = action(memo_id)
    except MemoNotFound as e:
        print(f"ERROR: {e}")
        return 1
    except StorageError as e:
        print(f"ERROR: Change applied but not saved: {e}")
        return 1

    print(done_msg if moved else noop_msg)
    return 0


def cmd_up(args, manager: LifecycleManager) -> int:
    """Swap a hot memo with the one above it."""
    return _reorder(
        manager.shift_up,
        args.id,
        f"Memo {args.id} moved up",
        f"Memo {args.id} is already at the top or not in the hot stack",
    )


def cmd_top(args, manager: LifecycleManager) -> int:
    """Move a hot memo to the top of the stack."""
    return _reorder(
        manager.move_to_front,
        args.id,
        f"Memo {args.id} moved to the top",
        f"Memo {args.id} is already at the top or not in the hot stack",
    )
