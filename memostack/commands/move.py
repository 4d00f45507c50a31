"""
memostack archive / done / hot / delete - Move a memo between lanes.
"""

import logging

from memostack.storage.base import StorageError
from memostack.workflow.lifecycle import LifecycleManager
from memostack.workflow.memo_store import MemoNotFound

logger = logging.getLogger(__name__)


def _apply(action, memo_id: int) -> int:
    try:
        action(memo_id)
    except MemoNotFound as e:
        print(f"ERROR: {e}")
        return 1
    except StorageError as e:
        logger.error(f"Storage error on memo {memo_id}: {e}")
        print(f"ERROR: Change applied but not saved: {e}")
        return 1
    return 0


def cmd_archive(args, manager: LifecycleManager) -> int:
    """Archive a memo to cold."""
    rc = _apply(manager.archive, args.id)
    if rc == 0:
        print(f"Memo {args.id} archived to cold")
    return rc


def cmd_done(args, manager: LifecycleManager) -> int:
    """Mark a memo done."""
    rc = _apply(manager.complete, args.id)
    if rc == 0:
        print(f"Memo {args.id} done")
    return rc


def cmd_hot(args, manager: LifecycleManager) -> int:
    """Promote a memo to the top of the hot stack."""
    stack_before = set(manager.hot_stack)
    rc = _apply(manager.promote_to_hot, args.id)
    if rc == 0:
        print(f"Memo {args.id} moved to the top of the hot stack")
        for evicted in sorted(stack_before - set(manager.hot_stack)):
            print(f"  Hot stack full: memo {evicted} archived to cold")
    return rc


def cmd_delete(args, manager: LifecycleManager) -> int:
    """Permanently delete a memo."""
    if not args.yes:
        memo = manager.store.get(args.id)
        if memo is None:
            print(f"ERROR: Memo {args.id} not found")
            return 1
        answer = input(f"Delete memo {args.id} '{memo.title}'? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            print("Aborted")
            return 1

    rc = _apply(manager.delete, args.id)
    if rc == 0:
        print(f"Memo {args.id} deleted")
    return rc
