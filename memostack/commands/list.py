"""
memostack list - List memos by status.
"""

from memostack.lib.delay import format_remaining
from memostack.lib.timestamps import format_local
from memostack.lib.types import Memo, MemoStatus
from memostack.workflow.lifecycle import LifecycleManager

TITLE_WIDTH = 50


def _short(title: str, width: int = TITLE_WIDTH) -> str:
    return title[:width - 3] + "..." if len(title) > width else title


def _print_hot(manager: LifecycleManager, query: str) -> int:
    memos = manager.hot_memos()
    if query.strip():
        memos = [m for m in memos if m.matches(query)]

    print(f"Hot ({len(manager.hot_stack)}/{manager.max_hot_count})")
    print("-" * 60)
    for memo in memos:
        pos = manager.stack.position(memo.id) + 1
        print(f"  {pos:>2}. [{memo.id:>4}] {_short(memo.title)}")
    if not memos:
        print("  (empty)")
    return 0


def _print_delayed(manager: LifecycleManager, query: str) -> int:
    now = manager.clock()
    memos = manager.delayed_memos()
    if query.strip():
        memos = [m for m in memos if m.matches(query)]

    print(f"Delayed ({len(memos)})")
    print("-" * 60)
    for memo in memos:
        remaining = format_remaining(memo.ready_time or memo.creation_time, now)
        print(f"  [{memo.id:>4}] {_short(memo.title):<{TITLE_WIDTH}} {remaining}")
    if not memos:
        print("  (none)")
    return 0


def _print_archive(memos: list[Memo], status: MemoStatus) -> int:
    label = "Cold" if status == MemoStatus.COLD else "Done"
    print(f"{label} ({len(memos)})")
    print("-" * 60)
    for memo in memos:
        when = memo.completion_time if status == MemoStatus.DONE else memo.creation_time
        print(f"  [{memo.id:>4}] {_short(memo.title):<{TITLE_WIDTH}} {format_local(when)}")
    if not memos:
        print("  (none)")
    return 0


def cmd_list(args, manager: LifecycleManager) -> int:
    """List memos of one status, optionally filtered by a search string."""
    status = MemoStatus(args.status)
    query = args.search or ""

    if status == MemoStatus.HOT:
        return _print_hot(manager, query)
    if status == MemoStatus.DELAYED:
        return _print_delayed(manager, query)
    return _print_archive(manager.search(status, query), status)
