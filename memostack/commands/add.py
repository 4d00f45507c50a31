"""
memostack add - Capture a new memo.
"""

from memostack.lib.delay import format_delay, parse_delay_input
from memostack.lib.memo_text import parse_memo_text
from memostack.lib.timestamps import format_local
from memostack.storage.base import StorageError
from memostack.workflow.lifecycle import LifecycleManager


def cmd_add(args, manager: LifecycleManager) -> int:
    """Capture text as a hot memo, or as a delayed one with --delay HH:MM."""
    text = " ".join(args.text)
    if args.body:
        text = f"{text}\n{args.body}"

    title, body = parse_memo_text(text)
    if not title:
        print("ERROR: Memo text is empty")
        return 2

    delay_minutes = None
    if args.delay:
        delay_minutes = parse_delay_input(args.delay)
        if delay_minutes is None:
            print(f"WARNING: Ignoring delay '{args.delay}' (expected HH:MM under 24:00), adding as hot")

    stack_before = set(manager.hot_stack)
    try:
        memo = manager.capture(title, body, delay_minutes)
    except StorageError as e:
        print(f"ERROR: {e}")
        return 1

    if delay_minutes is not None:
        ready = format_local(memo.ready_time)
        print(f"Added memo {memo.id} (delayed {format_delay(delay_minutes)}, due {ready})")
        return 0

    print(f"Added memo {memo.id} to the top of the hot stack")
    for evicted in sorted(stack_before - set(manager.hot_stack)):
        print(f"  Hot stack full: memo {evicted} archived to cold")
    return 0
