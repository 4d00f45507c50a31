"""
memostack edit - Pull a memo back out for re-editing (replace).
"""

import sys

from memostack.storage.base import StorageError
from memostack.workflow.lifecycle import LifecycleManager
from memostack.workflow.memo_store import MemoNotFound


def cmd_edit(args, manager: LifecycleManager) -> int:
    """Print a memo's text and delete it, saving any --draft first.

    The text goes to stdout so it can be piped back into `memostack add`.
    """
    try:
        text = manager.replace(args.id, draft=args.draft)
    except MemoNotFound as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except StorageError as e:
        print(f"ERROR: Change applied but not saved: {e}", file=sys.stderr)
        return 1

    print(text)
    return 0
