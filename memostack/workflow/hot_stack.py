"""Ordered, capacity-bounded hot stack of memo ids.

Front (index 0) is the most recently promoted memo, back the least. The
stack is the only source of hot ordering. Lookups are linear; capacity is
small.
"""

import logging

from memostack.lib.types import MemoStatus
from memostack.workflow.memo_store import MemoStore

logger = logging.getLogger(__name__)


class HotStack:
    """Ordered list of unique memo ids."""

    def __init__(self, memo_ids: list[int] | None = None) -> None:
        self._ids: list[int] = []
        for memo_id in memo_ids or []:
            if memo_id not in self._ids:
                self._ids.append(memo_id)

    def __contains__(self, memo_id: int) -> bool:
        return memo_id in self._ids

    def __iter__(self):
        return iter(list(self._ids))

    def __len__(self) -> int:
        return len(self._ids)

    def ids(self) -> list[int]:
        """Copy of the ordered ids, front first."""
        return list(self._ids)

    def position(self, memo_id: int) -> int | None:
        try:
            return self._ids.index(memo_id)
        except ValueError:
            return None

    def push_front(self, memo_id: int, capacity: int) -> int | None:
        """Insert memo_id at the front.

        An id already present is moved rather than duplicated. If the push
        grows the stack beyond capacity, the back item is removed and
        returned so the caller can archive it.

        Returns:
            The evicted id, or None
        """
        if memo_id in self._ids:
            self._ids.remove(memo_id)
            self._ids.insert(0, memo_id)
            return None

        self._ids.insert(0, memo_id)
        if len(self._ids) > capacity:
            evicted = self._ids.pop()
            logger.info(f"[STACK] over capacity {capacity}, evicting memo {evicted}")
            return evicted
        return None

    def remove(self, memo_id: int) -> bool:
        """Remove memo_id if present. Returns True if it was removed."""
        if memo_id in self._ids:
            self._ids.remove(memo_id)
            return True
        return False

    def shift_up(self, memo_id: int) -> bool:
        """Swap memo_id with its predecessor.

        Returns False (no-op) if memo_id is at the front or not in the stack.
        """
        pos = self.position(memo_id)
        if pos is None or pos == 0:
            return False
        self._ids[pos - 1], self._ids[pos] = self._ids[pos], self._ids[pos - 1]
        return True

    def move_to_front(self, memo_id: int) -> bool:
        """Move memo_id to position 0 without eviction.

        Returns False (no-op) if memo_id is already at the front or not in
        the stack.
        """
        pos = self.position(memo_id)
        if pos is None or pos == 0:
            return False
        del self._ids[pos]
        self._ids.insert(0, memo_id)
        return True

    def reconcile(self, store: MemoStore) -> list[int]:
        """Drop ids whose memo is missing or not hot.

        Returns:
            The dropped ids, in stack order
        """
        dropped = []
        kept = []
        for memo_id in self._ids:
            memo = store.get(memo_id)
            if memo is None or memo.status != MemoStatus.HOT:
                dropped.append(memo_id)
            else:
                kept.append(memo_id)
        self._ids = kept
        return dropped
