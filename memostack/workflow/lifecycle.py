"""Memo lifecycle and ordered hot stack manager.

LifecycleManager is the explicit context object that owns the MemoStore and
the HotStack. Every mutating operation updates both in memory and then
flushes the affected records through the injected StorageAdapter inside a
single storage transaction.

A failed flush raises StorageError after the in-memory change has been
applied. The in-memory state is correct; only durability is unconfirmed.

Usage:
    from memostack.storage import SqliteStorage
    from memostack.workflow.lifecycle import LifecycleManager

    manager = LifecycleManager(SqliteStorage(db_path), config)
    manager.load()
    memo = manager.capture("Buy milk", "2 litres")
    manager.complete(memo.id)
"""

import logging
from datetime import datetime
from typing import Callable

from memostack.lib.config import AppConfig
from memostack.lib.memo_text import format_memo_text, parse_memo_text
from memostack.lib.search import filter_memos
from memostack.lib.timestamps import as_utc, utc_now
from memostack.lib.types import Memo, MemoStatus
from memostack.storage.base import StorageAdapter
from memostack.workflow.hot_stack import HotStack
from memostack.workflow.memo_store import MemoStore
from memostack.workflow.state_machine import transition

logger = logging.getLogger(__name__)


class LifecycleManager:
    """Owns memo status transitions, hot stack order and capacity.

    Args:
        storage: Injected Storage Adapter
        config: Startup configuration (max_hot_count is read once)
        clock: Returns the current UTC time; injectable for tests
    """

    def __init__(
        self,
        storage: StorageAdapter,
        config: AppConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.storage = storage
        self.config = config or AppConfig()
        self.clock = clock
        self.max_hot_count = self.config.max_hot_count
        self.store = MemoStore()
        self.stack = HotStack()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Load memos and the hot stack from storage and self-heal the stack.

        Stack ids whose memo is missing or not hot are dropped. A stack
        longer than max_hot_count (capacity lowered since last run) is
        trimmed from the back by archiving. Memos whose stored record had
        fields defaulted are written back so the defaults stay fixed. The
        corrected stack is always re-persisted.
        """
        self.storage.initialize()
        self.store = MemoStore(self.storage.load_memos())
        self.stack = HotStack(self.storage.load_hot_stack())

        dropped = self.stack.reconcile(self.store)
        if dropped:
            logger.warning(f"[STACK] Dropped stray ids from hot stack: {dropped}")

        overflow = []
        while len(self.stack) > self.max_hot_count:
            overflow.append(self.stack.ids()[-1])
            self.stack.remove(overflow[-1])

        healed = sorted(memo_id for memo_id in self.storage.healed_memo_ids() if memo_id in self.store)
        if healed:
            logger.warning(f"[STORE] Re-saving memos with defaulted fields: {healed}")

        now = self.clock()
        with self.storage.transaction():
            for memo_id in healed:
                self.storage.update_memo(self.store.require(memo_id))
            for memo_id in overflow:
                memo = self.store.require(memo_id)
                transition(memo, MemoStatus.COLD, now)
                self.storage.update_memo(memo)
                logger.warning(f"[STACK] memo {memo_id} over capacity {self.max_hot_count} on load, archived")
            self.storage.save_hot_stack(self.stack.ids())

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def memos(self) -> dict[int, Memo]:
        """All memos by id."""
        return self.store.as_dict()

    @property
    def hot_stack(self) -> list[int]:
        """Ordered hot stack ids, front first."""
        return self.stack.ids()

    def get(self, memo_id: int) -> Memo:
        """Get a memo or raise MemoNotFound."""
        return self.store.require(memo_id)

    def hot_memos(self) -> list[Memo]:
        """Hot memos in stack order."""
        return [self.store.require(memo_id) for memo_id in self.stack]

    def delayed_memos(self) -> list[Memo]:
        """Delayed memos, soonest due first."""
        return sorted(
            self.store.with_status(MemoStatus.DELAYED),
            key=lambda m: m.ready_time or m.creation_time,
        )

    def search(self, status: MemoStatus, query: str = "") -> list[Memo]:
        """Memos with status whose title or body contains query (case-insensitive)."""
        return filter_memos(self.store, status, query)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _push_front(self, memo: Memo, now: datetime) -> list[Memo]:
        """Put a hot memo at the stack front and evict the back on overflow.

        Eviction archives directly and never pushes, so it cannot cascade.

        Returns:
            Memos whose records changed as a side effect (the evicted memo)
        """
        evicted_id = self.stack.push_front(memo.id, self.max_hot_count)
        if evicted_id is None:
            return []

        evicted = self.store.require(evicted_id)
        transition(evicted, MemoStatus.COLD, now)
        logger.info(f"[STACK] memo {evicted_id} evicted to cold")
        return [evicted]

    def _flush(self, changed: list[Memo], stack_changed: bool = True) -> None:
        with self.storage.transaction():
            for memo in changed:
                self.storage.update_memo(memo)
            if stack_changed:
                self.storage.save_hot_stack(self.stack.ids())

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def capture(self, title: str, body: str = "", delay_minutes: int | None = None) -> Memo:
        """Create a memo.

        A positive delay_minutes captures it as delayed; otherwise it is hot
        and pushed to the stack front, evicting the back on overflow.
        Non-positive delays are ignored.
        """
        now = self.clock()
        if delay_minutes is not None and delay_minutes <= 0:
            delay_minutes = None
        status = MemoStatus.DELAYED if delay_minutes is not None else MemoStatus.HOT

        memo_id = self.storage.insert_memo(title, body, status, now, delay_minutes)
        memo = Memo(
            id=memo_id,
            title=title,
            body=body,
            status=status,
            creation_time=now,
            delay_minutes=delay_minutes,
        )
        self.store.add(memo)

        if status == MemoStatus.DELAYED:
            logger.info(f"[DELAY] memo {memo_id} captured, due in {delay_minutes}m")
            return memo

        logger.info(f"[STACK] memo {memo_id} captured hot")
        changed = self._push_front(memo, now)
        self._flush(changed)
        return memo

    def capture_text(self, text: str, delay_minutes: int | None = None) -> Memo | None:
        """Capture free-form text (first line is the title).

        Returns None without capturing if the text is blank.
        """
        title, body = parse_memo_text(text)
        if not title:
            return None
        return self.capture(title, body, delay_minutes)

    def promote_to_hot(self, memo_id: int) -> Memo:
        """Make a memo hot and put it at the stack front.

        Clears completion_time. A memo already in the stack is moved to the
        front without eviction.
        """
        memo = self.store.require(memo_id)
        now = self.clock()
        status_changed = transition(memo, MemoStatus.HOT, now)

        changed = self._push_front(memo, now)
        if status_changed:
            changed.insert(0, memo)
        self._flush(changed)
        return memo

    def archive(self, memo_id: int) -> Memo:
        """Move a memo to cold and out of the stack."""
        memo = self.store.require(memo_id)
        status_changed = transition(memo, MemoStatus.COLD, self.clock())
        removed = self.stack.remove(memo_id)
        if status_changed or removed:
            self._flush([memo] if status_changed else [], stack_changed=removed)
        return memo

    def complete(self, memo_id: int) -> Memo:
        """Move a memo to done (stamping completion_time) and out of the stack."""
        memo = self.store.require(memo_id)
        status_changed = transition(memo, MemoStatus.DONE, self.clock())
        removed = self.stack.remove(memo_id)
        if status_changed or removed:
            self._flush([memo] if status_changed else [], stack_changed=removed)
        return memo

    def delete(self, memo_id: int) -> Memo:
        """Remove a memo from the store, the stack and storage."""
        memo = self.store.remove(memo_id)
        removed = self.stack.remove(memo_id)
        with self.storage.transaction():
            self.storage.delete_memo(memo_id)
            if removed:
                self.storage.save_hot_stack(self.stack.ids())
        logger.info(f"[STORE] memo {memo_id} deleted")
        return memo

    def shift_up(self, memo_id: int) -> bool:
        """Swap a stacked memo with its predecessor.

        Returns False (no-op) when it is already at the front or not stacked.
        """
        self.store.require(memo_id)
        if not self.stack.shift_up(memo_id):
            logger.debug(f"[STACK] shift_up memo {memo_id}: no-op")
            return False
        self._flush([])
        return True

    def move_to_front(self, memo_id: int) -> bool:
        """Move a stacked memo to the front. Never evicts.

        Returns False (no-op) when it is already at the front or not stacked.
        """
        self.store.require(memo_id)
        if not self.stack.move_to_front(memo_id):
            logger.debug(f"[STACK] move_to_front memo {memo_id}: no-op")
            return False
        self._flush([])
        return True

    # ------------------------------------------------------------------
    # Replace: capture the draft, then take the target for editing
    # ------------------------------------------------------------------

    def capture_draft(self, draft: str | None) -> Memo | None:
        """Save unsaved draft text as an ordinary hot memo, if there is any."""
        if not draft or not draft.strip():
            return None
        memo = self.capture_text(draft)
        if memo is not None:
            logger.info(f"[STORE] draft saved as memo {memo.id} before replace")
        return memo

    def take_for_edit(self, memo_id: int) -> str:
        """Return a memo's text for re-editing and delete the original."""
        memo = self.store.require(memo_id)
        text = format_memo_text(memo)
        self.delete(memo_id)
        return text

    def replace(self, memo_id: int, draft: str | None = None) -> str:
        """Pull a memo back into the editor.

        Any unsaved draft is first captured as a new memo. Returns the
        memo's text (title, then body on following lines) and deletes it.
        """
        self.store.require(memo_id)
        self.capture_draft(draft)
        return self.take_for_edit(memo_id)

    # ------------------------------------------------------------------
    # Delayed promotion
    # ------------------------------------------------------------------

    def due_delayed(self, now: datetime) -> list[Memo]:
        """Delayed memos whose ready time is at or before now.

        A delayed memo with no recorded delay is due immediately.
        """
        now = as_utc(now)
        return [
            memo for memo in self.delayed_memos()
            if now >= (memo.ready_time or memo.creation_time)
        ]

    def check_and_promote_delayed(self, now: datetime | None = None) -> list[int]:
        """Promote every delayed memo that is due at now.

        Each promotion obeys the eviction policy individually, so a later
        promotion in the batch may evict an earlier one.

        Returns:
            Ids promoted, in promotion order (soonest due first)
        """
        now = as_utc(now) if now is not None else self.clock()
        promoted = []
        for memo in self.due_delayed(now):
            logger.info(f"[DELAY] memo {memo.id} due, promoting")
            self.promote_to_hot(memo.id)
            promoted.append(memo.id)
        return promoted
