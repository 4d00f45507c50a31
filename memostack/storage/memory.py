"""In-memory Storage Adapter.

Honors the same contract as SqliteStorage without touching disk. Records
are copied on every read and write so live memo objects never alias stored
ones. Used by tests and by --ephemeral runs.
"""

from dataclasses import replace
from datetime import datetime

from memostack.lib.types import Memo, MemoStatus, Preferences
from memostack.storage.base import StorageAdapter, memo_record


class InMemoryStorage(StorageAdapter):
    """Dict-backed storage. Ids increase monotonically and are never reused."""

    def __init__(self) -> None:
        self._memos: dict[int, Memo] = {}
        self._hot_stack: list[int] = []
        self._preferences = Preferences()
        self._next_id = 1

    def initialize(self) -> None:
        pass

    def load_memos(self) -> dict[int, Memo]:
        return {memo_id: replace(memo, expanded=False) for memo_id, memo in self._memos.items()}

    def load_hot_stack(self) -> list[int]:
        return list(self._hot_stack)

    def insert_memo(
        self,
        title: str,
        body: str,
        status: MemoStatus,
        creation_time: datetime,
        delay_minutes: int | None = None,
    ) -> int:
        memo = Memo(
            id=self._next_id,
            title=title,
            body=body,
            status=status,
            creation_time=creation_time,
            delay_minutes=delay_minutes,
        )
        self._check_memo(memo_record(memo), "memory")
        self._memos[memo.id] = memo
        self._next_id += 1
        return memo.id

    def update_memo(self, memo: Memo) -> None:
        self._check_memo(memo_record(memo), "memory")
        if memo.id in self._memos:
            self._memos[memo.id] = replace(memo, expanded=False)

    def delete_memo(self, memo_id: int) -> None:
        self._memos.pop(memo_id, None)

    def save_hot_stack(self, memo_ids: list[int]) -> None:
        self._check_hot_stack(memo_ids, "memory")
        self._hot_stack = list(memo_ids)

    def load_preferences(self) -> Preferences:
        return replace(self._preferences)

    def save_preferences(self, prefs: Preferences) -> None:
        self._preferences = replace(prefs)
