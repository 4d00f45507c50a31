"""In-memory authoritative cache of memo records, keyed by id.

Mutated only by the LifecycleManager, which mirrors every committed change
to storage.
"""

from typing import Iterator

from memostack.lib.types import Memo, MemoStatus


class MemoNotFound(KeyError):
    """Raised when an operation names a memo id that doesn't exist."""

    def __init__(self, memo_id: int):
        self.memo_id = memo_id
        super().__init__(memo_id)

    def __str__(self) -> str:
        return f"Memo {self.memo_id} not found"


class MemoStore:
    """Dict of live memos with status queries."""

    def __init__(self, memos: dict[int, Memo] | None = None) -> None:
        self._memos: dict[int, Memo] = dict(memos or {})

    def __contains__(self, memo_id: int) -> bool:
        return memo_id in self._memos

    def __iter__(self) -> Iterator[Memo]:
        return iter(self._memos.values())

    def __len__(self) -> int:
        return len(self._memos)

    def get(self, memo_id: int) -> Memo | None:
        return self._memos.get(memo_id)

    def require(self, memo_id: int) -> Memo:
        """Get a memo or raise MemoNotFound."""
        memo = self._memos.get(memo_id)
        if memo is None:
            raise MemoNotFound(memo_id)
        return memo

    def add(self, memo: Memo) -> None:
        self._memos[memo.id] = memo

    def remove(self, memo_id: int) -> Memo:
        """Remove and return a memo, raising MemoNotFound if absent."""
        memo = self.require(memo_id)
        del self._memos[memo_id]
        return memo

    def with_status(self, status: MemoStatus) -> list[Memo]:
        return [m for m in self._memos.values() if m.status == status]

    def as_dict(self) -> dict[int, Memo]:
        """Shallow copy of the id -> memo map (memo objects are live)."""
        return dict(self._memos)
