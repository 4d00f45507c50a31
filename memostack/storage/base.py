"""Storage Adapter contract.

The adapter is a stateless translation layer between live memo objects and
durable storage. It holds no business logic: status rules, stack ordering
and capacity live in the workflow package.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

from memostack.lib import validate
from memostack.lib.timestamps import format_timestamp
from memostack.lib.types import Memo, MemoStatus, Preferences


class StorageError(Exception):
    """A durable read or write failed.

    In-memory state may already reflect the operation that raised this;
    durability is unconfirmed, not rolled back.
    """


def memo_record(memo: Memo) -> dict:
    """Serialize a memo to its persisted field set (expanded is dropped)."""
    return {
        "id": memo.id,
        "title": memo.title,
        "body": memo.body,
        "status": memo.status.value,
        "creation_time": format_timestamp(memo.creation_time),
        "completion_time": format_timestamp(memo.completion_time) if memo.completion_time else None,
        "delay_minutes": memo.delay_minutes,
    }


class StorageAdapter(ABC):
    """Durable persistence for memos, the hot stack and UI preferences."""

    @abstractmethod
    def initialize(self) -> None:
        """Create tables and run migrations. Safe to call repeatedly."""

    @abstractmethod
    def load_memos(self) -> dict[int, Memo]:
        """Load every memo keyed by id. Malformed fields are defaulted."""

    def healed_memo_ids(self) -> set[int]:
        """Ids of memos whose stored record had fields defaulted by the last load_memos().

        The caller writes these back so defaulted values stay fixed across loads.
        Adapters that never default fields return an empty set.
        """
        return set()

    @abstractmethod
    def load_hot_stack(self) -> list[int]:
        """Load the persisted hot stack order, front first.

        No reconciliation happens here; stray ids are returned as stored.
        """

    @abstractmethod
    def insert_memo(
        self,
        title: str,
        body: str,
        status: MemoStatus,
        creation_time: datetime,
        delay_minutes: int | None = None,
    ) -> int:
        """Persist a new memo and return its assigned id. Ids are never reused."""

    @abstractmethod
    def update_memo(self, memo: Memo) -> None:
        """Overwrite the stored record of an existing memo."""

    @abstractmethod
    def delete_memo(self, memo_id: int) -> None:
        """Remove a memo record. Deleting a missing id is not an error."""

    @abstractmethod
    def save_hot_stack(self, memo_ids: list[int]) -> None:
        """Overwrite the single hot stack record."""

    @abstractmethod
    def load_preferences(self) -> Preferences:
        """Load the preference record, defaults if never saved."""

    @abstractmethod
    def save_preferences(self, prefs: Preferences) -> None:
        """Overwrite the preference record."""

    @contextmanager
    def transaction(self) -> Iterator["StorageAdapter"]:
        """Group writes so they commit together.

        Adapters without transactional support write through immediately.
        """
        yield self

    def close(self) -> None:
        """Release the underlying handle."""

    def __enter__(self) -> "StorageAdapter":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _check_memo(self, record: dict, target: str) -> None:
        try:
            validate.validate_before_write(record, "memo", target)
        except validate.ValidationError as e:
            raise StorageError(str(e)) from e

    def _check_hot_stack(self, memo_ids: list[int], target: str) -> None:
        try:
            validate.validate_before_write(list(memo_ids), "hot_stack", target)
        except validate.ValidationError as e:
            raise StorageError(str(e)) from e
