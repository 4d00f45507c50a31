"""Storage adapters for memostack.

The lifecycle core depends only on StorageAdapter; pick SqliteStorage for
durable use or InMemoryStorage for tests and throwaway sessions.
"""

from memostack.storage.base import StorageAdapter, StorageError, memo_record
from memostack.storage.memory import InMemoryStorage
from memostack.storage.sqlite import SqliteStorage

__all__ = [
    "StorageAdapter",
    "StorageError",
    "memo_record",
    "InMemoryStorage",
    "SqliteStorage",
]
