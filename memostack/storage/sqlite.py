"""SQLite-backed memo storage.

Storage location: `<data dir>/memos.db`

Schema:
- memos: id -> title, body, status tag, ISO-8601 timestamps, delay_minutes
- hot_stack_state: single row holding the hot stack as a JSON array
- app_state: single row of presentation preferences

Example:
    >>> storage = SqliteStorage(Path("~/.local/share/memo-stack/memos.db"))
    >>> storage.initialize()
    >>> memo_id = storage.insert_memo("Buy milk", "", MemoStatus.HOT, utc_now())
    >>> storage.save_hot_stack([memo_id])
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator

from memostack.lib import validate
from memostack.lib.constants import UNTITLED
from memostack.lib.timestamps import parse_timestamp, utc_now
from memostack.lib.types import Memo, MemoStatus, Preferences
from memostack.storage.base import StorageAdapter, StorageError, memo_record
from memostack.workflow.state_machine import parse_status

logger = logging.getLogger(__name__)


class SqliteStorage(StorageAdapter):
    """Storage Adapter over a single local SQLite file.

    Every public write commits before returning unless it runs inside
    transaction(), in which case the block commits as a whole.
    """

    # fmt: off
    SCHEMA = """
    CREATE TABLE IF NOT EXISTS memos (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        body TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'hot',
        creation_date TEXT NOT NULL,
        moved_to_done_date TEXT,
        delay_minutes INTEGER
    );

    CREATE TABLE IF NOT EXISTS hot_stack_state (
        id INTEGER PRIMARY KEY DEFAULT 1,
        stack_json TEXT NOT NULL DEFAULT '[]'
    );

    INSERT OR IGNORE INTO hot_stack_state (id, stack_json) VALUES (1, '[]');

    CREATE TABLE IF NOT EXISTS app_state (
        id INTEGER PRIMARY KEY DEFAULT 1,
        memo_input_height REAL NOT NULL DEFAULT 180.0,
        always_on_top INTEGER NOT NULL DEFAULT 0,
        new_memo_text TEXT NOT NULL DEFAULT ''
    );

    INSERT OR IGNORE INTO app_state (id) VALUES (1);
    """
    # fmt: on

    # Columns added after the first release; applied if missing
    MIGRATIONS = [
        "ALTER TABLE memos ADD COLUMN delay_minutes INTEGER",
        "ALTER TABLE app_state ADD COLUMN window_width REAL NOT NULL DEFAULT 800.0",
        "ALTER TABLE app_state ADD COLUMN window_height REAL NOT NULL DEFAULT 600.0",
        "ALTER TABLE app_state ADD COLUMN window_x REAL",
        "ALTER TABLE app_state ADD COLUMN window_y REAL",
    ]

    def __init__(self, db_path: Path) -> None:
        """Open (and create if needed) the database at db_path.

        Args:
            db_path: Path to SQLite database file. ":memory:" is accepted.
        """
        self.db_path = db_path
        self._in_transaction = False
        self._healed_ids: set[int] = set()
        try:
            if str(db_path) != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(db_path))
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"Cannot open database {db_path}: {e}") from e
        self._conn.row_factory = sqlite3.Row

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def initialize(self) -> None:
        try:
            self._conn.executescript(self.SCHEMA)
            for statement in self.MIGRATIONS:
                try:
                    self._conn.execute(statement)
                except sqlite3.OperationalError as e:
                    if "duplicate column" not in str(e):
                        raise
            self._conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to initialize {self.db_path}: {e}") from e

    @contextmanager
    def transaction(self) -> Iterator["SqliteStorage"]:
        """Commit all writes in the block together, roll back on exception.

        Nested use joins the outer transaction.
        """
        if self._in_transaction:
            yield self
            return

        self._in_transaction = True
        try:
            yield self
            self._conn.commit()
        except sqlite3.Error as e:
            self._conn.rollback()
            raise StorageError(f"Transaction failed on {self.db_path}: {e}") from e
        except Exception:
            self._conn.rollback()
            raise
        finally:
            self._in_transaction = False

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            cursor = self._conn.execute(sql, params)
            if not self._in_transaction:
                self._conn.commit()
            return cursor
        except sqlite3.Error as e:
            if not self._in_transaction:
                self._conn.rollback()
            raise StorageError(f"Database error on {self.db_path}: {e}") from e

    def _row_to_memo(self, row: sqlite3.Row) -> tuple[Memo, bool]:
        """Decode a row, defaulting malformed fields.

        Returns:
            (memo, healed) where healed is True if any field was defaulted
        """
        memo_id = row["id"]
        healed = False

        status = parse_status(row["status"])
        if status is None:
            logger.warning(f"[STORE] memo {memo_id}: unknown status {row['status']!r}, defaulting to hot")
            status = MemoStatus.HOT
            healed = True

        title = row["title"] if isinstance(row["title"], str) else ""
        if not title.strip():
            logger.warning(f"[STORE] memo {memo_id}: empty title, using {UNTITLED!r}")
            title = UNTITLED
            healed = True

        body = row["body"]
        if not isinstance(body, str):
            logger.warning(f"[STORE] memo {memo_id}: non-text body {body!r}, using ''")
            body = ""
            healed = True

        creation_time = parse_timestamp(row["creation_date"])
        if creation_time is None:
            logger.warning(f"[STORE] memo {memo_id}: unparseable creation date {row['creation_date']!r}, using now")
            creation_time = utc_now()
            healed = True

        completion_time = parse_timestamp(row["moved_to_done_date"])
        if status == MemoStatus.DONE and completion_time is None:
            logger.warning(f"[STORE] memo {memo_id}: done without a valid completion date, using now")
            completion_time = utc_now()
            healed = True
        elif status != MemoStatus.DONE and row["moved_to_done_date"] is not None:
            logger.warning(f"[STORE] memo {memo_id}: completion date on a {status.value} memo, clearing")
            completion_time = None
            healed = True

        delay_minutes = row["delay_minutes"]
        if delay_minutes is not None and (
            isinstance(delay_minutes, bool) or not isinstance(delay_minutes, int) or delay_minutes <= 0
        ):
            logger.warning(f"[STORE] memo {memo_id}: invalid delay {delay_minutes!r}, ignoring")
            delay_minutes = None
            healed = True

        memo = Memo(
            id=memo_id,
            title=title,
            body=body,
            status=status,
            creation_time=creation_time,
            completion_time=completion_time,
            delay_minutes=delay_minutes,
        )
        return memo, healed

    def load_memos(self) -> dict[int, Memo]:
        rows = self._execute(
            "SELECT id, title, body, status, creation_date, moved_to_done_date, delay_minutes FROM memos"
        ).fetchall()

        memos = {}
        self._healed_ids = set()
        for row in rows:
            memo, healed = self._row_to_memo(row)
            memos[memo.id] = memo
            if healed:
                self._healed_ids.add(memo.id)
        return memos

    def healed_memo_ids(self) -> set[int]:
        return set(self._healed_ids)

    def load_hot_stack(self) -> list[int]:
        row = self._execute("SELECT stack_json FROM hot_stack_state WHERE id = 1").fetchone()
        if row is None:
            return []

        try:
            data = json.loads(row["stack_json"])
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"[STORE] Malformed hot stack record, starting empty: {e}")
            return []

        if not isinstance(data, list):
            logger.warning("[STORE] Hot stack record is not a list, starting empty")
            return []
        if not validate.is_valid(data, "hot_stack"):
            data = [x for x in data if isinstance(x, int) and not isinstance(x, bool)]
        return data

    def insert_memo(
        self,
        title: str,
        body: str,
        status: MemoStatus,
        creation_time: datetime,
        delay_minutes: int | None = None,
    ) -> int:
        draft = Memo(
            id=None,
            title=title,
            body=body,
            status=status,
            creation_time=creation_time,
            delay_minutes=delay_minutes,
        )
        record = memo_record(draft)
        self._check_memo(record, str(self.db_path))

        cursor = self._execute(
            "INSERT INTO memos (title, body, status, creation_date, delay_minutes) VALUES (?, ?, ?, ?, ?)",
            (record["title"], record["body"], record["status"], record["creation_time"], record["delay_minutes"]),
        )
        return cursor.lastrowid

    def update_memo(self, memo: Memo) -> None:
        record = memo_record(memo)
        self._check_memo(record, str(self.db_path))
        self._execute(
            "UPDATE memos SET title = ?, body = ?, status = ?, creation_date = ?, moved_to_done_date = ?, "
            "delay_minutes = ? WHERE id = ?",
            (
                record["title"],
                record["body"],
                record["status"],
                record["creation_time"],
                record["completion_time"],
                record["delay_minutes"],
                memo.id,
            ),
        )

    def delete_memo(self, memo_id: int) -> None:
        self._execute("DELETE FROM memos WHERE id = ?", (memo_id,))

    def save_hot_stack(self, memo_ids: list[int]) -> None:
        self._check_hot_stack(memo_ids, str(self.db_path))
        self._execute(
            "UPDATE hot_stack_state SET stack_json = ? WHERE id = 1",
            (json.dumps(list(memo_ids)),),
        )

    def load_preferences(self) -> Preferences:
        row = self._execute(
            "SELECT memo_input_height, always_on_top, new_memo_text, window_width, window_height, "
            "window_x, window_y FROM app_state WHERE id = 1"
        ).fetchone()
        if row is None:
            return Preferences()
        return Preferences(
            always_on_top=bool(row["always_on_top"]),
            last_input_text=row["new_memo_text"],
            memo_input_height=row["memo_input_height"],
            window_width=row["window_width"],
            window_height=row["window_height"],
            window_x=row["window_x"],
            window_y=row["window_y"],
        )

    def save_preferences(self, prefs: Preferences) -> None:
        self._execute(
            "UPDATE app_state SET memo_input_height = ?, always_on_top = ?, new_memo_text = ?, "
            "window_width = ?, window_height = ?, window_x = ?, window_y = ? WHERE id = 1",
            (
                prefs.memo_input_height,
                1 if prefs.always_on_top else 0,
                prefs.last_input_text,
                prefs.window_width,
                prefs.window_height,
                prefs.window_x,
                prefs.window_y,
            ),
        )
