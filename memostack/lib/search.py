"""
Status-filtered substring search over memos.

Cold results are newest-created first. Done results are most recently
completed first; memos without a completion time sort after those that
have one, newest-created first among themselves. Hot and delayed results
keep the input order (hot ordering belongs to the hot stack).
"""

from typing import Iterable

from .types import Memo, MemoStatus


def _done_sort_key(memo: Memo) -> tuple:
    if memo.completion_time is not None:
        return (0, -memo.completion_time.timestamp(), -memo.creation_time.timestamp())
    return (1, 0.0, -memo.creation_time.timestamp())


def filter_memos(memos: Iterable[Memo], status: MemoStatus, query: str = "") -> list[Memo]:
    """Return memos with the given status whose title or body contains query.

    Matching is case-insensitive. A blank query matches everything.
    """
    results = [m for m in memos if m.status == status]

    if query.strip():
        results = [m for m in results if m.matches(query)]

    if status == MemoStatus.COLD:
        results.sort(key=lambda m: m.creation_time, reverse=True)
    elif status == MemoStatus.DONE:
        results.sort(key=_done_sort_key)

    return results
