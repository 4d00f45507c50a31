"""Tests for memostack.lib.memo_text module."""

from datetime import datetime, timezone

from memostack.lib.memo_text import format_memo_text, parse_memo_text
from memostack.lib.types import Memo, MemoStatus


class TestParseMemoText:
    """Test splitting input text into title and body."""

    def test_single_line(self):
        assert parse_memo_text("Buy milk") == ("Buy milk", "")

    def test_title_and_body(self):
        assert parse_memo_text("Buy milk\n2 litres\nsemi-skimmed") == ("Buy milk", "2 litres\nsemi-skimmed")

    def test_trims_both_parts(self):
        assert parse_memo_text("\n\n  Title  \n  body  \n\n") == ("Title", "body")

    def test_blank(self):
        assert parse_memo_text("  \n \n") == ("", "")


class TestFormatMemoText:
    """Test rebuilding editable text."""

    def _memo(self, body):
        return Memo(
            id=1,
            title="Title",
            body=body,
            status=MemoStatus.HOT,
            creation_time=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )

    def test_with_body(self):
        assert format_memo_text(self._memo("a\nb")) == "Title\na\nb"

    def test_without_body(self):
        assert format_memo_text(self._memo("")) == "Title"

    def test_parse_inverts_format(self):
        memo = self._memo("first\nsecond")
        assert parse_memo_text(format_memo_text(memo)) == (memo.title, memo.body)
