"""
Conversion between free-form input text and memo title/body.

The first line of captured text becomes the title, the rest the body.
"""

from .types import Memo


def parse_memo_text(text: str) -> tuple[str, str]:
    """Split input text into (title, body).

    Both parts are trimmed. Text without a newline has an empty body;
    blank text yields ("", "").
    """
    text = text.strip()
    title, sep, body = text.partition("\n")
    if not sep:
        return text, ""
    return title.strip(), body.strip()


def format_memo_text(memo: Memo) -> str:
    """Rebuild editable text from a memo, omitting an empty body."""
    if not memo.body:
        return memo.title
    return f"{memo.title}\n{memo.body}"
