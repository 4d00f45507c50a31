"""Shared TUI components for the memostack UI."""

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from .timestamps import format_local
from .types import Memo


def memo_label(memo: Memo, prefix: str = "", suffix: str = "") -> Text:
    """Render a memo row.

    Collapsed: title with a dim preview of the first body line. Expanded:
    title, the full body, then the created and done dates. Memos with a
    body carry a +/- expand marker.
    """
    text = Text(prefix)
    if memo.body:
        text.append("- " if memo.expanded else "+ ", style="bold cyan")
    text.append(memo.title, style="bold")
    if memo.body and not memo.expanded:
        preview = memo.body.splitlines()[0]
        text.append(f"  {preview}", style="dim")
    if suffix:
        text.append(f"  {suffix}", style="italic cyan")
    if not memo.expanded:
        return text

    indent = " " * len(prefix)
    for line in memo.body.splitlines():
        text.append(f"\n{indent}{line}")
    dates = f"Created: {format_local(memo.creation_time)}"
    if memo.completion_time:
        dates += f"  Done: {format_local(memo.completion_time)}"
    text.append(f"\n{indent}{dates}", style="dim")
    return text


class ConfirmModal(ModalScreen[bool]):
    """Simple yes/no confirmation modal."""

    CSS = """
    ConfirmModal {
        align: center middle;
    }

    #confirm-dialog {
        width: auto;
        max-width: 70;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: solid $warning;
    }

    #confirm-message {
        margin-bottom: 1;
    }

    #confirm-hint {
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        yield Container(
            Static(Text(self.message), id="confirm-message"),
            Static("[y]es / [n]o", id="confirm-hint", markup=False),
            id="confirm-dialog",
        )

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)
