"""
memostack ui - Interactive memo stack.

Textual presentation layer over the lifecycle core. The app's interval
timer is the periodic tick that drives delayed promotion and the cold
spotlight.
"""

import logging
from typing import Optional

from rich.text import Text
from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import (
    Footer,
    Header,
    Input,
    ListItem,
    ListView,
    Static,
    TabbedContent,
    TabPane,
    TextArea,
)

from memostack.lib.delay import adjust_delay_input, format_remaining, parse_delay_input
from memostack.lib.constants import DELAY_PRESETS_MINUTES, EMPTY_DELAY_INPUT
from memostack.lib.tui import ConfirmModal, memo_label
from memostack.lib.types import MemoStatus
from memostack.storage.base import StorageError
from memostack.workflow.lifecycle import LifecycleManager
from memostack.workflow.memo_store import MemoNotFound
from memostack.workflow.scheduler import DelayedPromotionScheduler
from memostack.workflow.spotlight import SpotlightSelector

logger = logging.getLogger(__name__)

# Configuration
TICK_SECONDS = 1.0
TABS = ("hot", "cold", "done", "delayed")


class MemoList(ListView):
    """List of memos for one tab. Memo actions apply to the highlighted row."""

    BINDINGS = [
        Binding("space", "toggle_expand", "Expand"),
        Binding("a", "memo('archive')", "Cold"),
        Binding("d", "memo('complete')", "Done"),
        Binding("h", "memo('promote_to_hot')", "Hot"),
        Binding("u", "memo('shift_up')", "Up"),
        Binding("t", "memo('move_to_front')", "Top"),
        Binding("e", "memo('replace')", "Edit"),
        Binding("x", "memo('delete')", "Delete"),
    ]

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.memo_ids: list[int] = []

    def highlighted_id(self) -> Optional[int]:
        if self.index is None or not (0 <= self.index < len(self.memo_ids)):
            return None
        return self.memo_ids[self.index]

    def action_toggle_expand(self) -> None:
        memo_id = self.highlighted_id()
        if memo_id is not None:
            self.app.toggle_expanded(memo_id)

    def action_memo(self, operation: str) -> None:
        memo_id = self.highlighted_id()
        if memo_id is None:
            self.app.notify("No memo selected", severity="warning")
            return
        self.app.run_memo_operation(operation, memo_id)


class MemoStackApp(App):
    """Main memo stack TUI application."""

    CSS = """
    #lists {
        height: 1fr;
    }

    MemoList {
        height: 1fr;
    }

    #search-input {
        margin: 0 1;
    }

    #spotlight {
        height: auto;
        padding: 0 1;
        color: $text-muted;
    }

    #capture-box {
        height: auto;
        border: solid green;
        padding: 0 1;
    }

    #memo-input {
        height: 5;
    }

    #delay-row {
        height: 3;
    }

    #delay-input {
        width: 12;
    }

    #delay-hint {
        padding: 1 1;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("ctrl+s", "capture", "Add", priority=True),
        Binding("ctrl+t", "capture_delayed", "Add delayed", priority=True),
        Binding("f2", "delay(15)", "+15m", show=False),
        Binding("f3", "delay(60)", "+1h", show=False),
        Binding("f4", "delay(240)", "+4h", show=False),
        Binding("f5", "clear_delay", "No delay", show=False),
        Binding("ctrl+q", "quit", "Quit", priority=True),
    ]

    def __init__(self, manager: LifecycleManager) -> None:
        super().__init__()
        self.manager = manager
        self.scheduler = DelayedPromotionScheduler(
            manager, manager.config.delayed_check_interval_seconds
        )
        self.spotlight = SpotlightSelector(
            manager.config.cold_spotlight_interval_seconds,
            pause_when_expanded=manager.config.pause_spotlight_when_expanded,
        )

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="lists"):
            with TabbedContent(initial="hot", id="tabs"):
                for tab in TABS:
                    with TabPane(tab.capitalize(), id=tab):
                        yield MemoList(id=f"{tab}-list")
            yield Input(placeholder="Search cold / done memos...", id="search-input")
        yield Static(id="spotlight")
        with Vertical(id="capture-box"):
            yield TextArea(id="memo-input")
            with Horizontal(id="delay-row"):
                yield Input(value=EMPTY_DELAY_INPUT, placeholder="HH:MM", id="delay-input")
                presets = " ".join(f"F{i + 2} +{m}m" for i, m in enumerate(DELAY_PRESETS_MINUTES))
                yield Static(f"{presets}  F5 clear", id="delay-hint")
        yield Footer()

    async def on_mount(self) -> None:
        self.title = "memostack"
        try:
            prefs = self.manager.storage.load_preferences()
            self.query_one("#memo-input", TextArea).load_text(prefs.last_input_text)
        except StorageError as e:
            logger.warning(f"Could not load preferences: {e}")

        await self.tick()
        self.set_interval(TICK_SECONDS, self.tick)

    # ------------------------------------------------------------------
    # Periodic tick
    # ------------------------------------------------------------------

    async def tick(self) -> None:
        """Promote due delayed memos, resample the spotlight, redraw."""
        try:
            self.scheduler.tick()
        except StorageError as e:
            logger.error(f"Delayed promotion not saved: {e}")
            self.notify(f"Storage error: {e}", severity="error")

        self.spotlight.refresh(self.manager)
        self.update_spotlight()
        await self.refresh_lists()

    def update_spotlight(self) -> None:
        memo = self.spotlight.current(self.manager)
        widget = self.query_one("#spotlight", Static)
        widget.update(memo_label(memo, prefix="Cold spotlight: ") if memo else "")

    def _rows(self, tab: str) -> list[tuple[int, Text]]:
        manager = self.manager
        query = self.query_one("#search-input", Input).value

        if tab == "hot":
            return [
                (memo.id, memo_label(memo, prefix=f"{pos}. "))
                for pos, memo in enumerate(manager.hot_memos(), 1)
            ]
        if tab == "delayed":
            now = manager.clock()
            return [
                (memo.id, memo_label(memo, suffix=format_remaining(memo.ready_time or memo.creation_time, now)))
                for memo in manager.delayed_memos()
            ]
        return [(memo.id, memo_label(memo)) for memo in manager.search(MemoStatus(tab), query)]

    async def refresh_lists(self) -> None:
        """Rebuild each tab's list, keeping the highlighted row where possible."""
        for tab in TABS:
            memo_list = self.query_one(f"#{tab}-list", MemoList)
            rows = self._rows(tab)
            index = memo_list.index

            await memo_list.clear()
            memo_list.memo_ids = [memo_id for memo_id, _ in rows]
            await memo_list.extend(ListItem(Static(label)) for _, label in rows)

            if rows:
                memo_list.index = min(index or 0, len(rows) - 1)

        hot_count = len(self.manager.hot_stack)
        self.sub_title = f"hot {hot_count}/{self.manager.max_hot_count}"

    @on(Input.Changed, "#search-input")
    async def on_search_changed(self, event: Input.Changed) -> None:
        await self.refresh_lists()

    # ------------------------------------------------------------------
    # Capture
    # ------------------------------------------------------------------

    async def _capture(self, delay_minutes: Optional[int]) -> None:
        memo_input = self.query_one("#memo-input", TextArea)
        try:
            memo = self.manager.capture_text(memo_input.text, delay_minutes)
        except StorageError as e:
            logger.error(f"Capture not saved: {e}")
            self.notify(f"Storage error: {e}", severity="error")
            return

        if memo is None:
            self.notify("Nothing to add", severity="warning")
            return

        memo_input.load_text("")
        self.query_one("#delay-input", Input).value = EMPTY_DELAY_INPUT
        await self.refresh_lists()

    async def action_capture(self) -> None:
        await self._capture(None)

    async def action_capture_delayed(self) -> None:
        delay_minutes = parse_delay_input(self.query_one("#delay-input", Input).value)
        if delay_minutes is None:
            self.notify("No valid delay set, adding as hot", severity="warning")
        await self._capture(delay_minutes)

    def action_delay(self, minutes: int) -> None:
        delay_input = self.query_one("#delay-input", Input)
        delay_input.value = adjust_delay_input(delay_input.value, minutes)

    def action_clear_delay(self) -> None:
        self.query_one("#delay-input", Input).value = EMPTY_DELAY_INPUT

    # ------------------------------------------------------------------
    # Memo operations
    # ------------------------------------------------------------------

    def toggle_expanded(self, memo_id: int) -> None:
        """Show or hide a memo's full body and dates. UI state only, not saved."""
        memo = self.manager.store.get(memo_id)
        if memo is None:
            return
        memo.expanded = not memo.expanded
        self.call_later(self.refresh_lists)
        self.update_spotlight()

    def run_memo_operation(self, operation: str, memo_id: int) -> None:
        """Dispatch a memo action from a list binding."""
        if operation == "delete":
            memo = self.manager.store.get(memo_id)
            if memo is None:
                return

            def handle_confirm(confirmed: bool) -> None:
                if confirmed:
                    self.call_later(self._apply, "delete", memo_id)

            self.push_screen(ConfirmModal(f"Delete '{memo.title}'?"), handle_confirm)
            return

        self.call_later(self._apply, operation, memo_id)

    async def _apply(self, operation: str, memo_id: int) -> None:
        try:
            if operation == "replace":
                memo_input = self.query_one("#memo-input", TextArea)
                text = self.manager.replace(memo_id, draft=memo_input.text)
                memo_input.load_text(text)
                memo_input.focus()
            else:
                getattr(self.manager, operation)(memo_id)
        except MemoNotFound as e:
            self.notify(str(e), severity="warning")
        except StorageError as e:
            logger.error(f"{operation} on memo {memo_id} not saved: {e}")
            self.notify(f"Storage error: {e}", severity="error")

        await self.refresh_lists()
        self.update_spotlight()

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def save_preferences(self) -> None:
        try:
            prefs = self.manager.storage.load_preferences()
            prefs.last_input_text = self.query_one("#memo-input", TextArea).text
            self.manager.storage.save_preferences(prefs)
        except StorageError as e:
            logger.warning(f"Could not save preferences: {e}")

    async def action_quit(self) -> None:
        self.save_preferences()
        self.exit()


def cmd_ui(args, manager: LifecycleManager) -> int:
    """Run the interactive memo stack."""
    app = MemoStackApp(manager)
    app.run()
    return 0
