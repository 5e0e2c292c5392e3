#!/usr/bin/env python3
"""Habit tracker TUI — the local, single-user front end powered by Textual."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Input,
    Label,
    Select,
    Static,
)

from tracker import operations
from tracker.days import display_day, parse_day
from tracker.errors import HabitError, PersistenceError
from tracker.fileio import read_text, write_text_atomic
from tracker.logs import setup_logging
from tracker.models import PERIODS, TIMES_PER_WEEK
from tracker.workspace import init_workspace, load_settings, workspace_root


# ── Stylesheet ─────────────────────────────────────────────────

CSS = """
Screen {
    background: $surface;
}

#stats {
    height: auto;
    padding: 0 2;
    background: $primary-background;
    color: $text;
}

#motivation {
    height: auto;
    padding: 0 2;
    color: $text-muted;
}

#search {
    margin: 1 1 0 1;
}

#habit-table {
    height: 1fr;
    margin: 0 1;
}

.dialog {
    width: 60;
    height: auto;
    padding: 1 2;
    border: tall $primary;
    background: $panel;
}

.dialog Input, .dialog Select {
    margin: 0 0 1 0;
}

.dialog-buttons {
    height: auto;
    align-horizontal: right;
}

.dialog-buttons Button {
    margin: 0 0 0 1;
}

ModalScreen {
    align: center middle;
}

#info-body {
    height: auto;
    max-height: 20;
}
"""


# ── Dialogs ────────────────────────────────────────────────────


class AddHabitScreen(ModalScreen[dict[str, Any] | None]):
    """Form for a new habit. Dismisses with the field values or None."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label("New habit")
            yield Input(placeholder="short name (e.g. rd)", id="short")
            yield Input(placeholder="habit name", id="name")
            yield Select([(p, p) for p in PERIODS], value=PERIODS[0], allow_blank=False, id="period")
            yield Input(placeholder="times per week", id="count", type="integer")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Add", variant="primary", id="add")
                yield Button("Cancel", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#count", Input).display = False
        self.query_one("#short", Input).focus()

    @on(Select.Changed, "#period")
    def _on_period(self, event: Select.Changed) -> None:
        self.query_one("#count", Input).display = event.value == TIMES_PER_WEEK

    @on(Button.Pressed, "#add")
    @on(Input.Submitted)
    def _submit(self) -> None:
        period = self.query_one("#period", Select).value
        count_txt = self.query_one("#count", Input).value.strip()
        self.dismiss({
            "short_name": self.query_one("#short", Input).value,
            "name": self.query_one("#name", Input).value,
            "period": period,
            "count": count_txt if period == TIMES_PER_WEEK else None,
        })

    @on(Button.Pressed, "#cancel")
    def action_cancel(self) -> None:
        self.dismiss(None)


class ConfirmScreen(ModalScreen[bool]):
    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label(self.message, markup=False)
            with Horizontal(classes="dialog-buttons"):
                yield Button("Yes", variant="error", id="yes")
                yield Button("No", id="no")

    @on(Button.Pressed, "#yes")
    def _yes(self) -> None:
        self.dismiss(True)

    @on(Button.Pressed, "#no")
    def action_cancel(self) -> None:
        self.dismiss(False)


class PathScreen(ModalScreen[str | None]):
    """Ask for a file path."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, prompt: str, default: str = "") -> None:
        super().__init__()
        self.prompt = prompt
        self.default = default

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label(self.prompt)
            yield Input(value=self.default, id="path")
            with Horizontal(classes="dialog-buttons"):
                yield Button("OK", variant="primary", id="ok")
                yield Button("Cancel", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#path", Input).focus()

    @on(Button.Pressed, "#ok")
    @on(Input.Submitted)
    def _ok(self) -> None:
        value = self.query_one("#path", Input).value.strip()
        self.dismiss(value or None)

    @on(Button.Pressed, "#cancel")
    def action_cancel(self) -> None:
        self.dismiss(None)


class InfoScreen(ModalScreen[None]):
    BINDINGS = [Binding("escape", "close", "Close")]

    def __init__(self, body: str) -> None:
        super().__init__()
        self.body = body

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Static(self.body, id="info-body", markup=False)
            with Horizontal(classes="dialog-buttons"):
                yield Button("Close", id="close")

    @on(Button.Pressed, "#close")
    def action_close(self) -> None:
        self.dismiss(None)


# ── Main app ───────────────────────────────────────────────────


class HabitApp(App):
    """Habit tracker — streaks, XP and freeze tokens in the terminal."""

    TITLE = "Habits"
    CSS = CSS

    BINDINGS = [
        Binding("a", "add_habit", "Add"),
        Binding("d", "mark_done", "Done"),
        Binding("i", "show_info", "Info"),
        Binding("x", "delete_habit", "Delete"),
        Binding("b", "buy_freeze", "Buy freeze"),
        Binding("slash", "focus_search", "Search"),
        Binding("o", "import_file", "Import"),
        Binding("e", "export_file", "Export"),
        Binding("c", "clear_all", "Clear"),
        Binding("escape", "blur_focus", "Back", show=False),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, root: Path | None = None) -> None:
        super().__init__()
        self.habits_root = root or workspace_root()
        self._search_text = ""

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="stats")
        yield Static(id="motivation")
        yield Input(placeholder="search short name or habit…", id="search")
        yield DataTable(id="habit-table", cursor_type="row", zebra_stripes=True)
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#habit-table", DataTable)
        table.add_columns("Short", "Habit", "Period", "Last done", "Streak")
        result = self._call(operations.settle_all, root=self.habits_root)
        if result and result["forgiven"]:
            self.notify(
                f"Freeze used for: {', '.join(result['forgiven'])}",
                title="Streak saved",
            )
        self._refresh()
        table.focus()

    # ── Helpers ────────────────────────────────────────────────

    def _call(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run an operation, turning habit errors into notifications."""
        try:
            return fn(*args, **kwargs)
        except PersistenceError as e:
            self.notify(e.message, title="Save failed", severity="error")
        except HabitError as e:
            self.notify(e.message, severity="warning")
        return None

    def _refresh(self) -> None:
        status = self._call(operations.status, root=self.habits_root)
        if status:
            self.query_one("#stats", Static).update(
                f"XP {status['xp']}  ·  Level {status['level']} "
                f"({status['levelProgress']}%)  ·  ❄ {status['freezeTokens']}  ·  "
                f"🔥 best {status['longestStreak']}"
            )
            self.query_one("#motivation", Static).update(status["motivation"])

        habits = self._call(operations.list_all, self._search_text, root=self.habits_root) or {}
        table = self.query_one("#habit-table", DataTable)
        table.clear()
        for short, h in habits.items():
            period = h["period"]
            if h.get("count"):
                period = f"{period} ({h['count']}/wk)"
            last = display_day(parse_day(h["lastDone"]))
            table.add_row(short, h["name"], period, last, str(h["streak"]), key=short)

    def _selected(self) -> str | None:
        table = self.query_one("#habit-table", DataTable)
        if table.row_count == 0:
            self.notify("No habit selected", severity="warning")
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return row_key.value

    # ── Search ─────────────────────────────────────────────────

    @on(Input.Changed, "#search")
    def _on_search(self, event: Input.Changed) -> None:
        self._search_text = event.value
        self._refresh()

    def action_focus_search(self) -> None:
        self.query_one("#search", Input).focus()

    def action_blur_focus(self) -> None:
        self.query_one("#habit-table", DataTable).focus()

    # ── Habit actions ──────────────────────────────────────────

    def action_add_habit(self) -> None:
        def _added(values: dict[str, Any] | None) -> None:
            if values is None:
                return
            if self._call(operations.add, root=self.habits_root, **values):
                self.notify("Habit added")
                self._refresh()

        self.push_screen(AddHabitScreen(), _added)

    def action_mark_done(self) -> None:
        short = self._selected()
        if short is None:
            return
        result = self._call(operations.done, short, root=self.habits_root)
        if result:
            msg = f"Marked “{short}” done (+{result['xpGain']} XP)"
            if result["freezeUsed"]:
                msg += " (freeze used)"
            self.notify(msg)
            self._refresh()

    def action_show_info(self) -> None:
        short = self._selected()
        if short is None:
            return
        view = self._call(operations.get, short, display=True, root=self.habits_root)
        if view is None:
            return
        view.pop("short", None)
        self.push_screen(InfoScreen(json.dumps({short: view}, indent=2, ensure_ascii=False)))

    def action_delete_habit(self) -> None:
        short = self._selected()
        if short is None:
            return

        def _confirmed(yes: bool | None) -> None:
            if yes and self._call(operations.delete, short, root=self.habits_root):
                self.notify("Habit deleted")
                self._refresh()

        self.push_screen(ConfirmScreen(f"Delete habit “{short}”?"), _confirmed)

    def action_buy_freeze(self) -> None:
        if self._call(operations.purchase, root=self.habits_root):
            self.notify("Purchased a freeze token")
            self._refresh()

    def action_clear_all(self) -> None:
        def _confirmed(yes: bool | None) -> None:
            if yes and self._call(operations.clear, root=self.habits_root):
                self.notify("Cleared")
                self._refresh()

        self.push_screen(
            ConfirmScreen("This removes ALL habits and resets XP and freezes. Proceed?"),
            _confirmed,
        )

    # ── Import / export ────────────────────────────────────────

    def action_import_file(self) -> None:
        def _chosen(path: str | None) -> None:
            if not path:
                return
            p = Path(path).expanduser()
            if not p.exists():
                self.notify(f"File not found: {p}", severity="warning")
                return
            try:
                text = read_text(p)
            except (OSError, UnicodeDecodeError) as e:
                self.notify(str(e), title="Import failed", severity="error")
                return
            result = self._call(operations.import_text, text, root=self.habits_root)
            if result:
                self.notify(f"Imported {result['count']} habits (XP and freezes reset)")
                self._refresh()

        self.push_screen(PathScreen("Import JSON or CSV from:"), _chosen)

    def action_export_file(self) -> None:
        def _chosen(path: str | None) -> None:
            if not path:
                return
            p = Path(path).expanduser()
            fmt = "compat" if p.stem.endswith("_compat") else "csv"
            if p.suffix.lower() == ".json":
                fmt = "json"
            body = self._call(operations.export, fmt, root=self.habits_root)
            if body is None:
                return
            try:
                write_text_atomic(p, body)
            except OSError as e:
                self.notify(str(e), title="Export failed", severity="error")
                return
            self.notify(f"Exported to {p}")

        self.push_screen(PathScreen("Export to (.csv, _compat.csv or .json):", "habits.csv"), _chosen)


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    root = workspace_root()
    try:
        init_workspace(root)
    except OSError as e:
        print(f"Cannot create workspace {root}: {e}")
        print("Set HABITS_ROOT to a writable directory.")
        sys.exit(1)
    setup_logging(load_settings(root), root, console=False)
    HabitApp(root).run()


if __name__ == "__main__":
    main()
