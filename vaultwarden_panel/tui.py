"""vaultwarden_panel: interactive terminal panel.

Launch: python -m vaultwarden_panel --tui
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import httpx
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.css.query import NoMatches
from textual.screen import ModalScreen
from textual.widget import Widget
from textual.widgets import (
    Button,
    Collapsible,
    Footer,
    Header,
    Input,
    Label,
    Rule,
    Static,
    Switch,
)

from vaultwarden_panel.certificates import ALLOWED_EXTENSIONS
from vaultwarden_panel.models import SLOTS, Comment, EntryGroup, Slot, Variable, section_title
from vaultwarden_panel.panel import Panel
from vaultwarden_panel.settings import Settings
from vaultwarden_panel.status import StatusBanner, StatusKind

SLOT_LABELS = {"cert": "Certificate File", "key": "Private Key File"}

_SEVERITY = {"success": "information", "info": "information", "error": "error"}


# ═══════════════════════════════════════════════════════════════════════════
#  Confirmation modal
# ═══════════════════════════════════════════════════════════════════════════
class ConfirmScreen(ModalScreen[bool]):
    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
    ]

    def __init__(self, question: str) -> None:
        super().__init__()
        self.question = question

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Label(self.question, id="confirm-question")
            with Horizontal(id="confirm-buttons"):
                yield Button("No", id="confirm-no", variant="default")
                yield Button("Yes, delete", id="confirm-yes", variant="error")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.dismiss(event.button.id == "confirm-yes")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


# ═══════════════════════════════════════════════════════════════════════════
#  Main App
# ═══════════════════════════════════════════════════════════════════════════
class PanelApp(App):
    """Edit and manage Vaultwarden configuration."""

    TITLE = "vaultwarden_panel"
    SUB_TITLE = "Edit and manage Vaultwarden configuration"
    CSS_PATH = "tui.tcss"

    BINDINGS = [
        Binding("s", "save", "Save Changes", show=True),
        Binding("r", "refresh", "Refresh", show=True),
        Binding("q", "quit", "Quit", show=True),
        Binding("?", "toggle_help", "Help", show=True),
    ]

    def __init__(
        self,
        settings: Settings,
        activity_log: Optional[Path] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__()
        self.panel = Panel(
            settings,
            notify=self._toast,
            confirm=self._confirm,
            activity_log=activity_log,
            transport=transport,
        )
        # Presentation-only: collapsed flag per group position
        self.collapsed: dict[int, bool] = {}
        self._rendered_count = -1

    def compose(self) -> ComposeResult:
        yield Header()
        with VerticalScroll(id="main"):
            with Horizontal(id="action-row"):
                yield Button("Refresh", id="btn-refresh", variant="default")
                yield Button("Save Changes", id="btn-save", variant="primary")
            yield Label("", id="banner")
            yield Label("", id="file-path")
            with Vertical(id="ssl-card"):
                yield Label("SSL Certificate Management", classes="section-title")
                yield Label(
                    "Upload SSL certificate and private key files for Rocket TLS. "
                    f"Supported formats: {', '.join(ALLOWED_EXTENSIONS)}",
                    classes="hint",
                )
                for slot in SLOTS:
                    with Vertical(classes="slot"):
                        yield Label(SLOT_LABELS[slot], classes="slot-title")
                        yield Label("", id=f"{slot}-info", classes="slot-info")
                        with Horizontal(classes="slot-row"):
                            yield Input(placeholder="Path to file", id=f"{slot}-path")
                            yield Button("Upload", id=f"upload-{slot}", variant="default")
                            yield Button("Delete", id=f"delete-{slot}", variant="error")
                yield Label("", id="ssl-summary")
            yield Rule()
            yield Vertical(id="groups")
        yield Footer()

    def on_mount(self) -> None:
        self.panel.banner.subscribe(self._on_banner)
        self._on_banner(self.panel.banner)
        self.load_panel()

    async def on_unmount(self) -> None:
        await self.panel.aclose()

    # ── Collaborator callbacks ────────────────────────────────────────────
    def _toast(self, title: str, kind: StatusKind) -> None:
        self.notify(title, severity=_SEVERITY.get(kind, "information"), timeout=3)

    async def _confirm(self, question: str) -> bool:
        return bool(await self.push_screen_wait(ConfirmScreen(question)))

    def _on_banner(self, banner: StatusBanner) -> None:
        try:
            label = self.query_one("#banner", Label)
        except NoMatches:
            return
        label.update(banner.message if banner.visible else "")
        label.display = banner.visible and bool(banner.message)
        label.set_class(banner.kind == "error", "banner-error")
        label.set_class(banner.kind == "success", "banner-success")

    # ── Rendering ─────────────────────────────────────────────────────────
    def _render_ssl(self) -> None:
        status = self.panel.certs.status
        for slot in SLOTS:
            info = status.slot(slot)
            label = self.query_one(f"#{slot}-info", Label)
            if info.exists:
                label.update(f"✓ Uploaded  File: {info.name} ({info.size_kb})  Modified: {info.mod_time}")
            else:
                label.update("Not uploaded")
            self.query_one(f"#delete-{slot}", Button).display = info.exists

        summary = self.query_one("#ssl-summary", Label)
        summary.display = status.any_present
        lines = [
            "SSL Configuration Status:",
            f"Certificate: {'✓ Uploaded' if status.cert.exists else '✗ Missing'}",
            f"Private Key: {'✓ Uploaded' if status.key.exists else '✗ Missing'}",
        ]
        if status.ready:
            lines.append("✓ SSL is ready for use. Vaultwarden will restart automatically when both files are present.")
        summary.update("\n".join(lines))

    def _entry_widgets(self, group: EntryGroup) -> list[Widget]:
        widgets: list[Widget] = []
        for index, entry in group.indexed():
            if isinstance(entry, Comment):
                widgets.append(Static(entry.original_line, classes="comment", markup=False))
            elif isinstance(entry, Variable):
                parts: list[Widget] = [
                    Horizontal(
                        Switch(value=entry.enabled, id=f"switch-{index}"),
                        Label(entry.key, classes="key"),
                        classes="variable-head",
                    )
                ]
                if entry.description:
                    parts.append(Static(entry.description, classes="description", markup=False))
                parts.append(
                    Input(
                        value=entry.value,
                        placeholder=f"Value for {entry.key}",
                        id=f"value-{index}",
                        disabled=not entry.enabled,
                    )
                )
                widgets.append(Vertical(*parts, classes="variable"))
        return widgets

    async def _render_groups(self) -> None:
        config = self.panel.config
        container = self.query_one("#groups", Vertical)
        await container.remove_children()

        if config.error:
            await container.mount(Label(config.error, classes="banner-error"))
            return

        # Everything starts collapsed again when the number of entries changes
        if len(config.entries) != self._rendered_count:
            self.collapsed = {}
            self._rendered_count = len(config.entries)

        widgets: list[Widget] = []
        for position, group in enumerate(config.groups()):
            body = self._entry_widgets(group)
            if group.section is None:
                widgets.append(Vertical(*body, classes="group"))
                continue
            raw_line = group.section.original_line
            if raw_line and raw_line != group.section.description:
                body.insert(
                    0,
                    Static(
                        section_title(raw_line),
                        id=f"section-line-{position}",
                        classes="section-line",
                        markup=False,
                    ),
                )
            widgets.append(
                Collapsible(
                    *body,
                    title=f"{group.section.title}  ({len(group.entries)} items)",
                    collapsed=self.collapsed.get(position, True),
                    id=f"group-{position}",
                )
            )
        await container.mount_all(widgets)

    async def _render_all(self) -> None:
        path = self.panel.config.file_path
        self.query_one("#file-path", Label).update(f"File: {path}" if path else "")
        self._render_ssl()
        await self._render_groups()

    # ── Workers ───────────────────────────────────────────────────────────
    @work(exclusive=True, group="load")
    async def load_panel(self) -> None:
        await self.panel.refresh()
        await self._render_all()

    @work(group="save")
    async def save(self) -> None:
        button = self.query_one("#btn-save", Button)
        button.disabled = True
        button.label = "Saving…"
        try:
            saved = await self.panel.config.save()
        finally:
            button.disabled = False
            button.label = "Save Changes"
        if saved:
            await self._render_all()

    @work(group="ssl")
    async def upload(self, slot: Slot) -> None:
        path_input = self.query_one(f"#{slot}-path", Input)
        raw = path_input.value.strip()
        button = self.query_one(f"#upload-{slot}", Button)
        button.disabled = True
        button.label = "Uploading…"
        try:
            uploaded = await self.panel.certs.upload_slot(slot, Path(raw).expanduser() if raw else None)
        finally:
            button.disabled = False
            button.label = "Upload"
        if uploaded:
            path_input.value = ""
            await self._render_all()

    @work(group="ssl")
    async def delete(self, slot: Slot) -> None:
        button = self.query_one(f"#delete-{slot}", Button)
        button.disabled = True
        button.label = "Deleting…"
        try:
            deleted = await self.panel.certs.delete_slot(slot)
        finally:
            button.disabled = False
            button.label = "Delete"
        if deleted:
            await self._render_all()

    # ── Events ────────────────────────────────────────────────────────────
    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""
        if button_id == "btn-save":
            self.action_save()
        elif button_id == "btn-refresh":
            self.action_refresh()
        elif button_id.startswith("upload-"):
            self.upload(button_id.removeprefix("upload-"))
        elif button_id.startswith("delete-"):
            self.delete(button_id.removeprefix("delete-"))

    def on_switch_changed(self, event: Switch.Changed) -> None:
        index = int((event.switch.id or "").removeprefix("switch-"))
        entry = self.panel.config.entries[index]
        if isinstance(entry, Variable) and entry.enabled != event.value:
            self.panel.config.toggle_enabled(index)
        self.query_one(f"#value-{index}", Input).disabled = not event.value

    def on_input_changed(self, event: Input.Changed) -> None:
        input_id = event.input.id or ""
        if not input_id.startswith("value-"):
            return
        index = int(input_id.removeprefix("value-"))
        entry = self.panel.config.entries[index]
        if isinstance(entry, Variable) and entry.value != event.value:
            self.panel.config.set_value(index, event.value)

    def on_collapsible_expanded(self, event: Collapsible.Expanded) -> None:
        self._track_collapse(event.collapsible.id, False)

    def on_collapsible_collapsed(self, event: Collapsible.Collapsed) -> None:
        self._track_collapse(event.collapsible.id, True)

    def _track_collapse(self, widget_id: Optional[str], collapsed: bool) -> None:
        if widget_id and widget_id.startswith("group-"):
            self.collapsed[int(widget_id.removeprefix("group-"))] = collapsed

    # ── Actions ───────────────────────────────────────────────────────────
    def action_save(self) -> None:
        if not self.panel.config.saving.busy:
            self.save()

    def action_refresh(self) -> None:
        self.load_panel()

    def action_toggle_help(self) -> None:
        self.notify(
            r"\[s] Save  \[r] Refresh  \[q] Quit",
            title="Keybindings",
            timeout=5,
        )


if __name__ == "__main__":
    from vaultwarden_panel.settings import load_settings

    PanelApp(load_settings()).run()
