"""Output formatting: Rich tables for the entry groups and slot status, plus JSON."""

from __future__ import annotations

import json
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from vaultwarden_panel.models import Comment, EntryGroup, SSLStatus, Variable, entry_to_wire
from vaultwarden_panel.security import mask_value

_KIND_STYLES = {
    "success": "green",
    "error": "red",
    "info": "cyan",
}


def render_groups(
    groups: list[EntryGroup],
    file_path: str = "",
    console: Optional[Console] = None,
    reveal: bool = False,
) -> None:
    """Print one table per group, in file order."""
    console = console or Console()
    if file_path:
        console.print(f"[bold]File:[/bold] {file_path}")
    for group in groups:
        title = group.section.title if group.section else None
        caption = f"{len(group.entries)} items" if group.section else None
        table = Table(title=title, caption=caption, show_lines=False, title_justify="left")
        table.add_column("#", justify="right", style="dim")
        table.add_column("On")
        table.add_column("Key", style="cyan")
        table.add_column("Value")
        for index, entry in group.indexed():
            if isinstance(entry, Comment):
                table.add_row(str(index), "", Text(entry.original_line, style="dim"), "")
            elif isinstance(entry, Variable):
                on = "[green]✓[/green]" if entry.enabled else "[dim]✗[/dim]"
                value = Text(mask_value(entry.key, entry.value, reveal))
                if not entry.enabled:
                    value.stylize("dim")
                table.add_row(str(index), on, entry.key, value)
        console.print(table)


def render_ssl_status(status: SSLStatus, console: Optional[Console] = None) -> None:
    console = console or Console()
    table = Table(title="SSL Certificate Management", show_lines=True)
    table.add_column("Slot", style="cyan")
    table.add_column("State")
    table.add_column("File")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    for label, slot in (("Certificate", status.cert), ("Private Key", status.key)):
        if slot.exists:
            table.add_row(label, "[green]✓ Uploaded[/green]", slot.name, slot.size_kb, slot.mod_time)
        else:
            table.add_row(label, "[red]✗ Missing[/red]", "", "", "")
    console.print(table)
    if status.ready:
        console.print(
            "[green]✓ SSL is ready for use. Vaultwarden will restart automatically "
            "when both files are present.[/green]"
        )


def render_banner(message: str, kind: str, console: Optional[Console] = None) -> None:
    console = console or Console()
    color = _KIND_STYLES.get(kind, "white")
    console.print(f"[{color}]{message}[/{color}]")


def to_json(groups: list[EntryGroup], file_path: str, status: Optional[SSLStatus] = None, reveal: bool = False) -> str:
    """Canonical JSON dump of the current state; secrets masked unless `reveal`."""
    variables = []
    for group in groups:
        if group.section is not None:
            variables.append(entry_to_wire(group.section))
        for entry in group.entries:
            wire = entry_to_wire(entry)
            if isinstance(entry, Variable):
                wire["value"] = mask_value(entry.key, entry.value, reveal)
            variables.append(wire)
    payload: dict = {"filePath": file_path, "variables": variables}
    if status is not None:
        payload["ssl"] = status.to_dict()
    return json.dumps(payload, indent=2, ensure_ascii=False)
