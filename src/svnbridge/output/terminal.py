"""Rich terminal reporter — status tables and lock details."""

from __future__ import annotations

from typing import Iterable, List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from svnbridge.svn.models import (
    FileStatus,
    LockDetails,
    LockStatus,
    RemoteStatus,
    StatusRecord,
)

_STATUS_STYLE = {
    FileStatus.ADDED: "green",
    FileStatus.MODIFIED: "yellow",
    FileStatus.DELETED: "red",
    FileStatus.MISSING: "bold red",
    FileStatus.CONFLICTED: "bold white on red",
    FileStatus.REPLACED: "magenta",
    FileStatus.UNVERSIONED: "dim",
    FileStatus.OBSTRUCTED: "bold red",
}


def _label(value) -> str:
    return value.name.replace("_", " ").lower()


def _status_cell(record: StatusRecord) -> Text:
    style = _STATUS_STYLE.get(record.status, "")
    return Text(_label(record.status), style=style)


def _lock_cell(record: StatusRecord) -> str:
    if record.lock_status == LockStatus.NO_LOCK:
        return ""
    text = _label(record.lock_status)
    if record.lock_details.is_locked:
        text += f" ({record.lock_details.owner})"
    return text


def render_statuses(records: Iterable[StatusRecord], *, console: Optional[Console] = None) -> int:
    """Print a status table. Returns the number of rows printed."""
    console = console or Console(stderr=True)
    rows: List[StatusRecord] = list(records)

    if not rows:
        console.print("[green]No changes.[/green]")
        return 0

    table = Table(title="SVN Status", border_style="dim", title_style="bold")
    table.add_column("Status", min_width=10)
    table.add_column("Props")
    table.add_column("Lock")
    table.add_column("Tree")
    table.add_column("Remote")
    table.add_column("Path", style="cyan")

    for record in rows:
        table.add_row(
            _status_cell(record),
            "" if record.property_status.value == " " else _label(record.property_status),
            _lock_cell(record),
            "" if record.tree_conflict_status.value == " " else Text("tree conflict", style="bold red"),
            "*" if record.remote_status == RemoteStatus.MODIFIED else "",
            record.path,
        )

    console.print(table)
    return len(rows)


def render_lock_details(details: LockDetails, *, console: Optional[Console] = None) -> None:
    console = console or Console(stderr=True)
    if details.is_empty:
        console.print("[yellow]Lock details unavailable.[/yellow]")
        return
    if not details.is_locked:
        console.print(f"[green]{details.path}[/green] is not locked.")
        return

    console.print(f"[bold]{details.path}[/bold]")
    console.print(f"[dim]Owner:[/dim]   {details.owner}")
    console.print(f"[dim]Created:[/dim] {details.date}")
    if details.message:
        console.print("[dim]Comment:[/dim]")
        console.print(details.message.rstrip(), markup=False)
