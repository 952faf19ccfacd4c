"""Console rendering for reconcile runs.

Each health check gets one header line, one outcome line and optional
indented detail lines.  Outcome markers follow plan notation: ``+`` created,
``~`` updated, ``-`` deleted, ``=`` unchanged, ``?`` planned, ``!`` skipped.
``logger.*`` calls stay in the workflow modules for file logging.
"""

from __future__ import annotations

from typing import Iterable, Sequence, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

console = Console(stderr=False, force_terminal=None)

# outcome value -> (marker, style)
_OUTCOME_MARKERS = {
    "CREATED": ("+", "green"),
    "UPDATED": ("~", "yellow"),
    "DELETED": ("-", "red"),
    "UNCHANGED": ("=", "dim"),
    "PLANNED": ("?", "cyan"),
    "SKIPPED": ("!", "yellow"),
}


def run_header(mode: str, count: int) -> None:
    """Print the run banner, e.g. ``plan: 3 health check(s)``."""
    console.print()
    console.print(f"[bold blue]{mode}[/]: {count} health check(s)")


def check_header(action: str, name: str) -> None:
    console.print(f"[bold]{name}[/] [dim]({action})[/]")


def outcome(kind: str, label: str, detail: str = "") -> None:
    """One outcome line for a health check; *kind* is an outcome value."""
    marker, style = _OUTCOME_MARKERS.get(kind, ("·", "default"))
    suffix = f" [dim]{escape(detail)}[/]" if detail else ""
    console.print(f"  [{style}]{marker} {escape(label)}[/]{suffix}")


def field_changes(fields: Sequence[str]) -> None:
    if fields:
        console.print(f"      [bold]fields[/]: {', '.join(fields)}")


def note(msg: str) -> None:
    console.print(f"      [dim]{escape(msg)}[/]")


def warning(msg: str) -> None:
    console.print(f"  [bold yellow]![/] [yellow]{escape(msg)}[/]")


def failure(msg: str) -> None:
    console.print(f"  [bold red]x[/] [red]{escape(msg)}[/]")


def fatal(msg: str) -> None:
    """Run-level error printed before any health check is touched."""
    console.print(f"[bold red]error:[/] {escape(msg)}")


def conflict_panel(name: str, body: str) -> None:
    """Immutable-field conflict; the check must be replaced by hand."""
    console.print(
        Panel(
            escape(body),
            title=f"[bold red]{name}: immutable field conflict[/]",
            border_style="red",
            padding=(0, 1),
        )
    )


def identity_table(rows: Iterable[Tuple[str, str, str, str]]) -> None:
    """Print stored identities as (name, health check id, caller ref, created)."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Health check id")
    table.add_column("Caller reference", style="dim")
    table.add_column("Created", style="dim")
    for row in rows:
        table.add_row(*row)
    console.print(table)
