"""Helpers for formatting CLI output safely across terminals."""

from __future__ import annotations

from rich.markup import escape


def format_download_marker(failed: int, encoding: str | None) -> str:
    """Return the marker shown before the download summary line."""
    try:
        "✓✗".encode(encoding or "ascii")
    except (LookupError, UnicodeEncodeError):
        return "[green]OK[/green]" if not failed else "[red]X[/red]"
    return "[green]✓[/green]" if not failed else "[red]✗[/red]"


def format_index_names(names: list[str]) -> str:
    """Render index names one per line, escaped for Rich markup."""
    return "\n".join(f"  - {escape(name)}" for name in names)
