from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .model import VCard
from .scribe import ParseFailure, ParseWarning
from .scribe_index import ScribeIndex
from .validation import ValidationWarnings
from .version import VCardVersion

console = Console()

# ── Palette ────────────────────────────────────────────────────────────────────
_ACCENT  = "#4d9fff"
_GREEN   = "#3ecf8e"
_AMBER   = "#f0a500"
_RED     = "#f05c5c"
_TEXT    = "#c9d1e0"
_MID     = "#8896af"
_DIM     = "#546075"
_BORDER  = "#2a3347"


def _property_label(prop, index: ScribeIndex) -> str:
    if prop is None:
        return "vCard"
    scribe = index.get_property_scribe_for(prop)
    return scribe.property_name if scribe is not None else type(prop).__name__


def card_title(vcard: VCard, position: int) -> str:
    fn = vcard.formatted_name
    if fn is not None and fn.value:
        return fn.value
    return f"vCard #{position}"


def print_validation(
    results: list[tuple[str, ValidationWarnings]],
    version: VCardVersion,
    index: ScribeIndex | None = None,
) -> int:
    """Print one table per vCard with warnings. Returns the warning total."""
    index = index or ScribeIndex()
    total = 0

    for title, warnings in results:
        if not warnings:
            continue
        total += len(warnings)

        table = Table(show_header=True, header_style=f"bold {_MID}", box=None, padding=(0, 2))
        table.add_column("Property", style=_ACCENT)
        table.add_column("Code", style=_AMBER)
        table.add_column("Message", style=_TEXT)
        for prop, items in warnings:
            label = _property_label(prop, index)
            for warning in items:
                code = "" if warning.code is None else f"W{warning.code:02d}"
                table.add_row(label, code, warning.message)

        console.print(Panel(table, title=title, title_align="left", border_style=_BORDER))

    clean = sum(1 for _, w in results if not w)
    summary = Text()
    summary.append(f"  {len(results)}", style=f"bold {_TEXT}")
    summary.append(f" vCard(s) checked against {version.label}   ", style=_MID)
    summary.append(f"{clean}", style=f"bold {_GREEN}")
    summary.append(" clean   ", style=_MID)
    summary.append(f"{total}", style=f"bold {_AMBER if total else _GREEN}")
    summary.append(" warning(s)", style=_MID)
    console.print(summary)
    return total


def print_parse_problems(source: str, warnings: list[ParseWarning], failures: list[ParseFailure]) -> None:
    if not warnings and not failures:
        return

    body = Text()
    for warning in warnings:
        body.append("  ! ", style=f"bold {_AMBER}")
        body.append(f"{warning}\n", style=_TEXT)
    for failure in failures:
        body.append("  ✗ ", style=f"bold {_RED}")
        body.append(f"{failure.property_name}", style=f"bold {_TEXT}")
        where = f" (line {failure.line_number})" if failure.line_number is not None else ""
        body.append(f"{where}: {failure.message}\n", style=_MID)
        body.append(f"      {failure.value}\n", style=f"dim {_DIM}")

    console.print(Panel(
        body,
        title=f"Problems reading {source}",
        title_align="left",
        border_style=_RED if failures else _AMBER,
    ))
