from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from .config import Settings, default_conf_path, load_settings, write_default_conf
from .exceptions import DocumentParseError
from .hcard import HCardParser, HCardWriter
from .io import VCardReader, VCardWriter
from .jcard import JCardReader, JCardWriter
from .model import VCard
from .report import card_title, print_parse_problems, print_validation
from .scribe import ParseFailure, ParseWarning
from .version import VCardVersion
from .xcard import XCardReader, XCardWriter

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="vcard-scribe: read, validate and convert vCard, xCard, jCard and hCard files.",
)
console = Console()

_READERS = {
    ".vcf": VCardReader,
    ".vcard": VCardReader,
    ".txt": VCardReader,
    ".xml": XCardReader,
    ".json": JCardReader,
    ".html": HCardParser,
    ".htm": HCardParser,
}

_FORMATS = ("vcf", "xml", "json", "html")


@dataclass
class _State:
    settings: Settings = field(default_factory=Settings)


state = _State()


@dataclass
class _Read:
    vcard: VCard
    warnings: list[ParseWarning]
    failures: list[ParseFailure]


# ── Helpers ────────────────────────────────────────────────────────────────────

def _parse_version(value: str | None) -> VCardVersion | None:
    if value is None:
        return None
    version = VCardVersion.from_label(value)
    if version is None:
        console.print(f"[bold red]Unknown vCard version {value!r}[/bold red] (use 2.1, 3.0 or 4.0)")
        raise typer.Exit(code=2)
    return version


def _read_file(path: Path) -> list[_Read]:
    if not path.is_file():
        console.print(f"[bold red]No such file:[/bold red] {path}")
        raise typer.Exit(code=2)

    reader_class = _READERS.get(path.suffix.lower())
    if reader_class is None:
        console.print(Panel(
            f"[bold red]Cannot tell the format of [white]{path.name}[/white][/bold red]\n\n"
            "Supported extensions: " + ", ".join(sorted(_READERS)),
            title="Unknown format",
            border_style="red",
        ))
        raise typer.Exit(code=2)

    text = path.read_text(encoding="utf-8", errors="replace")
    try:
        reader = reader_class(text)
    except DocumentParseError as exc:
        console.print(Panel(str(exc), title=f"Cannot read {path.name}", border_style="red"))
        raise typer.Exit(code=1)

    results: list[_Read] = []
    while True:
        vcard = reader.read_next()
        if vcard is None:
            break
        results.append(_Read(vcard, list(reader.warnings), list(reader.failures)))
    return results


def _report_parse_problems(path: Path, results: list[_Read]) -> None:
    for i, read in enumerate(results, start=1):
        print_parse_problems(
            f"{path.name} · {card_title(read.vcard, i)}", read.warnings, read.failures
        )


# ── Commands ───────────────────────────────────────────────────────────────────

@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", help="Log parser details"),
    config: Path | None = typer.Option(None, "--config", "-c", help="TOML config file (default: ./vcard-scribe.toml)"),
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )
    state.settings = load_settings(config)


@app.command()
def validate(
    file: Path = typer.Argument(..., help="vCard, xCard, jCard or hCard file"),
    version: str | None = typer.Option(None, "--version", help="Validate against 2.1, 3.0 or 4.0 (default: each vCard's own)"),
) -> None:
    """Check every vCard in FILE and list what is wrong with it."""
    target = _parse_version(version)
    results = _read_file(file)
    if not results:
        console.print(f"[yellow]No vCards found in {file.name}.[/yellow]")
        raise typer.Exit(code=1)

    _report_parse_problems(file, results)

    checked = []
    for i, read in enumerate(results, start=1):
        checked.append((card_title(read.vcard, i), read.vcard.validate(target)))
    shown = target or results[0].vcard.version
    total = print_validation(checked, shown)
    if total:
        raise typer.Exit(code=1)


@app.command()
def convert(
    file: Path = typer.Argument(..., help="vCard, xCard, jCard or hCard file"),
    to: str = typer.Option("vcf", "--to", "-t", help="Output format: vcf, xml, json or html"),
    version: str | None = typer.Option(None, "--version", help="Target version for vcf output (2.1, 3.0 or 4.0)"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write here instead of stdout"),
) -> None:
    """Convert FILE to another vCard format."""
    fmt = to.lower().lstrip(".")
    if fmt not in _FORMATS:
        console.print(f"[bold red]Unknown format {to!r}[/bold red] (use {', '.join(_FORMATS)})")
        raise typer.Exit(code=2)

    settings = state.settings
    target = _parse_version(version)
    results = _read_file(file)
    _report_parse_problems(file, results)
    vcards = [r.vcard for r in results]

    if fmt == "vcf":
        options = settings.writer_options()
        if target is not None:
            options["target_version"] = target
        text = VCardWriter(**options).write_all(vcards)
    elif fmt == "xml":
        text = XCardWriter(add_prodid=settings.add_prodid, version_strict=settings.version_strict).write(vcards)
    elif fmt == "json":
        text = JCardWriter(add_prodid=settings.add_prodid, version_strict=settings.version_strict).write(vcards, indent=2)
    else:
        text = HCardWriter(version_strict=settings.version_strict).write(vcards)

    if output is None:
        typer.echo(text, nl=not text.endswith("\n"))
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8", newline="")
    console.print(f"[bold green]✓ Wrote {len(vcards)} vCard(s) → {output}[/bold green]")


@app.command()
def init(
    path: Path | None = typer.Argument(None, help="Where to write the config (default: ./vcard-scribe.toml)"),
) -> None:
    """Write a config file with the default settings."""
    conf = path or default_conf_path()
    if conf.exists():
        console.print(f"[dim]{conf} already exists, leaving it alone.[/dim]")
        return
    write_default_conf(conf)
    console.print(f"[bold green]✓ Wrote {conf}[/bold green]")


if __name__ == "__main__":
    app()
