"""Command-line interface for mdtoolbar."""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mdtoolbar import __version__
from mdtoolbar.config import FormatOptions, Settings, load_settings
from mdtoolbar.core.detector import ContextDetector
from mdtoolbar.core.formatter import MarkdownFormatter
from mdtoolbar.formatting.ir import FormatKind, MarkdownContext
from mdtoolbar.formatting.offsets import InvalidRangeError

app = typer.Typer(
    name="mdtoolbar",
    help="Detect and toggle Markdown formatting around a selection.",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"mdtoolbar v{__version__}")
        raise typer.Exit()


def configure_logging(settings: Settings, verbose: bool) -> None:
    """Set up stdlib logging from settings or the --verbose flag."""
    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(name)s %(levelname)s %(message)s")


def read_document(path: Path) -> str:
    """Read a document as UTF-8, keeping line endings untouched."""
    with path.open(encoding="utf-8", newline="") as handle:
        return handle.read()


def context_table(context: MarkdownContext) -> Table:
    """Render a context as a rich table."""
    table = Table(title="Formatting context", show_header=True)
    table.add_column("Construct")
    table.add_column("Active")
    table.add_column("Content range")
    table.add_column("Details")

    rows = [
        ("bold", context.bold, ""),
        ("italic", context.italic, ""),
        ("strikethrough", context.strikethrough, ""),
        ("inline code", context.code, ""),
        (
            "link",
            context.link,
            escape(f"{context.link_text!r} -> {context.link_url}") if context.link else "",
        ),
    ]
    for name, span, details in rows:
        active = "[green]yes[/green]" if span else "no"
        inner = f"{span.inner.start}-{span.inner.end}" if span else ""
        table.add_row(name, active, inner, details)

    item = context.list_item
    list_details = ""
    if item:
        list_details = f"marker {item.marker!r}, indent {item.indent}"
        if item.task_checked is not None:
            list_details += ", task " + ("done" if item.task_checked else "open")
    table.add_row("list", "[green]yes[/green]" if item else "no", "", list_details)
    table.add_row("code block", "[green]yes[/green]" if context.in_code_block else "no", "", "")
    return table


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """
    Detect and toggle Markdown formatting around a selection.

    Examples:

        mdtoolbar detect notes.md --start 10

        mdtoolbar apply notes.md bold --start 0 --end 5

        mdtoolbar apply notes.md link --start 0 --end 6 --url https://example.com --write
    """


@app.command()
def detect(
    path: Path = typer.Argument(
        ...,
        help="Markdown file to inspect",
        exists=True,
        dir_okay=False,
    ),
    start: int = typer.Option(..., "--start", "-s", help="Selection start offset"),
    end: Optional[int] = typer.Option(
        None, "--end", "-e", help="Selection end offset (defaults to --start)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the context as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Show which formatting constructs surround a selection."""
    settings = load_settings()
    configure_logging(settings, verbose)
    text = read_document(path)

    try:
        context = ContextDetector().detect(text, start, start if end is None else end)
    except InvalidRangeError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(context.to_dict(), indent=2))
    else:
        console.print(context_table(context))


@app.command()
def apply(
    path: Path = typer.Argument(
        ...,
        help="Markdown file to edit",
        exists=True,
        dir_okay=False,
    ),
    kind: FormatKind = typer.Argument(..., help="Formatting to toggle"),
    start: int = typer.Option(..., "--start", "-s", help="Selection start offset"),
    end: Optional[int] = typer.Option(
        None, "--end", "-e", help="Selection end offset (defaults to --start)"
    ),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Link destination"),
    write: bool = typer.Option(
        False, "--write", "-w", help="Write the result back instead of printing it"
    ),
    italic_marker: Optional[str] = typer.Option(
        None, "--italic-marker", help="Marker for new italics: * or _"
    ),
    list_marker: Optional[str] = typer.Option(
        None, "--list-marker", help="Marker for new bullets: -, * or +"
    ),
    env_file: Optional[Path] = typer.Option(
        None, "--env-file", help="Read settings from this .env file"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Toggle formatting over a selection and print or save the result."""
    settings = load_settings(env_file)
    configure_logging(settings, verbose)

    overrides = {}
    if italic_marker is not None:
        overrides["italic_marker"] = italic_marker
    if list_marker is not None:
        overrides["preferred_list_marker"] = list_marker
    try:
        options = FormatOptions(**{**settings.format_options().model_dump(), **overrides})
    except ValidationError as e:
        err_console.print(f"[red]Error:[/red] Invalid marker option: {escape(str(e))}")
        raise typer.Exit(1)

    if url is not None and not MarkdownFormatter().is_valid_url(url):
        err_console.print(f"[red]Error:[/red] Not a valid URL: {escape(url)}")
        raise typer.Exit(1)

    text = read_document(path)
    try:
        result = MarkdownFormatter(options=options).apply(
            text, start, start if end is None else end, kind, url=url
        )
    except InvalidRangeError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if result.needs_url_input:
        err_console.print("[yellow]Warning:[/yellow] A link needs a URL; pass --url")
        raise typer.Exit(2)

    if write:
        path.write_text(result.text, encoding="utf-8", newline="")
        err_console.print(f"[green]Updated:[/green] {path}")
    else:
        typer.echo(result.text, nl=False)

    err_console.print(
        f"[blue]Selection:[/blue] {result.selection_start}-{result.selection_end}"
    )
    if result.extracted_url:
        err_console.print(f"[blue]Extracted URL:[/blue] {escape(result.extracted_url)}")


if __name__ == "__main__":
    app()
