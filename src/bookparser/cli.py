"""Main CLI application."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from bookparser.config import ParserSettings
from bookparser.core.book_service import BookParsingService
from bookparser.core.parser_factory import ParserFactory
from bookparser.models.book import Chapter
from bookparser.models.results import ValidationVerdict

app = typer.Typer(
    name="bookparser",
    help="Inspect EPUB, PDF and TXT books: metadata, chapters, content and covers.",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

BookPath = Annotated[
    Path,
    typer.Argument(
        help="Path to the book file (EPUB, PDF or TXT)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
]


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def get_service(ctx: typer.Context) -> BookParsingService:
    return ctx.obj["service"]


def ensure_supported(service: BookParsingService, book_path: Path) -> None:
    """Exit with an error message for unrecognized extensions."""
    if service.detect_file_format(book_path) is None:
        console.print(f"[red]Unsupported file format: {escape(book_path.suffix)}[/]")
        supported = ", ".join(f".{f}" for f in service.get_supported_formats())
        console.print(f"[dim]Supported formats: {supported}[/]")
        raise typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="JSON file with parser settings",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """Inspect EPUB, PDF and TXT books."""
    configure_logging(verbose)

    try:
        settings = ParserSettings.load(config) if config else ParserSettings()
    except ValidationError as e:
        console.print(
            f"[red]Invalid settings file {escape(str(config))}:[/]\n{escape(str(e))}"
        )
        raise typer.Exit(1)

    ctx.obj = {"service": ParserFactory.create_service(settings)}


@app.command()
def info(ctx: typer.Context, book_path: BookPath) -> None:
    """Show book metadata and format capabilities."""
    service = get_service(ctx)
    ensure_supported(service, book_path)

    result = asyncio.run(service.parse_book_metadata(book_path))
    if not result.success:
        console.print(f"[red]Error: {escape(result.error)}[/]")
        raise typer.Exit(1)

    metadata = result.metadata
    book_format = service.detect_file_format(book_path)
    capabilities = service.get_format_capabilities(book_format.value)

    info_lines = [
        f"[bold]{escape(metadata.title)}[/]",
        f"[dim]Author:[/] {escape(metadata.author)}",
        f"[dim]Language:[/] {escape(metadata.language)}",
        f"[dim]Format:[/] {service.get_format_display_name(book_format.value)}",
    ]
    for label, value in (
        ("Publisher", metadata.publisher),
        ("Identifier", metadata.identifier),
        ("Published", metadata.publication_date),
        ("Cover", metadata.cover),
    ):
        if value:
            info_lines.append(f"[dim]{label}:[/] {escape(value)}")
    if metadata.description:
        info_lines.append("")
        info_lines.append(escape(metadata.description))

    flags = [
        name.replace("_", " ")
        for name, enabled in capabilities.model_dump().items()
        if enabled
    ]
    info_lines.append("")
    info_lines.append(f"[dim]Capabilities:[/] {', '.join(flags) or 'none'}")

    console.print(Panel("\n".join(info_lines), title="Book Info", border_style="green"))


def add_chapters(tree: Tree, chapters: list[Chapter]) -> None:
    for chapter in chapters:
        branch = tree.add(f"{escape(chapter.title)} [dim]{escape(chapter.href)}[/]")
        add_chapters(branch, chapter.children)


@app.command()
def toc(ctx: typer.Context, book_path: BookPath) -> None:
    """Display the table of contents with position tokens."""
    service = get_service(ctx)
    ensure_supported(service, book_path)

    chapters = asyncio.run(service.get_book_table_of_contents(book_path))
    if not chapters:
        console.print("[yellow]No table of contents available.[/]")
        return

    tree = Tree(f"[bold cyan]{escape(book_path.name)}[/]")
    add_chapters(tree, chapters)
    console.print(tree)


@app.command()
def content(
    ctx: typer.Context,
    book_path: BookPath,
    position: Annotated[
        Optional[str],
        typer.Option(
            "--position",
            "-p",
            help="Position token from 'bookparser toc' (e.g. line_120, page_5)",
        ),
    ] = None,
    max_chars: Annotated[
        Optional[int],
        typer.Option("--max-chars", "-n", help="Print at most N characters", min=1),
    ] = None,
) -> None:
    """Print book content, optionally starting at a position."""
    service = get_service(ctx)
    ensure_supported(service, book_path)

    text = asyncio.run(service.get_book_content(book_path, position))
    if not text:
        console.print("[yellow]No content available.[/]")
        raise typer.Exit(1)

    if max_chars is not None and len(text) > max_chars:
        text = text[:max_chars]
    console.print(text, markup=False, highlight=False)


@app.command()
def cover(
    ctx: typer.Context,
    book_path: BookPath,
    output_dir: Annotated[
        Path,
        typer.Option("--output-dir", "-o", help="Directory to write the cover into"),
    ] = Path("."),
) -> None:
    """Extract the cover image."""
    service = get_service(ctx)
    ensure_supported(service, book_path)

    image = asyncio.run(service.extract_book_cover(book_path))
    if image is None:
        console.print("[yellow]No cover image found.[/]")
        raise typer.Exit(1)

    written = image.save(output_dir)
    console.print(
        f"[green]Cover saved:[/] {escape(str(written))} "
        f"[dim]({escape(image.media_type)})[/]"
    )


async def validate_all(
    service: BookParsingService, paths: list[Path]
) -> list[ValidationVerdict]:
    return await asyncio.gather(*(service.validate_book_file(p) for p in paths))


@app.command()
def validate(
    ctx: typer.Context,
    book_paths: Annotated[
        List[Path],
        typer.Argument(help="Book files to validate"),
    ],
) -> None:
    """Check whether files are readable books of their format."""
    service = get_service(ctx)
    verdicts = asyncio.run(validate_all(service, book_paths))

    table = Table(title="Validation", show_header=True, header_style="bold cyan")
    table.add_column("File", style="white")
    table.add_column("Format", style="dim")
    table.add_column("Valid")
    table.add_column("Error", style="red")

    for path, verdict in zip(book_paths, verdicts):
        table.add_row(
            escape(str(path)),
            verdict.format.value if verdict.format else "-",
            "[green]yes[/]" if verdict.is_valid else "[red]no[/]",
            escape(verdict.error or ""),
        )
    console.print(table)

    if not all(v.is_valid for v in verdicts):
        raise typer.Exit(1)


@app.command()
def formats(ctx: typer.Context) -> None:
    """List supported formats and their capabilities."""
    service = get_service(ctx)

    table = Table(title="Supported Formats", show_header=True, header_style="bold cyan")
    table.add_column("Format", style="white")
    table.add_column("Name")
    table.add_column("TOC", justify="center")
    table.add_column("Cover", justify="center")
    table.add_column("Bookmarks", justify="center")
    table.add_column("Search", justify="center")

    def mark(flag: bool) -> str:
        return "[green]✓[/]" if flag else "[dim]-[/]"

    for book_format in service.get_supported_formats():
        caps = service.get_format_capabilities(book_format)
        table.add_row(
            book_format,
            service.get_format_display_name(book_format),
            mark(caps.has_table_of_contents),
            mark(caps.has_cover),
            mark(caps.supports_bookmarks),
            mark(caps.supports_search),
        )

    console.print(table)


if __name__ == "__main__":
    app()
