import logging
import sys
from pathlib import Path

import click

from .book import parse_book
from .config import BookConfig
from .exceptions import UnsupportedNotation
from .formatter import AST_VERSION, JsonFormatter, changes_since
from .registry import NOTATION_NAMES


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for command line use."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )


def _print_ast_changes(ctx: click.Context, _param, value: str | None) -> None:
    if value is None or ctx.resilient_parsing:
        return
    click.echo(f"Tree format version {AST_VERSION}")
    for entry in changes_since(value):
        click.echo(f"  {entry}")
    ctx.exit()


@click.command()
@click.argument("files", nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", "output_path", default="book.json", show_default=True,
              metavar="PATH", help="Output file path.")
@click.option("--stdout", is_flag=True, default=False,
              help="Print to stdout instead of writing a file.")
@click.option("--title", default="Songbook", show_default=True, help="Book title.")
@click.option("--notation", default="english", show_default=True,
              help=f"Notation the songs are written in ({', '.join(NOTATION_NAMES)}).")
@click.option("--chorus-label", default="Ch", show_default=True,
              help="Prefix used when labelling choruses.")
@click.option("--no-smart-punctuation", is_flag=True, default=False,
              help="Keep straight quotes and dashes as written.")
@click.option("-j", "--jobs", default=1, show_default=True, type=click.IntRange(min=1),
              help="Parse songs on N worker threads.")
@click.option("--strict", is_flag=True, default=False,
              help="Exit with status 1 if any diagnostic is reported.")
@click.option("--ast-changes", metavar="VERSION", expose_value=False, is_eager=True,
              callback=_print_ast_changes,
              help="Show tree format changes since VERSION and exit.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose logging.")
def main(
    files: tuple[Path, ...],
    output_path: str,
    stdout: bool,
    title: str,
    notation: str,
    chorus_label: str,
    no_smart_punctuation: bool,
    jobs: int,
    strict: bool,
    verbose: bool,
) -> None:
    """Compile chord-annotated song files into a JSON document tree.

    \b
    Each "# Title" heading in a file starts a new song.
    Diagnostics are printed to stderr as ORIGIN:LINE: SONG: MESSAGE.
    """
    setup_logging(verbose)

    # --- Configuration ---
    try:
        config = BookConfig(
            title=title,
            notation=notation,
            chorus_label=chorus_label,
            smart_punctuation=not no_smart_punctuation,
        )
    except UnsupportedNotation as exc:
        click.echo(f"Error: {exc}", err=True)
        click.echo(f"Supported notations: {', '.join(NOTATION_NAMES)}", err=True)
        sys.exit(1)

    # --- Parse ---
    sources = [(str(path), path.read_text(encoding="utf-8")) for path in files]
    result = parse_book(sources, config, max_workers=jobs)

    for diagnostic in result.diagnostics:
        click.echo(str(diagnostic), err=True)

    # --- Render ---
    text = JsonFormatter().render(result.book, result.diagnostics)

    # --- Output ---
    if stdout:
        click.echo(text, nl=False)
    else:
        dest = Path(output_path)
        dest.write_text(text, encoding="utf-8")
        click.echo(f"Written to {dest}")

    if strict and not result.ok:
        sys.exit(1)
