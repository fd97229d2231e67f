"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from mdblocks.config import Settings, load_config
from mdblocks.core.pipeline import parse_file, run_parse
from mdblocks.core.toc import format_outline


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def parse_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to parse")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    html: Annotated[Optional[bool], typer.Option("--html/--no-html", help="Normalize HTML before parsing")] = None,
    embed: Annotated[Optional[bool], typer.Option("--embed-images/--no-embed-images", help="Embed local images as data URIs")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output")] = False,
    ):
    """Parse markdown into element JSON, one file per document."""
    _configure_logging(verbose)
    settings = _settings(overrides={"output_dir": out, "normalize_html": html, "embed_images": embed})
    output_dir = Path(settings.output_dir)
    if not Path(path).exists():
        _fail(f"Path not found: {path}")

    try:
        results = run_parse(path, settings, output_dir)
    except RuntimeError as e:
        _fail(str(e))
    for src, out_file in results:
        typer.echo(f"  {src} -> {out_file}")
    typer.echo(f"Parsed {len(results)} document(s) to {output_dir}/")


def toc_cmd(
    path: Annotated[Path, typer.Argument(help="Markdown file")],
    min_level: Annotated[Optional[int], typer.Option("--min-level", help="Shallowest heading level")] = None,
    max_level: Annotated[Optional[int], typer.Option("--max-level", help="Deepest heading level")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output")] = False,
    ):
    """Print the table of contents of a markdown file."""
    _configure_logging(verbose)
    settings = _settings(overrides={
        "toc_min_level": min_level, "toc_max_level": max_level, "embed_images": False,
    })
    if not path.is_file():
        _fail(f"Not a file: {path}")

    try:
        doc = parse_file(path, settings)
    except (OSError, UnicodeDecodeError) as e:
        _fail(f"Could not read {path}", e)
    if not doc.toc:
        typer.echo("No headings found.")
        raise typer.Exit(1)
    typer.echo(format_outline(doc.toc))
