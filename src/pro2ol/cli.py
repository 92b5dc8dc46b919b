import logging
import re
import sys
from pathlib import Path

import click

from .builder import build
from .chordpro import ChordProReader
from .exceptions import (
    ChordProParseError,
    OutputExistsError,
    SerializationError,
    WriteAccessDeniedError,
)
from .writer import render, write

logger = logging.getLogger(__name__)


def _slugify(text: str) -> str:
    """Convert a string to a lowercase hyphenated slug suitable for filenames."""
    text = text.lower()
    text = re.sub(r"[^\w\s-]", "", text)   # drop punctuation
    text = re.sub(r"[\s_]+", "-", text)     # spaces/underscores → hyphens
    text = re.sub(r"-{2,}", "-", text)      # collapse multiple hyphens
    return text.strip("-")


def _default_filename(title: str | None, source: Path) -> str:
    slug = _slugify(title) if title else ""
    return f"{slug or source.stem}.xml"


@click.command()
@click.argument("song_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", "output_path", default=None, metavar="PATH",
              help="Output file path (default: <title>.xml)")
@click.option("-f", "--force", is_flag=True, default=False,
              help="Overwrite the output file if it already exists.")
@click.option("--stdout", is_flag=True, default=False,
              help="Print to stdout instead of writing a file.")
@click.option("-v", "--verbose", is_flag=True, default=False,
              help="Log debug output to stderr.")
def main(song_file: Path, output_path: str | None, force: bool, stdout: bool, verbose: bool) -> None:
    """Convert a ChordPro song to OpenLyrics XML.

    \b
    Chords written inline ([G]grace) become <chord name="G"/> markers,
    ChordPro sections become named OpenLyrics verses (v1, c, b, ...).
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # --- Parse ---
    try:
        song = ChordProReader().read(song_file.read_text(encoding="utf-8"))
    except UnicodeDecodeError as exc:
        click.echo(f"Error: {song_file} is not UTF-8 text ({exc.reason} at byte {exc.start})", err=True)
        sys.exit(1)
    except ChordProParseError as exc:
        click.echo(f"Error: {song_file}: {exc}", err=True)
        sys.exit(1)
    logger.debug("Read %d verse(s) from %s", len(song.verses), song_file)

    # --- Build ---
    try:
        tree = build(song)
        if stdout:
            click.echo(render(tree).decode("utf-8"))
            return
    except SerializationError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    # --- Output ---
    dest = Path(output_path) if output_path else Path(_default_filename(song.title, song_file))
    try:
        write(tree, dest, overwrite=force)
    except OutputExistsError as exc:
        click.echo(f"Error: {exc} Use --force to overwrite it.", err=True)
        sys.exit(1)
    except (WriteAccessDeniedError, SerializationError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    click.echo(f"Written to {dest}")
