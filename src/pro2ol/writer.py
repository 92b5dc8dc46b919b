"""Render OpenLyrics trees to XML and write them to disk.

Writes are all-or-nothing: the XML is rendered in memory first, written to a
temporary file next to the target and only then moved into place.

Usage::

    from pro2ol.builder import build
    from pro2ol.writer import write

    write(build(song), "amazing-grace.xml", overwrite=False)
"""

import copy
import logging
import os
import tempfile
from pathlib import Path

from lxml import etree

from .builder import qname
from .exceptions import OutputExistsError, SerializationError, WriteAccessDeniedError

logger = logging.getLogger(__name__)

# Mode for newly created files; overwritten files keep their own.
NEW_FILE_MODE = 0o644

_INDENT = "  "


def render(tree: etree._Element) -> bytes:
    """Return *tree* as a UTF-8 XML document.

    The structural elements are indented; the mixed content of each verse is
    left exactly as built so lyric whitespace is preserved.  *tree* itself is
    not modified.

    Raises SerializationError if the tree cannot be rendered.
    """
    if not etree.iselement(tree):
        raise SerializationError(f"expected an XML element, got {type(tree).__name__}")
    try:
        root = copy.deepcopy(tree)
        _indent_structure(root)
        return etree.tostring(root, xml_declaration=True, encoding="UTF-8")
    except (TypeError, ValueError, LookupError, etree.SerialisationError) as exc:
        raise SerializationError(str(exc) or type(exc).__name__) from exc


def write(tree: etree._Element, path, overwrite: bool = False) -> None:
    """Write *tree* to *path* as OpenLyrics XML.

    Raises:
        OutputExistsError:      *path* exists and *overwrite* is false.
        WriteAccessDeniedError: *path* exists, *overwrite* is true, but the
                                file is not writable.
        SerializationError:     *tree* cannot be rendered.

    On any of these the file at *path* is left untouched.
    """
    path = Path(path)
    if path.exists():
        if not overwrite:
            raise OutputExistsError(path)
        if not os.access(path, os.W_OK):
            raise WriteAccessDeniedError(path)

    try:
        data = render(tree)
    except SerializationError as exc:
        exc.path = path
        raise

    _atomic_write(path, data, overwrite)
    logger.debug("Wrote %d bytes to %s", len(data), path)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _indent_structure(root: etree._Element) -> None:
    """Put song, properties, lyrics and each verse on their own lines."""
    children = list(root)
    if not children:
        return
    root.text = "\n" + _INDENT
    for child in children:
        child.tail = "\n" + _INDENT
    children[-1].tail = "\n"

    lyrics = root.find(qname("lyrics"))
    verses = list(lyrics) if lyrics is not None else []
    if verses:
        lyrics.text = "\n" + _INDENT * 2
        for verse in verses:
            verse.tail = "\n" + _INDENT * 2
        verses[-1].tail = "\n" + _INDENT


def _atomic_write(path: Path, data: bytes, overwrite: bool) -> None:
    """Write *data* to a temp file beside *path*, then move it into place.

    Without *overwrite* the temp file is hard-linked to *path*, which fails if
    something created *path* since the existence check.  Where hard links are
    not supported, *path* is created exclusively and then replaced.
    """
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())

        if path.exists():
            os.chmod(tmp_name, path.stat().st_mode & 0o7777)
        else:
            os.chmod(tmp_name, NEW_FILE_MODE)

        if overwrite:
            os.replace(tmp_name, path)
        else:
            try:
                os.link(tmp_name, path)
            except FileExistsError as exc:
                raise OutputExistsError(path) from exc
            except OSError:
                # No hard links on this filesystem: claim the name, then fill it.
                logger.debug("Hard link to %s failed, using exclusive create", path)
                _claim(path)
                os.replace(tmp_name, path)
    finally:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)


def _claim(path: Path) -> None:
    """Create *path* empty, failing if it already exists."""
    try:
        fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, NEW_FILE_MODE)
    except FileExistsError as exc:
        raise OutputExistsError(path) from exc
    os.close(fd)
