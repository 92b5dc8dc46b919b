"""Build an OpenLyrics document tree from a :class:`~pro2ol.models.Song`.

The tree is an :mod:`lxml.etree` element and looks like this::

    <song xmlns="http://openlyrics.info/namespace/2009/song"
          createdIn="pro2ol" modifiedDate="2013-05-04T12:30+0200">
      <properties/>
      <lyrics>
        <verse name="v1">Amazing <chord name="G"/>grace<br/>how sweet</verse>
      </lyrics>
    </song>

Verse content is mixed: lyric text lives in the verse's ``.text`` and in the
``.tail`` of each ``chord``/``br`` element, so the text of a line can always be
put back together from the segments between markers.

Usage::

    from pro2ol.builder import build
    tree = build(song)
"""

import logging
from datetime import datetime

from lxml import etree

from .exceptions import SerializationError
from .models import Song, Verse

logger = logging.getLogger(__name__)

NAMESPACE = "http://openlyrics.info/namespace/2009/song"
GENERATOR = "pro2ol"

# Java's yyyy-MM-dd'T'HH:mmZ, e.g. 2013-05-04T12:30+0200
DATE_FORMAT = "%Y-%m-%dT%H:%M%z"


def qname(tag: str) -> str:
    """Return *tag* qualified with the OpenLyrics namespace."""
    return f"{{{NAMESPACE}}}{tag}"


def format_modified_date(moment: datetime | None = None) -> str:
    """Format *moment* (default: now) the way OpenLyrics' ``modifiedDate`` expects.

    Naive datetimes are taken to be local time.
    """
    if moment is None:
        moment = datetime.now()
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment.strftime(DATE_FORMAT)


def build(song: Song, modified: datetime | None = None) -> etree._Element:
    """Return a new OpenLyrics ``song`` element for *song*.

    Every call builds an independent tree.  ``modifiedDate`` is captured once,
    when the build starts, unless *modified* pins it.

    Raises SerializationError if some lyric text or chord name cannot be
    carried by XML (NUL bytes, control characters).
    """
    stamp = format_modified_date(modified)
    root = etree.Element(qname("song"), nsmap={None: NAMESPACE})
    root.set("createdIn", GENERATOR)
    root.set("modifiedDate", stamp)

    # Song metadata is not written yet; the element is required by the schema.
    etree.SubElement(root, qname("properties"))

    lyrics = etree.SubElement(root, qname("lyrics"))
    try:
        for verse in song.verses:
            lyrics.append(_build_verse(verse))
    except ValueError as exc:
        raise SerializationError(str(exc)) from exc

    logger.debug("Built OpenLyrics tree with %d verse(s), modified %s", len(lyrics), stamp)
    return root


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_verse(verse: Verse) -> etree._Element:
    element = etree.Element(qname("verse"))
    if verse.name is not None:
        element.set("name", verse.name)

    last = len(verse.lines) - 1
    for i, line in enumerate(verse.lines):
        cursor = 0
        for chord in line.chords:
            _append_text(element, line.text[cursor:chord.line_offset])
            marker = etree.SubElement(element, qname("chord"))
            marker.set("name", chord.root)
            cursor = chord.line_offset
        # Whatever is left after the last chord (the whole line if none).
        _append_text(element, line.text[cursor:])

        if i < last:
            etree.SubElement(element, qname("br"))

    return element


def _append_text(element: etree._Element, text: str) -> None:
    """Append *text* after the last child of *element* (or inside it if empty)."""
    if not text:
        return
    if len(element):
        tail_owner = element[-1]
        tail_owner.tail = (tail_owner.tail or "") + text
    else:
        element.text = (element.text or "") + text
