"""ChordPro reader.

Reads ChordPro (``.cho``) text with inline chords into a
:class:`~pro2ol.models.Song` ready for :func:`pro2ol.builder.build`.

Section label → OpenLyrics verse name mapping
---------------------------------------------

+--------------------------------------+------------------------------------+
| Label (case-insensitive first word)  | Verse name                         |
+======================================+====================================+
| ``Verse``, ``Verse N``               | ``vN`` (unnumbered verses are      |
|                                      | numbered in order: v1, v2, ...)    |
+--------------------------------------+------------------------------------+
| ``Chorus``, ``Refrain``              | ``c`` / ``cN``                     |
+--------------------------------------+------------------------------------+
| ``Bridge``                           | ``b`` / ``bN``                     |
+--------------------------------------+------------------------------------+
| ``Pre-Chorus``                       | ``p`` / ``pN``                     |
+--------------------------------------+------------------------------------+
| ``Intro``                            | ``i`` / ``iN``                     |
+--------------------------------------+------------------------------------+
| ``Outro``, ``Ending``, ``Coda``,     | ``e`` / ``eN``                     |
| ``Tag``                              |                                    |
+--------------------------------------+------------------------------------+
| anything else (``Solo``, ...)        | ``o`` / ``oN``                     |
+--------------------------------------+------------------------------------+
| unlabeled                            | no name                            |
+--------------------------------------+------------------------------------+

Sections come from ``{start_of_verse: Verse 1}`` ... ``{end_of_verse}`` (and
the chorus/bridge equivalents) or from a ``{comment: Intro}`` line followed by
content.  Outside explicit sections a blank line ends the current verse.

Usage::

    from pro2ol.chordpro import ChordProReader, parse_chordpro
    song = ChordProReader().read(Path("song.cho").read_text())
    song = parse_chordpro(text)  # same thing
"""

import re

from .exceptions import ChordProParseError
from .models import Chord, Song, Verse, VerseLine

# {name} or {name: value}
_DIRECTIVE_RE = re.compile(r"^\{\s*([A-Za-z_-]+)\s*(?::\s*(.*?))?\s*\}$")

# [D], [Am7], [G/B], [N.C.]
_CHORD_TOKEN_RE = re.compile(r"\[([^\[\]]+)\]")

_TRAILING_NUMBER_RE = re.compile(r"(\d+)\s*:?\s*$")

_TITLE_DIRECTIVES = {"title", "t"}
_COMMENT_DIRECTIVES = {"comment", "c", "comment_italic", "ci", "comment_box", "cb"}

# Directive → default label for the section it opens.
_START_DIRECTIVES = {
    "start_of_verse": "Verse",
    "sov": "Verse",
    "start_of_chorus": "Chorus",
    "soc": "Chorus",
    "start_of_bridge": "Bridge",
    "sob": "Bridge",
}
_END_DIRECTIVES = {"end_of_verse", "eov", "end_of_chorus", "eoc", "end_of_bridge", "eob"}

_VERSE_TYPES = {
    "verse": "v",
    "chorus": "c",
    "refrain": "c",
    "bridge": "b",
    "pre-chorus": "p",
    "prechorus": "p",
    "intro": "i",
    "outro": "e",
    "ending": "e",
    "coda": "e",
    "tag": "e",
}


class ChordProReader:
    """Read ChordPro text into a :class:`~pro2ol.models.Song`."""

    def read(self, text: str) -> Song:
        """Return a Song for the ChordPro *text*.

        Raises ChordProParseError on an unterminated directive or an
        unbalanced chord bracket.
        """
        state = _ReadState()

        for line_no, raw in enumerate(text.splitlines(), start=1):
            line = raw.rstrip()
            stripped = line.strip()

            if stripped.startswith("#"):
                continue

            if not stripped:
                if not state.in_section:
                    state.close()
                continue

            if stripped.startswith("{"):
                m = _DIRECTIVE_RE.match(stripped)
                if not m:
                    raise ChordProParseError(line_no, f"unterminated directive: {stripped}")
                state.directive(m.group(1).lower(), m.group(2))
                continue

            state.add_line(parse_chord_line(line, line_no))

        state.close()
        return state.song


def parse_chordpro(text: str) -> Song:
    """Shortcut for ``ChordProReader().read(text)``."""
    return ChordProReader().read(text)


class _ReadState:
    """Everything one :meth:`ChordProReader.read` call accumulates."""

    def __init__(self):
        self.song = Song()
        self.current: Verse | None = None
        self.in_section = False
        self.used_names: set[str] = set()
        self.last_verse_number = 0

    def directive(self, name: str, value: str | None) -> None:
        if name in _TITLE_DIRECTIVES:
            self.song.title = value or None
        elif name in _START_DIRECTIVES:
            self.close()
            self.open(value or _START_DIRECTIVES[name])
            self.in_section = True
        elif name in _END_DIRECTIVES:
            self.close()
            self.in_section = False
        elif name in _COMMENT_DIRECTIVES and not self.in_section and value:
            self.close()
            self.open(value)
        # Everything else (artist, key, capo, ...) is song metadata we don't carry.

    def add_line(self, line: VerseLine) -> None:
        if self.current is None:
            self.current = Verse()
        self.current.lines.append(line)

    def open(self, label: str) -> None:
        self.current = Verse(name=self.verse_name(label))

    def close(self) -> None:
        if self.current is not None and self.current.lines:
            self.song.verses.append(self.current)
            if self.current.name is not None:
                self.used_names.add(self.current.name)
        self.current = None

    def verse_name(self, label: str) -> str:
        letter = verse_type(label)
        m = _TRAILING_NUMBER_RE.search(label)
        if letter != "v":
            return f"{letter}{m.group(1)}" if m else letter

        if m:
            number = int(m.group(1))
        else:
            # Unnumbered verses continue after the highest number seen so far.
            number = self.last_verse_number + 1
            while f"v{number}" in self.used_names:
                number += 1
        self.last_verse_number = max(self.last_verse_number, number)
        return f"v{m.group(1)}" if m else f"v{number}"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def verse_type(label: str) -> str:
    """Return the OpenLyrics verse-type letter for a section *label*."""
    words = label.lower().rstrip(":").split()
    if not words:
        return "o"
    return _VERSE_TYPES.get(words[0], "o")


def parse_chord_line(line: str, line_no: int = 0) -> VerseLine:
    """Split an inline-chord line into lyric text and chord offsets.

    Example::

        "Amazing [G]grace" → VerseLine("Amazing grace", [Chord("G", 8)])

    Each chord's offset is its position in the bracket-free text, so offsets
    come out sorted and within the line.
    """
    pieces: list[str] = []
    chords: list[Chord] = []
    length = 0
    pos = 0

    for m in _CHORD_TOKEN_RE.finditer(line):
        segment = line[pos:m.start()]
        pieces.append(segment)
        length += len(segment)
        chords.append(Chord(root=m.group(1).strip(), line_offset=length))
        pos = m.end()
    pieces.append(line[pos:])

    text = "".join(pieces)
    if "[" in text or "]" in text:
        raise ChordProParseError(line_no, f"unbalanced chord bracket: {line.strip()}")
    return VerseLine(text=text, chords=chords)
