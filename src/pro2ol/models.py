from dataclasses import dataclass, field


@dataclass
class Chord:
    """A chord sounded at a character position within its line.

    ``line_offset`` indexes into the owning :class:`VerseLine`'s ``text``:
    the chord is sounded just before the character at that position.
    """

    root: str  # e.g. "G", "Am7", "D/F#"
    line_offset: int


@dataclass
class VerseLine:
    """A single line of lyric text plus the chords sounded along it.

    Chords are expected in ascending ``line_offset`` order, each offset within
    ``[0, len(text)]``.  This is not checked.
    """

    text: str
    chords: list[Chord] = field(default_factory=list)


@dataclass
class Verse:
    """A named block of lines (verse, chorus, bridge, ...)."""

    name: str | None = None  # OpenLyrics verse name: "v1", "c", "b", None
    lines: list[VerseLine] = field(default_factory=list)


@dataclass
class Song:
    """A song as consumed by the OpenLyrics builder."""

    verses: list[Verse] = field(default_factory=list)
    title: str | None = None  # only used to name the output file
