import pytest

from pro2ol.chordpro import ChordProReader, parse_chord_line, parse_chordpro, verse_type
from pro2ol.exceptions import ChordProParseError
from pro2ol.models import Chord, VerseLine


def _read(text: str):
    return ChordProReader().read(text)


# ---------------------------------------------------------------------------
# parse_chord_line
# ---------------------------------------------------------------------------


def test_plain_line():
    assert parse_chord_line("how sweet the sound") == VerseLine("how sweet the sound", [])


def test_inline_chords_become_offsets():
    line = parse_chord_line("A[D]mazing [G]grace")
    assert line.text == "Amazing grace"
    assert line.chords == [Chord("D", 1), Chord("G", 8)]


def test_chord_at_start_and_end():
    line = parse_chord_line("[G]grace[D7]")
    assert line.text == "grace"
    assert line.chords == [Chord("G", 0), Chord("D7", 5)]


def test_chord_only_line():
    line = parse_chord_line("[D] [G] [A]")
    assert line.text == "  "
    assert [c.line_offset for c in line.chords] == [0, 1, 2]


def test_slash_and_no_chord_tokens():
    line = parse_chord_line("[G/B]one [N.C.]two")
    assert [c.root for c in line.chords] == ["G/B", "N.C."]


def test_unbalanced_bracket_raises():
    with pytest.raises(ChordProParseError) as excinfo:
        parse_chord_line("Amazing [G grace", line_no=3)
    assert excinfo.value.line_no == 3


def test_empty_brackets_raise():
    with pytest.raises(ChordProParseError):
        parse_chord_line("Amazing [] grace")


# ---------------------------------------------------------------------------
# verse_type
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("label, letter", [
    ("Verse 1", "v"),
    ("Chorus", "c"),
    ("refrain", "c"),
    ("Bridge:", "b"),
    ("Pre-Chorus", "p"),
    ("Intro", "i"),
    ("Outro", "e"),
    ("Tag", "e"),
    ("Solo", "o"),
    ("", "o"),
])
def test_verse_type(label, letter):
    assert verse_type(label) == letter


# ---------------------------------------------------------------------------
# ChordProReader
# ---------------------------------------------------------------------------


def test_title_directive():
    assert _read("{title: Amazing Grace}\n").title == "Amazing Grace"
    assert _read("{t:Amazing Grace}\n").title == "Amazing Grace"


def test_other_metadata_ignored():
    song = _read("{artist: John Newton}\n{key: G}\n{capo: 2}\n")
    assert song.verses == []
    assert song.title is None


def test_empty_input():
    song = _read("")
    assert song.verses == []


def test_unlabelled_blocks_split_on_blank_lines():
    song = _read("one\ntwo\n\n\nthree\n")
    assert [v.name for v in song.verses] == [None, None]
    assert [[line.text for line in v.lines] for v in song.verses] == [["one", "two"], ["three"]]


def test_verse_directive_with_label():
    song = _read("{start_of_verse: Verse 2}\n[G]line\n{end_of_verse}\n")
    (verse,) = song.verses
    assert verse.name == "v2"
    assert verse.lines == [VerseLine("line", [Chord("G", 0)])]


def test_unnumbered_verses_counted():
    text = "{sov}\na\n{eov}\n{soc}\nb\n{eoc}\n{sov}\nc\n{eov}\n"
    assert [v.name for v in _read(text).verses] == ["v1", "c", "v2"]


def test_chorus_and_bridge_directives():
    text = "{start_of_chorus}\na\n{end_of_chorus}\n{start_of_bridge}\nb\n{end_of_bridge}\n"
    assert [v.name for v in _read(text).verses] == ["c", "b"]


def test_numbered_chorus():
    assert _read("{soc: Chorus 2}\na\n{eoc}\n").verses[0].name == "c2"


def test_blank_lines_inside_section_are_kept_together():
    song = _read("{sov}\none\n\ntwo\n{eov}\n")
    (verse,) = song.verses
    assert [line.text for line in verse.lines] == ["one", "two"]


def test_comment_labels_next_block():
    song = _read("{comment: Intro}\n[D] [G]\n\nplain\n")
    assert [v.name for v in song.verses] == ["i", None]


def test_comment_inside_section_ignored():
    song = _read("{sov}\n{c: softly}\none\n{eov}\n")
    (verse,) = song.verses
    assert verse.name == "v1"
    assert [line.text for line in verse.lines] == ["one"]


def test_empty_sections_dropped():
    assert _read("{sov}\n{eov}\n").verses == []


def test_hash_comments_skipped():
    song = _read("# a comment\none\n")
    assert [line.text for line in song.verses[0].lines] == ["one"]


def test_unterminated_directive_raises():
    with pytest.raises(ChordProParseError) as excinfo:
        _read("one\n{title: Amazing Grace\n")
    assert excinfo.value.line_no == 2


def test_reader_is_reusable():
    reader = ChordProReader()
    reader.read("{sov}\na\n{eov}\n")
    assert reader.read("{sov}\nb\n{eov}\n").verses[0].name == "v1"


def test_full_document():
    text = (
        "{title: Dark Star}\n"
        "{artist: Grateful Dead}\n"
        "\n"
        "{comment: Intro}\n"
        "[A] [G]\n"
        "\n"
        "{start_of_verse: Verse 1}\n"
        "[A]Dark star [G]crashes\n"
        "pouring its [A]light\n"
        "{end_of_verse}\n"
        "\n"
        "{start_of_chorus}\n"
        "[D]Shall we go\n"
        "{end_of_chorus}\n"
    )
    song = _read(text)
    assert song.title == "Dark Star"
    assert [v.name for v in song.verses] == ["i", "v1", "c"]
    first = song.verses[1].lines[0]
    assert first.text == "Dark star crashes"
    assert first.chords == [Chord("A", 0), Chord("G", 10)]


def test_parse_chordpro_shortcut():
    song = parse_chordpro("{title: Amazing Grace}\n{sov}\nAmazing [G]grace\n{eov}\n")
    assert song.title == "Amazing Grace"
    assert song.verses[0].name == "v1"
    assert song.verses[0].lines == [VerseLine("Amazing grace", [Chord("G", 8)])]


# ---------------------------------------------------------------------------
# Verse name uniqueness
# ---------------------------------------------------------------------------


def test_unnumbered_verse_after_numbered_gets_next_number():
    song = _read("{sov: Verse 2}\na\n{eov}\n{sov}\nb\n{eov}\n")
    assert [v.name for v in song.verses] == ["v2", "v3"]


def test_unnumbered_verse_skips_used_numbers():
    text = "{sov}\na\n{eov}\n{sov: Verse 2}\nb\n{eov}\n{sov}\nc\n{eov}\n"
    assert [v.name for v in _read(text).verses] == ["v1", "v2", "v3"]


def test_reader_keeps_no_state_between_reads():
    reader = ChordProReader()
    reader.read("{sov: Verse 4}\na\n{eov}\n")
    assert not vars(reader)
    assert [v.name for v in reader.read("{sov}\nb\n{eov}\n").verses] == ["v1"]
