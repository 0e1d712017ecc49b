import pytest

from chordbook.exceptions import ParseError
from chordbook.models import (
    BLOCK_TYPES,
    INLINE_TYPES,
    Book,
    Break,
    Chord,
    ChorusRef,
    Diagnostic,
    Emph,
    Image,
    Link,
    Song,
    Strong,
    Tag,
    Text,
    Verse,
    contains_chord,
    plain_text,
)


def test_chord_defaults():
    chord = Chord("G")
    assert chord.alt_chord is None
    assert chord.style == 1
    assert not chord.baseline
    assert chord.inlines == ()


def test_image_natural_size_by_default():
    image = Image("a.png")
    assert image.width == 0
    assert image.height == 0
    assert image.class_ is None


def test_song_defaults():
    song = Song(title="The Weight")
    assert song.subtitles == ()
    assert song.blocks == ()


def test_book_defaults():
    book = Book(title="Songbook")
    assert book.chorus_label == "Ch"
    assert book.notation == "english"
    assert book.songs == ()


def test_tag_is_hashable():
    assert hash(Tag("div", {"class": "x"})) == hash(Tag("div", {"class": "y"}))


def test_tag_attrs_are_read_only():
    source = {"class": "x"}
    tag = Tag("div", source)
    with pytest.raises(TypeError):
        tag.attrs["id"] = "y"
    source["class"] = "changed"
    assert tag.attrs == {"class": "x"}


def test_type_tables():
    assert INLINE_TYPES["i-chord"] is Chord
    assert BLOCK_TYPES["b-verse"] is Verse
    assert len(INLINE_TYPES) == 9
    assert len(BLOCK_TYPES) == 5


# ---------------------------------------------------------------------------
# plain_text / contains_chord
# ---------------------------------------------------------------------------


def test_plain_text():
    inlines = (
        Text("a "),
        Chord("C", inlines=(Strong((Text("b"),)),)),
        Break(),
        Link("http://x", None, "link"),
        Image("i.png"),
        ChorusRef(2, prespace=True),
    )
    assert plain_text(inlines) == "a [C]b\nlink>2"


def test_contains_chord_nested():
    assert contains_chord((Text("a"), Emph((Strong((Chord("C"),)),))))
    assert not contains_chord((Text("a"), Emph((Text("b"),))))


# ---------------------------------------------------------------------------
# Diagnostic
# ---------------------------------------------------------------------------


def test_diagnostic_str_and_kind():
    diagnostic = Diagnostic("f.md", "Song", 3, ParseError(3, "a chord"))
    assert diagnostic.kind == "ParseError"
    assert str(diagnostic) == "f.md:3: Song: Parse error at line 3: expected a chord"


def test_diagnostic_without_line():
    diagnostic = Diagnostic("f.md", "Song", None, ParseError(None, "x"))
    assert str(diagnostic).startswith("f.md: Song: ")
