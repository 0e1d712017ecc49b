from chordbook.book import assemble_book, parse_book, parse_string, split_songs, validate_choruses
from chordbook.blocks import ParsedSong
from chordbook.config import BookConfig
from chordbook.exceptions import DuplicateChorusLabel, ParseError, UnknownChorusReference
from chordbook.models import Chord, ChorusLabel, Link, Song, Text, VerseLabel

CONFIG = BookConfig(title="Campfire", smart_punctuation=False)

TWO_SONGS = """\
# Amazing Grace
## Traditional
!+5
1. `G7`Amazing `C`grace

# Second Song
> `C`la la
1. da >
"""


# ---------------------------------------------------------------------------
# split_songs
# ---------------------------------------------------------------------------


def test_split_songs_titles_and_lines():
    sources, diagnostics = split_songs("# One\na\n# Two\nb", "f.md")
    assert [s.title for s in sources] == ["One", "Two"]
    assert sources[0].lines == [(2, "a")]
    assert sources[1].lines == [(4, "b")]
    assert sources[1].line == 3
    assert sources[1].origin == "f.md"
    assert diagnostics == []


def test_split_songs_strips_closing_hashes():
    sources, _ = split_songs("# Title ##")
    assert sources[0].title == "Title"


def test_split_songs_ignores_headings_in_fences():
    sources, _ = split_songs("# One\n```\n# not a song\n```\n# Two")
    assert [s.title for s in sources] == ["One", "Two"]
    assert (3, "# not a song") in sources[0].lines


def test_split_songs_reports_stray_content():
    sources, diagnostics = split_songs("\nintro\n# One", "f.md")
    assert [s.title for s in sources] == ["One"]
    [diagnostic] = diagnostics
    assert diagnostic.line == 2
    assert diagnostic.song == ""
    assert isinstance(diagnostic.error, ParseError)


def test_split_songs_empty_text():
    assert split_songs("") == ([], [])


# ---------------------------------------------------------------------------
# validate_choruses
# ---------------------------------------------------------------------------


def _parsed(declarations=(), references=()):
    return ParsedSong(
        song=Song(title="S"),
        origin="f.md",
        chorus_declarations=list(declarations),
        chorus_references=list(references),
    )


def test_reference_after_declaration_ok():
    assert validate_choruses(_parsed([(1, 2)], [(1, 5)])) == []


def test_reference_before_declaration():
    [diagnostic] = validate_choruses(_parsed([(1, 5)], [(1, 2)]))
    assert isinstance(diagnostic.error, UnknownChorusReference)
    assert diagnostic.line == 2


def test_reference_on_declaring_line_is_unknown():
    [diagnostic] = validate_choruses(_parsed([(1, 3)], [(1, 3)]))
    assert isinstance(diagnostic.error, UnknownChorusReference)


def test_duplicate_declaration():
    [diagnostic] = validate_choruses(_parsed([(1, 2), (1, 6)]))
    assert isinstance(diagnostic.error, DuplicateChorusLabel)
    assert diagnostic.error.number == 1
    assert diagnostic.line == 6


# ---------------------------------------------------------------------------
# parse_book / parse_string
# ---------------------------------------------------------------------------


def test_parse_string_builds_book():
    result = parse_string(TWO_SONGS, CONFIG, origin="songs.md")
    assert result.ok
    book = result.book
    assert book.title == "Campfire"
    assert book.chorus_label == "Ch"
    assert book.notation == "english"
    assert [s.title for s in book.songs] == ["Amazing Grace", "Second Song"]
    assert book.songs[0].subtitles == ("Traditional",)

    [paragraph] = book.songs[0].blocks[0].paragraphs
    assert paragraph.label == VerseLabel(1)
    assert paragraph.inlines == (
        Chord("C7", inlines=(Text("Amazing "),)),
        Chord("F", inlines=(Text("grace"),)),
    )


def test_transposition_does_not_carry_to_next_song():
    book = parse_string(TWO_SONGS, CONFIG).book
    chorus = book.songs[1].blocks[0].paragraphs[0]
    assert chorus.label == ChorusLabel(1)
    assert chorus.inlines[0].primary == "C"


def test_unknown_chorus_reference_reported_once():
    result = parse_string("# Song\n1. la >2\n2. da", CONFIG, origin="s.md")
    [diagnostic] = result.diagnostics
    assert isinstance(diagnostic.error, UnknownChorusReference)
    assert diagnostic.error.number == 2
    assert diagnostic.line == 2
    assert str(diagnostic) == "s.md:2: Song: Reference to undeclared chorus 2"
    # The tree is still complete
    assert len(result.book.songs[0].blocks) == 2


def test_reference_in_other_song_does_not_count():
    result = parse_string("# A\n> chorus\n# B\n1. la >", CONFIG)
    [diagnostic] = result.diagnostics
    assert diagnostic.song == "B"


def test_bad_song_does_not_stop_others():
    text = "# Bad\n1. `C\n# Good\n1. `C`ok"
    result = parse_string(text, CONFIG)
    assert not result.ok
    assert [d.song for d in result.diagnostics] == ["Bad"]
    assert result.book.songs[1].blocks[0].paragraphs[0].inlines[0].primary == "C"


def test_diagnostics_sorted_by_line_within_song():
    text = "# S\n1. a >3\n> x\n> y\n"
    result = parse_string(text, CONFIG)
    kinds = [(d.line, d.kind) for d in result.diagnostics]
    assert kinds == sorted(kinds)


def test_parse_book_multiple_files_keep_order():
    result = parse_book([("a.md", "# A\n1. a"), ("b.md", "# B\n1. b")], CONFIG)
    assert [s.title for s in result.book.songs] == ["A", "B"]


def test_parallel_matches_sequential():
    sources = [(f"{i}.md", f"# Song {i}\n!+{i}\n1. `C`la\n> `G`chorus\n1. >") for i in range(8)]
    sequential = parse_book(sources, CONFIG)
    parallel = parse_book(sources, CONFIG, max_workers=4)
    assert parallel.book == sequential.book
    assert [str(d) for d in parallel.diagnostics] == [str(d) for d in sequential.diagnostics]


def test_book_config_fields_copied():
    config = BookConfig(
        title="T",
        subtitle="Sub",
        front_img="cover.png",
        title_note="note",
        chorus_label="Refrain",
        notation="de",
    )
    book = assemble_book(config, []).book
    assert book.subtitle == "Sub"
    assert book.front_img == "cover.png"
    assert book.title_note == "note"
    assert book.chorus_label == "Refrain"
    assert book.notation == "german"
    assert book.songs == ()


def test_parse_book_default_config():
    result = parse_book([("", "# A\n1. a")])
    assert result.book.title == "Songbook"


def test_double_backtick_chord_transposed_like_single():
    result = parse_string("# Song\n!+5\n1. ``G7``Amazing `C`grace", CONFIG)
    first, second = result.book.songs[0].blocks[0].paragraphs[0].inlines
    assert (first.primary, first.style) == ("C7", 2)
    assert (second.primary, second.style) == ("F", 1)


def test_bullet_list_items_in_order():
    result = parse_string("# Song\n- a\n- b\n- c", CONFIG)
    assert result.book.songs[0].blocks[0].items == ("a", "b", "c")


def test_unterminated_chord_drops_only_its_block():
    result = parse_string("# Song\n1. `G`ok\n2. `C bad\n3. `D`fine", CONFIG)
    [diagnostic] = result.diagnostics
    assert diagnostic.kind == "ParseError"
    assert diagnostic.line == 3
    labels = [b.paragraphs[0].label for b in result.book.songs[0].blocks]
    assert labels == [VerseLabel(1), VerseLabel(3)]


def test_crlf_line_ends():
    text = "# Song\r\n## Sub\r\n1. `C`la [x](y)\r\n> chorus\r\n- item\r\n```\r\nraw\r\n```\r\n"
    result = parse_string(text, CONFIG)
    assert result.ok
    [song] = result.book.songs
    assert song.title == "Song"
    assert song.subtitles == ("Sub",)
    verse, chorus, bullets, pre = song.blocks
    assert verse.paragraphs[0].inlines == (
        Chord("C", inlines=(Text("la "), Link(url="y", title=None, text="x"))),
    )
    assert chorus.paragraphs[0].inlines == (Text("chorus"),)
    assert bullets.items == ("item",)
    # Fenced text is kept as written
    assert pre.text == "raw\r\n"


def test_crlf_lines_stored_without_carriage_return():
    sources, _ = split_songs("# A\r\n1. a\r\n")
    assert sources[0].lines == [(2, "1. a"), (3, "")]
