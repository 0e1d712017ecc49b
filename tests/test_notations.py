import pytest

from chordbook.notations.base import Accidental, Note
from chordbook.notations.english import EnglishNotation
from chordbook.notations.german import GermanNotation
from chordbook.notations.nashville import NashvilleNotation
from chordbook.notations.roman import RomanNotation

SYSTEMS = [EnglishNotation, GermanNotation, NashvilleNotation, RomanNotation]


# ---------------------------------------------------------------------------
# can_handle
# ---------------------------------------------------------------------------


def test_can_handle_own_name_case_insensitive():
    assert EnglishNotation.can_handle("English")
    assert GermanNotation.can_handle(" GERMAN ")


def test_can_handle_aliases():
    assert EnglishNotation.can_handle("en")
    assert GermanNotation.can_handle("de")
    assert NashvilleNotation.can_handle("nns")


def test_cannot_handle_other_names():
    assert not EnglishNotation.can_handle("german")
    assert not RomanNotation.can_handle("nashville")


# ---------------------------------------------------------------------------
# match_note
# ---------------------------------------------------------------------------


def test_english_match_consumes_accidentals():
    assert EnglishNotation().match_note("F#m7") == (Note(6, Accidental.SHARP), 2)
    assert EnglishNotation().match_note("Bbm") == (Note(10, Accidental.FLAT), 2)


@pytest.mark.parametrize("text", ["C##", "Bbb", "E#", "B#", "Cb", "Fb", "E♭", "F♯"])
def test_english_rejects_spellings_outside_tables(text):
    assert EnglishNotation().match_note(text) is None


def test_english_no_match():
    assert EnglishNotation().match_note("m7") is None


def test_german_names():
    german = GermanNotation()
    assert german.match_note("Fis") == (Note(6, Accidental.SHARP), 3)
    assert german.match_note("Es7") == (Note(3, Accidental.FLAT), 2)
    assert german.match_note("Esus4") == (Note(4), 1)
    assert german.match_note("H") == (Note(11), 1)


@pytest.mark.parametrize("text", ["Ces", "Fes", "Eis", "His7"])
def test_german_rejects_spellings_outside_tables(text):
    assert GermanNotation().match_note(text) is None


def test_nashville_degrees():
    nashville = NashvilleNotation()
    assert nashville.match_note("57") == (Note(7), 1)
    assert nashville.match_note("#4") == (Note(6, Accidental.SHARP), 2)
    assert nashville.match_note("8") is None


def test_degree_systems_reject_spellings_outside_tables():
    assert NashvilleNotation().match_note("#3") is None
    assert NashvilleNotation().match_note("b1") is None
    assert RomanNotation().match_note("bIV") is None
    assert RomanNotation().match_note("#VII") is None


def test_roman_longest_numeral_wins():
    roman = RomanNotation()
    assert roman.match_note("IV7") == (Note(5), 2)
    assert roman.match_note("VII") == (Note(11), 3)
    assert roman.match_note("bIII") == (Note(3, Accidental.FLAT), 4)
    assert roman.match_note("iv") is None


# ---------------------------------------------------------------------------
# spell
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("system", SYSTEMS)
def test_tables_are_complete(system):
    for table in (system.CANONICAL, system.SHARPS, system.FLATS):
        assert len(table) == 12


@pytest.mark.parametrize("system", SYSTEMS)
def test_every_spelling_parses_back_to_its_pitch(system):
    instance = system()
    for accidental, table in (
        (Accidental.NONE, system.CANONICAL),
        (Accidental.SHARP, system.SHARPS),
        (Accidental.FLAT, system.FLATS),
    ):
        for pitch, spelling in enumerate(table):
            note, consumed = instance.match_note(spelling)
            assert note.pitch == pitch
            assert consumed == len(spelling)


def test_spell_uses_accidental_preference():
    english = EnglishNotation()
    assert english.spell(Note(1)) == "C#"
    assert english.spell(Note(1, Accidental.FLAT)) == "Db"
    assert english.spell(Note(3, Accidental.SHARP)) == "D#"
    assert english.spell(Note(3)) == "Eb"


def test_note_shift_wraps():
    assert Note(11, Accidental.SHARP).shifted(2) == Note(1, Accidental.SHARP)
    assert Note(0).shifted(-1) == Note(11)
