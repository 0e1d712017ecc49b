import pytest

from chordbook.exceptions import UnsupportedNotation
from chordbook.notations.english import EnglishNotation
from chordbook.notations.german import GermanNotation
from chordbook.notations.roman import RomanNotation
from chordbook.registry import NOTATION_NAMES, get_notation


def test_get_notation_english():
    assert isinstance(get_notation("english"), EnglishNotation)


def test_get_notation_alias():
    assert isinstance(get_notation("deutsch"), GermanNotation)


def test_get_notation_case_insensitive():
    assert isinstance(get_notation("Roman"), RomanNotation)


def test_get_notation_unknown_raises():
    with pytest.raises(UnsupportedNotation) as exc_info:
        get_notation("solfege")
    assert exc_info.value.name == "solfege"
    assert "solfege" in str(exc_info.value)


def test_notation_names():
    assert NOTATION_NAMES == ("english", "german", "nashville", "roman")
