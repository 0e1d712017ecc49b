"""English letter names: C D E F G A B with ``#`` / ``b`` accidentals.

A letter takes at most one accidental, and only the spellings in the
tables below are notes: ``E#``, ``B#``, ``Cb``, ``Fb`` and double
accidentals are rejected, as are the Unicode signs ``♯`` and ``♭``.
"""

import re

from .base import Accidental, NotationSystem, Note

_NOTE_RE = re.compile(r"([A-G])([#b]*)")

_LETTERS = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}


class EnglishNotation(NotationSystem):
    name = "english"
    aliases = ("en",)

    CANONICAL = ("C", "C#", "D", "Eb", "E", "F", "F#", "G", "Ab", "A", "Bb", "B")
    SHARPS = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")
    FLATS = ("C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B")

    def match_note(self, text: str) -> tuple[Note, int] | None:
        m = _NOTE_RE.match(text)
        if not m:
            return None
        letter, marks = m.groups()
        if text[m.end():m.end() + 1] in ("♯", "♭"):
            return None
        if marks == "#":
            note = Note((_LETTERS[letter] + 1) % 12, Accidental.SHARP)
        elif marks == "b":
            note = Note((_LETTERS[letter] - 1) % 12, Accidental.FLAT)
        elif not marks:
            note = Note(_LETTERS[letter])
        else:
            return None
        if not self.is_table_spelling(note, letter + marks):
            return None
        return note, m.end()
