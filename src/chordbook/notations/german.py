"""German note names.

``B`` is B-flat and ``H`` is B natural.  Sharps take the suffix ``-is``
(``Cis``), flats ``-es`` (``Des``), with the contractions ``Es`` and
``As``.  ``Asus4`` and ``Esus`` read as A / E with a ``sus`` quality, not
as A-flat / E-flat.  Enharmonic names outside the tables (``Ces``, ``Fes``,
``Eis``, ``His``) are rejected.
"""

import re

from .base import Accidental, NotationSystem, Note

_NAMES = {
    "C": (0, Accidental.NONE),
    "Cis": (1, Accidental.SHARP),
    "D": (2, Accidental.NONE),
    "Dis": (3, Accidental.SHARP),
    "Des": (1, Accidental.FLAT),
    "E": (4, Accidental.NONE),
    "Es": (3, Accidental.FLAT),
    "F": (5, Accidental.NONE),
    "Fis": (6, Accidental.SHARP),
    "G": (7, Accidental.NONE),
    "Gis": (8, Accidental.SHARP),
    "Ges": (6, Accidental.FLAT),
    "A": (9, Accidental.NONE),
    "Ais": (10, Accidental.SHARP),
    "As": (8, Accidental.FLAT),
    "B": (10, Accidental.FLAT),
    "H": (11, Accidental.NONE),
}

_NOTE_RE = re.compile(
    r"(?:[ACDEFGH]is|[CDFG]es|[AE]s(?!us))"
    r"|[A-H]"
)


class GermanNotation(NotationSystem):
    name = "german"
    aliases = ("de", "deutsch")

    CANONICAL = ("C", "Cis", "D", "Es", "E", "F", "Fis", "G", "As", "A", "B", "H")
    SHARPS = ("C", "Cis", "D", "Dis", "E", "F", "Fis", "G", "Gis", "A", "Ais", "H")
    FLATS = ("C", "Des", "D", "Es", "E", "F", "Ges", "G", "As", "A", "B", "H")

    def match_note(self, text: str) -> tuple[Note, int] | None:
        m = _NOTE_RE.match(text)
        if not m:
            return None
        # Ces, Fes, Eis and His match the pattern but are not table spellings
        if m.group() not in _NAMES:
            return None
        pitch, accidental = _NAMES[m.group()]
        return Note(pitch, accidental), m.end()
