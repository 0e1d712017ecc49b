"""Roman numeral degrees ``I``-``VII`` relative to C.

Numerals are upper case only; chord quality (``m``, ``7``, ...) follows the
numeral as in every other system.
"""

import re

from .base import DegreeNotation

_NUMERALS = ("I", "II", "III", "IV", "V", "VI", "VII")


class RomanNotation(DegreeNotation):
    name = "roman"

    # Longest numerals first so "IV" is not read as "I" + "V".
    DEGREE_RE = re.compile(r"([#b]?)(VII|VI|V|IV|III|II|I)")

    CANONICAL = ("I", "bII", "II", "bIII", "III", "IV", "#IV", "V", "bVI", "VI", "bVII", "VII")
    SHARPS = ("I", "#I", "II", "#II", "III", "IV", "#IV", "V", "#V", "VI", "#VI", "VII")
    FLATS = ("I", "bII", "II", "bIII", "III", "IV", "bV", "V", "bVI", "VI", "bVII", "VII")

    def degree_index(self, token: str) -> int:
        return _NUMERALS.index(token)
