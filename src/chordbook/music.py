"""Chord symbols: parsing, transposition and notation conversion.

A chord symbol is a root note, an opaque quality suffix (``m7``, ``sus4``,
``dim7``, ...) and an optional ``/bass`` note::

    >>> str(transpose(parse_chord("G7"), 5))
    'C7'
    >>> str(convert_notation(parse_chord("Bb/D"), "german"))
    'B/D'

Every operation here is a pure function over :class:`ChordSymbol` values.
The quality is never interpreted, only carried along.  Spelling follows
the tables on each :class:`~chordbook.notations.base.NotationSystem`.
"""

import re
from dataclasses import dataclass, replace

from .exceptions import InvalidTransposition, ParseError
from .notations.base import Note
from .registry import get_notation

_DIGITS_RE = re.compile(r"\d+")


@dataclass(frozen=True)
class ChordSymbol:
    root: Note
    quality: str = ""
    bass: Note | None = None
    notation: str = "english"

    def __str__(self) -> str:
        system = get_notation(self.notation)
        text = system.spell(self.root) + self.quality
        if self.bass is not None:
            text += "/" + system.spell(self.bass)
        return text


def parse_chord(text: str, notation: str = "english") -> ChordSymbol:
    """Parse *text* as a chord symbol in the given notation.

    Raises ParseError if the text is not a chord in that notation and
    UnsupportedNotation if the notation is unknown.
    """
    system = get_notation(notation)
    src = text.strip()
    expected = f"a chord in {system.name} notation, got {text!r}"

    found = system.match_note(src)
    if found is None:
        raise ParseError(None, expected)
    root, end = found
    rest = src[end:]
    quality, bass = rest, None

    slash = rest.rfind("/")
    if slash != -1:
        tail = rest[slash + 1:]
        found = system.match_note(tail)
        if found is not None and found[1] == len(tail):
            quality, bass = rest[:slash], found[0]
        elif not _DIGITS_RE.fullmatch(tail):
            # Only numeric suffixes such as "6/9" may contain a slash
            raise ParseError(None, expected)

    if any(c.isspace() or c == "`" for c in quality):
        raise ParseError(None, expected)

    return ChordSymbol(root=root, quality=quality, bass=bass, notation=system.name)


def transpose(chord: ChordSymbol, semitones: int, notation: str | None = None) -> ChordSymbol:
    """Shift *chord* by *semitones* and spell it in *notation*.

    *notation* defaults to the chord's own notation.  Offsets must lie in
    -11..11; callers holding an arbitrary offset reduce it modulo 12 first.
    """
    if not -11 <= semitones <= 11:
        raise InvalidTransposition(semitones)
    target = get_notation(notation or chord.notation)
    return ChordSymbol(
        root=chord.root.shifted(semitones),
        quality=chord.quality,
        bass=chord.bass.shifted(semitones) if chord.bass is not None else None,
        notation=target.name,
    )


def convert_notation(chord: ChordSymbol, target: str) -> ChordSymbol:
    """Re-spell *chord* in another notation without changing its pitch."""
    return replace(chord, notation=get_notation(target).name)
