from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto


class Accidental(Enum):
    """Spelling preference recorded from the source token."""

    NONE = auto()  # natural, spelled from the canonical table
    SHARP = auto()
    FLAT = auto()


@dataclass(frozen=True)
class Note:
    """A pitch class (0-11, C = 0) plus the accidental it was written with."""

    pitch: int
    accidental: Accidental = Accidental.NONE

    def shifted(self, semitones: int) -> "Note":
        return Note((self.pitch + semitones) % 12, self.accidental)


class NotationSystem(ABC):
    """Abstract base class for all chord notation systems.

    Subclasses provide three spelling tables indexed by pitch class.  The
    table used when spelling a note is chosen by its accidental, so a
    sharp-spelled chord stays sharp-spelled after any transformation.
    Relative systems (Nashville, Roman) use C as their tonic.
    """

    name: str = ""
    aliases: tuple[str, ...] = ()

    CANONICAL: tuple[str, ...] = ()
    SHARPS: tuple[str, ...] = ()
    FLATS: tuple[str, ...] = ()

    @classmethod
    def can_handle(cls, name: str) -> bool:
        """Return True if this system answers to the given name."""
        key = name.strip().lower()
        return key == cls.name or key in cls.aliases

    @abstractmethod
    def match_note(self, text: str) -> tuple[Note, int] | None:
        """Match a note spelling at the start of *text*.

        Returns the note and the number of characters consumed, or None if
        *text* does not start with a note in this system.
        """

    def spell(self, note: Note) -> str:
        if note.accidental is Accidental.SHARP:
            table = self.SHARPS
        elif note.accidental is Accidental.FLAT:
            table = self.FLATS
        else:
            table = self.CANONICAL
        return table[note.pitch % 12]

    def is_table_spelling(self, note: Note, token: str) -> bool:
        """Return True if *token* is how this system spells *note*.

        Parsers accept only table spellings, so any chord that parses is
        spelled back to the same text after a transform is undone.
        """
        return self.spell(note) == token

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


# Semitones above the tonic for major-scale degrees 1-7.
MAJOR_SCALE = (0, 2, 4, 5, 7, 9, 11)


class DegreeNotation(NotationSystem):
    """Scale-degree system: an optional ``#``/``b`` prefix and a degree token."""

    DEGREE_RE = None  # compiled pattern with groups (accidental, degree)

    @abstractmethod
    def degree_index(self, token: str) -> int:
        """Return the 0-based scale degree for a matched degree token."""

    def match_note(self, text: str) -> tuple[Note, int] | None:
        m = self.DEGREE_RE.match(text)
        if not m:
            return None
        prefix, token = m.group(1), m.group(2)
        pitch = MAJOR_SCALE[self.degree_index(token)]
        if prefix == "#":
            note = Note((pitch + 1) % 12, Accidental.SHARP)
        elif prefix == "b":
            note = Note((pitch - 1) % 12, Accidental.FLAT)
        else:
            note = Note(pitch, Accidental.NONE)
        # "#3" or "b4" name a degree the tables spell otherwise
        if not self.is_table_spelling(note, m.group()):
            return None
        return note, m.end()
