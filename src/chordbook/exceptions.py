class ChordbookError(Exception):
    """Base exception for chordbook."""


class ParseError(ChordbookError):
    """Raised when a directive, chord, or markup token is malformed."""

    def __init__(self, line: int | None, expected: str):
        self.line = line
        self.expected = expected
        where = f"line {line}" if line is not None else "input"
        super().__init__(f"Parse error at {where}: expected {expected}")


class UnsupportedNotation(ChordbookError):
    """Raised when a notation system name is not recognized."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unsupported notation: {name!r}")


class InvalidTransposition(ChordbookError):
    """Raised when a transposition offset is outside -11..11."""

    def __init__(self, semitones: int):
        self.semitones = semitones
        super().__init__(f"Invalid transposition by {semitones} semitones")


class UnknownChorusReference(ChordbookError):
    """Raised when a chorus reference has no earlier chorus declaration."""

    def __init__(self, number: int, line: int | None = None):
        self.number = number
        self.line = line
        super().__init__(f"Reference to undeclared chorus {number}")


class DuplicateChorusLabel(ChordbookError):
    """Raised when a song declares the same chorus number twice."""

    def __init__(self, number: int, line: int | None = None):
        self.number = number
        self.line = line
        super().__init__(f"Chorus {number} is declared more than once")


class NestedChordError(ChordbookError):
    """Raised when a chord appears inside another chord's lyric."""

    def __init__(self, line: int | None = None):
        self.line = line
        super().__init__("Chord inside another chord's lyric")
