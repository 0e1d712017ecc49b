"""Per-song transposition and notation state, driven by directive lines.

Directive syntax (one directive per line)::

    !+5  !-2  !0         primary transpose offset
    !german              primary notation
    !!+2  !!0            second chord row: enable and set its offset
    !!nashville          second chord row: enable and set its notation

A directive applies from its line to the end of the song.  Each song starts
from :meth:`DirectiveState.initial`, so nothing carries over between songs.
"""

import re
from dataclasses import dataclass, replace

from .exceptions import ParseError
from .music import convert_notation, parse_chord, transpose
from .registry import get_notation

_DIRECTIVE_LINE_RE = re.compile(r"^\s*!(?!\[)")
_DIRECTIVE_RE = re.compile(r"^(!{1,2})(?:([+-]?\d+)|([A-Za-z][\w-]*))$")


@dataclass(frozen=True)
class Directive:
    secondary: bool
    offset: int | None = None  # already reduced modulo 12
    notation: str | None = None


@dataclass(frozen=True)
class DirectiveState:
    """Active transposition settings at one point of a song.

    ``source_notation`` is the notation chords are written in (the book's
    default); the other two notations are what chords get spelled in.
    """

    source_notation: str = "english"
    primary_offset: int = 0
    primary_notation: str = "english"
    secondary_enabled: bool = False
    secondary_offset: int = 0
    secondary_notation: str = "english"

    @classmethod
    def initial(cls, notation: str = "english") -> "DirectiveState":
        name = get_notation(notation).name
        return cls(
            source_notation=name,
            primary_notation=name,
            secondary_notation=name,
        )

    def apply(self, directive: Directive) -> "DirectiveState":
        """Return the state after *directive*."""
        if directive.secondary:
            state = replace(self, secondary_enabled=True)
            if directive.offset is not None:
                return replace(state, secondary_offset=directive.offset)
            return replace(state, secondary_notation=directive.notation)
        if directive.offset is not None:
            return replace(self, primary_offset=directive.offset)
        return replace(self, primary_notation=directive.notation)

    def resolve_chord(self, raw: str, line: int | None = None) -> tuple[str, str | None]:
        """Return ``(primary, alt_chord)`` texts for a chord written as *raw*.

        The chord is always parsed, so malformed chord text is reported even
        when no transformation is active.  With offset 0 and the source
        notation the raw text is kept as written.
        """
        try:
            chord = parse_chord(raw, self.source_notation)
        except ParseError as exc:
            raise ParseError(line, exc.expected) from exc

        primary = self._spell(raw, chord, self.primary_offset, self.primary_notation)
        alt = None
        if self.secondary_enabled:
            alt = self._spell(raw, chord, self.secondary_offset, self.secondary_notation)
        return primary, alt

    def _spell(self, raw, chord, offset, notation):
        if offset == 0 and notation == self.source_notation:
            return raw.strip()
        if offset == 0:
            return str(convert_notation(chord, notation))
        return str(transpose(chord, offset, notation))


def is_directive_line(line: str) -> bool:
    """Return True if *line* should be read as a directive (``![`` is an image)."""
    return bool(_DIRECTIVE_LINE_RE.match(line))


def parse_directive(line: str, line_no: int | None = None) -> Directive:
    """Parse one directive line.

    Raises ParseError on malformed syntax and UnsupportedNotation on an
    unknown notation name.
    """
    m = _DIRECTIVE_RE.match(line.strip())
    if not m:
        raise ParseError(line_no, "a directive like '!+2', '!german' or '!!-3'")
    marks, offset, name = m.groups()
    secondary = len(marks) == 2
    if offset is not None:
        return Directive(secondary=secondary, offset=int(offset) % 12)
    return Directive(secondary=secondary, notation=get_notation(name).name)
