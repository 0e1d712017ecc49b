"""Document assembler: song sources → parsed songs → validated Book.

Typical use::

    from chordbook.book import parse_book
    from chordbook.config import BookConfig

    result = parse_book([("songs.md", text)], BookConfig(title="Campfire"))
    for diagnostic in result.diagnostics:
        print(diagnostic)
    book = result.book

Songs share no state, so ``max_workers`` > 1 parses them on a thread pool.
Results are always assembled in input order.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import Iterable

from .blocks import FENCE_RE, ParsedSong, SongSource, parse_song
from .config import BookConfig
from .exceptions import DuplicateChorusLabel, ParseError, UnknownChorusReference
from .models import Book, Diagnostic

logger = logging.getLogger(__name__)

TITLE_RE = re.compile(r"^\s{0,3}#\s+(.*?)(?:\s+#+)?\s*$")


@dataclass
class BookResult:
    """The best-effort book plus every diagnostic found while building it."""

    book: Book
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics


# ---------------------------------------------------------------------------
# Splitting
# ---------------------------------------------------------------------------


def split_songs(text: str, origin: str = "") -> tuple[list[SongSource], list[Diagnostic]]:
    """Split *text* into songs at each ``# Title`` heading.

    Headings inside fenced blocks do not start songs.  Non-blank content
    before the first heading is reported and skipped.
    """
    sources: list[SongSource] = []
    diagnostics: list[Diagnostic] = []
    stray_line: int | None = None
    fence: str | None = None

    for line_no, line in enumerate(text.split("\n"), start=1):
        if fence is None:
            # CRLF input; fenced lines are kept byte for byte
            line = line.removesuffix("\r")
            title = TITLE_RE.match(line)
            if title:
                sources.append(SongSource(title=title.group(1), origin=origin, line=line_no))
                continue
            m = FENCE_RE.match(line)
            if m:
                fence = m.group(1) or m.group(2)
        else:
            stripped = line.strip()
            if stripped.startswith(fence) and not stripped.strip(fence[0]):
                fence = None

        if sources:
            sources[-1].lines.append((line_no, line))
        elif line.strip() and stray_line is None:
            stray_line = line_no

    if stray_line is not None:
        diagnostics.append(
            Diagnostic(
                origin=origin,
                song="",
                line=stray_line,
                error=ParseError(stray_line, "a '# Title' heading before song content"),
            )
        )
    return sources, diagnostics


# ---------------------------------------------------------------------------
# Validation and assembly
# ---------------------------------------------------------------------------


def validate_choruses(parsed: ParsedSong) -> list[Diagnostic]:
    """Check chorus declarations and references of one song.

    Each reference must point at a chorus declared on an earlier line of the
    same song, and each chorus number may be declared only once.
    """
    diagnostics: list[Diagnostic] = []
    title = parsed.song.title

    declared: dict[int, int] = {}
    for number, line in parsed.chorus_declarations:
        if number in declared:
            error = DuplicateChorusLabel(number, line)
            diagnostics.append(Diagnostic(parsed.origin, title, line, error))
        else:
            declared[number] = line

    for number, line in parsed.chorus_references:
        first = declared.get(number)
        if first is None or first >= line:
            error = UnknownChorusReference(number, line)
            diagnostics.append(Diagnostic(parsed.origin, title, line, error))

    return diagnostics


def assemble_book(
    config: BookConfig,
    parsed_songs: Iterable[ParsedSong],
    diagnostics: Iterable[Diagnostic] = (),
) -> BookResult:
    """Validate every song and build the final :class:`Book`.

    All diagnostics are collected; a failing song never stops the others.
    Within a song, diagnostics are ordered by line.
    """
    collected = list(diagnostics)
    songs = []
    for parsed in parsed_songs:
        song_diagnostics = parsed.diagnostics + validate_choruses(parsed)
        song_diagnostics.sort(key=lambda d: d.line or 0)
        collected.extend(song_diagnostics)
        songs.append(parsed.song)

    book = Book(
        title=config.title,
        subtitle=config.subtitle,
        front_img=config.front_img,
        title_note=config.title_note,
        chorus_label=config.chorus_label,
        notation=config.notation,
        songs=tuple(songs),
    )
    if collected:
        logger.info("Built %r with %d diagnostics", book.title, len(collected))
    return BookResult(book=book, diagnostics=collected)


def parse_book(
    sources: Iterable[tuple[str, str]],
    config: BookConfig | None = None,
    max_workers: int | None = None,
) -> BookResult:
    """Parse ``(origin, text)`` pairs into a book.

    *origin* names the input (usually a file name) in diagnostics.
    """
    config = config or BookConfig()
    song_sources: list[SongSource] = []
    diagnostics: list[Diagnostic] = []
    for origin, text in sources:
        found, stray = split_songs(text, origin)
        song_sources.extend(found)
        diagnostics.extend(stray)

    logger.debug("Parsing %d songs", len(song_sources))
    parse = partial(parse_song, config=config)
    if max_workers and max_workers > 1 and len(song_sources) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            parsed = list(executor.map(parse, song_sources))
    else:
        parsed = [parse(source) for source in song_sources]

    return assemble_book(config, parsed, diagnostics)


def parse_string(text: str, config: BookConfig | None = None, origin: str = "") -> BookResult:
    """Parse a single text holding one or more songs."""
    return parse_book([(origin, text)], config)
