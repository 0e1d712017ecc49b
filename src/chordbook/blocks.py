"""Block parser: the lines of one song → blocks.

Implements the per-song pipeline:

  1. classify_line()  — BLANK / DIRECTIVE / SUBTITLE / RULE / FENCE / HTML /
                         BULLET / VERSE / CHORUS / LABEL / TEXT
  2. BlockParser      — groups classified lines into blocks, feeding each
                         content line to the inline parser under the
                         directive state in force at that line
  3. parse_song()     — convenience wrapper returning a ParsedSong

Song text looks like this::

    ## Traditional                 subtitle
    !+2                            directive (no block)
    1. `G`Amazing `C`grace         verse 1
       how `G`sweet the sound      ... same paragraph, joined with a Break
    > `C`Chorus line               chorus 1 (">>" would be chorus 2)
    [Bridge]                       custom label for the next lines
    - item                         bullet list
    ---                            horizontal line
    ```                            preformatted text up to the closing fence
    <div class="x">                raw HTML block up to the next blank line

A block that fails to parse is dropped and reported; parsing resumes at the
next block so the rest of the song survives.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum, auto

from .config import BookConfig
from .directives import DirectiveState, is_directive_line, parse_directive
from .exceptions import ChordbookError
from .inline import InlineParser
from .models import (
    Break,
    BulletList,
    Chord,
    ChorusLabel,
    ChorusRef,
    CustomLabel,
    Diagnostic,
    Emph,
    HorizontalLine,
    HtmlBlock,
    Paragraph,
    Pre,
    Song,
    Strong,
    Text,
    Verse,
    VerseLabel,
    plain_text,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Regexes
# ---------------------------------------------------------------------------

SUBTITLE_RE = re.compile(r"^\s{0,3}#{2,6}\s+(.*?)(?:\s+#+)?\s*$")
RULE_RE = re.compile(r"^\s{0,3}(?:(?:-\s*){3,}|(?:\*\s*){3,}|(?:_\s*){3,})$")
# Backtick fences may not carry backticks in their info string
FENCE_RE = re.compile(r"^\s{0,3}(?:(`{3,})[^`]*|(~{3,}).*)$")
HTML_RE = re.compile(r"^\s{0,3}<[A-Za-z/!]")
BULLET_RE = re.compile(r"^\s{0,3}[-*+]\s+(.*)$")
VERSE_RE = re.compile(r"^\s{0,3}(\d{1,9})[.)](?:\s+(.*))?$")
# "> text" declares a chorus; a bare ">" or ">2" is a chorus reference
CHORUS_RE = re.compile(r"^\s{0,3}(>+)\s+(\S.*)$")
LABEL_RE = re.compile(r"^\s{0,3}\[([^\]]+)\]\s*$")


# ---------------------------------------------------------------------------
# LineType
# ---------------------------------------------------------------------------


class LineType(Enum):
    BLANK = auto()  # empty or whitespace only
    DIRECTIVE = auto()  # !+2, !german, !!-3
    SUBTITLE = auto()  # ## Subtitle
    RULE = auto()  # ---
    FENCE = auto()  # ``` or ~~~
    HTML = auto()  # <tag ...> at line start
    BULLET = auto()  # - item
    VERSE = auto()  # 1. text
    CHORUS = auto()  # > text
    LABEL = auto()  # [Custom label]
    TEXT = auto()  # everything else


def classify_line(line: str) -> LineType:
    """Classify a single line of song text."""
    if not line.strip():
        return LineType.BLANK
    if is_directive_line(line):
        return LineType.DIRECTIVE
    if FENCE_RE.match(line):
        return LineType.FENCE
    if SUBTITLE_RE.match(line):
        return LineType.SUBTITLE
    if RULE_RE.match(line):
        return LineType.RULE
    if HTML_RE.match(line):
        return LineType.HTML
    if BULLET_RE.match(line):
        return LineType.BULLET
    if VERSE_RE.match(line):
        return LineType.VERSE
    if CHORUS_RE.match(line):
        return LineType.CHORUS
    if LABEL_RE.match(line):
        return LineType.LABEL
    return LineType.TEXT


_PARAGRAPH_STARTS = (LineType.VERSE, LineType.CHORUS, LineType.LABEL, LineType.TEXT)


# ---------------------------------------------------------------------------
# Parser input and output
# ---------------------------------------------------------------------------


@dataclass
class SongSource:
    """The raw lines of one song, each with its 1-based line number."""

    title: str
    lines: list[tuple[int, str]] = field(default_factory=list)
    origin: str = ""
    line: int | None = None  # line of the title heading


@dataclass
class ParsedSong:
    """A parsed song plus what the assembler needs to validate it."""

    song: Song
    origin: str = ""
    diagnostics: list[Diagnostic] = field(default_factory=list)
    chorus_declarations: list[tuple[int, int]] = field(default_factory=list)  # (number, line)
    chorus_references: list[tuple[int, int]] = field(default_factory=list)  # (number, line)


@dataclass
class _PendingBlock:
    """Bookkeeping for the block being built; discarded with it on failure."""

    error: ChordbookError | None = None
    error_line: int | None = None
    declarations: list[tuple[int, int]] = field(default_factory=list)
    references: list[tuple[int, int]] = field(default_factory=list)

    def fail(self, error: ChordbookError, line: int) -> None:
        if self.error is None:
            self.error = error
            self.error_line = line


# ---------------------------------------------------------------------------
# Block parser
# ---------------------------------------------------------------------------


class BlockParser:
    """Parse one song.  Holds all per-song state; create one per song."""

    def __init__(self, source: SongSource, config: BookConfig | None = None):
        self.source = source
        self.config = config or BookConfig()
        self.state = DirectiveState.initial(self.config.notation)
        self.inline = InlineParser(self.state, self.config.smart_punctuation)
        self.verse_number = 0
        self.subtitles: list[str] = []
        self.blocks: list = []
        self.diagnostics: list[Diagnostic] = []
        self.declarations: list[tuple[int, int]] = []
        self.references: list[tuple[int, int]] = []
        self._lines = source.lines
        self._i = 0

    def parse(self) -> ParsedSong:
        logger.debug("Parsing song %r (%d lines)", self.source.title, len(self._lines))
        while not self._at_end():
            line_no, line = self._lines[self._i]
            kind = classify_line(line)

            if kind is LineType.BLANK:
                self._i += 1
            elif kind is LineType.DIRECTIVE:
                self._directive(line_no, line)
                self._i += 1
            elif kind is LineType.SUBTITLE:
                self.subtitles.append(SUBTITLE_RE.match(line).group(1))
                self._i += 1
            elif kind is LineType.RULE:
                self.blocks.append(HorizontalLine())
                self._i += 1
            elif kind is LineType.FENCE:
                self._pre()
            elif kind is LineType.HTML:
                self._html_block()
            elif kind is LineType.BULLET:
                self._bullet_list()
            else:
                self._verse()

        song = Song(
            title=self.source.title,
            subtitles=tuple(self.subtitles),
            blocks=tuple(self.blocks),
        )
        return ParsedSong(
            song=song,
            origin=self.source.origin,
            diagnostics=self.diagnostics,
            chorus_declarations=self.declarations,
            chorus_references=self.references,
        )

    # --- helpers ------------------------------------------------------------

    def _at_end(self) -> bool:
        return self._i >= len(self._lines)

    def _report(self, line: int | None, error: ChordbookError) -> None:
        self.diagnostics.append(
            Diagnostic(origin=self.source.origin, song=self.source.title, line=line, error=error)
        )

    def _directive(self, line_no: int, line: str) -> None:
        try:
            directive = parse_directive(line, line_no)
        except ChordbookError as exc:
            self._report(line_no, exc)
            return
        self.state = self.state.apply(directive)
        self.inline.state = self.state

    def _inlines(self, text: str, line_no: int, pending: _PendingBlock) -> list:
        """Inline-parse one line of a block, recording failure on *pending*."""
        if pending.error is not None:
            return []
        try:
            nodes = self.inline.parse(text.strip(), line_no)
        except ChordbookError as exc:
            pending.fail(exc, line_no)
            return []
        pending.references.extend((number, line_no) for number in _chorus_refs(nodes))
        return nodes

    def _finish(self, block, pending: _PendingBlock) -> None:
        if pending.error is not None:
            logger.warning(
                "Dropping %s block in %r: %s", block.TYPE, self.source.title, pending.error
            )
            self._report(pending.error_line, pending.error)
            return
        self.blocks.append(block)
        self.declarations.extend(pending.declarations)
        self.references.extend(pending.references)

    # --- blocks -------------------------------------------------------------

    def _verse(self) -> None:
        """A labeled paragraph followed by any unlabeled paragraphs."""
        pending = _PendingBlock()
        paragraphs: list[Paragraph] = []

        while not self._at_end():
            line_no, line = self._lines[self._i]
            kind = classify_line(line)
            if kind is LineType.BLANK:
                self._i += 1
                continue
            if kind is LineType.DIRECTIVE:
                self._directive(line_no, line)
                self._i += 1
                continue
            if kind not in _PARAGRAPH_STARTS:
                break
            if paragraphs and kind is not LineType.TEXT:
                break  # a new label starts the next verse
            paragraphs.append(self._paragraph(pending))

        self._finish(Verse(paragraphs=tuple(paragraphs)), pending)

    def _paragraph(self, pending: _PendingBlock) -> Paragraph:
        line_no, line = self._lines[self._i]
        kind = classify_line(line)
        label = None
        content = line
        chorus_marks = None

        if kind is LineType.VERSE:
            m = VERSE_RE.match(line)
            number = int(m.group(1))
            # Verse numbers never decrease; a smaller number means "next verse"
            if number < self.verse_number:
                number = self.verse_number + 1
            self.verse_number = number
            label = VerseLabel(number)
            content = m.group(2) or ""
        elif kind is LineType.CHORUS:
            m = CHORUS_RE.match(line)
            chorus_marks = m.group(1)
            label = ChorusLabel(len(chorus_marks))
            pending.declarations.append((label.number, line_no))
            content = m.group(2)
        elif kind is LineType.LABEL:
            label = CustomLabel(LABEL_RE.match(line).group(1).strip())
            content = ""

        inlines = list(self._inlines(content, line_no, pending)) if content.strip() else []
        self._i += 1

        while not self._at_end():
            line_no, line = self._lines[self._i]
            kind = classify_line(line)
            if kind is LineType.DIRECTIVE:
                self._directive(line_no, line)
                self._i += 1
                continue
            if kind is LineType.TEXT:
                content = line
            elif kind is LineType.CHORUS and CHORUS_RE.match(line).group(1) == chorus_marks:
                content = CHORUS_RE.match(line).group(2)
            else:
                break
            nodes = self._inlines(content, line_no, pending)
            if nodes:
                if inlines:
                    inlines.append(Break())
                inlines.extend(nodes)
            self._i += 1

        return Paragraph(label=label, inlines=tuple(inlines))

    def _bullet_list(self) -> None:
        pending = _PendingBlock()
        items: list[str] = []

        while not self._at_end():
            line_no, line = self._lines[self._i]
            kind = classify_line(line)
            if kind is LineType.DIRECTIVE:
                self._directive(line_no, line)
            elif kind is LineType.BULLET:
                content = BULLET_RE.match(line).group(1)
                items.append(plain_text(self._inlines(content, line_no, pending)).strip())
            elif kind is LineType.TEXT and items and line[:1].isspace():
                # Indented continuation of the previous item
                extra = plain_text(self._inlines(line, line_no, pending)).strip()
                items[-1] = f"{items[-1]} {extra}".strip()
            else:
                break
            self._i += 1

        self._finish(BulletList(items=tuple(items)), pending)

    def _pre(self) -> None:
        _, opening = self._lines[self._i]
        m = FENCE_RE.match(opening)
        fence = m.group(1) or m.group(2)
        self._i += 1

        body: list[str] = []
        while not self._at_end():
            _, line = self._lines[self._i]
            self._i += 1
            stripped = line.strip()
            if stripped.startswith(fence) and not stripped.strip(fence[0]):
                break
            body.append(line)

        # No inline parsing and no directives: the text is kept as written
        self.blocks.append(Pre(text="".join(f"{line}\n" for line in body)))

    def _html_block(self) -> None:
        pending = _PendingBlock()
        inlines: list = []

        while not self._at_end():
            line_no, line = self._lines[self._i]
            kind = classify_line(line)
            if kind is LineType.BLANK:
                break
            if kind is LineType.DIRECTIVE:
                self._directive(line_no, line)
            else:
                if inlines:
                    inlines.append(Text("\n"))
                inlines.extend(self._inlines(line, line_no, pending))
            self._i += 1

        self._finish(HtmlBlock(inlines=tuple(inlines)), pending)


def _chorus_refs(nodes) -> list[int]:
    """Chorus numbers referenced anywhere in *nodes*, in document order."""
    found: list[int] = []
    for node in nodes:
        if isinstance(node, ChorusRef):
            found.append(node.number)
        elif isinstance(node, (Chord, Emph, Strong)):
            found.extend(_chorus_refs(node.inlines))
    return found


def parse_song(source: SongSource, config: BookConfig | None = None) -> ParsedSong:
    """Parse one song's lines into a :class:`ParsedSong`."""
    return BlockParser(source, config).parse()
