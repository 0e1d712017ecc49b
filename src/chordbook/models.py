"""Document tree produced by the parser and consumed by renderers.

Every block and inline node carries a ``TYPE`` tag.  Renderers dispatch on
these strings, so they are part of the output contract and must not change
without bumping :data:`chordbook.formatter.AST_VERSION`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import ClassVar, Mapping, Union


# ---------------------------------------------------------------------------
# Inlines
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Text:
    TYPE: ClassVar[str] = "i-text"

    text: str


@dataclass(frozen=True)
class Chord:
    """A chord placed over its lyric.

    ``primary`` is the chord text after transposition and notation
    conversion.  ``alt_chord`` holds the second-row chord and is ``None``
    unless a ``!!`` directive was active.  ``style`` is the number of
    backticks used in the source (1 or 2).  A ``baseline`` chord has no
    lyric and an empty ``inlines``.
    """

    TYPE: ClassVar[str] = "i-chord"

    primary: str
    alt_chord: str | None = None
    style: int = 1
    baseline: bool = False
    inlines: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Break:
    TYPE: ClassVar[str] = "i-break"


@dataclass(frozen=True)
class Emph:
    TYPE: ClassVar[str] = "i-emph"

    inlines: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Strong:
    TYPE: ClassVar[str] = "i-strong"

    inlines: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Link:
    TYPE: ClassVar[str] = "i-link"

    url: str
    title: str | None
    text: str


@dataclass(frozen=True)
class Image:
    """An image reference.  Width and height of 0 mean natural size."""

    TYPE: ClassVar[str] = "i-image"

    path: str
    width: int = 0
    height: int = 0
    class_: str | None = None


@dataclass(frozen=True)
class ChorusRef:
    TYPE: ClassVar[str] = "i-chorus-ref"

    number: int
    prespace: bool = False


@dataclass(frozen=True)
class Tag:
    """An HTML tag passed through to the renderer (``name`` is ``/x`` for ``</x>``)."""

    TYPE: ClassVar[str] = "i-tag"

    name: str
    attrs: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        # Read-only copy so the node stays immutable
        object.__setattr__(self, "attrs", MappingProxyType(dict(self.attrs)))


Inline = Union[Text, Chord, Break, Emph, Strong, Link, Image, ChorusRef, Tag]

INLINE_TYPES: dict[str, type] = {
    cls.TYPE: cls for cls in (Text, Chord, Break, Emph, Strong, Link, Image, ChorusRef, Tag)
}


# ---------------------------------------------------------------------------
# Paragraph labels
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VerseLabel:
    TYPE: ClassVar[str] = "verse"

    number: int


@dataclass(frozen=True)
class ChorusLabel:
    TYPE: ClassVar[str] = "chorus"

    number: int


@dataclass(frozen=True)
class CustomLabel:
    TYPE: ClassVar[str] = "custom"

    text: str


Label = Union[VerseLabel, ChorusLabel, CustomLabel]


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Paragraph:
    label: Label | None
    inlines: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Verse:
    TYPE: ClassVar[str] = "b-verse"

    paragraphs: tuple[Paragraph, ...] = ()


@dataclass(frozen=True)
class BulletList:
    TYPE: ClassVar[str] = "b-bullet-list"

    items: tuple[str, ...] = ()


@dataclass(frozen=True)
class HorizontalLine:
    TYPE: ClassVar[str] = "b-horizontal-line"


@dataclass(frozen=True)
class Pre:
    TYPE: ClassVar[str] = "b-pre"

    text: str


@dataclass(frozen=True)
class HtmlBlock:
    TYPE: ClassVar[str] = "b-html-block"

    inlines: tuple[Inline, ...] = ()


Block = Union[Verse, BulletList, HorizontalLine, Pre, HtmlBlock]

BLOCK_TYPES: dict[str, type] = {
    cls.TYPE: cls for cls in (Verse, BulletList, HorizontalLine, Pre, HtmlBlock)
}


# ---------------------------------------------------------------------------
# Song and book
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Song:
    title: str
    subtitles: tuple[str, ...] = ()
    blocks: tuple[Block, ...] = ()


@dataclass(frozen=True)
class Book:
    title: str
    subtitle: str | None = None
    front_img: str | None = None
    title_note: str | None = None
    chorus_label: str = "Ch"
    notation: str = "english"
    songs: tuple[Song, ...] = ()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def plain_text(inlines) -> str:
    """Flatten inlines to the text a reader would see, without markup."""
    parts: list[str] = []
    for node in inlines:
        if isinstance(node, Text):
            parts.append(node.text)
        elif isinstance(node, Chord):
            parts.append(f"[{node.primary}]" + plain_text(node.inlines))
        elif isinstance(node, (Emph, Strong)):
            parts.append(plain_text(node.inlines))
        elif isinstance(node, Link):
            parts.append(node.text)
        elif isinstance(node, Break):
            parts.append("\n")
        elif isinstance(node, ChorusRef):
            parts.append(f">{node.number}")
        # Images and tags have no text
    return "".join(parts)


def contains_chord(inlines) -> bool:
    """Return True if *inlines* hold a Chord at any depth."""
    for node in inlines:
        if isinstance(node, Chord):
            return True
        if isinstance(node, (Emph, Strong)) and contains_chord(node.inlines):
            return True
    return False


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Diagnostic:
    """A problem found while parsing, tied to the song and line it came from."""

    origin: str
    song: str
    line: int | None
    error: Exception = field(hash=False, compare=False)

    @property
    def kind(self) -> str:
        return type(self.error).__name__

    def __str__(self) -> str:
        where = f"{self.origin}:{self.line}" if self.line is not None else self.origin
        return f"{where}: {self.song}: {self.error}"
