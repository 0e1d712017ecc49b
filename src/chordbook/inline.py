"""Inline markup parser: one line of song text → list of inline nodes.

Recognized markup, in order of precedence:

  1. chords          `G7`  ``C7``   (one or two backticks → style 1 / 2)
  2. emphasis        *x*  _x_   strong  **x**  __x__
  3. images, links   ![alt](path "class")   [text](url "title")
  4. inline HTML     <br>  <img src=.. width=.. height=..>  <any-tag a="b">
  5. chorus refs     >  >>  >2   (a whitespace-separated word)
  6. escapes         \\*  \\`  \\>  ...

A chord owns the inlines that follow it on the same nesting level, up to
the next chord or the end of the line::

    "`G`Amazing `C`grace"  →  [Chord(G, [Text("Amazing ")]), Chord(C, [Text("grace")])]
"""

import re
import string

from bs4 import BeautifulSoup

from .directives import DirectiveState
from .exceptions import NestedChordError, ParseError
from .models import (
    Break,
    Chord,
    ChorusRef,
    Emph,
    Image,
    Link,
    Strong,
    Tag,
    Text,
    contains_chord,
)

# ---------------------------------------------------------------------------
# Regexes
# ---------------------------------------------------------------------------

# Runs of characters with no markup meaning
_PLAIN_RE = re.compile(r"[^`*_!\[<>\\]+")

_BACKTICKS_RE = re.compile(r"`+")

_IMAGE_RE = re.compile(r'!\[([^\]]*)\]\(\s*([^\s)]+)(?:\s+"([^"]*)")?\s*\)')
_LINK_RE = re.compile(r'\[([^\]]*)\]\(\s*([^\s)]+)(?:\s+"([^"]*)")?\s*\)')

# <name attr="x">, <name/>, </name>
_TAG_RE = re.compile(r"<(/)?([A-Za-z][\w-]*)(\s[^<>]*)?/?>")

# > / >> / >2 followed by whitespace or end of line
_CHORUS_REF_RE = re.compile(r"(>+)(\d*)(?=\s|$)")

_LEADING_DIGITS_RE = re.compile(r"\d+")

# Smart punctuation
_DOUBLE_OPEN_RE = re.compile(r'(?:^|(?<=[\s(\[{]))"')
_SINGLE_OPEN_RE = re.compile(r"(?:^|(?<=[\s(\[{]))'")


def smarten(text: str) -> str:
    """Replace straight quotes, dashes and dots with typographic forms."""
    text = text.replace("---", "\u2014").replace("--", "\u2013").replace("...", "\u2026")
    text = _DOUBLE_OPEN_RE.sub("\u201c", text).replace('"', "\u201d")
    text = _SINGLE_OPEN_RE.sub("\u2018", text).replace("'", "\u2019")
    return text


class _ChordMark:
    """A resolved chord before it has collected its lyric."""

    __slots__ = ("primary", "alt_chord", "style")

    def __init__(self, primary: str, alt_chord: str | None, style: int):
        self.primary = primary
        self.alt_chord = alt_chord
        self.style = style


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class InlineParser:
    """Parse lines of inline markup under the current directive state.

    ``state`` is read whenever a chord is resolved; the block parser
    replaces it as directive lines go by.
    """

    def __init__(self, state: DirectiveState, smart_punctuation: bool = True):
        self.state = state
        self.smart_punctuation = smart_punctuation
        self._line: int | None = None
        # (pos, width) -> emphasis result for the line being parsed
        self._openers: dict = {}

    def parse(self, text: str, line_no: int | None = None) -> list:
        """Return the inline nodes for one line of *text*.

        Raises ParseError for unterminated or malformed chord spans and
        NestedChordError for a chord inside another chord's lyric.
        """
        self._line = line_no
        self._openers = {}
        nodes, _, _ = self._scan(text, 0, None)
        nodes = self._group_chords(nodes)
        while nodes and isinstance(nodes[-1], Break):
            nodes.pop()
        return nodes

    # --- scanning -----------------------------------------------------------

    def _scan(self, src: str, pos: int, closer: str | None):
        """Scan from *pos* until *closer* (an emphasis delimiter) or end of text.

        Returns ``(nodes, end_pos, closed)``.
        """
        nodes: list = []
        buf: list[str] = []

        def flush():
            if buf:
                text = "".join(buf)
                nodes.append(Text(smarten(text) if self.smart_punctuation else text))
                buf.clear()

        while pos < len(src):
            m = _PLAIN_RE.match(src, pos)
            if m:
                buf.append(m.group())
                pos = m.end()
                continue

            ch = src[pos]

            if ch == "\\":
                if pos + 1 < len(src) and src[pos + 1] in string.punctuation:
                    buf.append(src[pos + 1])
                    pos += 2
                else:
                    buf.append(ch)
                    pos += 1
                continue

            if ch == "`":
                flush()
                mark, pos = self._chord(src, pos)
                nodes.append(mark)
                continue

            if ch in "*_":
                run = len(src[pos:]) - len(src[pos:].lstrip(ch))
                if (
                    closer is not None
                    and closer[0] == ch
                    and run == len(closer)
                    and not src[pos - 1].isspace()
                ):
                    flush()
                    return nodes, pos + run, True
                found = self._emphasis(src, pos, run)
                if found is not None:
                    flush()
                    node, pos = found
                    nodes.append(node)
                else:
                    buf.append(src[pos:pos + run])
                    pos += run
                continue

            if ch == "!":
                m = _IMAGE_RE.match(src, pos)
                if m:
                    flush()
                    nodes.append(Image(path=m.group(2), class_=m.group(3)))
                    pos = m.end()
                    continue

            if ch == "[":
                m = _LINK_RE.match(src, pos)
                if m:
                    flush()
                    nodes.append(Link(url=m.group(2), title=m.group(3), text=m.group(1)))
                    pos = m.end()
                    continue

            if ch == "<":
                m = _TAG_RE.match(src, pos)
                if m:
                    flush()
                    nodes.append(self._html(m))
                    pos = m.end()
                    continue

            if ch == ">" and (pos == 0 or src[pos - 1].isspace()):
                m = _CHORUS_REF_RE.match(src, pos)
                if m:
                    flush()
                    marks, digits = m.groups()
                    number = int(digits) if digits else len(marks)
                    nodes.append(ChorusRef(number=number, prespace=pos > 0))
                    pos = m.end()
                    continue

            buf.append(ch)
            pos += 1

        flush()
        return nodes, pos, False

    def _chord(self, src: str, pos: int):
        run = len(src[pos:]) - len(src[pos:].lstrip("`"))
        if run > 2:
            raise ParseError(self._line, "a chord delimited by one or two backticks")
        start = pos + run
        for m in _BACKTICKS_RE.finditer(src, start):
            if len(m.group()) == run:
                raw = src[start:m.start()]
                if not raw.strip():
                    raise ParseError(self._line, "chord text between backticks")
                primary, alt = self.state.resolve_chord(raw, self._line)
                return _ChordMark(primary, alt, run), m.end()
        raise ParseError(self._line, f"closing {'`' * run} after chord")

    def _emphasis(self, src: str, pos: int, run: int):
        ch = src[pos]
        after = pos + run
        if after >= len(src) or src[after].isspace():
            return None
        if ch == "_" and pos > 0 and src[pos - 1].isalnum():
            return None  # snake_case words stay literal
        widths = (2, 1) if run >= 2 else (1,)
        for width in widths:
            key = (pos, width)
            if key not in self._openers:
                self._openers[key] = self._close_emphasis(src, pos, width)
            if self._openers[key] is not None:
                return self._openers[key]
        return None

    def _close_emphasis(self, src: str, pos: int, width: int):
        # Called at most once per (pos, width) and line, see _emphasis
        ch = src[pos]
        inner, end, closed = self._scan(src, pos + width, ch * width)
        if closed and inner:
            cls = Strong if width == 2 else Emph
            return cls(tuple(self._group_chords(inner))), end
        return None

    def _html(self, m: re.Match):
        closing, name = m.group(1), m.group(2).lower()
        if closing:
            return Tag(name="/" + name)
        attrs = _tag_attrs(m.group())
        if name == "br":
            return Break()
        if name == "img":
            return Image(
                path=attrs.get("src", ""),
                width=_to_int(attrs.get("width")),
                height=_to_int(attrs.get("height")),
                class_=attrs.get("class"),
            )
        return Tag(name=name, attrs=attrs)

    # --- chord grouping -----------------------------------------------------

    def _group_chords(self, nodes: list) -> list:
        out: list = []
        i = 0
        while i < len(nodes):
            node = nodes[i]
            if not isinstance(node, _ChordMark):
                out.append(node)
                i += 1
                continue

            j = i + 1
            while j < len(nodes) and not isinstance(nodes[j], _ChordMark):
                j += 1
            lyric = nodes[i + 1:j]
            if contains_chord(lyric):
                raise NestedChordError(self._line)

            baseline = all(isinstance(n, Text) and not n.text.strip() for n in lyric)
            out.append(
                Chord(
                    primary=node.primary,
                    alt_chord=node.alt_chord,
                    style=node.style,
                    baseline=baseline,
                    inlines=() if baseline else tuple(lyric),
                )
            )
            i = j
        return out


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _tag_attrs(tag_text: str) -> dict[str, str]:
    soup = BeautifulSoup(tag_text, "html.parser", multi_valued_attributes=None)
    element = soup.find()
    if element is None:
        return {}
    return {key: value if isinstance(value, str) else " ".join(value)
            for key, value in element.attrs.items()}


def _to_int(value: str | None) -> int:
    if not value:
        return 0
    m = _LEADING_DIGITS_RE.match(value.strip())
    return int(m.group()) if m else 0
