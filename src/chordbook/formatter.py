"""JSON export of the document tree.

Renders a :class:`~chordbook.models.Book` to the JSON document renderers
and templates consume.

Node → JSON mapping
-------------------

+--------------------------+-----------------------------------------------+
| Node                     | JSON object                                   |
+==========================+===============================================+
| Book, Song, Paragraph    | fields only, no ``type`` key                  |
+--------------------------+-----------------------------------------------+
| Blocks                   | ``{"type": "b-verse", "paragraphs": [...]}``, |
|                          | ``b-bullet-list``, ``b-horizontal-line``,     |
|                          | ``b-pre``, ``b-html-block``                   |
+--------------------------+-----------------------------------------------+
| Inlines                  | ``{"type": "i-chord", "primary": "C7",        |
|                          | "alt_chord": null, "style": 1,                |
|                          | "baseline": false, "inlines": [...]}``, ...   |
+--------------------------+-----------------------------------------------+
| Labels                   | ``{"type": "verse", "number": 1}``,           |
|                          | ``chorus``, ``{"type": "custom", "text": ..}``|
+--------------------------+-----------------------------------------------+

A trailing underscore is dropped from field names (``Image.class_`` is
exported as ``"class"``).

Usage::

    from chordbook.formatter import JsonFormatter
    text = JsonFormatter().render(result.book, result.diagnostics)
    Path("book.json").write_text(text)
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, fields, is_dataclass

from .models import Book, Diagnostic


@dataclass(frozen=True)
class AstVersion:
    version: str
    description: str

    def __str__(self) -> str:
        return f"{self.version}: {self.description}."


AST_VERSION_LOG: tuple[AstVersion, ...] = (
    AstVersion("1.0.0", "Initial version"),
    AstVersion("1.1.0", "Added HTML blocks and tags, and baseline chords"),
    AstVersion("1.2.0", "Images carry width and height"),
)

AST_VERSION = AST_VERSION_LOG[-1].version


def changes_since(version: str) -> list[AstVersion]:
    """Return the log entries newer than *version* (``"major.minor.patch"``)."""
    def key(v: str) -> tuple[int, ...]:
        return tuple(int(part) for part in v.split("."))

    return [entry for entry in AST_VERSION_LOG if key(entry.version) > key(version)]


def to_dict(node):
    """Convert a tree node (or sequence of nodes) to JSON-ready values."""
    if isinstance(node, (list, tuple)):
        return [to_dict(item) for item in node]
    if isinstance(node, Mapping):
        return dict(node)
    if is_dataclass(node) and not isinstance(node, type):
        out = {}
        tag = getattr(type(node), "TYPE", None)
        if tag is not None:
            out["type"] = tag
        for f in fields(node):
            out[f.name.rstrip("_")] = to_dict(getattr(node, f.name))
        return out
    return node


def diagnostic_to_dict(diagnostic: Diagnostic) -> dict:
    return {
        "origin": diagnostic.origin,
        "song": diagnostic.song,
        "line": diagnostic.line,
        "kind": diagnostic.kind,
        "message": str(diagnostic.error),
    }


class JsonFormatter:
    """Render a :class:`~chordbook.models.Book` to JSON text."""

    def __init__(self, indent: int | None = 2):
        self.indent = indent

    def render(self, book: Book, diagnostics=()) -> str:
        """Return JSON text for *book*.

        The returned string ends with a single newline.
        """
        document = {
            "ast_version": AST_VERSION,
            "book": to_dict(book),
            "diagnostics": [diagnostic_to_dict(d) for d in diagnostics],
        }
        return json.dumps(document, indent=self.indent, ensure_ascii=False) + "\n"
