from dataclasses import dataclass

from .registry import get_notation


@dataclass
class BookConfig:
    """Book-level settings supplied by the caller.

    Loading these from a project file is the caller's business; the parser
    only reads them.  ``notation`` is the notation chords are written in and
    the starting point of every song's directive state.
    """

    title: str = "Songbook"
    subtitle: str | None = None
    front_img: str | None = None
    title_note: str | None = None
    chorus_label: str = "Ch"
    notation: str = "english"
    smart_punctuation: bool = True

    def __post_init__(self):
        # Raises UnsupportedNotation for unknown names
        self.notation = get_notation(self.notation).name
