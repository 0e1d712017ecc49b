from .exceptions import UnsupportedNotation
from .notations.base import NotationSystem
from .notations.english import EnglishNotation
from .notations.german import GermanNotation
from .notations.nashville import NashvilleNotation
from .notations.roman import RomanNotation

_NOTATIONS: list[type[NotationSystem]] = [
    EnglishNotation,
    GermanNotation,
    NashvilleNotation,
    RomanNotation,
]

NOTATION_NAMES: tuple[str, ...] = tuple(cls.name for cls in _NOTATIONS)


def get_notation(name: str) -> NotationSystem:
    """Return an instantiated notation system for the given name.

    Names are matched case-insensitively against each system's name and
    aliases.  Raises UnsupportedNotation if no system matches.
    """
    for cls in _NOTATIONS:
        if cls.can_handle(name):
            return cls()
    raise UnsupportedNotation(name)
