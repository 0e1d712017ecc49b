"""Nashville number system: degrees ``1``-``7`` relative to C."""

import re

from .base import DegreeNotation


class NashvilleNotation(DegreeNotation):
    name = "nashville"
    aliases = ("nns",)

    DEGREE_RE = re.compile(r"([#b]?)([1-7])")

    CANONICAL = ("1", "b2", "2", "b3", "3", "4", "#4", "5", "b6", "6", "b7", "7")
    SHARPS = ("1", "#1", "2", "#2", "3", "4", "#4", "5", "#5", "6", "#6", "7")
    FLATS = ("1", "b2", "2", "b3", "3", "4", "b5", "5", "b6", "6", "b7", "7")

    def degree_index(self, token: str) -> int:
        return int(token) - 1
