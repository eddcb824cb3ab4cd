from __future__ import annotations

import hashlib
import re
from collections.abc import Sequence
from typing import Dict

from domain.ports.colors import ColorLookup

DEFAULT_PALETTE: tuple[str, ...] = (
    "#4E79A7",
    "#F28E2B",
    "#E15759",
    "#76B7B2",
    "#59A14F",
    "#EDC948",
    "#B07AA1",
    "#FF9DA7",
    "#9C755F",
    "#BAB0AC",
)

# Red, orange, yellow, lime green, deep sky blue, medium purple.
NUMBERED_PALETTE: tuple[str, ...] = (
    "#FF0000",
    "#FFA500",
    "#FFFF00",
    "#32CD32",
    "#00BFFF",
    "#9370DB",
)

OTHER_COLOR = "#A9A9A9"

_NUMBER_RE = re.compile(r"\d+")


class HashPaletteColorMap(ColorLookup):
    def __init__(
        self,
        palette: Sequence[str] = DEFAULT_PALETTE,
        overrides: dict[str, str] | None = None,
    ) -> None:
        if not palette:
            raise ValueError("palette must not be empty")
        self._palette = tuple(palette)
        self._overrides = dict(overrides or {})

    def color_of(self, name: str) -> str:
        if name in self._overrides:
            return self._overrides[name]
        digest = hashlib.sha1(name.encode("utf-8")).digest()
        return self._palette[int.from_bytes(digest[:4], "big") % len(self._palette)]


class NumberedPaletteColorMap(ColorLookup):
    """Pick a colour from the first number in the name, e.g. "P3" -> third colour."""

    def __init__(self, palette: Sequence[str] = NUMBERED_PALETTE) -> None:
        if not palette:
            raise ValueError("palette must not be empty")
        self._palette = tuple(palette)

    def color_of(self, name: str) -> str:
        match = _NUMBER_RE.search(name)
        index = int(match.group()) - 1 if match else 0
        return self._palette[index % len(self._palette)]


class PassColorCache:
    """Memoizes a lookup for the duration of one layout or chart pass."""

    def __init__(self, lookup: ColorLookup) -> None:
        self._lookup = lookup
        self._seen: Dict[str, str] = {}

    def __call__(self, name: str) -> str:
        color = self._seen.get(name)
        if color is None:
            color = self._lookup.color_of(name)
            self._seen[name] = color
        return color
