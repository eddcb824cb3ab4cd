from __future__ import annotations

from typing import Protocol


class ColorLookup(Protocol):
    def color_of(self, name: str) -> str: ...
