from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from domain.models import Block
from domain.services.block_intake import BlockIntake


class BlockRepository(Protocol):
    def load(self, path: Path) -> BlockIntake: ...

    def save(self, blocks: Sequence[Block], path: Path) -> None: ...
