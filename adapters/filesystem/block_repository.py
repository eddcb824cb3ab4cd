from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, List

from adapters.filesystem.json_utils import load_json, write_json_atomic
from domain.models import Block
from domain.ports.repositories import BlockRepository
from domain.services.block_intake import BlockIntake, BlockWarning, ingest_block_records


class FileSystemBlockRepository(BlockRepository):
    def load(self, path: Path) -> BlockIntake:
        if not path.exists():
            msg = f"Block file not found: {path}"
            raise FileNotFoundError(msg)
        return self.parse(load_json(path))

    def parse(self, payload: Any) -> BlockIntake:
        records = payload.get("blocks") if isinstance(payload, dict) else payload
        if not isinstance(records, list):
            return BlockIntake(
                warnings=[BlockWarning(-1, "Expected a list of blocks or an object with 'blocks'")]
            )
        return ingest_block_records(records)

    def save(self, blocks: Sequence[Block], path: Path) -> None:
        payload: List[dict[str, Any]] = [block.to_dict() for block in blocks]
        write_json_atomic(path, {"blocks": payload})
