from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, List

from pydantic import ValidationError

from domain.models import Block
from domain.work_areas import WorkAreaRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockWarning:
    index: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, "message": self.message}


@dataclass(frozen=True)
class BlockIntake:
    blocks: List[Block] = field(default_factory=list)
    warnings: List[BlockWarning] = field(default_factory=list)


def ingest_block_records(records: Iterable[Mapping[str, Any] | Block]) -> BlockIntake:
    """Validate raw block records, dropping the ones that cannot be used.

    Records failing validation (end before start, missing fields,
    non-positive dimensions) are excluded and reported as warnings; the
    remaining records keep their original order. The first accepted block
    fixes whether timestamps carry a timezone, and later records that
    disagree are dropped so every block in the result can be compared.
    """
    blocks: List[Block] = []
    warnings: List[BlockWarning] = []
    for index, record in enumerate(records):
        if isinstance(record, Block):
            block = record
        elif not isinstance(record, Mapping):
            warnings.append(BlockWarning(index, f"Expected an object, got {type(record).__name__}"))
            continue
        else:
            try:
                block = Block.model_validate(dict(record))
            except ValidationError as exc:
                warnings.append(BlockWarning(index, _summarize_errors(exc)))
                continue
        if blocks and block.is_timezone_aware != blocks[0].is_timezone_aware:
            expected = "timezone-aware" if blocks[0].is_timezone_aware else "naive"
            warnings.append(
                BlockWarning(index, f"Timestamps must be {expected} like the first block")
            )
            continue
        blocks.append(block)
    for warning in warnings:
        logger.warning("Dropped block record #%d: %s", warning.index, warning.message)
    return BlockIntake(blocks=blocks, warnings=warnings)


def partition_known_work_areas(
    blocks: Iterable[Block], registry: WorkAreaRegistry
) -> tuple[List[Block], List[Block]]:
    known: List[Block] = []
    unknown: List[Block] = []
    for block in blocks:
        (known if block.work_area in registry else unknown).append(block)
    return known, unknown


def _summarize_errors(exc: ValidationError) -> str:
    parts: List[str] = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        message = str(error.get("msg", "invalid value"))
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)
