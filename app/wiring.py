from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Literal

from adapters.colors.palette import (
    OTHER_COLOR,
    HashPaletteColorMap,
    NumberedPaletteColorMap,
)
from adapters.filesystem.block_repository import FileSystemBlockRepository
from adapters.layout.schedule import ScheduleLayoutEngine
from adapters.layout.snapshot import SnapshotLayoutEngine
from app.chart_board import ChartBoard
from app.config import AppSettings
from domain.models import OTHER_LABEL, Block
from domain.ports.colors import ColorLookup
from domain.ports.layout import LayoutEngine
from domain.services.block_intake import BlockIntake

LayoutMode = Literal["snapshot", "schedule"]


def build_color_lookup() -> ColorLookup:
    return HashPaletteColorMap(overrides={OTHER_LABEL: OTHER_COLOR})


def build_layout_engine(settings: AppSettings, mode: LayoutMode) -> LayoutEngine:
    registry = settings.build_registry()
    config = settings.layout.to_layout_config()
    if mode == "schedule":
        return ScheduleLayoutEngine(registry, config, NumberedPaletteColorMap())
    if mode == "snapshot":
        return SnapshotLayoutEngine(registry, config, build_color_lookup())
    msg = f"Unknown layout mode: {mode}"
    raise ValueError(msg)


def build_chart_board(settings: AppSettings) -> ChartBoard:
    return ChartBoard(
        settings.build_registry(),
        build_color_lookup(),
        settings.charts.options,
        debounce_seconds=settings.charts.debounce_seconds,
    )


def load_initial_blocks(settings: AppSettings) -> BlockIntake:
    if settings.data_path is None:
        return BlockIntake()
    return FileSystemBlockRepository().load(settings.data_path)


def resolve_current_time(at: datetime | None, blocks: Sequence[Block]) -> datetime:
    """Match ``at`` to the timezone convention of ``blocks``.

    Naive block timestamps are read as local wall time, so an aware ``at``
    is converted to local time before its tzinfo is dropped.
    """
    moment = at or datetime.now()
    reference = blocks[0].start.tzinfo if blocks else None
    if reference is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=reference)
    if reference is None and moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    return moment
