from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from adapters.colors.palette import HashPaletteColorMap, PassColorCache
from domain.models import AreaFrame, Block, Lane, LayoutPlan, Placement, WorkArea
from domain.ports.colors import ColorLookup
from domain.ports.layout import LayoutEngine
from domain.services.cumulative_height import MIN_HEIGHT, RATE_PER_DAY, HeightConfig
from domain.services.project_groups import group_projects, split_by_work_area
from domain.services.spatial_packing import (
    GAP_RATIO,
    SCALE,
    PackingConfig,
    fixed_lane_position,
    pack,
)
from domain.services.track_assignment import (
    DEFAULT_LANE_COUNT,
    assign_fixed_tracks,
    build_lanes,
)
from domain.work_areas import WorkAreaRegistry, area_label_anchor, area_outline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutConfig:
    scale: float = SCALE
    gap_ratio: float = GAP_RATIO
    rate_per_day: float = RATE_PER_DAY
    min_height: float = MIN_HEIGHT
    lane_count: int = DEFAULT_LANE_COUNT
    overflow_lane: Optional[int] = None
    ruler_left_x: float = -90.0
    ruler_right_x: float = 50.0

    @property
    def packing(self) -> PackingConfig:
        return PackingConfig(scale=self.scale, gap_ratio=self.gap_ratio)

    @property
    def heights(self) -> HeightConfig:
        return HeightConfig(
            scale=self.scale, rate_per_day=self.rate_per_day, min_height=self.min_height
        )


class SnapshotLayoutEngine(LayoutEngine):
    """Blocks live at one instant, spread over a fixed number of lanes."""

    def __init__(
        self,
        registry: WorkAreaRegistry | None = None,
        config: LayoutConfig | None = None,
        colors: ColorLookup | None = None,
    ) -> None:
        self.registry = registry or WorkAreaRegistry()
        self.config = config or LayoutConfig()
        self.colors = colors or HashPaletteColorMap()

    def build_plan(self, blocks: Sequence[Block], current_time: datetime) -> LayoutPlan:
        live = [block for block in blocks if block.is_live_at(current_time)]
        color_of = PassColorCache(self.colors)
        placements: List[Placement] = []
        lanes: Dict[int, List[Lane]] = {}

        for area_id, area_blocks in split_by_work_area(live).items():
            area = self.registry.get(area_id)
            if area is None:
                logger.debug("Skipping %d block(s) in unknown work area %s", len(area_blocks), area_id)
                continue
            groups = group_projects(area_blocks)
            assignment = assign_fixed_tracks(
                groups, self.config.lane_count, self.config.overflow_lane
            )
            area_lanes = build_lanes(
                groups,
                assignment,
                self.config.lane_count,
                fixed_lane_position(area.center, area.size, self.config.lane_count, self.config.packing),
            )
            lanes[area_id] = area_lanes
            placements.extend(
                pack(groups, assignment, area_lanes, self.config.packing, color_of=color_of)
            )

        return LayoutPlan(frames=self.build_frames(), placements=placements, lanes=lanes)

    def build_frames(self) -> List[AreaFrame]:
        return [self._frame(area) for area in self.registry]

    def _frame(self, area: WorkArea) -> AreaFrame:
        return AreaFrame(
            work_area=area.area_id,
            label=area.label,
            corners=area_outline(area),
            label_position=area_label_anchor(area),
        )
