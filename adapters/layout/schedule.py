from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from functools import partial
from typing import Dict, List

from adapters.colors.palette import NumberedPaletteColorMap, PassColorCache
from adapters.layout.snapshot import LayoutConfig, SnapshotLayoutEngine
from domain.models import AreaFrame, Block, Lane, LayoutPlan, Placement, TimeScale, WorkArea
from domain.ports.colors import ColorLookup
from domain.services.cumulative_height import (
    TimeAxis,
    build_time_scale,
    compute_time_axis,
    map_height,
)
from domain.services.project_groups import group_projects, split_by_work_area
from domain.services.spatial_packing import pack, spread_lane_position
from domain.services.track_assignment import assign_dynamic_tracks, build_lanes
from domain.work_areas import WorkAreaRegistry, area_label_anchor, area_outline

logger = logging.getLogger(__name__)

LABEL_LIFT = 2.2


class ScheduleLayoutEngine(SnapshotLayoutEngine):
    """Every block, one lane per project, height growing with elapsed time.

    Baselines and rulers share a single time axis computed over the whole
    dataset, so blocks in different work areas line up vertically.
    """

    def __init__(
        self,
        registry: WorkAreaRegistry | None = None,
        config: LayoutConfig | None = None,
        colors: ColorLookup | None = None,
    ) -> None:
        super().__init__(registry, config, colors or NumberedPaletteColorMap())

    def build_plan(self, blocks: Sequence[Block], current_time: datetime) -> LayoutPlan:
        axis = compute_time_axis(blocks)
        if axis is None:
            return LayoutPlan(frames=self.build_frames(), placements=[])

        heights = self.config.heights
        vertical = partial(
            map_height, current_time=current_time, global_start=axis.start, config=heights
        )
        color_of = PassColorCache(self.colors)
        placements: List[Placement] = []
        lanes: Dict[int, List[Lane]] = {}

        for area_id, area_blocks in split_by_work_area(blocks).items():
            area = self.registry.get(area_id)
            if area is None:
                logger.debug("Skipping %d block(s) in unknown work area %s", len(area_blocks), area_id)
                continue
            groups = group_projects(area_blocks)
            assignment = assign_dynamic_tracks(groups)
            area_lanes = build_lanes(
                groups,
                assignment,
                len(groups),
                spread_lane_position(area.center, area.size, len(groups), self.config.packing),
            )
            lanes[area_id] = area_lanes
            placements.extend(
                pack(
                    groups,
                    assignment,
                    area_lanes,
                    self.config.packing,
                    vertical=vertical,
                    color_of=color_of,
                )
            )

        return LayoutPlan(
            frames=self.build_frames(),
            placements=placements,
            lanes=lanes,
            scales=self.build_scales(axis),
        )

    def build_scales(self, axis: TimeAxis) -> List[TimeScale]:
        heights = self.config.heights
        return [
            build_time_scale(axis, "left", self.config.ruler_left_x, config=heights),
            build_time_scale(axis, "right", self.config.ruler_right_x, config=heights),
        ]

    def _frame(self, area: WorkArea) -> AreaFrame:
        return AreaFrame(
            work_area=area.area_id,
            label=area.label,
            corners=area_outline(area),
            label_position=area_label_anchor(area, lift=LABEL_LIFT),
        )
