from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import List, Optional

from domain.models import Block, Footprint, Lane, Placement, PlanePoint, Point3, ProjectGroup

SCALE = 0.15
GAP_RATIO = 0.7

# (baseline, height) for a block; baseline None means it rests on the ground.
VerticalExtent = Callable[[Block], tuple[Optional[float], float]]


@dataclass(frozen=True)
class PackingConfig:
    scale: float = SCALE
    gap_ratio: float = GAP_RATIO

    def width_of(self, block: Block) -> float:
        return block.length * self.scale

    def depth_of(self, block: Block) -> float:
        return block.breadth * self.scale

    def gap_before(self, block: Block) -> float:
        return block.breadth * self.scale * self.gap_ratio


def group_span(group: ProjectGroup, config: PackingConfig) -> float:
    return sum(config.width_of(block) + config.gap_before(block) for block in group.blocks)


def pack_group(
    group: ProjectGroup,
    lane: Lane,
    config: PackingConfig | None = None,
    vertical: VerticalExtent | None = None,
    color: Optional[str] = None,
) -> List[Placement]:
    """Lay a project's blocks out left to right, centred on its lane.

    Every block, the first one included, is preceded by its own gap, so a
    single block sits half a gap right of the lane centre.
    """
    config = config or PackingConfig()
    span = group_span(group, config)
    cursor = lane.x - span / 2.0

    placements: List[Placement] = []
    for block in group.blocks:
        cursor += config.gap_before(block)
        width = config.width_of(block)
        if vertical is None:
            baseline, height = None, block.height * config.scale
            center_y = height / 2.0
        else:
            baseline, height = vertical(block)
            center_y = (baseline or 0.0) + height / 2.0
        placements.append(
            Placement(
                block=block,
                project=group.name,
                work_area=group.work_area,
                lane=lane.index,
                center=Point3(cursor + width / 2.0, center_y, lane.z),
                width=width,
                depth=config.depth_of(block),
                height=height,
                baseline=baseline,
                color=color,
            )
        )
        cursor += width
    return placements


def pack(
    groups: Sequence[ProjectGroup],
    assignment: Mapping[str, int],
    lanes: Sequence[Lane],
    config: PackingConfig | None = None,
    vertical: VerticalExtent | None = None,
    color_of: Callable[[str], str] | None = None,
) -> List[Placement]:
    placements: List[Placement] = []
    for group in groups:
        lane = lanes[assignment[group.name]]
        color = color_of(group.name) if color_of is not None else None
        placements.extend(pack_group(group, lane, config, vertical, color))
    return placements


def fixed_lane_position(
    center: PlanePoint, size: Footprint, lane_count: int, config: PackingConfig
) -> Callable[[int], tuple[float, float]]:
    """Lanes spread around the area centre on both axes.

    For three lanes this gives x offsets of -half, 0, +half the scaled width
    and z offsets of one scaled depth before, at and after the centre.
    """
    half_width = size.width * config.scale / 2.0
    spacing = size.depth * config.scale
    middle = (lane_count - 1) / 2.0

    def position(index: int) -> tuple[float, float]:
        step = index - middle
        return center.x + step * half_width, center.z + step * spacing

    return position


def spread_lane_position(
    center: PlanePoint, size: Footprint, lane_count: int, config: PackingConfig
) -> Callable[[int], tuple[float, float]]:
    full_width = size.width * config.scale

    def position(index: int) -> tuple[float, float]:
        x = center.x - full_width / 2.0 + full_width * (index + 0.5) / lane_count
        return x, center.z

    return position
