from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Dict, List, Optional

from domain.models import Lane, ProjectGroup

DEFAULT_LANE_COUNT = 3


def default_overflow_lane(lane_count: int) -> int:
    return lane_count // 2


def assign_tracks(
    groups: Sequence[ProjectGroup],
    lane_count: Optional[int] = DEFAULT_LANE_COUNT,
    overflow_lane: Optional[int] = None,
) -> Dict[str, int]:
    """Map each project name to a lane index.

    ``groups`` must already be ordered by start (see ``group_projects``).
    With an integer ``lane_count`` every group takes the first lane whose
    members do not overlap it in time; when none is free it goes to
    ``overflow_lane`` (the centre lane by default) even if that overlaps.
    ``lane_count=None`` gives each group its own lane in encounter order.
    """
    if lane_count is None:
        return assign_dynamic_tracks(groups)
    return assign_fixed_tracks(groups, lane_count, overflow_lane)


def assign_fixed_tracks(
    groups: Sequence[ProjectGroup],
    lane_count: int,
    overflow_lane: Optional[int] = None,
) -> Dict[str, int]:
    if lane_count < 1:
        msg = f"lane_count must be at least 1, got {lane_count}"
        raise ValueError(msg)
    fallback = default_overflow_lane(lane_count) if overflow_lane is None else overflow_lane
    if not 0 <= fallback < lane_count:
        msg = f"overflow_lane {fallback} is outside 0..{lane_count - 1}"
        raise ValueError(msg)

    by_name = {group.name: group for group in groups}
    tracks: List[List[str]] = [[] for _ in range(lane_count)]
    assignment: Dict[str, int] = {}
    for group in groups:
        assigned = fallback
        for index, members in enumerate(tracks):
            if all(not by_name[name].overlaps(group) for name in members):
                assigned = index
                break
        tracks[assigned].append(group.name)
        assignment[group.name] = assigned
    return assignment


def assign_dynamic_tracks(groups: Sequence[ProjectGroup]) -> Dict[str, int]:
    assignment: Dict[str, int] = {}
    for group in groups:
        assignment.setdefault(group.name, len(assignment))
    return assignment


def build_lanes(
    groups: Sequence[ProjectGroup],
    assignment: Dict[str, int],
    count: int,
    position: Callable[[int], tuple[float, float]],
) -> List[Lane]:
    members: List[List[str]] = [[] for _ in range(count)]
    for group in groups:
        members[assignment[group.name]].append(group.name)
    lanes: List[Lane] = []
    for index in range(count):
        x, z = position(index)
        lanes.append(Lane(index=index, x=x, z=z, projects=tuple(members[index])))
    return lanes
