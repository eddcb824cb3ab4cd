from __future__ import annotations

from collections.abc import Iterable
from typing import Dict, List, Tuple

from domain.models import Block, ProjectGroup


def split_by_work_area(blocks: Iterable[Block]) -> Dict[int, List[Block]]:
    buckets: Dict[int, List[Block]] = {}
    for block in blocks:
        buckets.setdefault(block.work_area, []).append(block)
    return {area_id: buckets[area_id] for area_id in sorted(buckets)}


def group_projects(blocks: Iterable[Block]) -> List[ProjectGroup]:
    """Group blocks into projects ordered by their earliest start.

    A project is every block sharing a name inside one work area. Groups
    with equal starts keep the order in which their first block was seen,
    and members are ordered by start with the same stable tie-break.
    """
    members: Dict[Tuple[int, str], List[Block]] = {}
    for block in blocks:
        members.setdefault((block.work_area, block.name), []).append(block)

    groups: List[ProjectGroup] = []
    for (work_area, name), items in members.items():
        ordered = sorted(items, key=lambda item: item.start)
        groups.append(
            ProjectGroup(
                name=name,
                work_area=work_area,
                blocks=tuple(ordered),
                start=ordered[0].start,
                end=max(item.end for item in ordered),
            )
        )
    groups.sort(key=lambda group: group.start)
    return groups
