from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from domain.models import Footprint, PlanePoint, Point3, WorkArea

DEFAULT_WORK_AREAS: tuple[WorkArea, ...] = (
    WorkArea(1, PlanePoint(-30, -40), Footprint(12 * 7, 4 * 5)),
    WorkArea(2, PlanePoint(-30, -17), Footprint(12 * 7, 4 * 5)),
    WorkArea(3, PlanePoint(-54, 17), Footprint(6 * 6, 4 * 5)),
    WorkArea(4, PlanePoint(-54, 40), Footprint(6 * 6, 4 * 5)),
    WorkArea(5, PlanePoint(15, 17), Footprint(6 * 7, 4 * 5)),
    WorkArea(6, PlanePoint(5, 40), Footprint(12 * 6, 4 * 5)),
)


class WorkAreaRegistry:
    """Read-only lookup of work area footprints, keyed by id.

    Built once at startup; iteration follows ascending id order.
    """

    def __init__(self, areas: Iterable[WorkArea] = DEFAULT_WORK_AREAS) -> None:
        by_id: dict[int, WorkArea] = {}
        for area in sorted(areas, key=lambda item: item.area_id):
            if area.area_id in by_id:
                msg = f"Duplicate work area id: {area.area_id}"
                raise ValueError(msg)
            by_id[area.area_id] = area
        self._areas: Mapping[int, WorkArea] = MappingProxyType(by_id)

    def __contains__(self, area_id: object) -> bool:
        return area_id in self._areas

    def __iter__(self) -> Iterator[WorkArea]:
        return iter(self._areas.values())

    def __len__(self) -> int:
        return len(self._areas)

    def get(self, area_id: int) -> WorkArea | None:
        return self._areas.get(area_id)

    def ids(self) -> list[int]:
        return list(self._areas.keys())

    def site_center(self) -> PlanePoint:
        if not self._areas:
            return PlanePoint(0.0, 0.0)
        min_x = min(area.center.x - area.size.width / 2 for area in self)
        max_x = max(area.center.x + area.size.width / 2 for area in self)
        min_z = min(area.center.z - area.size.depth / 2 for area in self)
        max_z = max(area.center.z + area.size.depth / 2 for area in self)
        return PlanePoint((min_x + max_x) / 2.0, (min_z + max_z) / 2.0)


def area_outline(area: WorkArea) -> tuple[Point3, Point3, Point3, Point3]:
    hx = area.size.width / 2
    hz = area.size.depth / 2
    cx, cz = area.center.x, area.center.z
    return (
        Point3(cx - hx, 0.0, cz - hz),
        Point3(cx + hx, 0.0, cz - hz),
        Point3(cx + hx, 0.0, cz + hz),
        Point3(cx - hx, 0.0, cz + hz),
    )


def area_label_anchor(area: WorkArea, inset: float = 0.5, lift: float = 2.0) -> Point3:
    return Point3(
        area.center.x - area.size.width / 2 + inset,
        lift,
        area.center.z - area.size.depth / 2 + inset,
    )
