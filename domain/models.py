from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

UNKNOWN_NAME = "Unknown"
OTHER_LABEL = "Other"


class Block(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(default="", validation_alias=AliasChoices("name", "Name"))
    start: datetime = Field(..., validation_alias=AliasChoices("start", "Start"))
    end: datetime = Field(..., validation_alias=AliasChoices("end", "End"))
    work_area: int = Field(
        ...,
        validation_alias=AliasChoices(
            "work_area", "workplace", "deploy_workplace", "DeployWorkplace"
        ),
    )
    length: float = Field(..., gt=0, validation_alias=AliasChoices("length", "Length"))
    breadth: float = Field(..., gt=0, validation_alias=AliasChoices("breadth", "Breadth"))
    height: float = Field(..., gt=0, validation_alias=AliasChoices("height", "Height"))

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, value: object) -> str:
        return "" if value is None else str(value)

    @model_validator(mode="after")
    def ensure_valid_interval(self) -> Block:
        if (self.start.tzinfo is None) != (self.end.tzinfo is None):
            msg = f"Block '{self.name}' mixes timezone-aware and naive start/end"
            raise ValueError(msg)
        if self.end < self.start:
            msg = f"Block '{self.name}' ends before it starts ({self.end} < {self.start})"
            raise ValueError(msg)
        return self

    @property
    def is_timezone_aware(self) -> bool:
        return self.start.tzinfo is not None

    def is_live_at(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "work_area": self.work_area,
            "length": self.length,
            "breadth": self.breadth,
            "height": self.height,
        }


@dataclass(frozen=True)
class PlanePoint:
    x: float
    z: float


@dataclass(frozen=True)
class Footprint:
    width: float
    depth: float


@dataclass(frozen=True)
class Point3:
    x: float
    y: float
    z: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}


@dataclass(frozen=True)
class WorkArea:
    area_id: int
    center: PlanePoint
    size: Footprint

    @property
    def label(self) -> str:
        return f"Work area {self.area_id}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.area_id,
            "label": self.label,
            "center": {"x": self.center.x, "z": self.center.z},
            "size": {"width": self.size.width, "depth": self.size.depth},
        }


@dataclass(frozen=True)
class ProjectGroup:
    name: str
    work_area: int
    blocks: Tuple[Block, ...]
    start: datetime
    end: datetime

    def overlaps(self, other: ProjectGroup) -> bool:
        return not (other.end <= self.start or other.start >= self.end)


@dataclass(frozen=True)
class Lane:
    index: int
    x: float
    z: float
    projects: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Placement:
    block: Block  # opaque data tag for the renderer
    project: str
    work_area: int
    lane: int
    center: Point3
    width: float
    depth: float
    height: float
    baseline: Optional[float] = None
    color: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "project": self.project,
            "work_area": self.work_area,
            "lane": self.lane,
            "center": self.center.to_dict(),
            "width": self.width,
            "depth": self.depth,
            "height": self.height,
            "color": self.color,
            "data": self.block.to_dict(),
        }
        if self.baseline is not None:
            payload["baseline"] = self.baseline
        return payload


@dataclass(frozen=True)
class AreaFrame:
    work_area: int
    label: str
    corners: Tuple[Point3, Point3, Point3, Point3]
    label_position: Point3

    def to_dict(self) -> dict[str, Any]:
        return {
            "work_area": self.work_area,
            "label": self.label,
            "corners": [corner.to_dict() for corner in self.corners],
            "label_position": self.label_position.to_dict(),
        }


@dataclass(frozen=True)
class TimeTick:
    y: float
    moment: datetime


@dataclass(frozen=True)
class TimeScale:
    side: str  # "left" or "right"
    base: Point3
    height: float
    ticks: List[TimeTick]

    def to_dict(self) -> dict[str, Any]:
        return {
            "side": self.side,
            "base": self.base.to_dict(),
            "height": self.height,
            "ticks": [
                {"y": tick.y, "label": tick.moment.strftime("%Y-%m-%d")} for tick in self.ticks
            ],
        }


@dataclass(frozen=True)
class LayoutPlan:
    frames: List[AreaFrame]
    placements: List[Placement]
    lanes: dict[int, List[Lane]] = field(default_factory=dict)
    scales: List[TimeScale] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "frames": [frame.to_dict() for frame in self.frames],
            "placements": [placement.to_dict() for placement in self.placements],
            "lanes": {
                str(area_id): [
                    {"index": lane.index, "x": lane.x, "z": lane.z, "projects": list(lane.projects)}
                    for lane in lanes
                ]
                for area_id, lanes in self.lanes.items()
            },
            "scales": [scale.to_dict() for scale in self.scales],
        }


class LabelMode(str, Enum):
    PERCENT_ONLY = "percent_only"
    OFF = "off"


class AggregationOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    small_slice_threshold: float = Field(default=0.05, ge=0.0, lt=1.0)
    max_slices: int = Field(default=12, ge=1)
    top_n: int = Field(default=6, ge=0)
    label_mode: LabelMode = LabelMode.PERCENT_ONLY
    use_bar_chart: bool = False
    inner_diameter: float = Field(default=0.55, ge=0.0, lt=1.0)

    @field_validator("label_mode", mode="before")
    @classmethod
    def normalize_label_mode(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower().replace("percentonly", "percent_only")
        return value

    def updated(self, **changes: object) -> AggregationOptions:
        return AggregationOptions.model_validate({**self.model_dump(), **changes})


@dataclass(frozen=True)
class NamedDuration:
    name: str
    hours: float


@dataclass(frozen=True)
class ChartSlice:
    label: str
    value: float
    percentage: float
    is_other: bool = False
    show_label: bool = True
    color: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "value": self.value,
            "percentage": self.percentage,
            "is_other": self.is_other,
            "show_label": self.show_label,
            "color": self.color,
        }


@dataclass(frozen=True)
class ChartSeries:
    work_area: int
    title: str
    kind: str  # "pie" or "bar"
    total: float
    slices: List[ChartSlice]
    axis_labels: List[str] = field(default_factory=list)
    inner_diameter: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "work_area": self.work_area,
            "title": self.title,
            "kind": self.kind,
            "total": self.total,
            "inner_diameter": self.inner_diameter,
            "axis_labels": list(self.axis_labels),
            "slices": [item.to_dict() for item in self.slices],
        }
