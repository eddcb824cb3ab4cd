from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from adapters.layout.snapshot import LayoutConfig
from domain.models import AggregationOptions, Footprint, PlanePoint, WorkArea
from domain.services.cumulative_height import MIN_HEIGHT, RATE_PER_DAY
from domain.services.spatial_packing import GAP_RATIO, SCALE
from domain.services.track_assignment import DEFAULT_LANE_COUNT
from domain.work_areas import DEFAULT_WORK_AREAS, WorkAreaRegistry

DEFAULT_CONFIG_PATH = Path("config/blockviz.yaml")


class LayoutSettings(BaseModel):
    scale: float = Field(default=SCALE, gt=0)
    gap_ratio: float = Field(default=GAP_RATIO, ge=0)
    rate_per_day: float = Field(default=RATE_PER_DAY, gt=0)
    min_height: float = Field(default=MIN_HEIGHT, ge=0)
    lane_count: int = Field(default=DEFAULT_LANE_COUNT, ge=1)
    overflow_lane: int | None = None
    ruler_left_x: float = -90.0
    ruler_right_x: float = 50.0

    @model_validator(mode="after")
    def ensure_overflow_lane_in_range(self) -> LayoutSettings:
        if self.overflow_lane is not None and not 0 <= self.overflow_lane < self.lane_count:
            msg = f"layout.overflow_lane must be within 0..{self.lane_count - 1}"
            raise ValueError(msg)
        return self

    def to_layout_config(self) -> LayoutConfig:
        return LayoutConfig(
            scale=self.scale,
            gap_ratio=self.gap_ratio,
            rate_per_day=self.rate_per_day,
            min_height=self.min_height,
            lane_count=self.lane_count,
            overflow_lane=self.overflow_lane,
            ruler_left_x=self.ruler_left_x,
            ruler_right_x=self.ruler_right_x,
        )


class ChartSettings(BaseModel):
    options: AggregationOptions = AggregationOptions()
    debounce_seconds: float = Field(default=0.1, ge=0)


class WorkAreaSettings(BaseModel):
    id: int
    center_x: float
    center_z: float
    width: float = Field(..., gt=0)
    depth: float = Field(..., gt=0)

    def to_work_area(self) -> WorkArea:
        return WorkArea(self.id, PlanePoint(self.center_x, self.center_z), Footprint(self.width, self.depth))


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="BLOCKVIZ_", env_nested_delimiter="__")

    title: str = "Block Viewer"
    data_path: Path | None = None
    layout: LayoutSettings = LayoutSettings()
    charts: ChartSettings = ChartSettings()
    work_areas: list[WorkAreaSettings] = Field(default_factory=list)

    _yaml_path: ClassVar[Path | None] = None

    @field_validator("work_areas", mode="after")
    @classmethod
    def ensure_unique_work_area_ids(cls, areas: list[WorkAreaSettings]) -> list[WorkAreaSettings]:
        seen: set[int] = set()
        for area in areas:
            if area.id in seen:
                msg = f"Duplicate work area id found: {area.id}"
                raise ValueError(msg)
            seen.add(area.id)
        return areas

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)

    def build_registry(self) -> WorkAreaRegistry:
        if not self.work_areas:
            return WorkAreaRegistry(DEFAULT_WORK_AREAS)
        return WorkAreaRegistry(area.to_work_area() for area in self.work_areas)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv("BLOCKVIZ_CONFIG_PATH")
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
