from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from domain.models import Block, Point3, TimeScale, TimeTick
from domain.services.spatial_packing import SCALE

RATE_PER_DAY = 0.7
MIN_HEIGHT = 0.1
SECONDS_PER_DAY = 86400.0


@dataclass(frozen=True)
class HeightConfig:
    scale: float = SCALE
    rate_per_day: float = RATE_PER_DAY
    min_height: float = MIN_HEIGHT

    @property
    def units_per_day(self) -> float:
        return self.rate_per_day * self.scale


@dataclass(frozen=True)
class TimeAxis:
    start: datetime
    end: datetime

    @property
    def total_days(self) -> float:
        return _days(self.end - self.start)


def compute_time_axis(blocks: Iterable[Block]) -> Optional[TimeAxis]:
    """Shared time axis over every block, regardless of work area."""
    items = list(blocks)
    if not items:
        return None
    return TimeAxis(
        start=min(block.start for block in items),
        end=max(block.end for block in items),
    )


def map_height(
    block: Block,
    current_time: datetime,
    global_start: datetime,
    config: HeightConfig | None = None,
) -> tuple[float, float]:
    """Return ``(baseline, height)`` for the cumulative view.

    Height grows with the time elapsed since the block started, capped at
    its end and never below ``min_height``; the baseline is how far the
    block's start lies after ``global_start``.
    """
    config = config or HeightConfig()
    effective_end = min(current_time, block.end)
    elapsed_days = max(_days(effective_end - block.start), 0.0)
    height = max(elapsed_days * config.units_per_day, config.min_height)
    baseline = max(_days(block.start - global_start) * config.units_per_day, 0.0)
    return baseline, height


def build_time_scale(
    axis: TimeAxis,
    side: str,
    x: float,
    z: float = 0.0,
    config: HeightConfig | None = None,
    divisions: int = 10,
) -> TimeScale:
    config = config or HeightConfig()
    total_days = axis.total_days
    interval = max(1.0, total_days / divisions)
    ticks: List[TimeTick] = []
    step = 0
    while step * interval <= total_days:
        offset = step * interval
        ticks.append(
            TimeTick(y=offset * config.units_per_day, moment=axis.start + timedelta(days=offset))
        )
        step += 1
    return TimeScale(
        side=side,
        base=Point3(x, 0.0, z),
        height=total_days * config.units_per_day,
        ticks=ticks,
    )


def _days(delta: timedelta) -> float:
    return delta.total_seconds() / SECONDS_PER_DAY
