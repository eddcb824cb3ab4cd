from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from typing import List, Optional

from adapters.colors.palette import PassColorCache
from app.debounce import Debouncer
from domain.models import AggregationOptions, Block, ChartSeries
from domain.ports.colors import ColorLookup
from domain.services.chart_aggregation import build_chart_series
from domain.work_areas import WorkAreaRegistry

SeriesListener = Callable[[List[ChartSeries]], None]


class ChartBoard:
    """Chart series for every work area, rebuilt whenever an input changes.

    Inputs are replaced, never mutated in place; each change drops the
    cached series so the next read reflects it. Listeners are notified
    through a debouncer so bursts of changes cause a single rebuild.
    """

    def __init__(
        self,
        registry: WorkAreaRegistry,
        colors: ColorLookup,
        options: AggregationOptions | None = None,
        debounce_seconds: float = 0.1,
    ) -> None:
        self.registry = registry
        self.colors = colors
        self._options = options or AggregationOptions()
        self._blocks: tuple[Block, ...] = ()
        self._current_time: Optional[datetime] = None
        self._cache: Optional[List[ChartSeries]] = None
        self._lock = threading.RLock()
        self._listeners: list[SeriesListener] = []
        self._debouncer = Debouncer(debounce_seconds, self._publish)

    @property
    def options(self) -> AggregationOptions:
        return self._options

    @property
    def blocks(self) -> tuple[Block, ...]:
        return self._blocks

    @property
    def current_time(self) -> Optional[datetime]:
        return self._current_time

    def subscribe(self, listener: SeriesListener) -> None:
        self._listeners.append(listener)

    def set_blocks(self, blocks: Iterable[Block] | None) -> None:
        with self._lock:
            self._blocks = tuple(blocks or ())
            self._invalidate()

    def set_current_time(self, current_time: Optional[datetime]) -> None:
        with self._lock:
            if current_time == self._current_time:
                return
            self._current_time = current_time
            self._invalidate()

    def update_options(self, **changes: object) -> AggregationOptions:
        with self._lock:
            updated = self._options.updated(**changes)
            if updated != self._options:
                self._options = updated
                self._invalidate()
            return self._options

    def series(self) -> List[ChartSeries]:
        with self._lock:
            if self._cache is None:
                self._cache = self._build()
            return list(self._cache)

    def series_for(self, work_area: int) -> ChartSeries:
        """Ids outside the registry are aggregated on demand and not cached."""
        for item in self.series():
            if item.work_area == work_area:
                return item
        with self._lock:
            return build_chart_series(
                self._blocks,
                work_area,
                self._options,
                current_time=self._current_time,
                color_of=PassColorCache(self.colors),
            )

    def flush(self) -> None:
        self._debouncer.flush()

    def close(self) -> None:
        self._debouncer.cancel()

    def _build(self) -> List[ChartSeries]:
        color_of = PassColorCache(self.colors)
        return [
            build_chart_series(
                self._blocks,
                area.area_id,
                self._options,
                current_time=self._current_time,
                color_of=color_of,
            )
            for area in self.registry
        ]

    def _invalidate(self) -> None:
        self._cache = None
        if self._listeners:
            self._debouncer.trigger()

    def _publish(self) -> None:
        snapshot = self.series()
        for listener in list(self._listeners):
            listener(snapshot)


def build_series_once(
    blocks: Sequence[Block],
    registry: WorkAreaRegistry,
    colors: ColorLookup,
    options: AggregationOptions,
    current_time: Optional[datetime] = None,
) -> List[ChartSeries]:
    board = ChartBoard(registry, colors, options)
    board.set_blocks(blocks)
    board.set_current_time(current_time)
    return board.series()
