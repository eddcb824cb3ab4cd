from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from typing import Dict, List, Optional

from domain.models import (
    OTHER_LABEL,
    UNKNOWN_NAME,
    AggregationOptions,
    Block,
    ChartSeries,
    ChartSlice,
    LabelMode,
    NamedDuration,
)

SECONDS_PER_HOUR = 3600.0
SHORT_LABEL_LENGTH = 12
ELLIPSIS = "…"

_PARENTHESIZED_RE = re.compile(r"\([^)]*\)")
_WHITESPACE_RE = re.compile(r"\s+")


def display_name(name: str) -> str:
    return UNKNOWN_NAME if not name or not name.strip() else name


def shorten_label(name: str, limit: int = SHORT_LABEL_LENGTH) -> str:
    if not name or not name.strip():
        return UNKNOWN_NAME
    without_parens = _PARENTHESIZED_RE.sub("", name)
    normalized = _WHITESPACE_RE.sub(" ", without_parens).strip()
    if len(normalized) > limit:
        return normalized[:limit] + ELLIPSIS
    return normalized


def block_hours(block: Block, current_time: Optional[datetime] = None) -> float:
    end = block.end if current_time is None else min(block.end, current_time)
    if end <= block.start:
        return 0.0
    return (end - block.start).total_seconds() / SECONDS_PER_HOUR


def aggregate_durations(
    blocks: Iterable[Block],
    work_area: int,
    current_time: Optional[datetime] = None,
) -> List[NamedDuration]:
    """Sum block hours per name inside one work area, largest first.

    Time after ``current_time`` does not count. Names totalling zero are
    dropped; equal totals keep the order in which the names were first seen.
    """
    totals: Dict[str, float] = {}
    for block in blocks:
        if block.work_area != work_area:
            continue
        name = display_name(block.name)
        totals[name] = totals.get(name, 0.0) + block_hours(block, current_time)
    ranked = [NamedDuration(name, hours) for name, hours in totals.items() if hours > 0]
    ranked.sort(key=lambda item: item.hours, reverse=True)
    return ranked


def build_pie_slices(
    items: Sequence[NamedDuration],
    options: AggregationOptions,
    color_of: Callable[[str], str] | None = None,
) -> List[ChartSlice]:
    total = sum(item.hours for item in items)
    if total <= 0:
        return []

    kept: List[NamedDuration] = []
    others = 0.0
    for item in items:
        if item.hours / total < options.small_slice_threshold:
            others += item.hours
        else:
            kept.append(item)
    while len(kept) > options.max_slices:
        others += kept.pop().hours

    entries = [(item.name, item.hours, False) for item in kept]
    if others > 0:
        entries.append((OTHER_LABEL, others, True))

    show_labels = options.label_mode == LabelMode.PERCENT_ONLY
    slices: List[ChartSlice] = []
    for index, (label, value, is_other) in enumerate(entries):
        slices.append(
            ChartSlice(
                label=label,
                value=value,
                percentage=value / total * 100.0,
                is_other=is_other,
                show_label=show_labels and index < options.top_n,
                color=color_of(label) if color_of is not None else None,
            )
        )
    return slices


def build_bar_slices(
    items: Sequence[NamedDuration],
    options: AggregationOptions,
    color_of: Callable[[str], str] | None = None,
) -> List[ChartSlice]:
    total = sum(item.hours for item in items)
    if total <= 0:
        return []
    return [
        ChartSlice(
            label=item.name,
            value=item.hours,
            percentage=item.hours / total * 100.0,
            show_label=options.label_mode == LabelMode.PERCENT_ONLY,
            color=color_of(item.name) if color_of is not None else None,
        )
        for item in items[: options.top_n]
    ]


def build_chart_series(
    blocks: Iterable[Block],
    work_area: int,
    options: AggregationOptions,
    current_time: Optional[datetime] = None,
    color_of: Callable[[str], str] | None = None,
) -> ChartSeries:
    items = aggregate_durations(blocks, work_area, current_time)
    total = sum(item.hours for item in items)
    title = f"Work area {work_area}"
    if options.use_bar_chart:
        slices = build_bar_slices(items, options, color_of)
        return ChartSeries(
            work_area=work_area,
            title=title,
            kind="bar",
            total=total,
            slices=slices,
            axis_labels=[shorten_label(item.label) for item in slices],
        )
    return ChartSeries(
        work_area=work_area,
        title=title,
        kind="pie",
        total=total,
        slices=build_pie_slices(items, options, color_of),
        inner_diameter=options.inner_diameter,
    )
