from __future__ import annotations

from collections import Counter
from datetime import timedelta

import pytest

from domain.models import AggregationOptions, Block, LabelMode, NamedDuration
from domain.services.chart_aggregation import (
    aggregate_durations,
    build_bar_slices,
    build_chart_series,
    build_pie_slices,
    shorten_label,
)
from tests.helpers.block_fixtures import day, make_block


def _hours_block(name: str, hours: float, work_area: int = 1, offset_days: int = 0) -> Block:
    start = day(1) + timedelta(days=offset_days)
    return make_block(name, start, start + timedelta(hours=hours), work_area=work_area)


def _items(**values: float) -> list[NamedDuration]:
    return [NamedDuration(name, hours) for name, hours in values.items()]


def test_small_slices_fold_into_other() -> None:
    blocks = [
        _hours_block("A", 50),
        _hours_block("B", 30),
        _hours_block("C", 15),
        _hours_block("D", 5),
    ]
    options = AggregationOptions(small_slice_threshold=0.1, max_slices=10)

    series = build_chart_series(blocks, 1, options)

    assert series.kind == "pie"
    assert [(s.label, s.value, s.is_other) for s in series.slices] == [
        ("A", pytest.approx(50), False),
        ("B", pytest.approx(30), False),
        ("C", pytest.approx(15), False),
        ("Other", pytest.approx(5), True),
    ]
    assert [s.percentage for s in series.slices] == pytest.approx([50, 30, 15, 5])
    assert series.total == pytest.approx(100)
    assert series.inner_diameter == pytest.approx(0.55)


def test_block_starting_after_current_time_contributes_nothing() -> None:
    blocks = [_hours_block("late", 10, offset_days=5), _hours_block("early", 10)]

    ranked = aggregate_durations(blocks, 1, current_time=day(3))

    assert ranked == [NamedDuration("early", 10.0)]


def test_durations_are_clamped_to_current_time() -> None:
    blocks = [make_block("A", day(1), day(3)), make_block("A", day(2), day(4))]

    ranked = aggregate_durations(blocks, 1, current_time=day(2, hour=12))

    assert ranked == [NamedDuration("A", pytest.approx(36 + 12))]
    assert aggregate_durations(blocks, 1)[0].hours == pytest.approx(96)


def test_blank_names_are_reported_as_unknown() -> None:
    blocks = [_hours_block("", 4), _hours_block("   ", 6), _hours_block("A", 1)]

    ranked = aggregate_durations(blocks, 1)

    assert ranked == [NamedDuration("Unknown", pytest.approx(10)), NamedDuration("A", 1.0)]


def test_ranking_is_stable_for_equal_totals() -> None:
    blocks = [_hours_block("B", 5), _hours_block("A", 5), _hours_block("C", 9)]

    assert [item.name for item in aggregate_durations(blocks, 1)] == ["C", "B", "A"]


def test_other_work_areas_and_zero_totals_are_ignored() -> None:
    blocks = [
        _hours_block("A", 5, work_area=1),
        _hours_block("B", 5, work_area=2),
        make_block("C", day(1), day(1)),
    ]

    assert [item.name for item in aggregate_durations(blocks, 1)] == ["A"]
    assert aggregate_durations(blocks, 99) == []


def test_max_slices_folds_smallest_remaining_into_other() -> None:
    options = AggregationOptions(small_slice_threshold=0.0, max_slices=2)

    slices = build_pie_slices(_items(A=40, B=30, C=20, D=10), options)

    assert [(s.label, s.value) for s in slices] == [("A", 40), ("B", 30), ("Other", 30)]
    assert sum(s.percentage for s in slices) == pytest.approx(100)


def test_threshold_and_max_slices_combine() -> None:
    options = AggregationOptions(small_slice_threshold=0.05, max_slices=3)

    slices = build_pie_slices(_items(A=30, B=25, C=20, D=15, E=8, F=2), options)

    assert [s.label for s in slices] == ["A", "B", "C", "Other"]
    assert slices[-1].value == pytest.approx(25)
    assert sum(s.percentage for s in slices) == pytest.approx(100)


def test_no_other_slice_when_nothing_is_folded() -> None:
    slices = build_pie_slices(_items(A=60, B=40), AggregationOptions())

    assert [s.label for s in slices] == ["A", "B"]
    assert not any(s.is_other for s in slices)


def test_label_visibility_follows_top_n_and_label_mode() -> None:
    items = _items(A=40, B=30, C=20, D=10)

    shown = build_pie_slices(items, AggregationOptions(top_n=2, small_slice_threshold=0.0))
    hidden = build_pie_slices(
        items, AggregationOptions(top_n=2, small_slice_threshold=0.0, label_mode=LabelMode.OFF)
    )

    assert [s.show_label for s in shown] == [True, True, False, False]
    assert [s.show_label for s in hidden] == [False] * 4
    assert [s.value for s in shown] == [s.value for s in hidden]


def test_bar_variant_takes_top_n_without_folding() -> None:
    blocks = [
        _hours_block("Alpha (main) project line", 50),
        _hours_block("B", 30),
        _hours_block("C", 15),
        _hours_block("D", 5),
    ]
    options = AggregationOptions(use_bar_chart=True, top_n=2, small_slice_threshold=0.5)

    series = build_chart_series(blocks, 1, options)

    assert series.kind == "bar"
    assert [s.label for s in series.slices] == ["Alpha (main) project line", "B"]
    assert [s.percentage for s in series.slices] == pytest.approx([50, 30])
    assert series.axis_labels == ["Alpha projec…", "B"]
    assert not any(s.is_other for s in series.slices)


def test_bar_variant_with_zero_top_n_is_empty() -> None:
    assert build_bar_slices(_items(A=1), AggregationOptions(top_n=0)) == []


def test_empty_and_degenerate_inputs_give_empty_slices() -> None:
    options = AggregationOptions()

    assert build_pie_slices([], options) == []
    assert build_bar_slices([], options) == []
    series = build_chart_series([], 1, options)
    assert series.slices == []
    assert series.total == 0
    assert series.title == "Work area 1"


def test_percentages_sum_to_one_hundred() -> None:
    values = {f"P{idx}": float(idx * idx + 1) for idx in range(1, 30)}
    options = AggregationOptions(small_slice_threshold=0.02, max_slices=7)

    slices = build_pie_slices(_items(**values), options)

    assert len(slices) == 8
    assert sum(s.percentage for s in slices) == pytest.approx(100, rel=1e-6)


def test_colors_are_looked_up_once_per_label() -> None:
    calls: Counter[str] = Counter()

    def color_of(name: str) -> str:
        calls[name] += 1
        return "#000000"

    blocks = [_hours_block("A", 5), _hours_block("A", 5), _hours_block("B", 1)]
    series = build_chart_series(
        blocks, 1, AggregationOptions(small_slice_threshold=0.2), color_of=color_of
    )

    assert [s.color for s in series.slices] == ["#000000", "#000000"]
    assert calls == Counter({"A": 1, "Other": 1})


def test_aggregation_is_idempotent() -> None:
    blocks = [_hours_block("A", 5), _hours_block("B", 3), _hours_block("C", 0.1)]
    options = AggregationOptions()

    assert build_chart_series(blocks, 1, options, day(2)) == build_chart_series(
        blocks, 1, options, day(2)
    )


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Deck (A)", "Deck"),
        ("Block (temp)   Name  Long Suffix", "Block Name L…"),
        ("  spaced\tout  ", "spaced out"),
        ("exactly12chr", "exactly12chr"),
        ("", "Unknown"),
        ("   ", "Unknown"),
    ],
)
def test_shorten_label(name: str, expected: str) -> None:
    assert shorten_label(name) == expected
