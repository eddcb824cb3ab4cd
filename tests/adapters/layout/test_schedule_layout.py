from __future__ import annotations

import pytest

from adapters.layout.schedule import ScheduleLayoutEngine
from adapters.layout.snapshot import LayoutConfig
from tests.helpers.block_fixtures import day, make_block

UNITS_PER_DAY = 0.7 * 0.15


def test_empty_dataset_yields_empty_layout() -> None:
    plan = ScheduleLayoutEngine().build_plan([], day(1))

    assert plan.placements == []
    assert plan.scales == []
    assert len(plan.frames) == 6


def test_each_project_gets_its_own_column_even_when_overlapping() -> None:
    blocks = [
        make_block("P1", day(1), day(10)),
        make_block("P2", day(2), day(10)),
    ]

    plan = ScheduleLayoutEngine().build_plan(blocks, day(5))

    lanes = plan.lanes[1]
    assert [lane.projects for lane in lanes] == [("P1",), ("P2",)]
    assert [lane.x for lane in lanes] == pytest.approx([-33.15, -26.85])
    assert {p.center.z for p in plan.placements} == {-40.0}
    p1, p2 = plan.placements
    assert p1.center.x == pytest.approx(-33.15 + 0.105)
    assert p2.center.x == pytest.approx(-26.85 + 0.105)


def test_heights_share_a_global_time_axis() -> None:
    blocks = [
        make_block("P1", day(3), day(13), work_area=1),
        make_block("P2", day(1), day(2), work_area=2),
    ]

    plan = ScheduleLayoutEngine().build_plan(blocks, day(8))

    by_project = {p.project: p for p in plan.placements}
    p1 = by_project["P1"]
    assert p1.baseline == pytest.approx(2 * UNITS_PER_DAY)
    assert p1.height == pytest.approx(5 * UNITS_PER_DAY)
    assert p1.center.y == pytest.approx(p1.baseline + p1.height / 2)
    p2 = by_project["P2"]
    assert p2.baseline == 0.0
    assert p2.height == pytest.approx(1 * UNITS_PER_DAY)


def test_future_blocks_show_a_minimum_sliver() -> None:
    blocks = [make_block("P1", day(1), day(3)), make_block("P2", day(10), day(12))]

    plan = ScheduleLayoutEngine().build_plan(blocks, day(2))

    future = next(p for p in plan.placements if p.project == "P2")
    assert future.height == pytest.approx(0.1)
    assert future.baseline == pytest.approx(9 * UNITS_PER_DAY)


def test_unknown_work_areas_still_extend_the_time_axis() -> None:
    blocks = [
        make_block("P1", day(5), day(9), work_area=1),
        make_block("lost", day(1), day(20), work_area=42),
    ]

    plan = ScheduleLayoutEngine().build_plan(blocks, day(6))

    assert [p.project for p in plan.placements] == ["P1"]
    assert plan.placements[0].baseline == pytest.approx(4 * UNITS_PER_DAY)
    assert plan.scales[0].height == pytest.approx(19 * UNITS_PER_DAY)


def test_rulers_and_colors() -> None:
    engine = ScheduleLayoutEngine(config=LayoutConfig(ruler_left_x=-10.0, ruler_right_x=10.0))
    blocks = [make_block("P3 Bow", day(1), day(5)), make_block("Keel", day(1), day(5))]

    plan = engine.build_plan(blocks, day(3))

    assert [(scale.side, scale.base.x) for scale in plan.scales] == [
        ("left", -10.0),
        ("right", 10.0),
    ]
    colors = {p.project: p.color for p in plan.placements}
    assert colors == {"P3 Bow": "#FFFF00", "Keel": "#FF0000"}
    assert plan.frames[0].label_position.y == pytest.approx(2.2)
    assert "baseline" in plan.to_dict()["placements"][0]
