from __future__ import annotations

from domain.services.project_groups import group_projects, split_by_work_area
from tests.helpers.block_fixtures import day, make_block


def test_groups_are_ordered_by_earliest_start() -> None:
    blocks = [
        make_block("late", day(5), day(6)),
        make_block("early", day(3), day(4)),
        make_block("late", day(2), day(9)),
    ]

    groups = group_projects(blocks)

    assert [group.name for group in groups] == ["late", "early"]
    late = groups[0]
    assert late.start == day(2)
    assert late.end == day(9)
    assert [block.start for block in late.blocks] == [day(2), day(5)]


def test_equal_starts_keep_encounter_order() -> None:
    blocks = [
        make_block("B", day(1), day(2)),
        make_block("A", day(1), day(3)),
        make_block("C", day(1), day(4)),
    ]

    assert [group.name for group in group_projects(blocks)] == ["B", "A", "C"]


def test_same_name_in_different_work_areas_forms_separate_groups() -> None:
    blocks = [
        make_block("shared", day(1), day(2), work_area=1),
        make_block("shared", day(3), day(4), work_area=2),
    ]

    groups = group_projects(blocks)

    assert [(group.name, group.work_area) for group in groups] == [("shared", 1), ("shared", 2)]


def test_split_by_work_area_sorts_area_ids() -> None:
    blocks = [
        make_block("a", day(1), day(2), work_area=3),
        make_block("b", day(1), day(2), work_area=1),
        make_block("c", day(1), day(2), work_area=3),
    ]

    buckets = split_by_work_area(blocks)

    assert list(buckets) == [1, 3]
    assert [block.name for block in buckets[3]] == ["a", "c"]
