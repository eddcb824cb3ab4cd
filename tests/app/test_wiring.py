from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.wiring import resolve_current_time
from tests.helpers.block_fixtures import day, make_block


def test_aware_time_is_converted_for_naive_blocks() -> None:
    blocks = [make_block("P", day(1), day(5))]
    at = datetime(2024, 1, 3, 12, tzinfo=timezone(timedelta(hours=5)))

    resolved = resolve_current_time(at, blocks)

    assert resolved.tzinfo is None
    assert resolved == at.astimezone().replace(tzinfo=None)


def test_naive_time_takes_the_blocks_timezone() -> None:
    zone = timezone(timedelta(hours=2))
    blocks = [make_block("P", day(1).replace(tzinfo=zone), day(5).replace(tzinfo=zone))]

    resolved = resolve_current_time(datetime(2024, 1, 3), blocks)

    assert resolved == datetime(2024, 1, 3, tzinfo=zone)
    assert blocks[0].is_live_at(resolved)


def test_matching_conventions_pass_through() -> None:
    at = day(3)
    assert resolve_current_time(at, [make_block("P", day(1), day(5))]) is at
