from __future__ import annotations

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from app.config import AppSettings, ChartSettings, LayoutSettings
from domain.models import AggregationOptions, Block
from domain.work_areas import WorkAreaRegistry
from tests.helpers.block_fixtures import day, make_block, sample_blocks_path


def _clear_blockviz_env() -> None:
    for key in list(os.environ):
        if key.startswith("BLOCKVIZ_"):
            os.environ.pop(key, None)


_clear_blockviz_env()


@pytest.fixture(autouse=True)
def clear_blockviz_env() -> Generator[None, None, None]:
    _clear_blockviz_env()
    yield
    _clear_blockviz_env()


@pytest.fixture
def registry() -> WorkAreaRegistry:
    return WorkAreaRegistry()


@pytest.fixture
def sample_path() -> Path:
    return sample_blocks_path()


@pytest.fixture
def overlapping_blocks() -> list[Block]:
    return [
        make_block("X", day(1), day(10)),
        make_block("Y", day(5), day(15)),
        make_block("Z", day(11), day(20)),
    ]


@pytest.fixture
def app_settings(sample_path: Path) -> AppSettings:
    return AppSettings(
        title="Test Viewer",
        data_path=sample_path,
        layout=LayoutSettings(),
        charts=ChartSettings(options=AggregationOptions(), debounce_seconds=0.01),
    )


@pytest.fixture
def app_settings_factory(app_settings: AppSettings) -> Callable[..., AppSettings]:
    def _factory(**overrides: object) -> AppSettings:
        return app_settings.model_copy(update=overrides)

    return _factory
