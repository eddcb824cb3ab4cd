from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from domain.models import Block, LayoutPlan


class LayoutEngine(Protocol):
    def build_plan(self, blocks: Sequence[Block], current_time: datetime) -> LayoutPlan:
        ...
