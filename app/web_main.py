from __future__ import annotations

import logging
import threading
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, cast

import orjson
from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import ORJSONResponse

from app.chart_board import ChartBoard
from app.config import AppSettings, load_settings
from app.wiring import (
    build_chart_board,
    build_layout_engine,
    load_initial_blocks,
    resolve_current_time,
)
from domain.models import Block, LabelMode
from domain.ports.layout import LayoutEngine
from domain.services.block_intake import BlockWarning, ingest_block_records
from domain.work_areas import WorkAreaRegistry

logger = logging.getLogger(__name__)


@dataclass
class ViewerContext:
    settings: AppSettings
    registry: WorkAreaRegistry
    snapshot: LayoutEngine
    schedule: LayoutEngine
    board: ChartBoard
    warnings: List[BlockWarning] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def replace_blocks(self, blocks: List[Block], warnings: List[BlockWarning]) -> None:
        with self.lock:
            self.board.set_blocks(blocks)
            self.warnings = list(warnings)

    def blocks(self) -> List[Block]:
        return list(self.board.blocks)


def create_app(settings: AppSettings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> Any:
        if settings.data_path is not None:
            try:
                intake = load_initial_blocks(settings)
            except (FileNotFoundError, orjson.JSONDecodeError):
                logger.exception("Initial block data could not be loaded.")
            else:
                context.replace_blocks(intake.blocks, intake.warnings)
                logger.info(
                    "Loaded %d block(s) from %s (%d skipped)",
                    len(intake.blocks),
                    settings.data_path,
                    len(intake.warnings),
                )
        yield
        context.board.close()

    app = FastAPI(title=settings.title, lifespan=lifespan)

    context = ViewerContext(
        settings=settings,
        registry=settings.build_registry(),
        snapshot=build_layout_engine(settings, "snapshot"),
        schedule=build_layout_engine(settings, "schedule"),
        board=build_chart_board(settings),
    )
    app.state.context = context

    @app.get("/api/health")
    def api_health(context: ViewerContext = Depends(get_context)) -> ORJSONResponse:
        return ORJSONResponse(
            {
                "status": "ok",
                "blocks": len(context.board.blocks),
                "warnings": len(context.warnings),
            }
        )

    @app.get("/api/work-areas")
    def api_work_areas(context: ViewerContext = Depends(get_context)) -> ORJSONResponse:
        center = context.registry.site_center()
        return ORJSONResponse(
            {
                "site_center": {"x": center.x, "z": center.z},
                "work_areas": [area.to_dict() for area in context.registry],
            }
        )

    @app.put("/api/blocks")
    def api_replace_blocks(
        payload: Any = Body(...),
        context: ViewerContext = Depends(get_context),
    ) -> ORJSONResponse:
        records = payload.get("blocks") if isinstance(payload, dict) else payload
        if not isinstance(records, list):
            raise HTTPException(status_code=422, detail="Expected a list of blocks")
        intake = ingest_block_records(records)
        context.replace_blocks(intake.blocks, intake.warnings)
        return ORJSONResponse(
            {
                "accepted": len(intake.blocks),
                "warnings": [warning.to_dict() for warning in intake.warnings],
            }
        )

    @app.get("/api/blocks/warnings")
    def api_block_warnings(context: ViewerContext = Depends(get_context)) -> ORJSONResponse:
        return ORJSONResponse([warning.to_dict() for warning in context.warnings])

    @app.get("/api/layout/snapshot")
    def api_snapshot_layout(
        at: datetime | None = Query(default=None),
        context: ViewerContext = Depends(get_context),
    ) -> ORJSONResponse:
        blocks = context.blocks()
        plan = context.snapshot.build_plan(blocks, resolve_current_time(at, blocks))
        return ORJSONResponse(plan.to_dict())

    @app.get("/api/layout/schedule")
    def api_schedule_layout(
        at: datetime | None = Query(default=None),
        context: ViewerContext = Depends(get_context),
    ) -> ORJSONResponse:
        blocks = context.blocks()
        plan = context.schedule.build_plan(blocks, resolve_current_time(at, blocks))
        return ORJSONResponse(plan.to_dict())

    @app.get("/api/charts")
    def api_charts(
        at: datetime | None = Query(default=None),
        use_bar_chart: bool | None = Query(default=None),
        top_n: int | None = Query(default=None, ge=0),
        max_slices: int | None = Query(default=None, ge=1),
        small_slice_threshold: float | None = Query(default=None, ge=0.0, lt=1.0),
        inner_diameter: float | None = Query(default=None, ge=0.0, lt=1.0),
        label_mode: LabelMode | None = Query(default=None),
        work_area: int | None = Query(default=None),
        context: ViewerContext = Depends(get_context),
    ) -> ORJSONResponse:
        overrides = {
            key: value
            for key, value in {
                "use_bar_chart": use_bar_chart,
                "top_n": top_n,
                "max_slices": max_slices,
                "small_slice_threshold": small_slice_threshold,
                "inner_diameter": inner_diameter,
                "label_mode": label_mode,
            }.items()
            if value is not None
        }
        board = context.board
        with context.lock:
            board.update_options(**{**context.settings.charts.options.model_dump(), **overrides})
            board.set_current_time(
                resolve_current_time(at, board.blocks) if at is not None else None
            )
            if work_area is not None:
                return ORJSONResponse(board.series_for(work_area).to_dict())
            return ORJSONResponse([item.to_dict() for item in board.series()])

    return app


def get_context(request: Request) -> ViewerContext:
    return cast(ViewerContext, request.app.state.context)


def run() -> None:
    import uvicorn

    uvicorn.run("app.web_main:app", host="0.0.0.0", port=8080)


app = create_app(load_settings())
