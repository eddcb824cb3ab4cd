from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

import orjson
import typer
from rich.console import Console
from rich.table import Table

from adapters.filesystem.block_repository import FileSystemBlockRepository
from adapters.filesystem.json_utils import write_json_atomic
from app.chart_board import build_series_once
from app.config import load_settings
from app.wiring import LayoutMode, build_color_lookup, build_layout_engine, resolve_current_time
from domain.models import LabelMode
from domain.services.block_intake import BlockIntake, partition_known_work_areas

app = typer.Typer(no_args_is_help=True)
layout_app = typer.Typer(no_args_is_help=True)
app.add_typer(layout_app, name="layout")
console = Console()

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]


def _load_blocks(input_path: Path) -> BlockIntake:
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)
    try:
        intake = FileSystemBlockRepository().load(input_path)
    except orjson.JSONDecodeError as exc:
        console.print(f"[red]Invalid JSON:[/] {input_path} ({exc})")
        raise typer.Exit(code=1) from exc
    for warning in intake.warnings:
        console.print(f"[yellow]Skipped record #{warning.index}:[/] {warning.message}")
    return intake


def _run_layout(
    mode: LayoutMode,
    input_path: Path,
    at: Optional[datetime],
    output: Optional[Path],
    config: Optional[Path],
) -> None:
    settings = load_settings(config)
    intake = _load_blocks(input_path)
    current_time = resolve_current_time(at, intake.blocks)
    plan = build_layout_engine(settings, mode).build_plan(intake.blocks, current_time)

    table = Table(title=f"{mode.title()} layout at {current_time:%Y-%m-%d %H:%M}")
    for column in ("Area", "Lane", "Project", "Center (x, y, z)", "W x D x H"):
        table.add_column(column)
    for placement in plan.placements:
        center = placement.center
        table.add_row(
            str(placement.work_area),
            str(placement.lane),
            placement.project,
            f"{center.x:.2f}, {center.y:.2f}, {center.z:.2f}",
            f"{placement.width:.2f} x {placement.depth:.2f} x {placement.height:.2f}",
        )
    console.print(table)

    if output is not None:
        write_json_atomic(output, plan.to_dict())
        console.print(f"[green]Wrote[/] {output}")


@layout_app.command("snapshot")
def layout_snapshot(
    input_path: Path = typer.Argument(..., help="JSON file with block records."),
    at: Optional[datetime] = typer.Option(None, formats=DATE_FORMATS, help="Snapshot instant."),
    output: Optional[Path] = typer.Option(None, help="Write the layout plan as JSON."),
    config: Optional[Path] = typer.Option(None, help="YAML settings file."),
) -> None:
    _run_layout("snapshot", input_path, at, output, config)


@layout_app.command("schedule")
def layout_schedule(
    input_path: Path = typer.Argument(..., help="JSON file with block records."),
    at: Optional[datetime] = typer.Option(None, formats=DATE_FORMATS, help="Current instant."),
    output: Optional[Path] = typer.Option(None, help="Write the layout plan as JSON."),
    config: Optional[Path] = typer.Option(None, help="YAML settings file."),
) -> None:
    _run_layout("schedule", input_path, at, output, config)


@app.command("charts")
def charts(
    input_path: Path = typer.Argument(..., help="JSON file with block records."),
    at: Optional[datetime] = typer.Option(None, formats=DATE_FORMATS, help="Current instant."),
    bar: Optional[bool] = typer.Option(None, "--bar/--pie", help="Bar chart instead of pie."),
    top_n: Optional[int] = typer.Option(None, min=0, help="Labelled / listed entries."),
    threshold: Optional[float] = typer.Option(None, min=0.0, max=1.0, help="Small slice share."),
    max_slices: Optional[int] = typer.Option(None, min=1, help="Slices kept before 'Other'."),
    output: Optional[Path] = typer.Option(None, help="Write the series as JSON."),
    config: Optional[Path] = typer.Option(None, help="YAML settings file."),
) -> None:
    settings = load_settings(config)
    intake = _load_blocks(input_path)
    overrides: dict[str, object] = {}
    if bar is not None:
        overrides["use_bar_chart"] = bar
    if top_n is not None:
        overrides["top_n"] = top_n
    if threshold is not None:
        overrides["small_slice_threshold"] = threshold
    if max_slices is not None:
        overrides["max_slices"] = max_slices
    try:
        options = settings.charts.options.updated(**overrides)
    except ValueError as exc:
        console.print(f"[red]Invalid chart options:[/] {exc}")
        raise typer.Exit(code=1) from exc

    current_time = resolve_current_time(at, intake.blocks)
    series = build_series_once(
        intake.blocks, settings.build_registry(), build_color_lookup(), options, current_time
    )
    for item in series:
        table = Table(title=f"{item.title} ({item.kind})")
        table.add_column("Label")
        table.add_column("Hours", justify="right")
        table.add_column("Share", justify="right")
        for chart_slice in item.slices:
            share = f"{chart_slice.percentage:.1f}%"
            if not chart_slice.show_label or options.label_mode == LabelMode.OFF:
                share = f"[dim]{share}[/]"
            table.add_row(chart_slice.label, f"{chart_slice.value:.1f}", share)
        console.print(table)

    if output is not None:
        write_json_atomic(output, [item.to_dict() for item in series])
        console.print(f"[green]Wrote[/] {output}")


@app.command("areas")
def areas(config: Optional[Path] = typer.Option(None, help="YAML settings file.")) -> None:
    registry = load_settings(config).build_registry()
    table = Table(title="Work areas")
    for column in ("Id", "Center (x, z)", "Width x Depth"):
        table.add_column(column)
    for area in registry:
        table.add_row(
            str(area.area_id),
            f"{area.center.x:g}, {area.center.z:g}",
            f"{area.size.width:g} x {area.size.depth:g}",
        )
    console.print(table)


@app.command("validate")
def validate(
    input_path: Path = typer.Argument(..., help="JSON file with block records."),
    output: Optional[Path] = typer.Option(None, help="Write the valid blocks as JSON."),
    config: Optional[Path] = typer.Option(None, help="YAML settings file."),
) -> None:
    intake = _load_blocks(input_path)
    registry = load_settings(config).build_registry()
    _, unplaced = partition_known_work_areas(intake.blocks, registry)
    for block in unplaced:
        console.print(
            f"[yellow]Unknown work area {block.work_area}:[/] "
            f"'{block.name}' is left out of the layouts"
        )
    if output is not None:
        FileSystemBlockRepository().save(intake.blocks, output)
        console.print(f"[green]Wrote[/] {len(intake.blocks)} valid block(s) to {output}")
    if intake.warnings:
        console.print(
            f"[red]Validation failed:[/] {len(intake.warnings)} invalid record(s), "
            f"{len(intake.blocks)} valid"
        )
        raise typer.Exit(code=1)
    console.print(f"[green]Valid block file:[/] {input_path} ({len(intake.blocks)} blocks)")


if __name__ == "__main__":
    app()
