"""Upload commands for uploadctl."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any, Optional

import click
from rich.progress import Progress, TaskID

from uploadctl.cli.common import (
    ConsoleNotifier,
    Context,
    ExitCode,
    global_options,
    handle_errors,
    resolve_allowed_types,
    selection_options,
)
from uploadctl.core.output import (
    OutputFormat,
    create_progress,
    format_file_size,
    format_speed,
    print_error,
    print_output,
)
from uploadctl.models.entry import FileEntry
from uploadctl.models.progress import UploadSummary
from uploadctl.models.source import FileSource
from uploadctl.services.orchestrator import ChangeKind, StateChange, UploadOrchestrator
from uploadctl.services.thumbnails import ThumbnailProducer
from uploadctl.uploaders.common import collect_files, normalize_extensions, validate_file

RESULT_COLUMNS = ["name", "category", "size", "status", "progress", "detail"]


def _entry_row(entry: FileEntry) -> dict[str, Any]:
    return {
        "name": entry.name,
        "category": entry.category.value,
        "size": format_file_size(entry.size),
        "status": entry.status.value,
        "progress": f"{entry.progress}%",
        "detail": entry.error or entry.remote_url or "",
    }


# =============================================================================
# Progress Display
# =============================================================================


class ProgressDisplay:
    """Mirrors orchestrator state changes onto Rich progress bars."""

    def __init__(self, progress: Progress, orchestrator: UploadOrchestrator) -> None:
        self.progress = progress
        self.orchestrator = orchestrator
        self._tasks: dict[str, TaskID] = {}
        self._overall = progress.add_task("[bold]Total", total=100, detail="")

    def __call__(self, change: StateChange) -> None:
        if change.entry_id and change.kind == ChangeKind.ENTRY_UPDATED:
            self._update_entry(change.entry_id)

        snap = change.snapshot
        if snap.total_files:
            self.progress.update(
                self._overall,
                completed=snap.percent,
                detail=(
                    f"{snap.completed_files}/{snap.total_files} files, "
                    f"{format_speed(snap.throughput)}, {snap.eta}"
                ),
            )

    def _update_entry(self, entry_id: str) -> None:
        entry = self.orchestrator.get_entry(entry_id)
        if entry is None:
            return

        task = self._tasks.get(entry_id)
        if task is None:
            task = self.progress.add_task(entry.name, total=100, detail="")
            self._tasks[entry_id] = task

        if entry.error:
            detail = f"[red]{entry.error}[/red]"
        else:
            detail = format_file_size(entry.size)
        self.progress.update(task, completed=entry.progress, detail=detail)


async def _run_upload(
    ctx: Context,
    orchestrator: UploadOrchestrator,
    sources: list[FileSource],
    allowed: list[str],
) -> Optional[UploadSummary]:
    try:
        added = await orchestrator.add_files(sources, allowed)
        if not added:
            return None

        if ctx.quiet or ctx.output_format == OutputFormat.JSON:
            return await orchestrator.start_upload()

        with create_progress() as progress:
            display = ProgressDisplay(progress, orchestrator)
            orchestrator.add_listener(display)
            try:
                return await orchestrator.start_upload()
            finally:
                orchestrator.remove_listener(display)
    finally:
        await orchestrator.aclose()


# =============================================================================
# Commands
# =============================================================================


@click.command("upload")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@selection_options
@click.option(
    "--concurrency",
    "-c",
    type=click.IntRange(min=1),
    default=None,
    help="Max simultaneous transfers (default: all at once)",
)
@click.option(
    "--fail-rate",
    type=click.FloatRange(0.0, 1.0),
    default=0.0,
    help="Per-step failure probability (simulated backend only)",
)
@global_options
@handle_errors
def upload(
    ctx: Context,
    paths: tuple[Path, ...],
    types: tuple[str, ...],
    filter_name: Optional[str],
    recursive: bool,
    concurrency: Optional[int],
    fail_rate: float,
) -> None:
    """Upload files through the active profile's backend.

    Example:
        uploadctl upload photos/ --filter images
        uploadctl upload report.pdf notes.txt -t pdf -t txt --concurrency 2
    """
    config = ctx.get_config()
    allowed = resolve_allowed_types(ctx, types, filter_name)
    sources = [FileSource.from_path(p) for p in collect_files(list(paths), recursive=recursive)]
    backend = ctx.get_backend(fail_rate=fail_rate)

    orchestrator = UploadOrchestrator(
        backend,
        notifier=ConsoleNotifier(quiet=ctx.quiet or ctx.output_format == OutputFormat.JSON),
        thumbnails=ThumbnailProducer(config.thumbnail_size),
        max_concurrency=concurrency or config.max_concurrency,
        observation_delay=config.observation_delay,
        max_file_size=config.max_file_size,
    )

    summary = asyncio.run(_run_upload(ctx, orchestrator, sources, allowed))
    if summary is None:
        print_error("No files to upload")
        sys.exit(ExitCode.GENERAL_ERROR)

    entries = orchestrator.entries
    if ctx.output_format == OutputFormat.JSON:
        print_output(
            {
                "success": summary.success,
                "total": summary.total,
                "succeeded": summary.succeeded,
                "failed": summary.failed,
                "success_rate": round(summary.success_rate, 1),
                "duration": round(summary.duration, 2),
                "total_size": summary.total_size,
                "throughput_mbps": round(summary.throughput_mbps, 2),
                "errors": summary.errors,
                "files": [e.to_dict(exclude={"thumbnail"}) for e in entries],
            },
            format=OutputFormat.JSON,
        )
    else:
        print_output(
            [_entry_row(e) for e in entries],
            format=ctx.output_format,
            columns=RESULT_COLUMNS,
            column_labels={"detail": "URL / Error"},
            title="Upload Results",
            quiet=ctx.quiet,
        )

    if not summary.success:
        sys.exit(ExitCode.GENERAL_ERROR)


@click.command("check")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@selection_options
@global_options
@handle_errors
def check(
    ctx: Context,
    paths: tuple[Path, ...],
    types: tuple[str, ...],
    filter_name: Optional[str],
    recursive: bool,
) -> None:
    """Validate files without uploading them.

    Exits with status 1 when any file would be rejected.

    Example:
        uploadctl check downloads/ --filter documents
    """
    config = ctx.get_config()
    allowed = normalize_extensions(resolve_allowed_types(ctx, types, filter_name))

    rows = []
    for path in collect_files(list(paths), recursive=recursive):
        result = validate_file(FileSource.from_path(path), allowed, max_size=config.max_file_size)
        rows.append(
            {
                "name": result.source.name,
                "size": format_file_size(result.source.size),
                "type": result.source.mime_type,
                "accepted": result.accepted,
                "reason": result.reason,
            }
        )

    print_output(
        rows,
        format=ctx.output_format,
        columns=["name", "size", "type", "accepted", "reason"],
        title="Validation",
        quiet=ctx.quiet,
    )

    if any(not row["accepted"] for row in rows):
        sys.exit(ExitCode.GENERAL_ERROR)


@click.command("filters")
@global_options
@handle_errors
def filters(ctx: Context) -> None:
    """List file type filter presets."""
    config = ctx.get_config()
    rows = [
        {"name": name, "extensions": ", ".join(exts) if exts else "(any)"}
        for name, exts in config.filters.items()
    ]
    if ctx.output_format == OutputFormat.JSON:
        print_output(config.filters, format=OutputFormat.JSON)
        return
    print_output(
        rows,
        format=ctx.output_format,
        columns=["name", "extensions"],
        quiet=ctx.quiet,
    )
