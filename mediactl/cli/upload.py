"""Upload and resolve commands for mediactl."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional

import click

from mediactl.cli.common import Context, global_options, handle_errors, require_auth
from mediactl.core.client import BackendClient
from mediactl.core.events import EventStream
from mediactl.core.output import (
    OutputFormat,
    UploadProgressView,
    create_progress,
    print_error,
    print_json,
    print_output,
    print_success,
    print_warning,
)
from mediactl.core.validation import validate_max_files, validate_parent_id, validate_workers
from mediactl.models.progress import BatchResult
from mediactl.models.upload import FileCandidate
from mediactl.services.downloads import DownloadUrlResolver
from mediactl.uploaders.constants import DEFAULT_UPLOAD_WORKERS


# =============================================================================
# Upload
# =============================================================================


@click.command("upload")
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--parent", "parent_id", help="Target folder/container id")
@click.option("--max-files", type=int, default=None, help="Batch capacity (default from profile)")
@click.option(
    "--workers",
    type=int,
    default=DEFAULT_UPLOAD_WORKERS,
    show_default=True,
    help="Files uploaded concurrently",
)
@click.option("--mime-type", default=None, help="Override the detected mime type")
@global_options
@require_auth
@handle_errors
def upload(
    ctx: Context,
    files: tuple[Path, ...],
    parent_id: Optional[str],
    max_files: Optional[int],
    workers: int,
    mime_type: Optional[str],
) -> None:
    """Upload media files.

    Files past the batch capacity are ignored; files of the wrong type or
    over the size limit are skipped with a warning. When the backend cannot
    take a file, it is sent to the fallback store instead.

    Example:
        mediactl upload photo.jpg
        mediactl upload a.png b.png --parent folder-1 --workers 2
    """
    parent_id = validate_parent_id(parent_id)
    workers = validate_workers(workers)
    if max_files is not None:
        max_files = validate_max_files(max_files)

    candidates = [FileCandidate.from_path(path, mime_type) for path in files]
    show_progress = not ctx.quiet and ctx.output_format == OutputFormat.TABLE

    result = asyncio.run(
        _run_upload(
            ctx,
            candidates,
            parent_id,
            max_files=max_files,
            workers=workers,
            show_progress=show_progress,
        )
    )

    _print_result(ctx, result)

    if result.errors or (result.rejections and not result.results):
        raise SystemExit(1)


async def _run_upload(
    ctx: Context,
    candidates: list[FileCandidate],
    parent_id: Optional[str],
    *,
    max_files: Optional[int],
    workers: int,
    show_progress: bool,
) -> BatchResult:
    events = EventStream()
    options: dict[str, Any] = {"events": events, "workers": workers, "success_grace": 0}
    if max_files is not None:
        options["max_files"] = max_files

    async with ctx.get_orchestrator(**options) as orchestrator:
        if not show_progress:
            return await orchestrator.upload(candidates, parent_id)

        with create_progress() as progress:
            events.subscribe(UploadProgressView(progress).handle)
            return await orchestrator.upload(candidates, parent_id)


def _print_result(ctx: Context, result: BatchResult) -> None:
    if ctx.output_format == OutputFormat.JSON and not ctx.quiet:
        print_json(result.to_dict())
        return

    for rejection in result.rejections:
        print_warning(f"Skipped {rejection.message}")
    if result.truncated:
        print_warning(f"Batch is full, ignored {result.truncated} file(s)")

    if ctx.quiet:
        print_output([r.to_dict() for r in result.results], quiet=True)
        return

    completed = [t.to_dict() for t in result.tasks if t.is_complete]
    if completed:
        print_output(
            completed,
            format=ctx.output_format,
            columns=["file", "source", "fileId", "url"],
        )

    for error in result.errors:
        print_error(f"{error.file_name}: {error.message}")

    if result.tasks:
        summary = (
            f"Uploaded {result.succeeded}/{result.total} file(s) "
            f"({result.success_rate:.0f}%) in {result.duration:.1f}s"
        )
        if result.success:
            print_success(summary)
        else:
            print_warning(summary)


# =============================================================================
# Resolve
# =============================================================================


@click.command("resolve")
@click.argument("file_id")
@global_options
@require_auth
@handle_errors
def resolve(ctx: Context, file_id: str) -> None:
    """Print a signed download URL for an uploaded file.

    Example:
        mediactl resolve 3f2a9c
    """
    url = asyncio.run(_resolve(ctx, file_id))

    if ctx.output_format == OutputFormat.JSON and not ctx.quiet:
        print_json({"fileId": file_id, "url": url})
    else:
        click.echo(url)


async def _resolve(ctx: Context, file_id: str) -> str:
    profile = ctx.get_profile()
    async with BackendClient(
        base_url=profile.url,
        identity=ctx.get_identity(),
        timeout=profile.timeout,
        verify_ssl=profile.verify_ssl,
        transport=ctx.transport,
    ) as client:
        return await DownloadUrlResolver(client).resolve(file_id)
