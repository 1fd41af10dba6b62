"""Upload orchestration.

Runs each admitted file through the primary pipeline

    negotiate -> proxy transfer -> confirm -> resolve

and switches to the fallback blob store when negotiation or transfer fail.
A confirm failure is terminal: the backend already holds the bytes, so a
second copy through the fallback store would be unaccounted for. A
resolution failure still completes the file, with a degraded URL.

Files run one at a time in submission order unless ``workers`` > 1, in
which case a semaphore bounds the number of pipelines in flight. One
file's failure never affects another.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mediactl.core.client import BackendClient
from mediactl.core.events import EventStream
from mediactl.core.exceptions import (
    ConfirmError,
    FallbackUploadError,
    ProxyTransferError,
    ResolutionError,
    SessionNegotiationError,
    UploadError,
)
from mediactl.core.logging import AuditLogger, LogContext, get_audit_logger
from mediactl.core.validation import validate_max_files, validate_workers
from mediactl.models.progress import (
    PROGRESS_DONE,
    PROGRESS_SESSION,
    PROGRESS_TRANSFERRED,
    BatchResult,
    EventKind,
    TaskState,
    UploadEvent,
    UploadTask,
)
from mediactl.models.upload import (
    FileCandidate,
    PerFileError,
    UploadResult,
    UploadSource,
)
from mediactl.uploaders.constants import (
    DEFAULT_UPLOAD_WORKERS,
    MAX_FILES,
    SUCCESS_GRACE_SECONDS,
)
from mediactl.uploaders.fallback import FallbackStorageClient
from mediactl.uploaders.proxy import ProxyTransferer

from .admission import Batch, FileAdmissionFilter
from .downloads import DownloadUrlResolver
from .sessions import Confirmer, SessionNegotiator

if TYPE_CHECKING:
    import httpx

    from mediactl.core.config import Profile
    from mediactl.core.identity import Identity

logger = logging.getLogger(__name__)


@dataclass
class UploadHooks:
    """Calls out to the record store after a file completes.

    Hook failures are logged and never change the file's outcome.
    """

    on_result: Callable[[UploadResult], Awaitable[None]] | None = None
    refresh_quota: Callable[[], Awaitable[None]] | None = None


class UploadOrchestrator:
    """Drives batches of files through the upload pipeline."""

    def __init__(
        self,
        negotiator: SessionNegotiator,
        transferer: ProxyTransferer,
        confirmer: Confirmer,
        resolver: DownloadUrlResolver,
        *,
        fallback: FallbackStorageClient | None = None,
        admission: FileAdmissionFilter | None = None,
        events: EventStream | None = None,
        hooks: UploadHooks | None = None,
        max_files: int = MAX_FILES,
        workers: int = DEFAULT_UPLOAD_WORKERS,
        success_grace: float = SUCCESS_GRACE_SECONDS,
        audit: AuditLogger | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            negotiator: Issues upload sessions.
            transferer: Sends bytes through the proxy.
            confirmer: Turns transfers into durable records.
            resolver: Resolves signed download URLs.
            fallback: Direct blob store client; None disables failover.
            admission: Type/size filter.
            events: Stream receiving progress and lifecycle events.
            hooks: Record-creation and quota-refresh callouts.
            max_files: Capacity of batches created by ``upload``.
            workers: Pipelines allowed in flight at once.
            success_grace: Seconds a completed task stays visible.
            audit: Audit logger for outcomes operators may need to act on.
        """
        self.negotiator = negotiator
        self.transferer = transferer
        self.confirmer = confirmer
        self.resolver = resolver
        self.fallback = fallback
        self.admission = admission or FileAdmissionFilter()
        self.events = events
        self.hooks = hooks or UploadHooks()
        self.max_files = validate_max_files(max_files)
        self.workers = validate_workers(workers)
        self.success_grace = success_grace
        self.audit = audit or get_audit_logger()
        self._visible: dict[str, UploadTask] = {}
        self._removals: dict[str, asyncio.TimerHandle] = {}
        self._owned_clients: list[BackendClient] = []

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_profile(
        cls,
        profile: Profile,
        identity: Identity,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        storage_transport: httpx.AsyncBaseTransport | None = None,
        **kwargs: Any,
    ) -> UploadOrchestrator:
        """Build an orchestrator and its HTTP clients from a config profile.

        The clients are owned by the orchestrator and closed by ``aclose``.
        """
        backend = BackendClient(
            base_url=profile.url,
            identity=identity,
            timeout=profile.timeout,
            verify_ssl=profile.verify_ssl,
            transport=transport,
        )
        owned = [backend]

        fallback = None
        if profile.has_fallback:
            storage = BackendClient(
                base_url=profile.storage_url or "",
                identity=identity,
                timeout=profile.timeout,
                verify_ssl=profile.verify_ssl,
                transport=storage_transport,
            )
            owned.append(storage)
            fallback = FallbackStorageClient(
                storage,
                profile.storage_bucket or "",
                category=profile.fallback_category,
            )

        kwargs.setdefault("max_files", profile.max_files)
        orchestrator = cls(
            SessionNegotiator(backend),
            ProxyTransferer(backend),
            Confirmer(backend),
            DownloadUrlResolver(backend),
            fallback=fallback,
            admission=FileAdmissionFilter(profile.allowed_mime_prefix, profile.max_file_size),
            **kwargs,
        )
        orchestrator._owned_clients = owned
        return orchestrator

    async def aclose(self) -> None:
        """Cancel pending task removals and close owned clients."""
        for handle in self._removals.values():
            handle.cancel()
        self._removals.clear()
        for client in self._owned_clients:
            await client.aclose()

    async def __aenter__(self) -> UploadOrchestrator:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    # =========================================================================
    # Public API
    # =========================================================================

    @property
    def tasks(self) -> list[UploadTask]:
        """Tasks currently visible to the caller, in admission order."""
        return list(self._visible.values())

    def new_batch(self, max_files: int | None = None) -> Batch:
        """Create a batch to reuse across several ``upload`` calls."""
        return Batch(max_files=validate_max_files(max_files or self.max_files))

    async def upload(
        self,
        candidates: Sequence[FileCandidate],
        parent_id: str | None = None,
        *,
        batch: Batch | None = None,
        max_files: int | None = None,
    ) -> BatchResult:
        """Upload a submission of files.

        Args:
            candidates: Files in submission order.
            parent_id: Target folder/container id.
            batch: Batch to admit into; a fresh one is created if omitted.
            max_files: Capacity of the fresh batch (ignored with ``batch``).

        Returns:
            Completed results and per-file errors, in submission order.
        """
        start = time.monotonic()
        batch = batch or self.new_batch(max_files)

        admission = self.admission.admit(candidates, batch.remaining)
        batch.reserve(len(admission.admitted))

        pairs = [(self._create_task(c), c) for c in admission.admitted]

        if self.workers == 1:
            for task, candidate in pairs:
                await self._run_task(task, candidate, parent_id, batch)
        else:
            semaphore = asyncio.Semaphore(self.workers)

            async def bounded(task: UploadTask, candidate: FileCandidate) -> None:
                async with semaphore:
                    await self._run_task(task, candidate, parent_id, batch)

            await asyncio.gather(*(bounded(t, c) for t, c in pairs))

        tasks = [task for task, _ in pairs]
        return BatchResult(
            results=[t.result for t in tasks if t.is_complete and t.result is not None],
            errors=[t.error for t in tasks if t.has_errors and t.error is not None],
            rejections=admission.rejections,
            tasks=tasks,
            truncated=admission.truncated,
            duration=time.monotonic() - start,
        )

    # =========================================================================
    # Pipeline
    # =========================================================================

    async def _run_task(
        self,
        task: UploadTask,
        candidate: FileCandidate,
        parent_id: str | None,
        batch: Batch,
    ) -> None:
        with LogContext("upload", logger, task=task.task_id, file=candidate.name) as ctx:
            try:
                result = await self._run_pipeline(task, candidate, parent_id)
            except UploadError as e:
                ctx.error("%s failed: %s", e.kind, e.message)
                self._fail(task, e, batch)
                return

            if result.degraded:
                ctx.warning("download URL unresolved, using %s", result.url or "none")
            await self._complete(task, result, parent_id)

    async def _run_pipeline(
        self,
        task: UploadTask,
        candidate: FileCandidate,
        parent_id: str | None,
    ) -> UploadResult:
        self._set_state(task, TaskState.NEGOTIATING)
        try:
            session = await self.negotiator.negotiate(candidate, parent_id)
            self._advance(task, PROGRESS_SESSION)

            self._set_state(task, TaskState.TRANSFERRING)
            await self.transferer.transfer(
                candidate, session, on_progress=lambda p: self._advance(task, p)
            )
        except (SessionNegotiationError, ProxyTransferError) as e:
            return await self._run_fallback(task, candidate, e)

        self._advance(task, PROGRESS_TRANSFERRED)
        self._set_state(task, TaskState.CONFIRMING)
        try:
            confirmed = await self.confirmer.confirm(candidate, session, parent_id)
        except ConfirmError as e:
            self.audit.log_operation(
                "confirm",
                file_name=candidate.name,
                parent_id=parent_id,
                success=False,
                details={
                    "session_id": e.session_id,
                    "storage_key": e.storage_key,
                    "orphaned_bytes": candidate.byte_size,
                    "error": e.message,
                },
            )
            raise

        self._set_state(task, TaskState.RESOLVING)
        task.source = UploadSource.PRIMARY
        try:
            url = await self.resolver.resolve(confirmed.file_id)
        except ResolutionError as e:
            logger.debug(
                "Uploaded %s as %s but could not resolve a preview URL: %s",
                candidate.name,
                confirmed.file_id,
                e.message,
            )
            return UploadResult(
                file_id=confirmed.file_id,
                url=confirmed.file_url,
                source=UploadSource.PRIMARY,
                degraded=True,
            )

        return UploadResult(file_id=confirmed.file_id, url=url, source=UploadSource.PRIMARY)

    async def _run_fallback(
        self,
        task: UploadTask,
        candidate: FileCandidate,
        primary_error: UploadError,
    ) -> UploadResult:
        self._set_state(task, TaskState.FALLBACK_UPLOADING, message=primary_error.message)
        if self.fallback is None:
            raise FallbackUploadError(
                f"No fallback store configured ({primary_error.message})",
                candidate.name,
                cause=primary_error,
                primary_error=primary_error,
            )

        logger.warning(
            "Primary upload failed for %s, using fallback store: %s",
            candidate.name,
            primary_error.message,
        )
        url = await self.fallback.upload(candidate, primary_error=primary_error)
        task.source = UploadSource.FALLBACK
        self.audit.log_operation(
            "fallback_upload",
            file_name=candidate.name,
            file_id=url,
            details={"primary_error": primary_error.kind},
        )
        # The store URL doubles as the file id
        return UploadResult(file_id=url, url=url, source=UploadSource.FALLBACK)

    # =========================================================================
    # Task Bookkeeping
    # =========================================================================

    def _create_task(self, candidate: FileCandidate) -> UploadTask:
        task = UploadTask(
            task_id=uuid.uuid4().hex[:12],
            file_name=candidate.name,
            byte_size=candidate.byte_size,
            mime_type=candidate.mime_type,
        )
        self._visible[task.task_id] = task
        self._publish(task, EventKind.STATE)
        return task

    def _publish(self, task: UploadTask, kind: EventKind, message: str = "") -> None:
        if self.events is not None and not self.events.closed:
            self.events.publish(UploadEvent.from_task(task, kind, message))

    def _set_state(
        self,
        task: UploadTask,
        state: TaskState,
        kind: EventKind = EventKind.STATE,
        message: str = "",
    ) -> None:
        task.transition(state)
        logger.debug("Task %s -> %s", task.task_id, state.value)
        self._publish(task, kind, message)

    def _advance(self, task: UploadTask, progress: int) -> None:
        if task.advance(progress):
            self._publish(task, EventKind.PROGRESS)

    async def _complete(
        self,
        task: UploadTask,
        result: UploadResult,
        parent_id: str | None,
    ) -> None:
        task.result = result
        self._advance(task, PROGRESS_DONE)
        self._set_state(
            task, TaskState.COMPLETE, EventKind.COMPLETE, f"{task.file_name} uploaded"
        )
        self.audit.log_operation(
            "upload",
            file_name=task.file_name,
            file_id=result.file_id,
            parent_id=parent_id,
            details={"source": result.source.value, "degraded": result.degraded},
        )
        self._schedule_removal(task)
        await self._notify_hooks(result)

    def _fail(self, task: UploadTask, error: UploadError, batch: Batch) -> None:
        task.error = PerFileError(
            task_id=task.task_id,
            file_name=task.file_name,
            kind=error.kind,
            message=error.message,
        )
        self._set_state(
            task, TaskState.FAILED, EventKind.FAILED, f"{task.file_name}: {error.message}"
        )
        batch.release(1)
        self._remove(task.task_id)

    async def _notify_hooks(self, result: UploadResult) -> None:
        if self.hooks.on_result is not None:
            try:
                await self.hooks.on_result(result)
            except Exception:
                logger.exception("Record hook failed for %s", result.file_id)

        if self.hooks.refresh_quota is not None and result.source is UploadSource.PRIMARY:
            try:
                await self.hooks.refresh_quota()
            except Exception:
                logger.exception("Quota refresh failed")

    def _schedule_removal(self, task: UploadTask) -> None:
        if self.success_grace <= 0:
            self._remove(task.task_id)
            return
        loop = asyncio.get_running_loop()
        self._removals[task.task_id] = loop.call_later(
            self.success_grace, self._remove, task.task_id
        )

    def _remove(self, task_id: str) -> None:
        self._removals.pop(task_id, None)
        task = self._visible.pop(task_id, None)
        if task is not None:
            self._publish(task, EventKind.REMOVED)
