"""Progress models for tracking per-file upload state.

Provides the task state machine, lifecycle events and batch summaries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from .upload import PerFileError, Rejection, UploadResult, UploadSource

# Overall progress scale milestones
PROGRESS_START = 0
PROGRESS_SESSION = 10
PROGRESS_TRANSFERRED = 90
PROGRESS_DONE = 100


class TaskState(Enum):
    """States of one file's pipeline."""

    PENDING = "pending"
    NEGOTIATING = "negotiating"
    TRANSFERRING = "transferring"
    CONFIRMING = "confirming"
    RESOLVING = "resolving"
    FALLBACK_UPLOADING = "fallback_uploading"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Check if no further transition is possible."""
        return self in (TaskState.COMPLETE, TaskState.FAILED)


# Allowed transitions; anything else is a programming error
TRANSITIONS: dict[TaskState, frozenset[TaskState]] = {
    TaskState.PENDING: frozenset({TaskState.NEGOTIATING}),
    TaskState.NEGOTIATING: frozenset({TaskState.TRANSFERRING, TaskState.FALLBACK_UPLOADING}),
    TaskState.TRANSFERRING: frozenset({TaskState.CONFIRMING, TaskState.FALLBACK_UPLOADING}),
    TaskState.CONFIRMING: frozenset({TaskState.RESOLVING, TaskState.FAILED}),
    TaskState.RESOLVING: frozenset({TaskState.COMPLETE}),
    TaskState.FALLBACK_UPLOADING: frozenset({TaskState.COMPLETE, TaskState.FAILED}),
    TaskState.COMPLETE: frozenset(),
    TaskState.FAILED: frozenset(),
}


@dataclass
class UploadTask:
    """Orchestrator-owned tracking unit for one admitted file."""

    task_id: str
    file_name: str
    byte_size: int
    mime_type: str
    state: TaskState = TaskState.PENDING
    progress: int = PROGRESS_START
    result: Optional[UploadResult] = None
    error: Optional[PerFileError] = None
    source: Optional[UploadSource] = None

    def transition(self, state: TaskState) -> None:
        """Move to a new state.

        Raises:
            ValueError: If the transition is not part of the state machine.
        """
        if state not in TRANSITIONS[self.state]:
            raise ValueError(f"Invalid transition {self.state.value} -> {state.value}")
        self.state = state

    def advance(self, progress: int) -> bool:
        """Raise progress, never lowering it.

        Returns:
            True if the value changed.
        """
        progress = max(PROGRESS_START, min(PROGRESS_DONE, int(progress)))
        if progress <= self.progress:
            return False
        self.progress = progress
        return True

    @property
    def is_complete(self) -> bool:
        return self.state == TaskState.COMPLETE

    @property
    def has_errors(self) -> bool:
        return self.state == TaskState.FAILED

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "task_id": self.task_id,
            "file": self.file_name,
            "state": self.state.value,
            "progress": self.progress,
        }
        if self.source:
            data["source"] = self.source.value
        if self.result:
            data.update(self.result.to_dict())
        if self.error:
            data["error"] = self.error.message
        return data


class EventKind(Enum):
    """Kinds of events published for a task."""

    STATE = "state"
    PROGRESS = "progress"
    COMPLETE = "complete"
    FAILED = "failed"
    REMOVED = "removed"


@dataclass(frozen=True)
class UploadEvent:
    """Snapshot of a task published on the event stream."""

    task_id: str
    kind: EventKind
    state: TaskState
    progress: int
    file_name: str
    message: str = ""
    result: Optional[UploadResult] = None

    @classmethod
    def from_task(cls, task: UploadTask, kind: EventKind, message: str = "") -> "UploadEvent":
        return cls(
            task_id=task.task_id,
            kind=kind,
            state=task.state,
            progress=task.progress,
            file_name=task.file_name,
            message=message,
            result=task.result,
        )


@dataclass
class BatchResult:
    """Outcome of one ``upload`` call.

    Mixed outcomes are kept apart: ``results`` for files that reached
    Complete, ``errors`` for files that reached Failed, ``rejections`` for
    candidates refused at admission.
    """

    results: List[UploadResult] = field(default_factory=list)
    errors: List[PerFileError] = field(default_factory=list)
    rejections: List[Rejection] = field(default_factory=list)
    tasks: List[UploadTask] = field(default_factory=list)
    truncated: int = 0
    duration: float = 0.0

    @property
    def success(self) -> bool:
        """True when no admitted file failed."""
        return not self.errors

    @property
    def succeeded(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def total(self) -> int:
        return len(self.tasks)

    @property
    def success_rate(self) -> float:
        """Calculate success rate percentage."""
        if self.total == 0:
            return 100.0
        return (self.succeeded / self.total) * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "errors": [e.to_dict() for e in self.errors],
            "rejected": [{"file": r.file_name, "reason": r.reason} for r in self.rejections],
            "truncated": self.truncated,
            "duration": round(self.duration, 3),
        }
