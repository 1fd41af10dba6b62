"""Progress and lifecycle event stream.

Events are keyed by task. A slow consumer sees coalesced progress (only
the latest value per task is kept) while state changes are delivered
once each. Once a task is removed only its REMOVED event stays buffered,
and the buffer is capped at ``max_pending`` entries (oldest dropped).
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from collections.abc import AsyncIterator, Callable

from mediactl.models.progress import EventKind, UploadEvent

logger = logging.getLogger(__name__)

EventListener = Callable[[UploadEvent], None]

DEFAULT_MAX_PENDING = 256


class EventStream:
    """Coalescing, single-consumer event channel."""

    def __init__(self, max_pending: int = DEFAULT_MAX_PENDING) -> None:
        if max_pending < 1:
            raise ValueError(f"max_pending must be >= 1, got {max_pending}")
        self.max_pending = max_pending
        self._pending: OrderedDict[tuple[str, ...], UploadEvent] = OrderedDict()
        self._listeners: list[EventListener] = []
        self._wakeup = asyncio.Event()
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._pending)

    def subscribe(self, listener: EventListener) -> None:
        """Register a synchronous listener called for every event."""
        self._listeners.append(listener)

    @staticmethod
    def _key(event: UploadEvent) -> tuple[str, ...]:
        if event.kind == EventKind.PROGRESS:
            return (event.task_id, event.kind.value)
        return (event.task_id, event.kind.value, event.state.value)

    def _forget(self, task_id: str) -> None:
        for key in [k for k in self._pending if k[0] == task_id]:
            del self._pending[key]

    def publish(self, event: UploadEvent) -> None:
        """Publish an event, replacing any undelivered one with the same key."""
        if self._closed:
            raise RuntimeError("EventStream is closed")

        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Event listener failed for task %s", event.task_id)

        if event.kind == EventKind.REMOVED:
            self._forget(event.task_id)

        key = self._key(event)
        self._pending[key] = event
        self._pending.move_to_end(key)
        while len(self._pending) > self.max_pending:
            self._pending.popitem(last=False)
            self.dropped += 1
        self._wakeup.set()

    def close(self) -> None:
        """Stop accepting events; iteration ends once the buffer is drained."""
        self._closed = True
        self._wakeup.set()

    def drain(self) -> list[UploadEvent]:
        """Remove and return all buffered events."""
        events = list(self._pending.values())
        self._pending.clear()
        return events

    async def __aiter__(self) -> AsyncIterator[UploadEvent]:
        while True:
            while self._pending:
                _, event = self._pending.popitem(last=False)
                yield event
            if self._closed:
                return
            self._wakeup.clear()
            await self._wakeup.wait()
