"""
Analytics collaborator.

Lifecycle events are fire-and-forget: emit() only appends to a bounded
in-memory buffer and never raises. The buffer is written to the `events`
table when it reaches the batch size, on a periodic timer, or when the owner
calls flush() (e.g. on a page-lifecycle event / shutdown).
"""

import asyncio
import logging
from collections import deque
from datetime import datetime, timezone
from typing import Any, Protocol

from artwalls.db.adapter import DatabaseAdapter

logger = logging.getLogger(__name__)


class AnalyticsSink(Protocol):
    def emit(self, event_name: str, actor_id: str, properties: dict[str, Any] | None = None) -> None:
        ...


class NullAnalyticsSink:
    """Sink used when analytics is disabled."""

    def emit(self, event_name: str, actor_id: str, properties: dict[str, Any] | None = None) -> None:
        return None


class BufferedAnalyticsSink:
    """
    Batched analytics writer.

    The buffer holds at most `buffer_limit` events; when full the oldest event
    is dropped. A failed flush puts its rows back at the front of the buffer.
    """

    def __init__(
        self,
        db: DatabaseAdapter,
        *,
        batch_size: int = 20,
        flush_interval: float = 5.0,
        buffer_limit: int = 500,
        table: str = "events",
    ):
        self._db = db
        self._table = table
        self.batch_size = max(1, batch_size)
        self.flush_interval = flush_interval
        self._buffer: deque[dict[str, Any]] = deque(maxlen=max(1, buffer_limit))
        self._flush_task: asyncio.Task | None = None
        self._timer_task: asyncio.Task | None = None

    @property
    def pending(self) -> int:
        return len(self._buffer)

    def emit(self, event_name: str, actor_id: str, properties: dict[str, Any] | None = None) -> None:
        try:
            if len(self._buffer) == self._buffer.maxlen:
                logger.warning("Analytics buffer full, dropping oldest event")
            self._buffer.append({
                "event_type": event_name,
                "user_id": actor_id,
                "metadata": dict(properties or {}),
                "created_at": datetime.now(timezone.utc).isoformat(),
            })
            if len(self._buffer) >= self.batch_size:
                self._schedule_flush()
        except Exception as e:
            logger.warning(f"Failed to record analytics event {event_name}: {e}")

    def _schedule_flush(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: the next timer tick or explicit flush() picks it up
            return
        if self._flush_task is None or self._flush_task.done():
            self._flush_task = loop.create_task(self.flush())

    async def flush(self) -> int:
        """Write buffered events. Returns the number written; never raises."""
        if not self._buffer:
            return 0

        rows = list(self._buffer)
        self._buffer.clear()

        try:
            self._db.table(self._table).insert(rows).execute()
        except Exception as e:
            logger.warning(f"Analytics flush failed for {len(rows)} events: {e}")
            self._buffer.extendleft(reversed(rows))
            return 0

        logger.debug(f"Flushed {len(rows)} analytics events")
        return len(rows)

    def start(self) -> None:
        """Start the periodic flush timer on the running loop."""
        if self._timer_task is None or self._timer_task.done():
            self._timer_task = asyncio.get_running_loop().create_task(self._run_timer())

    async def _run_timer(self) -> None:
        while True:
            await asyncio.sleep(self.flush_interval)
            await self.flush()

    async def close(self) -> None:
        """Stop the timer and flush whatever is left."""
        if self._timer_task is not None:
            self._timer_task.cancel()
            try:
                await self._timer_task
            except asyncio.CancelledError:
                pass
            self._timer_task = None
        if self._flush_task is not None and not self._flush_task.done():
            await self._flush_task
        await self.flush()


def build_analytics_sink(db: DatabaseAdapter | None = None) -> AnalyticsSink:
    """Sink configured from settings (NullAnalyticsSink when disabled)."""
    from artwalls.config import settings

    if not settings.analytics_enabled:
        return NullAnalyticsSink()

    if db is None:
        from artwalls.db.client import get_service_client

        db = get_service_client()

    return BufferedAnalyticsSink(
        db,
        batch_size=settings.analytics_batch_size,
        flush_interval=settings.analytics_flush_interval_seconds,
        buffer_limit=settings.analytics_buffer_limit,
    )
