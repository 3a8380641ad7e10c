"""Notification Dispatcher - best-effort outbound events (guess scored, round rotated).

Invariants:
    - dispatch() never raises and never blocks the caller on delivery
    - Sink failures are logged with the event kind and dropped
    - Pending deliveries are tracked so drain() can await them on shutdown
"""

import asyncio
import logging

from slopguess.core.domain_types import NotificationEvent
from slopguess.core.repository_protocols import NotificationSink

logger = logging.getLogger(__name__)


async def log_notification(event: NotificationEvent) -> None:
    """Default sink: record the event in the structured log."""
    logger.info(f"Notification {event.kind}", extra={"event": event.kind, **_ids(event)})


def _ids(event: NotificationEvent) -> dict:
    return {k: event.payload[k] for k in ("round_id", "user_id") if k in event.payload}


class NotificationDispatcher:
    def __init__(self, sink: NotificationSink = log_notification):
        self._sink = sink
        self._pending: set[asyncio.Task] = set()

    def dispatch(self, kind: str, **payload) -> None:
        event = NotificationEvent(kind=kind, payload=payload)
        task = asyncio.create_task(self._deliver(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, event: NotificationEvent) -> None:
        try:
            await self._sink(event)
        except Exception as e:
            logger.error(
                f"Notification delivery failed: {e}",
                extra={"event": event.kind, **_ids(event)},
                exc_info=True,
            )

    async def drain(self) -> None:
        if self._pending:
            await asyncio.gather(*list(self._pending))
