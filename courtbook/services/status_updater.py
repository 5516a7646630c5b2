"""
Booking status updater: marks finished bookings as completed.

Runs as a background asyncio task started from the app lifespan. On each
tick it loads bookings whose end has passed but whose stored status is
not terminal, and flips them to ``completed``.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

from courtbook import db
from courtbook.config import STATUS_UPDATER_INTERVAL
from courtbook.services.booking import should_mark_as_completed

logger = logging.getLogger(__name__)


class BookingStatusUpdater:
    def __init__(self, interval: float = STATUS_UPDATER_INTERVAL) -> None:
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    # ── Lifecycle ──────────────────────────────────────────────────────

    async def start(self) -> None:
        logger.info("Status updater started, interval %.0fs", self._interval)
        self._task = asyncio.create_task(self._loop(), name="booking-status-updater")

    async def stop(self) -> None:
        """Cancel the background loop."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Status updater stopped")

    # ── Background loop ───────────────────────────────────────────────

    async def _loop(self) -> None:
        # First sweep runs at startup, then every interval.
        while True:
            try:
                await self.run_once()
            except Exception:
                logger.exception("Status update tick failed, will retry")
            await asyncio.sleep(self._interval)

    async def run_once(self, now: datetime | None = None) -> int:
        """One update cycle. Returns how many bookings were completed."""
        now = now or datetime.now(UTC)
        candidates = await db.list_ended_open_bookings(now)
        ids = [b.id for b in candidates if should_mark_as_completed(b.end, b.status, now)]
        if not ids:
            return 0
        updated = await db.mark_bookings_completed(ids)
        logger.info("Marked %d booking(s) as completed", updated)
        return updated


updater = BookingStatusUpdater()
