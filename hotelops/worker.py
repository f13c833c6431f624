"""Background worker that periodically marks overdue housekeeping requests."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .results import Err
from .store.base import Store

logger = logging.getLogger(__name__)


class OverdueSweepWorker:
    """Calls the store's ``mark_overdue_housekeeping`` procedure on an interval."""

    def __init__(self, store: Store, interval_seconds: float = 3600.0, enabled: bool = True) -> None:
        self.store = store
        self.interval_seconds = interval_seconds
        self.enabled = enabled
        self._task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None

    def start(self) -> None:
        if self._task is not None or not self.enabled:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run_loop(), name="housekeeping-overdue-sweep")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stop_event.set()
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None

    async def sweep_once(self) -> int:
        result = await self.store.rpc("mark_overdue_housekeeping")
        if isinstance(result, Err):
            raise result.error
        return int(result.value or 0)

    async def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                count = await self.sweep_once()
                logger.debug("Overdue sweep marked %d request(s)", count)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Overdue sweep failed")

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass
