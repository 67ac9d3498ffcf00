"""
Periodic TTL sweep for the cache engine.

Runs on the event loop, so it shares the single-writer path with get/put.
A sweep is synchronous and never yields to the loop, so two sweeps cannot
overlap: the next one only starts after the previous one has returned.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from core.cache import CacheEngine

logger = logging.getLogger(__name__)


class CacheSweeper:
    def __init__(self, engine: CacheEngine, *, interval_seconds: float) -> None:
        self._engine = engine
        self._interval = float(interval_seconds)
        self._task: Optional[asyncio.Task] = None

    @property
    def started(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.started:
            return
        self._task = asyncio.create_task(self._loop(), name="cache-sweeper")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def run_once(self) -> int:
        """Expire idle entries now. Returns how many were removed."""
        return self._engine.expire_older_than()

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.run_once()
            except Exception:
                logger.warning("cache.sweep_failed", exc_info=True)
