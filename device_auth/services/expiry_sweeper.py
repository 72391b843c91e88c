"""
Background reclamation of expired device codes.

The sweep is best effort: lookups already treat expired records as absent,
so a failed or late sweep only delays freeing memory.
"""

import asyncio
import logging

from .code_store import DeviceCodeStore

logger = logging.getLogger(__name__)


class ExpirySweeper:
    def __init__(self, store: DeviceCodeStore, interval_seconds: float):
        self.store = store
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sweep_once(self) -> int:
        try:
            return self.store.delete_expired()
        except Exception as e:
            logger.error(f"Expired device code sweep failed: {e}", exc_info=True)
            return 0

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            # Store backends are synchronous; keep the event loop free
            await asyncio.to_thread(self.sweep_once)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info(f"Started expired device code sweeper (interval: {self.interval_seconds}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Stopped expired device code sweeper")
