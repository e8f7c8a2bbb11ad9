from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import structlog

from portent.schemas.telegram import TelegramUpdate

logger = structlog.get_logger(__name__)

UpdateHandler = Callable[[TelegramUpdate], Awaitable[None]]


class UpdateDispatcher:
    """Runs update handlers on a bounded pool of worker tasks."""

    def __init__(self, max_in_flight: int = 16, queue_size: int = 100):
        if max_in_flight < 1:
            raise ValueError("max_in_flight must be at least 1")
        self.max_in_flight = max_in_flight
        self.queue_size = queue_size
        self.running = False

        self._queue: asyncio.Queue[tuple[UpdateHandler, TelegramUpdate]] | None = None
        self._workers: list[asyncio.Task[None]] = []
        self._processed = 0
        self._failed = 0

    async def start(self) -> None:
        """Spawn the worker tasks."""
        if self.running:
            return
        self._queue = asyncio.Queue(maxsize=self.queue_size)
        self._workers = [
            asyncio.create_task(self._work(index), name=f"update-worker-{index}")
            for index in range(self.max_in_flight)
        ]
        self.running = True
        logger.info(
            "dispatcher_started",
            max_in_flight=self.max_in_flight,
            queue_size=self.queue_size,
        )

    async def submit(self, handler: UpdateHandler, update: TelegramUpdate) -> None:
        """
        Queue one handler invocation.

        Returns as soon as the job is queued; waits only while the queue is full.
        """
        if not self.running or self._queue is None:
            raise RuntimeError("Dispatcher is not running")
        await self._queue.put((handler, update))

    async def stop(self, drain: bool = True) -> None:
        """
        Stop the workers.

        Args:
            drain: Wait for queued jobs to finish before cancelling workers
        """
        if not self.running:
            return
        self.running = False
        if drain and self._queue is not None:
            await self._queue.join()

        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info(
            "dispatcher_stopped",
            processed=self._processed,
            failed=self._failed,
        )

    async def _work(self, index: int) -> None:
        assert self._queue is not None
        while True:
            handler, update = await self._queue.get()
            try:
                await handler(update)
                self._processed += 1
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self._failed += 1
                logger.error(
                    "update_handler_failed",
                    worker=index,
                    update_id=update.update_id,
                    handler=_handler_name(handler),
                    error=str(exc),
                    exc_info=True,
                )
            finally:
                self._queue.task_done()

    def get_stats(self) -> dict:
        """Get dispatcher statistics."""
        return {
            "running": self.running,
            "workers": len(self._workers),
            "queued": self._queue.qsize() if self._queue is not None else 0,
            "processed": self._processed,
            "failed": self._failed,
        }


def _handler_name(handler: UpdateHandler) -> str:
    return getattr(handler, "__qualname__", None) or handler.__class__.__name__
