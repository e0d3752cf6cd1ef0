"""Bounded-concurrency batch upload scheduler."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from vfm.errors import UploadRejectedError
from vfm.interfaces import UploadBackend
from vfm.models.upload import UploadResult, UploadTask

logger = logging.getLogger(__name__)

DEFAULT_DELAY_S = 0.5


async def run_batch(
    tasks: Sequence[UploadTask],
    backend: UploadBackend,
    *,
    workers: int,
    delay_s: float = DEFAULT_DELAY_S,
) -> list[UploadResult]:
    """Upload every task with at most `workers` uploads in flight.

    Returns one result per task in completion order, which is not task
    order. One task's failure never stops the others. The per-worker
    `delay_s` pause after each upload spaces out requests to stay under
    remote rate limits.

    Raises:
        ValueError: If `workers` < 1
    """
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")
    if not tasks:
        return []

    queue: asyncio.Queue[UploadTask] = asyncio.Queue(maxsize=len(tasks))
    results: list[UploadResult] = []
    results_lock = asyncio.Lock()

    # Producer: the queue holds every task, so this never blocks. An empty
    # queue afterwards means no more work.
    for task in tasks:
        queue.put_nowait(task)

    logger.info("Starting batch: %d files, %d workers", len(tasks), workers)
    await asyncio.gather(
        *(
            _worker(worker_id, queue, backend, results, results_lock, delay_s)
            for worker_id in range(1, workers + 1)
        )
    )
    return results


async def _worker(
    worker_id: int,
    queue: asyncio.Queue[UploadTask],
    backend: UploadBackend,
    results: list[UploadResult],
    results_lock: asyncio.Lock,
    delay_s: float,
) -> None:
    log_extra = {"worker_id": worker_id}
    while True:
        try:
            task = queue.get_nowait()
        except asyncio.QueueEmpty:
            return

        logger.info("Uploading: %s", task.name, extra=log_extra)
        result = await _upload_one(backend, task)
        if result.success:
            logger.info("Success: %s", result.url, extra=log_extra)
        else:
            logger.warning("Failed: %s: %s", task.name, result.error_text, extra=log_extra)

        async with results_lock:
            results.append(result)
        queue.task_done()

        if delay_s > 0:
            await asyncio.sleep(delay_s)


async def _upload_one(backend: UploadBackend, task: UploadTask) -> UploadResult:
    try:
        return await backend.upload(task)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        # Backends return failures as values; anything escaping is a bug in
        # the backend, and it still must not take down sibling workers.
        logger.exception("Backend %s raised for %s", getattr(backend, "name", "?"), task.name)
        error = UploadRejectedError(f"unexpected error: {exc}", cause=exc)
        return UploadResult.failed(task.name, error)
