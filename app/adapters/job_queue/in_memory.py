"""In-process email job queue backed by a worker thread.

Notes:
- Jobs live in memory only; pending jobs are lost when the process exits.
- One daemon worker per queue processes jobs in FIFO order.
"""

from __future__ import annotations

import itertools
import logging
import queue
import threading
from typing import Callable

from app.adapters.job_queue.base import AbstractJobQueue, EmailJob
from app.core.errors import JobQueueAppError

logger = logging.getLogger(__name__)

_STOP = object()


def send_email(job: EmailJob) -> None:
    """Default processor: emit the email as a log event (no SMTP delivery)."""
    logger.info(
        "email.sending",
        extra={"job_id": job.id, "to": job.to, "subject": job.subject, "text": job.text},
    )


class InMemoryJobQueue(AbstractJobQueue):
    """FIFO job queue processed by a lazily started daemon thread."""

    def __init__(
        self,
        name: str = "email",
        *,
        processor: Callable[[EmailJob], None] = send_email,
        max_size: int = 0,
    ) -> None:
        self.name = name
        self._processor = processor
        self._queue: queue.Queue = queue.Queue(maxsize=max_size)
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._worker: threading.Thread | None = None
        self.processed = 0
        self.failed = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"InMemoryJobQueue(name={self.name!r}, pending={self._queue.qsize()}, "
            f"processed={self.processed}, failed={self.failed})"
        )

    def _ensure_worker(self) -> None:
        with self._lock:
            if self._worker is not None and self._worker.is_alive():
                return
            self._worker = threading.Thread(
                target=self._run,
                name=f"job-queue-{self.name}",
                daemon=True,
            )
            self._worker.start()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._process(item)
            finally:
                self._queue.task_done()

    def _process(self, job: EmailJob) -> None:
        try:
            self._processor(job)
        except Exception as exc:
            self.failed += 1
            logger.error(
                "job.failed",
                extra={
                    "queue": self.name,
                    "job_id": job.id,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            return
        self.processed += 1

    def enqueue(self, to: str, subject: str, text: str) -> EmailJob:
        """Queue an email job and make sure a worker is running.

        Raises:
            JobQueueAppError: If the queue is full.
        """
        job = EmailJob(id=next(self._ids), to=to, subject=subject, text=text)
        try:
            self._queue.put_nowait(job)
        except queue.Full as exc:
            logger.warning(
                "job.rejected",
                extra={"queue": self.name, "reason": "queue_full"},
            )
            raise JobQueueAppError(
                code="queue_full",
                message="Email queue is full. Try again later.",
                details={"context": {"queue": self.name}},
            ) from exc

        self._ensure_worker()
        logger.info("job.enqueued", extra={"queue": self.name, "job_id": job.id})
        return job

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def join(self) -> None:
        """Block until every queued job has been processed."""
        self._queue.join()

    def close(self) -> None:
        """Ask the worker to stop after draining jobs queued so far."""
        # Held until the worker exits so enqueue cannot start a second one
        # that would consume the stop marker.
        with self._lock:
            worker = self._worker
            self._worker = None
            if worker is None or not worker.is_alive():
                return
            self._queue.put(_STOP)
            worker.join()
