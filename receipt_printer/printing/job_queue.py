"""
Serialized print job queue.

The printer is a single physical resource with no internal concurrency:
two interleaved print streams corrupt the output. JobQueue is the only
place jobs are executed, and it runs them one at a time, in the exact order
they were enqueued, on a background drain thread.

- enqueue() appends and returns immediately; it never runs the job itself.
- When the queue is idle, enqueue() pops the head, raises the `printing`
  flag and starts a drain thread.
- The drain thread runs jobs until the queue is empty, then clears the flag
  and exits. Jobs enqueued meanwhile are picked up by the same loop.
- A job that raises is logged and dropped; the next job still runs. A job
  that raises SystemExit or similar hands the rest of the queue to a new
  drain thread before its own thread exits.

Nothing is persisted; pending jobs are lost when the process exits.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable
from typing import Any, Deque, Dict, Optional

logger = logging.getLogger(__name__)

PrintJob = Callable[[], Any]


class JobQueue:
    def __init__(self, name: str = "print-queue") -> None:
        self.name = name
        self._jobs: Deque[PrintJob] = deque()
        self._printing = False
        self._cond = threading.Condition(threading.Lock())
        self._drains = 0

    def enqueue(self, job: PrintJob) -> None:
        """
        Append a job to the tail and kick off draining if the printer is idle.
        Never blocks on job execution.
        """
        if not callable(job):
            raise TypeError("job must be callable")
        with self._cond:
            self._jobs.append(job)
            if self._printing:
                logger.info("Job queued behind active print (%d waiting)", len(self._jobs))
                return
            first = self._jobs.popleft()
            self._printing = True
        self._start_drain(first)

    def _start_drain(self, job: PrintJob) -> None:
        with self._cond:
            self._drains += 1
            drain_no = self._drains
        t = threading.Thread(
            target=self._drain,
            args=(job,),
            daemon=True,
            name=f"{self.name}-drain-{drain_no}",
        )
        t.start()

    def _next_job(self) -> Optional[PrintJob]:
        """Pop the next job, or clear the printing flag when none is left. Caller holds the lock."""
        if self._jobs:
            return self._jobs.popleft()
        self._printing = False
        self._cond.notify_all()
        return None

    def _drain(self, job: Optional[PrintJob]) -> None:
        while job is not None:
            with self._cond:
                remaining = len(self._jobs)
            logger.info("Processing job (%d remaining)", remaining)
            try:
                job()
            except Exception as e:
                logger.exception("Queue job error: %s", e)
            except BaseException:
                # This thread is going down; pass the rest of the queue on first
                logger.exception("Queue job aborted its drain thread")
                with self._cond:
                    nxt = self._next_job()
                if nxt is not None:
                    self._start_drain(nxt)
                raise
            with self._cond:
                job = self._next_job()
        logger.debug("Queue drained")

    def status(self) -> Dict[str, Any]:
        """Snapshot of queue depth (excluding the in-flight job) and the printing flag."""
        with self._cond:
            return {"length": len(self._jobs), "printing": self._printing}

    @property
    def printing(self) -> bool:
        with self._cond:
            return self._printing

    def __len__(self) -> int:
        with self._cond:
            return len(self._jobs)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every queued job has finished. Returns False if the
        timeout expired first.
        """
        with self._cond:
            return self._cond.wait_for(lambda: not self._printing and not self._jobs, timeout=timeout)


__all__ = ["JobQueue", "PrintJob"]
