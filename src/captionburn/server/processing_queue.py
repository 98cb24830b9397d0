"""
Admission-controlled job queue using a single-worker ThreadPoolExecutor.

Jobs run one at a time so their events never interleave on the shared
client channel. At most ``max_pending`` jobs wait behind the running one;
further submissions are rejected until the queue drains.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from .job_runner import JobRunner
from .models import Job

logger = logging.getLogger(__name__)


class QueueFullError(RuntimeError):
    """Raised when a job is submitted while the queue is at capacity."""


class ProcessingQueue:
    """Runs jobs sequentially in a background worker thread."""

    def __init__(self, runner: JobRunner, max_pending: int = 1):
        """
        Initialize the processing queue.

        Args:
            runner: JobRunner executing each job
            max_pending: Number of jobs allowed to wait behind the running one
        """
        self.runner = runner
        self.max_pending = max_pending

        self.executor: Optional[ThreadPoolExecutor] = None
        self.is_running = False

        # Admitted jobs in submission order, the first one is running
        self.admitted: List[Job] = []
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return 1 + self.max_pending

    def start(self):
        """Start the processing queue."""
        if self.is_running:
            logger.warning("Processing queue is already running")
            return

        self.executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="job-worker")
        self.is_running = True
        logger.info(f"Processing queue started (capacity {self.capacity})")

    def stop(self, wait: bool = True):
        """Stop accepting jobs and shut the worker down."""
        if not self.is_running:
            return

        logger.info("Stopping processing queue...")
        self.is_running = False
        self.executor.shutdown(wait=wait)
        logger.info("Processing queue stopped")

    def enqueue_job(self, job: Job) -> "Future[Job]":
        """
        Admit a job for processing.

        Args:
            job: Job to run

        Returns:
            Future resolving to the job once it reaches a terminal state

        Raises:
            RuntimeError: If the queue is not running
            QueueFullError: If a job is running and max_pending jobs are waiting
        """
        if not self.is_running:
            raise RuntimeError("Cannot enqueue job: processing queue is not running")

        with self._lock:
            if len(self.admitted) >= self.capacity:
                raise QueueFullError(f"Processing queue is full ({len(self.admitted)} job(s) admitted)")
            self.admitted.append(job)
            future = self.executor.submit(self.runner.run, job)

        future.add_done_callback(lambda f, j=job: self._job_completed(j, f))
        logger.info(f"Job {job.job_id} enqueued")
        return future

    def get_queue_status(self) -> Dict[str, Any]:
        """Get status information about the processing queue."""
        with self._lock:
            admitted = list(self.admitted)

        return {
            "is_running": self.is_running,
            "running_job": admitted[0].job_id if admitted else None,
            "queue_size": max(0, len(admitted) - 1),
            "capacity": self.capacity,
        }

    def _job_completed(self, job: Job, future: Future):
        """Callback called when a job completes."""
        with self._lock:
            self.admitted = [admitted for admitted in self.admitted if admitted is not job]

        if future.cancelled():
            logger.info(f"Job {job.job_id} was cancelled")
        elif future.exception():
            logger.error(f"Job {job.job_id} failed with error: {future.exception()}")
        else:
            logger.info(f"Job {job.job_id} finished: {job.state.value}")
