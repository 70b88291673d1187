"""Poll-and-process scheduler: runs pending export jobs one at a time."""

import logging
import threading

from multicut.config import get_settings
from multicut.models.status import JobStatus, StatusRecord
from multicut.pipeline.export import ExportPipeline
from multicut.storage.job_store import JobStore

logger = logging.getLogger(__name__)


class ExportScheduler:
    """Wakes every ``poll_interval`` seconds and runs pending jobs sequentially.

    At most one job is in flight. Jobs run in the store's listing order, and a
    job that raises is logged and skipped so the rest of the scan continues.
    """

    def __init__(
        self,
        store: JobStore,
        pipeline: ExportPipeline,
        poll_interval: float | None = None,
    ):
        self.store = store
        self.pipeline = pipeline
        self.poll_interval = (
            poll_interval if poll_interval is not None else get_settings().poll_interval_seconds
        )
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def run_once(self) -> list[str]:
        """Process every job that is pending right now. Returns the ids attempted."""
        pending = self.store.list_by_status(JobStatus.PENDING)
        if pending:
            logger.info(f"Found {len(pending)} pending job(s)")

        for job_id in pending:
            self._process_job(job_id)
        return pending

    def _process_job(self, job_id: str) -> None:
        try:
            descriptor = self.store.get_descriptor(job_id)
            if descriptor is None:
                if self.store.exists(job_id):
                    logger.error(f"Job {job_id} has an unreadable descriptor")
                    self.store.put_status(
                        StatusRecord(
                            job_id=job_id,
                            status=JobStatus.FAILED,
                            error="Export config is missing or invalid",
                        )
                    )
                return
            self.pipeline.process_descriptor(descriptor)
        except Exception:
            logger.exception(f"Failed to process job {job_id}")

    def run(self, stop_event: threading.Event | None = None) -> None:
        """Scan until ``stop_event`` is set.

        Failure to prepare the job store propagates: the worker cannot run
        without it.
        """
        stop = stop_event or self._stop
        self.store.ensure_root()
        logger.info(f"Export scheduler started (poll interval {self.poll_interval}s)")

        while not stop.is_set():
            self.run_once()
            stop.wait(self.poll_interval)

        logger.info("Export scheduler stopped")

    def start(self) -> threading.Thread:
        """Run the scheduler in a background thread."""
        if self._thread and self._thread.is_alive():
            return self._thread
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name="export-scheduler", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: float | None = None) -> None:
        """Signal the loop to stop and wait for the current job to finish."""
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
