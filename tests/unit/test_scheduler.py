"""Tests for the polling export scheduler."""

import threading
import time
from unittest.mock import MagicMock

import pytest

from multicut.models.job import JobDescriptor
from multicut.models.status import JobStatus, StatusRecord
from multicut.pipeline.export import ExportPipeline
from multicut.pipeline.scheduler import ExportScheduler
from multicut.storage.job_store import DESCRIPTOR_FILE, FileJobStore
from tests.conftest import make_config


@pytest.fixture
def pipeline(store, fake_executor, settings):
    return ExportPipeline(store, fake_executor, settings.media_base_path)


@pytest.fixture
def scheduler(store, pipeline):
    return ExportScheduler(store, pipeline, poll_interval=0.05)


def _create(store, job_id):
    descriptor = JobDescriptor.from_payload(make_config(job_id=job_id))
    store.create(descriptor)
    return descriptor


class TestRunOnce:
    def test_processes_only_pending(self, scheduler, store, source_files):
        _create(store, "job-a")
        _create(store, "job-b")
        store.put_status(StatusRecord(job_id="job-b", status=JobStatus.COMPLETED, progress=1.0))

        attempted = scheduler.run_once()

        assert attempted == ["job-a"]
        assert store.get_status("job-a").status == JobStatus.COMPLETED

    def test_processes_in_listing_order(self, store, source_files):
        for job_id in ("job-1", "job-2", "job-3"):
            _create(store, job_id)
        pipeline = MagicMock()
        scheduler = ExportScheduler(store, pipeline, poll_interval=0.05)

        attempted = scheduler.run_once()

        processed = [c.args[0].id for c in pipeline.process_descriptor.call_args_list]
        assert processed == attempted
        assert attempted == [j for j in store.list_jobs() if j.startswith("job-")]

    def test_exception_does_not_stop_scan(self, store, source_files):
        for job_id in ("job-1", "job-2"):
            _create(store, job_id)
        pipeline = MagicMock()
        pipeline.process_descriptor.side_effect = [RuntimeError("boom"), None]
        scheduler = ExportScheduler(store, pipeline, poll_interval=0.05)

        scheduler.run_once()

        assert pipeline.process_descriptor.call_count == 2

    def test_invalid_descriptor_marked_failed(self, scheduler, store, fake_executor):
        _create(store, "job-bad")
        (store.job_dir("job-bad") / DESCRIPTOR_FILE).write_text("{broken")

        scheduler.run_once()

        record = store.get_status("job-bad")
        assert record.status == JobStatus.FAILED
        assert record.error == "Export config is missing or invalid"
        assert fake_executor.calls == []

    def test_cancelled_job_never_processed(self, scheduler, store, fake_executor, source_files):
        _create(store, "job-gone")
        store.delete("job-gone")

        assert scheduler.run_once() == []
        assert fake_executor.calls == []

    def test_terminal_jobs_left_alone(self, scheduler, store, fake_executor, source_files):
        _create(store, "job-failed")
        store.put_status(StatusRecord(job_id="job-failed", status=JobStatus.FAILED, error="x"))

        scheduler.run_once()
        scheduler.run_once()

        assert fake_executor.calls == []
        assert store.get_status("job-failed").status == JobStatus.FAILED


class TestRunLoop:
    def test_stops_on_event(self, scheduler, store, source_files):
        _create(store, "job-loop")
        stop = threading.Event()
        thread = threading.Thread(target=scheduler.run, args=(stop,))
        thread.start()

        deadline = time.monotonic() + 5
        while time.monotonic() < deadline:
            record = store.get_status("job-loop")
            if record and record.status == JobStatus.COMPLETED:
                break
            time.sleep(0.02)

        stop.set()
        thread.join(timeout=5)
        assert not thread.is_alive()
        assert store.get_status("job-loop").status == JobStatus.COMPLETED

    def test_start_and_stop(self, scheduler):
        scheduler.start()
        assert scheduler.is_running
        scheduler.stop(timeout=5)
        assert not scheduler.is_running

    def test_start_is_idempotent(self, scheduler):
        first = scheduler.start()
        assert scheduler.start() is first
        scheduler.stop(timeout=5)

    def test_unusable_root_propagates(self, tmp_path, pipeline):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        scheduler = ExportScheduler(FileJobStore(blocker / "exports"), pipeline, poll_interval=0.05)
        with pytest.raises(OSError):
            scheduler.run(threading.Event())
