"""Tests for the file-backed job store."""

import pytest

from multicut.models.errors import ValidationError
from multicut.models.status import JobStatus, StatusRecord
from multicut.storage.job_store import DESCRIPTOR_FILE, STATUS_FILE, FileJobStore


class TestFileJobStore:
    def test_create_writes_descriptor_and_pending_status(self, store, descriptor):
        record = store.create(descriptor)
        job_dir = store.job_dir(descriptor.id)
        assert (job_dir / DESCRIPTOR_FILE).is_file()
        assert (job_dir / STATUS_FILE).is_file()
        assert record.status == JobStatus.PENDING
        assert store.get_status(descriptor.id) == record

    def test_descriptor_roundtrip_is_byte_identical(self, store, descriptor):
        store.create(descriptor)
        first = (store.job_dir(descriptor.id) / DESCRIPTOR_FILE).read_text()
        reloaded = store.get_descriptor(descriptor.id)
        assert reloaded == descriptor
        store.put_descriptor(reloaded)
        assert (store.job_dir(descriptor.id) / DESCRIPTOR_FILE).read_text() == first

    def test_read_status_missing(self, store, tmp_path):
        assert store.read_status(tmp_path / "nowhere") is None
        assert store.get_status("unknown-job") is None

    def test_read_status_malformed(self, store, descriptor):
        store.create(descriptor)
        (store.job_dir(descriptor.id) / STATUS_FILE).write_text('{"jobId": "x", "sta')
        assert store.get_status(descriptor.id) is None

    def test_read_status_invalid_shape(self, store, descriptor):
        store.create(descriptor)
        (store.job_dir(descriptor.id) / STATUS_FILE).write_text('{"jobId": "x", "status": "??"}')
        assert store.get_status(descriptor.id) is None

    def test_read_descriptor_malformed(self, store, descriptor):
        store.create(descriptor)
        (store.job_dir(descriptor.id) / DESCRIPTOR_FILE).write_text("not json")
        assert store.get_descriptor(descriptor.id) is None

    def test_write_status_replaces_whole_file(self, store, descriptor):
        store.create(descriptor)
        long = StatusRecord(
            job_id=descriptor.id, status=JobStatus.PROCESSING, message="x" * 500, progress=0.5
        )
        short = StatusRecord(job_id=descriptor.id, status=JobStatus.FAILED, error="e")
        store.put_status(long)
        store.put_status(short)
        assert store.get_status(descriptor.id) == short
        leftovers = [p for p in store.job_dir(descriptor.id).iterdir() if p.suffix == ".tmp"]
        assert leftovers == []

    def test_put_status_after_delete_fails(self, store, descriptor):
        store.create(descriptor)
        store.delete(descriptor.id)
        with pytest.raises(OSError):
            store.put_status(StatusRecord.pending(descriptor.id))
        assert not store.job_dir(descriptor.id).exists()

    def test_list_by_status(self, store, descriptor):
        store.create(descriptor)
        other = descriptor.model_copy(update={"id": "export-test-2"})
        store.create(other)
        store.put_status(StatusRecord(job_id=other.id, status=JobStatus.COMPLETED, progress=1.0))
        (store.root / "stray-dir").mkdir()
        (store.root / "stray-file.txt").write_text("x")

        assert store.list_by_status(JobStatus.PENDING) == [descriptor.id]
        assert store.list_by_status(JobStatus.COMPLETED) == [other.id]
        assert "stray-dir" in store.list_jobs()
        assert "stray-file.txt" not in store.list_jobs()

    def test_list_jobs_missing_root(self, tmp_path):
        assert FileJobStore(tmp_path / "absent").list_jobs() == []

    def test_delete(self, store, descriptor):
        store.create(descriptor)
        assert store.exists(descriptor.id)
        assert store.delete(descriptor.id) is True
        assert not store.exists(descriptor.id)
        assert store.delete(descriptor.id) is False

    @pytest.mark.parametrize("job_id", ["..", ".", "a/b", ""])
    def test_rejects_unsafe_job_ids(self, store, job_id):
        with pytest.raises(ValidationError):
            store.job_dir(job_id)

    def test_ensure_root(self, tmp_path):
        s = FileJobStore(tmp_path / "a" / "b")
        s.ensure_root()
        assert (tmp_path / "a" / "b").is_dir()

    def test_ensure_root_failure_propagates(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(OSError):
            FileJobStore(blocker / "exports").ensure_root()
