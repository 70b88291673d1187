"""Durable job persistence: one directory per job holding config and status JSON."""

import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from multicut.config import get_settings
from multicut.models.errors import MulticutError, ValidationError
from multicut.models.job import JobDescriptor
from multicut.models.status import JobStatus, StatusRecord

logger = logging.getLogger(__name__)

DESCRIPTOR_FILE = "config.json"
STATUS_FILE = "status.json"


class JobStore(ABC):
    """Key-value view of export jobs, keyed by job id.

    The scheduler and pipeline only talk to this interface, so the backing
    mechanism can change without touching them.
    """

    @abstractmethod
    def put_descriptor(self, descriptor: JobDescriptor) -> None: ...

    @abstractmethod
    def get_descriptor(self, job_id: str) -> JobDescriptor | None: ...

    @abstractmethod
    def put_status(self, record: StatusRecord) -> None: ...

    @abstractmethod
    def get_status(self, job_id: str) -> StatusRecord | None: ...

    @abstractmethod
    def list_jobs(self) -> list[str]: ...

    @abstractmethod
    def exists(self, job_id: str) -> bool: ...

    @abstractmethod
    def delete(self, job_id: str) -> bool: ...

    @abstractmethod
    def workspace(self, job_id: str) -> Path:
        """Directory for the job's transient artifacts."""

    def ensure_root(self) -> None:
        """Prepare the backing storage. Failures here are fatal to the worker."""

    def list_by_status(self, status: JobStatus) -> list[str]:
        """Job ids whose readable status equals ``status``, in listing order."""
        matched = []
        for job_id in self.list_jobs():
            record = self.get_status(job_id)
            if record is not None and record.status == status:
                matched.append(job_id)
        return matched

    def create(self, descriptor: JobDescriptor) -> StatusRecord:
        """Persist a new job with an initial pending status."""
        self.put_descriptor(descriptor)
        record = StatusRecord.pending(descriptor.id)
        self.put_status(record)
        return record


class FileJobStore(JobStore):
    """Stores each job under ``<root>/<job id>/`` as ``config.json`` + ``status.json``."""

    def __init__(self, root: Path | None = None):
        self.root = Path(root) if root is not None else get_settings().exports_dir

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def job_dir(self, job_id: str) -> Path:
        if not job_id or job_id in (".", "..") or "/" in job_id or "\\" in job_id:
            raise ValidationError(f"Invalid job id: {job_id!r}")
        return self.root / job_id

    def workspace(self, job_id: str) -> Path:
        return self.job_dir(job_id)

    # --- Directory-level operations ---

    def write_descriptor(self, job_dir: Path, descriptor: JobDescriptor) -> Path:
        path = job_dir / DESCRIPTOR_FILE
        _replace_file(path, descriptor.to_json())
        return path

    def read_descriptor(self, job_dir: Path) -> JobDescriptor | None:
        """Load and validate a descriptor; missing or malformed files read as absent."""
        try:
            raw = (job_dir / DESCRIPTOR_FILE).read_text(encoding="utf-8")
            return JobDescriptor.from_json(raw)
        except (OSError, MulticutError) as e:
            logger.debug("Descriptor unreadable in %s: %s", job_dir, e)
            return None

    def write_status(self, job_dir: Path, record: StatusRecord) -> Path:
        path = job_dir / STATUS_FILE
        _replace_file(path, record.to_json())
        return path

    def read_status(self, job_dir: Path) -> StatusRecord | None:
        """Load a status record; missing, partially written or malformed files read as absent."""
        try:
            raw = (job_dir / STATUS_FILE).read_text(encoding="utf-8")
            return StatusRecord.from_json(raw)
        except (OSError, MulticutError) as e:
            logger.debug("Status unreadable in %s: %s", job_dir, e)
            return None

    # --- JobStore interface ---

    def create(self, descriptor: JobDescriptor) -> StatusRecord:
        self.job_dir(descriptor.id).mkdir(parents=True, exist_ok=True)
        return super().create(descriptor)

    def put_descriptor(self, descriptor: JobDescriptor) -> None:
        # Like put_status, never recreates the directory of a cancelled job.
        self.write_descriptor(self.job_dir(descriptor.id), descriptor)

    def get_descriptor(self, job_id: str) -> JobDescriptor | None:
        return self.read_descriptor(self.job_dir(job_id))

    def put_status(self, record: StatusRecord) -> None:
        self.write_status(self.job_dir(record.job_id), record)

    def get_status(self, job_id: str) -> StatusRecord | None:
        return self.read_status(self.job_dir(job_id))

    def list_jobs(self) -> list[str]:
        """Job directory names in directory-listing order."""
        try:
            with os.scandir(self.root) as entries:
                return [entry.name for entry in entries if entry.is_dir()]
        except FileNotFoundError:
            return []

    def exists(self, job_id: str) -> bool:
        return self.job_dir(job_id).is_dir()

    def delete(self, job_id: str) -> bool:
        job_dir = self.job_dir(job_id)
        if not job_dir.is_dir():
            return False
        shutil.rmtree(job_dir, ignore_errors=True)
        logger.info(f"Deleted job directory for {job_id}")
        return True


def _replace_file(path: Path, content: str) -> None:
    """Write ``content`` as a whole-file replacement of ``path``."""
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
