"""Job API operations, independent of the HTTP layer."""

import logging
from pathlib import Path
from typing import Any, NamedTuple

from multicut.config import Settings, get_settings
from multicut.models.errors import (
    ConflictError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)
from multicut.models.job import JobDescriptor
from multicut.models.multicam import MulticamExportRequest
from multicut.models.status import ACTIVE_STATUSES, JobStatus, StatusRecord
from multicut.multicam.compiler import compile_multicam
from multicut.storage.job_store import JobStore

logger = logging.getLogger(__name__)


class Download(NamedTuple):
    path: Path
    media_type: str
    filename: str


class ExportJobService:
    """Create, inspect, cancel and download export jobs.

    Stateless apart from the job store; the worker is never contacted
    directly. It discovers pending jobs on its next scan.
    """

    def __init__(self, store: JobStore, settings: Settings | None = None):
        self.store = store
        self.settings = settings or get_settings()

    def create(self, payload: Any) -> StatusRecord:
        """Validate a submitted descriptor and persist it as a pending job."""
        descriptor = (
            payload if isinstance(payload, JobDescriptor) else JobDescriptor.from_payload(payload)
        )

        for source in descriptor.sources:
            if not self.settings.resolve_media_path(source.file_path).is_file():
                raise PreconditionError(
                    f"Source file not found: {source.file_path}",
                    details={"source_id": source.id, "file_path": source.file_path},
                )

        if self.store.exists(descriptor.id):
            raise ConflictError(f"Export job {descriptor.id} already exists")

        output_path = self._output_path(descriptor)
        self._check_output_free(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        record = self.store.create(descriptor)
        logger.info(f"Created export job {descriptor.id} ({len(descriptor.segments)} segments)")
        return record

    def create_from_multicam(self, payload: Any) -> StatusRecord:
        """Compile a multicam clip and submit the resulting job."""
        request = MulticamExportRequest.from_payload(payload)
        descriptor = compile_multicam(request.clip, request.assets, request.options)
        if descriptor is None:
            raise ValidationError(
                "No export possible: the clip has no switch points with a positive duration",
                details={"clip_id": request.clip.id},
            )
        return self.create(descriptor)

    def status(self, job_id: str) -> StatusRecord:
        record = self.store.get_status(job_id)
        if record is None:
            raise NotFoundError("Export job not found", details={"job_id": job_id})
        return record

    def cancel(self, job_id: str) -> None:
        """Remove the job directory, whatever state the job is in."""
        if not self.store.delete(job_id):
            raise NotFoundError("Export job not found", details={"job_id": job_id})
        logger.info(f"Cancelled export job {job_id}")

    def download(self, job_id: str) -> Download:
        record = self.store.get_status(job_id)
        if record is None:
            raise NotFoundError("Export not found", details={"job_id": job_id})
        if record.status != JobStatus.COMPLETED:
            raise ValidationError(
                "Export not completed yet", details={"job_id": job_id, "status": record.status}
            )

        descriptor = self.store.get_descriptor(job_id)
        if descriptor is None:
            raise NotFoundError("Export config not found", details={"job_id": job_id})

        path = self._output_path(descriptor)
        if not path.is_file():
            raise NotFoundError("Output file not found", details={"job_id": job_id})

        return Download(
            path=path,
            media_type=descriptor.output.media_type,
            filename=descriptor.download_filename,
        )

    def _output_path(self, descriptor: JobDescriptor) -> Path:
        return self.settings.resolve_media_path(descriptor.output.file_path).resolve()

    def _check_output_free(self, output_path: Path) -> None:
        """Reject an output path that an unfinished job will write."""
        for job_id in self.store.list_jobs():
            record = self.store.get_status(job_id)
            if record is None or record.status not in ACTIVE_STATUSES:
                continue
            other = self.store.get_descriptor(job_id)
            if other is not None and self._output_path(other) == output_path:
                raise ConflictError(
                    f"Output path is already used by export job {job_id}",
                    details={"job_id": job_id, "output": str(output_path)},
                )
