"""Job status and the externally visible status record."""

from enum import StrEnum

from pydantic import Field

from multicut.models.base import WireModel


class JobStatus(StrEnum):
    """Lifecycle of an export job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


ACTIVE_STATUSES = frozenset({JobStatus.PENDING, JobStatus.PROCESSING})


class StatusRecord(WireModel):
    """The single mutable projection of a job, overwritten in place."""

    job_id: str = Field(..., min_length=1)
    status: JobStatus
    progress: float = Field(default=0.0, ge=0, le=1)
    message: str | None = None
    error: str | None = None
    download_url: str | None = None

    @classmethod
    def pending(cls, job_id: str, message: str = "Export job created") -> "StatusRecord":
        return cls(job_id=job_id, status=JobStatus.PENDING, progress=0.0, message=message)

    @property
    def is_terminal(self) -> bool:
        return self.status in (JobStatus.COMPLETED, JobStatus.FAILED)
